"""PostgreSQL backed key-value store."""
from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Callable, Iterable, Mapping, Optional

import psycopg2
from psycopg2.extensions import connection as PgConnection
from psycopg2.extensions import cursor as PgCursor


CREATE_TABLE_SQL = """
    CREATE TABLE IF NOT EXISTS app_key_values (
        key TEXT PRIMARY KEY,
        value BYTEA NOT NULL,
        updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
    )
"""


def connection_factory(db_config: Mapping[str, Any]) -> Callable[[], PgConnection]:
    """Return a callable opening new connections with ``db_config``."""

    params = dict(db_config)

    def _connect() -> PgConnection:
        return psycopg2.connect(**params)

    return _connect


@contextmanager
def managed_connection(
    conn: Optional[PgConnection] = None,
    *,
    connect: Optional[Callable[[], PgConnection]] = None,
):
    """Context manager that manages transaction boundaries for optional connections."""

    if conn is not None:
        yield conn, False
        return

    if connect is None:
        raise RuntimeError("Either a connection or a connection factory is required")

    connection = connect()
    try:
        yield connection, True
        connection.commit()
    except Exception:
        connection.rollback()
        raise
    finally:
        connection.close()


class PostgresKeyValueStore:
    """Concrete store persisting raw bytes in the ``app_key_values`` table."""

    def __init__(
        self,
        *,
        conn: Optional[PgConnection] = None,
        connect: Optional[Callable[[], PgConnection]] = None,
    ) -> None:
        self._conn = conn
        self._connect = connect

    @contextmanager
    def _cursor(self) -> Iterable[PgCursor]:
        with managed_connection(self._conn, connect=self._connect) as (connection, _):
            cursor = connection.cursor()
            try:
                yield cursor
            finally:
                cursor.close()

    def ensure_schema(self) -> None:
        with self._cursor() as cursor:
            cursor.execute(CREATE_TABLE_SQL)

    def get(self, key: str) -> Optional[bytes]:
        with self._cursor() as cursor:
            cursor.execute(
                """
                SELECT value
                FROM app_key_values
                WHERE key = %s
                LIMIT 1
                """,
                (key,),
            )
            row = cursor.fetchone()
            if not row:
                return None
            return bytes(row[0])

    def set(self, key: str, value: bytes) -> None:
        with self._cursor() as cursor:
            cursor.execute(
                """
                INSERT INTO app_key_values (key, value)
                VALUES (%(key)s, %(value)s)
                ON CONFLICT (key) DO UPDATE SET
                    value = EXCLUDED.value,
                    updated_at = NOW()
                """,
                {"key": key, "value": psycopg2.Binary(value)},
            )

    def remove(self, key: str) -> None:
        with self._cursor() as cursor:
            cursor.execute("DELETE FROM app_key_values WHERE key = %s", (key,))
