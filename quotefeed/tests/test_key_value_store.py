from __future__ import annotations

import pytest

from quotefeed.app.storage import InMemoryKeyValueStore, PostgresKeyValueStore, managed_connection


class FakeCursor:
    def __init__(self, connection: "FakeConnection") -> None:
        self.connection = connection
        self.closed = False

    def execute(self, sql, params=None):
        if self.connection.fail_on_execute:
            raise RuntimeError("boom")
        self.connection.executed.append((" ".join(sql.split()), params))
        if sql.lstrip().upper().startswith("SELECT"):
            key = params[0]
            value = self.connection.rows.get(key)
            self.connection.pending = None if value is None else (memoryview(value),)

    def fetchone(self):
        return self.connection.pending

    def close(self):
        self.closed = True


class FakeConnection:
    def __init__(self, rows=None, fail_on_execute: bool = False) -> None:
        self.rows = dict(rows or {})
        self.fail_on_execute = fail_on_execute
        self.executed = []
        self.pending = None
        self.commits = 0
        self.rollbacks = 0
        self.closed = False
        self.cursors = []

    def cursor(self):
        cursor = FakeCursor(self)
        self.cursors.append(cursor)
        return cursor

    def commit(self):
        self.commits += 1

    def rollback(self):
        self.rollbacks += 1

    def close(self):
        self.closed = True


def test_in_memory_store_round_trips_bytes():
    store = InMemoryKeyValueStore()

    assert store.get("FavoriteQuotes") is None
    store.set("FavoriteQuotes", bytearray(b"[]"))
    assert store.get("FavoriteQuotes") == b"[]"
    assert isinstance(store.get("FavoriteQuotes"), bytes)

    store.remove("FavoriteQuotes")
    store.remove("FavoriteQuotes")
    assert store.keys() == []


def test_in_memory_store_is_seeded_from_copy():
    seed = {"notificationsEnabled": b"1"}
    store = InMemoryKeyValueStore(seed)
    store.clear()

    assert seed == {"notificationsEnabled": b"1"}
    assert store.get("notificationsEnabled") is None


def test_managed_connection_requires_a_source():
    with pytest.raises(RuntimeError):
        with managed_connection():
            pass


def test_managed_connection_leaves_borrowed_connections_open():
    connection = FakeConnection()

    with managed_connection(connection) as (conn, managed):
        assert conn is connection
        assert managed is False

    assert connection.commits == 0
    assert connection.closed is False


def test_postgres_store_commits_and_closes_owned_connections():
    connection = FakeConnection()
    store = PostgresKeyValueStore(connect=lambda: connection)

    store.set("FavoriteQuotes", b"[]")

    sql, params = connection.executed[0]
    assert sql.startswith("INSERT INTO app_key_values")
    assert "ON CONFLICT (key) DO UPDATE" in sql
    assert params["key"] == "FavoriteQuotes"
    assert connection.commits == 1
    assert connection.closed is True
    assert all(cursor.closed for cursor in connection.cursors)


def test_postgres_store_get_returns_bytes_or_none():
    connection = FakeConnection(rows={"notificationsEnabled": b"0"})
    store = PostgresKeyValueStore(conn=connection)

    assert store.get("notificationsEnabled") == b"0"
    assert store.get("missing") is None
    assert connection.closed is False


def test_postgres_store_remove_and_schema():
    connection = FakeConnection()
    store = PostgresKeyValueStore(conn=connection)

    store.ensure_schema()
    store.remove("FavoriteQuotes")

    assert "CREATE TABLE IF NOT EXISTS app_key_values" in connection.executed[0][0]
    assert connection.executed[1] == ("DELETE FROM app_key_values WHERE key = %s", ("FavoriteQuotes",))


def test_postgres_store_rolls_back_on_failure():
    connection = FakeConnection(fail_on_execute=True)
    store = PostgresKeyValueStore(connect=lambda: connection)

    with pytest.raises(RuntimeError):
        store.remove("FavoriteQuotes")

    assert connection.rollbacks == 1
    assert connection.commits == 0
    assert connection.closed is True
