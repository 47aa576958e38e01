import logging
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from quotefeed.app.entitlements import StoreClient
from quotefeed.app.favorites import FavoritesStore
from quotefeed.app.notifications import NotificationPreferences
from quotefeed.app.routes.favorites import router as favorites_router
from quotefeed.app.routes.monetization import router as monetization_router
from quotefeed.app.routes.user_preferences import (
    router as notification_preferences_router,
)
from quotefeed.app.services.monetization import create_monetization_services
from quotefeed.app.storage import (
    InMemoryKeyValueStore,
    KeyValueStore,
    PostgresKeyValueStore,
    connection_factory,
)
from quotefeed.config import AppConfig, load_app_config

logger = logging.getLogger("quotefeed")


def _create_storage(config: AppConfig) -> KeyValueStore:
    if config.uses_postgres:
        return PostgresKeyValueStore(connect=connection_factory(config.db_config))
    return InMemoryKeyValueStore()


def create_app(
    config: Optional[AppConfig] = None,
    *,
    store_client: Optional[StoreClient] = None,
    storage: Optional[KeyValueStore] = None,
) -> FastAPI:
    """Build the API with one shared set of monetization and preference services."""

    app_config = config or load_app_config()
    logging.basicConfig(level=app_config.log_level)

    app = FastAPI(title=app_config.app_name)
    app.state.config = app_config
    app.state.storage = storage if storage is not None else _create_storage(app_config)
    app.state.monetization = create_monetization_services(
        store_client,
        product_fetch_timeout=app_config.product_fetch_timeout,
    )
    app.state.favorites = None
    app.state.notification_preferences = None

    if app_config.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(app_config.cors_origins),
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.include_router(monetization_router)
    app.include_router(favorites_router)
    app.include_router(notification_preferences_router)

    @app.on_event("startup")
    async def setup_state() -> None:
        kv_store = app.state.storage
        if isinstance(kv_store, PostgresKeyValueStore):
            kv_store.ensure_schema()
        app.state.favorites = FavoritesStore(kv_store)
        app.state.notification_preferences = NotificationPreferences(kv_store)
        await app.state.monetization.start()
        logger.info("Loaded %s favorites", len(app.state.favorites))

    @app.on_event("shutdown")
    async def teardown_state() -> None:
        await app.state.monetization.shutdown()

    @app.get("/api/health")
    def read_health() -> dict:
        store = app.state.monetization.store
        return {
            "status": "ok",
            "entitlements": store.state.value,
            "listening": store.is_listening,
        }

    return app


load_dotenv()

app = create_app()
