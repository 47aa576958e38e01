from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from quotefeed.app.entitlements import MONTHLY_PRODUCT_ID, YEARLY_PRODUCT_ID
from quotefeed.app.favorites import FAVORITES_KEY
from quotefeed.app.services.monetization import LocalSandboxStoreClient
from quotefeed.app.storage import InMemoryKeyValueStore
from quotefeed.config import load_app_config
from quotefeed.main import create_app


@pytest.fixture
def sandbox() -> LocalSandboxStoreClient:
    return LocalSandboxStoreClient()


@pytest.fixture
def storage() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def api(sandbox, storage):
    app = create_app(load_app_config({}), store_client=sandbox, storage=storage)
    with TestClient(app) as test_client:
        yield test_client


def test_health_reports_listener(api):
    response = api.get("/api/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "entitlements": "listening", "listening": True}


def test_products_are_loaded_on_startup(api):
    response = api.get("/api/subscriptions/products")

    assert response.status_code == 200
    body = response.json()
    assert [product["id"] for product in body["products"]] == [YEARLY_PRODUCT_ID, MONTHLY_PRODUCT_ID]
    assert body["products"][0]["displayPrice"] == "$39.99"
    assert body["products"][0]["displayName"] == "Yearly Premium"
    assert body["lastError"] is None


def test_purchase_flow_turns_ads_off(api):
    assert api.get("/api/ads/status").json()["showAds"] is True

    response = api.post(f"/api/subscriptions/{MONTHLY_PRODUCT_ID}/purchase")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "purchased"
    assert body["productId"] == MONTHLY_PRODUCT_ID
    assert body["showAds"] is False
    assert body["transaction"]["productId"] == MONTHLY_PRODUCT_ID
    assert body["transaction"]["transactionId"].startswith("txn_")
    assert api.get("/api/ads/status").json()["statusText"] == "Premium User - Ads Disabled"
    assert api.get("/api/subscriptions/owned").json()["productIds"] == [MONTHLY_PRODUCT_ID]


def test_unknown_product_purchase_is_404(api):
    response = api.post("/api/subscriptions/com.example.unknown/purchase")

    assert response.status_code == 404


def test_favorites_are_persisted_in_storage(api, storage):
    quote = {
        "id": "stay-hungry",
        "title": "Stay Hungry",
        "description": "Stay hungry, stay foolish.",
        "author": "Steve Jobs",
    }

    created = api.post("/api/favorites", json=quote)
    assert created.status_code == 201
    assert created.json()["count"] == 1
    assert storage.get(FAVORITES_KEY) is not None

    toggled = api.post("/api/favorites/toggle", json=quote)
    assert toggled.json() == {"quoteId": "stay-hungry", "isFavorite": False}
    assert storage.get(FAVORITES_KEY) is None

    assert api.delete("/api/favorites/stay-hungry").status_code == 404


def test_notification_preferences_round_trip(api):
    initial = api.get("/api/users/me/notification_prefs")
    assert initial.status_code == 200
    assert initial.json()["hasUserMadeChoice"] is False

    updated = api.put(
        "/api/users/me/notification_prefs",
        json={"enabled": True, "authorized": True},
    )
    body = updated.json()
    assert body["enabled"] is True
    assert body["shouldSchedule"] is True
    assert body["nextTriggerAt"] is not None
