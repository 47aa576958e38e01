from __future__ import annotations

import pytest
from fastapi import HTTPException

from quotefeed.app.entitlements import (
    MONTHLY_PRODUCT_ID,
    YEARLY_PRODUCT_ID,
    PurchaseOutcomeStatus,
    PurchaseStatus,
    VerificationStatus,
)
from quotefeed.app.favorites import FavoritesStore, Quote
from quotefeed.app.notifications import DAILY_MESSAGES, NotificationPreferences
from quotefeed.app.routes.favorites import add_favorite, delete_favorite, list_favorites, toggle_favorite
from quotefeed.app.routes.monetization import (
    list_products,
    purchase_product,
    read_ad_status,
    read_owned_products,
    refresh_products,
    restore_purchases,
)
from quotefeed.app.routes.user_preferences import (
    get_notification_preferences_route,
    update_notification_preferences,
)
from quotefeed.app.schemas.notifications import NotificationPreferencesUpdate
from quotefeed.app.services.monetization import LocalSandboxStoreClient, create_monetization_services
from quotefeed.app.storage import InMemoryKeyValueStore


@pytest.fixture
def client() -> LocalSandboxStoreClient:
    return LocalSandboxStoreClient()


@pytest.fixture
def services(client):
    return create_monetization_services(client)


@pytest.fixture
def quote() -> Quote:
    return Quote(
        id="karma-yoga",
        title="Action",
        description="You have a right to perform your prescribed duties.",
        author="Bhagavad Gita 2.47",
    )


def test_ad_status_for_free_user(services):
    response = read_ad_status(services=services)

    assert response.show_ads is True
    assert response.premium is False
    assert response.model_dump(by_alias=True)["statusText"] == "Free User - Ads Enabled"


@pytest.mark.asyncio
async def test_refresh_then_list_products(services):
    assert list_products(services=services).products == []

    refreshed = await refresh_products(services=services)

    assert [product.id for product in refreshed.products] == [YEARLY_PRODUCT_ID, MONTHLY_PRODUCT_ID]
    assert list_products(services=services).products == refreshed.products


@pytest.mark.asyncio
async def test_refresh_reports_store_error(client, services):
    client.available = False

    response = await refresh_products(services=services)

    assert response.products == []
    assert response.model_dump(by_alias=True)["lastError"]


@pytest.mark.asyncio
async def test_purchase_unlocks_premium(services):
    await refresh_products(services=services)

    response = await purchase_product(YEARLY_PRODUCT_ID, services=services)

    assert response.status == PurchaseOutcomeStatus.PURCHASED
    assert response.transaction.product_id == YEARLY_PRODUCT_ID
    assert set(response.model_dump(by_alias=True)["transaction"]) == {
        "transactionId",
        "productId",
        "productType",
        "purchasedAt",
    }
    assert response.show_ads is False
    assert read_ad_status(services=services).premium is True
    assert read_owned_products(services=services).product_ids == [YEARLY_PRODUCT_ID]


@pytest.mark.asyncio
async def test_purchase_of_unknown_product_is_404(services):
    with pytest.raises(HTTPException) as exc:
        await purchase_product("com.example.unknown", services=services)

    assert exc.value.status_code == 404


@pytest.mark.asyncio
async def test_purchase_of_unpriced_sku_refetches_catalog(client, services):
    client.available = False
    await refresh_products(services=services)
    client.available = True

    response = await purchase_product(MONTHLY_PRODUCT_ID, services=services)

    assert response.status == PurchaseOutcomeStatus.PURCHASED
    assert client.list_calls == 1
    assert read_owned_products(services=services).product_ids == [MONTHLY_PRODUCT_ID]


@pytest.mark.asyncio
async def test_purchase_of_unpriced_sku_while_store_offline(client, services):
    client.available = False
    await refresh_products(services=services)

    response = await purchase_product(MONTHLY_PRODUCT_ID, services=services)

    assert response.status == PurchaseOutcomeStatus.STORE_UNAVAILABLE
    assert response.transaction is None
    assert response.show_ads is True
    assert client.buy_calls == []


@pytest.mark.asyncio
async def test_unverified_purchase_is_422(client, services):
    await refresh_products(services=services)
    client.queue_purchase_result(PurchaseStatus.SUCCESS, verification=VerificationStatus.UNVERIFIED)

    with pytest.raises(HTTPException) as exc:
        await purchase_product(MONTHLY_PRODUCT_ID, services=services)

    assert exc.value.status_code == 422
    assert read_ad_status(services=services).show_ads is True


@pytest.mark.asyncio
async def test_cancelled_purchase_reports_status(client, services):
    await refresh_products(services=services)
    client.queue_purchase_result(PurchaseStatus.USER_CANCELLED)

    response = await purchase_product(MONTHLY_PRODUCT_ID, services=services)

    assert response.status == PurchaseOutcomeStatus.USER_CANCELLED
    assert response.transaction is None
    assert response.show_ads is True


@pytest.mark.asyncio
async def test_restore_purchases_reconciles(client, services):
    client.grant(MONTHLY_PRODUCT_ID, notify=False)

    response = await restore_purchases(services=services)

    assert response.product_ids == [MONTHLY_PRODUCT_ID]
    assert response.last_reconciled_at is not None


def test_favorites_routes(quote):
    store = FavoritesStore(InMemoryKeyValueStore())

    created = add_favorite(quote, store=store)
    assert created.count == 1

    toggled = toggle_favorite(quote, store=store)
    assert toggled.is_favorite is False
    assert list_favorites(store=store).count == 0

    add_favorite(quote, store=store)
    response = delete_favorite(quote.id, store=store)
    assert response.status_code == 204

    with pytest.raises(HTTPException) as exc:
        delete_favorite(quote.id, store=store)
    assert exc.value.status_code == 404


def test_get_preferences_without_authorization_is_read_only():
    storage = InMemoryKeyValueStore()
    preferences = NotificationPreferences(storage)

    response = get_notification_preferences_route(authorized=None, preferences=preferences)

    assert response.has_user_made_choice is False
    assert response.next_trigger_at is None
    assert storage.keys() == []


def test_get_preferences_with_authorization_schedules():
    preferences = NotificationPreferences(InMemoryKeyValueStore())

    response = get_notification_preferences_route(authorized=True, preferences=preferences)

    assert response.enabled is True
    assert response.should_schedule is True
    assert response.next_trigger_at is not None
    assert response.message in DAILY_MESSAGES


def test_update_preferences_applies_reset_then_flag():
    preferences = NotificationPreferences(InMemoryKeyValueStore())
    preferences.set_enabled(True)

    reset = update_notification_preferences(
        NotificationPreferencesUpdate(reset=True),
        preferences=preferences,
    )
    assert reset.has_user_made_choice is False

    updated = update_notification_preferences(
        NotificationPreferencesUpdate(enabled=False, authorized=True),
        preferences=preferences,
    )
    assert updated.enabled is False
    assert updated.has_user_made_choice is True
    assert updated.status_text == "Get notified about new content"
