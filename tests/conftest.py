# tests/conftest.py
from dataclasses import replace
from unittest.mock import Mock

import pytest

from src.common.config.settings import settings
from src.inventory_webhooks_domain.application.stock_mutation_service import StockMutationService
from src.inventory_webhooks_domain.domain.entities.product import Product
from src.inventory_webhooks_domain.domain.entities.stock_item import StockItem
from src.inventory_webhooks_domain.domain.publishers.event_publisher import IEventPublisher
from src.inventory_webhooks_domain.infrastructure.persistence.in_memory_stock_repository import (
    InMemoryStockRepository,
)

DEFAULT_STOCK_LOCATION_ID = 1


@pytest.fixture(autouse=True)
def mock_settings_webhooks(mocker) -> None:
    """Mocks the webhook subscriber settings for consistent testing."""
    mocker.patch.object(settings, "WEBHOOK_SUBSCRIBER_URLS", ["https://subscriber.example.com/webhooks"])
    mocker.patch.object(settings, "WEBHOOK_SECRET", "test_secret")
    mocker.patch.object(settings, "WEBHOOK_TIMEOUT_SECONDS", 5)


@pytest.fixture
def stock_repository() -> InMemoryStockRepository:
    """Fresh in-memory repository per test."""
    return InMemoryStockRepository()


@pytest.fixture
def mock_event_publisher() -> Mock:
    """Mock for the event publisher."""
    return Mock(spec=IEventPublisher)


@pytest.fixture
def stock_mutation_service(stock_repository, mock_event_publisher) -> StockMutationService:
    """Instance of StockMutationService backed by the in-memory repository."""
    return StockMutationService(stock_repo=stock_repository, event_publisher=mock_event_publisher)


@pytest.fixture
def product(stock_mutation_service, stock_repository) -> Product:
    """A tracked product whose master stock item holds 10, written straight to the store."""
    product = stock_mutation_service.create_product(
        name="Canvas Sneaker", slug="canvas-sneaker", stock_location_ids=[DEFAULT_STOCK_LOCATION_ID]
    )
    master_stock_item = stock_repository.get_stock_items_for_product(product.id)[0]
    stock_repository.save_stock_item(replace(master_stock_item, count_on_hand=10))
    return product


@pytest.fixture
def stock_item(product, stock_repository) -> StockItem:
    """The master variant's stock item of the sample product."""
    return stock_repository.get_stock_items_for_product(product.id)[0]


@pytest.fixture
def update_columns(stock_repository):
    """Writes stock item columns directly, bypassing the mutation hooks."""

    def _update_columns(stock_item_id: int, **changes) -> StockItem:
        stock_item = stock_repository.get_stock_item(stock_item_id)
        return stock_repository.save_stock_item(replace(stock_item, **changes))

    return _update_columns
