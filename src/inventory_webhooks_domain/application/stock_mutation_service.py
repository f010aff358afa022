# src/inventory_webhooks_domain/application/stock_mutation_service.py
"""Application service applying stock mutations and emitting out-of-stock webhooks."""

import logging
from collections.abc import Callable
from dataclasses import replace
from threading import Lock
from typing import Optional, TypeVar
from weakref import WeakValueDictionary

from src.common.exceptions.custom_exceptions import (
    InvalidStockMutationError,
    ProductNotFoundError,
    StockItemNotFoundError,
    VariantNotFoundError,
)
from src.inventory_webhooks_domain.domain.entities.product import Product
from src.inventory_webhooks_domain.domain.entities.stock_item import StockItem
from src.inventory_webhooks_domain.domain.entities.variant import Variant
from src.inventory_webhooks_domain.domain.publishers.event_publisher import IEventPublisher
from src.inventory_webhooks_domain.domain.repositories.stock_repository import IStockRepository
from src.inventory_webhooks_domain.domain.services.stock_aggregate import compute_aggregate_state
from src.inventory_webhooks_domain.domain.services.transition_detector import OutOfStockTransitionDetector
from src.inventory_webhooks_domain.domain.value_objects.aggregate_state import AggregateState
from src.inventory_webhooks_domain.infrastructure.serializers.product_serializer import ProductSerializer

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _ensure_integer(value: object, field_name: str) -> int:
    # bool is an int subclass but never a valid count
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidStockMutationError(f"{field_name} must be an integer, got {value!r}")
    return value


class StockMutationService:
    """
    Entry points for every stock mutation.

    Each mutation snapshots the product's aggregate state, applies the change,
    snapshots again and commits, all inside one unit of work held under a
    per-product lock. The out-of-stock event is published only after commit.
    """

    def __init__(
        self,
        stock_repo: IStockRepository,
        event_publisher: IEventPublisher,
        serializer: ProductSerializer | None = None,
        detector: OutOfStockTransitionDetector | None = None,
    ) -> None:
        """Initializes the StockMutationService."""
        self.stock_repo = stock_repo
        self.event_publisher = event_publisher
        self.serializer = serializer or ProductSerializer()
        self.detector = detector or OutOfStockTransitionDetector()

        # Locks disappear once no mutation of their product holds them
        self._product_locks: WeakValueDictionary[int, Lock] = WeakValueDictionary()
        self._locks_guard = Lock()

    # --- Stock item mutations ---

    def adjust_count_on_hand(self, stock_item_id: int, delta: int) -> StockItem:
        """Adds delta (which may be negative) to a stock item's count_on_hand."""
        delta = _ensure_integer(delta, "delta")
        product_id = self._product_id_for_stock_item(stock_item_id)

        def mutate() -> StockItem:
            stock_item = self._require_stock_item(stock_item_id)
            return self.stock_repo.save_stock_item(
                replace(stock_item, count_on_hand=stock_item.count_on_hand + delta)
            )

        return self._run_mutation(product_id, mutate)

    def set_count_on_hand(self, stock_item_id: int, value: int) -> StockItem:
        """Overwrites a stock item's count_on_hand."""
        value = _ensure_integer(value, "count_on_hand")
        product_id = self._product_id_for_stock_item(stock_item_id)

        def mutate() -> StockItem:
            stock_item = self._require_stock_item(stock_item_id)
            return self.stock_repo.save_stock_item(replace(stock_item, count_on_hand=value))

        return self._run_mutation(product_id, mutate)

    def update_stock_item(self, stock_item_id: int, backorderable: bool) -> StockItem:
        """Saves a stock item's backorderable flag without touching its count."""
        product_id = self._product_id_for_stock_item(stock_item_id)

        def mutate() -> StockItem:
            stock_item = self._require_stock_item(stock_item_id)
            return self.stock_repo.save_stock_item(replace(stock_item, backorderable=bool(backorderable)))

        return self._run_mutation(product_id, mutate)

    def delete_stock_item(self, stock_item_id: int) -> None:
        """Removes a stock item. The after-state no longer includes it."""
        product_id = self._product_id_for_stock_item(stock_item_id)

        def mutate() -> None:
            self._require_stock_item(stock_item_id)
            self.stock_repo.delete_stock_item(stock_item_id)

        self._run_mutation(product_id, mutate)

    def create_stock_item(
        self, variant_id: int, stock_location_id: int, count_on_hand: int = 0, backorderable: bool = True
    ) -> StockItem:
        """Creates a stock item for a variant at a stock location."""
        count_on_hand = _ensure_integer(count_on_hand, "count_on_hand")
        variant = self._require_variant(variant_id)

        def mutate() -> StockItem:
            return self.stock_repo.save_stock_item(
                StockItem(
                    variant_id=variant_id,
                    stock_location_id=stock_location_id,
                    count_on_hand=count_on_hand,
                    backorderable=bool(backorderable),
                )
            )

        return self._run_mutation(variant.product_id, mutate)

    # --- Catalogue mutations creating stock items ---

    def create_product(
        self, name: str, slug: str, stock_location_ids: list[int], track_inventory: bool = True
    ) -> Product:
        """Creates a product with its master variant and one empty stock item per stock location."""
        # The product row is new, so there is nothing to lock yet; it commits with its variant and stock items
        with self.stock_repo.transaction(None):
            product = self.stock_repo.save_product(Product(name=name, slug=slug))

            def mutate() -> Product:
                master = self.stock_repo.save_variant(
                    Variant(product_id=product.id, sku=slug, is_master=True, track_inventory=track_inventory)
                )
                for stock_location_id in stock_location_ids:
                    self.stock_repo.save_stock_item(
                        StockItem(variant_id=master.id, stock_location_id=stock_location_id)
                    )
                product.variants.append(master)
                return product

            result, event = self._apply_and_detect(product.id, mutate)

        logger.info(f"Created product {product.id} ({product.slug})")
        if event:
            self._publish(*event)
        return result

    def create_variant(self, product_id: int, sku: str, stock_location_ids: list[int]) -> Variant:
        """Adds a non-master variant with one empty stock item per stock location."""
        self._require_product(product_id)

        def mutate() -> Variant:
            variant = self.stock_repo.save_variant(Variant(product_id=product_id, sku=sku))
            for stock_location_id in stock_location_ids:
                self.stock_repo.save_stock_item(
                    StockItem(variant_id=variant.id, stock_location_id=stock_location_id)
                )
            return variant

        return self._run_mutation(product_id, mutate)

    def set_track_inventory(self, variant_id: int, track_inventory: bool) -> Variant:
        """Toggles inventory tracking on a variant. Only the master's flag gates a product."""
        variant = self._require_variant(variant_id)

        with self._product_lock(variant.product_id), self.stock_repo.transaction(variant.product_id):
            saved = self.stock_repo.save_variant(replace(variant, track_inventory=bool(track_inventory)))

        logger.info(f"Variant {variant_id} track_inventory set to {saved.track_inventory}")
        return saved

    # --- Aggregate ---

    def compute_state(self, product_id: int) -> AggregateState:
        """Reads the product and its live stock items and returns their aggregate state."""
        product = self._require_product(product_id)
        return compute_aggregate_state(product, self.stock_repo.get_stock_items_for_product(product_id))

    # --- Internals ---

    def _run_mutation(self, product_id: int, mutate: Callable[[], T]) -> T:
        with self._product_lock(product_id):
            with self.stock_repo.transaction(product_id):
                result, event = self._apply_and_detect(product_id, mutate)

        # The unit of work has committed at this point
        if event:
            self._publish(*event)
        return result

    def _apply_and_detect(
        self, product_id: int, mutate: Callable[[], T]
    ) -> tuple[T, Optional[tuple[str, dict]]]:
        """Runs inside an open unit of work: snapshot, mutate, snapshot, decide."""
        before = self.compute_state(product_id)
        result = mutate()
        after = self.compute_state(product_id)

        event_name = self.detector.on_mutation(before, after)
        if not event_name:
            return result, None

        product = self._require_product(product_id)
        return result, (event_name, self.serializer.serialize(product, after))

    def _publish(self, event_name: str, payload: dict) -> None:
        try:
            self.event_publisher.publish(event_name, payload)
            logger.info(f"Published {event_name} for product {payload['data']['id']}")
        except Exception as e:
            logger.error(f"Failed to publish {event_name}: {e}")

    def _product_lock(self, product_id: int) -> Lock:
        with self._locks_guard:
            return self._product_locks.setdefault(product_id, Lock())

    def _product_id_for_stock_item(self, stock_item_id: int) -> int:
        product_id = self.stock_repo.get_product_id_for_stock_item(stock_item_id)
        if product_id is None:
            raise StockItemNotFoundError(stock_item_id)
        return product_id

    def _require_product(self, product_id: int) -> Product:
        product = self.stock_repo.get_product(product_id)
        if product is None:
            raise ProductNotFoundError(product_id)
        return product

    def _require_variant(self, variant_id: int) -> Variant:
        variant = self.stock_repo.get_variant(variant_id)
        if variant is None:
            raise VariantNotFoundError(variant_id)
        return variant

    def _require_stock_item(self, stock_item_id: int) -> StockItem:
        stock_item = self.stock_repo.get_stock_item(stock_item_id)
        if stock_item is None:
            raise StockItemNotFoundError(stock_item_id)
        return stock_item
