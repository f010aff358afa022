"""In-memory implementation of the stock repository."""

import itertools
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import replace
from threading import RLock
from typing import Optional

from src.inventory_webhooks_domain.domain.entities.product import Product
from src.inventory_webhooks_domain.domain.entities.stock_item import StockItem
from src.inventory_webhooks_domain.domain.entities.variant import Variant
from src.inventory_webhooks_domain.domain.repositories.stock_repository import IStockRepository

logger = logging.getLogger(__name__)


class InMemoryStockRepository(IStockRepository):
    """
    Keeps products, variants and stock items in dictionaries.

    Entities are copied on the way in and out, so callers never share state with the store.
    A unit of work holds a single re-entrant lock and restores the previous tables if it fails.
    """

    def __init__(self) -> None:
        self._products: dict[int, Product] = {}
        self._variants: dict[int, Variant] = {}
        self._stock_items: dict[int, StockItem] = {}

        self._product_ids = itertools.count(1)
        self._variant_ids = itertools.count(1)
        self._stock_item_ids = itertools.count(1)
        self._lock = RLock()

    @contextmanager
    def transaction(self, product_id: Optional[int]) -> Iterator[None]:
        with self._lock:
            snapshot = (dict(self._products), dict(self._variants), dict(self._stock_items))
            try:
                yield
            except Exception:
                self._products, self._variants, self._stock_items = snapshot
                logger.debug(f"Rolled back unit of work for product {product_id}")
                raise

    def get_product(self, product_id: int) -> Optional[Product]:
        with self._lock:
            product = self._products.get(product_id)
            if product is None:
                return None
            variants = sorted(
                (replace(v) for v in self._variants.values() if v.product_id == product_id),
                key=lambda v: (not v.is_master, v.id),
            )
            return replace(product, variants=variants)

    def get_variant(self, variant_id: int) -> Optional[Variant]:
        with self._lock:
            variant = self._variants.get(variant_id)
            return replace(variant) if variant else None

    def get_stock_item(self, stock_item_id: int) -> Optional[StockItem]:
        with self._lock:
            stock_item = self._stock_items.get(stock_item_id)
            return replace(stock_item) if stock_item else None

    def get_product_id_for_stock_item(self, stock_item_id: int) -> Optional[int]:
        with self._lock:
            stock_item = self._stock_items.get(stock_item_id)
            if stock_item is None:
                return None
            variant = self._variants.get(stock_item.variant_id)
            return variant.product_id if variant else None

    def get_stock_items_for_product(self, product_id: int) -> list[StockItem]:
        with self._lock:
            variant_ids = {v.id for v in self._variants.values() if v.product_id == product_id}
            return [replace(si) for si in self._stock_items.values() if si.variant_id in variant_ids]

    def save_product(self, product: Product) -> Product:
        with self._lock:
            saved = replace(product, id=product.id or next(self._product_ids), variants=[])
            self._products[saved.id] = saved
            return replace(saved, variants=list(product.variants))

    def save_variant(self, variant: Variant) -> Variant:
        with self._lock:
            saved = replace(variant, id=variant.id or next(self._variant_ids))
            self._variants[saved.id] = saved
            return replace(saved)

    def save_stock_item(self, stock_item: StockItem) -> StockItem:
        with self._lock:
            saved = replace(stock_item, id=stock_item.id or next(self._stock_item_ids))
            self._stock_items[saved.id] = saved
            return replace(saved)

    def delete_stock_item(self, stock_item_id: int) -> None:
        with self._lock:
            self._stock_items.pop(stock_item_id, None)
