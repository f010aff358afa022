# src/inventory_webhooks_domain/domain/repositories/stock_repository.py
"""Product, variant and stock item repository interface."""
from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import Optional

from ..entities.product import Product
from ..entities.stock_item import StockItem
from ..entities.variant import Variant


class IStockRepository(ABC):

    @abstractmethod
    def transaction(self, product_id: Optional[int]) -> AbstractContextManager[None]:
        """
        Opens a unit of work scoped to one product.

        Writes made inside the block are committed together on exit and rolled back
        if the block raises. Concurrent units of work for the same product are serialized.
        With product_id None no product is locked, e.g. while the product itself is being created.
        A unit of work opened inside another one on the same thread joins the outer one.
        """
        pass

    @abstractmethod
    def get_product(self, product_id: int) -> Optional[Product]:
        """Retrieves a product with all of its variants."""
        pass

    @abstractmethod
    def get_variant(self, variant_id: int) -> Optional[Variant]:
        """Retrieves a single variant."""
        pass

    @abstractmethod
    def get_stock_item(self, stock_item_id: int) -> Optional[StockItem]:
        """Retrieves a single stock item."""
        pass

    @abstractmethod
    def get_product_id_for_stock_item(self, stock_item_id: int) -> Optional[int]:
        """Resolves the product a stock item belongs to through its variant."""
        pass

    @abstractmethod
    def get_stock_items_for_product(self, product_id: int) -> list[StockItem]:
        """Retrieves all live stock items across every variant of a product."""
        pass

    @abstractmethod
    def save_product(self, product: Product) -> Product:
        """Inserts a product and assigns its id."""
        pass

    @abstractmethod
    def save_variant(self, variant: Variant) -> Variant:
        """Inserts or updates a variant and assigns its id."""
        pass

    @abstractmethod
    def save_stock_item(self, stock_item: StockItem) -> StockItem:
        """Inserts or updates a stock item and assigns its id."""
        pass

    @abstractmethod
    def delete_stock_item(self, stock_item_id: int) -> None:
        """Removes a stock item."""
        pass
