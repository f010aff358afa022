# src/inventory_webhooks_domain/domain/services/stock_aggregate.py
"""Domain service computing a product's aggregate stock state."""

from collections.abc import Iterable

from ..entities.product import Product
from ..entities.stock_item import StockItem
from ..value_objects.aggregate_state import AggregateState


def compute_aggregate_state(product: Product, stock_items: Iterable[StockItem]) -> AggregateState:
    """
    Sums count_on_hand and ORs backorderable over the given live stock items.

    The caller passes the already-adjusted record set, e.g. without a stock item
    that is being deleted.
    """
    total_on_hand = 0
    any_backorderable = False
    record_count = 0

    for stock_item in stock_items:
        total_on_hand += stock_item.count_on_hand
        any_backorderable = any_backorderable or stock_item.backorderable
        record_count += 1

    return AggregateState(
        total_on_hand=total_on_hand,
        any_backorderable=any_backorderable,
        any_tracked=product.track_inventory,
        record_count=record_count,
    )
