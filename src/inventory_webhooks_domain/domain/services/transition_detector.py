# src/inventory_webhooks_domain/domain/services/transition_detector.py
"""Decides whether a stock mutation moved a product across the out-of-stock boundary."""

import logging
from typing import Optional

from src.common.dtos.webhook_dtos import PRODUCT_OUT_OF_STOCK

from ..value_objects.aggregate_state import AggregateState

logger = logging.getLogger(__name__)


class OutOfStockTransitionDetector:
    """Pure decision table over (before, after) aggregate states."""

    event_name = PRODUCT_OUT_OF_STOCK

    def on_mutation(self, before: AggregateState, after: AggregateState) -> Optional[str]:
        """
        Returns the event name to emit for this mutation, or None.

        Rules, in order:
        1. untracked products never emit;
        2. an unchanged aggregate never emits;
        3. a product that was already at or below zero has no new crossing;
        4. a product that had stock and is now unavailable emits. Unavailable means
           no stock items are left, or the total is at or below zero and nothing
           remaining is backorderable.
        """
        if not after.any_tracked:
            return None

        if before == after:
            return None

        if before.total_on_hand <= 0:
            return None

        if after.is_unavailable:
            logger.debug(f"Out-of-stock transition detected: {before} -> {after}")
            return self.event_name

        return None
