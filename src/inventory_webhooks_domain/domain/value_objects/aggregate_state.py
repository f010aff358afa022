"""Aggregate stock state value object."""

from dataclasses import dataclass


@dataclass(frozen=True)  # Value objects are immutable
class AggregateState:
    """Derived stock state across all live stock items of one product. Never persisted."""

    total_on_hand: int = 0
    any_backorderable: bool = False
    any_tracked: bool = False
    record_count: int = 0

    @property
    def is_unavailable(self) -> bool:
        """True when shoppers can no longer buy the product from the remaining stock items."""
        if self.record_count == 0:
            return True
        return self.total_on_hand <= 0 and not self.any_backorderable


EMPTY_STATE = AggregateState()
