"""Stock item entity."""

from dataclasses import dataclass


@dataclass
class StockItem:
    """Per-variant, per-location inventory counter.

    ``count_on_hand`` is signed: a backorderable item may legitimately go below zero.
    """

    variant_id: int
    stock_location_id: int
    count_on_hand: int = 0
    backorderable: bool = True
    id: int | None = None

    def __post_init__(self) -> None:
        """Post-initialization for validation."""
        if isinstance(self.count_on_hand, bool) or not isinstance(self.count_on_hand, int):
            raise ValueError("count_on_hand must be an integer.")
