"""Variant entity."""

from dataclasses import dataclass


@dataclass
class Variant:
    """A purchasable variant of a product. Every product has exactly one master variant."""

    product_id: int | None
    sku: str = ""
    is_master: bool = False
    track_inventory: bool = True
    id: int | None = None
