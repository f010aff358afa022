"""Product entity."""

from dataclasses import dataclass, field

from .variant import Variant


@dataclass
class Product:
    """Represents a sellable product together with its master and non-master variants."""

    name: str
    slug: str
    status: str = "active"
    variants: list[Variant] = field(default_factory=list)
    id: int | None = None  # For persistence, if it has a unique DB ID

    @property
    def master(self) -> Variant | None:
        return next((variant for variant in self.variants if variant.is_master), None)

    @property
    def track_inventory(self) -> bool:
        """Tracking is read from the master variant only."""
        master = self.master
        return master.track_inventory if master else False
