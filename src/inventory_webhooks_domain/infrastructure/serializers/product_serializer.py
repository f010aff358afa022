"""Serializes products into the JSON:API shaped payload carried by webhook events."""

from typing import Any

from src.inventory_webhooks_domain.domain.entities.product import Product
from src.inventory_webhooks_domain.domain.value_objects.aggregate_state import AggregateState


class ProductSerializer:
    resource_type = "product"

    def serialize(self, product: Product, state: AggregateState) -> dict[str, Any]:
        """Builds the serializable hash of a product, with stock attributes taken from its aggregate state."""
        return {
            "data": {
                "id": str(product.id),
                "type": self.resource_type,
                "attributes": {
                    "name": product.name,
                    "slug": product.slug,
                    "status": product.status,
                    "track_inventory": state.any_tracked,
                    "total_on_hand": state.total_on_hand,
                    "backorderable": state.any_backorderable,
                    "in_stock": state.total_on_hand > 0,
                    "purchasable": not state.any_tracked or not state.is_unavailable,
                },
                "relationships": {
                    "master": self._relationship("variant", product.master.id if product.master else None),
                    "variants": {
                        "data": [
                            {"id": str(variant.id), "type": "variant"}
                            for variant in product.variants
                            if not variant.is_master
                        ]
                    },
                },
            }
        }

    @staticmethod
    def _relationship(resource_type: str, resource_id: int | None) -> dict[str, Any]:
        if resource_id is None:
            return {"data": None}
        return {"data": {"id": str(resource_id), "type": resource_type}}
