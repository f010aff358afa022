"""Data Transfer Objects for outgoing webhook events."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from src.common.utils.date_utils import format_datetime_for_webhook, utc_now

PRODUCT_OUT_OF_STOCK = "product.out_of_stock"


@dataclass
class WebhookEventDTO:
    """DTO for a single webhook event ready to be handed to a publisher."""

    name: str
    payload: dict[str, Any]
    created_at: datetime = field(default_factory=utc_now)

    def to_request_body(self) -> dict[str, Any]:
        """Builds the JSON body sent to subscribers."""
        return {
            "event": self.name,
            "data": self.payload,
            "created_at": format_datetime_for_webhook(self.created_at),
        }
