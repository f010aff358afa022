"""Event publisher interface."""
from abc import ABC, abstractmethod
from typing import Any


class IEventPublisher(ABC):

    @abstractmethod
    def publish(self, event_name: str, payload: dict[str, Any]) -> None:
        """Hands an event over for delivery. Must return without waiting for subscribers."""
        pass
