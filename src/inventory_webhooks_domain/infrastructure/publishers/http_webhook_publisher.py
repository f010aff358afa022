"""Publisher delivering webhook events to subscriber endpoints over HTTP."""

import concurrent.futures
import hashlib
import hmac
import json
import logging
from functools import partial
from typing import Any, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from src.common.config.settings import settings
from src.common.dtos.webhook_dtos import WebhookEventDTO
from src.common.exceptions.custom_exceptions import APIError
from src.inventory_webhooks_domain.domain.publishers.event_publisher import IEventPublisher

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "X-Webhook-Signature"
EVENT_HEADER = "X-Webhook-Event"


class HttpWebhookPublisher(IEventPublisher):
    def __init__(
        self,
        subscriber_urls: Optional[list[str]] = None,
        secret: Optional[str] = None,
        timeout: Optional[int] = None,
        max_workers: Optional[int] = None,
    ) -> None:
        self.subscriber_urls = subscriber_urls if subscriber_urls is not None else settings.WEBHOOK_SUBSCRIBER_URLS
        self.secret = secret if secret is not None else settings.WEBHOOK_SECRET
        self.timeout = timeout or settings.WEBHOOK_TIMEOUT_SECONDS

        # Configure session with connection pooling and retry strategy
        self.session = requests.Session()
        retry_strategy = Retry(
            total=3,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["POST"],
            backoff_factor=1,
        )
        adapter = HTTPAdapter(max_retries=retry_strategy, pool_connections=10, pool_maxsize=10)
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)

        # Deliveries run off the caller's thread so that publish never blocks a mutation
        self._executor = concurrent.futures.ThreadPoolExecutor(
            max_workers=max_workers or settings.WEBHOOK_MAX_WORKERS, thread_name_prefix="webhook"
        )

    def publish(self, event_name: str, payload: dict[str, Any]) -> None:
        """Queues one delivery per subscriber and returns immediately."""
        event = WebhookEventDTO(name=event_name, payload=payload)

        if not self.subscriber_urls:
            logger.warning(f"No webhook subscribers configured, {event_name} was not delivered.")
            return

        for url in self.subscriber_urls:
            future = self._executor.submit(self.deliver, url, event)
            future.add_done_callback(partial(self._log_delivery_result, url, event_name))

    def deliver(self, url: str, event: WebhookEventDTO) -> int:
        """Posts one event to one subscriber and returns the response status code."""
        body = json.dumps(event.to_request_body(), separators=(",", ":"))
        headers = {"Content-Type": "application/json", EVENT_HEADER: event.name}
        if self.secret:
            headers[SIGNATURE_HEADER] = self.sign(body)

        try:
            response = self.session.post(url, data=body.encode("utf-8"), headers=headers, timeout=self.timeout)
            response.raise_for_status()
            return response.status_code
        except requests.exceptions.Timeout as e:
            raise APIError(f"Webhook delivery of {event.name} to {url} timed out", original_exception=e)
        except requests.exceptions.RequestException as e:
            status_code = e.response.status_code if e.response is not None else None
            raise APIError(
                f"Webhook delivery of {event.name} to {url} failed", original_exception=e, status_code=status_code
            )

    def sign(self, body: str) -> str:
        """Hex HMAC-SHA256 of the request body with the shared secret."""
        return hmac.new(self.secret.encode(), body.encode("utf-8"), hashlib.sha256).hexdigest()

    def shutdown(self, wait: bool = True) -> None:
        """Waits for queued deliveries (optionally) and releases the session."""
        self._executor.shutdown(wait=wait)
        self.session.close()

    @staticmethod
    def _log_delivery_result(url: str, event_name: str, future: concurrent.futures.Future) -> None:
        exc = future.exception()
        if exc:
            logger.error(f"Failed to deliver {event_name} to {url}: {exc}")
        else:
            logger.info(f"Delivered {event_name} to {url} (status {future.result()})")
