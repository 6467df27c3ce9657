"""Notification delivery webhook client with exponential backoff retry logic"""

import httpx
import asyncio
from typing import Any, Dict, List
from flus_gateway.config import settings
from flus_gateway.domain.exceptions import DeliveryError
from flus_gateway.domain.models import NotificationRequest
from flus_gateway.infrastructure.observability.metrics import delivery_latency_histogram, delivery_failure_counter


def notification_payload(notification: NotificationRequest) -> Dict[str, Any]:
    """Wire format of a delivery request"""
    return {
        "event": "REMINDER_DUE",
        "fire_key": notification.fire_key,
        "pattern_id": notification.pattern_id,
        "trigger_id": notification.trigger_id,
        "recipient_user_id": notification.recipient_user_id,
        "notification_method": notification.notification_method.value if notification.notification_method else None,
        "title": notification.title,
        "body": notification.body,
    }


class DeliveryClient:
    """Client handing fired notifications to the external delivery layer"""

    def __init__(self, webhook_url: str | None = None, timeout: float | None = None):
        self.webhook_url = webhook_url or settings.delivery_webhook_url
        self.timeout = timeout or settings.http_timeout_seconds
        self.max_retries = settings.webhook_max_retries
        self.backoff_base = settings.webhook_backoff_base

    async def send_notification(self, notification: NotificationRequest) -> None:
        """
        Post one delivery request to the webhook with retry logic.

        Retry strategy:
        - Exponential backoff: 1s, 2s, 4s, 8s (base * 2^(attempt-1))
        - Retries on 5xx errors and network failures
        - Tracks latency histogram and failure counter

        Raises:
            DeliveryError: When every attempt failed
        """
        payload = notification_payload(notification)
        attempt = 0
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            while attempt < self.max_retries:
                try:
                    with delivery_latency_histogram.time():
                        response = await client.post(self.webhook_url, json=payload)
                        response.raise_for_status()
                        return  # Success

                except (httpx.HTTPStatusError, httpx.RequestError) as e:
                    attempt += 1
                    delivery_failure_counter.inc()

                    if attempt >= self.max_retries:
                        raise DeliveryError(
                            f"Delivery of {notification.fire_key} failed after {attempt} attempts"
                        ) from e

                    backoff = self.backoff_base * (2 ** (attempt - 1))
                    await asyncio.sleep(backoff)

    async def send_all(self, notifications: List[NotificationRequest]) -> None:
        """Deliver notifications in order; one failure does not block the rest"""
        failures = []
        for notification in notifications:
            try:
                await self.send_notification(notification)
            except DeliveryError as e:
                failures.append(e)
        if failures:
            raise DeliveryError(f"{len(failures)} of {len(notifications)} deliveries failed") from failures[0]
