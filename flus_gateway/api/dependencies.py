"""Dependency injection for FastAPI endpoints"""

from datetime import date
from typing import Optional
from fastapi import Request
from flus_gateway.config import settings
from flus_gateway.infrastructure.clients.delivery import DeliveryClient


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_today() -> date:
    """Clock used when a request does not pin `today`"""
    return date.today()


def get_delivery_client() -> Optional[DeliveryClient]:
    """Provide delivery webhook client, or None when no webhook is configured"""
    if not settings.delivery_webhook_url:
        return None
    return DeliveryClient()
