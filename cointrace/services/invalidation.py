"""
"Shop view is stale" signal.

Emitted after a committed write (bill, shop, staff change). What to do with it
(drop a page cache, revalidate a frontend route) is up to the receiver.
"""
from typing import Optional

import httpx

from cointrace.config import settings
from cointrace.core.logging_config import get_logger

logger = get_logger(__name__)


def shop_view_path(shop_id: str) -> str:
    return f"/shop/{shop_id}"


class ViewInvalidator:
    async def shop_view_stale(self, shop_id: str) -> None:
        raise NotImplementedError


class LoggingInvalidator(ViewInvalidator):
    async def shop_view_stale(self, shop_id: str) -> None:
        logger.info("View %s is stale", shop_view_path(shop_id))


class WebhookInvalidator(ViewInvalidator):
    """POSTs {"path": "/shop/<id>"} to a revalidation endpoint."""

    def __init__(self, url: str, timeout: float = 10.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.url = url
        self.timeout = timeout
        self.transport = transport

    async def shop_view_stale(self, shop_id: str) -> None:
        payload = {"path": shop_view_path(shop_id)}
        # The write is already committed; a failed revalidation only delays the refresh.
        async with httpx.AsyncClient(transport=self.transport) as client:
            try:
                r = await client.post(self.url, json=payload, timeout=self.timeout)
                if r.status_code >= 400:
                    logger.warning("Revalidate %s: %s %s", payload["path"], r.status_code, r.text)
            except httpx.HTTPError as e:
                logger.exception("Revalidate request failed for %s: %s", payload["path"], e)


def build_invalidator(webhook_url: Optional[str] = None) -> ViewInvalidator:
    url = webhook_url if webhook_url is not None else settings.revalidate_webhook_url
    if url:
        return WebhookInvalidator(url)
    return LoggingInvalidator()


_invalidator: Optional[ViewInvalidator] = None


def get_invalidator() -> ViewInvalidator:
    """FastAPI dependency."""
    global _invalidator
    if _invalidator is None:
        _invalidator = build_invalidator()
    return _invalidator
