"""Webhook-backed collaborators built on httpx."""

from typing import Any, Dict

import httpx
from loguru import logger
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from .base import SyncResult


class WebhookPoster:
    """POST JSON payloads to one endpoint.

    Transport errors (connection refused, timeouts) are retried with
    exponential backoff. HTTP error statuses are not retried.
    """

    def __init__(
        self,
        url: str,
        timeout: float = 10.0,
        max_attempts: int = 3,
        retry_wait_seconds: float = 0.5,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.retry_wait_seconds = retry_wait_seconds

    async def post(self, payload: Dict[str, Any], url: str = "") -> httpx.Response:
        target = url or self.url
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=self.retry_wait_seconds, max=30),
            retry=retry_if_exception_type(httpx.TransportError),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                async with httpx.AsyncClient() as client:
                    response = await client.post(target, json=payload, timeout=self.timeout)
                    response.raise_for_status()
                    return response
        raise RuntimeError("unreachable")  # pragma: no cover


class WebhookNotificationSender:
    """Forward notifications to a webhook."""

    def __init__(self, poster: WebhookPoster) -> None:
        self.poster = poster

    async def send_notification(self, payload: Dict[str, Any]) -> bool:
        try:
            await self.poster.post({"event": "notification.send", "notification": payload})
        except httpx.HTTPStatusError as e:
            logger.error(f"Notification webhook rejected payload: {e}")
            return False
        logger.info(f"Notification forwarded to {self.poster.url}")
        return True


class WebhookEmailSender:
    """Forward emails to a webhook-driven mail relay."""

    def __init__(self, poster: WebhookPoster) -> None:
        self.poster = poster

    async def send_email(self, payload: Dict[str, Any]) -> bool:
        try:
            await self.poster.post({"event": "email.send", "email": payload})
        except httpx.HTTPStatusError as e:
            logger.error(f"Email webhook rejected payload: {e}")
            return False
        logger.info(f"Email forwarded to {self.poster.url}")
        return True


class HttpIntegrationSyncer:
    """Ask the integration service to sync one integration.

    Expects ``POST {base_url}/{integration_id}/sync`` to answer with
    ``{"success": ..., "message": ..., "synced_items": ...}``.
    """

    def __init__(self, poster: WebhookPoster) -> None:
        self.poster = poster

    async def sync(self, integration_id: str) -> SyncResult:
        url = f"{self.poster.url.rstrip('/')}/{integration_id}/sync"
        response = await self.poster.post({"integration_id": integration_id}, url=url)
        result = SyncResult.model_validate(response.json())
        logger.info(
            f"Integration {integration_id} synced: success={result.success} "
            f"items={result.synced_items}"
        )
        return result
