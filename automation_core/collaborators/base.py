"""Capability interfaces for the systems actions talk to."""

from typing import Any, Dict, Optional, Protocol

from pydantic import BaseModel


class SyncResult(BaseModel):
    """Outcome reported by an integration-sync connector."""

    success: bool
    message: str = ""
    synced_items: Optional[int] = None


class TaskCreator(Protocol):
    """Creates a task from a payload and returns its id."""

    async def create_task(self, payload: Dict[str, Any]) -> str:
        ...


class NotificationSender(Protocol):
    """Delivers an in-app notification. Returns True on success."""

    async def send_notification(self, payload: Dict[str, Any]) -> bool:
        ...


class EmailSender(Protocol):
    """Delivers an email. Returns True on success."""

    async def send_email(self, payload: Dict[str, Any]) -> bool:
        ...


class IntegrationSyncer(Protocol):
    """Runs a data sync for one configured third-party integration."""

    async def sync(self, integration_id: str) -> SyncResult:
        ...
