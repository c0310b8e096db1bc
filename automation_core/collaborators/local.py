"""In-process collaborators used when no external endpoint is configured."""

import uuid
from collections import deque
from typing import Any, Deque, Dict

from loguru import logger

from .base import SyncResult

SENT_HISTORY_SIZE = 100


class InMemoryTaskCreator:
    """Keep created tasks in a dict keyed by generated id."""

    def __init__(self) -> None:
        self.tasks: Dict[str, Dict[str, Any]] = {}

    async def create_task(self, payload: Dict[str, Any]) -> str:
        task_id = f"task-{uuid.uuid4()}"
        self.tasks[task_id] = dict(payload)
        logger.info(f"Created task {task_id}: {payload.get('title')}")
        return task_id


class LoggingNotificationSender:
    """Log notifications instead of delivering them.

    The most recent ``history_size`` payloads are kept on ``sent``.
    """

    def __init__(self, history_size: int = SENT_HISTORY_SIZE) -> None:
        self.sent: Deque[Dict[str, Any]] = deque(maxlen=history_size)

    async def send_notification(self, payload: Dict[str, Any]) -> bool:
        self.sent.append(payload)
        logger.info(
            f"Notification to {payload.get('recipient')} via {payload.get('channel')}: "
            f"{payload.get('message')}"
        )
        return True


class LoggingEmailSender:
    """Log emails instead of delivering them, keeping a bounded history."""

    def __init__(self, history_size: int = SENT_HISTORY_SIZE) -> None:
        self.sent: Deque[Dict[str, Any]] = deque(maxlen=history_size)

    async def send_email(self, payload: Dict[str, Any]) -> bool:
        self.sent.append(payload)
        logger.info(f"Email to {payload.get('recipient')}: {payload.get('subject')}")
        return True


class UnconfiguredIntegrationSyncer:
    """Report every sync as unsuccessful."""

    async def sync(self, integration_id: str) -> SyncResult:
        logger.warning(f"No integration sync endpoint configured for {integration_id}")
        return SyncResult(
            success=False,
            message="No integration sync endpoint configured",
            synced_items=0,
        )
