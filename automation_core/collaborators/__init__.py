"""Collaborators invoked by workflow actions and scheduled tasks."""

from .base import (
    EmailSender,
    IntegrationSyncer,
    NotificationSender,
    SyncResult,
    TaskCreator,
)
from .http import (
    HttpIntegrationSyncer,
    WebhookEmailSender,
    WebhookNotificationSender,
    WebhookPoster,
)
from .local import (
    InMemoryTaskCreator,
    LoggingEmailSender,
    LoggingNotificationSender,
    UnconfiguredIntegrationSyncer,
)

__all__ = [
    "EmailSender",
    "IntegrationSyncer",
    "NotificationSender",
    "SyncResult",
    "TaskCreator",
    "HttpIntegrationSyncer",
    "WebhookEmailSender",
    "WebhookNotificationSender",
    "WebhookPoster",
    "InMemoryTaskCreator",
    "LoggingEmailSender",
    "LoggingNotificationSender",
    "UnconfiguredIntegrationSyncer",
]
