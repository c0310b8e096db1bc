"""Construction of the services behind the HTTP routers."""

from dataclasses import dataclass
from typing import Optional

from loguru import logger

from .collaborators import (
    HttpIntegrationSyncer,
    InMemoryTaskCreator,
    LoggingEmailSender,
    LoggingNotificationSender,
    UnconfiguredIntegrationSyncer,
    WebhookEmailSender,
    WebhookNotificationSender,
    WebhookPoster,
)
from .config import AutomationSettings, get_settings
from .scheduling import ScheduleCalculator, ScheduledTaskRunner, SchedulerService
from .storage import InMemoryRepository, RedisRepository
from .workflows import (
    ActionDispatcher,
    ConditionEvaluator,
    GraphValidator,
    WorkflowExecutor,
    WorkflowService,
)


@dataclass
class Services:
    workflows: WorkflowService
    scheduler: SchedulerService


def build_services(settings: AutomationSettings) -> Services:
    """Wire repository, collaborators and core components from settings."""

    if settings.storage_backend == "redis":
        repository = RedisRepository(settings.redis_url, settings.redis_key_prefix)
    else:
        repository = InMemoryRepository()

    def poster(url: str) -> WebhookPoster:
        return WebhookPoster(
            url,
            timeout=settings.http_timeout_seconds,
            max_attempts=settings.http_max_attempts,
        )

    task_creator = InMemoryTaskCreator()
    notification_sender = (
        WebhookNotificationSender(poster(settings.notification_webhook_url))
        if settings.notification_webhook_url
        else LoggingNotificationSender()
    )
    email_sender = (
        WebhookEmailSender(poster(settings.email_webhook_url))
        if settings.email_webhook_url
        else LoggingEmailSender()
    )
    integration_syncer = (
        HttpIntegrationSyncer(poster(settings.integration_sync_url))
        if settings.integration_sync_url
        else UnconfiguredIntegrationSyncer()
    )

    dispatcher = ActionDispatcher(
        task_creator,
        notification_sender,
        email_sender,
        integration_syncer,
        script_max_length=settings.custom_script_max_length,
        script_timeout_seconds=settings.custom_script_timeout_seconds,
    )
    validator = GraphValidator()
    executor = WorkflowExecutor(ConditionEvaluator(), dispatcher, validator)
    calculator = ScheduleCalculator()
    runner = ScheduledTaskRunner(repository, calculator, task_creator)

    logger.info(f"Automation services built with {settings.storage_backend} storage")
    return Services(
        workflows=WorkflowService(repository, executor, validator),
        scheduler=SchedulerService(repository, calculator, runner),
    )


# Global instance (initialized on first request)
_services: Optional[Services] = None


def get_services() -> Services:
    """Get or create the process-wide services."""
    global _services

    if not _services:
        _services = build_services(get_settings())
    return _services


def get_workflow_service() -> WorkflowService:
    return get_services().workflows


def get_scheduler_service() -> SchedulerService:
    return get_services().scheduler
