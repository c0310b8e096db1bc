"""Local test configuration for the automation service."""

from __future__ import annotations

import sys
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

# -- Path management ------------------------------------------------------
# Keep ``import automation_core`` working when pytest runs from a checkout
# that was not installed in editable mode.
SERVICE_ROOT = Path(__file__).resolve().parent.parent
if str(SERVICE_ROOT) not in sys.path:
    sys.path.insert(0, str(SERVICE_ROOT))

from automation_core.collaborators import (
    InMemoryTaskCreator,
    LoggingEmailSender,
    LoggingNotificationSender,
    SyncResult,
)
from automation_core.config import AutomationSettings
from automation_core.scheduling import (
    ScheduleCalculator,
    ScheduledTaskRunner,
    SchedulerService,
)
from automation_core.storage import InMemoryRepository
from automation_core.workflows import (
    ActionDispatcher,
    ConditionEvaluator,
    GraphValidator,
    WorkflowExecutor,
    WorkflowService,
)


@pytest.fixture
def test_settings() -> AutomationSettings:
    """Provide test-specific settings."""
    return AutomationSettings(
        app_name="automation-core-test",
        cors_origins=["http://localhost:3000"],
        storage_backend="memory",
    )


@pytest.fixture
def task_creator() -> InMemoryTaskCreator:
    return InMemoryTaskCreator()


@pytest.fixture
def notification_sender() -> LoggingNotificationSender:
    return LoggingNotificationSender()


@pytest.fixture
def email_sender() -> LoggingEmailSender:
    return LoggingEmailSender()


@pytest.fixture
def integration_syncer() -> AsyncMock:
    """Integration connector that reports a successful sync of 12 items."""
    syncer = AsyncMock()
    syncer.sync = AsyncMock(
        return_value=SyncResult(success=True, message="Synced calendar", synced_items=12)
    )
    return syncer


@pytest.fixture
def dispatcher(task_creator, notification_sender, email_sender, integration_syncer) -> ActionDispatcher:
    return ActionDispatcher(
        task_creator,
        notification_sender,
        email_sender,
        integration_syncer,
        script_max_length=2_000,
        script_timeout_seconds=2.0,
    )


@pytest.fixture
def validator() -> GraphValidator:
    return GraphValidator()


@pytest.fixture
def evaluator() -> ConditionEvaluator:
    return ConditionEvaluator()


@pytest.fixture
def executor(evaluator, dispatcher, validator) -> WorkflowExecutor:
    return WorkflowExecutor(evaluator, dispatcher, validator)


@pytest.fixture
def repository() -> InMemoryRepository:
    return InMemoryRepository()


@pytest.fixture
def workflow_service(repository, executor, validator) -> WorkflowService:
    return WorkflowService(repository, executor, validator)


@pytest.fixture
def calculator() -> ScheduleCalculator:
    return ScheduleCalculator()


@pytest.fixture
def runner(repository, calculator, task_creator) -> ScheduledTaskRunner:
    return ScheduledTaskRunner(repository, calculator, task_creator)


@pytest.fixture
def scheduler_service(repository, calculator, runner) -> SchedulerService:
    return SchedulerService(repository, calculator, runner)
