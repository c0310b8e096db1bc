"""Data models package."""

from .schedule import (
    RecurrenceRule,
    RecurrenceType,
    RunDueRequest,
    ScheduledAction,
    ScheduledActionType,
    ScheduledTask,
    ScheduledTaskToggleRequest,
    ScheduledTaskUpdate,
)
from .workflow import (
    ACTION_TYPES,
    ActionConfig,
    ConditionConfig,
    ConditionOperator,
    CustomScriptAction,
    EmailSendAction,
    ExecutionContext,
    ExecutionStatus,
    IntegrationSyncAction,
    NotificationSendAction,
    StepKind,
    TaskCreateAction,
    WorkflowCreateRequest,
    WorkflowDefinition,
    WorkflowExecuteRequest,
    WorkflowStep,
    WorkflowUpdate,
)

__all__ = [
    "ACTION_TYPES",
    "ActionConfig",
    "ConditionConfig",
    "ConditionOperator",
    "CustomScriptAction",
    "EmailSendAction",
    "ExecutionContext",
    "ExecutionStatus",
    "IntegrationSyncAction",
    "NotificationSendAction",
    "StepKind",
    "TaskCreateAction",
    "WorkflowCreateRequest",
    "WorkflowDefinition",
    "WorkflowExecuteRequest",
    "WorkflowStep",
    "WorkflowUpdate",
    "RecurrenceRule",
    "RecurrenceType",
    "RunDueRequest",
    "ScheduledAction",
    "ScheduledActionType",
    "ScheduledTask",
    "ScheduledTaskToggleRequest",
    "ScheduledTaskUpdate",
]
