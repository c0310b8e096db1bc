"""Scheduled task and recurrence rule models."""

import re
import uuid
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field, field_validator, model_validator

TIME_PATTERN = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)$")


class RecurrenceType(str, Enum):
    """How often a scheduled task fires."""

    ONCE = "once"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    CUSTOM = "custom"


class ScheduledActionType(str, Enum):
    """Actions a scheduled task can be configured with."""

    TASK_CREATE = "task.create"
    NOTIFICATION_SEND = "notification.send"
    EMAIL_SEND = "email.send"
    WORKFLOW_EXECUTE = "workflow.execute"
    CUSTOM = "custom"


class RecurrenceRule(BaseModel):
    """Recurrence configuration of a scheduled task.

    ``days`` uses 0 for Sunday through 6 for Saturday. ``time`` is a
    24-hour ``HH:MM`` clock time.
    """

    type: RecurrenceType
    time: Optional[str] = None
    days: Optional[List[int]] = None
    date: Optional[int] = Field(None, ge=1, le=31)
    custom_cron: Optional[str] = None

    @field_validator("time")
    @classmethod
    def validate_time(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not TIME_PATTERN.match(v):
            raise ValueError(f"Time must be in HH:MM format, got '{v}'")
        return v

    @field_validator("days")
    @classmethod
    def validate_days(cls, v: Optional[List[int]]) -> Optional[List[int]]:
        if v is not None:
            invalid = [day for day in v if day < 0 or day > 6]
            if invalid:
                raise ValueError(f"Weekdays must be between 0 and 6, got {invalid}")
        return v

    @model_validator(mode="after")
    def validate_required_fields(self) -> "RecurrenceRule":
        """Ensure each recurrence type carries what it needs to compute a run."""
        if self.type == RecurrenceType.WEEKLY and not self.days:
            raise ValueError("Weekly schedules require at least one day")
        if self.type == RecurrenceType.MONTHLY and self.date is None:
            raise ValueError("Monthly schedules require a date")
        if self.type == RecurrenceType.CUSTOM and not (self.custom_cron or "").strip():
            raise ValueError("Custom schedules require a cron expression")
        return self

    def clock_time(self) -> Optional[Tuple[int, int]]:
        """Return ``(hours, minutes)`` or None when no time is set."""
        if self.time is None:
            return None
        hours, minutes = self.time.split(":")
        return int(hours), int(minutes)


class ScheduledAction(BaseModel):
    type: ScheduledActionType
    params: Dict[str, Any] = Field(default_factory=dict)


class ScheduledTask(BaseModel):
    """A task that fires an action according to a recurrence rule."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    created_by: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
    schedule: RecurrenceRule
    action: ScheduledAction
    is_active: bool = True
    last_run: Optional[datetime] = None
    next_run: Optional[datetime] = None


class ScheduledTaskUpdate(BaseModel):
    """Partial update of a scheduled task. Unset fields are left alone."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    schedule: Optional[RecurrenceRule] = None
    action: Optional[ScheduledAction] = None
    is_active: Optional[bool] = None


class ScheduledTaskToggleRequest(BaseModel):
    is_active: bool


class RunDueRequest(BaseModel):
    now: Optional[datetime] = None
