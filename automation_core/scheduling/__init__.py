"""Recurring schedule computation and scheduled task execution."""

from .calculator import CronEvaluator, CroniterEvaluator, ScheduleCalculator
from .runner import ScheduledTaskRunner
from .service import SchedulerService

__all__ = [
    "CronEvaluator",
    "CroniterEvaluator",
    "ScheduleCalculator",
    "ScheduledTaskRunner",
    "SchedulerService",
]
