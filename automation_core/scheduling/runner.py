"""Fire scheduled tasks and reschedule them."""

from datetime import datetime
from typing import Optional

from loguru import logger

from ..collaborators.base import TaskCreator
from ..models.schedule import RecurrenceType, ScheduledActionType, ScheduledTask
from ..storage.base import Repository
from ..workflows.actions import build_task_payload
from .calculator import ScheduleCalculator


class ScheduledTaskRunner:
    """
    Execute a scheduled task's action and move it to its next occurrence.

    The task is claimed with a compare-and-swap on ``next_run`` before the
    action runs, so two runners that both see the task as due fire it only
    once. A failing action is logged and does not stop the task from being
    rescheduled.
    """

    def __init__(
        self,
        repository: Repository,
        calculator: ScheduleCalculator,
        task_creator: TaskCreator,
    ) -> None:
        self.repository = repository
        self.calculator = calculator
        self.task_creator = task_creator

    async def fire(
        self,
        task_id: str,
        now: Optional[datetime] = None,
        due_only: bool = False,
    ) -> bool:
        """Fire one task.

        Returns False when the task cannot be loaded, when ``due_only`` is
        set and the task is paused or not yet due, or when another runner
        claimed this occurrence first. Otherwise returns True, even if the
        action itself failed.
        """
        task = await self.repository.get_scheduled_task(task_id)
        if task is None:
            logger.warning(f"Scheduled task not found: {task_id}")
            return False

        now = now or datetime.utcnow()
        if due_only and not self._is_due(task, now):
            return False

        if task.schedule.type == RecurrenceType.ONCE:
            next_run = None
        else:
            next_run = self.calculator.next_run(task.schedule, now)

        claimed = await self.repository.claim_scheduled_run(
            task.id, task.next_run, last_run=now, next_run=next_run
        )
        if not claimed:
            return False

        logger.info(f"Executing scheduled task {task.id} ({task.name}) at {now.isoformat()}")
        try:
            await self._perform(task)
        except Exception:
            logger.exception(f"Scheduled task {task.id} action failed; next run {next_run}")

        return True

    @staticmethod
    def _is_due(task: ScheduledTask, now: datetime) -> bool:
        return task.is_active and task.next_run is not None and task.next_run <= now

    async def _perform(self, task: ScheduledTask) -> None:
        if task.action.type == ScheduledActionType.TASK_CREATE:
            payload = build_task_payload(task.action.params, {})
            created_id = await self.task_creator.create_task(payload)
            logger.info(f"Scheduled task {task.id} created task {created_id}")
            return

        logger.warning(
            f"Scheduled task {task.id}: action type {task.action.type.value} is not supported"
        )
