"""Scheduled task lifecycle: create, update, pause, delete and fire."""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from loguru import logger

from ..errors import ScheduledTaskAlreadyExists, ScheduledTaskNotFound
from ..models.schedule import RecurrenceType, ScheduledTask, ScheduledTaskUpdate
from ..storage.base import Repository
from .calculator import ScheduleCalculator
from .runner import ScheduledTaskRunner


def as_naive_utc(moment: datetime) -> datetime:
    """Stored timestamps are naive UTC; convert aware inputs to match."""
    if moment.tzinfo is None:
        return moment
    return moment.astimezone(timezone.utc).replace(tzinfo=None)


class SchedulerService:
    """Keep ``next_run`` derived from the recurrence rule across the task's life."""

    def __init__(
        self,
        repository: Repository,
        calculator: ScheduleCalculator,
        runner: ScheduledTaskRunner,
    ) -> None:
        self.repository = repository
        self.calculator = calculator
        self.runner = runner

    async def create_scheduled_task(self, task: ScheduledTask) -> ScheduledTask:
        if await self.repository.get_scheduled_task(task.id) is not None:
            raise ScheduledTaskAlreadyExists(task.id)

        now = datetime.utcnow()
        created = task.model_copy(
            update={
                "created_at": now,
                "updated_at": now,
                "last_run": None,
                "next_run": self.calculator.next_run(task.schedule, now),
            }
        )
        await self.repository.put_scheduled_task(created)
        logger.info(f"Created scheduled task {created.id}, next run {created.next_run}")
        return created

    async def get_scheduled_task(self, task_id: str) -> ScheduledTask:
        task = await self.repository.get_scheduled_task(task_id)
        if task is None:
            raise ScheduledTaskNotFound(task_id)
        return task

    async def list_scheduled_tasks(self) -> List[ScheduledTask]:
        return await self.repository.list_scheduled_tasks()

    async def update_scheduled_task(
        self, task_id: str, updates: Union[ScheduledTaskUpdate, Dict[str, Any]]
    ) -> ScheduledTask:
        """Apply a partial update; a new schedule recomputes ``next_run``."""
        existing = await self.get_scheduled_task(task_id)

        if isinstance(updates, ScheduledTaskUpdate):
            changes = updates.model_dump(exclude_unset=True)
        else:
            changes = ScheduledTaskUpdate.model_validate(updates).model_dump(exclude_unset=True)

        now = datetime.utcnow()
        updated = ScheduledTask.model_validate(
            {**existing.model_dump(), **changes, "updated_at": now}
        )
        if "schedule" in changes:
            updated.next_run = self.calculator.next_run(updated.schedule, now)

        await self.repository.put_scheduled_task(updated)
        logger.info(f"Updated scheduled task {task_id}: {sorted(changes)}")
        return updated

    async def toggle_scheduled_task(self, task_id: str, is_active: bool) -> ScheduledTask:
        """Pause or resume a task without losing its history.

        Resuming a task whose pending run has already passed moves it to the
        next occurrence instead of firing the missed one. A one-off task that
        has already run stays without a next run.
        """
        task = await self.get_scheduled_task(task_id)
        now = datetime.utcnow()

        task.is_active = is_active
        task.updated_at = now
        if is_active and (task.next_run is None or task.next_run <= now):
            already_ran_once = task.schedule.type == RecurrenceType.ONCE and task.last_run
            if not already_ran_once:
                task.next_run = self.calculator.next_run(task.schedule, now)

        await self.repository.put_scheduled_task(task)
        logger.info(f"{'Activated' if is_active else 'Deactivated'} scheduled task {task_id}")
        return task

    async def delete_scheduled_task(self, task_id: str) -> bool:
        deleted = await self.repository.delete_scheduled_task(task_id)
        if deleted:
            logger.info(f"Deleted scheduled task {task_id}")
        return deleted

    async def fire(self, task_id: str) -> bool:
        return await self.runner.fire(task_id)

    async def run_due_tasks(self, now: Optional[datetime] = None) -> List[str]:
        """Fire every active task whose ``next_run`` has passed.

        Intended to be called from the caller's own timer. Returns the ids of
        the tasks this call fired.
        """
        now = as_naive_utc(now) if now else datetime.utcnow()
        tasks = await self.repository.list_scheduled_tasks()
        due = sorted(
            (t for t in tasks if t.is_active and t.next_run is not None and t.next_run <= now),
            key=lambda t: t.next_run,
        )

        fired = []
        for task in due:
            if await self.runner.fire(task.id, now=now, due_only=True):
                fired.append(task.id)

        if fired:
            logger.info(f"Fired {len(fired)} due scheduled task(s)")
        return fired
