"""Tests for the scheduled task runner and scheduler service."""

import asyncio
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from automation_core.errors import ScheduledTaskAlreadyExists, ScheduledTaskNotFound
from automation_core.models.schedule import (
    RecurrenceRule,
    ScheduledAction,
    ScheduledTask,
    ScheduledTaskUpdate,
)

NOW = datetime(2024, 1, 2, 10, 0)


def make_task(task_id="sched-1", schedule=None, action=None, **kwargs):
    return ScheduledTask(
        id=task_id,
        name=kwargs.pop("name", "Daily standup"),
        schedule=schedule or RecurrenceRule(type="daily", time="09:00"),
        action=action
        or ScheduledAction(type="task.create", params={"title": "Standup notes"}),
        **kwargs,
    )


@pytest.mark.asyncio
class TestScheduledTaskRunner:
    """Test suite for ScheduledTaskRunner."""

    async def test_missing_task(self, runner):
        assert await runner.fire("ghost", now=NOW) is False

    async def test_recurring_task_fires_and_reschedules(self, runner, repository, task_creator):
        await repository.put_scheduled_task(make_task(next_run=NOW - timedelta(hours=1)))

        assert await runner.fire("sched-1", now=NOW) is True

        stored = await repository.get_scheduled_task("sched-1")
        assert stored.last_run == NOW
        assert stored.next_run == datetime(2024, 1, 3, 9, 0)
        assert [t["title"] for t in task_creator.tasks.values()] == ["Standup notes"]

    async def test_created_task_gets_defaults(self, runner, repository, task_creator):
        await repository.put_scheduled_task(make_task(next_run=NOW))

        await runner.fire("sched-1", now=NOW)

        (payload,) = task_creator.tasks.values()
        assert payload["priority"] == "normal"
        assert payload["project_id"] is None

    async def test_once_task_clears_next_run(self, runner, repository):
        task = make_task(schedule=RecurrenceRule(type="once", time="09:00"), next_run=NOW)
        await repository.put_scheduled_task(task)

        assert await runner.fire("sched-1", now=NOW) is True

        stored = await repository.get_scheduled_task("sched-1")
        assert stored.next_run is None
        assert stored.last_run == NOW
        assert stored.is_active is True

    async def test_action_failure_still_reschedules(self, runner, repository, task_creator):
        task_creator.create_task = AsyncMock(side_effect=RuntimeError("tasks service down"))
        await repository.put_scheduled_task(make_task(next_run=NOW))

        assert await runner.fire("sched-1", now=NOW) is True

        stored = await repository.get_scheduled_task("sched-1")
        assert stored.next_run == datetime(2024, 1, 3, 9, 0)

    async def test_unsupported_action_type_is_skipped(self, runner, repository, task_creator):
        task = make_task(
            action=ScheduledAction(type="email.send", params={"recipient": "a@example.com"}),
            next_run=NOW,
        )
        await repository.put_scheduled_task(task)

        assert await runner.fire("sched-1", now=NOW) is True
        assert task_creator.tasks == {}

    async def test_due_only_skips_future_and_paused(self, runner, repository):
        await repository.put_scheduled_task(make_task("future", next_run=NOW + timedelta(minutes=5)))
        await repository.put_scheduled_task(make_task("paused", next_run=NOW, is_active=False))

        assert await runner.fire("future", now=NOW, due_only=True) is False
        assert await runner.fire("paused", now=NOW, due_only=True) is False
        assert (await repository.get_scheduled_task("future")).last_run is None

    async def test_explicit_fire_ignores_pause(self, runner, repository):
        await repository.put_scheduled_task(make_task(next_run=NOW, is_active=False))

        assert await runner.fire("sched-1", now=NOW) is True

    async def test_lost_claim_does_not_fire(self, runner, repository, task_creator):
        await repository.put_scheduled_task(make_task(next_run=NOW))
        repository.claim_scheduled_run = AsyncMock(return_value=False)

        assert await runner.fire("sched-1", now=NOW) is False
        assert task_creator.tasks == {}

    async def test_concurrent_fires_claim_once(self, runner, repository, task_creator):
        await repository.put_scheduled_task(make_task(next_run=NOW))

        results = await asyncio.gather(
            *(runner.fire("sched-1", now=NOW, due_only=True) for _ in range(3))
        )

        assert sorted(results) == [False, False, True]
        assert len(task_creator.tasks) == 1


@pytest.mark.asyncio
class TestSchedulerService:
    """Test suite for SchedulerService."""

    async def test_create_computes_next_run(self, scheduler_service):
        created = await scheduler_service.create_scheduled_task(make_task())

        assert created.next_run is not None
        assert created.next_run > created.created_at
        assert (created.next_run.hour, created.next_run.minute) == (9, 0)
        assert created.last_run is None

    async def test_create_ignores_client_run_fields(self, scheduler_service):
        task = make_task(last_run=NOW, next_run=NOW)

        created = await scheduler_service.create_scheduled_task(task)

        assert created.last_run is None
        assert created.next_run != NOW

    async def test_create_does_not_replace_existing_task(self, scheduler_service, repository):
        await scheduler_service.create_scheduled_task(make_task("t1", name="first"))
        assert await scheduler_service.fire("t1")

        with pytest.raises(ScheduledTaskAlreadyExists):
            await scheduler_service.create_scheduled_task(make_task("t1", name="second"))

        stored = await repository.get_scheduled_task("t1")
        assert stored.name == "first"
        assert stored.last_run is not None

    async def test_get_and_list(self, scheduler_service):
        await scheduler_service.create_scheduled_task(make_task("a"))
        await scheduler_service.create_scheduled_task(make_task("b"))

        assert (await scheduler_service.get_scheduled_task("a")).id == "a"
        assert {t.id for t in await scheduler_service.list_scheduled_tasks()} == {"a", "b"}

    async def test_get_missing(self, scheduler_service):
        with pytest.raises(ScheduledTaskNotFound):
            await scheduler_service.get_scheduled_task("ghost")

    async def test_update_schedule_recomputes_next_run(self, scheduler_service):
        await scheduler_service.create_scheduled_task(make_task())

        updated = await scheduler_service.update_scheduled_task(
            "sched-1", ScheduledTaskUpdate(schedule=RecurrenceRule(type="daily", time="17:45"))
        )

        assert (updated.next_run.hour, updated.next_run.minute) == (17, 45)

    async def test_update_without_schedule_keeps_next_run(self, scheduler_service):
        created = await scheduler_service.create_scheduled_task(make_task())

        updated = await scheduler_service.update_scheduled_task("sched-1", {"name": "Renamed"})

        assert updated.name == "Renamed"
        assert updated.next_run == created.next_run

    async def test_update_missing(self, scheduler_service):
        with pytest.raises(ScheduledTaskNotFound):
            await scheduler_service.update_scheduled_task("ghost", {"name": "x"})

    async def test_pause_keeps_history(self, scheduler_service, repository):
        await repository.put_scheduled_task(make_task(last_run=NOW, next_run=NOW + timedelta(days=1)))

        paused = await scheduler_service.toggle_scheduled_task("sched-1", False)

        assert paused.is_active is False
        assert paused.last_run == NOW
        assert paused.next_run == NOW + timedelta(days=1)

    async def test_resume_recomputes_stale_next_run(self, scheduler_service, repository):
        stale = datetime(2020, 1, 1, 9, 0)
        await repository.put_scheduled_task(make_task(is_active=False, next_run=stale))

        resumed = await scheduler_service.toggle_scheduled_task("sched-1", True)

        assert resumed.is_active is True
        assert resumed.next_run > datetime.utcnow()

    async def test_resume_once_task_that_ran_stays_finished(self, scheduler_service, repository):
        task = make_task(
            schedule=RecurrenceRule(type="once", time="09:00"),
            is_active=False,
            last_run=NOW,
            next_run=None,
        )
        await repository.put_scheduled_task(task)

        resumed = await scheduler_service.toggle_scheduled_task("sched-1", True)

        assert resumed.next_run is None

    async def test_delete(self, scheduler_service):
        await scheduler_service.create_scheduled_task(make_task())

        assert await scheduler_service.delete_scheduled_task("sched-1") is True
        assert await scheduler_service.delete_scheduled_task("sched-1") is False

    async def test_run_due_tasks_fires_only_due_active(self, scheduler_service, repository, task_creator):
        await repository.put_scheduled_task(make_task("late", next_run=NOW - timedelta(hours=2)))
        await repository.put_scheduled_task(make_task("due", next_run=NOW))
        await repository.put_scheduled_task(make_task("future", next_run=NOW + timedelta(hours=1)))
        await repository.put_scheduled_task(make_task("paused", next_run=NOW, is_active=False))

        fired = await scheduler_service.run_due_tasks(NOW)

        assert fired == ["late", "due"]
        assert len(task_creator.tasks) == 2
        assert (await repository.get_scheduled_task("due")).last_run == NOW

    async def test_run_due_tasks_twice_fires_once(self, scheduler_service, repository):
        await repository.put_scheduled_task(make_task(next_run=NOW))

        assert await scheduler_service.run_due_tasks(NOW) == ["sched-1"]
        assert await scheduler_service.run_due_tasks(NOW) == []

    async def test_run_due_tasks_accepts_aware_now(self, scheduler_service, repository):
        await repository.put_scheduled_task(make_task(next_run=NOW))

        fired = await scheduler_service.run_due_tasks(NOW.replace(tzinfo=timezone.utc))

        assert fired == ["sched-1"]
        assert (await repository.get_scheduled_task("sched-1")).last_run == NOW

    async def test_fire_delegates_to_runner(self, scheduler_service, repository):
        await repository.put_scheduled_task(make_task(next_run=NOW))

        assert await scheduler_service.fire("sched-1") is True
        assert await scheduler_service.fire("ghost") is False
