"""In-memory implementation of the repository."""

import asyncio
from datetime import datetime
from typing import Dict, List, Optional

from ..models.schedule import ScheduledTask
from ..models.workflow import ExecutionContext, WorkflowDefinition


class InMemoryRepository:
    """Store definitions, tasks and executions in local memory.

    Useful for tests or when no database is configured. Data is not
    persisted across process restarts. Records are deep-copied on the way
    in and out so callers never share mutable state with the store.
    """

    def __init__(self) -> None:
        self._workflows: Dict[str, WorkflowDefinition] = {}
        self._tasks: Dict[str, ScheduledTask] = {}
        self._executions: Dict[str, List[ExecutionContext]] = {}
        self._lock = asyncio.Lock()

    # ------------------------------------------------------------------
    async def get_workflow(self, workflow_id: str) -> Optional[WorkflowDefinition]:
        workflow = self._workflows.get(workflow_id)
        return workflow.model_copy(deep=True) if workflow else None

    async def put_workflow(self, workflow: WorkflowDefinition) -> None:
        async with self._lock:
            self._workflows[workflow.id] = workflow.model_copy(deep=True)

    async def delete_workflow(self, workflow_id: str) -> bool:
        async with self._lock:
            return self._workflows.pop(workflow_id, None) is not None

    async def save_execution(self, context: ExecutionContext) -> None:
        async with self._lock:
            self._executions.setdefault(context.workflow_id, []).append(
                context.model_copy(deep=True)
            )

    async def list_executions(self, workflow_id: str) -> List[ExecutionContext]:
        executions = self._executions.get(workflow_id, [])
        ordered = sorted(executions, key=lambda e: e.started_at, reverse=True)
        return [e.model_copy(deep=True) for e in ordered]

    # ------------------------------------------------------------------
    async def get_scheduled_task(self, task_id: str) -> Optional[ScheduledTask]:
        task = self._tasks.get(task_id)
        return task.model_copy(deep=True) if task else None

    async def put_scheduled_task(self, task: ScheduledTask) -> None:
        async with self._lock:
            self._tasks[task.id] = task.model_copy(deep=True)

    async def delete_scheduled_task(self, task_id: str) -> bool:
        async with self._lock:
            return self._tasks.pop(task_id, None) is not None

    async def list_scheduled_tasks(self) -> List[ScheduledTask]:
        return [task.model_copy(deep=True) for task in self._tasks.values()]

    async def claim_scheduled_run(
        self,
        task_id: str,
        expected_next_run: Optional[datetime],
        last_run: datetime,
        next_run: Optional[datetime],
    ) -> bool:
        async with self._lock:
            task = self._tasks.get(task_id)
            if task is None or task.next_run != expected_next_run:
                return False
            task.last_run = last_run
            task.next_run = next_run
            task.updated_at = datetime.utcnow()
            return True
