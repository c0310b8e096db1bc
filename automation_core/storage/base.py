"""Repository abstraction for workflow and scheduled-task persistence."""

from datetime import datetime
from typing import List, Optional, Protocol

from ..models.schedule import ScheduledTask
from ..models.workflow import ExecutionContext, WorkflowDefinition


class Repository(Protocol):
    """Protocol for persistence backends."""

    async def get_workflow(self, workflow_id: str) -> Optional[WorkflowDefinition]:
        """Return the stored definition or None."""

    async def put_workflow(self, workflow: WorkflowDefinition) -> None:
        """Insert or replace a definition."""

    async def delete_workflow(self, workflow_id: str) -> bool:
        """Remove a definition. Returns False when it did not exist."""

    async def save_execution(self, context: ExecutionContext) -> None:
        """Archive a finished execution."""

    async def list_executions(self, workflow_id: str) -> List[ExecutionContext]:
        """Archived executions of a workflow, newest first."""

    async def get_scheduled_task(self, task_id: str) -> Optional[ScheduledTask]:
        """Return the stored task or None."""

    async def put_scheduled_task(self, task: ScheduledTask) -> None:
        """Insert or replace a task."""

    async def delete_scheduled_task(self, task_id: str) -> bool:
        """Remove a task. Returns False when it did not exist."""

    async def list_scheduled_tasks(self) -> List[ScheduledTask]:
        """All stored tasks, active or not."""

    async def claim_scheduled_run(
        self,
        task_id: str,
        expected_next_run: Optional[datetime],
        last_run: datetime,
        next_run: Optional[datetime],
    ) -> bool:
        """Atomically stamp ``last_run``/``next_run`` on a task.

        The write only happens if the stored ``next_run`` still equals
        ``expected_next_run``. Returns False when the task is missing or
        another runner claimed it first.
        """
