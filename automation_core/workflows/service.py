"""Entry points for storing, updating and executing workflow definitions."""

from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from loguru import logger

from ..errors import WorkflowAlreadyExists, WorkflowInactive, WorkflowNotFound
from ..models.workflow import (
    ExecutionContext,
    WorkflowDefinition,
    WorkflowUpdate,
)
from ..storage.base import Repository
from .engine import WorkflowExecutor
from .validator import GraphValidator


class WorkflowService:
    """Validate-then-persist and load-then-execute around the repository."""

    def __init__(
        self,
        repository: Repository,
        executor: WorkflowExecutor,
        validator: Optional[GraphValidator] = None,
    ) -> None:
        self.repository = repository
        self.executor = executor
        self.validator = validator or executor.validator

    async def validate_and_store(self, workflow: WorkflowDefinition) -> WorkflowDefinition:
        """Store ``workflow`` if it passes structural validation.

        Raises the StructuralError describing the first problem otherwise, and
        WorkflowAlreadyExists rather than replacing a stored workflow.
        """
        self.validator.validate(workflow)
        if await self.repository.get_workflow(workflow.id) is not None:
            raise WorkflowAlreadyExists(workflow.id)
        await self.repository.put_workflow(workflow)
        logger.info(f"Stored workflow: {workflow.name} (ID: {workflow.id})")
        return workflow

    async def get_workflow(self, workflow_id: str) -> WorkflowDefinition:
        workflow = await self.repository.get_workflow(workflow_id)
        if workflow is None:
            raise WorkflowNotFound(workflow_id)
        return workflow

    async def update_workflow(
        self, workflow_id: str, updates: Union[WorkflowUpdate, Dict[str, Any]]
    ) -> WorkflowDefinition:
        """Apply a partial update and re-validate the resulting graph."""
        existing = await self.get_workflow(workflow_id)

        if isinstance(updates, WorkflowUpdate):
            changes = updates.model_dump(exclude_unset=True)
        else:
            changes = WorkflowUpdate.model_validate(updates).model_dump(exclude_unset=True)

        updated = WorkflowDefinition.model_validate(
            {**existing.model_dump(), **changes, "updated_at": datetime.utcnow()}
        )
        self.validator.validate(updated)
        await self.repository.put_workflow(updated)
        logger.info(f"Updated workflow {workflow_id}: {sorted(changes)}")
        return updated

    async def delete_workflow(self, workflow_id: str) -> bool:
        deleted = await self.repository.delete_workflow(workflow_id)
        if deleted:
            logger.info(f"Deleted workflow: {workflow_id}")
        return deleted

    async def execute(
        self, workflow_id: str, initial_data: Optional[Dict[str, Any]] = None
    ) -> ExecutionContext:
        """Load, re-validate and run a stored workflow, then archive the run."""
        workflow = await self.get_workflow(workflow_id)
        if not workflow.is_active:
            raise WorkflowInactive(workflow_id)

        context = await self.executor.execute(workflow, initial_data)
        await self.repository.save_execution(context)
        return context

    async def list_executions(self, workflow_id: str) -> List[ExecutionContext]:
        return await self.repository.list_executions(workflow_id)
