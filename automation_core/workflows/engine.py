"""Workflow execution engine walking a validated step graph."""

import copy
from datetime import datetime
from typing import Any, Dict, List, Optional

from loguru import logger

from ..models.workflow import (
    ExecutionContext,
    ExecutionStatus,
    StepKind,
    WorkflowDefinition,
    WorkflowStep,
)
from .actions import ActionDispatcher
from .conditions import ConditionEvaluator
from .validator import GraphValidator


class WorkflowExecutor:
    """
    Run a workflow from its trigger step to every reachable end.

    Behaviour per step kind:
    - trigger: no-op, continue to all successors
    - condition: continue to ``next_steps[0]`` when true, ``next_steps[1]``
      when false, or stop the path when that entry is missing
    - action: dispatch, merge the output into the data bag, continue to all
      successors

    The graph is walked depth-first with an explicit stack, successors in
    list order. A step reachable along several paths runs once per path.
    Every call owns its own ExecutionContext, so concurrent runs of the same
    workflow never share mutable state.
    """

    def __init__(
        self,
        evaluator: ConditionEvaluator,
        dispatcher: ActionDispatcher,
        validator: Optional[GraphValidator] = None,
    ) -> None:
        self.evaluator = evaluator
        self.dispatcher = dispatcher
        self.validator = validator or GraphValidator()

    async def execute(
        self,
        workflow: WorkflowDefinition,
        initial_data: Optional[Dict[str, Any]] = None,
    ) -> ExecutionContext:
        """Execute ``workflow`` and return its execution record.

        Structural errors are raised before the run starts. Once the run has
        started nothing is raised: failures end the run with
        ``status=failed`` and the error message recorded. Side effects already
        performed are not rolled back.
        """
        self.validator.validate(workflow)

        context = ExecutionContext(
            workflow_id=workflow.id,
            data=copy.deepcopy(initial_data or {}),
        )
        logger.info(f"Starting execution {context.execution_id} of workflow {workflow.id}")

        try:
            await self._walk(workflow, context)
            context.status = ExecutionStatus.COMPLETED
            logger.info(f"Workflow execution completed: {context.execution_id}")
        except Exception as e:
            context.status = ExecutionStatus.FAILED
            context.error = str(e)
            logger.error(
                f"Workflow execution failed: {context.execution_id} "
                f"at step {context.current_step} - {e}"
            )
        finally:
            context.completed_at = datetime.utcnow()

        return context

    async def _walk(self, workflow: WorkflowDefinition, context: ExecutionContext) -> None:
        steps = workflow.step_map()
        pending: List[str] = [workflow.trigger_step]

        while pending:
            step_id = pending.pop()
            step = steps.get(step_id)
            if step is None:
                raise ValueError(f"Step not found: {step_id}")

            context.current_step = step.id
            context.steps_executed.append(step.id)

            successors = await self._execute_step(step, context)
            # Reversed so the first successor is popped first.
            pending.extend(reversed(successors))

    async def _execute_step(self, step: WorkflowStep, context: ExecutionContext) -> List[str]:
        """Execute a single step and return the successors to visit."""
        logger.debug(f"Executing step: {step.name or step.id} (ID: {step.id}, kind: {step.kind.value})")

        if step.kind == StepKind.TRIGGER:
            return list(step.next_steps)

        if step.kind == StepKind.CONDITION:
            branch = 0 if self.evaluator.evaluate(step, context.data) else 1
            if branch < len(step.next_steps):
                return [step.next_steps[branch]]
            logger.debug(f"Condition {step.id} has no branch {branch}; path ends")
            return []

        if step.kind == StepKind.ACTION:
            output = await self.dispatcher.dispatch(step, context.data)
            context.data.update(output)
            return list(step.next_steps)

        raise ValueError(f"Unknown step kind: {step.kind}")
