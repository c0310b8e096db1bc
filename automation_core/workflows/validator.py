"""Structural validation of workflow graphs."""

from typing import Dict, List, Optional, Set, Tuple

from loguru import logger

from ..errors import (
    CycleDetected,
    DanglingReference,
    MissingTrigger,
    StructuralError,
    WrongTriggerKind,
)
from ..models.workflow import StepKind, WorkflowDefinition, WorkflowStep


class GraphValidator:
    """
    Check a workflow's structural invariants before it may be stored or run.

    Checks run in order and stop at the first failure:
    1. the trigger step exists and is of kind ``trigger``
    2. every ``next_steps`` entry names an existing step
    3. no cycle is reachable from the trigger step
    """

    def validate(self, workflow: WorkflowDefinition) -> None:
        """Raise the first StructuralError found, or return None if valid."""
        problem = self.find_problem(workflow)
        if problem is not None:
            logger.warning(f"Workflow {workflow.id} rejected: {problem}")
            raise problem

    def is_valid(self, workflow: WorkflowDefinition) -> bool:
        return self.find_problem(workflow) is None

    def find_problem(self, workflow: WorkflowDefinition) -> Optional[StructuralError]:
        """Return the rejection reason instead of raising it."""
        steps = workflow.step_map()

        trigger = steps.get(workflow.trigger_step)
        if trigger is None:
            return MissingTrigger(workflow.trigger_step)
        if trigger.kind != StepKind.TRIGGER:
            return WrongTriggerKind(trigger.id, trigger.kind.value)

        for step in workflow.steps:
            for target in step.next_steps:
                if target not in steps:
                    return DanglingReference(step.id, target)

        back_edge = self._find_back_edge(steps, workflow.trigger_step)
        if back_edge is not None:
            return CycleDetected(*back_edge)

        return None

    def _find_back_edge(
        self, steps: Dict[str, WorkflowStep], start: str
    ) -> Optional[Tuple[str, str]]:
        """Iterative depth-first search from ``start``.

        Each stack frame is a step id plus the index of the next successor
        to explore, so every edge is examined exactly once: O(N + E).
        """
        on_stack: Set[str] = {start}
        visited: Set[str] = set()
        stack: List[Tuple[str, int]] = [(start, 0)]

        while stack:
            step_id, index = stack[-1]
            successors = steps[step_id].next_steps

            if index >= len(successors):
                stack.pop()
                on_stack.discard(step_id)
                visited.add(step_id)
                continue

            stack[-1] = (step_id, index + 1)
            target = successors[index]

            if target in on_stack:
                return step_id, target
            if target in visited:
                continue

            on_stack.add(target)
            stack.append((target, 0))

        return None
