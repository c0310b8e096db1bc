"""Builders for workflow graphs used across the test suite."""

from typing import Any, Dict, Sequence

from automation_core.models.workflow import StepKind, WorkflowDefinition, WorkflowStep


def trigger(step_id: str, next_steps: Sequence[str] = ()) -> WorkflowStep:
    return WorkflowStep(
        id=step_id,
        name=f"Trigger {step_id}",
        kind=StepKind.TRIGGER,
        config={"trigger_type": "manual"},
        next_steps=list(next_steps),
    )


def condition(
    step_id: str,
    field: str,
    operator: str,
    value: Any = None,
    next_steps: Sequence[str] = (),
) -> WorkflowStep:
    return WorkflowStep(
        id=step_id,
        name=f"Condition {step_id}",
        kind=StepKind.CONDITION,
        config={"field": field, "operator": operator, "value": value},
        next_steps=list(next_steps),
    )


def action(step_id: str, config: Dict[str, Any], next_steps: Sequence[str] = ()) -> WorkflowStep:
    return WorkflowStep(
        id=step_id,
        name=f"Action {step_id}",
        kind=StepKind.ACTION,
        config=config,
        next_steps=list(next_steps),
    )


def script(step_id: str, body: str, next_steps: Sequence[str] = ()) -> WorkflowStep:
    return action(step_id, {"action_type": "custom.script", "script": body}, next_steps)


def workflow(*steps: WorkflowStep, trigger_step: str = "start", **kwargs: Any) -> WorkflowDefinition:
    return WorkflowDefinition(
        id=kwargs.pop("id", "wf-test"),
        name=kwargs.pop("name", "Test Workflow"),
        steps=list(steps),
        trigger_step=trigger_step,
        **kwargs,
    )
