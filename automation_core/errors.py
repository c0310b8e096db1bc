"""Error taxonomy for workflow validation, execution and scheduling."""

from typing import Optional


class AutomationError(Exception):
    """Base class for every error raised by the automation core."""


# -- Structural errors ----------------------------------------------------
# Raised by the graph validator before a workflow is stored or executed.


class StructuralError(AutomationError):
    """A workflow graph violates one of its structural invariants."""

    def __init__(self, message: str, step_id: Optional[str] = None) -> None:
        super().__init__(message)
        self.step_id = step_id


class MissingTrigger(StructuralError):
    """The designated trigger step does not exist."""

    def __init__(self, step_id: str) -> None:
        super().__init__(f"Trigger step '{step_id}' not found in workflow steps", step_id)


class WrongTriggerKind(StructuralError):
    """The designated trigger step is not of kind ``trigger``."""

    def __init__(self, step_id: str, kind: str) -> None:
        super().__init__(
            f"Trigger step '{step_id}' must be of kind 'trigger', got '{kind}'", step_id
        )
        self.kind = kind


class DanglingReference(StructuralError):
    """A step lists a successor id that does not exist."""

    def __init__(self, step_id: str, target: str) -> None:
        super().__init__(
            f"Step '{step_id}' references non-existent next step '{target}'", step_id
        )
        self.target = target


class CycleDetected(StructuralError):
    """The graph reachable from the trigger contains a back edge."""

    def __init__(self, step_id: str, target: str) -> None:
        super().__init__(
            f"Workflow contains a cycle: back edge '{step_id}' -> '{target}'", step_id
        )
        self.target = target


# -- Evaluation errors ----------------------------------------------------


class EvaluationError(AutomationError):
    """A condition step could not be evaluated."""


class InvalidOperator(EvaluationError):
    def __init__(self, operator: object) -> None:
        super().__init__(f"Unknown operator: {operator}")
        self.operator = operator


class NotAConditionStep(EvaluationError):
    def __init__(self, step_id: str) -> None:
        super().__init__(f"Cannot evaluate non-condition step '{step_id}'")
        self.step_id = step_id


# -- Action errors --------------------------------------------------------


class ActionError(AutomationError):
    """An action step could not be dispatched."""


class UnknownActionType(ActionError):
    def __init__(self, action_type: object) -> None:
        super().__init__(f"Unknown action type: {action_type}")
        self.action_type = action_type


class NotAnActionStep(ActionError):
    def __init__(self, step_id: str) -> None:
        super().__init__(f"Cannot execute non-action step '{step_id}'")
        self.step_id = step_id


class MissingIntegrationId(ActionError):
    def __init__(self) -> None:
        super().__init__("Integration ID is required for integration sync")


class ScriptTimeout(ActionError):
    def __init__(self, timeout_seconds: float) -> None:
        super().__init__(f"Script did not finish within {timeout_seconds} seconds")
        self.timeout_seconds = timeout_seconds


class ActionExecutionFailed(ActionError):
    """Wraps any failure raised while performing an action.

    The original exception is kept on ``cause`` (and chained as
    ``__cause__`` by the dispatcher) for diagnostics.
    """

    def __init__(self, action_type: str, cause: BaseException) -> None:
        super().__init__(f"Failed to execute {action_type} action: {cause}")
        self.action_type = action_type
        self.cause = cause


# -- Lookup and scheduling errors -----------------------------------------


class WorkflowNotFound(AutomationError):
    def __init__(self, workflow_id: str) -> None:
        super().__init__(f"Workflow not found: {workflow_id}")
        self.workflow_id = workflow_id


class WorkflowAlreadyExists(AutomationError):
    def __init__(self, workflow_id: str) -> None:
        super().__init__(f"Workflow already exists: {workflow_id}")
        self.workflow_id = workflow_id


class WorkflowInactive(AutomationError):
    def __init__(self, workflow_id: str) -> None:
        super().__init__(f"Workflow is not active: {workflow_id}")
        self.workflow_id = workflow_id


class ScheduledTaskNotFound(AutomationError):
    def __init__(self, task_id: str) -> None:
        super().__init__(f"Scheduled task not found: {task_id}")
        self.task_id = task_id


class ScheduledTaskAlreadyExists(AutomationError):
    def __init__(self, task_id: str) -> None:
        super().__init__(f"Scheduled task already exists: {task_id}")
        self.task_id = task_id


class ScheduleCalculationError(AutomationError):
    """A recurrence rule produced a timestamp that is not in the future."""
