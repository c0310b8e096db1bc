"""Workflow graph models, action configs and execution records."""

import uuid
from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter, field_validator


class StepKind(str, Enum):
    """Kinds of nodes in a workflow graph."""

    TRIGGER = "trigger"
    CONDITION = "condition"
    ACTION = "action"


class ExecutionStatus(str, Enum):
    """Terminal and non-terminal states of a single workflow run."""

    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class ConditionOperator(str, Enum):
    """Comparison operators supported by condition steps."""

    EQUALS = "equals"
    NOT_EQUALS = "notEquals"
    CONTAINS = "contains"
    GREATER_THAN = "greaterThan"
    LESS_THAN = "lessThan"
    IS_EMPTY = "isEmpty"
    IS_NOT_EMPTY = "isNotEmpty"


class ConditionConfig(BaseModel):
    """Config of a condition step.

    ``operator`` stays a plain string so an unsupported value surfaces as
    ``InvalidOperator`` from the evaluator rather than as a parse error.
    """

    field: str = Field(..., min_length=1, description="Dotted path into the data bag")
    operator: str
    value: Any = None
    condition_type: Optional[str] = None


class TaskCreateAction(BaseModel):
    action_type: Literal["task.create"] = "task.create"
    task_data: Dict[str, Any] = Field(default_factory=dict)


class NotificationSendAction(BaseModel):
    action_type: Literal["notification.send"] = "notification.send"
    recipient: Optional[str] = None
    message: Optional[str] = None
    type: str = "info"
    channel: str = "app"


class EmailSendAction(BaseModel):
    action_type: Literal["email.send"] = "email.send"
    recipient: Optional[str] = None
    subject: Optional[str] = None
    body: Optional[str] = None
    attachments: List[Any] = Field(default_factory=list)
    cc: List[str] = Field(default_factory=list)
    bcc: List[str] = Field(default_factory=list)


class IntegrationSyncAction(BaseModel):
    action_type: Literal["integration.sync"] = "integration.sync"
    integration_id: Optional[str] = None


class CustomScriptAction(BaseModel):
    action_type: Literal["custom.script"] = "custom.script"
    script: str = Field(..., min_length=1)


ActionConfig = Annotated[
    Union[
        TaskCreateAction,
        NotificationSendAction,
        EmailSendAction,
        IntegrationSyncAction,
        CustomScriptAction,
    ],
    Field(discriminator="action_type"),
]

ACTION_CONFIG_ADAPTER: TypeAdapter = TypeAdapter(ActionConfig)

ACTION_TYPES = (
    "task.create",
    "notification.send",
    "email.send",
    "integration.sync",
    "custom.script",
)


class WorkflowStep(BaseModel):
    """A single node in a workflow graph.

    For condition steps ``next_steps[0]`` is the branch taken when the
    condition holds and ``next_steps[1]`` the branch taken when it does not.
    """

    id: str = Field(..., min_length=1, description="Unique step identifier")
    name: str = ""
    description: str = ""
    kind: StepKind
    config: Dict[str, Any] = Field(default_factory=dict)
    next_steps: List[str] = Field(default_factory=list)


class WorkflowDefinition(BaseModel):
    """A trigger -> condition -> action graph owned by its creator."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str = Field(..., min_length=1, max_length=255)
    description: str = ""
    created_by: Optional[str] = None
    project_id: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
    is_active: bool = True
    steps: List[WorkflowStep] = Field(..., min_length=1)
    trigger_step: str = Field(..., description="Id of the entry step")

    @field_validator("steps")
    @classmethod
    def validate_unique_step_ids(cls, v: List[WorkflowStep]) -> List[WorkflowStep]:
        """Step ids must identify exactly one step."""
        seen = set()
        for step in v:
            if step.id in seen:
                raise ValueError(f"Duplicate step id: {step.id}")
            seen.add(step.id)
        return v

    def step_map(self) -> Dict[str, WorkflowStep]:
        return {step.id: step for step in self.steps}


class ExecutionContext(BaseModel):
    """Mutable record of one workflow run."""

    execution_id: str = Field(default_factory=lambda: f"exec-{uuid.uuid4()}")
    workflow_id: str
    started_at: datetime = Field(default_factory=datetime.utcnow)
    completed_at: Optional[datetime] = None
    status: ExecutionStatus = ExecutionStatus.RUNNING
    current_step: Optional[str] = None
    data: Dict[str, Any] = Field(default_factory=dict)
    error: Optional[str] = None
    steps_executed: List[str] = Field(default_factory=list)


class WorkflowUpdate(BaseModel):
    """Partial update of a stored workflow definition."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    is_active: Optional[bool] = None
    steps: Optional[List[WorkflowStep]] = Field(None, min_length=1)
    trigger_step: Optional[str] = None


class WorkflowCreateRequest(BaseModel):
    """API request for creating a workflow from a JSON or YAML definition."""

    name: str = Field(..., min_length=1, max_length=255)
    description: str = Field("", max_length=1000)
    created_by: Optional[str] = None
    project_id: Optional[str] = None
    definition: Union[Dict[str, Any], str] = Field(
        ..., description="Workflow definition as a mapping or YAML document"
    )


class WorkflowExecuteRequest(BaseModel):
    """API request for executing a workflow."""

    data: Dict[str, Any] = Field(default_factory=dict)
