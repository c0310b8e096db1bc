"""Workflow API endpoints for definition management and execution."""

from typing import Any, Dict, List

import yaml
from fastapi import APIRouter, HTTPException, status
from loguru import logger
from pydantic import ValidationError

from ..dependencies import get_workflow_service
from ..errors import (
    StructuralError,
    WorkflowAlreadyExists,
    WorkflowInactive,
    WorkflowNotFound,
)
from ..models.workflow import (
    ExecutionContext,
    WorkflowCreateRequest,
    WorkflowDefinition,
    WorkflowExecuteRequest,
    WorkflowUpdate,
)

router = APIRouter(prefix="/api/v1/automation/workflows", tags=["workflows"])


def structural_detail(error: StructuralError) -> Dict[str, Any]:
    """Surface a rejection verbatim with the offending step id."""
    return {
        "error": type(error).__name__,
        "message": str(error),
        "step_id": error.step_id,
        "target": getattr(error, "target", None),
    }


def parse_definition(definition: Any) -> Dict[str, Any]:
    """Accept a mapping or a YAML/JSON document."""
    if isinstance(definition, str):
        definition = yaml.safe_load(definition)
    if not isinstance(definition, dict):
        raise ValueError("Workflow definition must be a mapping")
    return definition


@router.post(
    "/",
    response_model=WorkflowDefinition,
    status_code=status.HTTP_201_CREATED,
    summary="Create a workflow definition",
)
async def create_workflow(request: WorkflowCreateRequest) -> WorkflowDefinition:
    """
    Create a workflow definition from YAML or JSON.

    Example definition:
    ```yaml
    trigger_step: start
    steps:
      - id: start
        kind: trigger
        config: {trigger_type: task.completed}
        next_steps: [is_urgent]
      - id: is_urgent
        kind: condition
        config: {field: task.priority, operator: equals, value: high}
        next_steps: [notify]
      - id: notify
        kind: action
        config:
          action_type: notification.send
          recipient: lead@example.com
          message: An urgent task was completed
    ```
    """
    service = get_workflow_service()
    try:
        definition = parse_definition(request.definition)
        workflow = WorkflowDefinition.model_validate(
            {
                **definition,
                "name": request.name,
                "description": request.description,
                "created_by": request.created_by,
                "project_id": request.project_id,
            }
        )
        return await service.validate_and_store(workflow)
    except StructuralError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=structural_detail(e))
    except WorkflowAlreadyExists as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except (ValidationError, ValueError, yaml.YAMLError) as e:
        logger.error(f"Failed to create workflow: {e}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid workflow definition: {str(e)}",
        )


@router.get("/{workflow_id}", response_model=WorkflowDefinition)
async def get_workflow(workflow_id: str) -> WorkflowDefinition:
    service = get_workflow_service()
    try:
        return await service.get_workflow(workflow_id)
    except WorkflowNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.patch("/{workflow_id}", response_model=WorkflowDefinition)
async def update_workflow(workflow_id: str, updates: WorkflowUpdate) -> WorkflowDefinition:
    """Update a workflow. Changed steps are re-validated before saving."""
    service = get_workflow_service()
    try:
        return await service.update_workflow(workflow_id, updates)
    except WorkflowNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except StructuralError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=structural_detail(e))
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.delete("/{workflow_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_workflow(workflow_id: str) -> None:
    service = get_workflow_service()
    if not await service.delete_workflow(workflow_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Workflow not found: {workflow_id}",
        )


@router.post(
    "/{workflow_id}/execute",
    response_model=ExecutionContext,
    summary="Execute a workflow",
)
async def execute_workflow(
    workflow_id: str, request: WorkflowExecuteRequest
) -> ExecutionContext:
    """
    Run a workflow to completion against the supplied data.

    A failing step does not produce an error response: the returned
    execution record has ``status=failed`` and the error message.
    """
    service = get_workflow_service()
    try:
        return await service.execute(workflow_id, request.data)
    except WorkflowNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except WorkflowInactive as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except StructuralError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=structural_detail(e))


@router.get("/{workflow_id}/executions", response_model=List[ExecutionContext])
async def list_executions(workflow_id: str, limit: int = 50) -> List[ExecutionContext]:
    """Archived executions of a workflow, newest first."""
    service = get_workflow_service()
    executions = await service.list_executions(workflow_id)
    return executions[:limit]
