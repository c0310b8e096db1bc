"""Scheduled task API endpoints."""

from typing import Any, Dict, List

from fastapi import APIRouter, HTTPException, status
from loguru import logger

from ..dependencies import get_scheduler_service
from ..errors import (
    ScheduleCalculationError,
    ScheduledTaskAlreadyExists,
    ScheduledTaskNotFound,
)
from ..models.schedule import (
    RunDueRequest,
    ScheduledTask,
    ScheduledTaskToggleRequest,
    ScheduledTaskUpdate,
)

router = APIRouter(prefix="/api/v1/automation/schedules", tags=["schedules"])


@router.post(
    "/",
    response_model=ScheduledTask,
    status_code=status.HTTP_201_CREATED,
    summary="Create a scheduled task",
)
async def create_scheduled_task(task: ScheduledTask) -> ScheduledTask:
    """
    Create a scheduled task. ``next_run`` is computed from the schedule.

    Recurrence types:
    - once: at ``time`` today, or tomorrow if that has passed
    - daily: every day at ``time``
    - weekly: on ``days`` (0 = Sunday) at ``time``
    - monthly: on ``date`` at ``time``
    - custom: on the cron expression in ``custom_cron``
    """
    service = get_scheduler_service()
    try:
        return await service.create_scheduled_task(task)
    except ScheduledTaskAlreadyExists as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except (ScheduleCalculationError, ValueError) as e:
        logger.error(f"Failed to create scheduled task: {e}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/", response_model=List[ScheduledTask])
async def list_scheduled_tasks() -> List[ScheduledTask]:
    service = get_scheduler_service()
    return await service.list_scheduled_tasks()


@router.post("/run-due", summary="Fire every due scheduled task")
async def run_due_tasks(request: RunDueRequest) -> Dict[str, Any]:
    service = get_scheduler_service()
    fired = await service.run_due_tasks(request.now)
    return {"total": len(fired), "fired": fired}


@router.get("/{task_id}", response_model=ScheduledTask)
async def get_scheduled_task(task_id: str) -> ScheduledTask:
    service = get_scheduler_service()
    try:
        return await service.get_scheduled_task(task_id)
    except ScheduledTaskNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.patch("/{task_id}", response_model=ScheduledTask)
async def update_scheduled_task(task_id: str, updates: ScheduledTaskUpdate) -> ScheduledTask:
    service = get_scheduler_service()
    try:
        return await service.update_scheduled_task(task_id, updates)
    except ScheduledTaskNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except (ScheduleCalculationError, ValueError) as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.post("/{task_id}/toggle", response_model=ScheduledTask)
async def toggle_scheduled_task(
    task_id: str, request: ScheduledTaskToggleRequest
) -> ScheduledTask:
    """Pause (deactivate) or resume a task without deleting it."""
    service = get_scheduler_service()
    try:
        return await service.toggle_scheduled_task(task_id, request.is_active)
    except ScheduledTaskNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_scheduled_task(task_id: str) -> None:
    service = get_scheduler_service()
    if not await service.delete_scheduled_task(task_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Scheduled task not found: {task_id}",
        )


@router.post("/{task_id}/fire", summary="Fire a scheduled task now")
async def fire_scheduled_task(task_id: str) -> Dict[str, Any]:
    service = get_scheduler_service()
    fired = await service.fire(task_id)
    if not fired:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Scheduled task not found or already claimed: {task_id}",
        )
    return {"task_id": task_id, "fired": True}
