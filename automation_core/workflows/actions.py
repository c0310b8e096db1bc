"""Action step dispatch to task, notification, email, sync and script handlers."""

import ast
import asyncio
import copy
import sys
import threading
from collections.abc import Mapping
from typing import Any, Dict

from loguru import logger

from ..collaborators.base import (
    EmailSender,
    IntegrationSyncer,
    NotificationSender,
    TaskCreator,
)
from ..errors import (
    ActionExecutionFailed,
    MissingIntegrationId,
    NotAnActionStep,
    ScriptTimeout,
    UnknownActionType,
)
from ..models.workflow import (
    ACTION_CONFIG_ADAPTER,
    ACTION_TYPES,
    ActionConfig,
    CustomScriptAction,
    EmailSendAction,
    IntegrationSyncAction,
    NotificationSendAction,
    StepKind,
    TaskCreateAction,
    WorkflowStep,
)

SAFE_BUILTINS: Dict[str, Any] = {
    "abs": abs,
    "all": all,
    "any": any,
    "bool": bool,
    "dict": dict,
    "enumerate": enumerate,
    "float": float,
    "int": int,
    "isinstance": isinstance,
    "len": len,
    "list": list,
    "max": max,
    "min": min,
    "range": range,
    "round": round,
    "set": set,
    "sorted": sorted,
    "str": str,
    "sum": sum,
    "tuple": tuple,
    "zip": zip,
    "True": True,
    "False": False,
    "None": None,
}


def build_task_payload(task_data: Dict[str, Any], data: Dict[str, Any]) -> Dict[str, Any]:
    """Layer defaults under the provided task fields.

    Falsy values fall back to the default. ``project_id`` falls back to the
    one carried in the data bag.
    """
    return {
        "title": task_data.get("title") or "New Task",
        "description": task_data.get("description") or "",
        "assignee": task_data.get("assignee") or "",
        "priority": task_data.get("priority") or "normal",
        "due_date": task_data.get("due_date") or None,
        "project_id": task_data.get("project_id") or data.get("project_id"),
    }


# Frame, code and traceback attributes lead back to the host's globals.
INTROSPECTION_ATTRIBUTES = frozenset(
    {
        "gi_frame",
        "gi_code",
        "gi_yieldfrom",
        "cr_frame",
        "cr_code",
        "cr_await",
        "cr_origin",
        "ag_frame",
        "ag_code",
        "ag_await",
        "f_back",
        "f_builtins",
        "f_code",
        "f_globals",
        "f_locals",
        "f_trace",
        "tb_frame",
        "tb_next",
        "func_closure",
        "func_code",
        "func_globals",
        "co_code",
        "co_consts",
    }
)


def check_script(script: str, max_length: int) -> ast.Module:
    """Parse a custom script and reject constructs that escape the sandbox."""
    if len(script) > max_length:
        raise ValueError(f"Script exceeds {max_length} characters")

    tree = ast.parse(script, mode="exec")
    for node in ast.walk(tree):
        if isinstance(node, (ast.Import, ast.ImportFrom, ast.Global, ast.Nonlocal)):
            raise ValueError(f"Script uses a forbidden statement: {type(node).__name__}")
        if isinstance(node, ast.Name) and node.id.startswith("_"):
            raise ValueError(f"Script references a private name: {node.id}")
        if isinstance(node, ast.Attribute):
            if node.attr.startswith("_") or node.attr in INTROSPECTION_ATTRIBUTES:
                raise ValueError(f"Script references a private attribute: {node.attr}")
        if isinstance(node, ast.Constant) and isinstance(node.value, str) and "__" in node.value:
            raise ValueError(f"Script uses a dunder string: {node.value!r}")
    return tree


class ScriptStopped(BaseException):
    """Raised inside an abandoned script; scripts cannot catch it with ``except Exception``."""


def run_script(tree: ast.Module, data: Dict[str, Any], stop: threading.Event) -> Dict[str, Any]:
    """Execute a checked script in the calling thread.

    Once ``stop`` is set every traced line raises, so an abandoned script
    unwinds instead of holding its worker thread.
    """

    def halt_when_stopped(frame, event, arg):
        if stop.is_set():
            raise ScriptStopped()
        return halt_when_stopped

    namespace: Dict[str, Any] = {
        "__builtins__": SAFE_BUILTINS,
        "data": copy.deepcopy(data),
        "result": {},
    }
    previous_trace = sys.gettrace()
    sys.settrace(halt_when_stopped)
    try:
        exec(compile(tree, "<custom.script>", "exec"), namespace)
    finally:
        sys.settrace(previous_trace)

    result = namespace.get("result")
    if not isinstance(result, Mapping):
        raise TypeError(f"Script result must be a mapping, got {type(result).__name__}")
    return dict(result)


class ActionDispatcher:
    """
    Route action steps to their handlers.

    Every handler returns a mapping that the executor merges into the run's
    data bag. Any failure, including an unrecognized action type, reaches
    the caller only as ``ActionExecutionFailed``.
    """

    def __init__(
        self,
        task_creator: TaskCreator,
        notification_sender: NotificationSender,
        email_sender: EmailSender,
        integration_syncer: IntegrationSyncer,
        script_max_length: int = 10_000,
        script_timeout_seconds: float = 5.0,
    ) -> None:
        self.task_creator = task_creator
        self.notification_sender = notification_sender
        self.email_sender = email_sender
        self.integration_syncer = integration_syncer
        self.script_max_length = script_max_length
        self.script_timeout_seconds = script_timeout_seconds

    async def dispatch(self, step: WorkflowStep, data: Dict[str, Any]) -> Dict[str, Any]:
        if step.kind != StepKind.ACTION:
            raise NotAnActionStep(step.id)

        action_type = step.config.get("action_type")
        logger.debug(f"Dispatching {action_type} for step {step.id}")
        try:
            if action_type not in ACTION_TYPES:
                raise UnknownActionType(action_type)
            action = ACTION_CONFIG_ADAPTER.validate_python(step.config)
            return await self._perform(action, data)
        except Exception as e:
            logger.error(f"Action {action_type} failed in step {step.id}: {e}")
            raise ActionExecutionFailed(action_type, e) from e

    async def _perform(self, action: ActionConfig, data: Dict[str, Any]) -> Dict[str, Any]:
        if isinstance(action, TaskCreateAction):
            return await self._create_task(action, data)
        if isinstance(action, NotificationSendAction):
            return await self._send_notification(action)
        if isinstance(action, EmailSendAction):
            return await self._send_email(action)
        if isinstance(action, IntegrationSyncAction):
            return await self._sync_integration(action)
        if isinstance(action, CustomScriptAction):
            return await self._run_script(action, data)
        raise UnknownActionType(action.action_type)

    async def _create_task(self, action: TaskCreateAction, data: Dict[str, Any]) -> Dict[str, Any]:
        task_data = build_task_payload(action.task_data, data)
        task_id = await self.task_creator.create_task(task_data)
        return {"task_id": task_id, "task_created": True, "task_data": task_data}

    async def _send_notification(self, action: NotificationSendAction) -> Dict[str, Any]:
        notification_data = {
            "recipient": action.recipient,
            "message": action.message,
            "type": action.type,
            "channel": action.channel,
        }
        sent = await self.notification_sender.send_notification(notification_data)
        return {"notification_sent": bool(sent), "notification_data": notification_data}

    async def _send_email(self, action: EmailSendAction) -> Dict[str, Any]:
        email_data = {
            "recipient": action.recipient,
            "subject": action.subject,
            "body": action.body,
            "attachments": action.attachments,
            "cc": action.cc,
            "bcc": action.bcc,
        }
        sent = await self.email_sender.send_email(email_data)
        return {"email_sent": bool(sent), "email_data": email_data}

    async def _sync_integration(self, action: IntegrationSyncAction) -> Dict[str, Any]:
        if not action.integration_id:
            raise MissingIntegrationId()

        result = await self.integration_syncer.sync(action.integration_id)
        return {
            "integration_synced": True,
            "integration_id": action.integration_id,
            "sync_success": result.success,
            "sync_message": result.message,
            "synced_items": result.synced_items,
        }

    async def _run_script(self, action: CustomScriptAction, data: Dict[str, Any]) -> Dict[str, Any]:
        """Run a user script against a private copy of the data bag.

        The script sees ``data`` and writes its output into ``result``. It
        runs in a worker thread so the event loop stays responsive, and is
        stopped after ``script_timeout_seconds`` or when the caller gives up.
        """
        tree = check_script(action.script, self.script_max_length)
        stop = threading.Event()
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(run_script, tree, data, stop),
                timeout=self.script_timeout_seconds,
            )
        except asyncio.TimeoutError:
            raise ScriptTimeout(self.script_timeout_seconds) from None
        finally:
            stop.set()
