"""Workflow graph validation and execution."""

from .actions import ActionDispatcher
from .conditions import ConditionEvaluator
from .engine import WorkflowExecutor
from .service import WorkflowService
from .validator import GraphValidator

__all__ = [
    "ActionDispatcher",
    "ConditionEvaluator",
    "GraphValidator",
    "WorkflowExecutor",
    "WorkflowService",
]
