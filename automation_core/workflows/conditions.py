"""Condition step evaluation against an execution's data bag."""

from collections.abc import Mapping, Sequence
from numbers import Number
from typing import Any, Dict

from loguru import logger

from ..errors import InvalidOperator, NotAConditionStep
from ..models.workflow import ConditionConfig, ConditionOperator, StepKind, WorkflowStep


def resolve_field(data: Dict[str, Any], path: str) -> Any:
    """Resolve a dotted path such as ``task.assignee.id`` against ``data``.

    A missing key at any depth yields None instead of raising. Numeric
    segments index into lists.
    """
    current: Any = data
    for segment in path.split("."):
        if isinstance(current, Mapping):
            current = current.get(segment)
        elif (
            isinstance(current, Sequence)
            and not isinstance(current, str)
            and segment.isdigit()
            and int(segment) < len(current)
        ):
            current = current[int(segment)]
        else:
            return None
        if current is None:
            return None
    return current


def strict_equals(left: Any, right: Any) -> bool:
    """Equality without cross-type coercion.

    Numbers compare by value (``1 == 1.0``) but booleans are never equal
    to numbers and strings are never equal to numbers.
    """
    if isinstance(left, bool) or isinstance(right, bool):
        return type(left) is type(right) and left == right
    if isinstance(left, Number) and isinstance(right, Number):
        return left == right
    return type(left) is type(right) and left == right


def is_empty(value: Any) -> bool:
    return value is None or value == ""


class ConditionEvaluator:
    """Apply a condition step's comparison to the data bag."""

    def evaluate(self, step: WorkflowStep, data: Dict[str, Any]) -> bool:
        if step.kind != StepKind.CONDITION:
            raise NotAConditionStep(step.id)

        config = ConditionConfig.model_validate(step.config)
        try:
            operator = ConditionOperator(config.operator)
        except ValueError:
            raise InvalidOperator(config.operator) from None

        actual = resolve_field(data, config.field)
        result = self._apply(operator, actual, config.value)
        logger.debug(
            f"Condition {step.id}: {config.field} {operator.value} {config.value!r} "
            f"(actual={actual!r}) -> {result}"
        )
        return result

    def _apply(self, operator: ConditionOperator, actual: Any, expected: Any) -> bool:
        if operator == ConditionOperator.EQUALS:
            return strict_equals(actual, expected)
        if operator == ConditionOperator.NOT_EQUALS:
            return not strict_equals(actual, expected)
        if operator == ConditionOperator.CONTAINS:
            return str(expected) in str(actual)
        if operator == ConditionOperator.GREATER_THAN:
            try:
                return bool(actual > expected)
            except TypeError:
                return False
        if operator == ConditionOperator.LESS_THAN:
            try:
                return bool(actual < expected)
            except TypeError:
                return False
        if operator == ConditionOperator.IS_EMPTY:
            return is_empty(actual)
        if operator == ConditionOperator.IS_NOT_EMPTY:
            return not is_empty(actual)
        raise InvalidOperator(operator)
