"""Tests for condition evaluation and field resolution."""

import pytest

from automation_core.errors import InvalidOperator, NotAConditionStep
from automation_core.workflows.conditions import resolve_field, strict_equals
from helpers import action, condition


@pytest.mark.unit
class TestResolveField:
    def test_top_level_key(self):
        assert resolve_field({"status": "done"}, "status") == "done"

    def test_dotted_path(self):
        data = {"task": {"assignee": {"id": "u-1"}}}

        assert resolve_field(data, "task.assignee.id") == "u-1"

    def test_missing_intermediate_key_is_none(self):
        assert resolve_field({"task": {}}, "task.assignee.id") is None
        assert resolve_field({}, "task.assignee") is None

    def test_indexing_into_scalar_is_none(self):
        assert resolve_field({"task": "plain"}, "task.title") is None

    def test_list_index_segment(self):
        data = {"tasks": [{"title": "first"}, {"title": "second"}]}

        assert resolve_field(data, "tasks.1.title") == "second"
        assert resolve_field(data, "tasks.5.title") is None

    def test_falsy_values_are_returned(self):
        assert resolve_field({"count": 0}, "count") == 0
        assert resolve_field({"flag": False}, "flag") is False


@pytest.mark.unit
class TestStrictEquals:
    def test_same_type_values(self):
        assert strict_equals("done", "done")
        assert strict_equals(3, 3.0)

    def test_no_cross_type_coercion(self):
        assert not strict_equals(1, "1")
        assert not strict_equals(True, 1)
        assert not strict_equals(None, "")


@pytest.mark.unit
class TestConditionEvaluator:
    """Test suite for ConditionEvaluator."""

    def test_equals_true_and_false(self, evaluator):
        step = condition("c", "status", "equals", "done")

        assert evaluator.evaluate(step, {"status": "done"}) is True
        assert evaluator.evaluate(step, {"status": "open"}) is False

    def test_absent_field(self, evaluator):
        """An absent field is empty and equal to nothing."""
        assert evaluator.evaluate(condition("c", "status", "isEmpty"), {}) is True
        assert evaluator.evaluate(condition("c", "status", "equals", "done"), {}) is False

    def test_not_equals(self, evaluator):
        step = condition("c", "priority", "notEquals", "high")

        assert evaluator.evaluate(step, {"priority": "low"}) is True
        assert evaluator.evaluate(step, {"priority": "high"}) is False

    def test_contains_coerces_to_string(self, evaluator):
        step = condition("c", "ticket", "contains", 42)

        assert evaluator.evaluate(step, {"ticket": "BUG-4242"}) is True
        assert evaluator.evaluate(step, {"ticket": 1425}) is True
        assert evaluator.evaluate(step, {"ticket": "BUG-1"}) is False

    def test_greater_and_less_than(self, evaluator):
        assert evaluator.evaluate(condition("c", "count", "greaterThan", 10), {"count": 15}) is True
        assert evaluator.evaluate(condition("c", "count", "greaterThan", 10), {"count": 5}) is False
        assert evaluator.evaluate(condition("c", "count", "lessThan", 10), {"count": 5}) is True

    def test_ordering_missing_value_is_false(self, evaluator):
        assert evaluator.evaluate(condition("c", "count", "greaterThan", 10), {}) is False
        assert evaluator.evaluate(condition("c", "count", "lessThan", 10), {}) is False

    @pytest.mark.parametrize(
        "value,expected",
        [(None, True), ("", True), ("x", False), (0, False), ([], False)],
    )
    def test_is_empty(self, evaluator, value, expected):
        assert evaluator.evaluate(condition("c", "v", "isEmpty"), {"v": value}) is expected
        assert evaluator.evaluate(condition("c", "v", "isNotEmpty"), {"v": value}) is not expected

    def test_nested_field(self, evaluator):
        step = condition("c", "project.status", "equals", "active")

        assert evaluator.evaluate(step, {"project": {"status": "active"}}) is True

    def test_invalid_operator(self, evaluator):
        with pytest.raises(InvalidOperator, match="between"):
            evaluator.evaluate(condition("c", "count", "between", [1, 2]), {"count": 1})

    def test_not_a_condition_step(self, evaluator):
        step = action("a", {"action_type": "task.create"})

        with pytest.raises(NotAConditionStep):
            evaluator.evaluate(step, {})
