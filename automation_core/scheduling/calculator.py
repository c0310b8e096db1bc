"""Next-run computation for recurrence rules."""

import calendar
from datetime import datetime, timedelta
from typing import Optional, Protocol, Tuple

from croniter import croniter

from ..errors import ScheduleCalculationError
from ..models.schedule import RecurrenceRule, RecurrenceType

MIDNIGHT: Tuple[int, int] = (0, 0)


class CronEvaluator(Protocol):
    """Evaluates cron expressions for ``custom`` recurrence rules.

    Implementations must return a timestamp strictly after ``now``.
    """

    def next_after(self, expression: str, now: datetime) -> datetime:
        ...


class CroniterEvaluator:
    """Standard five-field cron semantics via croniter."""

    def next_after(self, expression: str, now: datetime) -> datetime:
        return croniter(expression, now).get_next(datetime)


def _at(day: datetime, clock: Tuple[int, int]) -> datetime:
    hours, minutes = clock
    return day.replace(hour=hours, minute=minutes, second=0, microsecond=0)


def _on_month_day(year: int, month: int, day: int, clock: Tuple[int, int], like: datetime) -> datetime:
    """Build a timestamp on ``day`` of the month, clamped to the month's last day."""
    last_day = calendar.monthrange(year, month)[1]
    return _at(like.replace(year=year, month=month, day=min(day, last_day)), clock)


def sunday_based_weekday(moment: datetime) -> int:
    """Weekday number with 0 for Sunday through 6 for Saturday."""
    return (moment.weekday() + 1) % 7


class ScheduleCalculator:
    """
    Compute when a scheduled task fires next.

    ``next_run`` is a pure function of the rule and ``now``. The returned
    timestamp keeps ``now``'s tzinfo and is always strictly after ``now``.
    """

    def __init__(self, cron_evaluator: Optional[CronEvaluator] = None) -> None:
        self.cron_evaluator = cron_evaluator or CroniterEvaluator()

    def next_run(self, rule: RecurrenceRule, now: datetime) -> datetime:
        if rule.type == RecurrenceType.ONCE:
            result = self._next_clock_time(rule.clock_time() or MIDNIGHT, now)
        elif rule.type == RecurrenceType.DAILY:
            clock = rule.clock_time()
            result = now + timedelta(days=1) if clock is None else self._next_clock_time(clock, now)
        elif rule.type == RecurrenceType.WEEKLY:
            result = self._weekly(rule, now)
        elif rule.type == RecurrenceType.MONTHLY:
            result = self._monthly(rule, now)
        elif rule.type == RecurrenceType.CUSTOM:
            result = self.cron_evaluator.next_after(rule.custom_cron, now)
        else:
            raise ScheduleCalculationError(f"Unsupported recurrence type: {rule.type}")

        if result <= now:
            raise ScheduleCalculationError(
                f"{rule.type.value} rule produced {result.isoformat()}, "
                f"which is not after {now.isoformat()}"
            )
        return result

    def _next_clock_time(self, clock: Tuple[int, int], now: datetime) -> datetime:
        """Today at ``clock`` if still ahead, otherwise tomorrow."""
        candidate = _at(now, clock)
        if candidate <= now:
            candidate = _at(now + timedelta(days=1), clock)
        return candidate

    def _weekly(self, rule: RecurrenceRule, now: datetime) -> datetime:
        today = sunday_based_weekday(now)
        later_this_week = [day for day in rule.days if day > today]

        if later_this_week:
            offset = min(later_this_week) - today
        else:
            offset = 7 - today + min(rule.days)

        return _at(now + timedelta(days=offset), rule.clock_time() or MIDNIGHT)

    def _monthly(self, rule: RecurrenceRule, now: datetime) -> datetime:
        clock = rule.clock_time() or MIDNIGHT
        candidate = _on_month_day(now.year, now.month, rule.date, clock, now)
        if candidate > now:
            return candidate

        if now.month == 12:
            year, month = now.year + 1, 1
        else:
            year, month = now.year, now.month + 1
        return _on_month_day(year, month, rule.date, clock, now)
