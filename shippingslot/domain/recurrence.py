"""
Expansion of recurrence rules into concrete occurrences.

The calendar arithmetic is delegated to ``dateutil.rrule``; this module only
anchors the rule in its timezone, clips it to a window and turns the raw
datetimes into ``Occurrence`` objects.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterator, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import pendulum
from dateutil.rrule import rrulebase, rrulestr
from pendulum import DateTime

from .exceptions import InvalidRecurrenceRuleError
from .models import Occurrence, RecurrenceRule


logger = logging.getLogger(__name__)


class Occurrences:
    """
    Lazy view over the occurrences of a rule inside a window.

    Every call to ``iter()`` replays the rule from the beginning, so the same
    object can be consumed several times.
    """

    def __init__(
        self,
        rule: RecurrenceRule,
        recurrence: rrulebase,
        window_start: datetime,
        window_end: datetime,
    ):
        self.rule = rule
        self._recurrence = recurrence
        self._window_start = window_start
        self._window_end = window_end

    def __iter__(self) -> Iterator[Occurrence]:
        previous: Optional[DateTime] = None

        for raw in self._recurrence.xafter(self._window_start, inc=True):
            if raw > self._window_end:
                break

            start = pendulum.datetime(
                raw.year, raw.month, raw.day, raw.hour, raw.minute, raw.second,
                tz=self.rule.timezone,
            )
            # Skip repeated wall times around DST transitions
            if previous is not None and start <= previous:
                continue
            previous = start

            yield Occurrence(
                start=start,
                end=start.add(minutes=self.rule.duration_minutes),
            )


class RecurrenceEngine:
    """Turns a RecurrenceRule and a date window into ordered occurrences."""

    def expand(
        self,
        rule: RecurrenceRule,
        window_start: Optional[datetime],
        window_end: datetime,
    ) -> Occurrences:
        """
        Expand ``rule`` between ``window_start`` and ``window_end`` inclusive.

        Args:
            rule: The recurrence to expand
            window_start: First instant considered; None starts at the rule's own start
            window_end: Last instant an occurrence may start at

        Returns:
            A restartable iterable of Occurrence objects ordered by start

        Raises:
            InvalidRecurrenceRuleError: If the pattern or timezone is invalid
        """
        try:
            zone = ZoneInfo(rule.timezone)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise InvalidRecurrenceRuleError(f"Unknown timezone '{rule.timezone}'") from exc

        anchor = pendulum.instance(rule.starts_at, tz=rule.timezone).in_timezone(rule.timezone)
        dtstart = datetime(
            anchor.year, anchor.month, anchor.day, anchor.hour, anchor.minute, anchor.second,
            tzinfo=zone,
        )

        if rule.duration_minutes <= 0:
            raise InvalidRecurrenceRuleError(
                f"Occurrence duration must be positive, got {rule.duration_minutes}"
            )

        pattern = (rule.pattern or "").strip()
        if not pattern:
            raise InvalidRecurrenceRuleError("Recurrence pattern is empty")

        try:
            recurrence = rrulestr(pattern, dtstart=dtstart)
        except (ValueError, TypeError) as exc:
            raise InvalidRecurrenceRuleError(f"Invalid recurrence pattern '{pattern}': {exc}") from exc

        start = dtstart if window_start is None else _aware(window_start, zone)
        end = _aware(window_end, zone)

        logger.debug("Expanding %s from %s to %s", pattern, start.isoformat(), end.isoformat())

        return Occurrences(rule, recurrence, start, end)


def _aware(value: datetime, zone: ZoneInfo) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=zone)
    return value
