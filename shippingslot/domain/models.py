"""
Domain models for shipping slots, shipments and recurring schedules.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

import pendulum
from pendulum import DateTime


UTC = "UTC"


def to_utc(value: datetime) -> DateTime:
    """Return the same instant as a pendulum DateTime in UTC.

    Naive values are read as UTC.
    """
    return pendulum.instance(value, tz=UTC).in_timezone(UTC)


def instant_key(value: datetime) -> str:
    """
    Format an instant so that equal instants give equal strings.

    Two DateTimes carrying different timezones but denoting the same moment
    share a key, which is what slot grouping and occurrence matching rely on.
    """
    return to_utc(value).to_iso8601_string()


@dataclass(frozen=True)
class Occurrence:
    """
    One concrete interval produced by expanding a recurrence rule.

    Invariant: start must be before end.
    """
    start: DateTime
    end: DateTime

    def __post_init__(self):
        if self.start >= self.end:
            raise ValueError(f"Start time {self.start} must be before end time {self.end}")

    @property
    def key(self) -> str:
        return instant_key(self.start)

    def duration_minutes(self) -> int:
        """Return the duration in minutes."""
        return int((self.end - self.start).total_seconds() / 60)

    def __str__(self) -> str:
        return f"{self.start.format('DD.MM.YYYY HH:mm')} - {self.end.format('HH:mm')}"


@dataclass(frozen=True)
class RecurrenceRule:
    """
    A repeating schedule: an RRULE pattern anchored at a local start time.

    ``pattern`` is RFC 5545 RRULE text (``FREQ=WEEKLY;BYDAY=TU,FR``), with or
    without the ``RRULE:`` prefix. Occurrences keep the wall-clock time of
    ``starts_at`` in ``timezone`` across DST changes.
    """
    pattern: str
    starts_at: DateTime
    timezone: str = UTC
    duration_minutes: int = 60


@dataclass
class ShippingSlotConfig:
    """Slot scheduling settings attached to a shipping method."""
    name: str
    rrule: str
    starts_at: DateTime
    duration_range: int
    available_spots: int
    pickup_delay: int = 0
    preparation_delay: int = 0
    timezone: str = UTC

    def recurrence_rule(self) -> RecurrenceRule:
        return RecurrenceRule(
            pattern=self.rrule,
            starts_at=self.starts_at,
            timezone=self.timezone,
            duration_minutes=self.duration_range,
        )


@dataclass(eq=False)
class ShippingMethod:
    code: str
    name: str = ""
    slot_config: Optional[ShippingSlotConfig] = None

    def supports_slots(self) -> bool:
        return self.slot_config is not None


@dataclass(eq=False)
class Slot:
    """
    A booking of one occurrence for one shipment.

    ``duration_range``, ``pickup_delay`` and ``preparation_delay`` are copied
    from the method configuration when the slot is assigned and never
    recomputed afterwards.
    """
    timestamp: Optional[DateTime] = None
    duration_range: int = 0
    pickup_delay: int = 0
    preparation_delay: int = 0
    shipment: Optional["Shipment"] = field(default=None, repr=False)
    id: Optional[int] = None

    @property
    def method(self) -> Optional[ShippingMethod]:
        if self.shipment is None:
            return None
        return self.shipment.method

    @property
    def end(self) -> Optional[DateTime]:
        if self.timestamp is None:
            return None
        return self.timestamp.add(minutes=self.duration_range)

    def is_same_record(self, other: Optional["Slot"]) -> bool:
        """True when both objects stand for the same stored slot."""
        if other is None:
            return False
        if self is other:
            return True
        return self.id is not None and self.id == other.id


@dataclass(eq=False)
class Shipment:
    id: str
    method: ShippingMethod
    slot: Optional[Slot] = None
    order: Optional["Order"] = field(default=None, repr=False)


@dataclass(eq=False)
class Order:
    """A cart or order holding an ordered list of shipments."""
    number: str
    shipments: List[Shipment] = field(default_factory=list)

    def add_shipment(self, shipment: Shipment) -> Shipment:
        shipment.order = self
        self.shipments.append(shipment)
        return shipment

    def shipment_at(self, index: int) -> Optional[Shipment]:
        """Return the shipment at ``index`` or None when out of range."""
        if 0 <= index < len(self.shipments):
            return self.shipments[index]
        return None


@dataclass(frozen=True)
class CalendarEvent:
    """An occurrence offered to the customer in the calendar feed."""
    start: DateTime
    end: DateTime
    is_current: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "start": self.start.to_iso8601_string(),
            "end": self.end.to_iso8601_string(),
            "extendedProps": {"isCurrent": self.is_current},
        }
