"""
Domain layer - Pure business logic without external dependencies.
"""

from .models import (
    CalendarEvent,
    Occurrence,
    Order,
    RecurrenceRule,
    Shipment,
    ShippingMethod,
    ShippingSlotConfig,
    Slot,
    instant_key,
    to_utc,
)
from .recurrence import Occurrences, RecurrenceEngine

__all__ = [
    "CalendarEvent",
    "Occurrence",
    "Occurrences",
    "Order",
    "RecurrenceEngine",
    "RecurrenceRule",
    "Shipment",
    "ShippingMethod",
    "ShippingSlotConfig",
    "Slot",
    "instant_key",
    "to_utc",
]
