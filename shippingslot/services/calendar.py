"""
Calendar feed of bookable occurrences for a shipping method.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import List

from ..domain.models import CalendarEvent, ShippingMethod, instant_key
from ..domain.recurrence import RecurrenceEngine
from .capacity import CapacityTracker
from .protocols import CartContext
from .slot_assignment import SlotAssignmentService


logger = logging.getLogger(__name__)


class CalendarProjector:
    """
    Combines the schedule, the occupancy and the viewer's own slot.

    Algorithm:
    1. Expand the method's recurrence rule over the requested window
    2. Collect the occurrences that are already full, ignoring the viewer's slot
    3. Drop full occurrences and flag the one the viewer currently holds
    """

    def __init__(
        self,
        recurrence_engine: RecurrenceEngine,
        capacity_tracker: CapacityTracker,
        assignment_service: SlotAssignmentService,
    ) -> None:
        self._recurrence_engine = recurrence_engine
        self._capacity_tracker = capacity_tracker
        self._assignment_service = assignment_service

    def build_events(
        self,
        cart: CartContext,
        method: ShippingMethod,
        start_date: datetime,
        end_date: datetime,
    ) -> List[CalendarEvent]:
        config = method.slot_config
        if config is None:
            return []

        occurrences = self._recurrence_engine.expand(config.recurrence_rule(), start_date, end_date)
        current_slot = self._assignment_service.find_by_method(cart, method)
        full = self._capacity_tracker.find_full_occurrences(method, start_date, current_slot)

        current_key = None
        if current_slot is not None and current_slot.timestamp is not None:
            current_key = instant_key(current_slot.timestamp)

        events: List[CalendarEvent] = []
        for occurrence in occurrences:
            if occurrence.key in full:
                continue
            events.append(
                CalendarEvent(
                    start=occurrence.start,
                    end=occurrence.end,
                    is_current=current_key is not None and occurrence.key == current_key,
                )
            )

        logger.debug(
            "Built %d calendar event(s) for %s, %d occurrence(s) full",
            len(events), method.code, len(full),
        )
        return events
