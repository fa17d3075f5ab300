"""
Application service exposing the slot operations to callers.

The service wires the recurrence engine, the capacity tracker, the assignment
service and the calendar projector around a set of collaborators. Transport
layers (the CLI here, an HTTP controller elsewhere) only talk to this class.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Set

from ..domain.models import CalendarEvent, ShippingMethod, Slot
from ..domain.recurrence import RecurrenceEngine
from .calendar import CalendarProjector
from .capacity import CapacityTracker
from .locks import ReservationLocks
from .protocols import CartContext, MethodLookup, SlotFactory, SlotStore
from .slot_assignment import SlotAssignmentService


class ShippingSlotService:
    """Entry point for assigning slots and querying availability."""

    def __init__(
        self,
        method_lookup: MethodLookup,
        slot_store: SlotStore,
        slot_factory: SlotFactory,
        *,
        enforce_capacity: bool = True,
        recurrence_engine: Optional[RecurrenceEngine] = None,
        locks: Optional[ReservationLocks] = None,
    ) -> None:
        self.capacity_tracker = CapacityTracker(slot_store)
        self.assignment = SlotAssignmentService(
            method_lookup,
            slot_store,
            slot_factory,
            capacity_tracker=self.capacity_tracker,
            locks=locks,
            enforce_capacity=enforce_capacity,
        )
        self.calendar = CalendarProjector(
            recurrence_engine or RecurrenceEngine(),
            self.capacity_tracker,
            self.assignment,
        )

    def assign_slot(
        self,
        cart: CartContext,
        method_code: str,
        shipment_index: int,
        start_time: datetime,
    ) -> Slot:
        return self.assignment.assign(cart, method_code, shipment_index, start_time)

    def reset_slot(self, cart: CartContext, shipment_index: int) -> None:
        self.assignment.reset(cart, shipment_index)

    def get_current_slot(self, cart: CartContext, method: ShippingMethod) -> Optional[Slot]:
        return self.assignment.find_by_method(cart, method)

    def get_full_occurrences(
        self,
        cart: CartContext,
        method: ShippingMethod,
        from_date: Optional[datetime] = None,
    ) -> Set[str]:
        """Instant keys of the occurrences the viewer can no longer book."""
        current_slot = self.assignment.find_by_method(cart, method)
        return self.capacity_tracker.find_full_occurrences(method, from_date, current_slot)

    def is_slot_full(self, slot: Slot) -> bool:
        return self.capacity_tracker.is_full(slot)

    def build_calendar_events(
        self,
        cart: CartContext,
        method: ShippingMethod,
        start_date: datetime,
        end_date: datetime,
    ) -> List[CalendarEvent]:
        return self.calendar.build_events(cart, method, start_date, end_date)
