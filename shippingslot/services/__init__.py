"""
Service layer helpers that orchestrate collaborators and domain logic.
"""

from .calendar import CalendarProjector
from .capacity import CapacityTracker
from .locks import ReservationLocks
from .protocols import CartContext, MethodLookup, SlotFactory, SlotStore
from .shipping_slots import ShippingSlotService
from .slot_assignment import SlotAssignmentService

__all__ = [
    "CalendarProjector",
    "CapacityTracker",
    "CartContext",
    "MethodLookup",
    "ReservationLocks",
    "ShippingSlotService",
    "SlotAssignmentService",
    "SlotFactory",
    "SlotStore",
]
