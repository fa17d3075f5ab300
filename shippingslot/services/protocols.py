"""
Collaborator contracts the slot services are written against.

Storage, cart lookup and method lookup live outside the core; anything that
matches these protocols can be plugged in (see ``shippingslot.adapters``).
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..domain.models import Order, ShippingMethod, Slot


class CartContext(Protocol):
    """Gives access to the customer's active cart/order."""

    def get_active_order(self) -> Order:
        """Return the order the current customer is checking out."""


class MethodLookup(Protocol):
    def find_by_code(self, code: str) -> Optional[ShippingMethod]:
        """Return the shipping method with ``code`` or None."""


class SlotStore(Protocol):
    """Persistence for booked slots."""

    def find_by_method_from_date(
        self,
        method: ShippingMethod,
        from_date: Optional[datetime],
    ) -> Sequence[Slot]:
        """Return slots of ``method`` starting at or after ``from_date`` (all when None)."""

    def find_by_method_and_timestamp(
        self,
        method: ShippingMethod,
        timestamp: datetime,
    ) -> Sequence[Slot]:
        """Return slots of ``method`` booked at exactly ``timestamp``."""

    def save(self, slot: Slot) -> None:
        """Create or update ``slot`` together with its shipment link."""

    def delete(self, slot: Slot) -> None:
        """Remove ``slot`` and detach it from its shipment."""


class SlotFactory(Protocol):
    def new_slot(self) -> Slot:
        """Return a blank slot."""
