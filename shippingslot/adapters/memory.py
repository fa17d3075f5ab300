"""
In-memory collaborators for the slot services.

Used by the CLI (backed by the JSON checkout state) and by the tests. The slot
store keeps the slot/shipment link consistent the way an ORM relation would.
"""

from __future__ import annotations

import threading
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from ..domain.models import Order, ShippingMethod, Slot, instant_key, to_utc


class InMemorySlotStore:
    """Thread-safe slot storage keyed by generated ids."""

    def __init__(self, slots: Iterable[Slot] = ()):
        self._lock = threading.RLock()
        self._slots: Dict[int, Slot] = {}
        self._next_id = 1
        for slot in slots:
            self.save(slot)

    def all(self) -> List[Slot]:
        with self._lock:
            return sorted(self._slots.values(), key=lambda s: s.id or 0)

    def find_by_method_from_date(
        self,
        method: ShippingMethod,
        from_date: Optional[datetime],
    ) -> List[Slot]:
        lower = to_utc(from_date) if from_date is not None else None

        with self._lock:
            matches = [
                slot for slot in self._slots.values()
                if _belongs_to(slot, method)
                and (lower is None or to_utc(slot.timestamp) >= lower)
            ]

        return sorted(matches, key=lambda s: (to_utc(s.timestamp), s.id or 0))

    def find_by_method_and_timestamp(
        self,
        method: ShippingMethod,
        timestamp: datetime,
    ) -> List[Slot]:
        key = instant_key(timestamp)

        with self._lock:
            return [
                slot for slot in self._slots.values()
                if _belongs_to(slot, method) and instant_key(slot.timestamp) == key
            ]

    def save(self, slot: Slot) -> None:
        """
        Store ``slot``, assigning an id when it has none.

        Raises:
            ValueError: If the id already belongs to another shipment's slot
        """
        with self._lock:
            existing = self._slots.get(slot.id) if slot.id is not None else None
            if existing is not None and existing is not slot and existing.shipment is not slot.shipment:
                raise ValueError(f"Slot id {slot.id} is already used by another slot")

            if slot.id is None:
                slot.id = self._next_id
                self._next_id += 1
            else:
                self._next_id = max(self._next_id, slot.id + 1)

            self._slots[slot.id] = slot

            shipment = slot.shipment
            if shipment is not None and shipment.slot is not slot:
                # A shipment holds a single slot, the new one replaces it
                if shipment.slot is not None and shipment.slot.id is not None:
                    self._slots.pop(shipment.slot.id, None)
                shipment.slot = slot

    def delete(self, slot: Slot) -> None:
        with self._lock:
            if slot.id is not None:
                self._slots.pop(slot.id, None)

            shipment = slot.shipment
            if shipment is not None and shipment.slot is slot:
                shipment.slot = None


def _belongs_to(slot: Slot, method: ShippingMethod) -> bool:
    slot_method = slot.method
    return (
        slot.timestamp is not None
        and slot_method is not None
        and slot_method.code == method.code
    )


class InMemoryMethodLookup:
    def __init__(self, methods: Iterable[ShippingMethod] = ()):
        self._methods: Dict[str, ShippingMethod] = {m.code: m for m in methods}

    def add(self, method: ShippingMethod) -> None:
        self._methods[method.code] = method

    def all(self) -> List[ShippingMethod]:
        return list(self._methods.values())

    def find_by_code(self, code: str) -> Optional[ShippingMethod]:
        return self._methods.get(code)


class StaticCartContext:
    """Cart context bound to a single, explicitly given order."""

    def __init__(self, order: Order):
        self.order = order

    def get_active_order(self) -> Order:
        return self.order


class DefaultSlotFactory:
    def new_slot(self) -> Slot:
        return Slot()
