"""
Occupancy counting and fullness checks for slot occurrences.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Dict, Optional, Set

from ..domain.models import ShippingMethod, Slot, instant_key
from .protocols import SlotStore


logger = logging.getLogger(__name__)


class CapacityTracker:
    """
    Counts bookings per occurrence and decides which occurrences are full.

    Two views of the same rule coexist:

    - ``find_full_occurrences`` looks at the occurrences from the outside. The
      viewer's own slot is removed before counting, so an occurrence is full
      once the others reach ``available_spots`` (``>=``).
    - ``is_full`` looks from a slot that already counts among the bookings at
      its timestamp, so it only reports full above ``available_spots`` (``>``).
    """

    def __init__(self, slot_store: SlotStore):
        self._slot_store = slot_store

    def find_occupied_timestamps(
        self,
        method: ShippingMethod,
        from_date: Optional[datetime] = None,
        current_slot: Optional[Slot] = None,
    ) -> Dict[str, int]:
        """
        Count bookings of ``method`` per occurrence instant.

        Args:
            method: Shipping method whose slots are counted
            from_date: Ignore slots before this instant (None counts everything)
            current_slot: The viewer's own slot, left out of every count

        Returns:
            Dict mapping instant keys (UTC ISO-8601) to booking counts
        """
        counts: Dict[str, int] = {}

        for slot in self._slot_store.find_by_method_from_date(method, from_date):
            if slot.shipment is None or slot.timestamp is None:
                continue
            if slot.is_same_record(current_slot):
                continue

            key = instant_key(slot.timestamp)
            counts[key] = counts.get(key, 0) + 1

        return counts

    def find_full_occurrences(
        self,
        method: ShippingMethod,
        from_date: Optional[datetime] = None,
        current_slot: Optional[Slot] = None,
    ) -> Set[str]:
        """Return the instant keys whose bookings reached the method's capacity."""
        config = method.slot_config
        if config is None:
            return set()

        counts = self.find_occupied_timestamps(method, from_date, current_slot)

        full: Set[str] = set()
        for key, count in counts.items():
            if count >= config.available_spots:
                full.add(key)

        logger.debug(
            "Method %s: %d occupied occurrence(s), %d full",
            method.code, len(counts), len(full),
        )
        return full

    def is_full(self, slot: Slot) -> bool:
        """Check whether the occurrence booked by ``slot`` is over capacity."""
        shipment = slot.shipment
        if shipment is None or slot.timestamp is None:
            return False

        method = shipment.method
        config = method.slot_config
        if config is None:
            return False

        slots = self._slot_store.find_by_method_and_timestamp(method, slot.timestamp)

        # Not >= because the slot being checked is one of the bookings
        return len(slots) > config.available_spots

    def is_occurrence_full(
        self,
        method: ShippingMethod,
        timestamp: datetime,
        current_slot: Optional[Slot] = None,
    ) -> bool:
        """
        Check whether one occurrence has no spot left for ``current_slot``.

        Same rule as ``find_full_occurrences`` restricted to a single instant:
        the viewer's own slot and orphaned slots are not counted.
        """
        config = method.slot_config
        if config is None:
            return False

        taken = 0
        for slot in self._slot_store.find_by_method_and_timestamp(method, timestamp):
            if slot.shipment is None or slot.is_same_record(current_slot):
                continue
            taken += 1

        return taken >= config.available_spots
