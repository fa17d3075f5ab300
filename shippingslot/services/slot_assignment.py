"""
Binding shipments to slot occurrences.

A shipment owns at most one slot. Assigning an occurrence creates that slot or
overwrites it in place; resetting deletes it.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from pendulum import DateTime

from ..domain.exceptions import (
    ConfigMissingError,
    MethodNotFoundError,
    ShipmentNotFoundError,
    SlotFullError,
)
from ..domain.models import (
    Shipment,
    ShippingMethod,
    ShippingSlotConfig,
    Slot,
    instant_key,
    to_utc,
)
from .capacity import CapacityTracker
from .locks import ReservationLocks
from .protocols import CartContext, MethodLookup, SlotFactory, SlotStore


logger = logging.getLogger(__name__)


class SlotAssignmentService:
    """
    Creates, moves and removes the slot bound to a shipment.

    With ``enforce_capacity`` enabled the capacity check and the write happen
    under a reservation lock for the target occurrence. A booking that would
    overfill the occurrence raises ``SlotFullError`` before anything is written.
    Without it, writes go through unchecked and concurrent bookings can
    exceed ``available_spots``.
    """

    def __init__(
        self,
        method_lookup: MethodLookup,
        slot_store: SlotStore,
        slot_factory: SlotFactory,
        capacity_tracker: Optional[CapacityTracker] = None,
        locks: Optional[ReservationLocks] = None,
        enforce_capacity: bool = True,
    ) -> None:
        self._method_lookup = method_lookup
        self._slot_store = slot_store
        self._slot_factory = slot_factory
        self._capacity_tracker = capacity_tracker or CapacityTracker(slot_store)
        self._locks = locks or ReservationLocks()
        self.enforce_capacity = enforce_capacity

    def assign(
        self,
        cart: CartContext,
        method_code: str,
        shipment_index: int,
        start_time: datetime,
    ) -> Slot:
        """
        Book the occurrence starting at ``start_time`` for a shipment.

        Raises:
            ShipmentNotFoundError: If the active order has no shipment at the index
            MethodNotFoundError: If no shipping method has ``method_code``
            ConfigMissingError: If the method has no slot configuration
            SlotFullError: If capacity is enforced and the occurrence is full
        """
        shipment = self._get_shipment(cart, shipment_index)

        method = self._method_lookup.find_by_code(method_code)
        if method is None:
            raise MethodNotFoundError(method_code)

        config = method.slot_config
        if config is None:
            raise ConfigMissingError(method.code)

        timestamp = to_utc(start_time)

        if not self.enforce_capacity:
            return self._write(shipment, config, timestamp)

        # Only the target occurrence is locked: leaving the previous one can
        # only free a spot there
        with self._locks.hold(method.code, timestamp):
            if self._capacity_tracker.is_occurrence_full(method, timestamp, shipment.slot):
                logger.warning(
                    "Rejected slot %s for shipment %s: method %s has no spot left",
                    instant_key(timestamp), shipment.id, method.code,
                )
                raise SlotFullError(method.code, instant_key(timestamp))

            return self._write(shipment, config, timestamp)

    def reset(self, cart: CartContext, shipment_index: int) -> None:
        """Remove the slot of a shipment; does nothing when it has none."""
        shipment = self._get_shipment(cart, shipment_index)

        slot = shipment.slot
        if slot is None:
            return

        self._slot_store.delete(slot)
        logger.info("Released slot of shipment %s", shipment.id)

    def find_by_method(self, cart: CartContext, method: ShippingMethod) -> Optional[Slot]:
        """Return the active order's slot for ``method``, if any."""
        order = cart.get_active_order()

        for shipment in order.shipments:
            if shipment.method.code == method.code:
                return shipment.slot

        return None

    @staticmethod
    def _get_shipment(cart: CartContext, shipment_index: int) -> Shipment:
        shipment = cart.get_active_order().shipment_at(shipment_index)
        if shipment is None:
            raise ShipmentNotFoundError(shipment_index)
        return shipment

    def _write(self, shipment: Shipment, config: ShippingSlotConfig, timestamp: DateTime) -> Slot:
        slot = shipment.slot
        if slot is None:
            slot = self._slot_factory.new_slot()

        slot.shipment = shipment
        slot.timestamp = timestamp
        slot.duration_range = config.duration_range
        slot.pickup_delay = config.pickup_delay
        slot.preparation_delay = config.preparation_delay

        self._slot_store.save(slot)
        logger.info("Assigned slot %s to shipment %s", instant_key(timestamp), shipment.id)
        return slot
