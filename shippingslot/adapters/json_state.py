"""
Checkout state persisted as a JSON file.

Holds the orders known to the CLI, their shipments and the slots booked on
them. Loading the file yields a populated slot store and a cart context for
the active order; ``save`` writes everything back.

Example file::

    {
      "active_order": "000042",
      "orders": [
        {
          "number": "000042",
          "shipments": [
            {
              "id": "000042-1",
              "method": "store_pickup",
              "slot": {
                "id": 1,
                "timestamp": "2024-11-26T08:00:00Z",
                "duration_range": 180,
                "pickup_delay": 0,
                "preparation_delay": 60
              }
            }
          ]
        }
      ]
    }
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import pendulum

from ..domain.exceptions import MethodNotFoundError
from ..domain.models import Order, Shipment, ShippingMethod, Slot, to_utc
from .memory import InMemoryMethodLookup, InMemorySlotStore, StaticCartContext


logger = logging.getLogger(__name__)

DEFAULT_ORDER_NUMBER = "cart"


class JsonCheckoutState:
    """Orders, shipments and slots loaded from (and saved to) a JSON file."""

    def __init__(self, path: Path, method_lookup: InMemoryMethodLookup):
        self.path = path
        self.method_lookup = method_lookup
        self.orders: List[Order] = []
        self.active_order: Order = Order(number=DEFAULT_ORDER_NUMBER)
        self.slot_store = InMemorySlotStore()

    @classmethod
    def load(cls, path: Path, method_lookup: InMemoryMethodLookup) -> "JsonCheckoutState":
        """
        Load the state file, or start with an empty cart when it does not exist.

        Raises:
            MethodNotFoundError: If a shipment references an unknown method code
            ValueError: If the file is not valid JSON, misses a required field,
                reuses a slot id or holds a timestamp that cannot be parsed
        """
        state = cls(path, method_lookup)

        if not path.exists():
            logger.info("No checkout state at %s, starting with an empty cart", path)
            state.orders = [state.active_order]
            return state

        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)

        for order_data in data.get("orders", []):
            state.orders.append(state._load_order(order_data))

        active_number = data.get("active_order")
        state.active_order = state._find_order(active_number) or (
            state.orders[0] if state.orders else state.active_order
        )
        if state.active_order not in state.orders:
            state.orders.append(state.active_order)

        logger.debug("Loaded %d order(s) and %d slot(s) from %s",
                     len(state.orders), len(state.slot_store.all()), path)
        return state

    @property
    def cart(self) -> StaticCartContext:
        return StaticCartContext(self.active_order)

    def add_shipment(self, method: ShippingMethod) -> Shipment:
        """Append a shipment using ``method`` to the active order."""
        order = self.active_order
        shipment = Shipment(id=f"{order.number}-{len(order.shipments) + 1}", method=method)
        return order.add_shipment(shipment)

    def save(self) -> None:
        data = {
            "active_order": self.active_order.number,
            "orders": [self._dump_order(order) for order in self.orders],
        }

        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
        tmp_path.replace(self.path)

    def _find_order(self, number: Optional[str]) -> Optional[Order]:
        for order in self.orders:
            if order.number == number:
                return order
        return None

    def _load_order(self, data: Dict[str, Any]) -> Order:
        order = Order(number=str(_require(data, "number", "order")))

        for index, shipment_data in enumerate(data.get("shipments", []), 1):
            code = _require(shipment_data, "method", f"shipment {index} of order {order.number}")
            method = self.method_lookup.find_by_code(code)
            if method is None:
                raise MethodNotFoundError(code)

            shipment = order.add_shipment(Shipment(
                id=str(shipment_data.get("id") or f"{order.number}-{index}"),
                method=method,
            ))

            slot_data = shipment_data.get("slot")
            if slot_data:
                timestamp = _require(slot_data, "timestamp", f"slot of shipment {shipment.id}")
                self.slot_store.save(Slot(
                    id=slot_data.get("id"),
                    timestamp=to_utc(pendulum.parse(timestamp)),
                    duration_range=int(slot_data.get("duration_range", 0)),
                    pickup_delay=int(slot_data.get("pickup_delay", 0)),
                    preparation_delay=int(slot_data.get("preparation_delay", 0)),
                    shipment=shipment,
                ))

        return order

    @staticmethod
    def _dump_order(order: Order) -> Dict[str, Any]:
        shipments = []
        for shipment in order.shipments:
            entry: Dict[str, Any] = {"id": shipment.id, "method": shipment.method.code}
            slot = shipment.slot
            if slot is not None and slot.timestamp is not None:
                entry["slot"] = {
                    "id": slot.id,
                    "timestamp": to_utc(slot.timestamp).to_iso8601_string(),
                    "duration_range": slot.duration_range,
                    "pickup_delay": slot.pickup_delay,
                    "preparation_delay": slot.preparation_delay,
                }
            shipments.append(entry)

        return {"number": order.number, "shipments": shipments}


def _require(data: Dict[str, Any], field: str, where: str) -> Any:
    if field not in data:
        raise ValueError(f"Invalid checkout state: {where} has no '{field}'")
    return data[field]
