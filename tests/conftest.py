"""
Shared fixtures for the slot scheduling tests.
"""

from typing import Callable, Optional

import pendulum
import pytest

from shippingslot.adapters.memory import (
    DefaultSlotFactory,
    InMemoryMethodLookup,
    InMemorySlotStore,
    StaticCartContext,
)
from shippingslot.domain.models import Order, Shipment, ShippingMethod, ShippingSlotConfig, Slot, to_utc
from shippingslot.services.shipping_slots import ShippingSlotService

TZ = "Europe/Paris"


def _make_method(
    code: str = "store_pickup",
    spots: int = 1,
    rrule: str = "FREQ=WEEKLY;BYDAY=TU",
    starts_at: str = "2024-11-05 09:00",
    duration: int = 180,
    configured: bool = True,
) -> ShippingMethod:
    config = None
    if configured:
        config = ShippingSlotConfig(
            name="Tuesday mornings",
            rrule=rrule,
            starts_at=pendulum.parse(starts_at, tz=TZ),
            duration_range=duration,
            available_spots=spots,
            pickup_delay=30,
            preparation_delay=60,
            timezone=TZ,
        )
    return ShippingMethod(code=code, name=code, slot_config=config)


@pytest.fixture
def make_method() -> Callable[..., ShippingMethod]:
    return _make_method


@pytest.fixture
def pickup() -> ShippingMethod:
    """Weekly Tuesday 09:00-12:00, one spot."""
    return _make_method()


@pytest.fixture
def slot_store() -> InMemorySlotStore:
    return InMemorySlotStore()


@pytest.fixture
def book(slot_store) -> Callable[..., Slot]:
    """Book ``when`` for a fresh shipment of another customer."""
    counter = {"n": 0}

    def _book(method: ShippingMethod, when: str, shipment: Optional[Shipment] = None) -> Slot:
        if shipment is None:
            counter["n"] += 1
            order = Order(number=f"other-{counter['n']}")
            shipment = order.add_shipment(Shipment(id=f"other-{counter['n']}-1", method=method))
        slot = Slot(
            timestamp=to_utc(pendulum.parse(when, tz=TZ)),
            duration_range=180,
            shipment=shipment,
        )
        slot_store.save(slot)
        return slot

    return _book


@pytest.fixture
def order(pickup) -> Order:
    """Active cart with one shipment using the pickup method."""
    cart_order = Order(number="000042")
    cart_order.add_shipment(Shipment(id="000042-1", method=pickup))
    return cart_order


@pytest.fixture
def cart(order) -> StaticCartContext:
    return StaticCartContext(order)


@pytest.fixture
def methods(pickup) -> InMemoryMethodLookup:
    return InMemoryMethodLookup([pickup, _make_method(code="parcel", configured=False)])


@pytest.fixture
def service(methods, slot_store) -> ShippingSlotService:
    return ShippingSlotService(methods, slot_store, DefaultSlotFactory())
