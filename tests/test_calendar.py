"""
Tests for the calendar feed and the ShippingSlotService facade.
"""

import pendulum

from shippingslot.adapters.memory import DefaultSlotFactory, InMemoryMethodLookup, StaticCartContext
from shippingslot.domain.models import Order, Shipment, instant_key
from shippingslot.domain.recurrence import RecurrenceEngine
from shippingslot.services.shipping_slots import ShippingSlotService

WINDOW_START = pendulum.parse("2024-11-25 00:00", tz="Europe/Paris")  # Monday
WINDOW_END = pendulum.parse("2024-12-08 23:59", tz="Europe/Paris")


def _starts(feed):
    return [event.start.to_date_string() for event in feed]


class TestBuildEvents:
    """Tests for CalendarProjector via the facade."""

    def test_full_tuesday_is_omitted(self, service, cart, pickup, book):
        book(pickup, "2024-11-26 09:00")

        feed = service.build_calendar_events(cart, pickup, WINDOW_START, WINDOW_END)

        assert _starts(feed) == ["2024-12-03"]
        assert feed[0].start.hour == 9
        assert feed[0].end.hour == 12
        assert feed[0].is_current is False

    def test_feed_is_occurrences_minus_full(self, make_method, slot_store, book):
        """Output equals the expanded occurrences without the full ones, in order."""
        method = make_method(rrule="FREQ=WEEKLY;BYDAY=TU,FR", spots=2)
        order = Order(number="000001")
        order.add_shipment(Shipment(id="000001-1", method=method))
        service = ShippingSlotService(InMemoryMethodLookup([method]), slot_store, DefaultSlotFactory())

        book(method, "2024-11-29 09:00")
        book(method, "2024-11-29 09:00")
        book(method, "2024-12-03 09:00")

        occurrences = list(RecurrenceEngine().expand(method.slot_config.recurrence_rule(), WINDOW_START, WINDOW_END))
        full = service.get_full_occurrences(StaticCartContext(order), method, WINDOW_START)
        feed = service.build_calendar_events(StaticCartContext(order), method, WINDOW_START, WINDOW_END)

        assert full == {"2024-11-29T08:00:00Z"}
        assert [e.start for e in feed] == [o.start for o in occurrences if o.key not in full]
        assert _starts(feed) == ["2024-11-26", "2024-12-03", "2024-12-06"]

    def test_current_slot_is_flagged(self, service, cart, pickup):
        service.assign_slot(cart, "store_pickup", 0, pendulum.parse("2024-12-03 09:00", tz="Europe/Paris"))

        feed = service.build_calendar_events(cart, pickup, WINDOW_START, WINDOW_END)

        assert [(e.start.to_date_string(), e.is_current) for e in feed] == [
            ("2024-11-26", False),
            ("2024-12-03", True),
        ]

    def test_own_full_occurrence_stays_visible(self, service, cart, pickup, book):
        """The customer holding the last spot still sees it as selectable."""
        service.assign_slot(cart, "store_pickup", 0, pendulum.parse("2024-11-26 09:00", tz="Europe/Paris"))

        feed = service.build_calendar_events(cart, pickup, WINDOW_START, WINDOW_END)
        other_cart = StaticCartContext(Order(number="other", shipments=[]))
        other_feed = service.build_calendar_events(other_cart, pickup, WINDOW_START, WINDOW_END)

        assert feed[0].is_current is True
        assert _starts(feed) == ["2024-11-26", "2024-12-03"]
        assert _starts(other_feed) == ["2024-12-03"]

    def test_current_slot_matches_across_timezones(self, service, cart, pickup):
        service.assign_slot(cart, "store_pickup", 0, pendulum.parse("2024-11-26 03:00", tz="America/New_York"))

        feed = service.build_calendar_events(cart, pickup, WINDOW_START, WINDOW_END)

        assert feed[0].is_current is True

    def test_feed_payload(self, service, cart, pickup):
        feed = service.build_calendar_events(cart, pickup, WINDOW_START, WINDOW_END)

        assert feed[0].to_dict() == {
            "start": "2024-11-26T09:00:00+01:00",
            "end": "2024-11-26T12:00:00+01:00",
            "extendedProps": {"isCurrent": False},
        }


class TestUnconfiguredMethod:
    def test_queries_are_empty(self, service, cart, methods, book):
        parcel = methods.find_by_code("parcel")
        slot = book(parcel, "2024-11-26 09:00")
        book(parcel, "2024-11-26 09:00")

        assert service.build_calendar_events(cart, parcel, WINDOW_START, WINDOW_END) == []
        assert service.get_full_occurrences(cart, parcel) == set()
        assert service.is_slot_full(slot) is False


class TestFacade:
    def test_operations_round_trip(self, service, cart, order, pickup):
        slot = service.assign_slot(cart, "store_pickup", 0, pendulum.parse("2024-11-26 09:00", tz="Europe/Paris"))

        assert service.get_current_slot(cart, pickup) is slot
        assert service.is_slot_full(slot) is False
        assert service.get_full_occurrences(cart, pickup) == set()

        service.reset_slot(cart, 0)

        assert service.get_current_slot(cart, pickup) is None
        assert order.shipments[0].slot is None
        assert instant_key(slot.timestamp) == "2024-11-26T08:00:00Z"
