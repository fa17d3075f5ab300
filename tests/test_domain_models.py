"""
Tests for domain models.
"""

from datetime import datetime, timezone

import pendulum
import pytest

from shippingslot.domain.models import (
    CalendarEvent,
    Occurrence,
    Order,
    Shipment,
    ShippingMethod,
    Slot,
    instant_key,
    to_utc,
)


class TestOccurrence:
    """Tests for Occurrence model."""

    def test_create_valid_occurrence(self):
        """Test creating a valid occurrence."""
        start = pendulum.parse("2024-11-26 09:00", tz="Europe/Paris")
        end = pendulum.parse("2024-11-26 12:00", tz="Europe/Paris")

        occurrence = Occurrence(start=start, end=end)

        assert occurrence.start == start
        assert occurrence.end == end
        assert occurrence.duration_minutes() == 180

    def test_invalid_occurrence_raises_error(self):
        """Test that an occurrence ending before it starts raises ValueError."""
        start = pendulum.parse("2024-11-26 12:00", tz="Europe/Paris")
        end = pendulum.parse("2024-11-26 09:00", tz="Europe/Paris")

        with pytest.raises(ValueError, match="Start time .* must be before end time"):
            Occurrence(start=start, end=end)

    def test_key_is_utc_instant(self):
        occurrence = Occurrence(
            start=pendulum.parse("2024-11-26 09:00", tz="Europe/Paris"),
            end=pendulum.parse("2024-11-26 12:00", tz="Europe/Paris"),
        )

        assert occurrence.key == "2024-11-26T08:00:00Z"


class TestInstants:
    """Tests for UTC normalisation and instant keys."""

    def test_same_instant_in_different_zones_shares_key(self):
        paris = pendulum.parse("2024-11-26 09:00", tz="Europe/Paris")
        new_york = pendulum.parse("2024-11-26 03:00", tz="America/New_York")

        assert paris is not new_york
        assert instant_key(paris) == instant_key(new_york)

    def test_different_instants_have_different_keys(self):
        first = pendulum.parse("2024-11-26 09:00", tz="Europe/Paris")
        second = pendulum.parse("2024-11-26 09:00", tz="UTC")

        assert instant_key(first) != instant_key(second)

    def test_to_utc_converts_aware_datetime(self):
        value = to_utc(pendulum.parse("2024-07-02 09:00", tz="Europe/Paris"))

        assert value.timezone_name == "UTC"
        assert value.hour == 7

    def test_to_utc_accepts_stdlib_datetime(self):
        value = to_utc(datetime(2024, 11, 26, 8, 0, tzinfo=timezone.utc))

        assert value == pendulum.datetime(2024, 11, 26, 8, 0, tz="UTC")

    def test_naive_datetime_is_read_as_utc(self):
        value = to_utc(datetime(2024, 11, 26, 8, 0))

        assert instant_key(value) == "2024-11-26T08:00:00Z"


class TestSlot:
    """Tests for Slot model."""

    def test_method_resolves_through_shipment(self):
        method = ShippingMethod(code="store_pickup")
        shipment = Shipment(id="1", method=method)
        slot = Slot(timestamp=pendulum.datetime(2024, 11, 26, 8), shipment=shipment)

        assert slot.method is method
        assert Slot().method is None

    def test_end_adds_duration(self):
        slot = Slot(timestamp=pendulum.datetime(2024, 11, 26, 8), duration_range=90)

        assert slot.end == pendulum.datetime(2024, 11, 26, 9, 30)

    def test_same_record_by_identity_or_id(self):
        first = Slot(id=4)
        copy = Slot(id=4)
        unsaved = Slot()

        assert first.is_same_record(first)
        assert first.is_same_record(copy)
        assert not unsaved.is_same_record(Slot())
        assert not first.is_same_record(None)


class TestOrder:
    """Tests for Order model."""

    def test_shipment_at_returns_none_out_of_range(self):
        order = Order(number="000001")
        shipment = order.add_shipment(Shipment(id="1", method=ShippingMethod(code="parcel")))

        assert order.shipment_at(0) is shipment
        assert shipment.order is order
        assert order.shipment_at(1) is None
        assert order.shipment_at(-1) is None


class TestCalendarEvent:
    def test_to_dict_renders_feed_payload(self):
        event = CalendarEvent(
            start=pendulum.parse("2024-11-26 09:00", tz="Europe/Paris"),
            end=pendulum.parse("2024-11-26 12:00", tz="Europe/Paris"),
            is_current=True,
        )

        assert event.to_dict() == {
            "start": "2024-11-26T09:00:00+01:00",
            "end": "2024-11-26T12:00:00+01:00",
            "extendedProps": {"isCurrent": True},
        }
