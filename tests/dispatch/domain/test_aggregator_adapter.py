"""Tests for the FakeAggregator adapter and the aggregator factory."""

from datetime import date

import pytest
from dispatch.aggregator import get_aggregator, reset_aggregator, set_aggregator, timeout_seconds
from dispatch.aggregator.fake_adapter import FakeAggregator
from dispatch.aggregator.port import ShipmentRequest


def _request(**overrides):
    defaults = {
        "reference": "PR-1",
        "courier_code": "DELHIVERY",
        "source_pincode": "400001",
        "destination_pincode": "560001",
        "destination_address": {"city": "Bengaluru"},
        "weight_kg": 2.0,
        "length_cm": 10,
        "breadth_cm": 10,
        "height_cm": 10,
    }
    defaults.update(overrides)
    return ShipmentRequest(**defaults)


class TestAggregatorFactory:
    def setup_method(self):
        reset_aggregator()

    def test_default_is_fake(self):
        assert isinstance(get_aggregator(), FakeAggregator)

    def test_singleton(self):
        assert get_aggregator() is get_aggregator()

    def test_set_aggregator(self):
        custom = FakeAggregator()
        set_aggregator(custom)
        assert get_aggregator() is custom

    def test_unknown_adapter(self, monkeypatch):
        monkeypatch.setenv("AGGREGATOR_ADAPTER", "carrier-pigeon")
        with pytest.raises(ValueError):
            get_aggregator()

    def test_timeout_default(self, monkeypatch):
        monkeypatch.delenv("AGGREGATOR_TIMEOUT_SECONDS", raising=False)
        assert timeout_seconds() == 15.0

    def test_timeout_from_env(self, monkeypatch):
        monkeypatch.setenv("AGGREGATOR_TIMEOUT_SECONDS", "4.5")
        assert timeout_seconds() == 4.5


class TestFakeAggregator:
    def setup_method(self):
        self.aggregator = FakeAggregator()

    def test_serviceable_by_default(self):
        result = self.aggregator.check_serviceability("SHIPWAY", "400001", "560001", "DELHIVERY", 2.0, 5)
        assert result.success is True
        assert result.serviceable is True
        assert result.estimated_cost == 240.0

    def test_unserviceable_courier(self):
        self.aggregator.set_courier("DELHIVERY", serviceable=False)
        result = self.aggregator.check_serviceability("SHIPWAY", "400001", "560001", "DELHIVERY", 1.0, 5)
        assert result.success is True
        assert result.serviceable is False

    def test_erroring_courier(self):
        self.aggregator.set_courier("DELHIVERY", errors=True)
        result = self.aggregator.check_serviceability("SHIPWAY", "400001", "560001", "DELHIVERY", 1.0, 5)
        assert result.success is False
        assert "timed out" in result.failure_reason

    def test_create_shipment(self):
        booking = self.aggregator.create_shipment("SHIPWAY", _request(), 5)
        assert booking.success is True
        assert booking.provider_shipment_reference.startswith("fake_shp_")
        assert booking.awb_number.startswith("AWB")
        assert booking.tracking_url.endswith(booking.awb_number)

    def test_create_shipment_failure(self):
        self.aggregator.configure(should_succeed=False, failure_reason="Down")
        booking = self.aggregator.create_shipment("SHIPWAY", _request(), 5)
        assert booking.success is False
        assert booking.failure_reason == "Down"

    def test_omit_reference(self):
        self.aggregator.configure(omit_reference=True)
        booking = self.aggregator.create_shipment("SHIPWAY", _request(), 5)
        assert booking.success is True
        assert booking.provider_shipment_reference is None

    def test_tracking_defaults_to_in_transit(self):
        assert self.aggregator.get_shipment_status("SHIPWAY", "ref-1", 5).status == "IN_TRANSIT"

    def test_tracking_status_override(self):
        self.aggregator.set_tracking_status("ref-1", "DELIVERED")
        assert self.aggregator.get_shipment_status("SHIPWAY", "ref-1", 5).status == "DELIVERED"

    def test_schedule_pickup(self):
        result = self.aggregator.schedule_pickup("SHIPWAY", "ref-1", date(2026, 5, 4), 5)
        assert result.success is True
        assert result.pickup_date == date(2026, 5, 4)
        assert result.pickup_reference.startswith("PKP")
        assert self.aggregator.calls_to("schedule_pickup")[0]["provider_shipment_reference"] == "ref-1"

    def test_schedule_pickup_failure(self):
        self.aggregator.configure(should_succeed=False, failure_reason="Courier closed")
        result = self.aggregator.schedule_pickup("SHIPWAY", "ref-1", date(2026, 5, 4), 5)
        assert result.success is False
        assert result.failure_reason == "Courier closed"

    def test_calls_recorded(self):
        self.aggregator.check_serviceability("SHIPWAY", "400001", "560001", "DELHIVERY", 1.0, 5)
        self.aggregator.create_shipment("SHIPWAY", _request(), 5)
        assert [c["method"] for c in self.aggregator.calls] == ["check_serviceability", "create_shipment"]
        assert len(self.aggregator.calls_to("create_shipment")) == 1
