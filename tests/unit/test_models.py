#!/usr/bin/env python3
"""
Unit tests for BreakerConfig and BreakerRecord
"""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from breaker.models import BreakerConfig, BreakerRecord


class TestBreakerConfig:

    def test_defaults(self):
        config = BreakerConfig()
        assert config.fault_window_duration == 600
        assert config.trip_cooldown_duration == 300
        assert config.consecutive_fault_limit == 3
        assert config.windowed_fault_limit == 5
        assert config.request_timeout_duration == 30

    def test_is_immutable(self):
        config = BreakerConfig()
        with pytest.raises(AttributeError):
            config.consecutive_fault_limit = 10

    def test_with_overrides_returns_copy(self):
        base = BreakerConfig()
        changed = base.with_overrides(fault_window_duration=60)
        assert changed.fault_window_duration == 60
        assert base.fault_window_duration == 600

    @pytest.mark.parametrize("field, value", [
        ("fault_window_duration", 0),
        ("request_timeout_duration", -1),
        ("windowed_fault_limit", 0),
    ])
    def test_rejects_out_of_range(self, field, value):
        with pytest.raises(ValueError):
            BreakerConfig(**{field: value})

    def test_from_dict_fills_missing(self):
        config = BreakerConfig.from_dict({"consecutive_fault_limit": "4"})
        assert config.consecutive_fault_limit == 4
        assert config.fault_window_duration == 600


class TestBreakerRecord:

    def test_new_record_is_zeroed(self):
        record = BreakerRecord(name="geo")
        assert record.consecutive_faults == 0
        assert record.fault_count == 0
        assert record.fault_timestamp == 0
        assert record.tripped is False
        assert record.trip_timestamp == 0

    def test_dict_form_nests_config(self):
        record = BreakerRecord(name="geo", tripped=True, trip_timestamp=12.0,
                               config=BreakerConfig(consecutive_fault_limit=2))
        payload = record.to_dict()
        assert payload["config"]["consecutive_fault_limit"] == 2
        assert BreakerRecord.from_dict(payload) == record

    def test_copy_is_independent(self):
        record = BreakerRecord(name="geo")
        clone = record.copy()
        clone.fault_count = 3
        assert record.fault_count == 0
