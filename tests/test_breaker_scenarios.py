import time

import pytest

from breaker import Breaker, MemoryStore, UpstreamError


def test_failure_records_fault_on_fresh_breaker(make_transport, attributes):
    store = MemoryStore()
    transport = make_transport(status_code=403, text="It all went wrong")
    breaker = Breaker("geo", store=store, send=transport)

    with pytest.raises(UpstreamError) as excinfo:
        breaker.run(attributes)

    assert str(excinfo.value) == "403: It all went wrong"
    record = store.get("geo")
    assert record.consecutive_faults == 1
    assert record.fault_count == 1
    assert record.fault_timestamp > 0
    assert record.tripped is False
    assert record.trip_timestamp == 0


def test_consecutive_fault_limit_trips(make_transport, attributes):
    store = MemoryStore()
    breaker = Breaker("geo", store=store, send=make_transport(403, "It all went wrong"),
                      consecutive_fault_limit=2)
    breaker.increment_faults(breaker.setup())

    with pytest.raises(UpstreamError):
        breaker.run(attributes)

    record = store.get("geo")
    assert record.fault_count == 2
    assert record.consecutive_faults == 2
    assert record.tripped is True
    assert record.trip_timestamp > 0


def test_expired_window_restores_and_allows_request(make_transport, attributes):
    store = MemoryStore()
    transport = make_transport()
    breaker = Breaker("geo", store=store, send=transport)
    record = breaker.setup()
    stale = time.time() - breaker.config.fault_window_duration - 0.1
    record.tripped = True
    record.consecutive_faults = 3
    record.fault_count = 5
    record.fault_timestamp = stale
    record.trip_timestamp = stale
    store.set("geo", record)

    response = breaker.run(attributes)

    assert response.status_code == 200
    assert response.text == "Oh yeah! it worked"
    restored = store.get("geo")
    assert restored.fault_count == 0
    assert restored.consecutive_faults == 0
    assert restored.tripped is False
    assert restored.trip_timestamp == 0


def test_timeout_counts_as_fault(make_transport, attributes):
    store = MemoryStore()
    breaker = Breaker("geo", store=store, send=make_transport(delay=0.1),
                      request_timeout_duration=0.05)

    with pytest.raises(UpstreamError) as excinfo:
        breaker.run(attributes)

    assert str(excinfo.value) == "Request timed out"
    assert excinfo.value.status_code == 500
    record = store.get("geo")
    assert record.consecutive_faults == 1
    assert record.fault_count == 1
    assert record.fault_timestamp > 0
