"""Circuit breaker engine: gate check, timed request, fault bookkeeping."""

from __future__ import annotations

import logging
import time
from dataclasses import replace
from typing import TYPE_CHECKING, Any, Callable, Optional

from breaker.errors import CircuitTrippedError, StoreError, UpstreamError
from breaker.models import BreakerConfig, BreakerRecord
from breaker.store import MemoryStore, RecordStore
from breaker.tripper import RequestSpec, TimeTripper

if TYPE_CHECKING:
    from breaker.config import Settings

logger = logging.getLogger(__name__)


class Breaker:
    """Named guard that fails fast while an upstream is deemed unhealthy.

    Every ``run`` reads the record for ``name`` from the store, restores it
    when the fault window has elapsed since the last fault, and refuses the
    call while it stays tripped. Failures and timeouts are written back to
    the store before the ``UpstreamError`` reaches the caller. Successful
    calls do not touch the record; consecutive faults only reset through
    restoration.

    The read-modify-write against the store is not locked. Concurrent runs
    on the same name may lose fault increments.
    """

    def __init__(
        self,
        name: str,
        config: Optional[BreakerConfig] = None,
        store: Optional[RecordStore] = None,
        send: Optional[Callable[..., Any]] = None,
        **overrides: Any,
    ) -> None:
        self.name = name
        self.config = (config or BreakerConfig()).with_overrides(**overrides)
        self.store: RecordStore = store if store is not None else MemoryStore()
        self._send = send
        self._clock: Callable[[], float] = time.time

    @classmethod
    def from_settings(
        cls,
        name: str,
        settings: "Settings",
        store: Optional[RecordStore] = None,
        send: Optional[Callable[..., Any]] = None,
    ) -> "Breaker":
        return cls(name, config=settings.config_for(name), store=store, send=send)

    def setup(self) -> BreakerRecord:
        """Provision the zeroed record for this breaker if none exists."""
        return self._store_call(self.store.find_or_create, self.name, self.config)

    def status(self) -> BreakerRecord:
        return self._load_record()

    def run(self, request_spec: RequestSpec) -> Any:
        self.ensure_circuit_closed()
        return self.make_request(request_spec)

    def ensure_circuit_closed(self) -> None:
        record = self._load_record()
        if not record.tripped:
            return
        if self.should_restore(record):
            self.restore(record)
            return
        raise CircuitTrippedError(self.name)

    def make_request(self, request_spec: RequestSpec) -> Any:
        tripper = TimeTripper(request_spec, self.config.request_timeout_duration, send=self._send)
        result = tripper.run()
        if result.ok:
            return result.response

        err = UpstreamError.from_result(result)
        self.fault(err)
        raise err

    def fault(self, err: UpstreamError) -> None:
        """Record a fault. Store failures are logged so ``err`` still surfaces."""
        try:
            record = self._load_record()
            if self.should_trip(record):
                self.trip(record)
            else:
                self.increment_faults(record)
        except StoreError as store_err:
            logger.error("Breaker %s: failed to record fault (%s): %s", self.name, err, store_err)

    def should_trip(self, record: BreakerRecord, now: Optional[float] = None) -> bool:
        now = self._clock() if now is None else now
        return (
            record.consecutive_faults + 1 >= self.config.consecutive_fault_limit
            or now - record.fault_timestamp <= self.config.fault_window_duration
        )

    def should_restore(self, record: BreakerRecord, now: Optional[float] = None) -> bool:
        now = self._clock() if now is None else now
        return now - record.fault_timestamp > self.config.fault_window_duration

    def trip(self, record: BreakerRecord) -> BreakerRecord:
        now = self._clock()
        logger.warning(
            "Breaker %s tripped after %d consecutive faults",
            self.name, record.consecutive_faults + 1,
        )
        return self._save(replace(
            record,
            consecutive_faults=record.consecutive_faults + 1,
            fault_count=record.fault_count + 1,
            fault_timestamp=now,
            tripped=True,
            trip_timestamp=now,
        ))

    def restore(self, record: BreakerRecord) -> BreakerRecord:
        logger.info("Breaker %s restored (fault window elapsed)", self.name)
        return self._save(replace(
            record,
            consecutive_faults=0,
            fault_count=0,
            fault_timestamp=0.0,
            tripped=False,
            trip_timestamp=0.0,
        ))

    def increment_faults(self, record: BreakerRecord) -> BreakerRecord:
        logger.debug("Breaker %s fault %d", self.name, record.consecutive_faults + 1)
        return self._save(replace(
            record,
            consecutive_faults=record.consecutive_faults + 1,
            fault_count=record.fault_count + 1,
            fault_timestamp=self._clock(),
        ))

    def _load_record(self) -> BreakerRecord:
        record = self._store_call(self.store.get, self.name)
        if record is None:
            record = self.setup()
        return record

    def _save(self, record: BreakerRecord) -> BreakerRecord:
        return self._store_call(self.store.set, self.name, record)

    def _store_call(self, fn: Callable[..., Any], *args: Any) -> Any:
        try:
            return fn(*args)
        except StoreError:
            raise
        except Exception as exc:  # noqa: BLE001
            op = getattr(fn, "__name__", "call")
            raise StoreError(f"Breaker {self.name}: store {op} failed: {exc}") from exc
