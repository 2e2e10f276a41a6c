"""Record store protocol and the in-process implementation."""

from __future__ import annotations

import logging
from typing import Dict, Optional, Protocol, runtime_checkable

from breaker.models import BreakerConfig, BreakerRecord

logger = logging.getLogger(__name__)


@runtime_checkable
class RecordStore(Protocol):
    """Keyed storage for one ``BreakerRecord`` per breaker name.

    Backends only promise per-name lookup. The breaker does read-modify-write
    cycles without a lock, so fault counts are best-effort under concurrent
    callers unless the backend itself serialises updates.
    """

    def get(self, name: str) -> Optional[BreakerRecord]:
        """Return the record for ``name`` or None if there is none."""
        ...

    def set(self, name: str, record: BreakerRecord) -> BreakerRecord:
        """Upsert the record and return the stored value."""
        ...

    def destroy(self, name: str) -> None:
        """Remove the record (no-op if absent)."""
        ...

    def find_or_create(self, name: str, config: BreakerConfig) -> BreakerRecord:
        """Return the existing record or create a zeroed one bound to ``config``."""
        ...


class MemoryStore:
    """Single-process store backed by a plain dict. Last write wins."""

    def __init__(self) -> None:
        self._store: Dict[str, BreakerRecord] = {}

    def get(self, name: str) -> Optional[BreakerRecord]:
        record = self._store.get(name)
        return record.copy() if record is not None else None

    def set(self, name: str, record: BreakerRecord) -> BreakerRecord:
        self._store[name] = record.copy()
        return record.copy()

    def destroy(self, name: str) -> None:
        self._store.pop(name, None)

    def find_or_create(self, name: str, config: BreakerConfig) -> BreakerRecord:
        if name not in self._store:
            self._store[name] = BreakerRecord(name=name, config=config)
            logger.debug("Created breaker record %s", name)
        return self._store[name].copy()

    def __len__(self) -> int:
        return len(self._store)
