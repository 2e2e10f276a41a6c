"""
Breaker — circuit-breaker guard for outbound HTTP calls

Provides:
- Breaker engine (Breaker) — gate check, timed request, trip/restore
- Timed executor (TimeTripper) — one request, one outcome, hard deadline
- Record stores (MemoryStore, SQLiteStore) — one record per breaker name
- Settings loader (load_config) — YAML defaults + env overrides
"""

from .breaker import Breaker
from .config import Settings, create_store, load_config
from .errors import BreakerError, CircuitTrippedError, StoreError, UpstreamError
from .models import BreakerConfig, BreakerRecord
from .sqlite_store import SQLiteStore
from .store import MemoryStore, RecordStore
from .tripper import TimeTripper, TripOutcome, TripResult

__all__ = [
    'Breaker',
    'Settings', 'create_store', 'load_config',
    'BreakerError', 'CircuitTrippedError', 'StoreError', 'UpstreamError',
    'BreakerConfig', 'BreakerRecord',
    'MemoryStore', 'RecordStore', 'SQLiteStore',
    'TimeTripper', 'TripOutcome', 'TripResult',
]
