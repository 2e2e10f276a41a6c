"""Breaker configuration and the persisted fault-tracking record."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from typing import Any, Dict

FAULT_WINDOW = 10 * 60.0  # 10 minutes
TRIP_COOLDOWN = 5 * 60.0  # 5 minutes
CONSECUTIVE_FAULT_LIMIT = 3
WINDOWED_FAULT_LIMIT = 5
REQUEST_TIMEOUT = 30.0  # seconds


@dataclass(frozen=True)
class BreakerConfig:
    """Thresholds for a single named breaker. Durations are in seconds."""

    fault_window_duration: float = FAULT_WINDOW
    trip_cooldown_duration: float = TRIP_COOLDOWN
    consecutive_fault_limit: int = CONSECUTIVE_FAULT_LIMIT
    windowed_fault_limit: int = WINDOWED_FAULT_LIMIT
    request_timeout_duration: float = REQUEST_TIMEOUT

    def __post_init__(self) -> None:
        for name in ("fault_window_duration", "trip_cooldown_duration", "request_timeout_duration"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)!r}")
        for name in ("consecutive_fault_limit", "windowed_fault_limit"):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be at least 1, got {getattr(self, name)!r}")

    def with_overrides(self, **overrides: Any) -> "BreakerConfig":
        """Return a copy with ``overrides`` applied. Unknown names raise TypeError."""
        if not overrides:
            return self
        return replace(self, **overrides)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BreakerConfig":
        defaults = cls()
        return cls(
            fault_window_duration=float(data.get("fault_window_duration", defaults.fault_window_duration)),
            trip_cooldown_duration=float(data.get("trip_cooldown_duration", defaults.trip_cooldown_duration)),
            consecutive_fault_limit=int(data.get("consecutive_fault_limit", defaults.consecutive_fault_limit)),
            windowed_fault_limit=int(data.get("windowed_fault_limit", defaults.windowed_fault_limit)),
            request_timeout_duration=float(
                data.get("request_timeout_duration", defaults.request_timeout_duration)
            ),
        )


@dataclass
class BreakerRecord:
    """One fault-tracking record per breaker name.

    Timestamps are epoch seconds; ``0.0`` means unset.
    """

    name: str
    consecutive_faults: int = 0
    fault_count: int = 0
    fault_timestamp: float = 0.0
    tripped: bool = False
    trip_timestamp: float = 0.0
    config: BreakerConfig = field(default_factory=BreakerConfig)

    def copy(self) -> "BreakerRecord":
        return replace(self)

    def to_dict(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["config"] = self.config.to_dict()
        return payload

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BreakerRecord":
        return cls(
            name=data["name"],
            consecutive_faults=int(data.get("consecutive_faults", 0)),
            fault_count=int(data.get("fault_count", 0)),
            fault_timestamp=float(data.get("fault_timestamp", 0.0) or 0.0),
            tripped=bool(data.get("tripped", False)),
            trip_timestamp=float(data.get("trip_timestamp", 0.0) or 0.0),
            config=BreakerConfig.from_dict(data.get("config") or {}),
        )
