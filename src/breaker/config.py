"""Configuration loader for breakers and their record store."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from jsonschema import Draft7Validator

from breaker.models import BreakerConfig
from breaker.store import MemoryStore, RecordStore

STORE_BACKENDS = ("memory", "sqlite")

_THRESHOLDS_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "fault_window_duration": {"type": "number", "exclusiveMinimum": 0},
        "trip_cooldown_duration": {"type": "number", "exclusiveMinimum": 0},
        "consecutive_fault_limit": {"type": "integer", "minimum": 1},
        "windowed_fault_limit": {"type": "integer", "minimum": 1},
        "request_timeout_duration": {"type": "number", "exclusiveMinimum": 0},
    },
}

CONFIG_SCHEMA: Dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "properties": {
        "defaults": _THRESHOLDS_SCHEMA,
        "store": {
            "type": "object",
            "additionalProperties": False,
            "properties": {
                "backend": {"type": "string", "enum": list(STORE_BACKENDS)},
                "db_path": {"type": ["string", "null"]},
            },
        },
        "breakers": {
            "type": "object",
            "additionalProperties": _THRESHOLDS_SCHEMA,
        },
    },
}

_validator = Draft7Validator(CONFIG_SCHEMA)


def validate_config(payload: Dict[str, Any]) -> None:
    errors = sorted(_validator.iter_errors(payload), key=lambda e: list(e.path))
    if errors:
        messages = ", ".join(error.message for error in errors)
        raise ValueError(f"breaker config validation failed: {messages}")


@dataclass(frozen=True)
class Settings:
    defaults: BreakerConfig
    breakers: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    store_backend: str = "memory"
    store_db_path: Optional[Path] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Settings":
        validate_config(data)
        store_data = data.get("store", {})
        db_path = store_data.get("db_path")
        return cls(
            defaults=BreakerConfig.from_dict(data.get("defaults", {})),
            breakers={name: dict(overrides or {}) for name, overrides in data.get("breakers", {}).items()},
            store_backend=store_data.get("backend", "memory"),
            store_db_path=Path(db_path).expanduser() if db_path else None,
        )

    def config_for(self, name: str) -> BreakerConfig:
        """Defaults with any per-breaker overrides for ``name`` applied."""
        return self.defaults.with_overrides(**self.breakers.get(name, {}))


ENV_MAP = {
    "defaults.fault_window_duration": "BREAKER_FAULT_WINDOW",
    "defaults.trip_cooldown_duration": "BREAKER_TRIP_COOLDOWN",
    "defaults.consecutive_fault_limit": "BREAKER_CONSECUTIVE_FAULT_LIMIT",
    "defaults.windowed_fault_limit": "BREAKER_WINDOWED_FAULT_LIMIT",
    "defaults.request_timeout_duration": "BREAKER_REQUEST_TIMEOUT",
    "store.backend": "BREAKER_STORE_BACKEND",
    "store.db_path": "BREAKER_DB_PATH",
}


def load_yaml(path: Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        return yaml.safe_load(handle) or {}


def merge_env_overrides(config_data: Dict[str, Any]) -> Dict[str, Any]:
    merged = json.loads(json.dumps(config_data))  # deep copy via json

    for dotted_key, env_name in ENV_MAP.items():
        if env_name not in os.environ:
            continue
        value: Any = os.environ[env_name]
        target = merged
        parts = dotted_key.split(".")
        for part in parts[:-1]:
            target = target.setdefault(part, {})
        last = parts[-1]
        if last.endswith("_limit"):
            value = int(value)
        elif last.endswith("_duration"):
            value = float(value)
        target[last] = value

    return merged


def load_config(config_path: str | Path = "config/breaker.defaults.yml") -> Settings:
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    data = load_yaml(path)
    data = merge_env_overrides(data)
    return Settings.from_dict(data)


def create_store(settings: Settings) -> RecordStore:
    if settings.store_backend == "sqlite":
        from breaker.sqlite_store import SQLiteStore

        return SQLiteStore(str(settings.store_db_path) if settings.store_db_path else None)
    return MemoryStore()
