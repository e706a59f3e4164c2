"""
Payload hygiene — strip absent values before writes, normalize timestamps on reads.

    remove_undefined({"label": None, "phone": UNDEFINED})   # {"label": None}
    to_datetime({"seconds": 1700000000, "nanoseconds": 0})  # 2023-11-14 22:13:20+00:00
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import UTC, datetime, timedelta
from typing import Any

from artiflare.store._types import SERVER_TIMESTAMP


# ═══════════════════════════════════════════════════════════════════════════════
# UNDEFINED
# ═══════════════════════════════════════════════════════════════════════════════


class _Undefined:
    """Marks "no value supplied" — distinct from an explicit ``None``."""

    _instance: _Undefined | None = None

    def __new__(cls) -> _Undefined:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNDEFINED"

    def __bool__(self) -> bool:
        return False


UNDEFINED: Any = _Undefined()


def remove_undefined(value: Any) -> Any:
    """
    Deep-clean: drop every mapping key and list element holding ``UNDEFINED``.

    ``None`` is kept (an explicit null is a value). Sentinels and datetimes
    pass through unchanged.
    """
    if isinstance(value, Mapping):
        return {
            k: remove_undefined(v) for k, v in value.items() if v is not UNDEFINED
        }
    if isinstance(value, (list, tuple)):
        return [remove_undefined(v) for v in value if v is not UNDEFINED]
    return value


# ═══════════════════════════════════════════════════════════════════════════════
# Timestamps
# ═══════════════════════════════════════════════════════════════════════════════

# Keys whose string / numeric values are timestamps wherever they appear.
TIMESTAMP_KEYS: frozenset[str] = frozenset({"createdAt", "updatedAt", "lastLogin"})


def is_timestamp_mapping(value: Any) -> bool:
    if not isinstance(value, Mapping) or len(value) != 2:
        return False
    keys = set(value)
    return keys == {"seconds", "nanoseconds"} or keys == {"_seconds", "_nanoseconds"}


def to_datetime(value: Any) -> datetime | None:
    """
    Coerce any stored timestamp shape into an aware UTC ``datetime``.

    Accepts ``datetime`` (naive is taken as UTC), ISO-8601 strings, epoch
    seconds, and ``{seconds, nanoseconds}`` / ``{_seconds, _nanoseconds}``
    mappings. Returns ``None`` for anything else.
    """
    match value:
        case datetime():
            if value.tzinfo is None:
                return value.replace(tzinfo=UTC)
            return value.astimezone(UTC)
        case bool():
            return None
        case int() | float():
            return datetime.fromtimestamp(value, tz=UTC)
        case str():
            try:
                parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
            except ValueError:
                return None
            return to_datetime(parsed)
        case Mapping() if is_timestamp_mapping(value):
            seconds = value.get("seconds", value.get("_seconds"))
            nanos = value.get("nanoseconds", value.get("_nanoseconds"))
            return datetime.fromtimestamp(int(seconds), tz=UTC) + timedelta(
                microseconds=int(nanos) // 1000
            )
        case _:
            return None


def from_datetime(value: datetime) -> dict[str, int]:
    """Encode as ``{seconds, nanoseconds}`` (the JSON column's timestamp shape)."""
    aware = value if value.tzinfo is not None else value.replace(tzinfo=UTC)
    return {
        "seconds": int(aware.timestamp()),
        "nanoseconds": aware.microsecond * 1000,
    }


def normalize_timestamps(value: Any, key: str | None = None) -> Any:
    """Walk a document, turning every timestamp representation into ``datetime``."""
    if isinstance(value, datetime) or is_timestamp_mapping(value):
        return to_datetime(value)
    if isinstance(value, Mapping):
        return {k: normalize_timestamps(v, k) for k, v in value.items()}
    if isinstance(value, list):
        return [normalize_timestamps(v) for v in value]
    if key in TIMESTAMP_KEYS and isinstance(value, (str, int, float)):
        converted = to_datetime(value)
        return converted if converted is not None else value
    return value


def resolve_server_timestamps(value: Any, now: datetime) -> Any:
    """Replace every ``SERVER_TIMESTAMP`` with ``now``."""
    if value is SERVER_TIMESTAMP:
        return now
    if isinstance(value, Mapping):
        return {k: resolve_server_timestamps(v, now) for k, v in value.items()}
    if isinstance(value, list):
        return [resolve_server_timestamps(v, now) for v in value]
    return value


def utcnow() -> datetime:
    return datetime.now(UTC)


__all__ = (
    "UNDEFINED",
    "remove_undefined",
    "TIMESTAMP_KEYS",
    "is_timestamp_mapping",
    "to_datetime",
    "from_datetime",
    "normalize_timestamps",
    "resolve_server_timestamps",
    "utcnow",
)
