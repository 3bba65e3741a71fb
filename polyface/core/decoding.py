"""Helpers for decoding loosely-typed Firestore and callable-function payloads.

The backend has written the same concepts under different field names over
time, and timestamps reach us in three shapes depending on the transport:

- Firestore reads give native datetimes (``DatetimeWithNanoseconds``)
- callable-function responses serialize them as ``{"_seconds": ..., "_nanoseconds": ...}``
- some older records store raw epoch seconds
"""
from collections.abc import Callable, Mapping
from datetime import datetime, timezone
from typing import Any


def _from_epoch(seconds: float) -> datetime | None:
    # Millisecond epochs and other out-of-range values are unreadable, not fatal
    try:
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (ValueError, OverflowError, OSError):
        return None


def to_datetime(value: Any) -> datetime | None:
    """Coerce a timestamp-like value into an aware UTC datetime."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    if isinstance(value, Mapping):
        seconds = value.get("_seconds")
        if isinstance(seconds, (int, float)) and not isinstance(seconds, bool):
            nanos = value.get("_nanoseconds")
            if not isinstance(nanos, (int, float)) or isinstance(nanos, bool):
                nanos = 0
            return _from_epoch(seconds + nanos / 1e9)
        return None
    if isinstance(value, (int, float)):
        return _from_epoch(value)
    return None


def first_present(data: Mapping[str, Any], *keys: str, convert: Callable[[Any], Any] | None = None) -> Any:
    """Return the first non-null value among ``keys``, in order.

    With ``convert``, each alias is converted before the null check, so a
    wrongly-typed current name still falls back to the legacy one.
    """
    for key in keys:
        value = data.get(key)
        if convert is not None:
            value = convert(value)
        if value is not None:
            return value
    return None


def as_str(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def as_int(value: Any) -> int | None:
    # Firestore hands back ints; JSON transports sometimes give 3.0
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def as_bool(value: Any) -> bool | None:
    return value if isinstance(value, bool) else None
