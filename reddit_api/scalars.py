"""Decoding of the loosely typed scalar values found in Reddit payloads."""
from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone
from typing import Any

from .errors import MalformedScalar

UNIX_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
# Sentinel for timestamps the platform reports as unset.
ZERO_TIMESTAMP = datetime.min.replace(tzinfo=timezone.utc)

_BOOLEAN_LITERALS = {"true", "false"}


def is_zero_timestamp(value: datetime) -> bool:
    return value == ZERO_TIMESTAMP


def _from_epoch_seconds(seconds: float, raw: Any) -> datetime:
    if not math.isfinite(seconds):
        raise MalformedScalar(raw)
    try:
        return UNIX_EPOCH + timedelta(seconds=int(seconds))
    except OverflowError as exc:
        raise MalformedScalar(raw, f"Timestamp out of range: {raw!r}") from exc


def decode_timestamp(raw: Any) -> datetime:
    """Decode a timestamp field that is either epoch seconds or a boolean.

    Reddit serialises some unset timestamps (``edited`` in particular) as
    ``false`` rather than ``null``. Booleans therefore decode to
    :data:`ZERO_TIMESTAMP` instead of failing. ``raw`` may be a parsed JSON
    value or the raw JSON text of the field.
    """
    if isinstance(raw, bool):
        return ZERO_TIMESTAMP
    if isinstance(raw, (int, float)):
        return _from_epoch_seconds(float(raw), raw)
    if isinstance(raw, (bytes, bytearray)):
        try:
            text = bytes(raw).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise MalformedScalar(raw) from exc
    elif isinstance(raw, str):
        text = raw
    else:
        raise MalformedScalar(raw)

    text = text.strip()
    if text in _BOOLEAN_LITERALS:
        return ZERO_TIMESTAMP
    try:
        seconds = float(text)
    except ValueError as exc:
        raise MalformedScalar(raw) from exc
    return _from_epoch_seconds(seconds, raw)


def encode_timestamp(value: datetime) -> float | bool:
    """Inverse of :func:`decode_timestamp` used when serialising records."""
    if is_zero_timestamp(value):
        return False
    return float(int((value - UNIX_EPOCH).total_seconds()))


__all__ = [
    "UNIX_EPOCH",
    "ZERO_TIMESTAMP",
    "decode_timestamp",
    "encode_timestamp",
    "is_zero_timestamp",
]
