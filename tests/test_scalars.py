from __future__ import annotations

from datetime import datetime, timezone

import pytest

from reddit_api.errors import MalformedScalar
from reddit_api.scalars import (
    ZERO_TIMESTAMP,
    decode_timestamp,
    encode_timestamp,
    is_zero_timestamp,
)


def test_decode_timestamp_from_float_seconds():
    decoded = decode_timestamp(1622548800.0)

    assert decoded == datetime.fromtimestamp(1622548800, tz=timezone.utc)
    assert decoded.tzinfo is not None


def test_decode_timestamp_truncates_fractional_seconds():
    assert decode_timestamp("1622548800.75") == decode_timestamp(1622548800)


@pytest.mark.parametrize("raw", [False, True, "false", b"true", " false "])
def test_decode_timestamp_boolean_is_zero_value(raw):
    decoded = decode_timestamp(raw)

    assert decoded == ZERO_TIMESTAMP
    assert is_zero_timestamp(decoded)


def test_decode_timestamp_from_raw_json_bytes():
    assert decode_timestamp(b"1622548800.0") == decode_timestamp(1622548800)


def test_decode_timestamp_rejects_non_numeric_text():
    with pytest.raises(MalformedScalar) as excinfo:
        decode_timestamp("not-a-number")

    assert excinfo.value.raw == "not-a-number"


@pytest.mark.parametrize("raw", [None, float("nan"), float("inf"), 1e12, [1622548800], {"t": 1}])
def test_decode_timestamp_rejects_unusable_values(raw):
    with pytest.raises(MalformedScalar):
        decode_timestamp(raw)


def test_malformed_scalar_is_a_value_error():
    with pytest.raises(ValueError):
        decode_timestamp("yesterday")


def test_encode_timestamp_maps_zero_back_to_false():
    assert encode_timestamp(ZERO_TIMESTAMP) is False
    assert encode_timestamp(decode_timestamp(1622548800.0)) == 1622548800.0
