from __future__ import annotations

import math

from radarlock.ingestion.normalize import (
    normalize_timestamp_seconds,
    safe_bool,
    safe_float,
    safe_int,
    safe_str,
)


def test_safe_float_rejects_non_numbers() -> None:
    assert safe_float(None) is None
    assert safe_float("") is None
    assert safe_float(True) is None
    assert safe_float(math.nan) is None
    assert safe_float(math.inf) is None
    assert safe_float("abc") is None
    assert safe_float("3.25") == 3.25


def test_safe_int_rounds() -> None:
    assert safe_int("9.6") == 10
    assert safe_int(None) is None


def test_safe_str_strips_and_drops_empty() -> None:
    assert safe_str("  abc ") == "abc"
    assert safe_str("   ") is None
    assert safe_str(7) == "7"


def test_safe_bool_accepts_common_spellings() -> None:
    assert safe_bool("yes") is True
    assert safe_bool("disconnected") is False
    assert safe_bool(0) is False
    assert safe_bool("maybe") is None
    assert safe_bool("maybe", default=True) is True


def test_timestamp_normalization() -> None:
    assert normalize_timestamp_seconds(1_700_000_000_000) == 1_700_000_000.0
    assert normalize_timestamp_seconds(1_700_000_000) == 1_700_000_000.0
    assert normalize_timestamp_seconds(0) is None
    assert normalize_timestamp_seconds(-5) is None
    assert normalize_timestamp_seconds(None) is None
