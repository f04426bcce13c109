"""Unit tests for relative-time normalization."""

from __future__ import annotations

import logging

import numpy as np
import pandas as pd
import pytest

from irikit.config import TimeUnit
from irikit.exceptions import FormatError
from irikit.reader import DimensionData
from irikit.timeconv import normalize, parse_time_encoding


def _dim(values, units: str | None = "months since 1960-01-01", **attrs) -> DimensionData:
    if units is not None:
        attrs["units"] = units
    return DimensionData("T", np.asarray(values, dtype="float64"), attrs)


def _dates(*texts: str) -> list:
    return [pd.Timestamp(t) for t in texts]


def test_months_advance_by_calendar_month() -> None:
    result = normalize(_dim([0, 1, 12]))

    assert list(result) == _dates("1960-01-01", "1960-02-01", "1961-01-01")


def test_month_end_is_clipped_by_calendar() -> None:
    result = normalize(_dim([1, 2], units="months since 1960-01-31"))

    assert list(result) == _dates("1960-02-29", "1960-03-31")


def test_fractional_month_is_a_fraction_of_the_following_month() -> None:
    result = normalize(_dim([0.5, 1.5, -0.5]))

    assert list(result) == _dates("1960-01-16 12:00", "1960-02-15 12:00", "1959-12-16 12:00")


def test_years_and_negative_offsets() -> None:
    result = normalize(_dim([-1, 0, 2], units="years since 2000-02-29"))

    assert list(result) == _dates("1999-02-28", "2000-02-29", "2002-02-28")


@pytest.mark.parametrize(
    "units, offsets, expected",
    [
        ("days since 1970-01-01", [0, 1.5, 365], ["1970-01-01", "1970-01-02 12:00", "1971-01-01"]),
        ("hours since 1970-01-01 00:00:00", [0, 36], ["1970-01-01", "1970-01-02 12:00"]),
        ("minutes since 2000-01-01T06:00:00Z", [90], ["2000-01-01 07:30"]),
        ("Seconds since 2000-01-01", [86400.5], ["2000-01-02 00:00:00.5"]),
    ],
)
def test_duration_units_are_exact(units, offsets, expected) -> None:
    assert list(normalize(_dim(offsets, units=units))) == _dates(*expected)


def test_output_length_and_order_follow_input() -> None:
    result = normalize(_dim([3, 0, 2, 1], units="days since 2001-01-01"))

    assert len(result) == 4
    assert list(result.day) == [4, 1, 3, 2]


def test_empty_sequence() -> None:
    assert len(normalize(_dim([]))) == 0


def test_parse_time_encoding() -> None:
    enc = parse_time_encoding("months since 1960-01-01", calendar="360")

    assert enc.unit is TimeUnit.MONTHS
    assert enc.reference == pd.Timestamp("1960-01-01")
    assert enc.calendar == "360"


def test_timezone_offset_is_converted_to_utc() -> None:
    enc = parse_time_encoding("hours since 2000-01-01 06:00:00+06:00")

    assert enc.reference == pd.Timestamp("2000-01-01 00:00")
    assert enc.reference.tzinfo is None


@pytest.mark.parametrize(
    "units, fragment",
    [
        ("fortnights since 1960-01-01", "fortnights"),
        ("months after 1960-01-01", "months after 1960-01-01"),
        ("months since January 1960", "January 1960"),
        ("days since 1960-02-30", "1960-02-30"),
        ("", "''"),
    ],
)
def test_bad_units_raise_format_error(units: str, fragment: str) -> None:
    with pytest.raises(FormatError) as info:
        normalize(_dim([0], units=units))

    assert fragment in str(info.value)


def test_missing_units_attribute() -> None:
    with pytest.raises(FormatError, match="units"):
        normalize(_dim([0], units=None))


@pytest.mark.parametrize("bad", [np.nan, np.inf, -np.inf])
def test_non_finite_offsets_raise_format_error(bad: float) -> None:
    with pytest.raises(FormatError, match="有限"):
        normalize(_dim([0, bad]))


def test_offsets_beyond_timestamp_range() -> None:
    with pytest.raises(FormatError):
        normalize(_dim([1e20], units="days since 1960-01-01"))


def test_non_standard_calendar_is_logged(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="irikit"):
        normalize(_dim([0, 1], calendar="360"))

    assert "360" in caplog.text
