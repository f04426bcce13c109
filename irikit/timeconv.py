"""
相对时间编码 "<unit> since <reference-date>" ➜ 日历日期

秒 / 分 / 时 / 日：精确时长相加。
月 / 年：按整月 / 整年做日历推进（1960-01-31 + 1 month = 1960-02-29）；
小数部分按其后那一个日历月 / 年的长度折算，例如 0.5 months since 1960-01-01
→ 1960-01-16 12:00（月中，常见于月平均资料的 T 轴）。
"""
from __future__ import annotations
import math
from dataclasses import dataclass

import numpy as np
import pandas as pd

from .config import TimeUnit, UNITS_RE, STANDARD_CALENDARS
from .exceptions import FormatError
from .reader import DimensionData
from .utils import log

_DURATION_UNITS = {
    TimeUnit.SECONDS: "s",
    TimeUnit.MINUTES: "min",
    TimeUnit.HOURS:   "h",
    TimeUnit.DAYS:    "D",
}


@dataclass(frozen=True)
class TimeEncoding:
    unit: TimeUnit
    reference: pd.Timestamp
    calendar: str | None = None


def parse_time_encoding(units: str, calendar: str | None = None) -> TimeEncoding:
    if not isinstance(units, str):
        raise FormatError(f"时间 units 必须是字符串，收到 {units!r}")
    m = UNITS_RE.match(units)
    if not m:
        raise FormatError(f"无法识别的时间 units {units!r}，应为 '<unit> since <YYYY-MM-DD>'")
    try:
        unit = TimeUnit(m["unit"].lower())
    except ValueError:
        raise FormatError(f"不支持的时间单位 {m['unit']!r} (units={units!r})") from None

    ref_text = m["ref"].replace("UTC", "").strip()
    try:
        ref = pd.Timestamp(ref_text)
    except (ValueError, OverflowError) as exc:
        raise FormatError(f"参考日期无效 {m['ref']!r} (units={units!r})") from exc
    if ref is pd.NaT:
        raise FormatError(f"参考日期无效 {m['ref']!r} (units={units!r})")
    if ref.tzinfo is not None:
        ref = ref.tz_convert("UTC").tz_localize(None)
    return TimeEncoding(unit, ref, calendar)


def _shift_calendar(ref: pd.Timestamp, offset: float, unit: TimeUnit) -> pd.Timestamp:
    key = "months" if unit is TimeUnit.MONTHS else "years"
    whole = math.floor(offset)
    frac = offset - whole
    start = ref + pd.DateOffset(**{key: whole})
    if not frac:
        return start
    end = ref + pd.DateOffset(**{key: whole + 1})
    return start + (end - start) * frac


def normalize(dim: DimensionData) -> pd.DatetimeIndex:
    units = dim.attr("units")
    if units is None:
        raise FormatError(f"维度 {dim.name!r} 缺少 units 属性")
    enc = parse_time_encoding(units, dim.attr("calendar"))
    if enc.calendar and enc.calendar.lower() not in STANDARD_CALENDARS:
        log.warning("维度 %s 的 calendar=%r 非公历，按公历换算", dim.name, enc.calendar)

    try:
        offsets = np.asarray(dim.values, dtype="float64").ravel()
    except (TypeError, ValueError) as exc:
        raise FormatError(f"维度 {dim.name!r} 的取值不是数值") from exc

    bad = ~np.isfinite(offsets)
    if bad.any():
        i = int(np.argmax(bad))
        raise FormatError(f"维度 {dim.name!r} 第 {i} 个偏移量 {offsets[i]!r} 不是有限值")

    try:
        if enc.unit in _DURATION_UNITS:
            deltas = pd.to_timedelta(offsets, unit=_DURATION_UNITS[enc.unit])
            dates = pd.DatetimeIndex(enc.reference + deltas)
        else:
            dates = pd.DatetimeIndex([_shift_calendar(enc.reference, o, enc.unit) for o in offsets])
    except (OverflowError, ValueError) as exc:
        lo, hi = (offsets.min(), offsets.max()) if offsets.size else (None, None)
        raise FormatError(
            f"维度 {dim.name!r} 的偏移量超出可表示的日期范围 ({lo!r} … {hi!r} {enc.unit.value})"
        ) from exc
    return dates.rename(dim.name)
