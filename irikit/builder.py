"""
不可变查询构造器：每次调用返回追加了一个标签的新 QueryState
"""
from __future__ import annotations
import re
from dataclasses import dataclass
from typing import Tuple

from .config import SERVICE_ROOT, TagKind, AggregationOp, AnalysisOp
from .catalog import resolve_variable
from .exceptions import ValidationError
from .grammar import Tag, OrderRules, DEFAULT_RULES, check_order

WINDOW_RE = re.compile(r"^[A-Za-z0-9.:\-]+$")


@dataclass(frozen=True)
class QueryState:
    tags: Tuple[Tag, ...]

    def __len__(self) -> int:
        return len(self.tags)

    def kinds(self) -> Tuple[TagKind, ...]:
        return tuple(t.kind for t in self.tags)


def _append(state: QueryState, tag: Tag, rules: OrderRules) -> QueryState:
    if not isinstance(state, QueryState):
        raise ValidationError(f"需要 QueryState，收到 {type(state).__name__}")
    check_order(state.tags, tag.kind, rules)
    return QueryState(state.tags + (tag,))


def _coord(name: str, value, limit: float) -> float:
    if isinstance(value, bool):
        raise ValidationError(f"{name}={value!r} 不是数值")
    try:
        v = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name}={value!r} 不是数值") from None
    # NaN 在比较中恒为 False，会落到这里
    if not (-limit <= v <= limit):
        raise ValidationError(f"{name}={value!r} 超出范围 [-{limit:g}, {limit:g}]")
    return v


def _keyword(enum_cls, value, what: str) -> str:
    try:
        return enum_cls(value).value
    except ValueError:
        allowed = ", ".join(e.value for e in enum_cls)
        raise ValidationError(f"未知{what} {value!r}；可用: {allowed}") from None


# ─── 公开构造函数 ──────────────────────────────────────────────────────────────
def base() -> QueryState:
    return QueryState((Tag(TagKind.BASE, (SERVICE_ROOT,)),))


def with_variable(state: QueryState, name: str, *, rules: OrderRules = DEFAULT_RULES) -> QueryState:
    info = resolve_variable(name)
    return _append(state, Tag(TagKind.VARIABLE, (name, info["path"])), rules)


def filter_point(state: QueryState, lat, lon, *, rules: OrderRules = DEFAULT_RULES) -> QueryState:
    lat = _coord("lat", lat, 90)
    lon = _coord("lon", lon, 180)
    return _append(state, Tag(TagKind.POINT, (lat, lon)), rules)


def filter_region(
    state: QueryState,
    lat_min, lat_max, lon_min, lon_max,
    *, rules: OrderRules = DEFAULT_RULES,
) -> QueryState:
    lat_min = _coord("lat_min", lat_min, 90)
    lat_max = _coord("lat_max", lat_max, 90)
    lon_min = _coord("lon_min", lon_min, 180)
    lon_max = _coord("lon_max", lon_max, 180)
    if lat_min > lat_max:
        raise ValidationError(f"纬度范围颠倒: lat_min={lat_min:g} > lat_max={lat_max:g}")
    if lon_min > lon_max:
        raise ValidationError(f"经度范围颠倒: lon_min={lon_min:g} > lon_max={lon_max:g}")
    return _append(state, Tag(TagKind.REGION, (lat_min, lat_max, lon_min, lon_max)), rules)


def aggregate(state: QueryState, op, window, *, rules: OrderRules = DEFAULT_RULES) -> QueryState:
    op = _keyword(AggregationOp, op, "聚合算子")
    if isinstance(window, int) and not isinstance(window, bool):
        window = str(window)
    if not isinstance(window, str) or not WINDOW_RE.match(window):
        raise ValidationError(f"非法时间窗口 {window!r}")
    return _append(state, Tag(TagKind.AGGREGATE, (op, window)), rules)


def analyze(state: QueryState, op, *, rules: OrderRules = DEFAULT_RULES) -> QueryState:
    op = _keyword(AnalysisOp, op, "分析算子")
    return _append(state, Tag(TagKind.ANALYSIS, (op,)), rules)
