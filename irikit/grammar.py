"""
查询标签文法：标签种类、参数字段名、URL 片段渲染、顺序规则
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Mapping, Tuple
from urllib.parse import quote_plus

from .config import TagKind
from .exceptions import ValidationError
from .utils import format_number

# 每种标签 args 的字段名（位置对应）
FIELDS: Dict[TagKind, Tuple[str, ...]] = {
    TagKind.BASE:      ("root",),
    TagKind.VARIABLE:  ("name", "path"),
    TagKind.POINT:     ("lat", "lon"),
    TagKind.REGION:    ("lat_min", "lat_max", "lon_min", "lon_max"),
    TagKind.AGGREGATE: ("op", "window"),
    TagKind.ANALYSIS:  ("op",),
}


@dataclass(frozen=True)
class Tag:
    kind: TagKind
    args: Tuple[Any, ...]

    def __post_init__(self):
        want = len(FIELDS[self.kind])
        if len(self.args) != want:
            raise ValidationError(f"{self.kind.value} 标签需要 {want} 个参数，收到 {self.args!r}")

    @property
    def params(self) -> Dict[str, Any]:
        return dict(zip(FIELDS[self.kind], self.args))


@dataclass(frozen=True)
class OrderRules:
    """
    requires   : kind → 必须已出现在其前面的 kind 集合
    singletons : 至多出现一次的 kind
    BASE 永远是第一个且唯一，不受规则控制。
    """
    requires: Mapping[TagKind, FrozenSet[TagKind]] = field(default_factory=dict)
    singletons: FrozenSet[TagKind] = frozenset()


DEFAULT_RULES = OrderRules(
    requires={
        TagKind.AGGREGATE: frozenset({TagKind.VARIABLE}),
        TagKind.ANALYSIS:  frozenset({TagKind.VARIABLE}),
    },
    singletons=frozenset({TagKind.VARIABLE}),
)


def check_order(tags: Tuple[Tag, ...], kind: TagKind, rules: OrderRules = DEFAULT_RULES):
    """在 tags 末尾追加 kind 之前做顺序校验"""
    if kind is TagKind.BASE:
        raise ValidationError("base 标签只能由 base() 创建")
    if not tags or tags[0].kind is not TagKind.BASE:
        raise ValidationError("查询必须以 base 标签开头")

    seen = {t.kind for t in tags}
    if kind in rules.singletons and kind in seen:
        raise ValidationError(f"{kind.value} 标签至多出现一次")
    missing = set(rules.requires.get(kind, ())) - seen
    if missing:
        names = ", ".join(sorted(k.value for k in missing))
        raise ValidationError(f"{kind.value} 标签之前必须先有: {names}")


# ─── URL 片段渲染 ──────────────────────────────────────────────────────────────
def render_tag(tag: Tag) -> str:
    p = tag.params
    if tag.kind is TagKind.BASE:
        return p["root"]
    if tag.kind is TagKind.VARIABLE:
        return f"/.{p['path']}"
    if tag.kind is TagKind.POINT:
        return f"/X/{format_number(p['lon'])}/VALUES/Y/{format_number(p['lat'])}/VALUES"
    if tag.kind is TagKind.REGION:
        return (
            f"/X/{format_number(p['lon_min'])}/{format_number(p['lon_max'])}/RANGEEDGES"
            f"/Y/{format_number(p['lat_min'])}/{format_number(p['lat_max'])}/RANGEEDGES"
        )
    if tag.kind is TagKind.AGGREGATE:
        return f"/T/{p['window']}/{p['op']}/"
    if tag.kind is TagKind.ANALYSIS:
        return f"/{quote_plus(p['op'], safe='-')}/"
    raise ValidationError(f"未知标签种类 {tag.kind!r}")
