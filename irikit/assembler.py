"""
DatasetRecord ➜ 表格记录（一行一个时间点），以及 JSON / 磁盘导出
"""
from __future__ import annotations
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterator, Mapping, Sequence, Tuple

import json
import numpy as np
import pandas as pd

from .config import OutputFormat
from .exceptions import AlignmentError, NotFoundError
from .reader import DimensionData
from .timeconv import normalize
from .utils import log

_SENTINEL_ATTRS = ("missing_value", "_FillValue")
_PACKING_ATTRS  = ("scale_factor", "add_offset")


class TabularRecord:
    def __init__(self, columns: Sequence[str], rows: Sequence[Mapping[str, Any]],
                 attributes: Mapping[str, Mapping[str, str]] | None = None):
        self.columns: Tuple[str, ...] = tuple(columns)
        self.rows: Tuple[Mapping[str, Any], ...] = tuple(MappingProxyType(dict(r)) for r in rows)
        self.attributes = MappingProxyType(dict(attributes or {}))

    @property
    def date_column(self) -> str:
        return self.columns[0]

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self) -> Iterator[Mapping[str, Any]]:
        return iter(self.rows)

    def __getitem__(self, i: int) -> Mapping[str, Any]:
        return self.rows[i]

    def __repr__(self) -> str:
        return f"TabularRecord(columns={list(self.columns)}, rows={len(self.rows)})"

    # ---------- pandas ----------
    def to_frame(self) -> pd.DataFrame:
        df = pd.DataFrame([dict(r) for r in self.rows], columns=list(self.columns))
        df[self.date_column] = pd.to_datetime(df[self.date_column])
        return df

    # ---------- JSON ----------
    def to_json(self, orient: str = "records") -> Any:
        return json.loads(self.to_frame().to_json(orient=orient.lower(), date_format="iso", date_unit="s"))

    # ---------- 导出磁盘 ----------
    def to(self, fmt: OutputFormat, out_path: str | Path) -> Path:
        out_path = Path(out_path)
        ds = self.to_frame().set_index(self.date_column).to_xarray()
        for col, attrs in self.attributes.items():
            if col in ds.variables:
                ds[col].attrs.update({k: v for k, v in attrs.items() if k not in _SENTINEL_ATTRS + _PACKING_ATTRS})
        fmt = OutputFormat(fmt)
        if fmt is OutputFormat.ZARR:
            ds.to_zarr(out_path, mode="w", consolidated=True)
        elif fmt is OutputFormat.NETCDF:
            ds.to_netcdf(out_path, mode="w")
        elif fmt is OutputFormat.HDF:
            ds.to_netcdf(out_path, engine="h5netcdf", mode="w")
        else:
            raise ValueError(fmt)
        log.info("✅ 写入 %s", out_path)
        return out_path


# ────────────────────────────────────────────────────────────────────────
def _numeric_attrs(dim: DimensionData, keys) -> list:
    out = []
    for key in keys:
        raw = dim.attr(key)
        if raw in (None, ""):
            continue
        try:
            out.append(float(raw))
        except ValueError:
            log.warning("忽略无法解析的 %s=%r (%s)", key, raw, dim.name)
    return out


def _missing_mask(values: np.ndarray, dim: DimensionData) -> np.ndarray:
    """在列自身的 dtype 下比较哨兵值（float32 的 -9.99e33 升到 float64 后就对不上了）"""
    sentinels = [s for s in _numeric_attrs(dim, _SENTINEL_ATTRS) if not np.isnan(s)]
    if np.issubdtype(values.dtype, np.integer):
        info = np.iinfo(values.dtype)
        sentinels = [s for s in sentinels if s.is_integer() and info.min <= s <= info.max]
    if not sentinels:
        return np.zeros(values.shape, dtype=bool)
    return np.isin(values, np.asarray(sentinels).astype(values.dtype))


def _column(dim: DimensionData, mask_missing: bool) -> np.ndarray:
    values = np.squeeze(np.asarray(dim.values))
    if values.ndim == 0:
        values = values.reshape(1)
    if values.ndim != 1:
        raise AlignmentError(f"列 {dim.name!r} 不是一维序列 (shape={dim.values.shape})")
    if not np.issubdtype(values.dtype, np.number):
        return values

    mask = _missing_mask(values, dim) if mask_missing else None
    scale = _numeric_attrs(dim, ("scale_factor",))
    offset = _numeric_attrs(dim, ("add_offset",))
    if (mask is None or not mask.any()) and not scale and not offset:
        return values

    # 先按打包值屏蔽缺测，再解包 value * scale_factor + add_offset
    values = values.astype("float64")
    if scale:
        values = values * scale[0]
    if offset:
        values = values + offset[0]
    if mask is not None:
        values[mask] = np.nan
    return values


def assemble(
    records: Mapping[str, DimensionData],
    date_column: str,
    *,
    mask_missing: bool = True,
    names: Mapping[str, str] | None = None,
) -> TabularRecord:
    """
    records[date_column] 经 normalize 成为日期列（放在第一列），其余条目各成一列。
    所有序列长度必须一致，否则 AlignmentError；不截断、不循环补齐、不重排。
    数值列：mask_missing 时 missing_value / _FillValue 置 NaN；有 scale_factor / add_offset 时解包。
    names 可把条目名映射成输出列名，例如 {'T': 'date', 'temp': 'air_temperature'}。
    """
    if date_column not in records:
        raise NotFoundError(f"记录中不存在日期维度 {date_column!r}")
    names = dict(names or {})

    dates = normalize(records[date_column])
    n = len(dates)

    columns: Dict[str, np.ndarray] = {}
    attributes: Dict[str, Mapping[str, str]] = {}
    for key, dim in records.items():
        if key == date_column:
            continue
        values = _column(dim, mask_missing)
        if len(values) != n:
            raise AlignmentError(
                f"列 {key!r} 长度 {len(values)} 与日期列 {date_column!r} 长度 {n} 不一致"
            )
        col = names.get(key, key)
        if col in columns:
            raise AlignmentError(f"输出列名重复: {col!r}")
        columns[col] = values
        attributes[col] = dim.attributes

    date_name = names.get(date_column, date_column)
    if date_name in columns:
        raise AlignmentError(f"输出列名重复: {date_name!r}")

    rows = [
        {date_name: dates[i], **{c: v[i].item() for c, v in columns.items()}}
        for i in range(n)
    ]
    attributes[date_name] = {}
    return TabularRecord((date_name, *columns), rows, attributes)
