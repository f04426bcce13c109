"""
读取下载的 netCDF：按名字抽取维度 / 变量，连同属性表一起返回
"""
from __future__ import annotations
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterable, Iterator

import numpy as np
import xarray as xr

from .exceptions import NotFoundError, FormatError
from .utils import log

@dataclass(frozen=True, eq=False)
class DimensionData:
    name: str
    values: np.ndarray
    attributes: Mapping

    def attr(self, key: str) -> str | None:
        """缺失返回 None；空值返回 ''"""
        return self.attributes.get(key)

    def __len__(self) -> int:
        return int(self.values.size)


class DatasetRecord(Mapping):
    """只读的 name → DimensionData 映射，按请求顺序排列"""

    def __init__(self, entries: Dict[str, DimensionData]):
        self._entries = dict(entries)

    def __getitem__(self, name: str) -> DimensionData:
        return self._entries[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"DatasetRecord({', '.join(self._entries)})"


# ────────────────────────────────────────────────────────────────────────
def _ordered(dims: Iterable[str]) -> list:
    if isinstance(dims, str):
        return [dims]
    if isinstance(dims, (set, frozenset)):
        return sorted(dims)
    return list(dict.fromkeys(dims))


def _extract(ds: xr.Dataset, names: list) -> DatasetRecord:
    for n in names:
        if n not in ds.variables:
            raise NotFoundError(f"文件中不存在维度/变量 {n!r}")

    out = {}
    for n in names:
        var = ds.variables[n]
        try:
            values = np.array(var.values)      # 读入内存并复制，文件关闭后仍有效
        except (RuntimeError, OSError, ValueError) as exc:
            raise FormatError(f"读取 {n!r} 的数值失败: {exc}") from exc
        values.setflags(write=False)
        attrs = MappingProxyType({str(k): str(v) for k, v in var.attrs.items()})
        out[n] = DimensionData(n, values, attrs)
    return DatasetRecord(out)


def read(handle, dims: Iterable[str]) -> DatasetRecord:
    """
    handle 可为文件路径或已打开的 xr.Dataset。
    关闭 CF 解码：数值保持文件原生精度，属性原样保留（units / missing_value 不被吞掉）。
    """
    names = _ordered(dims)

    if isinstance(handle, xr.Dataset):
        return _extract(handle, names)

    path = Path(handle)
    if not path.exists():
        raise NotFoundError(f"数组文件 {str(path)!r} 不存在")
    try:
        ds = xr.open_dataset(path, decode_cf=False)
    except (OSError, ValueError) as exc:
        raise FormatError(f"无法解析数组文件 {str(path)!r}: {exc}") from exc

    with ds:
        record = _extract(ds, names)
    log.info("✅ 读取 %s ← %s", ", ".join(names), path.name)
    return record
