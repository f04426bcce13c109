"""
单站点流水线 + 多站点批处理（dask 线程池，部分失败不影响其它站点）
"""
from __future__ import annotations
import time
from dataclasses import dataclass
from typing import Callable, List, Sequence

import dask
from dask.diagnostics import ProgressBar

from .builder import base, with_variable, filter_point, aggregate
from .catalog import resolve_variable
from .config import DEFAULT_WORKERS
from .exceptions import IriKitError
from .fetcher import fetch_file
from .reader import read
from .assembler import assemble, TabularRecord
from .urlgen import generate
from .utils import log

@dataclass(frozen=True)
class Site:
    name: str
    lat: float
    lon: float


@dataclass(frozen=True)
class SiteResult:
    site: Site
    record: TabularRecord | None = None
    error: IriKitError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def run_site(
    site: Site,
    variable: str,
    *,
    op=None,
    window=None,
    fetch: Callable = fetch_file,
    time_dim: str = "T",
    date_column: str = "date",
) -> TabularRecord:
    """base → variable → point → (aggregate) ➜ URL ➜ 下载 ➜ 读取 ➜ 组装"""
    state = filter_point(with_variable(base(), variable), site.lat, site.lon)
    if op is not None or window is not None:
        state = aggregate(state, op, window)
    url = generate(state)
    field = resolve_variable(variable)["field"]

    with fetch(url) as handle:
        record = read(handle, [time_dim, field])
    return assemble(record, time_dim, names={time_dim: date_column, field: variable})


def _run_guarded(site: Site, variable: str, kw: dict) -> SiteResult:
    try:
        return SiteResult(site, record=run_site(site, variable, **kw))
    except IriKitError as exc:
        log.warning("站点 %s 失败: %s: %s", site.name, type(exc).__name__, exc)
        return SiteResult(site, error=exc)


def run_batch(
    sites: Sequence[Site],
    variable: str,
    *,
    workers: int = DEFAULT_WORKERS,
    progress: bool = False,
    **kw,
) -> List[SiteResult]:
    """结果顺序与输入 sites 一致，每个站点带成功 / 错误标记"""
    if workers < 1:
        raise ValueError(f"workers 必须 ≥ 1，收到 {workers}")
    t0 = time.time()
    tasks = [dask.delayed(_run_guarded)(s, variable, kw) for s in sites]

    if progress:
        with ProgressBar():
            results = dask.compute(*tasks, scheduler="threads", num_workers=workers)
    else:
        results = dask.compute(*tasks, scheduler="threads", num_workers=workers)

    results = list(results)
    n_ok = sum(r.ok for r in results)
    log.info("✅ 批处理完成 %d/%d 个站点成功 (%.1fs)", n_ok, len(results), time.time() - t0)
    return results
