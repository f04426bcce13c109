"""
下载阶段：查询 URL ➜ 本地临时 netCDF 文件（作用域内有效，退出即删除）
"""
from __future__ import annotations
import os
import tempfile
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

import requests

from .config import DataFormat, REQUEST_TIMEOUT, CHUNK_SIZE
from .exceptions import FetchError
from .urlgen import data_url
from .utils import log

@contextmanager
def fetch_file(
    query: str,
    *,
    fmt: DataFormat = DataFormat.NETCDF,
    timeout: float = REQUEST_TIMEOUT,
    session: requests.Session | None = None,
) -> Iterator[Path]:
    url = data_url(query, fmt)
    getter = session.get if session is not None else requests.get
    suffix = Path(DataFormat(fmt).value).suffix

    fd, tmp = tempfile.mkstemp(prefix="irikit_", suffix=suffix)
    path = Path(tmp)
    try:
        t0 = time.time()
        try:
            with os.fdopen(fd, "wb") as fh, getter(url, stream=True, timeout=timeout) as r:
                r.raise_for_status()
                for chunk in r.iter_content(chunk_size=CHUNK_SIZE):
                    if chunk:
                        fh.write(chunk)
        except requests.RequestException as exc:
            raise FetchError(f"下载失败 {url}: {exc}") from exc
        log.info("✅ 下载 %s (%.1fs, %d bytes)", url, time.time() - t0, path.stat().st_size)
        yield path
    finally:
        path.unlink(missing_ok=True)
