import logging
import json
import math
from datetime import datetime, timezone, timedelta

import numpy as np

from .config import CATALOG_PATH
from .exceptions import FormatError

log = logging.getLogger("irikit")
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(message)s",
)

def format_number(x: float) -> str:
    """十进制定点输出，不用科学计数法：90.0 → '90'，1e-7 → '0.0000001'"""
    x = float(x)
    if not math.isfinite(x):
        raise ValueError(f"无法渲染非有限数值 {x!r}")
    if x == 0:
        return "0"          # 避免 '-0'
    return np.format_float_positional(x, trim="-")

def load_catalog(path=None) -> dict:
    path = path or CATALOG_PATH
    if path.exists():
        try:
            return json.loads(path.read_text())
        except json.JSONDecodeError as exc:
            raise FormatError(f"catalog 文件损坏 {str(path)!r}: {exc}") from exc
    return {}

def save_catalog(cat: dict, path=None):
    path = path or CATALOG_PATH
    path.write_text(json.dumps(cat, indent=2, ensure_ascii=False))

def timestamp(tz_hours: int = 8) -> str:
    """返回东八区 ISO-8601 字符串，如 2025-08-03T16:44:02+08:00"""
    tz = timezone(timedelta(hours=tz_hours))
    return datetime.now(tz).isoformat(timespec="seconds")
