"""
变量注册表：内置变量表 + 用户 JSON catalog
"""
from typing import List, Dict

from .config import VARIABLES
from .exceptions import ValidationError
from .utils import log, load_catalog, save_catalog, timestamp

def list_variables() -> List[str]:
    return list(VARIABLES) + [n for n in load_catalog() if n not in VARIABLES]

def show_variable_info(name: str) -> Dict:
    if name in VARIABLES:
        return {"name": name, "builtin": True, **VARIABLES[name]}
    return load_catalog().get(name, {})

def resolve_variable(name: str) -> Dict:
    """名字 → {'path', 'field', ...}；未知名字抛 ValidationError"""
    if not isinstance(name, str):
        raise ValidationError(f"变量名必须是字符串，收到 {name!r}")
    info = show_variable_info(name)
    if not info:
        raise ValidationError(
            f"未知变量 {name!r}；可用变量: {', '.join(list_variables())}"
        )
    return info

def register_variable(name: str, path: str, field: str, long_name: str = "") -> Dict:
    if name in VARIABLES:
        raise ValidationError(f"变量名 {name!r} 为内置变量，不能覆盖")
    path = path.strip().lstrip(".")
    if not path or "//" in path or path.endswith("/"):
        raise ValidationError(f"非法 catalog 路径 {path!r}")
    if not field:
        raise ValidationError(f"变量 {name!r} 必须指定文件内字段名")

    cat = load_catalog()
    cat[name] = {
        "name":      name,
        "builtin":   False,
        "path":      path,
        "field":     field,
        "long_name": long_name,
        "created":   timestamp(),
    }
    save_catalog(cat)
    log.info("📚 Catalog 已更新 → %s", name)
    return cat[name]

def remove_variable(name: str):
    cat = load_catalog()
    meta = cat.pop(name, None)
    if meta is None:
        raise ValidationError(f"变量 {name!r} 不在用户 catalog 中")
    save_catalog(cat)
    log.info("✅ 已删除变量 %s", name)
