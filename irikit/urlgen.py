"""
QueryState ➜ 查询 URL
"""
from .builder import QueryState
from .config import DataFormat
from .grammar import render_tag
from .utils import log

def generate(state: QueryState) -> str:
    url = "".join(render_tag(t) for t in state.tags)
    log.debug("generated %s", url)
    return url

def data_url(query: str, fmt: DataFormat = DataFormat.NETCDF) -> str:
    """追加数据格式后缀（由下载阶段调用），不重复分隔符"""
    return f"{query.rstrip('/')}/{DataFormat(fmt).value}"
