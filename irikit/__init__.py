"""
irikit
======
Ingrid 风格数据服务（IRI Data Library）客户端：
用标签拼装查询 URL，下载 netCDF，解析为带属性的记录并换算成日历日期的表格时间序列。
"""
from .builder import base, with_variable, filter_point, filter_region, aggregate, analyze, QueryState
from .urlgen import generate, data_url                                   # 查询 ➜ URL
from .fetcher import fetch_file                                          # URL ➜ 本地文件
from .reader import read, DimensionData, DatasetRecord                  # 文件 ➜ 记录
from .timeconv import normalize, parse_time_encoding, TimeEncoding      # 相对时间 ➜ 日期
from .assembler import assemble, TabularRecord                          # 记录 ➜ 表格
from .pipeline import run_site, run_batch, Site, SiteResult
from .catalog import list_variables, show_variable_info, register_variable, remove_variable

__all__ = [
    "base",
    "with_variable",
    "filter_point",
    "filter_region",
    "aggregate",
    "analyze",
    "QueryState",
    "generate",
    "data_url",
    "fetch_file",
    "read",
    "DimensionData",
    "DatasetRecord",
    "normalize",
    "parse_time_encoding",
    "TimeEncoding",
    "assemble",
    "TabularRecord",
    "run_site",
    "run_batch",
    "Site",
    "SiteResult",
    "list_variables",
    "show_variable_info",
    "register_variable",
    "remove_variable",
]
