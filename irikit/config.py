from enum import Enum
import os
import re
from pathlib import Path

# ─── 标签种类 / keyword 枚举 ─────────────────────────────────────────────────────
class TagKind(str, Enum):
    BASE      = "base"
    VARIABLE  = "variable"
    POINT     = "point"
    REGION    = "region"
    AGGREGATE = "aggregate"
    ANALYSIS  = "analysis"

class AggregationOp(str, Enum):
    RUNNING_AVERAGE  = "runningAverage"
    BOX_AVERAGE      = "boxAverage"
    MONTHLY_AVERAGE  = "monthlyAverage"
    SEASONAL_AVERAGE = "seasonalAverage"

class AnalysisOp(str, Enum):
    YEARLY_ANOMALIES    = "yearly-anomalies"
    YEARLY_CLIMATOLOGY  = "yearly-climatology"
    SPATIAL_AVERAGE     = "[X Y]average"

class TimeUnit(str, Enum):
    SECONDS = "seconds"
    MINUTES = "minutes"
    HOURS   = "hours"
    DAYS    = "days"
    MONTHS  = "months"
    YEARS   = "years"

class DataFormat(str, Enum):
    NETCDF = "data.nc"

class OutputFormat(str, Enum):
    ZARR   = "zarr"
    NETCDF = "netcdf"
    HDF    = "hdf"

# ─── 服务地址与已知变量 ─────────────────────────────────────────────────────────
SERVICE_ROOT = os.environ.get("IRIKIT_SERVICE_ROOT", "http://iridl.ldeo.columbia.edu/SOURCES").rstrip("/")

# identifier -> catalog path (rendered as "/.<path>") and the field name inside the file
VARIABLES = {
    "air_temperature": {
        "path": "NOAA/.NCEP-NCAR/.CDAS-1/.MONTHLY/.Diagnostic/.surface/.temp",
        "field": "temp",
        "long_name": "Surface air temperature (NCEP/NCAR reanalysis, monthly)",
    },
    "precipitation": {
        "path": "NOAA/.NCEP/.CPC/.CMAP/.monthly/.latest/.precip",
        "field": "precip",
        "long_name": "CMAP merged precipitation (monthly)",
    },
    "sea_surface_temperature": {
        "path": "NOAA/.NCDC/.ERSST/.version5/.sst",
        "field": "sst",
        "long_name": "Extended reconstructed SST v5 (monthly)",
    },
    "soil_moisture": {
        "path": "NOAA/.NCEP/.CPC/.GMSM/.w",
        "field": "w",
        "long_name": "CPC leaky-bucket soil moisture (monthly)",
    },
}

# ─── 相对时间 units 正则 ────────────────────────────────────────────────────────
UNITS_RE = re.compile(
    r"^\s*(?P<unit>[A-Za-z]+)\s+since\s+"
    r"(?P<ref>\d{1,4}-\d{1,2}-\d{1,2}"   # YYYY-MM-DD
    r"(?:[ T][0-9:.]+)?"                 # 可选时刻
    r"(?:\s*(?:Z|UTC|[+-]\d{1,2}(?::?\d{2})?))?)"
    r"\s*$",
    re.IGNORECASE,
)

STANDARD_CALENDARS = {"standard", "gregorian", "proleptic_gregorian"}

# ─── 运行参数 ───────────────────────────────────────────────────────────────────
REQUEST_TIMEOUT = float(os.environ.get("IRIKIT_REQUEST_TIMEOUT", "120"))
DEFAULT_WORKERS = int(os.environ.get("IRIKIT_WORKERS", "4"))
CHUNK_SIZE      = 1024 * 1024

CATALOG_PATH = Path.home() / ".irikit_catalog.json"
