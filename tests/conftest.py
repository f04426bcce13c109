"""Pytest fixtures: synthetic netCDF file and an isolated user catalog."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest
import xarray as xr

import irikit.utils


@pytest.fixture(autouse=True)
def isolated_catalog(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Redirect the user variable catalog away from the home directory."""
    path = tmp_path / "catalog.json"
    monkeypatch.setattr(irikit.utils, "CATALOG_PATH", path)
    return path


def write_fixture(
    path: Path,
    offsets,
    temps,
    units: str = "months since 1960-01-01",
    dtype: str = "float64",
    missing_value: float = -999.0,
) -> Path:
    kind = np.dtype(dtype).type
    ds = xr.Dataset(
        {
            "temp": (
                "T",
                np.asarray(temps, dtype=dtype),
                {"units": "Kelvin_scale", "long_name": "Temperature", "missing_value": kind(missing_value)},
            )
        },
        coords={
            "T": (
                "T",
                np.asarray(offsets, dtype="float64"),
                {"units": units, "calendar": "standard", "pointwidth": "1.0"},
            )
        },
    )
    ds.to_netcdf(path, encoding={"temp": {"_FillValue": None}, "T": {"_FillValue": None}})
    return path


@pytest.fixture
def nc_path(tmp_path: Path) -> Path:
    """Monthly series of five points, one of them the missing-value sentinel."""
    return write_fixture(
        tmp_path / "fixture.nc",
        offsets=[0.0, 1.0, 2.0, 3.0, 4.0],
        temps=[271.5, 272.0, -999.0, 275.25, 280.0],
    )


@pytest.fixture
def float32_nc_path(tmp_path: Path) -> Path:
    """Single-precision series whose sentinel does not survive a float64 round trip."""
    return write_fixture(
        tmp_path / "fixture32.nc",
        offsets=[0.0, 1.0, 2.0],
        temps=[271.5, -9.99e33, 280.0],
        dtype="float32",
        missing_value=-9.99e33,
    )
