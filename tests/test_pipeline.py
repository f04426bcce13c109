"""Unit tests for single-site and batch pipelines with an injected fetcher."""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path

import pandas as pd
import pytest

from irikit.config import SERVICE_ROOT
from irikit.exceptions import FetchError, FormatError, NotFoundError, ValidationError
from irikit.pipeline import Site, run_batch, run_site


def _fake_fetch(path: Path, urls: list, fail_on: str | None = None):
    @contextmanager
    def fetch(url):
        urls.append(url)
        if fail_on is not None and fail_on in url:
            raise FetchError(f"下载失败 {url}: timeout")
        yield path

    return fetch


def test_run_site_builds_query_and_assembles(nc_path: Path) -> None:
    urls: list = []
    table = run_site(
        Site("lansing", 45.67, -85.553),
        "air_temperature",
        op="runningAverage",
        window="3",
        fetch=_fake_fetch(nc_path, urls),
    )

    assert urls == [
        SERVICE_ROOT
        + "/.NOAA/.NCEP-NCAR/.CDAS-1/.MONTHLY/.Diagnostic/.surface/.temp"
        + "/X/-85.553/VALUES/Y/45.67/VALUES/T/3/runningAverage/"
    ]
    assert table.columns == ("date", "air_temperature")
    assert [r["date"] for r in table] == list(pd.date_range("1960-01-01", periods=5, freq="MS"))


def test_run_site_missing_field(nc_path: Path) -> None:
    with pytest.raises(NotFoundError, match="precip"):
        run_site(Site("x", 0, 0), "precipitation", fetch=_fake_fetch(nc_path, []))


def test_batch_keeps_order_and_partial_failures(nc_path: Path) -> None:
    urls: list = []
    sites = [Site("a", 10, 20), Site("bad", 91, 0), Site("c", -10, -20)]

    results = run_batch(sites, "air_temperature", workers=2, fetch=_fake_fetch(nc_path, urls))

    assert [r.site.name for r in results] == ["a", "bad", "c"]
    assert [r.ok for r in results] == [True, False, True]
    assert isinstance(results[1].error, ValidationError)
    assert results[1].record is None
    assert len(results[0].record) == len(results[2].record) == 5
    # invalid site never reaches the fetch stage
    assert len(urls) == 2


def test_batch_fetch_failure_is_isolated(nc_path: Path) -> None:
    sites = [Site("a", 10, 20), Site("b", 30, 40)]
    fetch = _fake_fetch(nc_path, [], fail_on="/X/40/")

    results = run_batch(sites, "air_temperature", workers=1, progress=True, fetch=fetch)

    assert results[0].ok
    assert isinstance(results[1].error, FetchError)


def test_batch_with_no_sites() -> None:
    assert run_batch([], "air_temperature") == []


def test_batch_rejects_zero_workers() -> None:
    with pytest.raises(ValueError):
        run_batch([Site("a", 0, 0)], "air_temperature", workers=0)


def test_batch_reports_corrupted_catalog_per_site(nc_path: Path, isolated_catalog: Path) -> None:
    isolated_catalog.write_text("{not json")
    sites = [Site("a", 10, 20), Site("b", 30, 40)]

    results = run_batch(sites, "olr", workers=2, fetch=_fake_fetch(nc_path, []))

    assert [r.site.name for r in results] == ["a", "b"]
    assert all(isinstance(r.error, FormatError) for r in results)
