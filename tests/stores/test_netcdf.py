"""Tests for the NetCDF climate store."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import numpy as np
import pytest

from tempdisparity.exceptions import ConfigurationError, ProviderError
from tempdisparity.stores.netcdf import NetCDFClimateStore
from tempdisparity.temporal import temporal_reduce


@pytest.fixture
def yearly_files(
    tmp_path: Path,
    netcdf_writer: Callable[..., Path],
    frames: Callable[..., np.ndarray],
) -> list[Path]:
    """Two yearly files of tmax/tmin with two monthly frames each."""
    paths = []
    for year, (high, low) in {2014: (30.0, 20.0), 2015: (32.0, 18.0)}.items():
        tmax = frames(high, 2)
        tmin = frames(low, 2)
        # north-west corner pixel, stored in the last latitude row
        tmax[:, 3, 0] = high + 5.0
        paths.append(
            netcdf_writer(
                tmp_path / f"clim_{year}.nc",
                {"tmax": tmax, "tmin": tmin},
                [f"{year}-01-01", f"{year}-02-01"],
            )
        )
    return paths


@pytest.fixture
def store(yearly_files: list[Path]) -> NetCDFClimateStore:
    return NetCDFClimateStore(yearly_files, variables={"tmmx": "tmax", "tmmn": "tmin"})


@pytest.mark.unit
class TestQuery:
    def test_concatenates_files(self, store: NetCDFClimateStore) -> None:
        series = store.query(["tmmx", "tmmn"], "2014-01-01", "2016-01-01")
        assert series.bands == ["tmmx", "tmmn"]
        assert series.frame_count == 4
        assert series.timestamps[0] == "2014-01-01"
        assert series.timestamps[-1] == "2015-02-01"

    def test_keeps_raw_encoding(self, store: NetCDFClimateStore) -> None:
        series = store.query(["tmmx"], "2014-01-01", "2015-01-01")
        assert series.scale_factor == pytest.approx(0.1)
        assert series.nodata == -32768
        assert int(series.dataset["tmmx"].values[0, 1, 1]) == 300

    def test_end_date_exclusive(self, store: NetCDFClimateStore) -> None:
        series = store.query(["tmmx"], "2014-01-01", "2014-02-01")
        assert series.frame_count == 1

    def test_north_up_orientation(self, store: NetCDFClimateStore) -> None:
        series = store.query(["tmmx"], "2014-01-01", "2015-01-01")
        assert int(series.dataset["tmmx"].values[0, 0, 0]) == 350
        assert series.grid.bounds == pytest.approx((0.0, 0.0, 4.0, 4.0))

    def test_bounds_window(self, store: NetCDFClimateStore) -> None:
        series = store.query(["tmmx"], "2014-01-01", "2015-01-01", bounds=(0.9, 0.9, 2.1, 2.1))
        assert series.grid.shape == (3, 3)
        assert series.grid.bounds == pytest.approx((0.0, 0.0, 3.0, 3.0))

    def test_temporal_mean_in_degrees(self, store: NetCDFClimateStore) -> None:
        series = store.query(["tmmx", "tmmn"], "2014-01-01", "2016-01-01")
        raster = temporal_reduce(series)
        assert raster.band("tmmx")[1, 1] == pytest.approx(31.0)
        assert raster.band("tmmn")[1, 1] == pytest.approx(19.0)
        assert raster.band("tmmx")[0, 0] == pytest.approx(36.0)

    def test_fill_values_masked(
        self,
        tmp_path: Path,
        netcdf_writer: Callable[..., Path],
        frames: Callable[..., np.ndarray],
    ) -> None:
        tmax = frames(25.0, 2)
        tmax[0, 0, 0] = np.nan
        path = netcdf_writer(tmp_path / "gaps.nc", {"tmax": tmax}, ["2014-01-01", "2014-02-01"])
        series = NetCDFClimateStore([path]).query(["tmax"], "2014-01-01", "2015-01-01")
        raster = temporal_reduce(series)
        # south-west pixel lands in the last row once flipped north-up
        assert raster.band("tmax")[3, 0] == pytest.approx(25.0)


@pytest.mark.unit
class TestErrors:
    def test_no_bands(self, store: NetCDFClimateStore) -> None:
        with pytest.raises(ConfigurationError, match="No bands"):
            store.query([], "2014-01-01", "2015-01-01")

    def test_unknown_band(self, store: NetCDFClimateStore) -> None:
        with pytest.raises(ConfigurationError, match="Unknown band"):
            store.query(["pr"], "2014-01-01", "2015-01-01")

    def test_missing_file(self, tmp_path: Path) -> None:
        store = NetCDFClimateStore([tmp_path / "absent.nc"])
        with pytest.raises(ProviderError, match="Cannot open NetCDF file"):
            store.query(["tmax"], "2014-01-01", "2015-01-01")

    def test_mixed_encodings(
        self,
        tmp_path: Path,
        netcdf_writer: Callable[..., Path],
        frames: Callable[..., np.ndarray],
    ) -> None:
        a = netcdf_writer(tmp_path / "a.nc", {"tmax": frames(30.0)}, ["2014-01-01"])
        b = netcdf_writer(
            tmp_path / "b.nc", {"tmin": frames(20.0)}, ["2014-01-01"], scale_factor=0.01
        )
        store = NetCDFClimateStore([a, b])
        with pytest.raises(ProviderError, match="different encodings"):
            store.query(["tmax", "tmin"], "2014-01-01", "2015-01-01")

    def test_misaligned_bands(
        self,
        tmp_path: Path,
        netcdf_writer: Callable[..., Path],
        frames: Callable[..., np.ndarray],
    ) -> None:
        a = netcdf_writer(tmp_path / "a.nc", {"tmax": frames(30.0, 2)}, ["2014-01-01", "2014-02-01"])
        b = netcdf_writer(tmp_path / "b.nc", {"tmin": frames(20.0)}, ["2014-01-01"])
        store = NetCDFClimateStore([a, b])
        with pytest.raises(ProviderError, match="does not align"):
            store.query(["tmax", "tmin"], "2014-01-01", "2015-01-01")
