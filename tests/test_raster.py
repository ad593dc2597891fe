"""Tests for RasterGrid, RasterTimeSeries and StatisticRaster."""

from __future__ import annotations

import numpy as np
import pytest
import xarray as xr

from tempdisparity.exceptions import ConfigurationError
from tempdisparity.raster import RasterGrid, RasterTimeSeries, StatisticRaster


@pytest.mark.unit
class TestRasterGrid:
    def test_resolution_and_bounds(self, grid: RasterGrid) -> None:
        assert grid.resolution == (1.0, 1.0)
        assert grid.bounds == (0.0, 0.0, 4.0, 4.0)
        assert grid.shape == (4, 4)

    def test_geographic_resolution_in_metres(self, grid: RasterGrid) -> None:
        assert grid.resolution_m == pytest.approx(111_320.0)

    def test_projected_resolution_in_metres(self) -> None:
        projected = RasterGrid.from_bounds((0, 0, 4000, 4000), 4, 4, crs="EPSG:32722")
        assert projected.resolution_m == 1000.0

    def test_coarsen(self, grid: RasterGrid) -> None:
        coarse = grid.coarsen(3)
        assert coarse.shape == (2, 2)
        assert coarse.resolution == (3.0, 3.0)
        assert coarse.transform.c == 0.0
        assert coarse.transform.f == 4.0

    def test_coarsen_rejects_zero(self, grid: RasterGrid) -> None:
        with pytest.raises(ValueError, match="factor"):
            grid.coarsen(0)


@pytest.mark.unit
class TestRasterTimeSeries:
    def test_band_shape_must_match_grid(self, grid: RasterGrid) -> None:
        with pytest.raises(ValueError, match="grid"):
            RasterTimeSeries.from_arrays(
                {"tmmx": np.zeros((1, 3, 3))}, ["2020-01-01"], grid
            )

    def test_requires_time_coordinate(self, grid: RasterGrid) -> None:
        ds = xr.Dataset({"tmmx": (("time", "y", "x"), np.zeros((1, 4, 4)))})
        with pytest.raises(ValueError, match="time"):
            RasterTimeSeries(dataset=ds, grid=grid)

    def test_select_time_end_exclusive(self, raw_series: RasterTimeSeries) -> None:
        subset = raw_series.select_time("2014-01-01", "2014-03-01")
        assert subset.timestamps == ["2014-01-01", "2014-02-01"]

    def test_select_time_can_be_empty(self, raw_series: RasterTimeSeries) -> None:
        assert raw_series.select_time("2020-01-01", "2021-01-01").frame_count == 0

    def test_select_bands_order(self, raw_series: RasterTimeSeries) -> None:
        assert raw_series.select_bands(["tmmn", "tmmx"]).bands == ["tmmn", "tmmx"]

    def test_select_unknown_band(self, raw_series: RasterTimeSeries) -> None:
        with pytest.raises(ConfigurationError, match="ppt"):
            raw_series.select_bands(["ppt"])

    def test_apply_scale_masks_nodata(self, grid: RasterGrid) -> None:
        values = np.full((1, 4, 4), 250, dtype=np.int16)
        values[0, 0, 0] = -32768
        series = RasterTimeSeries.from_arrays(
            {"tmmx": values}, ["2020-01-01"], grid, scale_factor=0.1, nodata=-32768
        )
        scaled = series.apply_scale()
        data = scaled.dataset["tmmx"].values
        assert np.isnan(data[0, 0, 0])
        assert data[0, 1, 1] == pytest.approx(25.0)
        assert scaled.scale_factor == 1.0
        assert scaled.nodata is None

    def test_apply_scale_only_once(self, raw_series: RasterTimeSeries) -> None:
        once = raw_series.apply_scale()
        twice = once.apply_scale()
        np.testing.assert_allclose(
            twice.dataset["tmmx"].values, once.dataset["tmmx"].values
        )
        assert twice.dataset["tmmx"].values[0, 0, 0] == pytest.approx(30.0)

    def test_with_scale_factor(self, raw_series: RasterTimeSeries) -> None:
        series = raw_series.with_scale_factor(0.01)
        assert series.scale_factor == 0.01
        assert series.apply_scale().dataset["tmmx"].values[0, 0, 0] == pytest.approx(3.0)


@pytest.mark.unit
class TestStatisticRaster:
    def test_band_lookup(self, constant_raster: StatisticRaster) -> None:
        assert constant_raster.band("tmmx").shape == (4, 4)
        with pytest.raises(ConfigurationError):
            constant_raster.band("ppt")

    def test_rejects_time_dimension(self, grid: RasterGrid) -> None:
        ds = xr.Dataset({"tmmx": (("time", "y", "x"), np.zeros((1, 4, 4)))})
        with pytest.raises(ValueError, match="dims"):
            StatisticRaster(dataset=ds, grid=grid)

    def test_coarsen_nan_aware_mean(self, grid: RasterGrid) -> None:
        values = np.arange(16, dtype=np.float64).reshape(4, 4)
        values[0, 0] = np.nan
        raster = StatisticRaster.from_arrays({"tmmx": values}, grid)
        coarse = raster.coarsen(2)
        assert coarse.grid.shape == (2, 2)
        band = coarse.band("tmmx")
        assert band[0, 0] == pytest.approx((1.0 + 4.0 + 5.0) / 3)
        assert band[1, 1] == pytest.approx((10 + 11 + 14 + 15) / 4)

    def test_coarsen_pads_partial_blocks(self, grid: RasterGrid) -> None:
        raster = StatisticRaster.from_arrays({"tmmx": np.ones((4, 4))}, grid)
        coarse = raster.coarsen(3)
        assert coarse.band("tmmx").shape == (2, 2)
        np.testing.assert_allclose(coarse.band("tmmx"), 1.0)
