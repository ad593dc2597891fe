"""Shared test fixtures for the tempdisparity test suite."""

from __future__ import annotations

from collections.abc import Callable

import numpy as np
import pytest
from shapely.geometry import Polygon, box

from tempdisparity.config import Config
from tempdisparity.raster import RasterGrid, RasterTimeSeries, StatisticRaster
from tempdisparity.regions import Region

# 4x4 one-degree grid over (0, 0)-(4, 4); row 0 is the northern row y in [3, 4].
GRID_BOUNDS = (0.0, 0.0, 4.0, 4.0)


def cell_box(row: int, col: int, rows: int = 1, cols: int = 1) -> Polygon:
    """Polygon strictly inside the block of cells starting at (*row*, *col*)."""
    north = 4.0 - row
    return box(col + 0.1, north - rows + 0.1, col + cols - 0.1, north - 0.1)


@pytest.fixture
def make_box() -> Callable[..., Polygon]:
    """Return the ``cell_box`` helper."""
    return cell_box


@pytest.fixture
def test_config(tmp_path: object) -> Config:
    """Return a Config with an isolated cache directory."""
    return Config(cache_dir=str(tmp_path), max_workers=4)


@pytest.fixture
def grid() -> RasterGrid:
    return RasterGrid.from_bounds(GRID_BOUNDS, width=4, height=4)


@pytest.fixture
def quadrant_regions() -> list[Region]:
    """Four regions, one per 2x2 quadrant: NW, NE, SW, SE."""
    return [
        Region("NW", cell_box(0, 0, 2, 2)),
        Region("NE", cell_box(0, 2, 2, 2)),
        Region("SW", cell_box(2, 0, 2, 2)),
        Region("SE", cell_box(2, 2, 2, 2)),
    ]


@pytest.fixture
def constant_raster(grid: RasterGrid) -> StatisticRaster:
    """tmmx = 30 and tmmn = 20 everywhere."""
    return StatisticRaster.from_arrays(
        {"tmmx": np.full((4, 4), 30.0), "tmmn": np.full((4, 4), 20.0)},
        grid=grid,
    )


@pytest.fixture
def raw_series(grid: RasterGrid) -> RasterTimeSeries:
    """Three monthly frames of raw tenths of degrees, nodata -32768."""
    tmmx = np.stack([np.full((4, 4), v, dtype=np.int16) for v in (300, 310, 320)])
    tmmn = np.stack([np.full((4, 4), v, dtype=np.int16) for v in (180, 190, 200)])
    return RasterTimeSeries.from_arrays(
        {"tmmx": tmmx, "tmmn": tmmn},
        times=["2014-01-01", "2014-02-01", "2014-03-01"],
        grid=grid,
        scale_factor=0.1,
        nodata=-32768,
    )
