"""Gridded raster containers.

``RasterTimeSeries`` is what a climate store hands to the core: raw band
values over time on a fixed grid. ``StatisticRaster`` is what temporal
reduction produces: one value per pixel per band, no time axis. Both wrap
an ``xarray.Dataset`` with one data variable per band.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, replace
from typing import Any

import numpy as np
import numpy.typing as npt
import xarray as xr
from rasterio.transform import Affine, from_bounds

from tempdisparity._types import Bounds
from tempdisparity.exceptions import ConfigurationError

# Metres per degree at the equator, used to express a geographic grid's
# cell size in the same unit as the reduction scale.
_METRES_PER_DEGREE: float = 111_320.0
_GEOGRAPHIC_CRS = frozenset({"EPSG:4326", "EPSG:4269", "EPSG:4674", "OGC:CRS84"})


@dataclass(frozen=True)
class RasterGrid:
    """Spatial reference shared by every band of a raster.

    Args:
        transform: Affine pixel-to-CRS transform (north-up).
        width: Number of columns.
        height: Number of rows.
        crs: Coordinate reference system identifier.

    Example:
        >>> grid = RasterGrid.from_bounds((0.0, 0.0, 4.0, 4.0), width=4, height=4)
        >>> grid.resolution
        (1.0, 1.0)
    """

    transform: Affine
    width: int
    height: int
    crs: str = "EPSG:4326"

    def __post_init__(self) -> None:
        if self.width < 0 or self.height < 0:
            msg = f"grid dimensions must be non-negative, got {self.width}x{self.height}"
            raise ValueError(msg)

    @classmethod
    def from_bounds(
        cls,
        bounds: Bounds,
        width: int,
        height: int,
        crs: str = "EPSG:4326",
    ) -> RasterGrid:
        """Build a north-up grid covering *bounds* with the given shape."""
        minx, miny, maxx, maxy = bounds
        return cls(
            transform=from_bounds(minx, miny, maxx, maxy, width, height),
            width=width,
            height=height,
            crs=crs,
        )

    @property
    def shape(self) -> tuple[int, int]:
        """``(height, width)``, the numpy order."""
        return (self.height, self.width)

    @property
    def resolution(self) -> tuple[float, float]:
        """Cell size ``(x, y)`` in CRS units."""
        return (abs(self.transform.a), abs(self.transform.e))

    @property
    def is_geographic(self) -> bool:
        return self.crs.upper() in _GEOGRAPHIC_CRS

    @property
    def resolution_m(self) -> float:
        """Approximate cell size in metres (larger of the two axes)."""
        cell = max(self.resolution)
        if self.is_geographic:
            return cell * _METRES_PER_DEGREE
        return cell

    @property
    def bounds(self) -> Bounds:
        """``(minx, miny, maxx, maxy)`` of the full grid."""
        west, north = self.transform * (0, 0)
        east, south = self.transform * (self.width, self.height)
        return (min(west, east), min(south, north), max(west, east), max(south, north))

    def coarsen(self, factor: int) -> RasterGrid:
        """Return the grid obtained by merging *factor* x *factor* cells."""
        if factor < 1:
            msg = f"coarsen factor must be >= 1, got {factor}"
            raise ValueError(msg)
        return RasterGrid(
            transform=self.transform * Affine.scale(factor),
            width=math.ceil(self.width / factor),
            height=math.ceil(self.height / factor),
            crs=self.crs,
        )


def _check_band_shapes(
    dataset: xr.Dataset,
    dims: tuple[str, ...],
    grid: RasterGrid,
) -> None:
    for name, var in dataset.data_vars.items():
        if tuple(var.dims) != dims:
            msg = f"band {name!r} has dims {var.dims}, expected {dims}"
            raise ValueError(msg)
        if tuple(var.shape[-2:]) != grid.shape:
            msg = f"band {name!r} has shape {var.shape[-2:]}, grid is {grid.shape}"
            raise ValueError(msg)


def _unknown_band(missing: Iterable[str], available: Sequence[str]) -> ConfigurationError:
    valid = ", ".join(available) or "none"
    return ConfigurationError(
        what=f"Unknown band(s): {', '.join(sorted(missing))}",
        cause=f"Available bands are: {valid}",
        fix=f"Request one of: {valid}",
    )


@dataclass(frozen=True)
class RasterTimeSeries:
    """Time-stamped multi-band raster frames on one grid.

    Values are stored as the store delivered them; ``raw * scale_factor``
    gives physical units. ``apply_scale`` performs that conversion and
    masks ``nodata``, returning a series whose ``scale_factor`` is 1.0 so
    the conversion can only ever happen once.

    Args:
        dataset: Dataset with dims ``(time, y, x)``, one variable per band.
        grid: Spatial reference of the ``(y, x)`` plane.
        scale_factor: Multiplier from stored to physical values.
        nodata: Stored value meaning "no observation", if any.
    """

    dataset: xr.Dataset
    grid: RasterGrid
    scale_factor: float = 1.0
    nodata: float | None = None

    def __post_init__(self) -> None:
        if "time" not in self.dataset.coords:
            msg = "raster time series needs a 'time' coordinate"
            raise ValueError(msg)
        _check_band_shapes(self.dataset, ("time", "y", "x"), self.grid)

    @classmethod
    def from_arrays(
        cls,
        arrays: Mapping[str, npt.ArrayLike],
        times: Sequence[Any],
        grid: RasterGrid,
        scale_factor: float = 1.0,
        nodata: float | None = None,
    ) -> RasterTimeSeries:
        """Build a series from ``{band: array(time, y, x)}``.

        Example:
            >>> grid = RasterGrid.from_bounds((0, 0, 2, 2), 2, 2)
            >>> series = RasterTimeSeries.from_arrays(
            ...     {"tmmx": np.ones((1, 2, 2))}, ["2020-01-01"], grid
            ... )
            >>> series.frame_count
            1
        """
        time_index = np.array(times, dtype="datetime64[ns]")
        dataset = xr.Dataset(
            {band: (("time", "y", "x"), np.asarray(values)) for band, values in arrays.items()},
            coords={"time": time_index},
        )
        return cls(dataset=dataset, grid=grid, scale_factor=scale_factor, nodata=nodata)

    @property
    def bands(self) -> list[str]:
        return [str(name) for name in self.dataset.data_vars]

    @property
    def frame_count(self) -> int:
        return int(self.dataset.sizes.get("time", 0))

    @property
    def timestamps(self) -> list[str]:
        """ISO dates of each frame, in series order."""
        return [
            str(np.datetime_as_string(t, unit="D"))
            for t in self.dataset["time"].values
        ]

    def select_bands(self, bands: Sequence[str]) -> RasterTimeSeries:
        """Keep only *bands*, in the requested order.

        Raises:
            ConfigurationError: If a requested band is not in the series.
        """
        missing = [b for b in bands if b not in self.dataset.data_vars]
        if missing:
            raise _unknown_band(missing, self.bands)
        return replace(self, dataset=self.dataset[list(bands)])

    def select_time(self, start: str, end: str) -> RasterTimeSeries:
        """Keep frames with ``start <= time < end``."""
        times = self.dataset["time"].values
        keep = (times >= np.datetime64(start)) & (times < np.datetime64(end))
        return replace(self, dataset=self.dataset.isel(time=np.flatnonzero(keep)))

    def with_scale_factor(self, scale_factor: float) -> RasterTimeSeries:
        """Return the same raw values declared with another scale factor."""
        return replace(self, scale_factor=scale_factor)

    def apply_scale(self) -> RasterTimeSeries:
        """Convert to physical units, masking no-data values to NaN."""
        if self.scale_factor == 1.0 and self.nodata is None:
            return self
        dataset = self.dataset.astype(np.float64)
        if self.nodata is not None:
            dataset = dataset.where(dataset != self.nodata)
        if self.scale_factor != 1.0:
            dataset = dataset * self.scale_factor
        return RasterTimeSeries(dataset=dataset, grid=self.grid, scale_factor=1.0)


@dataclass(frozen=True)
class StatisticRaster:
    """One value per pixel per band, produced by temporal reduction.

    Args:
        dataset: Dataset with dims ``(y, x)``, one variable per band.
        grid: Spatial reference of the raster.
    """

    dataset: xr.Dataset
    grid: RasterGrid

    def __post_init__(self) -> None:
        _check_band_shapes(self.dataset, ("y", "x"), self.grid)

    @classmethod
    def from_arrays(
        cls,
        arrays: Mapping[str, npt.ArrayLike],
        grid: RasterGrid,
    ) -> StatisticRaster:
        dataset = xr.Dataset(
            {band: (("y", "x"), np.asarray(values, dtype=np.float64)) for band, values in arrays.items()}
        )
        return cls(dataset=dataset, grid=grid)

    @property
    def bands(self) -> list[str]:
        return [str(name) for name in self.dataset.data_vars]

    def band(self, name: str) -> npt.NDArray[np.float64]:
        """Return the ``(y, x)`` array of band *name*."""
        if name not in self.dataset.data_vars:
            raise _unknown_band([name], self.bands)
        return np.asarray(self.dataset[name].values, dtype=np.float64)

    def coarsen(self, factor: int) -> StatisticRaster:
        """Block-average *factor* x *factor* cells, ignoring NaN."""
        if factor == 1:
            return self
        grid = self.grid.coarsen(factor)
        dataset = self.dataset.coarsen(y=factor, x=factor, boundary="pad").mean()
        return StatisticRaster(dataset=dataset, grid=grid)
