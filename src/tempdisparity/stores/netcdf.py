"""Climate raster store over local NetCDF files.

Files are opened with ``mask_and_scale=False`` so values stay as stored;
the file's ``scale_factor`` and ``_FillValue`` travel with the series and
are applied once, by the temporal reduction.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

import numpy as np
import xarray as xr
from rasterio.transform import from_origin

from tempdisparity._types import Bounds
from tempdisparity.config import Config
from tempdisparity.exceptions import ConfigurationError, ProviderError
from tempdisparity.raster import RasterGrid, RasterTimeSeries
from tempdisparity.stores.base import ClimateRasterStore

logger = logging.getLogger(__name__)

_DIM_ALIASES: dict[str, str] = {
    "lat": "y",
    "latitude": "y",
    "lon": "x",
    "longitude": "x",
    "valid_time": "time",
}


def _standardize(da: xr.DataArray) -> xr.DataArray:
    """Rename spatial/time dims to ``y``/``x``/``time``."""
    renames = {d: _DIM_ALIASES[d] for d in da.dims if d in _DIM_ALIASES}
    return da.rename(renames) if renames else da


def _window(coords: np.ndarray, low: float, high: float) -> np.ndarray:
    if coords.size < 2:
        return np.arange(coords.size)
    half = abs(float(coords[1] - coords[0])) / 2
    return np.flatnonzero((coords >= low - half) & (coords <= high + half))


def _grid_from_coords(xs: np.ndarray, ys: np.ndarray, crs: str) -> RasterGrid:
    if xs.size < 2 or ys.size < 2:
        raise ProviderError(
            what="Cannot derive raster grid",
            cause=f"Need at least 2x2 cells, got {xs.size}x{ys.size}",
            fix="Widen the requested bounds",
        )
    xres = abs(float(xs[1] - xs[0]))
    yres = abs(float(ys[1] - ys[0]))
    west = float(xs.min()) - xres / 2
    north = float(ys.max()) + yres / 2
    return RasterGrid(
        transform=from_origin(west, north, xres, yres),
        width=int(xs.size),
        height=int(ys.size),
        crs=crs,
    )


class NetCDFClimateStore(ClimateRasterStore):
    """Bands read from one or more NetCDF files on disk.

    Each band is looked up in every file; pieces found in several files
    (e.g. one file per year) are concatenated along time.

    Args:
        paths: NetCDF files to read.
        config: Configuration snapshot.
        variables: Band name to file variable name; bands not listed
            use their own name.
        engine: xarray backend engine, ``None`` for automatic selection.
        crs: CRS of the file coordinates.
    """

    _name: str = "netcdf"

    def __init__(
        self,
        paths: Sequence[str | Path] = (),
        config: Config | None = None,
        variables: Mapping[str, str] | None = None,
        engine: str | None = None,
        crs: str = "EPSG:4326",
    ) -> None:
        super().__init__(config)
        self._paths = [Path(p).expanduser() for p in paths]
        self._variables = dict(variables or {})
        self._engine = engine
        self._crs = crs

    def _resolve_paths(
        self,
        bands: Sequence[str],
        start_date: str,
        end_date: str,
    ) -> list[Path]:
        """Return the files that may hold *bands* for the period."""
        return list(self._paths)

    def _variable(self, band: str) -> str:
        return self._variables.get(band, band)

    def _read_piece(
        self,
        path: Path,
        variable: str,
        start_date: str,
        end_date: str,
        bounds: Bounds | None,
    ) -> xr.DataArray | None:
        try:
            ds = xr.open_dataset(path, mask_and_scale=False, engine=self._engine)
        except (OSError, ValueError) as exc:
            raise ProviderError(
                what=f"Cannot open NetCDF file {path.name}",
                cause=str(exc),
                fix="Check that the file exists and is valid NetCDF",
            ) from exc

        with ds:
            if variable not in ds.data_vars:
                return None
            da = _standardize(ds[variable])
            times = da["time"].values
            keep = (times >= np.datetime64(start_date)) & (times < np.datetime64(end_date))
            da = da.isel(time=np.flatnonzero(keep))
            if bounds is not None:
                minx, miny, maxx, maxy = bounds
                da = da.isel(
                    x=_window(da["x"].values, minx, maxx),
                    y=_window(da["y"].values, miny, maxy),
                )
            return da.load()

    def _read_band(
        self,
        band: str,
        paths: Sequence[Path],
        start_date: str,
        end_date: str,
        bounds: Bounds | None,
    ) -> xr.DataArray:
        variable = self._variable(band)
        pieces = [
            piece
            for path in paths
            if (piece := self._read_piece(path, variable, start_date, end_date, bounds))
            is not None
        ]
        if not pieces:
            raise ConfigurationError(
                what=f"Unknown band: {band}",
                cause=f"Variable {variable!r} is not present in any of {len(paths)} file(s)",
                fix="Check the band name or the variables mapping",
            )
        da = xr.concat(pieces, dim="time") if len(pieces) > 1 else pieces[0]
        da = da.sortby("time")
        # north-up, west-to-east
        if da["y"].size > 1 and da["y"].values[0] < da["y"].values[-1]:
            da = da.isel(y=slice(None, None, -1))
        if da["x"].size > 1 and da["x"].values[0] > da["x"].values[-1]:
            da = da.isel(x=slice(None, None, -1))
        return da.transpose("time", "y", "x")

    @staticmethod
    def _encoding(bands: Mapping[str, xr.DataArray]) -> tuple[float, float | None]:
        factors: set[float] = set()
        fills: set[Any] = set()
        for band, da in bands.items():
            if float(da.attrs.get("add_offset", 0.0)) != 0.0:
                raise ProviderError(
                    what=f"Unsupported encoding for band {band}",
                    cause="Variable declares a non-zero add_offset",
                    fix="Convert the file to plain scaled values first",
                )
            factors.add(float(da.attrs.get("scale_factor", 1.0)))
            fill = da.attrs.get("_FillValue", da.attrs.get("missing_value"))
            fills.add(None if fill is None else float(np.asarray(fill).ravel()[0]))
        if len(factors) > 1 or len(fills) > 1:
            raise ProviderError(
                what="Bands use different encodings",
                cause=f"scale factors {sorted(factors)}, fill values {sorted(fills, key=str)}",
                fix="Query bands with matching encodings separately",
            )
        return factors.pop(), fills.pop()

    def query(
        self,
        bands: Sequence[str],
        start_date: str,
        end_date: str,
        bounds: Bounds | None = None,
    ) -> RasterTimeSeries:
        if not bands:
            raise ConfigurationError(
                what="No bands requested",
                fix="Pass at least one band name",
            )
        paths = self._resolve_paths(bands, start_date, end_date)
        arrays = {
            band: self._read_band(band, paths, start_date, end_date, bounds)
            for band in bands
        }
        first = next(iter(arrays.values()))
        for band, da in arrays.items():
            if da.shape != first.shape or not np.array_equal(da["time"].values, first["time"].values):
                raise ProviderError(
                    what=f"Band {band} does not align with {bands[0]}",
                    cause=f"shape {da.shape} vs {first.shape}",
                    fix="Use files covering the same grid and time steps",
                )

        grid = _grid_from_coords(first["x"].values, first["y"].values, self._crs)
        scale_factor, nodata = self._encoding(arrays)
        dataset = xr.Dataset(
            {band: (("time", "y", "x"), da.values) for band, da in arrays.items()},
            coords={"time": first["time"].values},
        )
        logger.info(
            "Loaded %d frames of %s on a %dx%d grid",
            dataset.sizes["time"],
            ", ".join(bands),
            grid.width,
            grid.height,
        )
        return RasterTimeSeries(
            dataset=dataset,
            grid=grid,
            scale_factor=scale_factor,
            nodata=nodata,
        )
