"""Fixtures for store tests: small NetCDF files written like TerraClimate's."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from pathlib import Path

import numpy as np
import pandas as pd
import pytest
import xarray as xr

# 4x4 one-degree cells centred on .5, latitude stored south to north.
LATS = np.array([0.5, 1.5, 2.5, 3.5])
LONS = np.array([0.5, 1.5, 2.5, 3.5])


def write_netcdf(
    path: Path,
    variables: dict[str, np.ndarray],
    times: Sequence[str],
    scale_factor: float = 0.1,
) -> Path:
    """Write *variables* (time, lat, lon) as scaled int16 with a -32768 fill."""
    ds = xr.Dataset(
        {name: (("time", "lat", "lon"), values) for name, values in variables.items()},
        coords={"time": pd.to_datetime(list(times)), "lat": LATS, "lon": LONS},
    )
    encoding = {
        name: {"dtype": "int16", "scale_factor": scale_factor, "_FillValue": -32768}
        for name in variables
    }
    ds.to_netcdf(path, encoding=encoding)
    return path


@pytest.fixture
def netcdf_writer() -> Callable[..., Path]:
    """Return the ``write_netcdf`` helper."""
    return write_netcdf


def constant_frames(value: float, frames: int = 1) -> np.ndarray:
    return np.full((frames, LATS.size, LONS.size), value, dtype=np.float64)


@pytest.fixture
def frames() -> Callable[..., np.ndarray]:
    """Return the ``constant_frames`` helper."""
    return constant_frames
