"""Temporal reduction of a raster time series into a statistic raster.

Pure computation module: no I/O, no store interaction.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from tempdisparity._types import TimeRange
from tempdisparity.exceptions import EmptySeriesError
from tempdisparity.raster import RasterTimeSeries, StatisticRaster
from tempdisparity.reducers import Reducer

logger = logging.getLogger(__name__)


def temporal_reduce(
    series: RasterTimeSeries,
    bands: Sequence[str] | None = None,
    reducer: Reducer | str = Reducer.MEAN,
    time_range: TimeRange | None = None,
) -> StatisticRaster:
    """Collapse *series* to one value per pixel per band.

    The series scale factor is applied once, before reduction. Frames
    with no data at a pixel do not contribute to that pixel.

    Args:
        series: Raw raster time series from a climate store.
        bands: Bands to keep; all bands when ``None``.
        reducer: Reduction applied over time (mean by default).
        time_range: Optional ``(start, end)`` filter, end exclusive.

    Returns:
        ``StatisticRaster`` on the series grid.

    Raises:
        EmptySeriesError: If no frame remains after filtering.
        ConfigurationError: If a requested band is not in the series.

    Example:
        >>> stats = temporal_reduce(series, bands=["tmmx", "tmmn"])  # doctest: +SKIP
        >>> stats.bands
        ['tmmx', 'tmmn']
    """
    reducer = Reducer.parse(reducer)
    if time_range is not None:
        series = series.select_time(*time_range)
    if bands is not None:
        series = series.select_bands(bands)

    if series.frame_count == 0:
        period = f"{time_range[0]} to {time_range[1]}" if time_range else "the series"
        raise EmptySeriesError(
            what="No raster frames to aggregate",
            cause=f"The time series has no frames for {period}",
            fix="Check the date range and that the climate store covers it",
        )

    scaled = series.apply_scale()
    logger.info(
        "Reducing %d frames (%s) with %s",
        scaled.frame_count,
        ", ".join(scaled.bands),
        reducer.value,
    )
    arrays = {
        band: reducer.reduce_axis(scaled.dataset[band].values, axis=0)
        for band in scaled.bands
    }
    return StatisticRaster.from_arrays(arrays, grid=series.grid)
