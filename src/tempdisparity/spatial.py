"""Spatial reduction of a statistic raster over region geometries.

Each region is reduced independently on a thread pool; results come back
in the order of the input regions regardless of completion order.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed

import numpy as np
from rasterio.features import geometry_mask
from shapely.geometry import mapping
from shapely.validation import explain_validity

from tempdisparity.exceptions import InvalidGeometryError
from tempdisparity.raster import StatisticRaster
from tempdisparity.reducers import Reducer
from tempdisparity.regions import Region, RegionRecord

logger = logging.getLogger(__name__)

_AREAL_TYPES = frozenset({"Polygon", "MultiPolygon"})


def _validate_geometry(region: Region) -> None:
    geometry = region.geometry
    if geometry is None or geometry.is_empty:
        raise InvalidGeometryError(
            what=f"Region {region.name!r} has an empty geometry",
            cause="The region source returned no polygon for it",
            fix="Check the region source for missing or unreadable features",
        )
    if geometry.geom_type not in _AREAL_TYPES:
        raise InvalidGeometryError(
            what=f"Region {region.name!r} is not a polygon",
            cause=f"Geometry type is {geometry.geom_type}",
            fix="Use Polygon or MultiPolygon geometries",
        )
    if not geometry.is_valid:
        raise InvalidGeometryError(
            what=f"Region {region.name!r} has a malformed geometry",
            cause=explain_validity(geometry),
            fix="Repair the geometry (e.g., shapely.make_valid) before loading",
        )


def resample(raster: StatisticRaster, scale: float | None) -> StatisticRaster:
    """Return *raster* at approximately *scale* metres per cell.

    Only coarsening is performed: a scale at or below the native cell
    size keeps the native grid.
    """
    if scale is None:
        return raster
    factor = int(round(scale / raster.grid.resolution_m))
    if factor <= 1:
        return raster
    logger.debug(
        "Coarsening %dx%d raster by %d for %.0f m scale",
        raster.grid.width,
        raster.grid.height,
        factor,
        scale,
    )
    return raster.coarsen(factor)


def reduce_region(
    raster: StatisticRaster,
    region: Region,
    reducer: Reducer | str = Reducer.MEAN,
    index: int = 0,
) -> RegionRecord:
    """Reduce every band of *raster* over the pixels touching *region*.

    Bands without any valid pixel in the region are ``None``.

    Raises:
        InvalidGeometryError: If the region geometry is empty or malformed.
    """
    reducer = Reducer.parse(reducer)
    _validate_geometry(region)

    grid = raster.grid
    inside = geometry_mask(
        [mapping(region.geometry)],
        out_shape=grid.shape,
        transform=grid.transform,
        all_touched=True,
        invert=True,
    )
    statistics: dict[str, float | None] = {}
    for band in raster.bands:
        values = raster.band(band)[inside]
        statistics[band] = reducer.reduce(values)
    return RegionRecord(name=region.name, index=index, statistics=statistics)


def reduce_regions(
    raster: StatisticRaster,
    regions: Sequence[Region],
    reducer: Reducer | str = Reducer.MEAN,
    scale: float | None = None,
    max_workers: int | None = None,
) -> list[RegionRecord]:
    """Reduce *raster* over every region, in parallel.

    Regions with invalid geometry are logged and skipped.

    Args:
        raster: Statistic raster from temporal reduction.
        regions: Regions in their reference order.
        reducer: Spatial reduction (mean by default).
        scale: Target resolution in metres, see ``resample``.
        max_workers: Thread pool size, ``None`` for the executor default.

    Returns:
        One record per valid region, ordered like *regions*.
    """
    reducer = Reducer.parse(reducer)
    working = resample(raster, scale)
    results: list[RegionRecord | None] = [None] * len(regions)

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = {
            executor.submit(reduce_region, working, region, reducer, index): index
            for index, region in enumerate(regions)
        }
        for future in as_completed(futures):
            index = futures[future]
            try:
                results[index] = future.result()
            except InvalidGeometryError as exc:
                logger.warning("Skipping region %r: %s", regions[index].name, exc.what)

    records = [record for record in results if record is not None]
    empty = sum(1 for r in records if not any(v is not None for v in r.statistics.values()))
    logger.info(
        "Reduced %d of %d regions (%d without valid pixels)",
        len(records),
        len(regions),
        empty,
    )
    return records


def region_bounds(regions: Sequence[Region]) -> tuple[float, float, float, float] | None:
    """Return the bounding box of all non-empty region geometries."""
    boxes = [
        r.geometry.bounds
        for r in regions
        if r.geometry is not None and not r.geometry.is_empty
    ]
    if not boxes:
        return None
    arr = np.asarray(boxes, dtype=np.float64)
    return (
        float(arr[:, 0].min()),
        float(arr[:, 1].min()),
        float(arr[:, 2].max()),
        float(arr[:, 3].max()),
    )
