"""In-memory stores over objects built by the caller."""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from tempdisparity._types import Bounds
from tempdisparity.config import Config
from tempdisparity.raster import RasterTimeSeries
from tempdisparity.regions import Region
from tempdisparity.stores.base import ClimateRasterStore, RegionStore


class InMemoryRegionStore(RegionStore):
    """Regions keyed by ``(country, admin_level)``.

    Example:
        >>> from shapely.geometry import box
        >>> store = InMemoryRegionStore({("Brazil", 1): [Region("Acre", box(0, 0, 1, 1))]})
        >>> [r.name for r in store.query("Brazil", 1)]
        ['Acre']
    """

    _name: str = "memory"

    def __init__(
        self,
        collections: Mapping[tuple[str, int], Sequence[Region]],
        config: Config | None = None,
    ) -> None:
        super().__init__(config)
        self._collections = {key: list(regions) for key, regions in collections.items()}

    def query(self, country: str, admin_level: int) -> list[Region]:
        return list(self._collections.get((country, admin_level), []))


class InMemoryClimateRasterStore(ClimateRasterStore):
    """Serves band and date subsets of one ``RasterTimeSeries``.

    ``bounds`` is accepted for interface compatibility; the whole grid
    is always returned.
    """

    _name: str = "memory"

    def __init__(self, series: RasterTimeSeries, config: Config | None = None) -> None:
        super().__init__(config)
        self._series = series

    def query(
        self,
        bands: Sequence[str],
        start_date: str,
        end_date: str,
        bounds: Bounds | None = None,
    ) -> RasterTimeSeries:
        return self._series.select_bands(bands).select_time(start_date, end_date)
