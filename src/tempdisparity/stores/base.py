"""Store interface contracts.

Region and climate raster stores are the two data sources the pipeline
reads from. Each implementation sets ``_name`` to a unique identifier and
captures a frozen ``Config`` snapshot at construction.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from tempdisparity._types import Bounds
from tempdisparity.config import Config, get_default_config
from tempdisparity.raster import RasterTimeSeries
from tempdisparity.regions import Region


class RegionStore(ABC):
    """Source of administrative region geometries.

    Args:
        config: Configuration snapshot; the module default when ``None``.
    """

    _name: str = ""

    def __init__(self, config: Config | None = None) -> None:
        self._config = config if config is not None else get_default_config()

    @property
    def name(self) -> str:
        """Store identifier used in the registry and result metadata."""
        return self._name

    @property
    def config(self) -> Config:
        return self._config

    @abstractmethod
    def query(self, country: str, admin_level: int) -> list[Region]:
        """Return the regions of *country* at *admin_level*.

        Returns an empty list when nothing matches. Never raises on
        missing data, only on unreadable sources.
        """
        ...


class ClimateRasterStore(ABC):
    """Source of gridded climate time series.

    Args:
        config: Configuration snapshot; the module default when ``None``.
    """

    _name: str = ""

    def __init__(self, config: Config | None = None) -> None:
        self._config = config if config is not None else get_default_config()

    @property
    def name(self) -> str:
        """Store identifier used in the registry and result metadata."""
        return self._name

    @property
    def config(self) -> Config:
        return self._config

    @abstractmethod
    def query(
        self,
        bands: Sequence[str],
        start_date: str,
        end_date: str,
        bounds: Bounds | None = None,
    ) -> RasterTimeSeries:
        """Return raw frames of *bands* with ``start_date <= t < end_date``.

        Args:
            bands: Band identifiers to load.
            start_date: ISO date, inclusive.
            end_date: ISO date, exclusive.
            bounds: Optional ``(minx, miny, maxx, maxy)`` window; stores
                that can subset spatially load only this area.

        Raises:
            ConfigurationError: If a band is unknown to the store.
            ProviderError: If the data cannot be fetched.
        """
        ...
