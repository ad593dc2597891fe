"""Administrative regions and the per-region statistics computed for them."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any

from shapely.errors import ShapelyError
from shapely.geometry import shape
from shapely.geometry.base import BaseGeometry

from tempdisparity.exceptions import MissingStatisticError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Region:
    """An administrative unit with a name and a polygon footprint.

    Args:
        name: Stable identity of the region (e.g., ``"Mato Grosso"``).
        geometry: Polygon or MultiPolygon in the raster CRS, or ``None``
            when the source geometry could not be parsed.
        properties: Remaining attributes from the region source.

    Example:
        >>> from shapely.geometry import box
        >>> Region("Acre", box(0, 0, 1, 1)).name
        'Acre'
    """

    name: str
    geometry: BaseGeometry | None
    properties: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    @classmethod
    def from_feature(cls, feature: dict[str, Any], name_property: str) -> Region:
        """Build a region from a GeoJSON feature.

        Unparseable geometries are kept as ``None`` so that the spatial
        reducer reports and skips the region.
        """
        properties = dict(feature.get("properties") or {})
        name = str(properties.get(name_property, ""))
        geometry: BaseGeometry | None
        try:
            geometry = shape(feature["geometry"])
        except (KeyError, AttributeError, TypeError, ValueError, ShapelyError) as exc:
            logger.warning("Region %r has an unreadable geometry: %s", name, exc)
            geometry = None
        return cls(name=name, geometry=geometry, properties=properties)


def _is_finite(value: float | None) -> bool:
    return value is not None and math.isfinite(value)


@dataclass
class RegionRecord:
    """Per-region scalar results.

    Created by the spatial reducer, completed by the disparity deriver,
    read-only after that. Absent values are ``None``, never zero.

    Args:
        name: Region identity.
        index: Position of the region in the reducer's input order.
        statistics: Reduced value per band.
        disparity: Derived high minus low, once computed.
    """

    name: str
    index: int = 0
    statistics: dict[str, float | None] = field(default_factory=dict)
    disparity: float | None = None

    def get(self, band: str) -> float | None:
        """Return the finite value of *band*, or ``None``."""
        value = self.statistics.get(band)
        return float(value) if _is_finite(value) else None

    def require(self, band: str) -> float:
        """Return the value of *band*.

        Raises:
            MissingStatisticError: If the band is absent or not finite.
        """
        value = self.get(band)
        if value is None:
            raise MissingStatisticError(
                what=f"Region {self.name!r} has no value for {band!r}",
                cause="No valid pixel of the band intersects the region",
                fix="Filter records with has_statistics() before reading values",
            )
        return value

    def has_statistics(self, *bands: str) -> bool:
        return all(self.get(band) is not None for band in bands)

    @property
    def has_disparity(self) -> bool:
        return _is_finite(self.disparity)
