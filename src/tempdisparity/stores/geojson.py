"""Region store over a GeoJSON FeatureCollection.

Expects FAO GAUL-style attributes: ``ADM0_NAME`` for the country and
``ADM{level}_NAME`` for the region name at each level.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from tempdisparity.config import Config
from tempdisparity.exceptions import ConfigurationError
from tempdisparity.regions import Region
from tempdisparity.stores.base import RegionStore

logger = logging.getLogger(__name__)

_COUNTRY_PROPERTY = "ADM0_NAME"
_NAME_TEMPLATE = "ADM{level}_NAME"


class GeoJSONRegionStore(RegionStore):
    """Regions read from a GeoJSON file.

    The file is parsed lazily on the first query and kept in memory.

    Args:
        path: GeoJSON FeatureCollection path.
        config: Configuration snapshot.
        country_property: Feature property holding the country name.
        name_template: Format string giving the name property for a
            level, with ``{level}`` substituted.

    Example:
        >>> store = GeoJSONRegionStore("gaul_level1.geojson")  # doctest: +SKIP
        >>> len(store.query("Brazil", 1))
        27
    """

    _name: str = "geojson"

    def __init__(
        self,
        path: str | Path,
        config: Config | None = None,
        country_property: str = _COUNTRY_PROPERTY,
        name_template: str = _NAME_TEMPLATE,
    ) -> None:
        super().__init__(config)
        self._path = Path(path).expanduser()
        self._country_property = country_property
        self._name_template = name_template
        self._features: list[dict[str, Any]] | None = None

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> list[dict[str, Any]]:
        if self._features is not None:
            return self._features
        try:
            text = self._path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigurationError(
                what="Cannot read region file",
                cause=f"{type(exc).__name__}: {self._path}",
                fix="Check the path passed to GeoJSONRegionStore",
            ) from None

        try:
            parsed: Any = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ConfigurationError(
                what="Invalid region file format",
                cause=f"JSON parse error in {self._path}: {exc}",
                fix="Provide a GeoJSON FeatureCollection",
            ) from None

        if not isinstance(parsed, dict) or parsed.get("type") != "FeatureCollection":
            raise ConfigurationError(
                what="Invalid region file format",
                cause=f"{self._path} is not a GeoJSON FeatureCollection",
                fix="Provide a GeoJSON FeatureCollection",
            )

        self._features = [f for f in parsed.get("features") or [] if isinstance(f, dict)]
        logger.debug("Loaded %d features from %s", len(self._features), self._path)
        return self._features

    def query(self, country: str, admin_level: int) -> list[Region]:
        name_property = self._name_template.format(level=admin_level)
        regions: list[Region] = []
        for feature in self._load():
            properties = feature.get("properties") or {}
            if properties.get(self._country_property) != country:
                continue
            if name_property not in properties:
                continue
            regions.append(Region.from_feature(feature, name_property))
        logger.info(
            "%d regions for %s at level %d in %s",
            len(regions),
            country,
            admin_level,
            self._path.name,
        )
        return regions
