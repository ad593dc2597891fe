"""Store registry for region and climate raster sources.

``get_region_store()`` and ``get_climate_store()`` instantiate stores by
name. Names are case-insensitive.
"""

from __future__ import annotations

from typing import Any

from tempdisparity.config import Config
from tempdisparity.exceptions import ConfigurationError
from tempdisparity.stores.base import ClimateRasterStore, RegionStore

_REGION_REGISTRY: dict[str, type[RegionStore]] = {}
_CLIMATE_REGISTRY: dict[str, type[ClimateRasterStore]] = {}
_REGISTRY_INITIALIZED = False


def _init_registry() -> None:
    """Populate the registries on first use (lazy import)."""
    global _REGISTRY_INITIALIZED  # noqa: PLW0603
    if _REGISTRY_INITIALIZED:
        return

    from tempdisparity.stores.geojson import GeoJSONRegionStore
    from tempdisparity.stores.memory import InMemoryClimateRasterStore, InMemoryRegionStore
    from tempdisparity.stores.netcdf import NetCDFClimateStore
    from tempdisparity.stores.terraclimate import TerraClimateStore

    _REGION_REGISTRY.update(
        {
            "memory": InMemoryRegionStore,
            "geojson": GeoJSONRegionStore,
        }
    )
    _CLIMATE_REGISTRY.update(
        {
            "memory": InMemoryClimateRasterStore,
            "netcdf": NetCDFClimateStore,
            "terraclimate": TerraClimateStore,
        }
    )
    _REGISTRY_INITIALIZED = True


def get_registered_names() -> dict[str, list[str]]:
    """Return sorted store names per kind (``"region"``, ``"climate"``)."""
    _init_registry()
    return {
        "region": sorted(_REGION_REGISTRY),
        "climate": sorted(_CLIMATE_REGISTRY),
    }


def _lookup(registry: dict[str, Any], kind: str, name: str) -> Any:
    _init_registry()
    key = name.lower()
    if key not in registry:
        valid = ", ".join(sorted(registry))
        raise ConfigurationError(
            what=f"Unknown {kind} store: {name!r}",
            cause=f"Valid {kind} stores are: {valid}",
            fix=f"Use one of: {valid}",
        )
    return registry[key]


def get_region_store(name: str, config: Config | None = None, **kwargs: Any) -> RegionStore:
    """Return a configured region store by name.

    Example:
        >>> store = get_region_store("geojson", path="gaul_level1.geojson")
        >>> store.name
        'geojson'
    """
    cls: type[RegionStore] = _lookup(_REGION_REGISTRY, "region", name)
    return cls(config=config, **kwargs)


def get_climate_store(
    name: str,
    config: Config | None = None,
    **kwargs: Any,
) -> ClimateRasterStore:
    """Return a configured climate raster store by name.

    Example:
        >>> store = get_climate_store("terraclimate")
        >>> store.name
        'terraclimate'
    """
    cls: type[ClimateRasterStore] = _lookup(_CLIMATE_REGISTRY, "climate", name)
    return cls(config=config, **kwargs)


__all__ = [
    "ClimateRasterStore",
    "RegionStore",
    "get_climate_store",
    "get_region_store",
    "get_registered_names",
]
