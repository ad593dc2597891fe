"""Top-level API for temperature disparity runs.

Example:
    >>> import tempdisparity as td
    >>> regions = td.get_region_store("geojson", path="gaul_level1.geojson")
    >>> climate = td.get_climate_store("terraclimate")
    >>> result = td.temperature_disparity(regions, climate, top_k=6)
    >>> result.ranked.names
    ['Mato Grosso do Sul', ...]
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from tempdisparity._pipeline import _run
from tempdisparity.config import Config, DisparityParams, get_default_config

if TYPE_CHECKING:
    from tempdisparity.results import DisparityResult
    from tempdisparity.stores.base import ClimateRasterStore, RegionStore


def _resolve_params(
    params: DisparityParams | None,
    overrides: dict[str, Any],
) -> DisparityParams:
    """Merge keyword overrides into *params*, validating the result."""
    if params is None:
        return DisparityParams(**overrides)
    if not overrides:
        return params
    merged = params.model_dump()
    merged.update(overrides)
    return DisparityParams(**merged)


def temperature_disparity(
    region_store: RegionStore,
    climate_store: ClimateRasterStore,
    params: DisparityParams | None = None,
    *,
    config: Config | None = None,
    **overrides: Any,
) -> DisparityResult:
    """Rank regions by the multi-year mean of high minus low temperature.

    Args:
        region_store: Source of the region geometries.
        climate_store: Source of the temperature raster series.
        params: Run parameters; defaults reproduce the Brazilian states
            TerraClimate analysis for 2014-2024.
        config: Runtime configuration; the module default when ``None``.
        **overrides: Any ``DisparityParams`` field (e.g. ``top_k=10``).

    Returns:
        ``DisparityResult`` with the ranked top-K regions, the full
        qualifying set, the colour-scale range and the legend.

    Raises:
        ValidationError: If a parameter fails validation.
        EmptySeriesError: If no raster frame falls in the period.
        ProviderError: If a store fails after retries.
    """
    resolved = _resolve_params(params, overrides)
    cfg = config if config is not None else get_default_config()
    return _run(region_store, climate_store, resolved, cfg)
