"""tempdisparity: rank administrative regions by temperature disparity.

Averages a minimum/maximum temperature raster series over a period,
reduces it over each region, derives max minus min per region and ranks
the regions by it.

Example:
    >>> import tempdisparity as td
    >>> regions = td.get_region_store("geojson", path="gaul_level1.geojson")
    >>> climate = td.get_climate_store("terraclimate")
    >>> result = td.temperature_disparity(regions, climate)
    >>> result.to_chart_png("top_states.png")
"""

from tempdisparity.__about__ import __version__
from tempdisparity.api import temperature_disparity
from tempdisparity.config import Config, DisparityParams, configure
from tempdisparity.disparity import derive_all, derive_disparity, drop_incomplete
from tempdisparity.exceptions import (
    ConfigurationError,
    EmptySeriesError,
    InvalidGeometryError,
    MissingStatisticError,
    ProviderError,
    TempDisparityError,
)
from tempdisparity.legend import Legend, LegendEntry, build_legend, disparity_range, legend_values
from tempdisparity.ranking import RankedSet, select_top
from tempdisparity.raster import RasterGrid, RasterTimeSeries, StatisticRaster
from tempdisparity.reducers import Reducer
from tempdisparity.regions import Region, RegionRecord
from tempdisparity.results import DisparityResult, ResultMetadata
from tempdisparity.spatial import reduce_region, reduce_regions
from tempdisparity.stores import get_climate_store, get_region_store
from tempdisparity.temporal import temporal_reduce

__all__ = [
    # Version
    "__version__",
    # Pipeline
    "temperature_disparity",
    "temporal_reduce",
    "reduce_region",
    "reduce_regions",
    "derive_disparity",
    "derive_all",
    "drop_incomplete",
    "select_top",
    "disparity_range",
    "legend_values",
    "build_legend",
    "Reducer",
    # Data model
    "RasterGrid",
    "RasterTimeSeries",
    "StatisticRaster",
    "Region",
    "RegionRecord",
    "RankedSet",
    "Legend",
    "LegendEntry",
    # Stores
    "get_region_store",
    "get_climate_store",
    # Configuration
    "Config",
    "DisparityParams",
    "configure",
    # Results
    "DisparityResult",
    "ResultMetadata",
    # Exceptions
    "ConfigurationError",
    "EmptySeriesError",
    "InvalidGeometryError",
    "MissingStatisticError",
    "ProviderError",
    "TempDisparityError",
]
