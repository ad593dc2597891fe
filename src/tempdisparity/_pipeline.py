"""Pipeline orchestration.

Each stage takes the previous stage's output as an explicit argument:
regions + raster series → temporal mean → regional means → disparity →
top-K ranking, with the colour-scale range computed over the full
qualifying set.
"""

from __future__ import annotations

import logging

from tempdisparity.config import Config, DisparityParams
from tempdisparity.disparity import derive_all
from tempdisparity.legend import Legend, build_legend, disparity_range
from tempdisparity.ranking import select_top
from tempdisparity.reducers import Reducer
from tempdisparity.results import DisparityResult, ResultMetadata
from tempdisparity.spatial import reduce_regions, region_bounds
from tempdisparity.stores.base import ClimateRasterStore, RegionStore
from tempdisparity.temporal import temporal_reduce

logger = logging.getLogger(__name__)


def _run(
    region_store: RegionStore,
    climate_store: ClimateRasterStore,
    params: DisparityParams,
    config: Config,
) -> DisparityResult:
    """Execute one disparity run.

    Raises:
        EmptySeriesError: If the climate store has no frames for the period.
        ProviderError: If a store fails after its own retries.
        ConfigurationError: If a band is unknown to the climate store.
    """
    regions = region_store.query(params.country, params.admin_level)
    if not regions:
        logger.warning(
            "Region store %r returned no regions for %s level %d",
            region_store.name,
            params.country,
            params.admin_level,
        )

    series = climate_store.query(
        params.bands,
        params.start_date,
        params.end_date,
        bounds=region_bounds(regions),
    )
    if params.scale_factor is not None:
        series = series.with_scale_factor(params.scale_factor)

    statistic_raster = temporal_reduce(
        series,
        bands=params.bands,
        reducer=Reducer.MEAN,
        time_range=(params.start_date, params.end_date),
    )

    records = reduce_regions(
        statistic_raster,
        regions,
        reducer=Reducer.MEAN,
        scale=params.scale,
        max_workers=config.max_workers,
    )
    qualifying = derive_all(records, params.high_band, params.low_band)
    ranked = select_top(qualifying, params.top_k, descending=params.descending)

    value_range = disparity_range(qualifying)
    if value_range is None:
        legend = Legend(title=params.legend_title)
    else:
        legend = build_legend(params.palette, *value_range, title=params.legend_title)

    metadata = ResultMetadata(
        source=climate_store.name,
        country=params.country,
        admin_level=params.admin_level,
        high_band=params.high_band,
        low_band=params.low_band,
        start_date=params.start_date,
        end_date=params.end_date,
        frame_count=series.frame_count,
        scale=params.scale,
        top_k=params.top_k,
        region_count=len(regions),
        reduced_count=len(records),
        qualifying_count=len(qualifying),
        timestamps=series.timestamps,
    )
    logger.info(
        "Ranked %d of %d qualifying regions (%s)",
        len(ranked),
        len(qualifying),
        params.period_label,
    )
    return DisparityResult(
        ranked=ranked,
        records=qualifying,
        value_range=value_range,
        legend=legend,
        palette=tuple(params.palette),
        statistic_raster=statistic_raster,
        regions=list(regions),
        metadata=metadata,
    )
