"""Result object model for a temperature disparity run."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

import numpy as np
import numpy.typing as npt
from pydantic import BaseModel, Field

from tempdisparity.legend import Legend
from tempdisparity.ranking import RankedSet
from tempdisparity.raster import StatisticRaster
from tempdisparity.regions import Region, RegionRecord

if TYPE_CHECKING:
    import pandas as pd

# Chart colours for the high and low series.
_HIGH_COLOR = "#ff0000"
_LOW_COLOR = "#0000ff"


class ResultMetadata(BaseModel):
    """Provenance and counts for a disparity result.

    Uses Pydantic (not dataclass) for JSON serialization in exports.

    Attributes:
        source: Climate store name (e.g., ``"terraclimate"``).
        country: Country the regions belong to.
        admin_level: Administrative level of the regions.
        high_band: Band used as the high statistic.
        low_band: Band used as the low statistic.
        start_date: First day of the period (inclusive).
        end_date: End of the period (exclusive).
        frame_count: Raster frames aggregated over time.
        scale: Spatial reduction scale in metres.
        top_k: Requested ranking size.
        region_count: Regions returned by the region store.
        reduced_count: Regions with a valid geometry.
        qualifying_count: Regions with both statistics and a disparity.
    """

    source: str = ""
    country: str = ""
    admin_level: int = 0
    high_band: str = ""
    low_band: str = ""
    start_date: str = ""
    end_date: str = ""
    frame_count: int = 0
    scale: float | None = None
    top_k: int = 0
    region_count: int = 0
    reduced_count: int = 0
    qualifying_count: int = 0
    timestamps: list[str] = Field(default_factory=list)

    @property
    def period_label(self) -> str:
        if not self.start_date or not self.end_date:
            return ""
        return f"{self.start_date[:4]}-{self.end_date[:4]}"


@dataclass
class DisparityResult:
    """Ranked regions plus everything needed to draw chart, map and legend.

    Attributes:
        ranked: Top-K records by disparity.
        records: Every qualifying record, in region order.
        value_range: ``(min, max)`` disparity over ``records``.
        legend: Colour entries spanning ``value_range``.
        palette: Colour ramp of the map.
        statistic_raster: Temporal means the regions were reduced from.
        regions: Regions as returned by the region store.
        metadata: Run provenance and counts.
    """

    ranked: RankedSet
    records: list[RegionRecord] = field(default_factory=list)
    value_range: tuple[float, float] | None = None
    legend: Legend = field(default_factory=lambda: Legend(title=""))
    palette: tuple[str, ...] = ()
    statistic_raster: StatisticRaster | None = None
    regions: list[Region] = field(default_factory=list)
    metadata: ResultMetadata = field(default_factory=ResultMetadata)

    def __repr__(self) -> str:
        """Return narrative summary for interactive display."""
        meta = self.metadata
        lines: list[str] = [f"{type(self).__name__}("]
        if meta.country:
            lines.append(f"  regions: {meta.country} level {meta.admin_level}")
        if meta.period_label:
            lines.append(f"  period: {meta.period_label} ({meta.frame_count} frames)")
        lines.append(
            f"  qualifying: {meta.qualifying_count} of {meta.region_count} regions"
        )
        if self.value_range is not None:
            vmin, vmax = self.value_range
            lines.append(f"  disparity range: {vmin:.2f} → {vmax:.2f} °C")
        else:
            lines.append("  disparity range: N/A (no qualifying regions)")
        for rank, record in enumerate(self.ranked, start=1):
            lines.append(f"  {rank}. {record.name}: {record.disparity:.2f} °C")
        lines.append(")")
        return "\n".join(lines)

    def to_dataframe(self, ranked_only: bool = False) -> pd.DataFrame:
        """Export records to a DataFrame.

        Args:
            ranked_only: Export the top-K set instead of every
                qualifying region.

        Returns:
            Columns ``region``, high band, low band, ``disparity``.
        """
        import pandas as pd

        high, low = self.metadata.high_band, self.metadata.low_band
        source = list(self.ranked) if ranked_only else self.records
        rows = [
            {
                "region": r.name,
                high: r.get(high),
                low: r.get(low),
                "disparity": r.disparity,
            }
            for r in source
        ]
        return pd.DataFrame(rows, columns=["region", high, low, "disparity"])

    def chart_data(self) -> pd.DataFrame:
        """Return the top-K chart series: one column per band, indexed by region."""
        df = self.to_dataframe(ranked_only=True)
        return df.set_index("region")[[self.metadata.high_band, self.metadata.low_band]]

    def to_chart_png(self, path: str | Path) -> Path:
        """Draw the top-K high/low comparison line chart to a PNG file."""
        import matplotlib

        matplotlib.use("Agg")
        import matplotlib.pyplot as plt

        path = Path(path)
        data = self.chart_data()
        fig, ax = plt.subplots(figsize=(10, 6))

        if data.empty:
            ax.text(
                0.5,
                0.5,
                "No qualifying regions",
                ha="center",
                va="center",
                fontsize=14,
                transform=ax.transAxes,
            )
        else:
            colors = [_HIGH_COLOR, _LOW_COLOR]
            for column, color in zip(data.columns, colors):
                ax.plot(
                    data.index,
                    data[column],
                    color=color,
                    linewidth=1,
                    marker="o",
                    markersize=4,
                    label=column,
                )
            ax.legend()
            plt.setp(ax.get_xticklabels(), rotation=30, ha="right")

        title = "Regions with the Largest Temperature Disparity"
        if self.metadata.period_label:
            title += f" ({self.metadata.period_label})"
        ax.set_title(title)
        ax.set_ylabel("Temperature (°C)")

        plt.tight_layout()
        plt.savefig(path, dpi=150, bbox_inches="tight")
        plt.close(fig)
        return path

    def disparity_image(self) -> npt.NDArray[np.float64]:
        """Rasterize each qualifying region's disparity on the statistic grid.

        Where regions overlap the earlier region in input order wins.
        Pixels outside every region are NaN.

        Raises:
            ValueError: If the result carries no statistic raster.
        """
        from rasterio.features import rasterize
        from shapely.geometry import mapping

        if self.statistic_raster is None:
            msg = "Result has no statistic raster to rasterize onto"
            raise ValueError(msg)

        grid = self.statistic_raster.grid
        shapes: list[tuple[dict[str, Any], float]] = []
        for record in self.records:
            region = self.regions[record.index]
            if region.geometry is None or not record.has_disparity:
                continue
            shapes.append((mapping(region.geometry), float(record.disparity)))  # type: ignore[arg-type]

        if not shapes:
            return np.full(grid.shape, np.nan, dtype=np.float64)

        # rasterize burns later shapes over earlier ones
        image: npt.NDArray[np.float64] = rasterize(
            reversed(shapes),
            out_shape=grid.shape,
            transform=grid.transform,
            fill=np.nan,
            dtype="float64",
        )
        return image

    def to_map_png(self, path: str | Path) -> Path:
        """Draw the disparity map with its legend to a PNG file."""
        import matplotlib

        matplotlib.use("Agg")
        import matplotlib.pyplot as plt
        from matplotlib.colors import LinearSegmentedColormap
        from matplotlib.patches import Patch

        path = Path(path)
        image = self.disparity_image()
        grid = self.statistic_raster.grid  # type: ignore[union-attr]
        minx, miny, maxx, maxy = grid.bounds

        fig, ax = plt.subplots(figsize=(10, 8))
        if self.value_range is None or not self.palette:
            ax.text(
                0.5,
                0.5,
                "No qualifying regions",
                ha="center",
                va="center",
                fontsize=14,
                transform=ax.transAxes,
            )
        else:
            cmap = LinearSegmentedColormap.from_list("disparity", list(self.palette))
            vmin, vmax = self.value_range
            ax.imshow(
                image,
                cmap=cmap,
                vmin=vmin,
                vmax=vmax,
                extent=(minx, maxx, miny, maxy),
                interpolation="nearest",
            )
            handles = [Patch(color=e.color, label=e.label) for e in self.legend.entries]
            ax.legend(handles=handles, title=self.legend.title, loc="lower right")

        title = "Temperature Disparity"
        if self.metadata.period_label:
            title += f" ({self.metadata.period_label})"
        ax.set_title(title)

        plt.tight_layout()
        plt.savefig(path, dpi=150, bbox_inches="tight")
        plt.close(fig)
        return path

    def to_geotiff(self, path: str | Path) -> Path:
        """Write the disparity image as a single-band GeoTIFF."""
        import rasterio

        path = Path(path)
        image = self.disparity_image().astype(np.float32)
        grid = self.statistic_raster.grid  # type: ignore[union-attr]

        with rasterio.open(
            path,
            "w",
            driver="GTiff",
            height=grid.height,
            width=grid.width,
            count=1,
            dtype="float32",
            crs=grid.crs,
            transform=grid.transform,
            nodata=np.nan,
        ) as dst:
            dst.write(image, 1)

        return path
