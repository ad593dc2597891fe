"""Colour-scale domain and legend entries for the disparity map."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from tempdisparity.regions import RegionRecord

DEFAULT_PALETTE: tuple[str, ...] = ("blue", "yellow", "red")
DEFAULT_TITLE = "Temperature Disparity (°C)"
# Legend values are min, mid and max.
LEGEND_SIZE = 3


@dataclass(frozen=True)
class LegendEntry:
    """One colour swatch and its value label."""

    color: str
    value: float
    label: str


@dataclass(frozen=True)
class Legend:
    """Title plus ordered entries, independent of any UI toolkit."""

    title: str
    entries: tuple[LegendEntry, ...] = ()

    @property
    def colors(self) -> list[str]:
        return [e.color for e in self.entries]

    @property
    def values(self) -> list[float]:
        return [e.value for e in self.entries]


def disparity_range(records: Iterable[RegionRecord]) -> tuple[float, float] | None:
    """Return ``(min, max)`` disparity over *records*.

    Pass the full qualifying set here, not the ranked top K: the map
    covers every region.

    Returns:
        The range, or ``None`` when no record has a disparity.
    """
    values = [float(r.disparity) for r in records if r.has_disparity]  # type: ignore[arg-type]
    if not values:
        return None
    return (min(values), max(values))


def legend_values(vmin: float, vmax: float, count: int = LEGEND_SIZE) -> list[float]:
    """Return *count* evenly spaced values from *vmin* to *vmax*.

    Example:
        >>> legend_values(9.0, 25.0)
        [9.0, 17.0, 25.0]
    """
    if count < 1:
        msg = f"count must be >= 1, got {count}"
        raise ValueError(msg)
    if count == 1:
        return [vmin]
    steps = count - 1
    return [((steps - i) * vmin + i * vmax) / steps for i in range(count)]


def build_legend(
    palette: Sequence[str],
    vmin: float,
    vmax: float,
    title: str = DEFAULT_TITLE,
) -> Legend:
    """Pair the min, mid and max colours with their values.

    Labels carry two decimals.

    Raises:
        ValueError: If *palette* does not hold exactly three colours.
    """
    if len(palette) != LEGEND_SIZE:
        msg = f"palette must contain exactly {LEGEND_SIZE} colours, got {len(palette)}"
        raise ValueError(msg)
    values = legend_values(vmin, vmax)
    entries = tuple(
        LegendEntry(color=color, value=value, label=f"{value:.2f}")
        for color, value in zip(palette, values)
    )
    return Legend(title=title, entries=entries)
