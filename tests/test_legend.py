"""Tests for the colour-scale range and legend entries."""

from __future__ import annotations

import pytest

from tempdisparity.legend import (
    DEFAULT_PALETTE,
    DEFAULT_TITLE,
    build_legend,
    disparity_range,
    legend_values,
)
from tempdisparity.ranking import select_top
from tempdisparity.regions import RegionRecord


def _records(*disparities: float | None) -> list[RegionRecord]:
    return [
        RegionRecord(name=f"R{i}", index=i, disparity=d)
        for i, d in enumerate(disparities)
    ]


@pytest.mark.unit
class TestDisparityRange:
    def test_min_max(self) -> None:
        assert disparity_range(_records(15.0, 9.0, 25.0)) == (9.0, 25.0)

    def test_ignores_missing(self) -> None:
        assert disparity_range(_records(None, 4.0, 7.0)) == (4.0, 7.0)

    def test_empty(self) -> None:
        assert disparity_range([]) is None
        assert disparity_range(_records(None)) is None

    def test_full_set_not_top_k(self) -> None:
        records = _records(*[float(i) for i in range(50)])
        top = select_top(records, k=6)
        assert len(top) == 6
        assert disparity_range(records) == (0.0, 49.0)
        assert disparity_range(top) == (44.0, 49.0)


@pytest.mark.unit
class TestLegendValues:
    def test_three_point_sequence(self) -> None:
        assert legend_values(9.0, 25.0) == [9.0, 17.0, 25.0]

    def test_midpoint_exact(self) -> None:
        values = legend_values(0.1, 0.7)
        assert values[1] == (0.1 + 0.7) / 2
        assert values[0] == 0.1
        assert values[2] == 0.7

    def test_other_counts(self) -> None:
        assert legend_values(0.0, 10.0, count=5) == [0.0, 2.5, 5.0, 7.5, 10.0]
        assert legend_values(3.0, 10.0, count=1) == [3.0]

    def test_invalid_count(self) -> None:
        with pytest.raises(ValueError, match="count"):
            legend_values(0.0, 1.0, count=0)

    def test_degenerate_range(self) -> None:
        assert legend_values(5.0, 5.0) == [5.0, 5.0, 5.0]


@pytest.mark.unit
class TestBuildLegend:
    def test_entries_pair_palette_and_values(self) -> None:
        legend = build_legend(DEFAULT_PALETTE, 9.0, 25.0)
        assert legend.title == DEFAULT_TITLE
        assert legend.colors == ["blue", "yellow", "red"]
        assert legend.values == [9.0, 17.0, 25.0]
        assert [e.label for e in legend.entries] == ["9.00", "17.00", "25.00"]

    def test_label_rounding(self) -> None:
        legend = build_legend(("navy", "white", "crimson"), 8.456, 12.0, title="T")
        assert legend.entries[0].label == "8.46"
        assert legend.entries[1].label == "10.23"
        assert legend.title == "T"

    @pytest.mark.parametrize("palette", [("blue", "red"), ("red",), ("a", "b", "c", "d")])
    def test_requires_three_colours(self, palette: tuple[str, ...]) -> None:
        with pytest.raises(ValueError, match="exactly 3 colours"):
            build_legend(palette, 9.0, 25.0)
