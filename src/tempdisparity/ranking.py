"""Top-K selection of region records by disparity."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from typing import overload

from tempdisparity.regions import RegionRecord


@dataclass(frozen=True)
class RankedSet(Sequence[RegionRecord]):
    """Region records ordered by disparity and truncated to ``limit``.

    Args:
        records: Ordered records, each with a finite disparity.
        limit: The K the set was selected with.
        descending: ``True`` when the largest disparity comes first.
    """

    records: tuple[RegionRecord, ...] = ()
    limit: int = 0
    descending: bool = True

    def __post_init__(self) -> None:
        if len(self.records) > self.limit:
            msg = f"ranked set holds {len(self.records)} records, limit is {self.limit}"
            raise ValueError(msg)
        if not all(r.has_disparity for r in self.records):
            msg = "every ranked record needs a disparity"
            raise ValueError(msg)

    @overload
    def __getitem__(self, index: int) -> RegionRecord: ...

    @overload
    def __getitem__(self, index: slice) -> tuple[RegionRecord, ...]: ...

    def __getitem__(self, index: int | slice) -> RegionRecord | tuple[RegionRecord, ...]:
        return self.records[index]

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[RegionRecord]:
        return iter(self.records)

    @property
    def names(self) -> list[str]:
        return [r.name for r in self.records]

    @property
    def disparities(self) -> list[float]:
        return [float(r.disparity) for r in self.records]  # type: ignore[arg-type]


def select_top(
    records: Sequence[RegionRecord],
    k: int,
    descending: bool = True,
) -> RankedSet:
    """Return the *k* records with the most extreme disparity.

    Ties keep their input order. When fewer than *k* records exist all of
    them are returned.

    Raises:
        ValueError: If *k* is negative or a record has no disparity.

    Example:
        >>> top = select_top(records, k=6)  # doctest: +SKIP
        >>> len(top) <= 6
        True
    """
    if k < 0:
        msg = f"k must be >= 0, got {k}"
        raise ValueError(msg)
    for record in records:
        if not record.has_disparity:
            msg = f"record {record.name!r} has no disparity; derive it before ranking"
            raise ValueError(msg)

    # sorted() is stable for reverse=True as well
    ordered = sorted(records, key=lambda r: r.disparity, reverse=descending)  # type: ignore[arg-type, return-value]
    return RankedSet(records=tuple(ordered[:k]), limit=k, descending=descending)
