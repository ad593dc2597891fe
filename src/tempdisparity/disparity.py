"""Derivation of the per-region temperature disparity."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from tempdisparity.regions import RegionRecord

logger = logging.getLogger(__name__)


def derive_disparity(record: RegionRecord, high: str, low: str) -> RegionRecord:
    """Set ``record.disparity`` to ``high - low``.

    When either statistic is absent or not finite the disparity stays
    ``None``; it is never defaulted to zero.

    Returns:
        The same record, updated in place.

    Example:
        >>> rec = RegionRecord("Acre", statistics={"tmmx": 30.5, "tmmn": 18.2})
        >>> round(derive_disparity(rec, "tmmx", "tmmn").disparity, 6)
        12.3
    """
    high_value = record.get(high)
    low_value = record.get(low)
    if high_value is None or low_value is None:
        record.disparity = None
    else:
        record.disparity = high_value - low_value
    return record


def drop_incomplete(
    records: Iterable[RegionRecord],
    high: str,
    low: str,
) -> list[RegionRecord]:
    """Keep records with both statistics and a disparity, in input order."""
    kept: list[RegionRecord] = []
    for record in records:
        if record.has_statistics(high, low) and record.has_disparity:
            kept.append(record)
        else:
            logger.debug("Excluding region %r: incomplete statistics", record.name)
    return kept


def derive_all(
    records: Iterable[RegionRecord],
    high: str,
    low: str,
) -> list[RegionRecord]:
    """Derive the disparity of every record and drop incomplete ones.

    Filtering happens once, after derivation.
    """
    derived = [derive_disparity(record, high, low) for record in records]
    kept = drop_incomplete(derived, high, low)
    if len(kept) < len(derived):
        logger.info(
            "%d of %d regions excluded for missing %s/%s",
            len(derived) - len(kept),
            len(derived),
            high,
            low,
        )
    return kept
