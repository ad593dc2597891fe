"""Internal shared type aliases.

Not re-exported from ``tempdisparity.__init__``.
"""

from __future__ import annotations

BandList = list[str]
"""Ordered list of band identifiers (e.g., ``['tmmx', 'tmmn']``)."""

TimeRange = tuple[str, str]
"""ISO-8601 date pair ``(start, end)``; start inclusive, end exclusive."""

Bounds = tuple[float, float, float, float]
"""Bounding box ``(minx, miny, maxx, maxy)`` in the raster CRS."""
