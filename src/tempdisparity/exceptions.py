"""tempdisparity exception hierarchy.

All exceptions follow a three-part message pattern: what failed,
likely cause, and suggested fix.
"""

from __future__ import annotations


class TempDisparityError(Exception):
    """Base exception for all tempdisparity errors.

    Args:
        what: Description of what failed.
        cause: Likely cause of the failure.
        fix: Suggested action to resolve the issue.

    Example:
        >>> raise TempDisparityError(
        ...     what="Operation failed",
        ...     cause="Unexpected internal state",
        ...     fix="Please report this issue",
        ... )
    """

    def __init__(
        self,
        what: str,
        cause: str = "",
        fix: str = "",
    ) -> None:
        self.what = what
        self.cause = cause
        self.fix = fix
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Build the multi-line error message from parts."""
        parts = [self.what]
        if self.cause:
            parts.append(f"Cause: {self.cause}")
        if self.fix:
            parts.append(f"Fix: {self.fix}")
        return "\n".join(parts)


class ConfigurationError(TempDisparityError):
    """Raised for invalid parameters, unknown stores and unreadable inputs.

    Example:
        >>> raise ConfigurationError(
        ...     what="Cannot read region file",
        ...     cause="File not found: gaul_level1.geojson",
        ...     fix="Check the path passed to GeoJSONRegionStore",
        ... )
    """


class ProviderError(TempDisparityError):
    """Raised when a raster or region store fails after retries are exhausted."""


class EmptySeriesError(TempDisparityError):
    """Raised when a raster time series holds no frames after filtering.

    This is fatal for a run: there is nothing to aggregate.
    """


class InvalidGeometryError(TempDisparityError):
    """Raised for empty or malformed region geometries.

    The spatial reducer absorbs this per region; only
    ``reduce_region`` lets it reach the caller.
    """


class MissingStatisticError(TempDisparityError):
    """Raised when a required statistic is absent from a region record."""
