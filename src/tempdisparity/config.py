"""Configuration for tempdisparity.

``Config`` holds runtime settings (download cache, worker pool, HTTP
timeouts). ``DisparityParams`` holds the fixed inputs of one pipeline run:
which regions, which bands, which period, at what scale and how many
regions to rank.
"""

from __future__ import annotations

import logging
import os
from datetime import date
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from tempdisparity.legend import DEFAULT_PALETTE, DEFAULT_TITLE, LEGEND_SIZE

logger = logging.getLogger("tempdisparity")

_CACHE_ENV_VAR = "TEMPDISPARITY_CACHE_DIR"


def _default_cache_dir() -> Path:
    return Path(os.environ.get(_CACHE_ENV_VAR, "~/.tempdisparity/cache"))


class Config(BaseModel):
    """Runtime configuration model.

    Immutable pydantic model. Stores capture a snapshot of the active
    ``Config`` when they are created, so later ``configure()`` calls never
    affect existing stores.

    Args:
        cache_dir: Local directory for downloaded raster files.
        max_workers: Upper bound on parallel per-region reductions.
            ``None`` lets ``ThreadPoolExecutor`` pick its default.
        request_timeout: Connection timeout in seconds for HTTP stores.
        read_timeout: Read timeout in seconds for HTTP downloads.

    Example:
        >>> cfg = Config(max_workers=4)
        >>> cfg.request_timeout
        30.0
    """

    model_config = ConfigDict(frozen=True, validate_default=True, extra="forbid")

    cache_dir: Path = _default_cache_dir()
    max_workers: int | None = None
    request_timeout: float = 30.0
    read_timeout: float = 600.0

    @field_validator("cache_dir", mode="before")
    @classmethod
    def _expand_cache_dir(cls, v: str | Path) -> Path:
        """Expand ``~`` in cache directory path."""
        return Path(v).expanduser()

    @field_validator("max_workers")
    @classmethod
    def _validate_workers(cls, v: int | None) -> int | None:
        if v is not None and v <= 0:
            msg = "max_workers must be greater than 0"
            raise ValueError(msg)
        return v

    @field_validator("request_timeout", "read_timeout")
    @classmethod
    def _validate_timeout(cls, v: float) -> float:
        if v <= 0:
            msg = "timeouts must be greater than 0"
            raise ValueError(msg)
        return v


class DisparityParams(BaseModel):
    """Fixed inputs of a temperature disparity run.

    Defaults reproduce the reference analysis: Brazilian states
    (FAO GAUL level 1), TerraClimate ``tmmx``/``tmmn`` averaged over
    2014-2024, reduced at 50 km, top six states.

    Args:
        country: Country name as stored in the region source.
        admin_level: Administrative level of the regions.
        high_band: Band holding the "high" statistic (max temperature).
        low_band: Band holding the "low" statistic (min temperature).
        start_date: First day of the period (ISO, inclusive).
        end_date: Last day of the period (ISO, exclusive).
        scale_factor: Raw-to-physical factor overriding the one the
            raster store reports. ``None`` keeps the store's factor.
        scale: Spatial resolution in metres for the regional reduction.
        top_k: Number of regions to keep in the ranking.
        descending: Rank largest disparity first.
        palette: Ordered colour ramp for the disparity map and legend.
        legend_title: Title shown above the legend entries.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    country: str = "Brazil"
    admin_level: int = 1
    high_band: str = "tmmx"
    low_band: str = "tmmn"
    start_date: str = "2014-01-01"
    end_date: str = "2024-12-31"
    scale_factor: float | None = None
    scale: float = 50_000.0
    top_k: int = 6
    descending: bool = True
    palette: tuple[str, ...] = DEFAULT_PALETTE
    legend_title: str = DEFAULT_TITLE

    @field_validator("start_date", "end_date")
    @classmethod
    def _validate_date(cls, v: str) -> str:
        try:
            date.fromisoformat(v)
        except ValueError:
            msg = f"dates must be ISO formatted (YYYY-MM-DD), got {v!r}"
            raise ValueError(msg) from None
        return v

    @field_validator("admin_level")
    @classmethod
    def _validate_level(cls, v: int) -> int:
        if v < 0:
            msg = "admin_level must be >= 0"
            raise ValueError(msg)
        return v

    @field_validator("scale")
    @classmethod
    def _validate_scale(cls, v: float) -> float:
        if v <= 0:
            msg = "scale must be greater than 0"
            raise ValueError(msg)
        return v

    @field_validator("scale_factor")
    @classmethod
    def _validate_scale_factor(cls, v: float | None) -> float | None:
        if v is not None and v == 0:
            msg = "scale_factor must be non-zero"
            raise ValueError(msg)
        return v

    @field_validator("top_k")
    @classmethod
    def _validate_top_k(cls, v: int) -> int:
        if v < 0:
            msg = "top_k must be >= 0"
            raise ValueError(msg)
        return v

    @field_validator("palette")
    @classmethod
    def _validate_palette(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        if len(v) != LEGEND_SIZE:
            msg = f"palette must contain exactly {LEGEND_SIZE} colours, got {len(v)}"
            raise ValueError(msg)
        return v

    @model_validator(mode="after")
    def _check_consistency(self) -> DisparityParams:
        if date.fromisoformat(self.start_date) >= date.fromisoformat(self.end_date):
            msg = "start_date must be before end_date"
            raise ValueError(msg)
        if self.high_band == self.low_band:
            msg = "high_band and low_band must differ"
            raise ValueError(msg)
        return self

    @property
    def bands(self) -> list[str]:
        """Bands the run needs, high first."""
        return [self.high_band, self.low_band]

    @property
    def period_label(self) -> str:
        """Year span of the period, e.g. ``'2014-2024'``."""
        return f"{self.start_date[:4]}-{self.end_date[:4]}"


_default_config = Config()


def configure(**kwargs: Any) -> None:
    """Set module-level default configuration.

    Creates a new ``Config`` from the current defaults merged with
    the provided keyword arguments.

    Raises:
        ValidationError: If a provided value fails pydantic validation.

    Example:
        >>> configure(max_workers=8)
    """
    global _default_config  # noqa: PLW0603
    current = _default_config.model_dump()
    current.update(kwargs)
    _default_config = Config(**current)
    logger.debug("Default configuration updated: %s", sorted(kwargs))


def get_default_config() -> Config:
    """Return the current module-level default configuration."""
    return _default_config
