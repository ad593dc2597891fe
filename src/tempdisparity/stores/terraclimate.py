"""TerraClimate monthly climate grids, downloaded over HTTP.

Yearly NetCDF files are fetched from the University of Idaho server into
``Config.cache_dir`` and reused on later queries. Transient HTTP failures
are retried with exponential backoff; the core pipeline itself never
retries.
"""

from __future__ import annotations

import logging
import random
import time
from collections.abc import Sequence
from datetime import date, timedelta
from pathlib import Path
from typing import Any

import requests

from tempdisparity.config import Config
from tempdisparity.exceptions import ConfigurationError, ProviderError
from tempdisparity.stores.netcdf import NetCDFClimateStore

logger = logging.getLogger(__name__)

_BASE_URL = "https://climate.northwestknowledge.net/TERRACLIMATE-DATA"
_FILE_TEMPLATE = "TerraClimate_{variable}_{year}.nc"

# Earth Engine band names mapped to TerraClimate file variables.
_BAND_ALIASES: dict[str, str] = {
    "tmmx": "tmax",
    "tmmn": "tmin",
    "pr": "ppt",
    "pdsi": "PDSI",
}
_VARIABLES = frozenset(
    {"aet", "def", "pet", "ppt", "q", "soil", "srad", "swe", "tmax", "tmin", "vap", "vpd", "ws", "PDSI"}
)

_MAX_RETRIES = 3
_INITIAL_BACKOFF = 1.0  # seconds
_MAX_BACKOFF = 60.0  # seconds
_RETRYABLE_STATUS_CODES = frozenset({408, 429, 500, 502, 503, 504})
_CHUNK_SIZE = 1 << 20


class TerraClimateStore(NetCDFClimateStore):
    """TerraClimate store with a local download cache.

    Args:
        config: Configuration snapshot (cache directory, timeouts).
        base_url: Server directory holding the yearly files.

    Example:
        >>> store = TerraClimateStore()
        >>> series = store.query(["tmmx", "tmmn"], "2014-01-01", "2015-01-01")  # doctest: +SKIP
    """

    _name: str = "terraclimate"

    def __init__(
        self,
        config: Config | None = None,
        base_url: str = _BASE_URL,
    ) -> None:
        super().__init__(paths=(), config=config, variables=_BAND_ALIASES)
        self._base_url = base_url.rstrip("/")
        self._session: requests.Session = requests.Session()

    @property
    def cache_dir(self) -> Path:
        return self.config.cache_dir / "terraclimate"

    def _variable(self, band: str) -> str:
        variable = super()._variable(band)
        if variable not in _VARIABLES:
            valid = ", ".join(sorted(set(_BAND_ALIASES) | _VARIABLES))
            raise ConfigurationError(
                what=f"Unknown TerraClimate band: {band}",
                cause=f"Valid bands are: {valid}",
                fix=f"Use one of: {valid}",
            )
        return variable

    def _resolve_paths(
        self,
        bands: Sequence[str],
        start_date: str,
        end_date: str,
    ) -> list[Path]:
        first_year = date.fromisoformat(start_date).year
        last_year = (date.fromisoformat(end_date) - timedelta(days=1)).year
        return [
            self._ensure_file(self._variable(band), year)
            for band in bands
            for year in range(first_year, last_year + 1)
        ]

    def _ensure_file(self, variable: str, year: int) -> Path:
        """Return the cached file for *variable*/*year*, downloading it if absent."""
        filename = _FILE_TEMPLATE.format(variable=variable, year=year)
        target = self.cache_dir / filename
        if target.exists():
            logger.debug("Cache hit for %s", filename)
            return target

        url = f"{self._base_url}/{filename}"
        logger.info("Downloading %s...", url)
        resp = self._retry_request(
            "get",
            url,
            stream=True,
            timeout=(self.config.request_timeout, self.config.read_timeout),
        )

        partial = target.with_name(filename + ".part")
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with partial.open("wb") as fh:
                for chunk in resp.iter_content(chunk_size=_CHUNK_SIZE):
                    if chunk:
                        fh.write(chunk)
            partial.replace(target)
        except OSError as exc:
            partial.unlink(missing_ok=True)
            raise ProviderError(
                what=f"Cannot store {filename}",
                cause=str(exc),
                fix=f"Check that {self.cache_dir} is writable",
            ) from exc
        finally:
            resp.close()
        return target

    def _retry_request(
        self,
        method: str,
        url: str,
        **kwargs: Any,
    ) -> requests.Response:
        """Execute HTTP request with retry and exponential backoff.

        Raises:
            ProviderError: If the file does not exist or retries are exhausted.
        """
        kwargs.setdefault("timeout", self.config.request_timeout)
        last_status: int = 0
        last_exc: requests.RequestException | None = None

        for attempt in range(_MAX_RETRIES):
            try:
                resp = self._session.request(method, url, **kwargs)

                if resp.status_code == 200:  # noqa: PLR2004
                    return resp

                last_status = resp.status_code

                if resp.status_code == 404:  # noqa: PLR2004
                    raise ProviderError(
                        what="TerraClimate file not found",
                        cause=f"HTTP 404 for {url}",
                        fix="Check that the year has been published",
                    )

                if resp.status_code not in _RETRYABLE_STATUS_CODES:
                    raise ProviderError(
                        what="TerraClimate request failed",
                        cause=f"HTTP {resp.status_code}",
                        fix=f"Check server status at {self._base_url}",
                    )

                backoff = self._compute_backoff(attempt)
                logger.warning(
                    "TerraClimate request failed (HTTP %d, attempt %d/%d), retrying in %.1fs...",
                    resp.status_code,
                    attempt + 1,
                    _MAX_RETRIES,
                    backoff,
                )
                time.sleep(backoff)

            except ProviderError:
                raise
            except requests.RequestException as exc:
                last_exc = exc
                if attempt < _MAX_RETRIES - 1:
                    backoff = self._compute_backoff(attempt)
                    logger.warning(
                        "TerraClimate request failed (%s, attempt %d/%d), retrying in %.1fs...",
                        type(exc).__name__,
                        attempt + 1,
                        _MAX_RETRIES,
                        backoff,
                    )
                    time.sleep(backoff)

        if last_exc is not None:
            raise ProviderError(
                what="TerraClimate request failed after retries",
                cause=str(last_exc),
                fix="Check internet connection and try again",
            ) from last_exc

        raise ProviderError(
            what="TerraClimate request failed after retries",
            cause=f"HTTP {last_status} after {_MAX_RETRIES} retries",
            fix=f"Check server status at {self._base_url}",
        )

    @staticmethod
    def _compute_backoff(attempt: int) -> float:
        """Exponential backoff with up to 10% jitter."""
        base_delay: float = min(_INITIAL_BACKOFF * (2**attempt), _MAX_BACKOFF)
        jitter: float = random.uniform(0, base_delay * 0.1)  # noqa: S311
        return float(base_delay + jitter)
