"""Ledger height sources used to timestamp loans and test for default."""
import time
from abc import ABC, abstractmethod
from typing import Optional

import httpx

from credit_engine.config import settings
from credit_engine.logging import get_logger

logger = get_logger(__name__)


class HeightSourceError(Exception):
    """Raised when the external height service cannot be read."""
    def __init__(self, status_code: int, detail: str):
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"Height source error {status_code}: {detail}")


class HeightSource(ABC):
    """A monotonic, read-only ledger height."""

    @abstractmethod
    async def current_height(self) -> int:
        """Return the current height. Must never decrease."""


class ManualHeightSource(HeightSource):
    """In-process counter advanced explicitly. Used for tests and embedding."""

    def __init__(self, height: int = 0):
        self.height = height

    def advance(self, blocks: int = 1) -> int:
        if blocks < 0:
            raise ValueError("height can only move forward")
        self.height += blocks
        return self.height

    async def current_height(self) -> int:
        return self.height


class ClockHeightSource(HeightSource):
    """Derives height from wall-clock time in fixed block intervals."""

    def __init__(self, block_interval_seconds: Optional[float] = None):
        self.block_interval_seconds = block_interval_seconds or settings.block_interval_seconds
        self._last = 0

    async def current_height(self) -> int:
        height = int(time.time() // self.block_interval_seconds)
        # Never report a lower height if the clock steps backwards
        self._last = max(self._last, height)
        return self._last


class HttpHeightSource(HeightSource):
    """Client for an external height service exposing GET /height."""

    def __init__(self, base_url: Optional[str] = None):
        """
        Initialize the height client.

        Args:
            base_url: Base URL of the height service. Defaults to settings.height_api_base.
        """
        self.base_url = base_url or settings.height_api_base

    async def current_height(self) -> int:
        """
        Fetch the current ledger height.

        Returns:
            The height as an unsigned integer

        Raises:
            HeightSourceError: If the service fails or returns a malformed body
        """
        url = f"{self.base_url}/height"
        start_time = time.perf_counter()

        async with httpx.AsyncClient(timeout=10.0) as client:
            try:
                response = await client.get(url)
                response.raise_for_status()
                height = response.json()["height"]
            except httpx.HTTPStatusError as e:
                logger.error(
                    "height_api_http_error",
                    status_code=e.response.status_code,
                    error=str(e),
                )
                raise HeightSourceError(e.response.status_code, str(e))
            except httpx.RequestError as e:
                logger.error("height_api_request_error", url=url, error=str(e))
                raise HeightSourceError(502, f"Request failed: {e}")
            except (KeyError, ValueError) as e:
                logger.error("height_api_malformed_response", url=url, error=str(e))
                raise HeightSourceError(502, f"Malformed height response: {e}")

        # bool is an int subclass; a JSON true must not read as height 1
        if not isinstance(height, int) or isinstance(height, bool) or height < 0:
            raise HeightSourceError(502, f"Invalid height: {height!r}")

        logger.debug(
            "height_api_request_completed",
            height=height,
            duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
        )
        return height


def build_height_source(kind: Optional[str] = None) -> HeightSource:
    """Create the height source named in configuration."""
    kind = kind or settings.height_source
    if kind == "http":
        return HttpHeightSource()
    if kind == "clock":
        return ClockHeightSource()
    if kind == "manual":
        return ManualHeightSource()
    raise ValueError(f"Unknown height source: {kind}")
