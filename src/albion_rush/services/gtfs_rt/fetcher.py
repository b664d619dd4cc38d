"""GTFS-RT feed fetcher.

A single bounded-timeout GET per call. Retrying is left to the caller: the
feed cache simply fetches again on the next request after a failure.
"""

from __future__ import annotations

import hashlib
import inspect

import httpx

from albion_rush.logging import get_logger

logger = get_logger(__name__)

DEFAULT_TIMEOUT_SEC = 10.0


class UpstreamError(Exception):
    """Raised when the upstream feed cannot be retrieved.

    ``status_code`` carries the HTTP status for non-2xx responses and is
    ``None`` for transport failures and timeouts.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class GtfsRtFetcher:
    """Fetches GTFS-RT protobuf payloads from a remote URL."""

    def __init__(self, timeout_sec: float = DEFAULT_TIMEOUT_SEC) -> None:
        self.timeout_sec = timeout_sec

    async def fetch(self, url: str) -> bytes:
        """Download a GTFS-RT protobuf payload.

        Args:
            url: Full feed URL.

        Returns:
            Raw protobuf bytes.

        Raises:
            UpstreamError: On a non-2xx status, a transport error or a timeout.
        """
        logger.debug("Fetching GTFS-RT feed", url=url)
        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout_sec),
                follow_redirects=True,
            ) as client:
                response = await client.get(url)
                raise_result = response.raise_for_status()
                if inspect.isawaitable(raise_result):
                    await raise_result
                data = response.content
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            logger.error("TransLink API error", url=url, status_code=status)
            raise UpstreamError(f"TransLink API error: {status}", status_code=status) from exc
        except httpx.TimeoutException as exc:
            logger.error("GTFS-RT fetch timed out", url=url, timeout_sec=self.timeout_sec)
            msg = f"Timed out after {self.timeout_sec}s fetching {url}"
            raise UpstreamError(msg) from exc
        except httpx.RequestError as exc:
            logger.error("GTFS-RT fetch failed", url=url, error=str(exc))
            raise UpstreamError(f"Failed to fetch {url}: {exc}") from exc

        logger.info(
            "GTFS-RT feed downloaded",
            size_bytes=len(data),
            feed_hash=hashlib.sha256(data).hexdigest()[:12],
        )
        return data
