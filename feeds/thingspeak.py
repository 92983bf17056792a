"""HTTP client for the ThingSpeak channel feed."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Optional

import httpx

from models.records import RawFeedRecord
from settings import get_settings

logger = logging.getLogger(__name__)


class FetchError(RuntimeError):
    """Raised when the feed cannot be retrieved or is not a valid feed document."""


class FeedClient:
    """Fetches the channel's current feed window.

    The endpoint is the full channel URL, e.g.
    ``https://api.thingspeak.com/channels/<id>/feeds.json?results=20``.
    A missing endpoint is only reported when a fetch is attempted so the
    service can start without one.
    """

    def __init__(
        self,
        endpoint: Optional[str],
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.endpoint = endpoint
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def fetch(self) -> list[RawFeedRecord]:
        if not self.endpoint:
            raise FetchError("Feed endpoint is not configured.")

        try:
            response = await self._client.get(self.endpoint)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise FetchError(
                f"Feed returned status {exc.response.status_code}."
            ) from exc
        except httpx.HTTPError as exc:
            raise FetchError(f"Feed request failed: {exc!r}") from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise FetchError("Feed response is not valid JSON.") from exc

        feeds = payload.get("feeds") if isinstance(payload, dict) else None
        if not isinstance(feeds, list):
            raise FetchError("Feed response has no 'feeds' list.")

        records = [RawFeedRecord.from_payload(entry) for entry in feeds if isinstance(entry, dict)]
        skipped = len(feeds) - len(records)
        if skipped:
            logger.warning(
                "Ignored %d non-object feed entries",
                skipped,
                extra={"endpoint": self.endpoint},
            )
        return records

    async def aclose(self) -> None:
        await self._client.aclose()


@lru_cache
def build_default_feed_client() -> FeedClient:
    settings = get_settings()
    return FeedClient(endpoint=settings.feed_endpoint, timeout=settings.feed_timeout)
