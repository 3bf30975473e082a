"""Remote series metadata services.

Callers only ever hold a ``RemoteService``; the live AniList client and
the offline variant are interchangeable.
"""
from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from typing import Any

import requests

from .cache import SeriesCache
from .errors import RemoteError
from .models import SequelRef, SeriesInfo, SeriesKind

log = logging.getLogger(__name__)

ANILIST_URL = "https://graphql.anilist.co"
DEFAULT_TIMEOUT = 10
RATE_LIMIT_DELAY = 0.25  # 250ms between requests

MEDIA_QUERY = """
query ($id: Int) {
  Media(id: $id, type: ANIME) {
    id
    title { userPreferred romaji english }
    episodes
    duration
    relations {
      edges {
        relationType
        node { id type format }
      }
    }
  }
}
"""

# AniList media formats -> sequel kinds (MUSIC and manga formats are ignored)
FORMAT_KINDS = {
    "TV": SeriesKind.SEASON,
    "TV_SHORT": SeriesKind.SEASON,
    "MOVIE": SeriesKind.MOVIE,
    "SPECIAL": SeriesKind.SPECIAL,
    "OVA": SeriesKind.OVA,
    "ONA": SeriesKind.ONA,
}


class RemoteService(ABC):
    """Read-only access to remote series metadata."""

    is_offline = False

    @abstractmethod
    def lookup_by_id(self, series_id: int) -> SeriesInfo:
        """
        Fetch metadata for one series.

        Raises:
            RemoteError: The series could not be fetched.
        """

    def direct_sequel(self, info: SeriesInfo) -> SequelRef | None:
        """Return the next-season sequel of *info*, if it has one."""
        return info.direct_sequel()


def parse_media(media: dict[str, Any]) -> SeriesInfo:
    """Build a SeriesInfo from an AniList ``Media`` object."""
    titles = media.get("title") or {}
    title = (
        titles.get("userPreferred")
        or titles.get("romaji")
        or titles.get("english")
        or ""
    )

    sequels: dict[SeriesKind, SequelRef] = {}
    edges = (media.get("relations") or {}).get("edges") or []
    for edge in edges:
        if edge.get("relationType") != "SEQUEL":
            continue
        node = edge.get("node") or {}
        if node.get("type", "ANIME") != "ANIME":
            continue
        kind = FORMAT_KINDS.get(node.get("format") or "")
        if kind is None or "id" not in node:
            continue
        # First sequel of each kind wins
        sequels.setdefault(kind, SequelRef(id=node["id"], kind=kind))

    return SeriesInfo(
        id=media["id"],
        title=title,
        romaji=titles.get("romaji") or "",
        episodes=media.get("episodes") or 0,
        episode_length=media.get("duration") or 0,
        sequels=sequels,
    )


class AniListClient(RemoteService):
    """Client for the AniList GraphQL API."""

    def __init__(
        self,
        cache: SeriesCache | None = None,
        url: str = ANILIST_URL,
        timeout: float = DEFAULT_TIMEOUT,
        rate_limit_delay: float = RATE_LIMIT_DELAY,
    ):
        """
        Initialize the AniList client.

        Args:
            cache: Cache receiving every successful lookup. Nothing is
                   cached when *None*.
            url: GraphQL endpoint.
            timeout: Per-request timeout in seconds.
            rate_limit_delay: Minimum spacing between requests in seconds.
        """
        self.cache = cache
        self.url = url
        self.timeout = timeout
        self.rate_limit_delay = rate_limit_delay
        self._last_request_time = 0.0

    def _rate_limit(self) -> None:
        """Apply rate limiting between requests."""
        elapsed = time.monotonic() - self._last_request_time
        if elapsed < self.rate_limit_delay:
            time.sleep(self.rate_limit_delay - elapsed)
        self._last_request_time = time.monotonic()

    def _request(
        self,
        query: str,
        variables: dict[str, Any],
        retries: int = 3
    ) -> dict | None:
        """
        Run a GraphQL query.

        Args:
            query: GraphQL query text
            variables: Query variables
            retries: Number of attempts on timeouts and connection errors

        Returns:
            The ``data`` object of the response or None on error
        """
        self._rate_limit()
        log.debug("POST %s variables=%s", self.url, variables)

        for attempt in range(retries):
            try:
                response = requests.post(
                    self.url,
                    json={"query": query, "variables": variables},
                    headers={"Accept": "application/json"},
                    timeout=self.timeout,
                )

                log.debug("Response status: %s", response.status_code)

                if response.status_code == 429:  # Rate limited
                    retry_after = int(response.headers.get("Retry-After", 1))
                    log.warning("Rate limited, waiting %ss", retry_after)
                    time.sleep(retry_after)
                    continue

                if response.status_code == 404:
                    log.debug("Not found: %s", variables)
                    return None

                response.raise_for_status()
                payload = response.json()
                if payload.get("errors"):
                    log.warning("AniList returned errors: %s", payload["errors"])
                    return None
                return payload.get("data")

            except requests.exceptions.Timeout:
                log.warning("Timeout (attempt %d/%d)", attempt + 1, retries)
                if attempt < retries - 1:
                    time.sleep(1)
                    continue
                return None
            except requests.exceptions.RequestException as e:
                log.warning("Request error: %s (attempt %d/%d)", e, attempt + 1, retries)
                if attempt < retries - 1:
                    time.sleep(1)
                    continue
                return None
            except ValueError as e:
                log.warning("Malformed response from AniList: %s", e)
                return None

        return None

    def lookup_by_id(self, series_id: int) -> SeriesInfo:
        data = self._request(MEDIA_QUERY, {"id": series_id})
        media = (data or {}).get("Media")
        if not media:
            raise RemoteError(f"failed to fetch series {series_id} from AniList", series_id)

        info = parse_media(media)
        log.debug(
            "Fetched %d '%s': %d episode(s), sequels=%s",
            info.id, info.title, info.episodes,
            sorted(kind.value for kind in info.sequels),
        )

        if self.cache is not None:
            self.cache.set_series(info)

        return info


class OfflineRemote(RemoteService):
    """Remote stand-in that only serves previously cached metadata."""

    is_offline = True

    def __init__(self, cache: SeriesCache | None = None):
        self.cache = cache

    def lookup_by_id(self, series_id: int) -> SeriesInfo:
        info = self.cache.get_series(series_id) if self.cache is not None else None
        if info is None:
            raise RemoteError(f"series {series_id} is not available offline", series_id)
        return info
