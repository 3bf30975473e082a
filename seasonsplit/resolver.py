"""Season resolution.

Matches the categories found in a local series directory against the
sequels the remote service knows about.  Seasons need extra work: a
single directory numbered 1..N may hold several seasons merged
together, so the chain of next-season sequels is walked, each season
claiming the next ``episodes`` numbers, until the local episodes run out.

Every remote call made here is spaced by ``request_delay`` seconds.
This module blocks while waiting; run it off any interactive thread
(see ``seasonsplit.pipeline``).
"""
from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Callable

from .errors import RemoteError
from .models import (
    CategorizedEpisodes,
    MergedSeries,
    ResolvedSeries,
    SeriesInfo,
    SeriesKind,
    SortedEpisodes,
)
from .remote import RemoteService
from .splitter import build_split_actions, path_safe

log = logging.getLogger(__name__)

REQUEST_DELAY = 0.25  # seconds between consecutive remote lookups


class RequestSpacer:
    """Enforce a minimum delay between consecutive remote calls.

    The first call never waits, and time spent on local work between
    calls counts towards the delay.
    """

    def __init__(
        self,
        delay: float = REQUEST_DELAY,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.delay = delay
        self._clock = clock
        self._sleep = sleep
        self._last_call: float | None = None

    def wait(self) -> None:
        if self._last_call is not None:
            elapsed = self._clock() - self._last_call
            if elapsed < self.delay:
                self._sleep(self.delay - elapsed)
        self._last_call = self._clock()


class SeasonResolver:
    """Resolves the sequels of one base series against local episodes."""

    def __init__(
        self,
        remote: RemoteService,
        base_dir: Path,
        series_dir: Path | None = None,
        request_delay: float = REQUEST_DELAY,
        spacer: RequestSpacer | None = None,
    ):
        """
        Args:
            remote: Metadata service used for every lookup.
            base_dir: The merged directory holding the local episodes.
            series_dir: Parent directory of split-off seasons. Defaults
                        to the parent of *base_dir*.
            request_delay: Minimum spacing between remote lookups.
            spacer: Pre-built spacer (overrides *request_delay*).
        """
        self.remote = remote
        self.base_dir = Path(base_dir)
        self.series_dir = Path(series_dir) if series_dir else self.base_dir.absolute().parent
        self._spacer = spacer or RequestSpacer(request_delay)

    # -- Public API ------------------------------------------------

    def resolve(
        self,
        episodes: CategorizedEpisodes,
        base_id: int,
    ) -> list[MergedSeries]:
        """
        Resolve every local category that has a matching remote sequel.

        Args:
            episodes: Categorized local episodes of ``base_dir``
            base_id: Remote ID of the series the directory was added as

        Returns:
            One outcome per sequel examined; empty when the base series
            has no sequels.

        Raises:
            RemoteError: The base series itself could not be fetched.
        """
        base_info = self._lookup(base_id)

        if not base_info.sequels:
            log.info("'%s' has no sequels, nothing to split", base_info.title)
            return []

        results: list[MergedSeries] = []

        for kind, local in episodes.items():
            sequel = base_info.sequel_by_kind(kind)
            if sequel is None:
                log.debug("No %s sequel for '%s'", kind.value, base_info.title)
                continue

            # Seasons need special handling as several can be merged together
            if sequel.kind is SeriesKind.SEASON:
                self._resolve_merged_season(base_info, local, results)
                continue

            try:
                info = self._lookup(sequel.id)
            except RemoteError as e:
                log.warning("Could not fetch %s sequel %d: %s", kind.value, sequel.id, e)
                results.append(MergedSeries.failed(sequel.kind))
                continue

            # The whole local range is split out, even past the remote count
            count = max(info.episodes, local.highest_number())
            resolved = self.build_resolved(info, local, 0, episode_count=count)
            results.append(MergedSeries.resolved(resolved, sequel.kind))

        return results

    def build_resolved(
        self,
        info: SeriesInfo,
        episodes: SortedEpisodes,
        offset: int,
        episode_count: int | None = None,
    ) -> ResolvedSeries:
        """Plan the split of one sequel starting after *offset* local episodes."""
        actions = build_split_actions(info, episodes, offset, episode_count)
        out_dir = self.series_dir / path_safe(info.title)

        log.info(
            "Resolved '%s': offset %d, %d local episode(s) -> %s",
            info.title, offset, len(actions), out_dir,
        )

        return ResolvedSeries(
            info=info,
            base_dir=self.base_dir,
            out_dir=out_dir,
            actions=actions,
        )

    # -- Internal helpers ------------------------------------------

    def _lookup(self, series_id: int) -> SeriesInfo:
        self._spacer.wait()
        return self.remote.lookup_by_id(series_id)

    def _resolve_merged_season(
        self,
        base_info: SeriesInfo,
        episodes: SortedEpisodes,
        results: list[MergedSeries],
    ) -> None:
        highest = episodes.highest_number()
        offset = base_info.episodes

        # Not enough local episodes to reach into any sequel
        if offset > highest:
            log.debug(
                "Highest local episode %d is within '%s' (%d episodes)",
                highest, base_info.title, base_info.episodes,
            )
            return

        info = base_info

        while True:
            sequel = self.remote.direct_sequel(info)
            if sequel is None:
                break

            try:
                info = self._lookup(sequel.id)
            except RemoteError as e:
                # Without this season's length the next offset is unknown
                log.warning("Could not fetch season sequel %d: %s", sequel.id, e)
                results.append(MergedSeries.failed(sequel.kind))
                break

            if info.episodes <= 0:
                log.warning(
                    "'%s' has no known episode count, cannot split past it", info.title
                )
                results.append(MergedSeries.failed(sequel.kind))
                break

            resolved = self.build_resolved(info, episodes, offset)
            results.append(MergedSeries.resolved(resolved, sequel.kind))

            offset += info.episodes
            if offset > highest:
                break


def resolve(
    episodes: CategorizedEpisodes,
    remote: RemoteService,
    base_id: int,
    series_dir: Path | None = None,
    request_delay: float = REQUEST_DELAY,
) -> list[MergedSeries]:
    """Resolve the sequels of *base_id* for the directory *episodes* came from."""
    resolver = SeasonResolver(
        remote,
        episodes.path,
        series_dir=series_dir,
        request_delay=request_delay,
    )
    return resolver.resolve(episodes, base_id)
