"""Split planning and execution.

A merged directory holds several seasons under one flat numbering.  For
each resolved sequel this module computes which local files belong to
it, what they should be called relative to that season, and links them
into the sequel's own directory.
"""
from __future__ import annotations

import logging
from pathlib import Path, PurePath

from .errors import DirectoryCreateError, LinkError
from .models import MergedSeries, ResolvedSeries, SeriesInfo, SortedEpisodes, SplitAction

log = logging.getLogger(__name__)


def path_safe(title: str) -> str:
    """Make a series title usable as a single path component."""
    return title.replace("/", "-").replace("\0", "")


def format_episode_name(title: str, number: int, extension: str) -> str:
    """``"<title> - <NN><ext>"`` with NN zero-padded to two digits."""
    return f"{path_safe(title)} - {number:02d}{extension}"


def build_split_actions(
    info: SeriesInfo,
    episodes: SortedEpisodes,
    offset: int,
    episode_count: int | None = None,
) -> list[SplitAction]:
    """
    Compute the rename pairs for one split-off season.

    Args:
        info: Remote metadata of the season being split out
        episodes: Local episodes of the merged directory
        offset: Number of episodes that belong to earlier seasons
        episode_count: Length of the season; defaults to ``info.episodes``

    Returns:
        One SplitAction per local episode in ``offset+1 .. offset+count``,
        ordered by episode number.  Numbers missing locally are skipped.
    """
    if episode_count is None:
        episode_count = info.episodes

    actions = []

    for real_number in range(offset + 1, offset + episode_count + 1):
        episode = episodes.find(real_number)
        if episode is None:
            continue

        extension = PurePath(episode.filename).suffix
        new_name = format_episode_name(info.title, real_number - offset, extension)
        actions.append(SplitAction(old_name=episode.filename, new_name=new_name))

    return actions


def _ensure_dir(path: Path) -> None:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise DirectoryCreateError(path, e) from e


def execute(resolved: ResolvedSeries) -> int:
    """
    Link every planned file of *resolved* into its output directory.

    Links that already exist count as done, so running the same split
    twice is safe.  The first other failure aborts the remaining
    actions; nothing already linked is rolled back.

    Returns:
        Number of links created by this run

    Raises:
        DirectoryCreateError: The base or output directory could not be created.
        LinkError: A link could not be created.
    """
    if not resolved.actions:
        return 0

    base_dir = Path(resolved.base_dir).absolute()
    out_dir = Path(resolved.out_dir).absolute()

    _ensure_dir(base_dir)
    _ensure_dir(out_dir)

    created = 0
    for action in resolved.actions:
        source = base_dir / action.old_name
        dest = out_dir / action.new_name

        try:
            dest.symlink_to(source)
        except FileExistsError:
            log.debug("Link already exists: %s", dest)
            continue
        except OSError as e:
            raise LinkError(source, dest, e) from e

        log.info("Linked %s -> %s", source.name, dest)
        created += 1

    return created


def split_all(outcomes: list[MergedSeries]) -> int:
    """
    Execute every resolved outcome in order, skipping failed lookups.

    Stops at the first error; later seasons are not attempted.

    Returns:
        Total number of links created
    """
    created = 0
    for outcome in outcomes:
        if not outcome.is_resolved:
            continue
        created += execute(outcome.series)
    return created


def plan_summary(outcomes: list[MergedSeries]) -> list[str]:
    """Human-readable preview of what ``split_all`` would do."""
    lines: list[str] = []
    for outcome in outcomes:
        if not outcome.is_resolved:
            lines.append(f"[FAILED] could not fetch {outcome.kind.value} sequel info")
            continue

        series = outcome.series
        lines.append(f"{series.info.title} ({outcome.kind.value}) -> {series.out_dir}")
        if not series.actions:
            lines.append("  (no local episodes)")
        for action in series.actions:
            lines.append(f"  {action.old_name}")
            lines.append(f"  -> {action.new_name}")
    return lines
