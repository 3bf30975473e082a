"""Local episode discovery.

Scans a single series directory (direct children only) and turns every
video file into an Episode.  All files must belong to the same series:
a directory holding two different titles is rejected rather than
guessed at.
"""
from __future__ import annotations

import logging
from pathlib import Path

from .errors import NoEpisodesError, TitleConflictError
from .matcher import EpisodeMatcher
from .models import (
    CategorizedEpisodes,
    Episode,
    EpisodeDirectory,
    SeriesKind,
    SortedEpisodes,
)
from .series import CONFIG_FILE

log = logging.getLogger(__name__)

# Suffix used by browsers and download clients for unfinished files
PARTIAL_SUFFIX = ".part"


def parse_entries(
    path: Path,
    matcher: EpisodeMatcher,
    partial_suffix: str = PARTIAL_SUFFIX,
) -> tuple[str, list[tuple[Episode, Path]]]:
    """
    Parse every episode file directly inside *path*.

    Args:
        path: Series directory
        matcher: Matcher applied to each file name
        partial_suffix: Files ending with this suffix are skipped, as is
                        the directory's own series config file

    Returns:
        (title, [(episode, file_path), ...]) in directory order

    Raises:
        OSError: The directory cannot be read.
        ParseError: A file name could not be parsed.
        TitleConflictError: Two files parsed to different titles.
        NoEpisodesError: No episode files were found.
    """
    title: str | None = None
    parsed: list[tuple[Episode, Path]] = []

    for entry in Path(path).iterdir():
        if entry.is_dir():
            log.debug("Skipping subdirectory %s", entry.name)
            continue

        if entry.name == CONFIG_FILE:
            log.debug("Skipping series config %s", entry.name)
            continue

        if partial_suffix and entry.name.endswith(partial_suffix):
            log.debug("Skipping partial download %s", entry.name)
            continue

        episode = matcher.parse(entry.name)

        if title is None:
            title = episode.title
        elif episode.title != title:
            raise TitleConflictError(title, episode.title, Path(path))

        parsed.append((episode, entry))

    if title is None:
        raise NoEpisodesError(Path(path))

    log.debug("Parsed %d episode file(s) for '%s' in %s", len(parsed), title, path)
    return title, parsed


def scan_directory(
    path: Path,
    matcher: EpisodeMatcher,
    partial_suffix: str = PARTIAL_SUFFIX,
) -> EpisodeDirectory:
    """
    Scan a directory into an episode-number -> path mapping.

    Only main-run (season) episodes are included; use
    ``scan_categorized`` to see specials, movies, etc.  When two files
    share an episode number, the later directory entry wins.
    """
    title, parsed = parse_entries(path, matcher, partial_suffix)

    episodes: dict[int, Path] = {}
    for episode, file_path in parsed:
        if episode.kind is not SeriesKind.SEASON:
            continue
        if episode.number in episodes:
            log.debug(
                "Episode %d appears twice, using %s", episode.number, file_path.name
            )
        episodes[episode.number] = file_path

    return EpisodeDirectory(title=title, path=Path(path), episodes=episodes)


def scan_categorized(
    path: Path,
    matcher: EpisodeMatcher,
    partial_suffix: str = PARTIAL_SUFFIX,
) -> CategorizedEpisodes:
    """Scan a directory and group its episodes by category tag."""
    title, parsed = parse_entries(path, matcher, partial_suffix)

    grouped: dict[SeriesKind, list[Episode]] = {}
    for episode, _file_path in parsed:
        grouped.setdefault(episode.kind, []).append(episode)

    categories = {
        kind: SortedEpisodes(episodes) for kind, episodes in grouped.items()
    }
    return CategorizedEpisodes(title=title, path=Path(path), categories=categories)
