"""Episode pattern matching.

Turns a single video filename into an Episode (series title, episode
number and category).  The built-in pattern handles the common fansub
layouts:

- ``[Group] Series Name - 01.mkv``
- ``[Group]_Series_Name_-_01_[tag1][tag2].mkv``
- ``[Group].Series.Name.-.01.[tag1][tag2].mkv``
- ``Series Name - 01 (1080p).mkv``
- ``Series Name - OVA 01.mkv``

Custom patterns are regular expressions where the series title and the
episode number are marked with ``{title}`` and ``{episode}``, e.g.
``\\[.+?\\] {title} - Ep{episode}.mkv``.  ``{kind}`` may be used to capture
a category marker (OVA, Special, Movie...).
"""
from __future__ import annotations

import logging
import re

from .errors import (
    EpisodeNotNumericError,
    MissingGroupError,
    NoMatchError,
    NoTitleError,
    PatternError,
)
from .models import Episode, SeriesKind

log = logging.getLogger(__name__)


VIDEO_EXTENSIONS = (
    'mkv', 'mp4', 'avi', 'mov', 'wmv', 'flv', 'webm',
    'm4v', 'mpg', 'mpeg', 'm2ts', 'ts', 'vob', 'ogm',
)

# Category markers that may sit between the dash and the episode number
KIND_MARKERS = r'OVA|ONA|OAD|SP|Specials?|Movie'

TITLE_PLACEHOLDER = "{title}"
EPISODE_PLACEHOLDER = "{episode}"
KIND_PLACEHOLDER = "{kind}"

TITLE_GROUP = r'(?P<title>.+?)'
EPISODE_GROUP = r'(?P<episode>\d+)'
KIND_GROUP = rf'(?P<kind>{KIND_MARKERS})?'

DEFAULT_PATTERN = (
    # Optional [Group] prefix
    r'^(?:\[[^\]]*\][\s_.]*)?'
    + TITLE_GROUP +
    # Dash separator, padded with spaces, underscores or dots
    r'[\s_.]*-[\s_.]*'
    rf'(?:(?P<kind>{KIND_MARKERS})[\s_.]*)?'
    + EPISODE_GROUP +
    # Revision suffix (01v2)
    r'(?:v\d+)?'
    # Trailing [tag] / (tag) groups
    r'(?:[\s_.]*(?:\[[^\]]*\]|\([^)]*\)))*'
    r'[\s_]*\.(?:' + '|'.join(VIDEO_EXTENSIONS) + r')$'
)

_DEFAULT_REGEX = re.compile(DEFAULT_PATTERN, re.IGNORECASE)


def normalize_title(raw: str) -> str:
    """
    Replace word separators with spaces and trim surrounding separators.

    Dots only count as separators in names without spaces, so
    ``Series.Name`` becomes ``Series Name`` while ``Dr. Stone`` is kept.
    """
    title = raw.replace('_', ' ')
    if ' ' not in title.strip():
        title = title.replace('.', ' ')
    title = re.sub(r'\s+', ' ', title)
    return title.strip(' -')


def expand_placeholders(pattern: str) -> str:
    """Substitute the ``{title}``/``{episode}``/``{kind}`` placeholders."""
    return (
        pattern
        .replace(TITLE_PLACEHOLDER, TITLE_GROUP)
        .replace(EPISODE_PLACEHOLDER, EPISODE_GROUP)
        .replace(KIND_PLACEHOLDER, KIND_GROUP)
    )


class EpisodeMatcher:
    """Compiled, validated pattern that extracts episodes from filenames."""

    def __init__(self, pattern: str | None = None):
        """
        Create a matcher.

        Args:
            pattern: Custom pattern (placeholders allowed). When *None*
                     the built-in default pattern is used.

        Raises:
            MissingGroupError: If the pattern has no title or episode capture.
            PatternError: If the pattern is not a valid regular expression.
        """
        self._source = pattern
        if pattern is None:
            self._regex = _DEFAULT_REGEX
            return

        expanded = expand_placeholders(pattern)

        # Checked before compiling so the user is told which group is missing
        if "(?P<title>" not in expanded:
            raise MissingGroupError("title")
        if "(?P<episode>" not in expanded:
            raise MissingGroupError("episode")

        try:
            self._regex = re.compile(expanded)
        except re.error as e:
            raise PatternError(pattern, str(e)) from e

    @classmethod
    def from_pattern(cls, pattern: str) -> EpisodeMatcher:
        return cls(pattern)

    @property
    def pattern(self) -> str | None:
        """The custom pattern as given by the user, *None* for the default."""
        return self._source

    @property
    def is_default(self) -> bool:
        return self._source is None

    @property
    def regex(self) -> re.Pattern:
        return self._regex

    def parse(self, filename: str) -> Episode:
        """
        Extract an episode from a filename.

        Args:
            filename: Bare file name (no directory part)

        Returns:
            The parsed Episode

        Raises:
            NoMatchError: The pattern does not match the filename.
            NoTitleError: No (non-blank) title was captured.
            EpisodeNotNumericError: The episode capture is not a number.
        """
        match = self._regex.search(filename)
        if not match:
            raise NoMatchError(filename)

        groups = match.groupdict()

        raw_title = groups.get("title")
        title = normalize_title(raw_title) if raw_title else ""
        if not title:
            raise NoTitleError(filename)

        raw_episode = groups.get("episode")
        try:
            number = int(raw_episode)
        except (TypeError, ValueError):
            raise EpisodeNotNumericError(filename, raw_episode) from None
        if number < 0:
            raise EpisodeNotNumericError(filename, raw_episode)

        kind = SeriesKind.SEASON
        marker = groups.get("kind")
        if marker:
            kind = SeriesKind.parse(marker) or SeriesKind.SEASON

        return Episode(title=title, number=number, filename=filename, kind=kind)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, EpisodeMatcher):
            return NotImplemented
        return self._source == other._source

    def __hash__(self) -> int:
        return hash(self._source)

    def __repr__(self) -> str:
        if self._source is None:
            return "EpisodeMatcher(<default>)"
        return f"EpisodeMatcher({self._source!r})"
