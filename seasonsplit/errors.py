"""Exception types raised by the seasonsplit package."""
from pathlib import Path


class SeasonSplitError(Exception):
    """Base class for every error raised by seasonsplit."""
    pass


# ---------------------------------------------------------------------------
# Pattern errors
# ---------------------------------------------------------------------------

class MatcherError(SeasonSplitError):
    """A custom episode pattern could not be turned into a matcher."""
    pass


class MissingGroupError(MatcherError):
    """A custom pattern lacks one of the required named captures."""

    def __init__(self, group: str):
        self.group = group
        super().__init__(f'missing group "{group}" in episode pattern')


class PatternError(MatcherError):
    """A custom pattern is not a valid regular expression."""

    def __init__(self, pattern: str, reason: str):
        self.pattern = pattern
        super().__init__(f"invalid episode pattern {pattern!r}: {reason}")


# ---------------------------------------------------------------------------
# Parse errors (one file)
# ---------------------------------------------------------------------------

class ParseError(SeasonSplitError):
    """A filename could not be parsed into an episode."""

    def __init__(self, filename: str, message: str):
        self.filename = filename
        super().__init__(message)


class NoMatchError(ParseError):
    def __init__(self, filename: str):
        super().__init__(filename, f"no episode pattern matches {filename!r}")


class NoTitleError(ParseError):
    def __init__(self, filename: str):
        super().__init__(filename, f"no series title captured from {filename!r}")


class EpisodeNotNumericError(ParseError):
    def __init__(self, filename: str, value: str | None):
        self.value = value
        super().__init__(
            filename,
            f"expected an episode number in {filename!r}, got {value!r}",
        )


# ---------------------------------------------------------------------------
# Directory errors
# ---------------------------------------------------------------------------

class ScanError(SeasonSplitError):
    """A directory could not be turned into a consistent episode list."""
    pass


class TitleConflictError(ScanError):
    def __init__(self, expected: str, found: str, path: Path):
        self.expected = expected
        self.found = found
        self.path = path
        super().__init__(
            f"multiple series titles in {path}: "
            f"expected {expected!r}, found {found!r}"
        )


class NoEpisodesError(ScanError):
    def __init__(self, path: Path):
        self.path = path
        super().__init__(f"no episodes found in {path}")


# ---------------------------------------------------------------------------
# Remote errors
# ---------------------------------------------------------------------------

class RemoteError(SeasonSplitError):
    """A remote metadata lookup failed."""

    def __init__(self, message: str, series_id: int | None = None):
        self.series_id = series_id
        super().__init__(message)


# ---------------------------------------------------------------------------
# Filesystem mutation errors
# ---------------------------------------------------------------------------

class SplitError(SeasonSplitError):
    """Splitting a resolved season onto disk failed."""
    pass


class DirectoryCreateError(SplitError):
    def __init__(self, path: Path, reason: OSError):
        self.path = path
        super().__init__(f"failed to create directory {path}: {reason}")


class LinkError(SplitError):
    def __init__(self, source: Path, dest: Path, reason: OSError):
        self.source = source
        self.dest = dest
        super().__init__(
            "failed to link files:\n"
            f"  from: {source}\n"
            f"  to: {dest}\n"
            f"reason: {reason}"
        )


class PipelineBusyError(SeasonSplitError):
    """A background task was started while another one is still running."""
    pass
