#!/usr/bin/env python3
"""
seasonsplit - split merged season directories

Links the episodes of every season found in a merged series directory
into one directory per season, renamed relative to that season.
"""
import argparse
import logging
import sys
from pathlib import Path

from . import __version__
from .cache import SeriesCache
from .config import SettingsManager
from .errors import MatcherError, SeasonSplitError
from .matcher import EpisodeMatcher
from .models import describe_numbers
from .pipeline import SplitSession, TaskState
from .remote import AniListClient, OfflineRemote
from .scanner import scan_categorized
from .series import SeriesConfig
from .splitter import plan_summary


def configure_logging(verbose: bool, level_name: str) -> None:
    """Route log records to stderr at the requested level."""
    level = logging.DEBUG if verbose else getattr(logging, level_name.upper(), logging.WARNING)
    logging.basicConfig(
        level=level,
        format="  [%(levelname)s] %(message)s",
        stream=sys.stderr,
    )


def print_error(message: str) -> None:
    """Print error message."""
    print(f"[ERROR] {message}")


def confirm_proceed(count: int) -> bool:
    """
    Ask user to confirm proceeding with the split.

    Args:
        count: Number of files to link

    Returns:
        True if user confirms, False otherwise
    """
    while True:
        response = input(f"\nProceed with linking {count} files? (y/n): ").strip().lower()
        if response in ('y', 'yes'):
            return True
        if response in ('n', 'no'):
            return False
        print("Please enter 'y' or 'n'.")


def show_info(path: Path, matcher: EpisodeMatcher, partial_suffix: str) -> int:
    """Print the series title and the episodes found on disk per category."""
    try:
        episodes = scan_categorized(path, matcher, partial_suffix)
    except (SeasonSplitError, OSError) as e:
        print_error(f"failed to parse episodes in {path}: {e}")
        return 1

    print(f"[{episodes.title}]")
    print(f"  path: {path}")
    for kind, local in episodes.items():
        print(f"  {kind.value} episodes on disk: {describe_numbers(local.numbers())}")
    return 0


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all options."""
    parser = argparse.ArgumentParser(
        prog="seasonsplit",
        description="Split a directory of merged seasons into one directory per season.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=r"""
Custom patterns mark the series title and episode number with {title}
and {episode}, for example:
  filename: [SubGroup] Series Name - Ep01.mkv
  pattern:  \[.+?\] {title} - Ep{episode}\.mkv
""",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "path",
        type=Path,
        help="Series directory holding the merged episodes"
    )
    parser.add_argument(
        "--id",
        type=int,
        default=None,
        help="AniList ID of the series the directory starts with (remembered)"
    )
    parser.add_argument(
        "--matcher",
        type=str,
        default=None,
        metavar="PATTERN",
        help="Custom episode pattern using {title} and {episode} (remembered)"
    )
    parser.add_argument(
        "--series-dir",
        type=Path,
        default=None,
        help="Where split-off seasons are created (default: next to PATH)"
    )
    parser.add_argument(
        "--cache-dir",
        type=Path,
        default=None,
        help="Directory for the series cache (default: settings directory)"
    )
    parser.add_argument(
        "--offline",
        action="store_true",
        help="Only use previously cached series information"
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be linked without touching the disk"
    )
    parser.add_argument(
        "--yes", "-y",
        action="store_true",
        help="Don't ask for confirmation before linking"
    )
    parser.add_argument(
        "--info",
        action="store_true",
        help="Show the episodes found on disk and exit"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Show detailed debug information"
    )

    return parser


def main(args: list[str] | None = None) -> int:
    """Main entry point."""
    parsed_args = create_parser().parse_args(args)

    settings = SettingsManager()
    configure_logging(parsed_args.verbose, settings.get("log_level"))

    path: Path = parsed_args.path
    if not path.is_dir():
        print_error(f"Directory does not exist: {path}")
        return 1

    if parsed_args.series_dir:
        settings.set("series_dir", str(parsed_args.series_dir))

    series_config = SeriesConfig.load(path)
    if parsed_args.matcher:
        series_config.pattern = parsed_args.matcher

    try:
        matcher = series_config.matcher()
    except MatcherError as e:
        print_error(str(e))
        return 1

    if parsed_args.info:
        return show_info(path, matcher, settings.get("partial_suffix"))

    series_id = parsed_args.id or series_config.series_id
    if series_id is None:
        print_error("No series ID known for this directory, pass one with --id")
        return 1
    series_config.series_id = series_id

    cache = SeriesCache(parsed_args.cache_dir)
    if parsed_args.offline:
        remote = OfflineRemote(cache)
    else:
        remote = AniListClient(
            cache=cache,
            url=settings.get("anilist_url"),
            timeout=float(settings.get("request_timeout")),
        )

    session = SplitSession(path, remote, series_id, matcher, settings)

    print(f"Resolving sequels of series {series_id} for {path}")
    result = session.start_resolve().wait()
    if result.state is TaskState.FAILED:
        print_error(str(result.error))
        return 1

    outcomes = result.value
    if not parsed_args.dry_run:
        series_config.save()

    if not outcomes:
        print("Nothing to split.")
        return 0

    print()
    for line in plan_summary(outcomes):
        print(line)
    print()

    action_count = sum(len(o.series.actions) for o in outcomes if o.is_resolved)
    failed_count = sum(1 for o in outcomes if not o.is_resolved)

    if parsed_args.dry_run:
        print("-" * 50)
        print(f"Would link: {action_count} files")
        return 0

    if action_count == 0:
        print("-" * 50)
        print("No files to link.")
        return 0

    if not parsed_args.yes and not confirm_proceed(action_count):
        print("Cancelled.")
        return 0

    print("\nLinking files...")
    result = session.start_split(outcomes).wait()
    if result.state is TaskState.FAILED:
        print_error(str(result.error))
        return 1

    print("-" * 50)
    print(
        f"Linked: {result.value} | Already present: {action_count - result.value}"
        f" | Failed lookups: {failed_count}"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
