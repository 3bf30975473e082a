"""Tests for seasonsplit.splitter."""
import os

import pytest

from conftest import touch_all
from seasonsplit.errors import DirectoryCreateError, LinkError
from seasonsplit.models import (
    Episode,
    MergedSeries,
    ResolvedSeries,
    SeriesInfo,
    SeriesKind,
    SortedEpisodes,
    SplitAction,
)
from seasonsplit.splitter import (
    build_split_actions,
    execute,
    format_episode_name,
    plan_summary,
    split_all,
)


def _episodes(*pairs):
    return SortedEpisodes(Episode("Show", number, filename) for number, filename in pairs)


class TestBuildSplitActions:
    """Tests for build_split_actions."""

    def test_offset_renumbering(self):
        info = SeriesInfo(2, "Title", 13)
        episodes = _episodes((13, "ep13.mkv"), (14, "ep14.mkv"))
        actions = build_split_actions(info, episodes, 12)
        assert actions == [
            SplitAction("ep13.mkv", "Title - 01.mkv"),
            SplitAction("ep14.mkv", "Title - 02.mkv"),
        ]

    def test_episodes_outside_window_ignored(self):
        info = SeriesInfo(2, "Title", 2)
        episodes = _episodes((1, "a.mkv"), (3, "c.mkv"), (4, "d.mkv"), (5, "e.mkv"))
        actions = build_split_actions(info, episodes, 2)
        assert [a.old_name for a in actions] == ["c.mkv", "d.mkv"]

    def test_missing_extension(self):
        info = SeriesInfo(2, "Title", 1)
        actions = build_split_actions(info, _episodes((1, "ep01")), 0)
        assert actions == [SplitAction("ep01", "Title - 01")]

    def test_keeps_original_extension(self):
        info = SeriesInfo(2, "Title", 1)
        actions = build_split_actions(info, _episodes((1, "ep.01.mp4")), 0)
        assert actions[0].new_name == "Title - 01.mp4"

    def test_explicit_episode_count(self):
        info = SeriesInfo(2, "Title", 0)
        episodes = _episodes((1, "a.mkv"), (2, "b.mkv"))
        assert build_split_actions(info, episodes, 0) == []
        assert len(build_split_actions(info, episodes, 0, episode_count=2)) == 2

    def test_format_episode_name(self):
        assert format_episode_name("Title", 7, ".mkv") == "Title - 07.mkv"
        assert format_episode_name("Title", 123, ".mkv") == "Title - 123.mkv"
        assert format_episode_name("A/B", 1, "") == "A-B - 01"


@pytest.fixture
def resolved(tmp_path):
    base_dir = touch_all(tmp_path / "Show", ["ep13.mkv", "ep14.mkv"])
    return ResolvedSeries(
        info=SeriesInfo(2, "Title", 13),
        base_dir=base_dir,
        out_dir=tmp_path / "Title",
        actions=[
            SplitAction("ep13.mkv", "Title - 01.mkv"),
            SplitAction("ep14.mkv", "Title - 02.mkv"),
        ],
    )


class TestExecute:
    """Tests for execute."""

    def test_creates_links(self, resolved):
        assert execute(resolved) == 2

        link = resolved.out_dir / "Title - 01.mkv"
        assert link.is_symlink()
        assert os.readlink(link) == str(resolved.base_dir / "ep13.mkv")
        assert sorted(p.name for p in resolved.out_dir.iterdir()) == [
            "Title - 01.mkv",
            "Title - 02.mkv",
        ]

    def test_idempotent(self, resolved):
        execute(resolved)
        assert execute(resolved) == 0
        assert sorted(p.name for p in resolved.out_dir.iterdir()) == [
            "Title - 01.mkv",
            "Title - 02.mkv",
        ]

    def test_no_actions_is_noop(self, resolved):
        resolved.actions = []
        assert execute(resolved) == 0
        assert not resolved.out_dir.exists()

    def test_nested_output_directory(self, resolved, tmp_path):
        resolved.out_dir = tmp_path / "a" / "b" / "Title"
        assert execute(resolved) == 2
        assert (resolved.out_dir / "Title - 02.mkv").is_symlink()

    def test_output_directory_blocked_by_file(self, resolved):
        resolved.out_dir.write_bytes(b"")
        with pytest.raises(DirectoryCreateError) as exc_info:
            execute(resolved)
        assert exc_info.value.path == resolved.out_dir

    def test_link_failure_aborts(self, resolved):
        resolved.actions = [
            SplitAction("ep13.mkv", "missing/Title - 01.mkv"),
            SplitAction("ep14.mkv", "Title - 02.mkv"),
        ]
        with pytest.raises(LinkError) as exc_info:
            execute(resolved)
        assert exc_info.value.source == resolved.base_dir / "ep13.mkv"
        assert str(exc_info.value).startswith("failed to link files:\n  from: ")
        assert not (resolved.out_dir / "Title - 02.mkv").exists()


class TestSplitAll:

    def test_skips_failed_outcomes(self, resolved):
        outcomes = [
            MergedSeries.failed(SeriesKind.MOVIE),
            MergedSeries.resolved(resolved, SeriesKind.SEASON),
        ]
        assert split_all(outcomes) == 2

    def test_stops_at_first_error(self, resolved, tmp_path):
        broken = ResolvedSeries(
            info=SeriesInfo(3, "Broken", 1),
            base_dir=resolved.base_dir,
            out_dir=tmp_path / "Broken",
            actions=[SplitAction("ep13.mkv", "missing/Broken - 01.mkv")],
        )
        outcomes = [
            MergedSeries.resolved(broken, SeriesKind.SEASON),
            MergedSeries.resolved(resolved, SeriesKind.SEASON),
        ]
        with pytest.raises(LinkError):
            split_all(outcomes)
        assert not resolved.out_dir.exists()

    def test_empty(self):
        assert split_all([]) == 0


class TestPlanSummary:

    def test_lines(self, resolved):
        outcomes = [
            MergedSeries.resolved(resolved, SeriesKind.SEASON),
            MergedSeries.failed(SeriesKind.OVA),
        ]
        lines = plan_summary(outcomes)
        assert lines[0] == f"Title (season) -> {resolved.out_dir}"
        assert lines[1:5] == [
            "  ep13.mkv",
            "  -> Title - 01.mkv",
            "  ep14.mkv",
            "  -> Title - 02.mkv",
        ]
        assert lines[5] == "[FAILED] could not fetch ova sequel info"

    def test_no_local_episodes(self, resolved):
        resolved.actions = []
        lines = plan_summary([MergedSeries.resolved(resolved, SeriesKind.SEASON)])
        assert lines[1] == "  (no local episodes)"
