"""Tests for seasonsplit.scanner."""
import pytest

from conftest import touch_all
from seasonsplit.errors import NoEpisodesError, NoMatchError, TitleConflictError
from seasonsplit.matcher import EpisodeMatcher
from seasonsplit.models import SeriesKind
from seasonsplit.scanner import scan_categorized, scan_directory
from seasonsplit.series import CONFIG_FILE


class TestScanDirectory:
    """Tests for scan_directory."""

    def test_collects_episodes(self, series_dir):
        touch_all(series_dir, [
            "[Group] Show - 01.mkv",
            "[Group] Show - 02.mkv",
            "[Group] Show - 03.mkv",
        ])
        result = scan_directory(series_dir, EpisodeMatcher())
        assert result.title == "Show"
        assert result.path == series_dir
        assert sorted(result.episodes) == [1, 2, 3]
        assert result.get(2) == series_dir / "[Group] Show - 02.mkv"

    def test_partial_download_skipped(self, series_dir):
        touch_all(series_dir, [
            "[Group] Show - 01.mkv",
            "[Group] Show - 02.mkv.part",
        ])
        result = scan_directory(series_dir, EpisodeMatcher())
        assert sorted(result.episodes) == [1]

    def test_custom_partial_suffix(self, series_dir):
        touch_all(series_dir, [
            "[Group] Show - 01.mkv",
            "[Group] Show - 02.mkv.crdownload",
        ])
        result = scan_directory(series_dir, EpisodeMatcher(), partial_suffix=".crdownload")
        assert sorted(result.episodes) == [1]

    def test_subdirectories_and_series_config_skipped(self, series_dir):
        touch_all(series_dir, ["[Group] Show - 01.mkv", CONFIG_FILE])
        (series_dir / "Extras").mkdir()
        (series_dir / "Extras" / "Other - 01.mkv").write_bytes(b"")
        result = scan_directory(series_dir, EpisodeMatcher())
        assert sorted(result.episodes) == [1]

    def test_special_episodes_excluded(self, series_dir):
        touch_all(series_dir, ["Show - 01.mkv", "Show - OVA 01.mkv"])
        result = scan_directory(series_dir, EpisodeMatcher())
        assert result.get(1) == series_dir / "Show - 01.mkv"
        assert len(result.episodes) == 1

    def test_title_conflict(self, series_dir):
        touch_all(series_dir, ["[G] Show A - 01.mkv", "[G] Show B - 01.mkv"])
        with pytest.raises(TitleConflictError) as exc_info:
            scan_directory(series_dir, EpisodeMatcher())
        error = exc_info.value
        assert {error.expected, error.found} == {"Show A", "Show B"}
        assert error.path == series_dir

    def test_unparseable_file_fails(self, series_dir):
        touch_all(series_dir, ["[Group] Show - 01.mkv", "readme.txt"])
        with pytest.raises(NoMatchError):
            scan_directory(series_dir, EpisodeMatcher())

    def test_other_hidden_files_fail(self, series_dir):
        touch_all(series_dir, ["[Group] Show - 01.mkv", ".DS_Store"])
        with pytest.raises(NoMatchError) as exc_info:
            scan_directory(series_dir, EpisodeMatcher())
        assert exc_info.value.filename == ".DS_Store"

    def test_empty_directory(self, series_dir):
        with pytest.raises(NoEpisodesError):
            scan_directory(series_dir, EpisodeMatcher())

    def test_only_partial_files(self, series_dir):
        touch_all(series_dir, ["[Group] Show - 01.mkv.part"])
        with pytest.raises(NoEpisodesError):
            scan_directory(series_dir, EpisodeMatcher())

    def test_missing_directory(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            scan_directory(tmp_path / "missing", EpisodeMatcher())

    def test_custom_matcher(self, series_dir):
        touch_all(series_dir, ["[Sub] Show - Ep01.mkv", "[Sub] Show - Ep02.mkv"])
        matcher = EpisodeMatcher(r"\[.+?\] {title} - Ep{episode}\.mkv")
        result = scan_directory(series_dir, matcher)
        assert sorted(result.episodes) == [1, 2]


class TestScanCategorized:
    """Tests for scan_categorized."""

    def test_groups_by_kind(self, series_dir):
        touch_all(series_dir, [
            "Show - 01.mkv",
            "Show - 02.mkv",
            "Show - OVA 01.mkv",
            "Show - Movie 01.mp4",
        ])
        result = scan_categorized(series_dir, EpisodeMatcher())
        assert result.title == "Show"
        assert set(result.kinds()) == {SeriesKind.SEASON, SeriesKind.OVA, SeriesKind.MOVIE}
        assert result.get(SeriesKind.SEASON).numbers() == [1, 2]
        assert result.get(SeriesKind.OVA).numbers() == [1]
        assert result.get(SeriesKind.SPECIAL) is None

    def test_season_only(self, series_dir):
        touch_all(series_dir, ["Show - 01.mkv", "Show - 05.mkv"])
        result = scan_categorized(series_dir, EpisodeMatcher())
        assert len(result) == 1
        assert result.get(SeriesKind.SEASON).highest_number() == 5
