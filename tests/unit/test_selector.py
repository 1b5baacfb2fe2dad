from __future__ import annotations

from pathlib import Path

import pytest

from mediaunpack.config import MediaRules
from mediaunpack.core.selector import parse_ordinal, select_media, title_case
from mediaunpack.models import Entry, EntryKind, ReleaseKind, StagedItem

STAGING = Path("/staging/001-rar-release")


def staged(
    relative: str,
    size: int,
    kind: EntryKind = EntryKind.VIDEO,
    *,
    origin_name: str = "release",
) -> StagedItem:
    return StagedItem(
        path=STAGING / relative,
        origin="release",
        relative=Path(relative),
        kind=kind,
        size=size,
        origin_name=origin_name,
    )


@pytest.fixture
def rules() -> MediaRules:
    return MediaRules(min_video_size=100)


class TestMovieSelection:
    def test_largest_video_is_primary_rest_are_extras(self, rules: MediaRules) -> None:
        selection = select_media(
            [staged("movie.mkv", 700), staged("behind.the.scenes.mkv", 150)],
            [],
            ReleaseKind.MOVIE,
            rules,
        )

        assert [item.source.name for item in selection.items] == ["movie.mkv"]
        assert selection.items[0].role == "primary"
        assert selection.items[0].target == Path("movie.mkv")
        assert [entry.reason.split(":")[0] for entry in selection.skipped] == ["extra"]
        assert len(selection.warnings) == 1
        assert selection.warnings[0].kind == "SelectionAmbiguity"

    def test_small_videos_are_samples(self, rules: MediaRules) -> None:
        selection = select_media(
            [staged("movie.mkv", 700), staged("clip.mkv", 50)], [], ReleaseKind.MOVIE, rules
        )

        assert [item.source.name for item in selection.items] == ["movie.mkv"]
        assert selection.skipped[0].path.name == "clip.mkv"
        assert selection.skipped[0].reason.startswith("sample:")
        assert selection.warnings == ()

    def test_sample_pattern(self, rules: MediaRules) -> None:
        selection = select_media(
            [staged("movie.mkv", 700), staged("Sample/movie-sample.mkv", 500)],
            [],
            ReleaseKind.MOVIE,
            rules,
        )

        assert selection.skipped[0].reason == "sample: name matches sample pattern"

    def test_alternate_cut_is_kept(self) -> None:
        rules = MediaRules(min_video_size=100, movie_alternate_pattern=r"directors[ ._-]?cut")
        selection = select_media(
            [staged("movie.mkv", 700), staged("movie.directors.cut.mkv", 650)],
            [],
            ReleaseKind.MOVIE,
            rules,
        )

        assert [(item.source.name, item.role) for item in selection.items] == [
            ("movie.mkv", "primary"),
            ("movie.directors.cut.mkv", "alternate"),
        ]
        assert selection.skipped == ()

    def test_movies_are_flat(self, rules: MediaRules) -> None:
        selection = select_media(
            [staged("Movie.2020/Disc 1/movie.mkv", 700)], [], ReleaseKind.MOVIE, rules
        )
        assert selection.items[0].target == Path("movie.mkv")

    def test_loose_video_is_not_owned(self, rules: MediaRules) -> None:
        loose = Entry(
            path=Path("/release/movie.mkv"),
            relative=Path("movie.mkv"),
            size=900,
            kind=EntryKind.VIDEO,
        )
        selection = select_media([], [loose], ReleaseKind.MOVIE, rules)

        assert selection.items[0].source == loose.path
        assert selection.items[0].owned is False

    def test_empty_selection(self, rules: MediaRules) -> None:
        selection = select_media([], [], ReleaseKind.MOVIE, rules)
        assert selection.items == () and selection.skipped == () and selection.warnings == ()


class TestEpisodeSelection:
    def test_episodes_are_ordered_by_parsed_ordinal(self, rules: MediaRules) -> None:
        selection = select_media(
            [staged("show.e01.mkv", 500), staged("show.e03.mkv", 500), staged("show.e02.mkv", 500)],
            [],
            ReleaseKind.EPISODE,
            rules,
        )

        assert [item.ordinal for item in selection.items] == [1, 2, 3]
        assert [item.source.name for item in selection.items] == [
            "show.e01.mkv",
            "show.e02.mkv",
            "show.e03.mkv",
        ]
        assert not any(item.unordered for item in selection.items)

    def test_seasons_sort_before_episodes(self, rules: MediaRules) -> None:
        selection = select_media(
            [staged("show.s02e01.mkv", 500), staged("show.s01e10.mkv", 500)],
            [],
            ReleaseKind.EPISODE,
            rules,
        )

        assert [(item.season, item.ordinal) for item in selection.items] == [(1, 10), (2, 1)]

    def test_unparsed_episode_is_kept_and_flagged(self, rules: MediaRules) -> None:
        selection = select_media(
            [staged("bonus.mkv", 500), staged("show.s01e02.mkv", 500)],
            [],
            ReleaseKind.EPISODE,
            rules,
        )

        assert [item.source.name for item in selection.items] == ["show.s01e02.mkv", "bonus.mkv"]
        bonus = selection.items[1]
        assert bonus.unordered is True
        assert bonus.ordinal == 1
        assert [warning.subject for warning in selection.warnings] == ["bonus.mkv"]

    def test_season_directories_are_preserved(self, rules: MediaRules) -> None:
        selection = select_media(
            [staged("Show.S01.1080p/Season 01/show.s01e01.mkv", 500)],
            [],
            ReleaseKind.EPISODE,
            rules,
        )
        assert selection.items[0].target == Path("Season 01/show.s01e01.mkv")

    def test_sidecars_follow_policy(self, rules: MediaRules) -> None:
        items = [staged("show.s01e01.mkv", 500), staged("show.s01e01.srt", 5, EntryKind.SIDECAR)]

        dropped = select_media(items, [], ReleaseKind.EPISODE, rules)
        kept = select_media(
            items,
            [],
            ReleaseKind.EPISODE,
            MediaRules(min_video_size=100, keep_sidecars=True),
        )

        assert dropped.skipped[0].reason.startswith("sidecar:")
        assert [item.role for item in kept.items] == ["primary", "sidecar"]

    def test_junk_is_skipped(self, rules: MediaRules) -> None:
        selection = select_media(
            [staged("show.s01e01.mkv", 500), staged("setup.exe", 5, EntryKind.UNKNOWN)],
            [],
            ReleaseKind.EPISODE,
            rules,
        )
        assert selection.skipped[0].reason.startswith("junk:")


class TestRename:
    def test_episode_rename(self) -> None:
        rules = MediaRules(min_video_size=100, rename=True)
        selection = select_media(
            [staged("the.office.s02e05.720p.hdtv.MKV", 500)], [], ReleaseKind.EPISODE, rules
        )
        assert selection.items[0].target == Path("The Office - S02E05.mkv")

    def test_movie_rename_uses_archive_name(self) -> None:
        rules = MediaRules(min_video_size=100, rename=True)
        selection = select_media(
            [staged("abc-xyz.mkv", 900, origin_name="the.lord.of.the.rings.2001.1080p")],
            [],
            ReleaseKind.MOVIE,
            rules,
        )
        assert selection.items[0].target == Path("The Lord of the Rings (2001).mkv")

    def test_unparseable_name_is_kept(self) -> None:
        rules = MediaRules(min_video_size=100, rename=True)
        selection = select_media(
            [staged("feature.mkv", 900, origin_name="feature")], [], ReleaseKind.MOVIE, rules
        )
        assert selection.items[0].target == Path("feature.mkv")


def test_parse_ordinal_grammar() -> None:
    patterns = MediaRules().ordinal_regexes()
    assert parse_ordinal("Show.S01E02.mkv", patterns) == (1, 2)
    assert parse_ordinal("show.3x04.mkv", patterns) == (3, 4)
    assert parse_ordinal("Show - Episode 12.mkv", patterns) == (None, 12)
    assert parse_ordinal("movie.part2.mkv", patterns) == (None, 2)
    assert parse_ordinal("movie.2020.1080p.mkv", patterns) == (None, None)


def test_title_case() -> None:
    assert title_case("the.lord.of.the.rings") == "The Lord of the Rings"
    assert title_case("Breaking_Bad") == "Breaking Bad"
    assert title_case("CSI.NY") == "CSI NY"
