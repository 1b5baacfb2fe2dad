from __future__ import annotations

import struct
from pathlib import Path

import pytest

from mediaunpack.config import ExtractionLimits, MediaRules
from mediaunpack.extraction import FormatRegistry, build_archive_groups, entry_kind_for, group_entries
from mediaunpack.models import Entry, EntryKind


def volume(name: str, directory: str = "", size: int = 100, root: Path = Path("/release")) -> Entry:
    relative = Path(directory) / name if directory else Path(name)
    return Entry(path=root / relative, relative=relative, size=size, kind=EntryKind.ARCHIVE_VOLUME)


def write_zip_end_marker(path: Path, disk_number: int) -> Path:
    """Final volume of a split zip whose end of central directory names ``disk_number``."""
    path.write_bytes(
        b"\x00" * 64 + struct.pack("<4sHHHHIIH", b"PK\x05\x06", disk_number, 0, 0, 0, 0, 0, 0)
    )
    return path


@pytest.fixture
def registry() -> FormatRegistry:
    return FormatRegistry.from_limits(ExtractionLimits(probe_volume_count=False))


class TestEntryKind:
    def test_archive_volumes_are_detected(self, registry: FormatRegistry) -> None:
        rules = MediaRules()
        for name in (
            "show.part01.rar",
            "show.rar",
            "show.r00",
            "movie.z01",
            "movie.zip",
            "movie.7z",
            "movie.tar.gz",
            "movie.7z.001",
        ):
            kind, note = entry_kind_for(name, 10, rules, registry)
            assert kind is EntryKind.ARCHIVE_VOLUME, name
            assert note is None

    def test_video_below_minimum_size_is_unknown_with_note(self, registry: FormatRegistry) -> None:
        rules = MediaRules(min_video_size=1000)

        assert entry_kind_for("movie.mkv", 5000, rules, registry) == (EntryKind.VIDEO, None)
        kind, note = entry_kind_for("sample.mkv", 10, rules, registry)
        assert kind is EntryKind.UNKNOWN
        assert note is not None and "below minimum size" in note
        assert entry_kind_for("sample.mkv", 10, rules, registry, check_size=False)[0] is EntryKind.VIDEO

    def test_sidecars_and_junk(self, registry: FormatRegistry) -> None:
        rules = MediaRules()
        assert entry_kind_for("movie.NFO", 1, rules, registry)[0] is EntryKind.SIDECAR
        assert entry_kind_for("movie.srt", 1, rules, registry)[0] is EntryKind.SIDECAR
        assert entry_kind_for("setup.exe", 1, rules, registry)[0] is EntryKind.UNKNOWN
        assert entry_kind_for("notes.123", 1, rules, registry)[0] is EntryKind.UNKNOWN

    def test_disabled_format_is_not_an_archive(self) -> None:
        registry = FormatRegistry.from_limits(ExtractionLimits(formats=("zip",)))
        kind, _note = entry_kind_for("show.rar", 10, MediaRules(), registry)
        assert kind is EntryKind.UNKNOWN


class TestRarGrouping:
    def test_missing_middle_volume_is_incomplete(self, registry: FormatRegistry) -> None:
        groups = build_archive_groups(
            [volume("show.part1.rar"), volume("show.part3.rar")], registry
        )

        assert len(groups) == 1
        group = groups[0]
        assert group.complete is False
        assert group.reason == "missing volume index(es): 2"
        assert group.indices == (1, 3)

    def test_zero_padding_and_case_are_normalized(self, registry: FormatRegistry) -> None:
        groups = build_archive_groups(
            [
                volume("Show.part01.rar"),
                volume("show.PART2.rar"),
                volume("show.part003.rar"),
            ],
            registry,
        )

        assert len(groups) == 1
        group = groups[0]
        assert group.complete is True
        assert group.key == "show"
        assert group.format_name == "rar"
        assert group.indices == (1, 2, 3)
        assert group.primary.name == "Show.part01.rar"

    def test_duplicate_index_is_incomplete(self, registry: FormatRegistry) -> None:
        groups = build_archive_groups(
            [volume("show.part1.rar"), volume("show.part01.rar"), volume("show.part2.rar")],
            registry,
        )

        assert groups[0].complete is False
        assert groups[0].reason == "duplicate volume index 1"

    def test_single_volume_is_complete(self, registry: FormatRegistry) -> None:
        groups = build_archive_groups([volume("movie.rar")], registry)
        assert groups[0].complete is True
        assert groups[0].part_count == 1

    def test_legacy_volume_set(self, registry: FormatRegistry) -> None:
        groups = build_archive_groups(
            [volume("movie.r01"), volume("movie.rar"), volume("movie.r00")], registry
        )

        group = groups[0]
        assert group.complete is True
        assert [path.name for path in group.members] == ["movie.rar", "movie.r00", "movie.r01"]

    def test_legacy_set_without_base_volume(self, registry: FormatRegistry) -> None:
        groups = build_archive_groups([volume("movie.r00"), volume("movie.r01")], registry)

        assert groups[0].complete is False
        assert groups[0].reason == "missing base .rar volume"

    def test_part_set_starting_at_two_is_incomplete(self, registry: FormatRegistry) -> None:
        groups = build_archive_groups([volume("show.part2.rar"), volume("show.part3.rar")], registry)

        assert groups[0].complete is False
        assert groups[0].reason == "missing volume index(es): 1"

    def test_same_name_in_two_directories_forms_two_groups(self, registry: FormatRegistry) -> None:
        groups = build_archive_groups(
            [
                volume("ep.part1.rar", "Season 01"),
                volume("ep.part2.rar", "Season 01"),
                volume("ep.part1.rar", "Season 02"),
            ],
            registry,
        )

        assert [group.label for group in groups] == ["Season 01/ep", "Season 02/ep"]
        assert [group.part_count for group in groups] == [2, 1]


class TestZipAndSplitGrouping:
    def test_split_zip_missing_volume_from_declared_total(
        self, tmp_path: Path, registry: FormatRegistry
    ) -> None:
        final = write_zip_end_marker(tmp_path / "movie.zip", disk_number=2)
        groups = build_archive_groups(
            [volume("movie.z01", root=tmp_path), volume("movie.zip", root=tmp_path, size=final.stat().st_size)],
            registry,
        )

        group = groups[0]
        assert group.complete is False
        assert group.declared_total == 3
        assert group.reason == "missing volume index(es): 2"

    def test_split_zip_complete(self, tmp_path: Path, registry: FormatRegistry) -> None:
        write_zip_end_marker(tmp_path / "movie.zip", disk_number=1)
        groups = build_archive_groups(
            [volume("movie.zip", root=tmp_path), volume("movie.z01", root=tmp_path)], registry
        )

        group = groups[0]
        assert group.complete is True
        assert [path.name for path in group.members] == ["movie.z01", "movie.zip"]

    def test_split_zip_without_final_volume(self, registry: FormatRegistry) -> None:
        groups = build_archive_groups([volume("movie.z01"), volume("movie.z02")], registry)

        assert groups[0].complete is False
        assert groups[0].reason == "missing final .zip volume"

    def test_byte_split_missing_volume(self, registry: FormatRegistry) -> None:
        groups = build_archive_groups(
            [volume("movie.7z.001"), volume("movie.7z.003")], registry
        )

        group = groups[0]
        assert group.format_name == "split"
        assert group.key == "movie.7z"
        assert group.complete is False
        assert group.reason == "missing volume index(es): 2"


def test_group_entries_returns_loose_videos(registry: FormatRegistry) -> None:
    video = Entry(
        path=Path("/release/movie.mkv"),
        relative=Path("movie.mkv"),
        size=5000,
        kind=EntryKind.VIDEO,
    )
    nfo = Entry(
        path=Path("/release/movie.nfo"),
        relative=Path("movie.nfo"),
        size=10,
        kind=EntryKind.SIDECAR,
    )

    groups, loose = group_entries([video, nfo, volume("extras.rar")], registry)

    assert [group.key for group in groups] == ["extras"]
    assert loose == [video]
