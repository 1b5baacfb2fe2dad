from __future__ import annotations

import io
import tarfile
import threading
import time
from dataclasses import replace
from pathlib import Path

import pytest

from conftest import make_tar, make_zip, zip_bytes
from mediaunpack.config import ExtractionLimits, MediaRules
from mediaunpack.errors import ExtractionFailure, ExtractionTimeout, NestingTooDeep
from mediaunpack.extraction import (
    NESTED_DIRNAME,
    FormatRegistry,
    build_archive_groups,
    extract_group,
    staging_dirname,
)
from mediaunpack.extraction.archive_formats import TarFormat, ZipFormat
from mediaunpack.models import ArchiveGroup, Entry, EntryKind


def group_for(*paths: Path) -> ArchiveGroup:
    registry = FormatRegistry.from_limits(ExtractionLimits(probe_volume_count=False))
    entries = [
        Entry(
            path=path,
            relative=Path(path.name),
            size=path.stat().st_size,
            kind=EntryKind.ARCHIVE_VOLUME,
        )
        for path in paths
    ]
    groups = build_archive_groups(entries, registry)
    assert len(groups) == 1
    return groups[0]


def run_extract(
    group: ArchiveGroup,
    target: Path,
    rules: MediaRules,
    limits: ExtractionLimits,
    cancel_event: threading.Event | None = None,
):
    return extract_group(
        group,
        target,
        registry=FormatRegistry.from_limits(limits),
        rules=rules,
        limits=limits,
        cancel_event=cancel_event,
    )


def test_zip_extraction_stages_every_file(
    source_dir: Path, staging_dir: Path, rules: MediaRules, limits: ExtractionLimits
) -> None:
    archive = make_zip(
        source_dir / "movie.zip",
        {"Movie/movie.mkv": b"v" * 5000, "Movie/movie.nfo": b"info"},
    )

    staged = run_extract(group_for(archive), staging_dir, rules, limits)

    by_name = {item.path.name: item for item in staged}
    assert set(by_name) == {"movie.mkv", "movie.nfo"}
    assert by_name["movie.mkv"].kind is EntryKind.VIDEO
    assert by_name["movie.mkv"].size == 5000
    assert by_name["movie.mkv"].relative == Path("Movie/movie.mkv")
    assert by_name["movie.mkv"].origin == "movie"
    assert by_name["movie.mkv"].owned is True
    assert by_name["movie.nfo"].kind is EntryKind.SIDECAR
    assert (staging_dir / "Movie" / "movie.mkv").read_bytes() == b"v" * 5000
    # The source archive is only read
    assert archive.exists()


def test_nested_archive_is_extracted_and_consumed(
    source_dir: Path, staging_dir: Path, rules: MediaRules, limits: ExtractionLimits
) -> None:
    inner = zip_bytes({"feature.mkv": b"f" * 3000})
    archive = make_zip(source_dir / "outer.zip", {"inner.zip": inner, "readme.nfo": b"x"})

    staged = run_extract(group_for(archive), staging_dir, rules, limits)

    names = sorted(item.path.name for item in staged)
    assert names == ["feature.mkv", "readme.nfo"]
    feature = next(item for item in staged if item.path.name == "feature.mkv")
    assert NESTED_DIRNAME in feature.path.parts
    assert feature.origin == "outer > inner"
    assert feature.origin_name == "outer"
    assert feature.path.read_bytes() == b"f" * 3000
    assert not (staging_dir / "inner.zip").exists()


def test_nesting_deeper_than_limit_fails(
    source_dir: Path, staging_dir: Path, rules: MediaRules, limits: ExtractionLimits
) -> None:
    inner = zip_bytes({"feature.mkv": b"f" * 3000})
    archive = make_zip(source_dir / "outer.zip", {"inner.zip": inner})
    shallow = replace(limits, max_nesting_depth=0)

    with pytest.raises(NestingTooDeep) as excinfo:
        run_extract(group_for(archive), staging_dir, rules, shallow)

    assert excinfo.value.subject == "outer"
    assert excinfo.value.kind == "NestingTooDeep"


def test_corrupt_zip_raises_extraction_failure(
    source_dir: Path, staging_dir: Path, rules: MediaRules, limits: ExtractionLimits
) -> None:
    archive = source_dir / "broken.zip"
    archive.write_bytes(b"this is not a zip archive at all")

    with pytest.raises(ExtractionFailure) as excinfo:
        run_extract(group_for(archive), staging_dir, rules, limits)

    assert "corrupt volume" in excinfo.value.message
    assert excinfo.value.subject == "broken"


def test_unsafe_member_names_are_not_written(
    source_dir: Path, staging_dir: Path, rules: MediaRules, limits: ExtractionLimits
) -> None:
    archive = make_zip(
        source_dir / "evil.zip",
        {"../escaped.mkv": b"e" * 2000, "/absolute.mkv": b"a" * 2000, "ok.mkv": b"o" * 2000},
    )

    staged = run_extract(group_for(archive), staging_dir, rules, limits)

    assert [item.path.name for item in staged] == ["ok.mkv"]
    assert not (staging_dir.parent / "escaped.mkv").exists()
    for path in staging_dir.parent.rglob("*.mkv"):
        assert path.is_relative_to(staging_dir)


def test_expanded_size_limit(
    source_dir: Path, staging_dir: Path, rules: MediaRules, limits: ExtractionLimits
) -> None:
    archive = make_zip(source_dir / "big.zip", {"movie.mkv": b"\0" * 100_000})
    limited = replace(limits, max_expanded_bytes=10_000)

    with pytest.raises(ExtractionFailure) as excinfo:
        run_extract(group_for(archive), staging_dir, rules, limited)

    assert "exceeds limit" in excinfo.value.message
    assert not (staging_dir / "movie.mkv").exists()


def test_tar_extraction(
    source_dir: Path, staging_dir: Path, rules: MediaRules, limits: ExtractionLimits
) -> None:
    archive = make_tar(
        source_dir / "show.tar.gz", {"show.s01e01.mkv": b"a" * 2000, "show.s01e02.mkv": b"b" * 2000}
    )

    staged = run_extract(group_for(archive), staging_dir, rules, limits)

    assert sorted(item.path.name for item in staged) == ["show.s01e01.mkv", "show.s01e02.mkv"]
    assert all(item.origin == "show" for item in staged)


def test_tar_extraction_skips_links(
    source_dir: Path, staging_dir: Path, rules: MediaRules, limits: ExtractionLimits
) -> None:
    archive = source_dir / "movie.tar"
    with tarfile.open(archive, "w") as tf:
        content = b"m" * 4000
        info = tarfile.TarInfo("movie.mkv")
        info.size = len(content)
        tf.addfile(info, io.BytesIO(content))
        link = tarfile.TarInfo("passwd.mkv")
        link.type = tarfile.SYMTYPE
        link.linkname = "/etc/passwd"
        tf.addfile(link)

    staged = run_extract(group_for(archive), staging_dir, rules, limits)

    assert [item.path.name for item in staged] == ["movie.mkv"]
    assert not (staging_dir / "passwd.mkv").exists()


def test_cancelled_extraction_fails(
    source_dir: Path, staging_dir: Path, rules: MediaRules, limits: ExtractionLimits
) -> None:
    archive = make_zip(source_dir / "movie.zip", {"movie.mkv": b"m" * 2000})
    cancel = threading.Event()
    cancel.set()

    with pytest.raises(ExtractionFailure, match="cancelled"):
        run_extract(group_for(archive), staging_dir, rules, limits, cancel_event=cancel)


def test_incomplete_group_is_refused(
    staging_dir: Path, rules: MediaRules, limits: ExtractionLimits
) -> None:
    part = Entry(
        path=staging_dir.parent / "show.part1.rar",
        relative=Path("show.part1.rar"),
        size=10,
        kind=EntryKind.ARCHIVE_VOLUME,
    )
    group = ArchiveGroup(
        key="show",
        format_name="rar",
        volumes=((1, part),),
        complete=False,
        reason="missing volume index(es): 2",
    )

    with pytest.raises(ExtractionFailure, match="incomplete"):
        run_extract(group, staging_dir, rules, limits)


def test_staging_dirname_is_filesystem_safe(source_dir: Path) -> None:
    archive = make_zip(source_dir / "My Movie (2020) [x].zip", {"a.mkv": b"a"})
    name = staging_dirname(7, group_for(archive))

    assert name == "007-zip-my_movie_2020_x"


def test_archive_folder_named_like_nested_staging_is_kept(
    source_dir: Path, staging_dir: Path, rules: MediaRules, limits: ExtractionLimits
) -> None:
    archive = make_zip(
        source_dir / "movie.zip",
        {"movie.mkv": b"m" * 3000, f"Extras/{NESTED_DIRNAME}/bonus.mkv": b"b" * 3000},
    )

    staged = run_extract(group_for(archive), staging_dir, rules, limits)

    by_name = {item.path.name: item for item in staged}
    assert set(by_name) == {"movie.mkv", "bonus.mkv"}
    assert by_name["bonus.mkv"].relative == Path("Extras") / NESTED_DIRNAME / "bonus.mkv"


@pytest.mark.parametrize("fmt", [ZipFormat(), TarFormat()], ids=["zip", "tar"])
def test_stdlib_extraction_stops_at_deadline(
    fmt, source_dir: Path, staging_dir: Path, limits: ExtractionLimits
) -> None:
    members = {"a.mkv": b"a" * 2000, "b.mkv": b"b" * 2000}
    if fmt.name == "zip":
        archive = make_zip(source_dir / "movie.zip", members)
    else:
        archive = make_tar(source_dir / "movie.tar.gz", members)

    with pytest.raises(ExtractionTimeout):
        fmt.extract([archive], staging_dir, limits=limits, deadline=time.monotonic() - 1)

    assert list(staging_dir.iterdir()) == []
