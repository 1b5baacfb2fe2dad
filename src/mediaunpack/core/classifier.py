"""Walk a source tree and tag every file it contains."""

from __future__ import annotations

import logging
import os
import stat
from pathlib import Path
from typing import Sequence

from ..config import MediaRules
from ..extraction.archive_constants import CROSS_TAG_RE, EPISODE_ONLY_TAG_RE, TV_TAG_RE
from ..extraction.archive_detection import entry_kind_for
from ..extraction.archive_formats import FormatRegistry
from ..models import Entry, EntryKind, ReleaseKind

_logger = logging.getLogger(__name__)


def classify(
    source_root: Path,
    rules: MediaRules,
    registry: FormatRegistry,
    *,
    max_depth: int | None = None,
    exclude: Sequence[Path] = (),
) -> list[Entry]:
    """Classify every file below ``source_root``.

    Directories are followed through symlinks, but each real directory is
    visited once; a repeat (symlink loop) is recorded as an UNKNOWN entry with
    a note. Unreadable files and directories are recorded as UNKNOWN with a
    note instead of aborting the walk.

    Args:
        source_root: Release directory to scan
        rules: Media extension sets and minimum video size
        registry: Enabled archive formats
        max_depth: Maximum subdirectory depth to descend (None = unlimited)
        exclude: Directories never descended into (destination, staging)

    Returns:
        Entries sorted by path relative to ``source_root``

    Raises:
        OSError: If ``source_root`` itself cannot be listed
    """
    entries: list[Entry] = []
    visited: set[str] = {os.path.realpath(source_root)}
    excluded = {os.path.realpath(path) for path in exclude}
    pending: list[tuple[Path, int]] = [(source_root, 0)]

    while pending:
        directory, depth = pending.pop()
        try:
            children = sorted(os.scandir(directory), key=lambda item: item.name.lower())
        except OSError as exc:
            if directory == source_root:
                raise
            entries.append(_unknown(directory, source_root, f"unreadable directory: {exc}"))
            continue

        for child in children:
            path = Path(child.path)
            try:
                is_dir = child.is_dir(follow_symlinks=True)
            except OSError as exc:
                entries.append(_unknown(path, source_root, f"unreadable: {exc}"))
                continue

            if is_dir:
                if max_depth is not None and depth >= max_depth:
                    _logger.debug("Not descending into %s (max depth %d)", path, max_depth)
                    continue
                real = os.path.realpath(path)
                if real in excluded:
                    continue
                if real in visited:
                    entries.append(
                        _unknown(path, source_root, f"directory already visited via {real} (symlink loop)")
                    )
                    continue
                visited.add(real)
                pending.append((path, depth + 1))
                continue

            entries.append(_classify_file(child, path, source_root, rules, registry))

    entries.sort(key=lambda entry: entry.relative.as_posix().lower())
    for entry in entries:
        if entry.note:
            _logger.warning("Unclassified %s: %s", entry.relative, entry.note)
    return entries


def _classify_file(
    child: os.DirEntry,
    path: Path,
    source_root: Path,
    rules: MediaRules,
    registry: FormatRegistry,
) -> Entry:
    try:
        info = child.stat(follow_symlinks=True)
    except OSError as exc:
        return _unknown(path, source_root, f"unreadable: {exc}")
    if not stat.S_ISREG(info.st_mode):
        return _unknown(path, source_root, "not a regular file")
    if not os.access(path, os.R_OK):
        return _unknown(path, source_root, "permission denied")

    kind, note = entry_kind_for(child.name, info.st_size, rules, registry)
    return Entry(
        path=path,
        relative=path.relative_to(source_root),
        size=info.st_size,
        kind=kind,
        note=note,
    )


def _unknown(path: Path, source_root: Path, note: str) -> Entry:
    return Entry(
        path=path,
        relative=path.relative_to(source_root),
        size=0,
        kind=EntryKind.UNKNOWN,
        note=note,
    )


def infer_release_kind(entries: Sequence[Entry], source_root: Path | None = None) -> ReleaseKind:
    """Guess whether a release holds episodes or a movie from its names.

    Any video or archive name (or the release directory name) carrying an
    episode tag such as ``S01E02``, ``1x02`` or ``E02`` makes it an episode
    release; everything else is a movie.
    """
    names = [
        entry.relative.as_posix()
        for entry in entries
        if entry.kind in (EntryKind.VIDEO, EntryKind.ARCHIVE_VOLUME)
    ]
    if source_root is not None:
        names.append(source_root.name)
    for name in names:
        if TV_TAG_RE.search(name) or CROSS_TAG_RE.search(name) or EPISODE_ONLY_TAG_RE.search(name):
            return ReleaseKind.EPISODE
    return ReleaseKind.MOVIE


__all__ = ["classify", "infer_release_kind"]
