"""Archive group extraction into staging, including nested archives."""

from __future__ import annotations

import logging
import os
import re
import stat
import threading
import time
from pathlib import Path
from typing import TYPE_CHECKING

import psutil

from ..errors import ExtractionFailure, NestingTooDeep
from ..models import ArchiveGroup, Entry, EntryKind, StagedItem
from .archive_detection import build_archive_groups, entry_kind_for
from .archive_formats import FormatRegistry

if TYPE_CHECKING:
    from ..config import ExtractionLimits, MediaRules

_logger = logging.getLogger(__name__)

NESTED_DIRNAME = "__nested__"


def fix_file_permissions(directory: Path) -> None:
    """Make extracted files readable/writable by owner and readable by others.

    Archives created on other systems may carry restrictive modes that would
    make the later move into the destination fail.

    Args:
        directory: Directory containing extracted files to fix permissions for
    """
    for root, dirs, files in os.walk(directory):
        # Fix directory permissions (755: rwxr-xr-x)
        for d in dirs:
            dir_path = Path(root) / d
            try:
                dir_path.chmod(
                    stat.S_IRWXU | stat.S_IRGRP | stat.S_IXGRP | stat.S_IROTH | stat.S_IXOTH
                )
            except OSError as exc:
                _logger.debug("Could not chmod %s: %s", dir_path, exc)

        # Fix file permissions (644: rw-r--r--)
        for f in files:
            file_path = Path(root) / f
            try:
                file_path.chmod(stat.S_IRUSR | stat.S_IWUSR | stat.S_IRGRP | stat.S_IROTH)
            except OSError as exc:
                _logger.debug("Could not chmod %s: %s", file_path, exc)


def staging_dirname(position: int, group: ArchiveGroup) -> str:
    """Name of the group-scoped staging subdirectory for ``group``."""
    safe = re.sub(r"[^A-Za-z0-9._-]+", "_", group.key).strip("._") or "archive"
    return f"{position:03d}-{group.format_name}-{safe[:80]}"


def extract_group(
    group: ArchiveGroup,
    target_dir: Path,
    *,
    registry: FormatRegistry,
    rules: "MediaRules",
    limits: "ExtractionLimits",
    cancel_event: threading.Event | None = None,
) -> list[StagedItem]:
    """Extract a complete archive group into ``target_dir``.

    Archives found in the output are grouped and extracted again, up to
    ``limits.max_nesting_depth`` levels. Nothing is written outside
    ``target_dir``.

    Args:
        group: Complete archive group
        target_dir: Group-scoped staging directory
        registry: Enabled archive formats
        rules: Media rules used to tag the extracted files
        limits: Depth, size and time bounds
        cancel_event: Set when the run is cancelled

    Returns:
        Staged items for every extracted non-archive file

    Raises:
        ExtractionFailure: On any failure; ``subject`` is the group label
    """
    deadline = None
    if limits.group_timeout:
        deadline = time.monotonic() + limits.group_timeout

    try:
        if not group.complete:
            raise ExtractionFailure(f"group is incomplete: {group.reason}")
        _ensure_free_space(target_dir, group.total_size)
        return _extract_recursive(
            group,
            target_dir,
            registry=registry,
            rules=rules,
            limits=limits,
            relative_prefix=group.relative_dir,
            origin=group.label,
            origin_name=group.key,
            depth=0,
            deadline=deadline,
            cancel_event=cancel_event,
        )
    except ExtractionFailure as exc:
        if exc.subject is None:
            exc.subject = group.label
        raise
    except OSError as exc:
        raise ExtractionFailure(f"I/O error: {exc}", subject=group.label) from exc


def _extract_recursive(
    group: ArchiveGroup,
    target_dir: Path,
    *,
    registry: FormatRegistry,
    rules: "MediaRules",
    limits: "ExtractionLimits",
    relative_prefix: Path,
    origin: str,
    origin_name: str,
    depth: int,
    deadline: float | None,
    cancel_event: threading.Event | None,
) -> list[StagedItem]:
    if depth > limits.max_nesting_depth:
        raise NestingTooDeep(
            f"archive nesting too deep (more than {limits.max_nesting_depth} level(s))"
        )
    if cancel_event is not None and cancel_event.is_set():
        raise ExtractionFailure("extraction cancelled")

    fmt = registry.get(group.format_name)
    _logger.info(
        "%sExtracting %s (%s, %d volume(s))",
        "  " * depth,
        group.label,
        group.format_name,
        group.part_count,
    )
    fmt.extract(
        group.members,
        target_dir,
        limits=limits,
        deadline=deadline,
        cancel_event=cancel_event,
    )
    fix_file_permissions(target_dir)

    produced = _scan_output(target_dir, rules, registry)
    nested_entries = [entry for entry in produced if entry.kind is EntryKind.ARCHIVE_VOLUME]
    staged = [
        StagedItem(
            path=entry.path,
            origin=origin,
            relative=relative_prefix / entry.relative,
            kind=entry.kind,
            size=entry.size,
            owned=True,
            origin_name=origin_name,
        )
        for entry in produced
        if entry.kind is not EntryKind.ARCHIVE_VOLUME
    ]

    nested_groups = build_archive_groups(nested_entries, registry)
    for position, nested in enumerate(nested_groups, start=1):
        if not nested.complete:
            raise ExtractionFailure(f"nested archive {nested.label} is incomplete: {nested.reason}")
        nested_dir = target_dir / NESTED_DIRNAME / staging_dirname(position, nested)
        staged.extend(
            _extract_recursive(
                nested,
                nested_dir,
                registry=registry,
                rules=rules,
                limits=limits,
                relative_prefix=relative_prefix / nested.relative_dir,
                origin=f"{origin} > {nested.key}",
                origin_name=origin_name,
                depth=depth + 1,
                deadline=deadline,
                cancel_event=cancel_event,
            )
        )
        # Consumed volumes are not part of the release
        for member in nested.members:
            member.unlink(missing_ok=True)

    if limits.max_expanded_bytes is not None:
        expanded = _tree_size(target_dir)
        if expanded > limits.max_expanded_bytes:
            raise ExtractionFailure(
                f"expanded size {expanded} bytes exceeds limit of {limits.max_expanded_bytes} bytes"
            )
    return staged


def _scan_output(
    directory: Path, rules: "MediaRules", registry: FormatRegistry
) -> list[Entry]:
    """List extracted files (outside nested staging) as entries relative to ``directory``."""
    entries: list[Entry] = []
    for root, dirs, files in os.walk(directory):
        if Path(root) == directory:
            # only the top-level nested staging dir belongs to this run
            dirs[:] = [d for d in dirs if d != NESTED_DIRNAME]
        dirs.sort()
        for name in sorted(files):
            path = Path(root) / name
            try:
                size = path.lstat().st_size
            except OSError as exc:
                raise ExtractionFailure(f"I/O error reading extracted file {name}: {exc}") from exc
            if path.is_symlink():
                continue
            kind, _note = entry_kind_for(name, size, rules, registry, check_size=False)
            entries.append(
                Entry(path=path, relative=path.relative_to(directory), size=size, kind=kind)
            )
    return entries


def _tree_size(directory: Path) -> int:
    total = 0
    for root, _dirs, files in os.walk(directory):
        for name in files:
            try:
                total += (Path(root) / name).lstat().st_size
            except OSError:
                continue
    return total


def _ensure_free_space(directory: Path, required: int) -> None:
    probe = directory
    while not probe.exists() and probe != probe.parent:
        probe = probe.parent
    free = psutil.disk_usage(str(probe)).free
    if free < required:
        raise ExtractionFailure(
            f"insufficient free space in staging ({free} bytes free, at least {required} needed)"
        )


__all__ = [
    "NESTED_DIRNAME",
    "extract_group",
    "fix_file_permissions",
    "staging_dirname",
]
