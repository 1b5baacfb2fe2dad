"""Archive discovery, validation and grouping."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Sequence

from ..models import ArchiveGroup, Entry, EntryKind
from .archive_formats import ArchiveFormat, FormatRegistry, VolumeName

if TYPE_CHECKING:
    from ..config import MediaRules

_logger = logging.getLogger(__name__)

SMALL_VIDEO_NOTE = "video below minimum size"


def entry_kind_for(
    name: str,
    size: int,
    rules: "MediaRules",
    registry: FormatRegistry,
    *,
    check_size: bool = True,
) -> tuple[EntryKind, str | None]:
    """Classify a file by name (and size) into an :class:`EntryKind`.

    Args:
        name: File name
        size: File size in bytes
        rules: Media extension sets and thresholds
        registry: Enabled archive formats
        check_size: Apply the minimum video size (off for staged output,
            which the selector re-checks and reports)

    Returns:
        Tuple of (kind, note) where note explains an UNKNOWN verdict
    """
    if registry.is_archive_volume(name):
        return EntryKind.ARCHIVE_VOLUME, None

    suffix = Path(name).suffix.lower()
    if suffix in rules.video_extensions:
        if not check_size or size >= rules.min_video_size:
            return EntryKind.VIDEO, None
        return (
            EntryKind.UNKNOWN,
            f"{SMALL_VIDEO_NOTE} ({size} < {rules.min_video_size} bytes)",
        )
    if suffix in rules.sidecar_extensions:
        return EntryKind.SIDECAR, None
    return EntryKind.UNKNOWN, None


def build_archive_groups(
    entries: Sequence[Entry], registry: FormatRegistry
) -> list[ArchiveGroup]:
    """Group related archive volumes together (multi-part archives).

    Volumes group by directory, format, naming family and normalized base
    name. Normalization (case folding, suffix stripping, integer parsing of
    zero-padded indices) happens before grouping, so ``part01`` and ``part1``
    land in the same group.

    Args:
        entries: Classified entries; non-archive entries are ignored
        registry: Enabled archive formats

    Returns:
        List of ArchiveGroup objects, one per logical archive
    """
    grouped: dict[tuple[str, str, str, str], list[tuple[VolumeName, Entry]]] = {}
    formats: dict[str, ArchiveFormat] = {}

    for entry in entries:
        if entry.kind is not EntryKind.ARCHIVE_VOLUME:
            continue
        detected = registry.detect(entry.name)
        if detected is None:
            _logger.debug("No enabled format recognizes %s", entry.relative)
            continue
        fmt, volume = detected
        key = (
            entry.relative.parent.as_posix().lower(),
            fmt.name,
            volume.family,
            volume.base,
        )
        grouped.setdefault(key, []).append((volume, entry))
        formats[fmt.name] = fmt

    groups: list[ArchiveGroup] = []
    for (_directory, format_name, _family, base), volumes in grouped.items():
        completeness = formats[format_name].check_complete(volumes)
        group = ArchiveGroup(
            key=base,
            format_name=format_name,
            volumes=completeness.ordered,
            declared_total=completeness.declared_total,
            complete=completeness.complete,
            reason=completeness.reason,
        )
        if group.complete:
            _logger.debug(
                "Archive group %s (%s): %d volume(s), complete",
                group.label,
                format_name,
                group.part_count,
            )
        else:
            _logger.warning(
                "Archive group %s (%s) is incomplete: %s",
                group.label,
                format_name,
                group.reason,
            )
        groups.append(group)

    # Sort groups by directory, then by base name
    groups.sort(key=lambda group: (group.relative_dir.as_posix().lower(), group.key))
    return groups


def group_entries(
    entries: Sequence[Entry], registry: FormatRegistry
) -> tuple[list[ArchiveGroup], list[Entry]]:
    """Split classified entries into archive groups and loose video entries."""
    groups = build_archive_groups(entries, registry)
    loose = [entry for entry in entries if entry.kind is EntryKind.VIDEO]
    return groups, loose


__all__ = [
    "SMALL_VIDEO_NOTE",
    "entry_kind_for",
    "build_archive_groups",
    "group_entries",
]
