"""Archive detection and extraction functionality."""

from __future__ import annotations

from .archive_detection import (
    build_archive_groups,
    entry_kind_for,
    group_entries,
)
from .archive_extraction import (
    NESTED_DIRNAME,
    extract_group,
    staging_dirname,
)
from .archive_formats import (
    ArchiveFormat,
    Completeness,
    FormatRegistry,
    VolumeName,
    resolve_seven_zip_command,
)

__all__ = [
    # Formats
    "ArchiveFormat",
    "Completeness",
    "FormatRegistry",
    "VolumeName",
    "resolve_seven_zip_command",
    # Detection
    "build_archive_groups",
    "entry_kind_for",
    "group_entries",
    # Extraction
    "NESTED_DIRNAME",
    "extract_group",
    "staging_dirname",
]
