"""Path utilities for destination layout."""

from __future__ import annotations

from pathlib import Path

from ..extraction.archive_constants import (
    DISC_DIR_RE,
    SEASON_DIR_RE,
    SEASON_SHORT_DIR_RE,
    STAFFEL_DIR_RE,
)


def is_season_directory(name: str) -> bool:
    """Check if a directory name represents a season (or disc) folder.

    Examples:
        - "Season 1", "Season 01", "season.2"
        - "S03"
        - "Staffel 1"
        - "Disc 2", "DVD1"

    Returns:
        True if directory matches a season pattern
    """
    return (
        SEASON_DIR_RE.match(name) is not None
        or STAFFEL_DIR_RE.match(name) is not None
        or SEASON_SHORT_DIR_RE.match(name) is not None
        or DISC_DIR_RE.match(name) is not None
    )


def season_subpath(relative: Path) -> Path:
    """Keep only the season-like directories of a release-relative file path.

    ``Show.S01/Season 01/show.s01e01.mkv`` -> ``Season 01``. Other directory
    levels (release folder names, archive-internal folders) are dropped; no
    directory is invented.
    """
    kept = [part for part in relative.parent.parts if is_season_directory(part)]
    return Path(*kept) if kept else Path()


def temporary_sibling(destination: Path, token: str) -> Path:
    """Hidden temporary name next to ``destination`` used while data is in flight."""
    return destination.with_name(f".{destination.name}.{token}.partial")


def suffixed_destination(destination: Path, suffix: str) -> Path:
    """``movie.mkv`` + ``abc123`` -> ``movie.abc123.mkv``."""
    return destination.with_name(f"{destination.stem}.{suffix}{destination.suffix}")


__all__ = [
    "is_season_directory",
    "season_subpath",
    "temporary_sibling",
    "suffixed_destination",
]
