"""Constants and regular expressions for archive and media processing."""

from __future__ import annotations

import re

# Default media extension sets (overridable through [media] in the config)
DEFAULT_VIDEO_EXTENSIONS: frozenset[str] = frozenset(
    {
        ".mkv",
        ".mp4",
        ".m4v",
        ".avi",
        ".mov",
        ".wmv",
        ".mpg",
        ".mpeg",
        ".ts",
        ".m2ts",
        ".webm",
        ".flv",
    }
)
DEFAULT_SIDECAR_EXTENSIONS: frozenset[str] = frozenset(
    {
        ".srt",
        ".sub",
        ".idx",
        ".ass",
        ".ssa",
        ".vtt",
        ".sup",
        ".nfo",
        ".txt",
        ".sfv",
        ".md5",
        ".jpg",
        ".jpeg",
        ".png",
        ".xml",
    }
)
DEFAULT_MIN_VIDEO_SIZE = 20 * 1024 * 1024

# Archive formats known to the registry, in detection order
ARCHIVE_FORMAT_NAMES: tuple[str, ...] = ("rar", "zip", "7z", "tar", "split")

# Single-volume archive suffixes (longest first so ".tar.gz" wins over ".gz")
TAR_SUFFIXES: tuple[str, ...] = (
    ".tar.gz",
    ".tar.bz2",
    ".tar.xz",
    ".tgz",
    ".tbz2",
    ".txz",
    ".tar",
)
SPLIT_INNER_SUFFIXES: tuple[str, ...] = (".rar", ".zip", ".7z") + TAR_SUFFIXES

# Multi-part archive patterns
PART_VOLUME_RE = re.compile(
    r"^(?P<base>.+?)\.part(?P<index>\d+)\.rar$", re.IGNORECASE
)
R_VOLUME_RE = re.compile(r"^(?P<base>.+?)\.r(?P<index>\d{2,3})$", re.IGNORECASE)
RAR_SINGLE_RE = re.compile(r"^(?P<base>.+?)\.rar$", re.IGNORECASE)
ZIP_SPLIT_RE = re.compile(r"^(?P<base>.+?)\.z(?P<index>\d{2,3})$", re.IGNORECASE)
ZIP_SINGLE_RE = re.compile(r"^(?P<base>.+?)\.zip$", re.IGNORECASE)
SEVEN_ZIP_RE = re.compile(r"^(?P<base>.+?)\.7z$", re.IGNORECASE)
SPLIT_EXT_RE = re.compile(r"^(?P<inner>.+)\.(?P<index>\d{3})$", re.IGNORECASE)

# Sample clips shipped next to the real feature
DEFAULT_SAMPLE_PATTERN = r"(?:^|[\W_])(?:sample|trailer|preview|promo)(?:[\W_]|$)"

# Episode ordinal grammar; first matching pattern wins.
# Named groups: "ordinal" (required) and "season" (optional).
DEFAULT_ORDINAL_PATTERNS: tuple[str, ...] = (
    r"(?<![a-z0-9])s(?P<season>\d{1,2})[ ._-]?e(?P<ordinal>\d{1,3})(?!\d)",
    r"(?<![a-z0-9])(?P<season>\d{1,2})x(?P<ordinal>\d{2,3})(?!\d)",
    r"(?<![a-z])e(?:p(?:isode)?)?[ ._-]?(?P<ordinal>\d{2,3})(?![a-z0-9])",
    r"(?<![a-z])(?:part|pt|disc|cd)[ ._-]?(?P<ordinal>\d{1,2})(?!\d)",
)

# Season-like directory names preserved verbatim for episodes
SEASON_DIR_RE = re.compile(r"^season[ ._-]*(\d+)$", re.IGNORECASE)
# Short season folder variant: "S03"
SEASON_SHORT_DIR_RE = re.compile(r"^s\d{1,2}$", re.IGNORECASE)
# German variant: "Staffel 1", "Staffel 01"
STAFFEL_DIR_RE = re.compile(r"^staffel[ ._-]*(\d+)$", re.IGNORECASE)
# Disc folders of multi-disc box sets: "Disc 1", "DVD2"
DISC_DIR_RE = re.compile(r"^(?:disc|disk|dvd|cd)[ ._-]*(\d+)$", re.IGNORECASE)

# Release kind inference
TV_TAG_RE = re.compile(r"(?<![a-z0-9])s\d{1,2}[ ._-]?e\d{1,3}(?!\d)", re.IGNORECASE)
# Some releases contain only episode tags like E01/E001 without an Sxx season tag
EPISODE_ONLY_TAG_RE = re.compile(r"(?<![a-z])e\d{2,3}(?![a-z0-9])", re.IGNORECASE)
CROSS_TAG_RE = re.compile(r"(?<![a-z0-9])\d{1,2}x\d{2,3}(?!\d)", re.IGNORECASE)

# Naming patterns for the optional rename step
EPISODE_NAME_RE = re.compile(
    r"(?P<name>.*?)[ ._-]*s(?P<season>\d{1,2})[ ._-]?e(?P<episode>\d{1,3})",
    re.IGNORECASE,
)
MOVIE_NAME_RE = re.compile(r"(?P<name>.*?)[ ._(\[-]+(?P<year>(?:19|20)\d{2})(?!\d)")
TITLE_SMALL_WORDS = frozenset(
    {"a", "an", "and", "as", "at", "but", "by", "for", "in", "of", "on", "or", "the", "to", "vs"}
)

# 7-Zip reports the declared number of volumes in its listing
VOLUMES_LINE_RE = re.compile(r"^\s*Volumes\s*[:=]\s*(\d+)", re.IGNORECASE | re.MULTILINE)
# Unpacked size of one entry in a `7z l -slt` listing ("Packed Size" does not match)
LISTED_SIZE_RE = re.compile(r"^Size = (\d+)\s*$", re.MULTILINE)
# Separates the archive header block from the entry blocks in that listing
LISTING_SEPARATOR = "----------"


__all__ = [
    "DEFAULT_VIDEO_EXTENSIONS",
    "DEFAULT_SIDECAR_EXTENSIONS",
    "DEFAULT_MIN_VIDEO_SIZE",
    "ARCHIVE_FORMAT_NAMES",
    "TAR_SUFFIXES",
    "SPLIT_INNER_SUFFIXES",
    "PART_VOLUME_RE",
    "R_VOLUME_RE",
    "RAR_SINGLE_RE",
    "ZIP_SPLIT_RE",
    "ZIP_SINGLE_RE",
    "SEVEN_ZIP_RE",
    "SPLIT_EXT_RE",
    "DEFAULT_SAMPLE_PATTERN",
    "DEFAULT_ORDINAL_PATTERNS",
    "SEASON_DIR_RE",
    "SEASON_SHORT_DIR_RE",
    "STAFFEL_DIR_RE",
    "DISC_DIR_RE",
    "TV_TAG_RE",
    "EPISODE_ONLY_TAG_RE",
    "CROSS_TAG_RE",
    "EPISODE_NAME_RE",
    "MOVIE_NAME_RE",
    "TITLE_SMALL_WORDS",
    "VOLUMES_LINE_RE",
    "LISTED_SIZE_RE",
    "LISTING_SEPARATOR",
]
