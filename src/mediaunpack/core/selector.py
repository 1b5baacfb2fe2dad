"""Separate real media from samples, extras and junk."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from ..config import MediaRules
from ..errors import SelectionAmbiguity
from ..extraction.archive_constants import (
    EPISODE_NAME_RE,
    MOVIE_NAME_RE,
    TITLE_SMALL_WORDS,
)
from ..models import Entry, EntryKind, MediaItem, ReleaseKind, SkippedEntry, StagedItem
from .path_utils import season_subpath

_logger = logging.getLogger(__name__)

_INVALID_FILENAME_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')


@dataclass(frozen=True)
class Selection:
    """Media chosen for placement plus everything that was left out.

    Attributes:
        items: Media items in placement order
        skipped: Samples, extras, sidecars and junk that are not placed
        warnings: Non-fatal ambiguities (extras dropped, unordered episodes)
    """

    items: tuple[MediaItem, ...]
    skipped: tuple[SkippedEntry, ...]
    warnings: tuple[SelectionAmbiguity, ...]


def passthrough_loose(entries: Sequence[Entry]) -> list[StagedItem]:
    """Turn loose video entries into staged items without touching the files."""
    return [
        StagedItem(
            path=entry.path,
            origin="loose",
            relative=entry.relative,
            kind=entry.kind,
            size=entry.size,
            owned=False,
            origin_name=entry.path.stem,
        )
        for entry in entries
    ]


def parse_ordinal(
    name: str, patterns: Sequence[re.Pattern[str]]
) -> tuple[int | None, int | None]:
    """Parse (season, ordinal) from a file name; the first matching pattern wins."""
    for pattern in patterns:
        match = pattern.search(name)
        if match is None:
            continue
        season = match.groupdict().get("season")
        return (int(season) if season else None, int(match.group("ordinal")))
    return None, None


def select_media(
    staged: Sequence[StagedItem],
    loose: Sequence[Entry],
    release_kind: ReleaseKind,
    rules: MediaRules,
) -> Selection:
    """Choose the media files of a release.

    Video sizes are re-checked here because archives often carry small
    sample clips next to the feature.

    Args:
        staged: Items produced by extraction, in arrival order
        loose: Loose video entries found directly in the source
        release_kind: Episode or movie release
        rules: Thresholds, sample pattern, ordinal grammar, naming options

    Returns:
        Selection with the items to place and what was skipped
    """
    candidates = list(staged) + passthrough_loose(loose)
    sample_re = rules.sample_regex()

    videos: list[StagedItem] = []
    sidecars: list[StagedItem] = []
    skipped: list[SkippedEntry] = []

    for item in candidates:
        if item.kind is EntryKind.VIDEO:
            if item.size < rules.min_video_size:
                skipped.append(
                    SkippedEntry(
                        item.path,
                        f"sample: below minimum video size ({item.size} < {rules.min_video_size} bytes)",
                    )
                )
            elif sample_re is not None and sample_re.search(item.path.stem):
                skipped.append(SkippedEntry(item.path, "sample: name matches sample pattern"))
            else:
                videos.append(item)
        elif item.kind is EntryKind.SIDECAR:
            if rules.keep_sidecars:
                sidecars.append(item)
            else:
                skipped.append(SkippedEntry(item.path, "sidecar: not selected by policy"))
        else:
            skipped.append(SkippedEntry(item.path, "junk: not a media file"))

    if release_kind is ReleaseKind.EPISODE:
        items, warnings = _select_episodes(videos, rules)
    else:
        items, extra_skips, warnings = _select_movie(videos, rules)
        skipped.extend(extra_skips)

    items.extend(_sidecar_items(sidecars, release_kind))
    _logger.info(
        "Selected %d item(s) for placement, skipped %d", len(items), len(skipped)
    )
    return Selection(items=tuple(items), skipped=tuple(skipped), warnings=tuple(warnings))


def _select_episodes(
    videos: Sequence[StagedItem], rules: MediaRules
) -> tuple[list[MediaItem], list[SelectionAmbiguity]]:
    patterns = rules.ordinal_regexes()
    ordered: list[tuple[int, int, StagedItem]] = []
    unordered: list[tuple[int, StagedItem]] = []
    warnings: list[SelectionAmbiguity] = []

    for arrival, item in enumerate(videos, start=1):
        season, ordinal = parse_ordinal(item.path.name, patterns)
        if ordinal is None:
            unordered.append((arrival, item))
            warnings.append(
                SelectionAmbiguity(
                    f"no episode number in file name; using arrival order {arrival}",
                    subject=item.path.name,
                )
            )
        else:
            ordered.append((season or 0, ordinal, item))

    ordered.sort(key=lambda value: (value[0], value[1], value[2].path.name.lower()))

    items: list[MediaItem] = []
    for season, ordinal, item in ordered:
        items.append(
            MediaItem(
                source=item.path,
                target=season_subpath(item.relative) / _episode_filename(item, rules),
                release_kind=ReleaseKind.EPISODE,
                size=item.size,
                ordinal=ordinal,
                season=season or None,
                owned=item.owned,
            )
        )
    for arrival, item in unordered:
        items.append(
            MediaItem(
                source=item.path,
                target=season_subpath(item.relative) / _episode_filename(item, rules),
                release_kind=ReleaseKind.EPISODE,
                size=item.size,
                ordinal=arrival,
                unordered=True,
                owned=item.owned,
            )
        )
    return items, warnings


def _select_movie(
    videos: Sequence[StagedItem], rules: MediaRules
) -> tuple[list[MediaItem], list[SkippedEntry], list[SelectionAmbiguity]]:
    if not videos:
        return [], [], []

    by_size = sorted(videos, key=lambda item: (-item.size, item.path.name.lower()))
    primary, others = by_size[0], by_size[1:]
    alternate_re = rules.alternate_regex()

    items = [
        MediaItem(
            source=primary.path,
            target=Path(_movie_filename(primary, rules)),
            release_kind=ReleaseKind.MOVIE,
            size=primary.size,
            owned=primary.owned,
        )
    ]
    skipped: list[SkippedEntry] = []
    for item in others:
        if alternate_re is not None and alternate_re.search(item.path.name):
            items.append(
                MediaItem(
                    source=item.path,
                    target=Path(item.path.name),
                    release_kind=ReleaseKind.MOVIE,
                    size=item.size,
                    role="alternate",
                    owned=item.owned,
                )
            )
        else:
            skipped.append(
                SkippedEntry(item.path, f"extra: smaller than primary feature {primary.path.name}")
            )

    warnings: list[SelectionAmbiguity] = []
    if skipped:
        warnings.append(
            SelectionAmbiguity(
                f"{len(skipped)} additional video(s) skipped as extras",
                subject=primary.path.name,
            )
        )
    return items, skipped, warnings


def _sidecar_items(sidecars: Sequence[StagedItem], release_kind: ReleaseKind) -> list[MediaItem]:
    items = []
    for item in sidecars:
        if release_kind is ReleaseKind.EPISODE:
            target = season_subpath(item.relative) / item.path.name
        else:
            target = Path(item.path.name)
        items.append(
            MediaItem(
                source=item.path,
                target=target,
                release_kind=release_kind,
                size=item.size,
                role="sidecar",
                owned=item.owned,
            )
        )
    return items


def _episode_filename(item: StagedItem, rules: MediaRules) -> str:
    if not rules.rename:
        return item.path.name
    for candidate in (item.path.stem, item.origin_name):
        match = EPISODE_NAME_RE.match(candidate or "")
        if match and match.group("name").strip(" ._-"):
            show = title_case(match.group("name"))
            season = int(match.group("season"))
            episode = int(match.group("episode"))
            return _sanitize(f"{show} - S{season:02d}E{episode:02d}") + item.path.suffix.lower()
    return item.path.name


def _movie_filename(item: StagedItem, rules: MediaRules) -> str:
    if not rules.rename:
        return item.path.name
    for candidate in (item.origin_name, item.path.stem):
        match = MOVIE_NAME_RE.match(candidate or "")
        if match and match.group("name").strip(" ._-"):
            title = title_case(match.group("name"))
            return _sanitize(f"{title} ({match.group('year')})") + item.path.suffix.lower()
    return item.path.name


def title_case(raw: str) -> str:
    """Turn a dotted release name into a title: ``the.lord.of.the.rings`` -> ``The Lord of the Rings``."""
    words = [word for word in re.split(r"[ ._]+", raw.strip(" ._-")) if word]
    result = []
    for position, word in enumerate(words):
        lower = word.lower()
        if position > 0 and lower in TITLE_SMALL_WORDS:
            result.append(lower)
        elif word.islower():
            result.append(word[:1].upper() + word[1:])
        else:
            result.append(word)
    return " ".join(result)


def _sanitize(name: str) -> str:
    return _INVALID_FILENAME_CHARS.sub("", name).strip()


__all__ = [
    "Selection",
    "passthrough_loose",
    "parse_ordinal",
    "select_media",
    "title_case",
]
