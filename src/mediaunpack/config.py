"""Configuration handling for mediaunpack."""

from __future__ import annotations

import re
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import psutil

from .extraction.archive_constants import (
    ARCHIVE_FORMAT_NAMES,
    DEFAULT_MIN_VIDEO_SIZE,
    DEFAULT_ORDINAL_PATTERNS,
    DEFAULT_SAMPLE_PATTERN,
    DEFAULT_SIDECAR_EXTENSIONS,
    DEFAULT_VIDEO_EXTENSIONS,
)


class ConfigurationError(RuntimeError):
    """Raised when configuration values are missing or invalid."""


@dataclass(frozen=True)
class MediaRules:
    """Rules deciding what counts as media, sidecar or junk."""

    video_extensions: frozenset[str] = DEFAULT_VIDEO_EXTENSIONS
    sidecar_extensions: frozenset[str] = DEFAULT_SIDECAR_EXTENSIONS
    min_video_size: int = DEFAULT_MIN_VIDEO_SIZE
    sample_pattern: str | None = DEFAULT_SAMPLE_PATTERN
    ordinal_patterns: tuple[str, ...] = DEFAULT_ORDINAL_PATTERNS
    movie_alternate_pattern: str | None = None
    keep_sidecars: bool = False
    rename: bool = False

    def sample_regex(self) -> re.Pattern[str] | None:
        if not self.sample_pattern:
            return None
        return re.compile(self.sample_pattern, re.IGNORECASE)

    def ordinal_regexes(self) -> tuple[re.Pattern[str], ...]:
        return tuple(re.compile(p, re.IGNORECASE) for p in self.ordinal_patterns)

    def alternate_regex(self) -> re.Pattern[str] | None:
        if not self.movie_alternate_pattern:
            return None
        return re.compile(self.movie_alternate_pattern, re.IGNORECASE)


@dataclass(frozen=True)
class ExtractionLimits:
    """Bounds applied to every archive group extraction."""

    max_nesting_depth: int = 3
    group_timeout: float | None = 3600.0
    max_expanded_bytes: int | None = None
    formats: tuple[str, ...] = ARCHIVE_FORMAT_NAMES
    probe_volume_count: bool = True
    seven_zip_path: Path | None = None
    cpu_cores: int = 2


@dataclass(frozen=True)
class Settings:
    """High level settings controlling one unpack run."""

    media: MediaRules = field(default_factory=MediaRules)
    extraction: ExtractionLimits = field(default_factory=ExtractionLimits)
    workers: int | None = None
    max_scan_depth: int | None = None
    staging_parent: Path | None = None

    @property
    def worker_count(self) -> int:
        if self.workers:
            return self.workers
        return max(1, psutil.cpu_count(logical=True) or 1)

    @classmethod
    def from_mapping(cls, data: dict[str, Any], *, base_path: Path | None = None) -> "Settings":
        base_path = base_path or Path.cwd()

        def resolve_path(value: Any, *, field: str) -> Path | None:
            if value is None:
                return None
            if not isinstance(value, (str, Path)):
                raise ConfigurationError(f"Path '{field}' must be a string-like value")
            text = str(value).strip()
            if not text:
                return None
            path = Path(text)
            if not path.is_absolute():
                path = (base_path / path).resolve()
            return path

        media_data = _section(data, "media")
        media = MediaRules(
            video_extensions=_read_extensions(
                media_data, "video_extensions", default=DEFAULT_VIDEO_EXTENSIONS
            ),
            sidecar_extensions=_read_extensions(
                media_data, "sidecar_extensions", default=DEFAULT_SIDECAR_EXTENSIONS
            ),
            min_video_size=_read_int(
                media_data, "min_video_size", default=DEFAULT_MIN_VIDEO_SIZE, minimum=0
            ),
            sample_pattern=_read_pattern(
                media_data, "sample_pattern", default=DEFAULT_SAMPLE_PATTERN
            ),
            ordinal_patterns=_read_patterns(
                media_data, "ordinal_patterns", default=DEFAULT_ORDINAL_PATTERNS
            ),
            movie_alternate_pattern=_read_pattern(
                media_data, "movie_alternate_pattern", default=None
            ),
            keep_sidecars=_read_bool(media_data, "keep_sidecars", default=False),
            rename=_read_bool(media_data, "rename", default=False),
        )

        extraction_data = _section(data, "extraction")
        formats = tuple(
            name.lower()
            for name in _read_str_list(
                extraction_data, "formats", default=ARCHIVE_FORMAT_NAMES
            )
        )
        unknown = sorted(set(formats) - set(ARCHIVE_FORMAT_NAMES))
        if unknown:
            raise ConfigurationError(
                "Unknown archive format(s) in 'formats': " + ", ".join(unknown)
            )
        timeout = _read_int(extraction_data, "group_timeout_seconds", default=3600, minimum=0)
        max_expanded = _read_int(extraction_data, "max_expanded_bytes", default=0, minimum=0)

        seven_zip_path: Path | None = None
        tools_data = _section(data, "tools")
        if "seven_zip" in tools_data:
            raw_value = tools_data["seven_zip"]
            if isinstance(raw_value, (str, Path)):
                raw_text = str(raw_value).strip()
                if raw_text:
                    candidate = Path(raw_text)
                    if candidate.is_absolute() or any(sep in raw_text for sep in ("/", "\\", ":")):
                        if not candidate.is_absolute():
                            candidate = (base_path / candidate).resolve()
                        seven_zip_path = candidate
                    else:
                        seven_zip_path = candidate

        extraction = ExtractionLimits(
            max_nesting_depth=_read_int(
                extraction_data, "max_nesting_depth", default=3, minimum=0
            ),
            group_timeout=float(timeout) if timeout else None,
            max_expanded_bytes=max_expanded or None,
            formats=formats,
            probe_volume_count=_read_bool(
                extraction_data, "probe_volume_count", default=True
            ),
            seven_zip_path=seven_zip_path,
            cpu_cores=_read_int(extraction_data, "cpu_cores", default=2, minimum=1),
        )

        run_data = _section(data, "run")
        workers = _read_int(run_data, "workers", default=0, minimum=0)
        scan_depth = _read_int(run_data, "max_scan_depth", default=0, minimum=0)

        return cls(
            media=media,
            extraction=extraction,
            workers=workers or None,
            max_scan_depth=scan_depth or None,
            staging_parent=resolve_path(run_data.get("staging_parent"), field="staging_parent"),
        )


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    section = data.get(name)
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ConfigurationError(f"'{name}' section must be a mapping")
    return section


def _read_int(data: dict[str, Any], key: str, *, default: int, minimum: int | None = None) -> int:
    value = data.get(key, default)
    if isinstance(value, bool):
        raise ConfigurationError(f"Configuration value '{key}' must be an integer")
    try:
        number = int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Configuration value '{key}' must be an integer") from exc
    if minimum is not None and number < minimum:
        raise ConfigurationError(f"Configuration value '{key}' must be >= {minimum}")
    return number


def _read_bool(data: dict[str, Any], key: str, *, default: bool = False) -> bool:
    if key not in data:
        return default
    value = data[key]
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in {"1", "true", "yes", "y", "on"}:
            return True
        if normalized in {"0", "false", "no", "n", "off"}:
            return False
    raise ConfigurationError(f"Cannot interpret value '{value!r}' for '{key}' as boolean")


def _read_str_list(
    data: dict[str, Any], key: str, *, default: tuple[str, ...]
) -> tuple[str, ...]:
    if key not in data:
        return default
    value = data[key]
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ConfigurationError(f"Configuration value '{key}' must be a list of strings")
    return tuple(item.strip() for item in value if item.strip())


def _read_extensions(
    data: dict[str, Any], key: str, *, default: frozenset[str]
) -> frozenset[str]:
    if key not in data:
        return default
    values = _read_str_list(data, key, default=())
    return frozenset(
        (item if item.startswith(".") else f".{item}").lower() for item in values
    )


def _read_pattern(data: dict[str, Any], key: str, *, default: str | None) -> str | None:
    if key not in data:
        return default
    value = data[key]
    if not isinstance(value, str):
        raise ConfigurationError(f"Configuration value '{key}' must be a string")
    if not value.strip():
        return None
    _compile_or_raise(value, key)
    return value


def _read_patterns(
    data: dict[str, Any], key: str, *, default: tuple[str, ...]
) -> tuple[str, ...]:
    patterns = _read_str_list(data, key, default=default)
    for pattern in patterns:
        regex = _compile_or_raise(pattern, key)
        if "ordinal" not in regex.groupindex:
            raise ConfigurationError(
                f"Pattern '{pattern}' in '{key}' must define an 'ordinal' group"
            )
    return patterns


def _compile_or_raise(pattern: str, key: str) -> re.Pattern[str]:
    try:
        return re.compile(pattern, re.IGNORECASE)
    except re.error as exc:
        raise ConfigurationError(f"Invalid regular expression for '{key}': {exc}") from exc


def load_settings(config_file: Path | None) -> Settings:
    """Load configuration from a TOML file.

    ``None`` yields the built-in defaults.
    """

    if config_file is None:
        return Settings()

    if not config_file.exists():
        raise FileNotFoundError(f"Configuration file '{config_file}' does not exist")

    with config_file.open("rb") as fh:
        try:
            data = tomllib.load(fh)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigurationError(f"Invalid TOML in '{config_file}': {exc}") from exc

    return Settings.from_mapping(data, base_path=config_file.parent)


__all__ = [
    "ConfigurationError",
    "MediaRules",
    "ExtractionLimits",
    "Settings",
    "load_settings",
]
