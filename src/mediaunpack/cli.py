from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Sequence

from . import __version__
from .config import ConfigurationError, Settings, load_settings
from .core import unpack_release
from .errors import FatalRunError
from .extraction import resolve_seven_zip_command
from .models import ReleaseKind, RunReport

_LOGGER = logging.getLogger(__name__)


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Unpack a downloaded episode or movie release into a destination directory"
    )
    parser.add_argument(
        "-s",
        "--source-directory",
        type=Path,
        required=True,
        help="Release directory to unpack",
    )
    parser.add_argument(
        "-d",
        "--destination-directory",
        type=Path,
        required=True,
        help="Destination directory for the finished media files",
    )
    parser.add_argument(
        "-k",
        "--kind",
        choices=["auto", "episode", "movie"],
        default="auto",
        help="Release kind (default: infer from file names)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to a TOML configuration file (default: built-in settings)",
    )
    parser.add_argument(
        "--workers",
        type=int,
        help="Number of archive groups extracted in parallel",
    )
    parser.add_argument(
        "--min-video-size",
        type=int,
        help="Override the minimum size in bytes for a video to count as media",
    )
    parser.add_argument(
        "--rename",
        action=argparse.BooleanOptionalAction,
        help="Rename media to 'Show - S01E02' / 'Title (Year)'",
    )
    parser.add_argument(
        "--keep-sidecars",
        action=argparse.BooleanOptionalAction,
        help="Place subtitle and metadata files next to the media",
    )
    parser.add_argument(
        "--seven-zip",
        type=Path,
        help="Path or executable name for 7-Zip used to extract RAR and 7z archives",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default="INFO",
        help="Set the root log level",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        help="Also write the log to this file",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    return parser.parse_args(argv)


def load_and_merge_settings(args: argparse.Namespace) -> Settings:
    settings = load_settings(args.config)

    media = settings.media
    if args.min_video_size is not None:
        if args.min_video_size < 0:
            raise ConfigurationError("Minimum video size cannot be negative")
        media = replace(media, min_video_size=args.min_video_size)
    if args.rename is not None:
        media = replace(media, rename=args.rename)
    if args.keep_sidecars is not None:
        media = replace(media, keep_sidecars=args.keep_sidecars)

    extraction = settings.extraction
    if args.seven_zip is not None:
        extraction = replace(extraction, seven_zip_path=args.seven_zip)

    workers = settings.workers
    if args.workers is not None:
        if args.workers < 1:
            raise ConfigurationError("Workers must be at least 1")
        workers = args.workers

    return replace(settings, media=media, extraction=extraction, workers=workers)


def configure_logging(level: str, log_file: Path | None) -> None:
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        handlers.append(file_handler)
    logging.basicConfig(level=getattr(logging, level), format="%(message)s", handlers=handlers)


def _log_path_summary(
    log_fn, label: str, lines: Sequence[str], *, limit: int = 10
) -> None:
    if not lines:
        return
    log_fn("%s (%s)", label, len(lines))
    for line in lines[:limit]:
        log_fn("  %s", line)
    remaining = len(lines) - limit
    if remaining > 0:
        log_fn("  ... %s more", remaining)


def log_report(report: RunReport) -> None:
    _LOGGER.info("Release kind: %s", report.release_kind.value)
    placed_lines = []
    for item in report.placed:
        flags = []
        if item.ordinal is not None:
            flags.append(f"#{item.ordinal}")
        if item.unordered:
            flags.append("unordered")
        if item.renamed:
            flags.append("renamed")
        if item.role != "primary":
            flags.append(item.role)
        suffix = f" [{', '.join(flags)}]" if flags else ""
        placed_lines.append(f"{item.destination}{suffix}")
    _log_path_summary(_LOGGER.info, "Placed", placed_lines)
    _log_path_summary(
        _LOGGER.info,
        "Skipped",
        [f"{entry.path.name}: {entry.reason}" for entry in report.skipped],
    )
    _log_path_summary(
        _LOGGER.warning,
        "Warnings",
        [f"{issue.kind} {issue.subject}: {issue.reason}" for issue in report.warnings],
    )
    _log_path_summary(
        _LOGGER.error,
        "Failures",
        [f"{issue.kind} {issue.subject}: {issue.reason}" for issue in report.failures],
    )


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    try:
        configure_logging(args.log_level, args.log_file)
    except OSError as exc:
        print(f"Cannot open log file: {exc}", file=sys.stderr)
        return 1

    try:
        settings = load_and_merge_settings(args)
    except (ConfigurationError, FileNotFoundError) as exc:
        _LOGGER.error("Configuration error: %s", exc)
        return 1

    if resolve_seven_zip_command(settings.extraction.seven_zip_path) is None:
        _LOGGER.warning(
            "7-Zip executable not found: RAR, 7z and split archives cannot be extracted."
        )

    kind = None if args.kind == "auto" else ReleaseKind.parse(args.kind)
    try:
        report = unpack_release(
            args.source_directory,
            args.destination_directory,
            kind,
            settings,
        )
    except FatalRunError as exc:
        _LOGGER.error("Fatal: %s", exc)
        return 1
    except KeyboardInterrupt:
        _LOGGER.info("Interrupted; staging removed.")
        return 130

    log_report(report)
    if not report.ok:
        return 2
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())

__all__ = ["main"]
