"""Run coordinator: one source release in, one report out."""

from __future__ import annotations

import logging
import os
import threading
import uuid
from collections import deque
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from ..config import Settings
from ..errors import (
    ClassificationWarning,
    ExtractionFailure,
    FatalRunError,
    IncompleteArchiveGroup,
)
from ..extraction.archive_detection import SMALL_VIDEO_NOTE, group_entries
from ..extraction.archive_extraction import extract_group, staging_dirname
from ..extraction.archive_formats import FormatRegistry
from ..models import (
    ArchiveGroup,
    Entry,
    EntryKind,
    MediaItem,
    PlacedItem,
    ReleaseKind,
    ReportBuilder,
    ReportIssue,
    RunReport,
    StagedItem,
)
from ..progress import ProgressTracker
from .classifier import classify, infer_release_kind
from .placement import PathLocks, commit
from .selector import select_media
from .staging import StagingArea, staging_area

_logger = logging.getLogger(__name__)


@dataclass
class RunContext:
    """State of one run, passed explicitly through every phase."""

    run_id: str
    source: Path
    destination: Path
    settings: Settings
    registry: FormatRegistry
    staging: StagingArea
    report: ReportBuilder
    cancel_event: threading.Event


def unpack_release(
    source: Path | str,
    destination: Path | str,
    release_kind: ReleaseKind | str | None = None,
    settings: Settings | None = None,
    *,
    cancel_event: threading.Event | None = None,
) -> RunReport:
    """Unpack the release in ``source`` into ``destination``.

    Phases run with strict barriers: every archive group is extracted (or has
    failed) before selection starts, and selection completes before anything
    is placed. Per-entry, per-group and per-item problems are collected in the
    returned report; callers must inspect it rather than assume success.

    Args:
        source: Release directory
        destination: Destination root; created when missing
        release_kind: Episode or movie; inferred from file names when None
        settings: Run settings (defaults when None)
        cancel_event: Set from another thread to stop the run early

    Returns:
        RunReport built once at the end of the run

    Raises:
        FatalRunError: Source unreadable, destination or staging unusable
    """
    settings = settings or Settings()
    source = Path(source).expanduser().resolve()
    destination = Path(destination).expanduser().resolve()
    kind_hint = ReleaseKind.parse(release_kind) if release_kind is not None else None
    cancel_event = cancel_event or threading.Event()

    _verify_source(source)
    _prepare_destination(destination)

    run_id = uuid.uuid4().hex[:8]
    report = ReportBuilder()
    registry = FormatRegistry.from_limits(settings.extraction)
    _logger.info("Run %s: %s → %s", run_id, source, destination)

    with staging_area(settings.staging_parent or destination, run_id) as staging:
        context = RunContext(
            run_id=run_id,
            source=source,
            destination=destination,
            settings=settings,
            registry=registry,
            staging=staging,
            report=report,
            cancel_event=cancel_event,
        )
        try:
            release = _run_phases(context, kind_hint)
        except BaseException:
            cancel_event.set()
            raise

    result = report.build(
        run_id=run_id, source=source, destination=destination, release_kind=release
    )
    _logger.info(
        "Run %s finished: %d placed, %d skipped, %d failure(s)",
        run_id,
        len(result.placed),
        len(result.skipped),
        len(result.failures),
    )
    return result


def _verify_source(source: Path) -> None:
    if not source.exists():
        raise FatalRunError("source directory does not exist", subject=str(source))
    if not source.is_dir():
        raise FatalRunError("source is not a directory", subject=str(source))
    if not os.access(source, os.R_OK | os.X_OK):
        raise FatalRunError("source directory is not readable", subject=str(source))


def _prepare_destination(destination: Path) -> None:
    try:
        destination.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise FatalRunError(
            f"destination cannot be created: {exc}", subject=str(destination)
        ) from exc
    if not destination.is_dir():
        raise FatalRunError("destination is not a directory", subject=str(destination))
    if not os.access(destination, os.W_OK | os.X_OK):
        raise FatalRunError("destination is not writable", subject=str(destination))


def _run_phases(context: RunContext, kind_hint: ReleaseKind | None) -> ReleaseKind:
    settings = context.settings
    report = context.report

    try:
        entries = classify(
            context.source,
            settings.media,
            context.registry,
            max_depth=settings.max_scan_depth,
            exclude=(context.destination, context.staging.root),
        )
    except OSError as exc:
        raise FatalRunError(
            f"source directory cannot be read: {exc}", subject=str(context.source)
        ) from exc

    release_kind = kind_hint or infer_release_kind(entries, context.source)
    _logger.info(
        "Classified %d file(s) in %s as %s release", len(entries), context.source.name, release_kind.value
    )
    loose_other = _record_classification(entries, report)

    groups, loose_videos = group_entries(entries, context.registry)
    complete = [group for group in groups if group.complete]
    for group in groups:
        if not group.complete:
            report.fail(IncompleteArchiveGroup(group.reason or "incomplete", subject=group.label))

    staged = _extract_all(context, complete)

    if context.cancel_event.is_set():
        report.cancelled = True
        report.failures.append(
            ReportIssue(
                subject=str(context.source),
                kind="RunCancelled",
                reason="run cancelled; selection and placement skipped",
            )
        )
        return release_kind

    selection = select_media(staged, loose_videos + loose_other, release_kind, settings.media)
    report.skipped.extend(selection.skipped)
    for warning in selection.warnings:
        report.warn(warning)

    _place_all(context, selection.items)
    return release_kind


def _record_classification(entries: list[Entry], report: ReportBuilder) -> list[Entry]:
    """Record unknown entries; return loose sidecars for the selector."""
    sidecars: list[Entry] = []
    for entry in entries:
        if entry.kind is EntryKind.UNKNOWN and (entry.note or "").startswith(SMALL_VIDEO_NOTE):
            report.skip(entry.path, f"sample: {entry.note}")
        elif entry.kind is EntryKind.UNKNOWN:
            if entry.note:
                report.warn(ClassificationWarning(entry.note, subject=entry.relative.as_posix()))
            report.skip(entry.path, f"junk: {entry.note or 'not a media file'}")
        elif entry.kind is EntryKind.SIDECAR:
            sidecars.append(entry)
    return sidecars


def _extract_all(context: RunContext, groups: list[ArchiveGroup]) -> list[StagedItem]:
    """Extract groups on a bounded pool; return staged items in group order."""
    if not groups:
        return []

    settings = context.settings
    workers = settings.worker_count
    tracker = ProgressTracker(len(groups), label="Extracting archive groups")
    tracker.start(_logger, f"with {workers} worker(s)")

    queue = deque(enumerate(groups, start=1))
    in_flight: dict[Future[list[StagedItem]], tuple[int, ArchiveGroup]] = {}
    results: dict[int, list[StagedItem]] = {}

    with ThreadPoolExecutor(
        max_workers=workers, thread_name_prefix=f"unpack-{context.run_id}"
    ) as executor:
        try:
            while queue or in_flight:
                while queue and len(in_flight) < workers and not context.cancel_event.is_set():
                    position, group = queue.popleft()
                    try:
                        target = context.staging.group_dir(staging_dirname(position, group))
                    except OSError as exc:
                        context.report.fail(
                            ExtractionFailure(
                                f"cannot create staging directory: {exc}", subject=group.label
                            )
                        )
                        tracker.advance(_logger, f"Failed {group.label}", failed=True)
                        continue
                    future = executor.submit(
                        extract_group,
                        group,
                        target,
                        registry=context.registry,
                        rules=settings.media,
                        limits=settings.extraction,
                        cancel_event=context.cancel_event,
                    )
                    in_flight[future] = (position, group)
                if not in_flight:
                    break

                done, _pending = wait(in_flight, return_when=FIRST_COMPLETED)
                for future in done:
                    position, group = in_flight.pop(future)
                    try:
                        results[position] = future.result()
                    except ExtractionFailure as exc:
                        context.report.fail(exc)
                        tracker.advance(_logger, f"Failed {group.label}: {exc.message}", failed=True)
                    except Exception as exc:  # isolate unexpected errors to their group
                        _logger.exception("Unexpected error extracting %s", group.label)
                        context.report.fail(
                            ExtractionFailure(f"unexpected error: {exc}", subject=group.label)
                        )
                        tracker.advance(_logger, f"Failed {group.label}", failed=True)
                    else:
                        tracker.advance(_logger, f"Extracted {group.label}")
        except BaseException:
            # in-flight groups must see cancellation before shutdown joins them
            context.cancel_event.set()
            raise

    tracker.finish(_logger)

    for _position, group in queue:
        context.report.fail(
            ExtractionFailure("not started: run cancelled", subject=group.label)
        )

    staged: list[StagedItem] = []
    for position in sorted(results):
        staged.extend(results[position])
    return staged


def _place_all(context: RunContext, items: Sequence[MediaItem]) -> None:
    if not items:
        _logger.info("Nothing to place")
        return

    report = context.report
    with ThreadPoolExecutor(
        max_workers=context.settings.worker_count,
        thread_name_prefix=f"place-{context.run_id}",
    ) as executor:
        outcomes = commit(
            items, context.destination, locks=PathLocks(), executor=executor
        )

    tracker = ProgressTracker(len(outcomes), label="Placing media")
    for outcome in outcomes:
        item = outcome.item
        if outcome.error is not None:
            report.fail(outcome.error)
            tracker.advance(_logger, f"Failed {item.target}: {outcome.error.message}", failed=True)
        elif outcome.action == "identical":
            report.skip(item.source, f"collision: identical file already at {outcome.destination}")
            tracker.advance(_logger, f"Already present {item.target}")
        else:
            tracker.advance(_logger, f"{outcome.action.capitalize()} {outcome.destination}")
            report.placed.append(
                PlacedItem(
                    source=item.source,
                    destination=outcome.destination,
                    role=item.role,
                    ordinal=item.ordinal,
                    unordered=item.unordered,
                    renamed=outcome.action == "renamed",
                )
            )
    tracker.finish(_logger)


__all__ = ["RunContext", "unpack_release"]
