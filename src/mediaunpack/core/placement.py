"""Move selected media into the destination without exposing partial files."""

from __future__ import annotations

import errno
import hashlib
import logging
import os
import shutil
import threading
import uuid
from concurrent.futures import Executor
from pathlib import Path
from typing import Callable, Sequence

from ..errors import PlacementFailure
from ..models import MediaItem, PlacementOutcome
from .path_utils import suffixed_destination, temporary_sibling

_logger = logging.getLogger(__name__)

_HASH_CHUNK = 1024 * 1024
DIGEST_LENGTH = 8


class PathLocks:
    """One lock per destination path; serializes only the compare/rename step."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}

    def lock_for(self, path: Path) -> threading.Lock:
        key = os.path.normcase(os.path.abspath(path))
        with self._guard:
            return self._locks.setdefault(key, threading.Lock())


def content_digest(path: Path, *, length: int = DIGEST_LENGTH) -> str:
    """Short SHA-1 of a file's content, used to disambiguate colliding names."""
    digest = hashlib.sha1()
    with path.open("rb") as fh:
        for chunk in iter(lambda: fh.read(_HASH_CHUNK), b""):
            digest.update(chunk)
    return digest.hexdigest()[:length]


def resolve_collision(
    destination: Path, size: int, digest: Callable[[], str]
) -> tuple[Path, str]:
    """Decide where an item of ``size`` bytes goes when ``destination`` may exist.

    Returns:
        Tuple of (final_path, action) where action is "placed", "renamed" or
        "identical" (nothing to do, an equally sized file is already there)

    Raises:
        PlacementFailure: If both the name and the content-suffixed name are
            taken by files of a different size
    """
    if not destination.exists():
        return destination, "placed"
    if destination.stat().st_size == size:
        return destination, "identical"
    alternative = suffixed_destination(destination, digest())
    if not alternative.exists():
        return alternative, "renamed"
    if alternative.stat().st_size == size:
        return alternative, "identical"
    raise PlacementFailure(
        f"unresolved collision: {destination.name} and {alternative.name} both exist with different content"
    )


def _transfer(item: MediaItem, temporary: Path) -> None:
    """Move (staged) or copy (loose source file) ``item`` to ``temporary``."""
    if not item.owned:
        shutil.copy2(item.source, temporary)
        return
    try:
        os.rename(item.source, temporary)
    except OSError as exc:
        if exc.errno != errno.EXDEV:
            raise
        # Staging on another filesystem: copy then remove the staged file
        shutil.copy2(item.source, temporary)
        item.source.unlink()


def place_item(
    item: MediaItem,
    destination_root: Path,
    *,
    locks: PathLocks,
    logger: logging.Logger | None = None,
) -> PlacementOutcome:
    """Commit one media item below ``destination_root``.

    Data is written to a hidden temporary file in the target directory first
    and renamed to its final name under the destination-path lock, so a
    partial file is never visible under the final name.

    Args:
        item: Selected media item
        destination_root: Root of the destination layout
        locks: Per-destination-path locks shared by the run
        logger: Optional logger

    Returns:
        PlacementOutcome; failures are returned, not raised
    """
    if logger is None:
        logger = _logger

    destination = destination_root / item.target
    temporary = temporary_sibling(destination, uuid.uuid4().hex[:8])
    digest_cache: list[str] = []

    def digest() -> str:
        if not digest_cache:
            source = temporary if temporary.exists() else item.source
            digest_cache.append(content_digest(source))
        return digest_cache[0]

    try:
        destination.parent.mkdir(parents=True, exist_ok=True)

        with locks.lock_for(destination):
            final, action = resolve_collision(destination, item.size, digest)
        if action == "identical":
            logger.info("Skipping %s: identical file already at %s", item.source.name, final)
            return PlacementOutcome(item=item, action="identical", destination=final)

        _transfer(item, temporary)

        with locks.lock_for(destination):
            # Re-check: another item may have claimed the name meanwhile
            final, action = resolve_collision(destination, item.size, digest)
            if action == "identical":
                temporary.unlink()
                logger.info("Skipping %s: identical file already at %s", item.source.name, final)
                return PlacementOutcome(item=item, action="identical", destination=final)
            os.replace(temporary, final)
    except PlacementFailure as exc:
        _discard(temporary, logger)
        exc.subject = exc.subject or str(item.target)
        logger.error("Placement of %s failed: %s", item.source.name, exc.message)
        return PlacementOutcome(item=item, action="failed", error=exc)
    except OSError as exc:
        _discard(temporary, logger)
        error = PlacementFailure(f"filesystem error: {exc}", subject=str(item.target))
        logger.error("Placement of %s failed: %s", item.source.name, exc)
        return PlacementOutcome(item=item, action="failed", error=error)

    if action == "renamed":
        logger.info("Placed %s as %s (name collision)", item.source.name, final)
    else:
        logger.info("Placed %s → %s", item.source.name, final)
    return PlacementOutcome(item=item, action=action, destination=final)


def _discard(temporary: Path, logger: logging.Logger) -> None:
    try:
        temporary.unlink(missing_ok=True)
    except OSError as exc:
        logger.warning("Could not remove temporary file %s: %s", temporary, exc)


def commit(
    items: Sequence[MediaItem],
    destination_root: Path,
    *,
    locks: PathLocks | None = None,
    executor: Executor | None = None,
) -> list[PlacementOutcome]:
    """Place every item; one outcome per item, in input order.

    A failing item never stops the others. With ``executor`` the items are
    placed concurrently.
    """
    locks = locks or PathLocks()
    if executor is None:
        return [place_item(item, destination_root, locks=locks) for item in items]
    futures = [
        executor.submit(place_item, item, destination_root, locks=locks) for item in items
    ]
    return [future.result() for future in futures]


__all__ = [
    "DIGEST_LENGTH",
    "PathLocks",
    "commit",
    "content_digest",
    "place_item",
    "resolve_collision",
]
