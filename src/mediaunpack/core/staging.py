"""Run-scoped staging area with guaranteed removal."""

from __future__ import annotations

import logging
import shutil
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

from ..errors import FatalRunError

_logger = logging.getLogger(__name__)

STAGING_PREFIX = ".mediaunpack-staging-"


@dataclass(frozen=True)
class StagingArea:
    """A transient directory owned by exactly one run."""

    root: Path
    run_id: str

    def group_dir(self, name: str) -> Path:
        """Group-scoped subdirectory; groups never share one."""
        path = self.root / name
        path.mkdir(parents=True, exist_ok=False)
        return path


@contextmanager
def staging_area(parent: Path, run_id: str) -> Iterator[StagingArea]:
    """Allocate a staging directory below ``parent`` and remove it on exit.

    Removal happens on every exit path, including exceptions and
    cancellation.

    Raises:
        FatalRunError: If the staging directory cannot be created
    """
    try:
        parent.mkdir(parents=True, exist_ok=True)
        root = Path(tempfile.mkdtemp(prefix=f"{STAGING_PREFIX}{run_id}-", dir=parent))
    except OSError as exc:
        raise FatalRunError(f"cannot allocate staging area in {parent}: {exc}") from exc

    _logger.debug("Allocated staging area %s", root)
    try:
        yield StagingArea(root=root, run_id=run_id)
    finally:
        _remove_tree(root)


def _remove_tree(root: Path) -> None:
    errors: list[str] = []

    def on_error(_func, path, exc) -> None:
        errors.append(f"{path}: {exc}")

    shutil.rmtree(root, onexc=on_error)
    if errors:
        _logger.error("Staging area %s was not fully removed: %s", root, "; ".join(errors[:5]))
    else:
        _logger.debug("Removed staging area %s", root)


__all__ = ["STAGING_PREFIX", "StagingArea", "staging_area"]
