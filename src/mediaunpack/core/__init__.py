"""Core business logic for unpacking a release."""

from __future__ import annotations

from ..models import ReleaseKind, RunReport
from .classifier import classify, infer_release_kind
from .placement import PathLocks, commit, place_item
from .runner import RunContext, unpack_release
from .selector import Selection, select_media
from .staging import StagingArea, staging_area

__all__ = [
    # Main entry point
    "unpack_release",
    "RunContext",
    "RunReport",
    "ReleaseKind",
    # Phases
    "classify",
    "infer_release_kind",
    "select_media",
    "Selection",
    "commit",
    "place_item",
    "PathLocks",
    # Staging
    "StagingArea",
    "staging_area",
]
