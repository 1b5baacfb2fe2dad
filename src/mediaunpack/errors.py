"""Error taxonomy shared by every stage of an unpack run.

Only :class:`FatalRunError` escapes :func:`mediaunpack.core.unpack_release`.
Every other error is isolated to one entry, group or item and recorded in the
run report.
"""

from __future__ import annotations


class UnpackError(RuntimeError):
    """Base class for all unpack errors."""

    def __init__(self, message: str, *, subject: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.subject = subject

    @property
    def kind(self) -> str:
        return type(self).__name__

    def __str__(self) -> str:
        if self.subject:
            return f"{self.subject}: {self.message}"
        return self.message


class ClassificationWarning(UnpackError):
    """An entry could not be classified cleanly (unreadable, symlink loop...)."""


class IncompleteArchiveGroup(UnpackError):
    """A multi-volume archive is missing volumes and is not extracted."""


class ExtractionFailure(UnpackError):
    """Extraction of one archive group failed."""


class ExtractionTimeout(ExtractionFailure):
    """A group exceeded the per-group extraction timeout."""


class NestingTooDeep(ExtractionFailure):
    """Archives nested deeper than the configured maximum."""


class SelectionAmbiguity(UnpackError):
    """More than one candidate qualified where only one is placed."""


class PlacementFailure(UnpackError):
    """A media item could not be moved into the destination."""


class FatalRunError(UnpackError):
    """The whole run is meaningless (bad source, destination or staging)."""


__all__ = [
    "UnpackError",
    "ClassificationWarning",
    "IncompleteArchiveGroup",
    "ExtractionFailure",
    "ExtractionTimeout",
    "NestingTooDeep",
    "SelectionAmbiguity",
    "PlacementFailure",
    "FatalRunError",
]
