"""mediaunpack - unpack downloaded TV and movie releases into a media library."""

from __future__ import annotations

__version__ = "0.3.0"

from .core import ReleaseKind, RunReport, unpack_release  # noqa: E402

__all__ = ["__version__", "ReleaseKind", "RunReport", "unpack_release"]
