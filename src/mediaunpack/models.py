"""Value types passed between the stages of an unpack run."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from .errors import UnpackError


class EntryKind(str, Enum):
    """Classification of a file found under the source root."""

    VIDEO = "video"
    ARCHIVE_VOLUME = "archive_volume"
    SIDECAR = "sidecar"
    UNKNOWN = "unknown"


class ReleaseKind(str, Enum):
    """What a release contains; decides the destination layout."""

    EPISODE = "episode"
    MOVIE = "movie"

    @classmethod
    def parse(cls, value: "str | ReleaseKind") -> "ReleaseKind":
        if isinstance(value, ReleaseKind):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as exc:
            raise ValueError(f"Unknown release kind: {value!r}") from exc


@dataclass(frozen=True)
class Entry:
    """A classified file under the source root.

    Attributes:
        path: Absolute path of the file
        relative: Path relative to the source root
        size: Size in bytes (0 when unreadable)
        kind: Classification result
        note: Classification warning, if any
    """

    path: Path
    relative: Path
    size: int
    kind: EntryKind
    note: str | None = None

    @property
    def name(self) -> str:
        return self.path.name


@dataclass(frozen=True)
class ArchiveGroup:
    """Represents a collection of volumes belonging to the same archive.

    Attributes:
        key: Normalized base name shared by all volumes
        format_name: Name of the archive format handling this group
        volumes: (index, entry) pairs sorted by index
        declared_total: Volume count declared by the format, when known
        complete: True when every volume is present
        reason: Why the group is incomplete
    """

    key: str
    format_name: str
    volumes: tuple[tuple[int, Entry], ...]
    declared_total: int | None = None
    complete: bool = True
    reason: str | None = None

    @property
    def primary(self) -> Path:
        """First volume, the one extraction tools are pointed at."""
        return self.volumes[0][1].path

    @property
    def members(self) -> tuple[Path, ...]:
        return tuple(entry.path for _index, entry in self.volumes)

    @property
    def indices(self) -> tuple[int, ...]:
        return tuple(index for index, _entry in self.volumes)

    @property
    def part_count(self) -> int:
        """Number of archive parts in this group."""
        return len(self.volumes)

    @property
    def total_size(self) -> int:
        return sum(entry.size for _index, entry in self.volumes)

    @property
    def relative_dir(self) -> Path:
        """Directory of the group relative to the scanned root."""
        return self.volumes[0][1].relative.parent

    @property
    def label(self) -> str:
        rel = self.relative_dir
        return self.key if rel == Path(".") else f"{rel.as_posix()}/{self.key}"


@dataclass(frozen=True)
class StagedItem:
    """A file ready for selection: extracted into staging or a loose source file.

    Attributes:
        path: Where the file currently lives
        origin: Group label, or "loose" for files found directly in the source
        relative: Path relative to the release root (directories the source exposed)
        kind: Kind inferred from the file name
        size: Size in bytes
        owned: True when the run owns the file (staging); loose files are only read
        origin_name: Name the release used for this file (archive base name or file stem)
    """

    path: Path
    origin: str
    relative: Path
    kind: EntryKind
    size: int
    owned: bool = True
    origin_name: str = ""


@dataclass(frozen=True)
class MediaItem:
    """A selected file together with its place in the destination."""

    source: Path
    target: Path
    release_kind: ReleaseKind
    size: int
    role: str = "primary"
    ordinal: int | None = None
    season: int | None = None
    unordered: bool = False
    owned: bool = True


@dataclass(frozen=True)
class ReportIssue:
    """A failure or warning recorded against an entry, group or item."""

    subject: str
    kind: str
    reason: str

    @classmethod
    def from_error(cls, error: UnpackError, *, subject: str | None = None) -> "ReportIssue":
        return cls(
            subject=subject or error.subject or "",
            kind=error.kind,
            reason=error.message,
        )


@dataclass(frozen=True)
class SkippedEntry:
    """A file that was looked at but deliberately not placed."""

    path: Path
    reason: str


@dataclass(frozen=True)
class PlacedItem:
    """A media file committed into the destination."""

    source: Path
    destination: Path
    role: str
    ordinal: int | None = None
    unordered: bool = False
    renamed: bool = False


@dataclass(frozen=True)
class PlacementOutcome:
    """Result of committing one media item."""

    item: MediaItem
    action: str
    destination: Path | None = None
    error: UnpackError | None = None

    @property
    def placed(self) -> bool:
        return self.action in {"placed", "renamed"}


@dataclass(frozen=True)
class RunReport:
    """Everything one run did. Built once, at the end of the run."""

    run_id: str
    source: Path
    destination: Path
    release_kind: ReleaseKind
    placed: tuple[PlacedItem, ...] = ()
    skipped: tuple[SkippedEntry, ...] = ()
    failures: tuple[ReportIssue, ...] = ()
    warnings: tuple[ReportIssue, ...] = ()
    cancelled: bool = False

    @property
    def ok(self) -> bool:
        """True when nothing failed. An empty run is still ok."""
        return not self.failures and not self.cancelled

    def failures_of(self, kind: str) -> list[ReportIssue]:
        return [issue for issue in self.failures if issue.kind == kind]

    def skipped_with(self, reason_prefix: str) -> list[SkippedEntry]:
        return [entry for entry in self.skipped if entry.reason.startswith(reason_prefix)]


@dataclass
class ReportBuilder:
    """Accumulates report content during a run; frozen by :meth:`build`."""

    placed: list[PlacedItem] = field(default_factory=list)
    skipped: list[SkippedEntry] = field(default_factory=list)
    failures: list[ReportIssue] = field(default_factory=list)
    warnings: list[ReportIssue] = field(default_factory=list)
    cancelled: bool = False

    def fail(self, error: UnpackError, *, subject: str | None = None) -> None:
        self.failures.append(ReportIssue.from_error(error, subject=subject))

    def warn(self, error: UnpackError, *, subject: str | None = None) -> None:
        self.warnings.append(ReportIssue.from_error(error, subject=subject))

    def skip(self, path: Path, reason: str) -> None:
        self.skipped.append(SkippedEntry(path=path, reason=reason))

    def build(
        self,
        *,
        run_id: str,
        source: Path,
        destination: Path,
        release_kind: ReleaseKind,
    ) -> RunReport:
        return RunReport(
            run_id=run_id,
            source=source,
            destination=destination,
            release_kind=release_kind,
            placed=tuple(self.placed),
            skipped=tuple(self.skipped),
            failures=tuple(self.failures),
            warnings=tuple(self.warnings),
            cancelled=self.cancelled,
        )


__all__ = [
    "EntryKind",
    "ReleaseKind",
    "Entry",
    "ArchiveGroup",
    "StagedItem",
    "MediaItem",
    "ReportIssue",
    "SkippedEntry",
    "PlacedItem",
    "PlacementOutcome",
    "RunReport",
    "ReportBuilder",
]
