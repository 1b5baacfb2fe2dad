"""Archive formats: volume naming, completeness and extraction per format.

Each format implements the same capability interface, :class:`ArchiveFormat`.
The grouper asks a format to parse volume names and to decide whether a
volume sequence is complete; the extraction engine asks it to extract an
ordered volume sequence into a directory. Nothing outside this module
branches on the archive format.
"""

from __future__ import annotations

import logging
import re
import shutil
import struct
import subprocess
import tarfile
import threading
import time
import zipfile
import zlib
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import IO, TYPE_CHECKING, Iterable, Sequence

from ..errors import ExtractionFailure, ExtractionTimeout
from ..models import Entry
from .archive_constants import (
    LISTED_SIZE_RE,
    LISTING_SEPARATOR,
    PART_VOLUME_RE,
    R_VOLUME_RE,
    RAR_SINGLE_RE,
    SEVEN_ZIP_RE,
    SPLIT_EXT_RE,
    SPLIT_INNER_SUFFIXES,
    TAR_SUFFIXES,
    VOLUMES_LINE_RE,
    ZIP_SINGLE_RE,
    ZIP_SPLIT_RE,
)

if TYPE_CHECKING:
    from ..config import ExtractionLimits

_logger = logging.getLogger(__name__)

_COPY_CHUNK = 1024 * 1024
_EOCD_SIGNATURE = b"PK\x05\x06"
_EOCD_STRUCT = struct.Struct("<4sHHHHIIH")
_EOCD_SEARCH = _EOCD_STRUCT.size + 0xFFFF


@dataclass(frozen=True)
class VolumeName:
    """Parsed name of one archive volume.

    Attributes:
        base: Normalized base name (lower case, volume suffix stripped)
        family: Naming scheme; volumes only group within the same family
        index: Volume index, or None for a volume that is last by convention
    """

    base: str
    family: str
    index: int | None


@dataclass(frozen=True)
class Completeness:
    """Outcome of checking a volume sequence."""

    complete: bool
    ordered: tuple[tuple[int, Entry], ...]
    reason: str | None = None
    declared_total: int | None = None


class ArchiveFormat(ABC):
    """Capability interface implemented once per archive format."""

    name: str = ""

    def __init__(
        self, *, seven_zip_path: Path | None = None, probe_volume_count: bool = False
    ) -> None:
        self.seven_zip_path = seven_zip_path
        self.probe_volume_count = probe_volume_count

    @abstractmethod
    def parse_volume(self, filename: str) -> VolumeName | None:
        """Return the parsed volume name, or None if the name is not ours."""

    def first_indices(self, family: str) -> tuple[int, ...]:
        """Indices a complete sequence of ``family`` may start with."""
        return (1,)

    def check_complete(
        self, volumes: Sequence[tuple[VolumeName, Entry]]
    ) -> Completeness:
        """Order ``volumes`` and decide whether the sequence is complete.

        The default rule: indices must form an unbroken run starting at one of
        the family's first indices. The highest index present is the last one.
        """
        ordered = _order(volumes)
        family = volumes[0][0].family
        reason = _contiguity_problem(
            [index for index, _entry in ordered], self.first_indices(family)
        )
        return Completeness(complete=reason is None, ordered=ordered, reason=reason)

    @abstractmethod
    def extract(
        self,
        volumes: Sequence[Path],
        target_dir: Path,
        *,
        limits: "ExtractionLimits",
        deadline: float | None = None,
        cancel_event: threading.Event | None = None,
    ) -> None:
        """Extract the ordered volume sequence into ``target_dir``."""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"


class RarFormat(ArchiveFormat):
    """RAR archives: ``name.partNN.rar`` and legacy ``name.rar`` + ``name.rNN``."""

    name = "rar"

    def parse_volume(self, filename: str) -> VolumeName | None:
        lower = filename.lower()
        part_match = PART_VOLUME_RE.match(lower)
        if part_match:
            return VolumeName(part_match.group("base"), "part", int(part_match.group("index")))
        r_match = R_VOLUME_RE.match(lower)
        if r_match:
            # .rar is the first volume, .r00 the second
            return VolumeName(r_match.group("base"), "legacy", int(r_match.group("index")) + 1)
        single_match = RAR_SINGLE_RE.match(lower)
        if single_match:
            return VolumeName(single_match.group("base"), "legacy", 0)
        return None

    def first_indices(self, family: str) -> tuple[int, ...]:
        return (0, 1) if family == "part" else (0,)

    def check_complete(
        self, volumes: Sequence[tuple[VolumeName, Entry]]
    ) -> Completeness:
        ordered = _order(volumes)
        family = volumes[0][0].family
        indices = [index for index, _entry in ordered]
        if family == "legacy" and indices and indices[0] != 0:
            return Completeness(False, ordered, "missing base .rar volume")
        reason = _contiguity_problem(indices, self.first_indices(family))
        if reason is not None:
            return Completeness(False, ordered, reason)

        if not self.probe_volume_count:
            return Completeness(True, ordered)

        declared, problem = get_rar_volume_count(
            ordered[0][1].path, seven_zip_path=self.seven_zip_path
        )
        if problem is not None:
            return Completeness(False, ordered, problem)
        if declared is not None and declared > len(ordered):
            return Completeness(
                False,
                ordered,
                f"archive declares {declared} volumes, found {len(ordered)}",
                declared_total=declared,
            )
        return Completeness(True, ordered, declared_total=declared)

    def extract(
        self,
        volumes: Sequence[Path],
        target_dir: Path,
        *,
        limits: "ExtractionLimits",
        deadline: float | None = None,
        cancel_event: threading.Event | None = None,
    ) -> None:
        extract_with_seven_zip(
            volumes[0], target_dir, limits=limits, deadline=deadline
        )


class ZipFormat(ArchiveFormat):
    """ZIP archives: single ``name.zip`` or split ``name.z01``..``name.zip``.

    In a split set the ``.zip`` file is the last volume; its end of central
    directory record carries the number of that disk, which declares the
    total volume count.
    """

    name = "zip"

    def parse_volume(self, filename: str) -> VolumeName | None:
        lower = filename.lower()
        split_match = ZIP_SPLIT_RE.match(lower)
        if split_match:
            return VolumeName(split_match.group("base"), "zip", int(split_match.group("index")))
        single_match = ZIP_SINGLE_RE.match(lower)
        if single_match:
            return VolumeName(single_match.group("base"), "zip", None)
        return None

    def check_complete(
        self, volumes: Sequence[tuple[VolumeName, Entry]]
    ) -> Completeness:
        finals = [entry for name, entry in volumes if name.index is None]
        numbered = [(name.index, entry) for name, entry in volumes if name.index is not None]
        numbered.sort(key=lambda item: (item[0], item[1].name.lower()))

        if len(finals) > 1:
            ordered = tuple(numbered) + tuple((0, entry) for entry in finals)
            return Completeness(False, ordered, "more than one final .zip volume")
        if not finals:
            return Completeness(False, tuple(numbered), "missing final .zip volume")

        final = finals[0]
        declared = read_zip_disk_count(final.path)
        if declared is None:
            last_index = (numbered[-1][0] + 1) if numbered else 1
        else:
            last_index = declared
        ordered = tuple(numbered) + ((last_index, final),)
        if not numbered and (declared is None or declared == 1):
            return Completeness(True, ordered, declared_total=declared)

        indices = [index for index, _entry in ordered]
        if declared is not None and numbered and numbered[-1][0] >= declared:
            return Completeness(
                False,
                ordered,
                f"volume .z{numbered[-1][0]:02d} beyond declared total of {declared}",
                declared_total=declared,
            )
        reason = _contiguity_problem(indices, (1,))
        return Completeness(reason is None, ordered, reason, declared_total=declared)

    def extract(
        self,
        volumes: Sequence[Path],
        target_dir: Path,
        *,
        limits: "ExtractionLimits",
        deadline: float | None = None,
        cancel_event: threading.Event | None = None,
    ) -> None:
        if len(volumes) > 1:
            # zipfile cannot read spanned sets; 7-Zip is pointed at the first volume
            extract_with_seven_zip(volumes[0], target_dir, limits=limits, deadline=deadline)
            return
        _extract_zip_file(
            volumes[0],
            target_dir,
            max_expanded_bytes=limits.max_expanded_bytes,
            deadline=deadline,
            cancel_event=cancel_event,
        )


class SevenZipFormat(ArchiveFormat):
    """Single volume ``name.7z`` archives, extracted with 7-Zip."""

    name = "7z"

    def parse_volume(self, filename: str) -> VolumeName | None:
        match = SEVEN_ZIP_RE.match(filename.lower())
        if match:
            return VolumeName(match.group("base"), "7z", 1)
        return None

    def extract(
        self,
        volumes: Sequence[Path],
        target_dir: Path,
        *,
        limits: "ExtractionLimits",
        deadline: float | None = None,
        cancel_event: threading.Event | None = None,
    ) -> None:
        extract_with_seven_zip(volumes[0], target_dir, limits=limits, deadline=deadline)


class TarFormat(ArchiveFormat):
    """Tar archives and their compressed variants (single volume)."""

    name = "tar"

    def parse_volume(self, filename: str) -> VolumeName | None:
        lower = filename.lower()
        for suffix in TAR_SUFFIXES:
            if lower.endswith(suffix) and len(lower) > len(suffix):
                return VolumeName(lower[: -len(suffix)], "tar", 1)
        return None

    def extract(
        self,
        volumes: Sequence[Path],
        target_dir: Path,
        *,
        limits: "ExtractionLimits",
        deadline: float | None = None,
        cancel_event: threading.Event | None = None,
    ) -> None:
        _extract_tar_file(
            volumes[0],
            target_dir,
            max_expanded_bytes=limits.max_expanded_bytes,
            deadline=deadline,
            cancel_event=cancel_event,
        )


class SplitFormat(ArchiveFormat):
    """Byte-split archives: ``name.zip.001``, ``name.7z.002``, ``name.rar.003``..."""

    name = "split"

    def parse_volume(self, filename: str) -> VolumeName | None:
        match = SPLIT_EXT_RE.match(filename.lower())
        if not match:
            return None
        inner = match.group("inner")
        if not any(inner.endswith(suffix) for suffix in SPLIT_INNER_SUFFIXES):
            return None
        return VolumeName(inner, "split", int(match.group("index")))

    def extract(
        self,
        volumes: Sequence[Path],
        target_dir: Path,
        *,
        limits: "ExtractionLimits",
        deadline: float | None = None,
        cancel_event: threading.Event | None = None,
    ) -> None:
        extract_with_seven_zip(volumes[0], target_dir, limits=limits, deadline=deadline)


_FORMAT_TYPES: dict[str, type[ArchiveFormat]] = {
    "rar": RarFormat,
    "zip": ZipFormat,
    "7z": SevenZipFormat,
    "tar": TarFormat,
    "split": SplitFormat,
}


class FormatRegistry:
    """Ordered set of enabled archive formats."""

    def __init__(self, formats: Iterable[ArchiveFormat]) -> None:
        self._formats: dict[str, ArchiveFormat] = {fmt.name: fmt for fmt in formats}

    @classmethod
    def from_limits(cls, limits: "ExtractionLimits") -> "FormatRegistry":
        return cls(
            _FORMAT_TYPES[name](
                seven_zip_path=limits.seven_zip_path,
                probe_volume_count=limits.probe_volume_count,
            )
            for name in limits.formats
        )

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(self._formats)

    def get(self, name: str) -> ArchiveFormat:
        return self._formats[name]

    def detect(self, filename: str) -> tuple[ArchiveFormat, VolumeName] | None:
        """Find the first format that recognizes ``filename`` as a volume."""
        for fmt in self._formats.values():
            volume = fmt.parse_volume(filename)
            if volume is not None:
                return fmt, volume
        return None

    def is_archive_volume(self, filename: str) -> bool:
        return self.detect(filename) is not None


def _order(
    volumes: Sequence[tuple[VolumeName, Entry]]
) -> tuple[tuple[int, Entry], ...]:
    items = [(name.index if name.index is not None else 0, entry) for name, entry in volumes]
    items.sort(key=lambda item: (item[0], item[1].name.lower()))
    return tuple(items)


def _contiguity_problem(indices: Sequence[int], first_indices: Sequence[int]) -> str | None:
    """Describe why ``indices`` (sorted) are not a complete run, or return None."""
    if not indices:
        return "no volumes"
    seen: set[int] = set()
    for index in indices:
        if index in seen:
            return f"duplicate volume index {index}"
        seen.add(index)

    start = indices[0]
    if start < min(first_indices):
        return f"unexpected first volume index {start}"
    if start not in first_indices:
        expected_start = first_indices[-1]
        missing = list(range(expected_start, start))
        return "missing volume index(es): " + ", ".join(str(value) for value in missing)

    expected = list(range(start, start + len(indices)))
    if list(indices) != expected:
        missing = sorted(set(range(start, indices[-1] + 1)) - set(indices))
        return "missing volume index(es): " + ", ".join(str(value) for value in missing)
    return None


def read_zip_disk_count(archive: Path) -> int | None:
    """Return the number of disks declared by a ZIP end of central directory record."""
    try:
        size = archive.stat().st_size
        with archive.open("rb") as fh:
            fh.seek(max(0, size - _EOCD_SEARCH))
            tail = fh.read()
    except OSError:
        return None
    offset = tail.rfind(_EOCD_SIGNATURE)
    if offset < 0 or offset + _EOCD_STRUCT.size > len(tail):
        return None
    _sig, disk_number, *_rest = _EOCD_STRUCT.unpack_from(tail, offset)
    return disk_number + 1


def resolve_seven_zip_command(seven_zip_path: Path | None) -> str | None:
    """Find 7-Zip executable path.

    Args:
        seven_zip_path: User-configured path or None for auto-detection

    Returns:
        Path to 7-Zip executable or None if not found
    """
    if seven_zip_path is not None:
        candidate = Path(seven_zip_path)
        if candidate.is_absolute():
            return str(candidate) if candidate.exists() else None
        return shutil.which(str(candidate))

    # Auto-detect common 7-Zip executables
    for name in ("7z", "7zz", "7za"):
        resolved = shutil.which(name)
        if resolved:
            return resolved
    return None


def get_rar_volume_count(
    archive: Path, *, seven_zip_path: Path | None
) -> tuple[int | None, str | None]:
    """Read the volume count a RAR archive declares, using a 7-Zip listing.

    Returns:
        Tuple of (volume_count, incomplete_reason)
        - volume_count: Declared number of volumes, None when unknown
        - incomplete_reason: Set when 7-Zip reports missing volumes
    """
    command = resolve_seven_zip_command(seven_zip_path)
    if command is None:
        return None, None

    try:
        result = subprocess.run(
            [command, "l", "-slt", str(archive)],
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=30,
        )
    except subprocess.TimeoutExpired:
        _logger.warning("7-Zip listing of %s timed out", archive.name)
        return None, None
    except OSError as exc:
        _logger.warning("7-Zip listing of %s failed: %s", archive.name, exc)
        return None, None

    output = result.stdout + result.stderr
    if re.search(r"missing volume|unexpected end of archive", output, re.IGNORECASE):
        return None, "7-Zip reports missing volume(s)"
    if result.returncode != 0:
        _logger.debug("7-Zip list failed for %s (exit code %s)", archive.name, result.returncode)
        return None, None

    volume_match = VOLUMES_LINE_RE.search(output)
    if volume_match:
        return int(volume_match.group(1)), None
    return None, None


def get_listed_size(command: str, archive: Path, *, timeout: float = 30) -> int | None:
    """Sum the unpacked entry sizes a `7z l -slt` listing declares for ``archive``.

    Returns:
        Total size in bytes, or None when the listing is unavailable; the
        extraction run that follows reports the actual error in that case
    """
    try:
        result = subprocess.run(
            [command, "l", "-slt", str(archive)],
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
        )
    except subprocess.TimeoutExpired:
        _logger.warning("7-Zip listing of %s timed out", archive.name)
        return None
    except OSError as exc:
        _logger.warning("7-Zip listing of %s failed: %s", archive.name, exc)
        return None
    if result.returncode != 0:
        _logger.debug("7-Zip list failed for %s (exit code %s)", archive.name, result.returncode)
        return None

    _header, separator, entries = (result.stdout or "").partition(LISTING_SEPARATOR)
    if not separator:
        return None
    return sum(int(size) for size in LISTED_SIZE_RE.findall(entries))


def describe_seven_zip_error(returncode: int, output: str) -> str:
    """Summarize a failed 7-Zip run into one failure reason."""
    lowered = output.lower()
    error_lines = [
        line.strip()
        for line in output.splitlines()
        if line.strip().upper().startswith("ERROR") or "error" in line.lower()
    ]
    detail = "; ".join(error_lines[:3])
    if "unsupported method" in lowered or "unsupported compression" in lowered:
        reason = "unsupported compression method"
    elif "wrong password" in lowered or "encrypted" in lowered:
        reason = "encrypted archive"
    elif "missing volume" in lowered or "unexpected end of archive" in lowered:
        reason = "corrupt volume: missing or truncated volume"
    elif "crc failed" in lowered or "data error" in lowered or "headers error" in lowered:
        reason = "corrupt volume"
    elif "can not open the file as archive" in lowered or "cannot open the file as archive" in lowered:
        reason = "corrupt volume: not a readable archive"
    else:
        reason = f"7-Zip extraction failed (exit code {returncode})"
    return f"{reason}: {detail}" if detail else reason


def extract_with_seven_zip(
    archive: Path,
    target_dir: Path,
    *,
    limits: "ExtractionLimits",
    deadline: float | None = None,
) -> None:
    """Extract ``archive`` (first volume of a set) with 7-Zip.

    Raises:
        ExtractionTimeout: If 7-Zip is still running at ``deadline``
        ExtractionFailure: If 7-Zip is missing or reports an error, or the
            listed unpacked size exceeds ``limits.max_expanded_bytes``
    """
    command = resolve_seven_zip_command(limits.seven_zip_path)
    if command is None:
        raise ExtractionFailure(
            "7-Zip executable not found. Configure [tools].seven_zip or install 7-Zip."
        )

    timeout = _time_left(deadline)
    if limits.max_expanded_bytes is not None:
        # 7-Zip writes everything before returning; refuse oversized archives up front
        listed = get_listed_size(command, archive, timeout=min(timeout or 30, 30))
        if listed is not None:
            _check_expanded_size(listed, limits.max_expanded_bytes, archive)
        timeout = _time_left(deadline)

    target_dir.mkdir(parents=True, exist_ok=True)
    args = [
        command,
        "x",  # Extract with full paths
        str(archive),
        f"-o{target_dir}",
        "-y",  # Yes to all prompts
        f"-mmt{limits.cpu_cores}",  # Number of CPU threads
        "-bb1",  # Basic output
        "-p-",  # Never prompt for a password
        "-x!*.sfv",  # Exclude .sfv files
    ]
    _logger.debug("Running %s", " ".join(args))
    try:
        result = subprocess.run(
            args,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as exc:
        raise ExtractionTimeout(
            f"extraction exceeded timeout of {limits.group_timeout:.0f}s"
            if limits.group_timeout
            else "extraction timed out"
        ) from exc
    except OSError as exc:
        raise ExtractionFailure(f"could not run 7-Zip: {exc}") from exc

    for line in (result.stdout or "").splitlines():
        if line.strip():
            _logger.debug("7-Zip output: %s", line.strip())

    if result.returncode != 0:
        output = (result.stdout or "") + (result.stderr or "")
        raise ExtractionFailure(describe_seven_zip_error(result.returncode, output))


def _time_left(deadline: float | None) -> float | None:
    if deadline is None:
        return None
    left = deadline - time.monotonic()
    if left <= 0:
        raise ExtractionTimeout("extraction timed out before 7-Zip started")
    return left


def _check_running(deadline: float | None, cancel_event: threading.Event | None) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise ExtractionFailure("extraction cancelled")
    if deadline is not None and time.monotonic() > deadline:
        raise ExtractionTimeout("extraction exceeded group timeout")


def _safe_member_path(target_dir: Path, member_name: str) -> Path | None:
    """Map an archive member name below ``target_dir``; None for unsafe names."""
    normalized = member_name.replace("\\", "/")
    pure = PurePosixPath(normalized)
    if pure.is_absolute() or ".." in pure.parts or re.match(r"^[a-zA-Z]:", normalized):
        return None
    parts = [part for part in pure.parts if part not in ("", ".")]
    if not parts:
        return None
    return target_dir.joinpath(*parts)


def _copy_member(
    source: IO[bytes],
    destination: Path,
    *,
    deadline: float | None,
    cancel_event: threading.Event | None,
) -> None:
    destination.parent.mkdir(parents=True, exist_ok=True)
    with destination.open("wb") as out:
        while True:
            chunk = source.read(_COPY_CHUNK)
            if not chunk:
                break
            out.write(chunk)
            _check_running(deadline, cancel_event)


def _check_expanded_size(total: int, limit: int | None, archive: Path) -> None:
    if limit is not None and total > limit:
        raise ExtractionFailure(
            f"expanded size of {archive.name} ({total} bytes) exceeds limit of {limit} bytes"
        )


def _extract_zip_file(
    archive: Path,
    target_dir: Path,
    *,
    max_expanded_bytes: int | None,
    deadline: float | None,
    cancel_event: threading.Event | None,
) -> None:
    target_dir.mkdir(parents=True, exist_ok=True)
    try:
        with zipfile.ZipFile(archive) as zf:
            infos = zf.infolist()
            _check_expanded_size(
                sum(info.file_size for info in infos), max_expanded_bytes, archive
            )
            for info in infos:
                _check_running(deadline, cancel_event)
                destination = _safe_member_path(target_dir, info.filename)
                if destination is None:
                    _logger.warning("Skipping unsafe member %r in %s", info.filename, archive.name)
                    continue
                if info.is_dir():
                    destination.mkdir(parents=True, exist_ok=True)
                    continue
                with zf.open(info) as source:
                    _copy_member(
                        source, destination, deadline=deadline, cancel_event=cancel_event
                    )
    except zipfile.BadZipFile as exc:
        raise ExtractionFailure(f"corrupt volume: {exc}") from exc
    except NotImplementedError as exc:
        raise ExtractionFailure(f"unsupported compression method: {exc}") from exc
    except RuntimeError as exc:
        if isinstance(exc, ExtractionFailure):
            raise
        # zipfile raises RuntimeError for encrypted members
        raise ExtractionFailure(f"encrypted archive: {exc}") from exc
    except (zlib.error, EOFError) as exc:
        raise ExtractionFailure(f"corrupt volume: {exc}") from exc
    except OSError as exc:
        raise ExtractionFailure(f"I/O error: {exc}") from exc


def _extract_tar_file(
    archive: Path,
    target_dir: Path,
    *,
    max_expanded_bytes: int | None,
    deadline: float | None,
    cancel_event: threading.Event | None,
) -> None:
    target_dir.mkdir(parents=True, exist_ok=True)
    try:
        with tarfile.open(archive) as tf:
            members = tf.getmembers()
            _check_expanded_size(
                sum(member.size for member in members if member.isfile()),
                max_expanded_bytes,
                archive,
            )
            for member in members:
                _check_running(deadline, cancel_event)
                destination = _safe_member_path(target_dir, member.name)
                if destination is None:
                    _logger.warning("Skipping unsafe member %r in %s", member.name, archive.name)
                    continue
                if member.isdir():
                    destination.mkdir(parents=True, exist_ok=True)
                    continue
                if not member.isfile():
                    # links and device nodes never leave the archive
                    _logger.debug("Skipping non-regular member %s", member.name)
                    continue
                source = tf.extractfile(member)
                if source is None:
                    continue
                with source:
                    _copy_member(
                        source, destination, deadline=deadline, cancel_event=cancel_event
                    )
    except tarfile.CompressionError as exc:
        raise ExtractionFailure(f"unsupported compression method: {exc}") from exc
    except (tarfile.TarError, zlib.error, EOFError) as exc:
        raise ExtractionFailure(f"corrupt volume: {exc}") from exc
    except OSError as exc:
        raise ExtractionFailure(f"I/O error: {exc}") from exc


__all__ = [
    "VolumeName",
    "Completeness",
    "ArchiveFormat",
    "RarFormat",
    "ZipFormat",
    "SevenZipFormat",
    "TarFormat",
    "SplitFormat",
    "FormatRegistry",
    "read_zip_disk_count",
    "resolve_seven_zip_command",
    "get_rar_volume_count",
    "get_listed_size",
    "describe_seven_zip_error",
    "extract_with_seven_zip",
]
