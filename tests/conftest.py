"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import io
import tarfile
import zipfile
from pathlib import Path

import pytest

from mediaunpack.config import ExtractionLimits, MediaRules, Settings
from mediaunpack.extraction import FormatRegistry

# Small sizes keep the fixtures fast; every video below this is a sample
MIN_VIDEO_SIZE = 1000


def make_zip(path: Path, members: dict[str, bytes]) -> Path:
    """Write a zip archive with ``members`` (name -> content)."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(path, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for name, content in members.items():
            zf.writestr(name, content)
    return path


def zip_bytes(members: dict[str, bytes]) -> bytes:
    """In-memory zip archive, used to nest archives inside archives."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        for name, content in members.items():
            zf.writestr(name, content)
    return buffer.getvalue()


def make_tar(path: Path, members: dict[str, bytes], *, mode: str = "w:gz") -> Path:
    """Write a tar archive with regular file ``members``."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with tarfile.open(path, mode) as tf:
        for name, content in members.items():
            info = tarfile.TarInfo(name)
            info.size = len(content)
            tf.addfile(info, io.BytesIO(content))
    return path


@pytest.fixture
def temp_dir(tmp_path: Path) -> Path:
    """Create a temporary directory for tests.

    Args:
        tmp_path: pytest's temporary directory fixture

    Returns:
        Path to temporary directory
    """
    return tmp_path


@pytest.fixture
def source_dir(temp_dir: Path) -> Path:
    """Create a release source directory.

    Args:
        temp_dir: Temporary directory fixture

    Returns:
        Path to source directory
    """
    source = temp_dir / "source"
    source.mkdir()
    return source


@pytest.fixture
def destination_dir(temp_dir: Path) -> Path:
    """Destination directory path (not created; the run creates it)."""
    return temp_dir / "destination"


@pytest.fixture
def staging_dir(temp_dir: Path) -> Path:
    """Create a directory standing in for a group staging area."""
    staging = temp_dir / "staging"
    staging.mkdir()
    return staging


@pytest.fixture
def rules() -> MediaRules:
    return MediaRules(min_video_size=MIN_VIDEO_SIZE)


@pytest.fixture
def limits() -> ExtractionLimits:
    return ExtractionLimits(probe_volume_count=False, group_timeout=60.0)


@pytest.fixture
def registry(limits: ExtractionLimits) -> FormatRegistry:
    return FormatRegistry.from_limits(limits)


@pytest.fixture
def settings(rules: MediaRules, limits: ExtractionLimits) -> Settings:
    return Settings(media=rules, extraction=limits, workers=2)
