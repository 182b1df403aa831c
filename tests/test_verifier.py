from __future__ import annotations

import os
from pathlib import Path

import pytest

from image_reducer.core.errors import TransformError
from image_reducer.core.models import (
    CompressionDirective,
    FileOutcome,
    RunStats,
    TransformPlan,
    TreeEntry,
)
from image_reducer.core.scanner import DirectoryScanner
from image_reducer.core.verifier import VerificationController

from .conftest import FakeEngine, create_file


@pytest.fixture()
def source_file(tmp_path: Path) -> Path:
    return create_file(tmp_path / "source" / "shots" / "shot.png", size=1000)


@pytest.fixture()
def dest(tmp_path: Path) -> Path:
    path = tmp_path / "dest" / "shots"
    path.mkdir(parents=True)
    return tmp_path / "dest"


def entry_for(path: Path) -> TreeEntry:
    return DirectoryScanner.make_entry(str(path), "shots", path.name, path.stat().st_size, False)


def plan_for(dest: Path, name: str) -> TransformPlan:
    return TransformPlan(
        width=10,
        height=10,
        target_extension=os.path.splitext(name)[1],
        destination=str(dest / "shots" / name),
        compression=CompressionDirective(quality=100),
    )


def test_smaller_artifact_is_kept(source_file: Path, dest: Path) -> None:
    stats = RunStats()
    controller = VerificationController(FakeEngine(artifact_sizes={"shot.png": 400}), stats, str(dest))

    outcome = controller.apply(plan_for(dest, "shot.png"), entry_for(source_file))

    assert outcome is FileOutcome.OPTIMIZED
    assert (dest / "shots" / "shot.png").stat().st_size == 400
    assert stats.files.optimized == 1
    assert stats.files.copied == 0
    assert stats.data.optimized == 400


def test_equal_size_artifact_falls_back_to_copy(source_file: Path, dest: Path) -> None:
    stats = RunStats()
    controller = VerificationController(FakeEngine(artifact_sizes={"shot.png": 1000}), stats, str(dest))

    outcome = controller.apply(plan_for(dest, "shot.png"), entry_for(source_file))

    assert outcome is FileOutcome.COPIED
    assert (dest / "shots" / "shot.png").read_bytes() == source_file.read_bytes()
    assert stats.files.copied == 1
    assert stats.files.optimized == 0
    assert stats.data.optimized == 1000


def test_fallback_keeps_original_extension(source_file: Path, dest: Path) -> None:
    stats = RunStats()
    controller = VerificationController(FakeEngine(artifact_sizes={"shot.png": 5000}), stats, str(dest))

    outcome = controller.apply(plan_for(dest, "shot.jpg"), entry_for(source_file))

    assert outcome is FileOutcome.COPIED
    assert not (dest / "shots" / "shot.jpg").exists()
    assert (dest / "shots" / "shot.png").read_bytes() == source_file.read_bytes()
    assert stats.data.optimized == 1000


def test_engine_failure_propagates(source_file: Path, dest: Path) -> None:
    class BrokenEngine(FakeEngine):
        def write(self, source_path: str, plan: TransformPlan) -> None:
            raise TransformError(source_path, "disk on fire")

    stats = RunStats()
    controller = VerificationController(BrokenEngine(), stats, str(dest))

    with pytest.raises(TransformError, match="disk on fire"):
        controller.apply(plan_for(dest, "shot.png"), entry_for(source_file))

    assert stats.files.optimized == 0
    assert stats.files.copied == 0
    assert stats.data.optimized == 0


def test_missing_artifact_raises_os_error(source_file: Path, dest: Path) -> None:
    class SilentEngine(FakeEngine):
        def write(self, source_path: str, plan: TransformPlan) -> None:
            pass

    controller = VerificationController(SilentEngine(), RunStats(), str(dest))

    with pytest.raises(FileNotFoundError):
        controller.apply(plan_for(dest, "shot.png"), entry_for(source_file))
