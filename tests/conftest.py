from __future__ import annotations

import os
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

import pytest

from image_reducer.core.engine import TransformEngine
from image_reducer.core.errors import TransformError
from image_reducer.core.models import ImageProbe, ScanConfiguration, TransformPlan


class FakeEngine(TransformEngine):
    """Transform engine returning scripted probes and artifact sizes."""

    def __init__(
        self,
        probes: Optional[Dict[str, ImageProbe]] = None,
        artifact_sizes: Optional[Dict[str, int]] = None,
        failing: Tuple[str, ...] = (),
    ) -> None:
        self.probes = probes or {}
        self.artifact_sizes = artifact_sizes or {}
        self.failing = failing
        self.written: List[Tuple[str, TransformPlan]] = []

    def probe(self, path: str) -> ImageProbe:
        name = os.path.basename(path)
        if name in self.failing:
            raise TransformError(path, "scripted probe failure")
        return self.probes.get(name, ImageProbe(width=1000, height=500, is_direct_color=True))

    def write(self, source_path: str, plan: TransformPlan) -> None:
        name = os.path.basename(source_path)
        size = self.artifact_sizes.get(name, os.path.getsize(source_path) // 2)
        Path(plan.destination).write_bytes(b"o" * size)
        self.written.append((name, plan))


@pytest.fixture()
def fake_engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture()
def make_config(tmp_path: Path) -> Callable[..., ScanConfiguration]:
    source = tmp_path / "source"
    dest = tmp_path / "dest"
    source.mkdir()

    def factory(**overrides) -> ScanConfiguration:
        values = {"source_path": str(source), "dest_path": str(dest)}
        values.update(overrides)
        return ScanConfiguration(**values)

    return factory


def create_file(path: Path, size: int = 100) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"s" * size)
    return path


@pytest.fixture()
def sorted_listing(monkeypatch: pytest.MonkeyPatch) -> None:
    """Make directory listings deterministic."""
    real_listdir = os.listdir
    monkeypatch.setattr("image_reducer.core.scanner.os.listdir", lambda path: sorted(real_listdir(path)))
