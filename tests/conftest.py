from __future__ import annotations

import os
from pathlib import Path

import pytest

from filletkit.cli import _scene_factory_from_module
from filletkit.preview import collect_meshes
from filletkit.tessellation import Tessellation

PROJECT_ROOT = Path(__file__).resolve().parents[1]


def pytest_configure():
    os.environ.setdefault("PYVISTA_OFF_SCREEN", "true")
    os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Keep every test away from the real ~/.filletkit."""

    home = tmp_path / "filletkit-home"
    monkeypatch.setenv("FILLETKIT_HOME", str(home))
    return home


def load_scene_meshes(model_path: Path):
    """Load a model module and return the solids it builds."""
    scene = _scene_factory_from_module(model_path)()
    return collect_meshes(scene)


@pytest.fixture
def project_root() -> Path:
    return PROJECT_ROOT


@pytest.fixture
def coarse() -> Tessellation:
    """Fixed, small segment counts so geometry tests stay quick and predictable."""
    return Tessellation(segments=16)
