from __future__ import annotations

from types import SimpleNamespace
from typing import Any, List, Tuple

import pytest

from ramenviz.controller.scene_manager import SceneResourceManager


class FakeActor:
    def __init__(self, mesh: Any, **kwargs: Any) -> None:
        self.mesh = mesh
        self.kwargs = kwargs
        self.prop = SimpleNamespace(
            opacity=kwargs.get("opacity", 1.0),
            point_size=kwargs.get("point_size", 5.0),
        )
        self.rotation_y = 0.0

    def RotateY(self, degrees: float) -> None:
        self.rotation_y += degrees


class RecordingPlotter:
    """Stands in for pyvista.Plotter and records every add/remove."""

    def __init__(self) -> None:
        self.attached: List[FakeActor] = []
        self.events: List[Tuple[str, FakeActor, int]] = []

    def add_mesh(self, mesh: Any, **kwargs: Any) -> FakeActor:
        actor = FakeActor(mesh, **kwargs)
        self.attached.append(actor)
        self.events.append(("add", actor, len(self.attached)))
        return actor

    def remove_actor(self, actor: Any, reset_camera: bool = False, render: bool = True) -> bool:
        self.attached.remove(actor)
        self.events.append(("remove", actor, len(self.attached)))
        return True


@pytest.fixture
def plotter() -> RecordingPlotter:
    return RecordingPlotter()


@pytest.fixture
def scene(plotter: RecordingPlotter) -> SceneResourceManager:
    return SceneResourceManager(plotter)
