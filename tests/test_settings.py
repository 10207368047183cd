from __future__ import annotations

import dataclasses

import pytest

from ramenviz import config
from ramenviz.model.settings import VisualSettings


def test_defaults() -> None:
    settings = VisualSettings()
    assert settings.intensity == 0.5
    assert settings.speed == 1.0
    assert settings.density == 100
    assert settings.auto_rotate is True
    assert settings.point_size == pytest.approx(0.02)


def test_replace_returns_new_snapshot() -> None:
    settings = VisualSettings()
    changed = settings.replace(density=50, speed=config.SPEED_RANGE[1])
    assert changed.density == 50
    assert settings.density == 100
    with pytest.raises(dataclasses.FrozenInstanceError):
        settings.density = 3


@pytest.mark.parametrize(
    "changes",
    [
        {"intensity": -0.1},
        {"intensity": 1.5},
        {"speed": 0.0},
        {"speed": 2.5},
        {"density": 0},
        {"density": 2.5},
        {"density": True},
        {"point_size": 0.0},
        {"point_size": float("nan")},
    ],
)
def test_out_of_range_values_rejected(changes: dict) -> None:
    with pytest.raises(ValueError):
        VisualSettings(**changes)
