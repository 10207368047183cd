from __future__ import annotations

from types import SimpleNamespace

import numpy as np
import pytest

from ramenviz.model.picking import (
    CameraState,
    Viewport,
    camera_ray,
    intersect_ground_plane,
    pick,
    screen_to_ndc,
)

VIEWPORT = Viewport(800, 600)


def test_screen_to_ndc_corners() -> None:
    assert screen_to_ndc(0, 0, VIEWPORT) == (-1.0, 1.0)
    assert screen_to_ndc(400, 300, VIEWPORT) == (0.0, 0.0)
    assert screen_to_ndc(800, 600, VIEWPORT) == (1.0, -1.0)


def test_straight_down_camera_hits_below_itself() -> None:
    camera = CameraState(position=(1.0, 10.0, 2.0), focal_point=(1.0, 0.0, 2.0), view_up=(0.0, 0.0, -1.0))

    hit = pick(400, 300, VIEWPORT, camera)

    assert hit is not None
    assert hit[1] == pytest.approx(0.0, abs=1e-12)
    np.testing.assert_allclose(hit, [1.0, 0.0, 2.0], atol=1e-9)


def test_off_center_click_moves_along_camera_axes() -> None:
    camera = CameraState(position=(0.0, 10.0, 0.0), focal_point=(0.0, 0.0, 0.0), view_up=(0.0, 0.0, -1.0))

    hit = pick(600, 300, VIEWPORT, camera)

    # Right of the centre with up = -z is +x
    assert hit is not None
    assert hit[0] > 0.0
    assert hit[2] == pytest.approx(0.0, abs=1e-9)


def test_ray_parallel_to_ground_misses() -> None:
    camera = CameraState(position=(0.0, 1.0, 5.0), focal_point=(0.0, 1.0, 0.0))
    assert pick(400, 300, VIEWPORT, camera) is None


def test_ground_behind_camera_misses() -> None:
    camera = CameraState(position=(0.0, 2.0, 5.0), focal_point=(0.0, 4.0, 0.0))
    assert pick(400, 300, VIEWPORT, camera) is None


def test_degenerate_viewport_misses() -> None:
    camera = CameraState(position=(0.0, 10.0, 0.0), focal_point=(0.0, 0.0, 0.0), view_up=(0.0, 0.0, -1.0))
    assert pick(0, 0, Viewport(0, 600), camera) is None


def test_parallel_projection_shifts_ray_origin() -> None:
    camera = CameraState(
        position=(0.0, 10.0, 0.0),
        focal_point=(0.0, 0.0, 0.0),
        view_up=(0.0, 0.0, -1.0),
        parallel_projection=True,
        parallel_scale=3.0,
    )
    origin, direction = camera_ray(0.0, 1.0, camera, aspect=1.0)
    np.testing.assert_allclose(direction, [0.0, -1.0, 0.0])
    np.testing.assert_allclose(origin, [0.0, 10.0, -3.0])

    hit = pick(400, 0, VIEWPORT, camera)
    np.testing.assert_allclose(hit, [0.0, 0.0, -3.0], atol=1e-9)


def test_intersect_custom_plane_height() -> None:
    hit = intersect_ground_plane(np.array([0.0, 5.0, 0.0]), np.array([0.0, -1.0, 0.0]), plane_height=2.0)
    np.testing.assert_allclose(hit, [0.0, 2.0, 0.0])


def test_camera_state_from_pyvista_camera() -> None:
    camera = SimpleNamespace(
        position=[0, 1.5, 5],
        focal_point=[0, 0.5, 0],
        up=[0, 1, 0],
        view_angle=75,
        parallel_projection=False,
        parallel_scale=1.0,
    )
    state = CameraState.from_pyvista(camera)
    assert state.position == (0, 1.5, 5)
    assert state.view_up == (0, 1, 0)
    assert state.view_angle == 75.0


def test_straight_down_camera_with_default_up_vector() -> None:
    camera = CameraState(position=(1.0, 10.0, 2.0), focal_point=(1.0, 0.0, 2.0))

    hit = pick(400, 300, VIEWPORT, camera)

    assert hit is not None
    assert np.all(np.isfinite(hit))
    np.testing.assert_allclose(hit, [1.0, 0.0, 2.0], atol=1e-9)

    corner = pick(0, 0, VIEWPORT, camera)
    assert corner is not None
    assert np.all(np.isfinite(corner))
    assert corner[1] == pytest.approx(0.0, abs=1e-9)


def test_basis_is_orthonormal_when_up_matches_view_direction() -> None:
    camera = CameraState(position=(0.0, 5.0, 0.0), focal_point=(0.0, 0.0, 0.0))
    forward, right, up = camera.basis()
    for v in (forward, right, up):
        assert np.linalg.norm(v) == pytest.approx(1.0)
    assert np.dot(forward, right) == pytest.approx(0.0, abs=1e-12)
    assert np.dot(forward, up) == pytest.approx(0.0, abs=1e-12)


def test_camera_on_its_focal_point_misses() -> None:
    camera = CameraState(position=(0.0, 2.0, 0.0), focal_point=(0.0, 2.0, 0.0))
    assert pick(400, 300, VIEWPORT, camera) is None


def test_non_finite_ray_misses() -> None:
    origin = np.array([0.0, 5.0, 0.0])
    assert intersect_ground_plane(origin, np.array([np.nan, -1.0, np.nan])) is None
