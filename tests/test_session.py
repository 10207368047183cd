from __future__ import annotations

import numpy as np
import pytest

from ramenviz import config
from ramenviz.controller.scene_manager import SceneResourceManager
from ramenviz.controller.session import RenderSession
from ramenviz.model.assets import PointCloud, SceneModel
from ramenviz.model.errors import InvalidVertexData, SceneClosedError
from ramenviz.model.picking import CameraState, Viewport
from ramenviz.model.settings import VisualSettings

from conftest import RecordingPlotter


@pytest.fixture
def session(scene) -> RenderSession:
    return RenderSession(scene, settings=VisualSettings(density=10), rng=np.random.default_rng(0))


def _cloud(name: str) -> PointCloud:
    return PointCloud([0.0, 0.0, 0.0, 1.0, 1.0, 1.0], source_name=name)


def test_tick_produces_a_frame(session: RenderSession) -> None:
    frame = session.tick()
    assert frame.positions.shape == (10, 3)
    assert frame.time == pytest.approx(config.TIME_STEP)
    assert frame.intensity == config.DEFAULT_INTENSITY
    assert frame.speed == config.DEFAULT_SPEED


def test_delivered_asset_is_installed_on_next_tick(session: RenderSession, scene) -> None:
    request = session.begin_load("a.xyz")
    cloud = _cloud("a.xyz")

    assert session.deliver_result(request, cloud)
    assert scene.current_asset() is None

    session.tick()
    assert scene.current_asset() is cloud
    assert session.active_request is None


def test_superseded_result_is_dropped(session: RenderSession, scene) -> None:
    first = session.begin_load("first.ply")
    second = session.begin_load("second.ply")
    assert second > first

    assert not session.deliver_result(first, _cloud("first.ply"))
    assert session.deliver_result(second, _cloud("second.ply"))
    session.tick()
    assert scene.current_asset().source_name == "second.ply"


def test_cancelled_load_is_dropped(session: RenderSession, scene) -> None:
    request = session.begin_load("a.ply")
    session.cancel_load()
    assert not session.deliver_result(request, _cloud("a.ply"))
    session.tick()
    assert scene.current_asset() is None


def test_failure_keeps_installed_asset(session: RenderSession, scene) -> None:
    ok = session.begin_load("good.xyz")
    session.deliver_result(ok, _cloud("good.xyz"))
    session.tick()

    bad = session.begin_load("bad.xyz")
    error = InvalidVertexData("XYZ", 2)
    assert session.deliver_failure(bad, error)
    session.tick()

    assert scene.current_asset().source_name == "good.xyz"
    assert session.last_error == str(error)
    assert not session.deliver_failure(bad, error)


def test_density_change_rebuilds_field(session: RenderSession, plotter) -> None:
    session.tick()
    session.tick()
    session.update_settings(session.settings.replace(density=4))

    frame = session.tick()

    assert frame.positions.shape == (4, 3)
    assert len(session.field) == 4
    # Fresh field: time restarted
    assert frame.time == pytest.approx(config.TIME_STEP)
    # Only the rebuilt steam actor remains
    assert len(plotter.attached) == 1


def test_other_settings_apply_without_rebuild(session: RenderSession) -> None:
    session.tick()
    field = session.field
    session.update_settings(session.settings.replace(intensity=0.9, speed=2.0))

    frame = session.tick()

    assert session.field is field
    assert frame.intensity == 0.9
    assert frame.speed == 2.0


def test_auto_rotate_spins_the_asset(session: RenderSession, plotter) -> None:
    request = session.begin_load("a.xyz")
    session.deliver_result(request, _cloud("a.xyz"))
    session.tick()
    asset_actor = plotter.attached[0]
    session.tick()
    rotation = asset_actor.rotation_y

    session.update_settings(session.settings.replace(auto_rotate=False))
    session.tick()

    assert rotation == pytest.approx(2 * config.AUTO_ROTATE_STEP_DEG)
    assert asset_actor.rotation_y == pytest.approx(rotation)


def test_pick_relocates_emitter_on_next_tick(session: RenderSession) -> None:
    session.tick()
    camera = CameraState(position=(3.0, 10.0, -2.0), focal_point=(3.0, 0.0, -2.0), view_up=(0.0, 0.0, -1.0))

    assert session.pick_origin(200, 150, Viewport(400, 300), camera)
    session.tick()

    np.testing.assert_allclose(session.origin, [3.0, 0.0, -2.0], atol=1e-9)
    np.testing.assert_allclose(session.field.origin, [3.0, 0.0, -2.0], atol=1e-9)


def test_pick_miss_leaves_emitter(session: RenderSession) -> None:
    camera = CameraState(position=(0.0, 1.0, 5.0), focal_point=(0.0, 1.0, 0.0))
    assert not session.pick_origin(200, 150, Viewport(400, 300), camera)
    session.tick()
    np.testing.assert_allclose(session.origin, config.DEFAULT_ORIGIN)


def test_shutdown_releases_and_refuses_ticks(session: RenderSession, plotter) -> None:
    request = session.begin_load("a.xyz")
    session.deliver_result(request, _cloud("a.xyz"))
    session.tick()
    late = session.begin_load("b.xyz")

    session.shutdown()
    session.shutdown()

    assert session.closed
    assert plotter.attached == []
    assert session.field is None
    assert not session.deliver_result(late, _cloud("b.xyz"))
    with pytest.raises(SceneClosedError):
        session.tick()
    with pytest.raises(SceneClosedError):
        session.begin_load("c.xyz")


def test_returned_frame_is_not_changed_by_later_ticks(session: RenderSession) -> None:
    first = session.tick()
    snapshot = first.positions.copy()

    session.tick()
    session.tick()

    np.testing.assert_array_equal(first.positions, snapshot)
    assert first.positions is not session.field.positions


class _UnrenderablePlotter(RecordingPlotter):
    def add_mesh(self, mesh, **kwargs):
        if isinstance(mesh, str):
            raise ValueError("dataset cannot be rendered")
        return super().add_mesh(mesh, **kwargs)


def test_unrenderable_asset_keeps_session_running() -> None:
    plotter = _UnrenderablePlotter()
    session = RenderSession(SceneResourceManager(plotter), settings=VisualSettings(density=5),
                            rng=np.random.default_rng(0))
    good = session.begin_load("good.xyz")
    session.deliver_result(good, _cloud("good.xyz"))
    session.tick()

    bad = session.begin_load("broken.glb")
    session.deliver_result(bad, SceneModel("not a dataset", source_name="broken.glb"))
    frame = session.tick()

    assert frame.positions.shape == (5, 3)
    assert session.scene.current_asset().source_name == "good.xyz"
    assert "broken.glb" in session.last_error
    assert session.scene.attached_actor_count == 1

    session.tick()
    assert not session.closed


def test_empty_point_cloud_replaces_the_current_asset(session: RenderSession, scene, plotter) -> None:
    first = session.begin_load("bowl.xyz")
    session.deliver_result(first, _cloud("bowl.xyz"))
    session.tick()

    second = session.begin_load("empty.json")
    empty = PointCloud([], source_name="empty.json")
    session.deliver_result(second, empty)
    session.tick()

    assert scene.current_asset() is empty
    assert scene.attached_actor_count == 0
    # Only the steam layer remains
    assert len(plotter.attached) == 1
