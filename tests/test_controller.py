import pytest

pytest.importorskip("pygame")
pytest.importorskip("dearpygui.dearpygui")

from gravity_sandbox import MAX_FRAME_DT, SimulationController  # noqa: E402
from nbody_sandbox.data_models import Body, StepInput  # noqa: E402


def test_pause_and_step_advances_one_frame():
    ctrl = SimulationController()
    body = ctrl.sim.add_body(Body(1000.0, (100.0, 100.0), velocity=(10.0, 0.0)))

    ctrl.pause_and_step()
    assert not ctrl.playing
    ctrl.advance(0.05, StepInput())
    assert body.position == pytest.approx((100.5, 100.0))

    ctrl.advance(0.05, StepInput())
    assert body.position == pytest.approx((100.5, 100.0))
    assert not ctrl.step_requested


def test_long_frames_are_cut_short():
    ctrl = SimulationController()
    body = ctrl.sim.add_body(Body(1000.0, (100.0, 100.0), velocity=(10.0, 0.0)))
    ctrl.advance(5.0, StepInput())
    assert body.position[0] == pytest.approx(100.0 + 10.0 * MAX_FRAME_DT)


def test_update_setting_reaches_the_simulation():
    ctrl = SimulationController()
    ctrl.update_setting("gravitational", 0.5)
    assert ctrl.sim.gravity.gravitational == 0.5
    ctrl.update_setting("gravitational", float("nan"))
    assert ctrl.sim.gravity.gravitational == 0.5
