"""Fuzzy PD controller outputs for simple states."""

import numpy as np
import pytest

from fuzzyquad.types import State, TargetState, Wrench
from fuzzyquad.params import FuzzyPDGains, FuzzyParams, default_params
from fuzzyquad.controller_fuzzy_pd import FuzzyPDController
from fuzzyquad.math3d import quat_from_euler


@pytest.fixture
def params():
    return default_params()


@pytest.fixture
def controller(params):
    return FuzzyPDController(params)


def _hover_state(z=1.0):
    state = State.zeros()
    state.p = np.array([0.0, 0.0, z])
    return state


# ---- Equilibrium ------------------------------------------------------------

def test_hover_equilibrium(controller, params):
    wrench, ctrl = controller.compute(_hover_state(), TargetState.hover([0.0, 0.0, 1.0]))
    assert wrench.thrust_N == pytest.approx(params.weight)
    assert np.allclose(wrench.torque_Nm, 0.0, atol=1e-12)
    assert np.allclose(ctrl.scale_pos, 1.0)
    assert np.allclose(ctrl.scale_att, 1.0)


def test_below_target_climbs(controller, params):
    wrench, _ = controller.compute(_hover_state(0.5), TargetState.hover([0.0, 0.0, 1.0]))
    assert wrench.thrust_N > params.weight


def test_far_above_target_never_negative(controller):
    wrench, _ = controller.compute(_hover_state(50.0), TargetState.hover([0.0, 0.0, 0.0]))
    assert wrench.thrust_N == 0.0


# ---- Attitude ---------------------------------------------------------------

def test_roll_target_gives_positive_roll_torque(controller):
    target = TargetState.attitude_hold(roll=np.radians(10.0))
    wrench, ctrl = controller.compute(_hover_state(), target)
    assert wrench.torque_Nm[0] > 0.0
    assert abs(wrench.torque_Nm[1]) < 1e-9
    assert ctrl.e_att[0] == pytest.approx(np.radians(10.0))


def test_roll_rate_is_damped(controller):
    state = _hover_state()
    state.w_body = np.array([2.0, 0.0, 0.0])
    wrench, ctrl = controller.compute(state, TargetState.attitude_hold())
    assert wrench.torque_Nm[0] < 0.0
    assert np.allclose(ctrl.e_rate, [-2.0, 0.0, 0.0])


def test_yaw_error_wraps_short_way(controller):
    state = _hover_state()
    state.q = quat_from_euler(0.0, 0.0, np.radians(170.0))
    wrench, ctrl = controller.compute(state, TargetState.attitude_hold(yaw=np.radians(-170.0)))
    # 20 degrees through +/-180, not 340 the long way
    assert ctrl.e_att[2] == pytest.approx(np.radians(20.0))
    assert wrench.torque_Nm[2] > 0.0


def test_tilt_compensation_adds_thrust(controller, params):
    state = _hover_state()
    state.q = quat_from_euler(np.radians(20.0), 0.0, 0.0)
    wrench, _ = controller.compute(state, TargetState.attitude_hold(roll=np.radians(20.0)))
    assert wrench.thrust_N == pytest.approx(params.weight / np.cos(np.radians(20.0)))


# ---- Position loop ----------------------------------------------------------

def test_forward_error_requests_positive_pitch(controller):
    _, ctrl = controller.compute(_hover_state(), TargetState.hover([0.5, 0.0, 1.0]))
    assert ctrl.att_des[1] > 0.0
    assert ctrl.att_des[0] == pytest.approx(0.0)


def test_left_error_requests_negative_roll(controller):
    _, ctrl = controller.compute(_hover_state(), TargetState.hover([0.0, 0.5, 1.0]))
    assert ctrl.att_des[0] < 0.0


def test_desired_tilt_is_limited(params):
    gains = FuzzyPDGains(max_tilt=np.radians(15.0))
    controller = FuzzyPDController(params, gains)
    _, ctrl = controller.compute(_hover_state(), TargetState.hover([100.0, -100.0, 1.0]))
    assert np.all(np.abs(ctrl.att_des[:2]) <= np.radians(15.0) + 1e-12)


# ---- Fuzzy correction -------------------------------------------------------

def test_fuzzy_scale_stays_within_span(params):
    gains = FuzzyPDGains(fuzzy=FuzzyParams(span=0.4))
    controller = FuzzyPDController(params, gains)
    rng = np.random.default_rng(5)
    for _ in range(50):
        state = _hover_state()
        state.v = rng.normal(size=3)
        state.w_body = rng.normal(size=3)
        _, ctrl = controller.compute(state, TargetState.hover(rng.normal(size=3)))
        for scale in (ctrl.scale_pos, ctrl.scale_att):
            assert np.all(scale >= 0.6 - 1e-12) and np.all(scale <= 1.4 + 1e-12)


def test_zero_span_is_plain_pd(params):
    gains = FuzzyPDGains(fuzzy=FuzzyParams(span=0.0))
    controller = FuzzyPDController(params, gains)
    target = TargetState.attitude_hold(roll=0.2)
    state = _hover_state()
    state.w_body = np.array([0.5, 0.0, 0.0])
    wrench, _ = controller.compute(state, target)

    e = 0.2
    alpha = gains.kp_att[0] * e + gains.kd_att[0] * (-0.5)
    assert wrench.torque_Nm[0] == pytest.approx(params.J[0, 0] * alpha)


def test_invalid_span_rejected():
    with pytest.raises(ValueError):
        FuzzyParams(span=1.0)


# ---- Pass-through -----------------------------------------------------------

def test_resolved_wrench_passes_through(controller):
    wrench_in = Wrench(thrust_N=2.5, torque_Nm=np.array([0.01, -0.02, 0.0]))
    target = TargetState(wrench=wrench_in)
    wrench, _ = controller.compute(_hover_state(), target)
    assert wrench.thrust_N == 2.5
    assert np.array_equal(wrench.torque_Nm, wrench_in.torque_Nm)
    assert wrench.torque_Nm is not wrench_in.torque_Nm


def test_controller_keeps_no_memory(controller):
    state = _hover_state(0.3)
    target = TargetState.hover([1.0, 0.0, 1.0])
    first, _ = controller.compute(state, target)
    controller.compute(_hover_state(5.0), TargetState.attitude_hold(roll=0.4))
    again, _ = controller.compute(state, target)
    assert again.thrust_N == first.thrust_N
    assert np.array_equal(again.torque_Nm, first.torque_Nm)
