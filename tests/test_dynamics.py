"""Rigid-body integration: free fall, attitude validity, substepping."""

from types import SimpleNamespace

import numpy as np
import pytest

from fuzzyquad.types import State
from fuzzyquad.params import VehicleParams, default_params
from fuzzyquad.mixer import MotorMixer
from fuzzyquad.motor_model import build_motors
from fuzzyquad.dynamics import DynamicsIntegrator, substeps, check_dt
from fuzzyquad.math3d import quat_to_euler


def _vehicle(params, motor_speed=0.0, state=None):
    return SimpleNamespace(
        state=state if state is not None else State.zeros(),
        motors=build_motors(params, motor_speed),
    )


@pytest.fixture
def params():
    return default_params()


@pytest.fixture
def integrator(params):
    return DynamicsIntegrator(params, MotorMixer(params))


# ---- Free fall --------------------------------------------------------------

def test_free_fall_matches_closed_form(params, integrator):
    vehicle = _vehicle(params)
    dt = 0.016
    n = 62
    for _ in range(n):
        integrator.step(vehicle, dt)

    t = n * dt
    _, h = substeps(dt, params.max_substep)
    s = vehicle.state
    assert s.v[2] == pytest.approx(-params.g * t, rel=1e-9)
    # Semi-implicit Euler position error is g * h * t / 2
    assert abs(s.p[2] - (-0.5 * params.g * t**2)) <= params.g * h * t
    assert np.allclose(s.p[:2], 0.0)
    assert np.allclose(s.v[:2], 0.0)
    assert np.allclose(s.w_body, 0.0)


def test_velocity_grows_linearly_in_free_fall(params, integrator):
    vehicle = _vehicle(params)
    velocities = []
    for _ in range(20):
        integrator.step(vehicle, 0.01)
        velocities.append(vehicle.state.v[2])
    increments = np.diff(velocities)
    assert np.allclose(increments, -params.g * 0.01)


# ---- Hover equilibrium ------------------------------------------------------

def test_hover_speed_balances_gravity(params, integrator):
    vehicle = _vehicle(params, motor_speed=params.hover_speed)
    for _ in range(100):
        integrator.step(vehicle, 0.016)
    assert np.allclose(vehicle.state.v, 0.0, atol=1e-9)
    assert np.allclose(vehicle.state.w_body, 0.0, atol=1e-12)


def test_differential_thrust_rolls_vehicle(params, integrator):
    vehicle = _vehicle(params, motor_speed=params.hover_speed)
    # Left rotors (0, 3) faster than right rotors (1, 2)
    for i, motor in enumerate(vehicle.motors):
        motor.set_commanded(params.hover_speed * (1.05 if i in (0, 3) else 0.95))
    for _ in range(10):
        integrator.step(vehicle, 0.016)
    assert vehicle.state.w_body[0] > 0.0
    assert quat_to_euler(vehicle.state.q)[0] > 0.0


def test_motors_follow_commands_during_step(params, integrator):
    vehicle = _vehicle(params)
    for motor in vehicle.motors:
        motor.set_commanded(500.0)
    integrator.step(vehicle, 0.016)
    for motor in vehicle.motors:
        assert 0.0 < motor.speed < 500.0


# ---- Orientation validity ---------------------------------------------------

def test_quaternion_stays_unit_over_long_run(params, integrator):
    state = State.zeros()
    state.w_body = np.array([0.7, -1.3, 2.1])
    vehicle = _vehicle(params, state=state)

    for _ in range(10_000):
        integrator.step(vehicle, 0.016)
        assert abs(np.linalg.norm(vehicle.state.q) - 1.0) < 1e-6


def test_torque_free_spin_about_principal_axis_is_constant(params, integrator):
    state = State.zeros()
    state.w_body = np.array([0.0, 0.0, 1.0])
    vehicle = _vehicle(params, state=state)
    for _ in range(100):
        integrator.step(vehicle, 0.016)
    assert np.allclose(vehicle.state.w_body, [0.0, 0.0, 1.0])
    assert quat_to_euler(vehicle.state.q)[2] == pytest.approx(1.6, abs=1e-9)


# ---- Substepping ------------------------------------------------------------

def test_substeps_cover_dt():
    n, h = substeps(0.05, 0.005)
    assert n == 10
    assert n * h == pytest.approx(0.05)
    assert substeps(0.004, 0.005) == (1, 0.004)


def test_large_frame_equals_many_small_frames(params, integrator):
    a = _vehicle(params, motor_speed=params.hover_speed)
    b = _vehicle(params, motor_speed=params.hover_speed)
    for vehicle in (a, b):
        for i, motor in enumerate(vehicle.motors):
            motor.set_commanded(params.hover_speed * (1.1 if i == 0 else 1.0))

    integrator.step(a, 0.05)
    for _ in range(10):
        integrator.step(b, 0.005)

    assert np.allclose(a.state.p, b.state.p, atol=1e-12)
    assert np.allclose(a.state.q, b.state.q, atol=1e-12)


def test_large_dt_stays_bounded():
    """A 0.5 s hitch is subdivided instead of blowing up."""
    params = VehicleParams()
    integrator = DynamicsIntegrator(params, MotorMixer(params))
    vehicle = _vehicle(params, motor_speed=params.hover_speed)
    vehicle.state.w_body = np.array([0.5, 0.0, 0.0])
    integrator.step(vehicle, 0.5)
    assert np.all(np.isfinite(vehicle.state.p))
    assert abs(np.linalg.norm(vehicle.state.q) - 1.0) < 1e-9


# ---- Preconditions ----------------------------------------------------------

@pytest.mark.parametrize("dt", [-0.01, float("nan"), float("inf")])
def test_invalid_dt_rejected(params, integrator, dt):
    vehicle = _vehicle(params)
    before = vehicle.state.copy()
    with pytest.raises(ValueError):
        integrator.step(vehicle, dt)
    assert np.array_equal(vehicle.state.p, before.p)


def test_zero_dt_is_noop(params, integrator):
    vehicle = _vehicle(params)
    before = vehicle.state
    integrator.step(vehicle, 0.0)
    assert vehicle.state is before
    assert check_dt(0.0) == 0.0
