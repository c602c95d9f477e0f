"""Rotor lag, clamping and force model."""

import numpy as np
import pytest

from fuzzyquad.params import VehicleParams, default_gains, default_params
from fuzzyquad.motor_model import Motor, build_motors, SPIN_DIRECTIONS


# ---- Step response ----------------------------------------------------------

@pytest.mark.parametrize("start, target", [(0.0, 800.0), (1200.0, 300.0)])
def test_step_response_monotone_without_overshoot(start, target):
    motor = Motor(default_params(), spin=1, speed=start)
    motor.set_commanded(target)

    prev = motor.speed
    for _ in range(200):
        motor.step(0.016)
        # Moves toward target, never past it
        assert abs(target - motor.speed) <= abs(target - prev) + 1e-12
        assert min(start, target) - 1e-9 <= motor.speed <= max(start, target) + 1e-9
        prev = motor.speed

    assert abs(motor.speed - target) < 1e-6, f"Should converge to {target}, got {motor.speed}"


def test_step_is_continuous():
    """No instantaneous jump even for a full-range command."""
    params = default_params()
    motor = Motor(params, spin=1)
    motor.set_commanded(params.max_speed)
    motor.step(0.001)
    expected = params.max_speed * (1.0 - np.exp(-0.001 / params.motor_tau))
    assert motor.speed == pytest.approx(expected)
    assert motor.speed < 0.05 * params.max_speed


def test_time_constant():
    params = default_params()
    motor = Motor(params, spin=1)
    motor.set_commanded(1000.0)
    motor.step(params.motor_tau)
    assert motor.speed == pytest.approx(1000.0 * (1.0 - np.exp(-1.0)))


@pytest.mark.parametrize("dt", [-0.01, -0.05, float("nan"), float("inf")])
def test_invalid_step_rejected_without_changing_speed(dt):
    motor = Motor(default_params(), spin=1, speed=500.0)
    motor.set_commanded(800.0)
    with pytest.raises(ValueError):
        motor.step(dt)
    assert motor.speed == 500.0
    assert motor.commanded == 800.0


def test_zero_step_keeps_speed():
    motor = Motor(default_params(), spin=1, speed=500.0)
    motor.set_commanded(800.0)
    motor.step(0.0)
    assert motor.speed == 500.0


# ---- Clamping ---------------------------------------------------------------

def test_commanded_speed_is_clamped():
    params = default_params()
    motor = Motor(params, spin=-1)

    motor.set_commanded(10 * params.max_speed)
    assert motor.commanded == params.max_speed

    motor.set_commanded(-5.0)
    assert motor.commanded == 0.0


def test_nan_command_rejected():
    motor = Motor(default_params(), spin=1, speed=100.0)
    with pytest.raises(ValueError):
        motor.set_commanded(float("nan"))
    assert motor.commanded == 100.0


def test_invalid_spin_rejected():
    with pytest.raises(ValueError):
        Motor(default_params(), spin=0)


# ---- Forces -----------------------------------------------------------------

def test_thrust_is_quadratic_in_speed():
    params = default_params()
    motor = Motor(params, spin=1, speed=400.0)
    t1 = motor.thrust()
    motor = Motor(params, spin=1, speed=800.0)
    assert motor.thrust() == pytest.approx(4.0 * t1)
    assert t1 == pytest.approx(params.k_thrust * 400.0 ** 2)


def test_reaction_torque_sign_follows_spin():
    params = default_params()
    cw = Motor(params, spin=1, speed=500.0)
    ccw = Motor(params, spin=-1, speed=500.0)
    assert cw.reaction_torque() > 0.0
    assert ccw.reaction_torque() == pytest.approx(-cw.reaction_torque())


def test_build_motors_alternates_spin_and_starts_at_speed():
    params = default_params()
    motors = build_motors(params, speed=params.hover_speed)
    assert [m.spin for m in motors] == list(SPIN_DIRECTIONS)
    assert sum(m.spin for m in motors) == 0
    for m in motors:
        assert m.speed == m.commanded == pytest.approx(params.hover_speed)
    total = sum(m.thrust() for m in motors)
    assert total == pytest.approx(params.weight)


# ---- Parameter validation ---------------------------------------------------

@pytest.mark.parametrize("field, value", [
    ("mass", 0.0),
    ("mass", float("nan")),
    ("arm_length", -0.1),
    ("motor_tau", 0.0),
    ("k_thrust", float("inf")),
    ("layout", "h"),
    ("drag_coeff", -1.0),
])
def test_invalid_vehicle_params_rejected(field, value):
    with pytest.raises(ValueError):
        VehicleParams(**{field: value})


def test_non_positive_inertia_rejected():
    with pytest.raises(ValueError):
        VehicleParams(J=np.diag([0.1, 0.1, -0.2]))


def test_params_compare_by_identity_and_hash():
    a, b = VehicleParams(), VehicleParams(J=np.diag([0.1, 0.1, 0.2]))
    assert a == a
    assert a != b
    assert len({a, b, a}) == 2

    gains = default_gains()
    assert gains == gains
    assert gains != default_gains()
