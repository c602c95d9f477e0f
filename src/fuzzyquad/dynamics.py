"""
Quadrotor rigid body dynamics.

Semi-implicit Euler integration with quaternion attitude:

    v_dot = [0, 0, -g] + (1/m) * R(q) @ [0, 0, T] - drag * v
    w_dot = J^{-1} * (tau - w × (J @ w))
    v    += v_dot * h ;  p += v * h
    w    += w_dot * h ;  q  = normalize(q * exp(w * h))

Frames are split into equal substeps no longer than
``VehicleParams.max_substep`` so a slow or irregular caller cannot push
the integrator past its stable step size.
"""

import math
from typing import Protocol, Sequence

import numpy as np
from numpy.typing import NDArray

from fuzzyquad.types import State
from fuzzyquad.params import VehicleParams
from fuzzyquad.mixer import MotorMixer
from fuzzyquad.motor_model import Motor
from fuzzyquad.math3d import quat_to_R, quat_integrate


class Airframe(Protocol):
    """What the integrator needs from a vehicle."""

    state: State
    motors: Sequence[Motor]


def check_dt(dt: float) -> float:
    """Reject NaN, infinite and negative time steps."""
    dt = float(dt)
    if not math.isfinite(dt) or dt < 0.0:
        raise ValueError(f"dt must be finite and >= 0, got {dt}")
    return dt


def substeps(dt: float, max_substep: float) -> tuple[int, float]:
    """Number and length of the equal substeps covering dt."""
    n = max(1, math.ceil(dt / max_substep - 1e-9))
    return n, dt / n


def linear_acceleration(
    state: State,
    thrust: float,
    params: VehicleParams,
) -> NDArray[np.float64]:
    """World-frame acceleration from gravity, rotor thrust and drag."""
    thrust_world = quat_to_R(state.q) @ np.array([0.0, 0.0, thrust])
    gravity = np.array([0.0, 0.0, -params.g])
    drag = -params.drag_coeff * state.v if params.drag_coeff > 0 else np.zeros(3)
    return gravity + thrust_world / params.mass + drag


def angular_acceleration(
    state: State,
    torque: NDArray[np.float64],
    params: VehicleParams,
) -> NDArray[np.float64]:
    """Body-frame angular acceleration from Euler's rotation equation."""
    w = state.w_body
    gyroscopic = np.cross(w, params.J @ w)
    return params.J_inv @ (torque - gyroscopic)


class DynamicsIntegrator:
    """Advances rotors and rigid body of a vehicle through time."""

    def __init__(self, params: VehicleParams, mixer: MotorMixer):
        self.params = params
        self.mixer = mixer

    def step(self, vehicle: Airframe, dt: float) -> None:
        """
        Integrate the vehicle forward by dt seconds in place.

        Args:
            vehicle: Object exposing ``state`` and ``motors``
            dt: Time step [s], finite and >= 0. Zero is a no-op.
        """
        dt = check_dt(dt)
        if dt == 0.0:
            return

        n, h = substeps(dt, self.params.max_substep)
        for _ in range(n):
            self._substep(vehicle, h)

    def _substep(self, vehicle: Airframe, h: float) -> None:
        for motor in vehicle.motors:
            motor.step(h)

        speeds = np.array([m.speed for m in vehicle.motors])
        thrust, torque = self.mixer.net_force_torque(speeds)

        s = vehicle.state
        a = linear_acceleration(s, thrust, self.params)
        w_dot = angular_acceleration(s, torque, self.params)

        v = s.v + a * h
        p = s.p + v * h
        w = s.w_body + w_dot * h
        q = quat_integrate(s.q, w, h)

        vehicle.state = State(p=p, v=v, q=q, w_body=w)
