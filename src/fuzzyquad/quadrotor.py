"""
Quadrotor vehicle: owns the rigid-body state and four rotors and runs

    controller  ->  mixer  ->  integrator

once per ``update``. Rendering and telemetry only read through the
accessors below, all of which return copies.
"""

import logging
from enum import Enum
from typing import Optional, Sequence

import numpy as np
from numpy.typing import NDArray

from fuzzyquad.types import State, TargetState, Wrench
from fuzzyquad.params import VehicleParams, FuzzyPDGains, default_params
from fuzzyquad.motor_model import build_motors
from fuzzyquad.mixer import MotorMixer
from fuzzyquad.controller_fuzzy_pd import FuzzyPDController, ControllerState
from fuzzyquad.dynamics import DynamicsIntegrator, check_dt

logger = logging.getLogger(__name__)


class ControlMode(Enum):
    """Source of the rotor speed commands."""

    CONTROLLER = "controller"
    MANUAL = "manual"


class Quadrotor:
    """
    Simulated quadrotor.

    Args:
        params: Vehicle parameters (default: :func:`default_params`)
        gains: Controller gains (default: tuned defaults)
        state: Initial rigid-body state (default: origin, level, at rest)
        motor_speed: Initial speed of every rotor [rad/s]. Use
            ``params.hover_speed`` to start in hover equilibrium.
    """

    def __init__(
        self,
        params: Optional[VehicleParams] = None,
        gains: Optional[FuzzyPDGains] = None,
        state: Optional[State] = None,
        motor_speed: float = 0.0,
    ):
        self.params = params if params is not None else default_params()
        self.state = state.copy() if state is not None else State.zeros()
        self.motors = build_motors(self.params, motor_speed)
        self.mixer = MotorMixer(self.params)
        self.controller = FuzzyPDController(self.params, gains)
        self.integrator = DynamicsIntegrator(self.params, self.mixer)
        self.mode = ControlMode.MANUAL
        self._time = 0.0
        self._command = Wrench.zeros()
        self._ctrl_state: Optional[ControllerState] = None

    # ------------------------------------------------------------------
    # Simulation
    # ------------------------------------------------------------------

    def update(self, dt: float, target: Optional[TargetState] = None) -> None:
        """
        Advance the simulation by dt seconds.

        With a target the controller drives the rotors (controller mode);
        without one the last commanded speeds are held, which is how
        manual overrides from :meth:`set_motor_speed` are flown.
        """
        dt = check_dt(dt)

        if target is not None:
            command, ctrl_state = self.controller.compute(self.state, target)
            speeds = self.mixer.mix(command.thrust_N, command.torque_Nm)
            if self.mixer.saturated:
                logger.debug("t=%.3fs: rotor saturation, tracking degraded", self._time)
            for motor, speed in zip(self.motors, speeds):
                motor.set_commanded(speed)
            self.mode = ControlMode.CONTROLLER
            self._command = command
            self._ctrl_state = ctrl_state

        self.integrator.step(self, dt)
        self._time += dt

    def set_motor_speed(self, speeds: Sequence[float]) -> None:
        """
        Command rotor speeds directly, bypassing the controller.

        Raises:
            ValueError: If the sequence is not four values within
                [0, max_speed]. Nothing is changed in that case.
        """
        speeds = np.asarray(speeds, dtype=np.float64)
        if speeds.shape != (4,):
            raise ValueError(f"Expected 4 motor speeds, got shape {speeds.shape}")
        if not np.all(np.isfinite(speeds)):
            raise ValueError(f"Motor speeds must be finite, got {speeds}")
        if np.any(speeds < 0.0) or np.any(speeds > self.params.max_speed):
            raise ValueError(
                f"Motor speeds must be within [0, {self.params.max_speed:.1f}], got {speeds}"
            )
        for motor, speed in zip(self.motors, speeds):
            motor.set_commanded(speed)
        self.mode = ControlMode.MANUAL
        self._ctrl_state = None

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def time(self) -> float:
        """Simulated time since construction [s]."""
        return self._time

    @property
    def position(self) -> NDArray[np.float64]:
        return self.state.p.copy()

    @property
    def orientation(self) -> NDArray[np.float64]:
        """Attitude quaternion [w, x, y, z]."""
        return self.state.q.copy()

    @property
    def euler(self) -> NDArray[np.float64]:
        """Attitude as [roll, pitch, yaw] [rad]."""
        return self.state.euler

    @property
    def linear_velocity(self) -> NDArray[np.float64]:
        """World-frame velocity [m/s]."""
        return self.state.v.copy()

    @property
    def angular_velocity(self) -> NDArray[np.float64]:
        """Body-frame angular velocity [rad/s]."""
        return self.state.w_body.copy()

    def motor_speed(self, i: int) -> float:
        """Actual speed of rotor i [rad/s]."""
        return self.motors[i].speed

    def wanted_motor_speed(self, i: int) -> float:
        """Commanded speed of rotor i [rad/s]."""
        return self.motors[i].commanded

    @property
    def motor_speeds(self) -> NDArray[np.float64]:
        return np.array([m.speed for m in self.motors])

    @property
    def wanted_motor_speeds(self) -> NDArray[np.float64]:
        return np.array([m.commanded for m in self.motors])

    @property
    def last_command(self) -> Wrench:
        """Thrust/torque requested by the most recent controller step."""
        return Wrench(self._command.thrust_N, self._command.torque_Nm.copy())

    @property
    def controller_state(self) -> Optional[ControllerState]:
        """Errors from the most recent controller step, None in manual mode."""
        return self._ctrl_state
