"""
Vehicle parameters and controller gains.

Default values describe the demo vehicle: a 0.4 kg quadrotor with 0.7 m
motor arms and motors topping out at 12000 rpm.
"""

from dataclasses import dataclass, field
from typing import Optional

import numpy as np
from numpy.typing import NDArray


RPM_TO_RAD_S = 2.0 * np.pi / 60.0

FRAME_LAYOUTS = ("x", "+")


@dataclass(frozen=True, eq=False)
class VehicleParams:
    """
    Physical parameters of the vehicle. Immutable once constructed.

    Physical Parameters:
        mass: Body mass [kg]
        arm_length: Distance from centre to each rotor [m]
        g: Gravitational acceleration [m/s²]
        J: Inertia matrix [kg·m²], shape (3, 3). Derived from mass and
           arm length (four point masses at the rotors) when omitted.
        drag_coeff: Linear velocity drag coefficient [1/s] (0 = off)

    Motors:
        max_speed: Maximum rotor speed [rad/s]
        k_thrust: Thrust coefficient, T = k_thrust * w² [N/(rad/s)²]
        k_torque: Reaction-torque coefficient, Q = k_torque * w² [N·m/(rad/s)²]
        motor_tau: First-order motor time constant [s]
        layout: Frame layout, "x" or "+"

    Integration:
        max_substep: Largest integration step [s]; longer frames are split.
    """

    mass: float = 0.4
    arm_length: float = 0.7
    g: float = 9.81
    J: Optional[NDArray[np.float64]] = None
    drag_coeff: float = 0.0

    max_speed: float = 12000.0 * RPM_TO_RAD_S
    k_thrust: float = 1.55e-6
    k_torque: float = 2.0e-8
    motor_tau: float = 0.04
    layout: str = "x"

    max_substep: float = 0.005

    def __post_init__(self) -> None:
        """Validate parameters and fill derived quantities."""
        for name in ("mass", "arm_length", "g", "max_speed", "k_thrust",
                     "k_torque", "motor_tau", "max_substep"):
            value = getattr(self, name)
            if not np.isfinite(value) or value <= 0.0:
                raise ValueError(f"{name} must be positive and finite, got {value}")
        if not np.isfinite(self.drag_coeff) or self.drag_coeff < 0.0:
            raise ValueError(f"drag_coeff must be >= 0, got {self.drag_coeff}")
        if self.layout not in FRAME_LAYOUTS:
            raise ValueError(f"Unknown layout '{self.layout}'. Choose from {FRAME_LAYOUTS}")

        if self.J is None:
            # Four point masses of mass/4 at the rotor positions
            i_xy = 0.5 * self.mass * self.arm_length ** 2
            J = np.diag([i_xy, i_xy, 2.0 * i_xy])
        else:
            J = np.array(self.J, dtype=np.float64)
        if J.shape != (3, 3) or not np.all(np.isfinite(J)):
            raise ValueError(f"J must be a finite 3x3 matrix, got {J!r}")
        if not np.allclose(J, J.T) or np.any(np.linalg.eigvalsh(J) <= 0.0):
            raise ValueError("J must be symmetric positive definite")

        # frozen dataclass: bypass __setattr__ for derived fields
        object.__setattr__(self, "J", J)
        object.__setattr__(self, "_J_inv", np.linalg.inv(J))

    @property
    def J_inv(self) -> NDArray[np.float64]:
        """Inverse of inertia matrix (cached)."""
        return self._J_inv

    @property
    def weight(self) -> float:
        """Weight force [N]."""
        return self.mass * self.g

    @property
    def max_motor_thrust(self) -> float:
        """Thrust of a single motor at full speed [N]."""
        return self.k_thrust * self.max_speed ** 2

    @property
    def hover_speed(self) -> float:
        """Rotor speed at which four motors exactly carry the weight [rad/s]."""
        return float(np.sqrt(self.weight / (4.0 * self.k_thrust)))


@dataclass
class FuzzyParams:
    """
    Normalisation and authority of the fuzzy gain-scheduling stage.

    Each controlled axis divides its error and error rate by the matching
    scale before fuzzification; inputs beyond the scale saturate at the
    outermost linguistic level.

    Attributes:
        pos_scale, vel_scale: Position [m] and velocity [m/s] scales
        att_scale, rate_scale: Attitude [rad] and body-rate [rad/s] scales
        span: Gain authority; the PD term is multiplied by 1 + span * u,
              with u in [-1, 1], so span must stay below 1.
    """

    pos_scale: float = 1.0
    vel_scale: float = 2.0
    att_scale: float = 0.5
    rate_scale: float = 3.0
    span: float = 0.3

    def __post_init__(self) -> None:
        for name in ("pos_scale", "vel_scale", "att_scale", "rate_scale"):
            if getattr(self, name) <= 0.0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)}")
        if not 0.0 <= self.span < 1.0:
            raise ValueError(f"span must be in [0, 1), got {self.span}")


@dataclass(eq=False)
class FuzzyPDGains:
    """
    PD gains of the flight controller.

    All gains act on accelerations, so they do not depend on mass or
    inertia.

    Position gains, ordered [x, y, z]:
        kp_pos: Proportional gains [1/s²], shape (3,)
        kd_pos: Derivative gains [1/s], shape (3,)

    Attitude gains, ordered [roll, pitch, yaw]:
        kp_att: Proportional gains [1/s²], shape (3,)
        kd_att: Derivative gains [1/s], shape (3,)

    Limits:
        max_tilt: Largest roll/pitch the position loop may request [rad]
    """

    kp_pos: NDArray[np.float64] = field(
        default_factory=lambda: np.array([1.5, 1.5, 4.0])
    )
    kd_pos: NDArray[np.float64] = field(
        default_factory=lambda: np.array([2.0, 2.0, 4.0])
    )
    # Inner loop well above the position loop bandwidth
    kp_att: NDArray[np.float64] = field(
        default_factory=lambda: np.array([36.0, 36.0, 16.0])
    )
    kd_att: NDArray[np.float64] = field(
        default_factory=lambda: np.array([10.0, 10.0, 8.0])
    )
    max_tilt: float = np.radians(25.0)
    fuzzy: FuzzyParams = field(default_factory=FuzzyParams)

    def __post_init__(self) -> None:
        """Convert gain sequences to arrays and check their signs."""
        self.kp_pos = np.asarray(self.kp_pos, dtype=np.float64)
        self.kd_pos = np.asarray(self.kd_pos, dtype=np.float64)
        self.kp_att = np.asarray(self.kp_att, dtype=np.float64)
        self.kd_att = np.asarray(self.kd_att, dtype=np.float64)
        for name in ("kp_pos", "kd_pos", "kp_att", "kd_att"):
            gains = getattr(self, name)
            if gains.shape != (3,) or np.any(gains < 0.0):
                raise ValueError(f"{name} must be three non-negative gains, got {gains}")
        if not 0.0 < self.max_tilt < np.pi / 2:
            raise ValueError(f"max_tilt must be in (0, pi/2), got {self.max_tilt}")


def default_params() -> VehicleParams:
    """Parameters of the demo vehicle."""
    return VehicleParams()


def default_gains() -> FuzzyPDGains:
    """Controller gains tuned for :func:`default_params`."""
    return FuzzyPDGains()
