"""
Rotor model: first-order speed lag, thrust and spin-reaction torque.

Models the lag between commanded and actual rotor speed due to motor
inertia and ESC response time.

Continuous-time model:
    dw/dt = (w_cmd - w) / tau

Discrete-time (exact ZOH):
    w[k+1] = w[k] + alpha * (w_cmd - w[k])
    where alpha = 1 - exp(-dt / tau)

With alpha in [0, 1) the actual speed moves continuously and
monotonically toward a held command and never overshoots it.

Forces:
    T = k_thrust * w²           (along body z)
    Q = spin * k_torque * w²    (about body z, reaction on the airframe)
"""

import numpy as np

from fuzzyquad.params import VehicleParams


# Reaction-torque sign per rotor position. Diagonal (X) or opposite (+)
# rotors share a spin direction so the reaction torques cancel at hover.
SPIN_DIRECTIONS = (1, -1, 1, -1)


class Motor:
    """
    A single rotor.

    Attributes:
        speed: Actual rotor speed [rad/s], in [0, max_speed].
        commanded: Speed the rotor is spinning toward [rad/s].
        spin: +1 or -1, sign of the reaction torque about body z.
    """

    def __init__(self, params: VehicleParams, spin: int, speed: float = 0.0):
        if spin not in (1, -1):
            raise ValueError(f"spin must be +1 or -1, got {spin}")
        self.max_speed = params.max_speed
        self.tau = params.motor_tau
        self.k_thrust = params.k_thrust
        self.k_torque = params.k_torque
        self.spin = spin
        self.speed = self._clamp(speed)
        self.commanded = self.speed

    def _clamp(self, speed: float) -> float:
        if np.isnan(speed):
            raise ValueError("Motor speed must not be NaN")
        return float(np.clip(speed, 0.0, self.max_speed))

    def set_commanded(self, speed: float) -> None:
        """Set the speed target, clamped to [0, max_speed]."""
        self.commanded = self._clamp(speed)

    def step(self, dt: float) -> None:
        """
        Advance the actual speed toward the command over dt seconds.

        Raises:
            ValueError: If dt is negative or not finite. The speed is
                left unchanged.
        """
        if not np.isfinite(dt) or dt < 0.0:
            raise ValueError(f"dt must be finite and >= 0, got {dt}")
        alpha = 1.0 - np.exp(-dt / self.tau)
        self.speed = self._clamp(self.speed + alpha * (self.commanded - self.speed))

    def thrust(self) -> float:
        """Instantaneous thrust [N]."""
        return self.k_thrust * self.speed ** 2

    def reaction_torque(self) -> float:
        """Spin-reaction torque on the airframe about body z [N·m]."""
        return self.spin * self.k_torque * self.speed ** 2

    def __repr__(self) -> str:
        return (f"Motor(speed={self.speed:.1f}, commanded={self.commanded:.1f}, "
                f"spin={self.spin:+d})")


def build_motors(params: VehicleParams, speed: float = 0.0) -> list[Motor]:
    """
    Create the four rotors of a vehicle.

    Args:
        params: Vehicle parameters
        speed: Initial (and commanded) speed of every rotor [rad/s].
               Pass ``params.hover_speed`` to start at hover equilibrium.

    Returns:
        Motors ordered as in :data:`fuzzyquad.mixer.ROTOR_POSITIONS`.
    """
    return [Motor(params, spin, speed) for spin in SPIN_DIRECTIONS]
