"""
Motor mixing: net thrust/torque <-> per-rotor commands.

Body frame: x forward, y left, z up. A rotor at (x_i, y_i) producing
thrust T_i along +z contributes torque r_i × F_i = (y_i T_i, -x_i T_i, 0)
plus its spin reaction s_i (k_torque / k_thrust) T_i about z, so

    [F, tau_x, tau_y, tau_z]^T = A @ [T_0, T_1, T_2, T_3]^T

with A invertible for both frame layouts.

Saturation policy (rotor thrusts limited to [0, T_max]):
    1. If a rotor would need negative thrust, the differential part of the
       allocation (everything beyond the equal collective share) is scaled
       down until the lowest rotor sits at zero. Collective thrust is kept.
    2. If a rotor then exceeds T_max, all four thrusts are multiplied by
       the same factor so the highest rotor sits at T_max.
Neither stage clamps rotors independently, so the ratios between the
three torque axes are always preserved and stage 2 additionally keeps
every pairwise rotor ratio. Tracking degrades gracefully instead of
picking up a torque bias.
"""

import logging

import numpy as np
from numpy.typing import NDArray

from fuzzyquad.params import VehicleParams
from fuzzyquad.motor_model import SPIN_DIRECTIONS

logger = logging.getLogger(__name__)


_SQRT1_2 = np.sqrt(0.5)

# Unit rotor positions (x, y), ordered to match SPIN_DIRECTIONS.
ROTOR_POSITIONS = {
    # front-left, front-right, rear-right, rear-left
    "x": np.array([
        [_SQRT1_2, _SQRT1_2],
        [_SQRT1_2, -_SQRT1_2],
        [-_SQRT1_2, -_SQRT1_2],
        [-_SQRT1_2, _SQRT1_2],
    ]),
    # front, right, rear, left
    "+": np.array([
        [1.0, 0.0],
        [0.0, -1.0],
        [-1.0, 0.0],
        [0.0, 1.0],
    ]),
}


def allocation_matrix(params: VehicleParams) -> NDArray[np.float64]:
    """
    Map rotor thrusts to [F, tau_x, tau_y, tau_z].

    Returns:
        Allocation matrix A, shape (4, 4)
    """
    pos = params.arm_length * ROTOR_POSITIONS[params.layout]
    spin = np.array(SPIN_DIRECTIONS, dtype=np.float64)
    return np.vstack([
        np.ones(4),
        pos[:, 1],
        -pos[:, 0],
        spin * (params.k_torque / params.k_thrust),
    ])


def _check_finite(name: str, values) -> NDArray[np.float64]:
    arr = np.asarray(values, dtype=np.float64)
    if not np.all(np.isfinite(arr)):
        raise ValueError(f"{name} must be finite, got {arr}")
    return arr


class MotorMixer:
    """Linear thrust/torque allocation for a four-rotor frame."""

    def __init__(self, params: VehicleParams):
        self.params = params
        self.A = allocation_matrix(params)
        self.A_inv = np.linalg.inv(self.A)
        self.T_max = params.max_motor_thrust
        self.saturated = False

    def allocate(self, thrust: float, torque: NDArray[np.float64]) -> NDArray[np.float64]:
        """
        Per-rotor thrusts realising (thrust, torque), saturated per the
        module-level policy.

        Args:
            thrust: Desired collective thrust [N], >= 0
            torque: Desired body torques [N·m], shape (3,)

        Returns:
            Rotor thrusts [N], shape (4,), each in [0, T_max]
        """
        thrust = float(_check_finite("thrust", thrust))
        torque = _check_finite("torque", torque)
        if thrust < 0.0:
            raise ValueError(f"thrust must be >= 0, got {thrust}")
        if torque.shape != (3,):
            raise ValueError(f"torque must have shape (3,), got {torque.shape}")

        T = self.A_inv @ np.concatenate([[thrust], torque])
        collective = 0.25 * thrust
        self.saturated = False

        # 1) No negative thrust: shrink the differential part
        if T.min() < 0.0:
            diff = T - collective
            scale = collective / (collective - T.min()) if collective > 0.0 else 0.0
            T = collective + scale * diff
            self.saturated = True
            logger.debug("Mixer floor saturation: torque scaled by %.3f", scale)

        # 2) No rotor above T_max: scale everything uniformly
        if T.max() > self.T_max:
            scale = self.T_max / T.max()
            T = scale * T
            self.saturated = True
            logger.debug("Mixer ceiling saturation: command scaled by %.3f", scale)

        # Absorb round-off at the bounds
        return np.clip(T, 0.0, self.T_max)

    def mix(self, thrust: float, torque: NDArray[np.float64]) -> NDArray[np.float64]:
        """
        Commanded rotor speeds for a desired thrust and body torque.

        Returns:
            Rotor speeds [rad/s], shape (4,), each in [0, max_speed]
        """
        T = self.allocate(thrust, torque)
        speeds = np.sqrt(T / self.params.k_thrust)
        return np.minimum(speeds, self.params.max_speed)

    def net_force_torque(
        self,
        speeds: NDArray[np.float64],
    ) -> tuple[float, NDArray[np.float64]]:
        """
        Net collective thrust and body torque produced by four rotor speeds.

        Args:
            speeds: Rotor speeds [rad/s], shape (4,)

        Returns:
            (thrust [N], torque [N·m] shape (3,))
        """
        speeds = _check_finite("speeds", speeds)
        if speeds.shape != (4,):
            raise ValueError(f"speeds must have shape (4,), got {speeds.shape}")
        if np.any(speeds < 0.0):
            raise ValueError(f"speeds must be >= 0, got {speeds}")
        wrench = self.A @ (self.params.k_thrust * speeds ** 2)
        return float(wrench[0]), wrench[1:]
