"""
Fuzzy gain-scheduled PD flight controller.

Each controlled axis runs a PD law whose output is scaled by a fuzzy
inference stage:

    u = (1 + span * fuzzy(e / e_scale, de / de_scale)) * (Kp * e + Kd * de)

Axes:
    position x, y   ->  desired roll/pitch (small-angle inversion, tilt-limited)
    position z      ->  collective thrust with tilt compensation
    roll/pitch/yaw  ->  body angular acceleration -> torque via inertia

Errors are taken as target - current. Derivatives come straight from the
measured velocities (world frame) and body rates, so the controller keeps
no memory between calls.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np
from numpy.typing import NDArray

from fuzzyquad.types import State, TargetState, Wrench
from fuzzyquad.params import VehicleParams, FuzzyPDGains, default_gains
from fuzzyquad.math3d import (
    quat_conj,
    quat_from_euler,
    quat_mul,
    quat_to_R,
    quat_to_euler,
    quat_to_rotvec,
)
from fuzzyquad.fuzzy import infer_axes

# Lower bound on cos(tilt) for thrust compensation
_MIN_TILT_COS = 0.5


@dataclass
class ControllerState:
    """
    Errors and fuzzy gain scales of one controller evaluation.

    Used for logging and debugging.
    """

    e_pos: NDArray[np.float64]  # World position error [m]
    e_vel: NDArray[np.float64]  # World velocity error [m/s]
    e_att: NDArray[np.float64]  # Body attitude error (rotation vector) [rad]
    e_rate: NDArray[np.float64]  # Body rate error [rad/s]
    scale_pos: NDArray[np.float64]  # Fuzzy gain scale, x/y/z
    scale_att: NDArray[np.float64]  # Fuzzy gain scale, roll/pitch/yaw
    att_des: NDArray[np.float64]  # Desired [roll, pitch, yaw]


class FuzzyPDController:
    """Stateless mapping (state, target) -> desired thrust and torque."""

    def __init__(self, params: VehicleParams, gains: Optional[FuzzyPDGains] = None):
        self.params = params
        self.gains = gains if gains is not None else default_gains()

    def _pd(
        self,
        error: NDArray[np.float64],
        rate: NDArray[np.float64],
        kp: NDArray[np.float64],
        kd: NDArray[np.float64],
        error_scale: float,
        rate_scale: float,
    ) -> Tuple[NDArray[np.float64], NDArray[np.float64]]:
        """Fuzzy-scaled PD output and the applied gain scale."""
        adjust = infer_axes(error / error_scale, rate / rate_scale)
        scale = 1.0 + self.gains.fuzzy.span * adjust
        return scale * (kp * error + kd * rate), scale

    def desired_tilt(self, a_xy: NDArray[np.float64], yaw: float) -> Tuple[float, float]:
        """
        Roll and pitch that tilt the thrust toward a horizontal acceleration.

        Small-angle inversion of the ZYX thrust direction, rotated by the
        current heading and clipped to ``max_tilt``.
        """
        g = self.params.g
        c, s = np.cos(yaw), np.sin(yaw)
        pitch = (a_xy[0] * c + a_xy[1] * s) / g
        roll = (a_xy[0] * s - a_xy[1] * c) / g
        lim = self.gains.max_tilt
        return float(np.clip(roll, -lim, lim)), float(np.clip(pitch, -lim, lim))

    def compute(self, state: State, target: TargetState) -> Tuple[Wrench, ControllerState]:
        """
        Desired collective thrust and body torque for the next step.

        Never fails on unreachable targets: thrust is only clamped at zero
        and the mixer resolves anything beyond the rotors' reach.

        Args:
            state: Current rigid-body state
            target: Commanded state

        Returns:
            Tuple of (Wrench, ControllerState)
        """
        gains = self.gains
        fz = gains.fuzzy
        R = quat_to_R(state.q)
        yaw = quat_to_euler(state.q)[2]

        # =====================================================================
        # Translational axes
        # =====================================================================
        if target.position is not None:
            e_pos = np.asarray(target.position, dtype=np.float64) - state.p
        else:
            e_pos = np.zeros(3)
        e_vel = np.asarray(target.velocity, dtype=np.float64) - state.v

        a_cmd, scale_pos = self._pd(
            e_pos, e_vel, gains.kp_pos, gains.kd_pos, fz.pos_scale, fz.vel_scale,
        )

        if target.position is not None:
            roll_des, pitch_des = self.desired_tilt(a_cmd[:2], yaw)
        else:
            roll_des, pitch_des = float(target.attitude[0]), float(target.attitude[1])
        att_des = np.array([roll_des, pitch_des, float(target.attitude[2])])

        # Project the vertical demand onto the current body z axis
        tilt_cos = max(R[2, 2], _MIN_TILT_COS)
        thrust = self.params.mass * (self.params.g + a_cmd[2]) / tilt_cos
        thrust = max(thrust, 0.0)

        # =====================================================================
        # Rotational axes
        # =====================================================================
        q_des = quat_from_euler(*att_des)
        e_att = quat_to_rotvec(quat_mul(quat_conj(state.q), q_des))
        e_rate = -state.w_body

        alpha, scale_att = self._pd(
            e_att, e_rate, gains.kp_att, gains.kd_att, fz.att_scale, fz.rate_scale,
        )

        J = self.params.J
        w = state.w_body
        torque = J @ alpha + np.cross(w, J @ w)

        ctrl_state = ControllerState(
            e_pos=e_pos,
            e_vel=e_vel,
            e_att=e_att,
            e_rate=e_rate,
            scale_pos=scale_pos,
            scale_att=scale_att,
            att_des=att_des,
        )

        if target.wrench is not None:
            return Wrench(
                thrust_N=float(target.wrench.thrust_N),
                torque_Nm=np.array(target.wrench.torque_Nm, dtype=np.float64),
            ), ctrl_state

        return Wrench(thrust_N=float(thrust), torque_Nm=torque), ctrl_state
