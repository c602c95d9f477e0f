"""
Core data types for the quadrotor simulator.

All arrays use numpy with explicit shapes noted in comments.
Quaternion convention: [w, x, y, z] (scalar-first), body-to-world.
World frame is z-up; linear velocity is expressed in the world frame,
angular velocity in the body frame.
"""

from dataclasses import dataclass, field
from typing import Optional

import numpy as np
from numpy.typing import NDArray

from fuzzyquad.math3d import IDENTITY_QUAT, quat_to_euler


@dataclass
class State:
    """
    Rigid-body state of the vehicle.

    Attributes:
        p: World position [m], shape (3,)
        v: World-frame linear velocity [m/s], shape (3,)
        q: Body-to-world attitude quaternion [w, x, y, z], shape (4,)
        w_body: Body-frame angular velocity [rad/s], shape (3,)
    """

    p: NDArray[np.float64]
    v: NDArray[np.float64]
    q: NDArray[np.float64]
    w_body: NDArray[np.float64]

    def copy(self) -> "State":
        return State(self.p.copy(), self.v.copy(), self.q.copy(), self.w_body.copy())

    @property
    def euler(self) -> NDArray[np.float64]:
        """Attitude as [roll, pitch, yaw] in radians."""
        return quat_to_euler(self.q)

    @staticmethod
    def zeros() -> "State":
        """At rest at the origin, level."""
        return State(np.zeros(3), np.zeros(3), IDENTITY_QUAT.copy(), np.zeros(3))


@dataclass
class Wrench:
    """
    Net thrust and body torque requested from (or delivered by) the rotors.

    Attributes:
        thrust_N: Collective thrust along body z [N]
        torque_Nm: Body-frame torques [N·m], shape (3,)
    """

    thrust_N: float
    torque_Nm: NDArray[np.float64]  # (3,)

    @staticmethod
    def zeros() -> "Wrench":
        return Wrench(thrust_N=0.0, torque_Nm=np.zeros(3))


@dataclass
class TargetState:
    """
    Commanded state handed to the controller on every update.

    Attributes:
        position: Desired world position [m], shape (3,). ``None`` leaves
            position uncontrolled; altitude then holds ``velocity[2]``.
        velocity: Desired world velocity [m/s], shape (3,)
        attitude: Desired [roll, pitch, yaw] [rad], shape (3,). Roll and
            pitch are overridden by the position loop when ``position``
            is given; yaw is always tracked.
        wrench: Already-resolved thrust/torque. When set, the controller
            passes it through unchanged.
    """

    position: Optional[NDArray[np.float64]] = None
    velocity: NDArray[np.float64] = field(default_factory=lambda: np.zeros(3))
    attitude: NDArray[np.float64] = field(default_factory=lambda: np.zeros(3))
    wrench: Optional[Wrench] = None

    @staticmethod
    def hover(position: NDArray[np.float64], yaw: float = 0.0) -> "TargetState":
        """Hold the given position with level attitude."""
        return TargetState(
            position=np.array(position, dtype=np.float64),
            attitude=np.array([0.0, 0.0, yaw]),
        )

    @staticmethod
    def attitude_hold(roll: float = 0.0, pitch: float = 0.0,
                      yaw: float = 0.0) -> "TargetState":
        """Track an attitude while holding zero vertical speed."""
        return TargetState(attitude=np.array([roll, pitch, yaw]))


# Trailing shape of every SimLog history, in field order
_LOG_COLUMNS = {
    "t": (),
    "p": (3,),
    "v": (3,),
    "q": (4,),
    "w_body": (3,),
    "euler": (3,),
    "motor_speed": (4,),
    "motor_cmd": (4,),
    "thrust": (),
    "torque": (3,),
    "e_pos": (3,),
    "e_att": (3,),
}


@dataclass
class SimLog:
    """
    Per-frame histories of a simulation run.

    Row k of every array belongs to frame k; ``_idx`` counts the rows
    written so far.
    """

    t: NDArray[np.float64]  # (N,) [s]

    p: NDArray[np.float64]  # (N, 3) world position
    v: NDArray[np.float64]  # (N, 3) world velocity
    q: NDArray[np.float64]  # (N, 4) attitude
    w_body: NDArray[np.float64]  # (N, 3) body rates
    euler: NDArray[np.float64]  # (N, 3) roll, pitch, yaw

    motor_speed: NDArray[np.float64]  # (N, 4) actual
    motor_cmd: NDArray[np.float64]  # (N, 4) commanded

    thrust: NDArray[np.float64]  # (N,) last controller thrust
    torque: NDArray[np.float64]  # (N, 3) last controller torque

    e_pos: NDArray[np.float64]  # (N, 3) target - current
    e_att: NDArray[np.float64]  # (N, 3) rotation-vector error

    _idx: int = field(default=0, repr=False)

    @staticmethod
    def allocate(n_steps: int) -> "SimLog":
        """Zero-filled log with room for n_steps frames."""
        arrays = {name: np.zeros((n_steps, *shape)) for name, shape in _LOG_COLUMNS.items()}
        return SimLog(**arrays)

    def record(
        self,
        t: float,
        state: State,
        motor_speed: NDArray[np.float64],
        motor_cmd: NDArray[np.float64],
        command: Wrench,
        e_pos: NDArray[np.float64],
        e_att: NDArray[np.float64],
    ) -> None:
        """Write the next row."""
        row = {
            "t": t,
            "p": state.p,
            "v": state.v,
            "q": state.q,
            "w_body": state.w_body,
            "euler": state.euler,
            "motor_speed": motor_speed,
            "motor_cmd": motor_cmd,
            "thrust": command.thrust_N,
            "torque": command.torque_Nm,
            "e_pos": e_pos,
            "e_att": e_att,
        }
        for name, value in row.items():
            getattr(self, name)[self._idx] = value
        self._idx += 1

    def trim(self) -> "SimLog":
        """View of the rows recorded so far."""
        n = self._idx
        arrays = {name: getattr(self, name)[:n] for name in _LOG_COLUMNS}
        return SimLog(**arrays, _idx=n)
