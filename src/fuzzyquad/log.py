"""
Run logs: frame recording helpers and summary statistics.
"""

import numpy as np
from numpy.typing import NDArray

from fuzzyquad.types import State, Wrench, SimLog


def allocate_log(n_steps: int) -> SimLog:
    """Empty log sized for n_steps frames."""
    return SimLog.allocate(n_steps)


def record_step(
    log: SimLog,
    t: float,
    state: State,
    motor_speed: NDArray[np.float64],
    motor_cmd: NDArray[np.float64],
    command: Wrench,
    e_pos: NDArray[np.float64],
    e_att: NDArray[np.float64],
) -> None:
    """
    Append one frame to the log.

    Args:
        motor_speed: Actual rotor speeds [rad/s], shape (4,)
        motor_cmd: Commanded rotor speeds [rad/s], shape (4,)
        command: Most recent controller wrench
        e_pos: World position error [m]
        e_att: Attitude error as a rotation vector [rad]
    """
    log.record(t, state, motor_speed, motor_cmd, command, e_pos, e_att)


def compute_statistics(log: SimLog) -> dict:
    """
    Summary numbers for a finished run.

    Keys:
        pos_rmse [m], att_rmse [rad], max_drift [m] from the first
        position, max_vz [m/s], mean_motor_speed [rad/s],
        simulation_time [s]
    """
    pos_err_mag = np.linalg.norm(log.e_pos, axis=1)
    att_err_mag = np.linalg.norm(log.e_att, axis=1)
    drift = np.linalg.norm(log.p - log.p[0], axis=1)

    return {
        "pos_rmse": float(np.sqrt(np.mean(pos_err_mag**2))),
        "att_rmse": float(np.sqrt(np.mean(att_err_mag**2))),
        "max_drift": float(np.max(drift)),
        "max_vz": float(np.max(np.abs(log.v[:, 2]))),
        "mean_motor_speed": float(np.mean(log.motor_speed)),
        "simulation_time": float(log.t[-1]) if len(log.t) > 0 else 0.0,
    }


def print_statistics(log: SimLog, name: str = "Simulation") -> None:
    """Print summary statistics to console."""
    stats = compute_statistics(log)
    roll, pitch, yaw = np.degrees(log.euler[-1])

    print(f"\n{name} Statistics:")
    print(f"  Duration:         {stats['simulation_time']:.2f} s")
    print(f"  Position RMSE:    {stats['pos_rmse']*1000:.2f} mm")
    print(f"  Attitude RMSE:    {np.degrees(stats['att_rmse']):.3f} deg")
    print(f"  Max drift:        {stats['max_drift']*1000:.2f} mm")
    print(f"  Max |vz|:         {stats['max_vz']*1000:.2f} mm/s")
    print(f"  Mean motor speed: {stats['mean_motor_speed']:.1f} rad/s")
    print(f"  Final attitude:   roll={roll:.2f} pitch={pitch:.2f} yaw={yaw:.2f} deg")
