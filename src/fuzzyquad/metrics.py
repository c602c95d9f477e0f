"""
Tracking metrics over a simulation log.

All functions take a ``SimLog`` and return scalars suitable for
tabulation or assertions.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

from fuzzyquad.types import SimLog


def steady_state_error(log: SimLog, signal: NDArray[np.float64], target: float,
                       window: float = 1.0) -> float:
    """Mean absolute deviation from target over the final ``window`` seconds."""
    mask = log.t >= log.t[-1] - window
    return float(np.mean(np.abs(signal[mask] - target)))


def error_envelope(log: SimLog, signal: NDArray[np.float64], target: float,
                   period: float = 1.0) -> NDArray[np.float64]:
    """
    Peak absolute error in consecutive windows of ``period`` seconds.

    A decaying envelope means oscillations die out; a flat non-zero one
    means a sustained oscillation. Windows with no samples give ``nan``.
    """
    err = np.abs(signal - target)
    n_windows = int(np.floor((log.t[-1] - log.t[0]) / period))
    peaks = np.full(n_windows, np.nan)
    for k in range(n_windows):
        lo = log.t[0] + k * period
        mask = (log.t >= lo) & (log.t < lo + period)
        if mask.any():
            peaks[k] = np.max(err[mask])
    return peaks


def settling_time(log: SimLog, signal: NDArray[np.float64], target: float,
                  tol: float) -> float:
    """
    First time after which the signal stays within ``tol`` of target.

    Returns ``inf`` if it never settles.
    """
    outside = np.abs(signal - target) > tol
    if not outside.any():
        return float(log.t[0])
    last = np.nonzero(outside)[0][-1]
    if last == len(log.t) - 1:
        return float("inf")
    return float(log.t[last + 1])


def max_horizontal_drift(log: SimLog) -> float:
    """Largest horizontal distance from the start position [m]."""
    return float(np.max(np.linalg.norm(log.p[:, :2] - log.p[0, :2], axis=1)))


def motor_lag_rms(log: SimLog) -> float:
    """RMS gap between commanded and actual rotor speed [rad/s]."""
    return float(np.sqrt(np.mean((log.motor_cmd - log.motor_speed) ** 2)))
