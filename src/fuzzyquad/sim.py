"""
Fixed-step simulation loop.

Drives a :class:`Quadrotor` the way a render loop would: one
``update(dt)`` per frame, with an optional target supplied by the caller
each frame and an optional telemetry recorder sampling in between.
"""

from typing import Callable, Optional

import numpy as np
from numpy.typing import NDArray

from fuzzyquad.types import State, TargetState, SimLog
from fuzzyquad.params import VehicleParams, FuzzyPDGains, default_params
from fuzzyquad.quadrotor import Quadrotor
from fuzzyquad.telemetry import TelemetryRecorder
from fuzzyquad.log import allocate_log, record_step

# Frame time of a 62.5 Hz render loop
FRAME_DT = 0.016

TargetFn = Callable[[float], Optional[TargetState]]


def run_sim(
    quad: Quadrotor,
    target_fn: Optional[TargetFn],
    t_final: float,
    dt: float = FRAME_DT,
    recorder: Optional[TelemetryRecorder] = None,
    verbose: bool = False,
) -> SimLog:
    """
    Run a quadrotor for t_final seconds of simulated time.

    Args:
        quad: Vehicle to drive (mutated in place)
        target_fn: Target for time t, or None (or a function returning
            None) to fly on the current motor commands
        t_final: Simulation end time [s]
        dt: Frame time [s]
        recorder: Optional telemetry recorder sampled once per frame
        verbose: Print progress updates

    Returns:
        SimLog with one entry per frame, including the initial state
    """
    n_steps = int(np.ceil(t_final / dt)) + 1
    log = allocate_log(n_steps)

    if verbose:
        print(f"Starting simulation: t_final={t_final}s, dt={dt*1000:.1f}ms, steps={n_steps}")

    t0 = quad.time
    for step in range(n_steps):
        t = quad.time - t0
        target = target_fn(t) if target_fn is not None else None

        _record(log, quad, target, t)
        if recorder is not None:
            recorder.record(quad)

        if step == n_steps - 1:
            break
        quad.update(dt, target)

        if verbose and (step + 1) % 100 == 0:
            roll, pitch, yaw = np.degrees(quad.euler)
            print(f"  t={quad.time - t0:.2f}s, z={quad.position[2]:.3f}m, "
                  f"rpy=({roll:.1f}, {pitch:.1f}, {yaw:.1f})deg")

    log = log.trim()

    if verbose:
        print(f"Simulation complete: {len(log.t)} steps recorded")

    return log


def _record(
    log: SimLog,
    quad: Quadrotor,
    target: Optional[TargetState],
    t: float,
) -> None:
    ctrl = quad.controller_state
    if target is None or ctrl is None:
        e_pos = np.zeros(3)
        e_att = np.zeros(3)
    else:
        e_pos = ctrl.e_pos
        e_att = ctrl.e_att
    record_step(
        log,
        t=t,
        state=quad.state,
        motor_speed=quad.motor_speeds,
        motor_cmd=quad.wanted_motor_speeds,
        command=quad.last_command,
        e_pos=e_pos,
        e_att=e_att,
    )


def run_hover_test(
    params: Optional[VehicleParams] = None,
    t_final: float = 5.0,
    dt: float = FRAME_DT,
    recorder: Optional[TelemetryRecorder] = None,
) -> SimLog:
    """
    Open-loop hover: every rotor commanded to the exact hover speed.

    The rotors start spun up, so the vehicle should neither climb nor
    sink nor drift.
    """
    if params is None:
        params = default_params()

    quad = Quadrotor(params, state=_at_altitude(1.0), motor_speed=params.hover_speed)
    quad.set_motor_speed([params.hover_speed] * 4)
    return run_sim(quad, None, t_final, dt, recorder=recorder)


def run_attitude_test(
    roll_deg: float = 10.0,
    params: Optional[VehicleParams] = None,
    gains: Optional[FuzzyPDGains] = None,
    t_final: float = 6.0,
    dt: float = FRAME_DT,
    recorder: Optional[TelemetryRecorder] = None,
) -> SimLog:
    """Closed-loop step to a fixed roll angle from level hover."""
    if params is None:
        params = default_params()

    quad = Quadrotor(params, gains, state=_at_altitude(1.0), motor_speed=params.hover_speed)
    target = TargetState.attitude_hold(roll=np.radians(roll_deg))
    return run_sim(quad, lambda t: target, t_final, dt, recorder=recorder)


def run_position_test(
    goal: Optional[NDArray[np.float64]] = None,
    params: Optional[VehicleParams] = None,
    gains: Optional[FuzzyPDGains] = None,
    t_final: float = 10.0,
    dt: float = FRAME_DT,
    recorder: Optional[TelemetryRecorder] = None,
) -> SimLog:
    """Closed-loop flight from hover at the origin to a goal position."""
    if params is None:
        params = default_params()
    if goal is None:
        goal = np.array([1.0, 1.0, 1.0])

    quad = Quadrotor(params, gains, motor_speed=params.hover_speed)
    target = TargetState.hover(goal)
    return run_sim(quad, lambda t: target, t_final, dt, recorder=recorder)


def _at_altitude(z: float) -> State:
    state = State.zeros()
    state.p = np.array([0.0, 0.0, z])
    return state
