"""
Main entry point for the quadrotor simulation.

Run with: python -m fuzzyquad.main

Examples:
    python -m fuzzyquad.main                    # Run all scenarios
    python -m fuzzyquad.main --scenario hover
    python -m fuzzyquad.main --scenario roll --roll 15
    python -m fuzzyquad.main --scenario position
    python -m fuzzyquad.main --no-plot          # Run without showing plots
    python -m fuzzyquad.main --fuzzy-sets       # Also plot the fuzzy sets
"""

import argparse
import logging

import numpy as np
import matplotlib.pyplot as plt

from fuzzyquad.params import VehicleParams, default_params
from fuzzyquad.sim import run_hover_test, run_attitude_test, run_position_test
from fuzzyquad.log import print_statistics
from fuzzyquad.metrics import steady_state_error, error_envelope
from fuzzyquad.telemetry import TelemetryRecorder
from fuzzyquad.plots import (
    plot_motor_telemetry,
    plot_motor_speeds,
    plot_attitude,
    plot_position,
    plot_fuzzy_sets,
)
from fuzzyquad.types import SimLog


def run_hover(params: VehicleParams, show_plots: bool = True) -> SimLog:
    """Open-loop hover at the exact hover speed."""
    print("\n" + "=" * 60)
    print("HOVER TEST")
    print("=" * 60)
    print(f"All motors commanded to hover speed {params.hover_speed:.1f} rad/s")

    recorder = TelemetryRecorder()
    log = run_hover_test(params, t_final=5.0, recorder=recorder)
    print_statistics(log, "Hover")

    if show_plots:
        plot_position(log, "Hover: Position vs Time")
        plot_motor_telemetry(recorder, "Hover: Motor Telemetry")

    return log


def run_roll(params: VehicleParams, roll_deg: float, show_plots: bool = True) -> SimLog:
    """Closed-loop roll step."""
    print("\n" + "=" * 60)
    print("ROLL STEP TEST")
    print("=" * 60)
    print(f"Target: roll {roll_deg:.1f} deg, zero vertical speed")

    recorder = TelemetryRecorder()
    log = run_attitude_test(roll_deg, params, t_final=6.0, recorder=recorder)
    print_statistics(log, "Roll Step")

    roll_target = np.radians(roll_deg)
    sse = steady_state_error(log, log.euler[:, 0], roll_target)
    envelope = error_envelope(log, log.euler[:, 0], roll_target)
    print(f"  Steady-state roll error: {np.degrees(sse):.3f} deg")
    print(f"  Error envelope per second [deg]: {np.round(np.degrees(envelope), 3)}")

    if show_plots:
        plot_attitude(log, "Roll Step: Attitude")
        plot_motor_speeds(log, "Roll Step: Motor Speeds")
        plot_motor_telemetry(recorder, "Roll Step: Motor Telemetry")

    return log


def run_position(params: VehicleParams, show_plots: bool = True) -> SimLog:
    """Closed-loop flight to a goal position."""
    print("\n" + "=" * 60)
    print("POSITION TEST")
    print("=" * 60)
    print("Target: Move from [0, 0, 0] to [1, 1, 1] m")

    recorder = TelemetryRecorder()
    log = run_position_test(np.array([1.0, 1.0, 1.0]), params, t_final=10.0,
                            recorder=recorder)
    print_statistics(log, "Position")

    if show_plots:
        plot_position(log, "Position: Position vs Time")
        plot_attitude(log, "Position: Attitude")
        plot_motor_telemetry(recorder, "Position: Motor Telemetry")

    return log


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Quadrotor Dynamics & Fuzzy PD Control Simulation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m fuzzyquad.main                   # Run all scenarios
  python -m fuzzyquad.main --scenario roll   # Run only the roll step
  python -m fuzzyquad.main --no-plot         # Run without plots
        """,
    )

    parser.add_argument(
        "--scenario", "-s",
        type=str,
        choices=["hover", "roll", "position", "all"],
        default="all",
        help="Which scenario to run (default: all)",
    )

    parser.add_argument(
        "--roll",
        type=float,
        default=10.0,
        help="Roll target for the roll scenario [deg] (default: 10)",
    )

    parser.add_argument(
        "--no-plot",
        action="store_true",
        help="Disable plot display",
    )

    parser.add_argument(
        "--fuzzy-sets",
        action="store_true",
        help="Also show the fuzzy membership functions",
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Log mixer saturation and other debug output",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    print("=" * 60)
    print("  Quadrotor Dynamics & Fuzzy PD Control")
    print("=" * 60)

    params = default_params()
    print(f"\nVehicle Parameters:")
    print(f"  Mass: {params.mass} kg")
    print(f"  Arm length: {params.arm_length} m")
    print(f"  Max motor speed: {params.max_speed:.1f} rad/s")
    print(f"  Hover speed: {params.hover_speed:.1f} rad/s")

    show_plots = not args.no_plot

    if args.scenario in ("hover", "all"):
        run_hover(params, show_plots=show_plots)
    if args.scenario in ("roll", "all"):
        run_roll(params, args.roll, show_plots=show_plots)
    if args.scenario in ("position", "all"):
        run_position(params, show_plots=show_plots)
    if show_plots and args.fuzzy_sets:
        plot_fuzzy_sets("Controller Fuzzy Sets")

    print("\n" + "=" * 60)
    print("SIMULATION COMPLETE")
    print("=" * 60)

    if show_plots:
        print("\nDisplaying plots... Close plot windows to exit.")
        plt.show()
    else:
        print("\nPlots disabled. Use without --no-plot to see visualizations.")


if __name__ == "__main__":
    main()
