"""
Visualization functions for simulation results and telemetry.
"""

import numpy as np

import matplotlib.pyplot as plt
from matplotlib.figure import Figure

from fuzzyquad.types import SimLog
from fuzzyquad.telemetry import TelemetryRecorder
from fuzzyquad.fuzzy import Level, fuzzify


def plot_motor_telemetry(
    recorder: TelemetryRecorder,
    title: str = "Motor Speeds",
    show: bool = False,
) -> Figure:
    """
    Plot the scrolling motor graphs: actual vs wanted speed per rotor.

    Args:
        recorder: Telemetry recorder holding the retained window
        title: Figure title
        show: If True, call plt.show()

    Returns:
        matplotlib Figure
    """
    fig, axes = plt.subplots(2, 2, figsize=(12, 7), sharex=True)

    for ax, graph in zip(axes.flat, recorder.motor_graphs()):
        t, actual = graph.series("actual")
        _, wanted = graph.series("wanted")
        ax.plot(t, actual, 'r-', label='Actual', linewidth=1.5)
        ax.plot(t, wanted, 'g--', label='Wanted', linewidth=1.5)
        ax.set_title(graph.caption)
        ax.set_ylabel('Speed [rad/s]')
        ax.grid(True, alpha=0.3)
        ax.legend(loc='lower right')

    for ax in axes[1]:
        ax.set_xlabel('Time [s]')

    fig.suptitle(title)
    fig.tight_layout()

    if show:
        plt.show()

    return fig


def plot_motor_speeds(
    log: SimLog,
    title: str = "Motor Speeds",
    show: bool = False,
) -> Figure:
    """Full-history actual (solid) and commanded (dashed) rotor speeds."""
    fig, ax = plt.subplots(figsize=(10, 5))
    colors = ['r', 'g', 'b', 'm']

    for i, c in enumerate(colors):
        ax.plot(log.t, log.motor_speed[:, i], c + '-', label=f'Motor {i}')
        ax.plot(log.t, log.motor_cmd[:, i], c + '--', alpha=0.6)

    ax.set_xlabel('Time [s]')
    ax.set_ylabel('Speed [rad/s]')
    ax.set_title(title)
    ax.legend()
    ax.grid(True, alpha=0.3)
    fig.tight_layout()

    if show:
        plt.show()

    return fig


def plot_attitude(
    log: SimLog,
    title: str = "Attitude",
    show: bool = False,
) -> Figure:
    """Roll, pitch and yaw [deg] over time."""
    fig, axes = plt.subplots(3, 1, figsize=(10, 8), sharex=True)
    labels = ['Roll', 'Pitch', 'Yaw']
    euler_deg = np.degrees(log.euler)

    for i, ax in enumerate(axes):
        ax.plot(log.t, euler_deg[:, i], 'b-', linewidth=1.5)
        ax.set_ylabel(f'{labels[i]} [deg]')
        ax.grid(True, alpha=0.3)

    axes[-1].set_xlabel('Time [s]')
    fig.suptitle(title)
    fig.tight_layout()

    if show:
        plt.show()

    return fig


def plot_position(
    log: SimLog,
    title: str = "Position",
    show: bool = False,
) -> Figure:
    """Position and world velocity components over time."""
    fig, axes = plt.subplots(2, 1, figsize=(10, 7), sharex=True)
    colors = ['r', 'g', 'b']

    for i, axis in enumerate('xyz'):
        axes[0].plot(log.t, log.p[:, i], colors[i] + '-', label=axis)
        axes[1].plot(log.t, log.v[:, i], colors[i] + '-', label=f'v{axis}')

    axes[0].set_ylabel('Position [m]')
    axes[1].set_ylabel('Velocity [m/s]')
    axes[1].set_xlabel('Time [s]')
    for ax in axes:
        ax.legend()
        ax.grid(True, alpha=0.3)

    fig.suptitle(title)
    fig.tight_layout()

    if show:
        plt.show()

    return fig


def plot_fuzzy_sets(
    title: str = "Fuzzy Sets",
    show: bool = False,
) -> Figure:
    """
    Membership functions of the five linguistic levels over a normalised
    input. Beyond [-1, 1] the outer levels hold at full membership.
    """
    x = np.linspace(-1.5, 1.5, 301)
    degrees = np.array([fuzzify(xi) for xi in x])

    fig, ax = plt.subplots(figsize=(8, 4))
    for level in Level:
        ax.plot(x, degrees[:, level], linewidth=1.5, label=level.name)

    ax.set_xlabel('Normalised input')
    ax.set_ylabel('Membership')
    ax.set_ylim(-0.05, 1.05)
    ax.set_title(title)
    ax.legend(loc='upper right')
    ax.grid(True, alpha=0.3)
    fig.tight_layout()

    if show:
        plt.show()

    return fig
