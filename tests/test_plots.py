"""Figures build from logs, telemetry and the fuzzy sets."""

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import numpy as np
import pytest

from fuzzyquad.fuzzy import Level
from fuzzyquad.plots import plot_fuzzy_sets, plot_motor_telemetry
from fuzzyquad.sim import run_hover_test
from fuzzyquad.telemetry import TelemetryRecorder


@pytest.fixture(autouse=True)
def _close_figures():
    yield
    plt.close("all")


def test_fuzzy_sets_plot_one_curve_per_level():
    fig = plot_fuzzy_sets()
    lines = fig.axes[0].get_lines()
    assert [line.get_label() for line in lines] == [level.name for level in Level]

    # Memberships sum to one everywhere, shoulders saturate outside [-1, 1]
    total = sum(line.get_ydata() for line in lines)
    assert np.allclose(total, 1.0)
    x = lines[0].get_xdata()
    assert x[0] == -1.5 and x[-1] == 1.5
    assert np.all(lines[Level.NL].get_ydata()[x <= -1.0] == 1.0)
    assert np.all(lines[Level.PL].get_ydata()[x >= 1.0] == 1.0)


def test_motor_telemetry_plot_has_four_panels():
    recorder = TelemetryRecorder()
    run_hover_test(t_final=0.5, recorder=recorder)
    fig = plot_motor_telemetry(recorder)
    assert len(fig.axes) == 4
    assert [ax.get_title() for ax in fig.axes] == [f"Motor {i}" for i in range(4)]
