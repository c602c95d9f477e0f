"""
Fuzzy inference for PD gain scheduling.

Two inputs per axis, the normalised tracking error e and its rate de
(both clipped to [-1, 1]), are fuzzified over five ordered linguistic
levels with triangular membership functions:

    NL   NS   ZE   PS   PL
    -1  -0.5   0   0.5   1      (peaks, half width 0.5)

Adjacent triangles overlap so the memberships of any input sum to one,
and the defuzzified output is a continuous, piecewise-bilinear surface
over (e, de) without steps at level boundaries.

Each (e-level, de-level) pair selects an output level from RULE_TABLE.
The crisp output is the firing-strength weighted average of the output
singletons (product t-norm), a value in [-1, 1] interpreted by the
controller as a relative gain adjustment:

    positive   error is growing: stiffen the PD action
    zero       leave the nominal gains alone
    negative   error is already closing fast: soften to avoid overshoot
"""

from enum import IntEnum

import numpy as np
from numpy.typing import NDArray


class Level(IntEnum):
    """Linguistic levels, ordered from most negative to most positive."""

    NL = 0
    NS = 1
    ZE = 2
    PS = 3
    PL = 4


# Peak of each input membership function and each output singleton
LEVEL_CENTERS = np.array([-1.0, -0.5, 0.0, 0.5, 1.0])
HALF_WIDTH = 0.5

NL, NS, ZE, PS, PL = Level

# Rows: error level, columns: error-rate level (both NL..PL)
RULE_TABLE = (
    #  NL  NS  ZE  PS  PL      de
    (PL, PS, PS, ZE, NS),  # e = NL
    (PS, PS, ZE, NS, NS),  # e = NS
    (PS, ZE, ZE, ZE, PS),  # e = ZE
    (NS, NS, ZE, PS, PS),  # e = PS
    (NS, ZE, PS, PS, PL),  # e = PL
)

# Output singleton value of every rule, shape (5, 5)
_RULE_OUTPUT = LEVEL_CENTERS[np.array(RULE_TABLE, dtype=int)]


def triangle(x: float, center: float, half_width: float) -> float:
    """Triangular membership degree of x, peak 1 at center."""
    return max(0.0, 1.0 - abs(x - center) / half_width)


def fuzzify(x: float) -> NDArray[np.float64]:
    """
    Membership degrees of a normalised input over the five levels.

    Inputs outside [-1, 1] saturate at the outer levels, which turns the
    outer triangles into shoulders.

    Returns:
        Degrees ordered NL..PL, shape (5,), summing to 1
    """
    x = float(np.clip(x, -1.0, 1.0))
    return np.array([triangle(x, c, HALF_WIDTH) for c in LEVEL_CENTERS])


def rule_output(error_level: Level, rate_level: Level) -> Level:
    """Output level the rule base assigns to an input level pair."""
    return Level(RULE_TABLE[error_level][rate_level])


def infer(error: float, rate: float) -> float:
    """
    Crisp gain adjustment for one axis.

    Args:
        error: Normalised error
        rate: Normalised error rate

    Returns:
        Adjustment in [-1, 1]
    """
    strength = np.outer(fuzzify(error), fuzzify(rate))
    return float(np.sum(strength * _RULE_OUTPUT) / np.sum(strength))


def infer_axes(
    errors: NDArray[np.float64],
    rates: NDArray[np.float64],
) -> NDArray[np.float64]:
    """Vectorised :func:`infer` over matching arrays of normalised inputs."""
    return np.array([infer(e, r) for e, r in zip(errors, rates)])
