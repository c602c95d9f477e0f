"""
fuzzyquad: Quadrotor Dynamics & Fuzzy PD Control

A quadrotor rigid-body simulator with a fuzzy gain-scheduled PD flight
controller, motor mixing with ratio-preserving saturation, and
fixed-window telemetry.
"""

from fuzzyquad.types import State, TargetState, Wrench
from fuzzyquad.params import VehicleParams, FuzzyPDGains, default_params, default_gains
from fuzzyquad.quadrotor import Quadrotor, ControlMode

__version__ = "0.1.0"

__all__ = [
    "State",
    "TargetState",
    "Wrench",
    "VehicleParams",
    "FuzzyPDGains",
    "default_params",
    "default_gains",
    "Quadrotor",
    "ControlMode",
]
