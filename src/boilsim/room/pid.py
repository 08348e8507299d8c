"""
PID Controller
==============

Discrete PID used by the room actuators (AC unit, air handler).

    error  = setpoint - measured
    P      = Kp · error
    I      = Ki · ∫error dt          (integral clamped to ±windup limit)
    D      = Kd · Δerror / dt        (zero on the first update)
    output = clip((P + I + D) / 100, -1, 1)

Output is a normalised demand: +1 full heating, -1 full cooling. Inside
the deadband the controller outputs 0 and stops integrating.

Author: Guilherme F. G. Santos
Date: January 2026
License: MIT
"""

from dataclasses import dataclass
from typing import Dict, Optional

import numpy as np

from ..core.errors import ConfigurationError

OUTPUT_SCALE = 100.0


@dataclass(frozen=True)
class PidGains:
    """
    PID tuning.

    Attributes:
        kp: Proportional gain
        ki: Integral gain
        kd: Derivative gain
        integral_windup_limit: Bound on the integral accumulator
    """

    kp: float = 50.0
    ki: float = 2.0
    kd: float = 10.0
    integral_windup_limit: float = 100.0

    def validate(self) -> None:
        """Validate gains are finite and non-negative."""
        for name in ("kp", "ki", "kd", "integral_windup_limit"):
            value = getattr(self, name)
            if not np.isfinite(value) or value < 0:
                raise ConfigurationError(f"PID {name} must be >= 0 and finite: {value}")


PID_PRESETS: Dict[str, PidGains] = {
    "conservative": PidGains(kp=30.0, ki=1.0, kd=15.0, integral_windup_limit=50.0),
    "balanced": PidGains(kp=50.0, ki=2.0, kd=10.0, integral_windup_limit=100.0),
    "aggressive": PidGains(kp=80.0, ki=4.0, kd=5.0, integral_windup_limit=150.0),
    "critically_damped": PidGains(kp=40.0, ki=1.0, kd=20.0, integral_windup_limit=80.0),
}


@dataclass(frozen=True)
class PidState:
    """Snapshot of the controller accumulator."""

    setpoint: float
    integral: float
    previous_error: Optional[float]
    last_output: float
    proportional: float = 0.0
    integral_term: float = 0.0
    derivative: float = 0.0


class PidController:
    """Stateful PID with integral clamping and an optional deadband."""

    def __init__(self, gains: PidGains, setpoint: float = 0.0, deadband: float = 0.0):
        gains.validate()
        self.gains = gains
        self.deadband = max(float(deadband), 0.0)
        self.reset(setpoint)

    def reset(self, setpoint: Optional[float] = None) -> None:
        """Clear the accumulator, optionally moving the setpoint."""
        if setpoint is not None:
            self.setpoint = float(setpoint)
        self._integral = 0.0
        self._previous_error: Optional[float] = None
        self._last_output = 0.0
        self._terms = (0.0, 0.0, 0.0)

    def update(self, measured: float, dt: float) -> float:
        """
        Advance the controller one interval.

        Args:
            measured: Process value
            dt: Interval [s]

        Returns:
            Demand in [-1, 1]
        """
        error = self.setpoint - measured

        if abs(error) < self.deadband or dt <= 0:
            self._previous_error = error
            self._last_output = 0.0
            self._terms = (0.0, 0.0, 0.0)
            return 0.0

        limit = self.gains.integral_windup_limit
        self._integral = float(np.clip(self._integral + error * dt, -limit, limit))

        proportional = self.gains.kp * error
        integral = self.gains.ki * self._integral
        derivative = 0.0
        if self._previous_error is not None:
            derivative = self.gains.kd * (error - self._previous_error) / dt

        self._previous_error = error
        self._terms = (proportional, integral, derivative)
        total = (proportional + integral + derivative) / OUTPUT_SCALE
        self._last_output = float(np.clip(total, -1.0, 1.0))
        return self._last_output

    @property
    def state(self) -> PidState:
        proportional, integral, derivative = self._terms
        return PidState(
            setpoint=self.setpoint,
            integral=self._integral,
            previous_error=self._previous_error,
            last_output=self._last_output,
            proportional=proportional,
            integral_term=integral,
            derivative=derivative,
        )
