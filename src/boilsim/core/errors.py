"""
Error Taxonomy
==============

Exceptions raised by the boiling simulator.

RECOVERY POLICY
===============

- ConfigurationError: fatal, raised while loading fluid or room documents,
  before any simulation starts.
- InvalidPressure: raised by the boiling-point inversion; recovered at the
  lowest layer by clamping the pressure and logging a warning.
- InvalidCommand: a host command failed range validation; rejected with the
  experiment state unchanged and surfaced to the sender.
- BoundsExceeded: a room quantity left its plausible range; the room clamps
  it and turns the error into an alert, the simulation continues.

Author: Guilherme F. G. Santos
Date: January 2026
License: MIT
"""

from typing import Optional


class BoilSimError(Exception):
    """Base class for all simulator errors."""


class ConfigurationError(BoilSimError, ValueError):
    """Fluid or room document is missing fields or holds non-physical values."""


class InvalidPressure(BoilSimError, ValueError):
    """Pressure is non-positive, non-finite or outside the Antoine domain."""

    def __init__(self, pressure: float, reason: str = "non-positive pressure"):
        self.pressure = pressure
        self.reason = reason
        super().__init__(f"Invalid pressure {pressure!r} Pa: {reason}")


class InvalidCommand(BoilSimError, ValueError):
    """Host command rejected by range validation."""

    def __init__(self, command: str, reason: str):
        self.command = command
        self.reason = reason
        super().__init__(f"Rejected command '{command}': {reason}")


class BoundsExceeded(BoilSimError):
    """Room quantity outside its plausible range (non-fatal)."""

    def __init__(
        self,
        quantity: str,
        value: float,
        bound: float,
        clamped: Optional[float] = None,
    ):
        self.quantity = quantity
        self.value = value
        self.bound = bound
        self.clamped = bound if clamped is None else clamped
        direction = "above" if value > bound else "below"
        super().__init__(f"{quantity}={value:.3f} {direction} limit {bound:.3f}")

    @property
    def alert_code(self) -> str:
        """Alert identifier, e.g. 'pressure_high'."""
        return f"{self.quantity}_{'high' if self.value > self.bound else 'low'}"
