"""
Sub-Step Scheduler
==================

Splits a large simulated interval into bounded integration steps.

For an interval D and reference step S:

    n = ceil(D / S)        step = D / n

The remainder is spread equally so every sub-step has the same length,
no sub-step exceeds S, and D <= S collapses to one direct call. This is
what keeps 65536x acceleration stable: one host tick of 6553.6 s becomes
6554 steps of ≈1 s instead of one 6553.6 s leap.

The scheduler is generic: it folds any `step_fn(state, dt) -> state`, so
the same policy drives a standalone liquid body and the coupled
fluid/room experiment.

Author: Guilherme F. G. Santos
Date: January 2026
License: MIT
"""

import math
import logging
from typing import Callable, Optional, Tuple, TypeVar

from .fluids import FluidProperties
from .simulator import DEFAULT_AMBIENT_TEMPERATURE, FluidBodyState, simulate_time_step

logger = logging.getLogger(__name__)

S = TypeVar("S")

DEFAULT_REFERENCE_STEP = 1.0  # [s]

# Float noise allowance so D = k·S does not produce k+1 sub-steps
_CEIL_SLACK = 1e-9


class TickCancelled(Exception):
    """Raised between sub-steps when the caller asked to abandon the interval."""

    def __init__(self, completed: int, planned: int):
        self.completed = completed
        self.planned = planned
        super().__init__(f"Interval cancelled after {completed}/{planned} sub-steps")


class SubStepScheduler:
    """Fixed-reference-step integrator for arbitrary state transitions."""

    def __init__(self, reference_step: float = DEFAULT_REFERENCE_STEP):
        if not math.isfinite(reference_step) or reference_step <= 0:
            raise ValueError(f"Reference step must be positive: {reference_step}")
        self.reference_step = float(reference_step)

    def plan(self, delta: float) -> Tuple[int, float]:
        """
        Number and length of sub-steps for an interval.

        Args:
            delta: Simulated interval D [s]

        Returns:
            (n, step) with n·step = D; (0, 0.0) for D <= 0
        """
        if not math.isfinite(delta) or delta <= 0:
            return 0, 0.0
        n = max(1, math.ceil(delta / self.reference_step - _CEIL_SLACK))
        return n, delta / n

    def advance(
        self,
        state: S,
        delta: float,
        step_fn: Callable[[S, float], S],
        should_cancel: Optional[Callable[[], bool]] = None,
        observer: Optional[Callable[[S], None]] = None,
    ) -> S:
        """
        Fold step_fn over the planned sub-steps.

        Args:
            state: Starting state
            delta: Interval [s]
            step_fn: Transition applied once per sub-step
            should_cancel: Polled before every sub-step after the first
            observer: Receives every intermediate state

        Returns:
            State after the whole interval

        Raises:
            TickCancelled: should_cancel() returned True; no result is produced
        """
        n, step = self.plan(delta)
        for i in range(n):
            if i and should_cancel is not None and should_cancel():
                logger.debug(f"Sub-stepping cancelled at {i}/{n}")
                raise TickCancelled(i, n)
            state = step_fn(state, step)
            if observer is not None:
                observer(state)
        return state


def advance_fluid(
    state: FluidBodyState,
    power: float,
    delta: float,
    fluid: FluidProperties,
    ambient_temperature: float = DEFAULT_AMBIENT_TEMPERATURE,
    ambient_pressure: Optional[float] = None,
    reference_step: float = DEFAULT_REFERENCE_STEP,
    observer: Optional[Callable[[FluidBodyState], None]] = None,
) -> FluidBodyState:
    """Sub-stepped advance of a standalone liquid body under fixed ambient."""

    def step_fn(current: FluidBodyState, dt: float) -> FluidBodyState:
        return simulate_time_step(
            current, power, dt, fluid, ambient_temperature, ambient_pressure
        )

    return SubStepScheduler(reference_step).advance(
        state, delta, step_fn, observer=observer
    )
