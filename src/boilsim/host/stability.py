"""
Sub-Step Stability Study
========================

Empirical check of the sub-stepping policy on the coupled liquid/room
system, where the one-step delayed feedback is the only source of
discretisation error (heating is linear and cooling is integrated exactly).

REFERENCE PROBLEM
=================

A hot liquid cooling in a closed room with no actuators:

    dT_f/dt = -k · (T_f - T_r)
    dT_r/dt = +k · (C_f / C_r) · (T_f - T_r)

C_f = m·c (liquid), C_r = room heat capacity. The reference trajectory is
integrated with scipy's Radau solver at tight tolerances; the sub-stepped
experiment must approach it monotonically as the reference step S shrinks.

A second check bounds the temperature reachable at any speed:

    T <= max(T₀, min(T₀ + P·D / (m·c), T_boil))

Author: Guilherme F. G. Santos
Date: January 2026
License: MIT
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np
from scipy.integrate import solve_ivp

from ..core.fluids import FluidProperties, WATER
from ..core.scheduler import SubStepScheduler
from ..core.simulator import FluidBodyState
from ..core.thermodynamics import temperature_change
from ..room.config import RoomConfig
from .commands import InitialConditions
from .experiment import Experiment

logger = logging.getLogger(__name__)

DEFAULT_STEPS = (60.0, 30.0, 15.0, 7.5)


@dataclass(frozen=True)
class ConvergencePoint:
    """Result of one sub-stepped run."""

    reference_step: float
    substeps: int
    final_temperature: float
    room_temperature: float
    error: float


def reference_cooling_solution(
    fluid_temperature: float,
    room_temperature: float,
    fluid_thermal_mass: float,
    room_heat_capacity: float,
    coefficient: float,
    duration: float,
) -> Tuple[float, float]:
    """
    High-accuracy coupled cooling trajectory end point.

    Args:
        fluid_temperature: Initial liquid temperature [°C]
        room_temperature: Initial room temperature [°C]
        fluid_thermal_mass: m·c of the liquid [J/°C]
        room_heat_capacity: Room heat capacity [J/°C]
        coefficient: Newton cooling constant [1/s]
        duration: Integration span [s]

    Returns:
        (T_fluid, T_room) at t = duration
    """
    ratio = fluid_thermal_mass / room_heat_capacity

    def derivatives(t: float, y: np.ndarray) -> np.ndarray:
        gap = y[0] - y[1]
        return np.array([-coefficient * gap, coefficient * ratio * gap])

    solution = solve_ivp(
        derivatives,
        (0.0, duration),
        np.array([fluid_temperature, room_temperature]),
        method="Radau",
        rtol=1e-10,
        atol=1e-10,
    )
    if not solution.success:
        raise RuntimeError(f"Reference integration failed: {solution.message}")
    return float(solution.y[0, -1]), float(solution.y[1, -1])


def quiet_room(room_config: Optional[RoomConfig] = None) -> RoomConfig:
    """Room without actuators, so only the liquid drives its temperature."""
    base = room_config or RoomConfig()
    return RoomConfig(
        volume_m3=base.volume_m3,
        heat_capacity_j_per_c=base.heat_capacity_j_per_c,
        initial_temperature=base.initial_temperature,
        pressure_mode=base.pressure_mode,
        initial_pressure=base.initial_pressure,
        leak_rate_pa_per_s=base.leak_rate_pa_per_s,
        envelope_conductance_w_per_c=0.0,
        atmosphere=dict(base.atmosphere),
        limits=base.limits,
    )


def convergence_study(
    fluid: FluidProperties = WATER,
    initial: Optional[InitialConditions] = None,
    duration: float = 600.0,
    steps: Sequence[float] = DEFAULT_STEPS,
    room_config: Optional[RoomConfig] = None,
) -> List[ConvergencePoint]:
    """
    Run the coupled cooling problem at several reference steps.

    Args:
        fluid: Liquid to cool
        initial: Starting liquid conditions (default 1 kg at 100°C)
        duration: Simulated span D [s]
        steps: Reference steps S to compare
        room_config: Base room; actuators are stripped

    Returns:
        One ConvergencePoint per step, in the order given
    """
    initial = initial or InitialConditions(liquid_mass=1.0, temperature=100.0)
    room = quiet_room(room_config)

    reference_fluid, _ = reference_cooling_solution(
        initial.temperature,
        room.initial_temperature,
        initial.liquid_mass * 1000.0 * fluid.specific_heat,
        room.heat_capacity_j_per_c,
        fluid.cooling_coefficient,
        duration,
    )

    points = []
    for step in steps:
        scheduler = SubStepScheduler(step)
        experiment = Experiment(fluid, room, initial)
        experiment.advance(duration, scheduler)
        n, _ = scheduler.plan(duration)
        final = experiment.fluid_state.temperature
        points.append(
            ConvergencePoint(
                reference_step=step,
                substeps=n,
                final_temperature=final,
                room_temperature=experiment.room.state.temperature,
                error=abs(final - reference_fluid),
            )
        )
        logger.debug(f"S={step:g}s n={n} T={final:.6f}°C err={points[-1].error:.2e}")
    return points


def is_monotonically_convergent(points: Sequence[ConvergencePoint]) -> bool:
    """True if error strictly shrinks as the reference step shrinks."""
    ordered = sorted(points, key=lambda p: p.reference_step, reverse=True)
    return all(a.error > b.error for a, b in zip(ordered, ordered[1:]))


def max_reachable_temperature(
    state: FluidBodyState,
    power: float,
    duration: float,
    fluid: FluidProperties,
    boiling_point: float,
) -> float:
    """Energy-conservation bound on the liquid temperature after duration."""
    heated = state.temperature + temperature_change(
        state.liquid_mass, fluid.specific_heat, max(power, 0.0) * duration
    )
    return max(state.temperature, min(heated, boiling_point))


def validate_stability() -> None:
    """
    Validation of the sub-stepping policy.

    Tests:
    1. Coupled cooling error shrinks monotonically with the reference step
    2. The finest step lands within 0.05°C of the reference solution
    """
    points = convergence_study()
    assert is_monotonically_convergent(points), "Error not monotone in S"
    assert points[-1].error < 0.05, f"Finest error {points[-1].error:.4f}°C"

    print("✓ All stability validations passed")
    for p in points:
        print(f"  - S={p.reference_step:>5g}s  n={p.substeps:<4d} error={p.error:.2e}°C")


if __name__ == "__main__":
    validate_stability()
