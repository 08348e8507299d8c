"""
Time-Step Simulator
===================

Pure state transition of a heated liquid body over one interval.

Each call evaluates the boiling point at the current ambient pressure and
runs exactly one branch:

    liquid gone            → DRY      (state frozen)
    power > 0              → HEATING, or BOILING once vapor is produced
    |T - T_amb| <= 0.01°C  → IDLE
    T > T_amb              → COOLING  (exact Newtonian relaxation)
    T < T_amb              → WARMING

The function never mutates its input and never raises for bad physics
input: invalid pressure is clamped by the atmosphere model, non-finite
heater power is treated as zero.

Author: Guilherme F. G. Santos
Date: January 2026
License: MIT
"""

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

import numpy as np

from .atmosphere import (
    boiling_point_at_altitude,
    is_extrapolated,
    pressure_at_altitude,
    safe_boiling_point,
)
from .errors import ConfigurationError
from .fluids import FluidProperties
from .thermodynamics import apply_cooling, apply_heat_energy

logger = logging.getLogger(__name__)

IDLE_TOLERANCE = 0.01  # [°C]
DEFAULT_AMBIENT_TEMPERATURE = 20.0  # [°C]


class Phase(Enum):
    """Phase flag of a liquid body."""

    IDLE = "idle"
    HEATING = "heating"
    BOILING = "boiling"
    COOLING = "cooling"
    WARMING = "warming"
    DRY = "dry"


@dataclass(frozen=True)
class FluidBodyState:
    """
    State of one liquid body, replaced (never mutated) every step.

    Attributes:
        liquid_mass: Liquid remaining [kg]
        temperature: Liquid temperature [°C]
        altitude: Location altitude [m]
        residue_mass: Non-volatile solids left behind [kg]
        phase: Branch taken by the last step
        vaporized_mass: Cumulative vapor produced [kg]
        vapor_generated: Vapor produced by the last step [kg]
        boiling_point: Boiling point used by the last step [°C]
        boiling_point_extrapolated: Boiling point outside the Antoine range
        time: Simulated time [s]
    """

    liquid_mass: float
    temperature: float
    altitude: float = 0.0
    residue_mass: float = 0.0
    phase: Phase = Phase.IDLE
    vaporized_mass: float = 0.0
    vapor_generated: float = 0.0
    boiling_point: Optional[float] = None
    boiling_point_extrapolated: bool = False
    time: float = 0.0

    @classmethod
    def initial(
        cls,
        fluid: FluidProperties,
        liquid_mass: float,
        temperature: float,
        altitude: float = 0.0,
        pressure: Optional[float] = None,
    ) -> "FluidBodyState":
        """
        Fresh state with its boiling point filled in.

        The boiling point follows the standard atmosphere at altitude unless
        an ambient pressure [Pa] is given, e.g. the initial room pressure.
        """
        if pressure is None:
            boiling_point = boiling_point_at_altitude(altitude, fluid)
        else:
            boiling_point = safe_boiling_point(pressure, fluid)
        state = cls(
            liquid_mass=float(liquid_mass),
            temperature=float(temperature),
            altitude=float(altitude),
            boiling_point=boiling_point,
            boiling_point_extrapolated=is_extrapolated(boiling_point, fluid),
        )
        state.validate()
        return state

    @property
    def total_mass(self) -> float:
        """liquid + residue + vaporized; constant over a run."""
        return self.liquid_mass + self.residue_mass + self.vaporized_mass

    def validate(self) -> None:
        """Validate physical consistency of the state."""
        if not np.isfinite(self.liquid_mass) or self.liquid_mass < 0:
            raise ConfigurationError(f"Liquid mass must be >= 0: {self.liquid_mass}")
        if not np.isfinite(self.residue_mass) or self.residue_mass < 0:
            raise ConfigurationError(f"Residue mass must be >= 0: {self.residue_mass}")
        if not np.isfinite(self.temperature):
            raise ConfigurationError(f"Temperature must be finite: {self.temperature}")
        if not np.isfinite(self.altitude):
            raise ConfigurationError(f"Altitude must be finite: {self.altitude}")


def simulate_time_step(
    state: FluidBodyState,
    power: float,
    dt: float,
    fluid: FluidProperties,
    ambient_temperature: float = DEFAULT_AMBIENT_TEMPERATURE,
    ambient_pressure: Optional[float] = None,
) -> FluidBodyState:
    """
    Advance a liquid body by dt seconds.

    Args:
        state: Current state
        power: Heater power [W]
        dt: Interval [s]
        fluid: Fluid properties
        ambient_temperature: Surrounding air temperature [°C]
        ambient_pressure: Room pressure [Pa]; standard atmosphere at the
            state's altitude when None

    Returns:
        New state (the input is returned unchanged when dt <= 0)
    """
    if not np.isfinite(dt) or dt <= 0:
        return state

    if not np.isfinite(power):
        logger.warning(f"Non-finite heater power {power!r}, treating as 0 W")
        power = 0.0

    pressure = pressure_at_altitude(state.altitude, ambient_pressure)
    boiling_point = safe_boiling_point(pressure, fluid)
    common = dict(
        time=state.time + dt,
        boiling_point=boiling_point,
        boiling_point_extrapolated=is_extrapolated(boiling_point, fluid),
        vapor_generated=0.0,
    )

    if state.liquid_mass <= 0:
        return replace(state, phase=Phase.DRY, **common)

    if power > 0:
        result = apply_heat_energy(
            state.liquid_mass, state.temperature, power * dt, boiling_point, fluid
        )
        if result.liquid_mass <= 0:
            phase = Phase.DRY
            logger.info(f"{fluid.name} boiled dry at t={common['time']:.1f}s")
        elif result.boiled:
            phase = Phase.BOILING
        else:
            phase = Phase.HEATING
        common["vapor_generated"] = result.vapor_mass
        return replace(
            state,
            temperature=result.temperature,
            liquid_mass=result.liquid_mass,
            residue_mass=state.residue_mass + result.residue_gained,
            vaporized_mass=state.vaporized_mass + result.vapor_mass,
            phase=phase,
            **common,
        )

    difference = state.temperature - ambient_temperature
    if abs(difference) <= IDLE_TOLERANCE:
        return replace(state, phase=Phase.IDLE, **common)

    temperature = apply_cooling(
        state.temperature, ambient_temperature, fluid.cooling_coefficient, dt
    )
    if abs(temperature - ambient_temperature) <= IDLE_TOLERANCE:
        phase = Phase.IDLE
    else:
        phase = Phase.COOLING if difference > 0 else Phase.WARMING
    return replace(state, temperature=temperature, phase=phase, **common)
