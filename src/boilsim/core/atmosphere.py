"""
Atmosphere Model
================

Ambient pressure as a function of altitude and the boiling point of a fluid
at that pressure.

THEORETICAL FOUNDATION
=====================

1. International Standard Atmosphere, troposphere (h <= 11 km):
   T(h) = T₀ - L·h
   P(h) = P₀ · (T(h)/T₀)^(g·M/(R·L))

2. ISA lower stratosphere (11 km < h <= 20 km and beyond), isothermal:
   P(h) = P₁₁ · exp(-g·M·(h - 11000)/(R·T₁₁))

   Continuing the isothermal layer above 20 km keeps P(h) strictly
   decreasing and positive up to the 100 km ceiling.

3. Antoine equation (pressure in mmHg, temperature in °C):
   log₁₀(P) = A - B/(C + T)   ⇒   T = B/(A - log₁₀(P)) - C

4. Boiling-point elevation for solutions (ebullioscopy):
   ΔT_b = i · K_b · b,  with K_b computed at the current boiling temperature

CONSTANTS
=========

- P₀ = 101325 Pa, T₀ = 288.15 K, L = 0.0065 K/m
- g = 9.80665 m/s², M = 0.0289644 kg/mol, R = 8.31447 J/(mol·K)
- 1 mmHg = 133.322 Pa

EXTRAPOLATION POLICY
====================

- Altitude is clamped to [-500, 100000] m; NaN is treated as sea level.
- Antoine results outside [t_min - 0.5, t_max + 0.5] are returned but
  flagged as extrapolated.
- Non-positive or non-finite pressure raises InvalidPressure;
  safe_boiling_point() recovers by clamping and logging.

Author: Guilherme F. G. Santos
Date: January 2026
License: MIT
"""

import logging
from typing import Optional

import numpy as np

from .errors import InvalidPressure
from .fluids import FluidProperties, WATER
from .thermodynamics import boiling_point_elevation, dynamic_ebullioscopic_constant

logger = logging.getLogger(__name__)

# ISA constants
SEA_LEVEL_PRESSURE = 101325.0  # [Pa]
SEA_LEVEL_TEMPERATURE_K = 288.15  # [K]
LAPSE_RATE = 0.0065  # [K/m]
GRAVITY = 9.80665  # [m/s²]
MOLAR_MASS_AIR = 0.0289644  # [kg/mol]
GAS_CONSTANT = 8.31447  # [J/(mol·K)]
PRESSURE_EXPONENT = GRAVITY * MOLAR_MASS_AIR / (GAS_CONSTANT * LAPSE_RATE)

TROPOPAUSE_ALTITUDE = 11000.0  # [m]
TROPOPAUSE_TEMPERATURE_K = SEA_LEVEL_TEMPERATURE_K - LAPSE_RATE * TROPOPAUSE_ALTITUDE
TROPOPAUSE_PRESSURE = SEA_LEVEL_PRESSURE * (
    TROPOPAUSE_TEMPERATURE_K / SEA_LEVEL_TEMPERATURE_K
) ** PRESSURE_EXPONENT

MIN_ALTITUDE = -500.0  # [m] Dead Sea shore is ~ -430 m
MAX_ALTITUDE = 100000.0  # [m] Kármán line

PA_PER_MMHG = 133.322
EXTRAPOLATION_TOLERANCE = 0.5  # [°C]
SINGULARITY_EPS = 1e-10


def clamp_altitude(altitude: Optional[float]) -> float:
    """Clamp altitude into the modelled range; None/NaN means sea level."""
    if altitude is None or not np.isfinite(altitude):
        return 0.0
    return float(np.clip(altitude, MIN_ALTITUDE, MAX_ALTITUDE))


def temperature_at_altitude(altitude: float) -> float:
    """ISA air temperature [K] at altitude [m]."""
    h = clamp_altitude(altitude)
    if h <= TROPOPAUSE_ALTITUDE:
        return SEA_LEVEL_TEMPERATURE_K - LAPSE_RATE * h
    return TROPOPAUSE_TEMPERATURE_K


def pressure_at_altitude(
    altitude: Optional[float], room_pressure: Optional[float] = None
) -> float:
    """
    Ambient pressure [Pa] at altitude.

    Args:
        altitude: Height above sea level [m]
        room_pressure: Pressure imposed by an enclosing room [Pa]; when given
            it replaces the standard atmosphere

    Returns:
        Pressure in Pa (101325 at sea level)
    """
    if room_pressure is not None:
        return float(room_pressure)

    h = clamp_altitude(altitude)
    if h <= TROPOPAUSE_ALTITUDE:
        ratio = (SEA_LEVEL_TEMPERATURE_K - LAPSE_RATE * h) / SEA_LEVEL_TEMPERATURE_K
        return float(SEA_LEVEL_PRESSURE * ratio**PRESSURE_EXPONENT)

    scale = GRAVITY * MOLAR_MASS_AIR / (GAS_CONSTANT * TROPOPAUSE_TEMPERATURE_K)
    return float(TROPOPAUSE_PRESSURE * np.exp(-scale * (h - TROPOPAUSE_ALTITUDE)))


def altitude_at_pressure(pressure: float) -> float:
    """
    Inverse of pressure_at_altitude() [m].

    Raises:
        InvalidPressure: pressure <= 0 or non-finite
    """
    if not np.isfinite(pressure) or pressure <= 0:
        raise InvalidPressure(pressure)

    if pressure >= TROPOPAUSE_PRESSURE:
        ratio = (pressure / SEA_LEVEL_PRESSURE) ** (1.0 / PRESSURE_EXPONENT)
        h = SEA_LEVEL_TEMPERATURE_K / LAPSE_RATE * (1.0 - ratio)
    else:
        scale = GAS_CONSTANT * TROPOPAUSE_TEMPERATURE_K / (GRAVITY * MOLAR_MASS_AIR)
        h = TROPOPAUSE_ALTITUDE + scale * np.log(TROPOPAUSE_PRESSURE / pressure)
    return clamp_altitude(h)


def boiling_point_at(pressure: float, fluid: FluidProperties = WATER) -> float:
    """
    Boiling point [°C] of a fluid at the given pressure.

    Args:
        pressure: Ambient pressure [Pa]
        fluid: Fluid whose Antoine coefficients are used

    Returns:
        Boiling temperature including solute elevation

    Raises:
        InvalidPressure: Pressure <= 0, non-finite, or at or above 10^A mmHg
    """
    if pressure is None or not np.isfinite(pressure):
        raise InvalidPressure(pressure, "non-finite pressure")
    if pressure <= 0:
        raise InvalidPressure(pressure)

    antoine = fluid.antoine
    log_p = np.log10(pressure / PA_PER_MMHG)
    denominator = antoine.A - log_p
    if denominator <= SINGULARITY_EPS:
        raise InvalidPressure(pressure, "above the Antoine critical limit")

    temperature = antoine.B / denominator - antoine.C
    if not np.isfinite(temperature):
        raise InvalidPressure(pressure, "boiling point is not finite")

    if fluid.is_solution:
        kb = dynamic_ebullioscopic_constant(
            temperature, fluid.molar_mass, fluid.molar_heat_of_vaporization
        )
        temperature += boiling_point_elevation(
            fluid.vant_hoff_factor, kb, fluid.molality
        )

    return float(temperature)


def boiling_point_at_altitude(
    altitude: float, fluid: FluidProperties = WATER
) -> float:
    """Boiling point [°C] under the standard atmosphere at altitude."""
    return boiling_point_at(pressure_at_altitude(altitude), fluid)


def vapor_pressure(temperature: float, fluid: FluidProperties = WATER) -> float:
    """Saturation vapor pressure [Pa] at temperature [°C] (Antoine forward)."""
    antoine = fluid.antoine
    if antoine.C + temperature <= 0:
        return 0.0
    return float(10.0 ** (antoine.A - antoine.B / (antoine.C + temperature)) * PA_PER_MMHG)


def is_extrapolated(temperature: float, fluid: FluidProperties = WATER) -> bool:
    """True when temperature lies outside the verified Antoine range."""
    antoine = fluid.antoine
    return bool(
        temperature < antoine.t_min - EXTRAPOLATION_TOLERANCE
        or temperature > antoine.t_max + EXTRAPOLATION_TOLERANCE
    )


def safe_boiling_point(pressure: float, fluid: FluidProperties = WATER) -> float:
    """
    Boiling point that never raises.

    InvalidPressure is recovered by clamping the pressure into the fluid's
    verified Antoine pressure range (sea level for NaN) and logged.
    """
    try:
        return boiling_point_at(pressure, fluid)
    except InvalidPressure as e:
        low = vapor_pressure(fluid.antoine.t_min, fluid)
        high = vapor_pressure(fluid.antoine.t_max, fluid)
        if pressure is None or not np.isfinite(pressure):
            fallback = SEA_LEVEL_PRESSURE
        else:
            fallback = float(np.clip(pressure, low, high))
        logger.warning(f"{e}; using {fallback:.1f} Pa for {fluid.id}")
        return boiling_point_at(fallback, fluid)


def validate_atmosphere() -> None:
    """
    Validation of the atmosphere model against reference values.

    Tests:
    1. Sea-level pressure is exactly P₀
    2. ISA pressure at 5000 m ≈ 54 kPa
    3. Layers join continuously at the tropopause
    4. Water boils at ≈100°C at sea level and ≈83°C at 5000 m
    5. Boiling point falls monotonically with altitude
    6. Altitude/pressure round trip
    """
    assert abs(pressure_at_altitude(0.0) - SEA_LEVEL_PRESSURE) < 1e-9

    p_5000 = pressure_at_altitude(5000.0)
    assert 53500 < p_5000 < 54500, f"P(5000 m) = {p_5000:.0f} Pa"

    below = pressure_at_altitude(TROPOPAUSE_ALTITUDE - 1e-6)
    above = pressure_at_altitude(TROPOPAUSE_ALTITUDE + 1e-6)
    assert abs(below - above) < 1e-3, "Discontinuity at tropopause"

    bp_0 = boiling_point_at_altitude(0.0)
    bp_5000 = boiling_point_at_altitude(5000.0)
    assert abs(bp_0 - 100.0) < 0.1, f"bp(0 m) = {bp_0:.3f}"
    assert 83.0 < bp_5000 < 85.0, f"bp(5000 m) = {bp_5000:.3f}"

    altitudes = np.linspace(MIN_ALTITUDE, MAX_ALTITUDE, 401)
    bps = [boiling_point_at_altitude(h) for h in altitudes]
    assert all(a >= b for a, b in zip(bps, bps[1:])), "bp must fall with altitude"

    assert abs(altitude_at_pressure(p_5000) - 5000.0) < 1e-6

    print("✓ All atmosphere validations passed")
    print(f"  - P(5000 m) = {p_5000:.0f} Pa")
    print(f"  - bp(0 m) = {bp_0:.2f}°C, bp(5000 m) = {bp_5000:.2f}°C")


if __name__ == "__main__":
    print("Boiling Point vs Altitude (water)")
    print("=" * 50)
    print(f"{'h (m)':<10} {'P (Pa)':<12} {'T_air (°C)':<12} {'bp (°C)':<10}")
    print("-" * 50)
    for h in [0, 500, 1000, 1609, 2500, 3500, 5000, 8849, 11000, 20000]:
        p = pressure_at_altitude(h)
        print(
            f"{h:<10} {p:<12.0f} {temperature_at_altitude(h) - 273.15:<12.1f} "
            f"{boiling_point_at(p):<10.2f}"
        )
    print()
    validate_atmosphere()
