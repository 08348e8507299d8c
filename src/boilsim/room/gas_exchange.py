"""
Gas Exchange
============

Room air composition bookkeeping: vapor addition by the ideal-gas law,
partial air exchange with a reference atmosphere, and a weighted
contamination measure that drives the air handler.

Compositions are mole fractions keyed by formula ('N2', 'O2', 'H2O', ...)
and are kept normalised to sum to 1.

Author: Guilherme F. G. Santos
Date: January 2026
License: MIT
"""

from typing import Dict, Mapping, Optional, Tuple

import numpy as np

GAS_CONSTANT = 8.314  # [J/(mol·K)]
KELVIN_OFFSET = 273.15
AIR_DENSITY = 1.2  # [kg/m³]

STANDARD_ATMOSPHERES: Dict[str, Dict[str, float]] = {
    "earth": {"N2": 0.7708, "O2": 0.2095, "Ar": 0.0093, "CO2": 0.0004, "H2O": 0.01},
}

# Relative harm used by the contamination measure
CONTAMINANT_WEIGHTS: Dict[str, float] = {
    "NH3": 10.0,
    "H2S": 10.0,
    "CO": 8.0,
    "Cl2": 10.0,
    "CO2": 3.0,
    "H2O": 1.0,
    "N2": 0.5,
    "O2": 2.0,
    "Ar": 0.1,
}
DEFAULT_CONTAMINANT_WEIGHT = 1.0


def normalize_composition(composition: Mapping[str, float]) -> Dict[str, float]:
    """
    Drop non-positive entries and rescale to sum 1.

    Raises:
        ValueError: Nothing positive left to normalise
    """
    cleaned = {
        species: float(fraction)
        for species, fraction in composition.items()
        if np.isfinite(fraction) and fraction > 0
    }
    total = sum(cleaned.values())
    if total <= 0:
        raise ValueError("Composition has no positive fractions")
    return {species: fraction / total for species, fraction in cleaned.items()}


def room_air_mass(volume_m3: float) -> float:
    """Air mass [kg] in a room."""
    return volume_m3 * AIR_DENSITY


def total_moles(pressure: float, volume_m3: float, temperature_c: float) -> float:
    """n = PV / RT."""
    return pressure * volume_m3 / (GAS_CONSTANT * (temperature_c + KELVIN_OFFSET))


def add_vapor(
    composition: Mapping[str, float],
    pressure: float,
    temperature_c: float,
    volume_m3: float,
    species: str,
    mass_kg: float,
    molar_mass: float,
) -> Tuple[Dict[str, float], float]:
    """
    Mix vapor into room air.

    Existing fractions are diluted by n/(n + Δn), the vapor species gains
    Δn/(n + Δn), and pressure rises to (n + Δn)·R·T/V.

    Args:
        composition: Current mole fractions
        pressure: Room pressure [Pa]
        temperature_c: Room temperature [°C]
        volume_m3: Room volume [m³]
        species: Vapor formula key
        mass_kg: Vapor mass [kg]
        molar_mass: [kg/mol]

    Returns:
        (new composition, new pressure [Pa])
    """
    if mass_kg <= 0 or molar_mass <= 0:
        return dict(composition), pressure

    n_room = total_moles(pressure, volume_m3, temperature_c)
    n_added = mass_kg / molar_mass
    n_total = n_room + n_added

    diluted = {s: x * n_room / n_total for s, x in composition.items()}
    diluted[species] = diluted.get(species, 0.0) + n_added / n_total

    new_pressure = n_total * GAS_CONSTANT * (temperature_c + KELVIN_OFFSET) / volume_m3
    return normalize_composition(diluted), new_pressure


def contamination_level(
    current: Mapping[str, float], target: Mapping[str, float]
) -> float:
    """Σ |x - x_target| · weight over all species present in either."""
    level = 0.0
    for species in set(current) | set(target):
        deviation = abs(current.get(species, 0.0) - target.get(species, 0.0))
        level += deviation * CONTAMINANT_WEIGHTS.get(
            species, DEFAULT_CONTAMINANT_WEIGHT
        )
    return level


def exchange_fraction(flow_m3_per_hour: float, dt: float, volume_m3: float) -> float:
    """Share of room air replaced during dt, capped at 1."""
    if flow_m3_per_hour <= 0 or dt <= 0 or volume_m3 <= 0:
        return 0.0
    return min(1.0, flow_m3_per_hour / 3600.0 * dt / volume_m3)


def exchange_composition(
    current: Mapping[str, float],
    target: Mapping[str, float],
    fraction: float,
    efficiency: Optional[Mapping[str, float]] = None,
    default_efficiency: float = 0.8,
) -> Tuple[Dict[str, float], Dict[str, float]]:
    """
    Move each species toward the reference air.

    Δx = (x_target - x) · fraction · efficiency(species)

    Returns:
        (normalised composition, per-species change before normalisation)
    """
    efficiency = efficiency or {}
    updated: Dict[str, float] = {}
    changes: Dict[str, float] = {}
    for species in set(current) | set(target):
        x = current.get(species, 0.0)
        eff = efficiency.get(species, default_efficiency)
        delta = (target.get(species, 0.0) - x) * fraction * eff
        updated[species] = x + delta
        if delta:
            changes[species] = delta
    return normalize_composition(updated), changes


def air_changes_per_hour(flow_m3_per_hour: float, volume_m3: float) -> float:
    """ACH = Q / V."""
    if volume_m3 <= 0:
        return 0.0
    return flow_m3_per_hour / volume_m3


def mole_fraction_to_ppm(fraction: float) -> float:
    return fraction * 1e6
