"""
Heat-Transfer Processes
=======================

Sensible heating, vaporization at the boiling threshold and Newtonian
cooling of a liquid body, plus boiling-point elevation of solutions.

THEORETICAL FOUNDATION
=====================

1. Sensible heat:
   Q = m · c · ΔT

   Where:
   - m: Liquid mass [g] (state is carried in kg, hence the ×1000)
   - c: Specific heat [J/(g·°C)]
   - ΔT: Temperature change [°C]

2. Latent heat of vaporization:
   m_vap = Q_excess / (ΔH_vap · 1000)      ΔH_vap in kJ/kg

3. Newton's law of cooling, integrated exactly over dt:
   T(t + dt) = T_amb + (T(t) - T_amb) · exp(-k · dt)

   The exact form never overshoots the ambient temperature regardless
   of dt, so it is safe at any simulation speed.

4. Ebullioscopic constant computed at the actual boiling temperature:
   K_b = R · T_b² · M_solvent / ΔH_vap,molar
   ΔT_b = i · K_b · b

   Water at 100°C: K_b ≈ 0.513 °C·kg/mol

RESIDUE MODEL
=============

A fluid with non-volatile mass fraction f leaves solids behind as it boils.
Vaporizing v kg of solvent precipitates v·f/(1-f) kg of residue, keeping
the composition of the remaining liquid constant. When the last liquid
boils off, whatever is not vapor becomes residue. Mass is conserved:
liquid + residue + vaporized = initial.

Author: Guilherme F. G. Santos
Date: January 2026
License: MIT
"""

import numpy as np
from dataclasses import dataclass

from .fluids import FluidProperties

# Universal Constants
R_GAS = 8.314  # [J/(mol·K)] Universal gas constant
KELVIN_OFFSET = 273.15
GRAMS_PER_KG = 1000.0
JOULES_PER_KJ = 1000.0


@dataclass(frozen=True)
class HeatingResult:
    """
    Outcome of applying heat energy to a liquid body.

    Attributes:
        temperature: New liquid temperature [°C]
        liquid_mass: Remaining liquid [kg]
        residue_gained: Solids precipitated during this application [kg]
        vapor_mass: Liquid converted to vapor [kg]
        sensible_energy: Energy spent raising temperature [J]
        latent_energy: Energy spent vaporizing [J]
        discarded_energy: Energy with nothing left to act on (dry pot) [J]
    """

    temperature: float
    liquid_mass: float
    residue_gained: float = 0.0
    vapor_mass: float = 0.0
    sensible_energy: float = 0.0
    latent_energy: float = 0.0
    discarded_energy: float = 0.0

    @property
    def boiled(self) -> bool:
        return self.vapor_mass > 0


def heat_energy(mass_kg: float, specific_heat: float, delta_t: float) -> float:
    """
    Energy [J] to change the temperature of a liquid.

    Example:
        >>> heat_energy(1.0, 4.186, 80.0)
        334880.0
    """
    return mass_kg * GRAMS_PER_KG * specific_heat * delta_t


def temperature_change(mass_kg: float, specific_heat: float, energy: float) -> float:
    """Temperature change [°C] produced by energy [J]; 0 for an empty body."""
    if mass_kg <= 0 or specific_heat <= 0:
        return 0.0
    return energy / (mass_kg * GRAMS_PER_KG * specific_heat)


def heating_time(
    mass_kg: float, specific_heat: float, delta_t: float, power: float
) -> float:
    """
    Time [s] for a heater of given power [W] to raise the temperature.

    Returns infinity when the heater is off.
    """
    if power <= 0:
        return float("inf")
    return heat_energy(mass_kg, specific_heat, delta_t) / power


def vaporization_energy(mass_kg: float, heat_of_vaporization: float) -> float:
    """Energy [J] to vaporize a mass [kg] at its boiling point."""
    return mass_kg * heat_of_vaporization * JOULES_PER_KJ


def vaporized_mass(energy: float, heat_of_vaporization: float) -> float:
    """Mass [kg] vaporized by an energy surplus [J]."""
    if energy <= 0 or heat_of_vaporization <= 0:
        return 0.0
    return energy / (heat_of_vaporization * JOULES_PER_KJ)


def apply_heat_energy(
    liquid_mass: float,
    temperature: float,
    energy: float,
    boiling_point: float,
    fluid: FluidProperties,
) -> HeatingResult:
    """
    Heat a liquid body, capping at the boiling point and boiling the excess.

    A liquid already above the boiling point (pressure dropped) flashes its
    superheat into vapor before the new energy is applied.

    Args:
        liquid_mass: Liquid mass [kg]
        temperature: Liquid temperature [°C]
        energy: Heat delivered [J], negative values are ignored
        boiling_point: Boiling point at the current pressure [°C]
        fluid: Fluid properties

    Returns:
        HeatingResult with the new temperature and mass split
    """
    energy = max(float(energy), 0.0)
    if liquid_mass <= 0:
        return HeatingResult(
            temperature=temperature, liquid_mass=0.0, discarded_energy=energy
        )

    thermal_mass = liquid_mass * GRAMS_PER_KG * fluid.specific_heat  # [J/°C]

    if temperature > boiling_point:
        sensible = -(temperature - boiling_point) * thermal_mass
        latent_pool = energy - sensible
    else:
        to_boil = (boiling_point - temperature) * thermal_mass
        if energy <= to_boil:
            return HeatingResult(
                temperature=temperature + energy / thermal_mass,
                liquid_mass=liquid_mass,
                sensible_energy=energy,
            )
        sensible = to_boil
        latent_pool = energy - to_boil

    f = fluid.nonvolatile_mass_fraction
    vapor = vaporized_mass(latent_pool, fluid.heat_of_vaporization)
    evaporable = liquid_mass * (1.0 - f)

    if vapor >= evaporable:
        # Pot boils dry
        vapor = evaporable
        residue = liquid_mass - vapor
        remaining = 0.0
    else:
        residue = vapor * f / (1.0 - f)
        remaining = liquid_mass - vapor - residue

    latent = vaporization_energy(vapor, fluid.heat_of_vaporization)
    return HeatingResult(
        temperature=boiling_point,
        liquid_mass=max(remaining, 0.0),
        residue_gained=residue,
        vapor_mass=vapor,
        sensible_energy=sensible,
        latent_energy=latent,
        discarded_energy=max(latent_pool - latent, 0.0),
    )


def apply_cooling(
    temperature: float, ambient: float, coefficient: float, dt: float
) -> float:
    """
    Exact Newtonian relaxation toward ambient over dt.

    Args:
        temperature: Current temperature [°C]
        ambient: Surrounding temperature [°C]
        coefficient: Cooling constant k [1/s]
        dt: Interval [s]

    Returns:
        New temperature, always between temperature and ambient

    Example:
        >>> round(apply_cooling(100.0, 20.0, 0.0015, 1e9), 6)
        20.0
    """
    if dt <= 0 or coefficient <= 0:
        return temperature
    return float(ambient + (temperature - ambient) * np.exp(-coefficient * dt))


def time_to_cool(
    temperature: float, target: float, ambient: float, coefficient: float
) -> float:
    """Time [s] for Newtonian cooling to reach target (inf if unreachable)."""
    if coefficient <= 0:
        return float("inf")
    start = temperature - ambient
    end = target - ambient
    if end == start:
        return 0.0
    if start == 0 or end / start <= 0 or abs(end) > abs(start):
        return float("inf")
    return float(-np.log(end / start) / coefficient)


def dynamic_ebullioscopic_constant(
    boiling_point: float, solvent_molar_mass: float, molar_heat_of_vaporization: float
) -> float:
    """
    Ebullioscopic constant K_b [°C·kg/mol] at the solvent boiling point.

    Args:
        boiling_point: Solvent boiling temperature [°C]
        solvent_molar_mass: [kg/mol]
        molar_heat_of_vaporization: [J/mol]
    """
    tb_kelvin = boiling_point + KELVIN_OFFSET
    return R_GAS * tb_kelvin**2 * solvent_molar_mass / molar_heat_of_vaporization


def boiling_point_elevation(
    vant_hoff_factor: float, ebullioscopic_constant: float, molality: float
) -> float:
    """Boiling-point elevation ΔT_b = i · K_b · b [°C]."""
    if molality <= 0:
        return 0.0
    return vant_hoff_factor * ebullioscopic_constant * molality


def mass_percent_to_molality(mass_percent: float, solute_molar_mass: float) -> float:
    """
    Convert a solute mass percentage to molality [mol/kg solvent].

    Example:
        >>> round(mass_percent_to_molality(3.0, 0.05844), 3)
        0.529
    """
    if not (0 < mass_percent < 100) or solute_molar_mass <= 0:
        return 0.0
    solute_kg = mass_percent / 100.0
    return (solute_kg / solute_molar_mass) / (1.0 - solute_kg)


def validate_thermodynamics() -> None:
    """
    Validation of heat-transfer processes.

    Tests:
    1. 1 kg water 20→100°C needs 334.88 kJ (≈197 s at 1700 W)
    2. Boiling caps temperature and conserves mass
    3. Exact cooling never crosses ambient
    4. Water K_b ≈ 0.513 °C·kg/mol at 100°C
    """
    from .fluids import WATER

    q = heat_energy(1.0, WATER.specific_heat, 80.0)
    assert abs(q - 334880.0) < 1e-6, f"Q = {q}"
    t_boil = heating_time(1.0, WATER.specific_heat, 80.0, 1700.0)
    assert 196.0 < t_boil < 198.0, f"t = {t_boil:.1f} s"

    result = apply_heat_energy(1.0, 99.0, 1e6, 100.0, WATER)
    assert result.temperature == 100.0
    assert abs(result.liquid_mass + result.vapor_mass + result.residue_gained - 1.0) < 1e-12

    temps = [apply_cooling(100.0, 20.0, 0.0015, dt) for dt in (0, 10, 100, 1e3, 1e6)]
    assert all(a >= b >= 20.0 for a, b in zip(temps, temps[1:]))

    kb = dynamic_ebullioscopic_constant(
        100.0, WATER.molar_mass, WATER.molar_heat_of_vaporization
    )
    assert 0.50 < kb < 0.52, f"K_b = {kb:.4f}"

    print("✓ All heat-transfer validations passed")
    print(f"  - Water 20→100°C at 1700 W: {t_boil:.1f} s")
    print(f"  - K_b(water) = {kb:.4f} °C·kg/mol")


if __name__ == "__main__":
    from .fluids import WATER

    print("Newtonian Cooling of 1 kg Water (k = 0.0015 1/s, ambient 20°C)")
    print("=" * 50)
    print(f"{'t (s)':<10} {'T (°C)':<10}")
    print("-" * 50)
    for t in [0, 60, 300, 600, 1200, 1800, 3600]:
        print(f"{t:<10} {apply_cooling(100.0, 20.0, WATER.cooling_coefficient, t):<10.2f}")
    print()
    validate_thermodynamics()
