# tests/unit/test_thermodynamics.py
import dataclasses
import math

import pytest

from boilsim.core.thermodynamics import (
    apply_cooling,
    apply_heat_energy,
    dynamic_ebullioscopic_constant,
    heat_energy,
    heating_time,
    mass_percent_to_molality,
    temperature_change,
    time_to_cool,
    validate_thermodynamics,
    vaporized_mass,
)


def test_sensible_heat_of_one_kilogram_of_water(water):
    assert heat_energy(1.0, water.specific_heat, 80.0) == pytest.approx(334880.0)
    assert temperature_change(1.0, water.specific_heat, 4186.0) == pytest.approx(1.0)


def test_heating_time_at_1700_watts(water):
    assert heating_time(1.0, water.specific_heat, 80.0, 1700.0) == pytest.approx(196.988, rel=1e-4)
    assert heating_time(1.0, water.specific_heat, 80.0, 0.0) == math.inf


def test_vaporized_mass(water):
    assert vaporized_mass(2257000.0, water.heat_of_vaporization) == pytest.approx(1.0)
    assert vaporized_mass(-5.0, water.heat_of_vaporization) == 0.0


def test_heating_below_boiling_point(water):
    result = apply_heat_energy(1.0, 20.0, 4186.0, 100.0, water)
    assert result.temperature == pytest.approx(21.0)
    assert result.liquid_mass == 1.0
    assert result.vapor_mass == 0.0
    assert not result.boiled


def test_excess_energy_becomes_vapor(water):
    result = apply_heat_energy(1.0, 99.0, 4186.0 + 225700.0, 100.0, water)
    assert result.temperature == 100.0
    assert result.vapor_mass == pytest.approx(0.1)
    assert result.liquid_mass == pytest.approx(0.9)
    assert result.latent_energy == pytest.approx(225700.0)


def test_boiling_dry_discards_surplus(water):
    result = apply_heat_energy(1.0, 100.0, 1e9, 100.0, water)
    assert result.liquid_mass == 0.0
    assert result.vapor_mass == pytest.approx(1.0)
    assert result.discarded_energy > 0


def test_residue_grows_with_vapor(water):
    sauce = dataclasses.replace(water, nonvolatile_mass_fraction=0.2)
    result = apply_heat_energy(1.0, 100.0, 2257000.0 * 0.4, 100.0, sauce)
    assert result.vapor_mass == pytest.approx(0.4)
    assert result.residue_gained == pytest.approx(0.1)
    assert result.liquid_mass == pytest.approx(0.5)

    dry = apply_heat_energy(1.0, 100.0, 1e9, 100.0, sauce)
    assert dry.vapor_mass == pytest.approx(0.8)
    assert dry.residue_gained == pytest.approx(0.2)
    assert dry.liquid_mass == 0.0


def test_superheated_liquid_flashes(water):
    result = apply_heat_energy(1.0, 101.0, 0.0, 100.0, water)
    assert result.temperature == 100.0
    assert result.vapor_mass == pytest.approx(4186.0 / 2257000.0)


def test_empty_body_absorbs_nothing(water):
    result = apply_heat_energy(0.0, 100.0, 500.0, 100.0, water)
    assert result.liquid_mass == 0.0
    assert result.discarded_energy == 500.0


def test_exact_cooling_never_crosses_ambient():
    assert apply_cooling(100.0, 20.0, 0.0015, 600.0) == pytest.approx(20.0 + 80.0 * math.exp(-0.9))
    for dt in (1.0, 1e3, 1e6, 1e12):
        assert 20.0 <= apply_cooling(100.0, 20.0, 0.0015, dt) <= 100.0
        assert 10.0 <= apply_cooling(10.0, 20.0, 0.0015, dt) <= 20.0
    assert apply_cooling(100.0, 20.0, 0.0015, 0.0) == 100.0


def test_time_to_cool():
    assert time_to_cool(100.0, 60.0, 20.0, 0.0015) == pytest.approx(math.log(2) / 0.0015)
    assert time_to_cool(100.0, 10.0, 20.0, 0.0015) == math.inf
    assert time_to_cool(50.0, 50.0, 20.0, 0.0015) == 0.0


def test_ebullioscopic_constant_of_water(water):
    kb = dynamic_ebullioscopic_constant(
        100.0, water.molar_mass, water.molar_heat_of_vaporization
    )
    assert kb == pytest.approx(0.513, abs=0.003)


def test_mass_percent_to_molality():
    assert mass_percent_to_molality(3.0, 0.05844) == pytest.approx(0.529, abs=1e-3)
    assert mass_percent_to_molality(0.0, 0.05844) == 0.0


def test_self_validation_passes():
    validate_thermodynamics()
