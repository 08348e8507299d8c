# tests/unit/test_gas_exchange.py
import pytest

from boilsim.room.gas_exchange import (
    STANDARD_ATMOSPHERES,
    add_vapor,
    air_changes_per_hour,
    contamination_level,
    exchange_composition,
    exchange_fraction,
    mole_fraction_to_ppm,
    normalize_composition,
    room_air_mass,
    total_moles,
)

EARTH = STANDARD_ATMOSPHERES["earth"]


def test_normalize_drops_non_positive_entries():
    assert normalize_composition({"N2": 2.0, "O2": 2.0, "X": -1.0, "Y": 0.0}) == {
        "N2": 0.5,
        "O2": 0.5,
    }
    with pytest.raises(ValueError):
        normalize_composition({"N2": 0.0})


def test_earth_atmosphere_sums_to_one():
    assert sum(EARTH.values()) == pytest.approx(1.0, abs=1e-9)


def test_ideal_gas_moles():
    assert total_moles(101325.0, 30.0, 20.0) == pytest.approx(1247.2, rel=1e-3)
    assert room_air_mass(30.0) == pytest.approx(36.0)


def test_one_mole_of_steam_raises_pressure():
    n_room = total_moles(101325.0, 30.0, 20.0)
    composition, pressure = add_vapor(EARTH, 101325.0, 20.0, 30.0, "H2O", 0.018015, 0.018015)

    assert pressure - 101325.0 == pytest.approx(8.314 * 293.15 / 30.0, rel=1e-9)
    assert composition["H2O"] == pytest.approx((0.01 * n_room + 1.0) / (n_room + 1.0))
    assert composition["N2"] < EARTH["N2"]
    assert sum(composition.values()) == pytest.approx(1.0)


def test_new_species_appears():
    composition, _ = add_vapor(EARTH, 101325.0, 20.0, 30.0, "C2H5OH", 0.04607, 0.04607)
    assert composition["C2H5OH"] > 0


def test_no_vapor_is_a_no_op():
    composition, pressure = add_vapor(EARTH, 101325.0, 20.0, 30.0, "H2O", 0.0, 0.018015)
    assert composition == EARTH
    assert composition is not EARTH
    assert pressure == 101325.0


def test_contamination_level():
    assert contamination_level(EARTH, EARTH) == 0.0
    assert contamination_level({"CO2": 0.01}, {}) == pytest.approx(0.03)
    assert contamination_level({"XYZ": 0.01}, {}) == pytest.approx(0.01)


def test_exchange_fraction():
    assert exchange_fraction(3600.0, 1.0, 30.0) == pytest.approx(1.0 / 30.0)
    assert exchange_fraction(3600.0, 1000.0, 30.0) == 1.0
    assert exchange_fraction(0.0, 1.0, 30.0) == 0.0


def test_full_exchange_reaches_reference():
    dirty = {"N2": 0.7, "O2": 0.2, "NH3": 0.1}
    updated, changes = exchange_composition(dirty, EARTH, 1.0, default_efficiency=1.0)
    for species, fraction in EARTH.items():
        assert updated[species] == pytest.approx(fraction)
    assert updated.get("NH3", 0.0) == 0.0
    assert changes["NH3"] == pytest.approx(-0.1)


def test_per_species_efficiency():
    dirty = {"N2": 0.9, "CO2": 0.1}
    target = {"N2": 1.0}
    _, changes = exchange_composition(dirty, target, 0.5, {"CO2": 0.2}, default_efficiency=1.0)
    assert changes["CO2"] == pytest.approx(-0.01)
    assert changes["N2"] == pytest.approx(0.05)


def test_unit_helpers():
    assert air_changes_per_hour(255.0, 30.0) == pytest.approx(8.5)
    assert air_changes_per_hour(255.0, 0.0) == 0.0
    assert mole_fraction_to_ppm(0.0001) == pytest.approx(100.0)
