# tests/unit/test_simulator.py
import dataclasses

import pytest

from boilsim.core.errors import ConfigurationError
from boilsim.core.scheduler import advance_fluid
from boilsim.core.simulator import FluidBodyState, Phase, simulate_time_step


@pytest.fixture
def cold_pot(water):
    return FluidBodyState.initial(water, liquid_mass=1.0, temperature=20.0)


def test_initial_state(water):
    state = FluidBodyState.initial(water, 1.0, 20.0, altitude=5000.0)
    assert state.phase is Phase.IDLE
    assert state.time == 0.0
    assert 83.0 < state.boiling_point < 85.0
    assert state.total_mass == 1.0


@pytest.mark.parametrize(
    "mass, temperature", [(-1.0, 20.0), (float("nan"), 20.0), (1.0, float("inf"))]
)
def test_initial_state_rejects_non_physical(water, mass, temperature):
    with pytest.raises(ConfigurationError):
        FluidBodyState.initial(water, mass, temperature)


def test_heating_below_boiling(water, cold_pot):
    state = simulate_time_step(cold_pot, 1700.0, 10.0, water)
    assert state.phase is Phase.HEATING
    assert state.temperature == pytest.approx(20.0 + 17000.0 / 4186.0)
    assert state.time == 10.0
    assert cold_pot.temperature == 20.0


def test_boil_onset_near_197_seconds(water, cold_pot):
    before = advance_fluid(cold_pot, 1700.0, 196.0, water)
    assert before.phase is Phase.HEATING
    assert before.vaporized_mass == 0.0

    after = advance_fluid(cold_pot, 1700.0, 200.0, water)
    assert after.phase is Phase.BOILING
    assert after.temperature == pytest.approx(after.boiling_point)
    assert after.vaporized_mass == pytest.approx(3.02 * 1700.0 / 2257000.0, rel=0.01)


def test_zero_or_negative_dt_is_a_no_op(water, cold_pot):
    assert simulate_time_step(cold_pot, 1700.0, 0.0, water) is cold_pot
    assert simulate_time_step(cold_pot, 1700.0, -1.0, water) is cold_pot


def test_dry_state_is_frozen(water):
    dry = FluidBodyState(liquid_mass=0.0, temperature=100.0, vaporized_mass=1.0)
    state = simulate_time_step(dry, 1700.0, 60.0, water)
    assert state.phase is Phase.DRY
    assert state.temperature == 100.0
    assert state.vaporized_mass == 1.0
    assert state.time == 60.0


def test_boiling_dry_conserves_mass(syrup):
    state = FluidBodyState.initial(syrup, 1.0, 20.0)
    state = simulate_time_step(state, 1e6, 10.0, syrup)
    assert state.phase is Phase.DRY
    assert state.liquid_mass == 0.0
    assert state.residue_mass == pytest.approx(0.3)
    assert state.vaporized_mass == pytest.approx(0.7)
    assert state.total_mass == pytest.approx(1.0, abs=1e-12)


def test_cooling_is_monotone_and_settles(water):
    state = FluidBodyState.initial(water, 1.0, 100.0)
    previous = state.temperature
    for _ in range(200):
        state = simulate_time_step(state, 0.0, 60.0, water, ambient_temperature=20.0)
        assert 20.0 <= state.temperature <= previous
        previous = state.temperature
    assert state.phase is Phase.IDLE


def test_warming_toward_ambient(water):
    state = FluidBodyState.initial(water, 1.0, 5.0)
    state = simulate_time_step(state, 0.0, 60.0, water, ambient_temperature=20.0)
    assert state.phase is Phase.WARMING
    assert 5.0 < state.temperature < 20.0


def test_idle_within_tolerance(water):
    state = FluidBodyState.initial(water, 1.0, 20.005)
    state = simulate_time_step(state, 0.0, 1.0, water, ambient_temperature=20.0)
    assert state.phase is Phase.IDLE
    assert state.temperature == 20.005


def test_non_finite_power_treated_as_zero(water, caplog):
    state = FluidBodyState.initial(water, 1.0, 80.0)
    state = simulate_time_step(state, float("nan"), 1.0, water)
    assert state.phase is Phase.COOLING
    assert "Non-finite heater power" in caplog.text


def test_room_pressure_sets_boiling_point(water, cold_pot):
    state = simulate_time_step(cold_pot, 0.0, 1.0, water, ambient_pressure=54000.0)
    assert 83.0 < state.boiling_point < 85.0


def test_invalid_room_pressure_is_recovered(water, cold_pot):
    state = simulate_time_step(cold_pot, 0.0, 1.0, water, ambient_pressure=-10.0)
    assert state.boiling_point == pytest.approx(water.antoine.t_min, abs=1e-6)


def test_extreme_room_pressure_keeps_liquid_physical(water, cold_pot):
    state = simulate_time_step(cold_pot, 1700.0, 0.05, water, ambient_pressure=2e10)
    assert state.boiling_point == pytest.approx(water.antoine.t_max, abs=1e-6)
    assert state.temperature > cold_pot.temperature
    assert state.vaporized_mass == 0.0
    assert state.liquid_mass == pytest.approx(cold_pot.liquid_mass)


def test_pressure_drop_flashes_hot_liquid(water):
    state = dataclasses.replace(FluidBodyState.initial(water, 1.0, 99.0), phase=Phase.HEATING)
    state = simulate_time_step(state, 1.0, 1.0, water, ambient_pressure=54000.0)
    assert state.phase is Phase.BOILING
    assert state.temperature == pytest.approx(state.boiling_point)
    assert state.vaporized_mass > 0.02
    assert state.total_mass == pytest.approx(1.0)
