# tests/unit/test_room_hvac.py
import pytest

from boilsim.room.config import AcUnitConfig, AirHandlerConfig, AirHandlerMode
from boilsim.room.gas_exchange import STANDARD_ATMOSPHERES, normalize_composition
from boilsim.room.hvac import ActuatorStatus, AcUnit, AirHandler

EARTH = STANDARD_ATMOSPHERES["earth"]


def fast_ac(**overrides):
    params = dict(response_time_s=1.0, deadband=0.0)
    params.update(overrides)
    return AcUnit(AcUnitConfig(**params))


def test_ac_heats_a_cold_room():
    result = fast_ac().step(room_temperature=18.0, heat_capacity=1e6, dt=1.0)
    assert result.status is ActuatorStatus.HEATING
    assert result.demand == 1.0
    assert result.heat_output_watts == pytest.approx(1500.0)
    assert result.temperature_change == pytest.approx(1500.0 / 1e6)


def test_ac_cools_a_hot_room():
    result = fast_ac().step(room_temperature=30.0, heat_capacity=1e6, dt=1.0)
    assert result.status is ActuatorStatus.COOLING
    assert result.heat_output_watts == pytest.approx(-2000.0)
    assert result.temperature_change < 0
    assert result.energy_joules < 0


def test_response_lag():
    ac = AcUnit(AcUnitConfig(response_time_s=5.0, deadband=0.0))
    result = ac.step(18.0, 1e6, 1.0)
    assert result.heat_output_watts == pytest.approx(1500.0 * 0.2)


def test_slew_rate_limit():
    ac = fast_ac(max_rate_of_change_per_s=0.001)
    result = ac.step(10.0, 100.0, 1.0)
    assert result.temperature_change == pytest.approx(0.001)


def test_extra_airflow_improves_effectiveness_up_to_cap():
    base = fast_ac().step(18.0, 1e6, 1.0)
    boosted = fast_ac().step(18.0, 1e6, 1.0, extra_airflow_m3_per_hour=127.5)
    capped = fast_ac().step(18.0, 1e6, 1.0, extra_airflow_m3_per_hour=10000.0)
    assert boosted.temperature_change == pytest.approx(base.temperature_change * 1.5)
    assert capped.temperature_change == pytest.approx(base.temperature_change * 1.5)


def test_ac_idle_inside_deadband():
    ac = AcUnit(AcUnitConfig(setpoint=22.0))
    result = ac.step(22.2, 36000.0, 1.0)
    assert result.status is ActuatorStatus.IDLE
    assert result.temperature_change == 0.0


def test_disabled_ac_does_nothing():
    ac = fast_ac()
    ac.set_enabled(False)
    result = ac.step(10.0, 36000.0, 1.0)
    assert result.status is ActuatorStatus.OFF
    assert result.temperature_change == 0.0


def test_setpoint_change():
    ac = fast_ac()
    ac.set_setpoint(30.0)
    assert ac.setpoint == 30.0
    assert ac.step(25.0, 1e6, 1.0).status is ActuatorStatus.HEATING


def polluted(ammonia):
    return normalize_composition(dict(EARTH, NH3=ammonia))


def test_air_handler_scrubs_contamination():
    handler = AirHandler(AirHandlerConfig())
    dirty = polluted(0.05)
    result = handler.step(dirty, EARTH, 30.0, 1.0)

    assert result.status is ActuatorStatus.SCRUBBING
    assert 0.05 <= result.flow_fraction <= 1.0
    assert result.flow_m3_per_hour == handler.last_flow_m3_per_hour > 0
    assert result.composition["NH3"] < dirty["NH3"]
    assert sum(result.composition.values()) == pytest.approx(1.0)
    assert result.energy_joules > 0


def test_air_handler_ignores_small_demand():
    handler = AirHandler(AirHandlerConfig())
    result = handler.step(polluted(0.0005), EARTH, 30.0, 1.0)
    assert result.status is ActuatorStatus.IDLE
    assert result.flow_m3_per_hour == 0.0


def test_air_handler_off():
    handler = AirHandler(AirHandlerConfig(mode=AirHandlerMode.OFF))
    dirty = polluted(0.05)
    result = handler.step(dirty, EARTH, 30.0, 1.0)
    assert result.status is ActuatorStatus.OFF
    assert result.composition == dirty
    assert result.contamination > 0


def test_switching_air_handler_off_stops_the_fan():
    handler = AirHandler(AirHandlerConfig())
    handler.step(polluted(0.05), EARTH, 30.0, 1.0)
    handler.set_mode(AirHandlerMode.OFF)
    assert handler.last_flow_m3_per_hour == 0.0
