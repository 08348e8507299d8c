# tests/test_experiment.py
import pytest

from boilsim.core.atmosphere import SEA_LEVEL_PRESSURE, boiling_point_at
from boilsim.core.scheduler import SubStepScheduler, TickCancelled
from boilsim.core.simulator import Phase
from boilsim.host.commands import InitialConditions
from boilsim.host.experiment import Experiment
from boilsim.room.config import PressureMode, RoomConfig, load_room_config


def test_burner_waste_heat_reaches_room(water, quiet_room):
    experiment = Experiment(water, quiet_room)
    experiment.heater_power = 1000.0
    experiment.advance(10.0, SubStepScheduler(1.0))

    assert experiment.fluid_state.phase is Phase.HEATING
    assert experiment.room.state.temperature == pytest.approx(20.0 + 100.0 * 10.0 / 36000.0)


def test_cooling_liquid_heats_room_conserving_energy(water, quiet_room):
    experiment = Experiment(water, quiet_room, InitialConditions(1.0, 90.0))
    experiment.advance(600.0, SubStepScheduler(1.0))

    liquid_loss = 1000.0 * water.specific_heat * (90.0 - experiment.fluid_state.temperature)
    room_gain = quiet_room.heat_capacity_j_per_c * (experiment.room.state.temperature - 20.0)
    assert experiment.fluid_state.phase is Phase.COOLING
    assert room_gain == pytest.approx(liquid_loss, rel=1e-9)


def test_vapor_enters_room(water, quiet_room):
    experiment = Experiment(water, quiet_room, InitialConditions(1.0, 99.9))
    experiment.heater_power = 10000.0
    experiment.advance(20.0, SubStepScheduler(1.0))

    assert experiment.fluid_state.phase is Phase.BOILING
    assert experiment.room.state.composition["H2O"] > 0.01
    assert experiment.room.state.pressure > 101325.0


def test_cancelled_interval_commits_nothing(water, quiet_room):
    experiment = Experiment(water, quiet_room)
    experiment.heater_power = 1700.0
    fluid_before = experiment.fluid_state
    room_before = experiment.room

    with pytest.raises(TickCancelled):
        experiment.advance(10.0, SubStepScheduler(1.0), should_cancel=lambda: True)

    assert experiment.fluid_state is fluid_before
    assert experiment.room is room_before
    assert room_before.state.time == 0.0
    assert room_before.state.temperature == 20.0


def test_reset_switches_heater_off(water, default_room):
    experiment = Experiment(water, default_room)
    experiment.heater_power = 1700.0
    experiment.advance(30.0, SubStepScheduler(1.0))
    experiment.reset(InitialConditions(2.0, 50.0, 1500.0))

    assert experiment.heater_power == 0.0
    assert experiment.fluid_state.liquid_mass == 2.0
    assert experiment.fluid_state.temperature == 50.0
    assert experiment.room.state.time == 0.0
    assert experiment.room.altitude == 1500.0


def test_snapshot_reflects_state(water, default_room):
    experiment = Experiment(water, default_room)
    snapshot = experiment.snapshot(tick=3, sim_time=1.5, speed_multiplier=2.0, paused=True)
    assert snapshot.tick == 3
    assert snapshot.paused
    assert snapshot.liquid_mass == 1.0
    assert snapshot.ac_setpoint == 22.0
    assert snapshot.phase is Phase.IDLE


@pytest.mark.parametrize(
    "room, altitude, pressure",
    [
        (RoomConfig(pressure_mode=PressureMode.SEA_LEVEL), 5000.0, SEA_LEVEL_PRESSURE),
        (RoomConfig(pressure_mode=PressureMode.CUSTOM, initial_pressure=95000.0), 0.0, 95000.0),
    ],
)
def test_initial_boiling_point_matches_room_pressure(water, room, altitude, pressure):
    experiment = Experiment(water, room, InitialConditions(1.0, 20.0, altitude))
    snapshot = experiment.snapshot(tick=0, sim_time=0.0, speed_multiplier=1.0, paused=False)
    assert snapshot.room_pressure == pytest.approx(pressure)
    assert snapshot.boiling_point == pytest.approx(boiling_point_at(pressure, water))


def test_initial_boiling_point_from_room_document(water, data_dir):
    experiment = Experiment(water, load_room_config(data_dir / "room_custom.yaml"))
    assert experiment.fluid_state.boiling_point == pytest.approx(
        boiling_point_at(95000.0, water)
    )
