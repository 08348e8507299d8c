# tests/unit/test_commands.py
import numpy as np
import pytest

from boilsim.core.errors import InvalidCommand
from boilsim.host import commands as cmd
from boilsim.host.commands import Command, CommandRange, CommandType, InitialConditions
from boilsim.room.config import AirHandlerMode


@pytest.mark.parametrize(
    "command, expected",
    [
        (cmd.set_heater_power(0), 0.0),
        (cmd.set_heater_power(1700), 1700.0),
        (cmd.set_heater_power(10000.0), 10000.0),
        (cmd.set_speed_multiplier(1), 1.0),
        (cmd.set_speed_multiplier(np.float64(65536)), 65536.0),
        (cmd.set_actuator_setpoint(5), 5.0),
        (cmd.set_actuator_setpoint(40.0), 40.0),
    ],
)
def test_numeric_commands_accepted(command, expected):
    validated = command.validate()
    assert validated.value == expected
    assert isinstance(validated.value, float)


@pytest.mark.parametrize(
    "command",
    [
        cmd.set_heater_power(-1.0),
        cmd.set_heater_power(10000.5),
        cmd.set_heater_power(float("nan")),
        cmd.set_heater_power("high"),
        cmd.set_heater_power(True),
        cmd.set_heater_power(None),
        cmd.set_speed_multiplier(0.5),
        cmd.set_speed_multiplier(65537),
        cmd.set_speed_multiplier(float("inf")),
        cmd.set_actuator_setpoint(4.9),
        cmd.set_actuator_setpoint(40.1),
    ],
)
def test_numeric_commands_rejected(command):
    with pytest.raises(InvalidCommand):
        command.validate()


def test_rejection_message_names_command_and_range():
    with pytest.raises(InvalidCommand) as excinfo:
        cmd.set_heater_power(-1.0).validate()
    assert excinfo.value.command == "set_heater_power"
    assert str(excinfo.value) == (
        "Rejected command 'set_heater_power': power=-1 W outside [0, 10000]"
    )


def test_reset_defaults():
    validated = cmd.reset_experiment().validate()
    assert validated.value == InitialConditions(1.0, 20.0, 0.0)


@pytest.mark.parametrize(
    "initial",
    [
        InitialConditions(liquid_mass=0.0),
        InitialConditions(liquid_mass=100.01),
        InitialConditions(temperature=-51.0),
        InitialConditions(temperature=301.0),
        InitialConditions(altitude=-501.0),
        InitialConditions(altitude=100001.0),
        InitialConditions(liquid_mass=float("nan")),
    ],
)
def test_reset_rejects_out_of_range_conditions(initial):
    with pytest.raises(InvalidCommand):
        cmd.reset_experiment(initial).validate()


def test_reset_boundaries_accepted():
    initial = InitialConditions(liquid_mass=100, temperature=300, altitude=-500).validate()
    assert initial == InitialConditions(100.0, 300.0, -500.0)


def test_reset_payload_type():
    with pytest.raises(InvalidCommand, match="InitialConditions"):
        Command(CommandType.RESET_EXPERIMENT, {"liquid_mass": 1.0}).validate()


def test_pause_and_resume_take_no_payload():
    assert cmd.pause().validate() == cmd.pause()
    assert cmd.resume().validate() == cmd.resume()
    with pytest.raises(InvalidCommand, match="no payload"):
        Command(CommandType.PAUSE, 3).validate()


def test_ac_enabled_needs_bool():
    assert cmd.set_ac_enabled(False).validate().value is False
    with pytest.raises(InvalidCommand):
        cmd.set_ac_enabled("yes").validate()
    with pytest.raises(InvalidCommand):
        cmd.set_ac_enabled(1).validate()


def test_air_handler_mode():
    assert cmd.set_air_handler_mode("AUTO").validate().value is AirHandlerMode.AUTO
    assert cmd.set_air_handler_mode(AirHandlerMode.OFF).validate().value is AirHandlerMode.OFF
    with pytest.raises(InvalidCommand, match="unknown mode"):
        cmd.set_air_handler_mode("turbo").validate()


def test_unknown_command_type():
    with pytest.raises(InvalidCommand, match="unknown command type"):
        Command("explode").validate()


def test_command_range_definition():
    with pytest.raises(ValueError):
        CommandRange("x", 5.0, 5.0, "", "").validate()
    for table in (cmd.COMMAND_RANGES, cmd.INITIAL_CONDITION_RANGES):
        for rng in table.values():
            rng.validate()
