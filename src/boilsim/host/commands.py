"""
Host Command Table
==================

Commands accepted by the execution host and the ranges they are validated
against before they touch the experiment.

This module contains ONLY the command layout and validation - it does not:
- Apply commands
- Run physics
- Own any state

Command Ranges:

    set_heater_power        0 … 10000 W
    set_speed_multiplier    1 … 65536 x
    set_actuator_setpoint   5 … 40 °C   (AC unit)
    reset_experiment        liquid_mass (0, 100] kg
                            temperature -50 … 300 °C
                            altitude -500 … 100000 m
    set_ac_enabled          bool
    set_air_handler_mode    'off' | 'auto'
    pause / resume          no payload

Author: Guilherme F. G. Santos
Date: January 2026
License: MIT
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

import numpy as np

from ..core.errors import InvalidCommand
from ..room.config import AirHandlerMode


class CommandType(Enum):
    """Inbound command kinds."""

    SET_HEATER_POWER = "set_heater_power"
    SET_SPEED_MULTIPLIER = "set_speed_multiplier"
    PAUSE = "pause"
    RESUME = "resume"
    SET_ACTUATOR_SETPOINT = "set_actuator_setpoint"
    RESET_EXPERIMENT = "reset_experiment"
    SET_AC_ENABLED = "set_ac_enabled"
    SET_AIR_HANDLER_MODE = "set_air_handler_mode"


@dataclass(frozen=True)
class CommandRange:
    """
    Accepted range of one numeric parameter.

    Attributes:
        name: Parameter name
        minimum: Lower bound
        maximum: Upper bound (inclusive)
        units: Physical units
        description: What the value controls
        exclusive_minimum: Reject the lower bound itself
    """

    name: str
    minimum: float
    maximum: float
    units: str
    description: str
    exclusive_minimum: bool = False

    def validate(self) -> None:
        """Validate the range definition."""
        if self.minimum >= self.maximum:
            raise ValueError(f"Range {self.name} is empty: [{self.minimum}, {self.maximum}]")

    def check(self, command: str, value: Any) -> float:
        """
        Coerce and range-check a value.

        Raises:
            InvalidCommand: Non-numeric, non-finite or out of range
        """
        if isinstance(value, bool) or not isinstance(value, (int, float, np.number)):
            raise InvalidCommand(command, f"{self.name} must be a number, got {value!r}")
        value = float(value)
        if not np.isfinite(value):
            raise InvalidCommand(command, f"{self.name} must be finite")

        below = value <= self.minimum if self.exclusive_minimum else value < self.minimum
        if below or value > self.maximum:
            opening = "(" if self.exclusive_minimum else "["
            raise InvalidCommand(
                command,
                f"{self.name}={value:g} {self.units} outside "
                f"{opening}{self.minimum:g}, {self.maximum:g}]",
            )
        return value


COMMAND_RANGES: Dict[CommandType, CommandRange] = {
    CommandType.SET_HEATER_POWER: CommandRange(
        "power", 0.0, 10000.0, "W", "Burner power delivered to the liquid"
    ),
    CommandType.SET_SPEED_MULTIPLIER: CommandRange(
        "factor", 1.0, 65536.0, "x", "Simulated seconds per wall-clock second"
    ),
    CommandType.SET_ACTUATOR_SETPOINT: CommandRange(
        "target", 5.0, 40.0, "°C", "AC unit room temperature setpoint"
    ),
}

INITIAL_CONDITION_RANGES: Dict[str, CommandRange] = {
    "liquid_mass": CommandRange(
        "liquid_mass", 0.0, 100.0, "kg", "Liquid in the pot", exclusive_minimum=True
    ),
    "temperature": CommandRange("temperature", -50.0, 300.0, "°C", "Liquid temperature"),
    "altitude": CommandRange("altitude", -500.0, 100000.0, "m", "Location altitude"),
}


@dataclass(frozen=True)
class InitialConditions:
    """Starting point of an experiment."""

    liquid_mass: float = 1.0  # [kg]
    temperature: float = 20.0  # [°C]
    altitude: float = 0.0  # [m]

    def validate(self, command: str = CommandType.RESET_EXPERIMENT.value) -> "InitialConditions":
        """Range-check every field; returns a float-normalised copy."""
        values = {
            name: rng.check(command, getattr(self, name))
            for name, rng in INITIAL_CONDITION_RANGES.items()
        }
        return InitialConditions(**values)


@dataclass(frozen=True)
class Command:
    """Immutable inbound command."""

    type: CommandType
    value: Any = None

    @property
    def name(self) -> str:
        return self.type.value

    def validate(self) -> "Command":
        """
        Validate the payload against the command table.

        Returns:
            Command with a normalised payload

        Raises:
            InvalidCommand: Unknown type or bad payload
        """
        if not isinstance(self.type, CommandType):
            raise InvalidCommand(str(self.type), "unknown command type")

        if self.type in COMMAND_RANGES:
            return Command(self.type, COMMAND_RANGES[self.type].check(self.name, self.value))

        if self.type in (CommandType.PAUSE, CommandType.RESUME):
            if self.value is not None:
                raise InvalidCommand(self.name, "takes no payload")
            return self

        if self.type is CommandType.RESET_EXPERIMENT:
            initial = self.value if self.value is not None else InitialConditions()
            if not isinstance(initial, InitialConditions):
                raise InvalidCommand(self.name, "payload must be InitialConditions")
            return Command(self.type, initial.validate(self.name))

        if self.type is CommandType.SET_AC_ENABLED:
            if not isinstance(self.value, bool):
                raise InvalidCommand(self.name, f"expected bool, got {self.value!r}")
            return self

        if self.type is CommandType.SET_AIR_HANDLER_MODE:
            if isinstance(self.value, AirHandlerMode):
                return self
            try:
                mode = AirHandlerMode(str(self.value).lower())
            except ValueError:
                raise InvalidCommand(self.name, f"unknown mode {self.value!r}")
            return Command(self.type, mode)

        raise InvalidCommand(self.name, "unsupported command")


def set_heater_power(watts: float) -> Command:
    return Command(CommandType.SET_HEATER_POWER, watts)


def set_speed_multiplier(factor: float) -> Command:
    return Command(CommandType.SET_SPEED_MULTIPLIER, factor)


def pause() -> Command:
    return Command(CommandType.PAUSE)


def resume() -> Command:
    return Command(CommandType.RESUME)


def set_actuator_setpoint(target: float) -> Command:
    return Command(CommandType.SET_ACTUATOR_SETPOINT, target)


def reset_experiment(initial: Optional[InitialConditions] = None) -> Command:
    return Command(CommandType.RESET_EXPERIMENT, initial)


def set_ac_enabled(enabled: bool) -> Command:
    return Command(CommandType.SET_AC_ENABLED, enabled)


def set_air_handler_mode(mode) -> Command:
    return Command(CommandType.SET_AIR_HANDLER_MODE, mode)
