"""
Room Configuration
==================

Validated configuration of the room that encloses the experiment and of
its actuators, parsed from YAML/JSON documents.

DOCUMENT FORMAT
===============

    room:
      volume_m3: 30
      heat_capacity_j_per_c: 36000
      initial_temperature: 20
      pressure_mode: location        # location | sea_level | custom
      initial_pressure: 101325       # custom only
      leak_rate_pa_per_s: 10
      envelope_conductance_w_per_c: 0
      outdoor_temperature: 20
      burner_waste_fraction: 0.1
    atmosphere: earth                # or a {species: fraction} mapping
    limits: {min_temperature, max_temperature, min_pressure, max_pressure}
    history: {length: 100, interval_s: 10}
    ac_unit: {...}                   # optional
    air_handler: {...}               # optional

PID gains are either a preset name ('conservative', 'balanced',
'aggressive', 'critically_damped') or {kp, ki, kd, integral_windup_limit}.

Author: Guilherme F. G. Santos
Date: January 2026
License: MIT
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from importlib.resources import files
from pathlib import Path
from typing import Any, Dict, Optional, Union

import numpy as np
import yaml

from ..core.errors import BoundsExceeded, ConfigurationError
from ..core.fluids import read_document, read_number
from .gas_exchange import STANDARD_ATMOSPHERES, normalize_composition
from .pid import PID_PRESETS, PidGains

logger = logging.getLogger(__name__)


class PressureMode(Enum):
    """Where the room's reference (outdoor) pressure comes from."""

    LOCATION = "location"  # standard atmosphere at the experiment altitude
    SEA_LEVEL = "sea_level"
    CUSTOM = "custom"


class AirHandlerMode(Enum):
    OFF = "off"
    AUTO = "auto"


@dataclass(frozen=True)
class RoomLimits:
    """Physically plausible ranges; values outside are clamped and alerted."""

    min_temperature: float = -30.0  # [°C]
    max_temperature: float = 60.0  # [°C]
    min_pressure: float = 1000.0  # [Pa]
    max_pressure: float = 200000.0  # [Pa]

    def validate(self) -> None:
        if not self.min_temperature < self.max_temperature:
            raise ConfigurationError("limits: min_temperature must be < max_temperature")
        if not 0 < self.min_pressure < self.max_pressure:
            raise ConfigurationError("limits: need 0 < min_pressure < max_pressure")

    def check(self, quantity: str, value: float) -> float:
        """
        Return value if within limits.

        Args:
            quantity: 'temperature' or 'pressure'
            value: Value to check

        Raises:
            BoundsExceeded: Carries the clamped value
        """
        low = getattr(self, f"min_{quantity}")
        high = getattr(self, f"max_{quantity}")
        if not np.isfinite(value):
            raise BoundsExceeded(quantity, value, low, clamped=low)
        if value > high:
            raise BoundsExceeded(quantity, value, high)
        if value < low:
            raise BoundsExceeded(quantity, value, low)
        return value


@dataclass(frozen=True)
class AcUnitConfig:
    """
    Heat pump that holds the room at a setpoint.

    Attributes:
        enabled: Initial on/off state
        setpoint: Target room temperature [°C]
        heating_max_watts: Rated heating capacity [W]
        cooling_max_watts: Rated cooling capacity [W]
        deadband: No action while |error| is below this [°C]
        response_time_s: First-order lag of the delivered power [s]
        max_rate_of_change_per_s: Bound on the room temperature slew [°C/s]
        base_airflow_m3_per_hour: Fan airflow of the unit itself
        pid: Controller tuning
    """

    enabled: bool = True
    setpoint: float = 22.0
    heating_max_watts: float = 1500.0
    cooling_max_watts: float = 2000.0
    deadband: float = 0.5
    response_time_s: float = 5.0
    max_rate_of_change_per_s: float = 1.0
    base_airflow_m3_per_hour: float = 255.0
    pid: PidGains = field(default_factory=lambda: PID_PRESETS["balanced"])

    def validate(self) -> None:
        for name in (
            "heating_max_watts",
            "cooling_max_watts",
            "response_time_s",
            "max_rate_of_change_per_s",
            "base_airflow_m3_per_hour",
        ):
            value = getattr(self, name)
            if not np.isfinite(value) or value <= 0:
                raise ConfigurationError(f"ac_unit: {name} must be positive: {value}")
        if not np.isfinite(self.deadband) or self.deadband < 0:
            raise ConfigurationError(f"ac_unit: deadband must be >= 0: {self.deadband}")
        if not np.isfinite(self.setpoint):
            raise ConfigurationError("ac_unit: setpoint must be finite")
        self.pid.validate()


@dataclass(frozen=True)
class AirHandlerConfig:
    """
    Ventilation/scrubber that pulls room air toward the reference atmosphere.

    Attributes:
        mode: 'auto' (PID on contamination) or 'off'
        max_flow_m3_per_hour: Fan capacity
        default_efficiency: Filter efficiency for unlisted species
        filtration_efficiency: Per-species efficiency overrides
        min_flow_fraction: Demands below this fraction switch the fan off
        fan_watts_per_m3_per_hour: Fan electrical power per unit flow
        pid: Controller tuning (setpoint is zero contamination)
    """

    mode: AirHandlerMode = AirHandlerMode.AUTO
    max_flow_m3_per_hour: float = 255.0
    default_efficiency: float = 0.8
    filtration_efficiency: Dict[str, float] = field(default_factory=dict)
    min_flow_fraction: float = 0.05
    fan_watts_per_m3_per_hour: float = 0.5 / 1.699
    pid: PidGains = field(
        default_factory=lambda: PidGains(kp=100.0, ki=5.0, kd=10.0, integral_windup_limit=50.0)
    )

    def validate(self) -> None:
        if not np.isfinite(self.max_flow_m3_per_hour) or self.max_flow_m3_per_hour <= 0:
            raise ConfigurationError("air_handler: max_flow_m3_per_hour must be positive")
        efficiencies = dict(self.filtration_efficiency, default=self.default_efficiency)
        for species, value in efficiencies.items():
            if not np.isfinite(value) or not 0 <= value <= 1:
                raise ConfigurationError(
                    f"air_handler: efficiency for {species} must be in [0, 1]: {value}"
                )
        if not 0 <= self.min_flow_fraction < 1:
            raise ConfigurationError("air_handler: min_flow_fraction must be in [0, 1)")
        if self.fan_watts_per_m3_per_hour < 0:
            raise ConfigurationError("air_handler: fan power must be >= 0")
        self.pid.validate()


@dataclass(frozen=True)
class RoomConfig:
    """
    Complete room configuration.

    Attributes:
        volume_m3: Air volume [m³]
        heat_capacity_j_per_c: Lumped heat capacity of air and contents [J/°C]
        initial_temperature: [°C]
        pressure_mode: Source of the outdoor/reference pressure
        initial_pressure: Reference pressure in custom mode [Pa]
        leak_rate_pa_per_s: Max pressure relaxation toward outdoors [Pa/s]
        envelope_conductance_w_per_c: Wall heat loss UA; 0 for adiabatic
        outdoor_temperature: Defaults to the initial temperature [°C]
        burner_waste_fraction: Share of burner power heating the room
        atmosphere: Reference composition (mole fractions)
        limits: Clamping ranges
        history_length: Ring-buffer capacity
        history_interval_s: Simulated seconds between history entries
        ac_unit: Optional heat pump
        air_handler: Optional scrubber
    """

    volume_m3: float = 30.0
    heat_capacity_j_per_c: float = 36000.0
    initial_temperature: float = 20.0
    pressure_mode: PressureMode = PressureMode.LOCATION
    initial_pressure: Optional[float] = None
    leak_rate_pa_per_s: float = 10.0
    envelope_conductance_w_per_c: float = 0.0
    outdoor_temperature: Optional[float] = None
    burner_waste_fraction: float = 0.1
    atmosphere: Dict[str, float] = field(
        default_factory=lambda: normalize_composition(STANDARD_ATMOSPHERES["earth"])
    )
    limits: RoomLimits = field(default_factory=RoomLimits)
    history_length: int = 100
    history_interval_s: float = 10.0
    ac_unit: Optional[AcUnitConfig] = None
    air_handler: Optional[AirHandlerConfig] = None

    def validate(self) -> None:
        """Validate physical consistency of the configuration."""
        for name in ("volume_m3", "heat_capacity_j_per_c", "history_interval_s"):
            value = getattr(self, name)
            if not np.isfinite(value) or value <= 0:
                raise ConfigurationError(f"room: {name} must be positive: {value}")
        for name in ("leak_rate_pa_per_s", "envelope_conductance_w_per_c"):
            value = getattr(self, name)
            if not np.isfinite(value) or value < 0:
                raise ConfigurationError(f"room: {name} must be >= 0: {value}")
        if not np.isfinite(self.initial_temperature):
            raise ConfigurationError("room: initial_temperature must be finite")
        if self.outdoor_temperature is not None and not np.isfinite(
            self.outdoor_temperature
        ):
            raise ConfigurationError("room: outdoor_temperature must be finite")
        if not 0 <= self.burner_waste_fraction <= 1:
            raise ConfigurationError("room: burner_waste_fraction must be in [0, 1]")
        if self.history_length < 1:
            raise ConfigurationError("room: history_length must be >= 1")
        if self.pressure_mode is PressureMode.CUSTOM:
            if (
                self.initial_pressure is None
                or not np.isfinite(self.initial_pressure)
                or self.initial_pressure <= 0
            ):
                raise ConfigurationError(
                    "room: custom pressure mode needs a positive initial_pressure"
                )
        if abs(sum(self.atmosphere.values()) - 1.0) > 1e-6:
            raise ConfigurationError("room: atmosphere fractions must sum to 1")

        self.limits.validate()
        if self.ac_unit is not None:
            self.ac_unit.validate()
        if self.air_handler is not None:
            self.air_handler.validate()

    @property
    def reference_outdoor_temperature(self) -> float:
        if self.outdoor_temperature is None:
            return self.initial_temperature
        return self.outdoor_temperature

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "RoomConfig":
        """
        Build a validated configuration from a parsed document.

        Raises:
            ConfigurationError: Missing section, bad value or unknown preset
        """
        if not isinstance(doc, dict):
            raise ConfigurationError("Room document must be a mapping")

        room = _section(doc, "room", required=True)
        owner = "room"
        pressure_mode = _enum(PressureMode, room.get("pressure_mode", "location"), owner)

        initial_pressure = None
        if room.get("initial_pressure") is not None:
            initial_pressure = read_number(room, "initial_pressure", owner)
        outdoor_temperature = None
        if room.get("outdoor_temperature") is not None:
            outdoor_temperature = read_number(room, "outdoor_temperature", owner)

        limits_doc = _section(doc, "limits")
        defaults = RoomLimits()
        limits = RoomLimits(
            **{
                name: read_number(limits_doc, name, "limits", getattr(defaults, name))
                for name in (
                    "min_temperature",
                    "max_temperature",
                    "min_pressure",
                    "max_pressure",
                )
            }
        )

        history = _section(doc, "history")

        config = cls(
            volume_m3=read_number(room, "volume_m3", owner),
            heat_capacity_j_per_c=read_number(room, "heat_capacity_j_per_c", owner),
            initial_temperature=read_number(room, "initial_temperature", owner, 20.0),
            pressure_mode=pressure_mode,
            initial_pressure=initial_pressure,
            leak_rate_pa_per_s=read_number(room, "leak_rate_pa_per_s", owner, 10.0),
            envelope_conductance_w_per_c=read_number(
                room, "envelope_conductance_w_per_c", owner, 0.0
            ),
            outdoor_temperature=outdoor_temperature,
            burner_waste_fraction=read_number(room, "burner_waste_fraction", owner, 0.1),
            atmosphere=_atmosphere(doc.get("atmosphere", "earth")),
            limits=limits,
            history_length=int(read_number(history, "length", "history", 100)),
            history_interval_s=read_number(history, "interval_s", "history", 10.0),
            ac_unit=_ac_unit(doc.get("ac_unit")),
            air_handler=_air_handler(doc.get("air_handler")),
        )
        config.validate()
        return config


def _section(doc: Dict[str, Any], key: str, required: bool = False) -> Dict[str, Any]:
    value = doc.get(key)
    if value is None:
        if required:
            raise ConfigurationError(f"Room document has no '{key}' section")
        return {}
    if not isinstance(value, dict):
        raise ConfigurationError(f"'{key}' must be a mapping")
    return value


def _enum(enum_type, raw: Any, owner: str):
    try:
        return enum_type(str(raw).lower())
    except ValueError:
        choices = ", ".join(member.value for member in enum_type)
        raise ConfigurationError(f"{owner}: '{raw}' is not one of {choices}")


def _flag(doc: Dict[str, Any], key: str, owner: str, default: bool) -> bool:
    raw = doc.get(key, default)
    if not isinstance(raw, bool):
        raise ConfigurationError(f"{owner}: '{key}' must be true or false, got {raw!r}")
    return raw


def _atmosphere(raw: Any) -> Dict[str, float]:
    if isinstance(raw, str):
        if raw not in STANDARD_ATMOSPHERES:
            raise ConfigurationError(f"Unknown atmosphere preset '{raw}'")
        return normalize_composition(STANDARD_ATMOSPHERES[raw])
    if not isinstance(raw, dict) or not raw:
        raise ConfigurationError("atmosphere must be a preset name or a mapping")
    fractions = {species: read_number(raw, species, "atmosphere") for species in raw}
    try:
        return normalize_composition(fractions)
    except ValueError as e:
        raise ConfigurationError(f"atmosphere: {e}")


def _pid(raw: Any, default: PidGains, owner: str) -> PidGains:
    if raw is None:
        return default
    if isinstance(raw, str):
        if raw not in PID_PRESETS:
            raise ConfigurationError(
                f"{owner}: unknown PID preset '{raw}' (available: {', '.join(PID_PRESETS)})"
            )
        return PID_PRESETS[raw]
    if not isinstance(raw, dict):
        raise ConfigurationError(f"{owner}: pid must be a preset name or a mapping")
    return PidGains(
        kp=read_number(raw, "kp", owner, default.kp),
        ki=read_number(raw, "ki", owner, default.ki),
        kd=read_number(raw, "kd", owner, default.kd),
        integral_windup_limit=read_number(
            raw, "integral_windup_limit", owner, default.integral_windup_limit
        ),
    )


def _ac_unit(raw: Any) -> Optional[AcUnitConfig]:
    if raw is None:
        return None
    if not isinstance(raw, dict):
        raise ConfigurationError("ac_unit must be a mapping")
    owner = "ac_unit"
    defaults = AcUnitConfig()
    numbers = {
        name: read_number(raw, name, owner, getattr(defaults, name))
        for name in (
            "setpoint",
            "heating_max_watts",
            "cooling_max_watts",
            "deadband",
            "response_time_s",
            "max_rate_of_change_per_s",
            "base_airflow_m3_per_hour",
        )
    }
    return AcUnitConfig(
        enabled=_flag(raw, "enabled", owner, True),
        pid=_pid(raw.get("pid"), defaults.pid, owner),
        **numbers,
    )


def _air_handler(raw: Any) -> Optional[AirHandlerConfig]:
    if raw is None:
        return None
    if not isinstance(raw, dict):
        raise ConfigurationError("air_handler must be a mapping")
    owner = "air_handler"
    defaults = AirHandlerConfig()
    efficiency_doc = raw.get("filtration_efficiency") or {}
    if not isinstance(efficiency_doc, dict):
        raise ConfigurationError("air_handler: filtration_efficiency must be a mapping")
    return AirHandlerConfig(
        mode=_enum(AirHandlerMode, raw.get("mode", "auto"), owner),
        max_flow_m3_per_hour=read_number(
            raw, "max_flow_m3_per_hour", owner, defaults.max_flow_m3_per_hour
        ),
        default_efficiency=read_number(
            raw, "default_efficiency", owner, defaults.default_efficiency
        ),
        filtration_efficiency={
            species: read_number(efficiency_doc, species, owner)
            for species in efficiency_doc
        },
        min_flow_fraction=read_number(
            raw, "min_flow_fraction", owner, defaults.min_flow_fraction
        ),
        fan_watts_per_m3_per_hour=read_number(
            raw, "fan_watts_per_m3_per_hour", owner, defaults.fan_watts_per_m3_per_hour
        ),
        pid=_pid(raw.get("pid"), defaults.pid, owner),
    )


def load_room_config(path: Union[str, Path]) -> RoomConfig:
    """Load and validate a room document from disk."""
    config = RoomConfig.from_document(read_document(path))
    logger.debug(f"Loaded room configuration from {path}")
    return config


def builtin_room_config(name: str = "default") -> RoomConfig:
    """Load a room document shipped with the package."""
    resource = files("boilsim") / "data" / "rooms" / f"{name}.yaml"
    if not resource.is_file():
        raise ConfigurationError(f"Unknown built-in room '{name}'")
    return RoomConfig.from_document(yaml.safe_load(resource.read_text(encoding="utf-8")))
