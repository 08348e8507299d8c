"""
Room Environment Package
========================

The room around the experiment: air temperature, pressure and composition,
an AC unit and an air handler under PID control, clamping with alerts.

Author: Guilherme F. G. Santos
Date: January 2026
License: MIT
"""

from .alerts import Alert, AlertSeverity, ExposureEvent, check_composition_alerts
from .config import (
    AcUnitConfig,
    AirHandlerConfig,
    AirHandlerMode,
    PressureMode,
    RoomConfig,
    RoomLimits,
    builtin_room_config,
    load_room_config,
)
from .environment import HistoryEntry, RoomEnvironment, RoomState
from .hvac import AcUnit, ActuatorStatus, AirHandler
from .pid import PID_PRESETS, PidController, PidGains

__all__ = [
    "Alert",
    "AlertSeverity",
    "ExposureEvent",
    "check_composition_alerts",
    "AcUnitConfig",
    "AirHandlerConfig",
    "AirHandlerMode",
    "PressureMode",
    "RoomConfig",
    "RoomLimits",
    "builtin_room_config",
    "load_room_config",
    "HistoryEntry",
    "RoomEnvironment",
    "RoomState",
    "AcUnit",
    "ActuatorStatus",
    "AirHandler",
    "PID_PRESETS",
    "PidController",
    "PidGains",
]
