"""
BoilSim
=======

Educational simulator of boiling-point physics across altitude, fluid and
room conditions, with a real-time execution host stable from 1x to 65536x.

Author: Guilherme F. G. Santos
Date: January 2026
License: MIT
"""

__version__ = "1.0.0"
__author__ = "Guilherme F. G. Santos"

from .core import FluidBodyState, FluidProperties, Phase, WATER, builtin_fluid, load_fluid
from .host import ExecutionHost, HostConfig, InitialConditions, Snapshot
from .room import RoomConfig, builtin_room_config, load_room_config

__all__ = [
    "FluidBodyState",
    "FluidProperties",
    "Phase",
    "WATER",
    "builtin_fluid",
    "load_fluid",
    "ExecutionHost",
    "HostConfig",
    "InitialConditions",
    "Snapshot",
    "RoomConfig",
    "builtin_room_config",
    "load_room_config",
]
