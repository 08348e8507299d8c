"""
Host Messages
=============

Outbound snapshot of the experiment and the last-value-wins mailbox that
carries it from the physics thread to consumers.

The mailbox holds at most one snapshot: publishing replaces an unconsumed
snapshot instead of queueing behind it, so a slow consumer always reads
the newest state and the physics thread never blocks on it.

Author: Guilherme F. G. Santos
Date: January 2026
License: MIT
"""

import threading
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from ..core.simulator import Phase
from ..room.alerts import Alert


@dataclass(frozen=True)
class Snapshot:
    """Immutable view of the experiment after a tick or command."""

    tick: int
    sim_time: float
    temperature: float
    liquid_mass: float
    residue_mass: float
    vaporized_mass: float
    phase: Phase
    boiling_point: float
    boiling_point_extrapolated: bool
    room_temperature: float
    room_pressure: float
    alerts: Tuple[Alert, ...]
    heater_power: float
    speed_multiplier: float
    paused: bool
    ac_setpoint: Optional[float] = None
    ac_output_watts: float = 0.0
    air_handler_flow_m3_per_hour: float = 0.0

    @property
    def total_mass(self) -> float:
        return self.liquid_mass + self.residue_mass + self.vaporized_mass

    def to_dict(self) -> Dict[str, Any]:
        """Serialisable form for a presentation layer."""
        return {
            "temperature": self.temperature,
            "liquidMass": self.liquid_mass,
            "residueMass": self.residue_mass,
            "phase": self.phase.value,
            "boilingPoint": self.boiling_point,
            "roomTemperature": self.room_temperature,
            "roomPressure": self.room_pressure,
            "alerts": [alert.to_dict() for alert in self.alerts],
            "vaporizedMass": self.vaporized_mass,
            "boilingPointExtrapolated": self.boiling_point_extrapolated,
            "simTime": self.sim_time,
            "tick": self.tick,
            "heaterPower": self.heater_power,
            "speedMultiplier": self.speed_multiplier,
            "paused": self.paused,
            "acSetpoint": self.ac_setpoint,
            "acOutputWatts": self.ac_output_watts,
            "airHandlerFlow": self.air_handler_flow_m3_per_hour,
        }


class SnapshotMailbox:
    """Single-slot, last-value-wins channel (thread-safe)."""

    def __init__(self):
        self._condition = threading.Condition()
        self._latest: Optional[Snapshot] = None
        self._fresh = False
        self._replaced = 0

    def publish(self, snapshot: Snapshot) -> None:
        """Store snapshot, replacing one that was never taken."""
        with self._condition:
            if self._fresh:
                self._replaced += 1
            self._latest = snapshot
            self._fresh = True
            self._condition.notify_all()

    def take(self, timeout: Optional[float] = None) -> Optional[Snapshot]:
        """
        Consume the newest snapshot.

        Args:
            timeout: Seconds to wait for a fresh snapshot; None waits forever

        Returns:
            Snapshot, or None if nothing new arrived in time
        """
        with self._condition:
            if not self._condition.wait_for(lambda: self._fresh, timeout=timeout):
                return None
            self._fresh = False
            return self._latest

    def peek(self) -> Optional[Snapshot]:
        """Newest snapshot without consuming it."""
        with self._condition:
            return self._latest

    @property
    def replaced_count(self) -> int:
        """Snapshots overwritten before a consumer took them."""
        with self._condition:
            return self._replaced
