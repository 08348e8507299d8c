"""
Room Actuators
==============

AC unit (heat pump) and air handler (scrubber), each driven by its own
PID controller.

AC UNIT
=======

    demand  = PID(setpoint, T_room) ∈ [-1, 1]
    W_target = demand · (heating_max if demand > 0 else cooling_max)
    W        = W_target · λ + W_prev · (1 - λ),   λ = min(1, dt/τ)
    ΔT       = W · dt · airflow_effectiveness / C_room
    |ΔT|    <= max_rate · dt

Airflow effectiveness rises with the combined airflow of the AC fan and
the air handler, capped at 1.5.

AIR HANDLER
===========

    c     = Σ |x - x_ref| · weight          (contamination)
    flow  = |PID(0, c)| · max_flow          (off below the minimum fraction)
    f     = min(1, flow/3600 · dt / V)
    Δx    = (x_ref - x) · f · efficiency

Author: Guilherme F. G. Santos
Date: January 2026
License: MIT
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Mapping

import numpy as np

from .config import AcUnitConfig, AirHandlerConfig, AirHandlerMode
from .gas_exchange import (
    air_changes_per_hour,
    contamination_level,
    exchange_composition,
    exchange_fraction,
)
from .pid import PidController

logger = logging.getLogger(__name__)

IDLE_POWER_THRESHOLD = 10.0  # [W]
MAX_AIRFLOW_EFFECTIVENESS = 1.5


class ActuatorStatus(Enum):
    OFF = "off"
    IDLE = "idle"
    HEATING = "heating"
    COOLING = "cooling"
    SCRUBBING = "scrubbing"


@dataclass(frozen=True)
class AcResult:
    """Outcome of one AC interval."""

    temperature_change: float = 0.0  # [°C]
    heat_output_watts: float = 0.0  # + heating, - cooling
    demand: float = 0.0  # PID output [-1, 1]
    energy_joules: float = 0.0  # signed heat delivered to the room
    status: ActuatorStatus = ActuatorStatus.OFF


@dataclass(frozen=True)
class ScrubberResult:
    """Outcome of one air-handler interval."""

    composition: Dict[str, float]
    flow_fraction: float = 0.0
    flow_m3_per_hour: float = 0.0
    air_changes_per_hour: float = 0.0
    contamination: float = 0.0
    changes: Dict[str, float] = field(default_factory=dict)
    energy_joules: float = 0.0
    status: ActuatorStatus = ActuatorStatus.OFF


class AcUnit:
    """Setpoint-holding heat pump."""

    def __init__(self, config: AcUnitConfig):
        config.validate()
        self.config = config
        self.enabled = config.enabled
        self.pid = PidController(config.pid, config.setpoint, config.deadband)
        self._heat_output = 0.0

    @property
    def setpoint(self) -> float:
        return self.pid.setpoint

    def set_setpoint(self, setpoint: float) -> None:
        """Move the setpoint; the controller accumulator restarts."""
        self.pid.reset(setpoint)
        logger.info(f"AC setpoint {setpoint:.1f}°C")

    def set_enabled(self, enabled: bool) -> None:
        if enabled != self.enabled:
            self.pid.reset()
            self._heat_output = 0.0
        self.enabled = enabled

    def step(
        self,
        room_temperature: float,
        heat_capacity: float,
        dt: float,
        extra_airflow_m3_per_hour: float = 0.0,
    ) -> AcResult:
        """
        Run the AC for dt seconds.

        Args:
            room_temperature: Measured room temperature [°C]
            heat_capacity: Room heat capacity [J/°C]
            dt: Interval [s]
            extra_airflow_m3_per_hour: Airflow contributed by other fans

        Returns:
            AcResult with the temperature change to apply
        """
        if not self.enabled or dt <= 0:
            return AcResult()

        cfg = self.config
        demand = self.pid.update(room_temperature, dt)
        capacity = cfg.heating_max_watts if demand > 0 else cfg.cooling_max_watts
        target = demand * capacity

        response = min(1.0, dt / cfg.response_time_s)
        self._heat_output = target * response + self._heat_output * (1.0 - response)

        airflow = cfg.base_airflow_m3_per_hour + max(extra_airflow_m3_per_hour, 0.0)
        effectiveness = min(MAX_AIRFLOW_EFFECTIVENESS, airflow / cfg.base_airflow_m3_per_hour)

        max_change = cfg.max_rate_of_change_per_s * dt
        change = self._heat_output * dt * effectiveness / heat_capacity
        change = float(np.clip(change, -max_change, max_change))

        if abs(self._heat_output) < IDLE_POWER_THRESHOLD:
            status = ActuatorStatus.IDLE
        elif self._heat_output > 0:
            status = ActuatorStatus.HEATING
        else:
            status = ActuatorStatus.COOLING

        return AcResult(
            temperature_change=change,
            heat_output_watts=self._heat_output,
            demand=demand,
            energy_joules=change * heat_capacity,
            status=status,
        )


class AirHandler:
    """Contamination-driven ventilation toward a reference atmosphere."""

    def __init__(self, config: AirHandlerConfig):
        config.validate()
        self.config = config
        self.mode = config.mode
        self.pid = PidController(config.pid, setpoint=0.0)
        self.last_flow_m3_per_hour = 0.0

    def set_mode(self, mode: AirHandlerMode) -> None:
        if mode is not self.mode:
            self.pid.reset()
            logger.info(f"Air handler mode {mode.value}")
        self.mode = mode
        if mode is AirHandlerMode.OFF:
            self.last_flow_m3_per_hour = 0.0

    def step(
        self,
        composition: Mapping[str, float],
        reference: Mapping[str, float],
        volume_m3: float,
        dt: float,
    ) -> ScrubberResult:
        """
        Run the air handler for dt seconds.

        Args:
            composition: Current room mole fractions
            reference: Clean-air mole fractions
            volume_m3: Room volume [m³]
            dt: Interval [s]

        Returns:
            ScrubberResult with the new composition
        """
        contamination = contamination_level(composition, reference)
        if self.mode is AirHandlerMode.OFF or dt <= 0:
            self.last_flow_m3_per_hour = 0.0
            return ScrubberResult(composition=dict(composition), contamination=contamination)

        cfg = self.config
        demand = self.pid.update(contamination, dt)
        flow_fraction = float(np.clip(abs(demand), 0.0, 1.0))
        if flow_fraction < cfg.min_flow_fraction:
            flow_fraction = 0.0

        flow = flow_fraction * cfg.max_flow_m3_per_hour
        self.last_flow_m3_per_hour = flow
        if flow <= 0:
            return ScrubberResult(
                composition=dict(composition),
                contamination=contamination,
                status=ActuatorStatus.IDLE,
            )

        fraction = exchange_fraction(flow, dt, volume_m3)
        updated, changes = exchange_composition(
            composition,
            reference,
            fraction,
            cfg.filtration_efficiency,
            cfg.default_efficiency,
        )
        return ScrubberResult(
            composition=updated,
            flow_fraction=flow_fraction,
            flow_m3_per_hour=flow,
            air_changes_per_hour=air_changes_per_hour(flow, volume_m3),
            contamination=contamination,
            changes=changes,
            energy_joules=flow * cfg.fan_watts_per_m3_per_hour * dt,
            status=ActuatorStatus.SCRUBBING,
        )
