"""
Room Environment Loop
=====================

Lumped model of the room enclosing the experiment. Each step:

(a) Heat sources registered since the last step warm the room; the
    envelope loses U·A·(T - T_out). Vapor is mixed into the air by the
    ideal-gas law, raising pressure.
(b) The AC unit pulls the temperature toward its setpoint.
(c) The air handler pulls the composition toward the reference air.
(d) Pressure leaks toward the outdoor pressure at the room's altitude.
    Temperature and pressure are clamped to plausible limits; each clamp
    becomes a non-fatal alert. Composition alerts, exposure tracking and
    the history ring buffer are updated.

The room temperature and pressure produced here are read by the liquid
body on the *next* sub-step, so the fluid/room coupling has a one-step
delay and every step is acyclic.

Author: Guilherme F. G. Santos
Date: January 2026
License: MIT
"""

import copy
import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Dict, List, Optional, Tuple

import numpy as np

from ..core.atmosphere import SEA_LEVEL_PRESSURE, clamp_altitude, pressure_at_altitude
from ..core.errors import BoundsExceeded
from .alerts import Alert, AlertSeverity, ExposureTracker, check_composition_alerts
from .config import AirHandlerMode, PressureMode, RoomConfig
from .gas_exchange import add_vapor, normalize_composition
from .hvac import AcResult, AcUnit, AirHandler, ScrubberResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HistoryEntry:
    """Sampled room conditions."""

    time: float
    temperature: float
    pressure: float
    composition: Tuple[Tuple[str, float], ...]


@dataclass
class EnergyTotals:
    """Cumulative energy exchanged with the room [J]."""

    external_heat: float = 0.0
    envelope_loss: float = 0.0
    ac_heating: float = 0.0
    ac_cooling: float = 0.0
    air_handler: float = 0.0


@dataclass
class RoomState:
    """Mutable room state owned by one RoomEnvironment."""

    volume_m3: float
    heat_capacity: float
    temperature: float
    pressure: float
    composition: Dict[str, float]
    outdoor_temperature: float
    outdoor_pressure: float
    time: float = 0.0
    history: Deque[HistoryEntry] = field(default_factory=lambda: deque(maxlen=100))
    alerts: List[Alert] = field(default_factory=list)
    energy: EnergyTotals = field(default_factory=EnergyTotals)
    last_ac: AcResult = field(default_factory=AcResult)
    last_scrubber: Optional[ScrubberResult] = None

    @property
    def composition_sum(self) -> float:
        return float(sum(self.composition.values()))

    @property
    def alert_codes(self) -> List[str]:
        return [alert.code for alert in self.alerts]


class RoomEnvironment:
    """
    Room feedback loop: heat/vapor in, AC and scrubber, clamping, alerts.

    Usage:
        room = RoomEnvironment(config, altitude=1500.0)
        room.add_heat("burner", 170.0)
        room.add_vapor("H2O", 0.001, 0.018015)
        room.step(1.0)
    """

    def __init__(self, config: RoomConfig, altitude: float = 0.0):
        config.validate()
        self.config = config
        self.altitude = clamp_altitude(altitude)
        self.ac = AcUnit(config.ac_unit) if config.ac_unit is not None else None
        self.air_handler = (
            AirHandler(config.air_handler) if config.air_handler is not None else None
        )
        self.exposure = ExposureTracker()
        self._pending_heat: Dict[str, float] = {}
        self._pending_vapor: Dict[str, Tuple[float, float]] = {}
        self.state = self._initial_state()
        self._next_history_time = 0.0
        self._record_history()

    def _outdoor_pressure(self) -> float:
        mode = self.config.pressure_mode
        if mode is PressureMode.CUSTOM:
            return float(self.config.initial_pressure)
        if mode is PressureMode.SEA_LEVEL:
            return SEA_LEVEL_PRESSURE
        return pressure_at_altitude(self.altitude)

    def _initial_state(self) -> RoomState:
        cfg = self.config
        outdoor_pressure = self._outdoor_pressure()
        return RoomState(
            volume_m3=cfg.volume_m3,
            heat_capacity=cfg.heat_capacity_j_per_c,
            temperature=cfg.initial_temperature,
            pressure=outdoor_pressure,
            composition=normalize_composition(cfg.atmosphere),
            outdoor_temperature=cfg.reference_outdoor_temperature,
            outdoor_pressure=outdoor_pressure,
            history=deque(maxlen=cfg.history_length),
        )

    def reset(self, altitude: Optional[float] = None) -> None:
        """Return to initial conditions, optionally at a new altitude."""
        if altitude is not None:
            self.altitude = clamp_altitude(altitude)
        if self.ac is not None:
            self.ac = AcUnit(self.config.ac_unit)
        if self.air_handler is not None:
            self.air_handler = AirHandler(self.config.air_handler)
        self.exposure = ExposureTracker()
        self._pending_heat.clear()
        self._pending_vapor.clear()
        self.state = self._initial_state()
        self._next_history_time = 0.0
        self._record_history()

    def copy(self) -> "RoomEnvironment":
        """Independent deep copy (staging area for an uncommitted tick)."""
        return copy.deepcopy(self)

    # ------------------------------------------------------------------
    # Inputs
    # ------------------------------------------------------------------

    def add_heat(self, source: str, watts: float) -> None:
        """Register a heat flow [W] for the next step (negative removes heat)."""
        if np.isfinite(watts) and watts:
            self._pending_heat[source] = self._pending_heat.get(source, 0.0) + watts

    def add_vapor(self, species: str, mass_kg: float, molar_mass: float) -> None:
        """Register vapor [kg] released into the room for the next step."""
        if not np.isfinite(mass_kg) or mass_kg <= 0:
            return
        mass, _ = self._pending_vapor.get(species, (0.0, molar_mass))
        self._pending_vapor[species] = (mass + mass_kg, molar_mass)

    # ------------------------------------------------------------------
    # Actuator reconfiguration
    # ------------------------------------------------------------------

    def set_ac_setpoint(self, setpoint: float) -> None:
        if self.ac is None:
            logger.warning("No AC unit configured, setpoint ignored")
            return
        self.ac.set_setpoint(setpoint)

    def set_ac_enabled(self, enabled: bool) -> None:
        if self.ac is None:
            logger.warning("No AC unit configured")
            return
        self.ac.set_enabled(enabled)

    def set_air_handler_mode(self, mode: AirHandlerMode) -> None:
        if self.air_handler is None:
            logger.warning("No air handler configured")
            return
        self.air_handler.set_mode(mode)

    # ------------------------------------------------------------------
    # Loop
    # ------------------------------------------------------------------

    def step(self, dt: float) -> RoomState:
        """
        Advance the room by dt seconds, consuming registered inputs.

        Args:
            dt: Interval [s]

        Returns:
            The (mutated) room state
        """
        state = self.state
        if not np.isfinite(dt) or dt <= 0:
            return state

        self._apply_sources(state, dt)

        if self.ac is not None:
            extra_flow = self.air_handler.last_flow_m3_per_hour if self.air_handler else 0.0
            result = self.ac.step(state.temperature, state.heat_capacity, dt, extra_flow)
            state.temperature += result.temperature_change
            if result.energy_joules > 0:
                state.energy.ac_heating += result.energy_joules
            else:
                state.energy.ac_cooling -= result.energy_joules
            state.last_ac = result

        if self.air_handler is not None:
            result = self.air_handler.step(
                state.composition, self.config.atmosphere, state.volume_m3, dt
            )
            state.composition = result.composition
            state.energy.air_handler += result.energy_joules
            state.last_scrubber = result

        leak = self.config.leak_rate_pa_per_s * dt
        state.pressure += float(np.clip(state.outdoor_pressure - state.pressure, -leak, leak))

        state.time += dt
        alerts = self._enforce_limits(state)
        alerts.extend(check_composition_alerts(state.composition))
        alerts.extend(self.exposure.update(state.composition, state.time, dt))
        state.alerts = alerts

        if state.time >= self._next_history_time:
            self._record_history()
        return state

    def _apply_sources(self, state: RoomState, dt: float) -> None:
        heat = sum(self._pending_heat.values())
        envelope = -self.config.envelope_conductance_w_per_c * (
            state.temperature - state.outdoor_temperature
        )
        state.temperature += (heat + envelope) * dt / state.heat_capacity
        state.energy.external_heat += heat * dt
        state.energy.envelope_loss -= envelope * dt

        for species, (mass, molar_mass) in self._pending_vapor.items():
            state.composition, state.pressure = add_vapor(
                state.composition,
                state.pressure,
                state.temperature,
                state.volume_m3,
                species,
                mass,
                molar_mass,
            )

        self._pending_heat.clear()
        self._pending_vapor.clear()

    def _enforce_limits(self, state: RoomState) -> List[Alert]:
        """Clamp temperature/pressure, turning each violation into an alert."""
        alerts = []
        limits = self.config.limits
        for quantity in ("temperature", "pressure"):
            try:
                limits.check(quantity, getattr(state, quantity))
            except BoundsExceeded as e:
                setattr(state, quantity, e.clamped)
                logger.warning(f"Room {e}; clamped")
                alerts.append(Alert(e.alert_code, AlertSeverity.WARNING, str(e)))
        return alerts

    def _record_history(self) -> None:
        state = self.state
        state.history.append(
            HistoryEntry(
                time=state.time,
                temperature=state.temperature,
                pressure=state.pressure,
                composition=tuple(sorted(state.composition.items())),
            )
        )
        self._next_history_time = state.time + self.config.history_interval_s
