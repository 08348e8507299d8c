"""
Coupled Experiment
==================

One liquid body on a burner inside one room.

Per sub-step:
1. The liquid steps against the room temperature/pressure left by the
   previous sub-step (one-step delayed feedback).
2. Its exchanges are registered with the room: heat lost or gained while
   relaxing toward the room, the burner's waste heat, and vapor.
3. The room steps, consuming those contributions.

Intervals are computed on a staged copy of the room and committed only
when every sub-step has completed, so a cancelled interval leaves no
trace.

Author: Guilherme F. G. Santos
Date: January 2026
License: MIT
"""

import logging
from typing import Callable, Optional, Tuple

from ..core.fluids import FluidProperties
from ..core.scheduler import SubStepScheduler
from ..core.simulator import FluidBodyState, Phase, simulate_time_step
from ..core.thermodynamics import heat_energy
from ..room.config import RoomConfig
from ..room.environment import RoomEnvironment
from .commands import InitialConditions
from .messages import Snapshot

logger = logging.getLogger(__name__)

CoupledState = Tuple[FluidBodyState, RoomEnvironment]

_RELAXATION_PHASES = (Phase.COOLING, Phase.WARMING, Phase.IDLE)


class Experiment:
    """Liquid body and room advanced together."""

    def __init__(
        self,
        fluid: FluidProperties,
        room_config: RoomConfig,
        initial: Optional[InitialConditions] = None,
    ):
        fluid.validate()
        room_config.validate()
        self.fluid = fluid
        self.room_config = room_config
        self.heater_power = 0.0
        self.reset(initial or InitialConditions())

    def reset(self, initial: InitialConditions) -> None:
        """Fresh liquid and room; the heater is switched off."""
        initial = initial.validate()
        self.initial = initial
        self.heater_power = 0.0
        self.room = RoomEnvironment(self.room_config, initial.altitude)
        self.fluid_state = FluidBodyState.initial(
            self.fluid,
            initial.liquid_mass,
            initial.temperature,
            initial.altitude,
            pressure=self.room.state.pressure,
        )
        logger.info(
            f"Experiment reset: {initial.liquid_mass:.3f} kg {self.fluid.name} "
            f"at {initial.temperature:.1f}°C, {initial.altitude:.0f} m"
        )

    def coupled_step(self, state: CoupledState, dt: float) -> CoupledState:
        """One fluid-then-room sub-step."""
        before, room = state
        after = simulate_time_step(
            before,
            self.heater_power,
            dt,
            self.fluid,
            ambient_temperature=room.state.temperature,
            ambient_pressure=room.state.pressure,
        )

        if after.phase in _RELAXATION_PHASES and after.temperature != before.temperature:
            released = heat_energy(
                before.liquid_mass,
                self.fluid.specific_heat,
                before.temperature - after.temperature,
            )
            room.add_heat("liquid", released / dt)

        if self.heater_power > 0:
            room.add_heat(
                "burner", self.heater_power * self.room_config.burner_waste_fraction
            )

        if after.vapor_generated > 0:
            room.add_vapor(
                self.fluid.vapor_species, after.vapor_generated, self.fluid.molar_mass
            )

        room.step(dt)
        return after, room

    def advance(
        self,
        delta: float,
        scheduler: SubStepScheduler,
        should_cancel: Optional[Callable[[], bool]] = None,
    ) -> None:
        """
        Advance by delta simulated seconds.

        Raises:
            TickCancelled: Propagated from the scheduler; nothing is committed
        """
        staged: CoupledState = (self.fluid_state, self.room.copy())
        fluid_state, room = scheduler.advance(
            staged, delta, self.coupled_step, should_cancel=should_cancel
        )
        self.fluid_state = fluid_state
        self.room = room

    def snapshot(
        self, tick: int, sim_time: float, speed_multiplier: float, paused: bool
    ) -> Snapshot:
        fluid = self.fluid_state
        room = self.room.state
        ac = self.room.ac
        return Snapshot(
            tick=tick,
            sim_time=sim_time,
            temperature=fluid.temperature,
            liquid_mass=fluid.liquid_mass,
            residue_mass=fluid.residue_mass,
            vaporized_mass=fluid.vaporized_mass,
            phase=fluid.phase,
            boiling_point=fluid.boiling_point,
            boiling_point_extrapolated=fluid.boiling_point_extrapolated,
            room_temperature=room.temperature,
            room_pressure=room.pressure,
            alerts=tuple(room.alerts),
            heater_power=self.heater_power,
            speed_multiplier=speed_multiplier,
            paused=paused,
            ac_setpoint=ac.setpoint if ac is not None else None,
            ac_output_watts=room.last_ac.heat_output_watts,
            air_handler_flow_m3_per_hour=(
                room.last_scrubber.flow_m3_per_hour if room.last_scrubber else 0.0
            ),
        )
