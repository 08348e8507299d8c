"""
Execution Host
==============

Runs one experiment on a dedicated thread at a fixed tick cadence.

Per tick:
1. Drain the command queue in receipt order
2. Read the time control (speed multiplier, pause flag)
3. Advance the experiment by speed × tick_interval simulated seconds,
   sub-stepped by the scheduler
4. Publish a snapshot to the last-value-wins mailbox

Commands arriving between ticks are applied immediately and followed by
a snapshot, without advancing physics, so a snapshot published after a
command always reflects it. A reset request cancels an in-flight tick
between sub-steps; the half-computed interval is discarded and the
experiment is reinitialised.

Threading model: the physics thread owns the experiment. Other threads
only touch the command queue (submit) and the mailbox (take/peek).

Author: Guilherme F. G. Santos
Date: January 2026
License: MIT
"""

import logging
import queue
import threading
import time
from concurrent.futures import Future
from dataclasses import dataclass
from typing import List, Optional, Tuple

from ..core.errors import InvalidCommand
from ..core.fluids import FluidProperties, WATER
from ..core.scheduler import DEFAULT_REFERENCE_STEP, SubStepScheduler, TickCancelled
from ..room.config import RoomConfig
from . import commands as cmd
from .commands import Command, CommandType, InitialConditions
from .experiment import Experiment
from .messages import Snapshot, SnapshotMailbox

logger = logging.getLogger(__name__)


@dataclass
class HostConfig:
    """
    Configuration for the execution host.

    The speed multiplier is only honoured while one tick's physics fits in
    tick_interval_s of wall time. At very high speeds (65536x with the
    default room and 1 s reference step takes ~0.3 s per 0.05 s tick) the
    loop falls behind and re-anchors its schedule, so the effective speed
    drops while every tick still advances speed x tick_interval_s.
    Non-reset commands then wait up to one full tick. Raise
    reference_step_s to trade accuracy for speed.
    """

    tick_interval_s: float = 0.05  # wall-clock seconds per tick
    reference_step_s: float = DEFAULT_REFERENCE_STEP  # max simulated sub-step

    # Timeouts
    startup_timeout_sec: float = 5.0
    shutdown_timeout_sec: float = 3.0

    def validate(self) -> None:
        if self.tick_interval_s <= 0:
            raise ValueError(f"tick_interval_s must be positive: {self.tick_interval_s}")
        if self.reference_step_s <= 0:
            raise ValueError(f"reference_step_s must be positive: {self.reference_step_s}")


@dataclass
class TimeControl:
    """Speed and pause state owned by the host."""

    speed_multiplier: float = 1.0
    paused: bool = False
    sim_time: float = 0.0
    tick: int = 0


class ExecutionHost:
    """
    Real-time driver of one experiment.

    Usage:
        host = ExecutionHost(WATER, builtin_room_config())
        host.start(blocking=False)
        host.set_heater_power(1700.0)
        snapshot = host.mailbox.take(timeout=1.0)
        host.stop()
    """

    def __init__(
        self,
        fluid: FluidProperties = WATER,
        room_config: Optional[RoomConfig] = None,
        initial: Optional[InitialConditions] = None,
        config: Optional[HostConfig] = None,
    ):
        """Initialize host; configuration errors surface here, before any tick."""

        self.config = config or HostConfig()
        self.config.validate()
        self.room_config = room_config or RoomConfig()

        self.experiment = Experiment(fluid, self.room_config, initial)
        self.scheduler = SubStepScheduler(self.config.reference_step_s)
        self.time = TimeControl()
        self.mailbox = SnapshotMailbox()

        # Inbound channel
        self._commands: "queue.Queue[Tuple[Command, Future]]" = queue.Queue()
        self._pending_resets = 0
        self._reset_lock = threading.Lock()
        self._submit_lock = threading.Lock()
        self._failure: Optional[BaseException] = None

        # Lifecycle management
        self.host_thread: Optional[threading.Thread] = None

        # Synchronization
        self._lock = threading.RLock()
        self._running = threading.Event()
        self._ready = threading.Event()
        self._shutdown_requested = threading.Event()
        self._wake = threading.Event()

        self._publish()
        logger.info(
            f"Execution host initialized: {fluid.name}, tick "
            f"{self.config.tick_interval_s * 1000:.0f} ms, reference step "
            f"{self.config.reference_step_s:g} s"
        )

    # ------------------------------------------------------------------
    # Command submission (any thread)
    # ------------------------------------------------------------------

    def submit(self, command: Command) -> Future:
        """
        Validate and enqueue a command.

        Args:
            command: Command built with the helpers in boilsim.host.commands

        Returns:
            Future resolved once the command has been applied

        Raises:
            InvalidCommand: Payload out of range or target actuator missing;
                nothing is enqueued
            RuntimeError: The physics loop has died
        """
        try:
            command = self._validate(command)
        except InvalidCommand as e:
            logger.warning(str(e))
            raise

        future: Future = Future()
        with self._submit_lock:
            if self._failure is not None:
                raise RuntimeError(f"Execution host stopped: {self._failure}")
            if command.type is CommandType.RESET_EXPERIMENT:
                with self._reset_lock:
                    self._pending_resets += 1
            self._commands.put((command, future))
        self._wake.set()
        return future

    def _validate(self, command: Command) -> Command:
        if not isinstance(command, Command):
            raise InvalidCommand(repr(command), "not a Command")
        command = command.validate()
        if (
            command.type in (CommandType.SET_ACTUATOR_SETPOINT, CommandType.SET_AC_ENABLED)
            and self.room_config.ac_unit is None
        ):
            raise InvalidCommand(command.name, "no AC unit configured")
        if (
            command.type is CommandType.SET_AIR_HANDLER_MODE
            and self.room_config.air_handler is None
        ):
            raise InvalidCommand(command.name, "no air handler configured")
        return command

    def set_heater_power(self, watts: float) -> Future:
        return self.submit(cmd.set_heater_power(watts))

    def set_speed_multiplier(self, factor: float) -> Future:
        return self.submit(cmd.set_speed_multiplier(factor))

    def pause(self) -> Future:
        return self.submit(cmd.pause())

    def resume(self) -> Future:
        return self.submit(cmd.resume())

    def set_actuator_setpoint(self, target: float) -> Future:
        return self.submit(cmd.set_actuator_setpoint(target))

    def reset_experiment(self, initial: Optional[InitialConditions] = None) -> Future:
        return self.submit(cmd.reset_experiment(initial))

    def set_ac_enabled(self, enabled: bool) -> Future:
        return self.submit(cmd.set_ac_enabled(enabled))

    def set_air_handler_mode(self, mode) -> Future:
        return self.submit(cmd.set_air_handler_mode(mode))

    # ------------------------------------------------------------------
    # Physics thread
    # ------------------------------------------------------------------

    def _reset_pending(self) -> bool:
        with self._reset_lock:
            return self._pending_resets > 0

    def _apply(self, command: Command) -> None:
        experiment = self.experiment
        kind = command.type

        if kind is CommandType.SET_HEATER_POWER:
            experiment.heater_power = command.value
        elif kind is CommandType.SET_SPEED_MULTIPLIER:
            self.time.speed_multiplier = command.value
        elif kind is CommandType.PAUSE:
            self.time.paused = True
        elif kind is CommandType.RESUME:
            self.time.paused = False
        elif kind is CommandType.SET_ACTUATOR_SETPOINT:
            experiment.room.set_ac_setpoint(command.value)
        elif kind is CommandType.SET_AC_ENABLED:
            experiment.room.set_ac_enabled(command.value)
        elif kind is CommandType.SET_AIR_HANDLER_MODE:
            experiment.room.set_air_handler_mode(command.value)
        elif kind is CommandType.RESET_EXPERIMENT:
            experiment.reset(command.value)
            self.time.sim_time = 0.0
            with self._reset_lock:
                self._pending_resets -= 1

        logger.debug(f"Applied {command.name}({command.value!r})")

    def _drain_commands(self) -> int:
        """Apply every queued command in receipt order."""
        applied: List[Future] = []
        while True:
            try:
                command, future = self._commands.get_nowait()
            except queue.Empty:
                break
            try:
                self._apply(command)
            except Exception as e:
                future.set_exception(e)
                self._resolve(applied)
                raise
            applied.append(future)

        self._resolve(applied)
        return len(applied)

    @staticmethod
    def _resolve(futures: List[Future]) -> None:
        for future in futures:
            future.set_result(True)

    def _fail_pending(self, error: BaseException) -> None:
        """Refuse further commands and fail every queued one."""
        with self._submit_lock:
            self._failure = error
            while True:
                try:
                    _, future = self._commands.get_nowait()
                except queue.Empty:
                    break
                future.set_exception(RuntimeError(f"Execution host stopped: {error}"))

    def _publish(self) -> Snapshot:
        snapshot = self.experiment.snapshot(
            self.time.tick,
            self.time.sim_time,
            self.time.speed_multiplier,
            self.time.paused,
        )
        self.mailbox.publish(snapshot)
        return snapshot

    def tick(self) -> Snapshot:
        """
        Run one tick synchronously.

        Returns:
            Snapshot published at the end of the tick
        """
        with self._lock:
            self._drain_commands()

            if not self.time.paused:
                delta = self.time.speed_multiplier * self.config.tick_interval_s
                try:
                    self.experiment.advance(
                        delta, self.scheduler, should_cancel=self._reset_pending
                    )
                    self.time.sim_time += delta
                except TickCancelled as e:
                    logger.info(f"Tick {self.time.tick} discarded for reset ({e})")
                    self._drain_commands()

            self.time.tick += 1
            return self._publish()

    def apply_pending_commands(self) -> int:
        """Apply queued commands now and publish a snapshot if any were applied."""
        with self._lock:
            count = self._drain_commands()
            if count:
                self._publish()
            return count

    def _run_loop(self) -> None:
        interval = self.config.tick_interval_s
        next_tick = time.monotonic()
        self._ready.set()

        try:
            while not self._shutdown_requested.is_set():
                now = time.monotonic()
                if now >= next_tick:
                    self.tick()
                    next_tick += interval
                    if next_tick < now:
                        # Fell behind (slow tick at high speed); do not spiral
                        next_tick = now + interval
                    continue

                self._wake.wait(timeout=next_tick - now)
                self._wake.clear()
                self.apply_pending_commands()

        except Exception as e:
            logger.exception(f"Physics loop failed: {type(e).__name__}: {e}")
            self._fail_pending(e)

        finally:
            self._running.clear()
            self._ready.set()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self, blocking: bool = True) -> None:
        """
        Start the physics loop.

        Args:
            blocking: If True, run in the calling thread until stopped
                      If False, run in a background thread
        """
        if self._running.is_set():
            logger.warning("Execution host already running")
            return

        self._running.set()
        self._ready.clear()
        self._shutdown_requested.clear()

        if blocking:
            self._run_loop()
            return

        self.host_thread = threading.Thread(
            target=self._run_loop, daemon=True, name="BoilSimHost"
        )
        self.host_thread.start()

        if not self._ready.wait(timeout=self.config.startup_timeout_sec):
            self._running.clear()
            raise RuntimeError("Execution host startup timeout")

        logger.info("Execution host started")

    def stop(self) -> None:
        """Stop the physics loop (graceful shutdown)."""
        if not self._running.is_set() and not (
            self.host_thread and self.host_thread.is_alive()
        ):
            return

        self._shutdown_requested.set()
        self._wake.set()

        if self.host_thread and self.host_thread.is_alive():
            self.host_thread.join(timeout=self.config.shutdown_timeout_sec)

            if self.host_thread.is_alive():
                logger.warning("Host thread did not terminate cleanly")

        self._running.clear()
        logger.info("Execution host stopped")

    @property
    def is_running(self) -> bool:
        """Check if the physics loop is running."""
        return self._running.is_set()

    def latest_snapshot(self) -> Optional[Snapshot]:
        return self.mailbox.peek()
