"""
Headless Simulation Runner
==========================

Runs one boiling experiment on the execution host and logs snapshots.

    python -m boilsim --fluid water --altitude 5000 --power 1700 --speed 16
    python -m boilsim --fluid my_fluid.yaml --room kitchen.yaml --duration 900
    python -m boilsim --validate

Author: Guilherme F. G. Santos
Date: January 2026
"""

import argparse
import logging
import signal
import sys
import time
from contextlib import suppress
from pathlib import Path

from .core import builtin_fluid, load_fluid, run_all_validations
from .core.errors import ConfigurationError, InvalidCommand
from .core.fluids import FluidProperties
from .host import ExecutionHost, HostConfig, InitialConditions, validate_stability
from .room import RoomConfig, builtin_room_config, load_room_config

# Configure logging (no verbose stack traces in production)
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)

# Global running flag for graceful shutdown
running = True


def signal_handler(sig, frame):
    """Handle Ctrl+C for clean shutdown."""
    global running
    logger.info("Shutdown signal received. Stopping simulation...")
    running = False


def resolve_fluid(name: str) -> FluidProperties:
    """Built-in fluid name or path to a YAML/JSON document."""
    if Path(name).suffix.lower() in (".yaml", ".yml", ".json"):
        return load_fluid(name)
    return builtin_fluid(name)


def resolve_room(name: str) -> RoomConfig:
    if Path(name).suffix.lower() in (".yaml", ".yml", ".json"):
        return load_room_config(name)
    return builtin_room_config(name)


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Boiling Point Physics Simulator")
    parser.add_argument("--fluid", default="water", help="Built-in fluid or document path")
    parser.add_argument("--room", default="default", help="Built-in room or document path")
    parser.add_argument("--mass", type=float, default=1.0, help="Liquid mass [kg]")
    parser.add_argument(
        "--temperature", type=float, default=20.0, help="Initial liquid temperature [°C]"
    )
    parser.add_argument("--altitude", type=float, default=0.0, help="Altitude [m]")
    parser.add_argument("--power", type=float, default=1700.0, help="Burner power [W]")
    parser.add_argument("--speed", type=float, default=1.0, help="Speed multiplier")
    parser.add_argument(
        "--setpoint", type=float, default=None, help="AC setpoint [°C]"
    )
    parser.add_argument(
        "--duration",
        type=float,
        default=float("inf"),
        help="Simulated duration [seconds]",
    )
    parser.add_argument(
        "--tick", type=float, default=0.05, help="Host tick interval [seconds]"
    )
    parser.add_argument(
        "--reference-step", type=float, default=1.0, help="Max sub-step [seconds]"
    )
    parser.add_argument(
        "--log-interval", type=float, default=1.0, help="Wall seconds between log lines"
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--validate", action="store_true", help="Run physics validations and exit"
    )
    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    if args.validate:
        run_all_validations()
        validate_stability()
        return

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    logger.info("=" * 70)
    logger.info("BOILING POINT SIMULATION")
    logger.info("=" * 70)

    # ========================================================================
    # PHASE 1: Load configuration
    # ========================================================================
    logger.info("[PHASE 1] Loading fluid and room configuration...")

    try:
        fluid = resolve_fluid(args.fluid)
        room = resolve_room(args.room)
        initial = InitialConditions(
            liquid_mass=args.mass, temperature=args.temperature, altitude=args.altitude
        ).validate()
        host = ExecutionHost(
            fluid,
            room,
            initial,
            HostConfig(tick_interval_s=args.tick, reference_step_s=args.reference_step),
        )
    except (ConfigurationError, InvalidCommand, ValueError) as e:
        logger.error(f"Configuration rejected: {e}")
        sys.exit(1)

    logger.info(f"✓ {fluid.name}, room {room.volume_m3:g} m³")

    # ========================================================================
    # PHASE 2: Start execution host
    # ========================================================================
    logger.info("[PHASE 2] Starting execution host...")

    try:
        host.set_heater_power(args.power)
        host.set_speed_multiplier(args.speed)
        if args.setpoint is not None:
            host.set_actuator_setpoint(args.setpoint)
        host.start(blocking=False)
    except (InvalidCommand, RuntimeError) as e:
        logger.error(f"Host startup failed: {e}")
        sys.exit(1)

    # ========================================================================
    # PHASE 3: Consume snapshots
    # ========================================================================
    logger.info("[PHASE 3] Running. Press Ctrl+C to stop gracefully")

    last_log = 0.0
    last_phase = None

    try:
        while running and host.is_running:
            snapshot = host.mailbox.take(timeout=0.5)
            if snapshot is None:
                continue

            now = time.monotonic()
            if snapshot.phase is not last_phase or now - last_log >= args.log_interval:
                alerts = ",".join(a.code for a in snapshot.alerts) or "-"
                logger.info(
                    f"t={snapshot.sim_time:8.1f}s | {snapshot.phase.value:<8} | "
                    f"T={snapshot.temperature:6.2f}°C (bp {snapshot.boiling_point:6.2f}) | "
                    f"liquid={snapshot.liquid_mass:.4f} kg | "
                    f"room={snapshot.room_temperature:5.2f}°C "
                    f"{snapshot.room_pressure / 1000:6.2f} kPa | alerts={alerts}"
                )
                last_log = now
                last_phase = snapshot.phase

            if snapshot.sim_time >= args.duration:
                logger.info(f"Reached {args.duration:g} s of simulated time")
                break

    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received")

    finally:
        # ====================================================================
        # CLEANUP
        # ====================================================================
        logger.info("Shutting down...")
        with suppress(Exception):
            host.stop()
        logger.info("Simulation stopped cleanly")


if __name__ == "__main__":
    main()
