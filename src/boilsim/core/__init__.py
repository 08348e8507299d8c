"""
Boiling Physics Core Package
============================

Pure physics of a heated liquid body at any altitude.

This package provides:
- Fluids: Validated thermophysical properties loaded from YAML/JSON
- Atmosphere: ISA pressure vs altitude, Antoine boiling-point inversion
- Thermodynamics: Sensible/latent heat, exact Newtonian cooling, ebullioscopy
- Simulator: Pure one-interval state transition with phase flags
- Scheduler: Bounded sub-stepping for large (accelerated) intervals

USAGE EXAMPLE
============

```python
from boilsim.core import WATER, FluidBodyState, advance_fluid

state = FluidBodyState.initial(WATER, liquid_mass=1.0, temperature=20.0,
                               altitude=5000.0)

# Ten minutes on a 1700 W burner, integrated in ≤1 s sub-steps
state = advance_fluid(state, power=1700.0, delta=600.0, fluid=WATER)

print(state.phase, state.temperature, state.liquid_mass)
# Phase.BOILING 83.3... 0.66...
```

ARCHITECTURE
============

Everything here is side-effect free apart from logging. The room
environment (boilsim.room) and the real-time host (boilsim.host) sit on top
and feed room temperature/pressure back in as ambient conditions.

PHYSICS VALIDATION
=================

Run validation: `python -m boilsim --validate` or call `run_all_validations()`

Author: Guilherme F. G. Santos
Date: January 2026
License: MIT
"""

# Version
__version__ = "1.0.0"
__author__ = "Guilherme F. G. Santos"

from .errors import (
    BoilSimError,
    BoundsExceeded,
    ConfigurationError,
    InvalidCommand,
    InvalidPressure,
)

# Fluid property model
from .fluids import (
    AntoineCoefficients,
    FluidProperties,
    WATER,
    builtin_fluid,
    load_fluid,
)

# Heat transfer
from .thermodynamics import (
    HeatingResult,
    apply_cooling,
    apply_heat_energy,
    validate_thermodynamics,
)

# Atmosphere
from .atmosphere import (
    boiling_point_at,
    boiling_point_at_altitude,
    pressure_at_altitude,
    safe_boiling_point,
    validate_atmosphere,
)

# Time stepping
from .simulator import FluidBodyState, Phase, simulate_time_step
from .scheduler import SubStepScheduler, TickCancelled, advance_fluid

__all__ = [
    # Errors
    "BoilSimError",
    "BoundsExceeded",
    "ConfigurationError",
    "InvalidCommand",
    "InvalidPressure",
    # Fluids
    "AntoineCoefficients",
    "FluidProperties",
    "WATER",
    "builtin_fluid",
    "load_fluid",
    # Heat transfer
    "HeatingResult",
    "apply_cooling",
    "apply_heat_energy",
    # Atmosphere
    "boiling_point_at",
    "boiling_point_at_altitude",
    "pressure_at_altitude",
    "safe_boiling_point",
    # Time stepping
    "FluidBodyState",
    "Phase",
    "simulate_time_step",
    "SubStepScheduler",
    "TickCancelled",
    "advance_fluid",
    # Validation functions
    "validate_thermodynamics",
    "validate_atmosphere",
]


def run_all_validations():
    """
    Run all physics validation checks.

    This should be run after any code changes to ensure
    physics correctness is maintained.
    """
    print("Running Boiling Physics Validation Suite")
    print("=" * 70)

    print("\n1. Heat transfer...")
    validate_thermodynamics()

    print("\n2. Atmosphere...")
    validate_atmosphere()

    print("\n" + "=" * 70)
    print("ALL VALIDATIONS PASSED ✓")
    print("=" * 70)


if __name__ == "__main__":
    """Run all validations when package is executed."""
    run_all_validations()
