# tests/test_stability.py
import pytest

from boilsim.core import run_all_validations
from boilsim.core.simulator import FluidBodyState
from boilsim.host.stability import (
    convergence_study,
    is_monotonically_convergent,
    max_reachable_temperature,
    quiet_room,
    reference_cooling_solution,
    validate_stability,
)
from boilsim.room.config import AcUnitConfig, RoomConfig


def test_reference_solution_conserves_heat():
    fluid_t, room_t = reference_cooling_solution(100.0, 20.0, 4186.0, 36000.0, 0.0015, 600.0)
    assert 20.0 < room_t < fluid_t < 100.0
    assert 4186.0 * fluid_t + 36000.0 * room_t == pytest.approx(
        4186.0 * 100.0 + 36000.0 * 20.0, rel=1e-8
    )


def test_convergence_is_monotone():
    points = convergence_study(duration=600.0, steps=(60.0, 30.0, 15.0, 7.5))
    assert [p.substeps for p in points] == [10, 20, 40, 80]
    assert is_monotonically_convergent(points)
    assert points[-1].error < 0.05


def test_quiet_room_strips_actuators():
    room = quiet_room(RoomConfig(ac_unit=AcUnitConfig(), envelope_conductance_w_per_c=30.0))
    assert room.ac_unit is None
    assert room.air_handler is None
    assert room.envelope_conductance_w_per_c == 0.0


def test_reachable_temperature_bound(water):
    state = FluidBodyState.initial(water, 1.0, 20.0)
    assert max_reachable_temperature(state, 1700.0, 100.0, water, 100.0) == pytest.approx(
        20.0 + 170000.0 / 4186.0
    )
    assert max_reachable_temperature(state, 1700.0, 1e6, water, 100.0) == 100.0
    assert max_reachable_temperature(state, 0.0, 1e6, water, 100.0) == 20.0


def test_self_validations_pass(capsys):
    run_all_validations()
    validate_stability()
    out = capsys.readouterr().out
    assert "✓ All stability validations passed" in out
    assert "✓ All atmosphere validations passed" in out
