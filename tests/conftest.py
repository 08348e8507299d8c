# tests/conftest.py
import pathlib

import pytest

from boilsim.core.fluids import WATER, builtin_fluid, load_fluid
from boilsim.host.commands import InitialConditions
from boilsim.host.engine import ExecutionHost, HostConfig
from boilsim.room.config import RoomConfig, builtin_room_config


@pytest.fixture(scope="session")
def data_dir() -> pathlib.Path:
    return pathlib.Path(__file__).parent / "data"


@pytest.fixture(scope="session")
def water():
    return WATER


@pytest.fixture(scope="session")
def ethanol():
    return builtin_fluid("ethanol")


@pytest.fixture(scope="session")
def syrup(data_dir):
    # 30 % non-volatile solids
    return load_fluid(data_dir / "sugar_syrup.yaml")


@pytest.fixture
def quiet_room():
    """Room without actuators."""
    return RoomConfig()


@pytest.fixture
def default_room():
    return builtin_room_config()


@pytest.fixture
def make_host(water, quiet_room):
    """Build a host that is never started unless the test does so."""
    hosts = []

    def factory(room=None, initial=None, tick_interval_s=0.1, reference_step_s=1.0, fluid=None):
        host = ExecutionHost(
            fluid or water,
            room or quiet_room,
            initial or InitialConditions(),
            HostConfig(tick_interval_s=tick_interval_s, reference_step_s=reference_step_s),
        )
        hosts.append(host)
        return host

    yield factory

    for host in hosts:
        host.stop()
