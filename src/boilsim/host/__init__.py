"""
Execution Host Package
======================

Threaded real-time driver: command table, coupled experiment, snapshots,
and the sub-step stability study.

Author: Guilherme F. G. Santos
Date: January 2026
License: MIT
"""

from .commands import Command, CommandType, InitialConditions
from .engine import ExecutionHost, HostConfig, TimeControl
from .experiment import Experiment
from .messages import Snapshot, SnapshotMailbox
from .stability import convergence_study, validate_stability

__all__ = [
    "Command",
    "CommandType",
    "InitialConditions",
    "ExecutionHost",
    "HostConfig",
    "TimeControl",
    "Experiment",
    "Snapshot",
    "SnapshotMailbox",
    "convergence_study",
    "validate_stability",
]
