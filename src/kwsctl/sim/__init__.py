"""Simulation harness: cycle model and RTL engines, trace export."""

from .runner import (
    CycleRecord,
    ModelSimulator,
    SimulationTimeout,
    completion_cycles,
    load_addresses,
    run_rtl,
    write_requests,
)
from .trace import TimelineWriter

__all__ = [
    "CycleRecord",
    "ModelSimulator",
    "SimulationTimeout",
    "TimelineWriter",
    "completion_cycles",
    "load_addresses",
    "run_rtl",
    "write_requests",
]
