"""Controller modules for the kwsctl classifier."""

from .classifier import ClassifierController
from .model import (
    ControllerInputs,
    ControllerOutputs,
    ControllerRegs,
    InvalidStateError,
    step,
)
from .state import STATE_BITS, ControllerState

__all__ = [
    "ClassifierController",
    "ControllerInputs",
    "ControllerOutputs",
    "ControllerRegs",
    "ControllerState",
    "InvalidStateError",
    "STATE_BITS",
    "step",
]
