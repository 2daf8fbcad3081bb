"""State encoding shared by the RTL controller and the cycle model."""

from enum import IntEnum

STATE_BITS = 3
"""Width of the state register; encodings above DONE are unreachable."""


class ControllerState(IntEnum):
    """Classifier controller states, in sequencing order."""

    IDLE = 0
    AWAIT_READY = 1  # Wait for the buffering component's ready flag
    LOAD_BURST = 2  # Issue image-load requests 0..burst_limit
    AWAIT_BUFFER_FULL = 3  # Wait for the staged burst to land
    WRITE_BACK = 4  # Read staged words, transform and write back
    DONE = 5  # One-cycle completion pulse
