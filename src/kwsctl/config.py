"""
Kwsctl Configuration Module

This module defines the configuration dataclass for the classifier controller.
Every protocol constant (burst and write limits, address offsets, bus widths)
is specified here and propagates through both the RTL and the cycle model.

Note: the defaults reproduce the fixed protocol of the keyword-spotting
datapath (6 image loads at offsets 0-5, 6 write-backs at 30-35, +19 transform).
Changing them produces a differently sized controller, not a different protocol.
"""

from dataclasses import dataclass
from enum import Enum, auto


class WriteCadence(Enum):
    """
    How the controller paces write requests during write-back.

    - FIXED_RATE: One write request every cycle, write_done is not consulted
    - ACK_GATED: Issue one write, then wait for write_done before the next

    Example:
        >>> config = ClassifierConfig(write_cadence=WriteCadence.ACK_GATED)
    """

    FIXED_RATE = auto()  # New write each cycle, no per-request acknowledgement
    ACK_GATED = auto()  # Request N+1 only after write_done for request N


@dataclass
class ClassifierConfig:
    """
    Configuration for the classifier controller.

    Example:
        >>> config = ClassifierConfig()
        >>> print(config.burst_length)  # 6
        >>> print(config.write_addresses)  # [30, 31, 32, 33, 34, 35]
    """

    # =========================================================================
    # Load Burst
    # =========================================================================
    burst_limit: int = 5
    """Last image offset requested in a load burst (offsets 0..burst_limit)."""

    # =========================================================================
    # Write-Back
    # =========================================================================
    write_limit: int = 6
    """Last counter value that issues a write (counter runs 1..write_limit)."""

    write_offset: int = 30
    """Backing memory target of the first write-back."""

    transform_constant: int = 19
    """Value added to each staged word before it is written back."""

    write_cadence: WriteCadence = WriteCadence.FIXED_RATE
    """Write pacing (see WriteCadence)."""

    # =========================================================================
    # Bus Widths (bits)
    # =========================================================================
    data_bits: int = 16
    """Width of a staged word and of write data."""

    buf_addr_bits: int = 9
    """Width of the image buffer read address."""

    mem_addr_bits: int = 25
    """Width of backing memory request addresses."""

    # =========================================================================
    # Computed Properties
    # =========================================================================
    @property
    def burst_length(self) -> int:
        """Number of image-load requests per run."""
        return self.burst_limit + 1

    @property
    def write_count(self) -> int:
        """Number of write requests per run."""
        return self.write_limit

    @property
    def buffer_depth(self) -> int:
        """Words addressable through the image buffer read port."""
        return 1 << self.buf_addr_bits

    @property
    def data_mask(self) -> int:
        """Mask for truncating a value to data_bits."""
        return (1 << self.data_bits) - 1

    @property
    def load_addresses(self) -> list[int]:
        """Load-request addresses of one run, in issue order."""
        return list(range(self.burst_length))

    @property
    def write_addresses(self) -> list[int]:
        """Write-request target addresses of one run, in issue order."""
        return [self.write_target(c) for c in range(1, self.write_limit + 1)]

    def write_target(self, counter: int) -> int:
        """Backing memory address written while the counter holds `counter`."""
        return (counter + self.write_offset - 1) & ((1 << self.mem_addr_bits) - 1)

    def __post_init__(self):
        """Validate configuration parameters."""
        assert self.data_bits > 0, "data_bits must be positive"
        assert self.buf_addr_bits > 0, "buf_addr_bits must be positive"
        assert self.mem_addr_bits >= self.buf_addr_bits, (
            "mem_addr_bits must cover the image buffer address range"
        )
        assert self.burst_limit >= 0, "burst_limit must be non-negative"
        assert self.write_limit >= 1, "write_limit must be at least 1"
        assert self.write_offset >= 1, "write_offset must be at least 1"
        assert self.burst_limit < self.buffer_depth, "load burst must fit the image buffer"
        assert self.write_limit < self.buffer_depth, "write-back cursor must fit the image buffer"
        assert 0 <= self.transform_constant <= self.data_mask, (
            "transform_constant must fit in data_bits"
        )
        assert self.write_limit + self.write_offset - 1 < (1 << self.mem_addr_bits), (
            "last write target must fit in mem_addr_bits"
        )
        assert isinstance(self.write_cadence, WriteCadence), "write_cadence must be a WriteCadence"


# Pre-defined configurations
DEFAULT_CONFIG = ClassifierConfig()
"""Default configuration (fixed-rate write-back)."""

ACK_GATED_CONFIG = ClassifierConfig(write_cadence=WriteCadence.ACK_GATED)
"""Write-back paced by the buffering component's write_done flag."""
