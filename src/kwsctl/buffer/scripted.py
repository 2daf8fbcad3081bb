"""
ScriptedBuffer - deterministic buffering component for tests and demos.

Flags rise on scripted cycles (or, for full, once a complete burst has been
staged), so a controller under test sees exactly the handshake timing the test
asks for. All requests are recorded with the cycle they were sampled in.

Storage:
    memory: Sparse backing memory (dict address -> word); image loads read
            from it and write-backs write through to it
    image/filters/params: Three buffers behind registered read ports
"""

import logging

import numpy as np

from ..config import DEFAULT_CONFIG, ClassifierConfig
from .interface import BufferingComponent, BufferRequests, BufferStatus, ProtocolError

logger = logging.getLogger(__name__)


class ScriptedBuffer(BufferingComponent):
    """
    Buffering component double with scripted ready/full/write_done timing.

    Args:
        config: Controller configuration (widths, burst length)
        ready_at: First cycle with ready high; None = never ready
        full_at: First cycle with full high; None = once a whole burst is staged
        stall_full: Never raise full (overrides full_at)
        write_ack_delay: Cycles from a write request to its write_done pulse
        memory: Initial backing memory contents
        image: Initial image buffer contents
        filters: Initial filter buffer contents
        params: Initial configuration buffer contents

    Example:
        >>> buf = ScriptedBuffer(ready_at=3, memory={i: 100 + i for i in range(6)})
        >>> buf.status().ready
        False
    """

    def __init__(
        self,
        config: ClassifierConfig = DEFAULT_CONFIG,
        *,
        ready_at: int | None = 0,
        full_at: int | None = None,
        stall_full: bool = False,
        write_ack_delay: int = 1,
        memory: dict[int, int] | None = None,
        image=None,
        filters=None,
        params=None,
    ):
        assert write_ack_delay >= 1, "write_done follows its request by at least one cycle"
        self.config = config
        self.ready_at = ready_at
        self.full_at = full_at
        self.stall_full = stall_full
        self.write_ack_delay = write_ack_delay
        self.memory: dict[int, int] = dict(memory or {})

        depth = config.buffer_depth
        self.image = self._make_buffer(depth, image)
        self.filters = self._make_buffer(depth, filters)
        self.params = self._make_buffer(depth, params)

        self.cycle = 0
        self.load_requests: list[tuple[int, int]] = []
        """(cycle, address) of every image-load request."""
        self.filter_requests: list[tuple[int, int]] = []
        """(cycle, address) of every filter-load request."""
        self.write_requests: list[tuple[int, int, int]] = []
        """(cycle, address, data) of every write request."""

        self._last_load_cycle: int | None = None
        self._staged = 0  # loads in the current burst
        self._ack_cycles: list[int] = []

        # Registered read port outputs
        self._image_q = 0
        self._filter_q = 0
        self._params_q = 0

    def _make_buffer(self, depth: int, contents) -> np.ndarray:
        buf = np.zeros(depth, dtype=np.uint32)
        if contents is not None:
            values = np.asarray(contents, dtype=np.uint32)
            buf[: len(values)] = values & self.config.data_mask
        return buf

    @property
    def ready(self) -> bool:
        return self.ready_at is not None and self.cycle >= self.ready_at

    @property
    def full(self) -> bool:
        if self.stall_full:
            return False
        if self.full_at is not None:
            return self.cycle >= self.full_at
        return (
            self._last_load_cycle is not None
            and self._staged >= self.config.burst_length
            and self.cycle > self._last_load_cycle
        )

    def status(self) -> BufferStatus:
        return BufferStatus(
            ready=self.ready,
            full=self.full,
            write_done=self.cycle in self._ack_cycles,
            image_read_data=self._image_q,
            filter_read_data=self._filter_q,
            config_read_data=self._params_q,
        )

    def clock(self, requests: BufferRequests) -> None:
        self._check(requests)
        cfg = self.config
        addr_mask = cfg.buffer_depth - 1

        # Read ports sample the address before this edge's loads land
        self._image_q = int(self.image[requests.image_read_addr & addr_mask])
        self._filter_q = int(self.filters[requests.filter_read_addr & addr_mask])
        self._params_q = int(self.params[requests.config_read_addr & addr_mask])

        if requests.enable:
            if requests.image_load_req:
                addr = requests.load_addr
                if addr == 0 or self._staged >= cfg.burst_length:
                    self._staged = 0  # offset 0 starts a new burst and drops full
                self._staged += 1
                self.load_requests.append((self.cycle, addr))
                self.image[addr & addr_mask] = self.memory.get(addr, 0) & cfg.data_mask
                self._last_load_cycle = self.cycle
                logger.debug("cycle %d: image load 0x%07x", self.cycle, addr)

            if requests.filter_load_req:
                addr = requests.load_addr
                self.filter_requests.append((self.cycle, addr))
                self.filters[addr & addr_mask] = self.memory.get(addr, 0) & cfg.data_mask

            if requests.write_req:
                data = requests.write_data & cfg.data_mask
                self.write_requests.append((self.cycle, requests.write_addr, data))
                self.memory[requests.write_addr] = data
                self._ack_cycles.append(self.cycle + self.write_ack_delay)
                logger.debug(
                    "cycle %d: write 0x%04x -> 0x%07x", self.cycle, data, requests.write_addr
                )

        self._ack_cycles = [c for c in self._ack_cycles if c > self.cycle]
        self.cycle += 1

    def _check(self, requests: BufferRequests) -> None:
        loads = requests.image_load_req or requests.filter_load_req
        if requests.image_load_req and requests.filter_load_req:
            raise ProtocolError(f"cycle {self.cycle}: image and filter load in the same cycle")
        if loads and requests.write_req:
            raise ProtocolError(f"cycle {self.cycle}: load and write request in the same cycle")
        if (loads or requests.write_req) and not requests.enable:
            raise ProtocolError(f"cycle {self.cycle}: request while disabled")
        if loads and not self.ready:
            raise ProtocolError(f"cycle {self.cycle}: load request before ready")
