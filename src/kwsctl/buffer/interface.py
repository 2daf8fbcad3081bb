"""
Buffering Component contract.

The buffering component stages data from backing memory into three logical
buffers (image, filter, configuration) and writes results back through to
memory. Its internals are not modelled here; this module only fixes the
cycle-level contract the ClassifierController relies on, so that test doubles
can stand in for it:

- ready rises once configuration data is loaded, before any request is honored
- at most one of image-load / filter-load is requested per cycle
- full rises once a client load burst has populated the image buffer
- one write request per cycle; write_done pulses after completion
- each read port is registered: data in cycle T is for the address of T-1

A client drives a BufferRequests bundle every cycle and samples a
BufferStatus bundle; clock() commits one rising edge.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from ..controller.model import ControllerOutputs


class ProtocolError(RuntimeError):
    """A client drove the buffering component outside its contract."""


@dataclass(frozen=True)
class BufferRequests:
    """Signals driven into the buffering component in one cycle."""

    enable: bool = False
    image_load_req: bool = False
    filter_load_req: bool = False
    load_addr: int = 0
    write_req: bool = False
    write_addr: int = 0
    write_data: int = 0
    image_read_addr: int = 0
    filter_read_addr: int = 0
    config_read_addr: int = 0


@dataclass(frozen=True)
class BufferStatus:
    """Signals driven by the buffering component in one cycle."""

    ready: bool = False
    full: bool = False
    write_done: bool = False
    image_read_data: int = 0
    filter_read_data: int = 0
    config_read_data: int = 0


def requests_from(outputs: ControllerOutputs) -> BufferRequests:
    """Map the controller's outputs onto the buffering component's inputs."""
    return BufferRequests(
        enable=outputs.buffer_enable,
        image_load_req=outputs.image_load_req,
        load_addr=outputs.req_addr if outputs.image_load_req else 0,
        write_req=outputs.write_req,
        write_addr=outputs.req_addr if outputs.write_req else 0,
        write_data=outputs.write_data,
        image_read_addr=outputs.image_read_addr,
    )


class BufferingComponent(ABC):
    """Cycle-level behaviour of a buffering component."""

    @abstractmethod
    def status(self) -> BufferStatus:
        """Outputs for the current cycle (stable until clock())."""

    @abstractmethod
    def clock(self, requests: BufferRequests) -> None:
        """Sample `requests` and advance one rising edge."""
