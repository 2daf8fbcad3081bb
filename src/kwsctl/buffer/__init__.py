"""
Buffering component contract and test doubles.

- BufferingComponent: Cycle-level contract consumed by the controller
- BufferRequests / BufferStatus: Signal bundles in each direction
- ScriptedBuffer: Deterministic double with scripted handshake timing
"""

from .interface import (
    BufferingComponent,
    BufferRequests,
    BufferStatus,
    ProtocolError,
    requests_from,
)
from .scripted import ScriptedBuffer

__all__ = [
    "BufferingComponent",
    "BufferRequests",
    "BufferStatus",
    "ProtocolError",
    "ScriptedBuffer",
    "requests_from",
]
