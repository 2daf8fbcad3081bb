"""
Unit tests for the ScriptedBuffer test double.

These tests verify:
1. Scripted ready/full timing
2. Automatic full after a complete burst
3. Registered (one-cycle) read ports
4. Write-through and write_done pulses
5. Protocol violation detection
"""

import pytest

from kwsctl.buffer import BufferRequests, ProtocolError, ScriptedBuffer
from kwsctl.config import ClassifierConfig


def idle(**kwargs) -> BufferRequests:
    return BufferRequests(enable=True, **kwargs)


class TestScriptedBuffer:
    """Test suite for ScriptedBuffer."""

    @pytest.fixture
    def config(self):
        return ClassifierConfig()

    def test_ready_at(self, config):
        """Test that ready rises on the scripted cycle and stays high."""
        buf = ScriptedBuffer(config, ready_at=2)
        seen = []
        for _ in range(4):
            seen.append(buf.status().ready)
            buf.clock(idle())
        assert seen == [False, False, True, True]

    def test_never_ready(self, config):
        """Test that ready_at=None never raises ready."""
        buf = ScriptedBuffer(config, ready_at=None)
        for _ in range(10):
            assert not buf.status().ready
            buf.clock(idle())

    def test_full_at(self, config):
        """Test scripted full timing."""
        buf = ScriptedBuffer(config, full_at=1)
        assert not buf.status().full
        buf.clock(idle())
        assert buf.status().full

    def test_auto_full_after_burst(self, config):
        """Test that full rises the cycle after the last load of a burst."""
        buf = ScriptedBuffer(config, memory={i: 0x100 + i for i in range(6)})
        for addr in range(6):
            assert not buf.status().full
            buf.clock(idle(image_load_req=True, load_addr=addr))
        assert buf.status().full
        assert [a for _, a in buf.load_requests] == [0, 1, 2, 3, 4, 5]
        assert list(buf.image[:6]) == [0x100 + i for i in range(6)]

    def test_auto_full_drops_on_next_burst(self, config):
        """Test that the first load of a new burst clears full."""
        buf = ScriptedBuffer(config)
        for addr in range(6):
            buf.clock(idle(image_load_req=True, load_addr=addr))
        assert buf.status().full
        buf.clock(idle(image_load_req=True, load_addr=0))
        assert not buf.status().full

    def test_abandoned_burst_restarts_count(self, config):
        """Test that offset 0 starts a new burst after a partial one."""
        buf = ScriptedBuffer(config)
        for addr in range(3):
            buf.clock(idle(image_load_req=True, load_addr=addr))
        for addr in range(6):
            assert not buf.status().full
            buf.clock(idle(image_load_req=True, load_addr=addr))
        assert buf.status().full

    def test_stall_full(self, config):
        """Test that stall_full overrides everything."""
        buf = ScriptedBuffer(config, full_at=0, stall_full=True)
        for addr in range(6):
            buf.clock(idle(image_load_req=True, load_addr=addr))
        assert not buf.status().full

    def test_registered_read(self, config):
        """Test that read data follows the address by one cycle."""
        buf = ScriptedBuffer(config, image=[10, 11, 12], filters=[20, 21], params=[30])
        buf.clock(idle(image_read_addr=2, filter_read_addr=1, config_read_addr=0))
        status = buf.status()
        assert status.image_read_data == 12
        assert status.filter_read_data == 21
        assert status.config_read_data == 30

        buf.clock(idle(image_read_addr=0))
        assert buf.status().image_read_data == 10

    def test_write_through_and_done(self, config):
        """Test that writes land in memory and write_done pulses after the delay."""
        buf = ScriptedBuffer(config, write_ack_delay=2)
        buf.clock(idle(write_req=True, write_addr=30, write_data=0x1234))
        assert buf.memory[30] == 0x1234
        assert buf.write_requests == [(0, 30, 0x1234)]

        done = []
        for _ in range(3):
            done.append(buf.status().write_done)
            buf.clock(idle())
        assert done == [False, True, False]

    def test_filter_load(self, config):
        """Test that filter loads stage into the filter buffer."""
        buf = ScriptedBuffer(config, memory={7: 77})
        buf.clock(idle(filter_load_req=True, load_addr=7))
        assert buf.filters[7] == 77
        assert buf.filter_requests == [(0, 7)]

    @pytest.mark.parametrize(
        "requests, message",
        [
            (idle(image_load_req=True, write_req=True), "load and write"),
            (idle(image_load_req=True, filter_load_req=True), "image and filter"),
            (BufferRequests(enable=False, write_req=True), "while disabled"),
        ],
    )
    def test_protocol_violations(self, config, requests, message):
        """Test that contract violations are reported."""
        buf = ScriptedBuffer(config)
        with pytest.raises(ProtocolError, match=message):
            buf.clock(requests)

    def test_load_before_ready(self, config):
        """Test that a load before ready is a protocol violation."""
        buf = ScriptedBuffer(config, ready_at=5)
        with pytest.raises(ProtocolError, match="before ready"):
            buf.clock(idle(image_load_req=True, load_addr=0))


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
