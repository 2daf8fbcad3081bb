"""
Unit tests for ClassifierConfig.

These tests verify:
1. Protocol constants and derived addresses
2. Validation of out-of-range parameters
3. Pre-defined configurations
"""

import pytest

from kwsctl.config import ACK_GATED_CONFIG, DEFAULT_CONFIG, ClassifierConfig, WriteCadence


class TestClassifierConfig:
    """Test suite for ClassifierConfig."""

    def test_defaults(self):
        """Test the fixed protocol constants."""
        cfg = ClassifierConfig()
        assert cfg.burst_limit == 5
        assert cfg.write_limit == 6
        assert cfg.write_offset == 30
        assert cfg.transform_constant == 19
        assert cfg.data_bits == 16
        assert cfg.buf_addr_bits == 9
        assert cfg.mem_addr_bits == 25
        assert cfg.write_cadence == WriteCadence.FIXED_RATE

    def test_derived_properties(self):
        """Test burst/write counts and address lists."""
        cfg = ClassifierConfig()
        assert cfg.burst_length == 6
        assert cfg.write_count == 6
        assert cfg.buffer_depth == 512
        assert cfg.data_mask == 0xFFFF
        assert cfg.load_addresses == [0, 1, 2, 3, 4, 5]
        assert cfg.write_addresses == [30, 31, 32, 33, 34, 35]

    def test_write_target(self):
        """Test counter-to-address mapping of write-back."""
        cfg = ClassifierConfig(write_offset=100)
        assert cfg.write_target(1) == 100
        assert cfg.write_target(6) == 105

    def test_custom_limits(self):
        """Test that limits resize the bursts."""
        cfg = ClassifierConfig(burst_limit=2, write_limit=3)
        assert cfg.load_addresses == [0, 1, 2]
        assert cfg.write_addresses == [30, 31, 32]

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"data_bits": 0},
            {"buf_addr_bits": 0},
            {"mem_addr_bits": 8},
            {"burst_limit": -1},
            {"write_limit": 0},
            {"write_offset": 0},
            {"burst_limit": 512},
            {"transform_constant": 0x10000},
            {"mem_addr_bits": 9, "write_offset": 510},
        ],
    )
    def test_invalid_parameters(self, kwargs):
        """Test that invalid parameters are rejected."""
        with pytest.raises(AssertionError):
            ClassifierConfig(**kwargs)

    def test_presets(self):
        """Test the pre-defined configurations."""
        assert DEFAULT_CONFIG.write_cadence == WriteCadence.FIXED_RATE
        assert ACK_GATED_CONFIG.write_cadence == WriteCadence.ACK_GATED
        assert ACK_GATED_CONFIG.write_addresses == DEFAULT_CONFIG.write_addresses


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
