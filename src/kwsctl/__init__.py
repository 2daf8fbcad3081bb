"""
Kwsctl - Amaranth RTL and cycle model of a keyword-spotting classifier controller.

This package provides the Classifier Controller state machine as synthesizable
Amaranth HDL, a pure-Python cycle model of the same machine, and the test
doubles and simulation harness used to check one against the other.
"""

from .config import ClassifierConfig, WriteCadence

__version__ = "0.1.0"
__all__ = ["ClassifierConfig", "WriteCadence", "__version__"]
