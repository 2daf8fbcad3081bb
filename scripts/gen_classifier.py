#!/usr/bin/env python3
"""Generate ClassifierController Verilog from kwsctl."""

import argparse
import sys
from pathlib import Path

# Add src to path if running from scripts/
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root / "src"))

from amaranth.back import verilog  # noqa: E402

from kwsctl.config import ClassifierConfig, WriteCadence  # noqa: E402
from kwsctl.controller.classifier import ClassifierController  # noqa: E402


def main():
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--ack-gated",
        action="store_true",
        help="Pace write-back on write_done instead of one write per cycle",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=project_root / "gen" / "classifier_controller.v",
        help="Output Verilog file (default: gen/classifier_controller.v)",
    )
    args = parser.parse_args()

    cadence = WriteCadence.ACK_GATED if args.ack_gated else WriteCadence.FIXED_RATE
    config = ClassifierConfig(write_cadence=cadence)
    ctrl = ClassifierController(config)

    args.output.parent.mkdir(parents=True, exist_ok=True)
    with open(args.output, "w") as f:
        f.write(verilog.convert(ctrl, name="ClassifierController"))

    print(f"Generated {args.output} ({cadence.name})")


if __name__ == "__main__":
    main()
