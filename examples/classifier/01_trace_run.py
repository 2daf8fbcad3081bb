#!/usr/bin/env python3
"""
Classifier Controller Trace.

Runs one classification against a scripted buffering component and prints a
cycle-by-cycle table of the controller's state, requests and completion pulse.

Usage:
    python examples/classifier/01_trace_run.py
    python examples/classifier/01_trace_run.py --ready-at 3 --full-at 14
    python examples/classifier/01_trace_run.py --rtl --ack-gated --ack-delay 2
    python examples/classifier/01_trace_run.py --timeline trace.json --timeline-format chrome
"""

import argparse
import logging
import sys
from pathlib import Path

# Add src to path for development
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from kwsctl.buffer import ScriptedBuffer  # noqa: E402
from kwsctl.config import ClassifierConfig, WriteCadence  # noqa: E402
from kwsctl.sim import (  # noqa: E402
    ModelSimulator,
    SimulationTimeout,
    TimelineWriter,
    completion_cycles,
    run_rtl,
)


def format_record(r) -> str:
    state = getattr(r.state, "name", f"<{r.state}>")
    flags = "".join(
        [
            "R" if r.ready else ".",
            "F" if r.full else ".",
            "D" if r.write_done else ".",
        ]
    )
    if r.image_load_req:
        action = f"LOAD  addr={r.req_addr}"
    elif r.write_req:
        action = f"WRITE addr={r.req_addr} data=0x{r.write_data:04x} (word @{r.staged_addr})"
    elif r.wakeword_detected:
        action = "WAKEWORD"
    else:
        action = ""
    enable = " " if r.enable else "-"
    return f"{r.cycle:5d} {enable} {state:<18} {r.counter:3d}  {flags}  {action}"


def main():
    parser = argparse.ArgumentParser(description="Trace one classifier controller run")
    parser.add_argument("--ready-at", type=int, default=2, help="Cycle ready rises (default: 2)")
    parser.add_argument(
        "--full-at", type=int, default=None, help="Cycle full rises (default: after the burst)"
    )
    parser.add_argument("--ack-gated", action="store_true", help="Use ACK_GATED write cadence")
    parser.add_argument("--ack-delay", type=int, default=1, help="write_done delay in cycles")
    parser.add_argument("--rtl", action="store_true", help="Simulate the Amaranth RTL")
    parser.add_argument("--max-cycles", type=int, default=100, help="Cycle budget")
    parser.add_argument("--timeline", type=str, default=None, help="Write a timeline file")
    parser.add_argument(
        "--timeline-format", choices=TimelineWriter.FORMATS, default="csv", help="Timeline format"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    cadence = WriteCadence.ACK_GATED if args.ack_gated else WriteCadence.FIXED_RATE
    config = ClassifierConfig(write_cadence=cadence)
    buffer = ScriptedBuffer(
        config,
        ready_at=args.ready_at,
        full_at=args.full_at,
        write_ack_delay=args.ack_delay,
        memory={i: 0x100 * (i + 1) for i in range(config.burst_length)},
    )

    if args.rtl:
        trace = run_rtl(config, buffer, args.max_cycles)
        pulses = completion_cycles(trace)
        if pulses:
            trace = trace[: pulses[0] + 1]
    else:
        try:
            trace = ModelSimulator(config, buffer).run_until_done(args.max_cycles)
        except SimulationTimeout as e:
            print(f"Error: {e}")
            return 1

    print("cycle   state              ctr  RFD  action")
    print("-" * 72)
    for record in trace:
        print(format_record(record))

    print()
    print(f"Backing memory after write-back ({cadence.name}):")
    for addr in config.write_addresses:
        print(f"  [{addr}] = 0x{buffer.memory.get(addr, 0):04x}")

    if args.timeline:
        TimelineWriter(args.timeline_format).write(trace, args.timeline)
        print(f"Timeline written to {args.timeline} ({args.timeline_format})")

    return 0


if __name__ == "__main__":
    sys.exit(main())
