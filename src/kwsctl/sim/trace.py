"""
Timeline export for controller traces.

Supports two output formats:
- csv: One row per cycle, for spreadsheet analysis
- chrome: Chrome Trace format (JSON) for chrome://tracing or Perfetto

In the Chrome Trace, each run of cycles in one state becomes a complete
event on thread 0, and every load, write and completion pulse becomes an
instant event on thread 1. One cycle is displayed as one microsecond.
"""

import json
from dataclasses import fields

from .runner import CycleRecord

CSV_COLUMNS = [f.name for f in fields(CycleRecord)]


class TimelineWriter:
    """
    Write a list of CycleRecords as a timeline file.

    Example:
        >>> TimelineWriter("chrome").write(trace, "trace.json")
    """

    FORMATS = ("csv", "chrome")

    def __init__(self, fmt: str = "csv"):
        if fmt not in self.FORMATS:
            raise ValueError(f"unknown timeline format {fmt!r}, expected one of {self.FORMATS}")
        self.format = fmt

    def write(self, records: list[CycleRecord], filename: str) -> None:
        """Write `records` to `filename` in the configured format."""
        if self.format == "csv":
            self._write_csv(records, filename)
        else:
            with open(filename, "w") as f:
                json.dump({"traceEvents": self.chrome_events(records)}, f, indent=1)

    def _write_csv(self, records: list[CycleRecord], filename: str) -> None:
        with open(filename, "w") as f:
            f.write(",".join(CSV_COLUMNS) + "\n")
            for record in records:
                f.write(",".join(_csv_value(getattr(record, c)) for c in CSV_COLUMNS) + "\n")

    @staticmethod
    def chrome_events(records: list[CycleRecord]) -> list[dict]:
        """Chrome Trace events for `records`."""
        events: list[dict] = []

        # State spans
        span_start = 0
        for i, record in enumerate(records):
            last = i == len(records) - 1
            if last or records[i + 1].state != record.state:
                first = records[span_start]
                events.append(
                    {
                        "name": _state_name(record.state),
                        "cat": "state",
                        "ph": "X",  # Complete event (has duration)
                        "ts": float(first.cycle),
                        "dur": float(record.cycle - first.cycle + 1),
                        "pid": 0,
                        "tid": 0,
                        "args": {"start_cycle": first.cycle, "end_cycle": record.cycle},
                    }
                )
                span_start = i + 1

        # Requests and pulses
        for record in records:
            if record.image_load_req:
                events.append(_instant("LOAD", "memory", record, addr=record.req_addr))
            if record.write_req:
                events.append(
                    _instant(
                        "WRITE", "memory", record, addr=record.req_addr, data=record.write_data
                    )
                )
            if record.wakeword_detected:
                events.append(_instant("WAKEWORD", "status", record))

        return events


def _instant(name: str, category: str, record: CycleRecord, **args) -> dict:
    return {
        "name": name,
        "cat": category,
        "ph": "i",  # Instant event
        "ts": float(record.cycle),
        "s": "t",  # Scope: thread
        "pid": 0,
        "tid": 1,
        "args": {"cycle": record.cycle, **args},
    }


def _state_name(state) -> str:
    return getattr(state, "name", f"INVALID_{state}")


def _csv_value(value) -> str:
    if isinstance(value, bool):
        return str(int(value))
    if hasattr(value, "name"):
        return value.name
    return str(value)
