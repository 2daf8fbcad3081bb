"""
Simulation harness for the classifier controller.

Two engines produce the same per-cycle trace against a BufferingComponent:

- ModelSimulator: steps the pure cycle model (controller/model.py)
- run_rtl(): runs ClassifierController in the Amaranth simulator

Both sample the buffering component's status, evaluate one controller cycle,
record a CycleRecord, then clock the buffering component with the
controller's requests. Identical traces from both engines mean the RTL and the
model agree cycle for cycle.

Schedules:
    enable/reset arguments accept a bool (constant), a sequence of bools
    (indexed by cycle) or a callable cycle -> bool.
"""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from amaranth import ResetInserter, Signal
from amaranth.sim import Simulator

from ..buffer import BufferingComponent, ScriptedBuffer, requests_from
from ..config import DEFAULT_CONFIG, ClassifierConfig
from ..controller.classifier import ClassifierController
from ..controller.model import ControllerInputs, ControllerOutputs, ControllerRegs, step
from ..controller.state import ControllerState

logger = logging.getLogger(__name__)

Schedule = bool | Sequence[bool] | Callable[[int], bool]


class SimulationTimeout(RuntimeError):
    """The controller did not complete a run within the cycle budget."""

    def __init__(self, state: ControllerState | int, cycles: int):
        super().__init__(
            f"no completion pulse after {cycles} cycles, stalled in {_state_name(state)}"
        )
        self.state = state
        self.cycles = cycles


@dataclass(frozen=True)
class CycleRecord:
    """Registers, inputs and outputs of the controller in one cycle."""

    cycle: int
    state: ControllerState | int
    counter: int
    staged_addr: int
    # Inputs
    enable: bool
    reset: bool
    ready: bool
    full: bool
    write_done: bool
    image_read_data: int
    # Outputs
    buffer_enable: bool
    image_load_req: bool
    write_req: bool
    req_addr: int
    write_data: int
    image_read_addr: int
    wakeword_detected: bool

    @classmethod
    def capture(
        cls,
        cycle: int,
        state: int,
        counter: int,
        inputs: ControllerInputs,
        outputs: ControllerOutputs,
    ) -> "CycleRecord":
        """Build a record, normalizing HDL integers to bools and states."""
        try:
            state = ControllerState(state)
        except ValueError:
            state = int(state)
        return cls(
            cycle=cycle,
            state=state,
            counter=int(counter),
            staged_addr=int(outputs.staged_addr),
            enable=bool(inputs.enable),
            reset=bool(inputs.reset),
            ready=bool(inputs.ready),
            full=bool(inputs.full),
            write_done=bool(inputs.write_done),
            image_read_data=int(inputs.image_read_data),
            buffer_enable=bool(outputs.buffer_enable),
            image_load_req=bool(outputs.image_load_req),
            write_req=bool(outputs.write_req),
            req_addr=int(outputs.req_addr),
            write_data=int(outputs.write_data),
            image_read_addr=int(outputs.image_read_addr),
            wakeword_detected=bool(outputs.wakeword_detected),
        )


def _state_name(state: int) -> str:
    try:
        return ControllerState(state).name
    except ValueError:
        return f"<invalid {state}>"


def _at(schedule: Schedule, cycle: int) -> bool:
    if callable(schedule):
        return bool(schedule(cycle))
    if isinstance(schedule, bool | int):
        return bool(schedule)
    return bool(schedule[cycle])


# =============================================================================
# Trace Queries
# =============================================================================


def load_addresses(records: list[CycleRecord]) -> list[int]:
    """Addresses of every image-load request, in issue order."""
    return [r.req_addr for r in records if r.image_load_req]


def write_requests(records: list[CycleRecord]) -> list[tuple[int, int]]:
    """(address, data) of every write request, in issue order."""
    return [(r.req_addr, r.write_data) for r in records if r.write_req]


def completion_cycles(records: list[CycleRecord]) -> list[int]:
    """Cycles in which wakeword_detected was high."""
    return [r.cycle for r in records if r.wakeword_detected]


# =============================================================================
# Cycle Model Engine
# =============================================================================


class ModelSimulator:
    """
    Drives the cycle model against a buffering component.

    Example:
        >>> sim = ModelSimulator(buffer=ScriptedBuffer(ready_at=3))
        >>> trace = sim.run_until_done()
        >>> load_addresses(trace)
        [0, 1, 2, 3, 4, 5]
    """

    def __init__(
        self,
        config: ClassifierConfig = DEFAULT_CONFIG,
        buffer: BufferingComponent | None = None,
        regs: ControllerRegs | None = None,
    ):
        self.config = config
        self.buffer = buffer if buffer is not None else ScriptedBuffer(config)
        self.regs = regs if regs is not None else ControllerRegs()
        self.cycle = 0
        self.records: list[CycleRecord] = []

    @property
    def state(self) -> ControllerState | int:
        """Current state, exposed so stalls are observable."""
        try:
            return ControllerState(self.regs.state)
        except ValueError:
            return self.regs.state

    def tick(self, enable: bool = True, reset: bool = False) -> CycleRecord:
        """Evaluate one cycle and commit the clock edge."""
        status = self.buffer.status()
        inputs = ControllerInputs(
            enable=enable,
            reset=reset,
            ready=status.ready,
            full=status.full,
            write_done=status.write_done,
            image_read_data=status.image_read_data,
        )
        next_regs, outputs = step(self.regs, inputs, self.config)

        record = CycleRecord.capture(
            self.cycle, self.regs.state, self.regs.counter, inputs, outputs
        )
        self.records.append(record)
        if outputs.wakeword_detected:
            logger.info("cycle %d: wakeword_detected", self.cycle)

        self.buffer.clock(requests_from(outputs))
        if next_regs.state != self.regs.state:
            logger.debug(
                "cycle %d: %s -> %s",
                self.cycle,
                _state_name(self.regs.state),
                _state_name(next_regs.state),
            )
        self.regs = next_regs
        self.cycle += 1
        return record

    def run(
        self, cycles: int, *, enable: Schedule = True, reset: Schedule = False
    ) -> list[CycleRecord]:
        """Run a fixed number of cycles; schedules are indexed by absolute cycle."""
        start = self.cycle
        for _ in range(cycles):
            self.tick(_at(enable, self.cycle), _at(reset, self.cycle))
        return self.records[start:]

    def run_until_done(
        self, max_cycles: int = 1000, *, enable: Schedule = True
    ) -> list[CycleRecord]:
        """
        Run until the completion pulse, including the pulse cycle.

        Raises:
            SimulationTimeout: No pulse within max_cycles (the controller is
                stalled on a flag the buffering component never raised)
        """
        start = self.cycle
        for _ in range(max_cycles):
            record = self.tick(_at(enable, self.cycle))
            if record.wakeword_detected:
                return self.records[start:]
        logger.warning(
            "no completion after %d cycles in %s", max_cycles, _state_name(self.regs.state)
        )
        raise SimulationTimeout(self.state, max_cycles)


# =============================================================================
# RTL Engine
# =============================================================================


def run_rtl(
    config: ClassifierConfig = DEFAULT_CONFIG,
    buffer: BufferingComponent | None = None,
    cycles: int = 64,
    *,
    enable: Schedule = True,
    reset: Schedule = False,
    vcd_file: str | None = None,
) -> list[CycleRecord]:
    """
    Run ClassifierController in the Amaranth simulator for `cycles` cycles.

    The testbench plays the buffering component: before each clock edge it
    drives the status of `buffer`, reads back the controller's settled
    outputs, and clocks `buffer` with them.

    Args:
        config: Controller configuration
        buffer: Buffering component double (default: ScriptedBuffer(config))
        cycles: Number of clock cycles to simulate
        enable: Enable schedule
        reset: Synchronous reset schedule
        vcd_file: Optional waveform output path

    Returns:
        One CycleRecord per simulated cycle
    """
    if buffer is None:
        buffer = ScriptedBuffer(config)

    dut = ClassifierController(config)
    rst = Signal()
    top = ResetInserter(rst)(dut)
    records: list[CycleRecord] = []

    async def testbench(ctx):
        for cycle in range(cycles):
            status = buffer.status()
            inputs = ControllerInputs(
                enable=_at(enable, cycle),
                reset=_at(reset, cycle),
                ready=status.ready,
                full=status.full,
                write_done=status.write_done,
                image_read_data=status.image_read_data,
            )
            ctx.set(rst, inputs.reset)
            ctx.set(dut.enable, inputs.enable)
            ctx.set(dut.ready, inputs.ready)
            ctx.set(dut.full, inputs.full)
            ctx.set(dut.write_done, inputs.write_done)
            ctx.set(dut.image_read_data, inputs.image_read_data)

            outputs = ControllerOutputs(
                buffer_enable=bool(ctx.get(dut.buffer_enable)),
                image_load_req=bool(ctx.get(dut.image_load_req)),
                write_req=bool(ctx.get(dut.write_req)),
                req_addr=ctx.get(dut.req_addr),
                write_data=ctx.get(dut.write_data),
                image_read_addr=ctx.get(dut.image_read_addr),
                wakeword_detected=bool(ctx.get(dut.wakeword_detected)),
                staged_addr=ctx.get(dut.staged_addr),
            )
            records.append(
                CycleRecord.capture(
                    cycle,
                    ctx.get(dut.state_debug),
                    ctx.get(dut.counter_debug),
                    inputs,
                    outputs,
                )
            )
            buffer.clock(requests_from(outputs))
            await ctx.tick()

    sim = Simulator(top)
    sim.add_clock(1e-6)
    sim.add_testbench(testbench)
    if vcd_file:
        with sim.write_vcd(vcd_file):
            sim.run()
    else:
        sim.run()
    return records
