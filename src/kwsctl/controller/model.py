"""
Cycle model of the ClassifierController.

The whole controller is a pure function of its registers and the inputs
sampled in one cycle:

    step(regs, inputs, config) -> (next_regs, outputs)

Outputs are combinational in the current registers and inputs; next_regs is
what the registers hold after the next rising edge. Nothing here keeps state
between calls, so a transition can be checked without simulating a clock.

The model is cycle-exact with controller/classifier.py: sim/runner.py drives
both through the same buffering component and compares the traces.

Read latency:
    The image buffer read port is registered. The word on image_read_data in
    cycle T belongs to the address presented in cycle T-1, which the model keeps
    in staged_addr. The write-back datapath deliberately consumes that word,
    so the write to target 30+k carries image[k] + 19.
"""

from dataclasses import dataclass, replace

from ..config import DEFAULT_CONFIG, ClassifierConfig, WriteCadence
from .state import ControllerState


class InvalidStateError(RuntimeError):
    """The state register holds an encoding outside ControllerState."""

    def __init__(self, state: int):
        super().__init__(f"controller state register holds invalid encoding {state}")
        self.state = state


@dataclass(frozen=True)
class ControllerRegs:
    """Register contents of the controller; the default is the reset value."""

    state: int = ControllerState.IDLE
    counter: int = 0
    staged_addr: int = 0
    """Image read address presented in the previous cycle."""
    write_pending: bool = False
    """A write is outstanding (ACK_GATED cadence only)."""
    write_acked: bool = False
    """write_done arrived for the outstanding write (ACK_GATED cadence only)."""


@dataclass(frozen=True)
class ControllerInputs:
    """Inputs sampled by the controller in one cycle."""

    enable: bool = True
    reset: bool = False
    ready: bool = False
    full: bool = False
    write_done: bool = False
    image_read_data: int = 0


@dataclass(frozen=True)
class ControllerOutputs:
    """Outputs driven by the controller in one cycle; defaults are inactive."""

    buffer_enable: bool = False
    image_load_req: bool = False
    write_req: bool = False
    req_addr: int = 0
    write_data: int = 0
    image_read_addr: int = 0
    wakeword_detected: bool = False
    staged_addr: int = 0


def step(
    regs: ControllerRegs,
    inputs: ControllerInputs,
    config: ClassifierConfig = DEFAULT_CONFIG,
) -> tuple[ControllerRegs, ControllerOutputs]:
    """
    Evaluate one clock cycle.

    Args:
        regs: Current register contents
        inputs: Values on the input ports this cycle
        config: Controller configuration

    Returns:
        (next_regs, outputs) - registers after the clock edge, outputs this cycle

    Raises:
        InvalidStateError: regs.state is not a ControllerState and reset is low
    """
    cfg = config
    counter = regs.counter
    addr_mask = (1 << cfg.mem_addr_bits) - 1
    cursor_mask = (1 << cfg.buf_addr_bits) - 1

    # Default outputs
    out = {
        "buffer_enable": inputs.enable,
        "image_load_req": False,
        "write_req": False,
        "req_addr": 0,
        "write_data": 0,
        # While disabled, re-present the staged address so the read data stays put
        "image_read_addr": 0 if inputs.enable else regs.staged_addr,
        "wakeword_detected": False,
        "staged_addr": regs.staged_addr,
    }
    nxt = {}

    try:
        state = ControllerState(regs.state)
    except ValueError:
        if inputs.reset:
            return ControllerRegs(), ControllerOutputs(**out)
        raise InvalidStateError(regs.state) from None

    # write_done is latched even while disabled
    if inputs.write_done and regs.write_pending:
        nxt["write_acked"] = True

    if not inputs.enable:
        # Hold: registers other than the write_done latch keep their values
        pass

    elif state == ControllerState.IDLE:
        nxt.update(
            state=ControllerState.AWAIT_READY, counter=0, write_pending=False, write_acked=False
        )

    elif state == ControllerState.AWAIT_READY:
        if inputs.ready:
            nxt["state"] = ControllerState.LOAD_BURST

    elif state == ControllerState.LOAD_BURST:
        if counter <= cfg.burst_limit:
            out.update(image_load_req=True, req_addr=counter)
            nxt["counter"] = (counter + 1) & addr_mask
        else:
            nxt["state"] = ControllerState.AWAIT_BUFFER_FULL

    elif state == ControllerState.AWAIT_BUFFER_FULL:
        if inputs.full:
            # Cursor 0 is presented this cycle by default
            nxt.update(state=ControllerState.WRITE_BACK, counter=1)

    elif state == ControllerState.WRITE_BACK:
        if counter <= cfg.write_limit:
            out["image_read_addr"] = counter & cursor_mask
            write = {
                "write_req": True,
                "req_addr": cfg.write_target(counter),
                "write_data": (inputs.image_read_data + cfg.transform_constant) & cfg.data_mask,
            }
            if cfg.write_cadence == WriteCadence.FIXED_RATE:
                out.update(write)
                nxt["counter"] = (counter + 1) & addr_mask
            elif not regs.write_pending:
                out.update(write)
                nxt["write_pending"] = True
            elif inputs.write_done or regs.write_acked:
                nxt.update(
                    write_pending=False,
                    write_acked=False,
                    counter=(counter + 1) & addr_mask,
                )
        else:
            nxt["state"] = ControllerState.DONE

    elif state == ControllerState.DONE:
        out["wakeword_detected"] = True
        nxt["state"] = ControllerState.IDLE

    if inputs.enable:
        nxt["staged_addr"] = out["image_read_addr"]

    outputs = ControllerOutputs(**out)
    if inputs.reset:
        return ControllerRegs(), outputs
    return replace(regs, **nxt), outputs
