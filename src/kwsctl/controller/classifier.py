"""
ClassifierController - Sequences the buffering component through one classification.

The ClassifierController drives a fixed protocol against the buffering
component:
1. Wait for the buffering component to report ready
2. Issue a burst of image-load requests (offsets 0..burst_limit)
3. Wait for the image buffer to report full
4. Read each staged word, add the transform constant, write it back
5. Pulse wakeword_detected for one cycle and start over

State Machine:
    IDLE -> AWAIT_READY -> LOAD_BURST -> AWAIT_BUFFER_FULL -> WRITE_BACK -> DONE -> IDLE

Data Flow:
    Backing memory --(load burst)--> Image buffer --(read port)--> ClassifierController
    ClassifierController --(write request)--> Backing memory

One counter register serves both phases: it is the load offset during
LOAD_BURST, then is reseeded to 1 and used as write target and read cursor
during WRITE_BACK. The image read port has one cycle of latency, so the word
written in a WRITE_BACK cycle is the one addressed in the previous cycle.
"""

from amaranth import Module, Signal
from amaranth.lib.wiring import Component, In, Out

from ..config import ClassifierConfig, WriteCadence
from .state import STATE_BITS, ControllerState


class ClassifierController(Component):
    """
    Classifier controller for the buffering component.

    Ports:
        Control:
            enable: Advance on the clock edge; while low, registers hold

        Buffering Component Status:
            ready: Configuration loaded, client requests are honored
            full: Image buffer holds the complete load burst
            write_done: Write request completed (ACK_GATED cadence only)
            image_read_data: Registered image buffer read data

        Buffering Component Requests:
            buffer_enable: Enable forwarded to the buffering component
            image_load_req: Image-load request valid
            write_req: Write request valid
            req_addr: Backing memory address of the current load or write
            write_data: Write data (staged word + transform constant)
            image_read_addr: Image buffer read cursor

        Status:
            wakeword_detected: Completion pulse, high for one cycle in DONE
            staged_addr: Read address whose word is on image_read_data
            state_debug: Current state encoding
            counter_debug: Current request counter
            fault: State register holds an encoding outside ControllerState
    """

    def __init__(self, config: ClassifierConfig):
        self.config = config

        super().__init__(
            {
                # Control
                "enable": In(1),
                # Buffering component status
                "ready": In(1),
                "full": In(1),
                "write_done": In(1),
                "image_read_data": In(config.data_bits),
                # Buffering component requests
                "buffer_enable": Out(1),
                "image_load_req": Out(1),
                "write_req": Out(1),
                "req_addr": Out(config.mem_addr_bits),
                "write_data": Out(config.data_bits),
                "image_read_addr": Out(config.buf_addr_bits),
                # Status
                "wakeword_detected": Out(1),
                "staged_addr": Out(config.buf_addr_bits),
                "state_debug": Out(STATE_BITS),
                "counter_debug": Out(config.mem_addr_bits),
                "fault": Out(1),
            }
        )

        # State register, kept on the instance so simulations can inject faults
        self.state = Signal(STATE_BITS, init=ControllerState.IDLE)

    def elaborate(self, _platform):
        m = Module()
        cfg = self.config

        state = self.state
        counter = Signal(cfg.mem_addr_bits)

        # Read address presented last cycle (its word is on image_read_data now)
        staged_addr = Signal(cfg.buf_addr_bits)

        # Outstanding write and its latched write_done (ACK_GATED cadence only)
        write_pending = Signal()
        write_acked = Signal()

        # Default outputs
        m.d.comb += [
            self.buffer_enable.eq(self.enable),
            self.image_load_req.eq(0),
            self.write_req.eq(0),
            self.req_addr.eq(0),
            self.write_data.eq(0),
            self.image_read_addr.eq(0),
            self.wakeword_detected.eq(0),
            self.staged_addr.eq(staged_addr),
            self.state_debug.eq(state),
            self.counter_debug.eq(counter),
            self.fault.eq(state > ControllerState.DONE),
        ]

        write_request = [
            self.write_req.eq(1),
            self.req_addr.eq(counter + (cfg.write_offset - 1)),
            self.write_data.eq(self.image_read_data + cfg.transform_constant),
        ]

        # write_done is latched even while disabled
        with m.If(self.write_done & write_pending):
            m.d.sync += write_acked.eq(1)

        with m.If(~self.enable):
            # Hold: keep the read port on the staged address
            m.d.comb += self.image_read_addr.eq(staged_addr)

        with m.Else():
            m.d.sync += staged_addr.eq(self.image_read_addr)

            with m.Switch(state):
                with m.Case(ControllerState.IDLE):
                    m.d.sync += [
                        state.eq(ControllerState.AWAIT_READY),
                        counter.eq(0),
                        write_pending.eq(0),
                        write_acked.eq(0),
                    ]

                with m.Case(ControllerState.AWAIT_READY):
                    with m.If(self.ready):
                        m.d.sync += state.eq(ControllerState.LOAD_BURST)

                with m.Case(ControllerState.LOAD_BURST):
                    with m.If(counter <= cfg.burst_limit):
                        m.d.comb += [
                            self.image_load_req.eq(1),
                            self.req_addr.eq(counter),
                        ]
                        m.d.sync += counter.eq(counter + 1)
                    with m.Else():
                        m.d.sync += state.eq(ControllerState.AWAIT_BUFFER_FULL)

                with m.Case(ControllerState.AWAIT_BUFFER_FULL):
                    with m.If(self.full):
                        # Read cursor 0 is the default this cycle
                        m.d.sync += [
                            counter.eq(1),
                            state.eq(ControllerState.WRITE_BACK),
                        ]

                with m.Case(ControllerState.WRITE_BACK):
                    with m.If(counter <= cfg.write_limit):
                        m.d.comb += self.image_read_addr.eq(counter[: cfg.buf_addr_bits])

                        if cfg.write_cadence == WriteCadence.FIXED_RATE:
                            m.d.comb += write_request
                            m.d.sync += counter.eq(counter + 1)
                        else:
                            with m.If(~write_pending):
                                m.d.comb += write_request
                                m.d.sync += write_pending.eq(1)
                            with m.Elif(self.write_done | write_acked):
                                m.d.sync += [
                                    write_pending.eq(0),
                                    write_acked.eq(0),
                                    counter.eq(counter + 1),
                                ]
                    with m.Else():
                        m.d.sync += state.eq(ControllerState.DONE)

                with m.Case(ControllerState.DONE):
                    m.d.comb += self.wakeword_detected.eq(1)
                    m.d.sync += state.eq(ControllerState.IDLE)

                with m.Default():
                    # Unreachable encodings hold until reset; fault flags them
                    pass

        return m
