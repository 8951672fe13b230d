"""CHIP-8 machine assembly and the driver-facing step/tick surface."""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional

from pychip8.bus import Memory, MemoryAccessError
from pychip8.cpu import CHIP8, CPUError, StepResult, Timers
from pychip8.io import Keypad
from pychip8.loader import ProgramImage, ProgramLoadError, Variant, load_program, load_program_from_path
from pychip8.utils import debug_enabled, debug_log
from pychip8.video import FrameBuffer

BuzzerCallback = Callable[[bool], None]

DEFAULT_STEPS_PER_TICK = 10


@dataclass
class MachineConfig:
    """Runtime configuration for the CHIP-8 machine."""

    variant: Variant = Variant.STANDARD
    strict_decode: bool = True
    strict_sys: bool = False
    steps_per_tick: int = DEFAULT_STEPS_PER_TICK
    rng_seed: Optional[int] = None
    buzzer: Optional[BuzzerCallback] = None
    keypad: Keypad | None = None

    def __post_init__(self) -> None:
        if self.steps_per_tick <= 0:
            raise ValueError("steps_per_tick must be positive")


@dataclass(frozen=True)
class StepOutcome:
    """Result of a driver-level step; ``fault`` is set once the core halts."""

    result: StepResult
    fault: Exception | None = None

    @property
    def halted(self) -> bool:
        return self.result is StepResult.HALTED


@dataclass
class Machine:
    """Aggregates the core components of the CHIP-8 and drives them."""

    config: MachineConfig
    memory: Memory
    cpu: CHIP8
    framebuffer: FrameBuffer
    keypad: Keypad
    timers: Timers
    program: ProgramImage | None = None
    _program_data: bytes | None = field(default=None, repr=False)
    _buzzer_on: bool = False

    @property
    def halted(self) -> bool:
        return self.cpu.halted

    @property
    def fault(self) -> Exception | None:
        return self.cpu.fault

    @property
    def awaiting_key(self) -> bool:
        return self.cpu.waiting_for_key is not None

    def load_program(self, data: bytes, variant: Variant | None = None, *, name: str = "") -> ProgramImage:
        """Re-initialize the core for ``variant`` and copy ``data`` into memory.

        A program that does not fit raises ``ProgramLoadError`` and leaves the
        core halted so that no instruction is executed.
        """

        return self._install(lambda memory, target: load_program(data, memory, target, name=name), variant)

    def load_program_from_path(self, path: Path, variant: Variant | None = None) -> ProgramImage:
        """Like :meth:`load_program` but reads the image from ``path``."""

        return self._install(lambda memory, target: load_program_from_path(path, memory, target), variant)

    def _install(self, loader: Callable[[Memory, Variant], ProgramImage], variant: Variant | None) -> ProgramImage:
        variant = variant or self.config.variant
        self.memory.clear()
        self.cpu.initialize(variant.offset)
        self._set_buzzer(False)
        try:
            image = loader(self.memory, variant)
        except ProgramLoadError as exc:
            self.program = None
            self._program_data = None
            self.cpu.halted = True
            self.cpu.fault = exc
            raise
        self.program = image
        self._program_data = self.memory.read_block(image.start, image.size)
        return image

    def reset(self) -> None:
        """Return to power-on state, reloading the current program if any."""

        if self.program is not None and self._program_data is not None:
            self.load_program(self._program_data, self.program.variant, name=self.program.name)
            return
        self.memory.clear()
        self.cpu.initialize(self.config.variant.offset)
        self._set_buzzer(False)

    def step(self) -> StepOutcome:
        """Execute exactly one instruction; guest faults become a HALTED outcome."""

        try:
            result = self.cpu.step()
        except (CPUError, MemoryAccessError) as exc:
            if debug_enabled("cpu"):
                debug_log("cpu", "halted pc=%03x fault=%s", self.cpu.state.pc, exc)
            return StepOutcome(StepResult.HALTED, exc)
        if result is StepResult.HALTED:
            return StepOutcome(result, self.cpu.fault)
        return StepOutcome(result)

    def tick_timers(self) -> bool:
        """Advance both timers by one 60 Hz tick and return the buzzer edge."""

        self._set_buzzer(self.timers.sound_active)
        return self.timers.tick()

    def run_frame(self, steps: int | None = None) -> StepOutcome:
        """Run up to ``steps`` instructions followed by one timer tick.

        Stepping stops early while the core waits for a key or once it halts;
        a halted core does not tick its timers.
        """

        count = self.config.steps_per_tick if steps is None else steps
        outcome = StepOutcome(StepResult.HALTED, self.fault) if self.halted else StepOutcome(StepResult.EXECUTED)
        for _ in range(count):
            outcome = self.step()
            if outcome.result in (StepResult.HALTED, StepResult.AWAITING_KEY):
                break
        if not outcome.halted:
            self.tick_timers()
        return outcome

    def display(self) -> bytes:
        return self.framebuffer.snapshot()

    def _set_buzzer(self, enabled: bool) -> None:
        if enabled == self._buzzer_on:
            return
        self._buzzer_on = enabled
        if debug_enabled("audio"):
            debug_log("audio", "buzzer enabled=%s", enabled)
        if self.config.buzzer is not None:
            self.config.buzzer(enabled)


def create_machine(config: MachineConfig | None = None) -> Machine:
    """Instantiate a CHIP-8 machine with the requested configuration."""

    config = config or MachineConfig()
    memory = Memory()
    framebuffer = FrameBuffer()
    keypad = config.keypad or Keypad()
    timers = Timers()

    cpu = CHIP8(
        memory,
        framebuffer,
        keypad,
        timers=timers,
        strict_decode=config.strict_decode,
        strict_sys=config.strict_sys,
        rng=random.Random(config.rng_seed),
    )
    cpu.initialize(config.variant.offset)

    return Machine(
        config=config,
        memory=memory,
        cpu=cpu,
        framebuffer=framebuffer,
        keypad=keypad,
        timers=timers,
    )
