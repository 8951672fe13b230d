"""Pygame front end for the CHIP-8 emulator."""

from __future__ import annotations

import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from pychip8.audio import SquareWaveBeeper
from pychip8.bus import MemoryAccessError
from pychip8.cpu import TIMER_HZ, StepResult
from pychip8.cpu.opcodes import disassemble
from pychip8.loader import ProgramLoadError, Variant
from pychip8.system import DEFAULT_STEPS_PER_TICK, Machine, MachineConfig, StepOutcome, create_machine
from pychip8.utils import TraceRecorder, debug_enabled, debug_log
from pychip8.video import DISPLAY_HEIGHT, DISPLAY_WIDTH, MONOCHROME, Renderer
from pychip8.video.palette import RGBColor


@dataclass
class AppConfig:
    """Configuration for the CHIP-8 emulator frontend."""

    rom_path: Optional[Path] = None
    variant: Variant = Variant.STANDARD
    scale: int = 10
    fullscreen: bool = False
    steps_per_tick: int = DEFAULT_STEPS_PER_TICK
    strict_decode: bool = True
    strict_sys: bool = False
    rng_seed: Optional[int] = None
    palette: Sequence[RGBColor] = MONOCHROME
    enable_audio: bool = True


class Chip8App:
    """Thin wrapper around the Pygame event loop."""

    def __init__(self, config: AppConfig) -> None:
        self._config = config
        self._running = False
        self._machine: Machine | None = None
        self._beeper: SquareWaveBeeper | None = None
        self._pygame = None
        self._perf_enabled = debug_enabled("perf")
        self._perf_last_check = 0.0
        self._perf_frames = 0
        self._frame_counter = 0
        self._trace_recorder: TraceRecorder | None = None
        if debug_enabled("trace"):
            self._trace_recorder = TraceRecorder(512)

    @property
    def machine(self) -> Machine | None:
        return self._machine

    def run(self) -> None:
        try:
            import pygame  # type: ignore
        except Exception as exc:  # pragma: no cover - optional dependency
            raise RuntimeError("pygame is required to run the UI") from exc

        if not self._config.rom_path:
            raise RuntimeError("ROM image is required; pass --rom <path>")

        machine = self._create_machine()
        self._load_program(machine, self._config.rom_path)
        self._machine = machine

        pygame.mixer.pre_init(44_100, -16, 1, 512)
        pygame.init()
        pygame.display.set_caption(f"CHIP-8 - {machine.program.name if machine.program else 'no program'}")
        self._pygame = pygame
        if self._config.enable_audio:
            self._initialise_audio(pygame)

        renderer = Renderer(self._config.palette)
        surface_size = (DISPLAY_WIDTH * self._config.scale, DISPLAY_HEIGHT * self._config.scale)
        flags = pygame.FULLSCREEN if self._config.fullscreen else 0
        screen = pygame.display.set_mode(surface_size, flags)

        clock = pygame.time.Clock()
        self._running = True
        self._perf_last_check = time.perf_counter()

        try:
            while self._running:
                for event in pygame.event.get():
                    if event.type == pygame.QUIT:
                        self._running = False
                    elif event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                        self._enter_debug_shell(machine)
                    elif event.type == pygame.KEYDOWN:
                        self._handle_key_event(pygame, event.key, pressed=True)
                    elif event.type == pygame.KEYUP:
                        self._handle_key_event(pygame, event.key, pressed=False)

                outcome = self._step_frame(machine)
                if outcome.halted:
                    self._running = False
                    raise RuntimeError(self._describe_fault(machine, outcome))

                if machine.framebuffer.dirty:
                    frame = renderer.render(machine.display(), scale=self._config.scale)
                    screen.blit(frame.to_surface(), (0, 0))
                    pygame.display.flip()
                    machine.framebuffer.dirty = False

                self._report_perf()
                clock.tick(_FRAME_RATE)
                self._frame_counter += 1
        finally:
            if self._beeper is not None:
                self._beeper.shutdown()
            pygame.quit()

    def run_headless(self, frames: int) -> Machine:
        """Run ``frames`` timer ticks without pygame and return the machine."""

        if not self._config.rom_path:
            raise RuntimeError("ROM image is required; pass --rom <path>")
        machine = self._create_machine()
        self._load_program(machine, self._config.rom_path)
        self._machine = machine
        for _ in range(frames):
            outcome = self._step_frame(machine)
            if outcome.halted:
                raise RuntimeError(self._describe_fault(machine, outcome))
        return machine

    def _initialise_audio(self, pygame) -> None:
        if pygame.mixer.get_init() is None:
            try:
                pygame.mixer.init(44_100, -16, 1)
            except pygame.error as exc:  # pragma: no cover - hardware dependent
                if debug_enabled("audio"):
                    debug_log("audio", "mixer_init_failed=%s", exc)
                return
        mixer_state = pygame.mixer.get_init()
        if mixer_state is None:
            if debug_enabled("audio"):
                debug_log("audio", "mixer_unavailable")
            return
        try:
            self._beeper = SquareWaveBeeper(sample_rate=mixer_state[0])
        except RuntimeError as exc:
            self._beeper = None
            if debug_enabled("audio"):
                debug_log("audio", "beeper_init_failed=%s", exc)

    def _handle_key_event(self, pygame, key_code: int, *, pressed: bool) -> None:
        if self._machine is None:
            return
        name = pygame.key.name(key_code)
        if debug_enabled("input"):
            debug_log("input", "event=%s pressed=%s", name, pressed)
        if pressed:
            self._machine.keypad.press(name)
        else:
            self._machine.keypad.release(name)

    def _handle_buzzer(self, enabled: bool) -> None:
        if self._beeper is not None:
            self._beeper.set_state(enabled)

    def _create_machine(self) -> Machine:
        return create_machine(
            MachineConfig(
                variant=self._config.variant,
                strict_decode=self._config.strict_decode,
                strict_sys=self._config.strict_sys,
                steps_per_tick=self._config.steps_per_tick,
                rng_seed=self._config.rng_seed,
                buzzer=self._handle_buzzer,
            )
        )

    def _load_program(self, machine: Machine, program_path: Path) -> None:
        try:
            machine.load_program_from_path(program_path, self._config.variant)
        except FileNotFoundError as exc:
            raise RuntimeError(f"Program file not found: {program_path}") from exc
        except ProgramLoadError as exc:
            raise RuntimeError(f"Failed to load program {program_path}: {exc}") from exc

    def _step_frame(self, machine: Machine) -> StepOutcome:
        trace = self._trace_recorder
        if trace is None:
            return machine.run_frame()

        outcome = StepOutcome(StepResult.EXECUTED)
        for _ in range(machine.config.steps_per_tick):
            cpu = machine.cpu
            state_before = cpu.state.clone()
            opcode = None
            mnemonic = ""
            if cpu.waiting_for_key is None and not cpu.halted:
                try:
                    opcode = machine.memory.load16(state_before.pc)
                    mnemonic = disassemble(opcode)
                except MemoryAccessError:
                    opcode = None
            outcome = machine.step()
            note = ""
            if outcome.result is StepResult.AWAITING_KEY:
                note = "key-wait"
            elif outcome.result is StepResult.SKIPPED:
                note = "skipped"
            elif outcome.halted:
                note = type(outcome.fault).__name__ if outcome.fault else "halted"
            trace.record_step(
                state_before,
                opcode,
                machine.timers,
                waiting=cpu.waiting_for_key is not None,
                halted=cpu.halted,
                mnemonic=mnemonic,
                note=note,
            )
            if outcome.result in (StepResult.HALTED, StepResult.AWAITING_KEY):
                break
        if outcome.halted:
            trace.dump("trace", limit=32)
        else:
            machine.tick_timers()
        return outcome

    def _report_perf(self) -> None:
        if not self._perf_enabled:
            return
        self._perf_frames += 1
        now = time.perf_counter()
        elapsed = now - self._perf_last_check
        if elapsed >= 1.0:
            debug_log("perf", "fps=%.1f frames=%d", self._perf_frames / elapsed, self._frame_counter)
            self._perf_frames = 0
            self._perf_last_check = now

    def _describe_fault(self, machine: Machine, outcome: StepOutcome) -> str:
        state = machine.cpu.state
        fault = outcome.fault
        kind = type(fault).__name__ if fault is not None else "fault"
        return f"CHIP-8 halted at pc={state.pc:03X} opcode={machine.cpu.current_opcode:04X}: {kind}: {fault}"

    # ------------------------------------------------------------------
    # Debug shell

    def _enter_debug_shell(self, machine: Machine) -> None:
        print("\n=== CHIP-8 Debug Menu ===")
        print("Enter command: [c]pu, [m]em, [d]isplay, [t]race, [r]eset, [q]uit, [Enter] resume")

        paused = True
        while paused and self._running:
            try:
                command = input("debug> ").strip().lower()
            except (EOFError, KeyboardInterrupt):
                print("Resuming emulator.")
                break

            if command == "" or command == "resume":
                paused = False
            elif command in {"c", "cpu"}:
                self._dump_cpu(machine)
            elif command in {"d", "display"}:
                self._dump_display(machine)
            elif command in {"t", "trace"}:
                self._dump_trace()
            elif command in {"r", "reset"}:
                machine.reset()
                print("Machine reset.")
            elif command.startswith("m"):
                spec = command[1:].strip()
                self._dump_memory(machine, spec if spec else None)
            elif command in {"q", "quit", "exit"}:
                print("Exiting emulator.")
                self._running = False
                paused = False
            else:
                print("Commands: [Enter]=resume, [c]pu, [m]em, [d]isplay, [t]race, [r]eset, [q]uit")

        if self._pygame is not None:
            self._pygame.event.clear()

    def _dump_cpu(self, machine: Machine) -> None:
        cpu = machine.cpu
        state = cpu.state
        print(
            "PC={:03X} I={:03X} SP={:X} DT={:02X} ST={:02X}".format(
                state.pc,
                state.i,
                state.sp,
                machine.timers.delay,
                machine.timers.sound,
            )
        )
        print(" ".join(f"V{index:X}={value:02X}" for index, value in enumerate(state.v)))
        if state.sp:
            print("Stack: " + " ".join(f"{address:03X}" for address in state.stack[: state.sp]))
        if cpu.waiting_for_key is not None:
            print(f"Waiting for key into V{cpu.waiting_for_key:X}")
        if self._beeper is not None and self._beeper.enabled:
            print("Buzzer: on")
        try:
            print(f"Next: {disassemble(machine.memory.load16(state.pc))}")
        except MemoryAccessError:
            print("Next: <out of range>")

    def _dump_display(self, machine: Machine) -> None:
        for line in machine.framebuffer.rows():
            print(line)

    def _dump_trace(self, limit: int = 64) -> None:
        if self._trace_recorder is None:
            print("Trace recorder is disabled. Set CHIP8_DEBUG=trace to enable it.")
            return
        lines = list(self._trace_recorder.format_entries(limit))
        if not lines:
            print("Trace buffer is empty.")
            return
        print("Last trace entries:")
        for line in lines:
            print(f"  {line}")

    def _dump_memory(self, machine: Machine, spec: str | None = None) -> None:
        def parse_value(text: str, default: int) -> int:
            text = text.strip()
            if not text:
                return default
            return int(text, 16)

        if spec:
            parts = spec.split()
            try:
                start = parse_value(parts[0], machine.cpu.state.pc)
                length = int(parts[1], 10) if len(parts) > 1 else 0x40
            except (ValueError, IndexError):
                print("Usage: m [start_hex] [length]")
                return
        else:
            start = machine.cpu.state.pc
            length = 0x40

        if length <= 0:
            print("Length must be positive.")
            return

        memory = machine.memory
        if not 0 <= start < memory.length:
            print(f"Address out of range: 000-{memory.get_end_address():03X}")
            return
        end = min(start + length, memory.length)
        for addr in range(start, end, 16):
            chunk = [memory.load8(addr + offset) for offset in range(16) if addr + offset < end]
            hex_part = " ".join(f"{value:02X}" for value in chunk)
            print(f"{addr:03X}: {hex_part}")


_FRAME_RATE = TIMER_HZ
