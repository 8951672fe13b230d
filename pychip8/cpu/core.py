"""Core CHIP-8 CPU implementation."""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Mapping

from pychip8.bus import ADDRESS_MASK, Memory, MemoryAccessError
from pychip8.io import Keypad
from pychip8.utils import debug_enabled, debug_log
from pychip8.video import FONT_DATA, FONT_START, FrameBuffer, glyph_address

from .opcodes import OPCODE_TABLE, DecodedOpcode, Instruction, decode, disassemble
from .timers import Timers


class CPUError(Exception):
    """Base error for faults raised by guest programs."""


class IllegalOpcodeError(CPUError):
    """Raised when the CPU encounters an opcode it cannot decode."""


class StackOverflowError(CPUError):
    """Raised by CALL when every stack slot is in use."""


class StackUnderflowError(CPUError):
    """Raised by RET when no subroutine call is active."""


REGISTER_COUNT = 16
STACK_DEPTH = 16
FLAG_REGISTER = 0xF
DEFAULT_LOAD_OFFSET = 0x200


class StepResult(Enum):
    """Outcome of a single :meth:`CHIP8.step` call."""

    EXECUTED = auto()
    SKIPPED = auto()
    AWAITING_KEY = auto()
    HALTED = auto()


@dataclass
class CPUState:
    """Snapshot of the CHIP-8 register file and call stack."""

    v: list[int] = field(default_factory=lambda: [0] * REGISTER_COUNT)
    i: int = 0x000
    pc: int = DEFAULT_LOAD_OFFSET
    sp: int = 0
    stack: list[int] = field(default_factory=lambda: [0] * STACK_DEPTH)

    def clone(self) -> "CPUState":
        return CPUState(list(self.v), self.i, self.pc, self.sp, list(self.stack))


@dataclass
class CHIP8:
    """The CHIP-8 virtual CPU.

    ``step`` executes exactly one instruction. Faults raise a ``CPUError``
    (or ``MemoryAccessError``) after restoring the program counter to the
    faulting instruction, and leave the CPU halted until ``initialize`` is
    called again.
    """

    memory: Memory
    framebuffer: FrameBuffer
    keypad: Keypad
    timers: Timers = field(default_factory=Timers)
    instruction_table: Mapping[int, Instruction] = field(default_factory=lambda: OPCODE_TABLE)
    strict_decode: bool = True
    strict_sys: bool = False
    rng: random.Random = field(default_factory=random.Random)

    state: CPUState = field(default_factory=CPUState)
    load_offset: int = DEFAULT_LOAD_OFFSET
    current_opcode: int = 0x0000
    instruction_count: int = 0
    skipped_count: int = 0
    waiting_for_key: int | None = None
    halted: bool = False
    fault: Exception | None = None

    def initialize(self, load_offset: int = DEFAULT_LOAD_OFFSET) -> None:
        """Reset registers, stack, timers and display and install the font."""

        self.state = CPUState(pc=load_offset)
        self.load_offset = load_offset
        self.timers.reset()
        self.framebuffer.clear()
        self.current_opcode = 0x0000
        self.instruction_count = 0
        self.skipped_count = 0
        self.waiting_for_key = None
        self.halted = False
        self.fault = None
        self.memory.load_image(FONT_START, FONT_DATA)

    def step(self) -> StepResult:
        """Fetch, decode and execute a single instruction."""

        if self.halted:
            return StepResult.HALTED

        if self.waiting_for_key is not None:
            return self._poll_key_wait()

        pc_before = self.state.pc
        try:
            opcode = self._fetch_word()
            self.current_opcode = opcode
            decoded = decode(opcode)
            if debug_enabled("cpu"):
                debug_log("cpu", "pc=%03x opcode=%04x %s", pc_before, opcode, disassemble(opcode, self.instruction_table))

            instruction = self.instruction_table.get(decoded.key)
            if instruction is None:
                if self.strict_decode:
                    raise IllegalOpcodeError(f"illegal opcode {opcode:#06x} at {pc_before:#05x}")
                self.skipped_count += 1
                if debug_enabled("decode"):
                    debug_log("decode", "skipping illegal opcode=%04x pc=%03x", opcode, pc_before)
                return StepResult.SKIPPED

            handler = getattr(self, instruction.handler, None)
            if handler is None:
                raise CPUError(f"handler '{instruction.handler}' not implemented")
            result = handler(decoded)
        except (CPUError, MemoryAccessError) as exc:
            self.state.pc = pc_before
            self.halted = True
            self.fault = exc
            if debug_enabled("cpu"):
                debug_log("cpu", "fault pc=%03x error=%s", pc_before, exc)
            raise

        if result is StepResult.AWAITING_KEY:
            return result
        self.instruction_count += 1
        return StepResult.EXECUTED

    # ------------------------------------------------------------------
    # System and flow control

    def op_sys(self, op: DecodedOpcode) -> None:
        if self.strict_sys:
            raise IllegalOpcodeError(f"machine code routine {op.nnn:#05x} is not supported")
        if debug_enabled("cpu"):
            debug_log("cpu", "ignoring SYS %03x", op.nnn)

    def op_cls(self, _: DecodedOpcode) -> None:
        self.framebuffer.clear()

    def op_ret(self, _: DecodedOpcode) -> None:
        if self.state.sp == 0:
            raise StackUnderflowError("RET with an empty call stack")
        self.state.sp -= 1
        self.state.pc = self.state.stack[self.state.sp]

    def op_jp(self, op: DecodedOpcode) -> None:
        self.state.pc = op.nnn

    def op_call(self, op: DecodedOpcode) -> None:
        if self.state.sp >= STACK_DEPTH:
            raise StackOverflowError(f"CALL {op.nnn:#05x} exceeds {STACK_DEPTH} nested calls")
        self.state.stack[self.state.sp] = self.state.pc
        self.state.sp += 1
        self.state.pc = op.nnn

    def op_jp_v0(self, op: DecodedOpcode) -> None:
        self.state.pc = (op.nnn + self.state.v[0]) & 0xFFFF

    def op_se_byte(self, op: DecodedOpcode) -> None:
        if self.state.v[op.x] == op.kk:
            self._skip()

    def op_sne_byte(self, op: DecodedOpcode) -> None:
        if self.state.v[op.x] != op.kk:
            self._skip()

    def op_se_reg(self, op: DecodedOpcode) -> None:
        if self.state.v[op.x] == self.state.v[op.y]:
            self._skip()

    def op_sne_reg(self, op: DecodedOpcode) -> None:
        if self.state.v[op.x] != self.state.v[op.y]:
            self._skip()

    # ------------------------------------------------------------------
    # Register loads and arithmetic

    def op_ld_byte(self, op: DecodedOpcode) -> None:
        self.state.v[op.x] = op.kk

    def op_add_byte(self, op: DecodedOpcode) -> None:
        self.state.v[op.x] = (self.state.v[op.x] + op.kk) & 0xFF

    def op_ld_reg(self, op: DecodedOpcode) -> None:
        self.state.v[op.x] = self.state.v[op.y]

    def op_or(self, op: DecodedOpcode) -> None:
        self.state.v[op.x] |= self.state.v[op.y]

    def op_and(self, op: DecodedOpcode) -> None:
        self.state.v[op.x] &= self.state.v[op.y]

    def op_xor(self, op: DecodedOpcode) -> None:
        self.state.v[op.x] ^= self.state.v[op.y]

    def op_add_reg(self, op: DecodedOpcode) -> None:
        total = self.state.v[op.x] + self.state.v[op.y]
        self._set_with_flag(op.x, total, total > 0xFF)

    def op_sub(self, op: DecodedOpcode) -> None:
        vx = self.state.v[op.x]
        vy = self.state.v[op.y]
        self._set_with_flag(op.x, vx - vy, vx > vy)

    def op_subn(self, op: DecodedOpcode) -> None:
        vx = self.state.v[op.x]
        vy = self.state.v[op.y]
        self._set_with_flag(op.x, vy - vx, vy > vx)

    def op_shr(self, op: DecodedOpcode) -> None:
        vx = self.state.v[op.x]
        self._set_with_flag(op.x, vx >> 1, bool(vx & 0x01))

    def op_shl(self, op: DecodedOpcode) -> None:
        vx = self.state.v[op.x]
        self._set_with_flag(op.x, vx << 1, bool(vx & 0x80))

    def op_rnd(self, op: DecodedOpcode) -> None:
        self.state.v[op.x] = self.rng.randrange(0x100) & op.kk

    # ------------------------------------------------------------------
    # Index register and memory

    def op_ld_i(self, op: DecodedOpcode) -> None:
        self.state.i = op.nnn

    def op_add_i(self, op: DecodedOpcode) -> None:
        self.state.i = (self.state.i + self.state.v[op.x]) & ADDRESS_MASK

    def op_ld_font(self, op: DecodedOpcode) -> None:
        self.state.i = glyph_address(self.state.v[op.x])

    def op_ld_bcd(self, op: DecodedOpcode) -> None:
        value = self.state.v[op.x]
        digits = bytes((value // 100, (value // 10) % 10, value % 10))
        self.memory.load_image(self.state.i, digits)

    def op_store_registers(self, op: DecodedOpcode) -> None:
        self.memory.load_image(self.state.i, bytes(self.state.v[: op.x + 1]))

    def op_load_registers(self, op: DecodedOpcode) -> None:
        block = self.memory.read_block(self.state.i, op.x + 1)
        self.state.v[: op.x + 1] = list(block)

    # ------------------------------------------------------------------
    # Display

    def op_drw(self, op: DecodedOpcode) -> None:
        rows = self.memory.read_block(self.state.i, op.n)
        collision = self.framebuffer.draw_sprite(self.state.v[op.x], self.state.v[op.y], rows)
        self.state.v[FLAG_REGISTER] = 1 if collision else 0

    # ------------------------------------------------------------------
    # Keypad and timers

    def op_skp(self, op: DecodedOpcode) -> None:
        if self.keypad.is_pressed(self.state.v[op.x]):
            self._skip()

    def op_sknp(self, op: DecodedOpcode) -> None:
        if not self.keypad.is_pressed(self.state.v[op.x]):
            self._skip()

    def op_ld_vx_key(self, op: DecodedOpcode) -> StepResult | None:
        key = self.keypad.first_pressed()
        if key is not None:
            self.state.v[op.x] = key
            return None
        # Park on this instruction until the keypad reports a press.
        self.state.pc = (self.state.pc - 2) & 0xFFFF
        self.waiting_for_key = op.x
        if debug_enabled("input"):
            debug_log("input", "waiting for key into V%X pc=%03x", op.x, self.state.pc)
        return StepResult.AWAITING_KEY

    def op_ld_vx_dt(self, op: DecodedOpcode) -> None:
        self.state.v[op.x] = self.timers.delay

    def op_ld_dt_vx(self, op: DecodedOpcode) -> None:
        self.timers.delay = self.state.v[op.x]

    def op_ld_st_vx(self, op: DecodedOpcode) -> None:
        self.timers.sound = self.state.v[op.x]

    # ------------------------------------------------------------------
    # Helpers

    def _poll_key_wait(self) -> StepResult:
        key = self.keypad.first_pressed()
        if key is None:
            return StepResult.AWAITING_KEY
        register = self.waiting_for_key
        assert register is not None
        self.state.v[register] = key
        self.waiting_for_key = None
        self.state.pc = (self.state.pc + 2) & 0xFFFF
        self.instruction_count += 1
        if debug_enabled("input"):
            debug_log("input", "key %X satisfied wait into V%X", key, register)
        return StepResult.EXECUTED

    def _fetch_word(self) -> int:
        value = self.memory.load16(self.state.pc)
        self.state.pc = (self.state.pc + 2) & 0xFFFF
        return value

    def _skip(self) -> None:
        self.state.pc = (self.state.pc + 2) & 0xFFFF

    def _set_with_flag(self, register: int, value: int, flag: bool) -> None:
        # VF is written last so it holds the flag even when it is the target.
        self.state.v[register] = value & 0xFF
        self.state.v[FLAG_REGISTER] = 1 if flag else 0
