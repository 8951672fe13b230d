"""Opcode metadata and decoding for the CHIP-8 instruction set."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Final, Iterable, Mapping, Sequence

# Families whose low nibble selects the instruction.
_NIBBLE_FAMILIES: Final[frozenset[int]] = frozenset({0x5, 0x8, 0x9})
# Families whose low byte selects the instruction.
_BYTE_FAMILIES: Final[frozenset[int]] = frozenset({0xE, 0xF})

SYS_KEY: Final[int] = 0x000


@dataclass(frozen=True)
class DecodedOpcode:
    """Bit fields of a 16-bit CHIP-8 instruction word."""

    opcode: int

    @property
    def family(self) -> int:
        return (self.opcode >> 12) & 0xF

    @property
    def x(self) -> int:
        return (self.opcode >> 8) & 0xF

    @property
    def y(self) -> int:
        return (self.opcode >> 4) & 0xF

    @property
    def n(self) -> int:
        return self.opcode & 0xF

    @property
    def kk(self) -> int:
        return self.opcode & 0xFF

    @property
    def nnn(self) -> int:
        return self.opcode & 0xFFF

    @property
    def key(self) -> int:
        """Packed ``(family, sub-opcode)`` lookup key."""

        family = self.family
        if family == 0x0:
            if self.nnn in (0x0E0, 0x0EE):
                return self.nnn
            return SYS_KEY
        if family in _NIBBLE_FAMILIES:
            return (family << 8) | self.n
        if family in _BYTE_FAMILIES:
            return (family << 8) | self.kk
        return family << 8


def decode(opcode: int) -> DecodedOpcode:
    if not 0 <= opcode <= 0xFFFF:
        raise ValueError(f"opcode out of range: {opcode:#x}")
    return DecodedOpcode(opcode)


@dataclass(frozen=True)
class Instruction:
    """Metadata describing a single CHIP-8 instruction."""

    key: int
    mnemonic: str
    handler: str
    operands: str = ""

    def __post_init__(self) -> None:
        if not 0 <= self.key <= 0xFFF:
            raise ValueError(f"key out of range: {self.key:#x}")

    def format(self, decoded: DecodedOpcode) -> str:
        if not self.operands:
            return self.mnemonic
        fields = {
            "x": decoded.x,
            "y": decoded.y,
            "n": decoded.n,
            "kk": decoded.kk,
            "nnn": decoded.nnn,
        }
        return f"{self.mnemonic} {self.operands.format(**fields)}"


class OpcodeTable:
    """Mutable builder for the instruction lookup table."""

    def __init__(self) -> None:
        self._table: Dict[int, Instruction] = {}

    def register(self, instruction: Instruction) -> None:
        key = instruction.key
        existing = self._table.get(key)
        if existing is not None:
            raise ValueError(f"key {key:#05x} already registered as {existing.mnemonic}")
        self._table[key] = instruction

    def register_all(self, instructions: Iterable[Instruction]) -> None:
        for instruction in instructions:
            self.register(instruction)

    def freeze(self) -> Mapping[int, Instruction]:
        return MappingProxyType(dict(self._table))


def build_instruction_table(instructions: Iterable[Instruction]) -> Mapping[int, Instruction]:
    """Build a lookup table keyed by the packed (family, sub-opcode) pair."""

    table = OpcodeTable()
    table.register_all(instructions)
    return table.freeze()


DEFAULT_INSTRUCTIONS: Sequence[Instruction] = (
    Instruction(SYS_KEY, "SYS", "op_sys", "{nnn:#05x}"),
    Instruction(0x0E0, "CLS", "op_cls"),
    Instruction(0x0EE, "RET", "op_ret"),
    Instruction(0x100, "JP", "op_jp", "{nnn:#05x}"),
    Instruction(0x200, "CALL", "op_call", "{nnn:#05x}"),
    Instruction(0x300, "SE", "op_se_byte", "V{x:X}, {kk:#04x}"),
    Instruction(0x400, "SNE", "op_sne_byte", "V{x:X}, {kk:#04x}"),
    Instruction(0x500, "SE", "op_se_reg", "V{x:X}, V{y:X}"),
    Instruction(0x600, "LD", "op_ld_byte", "V{x:X}, {kk:#04x}"),
    Instruction(0x700, "ADD", "op_add_byte", "V{x:X}, {kk:#04x}"),
    # ALU
    Instruction(0x800, "LD", "op_ld_reg", "V{x:X}, V{y:X}"),
    Instruction(0x801, "OR", "op_or", "V{x:X}, V{y:X}"),
    Instruction(0x802, "AND", "op_and", "V{x:X}, V{y:X}"),
    Instruction(0x803, "XOR", "op_xor", "V{x:X}, V{y:X}"),
    Instruction(0x804, "ADD", "op_add_reg", "V{x:X}, V{y:X}"),
    Instruction(0x805, "SUB", "op_sub", "V{x:X}, V{y:X}"),
    Instruction(0x806, "SHR", "op_shr", "V{x:X}"),
    Instruction(0x807, "SUBN", "op_subn", "V{x:X}, V{y:X}"),
    Instruction(0x80E, "SHL", "op_shl", "V{x:X}"),
    Instruction(0x900, "SNE", "op_sne_reg", "V{x:X}, V{y:X}"),
    Instruction(0xA00, "LD", "op_ld_i", "I, {nnn:#05x}"),
    Instruction(0xB00, "JP", "op_jp_v0", "V0, {nnn:#05x}"),
    Instruction(0xC00, "RND", "op_rnd", "V{x:X}, {kk:#04x}"),
    Instruction(0xD00, "DRW", "op_drw", "V{x:X}, V{y:X}, {n}"),
    # Keypad
    Instruction(0xE9E, "SKP", "op_skp", "V{x:X}"),
    Instruction(0xEA1, "SKNP", "op_sknp", "V{x:X}"),
    # Timers, memory and misc
    Instruction(0xF07, "LD", "op_ld_vx_dt", "V{x:X}, DT"),
    Instruction(0xF0A, "LD", "op_ld_vx_key", "V{x:X}, K"),
    Instruction(0xF15, "LD", "op_ld_dt_vx", "DT, V{x:X}"),
    Instruction(0xF18, "LD", "op_ld_st_vx", "ST, V{x:X}"),
    Instruction(0xF1E, "ADD", "op_add_i", "I, V{x:X}"),
    Instruction(0xF29, "LD", "op_ld_font", "F, V{x:X}"),
    Instruction(0xF33, "LD", "op_ld_bcd", "B, V{x:X}"),
    Instruction(0xF55, "LD", "op_store_registers", "[I], V{x:X}"),
    Instruction(0xF65, "LD", "op_load_registers", "V{x:X}, [I]"),
)


OPCODE_TABLE: Mapping[int, Instruction] = build_instruction_table(DEFAULT_INSTRUCTIONS)


def lookup(opcode: int, table: Mapping[int, Instruction] = OPCODE_TABLE) -> Instruction | None:
    return table.get(decode(opcode).key)


def disassemble(opcode: int, table: Mapping[int, Instruction] = OPCODE_TABLE) -> str:
    """Return a human readable rendering such as ``ADD V1, V2``."""

    decoded = decode(opcode)
    instruction = table.get(decoded.key)
    if instruction is None:
        return f"DW {opcode:#06x}"
    return instruction.format(decoded)
