"""CPU package for the CHIP-8 emulator."""

from .core import (
    CHIP8,
    CPUError,
    CPUState,
    IllegalOpcodeError,
    StackOverflowError,
    StackUnderflowError,
    StepResult,
)
from .timers import TIMER_HZ, Timers
from . import opcodes

__all__ = [
    "CHIP8",
    "CPUState",
    "CPUError",
    "IllegalOpcodeError",
    "StackOverflowError",
    "StackUnderflowError",
    "StepResult",
    "Timers",
    "TIMER_HZ",
    "opcodes",
]
