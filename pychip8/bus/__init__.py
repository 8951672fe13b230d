"""Bus-related helpers for the CHIP-8 emulator."""

from .memory import ADDRESS_MASK, MEMORY_SIZE, Memory, MemoryAccessError

__all__ = [
    "ADDRESS_MASK",
    "MEMORY_SIZE",
    "Memory",
    "MemoryAccessError",
]
