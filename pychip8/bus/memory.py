"""Memory for the CHIP-8 virtual machine.

The CHIP-8 address space is a flat 4 KiB of RAM. The first 512 bytes are
reserved for the interpreter (the built-in font lives at 0x000-0x04F) and
programs are loaded above that. Unlike a banked bus there is nothing to map,
so a single region covers the whole space; out-of-range accesses are errors
rather than silent wraparound.
"""

from __future__ import annotations

from dataclasses import dataclass

MEMORY_SIZE = 0x1000
ADDRESS_MASK = 0x0FFF


class MemoryAccessError(Exception):
    """Raised when an access falls outside the 4 KiB address space."""


@dataclass
class Memory:
    """Byte-addressable CHIP-8 RAM."""

    length: int = MEMORY_SIZE

    def __post_init__(self) -> None:
        if self.length <= 0:
            raise MemoryAccessError("memory must have a positive length")
        self._data = bytearray(self.length)

    def get_end_address(self) -> int:
        return self.length - 1

    def _offset(self, address: int) -> int:
        if not 0 <= address < self.length:
            raise MemoryAccessError(f"address {address:#05x} outside 0x000-{self.get_end_address():#05x}")
        return address

    def load8(self, address: int) -> int:
        return self._data[self._offset(address)]

    def store8(self, address: int, value: int) -> None:
        self._data[self._offset(address)] = value & 0xFF

    def load16(self, address: int) -> int:
        high = self.load8(address)
        low = self.load8(address + 1)
        return ((high & 0xFF) << 8) | (low & 0xFF)

    def store16(self, address: int, value: int) -> None:
        self.store8(address, (value >> 8) & 0xFF)
        self.store8(address + 1, value & 0xFF)

    def read_block(self, address: int, length: int) -> bytes:
        if length < 0:
            raise MemoryAccessError("length must not be negative")
        if length:
            self._offset(address)
            self._offset(address + length - 1)
        return bytes(self._data[address : address + length])

    def load_image(self, address: int, data: bytes) -> None:
        """Copy ``data`` to ``address``; the whole image must fit."""

        end = address + len(data)
        if address < 0 or end > self.length:
            raise MemoryAccessError(
                f"image of {len(data)} bytes at {address:#05x} exceeds memory end {self.get_end_address():#05x}"
            )
        self._data[address:end] = data

    def clear(self) -> None:
        self._data[:] = bytes(self.length)

    def snapshot(self) -> bytes:
        return bytes(self._data)
