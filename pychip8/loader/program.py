"""Program image loading for CHIP-8 ROMs.

ROM files are raw byte blobs with no header; the only metadata is the load
convention (variant), which fixes the address the first byte lands at.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import BinaryIO

from pychip8.bus import MEMORY_SIZE, Memory
from pychip8.utils import debug_enabled, debug_log


class ProgramLoadError(ValueError):
    """Raised when a program image cannot be placed in memory."""


class Variant(Enum):
    """Program loading conventions and their load offsets."""

    STANDARD = 0x200
    ETI660 = 0x600

    @property
    def offset(self) -> int:
        return self.value

    @property
    def capacity(self) -> int:
        """Largest image that fits between the offset and the end of memory."""

        return MEMORY_SIZE - self.value

    @classmethod
    def from_name(cls, name: str) -> "Variant":
        normalized = name.strip().replace("-", "").replace("_", "").upper()
        for variant in cls:
            if variant.name.replace("_", "") == normalized:
                return variant
        raise ValueError(f"unknown variant: {name!r}")


@dataclass
class ProgramImage:
    """Describes a program image copied into memory."""

    name: str = ""
    variant: Variant = Variant.STANDARD
    size: int = 0

    @property
    def start(self) -> int:
        return self.variant.offset

    @property
    def end(self) -> int:
        """Last address occupied by the image."""

        return self.start + self.size - 1


def load_program(
    data: bytes,
    memory: Memory,
    variant: Variant = Variant.STANDARD,
    *,
    name: str = "",
) -> ProgramImage:
    """Copy ``data`` into ``memory`` at the variant's offset.

    Nothing is written when the image does not fit.
    """

    if not data:
        raise ProgramLoadError("program image is empty")
    if variant.offset + len(data) > memory.length:
        raise ProgramLoadError(
            f"program image of {len(data)} bytes exceeds the {variant.capacity} bytes available "
            f"from {variant.offset:#05x}"
        )
    memory.load_image(variant.offset, bytes(data))
    image = ProgramImage(name=name, variant=variant, size=len(data))
    if debug_enabled("loader"):
        debug_log("loader", "loaded name=%s start=%03x end=%03x", name or "-", image.start, image.end)
    return image


def load_program_stream(stream: BinaryIO, memory: Memory, variant: Variant = Variant.STANDARD) -> ProgramImage:
    """Load a program image from ``stream`` into ``memory``."""

    # Read one byte past the capacity so oversized images are detected.
    data = stream.read(variant.capacity + 1)
    name = getattr(stream, "name", "")
    return load_program(data, memory, variant, name=Path(name).name if isinstance(name, str) else "")


def load_program_from_path(path: Path, memory: Memory, variant: Variant = Variant.STANDARD) -> ProgramImage:
    """Load a program image from the filesystem."""

    with path.open("rb") as handle:
        return load_program_stream(handle, memory, variant)
