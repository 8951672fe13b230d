"""Loaders for CHIP-8 program images."""

from __future__ import annotations

from .program import (
    ProgramImage,
    ProgramLoadError,
    Variant,
    load_program,
    load_program_from_path,
    load_program_stream,
)

__all__ = [
    "ProgramImage",
    "ProgramLoadError",
    "Variant",
    "load_program",
    "load_program_stream",
    "load_program_from_path",
]
