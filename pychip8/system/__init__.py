"""CHIP-8 system assembly helpers."""

from __future__ import annotations

from .machine import DEFAULT_STEPS_PER_TICK, Machine, MachineConfig, StepOutcome, create_machine

__all__ = [
    "DEFAULT_STEPS_PER_TICK",
    "MachineConfig",
    "Machine",
    "StepOutcome",
    "create_machine",
]
