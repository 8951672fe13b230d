"""Category-gated debug output for the CHIP-8 emulator.

Categories are enabled through the ``CHIP8_DEBUG`` environment variable as a
comma separated list, for example ``CHIP8_DEBUG=cpu,timer``; ``all`` turns on
every category. The variable is read on first use and cached until
:func:`reload_categories` is called.
"""

from __future__ import annotations

import os
from typing import FrozenSet

ENV_VAR = "CHIP8_DEBUG"

# cpu     fetch/execute and faults
# decode  opcodes skipped in permissive mode
# timer   sound timer expiry
# audio   buzzer and mixer state
# input   keypad events and key waits
# loader  program images placed in memory
# perf    frames per second, once a second
# trace   ring buffer dump when the machine halts
CATEGORIES: FrozenSet[str] = frozenset({"cpu", "decode", "timer", "audio", "input", "loader", "perf", "trace"})

_ALL = "all"
_enabled: FrozenSet[str] | None = None


def _parse(value: str) -> FrozenSet[str]:
    names = {part.strip().lower() for part in value.split(",")}
    names.discard("")
    if _ALL in names:
        names |= CATEGORIES
    return frozenset(names)


def enabled_categories() -> FrozenSet[str]:
    global _enabled
    if _enabled is None:
        _enabled = _parse(os.environ.get(ENV_VAR, ""))
    return _enabled


def reload_categories() -> None:
    """Forget the cached category set so ``CHIP8_DEBUG`` is read again."""

    global _enabled
    _enabled = None


def debug_enabled(category: str | None = None) -> bool:
    enabled = enabled_categories()
    if not enabled:
        return False
    if category is None:
        return True
    return category.lower() in enabled


def debug_log(category: str, message: str, *args) -> None:
    if not debug_enabled(category):
        return
    if args:
        try:
            message = message % args
        except (TypeError, ValueError):
            message = f"{message} {args!r}"
    print(f"[CHIP8][{category}] {message}")
