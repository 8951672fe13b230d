"""CHIP-8 hexadecimal keypad state."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, Mapping

from pychip8.utils import debug_enabled, debug_log

KEY_COUNT = 16

# Original layout      Host layout
#   1 2 3 C              1 2 3 4
#   4 5 6 D              q w e r
#   7 8 9 E              a s d f
#   A 0 B F              z x c v
KEY_LAYOUT: Mapping[str, int] = {
    "1": 0x1,
    "2": 0x2,
    "3": 0x3,
    "4": 0xC,
    "q": 0x4,
    "w": 0x5,
    "e": 0x6,
    "r": 0xD,
    "a": 0x7,
    "s": 0x8,
    "d": 0x9,
    "f": 0xE,
    "z": 0xA,
    "x": 0x0,
    "c": 0xB,
    "v": 0xF,
}


@dataclass
class Keypad:
    """16-entry key-state vector written by the host and read by the CPU."""

    layout: Mapping[str, int] = field(default_factory=lambda: dict(KEY_LAYOUT))
    _keys: list[bool] = field(default_factory=lambda: [False] * KEY_COUNT)
    _active: Dict[int, int] = field(default_factory=dict)
    _listeners: list[Callable[[int, bool], None]] = field(default_factory=list)

    def press(self, key_name: str) -> None:
        code = self.lookup(key_name)
        if code is None:
            if debug_enabled("input"):
                debug_log("input", "unmapped_press=%s", key_name)
            return
        self._active[code] = self._active.get(code, 0) + 1
        self.set_key(code, True)

    def release(self, key_name: str) -> None:
        code = self.lookup(key_name)
        if code is None:
            if debug_enabled("input"):
                debug_log("input", "unmapped_release=%s", key_name)
            return
        count = self._active.get(code, 0)
        if count <= 1:
            self._active.pop(code, None)
            self.set_key(code, False)
        else:
            self._active[code] = count - 1

    def set_key(self, code: int, pressed: bool) -> None:
        if not 0 <= code < KEY_COUNT:
            raise ValueError(f"key code out of range: {code:#x}")
        before = self._keys[code]
        self._keys[code] = pressed
        if debug_enabled("input"):
            debug_log("input", "key=%X pressed=%s", code, pressed)
        if before != pressed:
            self._notify_listeners(code, pressed)

    def is_pressed(self, code: int) -> bool:
        return self._keys[code & 0x0F]

    def first_pressed(self) -> int | None:
        """Return the lowest pressed key code, or None."""

        for code, pressed in enumerate(self._keys):
            if pressed:
                return code
        return None

    def reset(self) -> None:
        """Release every key, notifying listeners of each release."""

        self._active.clear()
        for code, pressed in enumerate(self._keys):
            if pressed:
                self.set_key(code, False)

    def snapshot(self) -> tuple[bool, ...]:
        return tuple(self._keys)

    def add_listener(self, listener: Callable[[int, bool], None]) -> None:
        self._listeners.append(listener)

    def lookup(self, key_name: str) -> int | None:
        return self.layout.get(key_name.lower())

    def _notify_listeners(self, code: int, pressed: bool) -> None:
        for listener in tuple(self._listeners):
            listener(code, pressed)
