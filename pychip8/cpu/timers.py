"""Delay and sound timers, decremented at the host's 60 Hz tick."""

from __future__ import annotations

from dataclasses import dataclass

from pychip8.utils import debug_enabled, debug_log

TIMER_HZ = 60


@dataclass
class Timers:
    """The two 8-bit countdown timers.

    Instruction execution only ever loads the counters; decay happens
    exclusively through :meth:`tick`.
    """

    delay: int = 0
    sound: int = 0

    def reset(self) -> None:
        self.delay = 0
        self.sound = 0

    @property
    def sound_active(self) -> bool:
        return self.sound > 0

    def tick(self) -> bool:
        """Decrement both timers and return True on the sound timer's 1 -> 0 edge."""

        if self.delay > 0:
            self.delay -= 1

        beep = False
        if self.sound > 0:
            if self.sound == 1:
                beep = True
                if debug_enabled("timer"):
                    debug_log("timer", "sound timer expired")
            self.sound -= 1
        return beep
