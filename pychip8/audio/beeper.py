"""Square-wave beeper sounded while the CHIP-8 sound timer is nonzero."""

from __future__ import annotations

from array import array
from typing import Optional

DEFAULT_FREQUENCY = 440.0


class SquareWaveBeeper:
    """Manage a looping square-wave tone using pygame's mixer."""

    def __init__(
        self,
        *,
        sample_rate: int = 44_100,
        frequency: float = DEFAULT_FREQUENCY,
        volume: float = 0.35,
    ) -> None:
        try:
            import pygame  # type: ignore
        except Exception as exc:  # pragma: no cover - optional dependency
            raise RuntimeError("pygame is required for audio output") from exc

        if pygame.mixer.get_init() is None:
            raise RuntimeError("pygame mixer must be initialised before creating SquareWaveBeeper")
        if frequency <= 0.0:
            raise ValueError("frequency must be positive")

        self._pygame = pygame
        self._sample_rate = max(1, sample_rate)
        self._frequency = frequency
        self._volume = max(0.0, min(1.0, volume))
        self._channel: Optional[pygame.mixer.Channel] = None
        self._sound: Optional[pygame.mixer.Sound] = None
        self._enabled = False

    @property
    def enabled(self) -> bool:
        return self._enabled

    # ------------------------------------------------------------------
    # Public API

    def set_state(self, enabled: bool) -> None:
        """Start or stop the tone."""

        if enabled == self._enabled:
            return
        self._enabled = enabled
        if not enabled:
            self._stop()
            return

        if self._sound is None:
            self._sound = self._build_sound()

        channel = self._channel
        if channel is None:
            channel = self._pygame.mixer.find_channel(True)
            if channel is None:
                return
            self._channel = channel

        channel.play(self._sound, loops=-1)
        channel.set_volume(self._volume)

    def shutdown(self) -> None:
        """Stop any active tone and release resources."""

        self._stop()
        self._enabled = False
        self._channel = None
        self._sound = None

    # ------------------------------------------------------------------
    # Internals

    def _stop(self) -> None:
        if self._channel is not None:
            self._channel.stop()

    def _build_sound(self):
        period = max(2, int(round(self._sample_rate / self._frequency)))
        amplitude = 12_000
        samples = array("h", [amplitude if index < period // 2 else -amplitude for index in range(period)])
        return self._pygame.mixer.Sound(buffer=samples.tobytes())


__all__ = ["SquareWaveBeeper", "DEFAULT_FREQUENCY"]
