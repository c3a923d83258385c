"""
SoundManager — Synthesized audio for Bunco using pure Python.

Generates 16-bit PCM waveforms via struct.pack + math.sin (no numpy).
All cues are pre-generated at init for zero-latency playback, one per
game event.
"""
from __future__ import annotations

import math
import random
import struct

import pygame

from game_events import GameEvents

SAMPLE_RATE = 44100


def _generate_samples(
    duration_ms: int, freq: float = 440.0, waveform: str = "sine", volume: float = 0.3, fade_out: bool = True,
) -> bytes:
    """Generate raw 16-bit mono PCM bytes for a tone or noise burst.

    Args:
        duration_ms: Duration in milliseconds.
        freq: Frequency in Hz (ignored for noise).
        waveform: "sine", "square", or "noise".
        volume: Peak amplitude 0.0-1.0.
        fade_out: Apply linear fade-out envelope.

    Returns:
        bytes of signed 16-bit little-endian samples.
    """
    num_samples = int(SAMPLE_RATE * duration_ms / 1000)
    samples = []
    for i in range(num_samples):
        t = i / SAMPLE_RATE
        # Envelope: linear fade-out
        env = 1.0 - (i / num_samples) if fade_out else 1.0

        if waveform == "sine":
            val = math.sin(2 * math.pi * freq * t)
        elif waveform == "square":
            val = 1.0 if math.sin(2 * math.pi * freq * t) >= 0 else -1.0
        elif waveform == "noise":
            val = random.uniform(-1.0, 1.0)
        else:
            val = 0.0

        sample = int(val * volume * env * 32767)
        sample = max(-32768, min(32767, sample))
        samples.append(struct.pack("<h", sample))

    return b"".join(samples)


def _silence(duration_ms: int) -> bytes:
    return b"\x00\x00" * int(SAMPLE_RATE * duration_ms / 1000)


def _sequence(notes, volume: float = 0.25) -> bytes:
    """Render (freq, duration_ms, start_ms) notes back to back.

    Overlapping start times are flattened: each note begins no earlier than
    the previous one ends.
    """
    out = b""
    cursor = 0
    for freq, duration_ms, start_ms in notes:
        if start_ms > cursor:
            out += _silence(start_ms - cursor)
            cursor = start_ms
        out += _generate_samples(duration_ms, freq, "sine", volume)
        cursor += duration_ms
    return out


def _make_sound(pcm_bytes: bytes) -> pygame.mixer.Sound:
    """Wrap raw PCM bytes in a pygame.mixer.Sound."""
    return pygame.mixer.Sound(buffer=pcm_bytes)


class SoundManager(GameEvents):
    """Pre-generates and plays a cue for every game event.

    Requires pygame.mixer to be initialized (see init_mixer()).
    All play methods are no-ops when disabled.
    """

    def __init__(self) -> None:
        self._enabled = True

        # Cup shake: low rattle
        self._shake = _make_sound(_generate_samples(100, waveform="noise", volume=0.15))

        # Dice landing: three rising pips
        self._roll = _make_sound(_sequence([(300, 150, 0), (350, 150, 100), (400, 150, 200)], volume=0.15))

        # Bunco: C5 → E5 → G5 → C6
        self._bunco = _make_sound(_sequence([(523, 300, 0), (659, 300, 200), (784, 300, 400), (1047, 500, 600)]))

        # Baby Bunco: C5 → E5 → G5
        self._baby_bunco = _make_sound(_sequence([(523, 200, 0), (659, 200, 150), (784, 300, 300)]))

        # Round win: A4 → C#5 → E5 → A5
        self._round_win = _make_sound(_sequence([(440, 200, 0), (554, 200, 200), (659, 200, 400), (880, 400, 600)]))

        # Game win fanfare
        self._game_win = _make_sound(_sequence(
            [(523, 400, 0), (659, 400, 300), (784, 400, 600), (1047, 600, 900), (1319, 800, 1200)]))

        # Countdown tick and time-up beeps
        self._tick = _make_sound(_generate_samples(100, freq=800, waveform="sine", volume=0.15))
        self._time_up = _make_sound(_sequence([(880, 200, 0), (880, 200, 250), (880, 200, 500)]))

    def toggle(self) -> bool:
        """Toggle sound on/off. Returns new enabled state."""
        self._enabled = not self._enabled
        return self._enabled

    @property
    def enabled(self) -> bool:
        return self._enabled

    @enabled.setter
    def enabled(self, value: bool) -> None:
        self._enabled = bool(value)

    def _play(self, sound: pygame.mixer.Sound) -> None:
        if self._enabled:
            sound.play()

    def on_dice_shake(self) -> None:
        self._play(self._shake)

    def on_dice_roll(self) -> None:
        self._play(self._roll)

    def on_bunco(self) -> None:
        self._play(self._bunco)

    def on_baby_bunco(self) -> None:
        self._play(self._baby_bunco)

    def on_round_win(self) -> None:
        self._play(self._round_win)

    def on_game_win(self) -> None:
        self._play(self._game_win)

    def on_tick(self) -> None:
        self._play(self._tick)

    def on_time_up(self) -> None:
        self._play(self._time_up)


def init_mixer() -> bool:
    """Initialize pygame's mixer for mono 16-bit playback. Returns False if no audio device."""
    try:
        pygame.mixer.init(frequency=SAMPLE_RATE, size=-16, channels=1)
    except pygame.error:
        return False
    return True
