"""Axis units and scales for rendering a spectrogram.

A renderer maps a normalised position in ``[0, 1]`` to a value on an axis
(and back) through a :class:`Scale`, and labels ticks with
:func:`format_unit`.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import List

C0_FREQ = 16.35
NOTES = ["C", "C#/Db", "D", "D#/Eb", "E", "F", "F#/Gb", "G", "G#/Ab", "A", "A#/Bb", "B", "C"]


class Unit(str, Enum):
    SECOND = "second"
    HZ = "hz"
    NOTE = "note"


class Mapping(str, Enum):
    LINEAR = "linear"
    LOG10 = "log10"


def freq_to_note(freq_hz: float) -> str:
    """Nearest note name with octave, e.g. ``440.0 -> "A4"``.

    Frequencies at or below C0 map to ``"C0"``.
    """

    if freq_hz <= 0:
        return "C0"
    c0_distance = max(math.log2(freq_hz / C0_FREQ), 0.0)
    octave = math.floor(c0_distance)
    semitones = round((c0_distance - octave) * 12)
    if semitones == 12:
        return f"{NOTES[semitones]}{octave + 1}"
    return f"{NOTES[semitones]}{octave}"


def format_unit(value: float, unit: Unit) -> str:
    if unit == Unit.SECOND:
        millis = int(value * 1000.0)
        if millis <= 0:
            return "0ns"
        if millis < 1000:
            return f"{millis}ms"
        return f"{millis / 1000.0:g}s"
    if unit == Unit.HZ:
        return f"{round(value)} Hz"
    return freq_to_note(value)


def _log_floor(value: float) -> float:
    # log10 of the lower bound, clamped so a 0 Hz minimum maps to 1 Hz
    return max(math.log10(value), 0.0) if value > 0 else 0.0


@dataclass(frozen=True)
class Scale:
    unit: Unit
    min: float
    max: float
    mapping: Mapping = Mapping.LINEAR

    def normalize(self, value: float) -> float:
        if self.mapping == Mapping.LINEAR:
            return (value - self.min) / (self.max - self.min)
        lo = _log_floor(self.min)
        return (_log_floor(value) - lo) / (math.log10(self.max) - lo)

    def map_normalized(self, normalized: float) -> float:
        """Inverse of :meth:`normalize` for ``normalized`` in ``[0, 1]``."""
        if self.mapping == Mapping.LINEAR:
            return self.min + normalized * (self.max - self.min)
        lo = _log_floor(self.min)
        return 10.0 ** (lo + normalized * (math.log10(self.max) - lo))

    def evenly_spaced_values(self, n: int, start_at_zero: bool = True) -> List[float]:
        """``n`` tick values spread evenly in the scale's mapping.

        With ``start_at_zero`` the ticks include both ends of the scale;
        otherwise the last tick stops one step short of ``max``.
        """
        if n <= 0:
            return []
        if n == 1:
            return [self.map_normalized(0.0)]
        steps = n - 1 if start_at_zero else n
        return [self.map_normalized(i / steps) for i in range(n)]
