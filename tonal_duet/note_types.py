"""Type definitions for the Tonal Duet project."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Dict, List, Tuple

import numpy as np

# Twelve-tone pitch classes, index 0 is C
SHARP_NOTES: List[str] = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]

SHARP_TO_FLAT: Dict[str, str] = {
    "C#": "Db",
    "D#": "Eb",
    "F#": "Gb",
    "G#": "Ab",
    "A#": "Bb",
}

FLAT_TO_SHARP: Dict[str, str] = {v: k for k, v in SHARP_TO_FLAT.items()}


class EngineState(Enum):
    """Lifecycle state of a PitchEngine."""

    IDLE = "idle"
    RUNNING = "running"


@dataclass(frozen=True, eq=False)
class Frame:
    """A block of mono time-domain samples captured at a known sample rate.

    Samples are copied into a read-only float64 array so that a frame cannot
    change underneath the detection cycle that owns it.
    """

    samples: np.ndarray
    sample_rate: int

    def __post_init__(self) -> None:
        if isinstance(self.sample_rate, bool) or not isinstance(
            self.sample_rate, (int, np.integer)
        ):
            raise ValueError(f"Sample rate must be an integer, got {self.sample_rate!r}")
        if self.sample_rate <= 0:
            raise ValueError(f"Sample rate must be positive, got {self.sample_rate}")

        samples = np.array(self.samples, dtype=np.float64)
        if samples.ndim != 1:
            raise ValueError(f"Frame samples must be one-dimensional, got shape {samples.shape}")
        samples.setflags(write=False)
        object.__setattr__(self, "samples", samples)
        object.__setattr__(self, "sample_rate", int(self.sample_rate))

    def __len__(self) -> int:
        return len(self.samples)

    @property
    def duration(self) -> float:
        """Length of the frame in seconds."""
        return len(self.samples) / self.sample_rate


@dataclass(frozen=True)
class NoteName:
    """An equal-tempered note in scientific pitch notation (A4 = MIDI 69)."""

    pitch_class: str  # One of SHARP_NOTES
    octave: int

    _LABEL_RE: ClassVar[re.Pattern] = re.compile(r"^([A-Ga-g])([#b]?)(-?\d+)$")

    def __post_init__(self) -> None:
        if self.pitch_class not in SHARP_NOTES:
            raise ValueError(f"Unknown pitch class: {self.pitch_class!r}")

    def __str__(self) -> str:
        return f"{self.pitch_class}{self.octave}"

    def label(self, use_flats: bool = False) -> str:
        """Note label, optionally spelled with flats (e.g. 'Bb4' instead of 'A#4')."""
        if use_flats and self.pitch_class in SHARP_TO_FLAT:
            return f"{SHARP_TO_FLAT[self.pitch_class]}{self.octave}"
        return str(self)

    @property
    def midi_number(self) -> int:
        return SHARP_NOTES.index(self.pitch_class) + (self.octave + 1) * 12

    @classmethod
    def from_midi(cls, midi_number: int) -> "NoteName":
        return cls(SHARP_NOTES[midi_number % 12], (midi_number // 12) - 1)

    @classmethod
    def parse(cls, label: str) -> "NoteName":
        """Parse a label such as 'A4', 'C#5', 'Bb3' or 'C-1'.

        Raises:
            ValueError: If the label is empty or malformed
        """
        if not label or not isinstance(label, str):
            raise ValueError(f"Empty note label: {label!r}")

        match = cls._LABEL_RE.match(label.strip())
        if match is None:
            raise ValueError(f"Malformed note label: {label!r}")

        letter, accidental, octave = match.groups()
        name = letter.upper() + accidental
        if name in FLAT_TO_SHARP:
            name = FLAT_TO_SHARP[name]
        elif name not in SHARP_NOTES:
            # Cb, Fb, E#-style spellings are not used in SPN output
            raise ValueError(f"Unsupported note spelling: {label!r}")
        return cls(name, int(octave))


@dataclass(frozen=True)
class DetectionResult:
    """One accepted detection: the nearest note, the measured frequency and its deviation."""

    note: NoteName
    frequency: float  # Hz
    cents: float  # Positive is sharp, negative is flat

    @property
    def note_name(self) -> str:
        return str(self.note)

    def as_tuple(self) -> Tuple[str, float, float]:
        """The (note, frequency, cents) triple handed to outbound callbacks."""
        return self.note_name, self.frequency, self.cents

    def __str__(self) -> str:
        return f"{self.note_name} ({self.frequency:.2f}Hz, {self.cents:+.1f} cents)"
