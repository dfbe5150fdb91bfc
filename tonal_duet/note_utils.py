"""Utility functions for working with musical notes and frequencies.

This is the note quantizer of the detection pipeline: frequencies are mapped
onto twelve-tone equal temperament referenced to A4 (MIDI 69).
"""

import math
import numbers
from typing import Tuple

import numpy as np

from .logger import get_logger
from .note_types import FLAT_TO_SHARP, SHARP_TO_FLAT, NoteName

logger = get_logger(__name__)

A4_FREQUENCY = 440.0
A4_MIDI = 69

# Cents reported when a note label cannot be re-derived; display code treats it as "in tune"
IN_TUNE = 0.0

# Keeps exact quarter-tone ties on the lower note despite log2 rounding noise
_TIE_EPSILON = 1e-9


def _check_frequency(frequency: float) -> None:
    if (
        isinstance(frequency, bool)
        or not isinstance(frequency, numbers.Real)
        or not math.isfinite(frequency)
    ):
        raise ValueError(f"Invalid frequency value: {frequency!r}")
    if frequency <= 0:
        raise ValueError(f"Frequency must be positive, got {frequency}")


def frequency_to_midi(frequency: float, reference: float = A4_FREQUENCY) -> int:
    """Nearest MIDI note number for a frequency.

    A frequency exactly halfway between two notes resolves to the lower one.

    Raises:
        ValueError: If frequency is not a positive finite number
    """
    _check_frequency(frequency)
    semitones = 12 * np.log2(frequency / reference)
    return int(np.ceil(semitones - 0.5 - _TIE_EPSILON)) + A4_MIDI


def midi_to_frequency(midi_number: int, reference: float = A4_FREQUENCY) -> float:
    """Exact equal-tempered frequency of a MIDI note number."""
    return float(reference * 2.0 ** ((midi_number - A4_MIDI) / 12.0))


def note_to_frequency(note_name: str, reference: float = A4_FREQUENCY) -> float:
    """Frequency of a note label such as 'C5' or 'Bb3'.

    Raises:
        ValueError: If the label is malformed
    """
    return midi_to_frequency(NoteName.parse(note_name).midi_number, reference)


def cents_off(frequency: float, note_name: str, reference: float = A4_FREQUENCY) -> float:
    """Signed deviation in cents of ``frequency`` from the note named ``note_name``.

    Positive means sharp, negative means flat. An empty or malformed label
    yields IN_TUNE instead of raising.
    """
    try:
        note = NoteName.parse(note_name)
    except ValueError as e:
        logger.debug(f"Cannot derive cents for {note_name!r}: {e}")
        return IN_TUNE

    expected_frequency = midi_to_frequency(note.midi_number, reference)
    return float(1200 * np.log2(frequency / expected_frequency))


def quantize(frequency: float, reference: float = A4_FREQUENCY) -> Tuple[NoteName, float]:
    """Map a frequency to the nearest note and its cents deviation.

    Args:
        frequency: Frequency in Hz
        reference: Frequency of A4 in Hz

    Returns:
        (note, cents) where cents is in [-50, +50]

    Raises:
        ValueError: If frequency is not a positive finite number
    """
    note = NoteName.from_midi(frequency_to_midi(frequency, reference))
    return note, cents_off(frequency, str(note), reference)


def get_note_name(freq: float, use_flats: bool = False) -> str:
    """Convert frequency to note name using Scientific Pitch Notation (SPN).

    Args:
        freq: Frequency in Hz
        use_flats: If True, use flat notes (e.g., 'Bb') instead of sharps (e.g., 'A#')

    Returns:
        Note name with octave in SPN (e.g., 'A4', 'C#4', 'Bb3'), or '---' for
        non-positive or non-finite input

    Note:
        - Middle C is C4 (261.63 Hz)
        - Octave numbers change between B and C (e.g., B3 -> C4)
    """
    if not math.isfinite(freq) or freq <= 0:
        return "---"
    return NoteName.from_midi(frequency_to_midi(freq)).label(use_flats)


def convert_note_notation(note_name: str, to_flats: bool = False) -> str:
    """Convert a note name between sharp and flat notation.

    Args:
        note_name: The note name to convert (e.g., 'F#2' or 'Gb2')
        to_flats: If True, convert to flats (e.g., 'Gb2'), otherwise to sharps (e.g., 'F#2')

    Returns:
        str: The converted note name, or original if no conversion needed or invalid

    Examples:
        >>> convert_note_notation('F#2', to_flats=True)
        'Gb2'
        >>> convert_note_notation('Gb2', to_flats=False)
        'F#2'
    """
    if not note_name or not isinstance(note_name, str):
        return note_name or ""

    note_part = "".join(c for c in note_name if not c.isdigit() and c != "-").strip()
    octave_part = note_name[len(note_part):]

    if to_flats and note_part in SHARP_TO_FLAT:
        return f"{SHARP_TO_FLAT[note_part]}{octave_part}"
    elif not to_flats and note_part in FLAT_TO_SHARP:
        return f"{FLAT_TO_SHARP[note_part]}{octave_part}"

    # No conversion needed or possible
    return note_name
