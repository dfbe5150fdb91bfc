"""Suppression of frequencies the application itself is playing.

Synthesized tones leak back into the microphone, acoustically or through a
loopback device. Estimates close to one of those tones are dropped before
they are reported.
"""

from __future__ import annotations

import math
import numbers
from dataclasses import dataclass
from typing import ClassVar, Iterable, Mapping, Tuple, Union

from ..core.exceptions import InvalidIgnoreEntry
from ..note_utils import A4_FREQUENCY, note_to_frequency

DEFAULT_TOLERANCE = 10.0  # Hz


@dataclass(frozen=True)
class IgnoreEntry:
    """A frequency to suppress and the half-width of the band around it."""

    frequency: float  # Hz
    tolerance: float = DEFAULT_TOLERANCE  # Hz

    def __post_init__(self) -> None:
        if isinstance(self.frequency, bool) or not isinstance(self.frequency, numbers.Real):
            raise InvalidIgnoreEntry(f"Ignore frequency must be a number, got {self.frequency!r}")
        if isinstance(self.tolerance, bool) or not isinstance(self.tolerance, numbers.Real):
            raise InvalidIgnoreEntry(f"Ignore tolerance must be a number, got {self.tolerance!r}")
        if not math.isfinite(self.frequency):
            raise InvalidIgnoreEntry(f"Ignore frequency must be finite, got {self.frequency}")
        if not math.isfinite(self.tolerance) or self.tolerance <= 0:
            raise InvalidIgnoreEntry(
                f"Ignore tolerance must be positive and finite, got {self.tolerance}"
            )
        object.__setattr__(self, "frequency", float(self.frequency))
        object.__setattr__(self, "tolerance", float(self.tolerance))

    def matches(self, frequency: float) -> bool:
        # Strict: a distance equal to the tolerance is not suppressed
        return abs(frequency - self.frequency) < self.tolerance


IgnoreSpec = Union[
    Mapping[float, float],
    Iterable[Union[IgnoreEntry, Tuple[float, float], float]],
    None,
]


@dataclass(frozen=True)
class IgnoreSet:
    """Immutable snapshot of the frequencies currently being ignored."""

    entries: Tuple[IgnoreEntry, ...] = ()

    EMPTY: ClassVar["IgnoreSet"]

    def __len__(self) -> int:
        return len(self.entries)

    def __bool__(self) -> bool:
        return bool(self.entries)

    def should_ignore(self, frequency: float) -> bool:
        return any(entry.matches(frequency) for entry in self.entries)

    @classmethod
    def build(cls, entries: IgnoreSpec, default_tolerance: float = DEFAULT_TOLERANCE) -> "IgnoreSet":
        """Validate caller input into a snapshot.

        Args:
            entries: A mapping of frequency to tolerance, or an iterable of
                IgnoreEntry objects, (frequency, tolerance) pairs or bare
                frequencies (which get ``default_tolerance``)
            default_tolerance: Tolerance in Hz for bare frequencies

        Raises:
            InvalidIgnoreEntry: If any entry is invalid; nothing is built
        """
        if entries is None:
            return cls.EMPTY
        if isinstance(entries, IgnoreSet):
            return entries

        items = entries.items() if isinstance(entries, Mapping) else entries
        built = []
        for item in items:
            if isinstance(item, IgnoreEntry):
                built.append(item)
            elif isinstance(item, (tuple, list)):
                if len(item) != 2:
                    raise InvalidIgnoreEntry(f"Expected (frequency, tolerance), got {item!r}")
                built.append(IgnoreEntry(item[0], item[1]))
            else:
                built.append(IgnoreEntry(item, default_tolerance))
        return cls(tuple(built))

    @classmethod
    def from_notes(
        cls,
        note_names: Iterable[str],
        tolerance: float = DEFAULT_TOLERANCE,
        reference: float = A4_FREQUENCY,
    ) -> "IgnoreSet":
        """Ignore set for tones given by note label (e.g. the notes being played back).

        Raises:
            InvalidIgnoreEntry: If a label cannot be parsed or the tolerance is invalid
        """
        built = []
        for name in note_names:
            try:
                frequency = note_to_frequency(name, reference)
            except ValueError as e:
                raise InvalidIgnoreEntry(f"Cannot ignore note {name!r}: {e}") from e
            built.append(IgnoreEntry(frequency, tolerance))
        return cls(tuple(built))


IgnoreSet.EMPTY = IgnoreSet()


def should_ignore(frequency: float, ignore_set: Union[IgnoreSet, IgnoreSpec]) -> bool:
    """True if ``frequency`` lies strictly within the tolerance of any ignored frequency."""
    if not isinstance(ignore_set, IgnoreSet):
        ignore_set = IgnoreSet.build(ignore_set)
    return ignore_set.should_ignore(frequency)
