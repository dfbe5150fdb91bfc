import unittest

import numpy as np

from tonal_duet.note_types import NoteName
from tonal_duet.note_utils import (
    IN_TUNE,
    cents_off,
    convert_note_notation,
    frequency_to_midi,
    get_note_name,
    note_to_frequency,
    quantize,
)


class TestQuantize(unittest.TestCase):
    def test_a4(self):
        note, cents = quantize(440.0)
        self.assertEqual(str(note), "A4")
        self.assertAlmostEqual(cents, 0.0, delta=0.5)

    def test_quarter_tone_sharp_stays_on_a4(self):
        note, cents = quantize(440.0 * 2 ** (1 / 24))
        self.assertEqual(str(note), "A4")
        self.assertAlmostEqual(cents, 50.0, delta=0.01)

    def test_flat_input_has_negative_cents(self):
        note, cents = quantize(435.0)
        self.assertEqual(str(note), "A4")
        self.assertLess(cents, 0)
        self.assertAlmostEqual(cents, -19.78, delta=0.05)

    def test_c5(self):
        note, cents = quantize(523.25)
        self.assertEqual(str(note), "C5")
        self.assertAlmostEqual(cents, 0.0, delta=0.1)

    def test_octave_boundary(self):
        # B3 -> C4 is where the octave number changes
        self.assertEqual(str(quantize(246.94)[0]), "B3")
        self.assertEqual(str(quantize(261.63)[0]), "C4")

    def test_low_and_high_notes(self):
        self.assertEqual(str(quantize(27.5)[0]), "A0")
        self.assertEqual(str(quantize(4186.01)[0]), "C8")
        self.assertEqual(str(quantize(8.18)[0]), "C-1")

    def test_custom_reference(self):
        note, cents = quantize(432.0, reference=432.0)
        self.assertEqual(str(note), "A4")
        self.assertAlmostEqual(cents, 0.0, delta=0.01)

    def test_invalid_frequency_raises(self):
        for bad in (0.0, -440.0, float("nan"), float("inf")):
            with self.assertRaises(ValueError):
                quantize(bad)
        with self.assertRaises(ValueError):
            quantize(True)

    def test_numpy_scalars(self):
        note, cents = quantize(np.int64(440))
        self.assertEqual(str(note), "A4")
        self.assertAlmostEqual(cents, 0.0)
        self.assertEqual(frequency_to_midi(np.float32(523.25)), 72)

    def test_midi_numbers(self):
        self.assertEqual(frequency_to_midi(440.0), 69)
        self.assertEqual(frequency_to_midi(261.63), 60)


class TestCentsOff(unittest.TestCase):
    def test_signed_deviation(self):
        self.assertAlmostEqual(cents_off(440.0 * 2 ** (10 / 1200), "A4"), 10.0, places=6)
        self.assertAlmostEqual(cents_off(440.0 * 2 ** (-25 / 1200), "A4"), -25.0, places=6)

    def test_flat_spelling(self):
        self.assertAlmostEqual(cents_off(466.16, "Bb4"), cents_off(466.16, "A#4"))

    def test_malformed_label_is_in_tune(self):
        for label in ("", "H4", "A", "4", "A#", "Cb4", None):
            self.assertEqual(cents_off(440.0, label), IN_TUNE)


class TestNoteNames(unittest.TestCase):
    def test_get_note_name(self):
        self.assertEqual(get_note_name(440.0), "A4")
        self.assertEqual(get_note_name(277.18), "C#4")
        self.assertEqual(get_note_name(277.18, use_flats=True), "Db4")
        # E and B have no flat spelling in SPN output
        self.assertEqual(get_note_name(329.63, use_flats=True), "E4")
        self.assertEqual(get_note_name(0.0), "---")

    def test_parse(self):
        self.assertEqual(NoteName.parse("C#5"), NoteName("C#", 5))
        self.assertEqual(NoteName.parse("Bb3"), NoteName("A#", 3))
        self.assertEqual(NoteName.parse("c-1").midi_number, 0)
        with self.assertRaises(ValueError):
            NoteName.parse("X9")

    def test_labels(self):
        self.assertEqual(NoteName("A#", 4).label(use_flats=True), "Bb4")
        self.assertEqual(NoteName("A", 4).label(use_flats=True), "A4")
        self.assertEqual(NoteName.from_midi(69), NoteName("A", 4))

    def test_note_to_frequency(self):
        self.assertAlmostEqual(note_to_frequency("A4"), 440.0)
        self.assertAlmostEqual(note_to_frequency("C5"), 523.2511, places=3)

    def test_convert_note_notation(self):
        self.assertEqual(convert_note_notation("F#2", to_flats=True), "Gb2")
        self.assertEqual(convert_note_notation("Gb2", to_flats=False), "F#2")
        self.assertEqual(convert_note_notation("E2", to_flats=True), "E2")


if __name__ == "__main__":
    unittest.main()
