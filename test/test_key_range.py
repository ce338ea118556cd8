#!/usr/bin/env python3
"""Tests for key range widening and shifting."""

import unittest
import sys
import os

# Add parent directory to path to import the project modules
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from key_range import adjusted_pitch_range, shift_key_range_if_needed, widen_key_range_if_needed
from piano_keys import KeyRange, PitchRange


class TestWidenKeyRange(unittest.TestCase):

    def test_wide_range_unchanged_for_octave(self):
        key_range = KeyRange(12, 39)  # F2..E6
        self.assertEqual(widen_key_range_if_needed(key_range, vectors=[12]), PitchRange(41, 88))

    def test_narrow_range_widened_for_octave(self):
        key_range = KeyRange(0, 5)  # A0..F1
        low, high = widen_key_range_if_needed(key_range, vectors=[12])
        self.assertGreaterEqual(high - low, 12)
        self.assertEqual((low, high), (17, 29))

    def test_widen_uses_largest_vector(self):
        key_range = KeyRange(23, 25)  # C4..E4
        low, high = widen_key_range_if_needed(key_range, vectors=[2, 7, 3])
        self.assertEqual(high, 64)
        self.assertEqual(low, 57)

    def test_negative_vectors_count_by_magnitude(self):
        key_range = KeyRange(23, 24)
        self.assertEqual(widen_key_range_if_needed(key_range, vectors=[-5]), PitchRange(57, 62))

    def test_never_shrinks(self):
        key_range = KeyRange(10, 40)
        original = key_range.bounds()
        widened = widen_key_range_if_needed(key_range, vectors=[1, 2])
        self.assertEqual(widened.bounds(), original)

    def test_custom_sequence_extends_both_ends(self):
        key_range = KeyRange(23, 30)  # C4..C5
        widened = widen_key_range_if_needed(key_range, custom_midi_values=[55, 60, 79])
        self.assertEqual(widened, PitchRange(55, 79))

    def test_custom_sequence_inside_range(self):
        key_range = KeyRange(23, 30)
        widened = widen_key_range_if_needed(key_range, custom_midi_values=[62, 64])
        self.assertEqual(widened, PitchRange(60, 72))

    def test_custom_sequence_ignores_unresolved_notes(self):
        key_range = KeyRange(23, 30)
        widened = widen_key_range_if_needed(key_range, custom_midi_values=[None, 50])
        self.assertEqual(widened, PitchRange(50, 72))


class TestShiftKeyRange(unittest.TestCase):

    def test_shift_below_floor(self):
        self.assertEqual(shift_key_range_if_needed(10, 20), PitchRange(21, 31))

    def test_shift_preserves_width(self):
        low, high = shift_key_range_if_needed(-5, 30)
        self.assertEqual(low, 21)
        self.assertEqual(high - low, 35)

    def test_no_shift_when_above_floor(self):
        self.assertEqual(shift_key_range_if_needed(21, 40), PitchRange(21, 40))
        self.assertEqual(shift_key_range_if_needed(60, 72), PitchRange(60, 72))

    def test_high_end_not_clamped(self):
        self.assertEqual(shift_key_range_if_needed(120, 140), PitchRange(120, 140))

    def test_adjusted_range_widens_then_shifts(self):
        key_range = KeyRange(0, 5)
        adjusted = adjusted_pitch_range(key_range, vectors=[12])
        self.assertEqual(adjusted, PitchRange(21, 33))


if __name__ == '__main__':
    unittest.main()
