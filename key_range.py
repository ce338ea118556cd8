"""Widening and shifting of configured key ranges so exercises always fit."""
from piano_keys import LOWEST_PIANO_MIDI_VALUE, PitchRange


def widen_key_range_if_needed(key_range, vectors=None, custom_midi_values=None) -> PitchRange:
    """Return MIDI bounds of ``key_range`` widened just enough for the exercise.

    With ``custom_midi_values`` the bounds grow to cover every note of the
    custom sequence (unresolved None entries are ignored). Otherwise each
    vector must be playable from the opposite border. Never shrinks.
    """
    low, high = key_range.bounds()
    if custom_midi_values is not None:
        for midi in custom_midi_values:
            if midi is None:
                continue
            if midi < low:
                low = midi
            if midi > high:
                high = midi
    else:
        for vector in vectors or ():
            vector = abs(vector)
            if low > high - vector:
                low = high - vector
            if high < low + vector:
                high = low + vector
    return PitchRange(low, high)


def shift_key_range_if_needed(low: int, high: int) -> PitchRange:
    """Move the window up to the lowest piano key, keeping its width.

    Only the low end is clamped; the high end may exceed the top of the
    keyboard for very wide windows.
    """
    width = high - low
    if low < LOWEST_PIANO_MIDI_VALUE:
        low = LOWEST_PIANO_MIDI_VALUE
        high = LOWEST_PIANO_MIDI_VALUE + width
    return PitchRange(low, high)


def adjusted_pitch_range(key_range, vectors=None, custom_midi_values=None) -> PitchRange:
    widened = widen_key_range_if_needed(key_range, vectors=vectors, custom_midi_values=custom_midi_values)
    return shift_key_range_if_needed(*widened)
