"""
Piano keyboard model: white-key indices, MIDI values and note names.

Pitch values are MIDI note numbers (C4 = 60). Key ranges are configured as
white-key indices and converted to MIDI bounds for all arithmetic.
"""
from collections import namedtuple

NOTE_BASE = {"C": 0, "D": 2, "E": 4, "F": 5, "G": 7, "A": 9, "B": 11}
SHARP_NAMES = ['C', 'C#', 'D', 'D#', 'E', 'F', 'F#', 'G', 'G#', 'A', 'A#', 'B']

LOWEST_PIANO_MIDI_VALUE = 21  # A0
HIGHEST_MIDI_VALUE = 127


def midi_to_note_name(midi: int) -> str:
    octave = (midi // 12) - 1
    return f"{SHARP_NAMES[midi % 12]}{octave}"


MIDI_NOTE_NAMES = [midi_to_note_name(m) for m in range(HIGHEST_MIDI_VALUE + 1)]


def _build_white_keys(first=LOWEST_PIANO_MIDI_VALUE, count=57):
    keys = []
    midi = first
    while len(keys) < count:
        if '#' not in SHARP_NAMES[midi % 12]:
            keys.append(midi)
        midi += 1
    return keys


# A0 .. G8, indices 0..56
WHITE_KEYS_MIDI_VALUES = _build_white_keys()
_WHITE_KEY_SET = frozenset(WHITE_KEYS_MIDI_VALUES)


# ------------------------- Conversions --------------------------------
def white_key_to_pitch(index: int) -> int:
    """Return the MIDI value of the white key at ``index``.

    Raises IndexError for indices outside the keyboard table.
    """
    if index < 0 or index >= len(WHITE_KEYS_MIDI_VALUES):
        raise IndexError(f"White key index {index} outside 0..{len(WHITE_KEYS_MIDI_VALUES) - 1}")
    return WHITE_KEYS_MIDI_VALUES[index]


def pitch_to_note_name(midi):
    if midi is None or midi < 0 or midi > HIGHEST_MIDI_VALUE:
        return None
    return MIDI_NOTE_NAMES[midi]


def note_name_to_pitch(name: str) -> int:
    """Convert a note name like ``C4``, ``Db3``, ``F##2`` or ``C-1`` to a MIDI value."""
    name = name.strip()
    if len(name) < 2:
        raise ValueError(f"Invalid note name: {name}")
    letter = name[0].upper()
    if letter not in NOTE_BASE:
        raise ValueError(f"Invalid note letter in '{name}'")
    rest = name[1:]
    accidental = 0
    while rest and rest[0] in ('#', 'b'):
        accidental += 1 if rest[0] == '#' else -1
        rest = rest[1:]
    try:
        octave = int(rest)
    except ValueError:
        raise ValueError(f"Invalid octave in note name '{name}'")
    return 12 + octave * 12 + NOTE_BASE[letter] + accidental


def midi_to_freq(midi: int) -> float:
    return 440.0 * (2 ** ((midi - 69) / 12.0))


def is_white_key(midi) -> bool:
    return midi in _WHITE_KEY_SET


# ------------------------- Ranges -------------------------------------
class PitchRange(namedtuple('PitchRange', ['low', 'high'])):
    """Inclusive MIDI bounds of a playable window."""

    __slots__ = ()

    def bounds(self):
        return self.low, self.high

    @property
    def width(self):
        return self.high - self.low


class KeyRange(namedtuple('KeyRange', ['first', 'last'])):
    """Playable keyboard window expressed in white-key indices."""

    __slots__ = ()

    def __new__(cls, first, last):
        first, last = int(first), int(last)
        if first > last:
            raise ValueError(f"Key range first ({first}) must not exceed last ({last})")
        return super().__new__(cls, first, last)

    def bounds(self):
        return white_key_to_pitch(self.first), white_key_to_pitch(self.last)

    def to_pitch_range(self) -> PitchRange:
        return PitchRange(*self.bounds())


def range_bounds(key_range):
    return key_range.bounds()


def in_range(key_range, midi) -> bool:
    if midi is None:
        return False
    low, high = key_range.bounds()
    return low <= midi <= high


def is_out_of_range(key_range: KeyRange, midi: int) -> bool:
    """Answer validation: True when ``midi`` lies outside the white-key borders of ``key_range``."""
    return midi < WHITE_KEYS_MIDI_VALUES[key_range.first] or midi > WHITE_KEYS_MIDI_VALUES[key_range.last]
