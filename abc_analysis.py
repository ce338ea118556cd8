"""
Analysis of compact ABC note strings as typed into custom note sequences.

The notation is a stripped-down ABC dialect:
  ^ / _       sharp / flat (may be doubled)
  C..B        notes of the octave starting at middle C (C4)
  c..b        notes of the octave above (C5)
  ' / ,       raise / lower by one octave per mark

Everything else (bar lines, spaces, durations) is filtered out before the
string is split into notes.
"""
from collections import namedtuple

from piano_keys import HIGHEST_MIDI_VALUE, note_name_to_pitch

VALID_ABC_CHARS = frozenset("^_cdefgabCDEFGAB',")
# z and x are ABC rests; the filter removes them, the tokenizer still treats them as letters
NOTE_NAME_LETTERS = frozenset("cdefgabzxCDEFGAB")
NOTE_START_CHARS = NOTE_NAME_LETTERS | {'^', '_'}

ABC_ACCIDENTALS = (('', ''), ('^', '#'), ('_', 'b'), ('^^', '##'), ('__', 'bb'))
MAX_OCTAVE_MARKS = 5


def _build_note_conversion_map():
    table = {}
    for letter in 'CDEFGAB':
        for abc_letter, base_octave in ((letter, 4), (letter.lower(), 5)):
            for abc_acc, name_acc in ABC_ACCIDENTALS:
                for count in range(MAX_OCTAVE_MARKS + 1):
                    for mark, step in (("'", 1), (",", -1)):
                        if count == 0 and mark == ',':
                            continue
                        name = f"{letter}{name_acc}{base_octave + step * count}"
                        if 0 <= note_name_to_pitch(name) <= HIGHEST_MIDI_VALUE:
                            table[abc_acc + abc_letter + mark * count] = name
    return table


# ABC note -> note name, e.g. "^C," -> "C#3", "_e" -> "Eb5"
NOTE_CONVERSION_MAP = _build_note_conversion_map()


class AbcAnalysis(namedtuple('AbcAnalysis', ['abc_note_names', 'midi_note_names', 'midi_values', 'filtered_abc'])):
    __slots__ = ()

    def is_empty(self):
        return self.filtered_abc is None

    def is_valid(self):
        """True when there is at least one note and every note resolved to a MIDI value."""
        return bool(self.midi_values) and None not in self.midi_values

# Returned for empty input, distinct from input that parsed to zero notes
EMPTY_ANALYSIS = AbcAnalysis(None, None, None, None)


def filter_abc_string(abc_str: str) -> str:
    return ''.join(ch for ch in abc_str if ch in VALID_ABC_CHARS)


def _find_first(s, chars, start):
    for i in range(start, len(s)):
        if s[i] in chars:
            return i
    return None


def tokenize_abc(filtered_abc: str):
    """Split a filtered ABC string into one token per note.

    A token runs from its first accidental or letter up to the next
    accidental or letter found after the token's own letter, so "^C,_D"
    splits into "^C," and "_D". When no further note start follows, the
    remainder of the string is the last token.
    """
    tokens = []
    rest = filtered_abc
    while rest:
        start = _find_first(rest, NOTE_START_CHARS, 0)
        if start is None:
            tokens.append(rest)
            break
        letter = _find_first(rest, NOTE_NAME_LETTERS, start)
        if letter is None:
            tokens.append(rest[start:])
            break
        next_start = _find_first(rest, NOTE_START_CHARS, letter + 1)
        if next_start is None:
            tokens.append(rest[start:])
            break
        tokens.append(rest[start:next_start])
        rest = rest[next_start:]
    return tokens


def abc_note_to_note_name(abc_note: str):
    return NOTE_CONVERSION_MAP.get(abc_note)


def analyse_abc(abc_str: str) -> AbcAnalysis:
    """Parse an ABC note string into parallel note name and MIDI value lists.

    Unknown notes produce None entries instead of raising; callers skip or
    reject them. Empty input returns EMPTY_ANALYSIS.
    """
    if not abc_str:
        return EMPTY_ANALYSIS
    filtered = filter_abc_string(abc_str)
    abc_note_names = tokenize_abc(filtered)
    midi_note_names = [abc_note_to_note_name(t) for t in abc_note_names]
    midi_values = [note_name_to_pitch(n) if n is not None else None for n in midi_note_names]
    return AbcAnalysis(abc_note_names, midi_note_names, midi_values, filtered)


def count_abc_notes(abc_str: str) -> int:
    return sum(1 for ch in abc_str if ch in 'cdefgabCDEFGAB')
