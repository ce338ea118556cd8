"""
Loading of piano exercise content from YAML.

The content document keeps the shape used by the host plugin (camelCase
keys, white-key ranges 0..56, colours, sample type and a list of tests).
Each test is converted to an ExerciseConfig before generation.
"""
import copy
from dataclasses import dataclass, field

import yaml

from piano_keys import WHITE_KEYS_MIDI_VALUES, KeyRange
from option_states import (
    INVERSIONS,
    SEVENTH_CHORDS,
    TRIADS,
    ensure_one_chord_is_checked,
    ensure_one_interval_is_checked,
    ensure_one_inversion_is_checked,
    interval_vectors,
    option_from_config,
    option_to_config,
)

EXERCISE_TYPES = ('interval', 'chord', 'noteSequence')
DEFAULT_NOTE_DURATION_MS = 2000


def parse_yaml(path: str) -> dict:
    with open(path, 'r', encoding='utf8') as f:
        return yaml.safe_load(f) or {}


# ------------------------- Defaults -----------------------------------
def default_custom_note_sequence() -> dict:
    return {
        'abc': 'C',
        'clef': 'treble',
        'noteRange': {'first': 19, 'last': 39},
    }


def default_interval_checkbox_states() -> dict:
    return {
        'all': False,
        'prime': False,
        'second': {'minor': True, 'major': True},
        'third': {'minor': True, 'major': True},
        'fourth': True,
        'tritone': False,
        'fifth': True,
        'sixth': {'minor': True, 'major': True},
        'seventh': {'minor': True, 'major': True},
        'octave': False,
    }


def default_test() -> dict:
    return {
        'exerciseType': '',
        'intervalNoteRange': {'first': 12, 'last': 39},
        'chordNoteRange': {'first': 12, 'last': 39},
        'noteSequenceNoteRange': {'first': 19, 'last': 39},
        'whiteKeysOnly': False,
        'numberOfNotes': 4,
        'clef': 'treble',
        'isCustomNoteSequence': False,
        'customNoteSequences': [default_custom_note_sequence()],
        'intervalAllowsLargeIntervals': False,
        'chordAllowsLargeIntervals': False,
        'noteSequenceAllowsLargeIntervals': False,
        'directionCheckboxStates': {'up': True, 'down': False},
        'triadCheckboxStates': {
            'majorTriad': True,
            'minorTriad': True,
            'diminished': False,
            'augmented': False,
        },
        'seventhChordCheckboxStates': {key: False for key in SEVENTH_CHORDS},
        'inversionCheckboxStates': {
            'fundamental': True,
            'firstInversion': False,
            'secondInversion': False,
            'thirdInversion': False,
        },
        'intervalCheckboxStates': default_interval_checkbox_states(),
        'noteSequenceCheckboxStates': default_interval_checkbox_states(),
    }


def default_content() -> dict:
    return {
        'sourceUrl': '',
        'keyRange': {'first': 12, 'last': 39},
        'midiTrackTitle': '',
        'colors': {
            'blackKey': 'rgb(56, 56, 56)',
            'whiteKey': 'rgb(255, 255, 255)',
            'activeKey': '#82E2FF',
            'correct': '#94F09D',
            'answer': '#F9F793',
            'wrong': '#FF8D8D',
        },
        'sampleType': 'piano',
        'noteDuration': DEFAULT_NOTE_DURATION_MS,
        'exercises_per_test': 1,
        'random_seed': None,
        'midi': {'tempo_bpm': 120, 'velocity': 90},
        'tests': [],
    }


# ------------------------- Typed config -------------------------------
@dataclass
class CustomNoteSequence:
    abc: str
    note_range: KeyRange
    clef: str = 'treble'


@dataclass
class ExerciseConfig:
    exercise_type: str
    interval_note_range: KeyRange
    chord_note_range: KeyRange
    note_sequence_note_range: KeyRange
    white_keys_only: bool = False
    number_of_notes: int = 4
    clef: str = 'treble'
    is_custom_note_sequence: bool = False
    custom_note_sequences: list = field(default_factory=list)
    large_intervals: dict = field(default_factory=dict)
    direction_states: dict = field(default_factory=dict)
    triad_states: dict = field(default_factory=dict)
    seventh_chord_states: dict = field(default_factory=dict)
    inversion_states: dict = field(default_factory=dict)
    interval_states: dict = field(default_factory=dict)
    note_sequence_states: dict = field(default_factory=dict)

    def key_range(self) -> KeyRange:
        if self.exercise_type == 'interval':
            return self.interval_note_range
        if self.exercise_type == 'chord':
            return self.chord_note_range
        return self.note_sequence_note_range

    def vector_states(self) -> dict:
        if self.exercise_type == 'noteSequence':
            return self.note_sequence_states
        return self.interval_states


def _key_range_from_dict(d, label) -> KeyRange:
    try:
        key_range = KeyRange(d['first'], d['last'])
    except (KeyError, TypeError) as e:
        raise ValueError(f"{label} needs 'first' and 'last' white key indices: {e}")
    if key_range.last >= len(WHITE_KEYS_MIDI_VALUES) or key_range.first < 0:
        raise ValueError(f"{label} {key_range.first}..{key_range.last} outside 0..{len(WHITE_KEYS_MIDI_VALUES) - 1}")
    return key_range


def _options_from_dict(d, label) -> dict:
    if not isinstance(d, dict):
        raise ValueError(f"{label} must be a mapping of option name to checkbox state")
    return {key: option_from_config(value) for key, value in d.items()}


def _merge(defaults: dict, overrides: dict) -> dict:
    merged = copy.deepcopy(defaults)
    for key, value in (overrides or {}).items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def exercise_config_from_dict(d: dict) -> ExerciseConfig:
    """Build an ExerciseConfig from a test mapping merged over default_test().

    Option groups are guarded so none of them is ever empty.
    """
    if not isinstance(d, dict):
        raise ValueError(f"Each test must be a mapping, got {type(d).__name__}")
    test = _merge(default_test(), d)
    # a checkbox group given in the config replaces the default group as a whole
    for key, value in (d or {}).items():
        if key.endswith('CheckboxStates') and isinstance(value, dict):
            test[key] = copy.deepcopy(value)
    exercise_type = test['exerciseType']
    if exercise_type not in EXERCISE_TYPES:
        raise ValueError(f"Unknown exerciseType '{exercise_type}', expected one of {', '.join(EXERCISE_TYPES)}")

    custom_sequences = []
    for i, seq in enumerate(test.get('customNoteSequences') or []):
        if isinstance(seq, str):
            seq = {'abc': seq}
        seq = _merge(default_custom_note_sequence(), seq)
        custom_sequences.append(CustomNoteSequence(
            abc=str(seq['abc']),
            note_range=_key_range_from_dict(seq['noteRange'], f"customNoteSequences[{i}].noteRange"),
            clef=seq.get('clef', 'treble'),
        ))

    number_of_notes = int(test['numberOfNotes'])
    if number_of_notes < 1:
        raise ValueError(f"numberOfNotes must be at least 1, got {number_of_notes}")

    directions = test['directionCheckboxStates']
    if not isinstance(directions, dict):
        raise ValueError("directionCheckboxStates must be a mapping with 'up' and 'down' flags")
    config = ExerciseConfig(
        exercise_type=exercise_type,
        interval_note_range=_key_range_from_dict(test['intervalNoteRange'], 'intervalNoteRange'),
        chord_note_range=_key_range_from_dict(test['chordNoteRange'], 'chordNoteRange'),
        note_sequence_note_range=_key_range_from_dict(test['noteSequenceNoteRange'], 'noteSequenceNoteRange'),
        white_keys_only=bool(test['whiteKeysOnly']),
        number_of_notes=number_of_notes,
        clef=test['clef'],
        is_custom_note_sequence=bool(test['isCustomNoteSequence']),
        custom_note_sequences=custom_sequences,
        large_intervals={t: bool(test[f'{t}AllowsLargeIntervals']) for t in EXERCISE_TYPES},
        direction_states={'up': bool(directions.get('up')), 'down': bool(directions.get('down'))},
        triad_states=_options_from_dict(test['triadCheckboxStates'], 'triadCheckboxStates'),
        seventh_chord_states=_options_from_dict(test['seventhChordCheckboxStates'], 'seventhChordCheckboxStates'),
        inversion_states=_options_from_dict(test['inversionCheckboxStates'], 'inversionCheckboxStates'),
        interval_states=_options_from_dict(test['intervalCheckboxStates'], 'intervalCheckboxStates'),
        note_sequence_states=_options_from_dict(test['noteSequenceCheckboxStates'], 'noteSequenceCheckboxStates'),
    )
    for key in config.triad_states:
        if key not in TRIADS:
            raise ValueError(f"Unknown triad '{key}'")
    for key in config.seventh_chord_states:
        if key not in SEVENTH_CHORDS:
            raise ValueError(f"Unknown seventh chord '{key}'")
    for key in config.inversion_states:
        if key not in INVERSIONS:
            raise ValueError(f"Unknown inversion '{key}'")
    # raises on unknown degrees and on minor/major flags for a single-vector degree
    interval_vectors(config.interval_states)
    interval_vectors(config.note_sequence_states)
    if config.is_custom_note_sequence and exercise_type == 'noteSequence' and not custom_sequences:
        raise ValueError("isCustomNoteSequence is set but customNoteSequences is empty")
    return ensure_options_not_empty(config)


def exercise_config_to_dict(config: ExerciseConfig) -> dict:
    def states(d):
        return {key: option_to_config(option) for key, option in d.items()}

    test = {
        'exerciseType': config.exercise_type,
        'intervalNoteRange': config.interval_note_range._asdict(),
        'chordNoteRange': config.chord_note_range._asdict(),
        'noteSequenceNoteRange': config.note_sequence_note_range._asdict(),
        'whiteKeysOnly': config.white_keys_only,
        'numberOfNotes': config.number_of_notes,
        'clef': config.clef,
        'isCustomNoteSequence': config.is_custom_note_sequence,
        'customNoteSequences': [
            {'abc': s.abc, 'clef': s.clef, 'noteRange': s.note_range._asdict()} for s in config.custom_note_sequences
        ],
        'directionCheckboxStates': dict(config.direction_states),
        'triadCheckboxStates': states(config.triad_states),
        'seventhChordCheckboxStates': states(config.seventh_chord_states),
        'inversionCheckboxStates': states(config.inversion_states),
        'intervalCheckboxStates': states(config.interval_states),
        'noteSequenceCheckboxStates': states(config.note_sequence_states),
    }
    for t in EXERCISE_TYPES:
        test[f'{t}AllowsLargeIntervals'] = config.large_intervals.get(t, False)
    return test


def ensure_options_not_empty(config: ExerciseConfig) -> ExerciseConfig:
    ensure_one_inversion_is_checked(config.inversion_states)
    ensure_one_chord_is_checked(config.triad_states, config.seventh_chord_states)
    ensure_one_interval_is_checked(config.interval_states)
    ensure_one_interval_is_checked(config.note_sequence_states)
    return config


def content_from_dict(d: dict) -> dict:
    """Merge a content mapping over default_content() and convert its tests."""
    if not isinstance(d, dict):
        raise ValueError(f"Content must be a mapping, got {type(d).__name__}")
    content = _merge(default_content(), d)
    _key_range_from_dict(content['keyRange'], 'keyRange')
    note_duration = content['noteDuration']
    if not isinstance(note_duration, (int, float)) or note_duration <= 0:
        raise ValueError(f"noteDuration must be a positive number of milliseconds, got {note_duration!r}")
    if not isinstance(content['tests'], list):
        raise ValueError("tests must be a list")
    content['tests'] = [exercise_config_from_dict(t) for t in content['tests']]
    return content


def load_config(path: str) -> dict:
    return content_from_dict(parse_yaml(path))


# ------------------------- Predicates ---------------------------------
def is_interval_exercise(config) -> bool:
    return config.exercise_type == 'interval'


def is_chord_exercise(config) -> bool:
    return config.exercise_type == 'chord'


def is_note_sequence_exercise(config) -> bool:
    return config.exercise_type == 'noteSequence'


def is_random_note_sequence_exercise(config) -> bool:
    return is_note_sequence_exercise(config) and not config.is_custom_note_sequence


def is_custom_note_sequence_exercise(config) -> bool:
    return is_note_sequence_exercise(config) and config.is_custom_note_sequence


def is_interval_or_chord_exercise(config) -> bool:
    return is_interval_exercise(config) or is_chord_exercise(config)


def allows_large_intervals(config) -> bool:
    return config.large_intervals.get(config.exercise_type, False)


def uses_white_keys_only(config) -> bool:
    return is_random_note_sequence_exercise(config) and config.white_keys_only
