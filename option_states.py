"""
Checkbox option states for interval degrees, chords and inversions.

Simple degrees (prime, fourth, tritone, fifth, octave) carry one flag, the
others a minor and a major flag. The ensure_* guards run after every edit
and put a default back when a whole group ends up unchecked.
"""
from dataclasses import dataclass


@dataclass
class SimpleOption:
    checked: bool = False

    def is_checked(self) -> bool:
        return bool(self.checked)


@dataclass
class MinorMajorOption:
    minor: bool = False
    major: bool = False

    def is_checked(self) -> bool:
        return bool(self.minor or self.major)


def option_from_config(value):
    """Convert a plain config value (bool or {minor, major} mapping) to an option."""
    if isinstance(value, (SimpleOption, MinorMajorOption)):
        return value
    if isinstance(value, dict):
        unknown = set(value) - {'minor', 'major'}
        if unknown:
            raise ValueError(f"Unknown option keys: {sorted(unknown)}")
        return MinorMajorOption(minor=bool(value.get('minor', False)), major=bool(value.get('major', False)))
    return SimpleOption(checked=bool(value))


def option_to_config(option):
    if isinstance(option, MinorMajorOption):
        return {'minor': option.minor, 'major': option.major}
    return option.checked


# ---------------------- Intervals -------------------------------------
# degree -> semitones; MinorMajor degrees map to (minor, major)
INTERVAL_VECTORS = {
    'prime': 0,
    'second': (1, 2),
    'third': (3, 4),
    'fourth': 5,
    'tritone': 6,
    'fifth': 7,
    'sixth': (8, 9),
    'seventh': (10, 11),
    'octave': 12,
}

# UI toggle that checks every degree; carries no interval of its own
ALL_INTERVALS_KEY = 'all'


def interval_vectors(states) -> list:
    vectors = set()
    for degree, option in states.items():
        if degree == ALL_INTERVALS_KEY:
            continue
        if degree not in INTERVAL_VECTORS:
            raise ValueError(f"Unknown interval degree '{degree}'")
        semitones = INTERVAL_VECTORS[degree]
        if isinstance(option, MinorMajorOption):
            if not isinstance(semitones, tuple):
                raise ValueError(f"Interval degree '{degree}' has no minor/major variants")
            if option.minor:
                vectors.add(semitones[0])
            if option.major:
                vectors.add(semitones[1])
        elif option.is_checked():
            if isinstance(semitones, tuple):
                vectors.update(semitones)
            else:
                vectors.add(semitones)
    return sorted(vectors)


# ---------------------- Chords ----------------------------------------
TRIADS = {
    'majorTriad': (4, 7),
    'minorTriad': (3, 7),
    'diminished': (3, 6),
    'augmented': (4, 8),
}

SEVENTH_CHORDS = {
    'majorTriadMinorSeventh': (4, 7, 10),
    'majorTriadMajorSeventh': (4, 7, 11),
    'minorTriadMinorSeventh': (3, 7, 10),
    'minorTriadMajorSeventh': (3, 7, 11),
    'halfDiminished': (3, 6, 10),
    'diminishedSeventh': (3, 6, 9),
}

CHORD_VECTORS = {**TRIADS, **SEVENTH_CHORDS}

INVERSIONS = ('fundamental', 'firstInversion', 'secondInversion', 'thirdInversion')
DEFAULT_INVERSION = 'fundamental'
DEFAULT_CHORD = 'majorTriad'


def checked_keys(states) -> list:
    return [key for key, option in states.items() if option.is_checked()]


def ensure_one_inversion_is_checked(inversion_states):
    if not checked_keys(inversion_states):
        inversion_states[DEFAULT_INVERSION] = SimpleOption(True)
    return inversion_states


def ensure_one_chord_is_checked(triad_states, seventh_chord_states):
    if not checked_keys(triad_states) and not checked_keys(seventh_chord_states):
        triad_states[DEFAULT_CHORD] = SimpleOption(True)
    return triad_states, seventh_chord_states


def ensure_one_interval_is_checked(interval_states):
    checked = [k for k in checked_keys(interval_states) if k != ALL_INTERVALS_KEY]
    if not checked:
        interval_states['second'] = MinorMajorOption(minor=True, major=True)
    return interval_states
