"""
Random interval, chord and note sequence exercises for the piano.

All sampling is uniform (random integer in a range or random element of a
set) and repeated until the drawn note satisfies the range and white-key
constraints. Every loop is bounded; a configuration that cannot be
satisfied raises GenerationError instead of spinning forever.
"""
import random
from dataclasses import dataclass, field
from typing import Optional

from abc_analysis import analyse_abc
from exercise_config import (
    allows_large_intervals,
    is_chord_exercise,
    is_interval_exercise,
    is_note_sequence_exercise,
    uses_white_keys_only,
)
from key_range import adjusted_pitch_range
from option_states import (
    CHORD_VECTORS,
    DEFAULT_INVERSION,
    INVERSIONS,
    checked_keys,
    interval_vectors,
)
from piano_keys import PitchRange, in_range, is_white_key, pitch_to_note_name

MAX_ATTEMPTS = 1000
OCTAVE = 12
# perfect fourth and fifth: the only vectors that get the white-key fallback scan
PERFECT_VECTORS = (5, 7)


class GenerationError(ValueError):
    """Raised when a configuration leaves no valid note to choose."""


@dataclass
class Exercise:
    kind: str
    midi_values: list
    indication_midi_value: int
    key_range: PitchRange
    note_names: list = field(default_factory=list)
    abc_note_names: Optional[list] = None
    chord: Optional[str] = None
    inversion: Optional[str] = None

    def __post_init__(self):
        if not self.note_names:
            self.note_names = [pitch_to_note_name(m) for m in self.midi_values]

    def is_simultaneous(self) -> bool:
        return self.kind in ('interval', 'chord')


# ---------------------- Random helpers --------------------------------
def random_int_between(lo: int, hi: int, rng=None) -> int:
    if rng is None:
        rng = random
    return rng.randint(lo, hi)


def random_array_elem(seq, rng=None):
    if rng is None:
        rng = random
    seq = list(seq)
    if not seq:
        raise GenerationError("Cannot choose from an empty set of options")
    return seq[rng.randint(0, len(seq) - 1)]


def sort_low_to_high(values) -> list:
    return sorted(values)


# ---------------------- Indication notes ------------------------------
def get_indication_midi_value(pitch_range, rng=None) -> int:
    low, high = pitch_range.bounds()
    return random_int_between(low, high, rng)


def _first_white_key_pair(pitch_range, vector):
    low, high = pitch_range.bounds()
    for midi in range(low, high + 1):
        if is_white_key(midi) and in_range(pitch_range, midi + vector) and is_white_key(midi + vector):
            return midi
    raise GenerationError(f"No white key in {low}..{high} has a white key {vector} semitones above it")


def get_indication_midi_value_and_first_vector(pitch_range, vectors, white_keys_only=False, rng=None):
    """Pick a random indication note and the first (unsigned) vector.

    With ``white_keys_only`` a black indication note is nudged onto a white
    neighbour. Perfect fourths and fifths that would then leave the range or
    land on a black key fall back to the first white key that fits.
    """
    low, high = pitch_range.bounds()
    indication = random_int_between(low, high, rng)
    first_vector = random_array_elem(vectors, rng)
    if white_keys_only and not is_white_key(indication):
        indication = indication + 1 if indication + 1 <= high else indication - 1
        if not in_range(pitch_range, indication):
            raise GenerationError(f"Key range {low}..{high} contains no white key")
        target = indication + first_vector
        if (not is_white_key(target) or not in_range(pitch_range, target)) and first_vector in PERFECT_VECTORS:
            indication = _first_white_key_pair(pitch_range, first_vector)
    return indication, first_vector


def adjust_indication_midi_value(pitch_range, vector_with_direction: int) -> int:
    """Move the indication note from the middle of the range until ``vector_with_direction`` fits."""
    low, high = pitch_range.bounds()
    indication = (low + high) // 2
    if vector_with_direction < 0:
        while not in_range(pitch_range, indication + vector_with_direction):
            indication += 1
            if indication > high:
                raise GenerationError(f"Vector {vector_with_direction} does not fit into key range {low}..{high}")
    elif vector_with_direction > 0:
        while not in_range(pitch_range, indication + vector_with_direction):
            indication -= 1
            if indication < low:
                raise GenerationError(f"Vector {vector_with_direction} does not fit into key range {low}..{high}")
    return indication


# ---------------------- Vectors ---------------------------------------
def get_vector(vectors, rng=None) -> int:
    return random_array_elem(vectors, rng)


def get_vector_directions(direction_states) -> tuple:
    """Return (up_only, down_only); both or neither checked means no constraint."""
    up = bool(direction_states.get('up'))
    down = bool(direction_states.get('down'))
    if up and not down:
        return True, False
    if down and not up:
        return False, True
    return False, False


def get_vector_with_direction(vector: int, up_only: bool, down_only: bool, rng=None) -> int:
    if down_only:
        return -vector
    if not up_only:
        return vector * random_array_elem((-1, 1), rng)
    return vector


def octave_equivalents(origin: int, vector: int, pitch_range) -> list:
    """Notes reachable from ``origin`` by ``vector`` plus whole octaves in the same direction."""
    low, high = pitch_range.bounds()
    candidates = []
    if vector < 0:
        while origin + vector >= low:
            candidates.append(origin + vector)
            vector -= OCTAVE
    elif vector > 0:
        while origin + vector <= high:
            candidates.append(origin + vector)
            vector += OCTAVE
    return candidates


# ---------------------- Next notes ------------------------------------
def get_next_note_sequence_midi_value(
    current_midi_value,
    pitch_range,
    vectors,
    first_vector=None,
    step=0,
    white_keys_only=False,
    large_intervals=False,
    rng=None,
):
    """Return the note following ``current_midi_value`` in a random sequence.

    The first step starts from ``first_vector``; afterwards, and whenever a
    vector leaves the range or hits a black key in white-keys-only mode, a new
    random magnitude and sign are drawn. With ``large_intervals`` the result
    is any octave-equivalent of the accepted vector that stays in range.
    """
    def fits(vector):
        midi = current_midi_value + vector
        return in_range(pitch_range, midi) and (not white_keys_only or is_white_key(midi))

    if step == 0 and first_vector is not None:
        vector = first_vector
    else:
        vector = random_array_elem(vectors, rng) * random_array_elem((-1, 1), rng)
    attempts = 0
    while not fits(vector):
        attempts += 1
        if attempts > MAX_ATTEMPTS:
            low, high = pitch_range.bounds()
            raise GenerationError(
                f"No vector of {sorted(vectors)} leads from {current_midi_value} to a valid note in {low}..{high}"
            )
        vector = random_array_elem(vectors, rng) * random_array_elem((-1, 1), rng)

    next_midi_value = current_midi_value + vector
    if large_intervals:
        candidates = octave_equivalents(current_midi_value, vector, pitch_range)
        if candidates:
            next_midi_value = random_array_elem(candidates, rng)
    return next_midi_value


def get_next_chord_midi_value(bass_midi_value, vector, pitch_range, large_intervals=False, rng=None):
    """Place a chord tone ``vector`` semitones above the bass, optionally octaves higher."""
    if not large_intervals:
        return bass_midi_value + vector
    _, high = pitch_range.bounds()
    candidates = []
    current = bass_midi_value
    while current + vector <= high:
        candidates.append(current + vector)
        current += OCTAVE
    if not candidates:
        return bass_midi_value + vector
    return random_array_elem(candidates, rng)


def chord_vectors(chord: str, inversion: str = DEFAULT_INVERSION) -> list:
    """Semitone distances of the upper chord tones above the bass of ``inversion``."""
    if chord not in CHORD_VECTORS:
        raise ValueError(f"Unknown chord '{chord}'")
    if inversion not in INVERSIONS:
        raise ValueError(f"Unknown inversion '{inversion}'")
    tones = [0, *CHORD_VECTORS[chord]]
    k = INVERSIONS.index(inversion)
    if k >= len(tones):
        raise ValueError(f"A chord with {len(tones)} tones has no {inversion}")
    inverted = tones[k:] + [t + OCTAVE for t in tones[:k]]
    return [t - inverted[0] for t in inverted[1:]]


# ---------------------- Exercises -------------------------------------
def generate_interval_exercise(config, rng=None) -> Exercise:
    vectors = interval_vectors(config.vector_states())
    pitch_range = adjusted_pitch_range(config.key_range(), vectors=vectors)
    up_only, down_only = get_vector_directions(config.direction_states)
    vector = get_vector_with_direction(get_vector(vectors, rng), up_only, down_only, rng)

    indication = get_indication_midi_value(pitch_range, rng)
    if not in_range(pitch_range, indication + vector):
        indication = adjust_indication_midi_value(pitch_range, vector)

    second = indication + vector
    if allows_large_intervals(config):
        candidates = octave_equivalents(indication, vector, pitch_range)
        if candidates:
            second = random_array_elem(candidates, rng)
    return Exercise('interval', [indication, second], indication, pitch_range)


def generate_chord_exercise(config, rng=None) -> Exercise:
    chord = random_array_elem(checked_keys(config.triad_states) + checked_keys(config.seventh_chord_states), rng)
    tone_count = len(CHORD_VECTORS[chord]) + 1
    inversions = [inv for inv in checked_keys(config.inversion_states) if INVERSIONS.index(inv) < tone_count]
    # third inversion only exists for seventh chords
    inversion = random_array_elem(inversions, rng) if inversions else DEFAULT_INVERSION
    vectors = chord_vectors(chord, inversion)
    pitch_range = adjusted_pitch_range(config.key_range(), vectors=vectors)

    top = vectors[-1]
    bass = get_indication_midi_value(pitch_range, rng)
    if not in_range(pitch_range, bass + top):
        bass = adjust_indication_midi_value(pitch_range, top)

    large = allows_large_intervals(config)
    upper = [get_next_chord_midi_value(bass, v, pitch_range, large, rng) for v in vectors]
    midi_values = [bass] + sort_low_to_high(upper)
    return Exercise('chord', midi_values, bass, pitch_range, chord=chord, inversion=inversion)


def generate_custom_note_sequence_exercise(config, rng=None) -> Exercise:
    sequence = random_array_elem(config.custom_note_sequences, rng)
    analysis = analyse_abc(sequence.abc)
    if not analysis.is_valid():
        unknown = [t for t, m in zip(analysis.abc_note_names or [], analysis.midi_values or []) if m is None]
        raise GenerationError(f"Custom note sequence '{sequence.abc}' has no playable notes or unknown notes {unknown}")
    pitch_range = adjusted_pitch_range(sequence.note_range, custom_midi_values=analysis.midi_values)
    return Exercise(
        'noteSequence',
        list(analysis.midi_values),
        analysis.midi_values[0],
        pitch_range,
        note_names=list(analysis.midi_note_names),
        abc_note_names=list(analysis.abc_note_names),
    )


def generate_note_sequence_exercise(config, rng=None) -> Exercise:
    if config.is_custom_note_sequence:
        return generate_custom_note_sequence_exercise(config, rng)

    vectors = interval_vectors(config.vector_states())
    pitch_range = adjusted_pitch_range(config.key_range(), vectors=vectors)
    white_keys_only = uses_white_keys_only(config)
    large = allows_large_intervals(config)

    indication, first_vector = get_indication_midi_value_and_first_vector(pitch_range, vectors, white_keys_only, rng)
    midi_values = [indication]
    current = indication
    for step in range(config.number_of_notes - 1):
        current = get_next_note_sequence_midi_value(
            current, pitch_range, vectors, first_vector, step, white_keys_only, large, rng
        )
        midi_values.append(current)
    return Exercise('noteSequence', midi_values, indication, pitch_range)


def generate_exercise(config, rng=None) -> Exercise:
    if is_interval_exercise(config):
        return generate_interval_exercise(config, rng)
    if is_chord_exercise(config):
        return generate_chord_exercise(config, rng)
    if is_note_sequence_exercise(config):
        return generate_note_sequence_exercise(config, rng)
    raise ValueError(f"Unknown exercise type '{config.exercise_type}'")


def generate_exercises(configs, count=1, rng=None) -> list:
    """Generate ``count`` exercises for every config, in config order."""
    exercises = []
    for config in configs:
        for _ in range(count):
            exercises.append(generate_exercise(config, rng))
    return exercises


# ---------------------- Answers ---------------------------------------
def is_answer_complete(exercise: Exercise, answer_midi_values) -> bool:
    # the indication note is given, the answer covers the rest
    return len(answer_midi_values) >= len(exercise.midi_values) - 1


def is_answer_correct(exercise: Exercise, answer_midi_values) -> bool:
    expected = exercise.midi_values[1:]
    if exercise.kind == 'chord':
        return sort_low_to_high(answer_midi_values) == sort_low_to_high(expected)
    return list(answer_midi_values) == list(expected)
