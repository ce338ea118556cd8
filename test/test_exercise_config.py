#!/usr/bin/env python3
"""Tests for loading exercise content from YAML."""

import os
import sys
import tempfile
import unittest

import yaml

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import exercise_config as cfgmod
from option_states import MinorMajorOption, SimpleOption, interval_vectors
from piano_keys import KeyRange


class TestExerciseConfigFromDict(unittest.TestCase):

    def test_defaults_applied(self):
        config = cfgmod.exercise_config_from_dict({'exerciseType': 'interval'})
        self.assertEqual(config.interval_note_range, KeyRange(12, 39))
        self.assertEqual(config.note_sequence_note_range, KeyRange(19, 39))
        self.assertEqual(config.number_of_notes, 4)
        self.assertEqual(config.direction_states, {'up': True, 'down': False})
        self.assertEqual(config.interval_states['second'], MinorMajorOption(True, True))
        self.assertEqual(config.interval_states['fifth'], SimpleOption(True))
        self.assertEqual(len(config.custom_note_sequences), 1)
        self.assertEqual(config.custom_note_sequences[0].abc, 'C')

    def test_unknown_exercise_type(self):
        with self.assertRaises(ValueError):
            cfgmod.exercise_config_from_dict({'exerciseType': 'melody'})
        with self.assertRaises(ValueError):
            cfgmod.exercise_config_from_dict({})

    def test_checkbox_group_replaces_defaults(self):
        config = cfgmod.exercise_config_from_dict({
            'exerciseType': 'interval',
            'intervalCheckboxStates': {'fifth': True},
        })
        self.assertEqual(interval_vectors(config.interval_states), [7])

    def test_empty_groups_are_guarded(self):
        config = cfgmod.exercise_config_from_dict({
            'exerciseType': 'chord',
            'triadCheckboxStates': {'majorTriad': False, 'minorTriad': False},
            'seventhChordCheckboxStates': {},
            'inversionCheckboxStates': {'fundamental': False, 'firstInversion': False},
            'intervalCheckboxStates': {'fifth': False},
        })
        self.assertEqual(config.triad_states['majorTriad'], SimpleOption(True))
        self.assertEqual(config.inversion_states['fundamental'], SimpleOption(True))
        self.assertEqual(config.inversion_states['firstInversion'], SimpleOption(False))
        self.assertEqual(interval_vectors(config.interval_states), [1, 2])

    def test_key_range_validation(self):
        with self.assertRaises(ValueError):
            cfgmod.exercise_config_from_dict({'exerciseType': 'interval', 'intervalNoteRange': {'first': 0, 'last': 57}})
        with self.assertRaises(ValueError):
            cfgmod.exercise_config_from_dict({'exerciseType': 'interval', 'intervalNoteRange': {'first': 30, 'last': 20}})
        with self.assertRaises(ValueError):
            cfgmod.exercise_config_from_dict({'exerciseType': 'interval', 'intervalNoteRange': {'first': 3}})

    def test_interval_groups_validated_on_load(self):
        with self.assertRaises(ValueError):
            cfgmod.exercise_config_from_dict({'exerciseType': 'interval', 'intervalCheckboxStates': {'ninth': True}})
        with self.assertRaises(ValueError):
            cfgmod.exercise_config_from_dict({'exerciseType': 'noteSequence', 'noteSequenceCheckboxStates': {'fifth': {'minor': True}}})

    def test_direction_states_must_be_mapping(self):
        with self.assertRaises(ValueError):
            cfgmod.exercise_config_from_dict({'exerciseType': 'interval', 'directionCheckboxStates': None})
        with self.assertRaises(ValueError):
            cfgmod.exercise_config_from_dict({'exerciseType': 'interval', 'directionCheckboxStates': ['up']})

    def test_vector_states_follow_exercise_type(self):
        d = {'intervalCheckboxStates': {'fifth': True}, 'noteSequenceCheckboxStates': {'octave': True}}
        self.assertEqual(interval_vectors(cfgmod.exercise_config_from_dict({**d, 'exerciseType': 'interval'}).vector_states()), [7])
        self.assertEqual(interval_vectors(cfgmod.exercise_config_from_dict({**d, 'exerciseType': 'noteSequence'}).vector_states()), [12])

    def test_unknown_chord_or_inversion(self):
        with self.assertRaises(ValueError):
            cfgmod.exercise_config_from_dict({'exerciseType': 'chord', 'triadCheckboxStates': {'sus4': True}})
        with self.assertRaises(ValueError):
            cfgmod.exercise_config_from_dict({'exerciseType': 'chord', 'inversionCheckboxStates': {'fourthInversion': True}})

    def test_custom_sequences_as_strings(self):
        config = cfgmod.exercise_config_from_dict({
            'exerciseType': 'noteSequence',
            'isCustomNoteSequence': True,
            'customNoteSequences': ['C D E', {'abc': 'G A', 'noteRange': {'first': 20, 'last': 30}}],
        })
        self.assertEqual([s.abc for s in config.custom_note_sequences], ['C D E', 'G A'])
        self.assertEqual(config.custom_note_sequences[0].note_range, KeyRange(19, 39))
        self.assertEqual(config.custom_note_sequences[1].note_range, KeyRange(20, 30))

    def test_custom_sequence_flag_without_sequences(self):
        with self.assertRaises(ValueError):
            cfgmod.exercise_config_from_dict({
                'exerciseType': 'noteSequence',
                'isCustomNoteSequence': True,
                'customNoteSequences': [],
            })

    def test_number_of_notes_validated(self):
        with self.assertRaises(ValueError):
            cfgmod.exercise_config_from_dict({'exerciseType': 'noteSequence', 'numberOfNotes': 0})

    def test_key_range_per_exercise_type(self):
        d = {
            'intervalNoteRange': {'first': 1, 'last': 20},
            'chordNoteRange': {'first': 2, 'last': 21},
            'noteSequenceNoteRange': {'first': 3, 'last': 22},
        }
        for exercise_type, expected in (('interval', KeyRange(1, 20)), ('chord', KeyRange(2, 21)), ('noteSequence', KeyRange(3, 22))):
            config = cfgmod.exercise_config_from_dict({**d, 'exerciseType': exercise_type})
            self.assertEqual(config.key_range(), expected)

    def test_round_trip_to_dict(self):
        config = cfgmod.exercise_config_from_dict({'exerciseType': 'chord', 'chordAllowsLargeIntervals': True})
        again = cfgmod.exercise_config_from_dict(cfgmod.exercise_config_to_dict(config))
        self.assertEqual(again, config)


class TestPredicates(unittest.TestCase):

    def _config(self, **kw):
        return cfgmod.exercise_config_from_dict(kw)

    def test_exercise_kind_predicates(self):
        interval = self._config(exerciseType='interval')
        chord = self._config(exerciseType='chord')
        random_seq = self._config(exerciseType='noteSequence')
        custom_seq = self._config(exerciseType='noteSequence', isCustomNoteSequence=True)
        self.assertTrue(cfgmod.is_interval_exercise(interval))
        self.assertTrue(cfgmod.is_chord_exercise(chord))
        self.assertTrue(cfgmod.is_interval_or_chord_exercise(chord))
        self.assertFalse(cfgmod.is_interval_or_chord_exercise(random_seq))
        self.assertTrue(cfgmod.is_random_note_sequence_exercise(random_seq))
        self.assertFalse(cfgmod.is_random_note_sequence_exercise(custom_seq))
        self.assertTrue(cfgmod.is_custom_note_sequence_exercise(custom_seq))

    def test_allows_large_intervals_follows_exercise_type(self):
        config = self._config(exerciseType='chord', intervalAllowsLargeIntervals=True)
        self.assertFalse(cfgmod.allows_large_intervals(config))
        config = self._config(exerciseType='chord', chordAllowsLargeIntervals=True)
        self.assertTrue(cfgmod.allows_large_intervals(config))

    def test_white_keys_only_for_random_sequences(self):
        self.assertTrue(cfgmod.uses_white_keys_only(self._config(exerciseType='noteSequence', whiteKeysOnly=True)))
        self.assertFalse(cfgmod.uses_white_keys_only(self._config(exerciseType='interval', whiteKeysOnly=True)))
        self.assertFalse(cfgmod.uses_white_keys_only(
            self._config(exerciseType='noteSequence', whiteKeysOnly=True, isCustomNoteSequence=True)
        ))


class TestLoadConfig(unittest.TestCase):

    def _write_yaml(self, path, data):
        with open(path, 'w', encoding='utf-8') as f:
            yaml.safe_dump(data, f, sort_keys=False)

    def test_load_config(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, 'cfg.yaml')
            self._write_yaml(path, {
                'noteDuration': 500,
                'tests': [{'exerciseType': 'interval'}, {'exerciseType': 'chord'}],
            })
            content = cfgmod.load_config(path)
        self.assertEqual(content['noteDuration'], 500)
        self.assertEqual(content['sampleType'], 'piano')
        self.assertEqual(content['colors']['correct'], '#94F09D')
        self.assertEqual([t.exercise_type for t in content['tests']], ['interval', 'chord'])

    def test_load_empty_file_gives_defaults(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, 'cfg.yaml')
            open(path, 'w').close()
            content = cfgmod.load_config(path)
        self.assertEqual(content['tests'], [])
        self.assertEqual(content['keyRange'], {'first': 12, 'last': 39})

    def test_invalid_note_duration(self):
        with self.assertRaises(ValueError):
            cfgmod.content_from_dict({'noteDuration': 0})
        with self.assertRaises(ValueError):
            cfgmod.content_from_dict({'noteDuration': 'slow'})

    def test_content_must_be_mapping(self):
        with self.assertRaises(ValueError):
            cfgmod.content_from_dict(['interval'])

    def test_parse_yaml_invalid_path(self):
        with self.assertRaises(FileNotFoundError):
            cfgmod.parse_yaml('/nonexistent/path.yaml')

    def test_example_config_loads(self):
        path = os.path.join(os.path.dirname(os.path.abspath(__file__)), '..', 'config', 'exercises.yaml')
        content = cfgmod.load_config(path)
        self.assertEqual(len(content['tests']), 4)


if __name__ == '__main__':
    unittest.main()
