#!/usr/bin/env python3
"""
Piano Ear Trainer – random interval, chord and note sequence exercises (CLI)

Usage:
  python piano_trainer.py config.yaml
  python piano_trainer.py config.yaml --count 5 --midi session.mid
  python piano_trainer.py config.yaml --parse "^C, D E"

Reads a YAML content document (see config/exercises.yaml), generates the
requested number of exercises per test and prints them as a text log.
With --midi the session is played through the playback scheduler onto a
recording sampler and saved as a MIDI file.

Dependencies: pyyaml, mido
"""
import argparse
import asyncio
import random
import sys

import yaml

from abc_analysis import analyse_abc, count_abc_notes
from exercise_config import load_config
from exercise_generator import GenerationError, generate_exercises
from piano_keys import midi_to_freq
from playback import MidiRecordingSampler, VirtualClock, render_session


# ------------------------- Utilities ---------------------------------
def print_red(text):
    """Print text in red color using ANSI escape codes."""
    RED = '\033[91m'
    RESET = '\033[0m'
    print(f"{RED}{text}{RESET}")


KIND_LABELS = {'interval': 'INTERVAL', 'chord': 'CHORD', 'noteSequence': 'SEQUENCE'}


def format_exercise(index: int, exercise) -> str:
    """One text log line, e.g. ``0001: INTERVAL  C4 (60) -> E4 (64)``."""
    label = KIND_LABELS.get(exercise.kind, 'UNKNOWN')
    notes = [f"{name} ({midi})" for name, midi in zip(exercise.note_names, exercise.midi_values)]
    if exercise.kind == 'interval':
        body = ' -> '.join(notes)
    elif exercise.kind == 'chord':
        body = ' '.join(notes) + f"  [{exercise.chord}, {exercise.inversion}]"
    else:
        body = ' '.join(notes)
    return f"{index:04d}: {label:<9} {body}"


def write_text_log(path: str, exercises, title: str = 'session'):
    with open(path, 'w', encoding='utf8') as f:
        f.write("Piano Ear Trainer Log\n")
        f.write(f"Title: {title}\n")
        f.write(f"Generated: {len(exercises)} exercises\n\n")
        for i, ex in enumerate(exercises, start=1):
            f.write(format_exercise(i, ex) + "\n")
    print(f'Wrote text log to {path}')


def print_abc_analysis(abc_str: str):
    analysis = analyse_abc(abc_str)
    if analysis.is_empty():
        print('Empty notation')
        return True
    print(f"Filtered: {analysis.filtered_abc}  ({count_abc_notes(analysis.filtered_abc)} notes)")
    ok = True
    for token, name, midi in zip(analysis.abc_note_names, analysis.midi_note_names, analysis.midi_values):
        if midi is None:
            print_red(f"  {token:<8} unknown note")
            ok = False
        else:
            print(f"  {token:<8} {name:<5} {midi:>3}  {midi_to_freq(midi):8.2f} Hz")
    return ok


def build_session(content: dict, count=None, seed=None):
    if seed is None:
        seed = content.get('random_seed')
    rng = random.Random(seed)
    if count is None:
        count = int(content.get('exercises_per_test', 1))
    return generate_exercises(content['tests'], count=count, rng=rng)


def render_midi(exercises, content: dict, midi_path: str):
    midi_cfg = content.get('midi', {}) or {}
    clock = VirtualClock()
    sampler = MidiRecordingSampler(clock, velocity=int(midi_cfg.get('velocity', 90)))
    asyncio.run(render_session(exercises, sampler, clock, content['noteDuration']))
    sampler.save(midi_path, tempo_bpm=midi_cfg.get('tempo_bpm', 120))
    print(f'Wrote session MIDI to {midi_path}')


# ---------------------- Main program ---------------------------------
def main(argv=None):
    parser = argparse.ArgumentParser(description='Generate piano ear training exercises.')
    parser.add_argument('config', nargs='?', help='YAML content document')
    parser.add_argument('--count', '-n', type=int, help='Exercises per test (overrides config)')
    parser.add_argument('--seed', type=int, help='Random seed (overrides config)')
    parser.add_argument('--midi', help='Render the session to this MIDI file')
    parser.add_argument('--text-file', help='Also write the text log to this path')
    parser.add_argument('--parse', metavar='ABC', help='Analyse an ABC note string and exit')
    args = parser.parse_args(argv)

    if args.parse is not None:
        return 0 if print_abc_analysis(args.parse) else 1
    if not args.config:
        parser.error('config is required unless --parse is given')

    try:
        content = load_config(args.config)
    except (OSError, ValueError, yaml.YAMLError) as e:
        print_red(f"Failed to load config '{args.config}': {e}")
        return 1
    if not content['tests']:
        print_red('No tests configured; nothing to generate.')
        return 1
    if args.count is not None and args.count < 1:
        print_red('--count must be at least 1')
        return 1

    try:
        exercises = build_session(content, count=args.count, seed=args.seed)
    except GenerationError as e:
        print_red(f"Could not generate exercises: {e}")
        return 1

    for i, ex in enumerate(exercises, start=1):
        print(format_exercise(i, ex))

    title = content.get('midiTrackTitle') or 'session'
    if args.text_file:
        write_text_log(args.text_file, exercises, title=title)
    if args.midi:
        try:
            render_midi(exercises, content, args.midi)
        except OSError as e:
            print_red(f"Failed to write MIDI file '{args.midi}': {e}")
            return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
