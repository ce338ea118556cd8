"""
Playback of generated exercises on an external sampler.

A sampler is anything with ``trigger_attack_release(note_names, seconds)``.
Pacing uses an awaitable ``sleep(seconds)`` so tests and offline rendering
can swap in an instant clock.
"""
import asyncio

import mido
from mido import Message, MidiFile, MidiTrack, bpm2tempo

from piano_keys import note_name_to_pitch


class PlaybackToken:
    """Cancellation token for one playback run."""

    def __init__(self):
        self.is_playing = True

    def cancel(self):
        self.is_playing = False

    def finish(self):
        self.is_playing = False


async def play_notes_simultaneously(sampler, note_names, note_duration_ms, token, sleep=asyncio.sleep):
    """Sound all notes at once and wait for the note duration."""
    if not token.is_playing:
        return
    sampler.trigger_attack_release(list(note_names), note_duration_ms / 1000)
    await sleep(note_duration_ms / 1000)
    token.finish()


async def play_notes_successively(sampler, note_names, note_duration_ms, token, start_index=0, sleep=asyncio.sleep):
    """Sound the notes one after another, each for the full note duration.

    The token is checked before every note; once cancelled no further notes
    are triggered.
    """
    for i in range(start_index, len(note_names)):
        if not token.is_playing:
            return
        sampler.trigger_attack_release(note_names[i], note_duration_ms / 1000)
        await sleep(note_duration_ms / 1000)
    token.finish()


class ExercisePlayer:
    """Plays the exercises of one exercise instance, never two at a time."""

    def __init__(self, sampler, note_duration_ms, sleep=asyncio.sleep):
        self.sampler = sampler
        self.note_duration_ms = note_duration_ms
        self.sleep = sleep
        self.token = None

    @property
    def is_playing(self) -> bool:
        return self.token is not None and self.token.is_playing

    def stop(self):
        if self.token is not None:
            self.token.cancel()

    async def play(self, exercise, start_index=0):
        self.stop()
        token = PlaybackToken()
        self.token = token
        names = [n for n in exercise.note_names if n is not None]
        if exercise.is_simultaneous():
            await play_notes_simultaneously(self.sampler, names, self.note_duration_ms, token, sleep=self.sleep)
        else:
            await play_notes_successively(
                self.sampler, names, self.note_duration_ms, token, start_index=start_index, sleep=self.sleep
            )

    async def play_indication(self, exercise):
        """Play only the indication note of ``exercise``."""
        self.stop()
        token = PlaybackToken()
        self.token = token
        await play_notes_successively(
            self.sampler, exercise.note_names[:1], self.note_duration_ms, token, sleep=self.sleep
        )


# ---------------------- Offline rendering -----------------------------
class VirtualClock:
    """Time source that advances instantly when slept on."""

    def __init__(self):
        self.now = 0.0

    async def sleep(self, seconds):
        self.now += seconds
        await asyncio.sleep(0)


class MidiRecordingSampler:
    """Sampler that records triggered notes as MIDI events against a clock.

    Events are (midi, start_seconds, duration_seconds, velocity) tuples and
    can be written to a standard MIDI file with ``save``.
    """

    def __init__(self, clock, velocity=90):
        self.clock = clock
        self.velocity = velocity
        self.events = []

    def trigger_attack_release(self, note_names, duration_seconds):
        if isinstance(note_names, str):
            note_names = [note_names]
        for name in note_names:
            self.events.append((note_name_to_pitch(name), self.clock.now, duration_seconds, self.velocity))

    def to_midi_file(self, tempo_bpm=120, channel=0) -> MidiFile:
        mid = MidiFile()
        track = MidiTrack()
        mid.tracks.append(track)
        track.append(mido.MetaMessage('set_tempo', tempo=bpm2tempo(tempo_bpm)))
        ticks_per_beat = mid.ticks_per_beat

        def secs_to_ticks(s):
            return int(round(s * (ticks_per_beat * tempo_bpm / 60.0)))

        timeline = []
        for note, start, dur, vel in self.events:
            timeline.append((secs_to_ticks(start), 1, Message('note_on', note=note, velocity=vel, channel=channel)))
            timeline.append((secs_to_ticks(start + dur), 0, Message('note_off', note=note, velocity=0, channel=channel)))
        # note_off before note_on at the same tick
        timeline.sort(key=lambda item: (item[0], item[1]))
        last_tick = 0
        for tick, _, msg in timeline:
            track.append(msg.copy(time=tick - last_tick))
            last_tick = tick
        return mid

    def save(self, midi_path, tempo_bpm=120, channel=0):
        self.to_midi_file(tempo_bpm=tempo_bpm, channel=channel).save(midi_path)


async def render_session(exercises, sampler, clock, note_duration_ms, pause_ms=None):
    """Play ``exercises`` back to back on ``sampler`` using ``clock`` for pacing."""
    player = ExercisePlayer(sampler, note_duration_ms, sleep=clock.sleep)
    pause = note_duration_ms if pause_ms is None else pause_ms
    for exercise in exercises:
        await player.play(exercise)
        await clock.sleep(pause / 1000)
    return sampler
