"""Standard MIDI file import and export for note events.

Lets the codec run against real clips without a host: read a ``.mid``
file into :class:`barbeat.note_event.NoteEvent` objects, or write notes
back out. Times are converted between ticks and quarter-note beats using
the file's resolution.

SMF has no place for velocity deviation or trigger probability, so those
take their defaults on import and are dropped on export.
"""

import collections
import dataclasses
import logging
import typing

import mido

import barbeat.constants.defaults
import barbeat.grouping
import barbeat.note_event


logger = logging.getLogger(__name__)

DEFAULT_TICKS_PER_BEAT = 480


@dataclasses.dataclass
class MidiClip:

	"""
	Notes read from a MIDI file, with its first time signature if it had one.
	"""

	notes: typing.List[barbeat.note_event.NoteEvent]
	time_sig_numerator: typing.Optional[int] = None
	time_sig_denominator: typing.Optional[int] = None
	ticks_per_beat: int = DEFAULT_TICKS_PER_BEAT


def read_midi_file (path: str) -> MidiClip:

	"""
	Read every note from every track of a MIDI file.

	Note-ons and note-offs are paired per (channel, pitch) in first-in,
	first-out order. A note-on with velocity 0 counts as a note-off. Notes
	still sounding at the end of a track are dropped with a warning.
	"""

	mid = mido.MidiFile(path)
	ticks_per_beat = mid.ticks_per_beat

	notes: typing.List[barbeat.note_event.NoteEvent] = []
	numerator: typing.Optional[int] = None
	denominator: typing.Optional[int] = None

	for track in mid.tracks:

		tick = 0
		sounding: typing.Dict[typing.Tuple[int, int], typing.Deque[typing.Tuple[int, int]]] = collections.defaultdict(collections.deque)

		for message in track:

			tick += message.time

			if message.type == "time_signature" and numerator is None:
				numerator, denominator = message.numerator, message.denominator

			elif message.type == "note_on" and message.velocity > 0:
				sounding[(message.channel, message.note)].append((tick, message.velocity))

			elif message.type in ("note_on", "note_off"):
				queue = sounding.get((message.channel, message.note))

				if not queue:
					continue

				start_tick, velocity = queue.popleft()
				notes.append(barbeat.note_event.NoteEvent(
					pitch = message.note,
					start_time = start_tick / ticks_per_beat,
					duration = (tick - start_tick) / ticks_per_beat,
					velocity = velocity,
				))

		unterminated = sum(len(queue) for queue in sounding.values())

		if unterminated:
			logger.warning(f"Dropped {unterminated} note(s) with no note-off in track '{track.name}'")

	logger.info(f"Read {len(notes)} notes from {path}")

	return MidiClip(
		notes = barbeat.grouping.sort_notes(notes),
		time_sig_numerator = numerator,
		time_sig_denominator = denominator,
		ticks_per_beat = ticks_per_beat,
	)


def write_midi_file (
	notes: typing.Iterable[barbeat.note_event.NoteEvent],
	path: str,
	bpm: float = 120,
	time_sig_numerator: int = 4,
	time_sig_denominator: int = 4,
	channel: int = 0,
	ticks_per_beat: int = DEFAULT_TICKS_PER_BEAT,
) -> None:

	"""
	Write notes to a single-track type 1 MIDI file.

	At a shared tick, note-offs are written before note-ons so back-to-back
	notes of the same pitch do not cut each other short.
	"""

	# (tick, order, message): order 0 sorts note-offs first
	events: typing.List[typing.Tuple[int, int, mido.Message]] = []

	for note in notes:

		start_tick = int(round(note.start_time * ticks_per_beat))
		end_tick = int(round((note.start_time + note.duration) * ticks_per_beat))
		velocity = max(1, min(barbeat.constants.defaults.MAX_VELOCITY, int(round(note.velocity))))

		events.append((start_tick, 1, mido.Message("note_on", channel=channel, note=note.pitch, velocity=velocity)))
		events.append((end_tick, 0, mido.Message("note_off", channel=channel, note=note.pitch, velocity=0)))

	events.sort(key=lambda event: (event[0], event[1]))

	mid = mido.MidiFile(type=1, ticks_per_beat=ticks_per_beat)
	track = mido.MidiTrack()
	mid.tracks.append(track)

	track.append(mido.MetaMessage("set_tempo", tempo=mido.bpm2tempo(bpm), time=0))
	track.append(mido.MetaMessage("time_signature", numerator=time_sig_numerator, denominator=time_sig_denominator, time=0))

	last_tick = 0

	for tick, _, message in events:
		message.time = tick - last_tick
		track.append(message)
		last_tick = tick

	track.append(mido.MetaMessage("end_of_track", time=0))

	mid.save(path)
	logger.info(f"Saved {len(events) // 2} notes to {path}")
