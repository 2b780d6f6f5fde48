"""Drum-mode encoding: one line of hits per pitch.

Percussion parts repeat the same few pitches many times per bar, so drum
mode groups by pitch instead of by time::

    t/4 C1 1|1,3 2|1,3 v90 D1 1|2,4 2|2,4 v80 Gb1 1|1x16

Pitches appear in order of first occurrence. Each pitch's hits are split
into *state runs* (maximal stretches with identical velocity, deviation,
duration and probability), and each run is written as its state prefix,
the pitch name and its positions.

Three or more evenly spaced positions may be written as a repeat,
``bar|beat x count [@step]``, but only when that is strictly shorter than
the explicit list. The ``@step`` suffix is left off when the step equals
the current duration, the usual case for back-to-back hits.
"""

import dataclasses
import enum
import itertools
import typing

import barbeat.constants.tolerances
import barbeat.grouping
import barbeat.note_event
import barbeat.numbers
import barbeat.pitch
import barbeat.state
import barbeat.timebase


class PositionEncoding (enum.Enum):

	"""How a run's positions are written."""

	REPEAT = "repeat"
	EXPLICIT = "explicit"


@dataclasses.dataclass(frozen=True)
class RepeatInfo:

	"""
	An arithmetic sequence of absolute beats: ``count`` hits, ``step`` apart.

	Only describes real repeats: ``count`` is at least 3 and ``step`` positive.
	"""

	count: int
	step: float


def group_notes_by_pitch (sorted_notes: typing.Sequence[barbeat.note_event.NoteEvent]) -> typing.List[typing.List[barbeat.note_event.NoteEvent]]:

	"""Group time-sorted notes by pitch, pitches ordered by first occurrence."""

	groups: typing.Dict[int, typing.List[barbeat.note_event.NoteEvent]] = {}

	for note in sorted_notes:
		groups.setdefault(note.pitch, []).append(note)

	return list(groups.values())


def split_state_runs (notes: typing.Sequence[barbeat.note_event.NoteEvent]) -> typing.List[typing.List[barbeat.note_event.NoteEvent]]:

	"""Split one pitch's notes into maximal runs of consecutive notes sharing state."""

	runs: typing.List[typing.List[barbeat.note_event.NoteEvent]] = []

	for note in notes:

		if runs and barbeat.grouping.notes_share_state(runs[-1][0], note):
			runs[-1].append(note)
		else:
			runs.append([note])

	return runs


def absolute_beat (position: barbeat.timebase.Position, beats_per_bar: float) -> float:

	"""Linear musical-beat offset of a position (0 for ``1|1``)."""

	return (position.bar - 1) * beats_per_bar + (position.beat - 1)


def detect_repeat (absolute_beats: typing.Sequence[float]) -> typing.Optional[RepeatInfo]:

	"""
	Return the repeat described by a list of absolute beats, if there is one.

	Needs at least three beats, a positive first step, and every later step
	within 0.002 of the first.
	"""

	if len(absolute_beats) < 3:
		return None

	step = absolute_beats[1] - absolute_beats[0]

	if step <= 0:
		return None

	for previous, current in zip(absolute_beats[1:], absolute_beats[2:]):
		if abs((current - previous) - step) > barbeat.constants.tolerances.REPEAT_STEP_EPSILON:
			return None

	return RepeatInfo(count=len(absolute_beats), step=step)


def format_explicit_positions (positions: typing.Sequence[barbeat.timebase.Position]) -> str:

	"""Write positions as one ``bar|beat,beat`` token per bar, in order."""

	tokens = []

	for bar, bar_positions in itertools.groupby(positions, key=lambda position: position.bar):
		beats = ",".join(barbeat.numbers.format_position_beat(position.beat) for position in bar_positions)
		tokens.append(f"{bar}|{beats}")

	return " ".join(tokens)


def format_repeat (start: barbeat.timebase.Position, repeat: RepeatInfo, current_duration: float) -> str:

	"""Write a repeat token, leaving off ``@step`` when the step equals the current duration."""

	text = f"{barbeat.timebase.format_position(start)}x{repeat.count}"

	if abs(repeat.step - current_duration) > barbeat.constants.tolerances.STATE_EPSILON:
		text += f"@{barbeat.numbers.format_unsigned(repeat.step)}"

	return text


def choose_position_encoding (repeat_text: typing.Optional[str], explicit_text: str) -> PositionEncoding:

	"""Prefer the repeat only when it exists and is strictly shorter."""

	if repeat_text is not None and len(repeat_text) < len(explicit_text):
		return PositionEncoding.REPEAT

	return PositionEncoding.EXPLICIT


def format_run_positions (
	positions: typing.Sequence[barbeat.timebase.Position],
	beats_per_bar: float,
	current_duration: float,
) -> str:

	"""Write a run's positions, as a repeat when that is shorter."""

	explicit_text = format_explicit_positions(positions)
	repeat = detect_repeat([absolute_beat(position, beats_per_bar) for position in positions])
	repeat_text = format_repeat(positions[0], repeat, current_duration) if repeat else None

	if choose_position_encoding(repeat_text, explicit_text) is PositionEncoding.REPEAT:
		return typing.cast(str, repeat_text)

	return explicit_text


def encode_drum_notes (
	sorted_notes: typing.Sequence[barbeat.note_event.NoteEvent],
	beats_per_bar: float,
	time_sig_denominator: typing.Optional[int] = None,
	state: typing.Optional[barbeat.state.NotationState] = None,
) -> typing.Tuple[typing.List[str], barbeat.state.NotationState]:

	"""
	Encode time-sorted notes pitch by pitch.

	Returns the tokens and the final state.
	"""

	if state is None:
		state = barbeat.state.NotationState()

	tokens: typing.List[str] = []

	for pitch_notes in group_notes_by_pitch(sorted_notes):

		for run in split_state_runs(pitch_notes):

			changed, state = barbeat.state.state_change_tokens(run[0], state, time_sig_denominator)
			tokens.extend(changed)
			tokens.append(barbeat.pitch.midi_to_note_name(run[0].pitch))

			positions = [barbeat.grouping.note_position(note, beats_per_bar, time_sig_denominator) for note in run]
			tokens.append(format_run_positions(positions, beats_per_bar, state.duration))

	return tokens, state
