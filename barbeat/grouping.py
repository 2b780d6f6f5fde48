"""Time grouping and comma-merge detection for the serializer.

Notes are first sorted and collected into :class:`TimeGroup` objects, one
per bar|beat position. Groups in the same bar that hold the same pitches in
the same performance state are then collected into a :class:`MergeBatch`,
which the serializer writes once with a comma-joined beat list::

    C3 E3 G3 1|1,3     # the same chord on beats 1 and 3

Merging never crosses a bar line.
"""

import dataclasses
import typing

import barbeat.constants.defaults
import barbeat.constants.tolerances
import barbeat.note_event
import barbeat.timebase


@dataclasses.dataclass
class TimeGroup:

	"""
	All notes sharing one bar|beat position, in sort order.
	"""

	bar: int
	beat: float
	notes: typing.List[barbeat.note_event.NoteEvent] = dataclasses.field(default_factory=list)


@dataclasses.dataclass
class MergeBatch:

	"""
	One or more time groups written as a single comma-joined position.

	Every group is in the same bar and matches the first group note for
	note. Groups appear in order of first occurrence.
	"""

	groups: typing.List[TimeGroup] = dataclasses.field(default_factory=list)

	@property
	def bar (self) -> int:
		return self.groups[0].bar

	@property
	def notes (self) -> typing.List[barbeat.note_event.NoteEvent]:
		return self.groups[0].notes


def sort_notes (notes: typing.Iterable[barbeat.note_event.NoteEvent]) -> typing.List[barbeat.note_event.NoteEvent]:

	"""Sort by start time, then pitch. Stable, so equal notes keep their order."""

	return sorted(notes, key=lambda note: (note.start_time, note.pitch))


def note_position (
	note: barbeat.note_event.NoteEvent,
	beats_per_bar: float,
	time_sig_denominator: typing.Optional[int],
) -> barbeat.timebase.Position:

	"""Return the bar|beat position a note starts on."""

	musical_beats = barbeat.timebase.performance_to_musical_beats(note.start_time, time_sig_denominator)

	return barbeat.timebase.musical_beats_to_position(musical_beats, beats_per_bar)


def is_same_position (bar_a: int, beat_a: float, bar_b: int, beat_b: float) -> bool:

	"""True when two positions are the same bar and their beats are within 0.001."""

	return bar_a == bar_b and abs(beat_a - beat_b) <= barbeat.constants.tolerances.POSITION_EPSILON


def group_notes_by_time (
	sorted_notes: typing.Sequence[barbeat.note_event.NoteEvent],
	beats_per_bar: float,
	time_sig_denominator: typing.Optional[int] = None,
) -> typing.List[TimeGroup]:

	"""
	Split time-sorted notes into groups, one per position.

	A new group starts whenever a note's position differs from the open
	group's position.
	"""

	groups: typing.List[TimeGroup] = []
	current: typing.Optional[TimeGroup] = None

	for note in sorted_notes:

		position = note_position(note, beats_per_bar, time_sig_denominator)

		if current is None or not is_same_position(current.bar, current.beat, position.bar, position.beat):
			current = TimeGroup(bar=position.bar, beat=position.beat)
			groups.append(current)

		current.notes.append(note)

	return groups


def rounded_velocity (note: barbeat.note_event.NoteEvent) -> int:
	return int(round(note.velocity))


def rounded_deviation (note: barbeat.note_event.NoteEvent) -> int:
	return int(round(note.velocity_deviation or barbeat.constants.defaults.DEFAULT_VELOCITY_DEVIATION))


def notes_share_state (
	a: barbeat.note_event.NoteEvent,
	b: barbeat.note_event.NoteEvent,
	include_probability: bool = True,
) -> bool:

	"""
	True when two notes would be written with the same state tokens.

	Velocity and deviation compare after rounding; duration and probability
	compare within 0.001.
	"""

	epsilon = barbeat.constants.tolerances.STATE_EPSILON

	if rounded_velocity(a) != rounded_velocity(b):
		return False

	if rounded_deviation(a) != rounded_deviation(b):
		return False

	if abs(a.duration - b.duration) > epsilon:
		return False

	if include_probability and abs(a.probability - b.probability) > epsilon:
		return False

	return True


def groups_match (a: TimeGroup, b: TimeGroup) -> bool:

	"""True when two groups hold the same pitches, in order, with matching state."""

	if len(a.notes) != len(b.notes):
		return False

	for note_a, note_b in zip(a.notes, b.notes):
		if note_a.pitch != note_b.pitch or not notes_share_state(note_a, note_b):
			return False

	return True


def merge_time_groups (groups: typing.Sequence[TimeGroup]) -> typing.List[MergeBatch]:

	"""
	Collect matching groups within each bar into merge batches.

	Each unconsumed group seeds a batch, then every later unconsumed group
	in the same bar that matches it joins the batch, adjacent or not. The
	forward scan stops at the first group in another bar.
	"""

	consumed = [False] * len(groups)
	batches: typing.List[MergeBatch] = []

	for i, seed in enumerate(groups):

		if consumed[i]:
			continue

		consumed[i] = True
		batch = MergeBatch(groups=[seed])

		for j in range(i + 1, len(groups)):

			candidate = groups[j]

			if candidate.bar != seed.bar:
				break

			if not consumed[j] and groups_match(seed, candidate):
				consumed[j] = True
				batch.groups.append(candidate)

		batches.append(batch)

	return batches
