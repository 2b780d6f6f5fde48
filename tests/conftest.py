import typing

import pytest

import barbeat.note_event


def make_note (
	pitch: int = 60,
	start_time: float = 0.0,
	duration: float = 1.0,
	velocity: float = 100,
	velocity_deviation: float = 0,
	probability: float = 1.0,
) -> barbeat.note_event.NoteEvent:

	"""Build a note with codec defaults for everything not given."""

	return barbeat.note_event.NoteEvent(
		pitch = pitch,
		start_time = start_time,
		duration = duration,
		velocity = velocity,
		velocity_deviation = velocity_deviation,
		probability = probability,
	)


def sort_notes (notes: typing.Iterable[barbeat.note_event.NoteEvent]) -> typing.List[barbeat.note_event.NoteEvent]:

	"""Sort by start time (rounded to absorb float drift), then pitch."""

	return sorted(notes, key=lambda note: (round(note.start_time, 6), note.pitch))


def assert_notes_match (
	actual: typing.Sequence[barbeat.note_event.NoteEvent],
	expected: typing.Sequence[barbeat.note_event.NoteEvent],
) -> None:

	"""Assert two note lists are set-equal within the codec's round-trip tolerances."""

	actual_sorted = sort_notes(actual)
	expected_sorted = sort_notes(expected)

	assert len(actual_sorted) == len(expected_sorted)

	for got, want in zip(actual_sorted, expected_sorted):
		assert got.pitch == want.pitch
		assert got.start_time == pytest.approx(want.start_time, abs=1e-8)
		assert got.duration == pytest.approx(want.duration, abs=1e-8)
		assert got.velocity == pytest.approx(want.velocity, abs=1e-8)
		assert abs(got.probability - want.probability) < 1e-10
		assert abs(got.velocity_deviation - want.velocity_deviation) < 1e-10


def drum_pattern () -> typing.List[barbeat.note_event.NoteEvent]:

	"""Two bars of kick, snare and eighth-note hats with an accented offbeat."""

	notes = []

	for bar in range(2):

		offset = bar * 4

		notes.append(make_note(36, offset + 0, 0.25))
		notes.append(make_note(36, offset + 2, 0.25))
		notes.append(make_note(38, offset + 1, 0.25, velocity=90))
		notes.append(make_note(38, offset + 3, 0.25, velocity=90))

		for step in range(8):
			velocity = 100 if step == 7 else 80
			notes.append(make_note(42, offset + step * 0.5, 0.25, velocity=velocity))

	return notes


@pytest.fixture
def drum_notes () -> typing.List[barbeat.note_event.NoteEvent]:

	"""A fresh copy of the two-bar drum pattern."""

	return drum_pattern()
