import barbeat.grouping
import conftest


def _group (notes, beats_per_bar=4, time_sig_denominator=None):

	"""Sort, group and merge in one step."""

	sorted_notes = barbeat.grouping.sort_notes(notes)
	groups = barbeat.grouping.group_notes_by_time(sorted_notes, beats_per_bar, time_sig_denominator)

	return groups, barbeat.grouping.merge_time_groups(groups)


# ── Sorting and time groups ──────────────────────────────────────────


def test_sort_by_time_then_pitch () -> None:

	notes = [conftest.make_note(64, 1), conftest.make_note(67, 0), conftest.make_note(60, 0)]

	assert [note.pitch for note in barbeat.grouping.sort_notes(notes)] == [60, 67, 64]


def test_group_notes_by_time () -> None:

	"""One group per position, chords stay together."""

	groups, _ = _group([
		conftest.make_note(60, 0),
		conftest.make_note(64, 0),
		conftest.make_note(62, 1),
		conftest.make_note(65, 4),
	])

	assert [(group.bar, group.beat) for group in groups] == [(1, 1), (1, 2), (2, 1)]
	assert [note.pitch for note in groups[0].notes] == [60, 64]


def test_near_positions_share_a_group () -> None:

	"""Onsets within 0.001 of each other are one position."""

	groups, _ = _group([conftest.make_note(60, 0), conftest.make_note(64, 0.0005)])

	assert len(groups) == 1


def test_groups_in_compound_meter () -> None:

	"""In 6/8 a dotted quarter (1.5 quarter notes) in is beat 4."""

	groups, _ = _group([conftest.make_note(60, 1.5), conftest.make_note(60, 3)], 6, 8)

	assert [(group.bar, group.beat) for group in groups] == [(1, 4), (2, 1)]


# ── State comparison ─────────────────────────────────────────────────


def test_notes_share_state () -> None:

	a = conftest.make_note(60, 0, velocity=80)

	assert barbeat.grouping.notes_share_state(a, conftest.make_note(62, 1, velocity=80.4))
	assert barbeat.grouping.notes_share_state(a, conftest.make_note(62, 1, velocity=80, duration=1.0005))
	assert not barbeat.grouping.notes_share_state(a, conftest.make_note(62, 1, velocity=80, duration=1.01))
	assert not barbeat.grouping.notes_share_state(a, conftest.make_note(62, 1, velocity=81))
	assert not barbeat.grouping.notes_share_state(a, conftest.make_note(62, 1, velocity=80, velocity_deviation=10))


def test_probability_can_be_ignored () -> None:

	a = conftest.make_note(60, 0)
	b = conftest.make_note(60, 1, probability=0.5)

	assert not barbeat.grouping.notes_share_state(a, b)
	assert barbeat.grouping.notes_share_state(a, b, include_probability=False)


# ── Merging ──────────────────────────────────────────────────────────


def test_non_adjacent_groups_merge () -> None:

	"""Beats 1 and 3 match and merge even with beat 2 between them."""

	_, batches = _group([conftest.make_note(60, 0), conftest.make_note(62, 1), conftest.make_note(60, 2)])

	assert len(batches) == 2
	assert [group.beat for group in batches[0].groups] == [1, 3]
	assert [group.beat for group in batches[1].groups] == [2]


def test_batches_keep_first_occurrence_order () -> None:

	_, batches = _group([
		conftest.make_note(60, 0),
		conftest.make_note(62, 1),
		conftest.make_note(60, 2),
		conftest.make_note(62, 3),
	])

	assert [batch.notes[0].pitch for batch in batches] == [60, 62]
	assert [batch.bar for batch in batches] == [1, 1]


def test_merge_never_crosses_bar () -> None:

	_, batches = _group([conftest.make_note(60, 0), conftest.make_note(60, 4)])

	assert len(batches) == 2
	assert [batch.bar for batch in batches] == [1, 2]


def test_state_difference_blocks_merge () -> None:

	_, batches = _group([conftest.make_note(60, 0), conftest.make_note(60, 2, velocity=90)])

	assert len(batches) == 2


def test_chord_must_match_note_for_note () -> None:

	"""A chord and a subset of it are different groups."""

	_, batches = _group([
		conftest.make_note(60, 0),
		conftest.make_note(64, 0),
		conftest.make_note(60, 2),
	])

	assert len(batches) == 2
