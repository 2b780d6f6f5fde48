import barbeat
import barbeat.drums
import barbeat.timebase
import conftest


# ── Repeat detection ─────────────────────────────────────────────────


def test_detect_repeat_needs_three_hits () -> None:

	assert barbeat.drums.detect_repeat([0, 1]) is None
	assert barbeat.drums.detect_repeat([0, 1, 2]) == barbeat.drums.RepeatInfo(count=3, step=1)


def test_detect_repeat_rejects_uneven_steps () -> None:

	assert barbeat.drums.detect_repeat([0, 1, 2.5]) is None
	assert barbeat.drums.detect_repeat([0, 0, 0]) is None


def test_detect_repeat_tolerates_small_drift () -> None:

	"""Steps within 0.002 of the first step still count as even."""

	repeat = barbeat.drums.detect_repeat([0, 0.5, 1.0015])

	assert repeat is not None
	assert repeat.count == 3
	assert repeat.step == 0.5


def test_choose_position_encoding () -> None:

	"""The repeat must be strictly shorter; ties and missing repeats stay explicit."""

	assert barbeat.drums.choose_position_encoding("1|1x3", "1|1,2,3") is barbeat.drums.PositionEncoding.REPEAT
	assert barbeat.drums.choose_position_encoding("1|1x3@1", "1|1,2,3") is barbeat.drums.PositionEncoding.EXPLICIT
	assert barbeat.drums.choose_position_encoding(None, "1|1,2") is barbeat.drums.PositionEncoding.EXPLICIT


def test_format_repeat_omits_step_equal_to_duration () -> None:

	start = barbeat.timebase.Position(1, 1)

	assert barbeat.drums.format_repeat(start, barbeat.drums.RepeatInfo(16, 0.25), 0.25) == "1|1x16"
	assert barbeat.drums.format_repeat(start, barbeat.drums.RepeatInfo(8, 0.5), 0.25) == "1|1x8@/2"


def test_format_explicit_positions_one_token_per_bar () -> None:

	positions = [
		barbeat.timebase.Position(1, 1),
		barbeat.timebase.Position(1, 3),
		barbeat.timebase.Position(2, 1),
	]

	assert barbeat.drums.format_explicit_positions(positions) == "1|1,3 2|1"


def test_split_state_runs () -> None:

	notes = [
		conftest.make_note(42, 0, velocity=80),
		conftest.make_note(42, 0.5, velocity=80),
		conftest.make_note(42, 1, velocity=100),
		conftest.make_note(42, 1.5, velocity=100),
	]

	runs = barbeat.drums.split_state_runs(notes)

	assert [len(run) for run in runs] == [2, 2]


def test_group_notes_by_pitch_first_occurrence () -> None:

	notes = [conftest.make_note(38, 0), conftest.make_note(36, 0.5), conftest.make_note(38, 1)]
	groups = barbeat.drums.group_notes_by_pitch(notes)

	assert [group[0].pitch for group in groups] == [38, 36]
	assert len(groups[0]) == 2


# ── Drum-mode serialization ──────────────────────────────────────────


def test_sixteen_hats_compress_to_a_repeat () -> None:

	notes = [conftest.make_note(42, i * 0.25, 0.25, velocity=80) for i in range(16)]

	assert barbeat.serialize(notes, drum_mode=True) == "v80 t/4 Gb1 1|1x16"


def test_step_differs_from_duration () -> None:

	notes = [conftest.make_note(36, i * 0.5, 0.25) for i in range(8)]

	assert barbeat.serialize(notes, drum_mode=True) == "t/4 C1 1|1x8@/2"


def test_step_of_two_beats () -> None:

	notes = [conftest.make_note(36, i * 2, 0.25) for i in range(8)]

	assert barbeat.serialize(notes, drum_mode=True) == "t/4 C1 1|1x8@2"


def test_triplet_hats () -> None:

	notes = [conftest.make_note(42, i / 3, 1 / 3, velocity=80) for i in range(6)]

	assert barbeat.serialize(notes, drum_mode=True) == "v80 t/3 Gb1 1|1x6"


def test_groups_notes_by_pitch () -> None:

	notes = [
		conftest.make_note(36, 0, 0.25),
		conftest.make_note(38, 0.5, 0.25, velocity=90),
		conftest.make_note(36, 1, 0.25),
		conftest.make_note(38, 1.5, 0.25, velocity=90),
	]

	assert barbeat.serialize(notes, drum_mode=True) == "t/4 C1 1|1,2 v90 D1 1|1.5,2.5"


def test_velocity_change_splits_runs () -> None:

	notes = [
		conftest.make_note(42, 0, 0.25, velocity=80),
		conftest.make_note(42, 0.5, 0.25, velocity=80),
		conftest.make_note(42, 1, 0.25, velocity=100),
		conftest.make_note(42, 1.5, 0.25, velocity=100),
	]

	assert barbeat.serialize(notes, drum_mode=True) == "v80 t/4 Gb1 1|1,1.5 v100 Gb1 1|2,2.5"


def test_pitches_in_first_occurrence_order () -> None:

	notes = [conftest.make_note(36, 0, 0.25), conftest.make_note(49, 0, 0.25)]

	assert barbeat.serialize(notes, drum_mode=True) == "t/4 C1 1|1 Db2 1|1"


def test_later_pitch_changes_velocity () -> None:

	notes = [conftest.make_note(38, 0, 0.25, velocity=90), conftest.make_note(36, 0.5, 0.25)]

	assert barbeat.serialize(notes, drum_mode=True) == "v90 t/4 D1 1|1 v100 C1 1|1.5"


def test_multi_bar_explicit_positions () -> None:

	notes = [
		conftest.make_note(36, 0, 0.25),
		conftest.make_note(38, 2, 0.25, velocity=90),
		conftest.make_note(36, 4, 0.25),
		conftest.make_note(38, 6, 0.25, velocity=90),
	]

	assert barbeat.serialize(notes, drum_mode=True) == "t/4 C1 1|1 2|1 v90 D1 1|3 2|3"


def test_repeat_tie_stays_explicit () -> None:

	"""1|1x3@1 and 1|1,2,3 are the same length, so the list is kept."""

	notes = [conftest.make_note(36, i, 0.25) for i in range(3)]

	assert barbeat.serialize(notes, drum_mode=True) == "t/4 C1 1|1,2,3"


def test_two_hits_never_repeat () -> None:

	notes = [conftest.make_note(36, 0, 0.25), conftest.make_note(36, 2, 0.25)]

	assert barbeat.serialize(notes, drum_mode=True) == "t/4 C1 1|1,3"


def test_probability_splits_runs () -> None:

	"""Hits that differ only in probability are separate runs."""

	notes = [
		conftest.make_note(42, 0, 0.25),
		conftest.make_note(42, 0.5, 0.25, probability=0.5),
	]

	assert barbeat.serialize(notes, drum_mode=True) == "t/4 Gb1 1|1 p0.5 Gb1 1|1.5"


def test_drum_mode_compound_meter () -> None:

	"""Dotted-quarter kicks in 6/8 repeat every three eighth notes."""

	notes = [conftest.make_note(36, i * 1.5, 0.5) for i in range(3)]

	assert barbeat.serialize(notes, time_sig_numerator=6, time_sig_denominator=8, drum_mode=True) == "C1 1|1x3@3"


def test_repeats_span_bars () -> None:

	notes = [conftest.make_note(36, i, 0.25) for i in range(8)]

	assert barbeat.serialize(notes, drum_mode=True) == "t/4 C1 1|1x8@1"


def test_drum_pattern (drum_notes) -> None:

	"""Kick and snare collapse to repeats; the hats split at the accent."""

	text = barbeat.serialize(drum_notes, drum_mode=True)

	assert text == (
		"t/4 C1 1|1x4@2"
		" v80 Gb1 1|1x7@/2"
		" v100 Gb1 1|4.5"
		" v80 Gb1 2|1x7@/2"
		" v100 Gb1 2|4.5"
		" v90 D1 1|2x4@2"
	)
