"""Note events to bar|beat notation.

The serializer produces the shortest text that :func:`barbeat.interpreter.interpret`
turns back into the same notes::

    v80 t/2 p0.8 C3 1|1 v120 t2 p0.6 D3 1|2

The default strategy walks the notes in time order: notes are grouped by
position, matching groups in a bar are merged into comma-joined beat
lists, and state tokens are written only when a value changes. Drum mode
(see :mod:`barbeat.drums`) walks pitch by pitch instead.
"""

import logging
import typing

import barbeat.drums
import barbeat.grouping
import barbeat.note_event
import barbeat.numbers
import barbeat.pitch
import barbeat.state
import barbeat.timebase


logger = logging.getLogger(__name__)


def format_batch_position (batch: barbeat.grouping.MergeBatch) -> str:

	"""Write a batch's position: its bar and one comma-joined beat per merged group."""

	beats = ",".join(barbeat.numbers.format_position_beat(group.beat) for group in batch.groups)

	return f"{batch.bar}|{beats}"


def encode_batches (
	batches: typing.Sequence[barbeat.grouping.MergeBatch],
	time_sig_denominator: typing.Optional[int] = None,
	state: typing.Optional[barbeat.state.NotationState] = None,
) -> typing.Tuple[typing.List[str], barbeat.state.NotationState]:

	"""
	Encode merge batches in order.

	Each pitch of the batch's first group gets whatever state tokens it
	needs, then its name. A chord whose notes share state therefore gets a
	single prefix, and a chord with per-note state gets a prefix before each
	pitch that changes it.
	"""

	if state is None:
		state = barbeat.state.NotationState()

	tokens: typing.List[str] = []

	for batch in batches:

		for note in batch.notes:
			changed, state = barbeat.state.state_change_tokens(note, state, time_sig_denominator)
			tokens.extend(changed)
			tokens.append(barbeat.pitch.midi_to_note_name(note.pitch))

		tokens.append(format_batch_position(batch))

	return tokens, state


def serialize (
	notes: typing.Optional[typing.Iterable[barbeat.note_event.NoteEvent]],
	beats_per_bar: typing.Optional[float] = None,
	time_sig_numerator: typing.Optional[int] = None,
	time_sig_denominator: typing.Optional[int] = None,
	drum_mode: bool = False,
) -> str:

	"""
	Convert note events to bar|beat notation.

	Parameters:
		notes: Note events with times in quarter-note beats. ``None`` or an
			empty list gives an empty string.
		beats_per_bar: Bar length when no time signature is given (default 4).
		time_sig_numerator: Time signature numerator. Must come with the denominator.
		time_sig_denominator: Time signature denominator. Must come with the numerator.
		drum_mode: Group by pitch and compress evenly spaced hits.

	Raises:
		TimeSignatureError: If only half of the time signature is given.
		NotationRangeError: If a note has an invalid MIDI pitch.

	Example:
		```python
		serialize([NoteEvent(60, 0), NoteEvent(60, 2)])   # "C3 1|1,3"
		```
	"""

	bar_length = barbeat.timebase.resolve_beats_per_bar(beats_per_bar, time_sig_numerator, time_sig_denominator)

	if not notes:
		return ""

	sorted_notes = barbeat.grouping.sort_notes(notes)

	if drum_mode:
		tokens, _ = barbeat.drums.encode_drum_notes(sorted_notes, bar_length, time_sig_denominator)
	else:
		groups = barbeat.grouping.group_notes_by_time(sorted_notes, bar_length, time_sig_denominator)
		batches = barbeat.grouping.merge_time_groups(groups)
		tokens, _ = encode_batches(batches, time_sig_denominator)

	logger.debug(f"Serialized {len(sorted_notes)} notes to {len(tokens)} tokens ({'drum' if drum_mode else 'time'} mode)")

	return " ".join(tokens)
