"""Conversions between beats and bar|beat text.

Two clocks are involved:

- **Performance beats** are quarter notes, the host's native clock. Note
  start times and durations arrive and leave in this unit.
- **Musical (notation) beats** count one unit per time-signature
  denominator note. In 6/8 one musical beat is an eighth note, so one
  performance beat is two musical beats.

The factor between them is ``denominator / 4``. Without a time signature
the two clocks are the same.

Positions (``bar|beat``) are 1-based on both axes. Durations
(``bars:beats``) are 0-based. The separators are not interchangeable: the
parsers reject ``:`` in a position and ``|`` in a duration with a message
pointing at the right one.
"""

import dataclasses
import math
import re
import typing

import barbeat.constants.defaults
import barbeat.constants.tolerances
import barbeat.errors
import barbeat.numbers


_POSITION_PATTERN = re.compile(r"^(-?\d+)\|(.+)$")
_DURATION_PATTERN = re.compile(r"^(\d+):(.+)$")


@dataclasses.dataclass(frozen=True)
class Position:

	"""
	A 1-based bar|beat position. ``beat`` may be fractional.
	"""

	bar: int
	beat: float


def resolve_beats_per_bar (
	beats_per_bar: typing.Optional[float] = None,
	time_sig_numerator: typing.Optional[int] = None,
	time_sig_denominator: typing.Optional[int] = None,
) -> float:

	"""
	Work out how many musical beats make a bar.

	The time signature numerator wins over ``beats_per_bar``, which wins
	over the default of 4.

	Raises:
		TimeSignatureError: If only one of numerator and denominator is given,
			or a given value is not positive.
	"""

	if (time_sig_numerator is None) != (time_sig_denominator is None):
		raise barbeat.errors.TimeSignatureError("Time signature must be specified with both numerator and denominator")

	if time_sig_numerator is not None and time_sig_denominator is not None:
		if time_sig_numerator <= 0 or time_sig_denominator <= 0:
			raise barbeat.errors.TimeSignatureError(f"Invalid time signature: {time_sig_numerator}/{time_sig_denominator}")
		return time_sig_numerator

	if beats_per_bar is not None:
		if beats_per_bar <= 0:
			raise barbeat.errors.TimeSignatureError(f"beats_per_bar must be positive, got: {beats_per_bar}")
		return beats_per_bar

	return barbeat.constants.defaults.DEFAULT_BEATS_PER_BAR


def quarter_note_ratio (time_sig_denominator: typing.Optional[int]) -> float:

	"""Musical beats per performance beat (``denominator / 4``, or 1 without a time signature)."""

	if time_sig_denominator is None:
		return 1.0

	return time_sig_denominator / 4


def performance_to_musical_beats (beats: float, time_sig_denominator: typing.Optional[int] = None) -> float:

	"""Convert quarter-note beats to musical beats."""

	return beats * quarter_note_ratio(time_sig_denominator)


def musical_to_performance_beats (musical_beats: float, time_sig_denominator: typing.Optional[int] = None) -> float:

	"""Convert musical beats back to quarter-note beats."""

	return musical_beats / quarter_note_ratio(time_sig_denominator)


def time_signature_to_performance_beats_per_bar (time_sig_numerator: int, time_sig_denominator: int) -> float:

	"""Quarter notes in one bar: 4 in 4/4, 3 in 6/8, 3.5 in 7/8."""

	return (time_sig_numerator * 4) / time_sig_denominator


def musical_beats_to_position (musical_beats: float, beats_per_bar: float) -> Position:

	"""
	Place a linear musical-beat offset on the bar|beat grid.

	The offset is first snapped to nine decimal places so that float noise
	like ``3.9999999999999996`` lands on bar 2 beat 1, not bar 1 beat 4.999.
	"""

	snapped = round(musical_beats, barbeat.constants.tolerances.POSITION_SNAP_PLACES)
	bar = math.floor(snapped / beats_per_bar) + 1
	beat = (snapped % beats_per_bar) + 1

	return Position(bar=bar, beat=beat)


def position_to_musical_beats (bar: int, beat: float, beats_per_bar: float) -> float:

	"""
	Convert a 1-based position to a linear musical-beat offset.

	A beat past the end of the bar is legal and simply runs on into the
	following bars (``1|5`` in 4/4 equals ``2|1``).

	Raises:
		NotationRangeError: If ``bar`` or ``beat`` is below 1.
	"""

	if bar < 1:
		raise barbeat.errors.NotationRangeError(f"Bar number must be 1 or greater, got: {bar}")

	if beat < 1:
		raise barbeat.errors.NotationRangeError(f"Beat must be 1 or greater, got: {beat}")

	return (bar - 1) * beats_per_bar + (beat - 1)


def format_position (position: Position) -> str:

	"""Render a position as ``bar|beat``."""

	return f"{position.bar}|{barbeat.numbers.format_position_beat(position.beat)}"


def parse_beat (text: str, context: str) -> float:

	"""
	Parse the beat half of a position.

	A leading minus sign is parsed (and left for the range check to reject)
	so that ``1|-2`` reports a range problem rather than a format problem.
	"""

	if text.startswith("-"):
		return -barbeat.numbers.parse_number(text[1:], context, "bar|beat")

	return barbeat.numbers.parse_number(text, context, "bar|beat")


def parse_position (text: str, beats_per_bar: float) -> float:

	"""
	Parse ``bar|beat`` text into a linear musical-beat offset.

	Raises:
		NotationFormatError: If the text is not a position, or uses ``:``.
		NotationRangeError: If the bar or beat is below 1, or a denominator is zero.
	"""

	if ":" in text and "|" not in text:
		raise barbeat.errors.NotationFormatError(f"Invalid bar|beat position: \"{text}\". Use \"|\" for bar|beat positions, not \":\"")

	match = _POSITION_PATTERN.match(text)

	if not match:
		raise barbeat.errors.NotationFormatError(
			f"Invalid bar|beat format: \"{text}\". Expected \"{{int}}|{{float}}\" like \"1|2\" or \"2|3.5\", "
			f"\"{{int}}|{{int}}/{{int}}\" like \"1|4/3\" or \"{{int}}|{{int}}+{{int}}/{{int}}\" like \"1|2+1/3\""
		)

	bar = int(match.group(1))
	beat = parse_beat(match.group(2), text)

	return position_to_musical_beats(bar, beat, beats_per_bar)


def beats_to_bar_beat (
	beats: float,
	beats_per_bar: typing.Optional[float] = None,
	time_sig_numerator: typing.Optional[int] = None,
	time_sig_denominator: typing.Optional[int] = None,
) -> str:

	"""
	Render a performance-beat offset as ``bar|beat``.

	Example:
		```python
		beats_to_bar_beat(5.5)                                            # "2|2.5"
		beats_to_bar_beat(3, time_sig_numerator=6, time_sig_denominator=8)  # "2|1"
		```
	"""

	bar_length = resolve_beats_per_bar(beats_per_bar, time_sig_numerator, time_sig_denominator)
	musical_beats = performance_to_musical_beats(beats, time_sig_denominator)

	return format_position(musical_beats_to_position(musical_beats, bar_length))


def bar_beat_to_beats (
	text: str,
	beats_per_bar: typing.Optional[float] = None,
	time_sig_numerator: typing.Optional[int] = None,
	time_sig_denominator: typing.Optional[int] = None,
) -> float:

	"""Parse ``bar|beat`` text into a performance-beat offset."""

	bar_length = resolve_beats_per_bar(beats_per_bar, time_sig_numerator, time_sig_denominator)

	return musical_to_performance_beats(parse_position(text, bar_length), time_sig_denominator)


def format_duration (musical_beats: float, beats_per_bar: float) -> str:

	"""
	Render a musical-beat length as a 0-based ``bars:beats`` duration.

	Example: 6 beats in 4/4 → ``"1:2"``; half a beat → ``"0:/2"``.

	Raises:
		NotationRangeError: If the duration is negative.
	"""

	if musical_beats < 0:
		raise barbeat.errors.NotationRangeError(f"Duration cannot be negative, got: {musical_beats}")

	bars = math.floor(musical_beats / beats_per_bar)
	remaining = musical_beats % beats_per_bar

	return f"{bars}:{barbeat.numbers.format_unsigned(remaining)}"


def parse_duration (text: str, beats_per_bar: typing.Optional[float], context: typing.Optional[str] = None) -> float:

	"""
	Parse a duration into musical beats.

	Accepts plain numbers (``2``, ``0.5``, ``/4``, ``1+1/2``) and 0-based
	``bars:beats`` (``1:2`` is one bar plus two beats). ``context`` is the
	enclosing token quoted in error messages (defaults to ``text``).

	Raises:
		NotationFormatError: If the text is malformed or uses ``|``.
		NotationRangeError: If the duration is negative.
		TimeSignatureError: If ``bars:beats`` is used without a bar length.
	"""

	if context is None:
		context = text

	if "|" in text:
		raise barbeat.errors.NotationFormatError(f"Invalid duration format: \"{context}\". Use \":\" for bar:beat format, not \"|\"")

	# "-x" is a format error, "-1" a range error
	if text.startswith("-"):
		parse_duration(text[1:], beats_per_bar, context)
		raise barbeat.errors.NotationRangeError(f"Duration cannot be negative, got \"{context}\"")

	if ":" not in text:
		return barbeat.numbers.parse_number(text, context, "duration")

	if beats_per_bar is None:
		raise barbeat.errors.TimeSignatureError(f"Time signature numerator required for bar:beat duration format: \"{context}\"")

	match = _DURATION_PATTERN.match(text)

	if not match:
		raise barbeat.errors.NotationFormatError(
			f"Invalid bar:beat duration format: \"{context}\". Expected \"{{int}}:{{float}}\" like \"1:2\" or \"2:1.5\""
		)

	bars = int(match.group(1))
	beats = barbeat.numbers.parse_number(match.group(2), context, "duration")

	return bars * beats_per_bar + beats
