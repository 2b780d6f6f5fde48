"""Bar|beat notation to note events.

The interpreter scans whitespace-separated tokens left to right:

- ``v100`` or ``v80-120`` sets the velocity (or velocity range).
- ``t0.5``, ``t/4``, ``t1+1/2`` or ``t1:2`` sets the duration in notation beats.
- ``p0.8`` sets the trigger probability (decimal only).
- ``C3``, ``F#1``, ``Bb-1`` buffers a pitch with the state current at that point.
- ``1|1``, ``1|1,3``, ``|2`` or ``1|1x16@0.25`` emits every buffered pitch at
  each listed (or repeated) position.
- ``@2=``, ``@5=1-2``, ``@3-8=1-2`` copy earlier bars and ``@clear`` forgets
  them (see :mod:`barbeat.bar_copy`).

State is sticky. Buffered pitches stay buffered after a position, so a
second position with no new pitches plays them again; the next pitch token
starts a fresh buffer. A note emitted with velocity 0 deletes the earlier
notes it lands on and is itself dropped.

Any malformed token fails the whole call. Odd but legal input (a position
with nothing to play, pitches never placed) is logged as a warning.
"""

import dataclasses
import logging
import re
import typing

import barbeat.bar_copy
import barbeat.constants.defaults
import barbeat.constants.tolerances
import barbeat.errors
import barbeat.note_event
import barbeat.numbers
import barbeat.pitch
import barbeat.state
import barbeat.timebase


logger = logging.getLogger(__name__)

_VELOCITY_PATTERN = re.compile(r"^v(-?\d+)(?:-(\d+))?$")
_POSITION_PATTERN = re.compile(r"^(-?\d+)?\|(.+)$")
_REPEAT_PATTERN = re.compile(r"^(?P<beat>.+?)x(?P<count>\d+)(?:@(?P<step>.+))?$")


@dataclasses.dataclass(frozen=True)
class BufferedPitch:

	"""
	A pitch waiting for a position, with the state it was read under.
	"""

	pitch: int
	state: barbeat.state.NotationState


class Interpreter:

	"""
	The working set of one interpret call.

	Not reused across calls. Use :func:`interpret` rather than building one
	directly.
	"""

	def __init__ (self, beats_per_bar: float, time_sig_denominator: typing.Optional[int] = None) -> None:

		self.beats_per_bar = beats_per_bar
		self.time_sig_denominator = time_sig_denominator

		self.state = barbeat.state.NotationState()
		self.current_bar = 1
		self.events: typing.List[barbeat.note_event.NoteEvent] = []

		self.buffer: typing.List[BufferedPitch] = []
		self.pitch_group_started = False
		self.pitches_emitted = False
		self.state_changed_since_last_pitch = False
		self.state_changed_after_emission = False

		self.bar_cache = barbeat.bar_copy.BarCache(beats_per_bar, time_sig_denominator)

	def feed (self, token: str) -> None:

		"""Process one token."""

		leading = token[0]

		if token == barbeat.bar_copy.CLEAR_TOKEN:
			self._clear()
		elif barbeat.bar_copy.is_bar_copy(token):
			self._bar_copy(token)
		elif leading == "v":
			self._velocity(token)
		elif leading == "t":
			self._duration(token)
		elif leading == "p":
			self._probability(token)
		elif "|" in token:
			self._position(token)
		elif ":" in token:
			raise barbeat.errors.NotationFormatError(f"Invalid bar|beat position: \"{token}\". Use \"|\" for bar|beat positions, not \":\"")
		elif barbeat.pitch.is_note_name(token):
			self._pitch(token)
		else:
			raise barbeat.errors.NotationFormatError(f"Unrecognized bar|beat token: \"{token}\"")

	def finish (self) -> typing.List[barbeat.note_event.NoteEvent]:

		"""Warn about stranded pitches and return the surviving notes."""

		if self.buffer and not self.pitches_emitted:
			logger.warning(f"{len(self.buffer)} pitch(es) buffered but no time position to emit them")

		return apply_velocity_zero_deletions(self.events)

	# ------------------------------------------------------------------
	# State tokens
	# ------------------------------------------------------------------

	def _update_state (self, **changes: typing.Any) -> None:

		"""Apply a state change, and carry it to already-emitted buffered pitches."""

		self.state = dataclasses.replace(self.state, **changes)

		if not self.buffer:
			return

		if self.pitch_group_started:
			self.state_changed_since_last_pitch = True
		else:
			self.buffer = [
				dataclasses.replace(buffered, state=dataclasses.replace(buffered.state, **changes))
				for buffered in self.buffer
			]
			self.state_changed_after_emission = True

	def _velocity (self, token: str) -> None:

		match = _VELOCITY_PATTERN.match(token)

		if not match:
			raise barbeat.errors.NotationFormatError(f"Invalid velocity: \"{token}\". Expected \"v{{int}}\" or \"v{{int}}-{{int}}\"")

		velocity_min = int(match.group(1))
		velocity_max = int(match.group(2)) if match.group(2) is not None else velocity_min

		for value in (velocity_min, velocity_max):
			if value < barbeat.constants.defaults.MIN_VELOCITY or value > barbeat.constants.defaults.MAX_VELOCITY:
				raise barbeat.errors.NotationRangeError(f"Velocity must be 0-127, got \"{token}\"")

		if velocity_max < velocity_min:
			raise barbeat.errors.NotationRangeError(f"Velocity range maximum is below its minimum in \"{token}\"")

		self._update_state(velocity=velocity_min, velocity_deviation=velocity_max - velocity_min)

	def _duration (self, token: str) -> None:

		duration = barbeat.timebase.parse_duration(token[1:], self.beats_per_bar, token)

		self._update_state(duration=duration)

	def _probability (self, token: str) -> None:

		body = token[1:]

		if body.startswith("-"):
			barbeat.numbers.parse_decimal(body[1:], token, "probability")
			raise barbeat.errors.NotationRangeError(f"Probability must be 0-1, got \"{token}\"")

		probability = barbeat.numbers.parse_decimal(body, token, "probability")

		if probability > 1:
			raise barbeat.errors.NotationRangeError(f"Probability must be 0-1, got \"{token}\"")

		self._update_state(probability=probability)

	# ------------------------------------------------------------------
	# Pitches and positions
	# ------------------------------------------------------------------

	def _pitch (self, token: str) -> None:

		pitch = barbeat.pitch.note_name_to_midi(token)

		if not self.pitch_group_started:
			self.buffer = []
			self.pitch_group_started = True
			self.pitches_emitted = False
			self.state_changed_after_emission = False

		self.buffer.append(BufferedPitch(pitch=pitch, state=self.state))
		self.state_changed_since_last_pitch = False

	def _position (self, token: str) -> None:

		match = _POSITION_PATTERN.match(token)

		if not match:
			raise barbeat.errors.NotationFormatError(f"Invalid bar|beat position: \"{token}\"")

		bar_text, beat_list = match.groups()

		if bar_text is not None:
			bar = int(bar_text)
			self.current_bar = bar
		else:
			bar = self.current_bar

		positions: typing.List[float] = []

		for item in beat_list.split(","):
			positions.extend(self._expand_beat(bar, item, token))

		if not self.buffer:
			logger.warning(f"Time position {token} has no pitches")
		else:
			if self.state_changed_since_last_pitch:
				logger.warning("State change after pitch(es) but before time position won't affect this group")
			self._emit(positions)

		self.pitch_group_started = False
		self.state_changed_since_last_pitch = False
		self.state_changed_after_emission = False

	def _expand_beat (self, bar: int, item: str, token: str) -> typing.List[float]:

		"""Return the musical-beat offsets one beat-list item stands for."""

		if not item:
			raise barbeat.errors.NotationFormatError(f"Empty beat in bar|beat position: \"{token}\"")

		repeat = _REPEAT_PATTERN.match(item)

		if repeat is None:
			beat = barbeat.timebase.parse_beat(item, token)
			return [barbeat.timebase.position_to_musical_beats(bar, beat, self.beats_per_bar)]

		beat = barbeat.timebase.parse_beat(repeat.group("beat"), token)
		start = barbeat.timebase.position_to_musical_beats(bar, beat, self.beats_per_bar)
		count = int(repeat.group("count"))

		if repeat.group("step") is not None:
			step = barbeat.numbers.parse_number(repeat.group("step"), token, "repeat step")
		else:
			step = self.state.duration

		if count < 1:
			raise barbeat.errors.NotationRangeError(f"Repeat count must be 1 or greater in \"{token}\"")

		if step <= 0:
			raise barbeat.errors.NotationRangeError(f"Repeat step must be greater than 0 in \"{token}\"")

		if count > barbeat.constants.defaults.REPEAT_WARNING_THRESHOLD:
			logger.warning(f"Repeat pattern {item} generates {count} notes, which may be excessive")

		return [start + i * step for i in range(count)]

	def _emit (self, positions: typing.Sequence[float]) -> None:

		"""Emit every buffered pitch at every position, positions outermost."""

		for musical_beats in positions:

			start_time = barbeat.timebase.musical_to_performance_beats(musical_beats, self.time_sig_denominator)

			for buffered in self.buffer:
				event = barbeat.note_event.NoteEvent(
					pitch = buffered.pitch,
					start_time = start_time,
					duration = barbeat.timebase.musical_to_performance_beats(buffered.state.duration, self.time_sig_denominator),
					velocity = buffered.state.velocity,
					velocity_deviation = buffered.state.velocity_deviation,
					probability = buffered.state.probability,
				)
				self.events.append(event)
				self.bar_cache.add(event)

		self.pitches_emitted = True

	# ------------------------------------------------------------------
	# Bar copy
	# ------------------------------------------------------------------

	def _bar_copy (self, token: str) -> None:

		copy = barbeat.bar_copy.parse_bar_copy(token)

		self._warn_unused_buffer("bar copy")

		copies = barbeat.bar_copy.apply_bar_copy(copy, self.bar_cache)

		if copies is not None:
			self.events.extend(copies)
			self.current_bar = copy.destination_start

		self._reset_buffer()

	def _clear (self) -> None:

		self._warn_unused_buffer("@clear")
		self.bar_cache.clear()
		self._reset_buffer()

	def _warn_unused_buffer (self, operation: str) -> None:

		"""Warn about pitches or state changes that a copy or clear is about to drop."""

		if self.buffer and self.pitch_group_started and not self.pitches_emitted:
			logger.warning(f"{len(self.buffer)} pitch(es) buffered but not emitted before {operation}")

		if self.state_changed_since_last_pitch or self.state_changed_after_emission:
			logger.warning(f"State change won't affect anything before {operation}")

	def _reset_buffer (self) -> None:

		self.buffer = []
		self.pitch_group_started = False
		self.pitches_emitted = False
		self.state_changed_since_last_pitch = False
		self.state_changed_after_emission = False


def apply_velocity_zero_deletions (events: typing.Sequence[barbeat.note_event.NoteEvent]) -> typing.List[barbeat.note_event.NoteEvent]:

	"""
	Remove notes cancelled by a later velocity-0 note.

	A v0 note deletes every *earlier* note with the same pitch and a start
	time within 0.001. The v0 notes themselves are always dropped.
	"""

	result: typing.List[barbeat.note_event.NoteEvent] = []

	for event in events:

		if event.velocity == 0:
			result = [
				kept for kept in result
				if not (kept.pitch == event.pitch and abs(kept.start_time - event.start_time) <= barbeat.constants.tolerances.POSITION_EPSILON)
			]
		else:
			result.append(event)

	return result


def interpret (
	text: typing.Optional[str],
	beats_per_bar: typing.Optional[float] = None,
	time_sig_numerator: typing.Optional[int] = None,
	time_sig_denominator: typing.Optional[int] = None,
) -> typing.List[barbeat.note_event.NoteEvent]:

	"""
	Convert bar|beat notation to note events.

	Parameters:
		text: The notation. ``None`` or blank text gives an empty list.
		beats_per_bar: Bar length when no time signature is given (default 4).
		time_sig_numerator: Time signature numerator. Must come with the denominator.
		time_sig_denominator: Time signature denominator. Must come with the numerator.

	Returns:
		Notes in emission order, times in quarter-note beats.

	Raises:
		TimeSignatureError: If only half of the time signature is given.
		NotationFormatError: If a token is malformed.
		NotationRangeError: If a value is out of range.

	Example:
		```python
		interpret("v80 t/2 C3 E3 1|1,3")
		# four notes: C3 and E3 on beats 1 and 3, velocity 80, half a beat long
		```
	"""

	bar_length = barbeat.timebase.resolve_beats_per_bar(beats_per_bar, time_sig_numerator, time_sig_denominator)

	if not text:
		return []

	interpreter = Interpreter(bar_length, time_sig_denominator)

	for token in text.split():
		interpreter.feed(token)

	return interpreter.finish()
