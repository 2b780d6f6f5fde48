"""Performance state carried through the token stream.

Velocity, velocity range, duration and probability are *sticky*: once set
by a ``v``, ``t`` or ``p`` token they apply to every following pitch until
changed. The serializer writes a token only when a note's value differs
from the tracked state, always in the order velocity, duration,
probability.

The state is an immutable value. Each step takes a state and returns the
next one, so a serialize or interpret call owns its state outright.
"""

import dataclasses
import typing

import barbeat.constants.defaults
import barbeat.constants.tolerances
import barbeat.grouping
import barbeat.note_event
import barbeat.numbers
import barbeat.timebase


@dataclasses.dataclass(frozen=True)
class NotationState:

	"""
	The current performance state.

	``duration`` is in musical (notation) beats, the unit ``t`` tokens use.
	"""

	velocity: int = barbeat.constants.defaults.DEFAULT_VELOCITY
	velocity_deviation: int = barbeat.constants.defaults.DEFAULT_VELOCITY_DEVIATION
	duration: float = barbeat.constants.defaults.DEFAULT_DURATION
	probability: float = barbeat.constants.defaults.DEFAULT_PROBABILITY


def _clamp_velocity (velocity: int) -> int:
	return max(1, min(barbeat.constants.defaults.MAX_VELOCITY, velocity))


def velocity_tokens (note_velocity: int, note_deviation: int, state: NotationState) -> typing.Tuple[typing.List[str], NotationState]:

	"""
	Return the velocity token needed for a note (if any) and the new state.

	With a deviation the note is written as a range ``vMIN-MAX``. The
	maximum is clamped to 127, and a range clamped down to one value is
	written as a plain ``vN``. Without a deviation a plain ``vN`` is written
	when the velocity changed or the previous state was a range.
	"""

	if note_deviation > 0:

		velocity_min = _clamp_velocity(note_velocity)
		velocity_max = min(barbeat.constants.defaults.MAX_VELOCITY, velocity_min + note_deviation)
		current_min = _clamp_velocity(state.velocity)
		current_max = min(barbeat.constants.defaults.MAX_VELOCITY, current_min + state.velocity_deviation)

		if velocity_min == current_min and velocity_max == current_max:
			return [], state

		if velocity_max == velocity_min:
			return [f"v{velocity_min}"], dataclasses.replace(state, velocity=velocity_min, velocity_deviation=0)

		return (
			[f"v{velocity_min}-{velocity_max}"],
			dataclasses.replace(state, velocity=velocity_min, velocity_deviation=velocity_max - velocity_min),
		)

	if note_velocity != state.velocity or state.velocity_deviation > 0:
		return [f"v{note_velocity}"], dataclasses.replace(state, velocity=note_velocity, velocity_deviation=0)

	return [], state


def duration_tokens (musical_duration: float, state: NotationState) -> typing.Tuple[typing.List[str], NotationState]:

	"""Return a ``t`` token when the duration moved by more than 0.001."""

	if abs(musical_duration - state.duration) > barbeat.constants.tolerances.STATE_EPSILON:
		return [f"t{barbeat.numbers.format_unsigned(musical_duration)}"], dataclasses.replace(state, duration=musical_duration)

	return [], state


def probability_tokens (probability: float, state: NotationState) -> typing.Tuple[typing.List[str], NotationState]:

	"""Return a ``p`` token when the probability moved by more than 0.001. Decimal only."""

	if abs(probability - state.probability) > barbeat.constants.tolerances.STATE_EPSILON:
		return [f"p{barbeat.numbers.format_decimal(probability)}"], dataclasses.replace(state, probability=probability)

	return [], state


def state_change_tokens (
	note: barbeat.note_event.NoteEvent,
	state: NotationState,
	time_sig_denominator: typing.Optional[int] = None,
) -> typing.Tuple[typing.List[str], NotationState]:

	"""
	Return every state token a note needs, in velocity, duration, probability order.

	Example:
		```python
		tokens, state = state_change_tokens(NoteEvent(60, 0, duration=0.5, velocity=80), NotationState())
		# tokens == ["v80", "t/2"]
		```
	"""

	tokens: typing.List[str] = []

	changed, state = velocity_tokens(
		barbeat.grouping.rounded_velocity(note),
		barbeat.grouping.rounded_deviation(note),
		state,
	)
	tokens.extend(changed)

	musical_duration = barbeat.timebase.performance_to_musical_beats(note.duration, time_sig_denominator)
	changed, state = duration_tokens(musical_duration, state)
	tokens.extend(changed)

	changed, state = probability_tokens(note.probability, state)
	tokens.extend(changed)

	return tokens, state
