import dataclasses
import typing

import barbeat.constants.defaults


@dataclasses.dataclass(frozen=True)
class NoteEvent:

	"""
	A single note as the host performance API sees it.

	Times are in performance beats (quarter notes), regardless of the time
	signature. The codec never mutates a note; it only reads one or builds a
	new one.

	Parameters:
		pitch: MIDI note number (0-127).
		start_time: Onset in quarter-note beats from the clip start.
		duration: Length in quarter-note beats.
		velocity: Attack velocity (1-127). The lower bound when a deviation is set.
		velocity_deviation: Spread added to ``velocity`` to form the maximum of a
			random velocity range (0-126).
		probability: Chance the note triggers (0-1).
	"""

	pitch: int
	start_time: float
	duration: float = barbeat.constants.defaults.DEFAULT_DURATION
	velocity: float = barbeat.constants.defaults.DEFAULT_VELOCITY
	velocity_deviation: float = barbeat.constants.defaults.DEFAULT_VELOCITY_DEVIATION
	probability: float = barbeat.constants.defaults.DEFAULT_PROBABILITY

	@classmethod
	def from_dict (cls, data: typing.Mapping[str, typing.Any]) -> "NoteEvent":

		"""
		Build a note from a host dictionary (``pitch``, ``start_time``, ...).

		Missing optional fields fall back to the codec defaults. A ``None``
		value counts as missing, matching hosts that send explicit nulls.
		"""

		def _get (key: str, default: typing.Any) -> typing.Any:
			value = data.get(key)
			return default if value is None else value

		return cls(
			pitch = int(data["pitch"]),
			start_time = float(data["start_time"]),
			duration = float(_get("duration", barbeat.constants.defaults.DEFAULT_DURATION)),
			velocity = _get("velocity", barbeat.constants.defaults.DEFAULT_VELOCITY),
			velocity_deviation = _get("velocity_deviation", barbeat.constants.defaults.DEFAULT_VELOCITY_DEVIATION),
			probability = float(_get("probability", barbeat.constants.defaults.DEFAULT_PROBABILITY)),
		)

	def to_dict (self) -> typing.Dict[str, typing.Any]:

		"""Return the note as a plain dictionary using the host's field names."""

		return dataclasses.asdict(self)
