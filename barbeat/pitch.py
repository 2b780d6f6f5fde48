"""MIDI note number to note name conversion.

Convention: **C3 = 60**, so octave numbers run from -2 (MIDI 0 is ``C-2``)
to 8 (MIDI 127 is ``G8``). Names are written with flats (``Db``, ``Eb``,
``Gb``, ``Ab``, ``Bb``); parsing also accepts sharps and either case for the
letter. The flat sign is always a lowercase ``b``.
"""

import re
import typing

import barbeat.constants.defaults
import barbeat.errors


PITCH_CLASS_NAMES = ("C", "Db", "D", "Eb", "E", "F", "Gb", "G", "Ab", "A", "Bb", "B")

PITCH_CLASS_VALUES: typing.Dict[str, int] = {
	"c": 0,
	"c#": 1,
	"db": 1,
	"d": 2,
	"d#": 3,
	"eb": 3,
	"e": 4,
	"f": 5,
	"f#": 6,
	"gb": 6,
	"g": 7,
	"g#": 8,
	"ab": 8,
	"a": 9,
	"a#": 10,
	"bb": 10,
	"b": 11,
}

NOTE_NAME_PATTERN = re.compile(r"^([A-Ga-g][#b]?)(-?\d+)$")


def is_valid_midi (pitch: typing.Any) -> bool:

	"""Return True for an integer MIDI note number in 0-127."""

	if isinstance(pitch, bool) or not isinstance(pitch, int):
		return False

	return barbeat.constants.defaults.MIN_PITCH <= pitch <= barbeat.constants.defaults.MAX_PITCH


def midi_to_note_name (pitch: int) -> str:

	"""
	Convert a MIDI note number to its name.

	Examples: 60 → ``"C3"``, 42 → ``"Gb1"``, 36 → ``"C1"``.

	Raises:
		NotationRangeError: If ``pitch`` is not an integer in 0-127.
	"""

	if not is_valid_midi(pitch):
		raise barbeat.errors.NotationRangeError(f"Invalid MIDI pitch: {pitch}")

	octave = (pitch // 12) - 2
	return f"{PITCH_CLASS_NAMES[pitch % 12]}{octave}"


def note_name_to_midi (name: str) -> int:

	"""
	Convert a note name such as ``"C3"``, ``"F#1"`` or ``"bb-1"`` to a MIDI number.

	Raises:
		NotationFormatError: If ``name`` is not shaped like a note name.
		NotationRangeError: If the note falls outside MIDI 0-127.
	"""

	match = NOTE_NAME_PATTERN.match(name)

	# Cb, Fb, E# and B# match the shape but are not spelled in the table
	if not match or match.group(1).lower() not in PITCH_CLASS_VALUES:
		raise barbeat.errors.NotationFormatError(f"Invalid note name: \"{name}\"")

	pitch_class = PITCH_CLASS_VALUES[match.group(1).lower()]
	octave = int(match.group(2))
	pitch = (octave + 2) * 12 + pitch_class

	if not is_valid_midi(pitch):
		raise barbeat.errors.NotationRangeError(f"Note \"{name}\" is outside the MIDI range 0-127")

	return pitch


def is_note_name (token: str) -> bool:

	"""Return True when ``token`` is shaped like a note name (range is not checked)."""

	return NOTE_NAME_PATTERN.match(token) is not None
