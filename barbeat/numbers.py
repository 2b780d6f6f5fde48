"""Text formatting and parsing for beat offsets, durations and steps.

A value is written either as a decimal (``1.25``) or in a fractional form:
a bare fraction (``3/4``), the ``/den`` shorthand for ``1/den`` (``/3``),
or a mixed number (``2+1/3``). The rule is *lossless, then shortest*:

- If three decimal places reproduce the value exactly, the shorter of the
  decimal and the fraction is used, and the fraction wins a tie.
- If they do not (``1/3`` is ``0.333...``), the fraction is mandatory.
- If no fraction over a musically relevant denominator matches, the
  decimal is used whatever its precision.

Beat **positions** are always 1 or greater and are never written as bare
fractions, only as mixed numbers. **Unsigned values** (durations, repeat
steps) may be below 1 and use the bare forms.

Example:
	```python
	format_position_beat(1 + 1 / 3)   # "1+1/3"  (decimal is lossy)
	format_position_beat(1.25)        # "1.25"   (decimal is shorter)
	format_position_beat(1.125)       # "1+1/8"  (tie, fraction wins)
	format_unsigned(0.5)              # "/2"
	```
"""

import enum
import math
import re
import typing

import barbeat.constants.tolerances
import barbeat.errors


class NumberStyle (enum.Enum):

	"""Which rendering the formatter picked for a value."""

	DECIMAL = "decimal"
	FRACTION = "fraction"


_MIXED_PATTERN = re.compile(r"^(\d+)\+(\d+)/(\d+)$")
_FRACTION_PATTERN = re.compile(r"^(\d*)/(\d+)$")
_DECIMAL_PATTERN = re.compile(r"^(?:\d+(?:\.\d*)?|\.\d+)$")


def format_decimal (value: float) -> str:

	"""
	Render a value with up to three decimal places and no trailing zeros.

	Whole numbers lose the decimal point entirely: ``2.0`` → ``"2"``,
	``0.750`` → ``"0.75"``.
	"""

	if value % 1 == 0:
		return str(int(value))

	text = f"{value:.{barbeat.constants.tolerances.DECIMAL_PLACES}f}"
	return text.rstrip("0").rstrip(".")


def is_lossless_decimal (value: float) -> bool:

	"""Return True if rounding to three decimal places reproduces ``value``."""

	scale = 10 ** barbeat.constants.tolerances.DECIMAL_PLACES
	scaled = value * scale

	return abs(round(scaled) - scaled) < barbeat.constants.tolerances.LOSSLESS_DECIMAL_EPSILON


def find_fraction (fractional_part: float) -> typing.Optional[typing.Tuple[int, int]]:

	"""
	Find the first ``(numerator, denominator)`` close to a fractional part.

	Denominators are tried in the fixed order 2, 3, 4, 6, 8, 12, 16 and
	numerators from 1 upward, so the lowest-terms fraction is always found
	before any equivalent one (``1/2`` before ``2/4``).
	"""

	for denominator in barbeat.constants.tolerances.FRACTION_DENOMINATORS:
		for numerator in range(1, denominator):
			if abs(numerator / denominator - fractional_part) < barbeat.constants.tolerances.FRACTION_EPSILON:
				return numerator, denominator

	return None


def choose_number_style (value: float, decimal_text: str, fraction_text: typing.Optional[str]) -> NumberStyle:

	"""
	Decide between the decimal and the fraction text for ``value``.

	Pure comparison with no rendering, so the decision can be tested alone.
	"""

	if fraction_text is None:
		return NumberStyle.DECIMAL

	if not is_lossless_decimal(value):
		return NumberStyle.FRACTION

	if len(decimal_text) < len(fraction_text):
		return NumberStyle.DECIMAL

	return NumberStyle.FRACTION


def _fraction_text (value: float, allow_bare: bool) -> typing.Optional[str]:

	"""Render the fractional form of a non-integer, or None if none matches."""

	integer_part = math.floor(value)
	fraction = find_fraction(value - integer_part)

	if fraction is None:
		return None

	numerator, denominator = fraction

	if integer_part == 0 and allow_bare:
		if numerator == 1:
			return f"/{denominator}"
		return f"{numerator}/{denominator}"

	return f"{integer_part}+{numerator}/{denominator}"


def _format (value: float, allow_bare: bool) -> str:

	if value % 1 == 0:
		return str(int(value))

	decimal_text = format_decimal(value)
	fraction_text = _fraction_text(value, allow_bare)

	if choose_number_style(value, decimal_text, fraction_text) is NumberStyle.FRACTION:
		return typing.cast(str, fraction_text)

	return decimal_text


def format_position_beat (beat: float) -> str:

	"""
	Format a 1-based beat position: integer, decimal or mixed number.

	Raises:
		NotationRangeError: If ``beat`` is below 1.
	"""

	if beat < 1:
		raise barbeat.errors.NotationRangeError(f"Beat must be 1 or greater, got: {beat}")

	return _format(beat, allow_bare=False)


def format_unsigned (value: float) -> str:

	"""
	Format a duration or step: integer, decimal, bare fraction or mixed number.

	Raises:
		NotationRangeError: If ``value`` is negative.
	"""

	if value < 0:
		raise barbeat.errors.NotationRangeError(f"Value cannot be negative, got: {value}")

	return _format(value, allow_bare=True)


def parse_number (text: str, context: typing.Optional[str] = None, label: str = "number") -> float:

	"""
	Parse an integer, decimal, fraction (``a/b`` or ``/b``) or mixed number (``a+b/c``).

	Parameters:
		text: The numeric text alone.
		context: The enclosing token, quoted in error messages (defaults to ``text``).
		label: What the number is, for error messages ("duration", "bar|beat", ...).

	Raises:
		NotationRangeError: If a denominator is zero.
		NotationFormatError: If the text matches none of the four shapes.
	"""

	if context is None:
		context = text

	match = _MIXED_PATTERN.match(text)

	if match:
		whole, numerator, denominator = (int(part) for part in match.groups())
		_check_denominator(denominator, context, label)
		return whole + numerator / denominator

	match = _FRACTION_PATTERN.match(text)

	if match:
		# "/3" is shorthand for "1/3"
		numerator = int(match.group(1)) if match.group(1) else 1
		denominator = int(match.group(2))
		_check_denominator(denominator, context, label)
		return numerator / denominator

	if _DECIMAL_PATTERN.match(text):
		return float(text)

	raise barbeat.errors.NotationFormatError(f"Invalid {label} format: \"{context}\"")


def parse_decimal (text: str, context: typing.Optional[str] = None, label: str = "number") -> float:

	"""Parse a plain integer or decimal; fractions are rejected."""

	if not _DECIMAL_PATTERN.match(text):
		raise barbeat.errors.NotationFormatError(f"Invalid {label} format: \"{context if context is not None else text}\"")

	return float(text)


def _check_denominator (denominator: int, context: str, label: str) -> None:

	if denominator == 0:
		raise barbeat.errors.NotationRangeError(f"Invalid {label} format: division by zero in \"{context}\"")
