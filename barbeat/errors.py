"""Exceptions raised by the notation codec.

Every failure is fatal to the single serialize or interpret call that raised
it. There is no partial result: either the whole string becomes a note list,
or the call raises.
"""


class NotationError (Exception):

	"""Base class for all bar|beat notation errors."""


class NotationFormatError (NotationError, ValueError):

	"""A token or numeric sub-expression does not match the grammar."""


class NotationRangeError (NotationError, ValueError):

	"""A value parsed correctly but lies outside its allowed range."""


class TimeSignatureError (NotationError, ValueError):

	"""The time signature options are inconsistent."""
