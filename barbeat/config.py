"""Notation options and YAML configuration.

A config file holds defaults for the command line::

    notation:
      time_signature: "6/8"     # or numerator: 6 / denominator: 8
      beats_per_bar: 4          # used only without a time signature
      drum_mode: false
"""

import dataclasses
import logging
import os
import re
import typing

import yaml

import barbeat.errors
import barbeat.timebase


logger = logging.getLogger(__name__)

_TIME_SIGNATURE_PATTERN = re.compile(r"^\s*(\d+)\s*/\s*(\d+)\s*$")


@dataclasses.dataclass
class NotationOptions:

	"""
	Options shared by serialize and interpret.

	Validated on construction: a numerator without a denominator (or the
	reverse) raises ``TimeSignatureError`` before any notes are touched.
	"""

	beats_per_bar: typing.Optional[float] = None
	time_sig_numerator: typing.Optional[int] = None
	time_sig_denominator: typing.Optional[int] = None
	drum_mode: bool = False

	def __post_init__ (self) -> None:
		barbeat.timebase.resolve_beats_per_bar(self.beats_per_bar, self.time_sig_numerator, self.time_sig_denominator)

	@property
	def beats_per_bar_resolved (self) -> float:

		"""Musical beats per bar after applying the time signature and defaults."""

		return barbeat.timebase.resolve_beats_per_bar(self.beats_per_bar, self.time_sig_numerator, self.time_sig_denominator)

	def time_signature_kwargs (self) -> typing.Dict[str, typing.Any]:

		"""Keyword arguments for :func:`barbeat.interpret` (no ``drum_mode``)."""

		return {
			"beats_per_bar": self.beats_per_bar,
			"time_sig_numerator": self.time_sig_numerator,
			"time_sig_denominator": self.time_sig_denominator,
		}


def parse_time_signature (text: str) -> typing.Tuple[int, int]:

	"""
	Parse ``"N/D"`` into ``(numerator, denominator)``.

	Raises:
		TimeSignatureError: If the text is not two positive integers around a slash.
	"""

	match = _TIME_SIGNATURE_PATTERN.match(text)

	if not match:
		raise barbeat.errors.TimeSignatureError(f"Invalid time signature: \"{text}\". Expected \"N/D\" like \"4/4\" or \"6/8\"")

	numerator, denominator = int(match.group(1)), int(match.group(2))

	if numerator <= 0 or denominator <= 0:
		raise barbeat.errors.TimeSignatureError(f"Invalid time signature: \"{text}\"")

	return numerator, denominator


def load_config (config_path: str = "config.yaml") -> dict:

	"""
	Load configuration from a YAML file.

	A missing file is not an error: a warning is logged and an empty
	config returned.
	"""

	if not os.path.exists(config_path):
		logger.warning(f"Config file {config_path} not found. Using defaults.")
		return {}

	with open(config_path, "r") as f:
		return yaml.safe_load(f) or {}


def options_from_config (config: typing.Mapping[str, typing.Any]) -> NotationOptions:

	"""Build options from the ``notation`` section of a loaded config."""

	section = config.get("notation") or {}

	numerator = section.get("numerator")
	denominator = section.get("denominator")

	if section.get("time_signature") is not None:
		numerator, denominator = parse_time_signature(str(section["time_signature"]))

	return NotationOptions(
		beats_per_bar = section.get("beats_per_bar"),
		time_sig_numerator = numerator,
		time_sig_denominator = denominator,
		drum_mode = bool(section.get("drum_mode", False)),
	)
