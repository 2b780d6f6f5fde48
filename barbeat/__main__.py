import argparse
import json
import logging
import os
import sys
import typing

import barbeat
import barbeat.config
import barbeat.errors
import barbeat.midi_file
import barbeat.note_event


# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def _resolve_options (args: argparse.Namespace) -> barbeat.config.NotationOptions:

	"""
	Merge config file defaults with command line flags (flags win).
	"""

	options = barbeat.config.options_from_config(barbeat.config.load_config(args.config))

	if args.time_signature:
		numerator, denominator = barbeat.config.parse_time_signature(args.time_signature)
		options = barbeat.config.NotationOptions(
			beats_per_bar = options.beats_per_bar,
			time_sig_numerator = numerator,
			time_sig_denominator = denominator,
			drum_mode = options.drum_mode,
		)

	if getattr(args, "drum_mode", False):
		options.drum_mode = True

	return options


def _load_notes (path: str, options: barbeat.config.NotationOptions) -> typing.Tuple[typing.List[barbeat.note_event.NoteEvent], barbeat.config.NotationOptions]:

	"""
	Read notes from a MIDI file or a JSON list of note dictionaries.

	A MIDI file's own time signature is used when none was configured.
	"""

	if path.lower().endswith((".mid", ".midi")):

		clip = barbeat.midi_file.read_midi_file(path)

		if options.time_sig_numerator is None and clip.time_sig_numerator is not None:
			options = barbeat.config.NotationOptions(
				time_sig_numerator = clip.time_sig_numerator,
				time_sig_denominator = clip.time_sig_denominator,
				drum_mode = options.drum_mode,
			)

		return clip.notes, options

	with open(path, "r") as f:
		data = json.load(f)

	return [barbeat.note_event.NoteEvent.from_dict(item) for item in data], options


def encode (args: argparse.Namespace) -> None:

	"""Print the notation for a MIDI or JSON file."""

	options = _resolve_options(args)
	notes, options = _load_notes(args.input, options)

	print(barbeat.serialize(notes, drum_mode=options.drum_mode, **options.time_signature_kwargs()))


def decode (args: argparse.Namespace) -> None:

	"""Interpret notation (inline or from a file) and print JSON or write a file."""

	options = _resolve_options(args)

	if os.path.isfile(args.notation):
		with open(args.notation, "r") as f:
			text = f.read()
	else:
		text = args.notation

	notes = barbeat.interpret(text, **options.time_signature_kwargs())

	if args.output and args.output.lower().endswith((".mid", ".midi")):
		barbeat.midi_file.write_midi_file(
			notes,
			args.output,
			time_sig_numerator = options.time_sig_numerator or 4,
			time_sig_denominator = options.time_sig_denominator or 4,
		)
		return

	payload = json.dumps([note.to_dict() for note in notes], indent=2)

	if args.output:
		with open(args.output, "w") as f:
			f.write(payload + "\n")
		logger.info(f"Wrote {len(notes)} notes to {args.output}")
	else:
		print(payload)


def main () -> None:

	"""
	Entry point for the barbeat command line.
	"""

	parser = argparse.ArgumentParser(prog="barbeat", description="Convert notes to and from bar|beat notation")
	parser.add_argument("--config", default="config.yaml", help="YAML config file (default: config.yaml)")
	parser.add_argument("--time-signature", help="Time signature such as 4/4 or 6/8")

	subparsers = parser.add_subparsers(dest="command", required=True)

	encode_parser = subparsers.add_parser("encode", help="Print notation for a .mid or .json file")
	encode_parser.add_argument("input", help="Input .mid or .json file")
	encode_parser.add_argument("--drum-mode", action="store_true", help="Group by pitch and compress repeats")
	encode_parser.set_defaults(handler=encode)

	decode_parser = subparsers.add_parser("decode", help="Interpret notation into notes")
	decode_parser.add_argument("notation", help="Notation text, or a file containing it")
	decode_parser.add_argument("--output", help="Write to a .mid or .json file instead of printing JSON")
	decode_parser.set_defaults(handler=decode)

	args = parser.parse_args()

	try:
		args.handler(args)
	except barbeat.errors.NotationError as exc:
		logger.error(str(exc))
		sys.exit(1)


if __name__ == "__main__":
	main()
