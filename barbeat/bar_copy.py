"""Bar copy tokens and the per-bar note cache behind them.

Every note the interpreter emits is filed under the bar it lands in, with
its offset from the start of that bar. A copy token replays cached bars
somewhere else::

    @2=         # bar 1 (the previous bar) into bar 2
    @5=1        # bar 1 into bar 5
    @5=1-3      # bars 1, 2, 3 into bars 5, 6, 7
    @3-8=       # bar 2 into each of bars 3 to 8
    @3-8=1      # bar 1 into each of bars 3 to 8
    @3-8=1-2    # bars 1 and 2 tiled across bars 3 to 8
    @clear      # forget everything cached so far

Copies are cached in their destination bar too, so a later copy can pick
them up again. A copy that cannot happen (an empty or missing source, a
bar copied onto itself, a backwards range) is logged as a warning and
skipped; it never fails the call.
"""

import dataclasses
import logging
import re
import typing

import barbeat.errors
import barbeat.note_event
import barbeat.timebase


logger = logging.getLogger(__name__)

CLEAR_TOKEN = "@clear"

_BAR_COPY_PATTERN = re.compile(r"^@(\d+)(?:-(\d+))?=(?:(\d+)(?:-(\d+))?)?$")


@dataclasses.dataclass(frozen=True)
class BarCopy:

	"""
	One parsed ``@dest=source`` token.

	``destination_end`` is None for a single destination bar and
	``source_start`` is None when the source is the bar before the
	destination. ``source_end`` is None for a single source bar.
	"""

	destination_start: int
	destination_end: typing.Optional[int] = None
	source_start: typing.Optional[int] = None
	source_end: typing.Optional[int] = None

	@property
	def is_range_destination (self) -> bool:
		return self.destination_end is not None


@dataclasses.dataclass(frozen=True)
class BarNote:

	"""A cached note and its offset (in performance beats) from the start of its bar."""

	offset: float
	note: barbeat.note_event.NoteEvent


def is_bar_copy (token: str) -> bool:

	"""Return True for any token in the copy family (``@...``)."""

	return token.startswith("@")


def parse_bar_copy (token: str) -> BarCopy:

	"""
	Parse ``@N=``, ``@N=S``, ``@N=S-T``, ``@N-M=``, ``@N-M=S`` or ``@N-M=S-T``.

	Bar numbers are not range checked here; an unusable bar is a warning
	when the copy is applied.

	Raises:
		NotationFormatError: If the token has none of these shapes.
	"""

	match = _BAR_COPY_PATTERN.match(token)

	if not match:
		raise barbeat.errors.NotationFormatError(
			f"Invalid bar copy: \"{token}\". Expected \"@{{bar}}=\", \"@{{bar}}={{bar}}\" or \"@{{bar}}-{{bar}}={{bar}}-{{bar}}\""
		)

	destination_start, destination_end, source_start, source_end = (
		int(group) if group is not None else None for group in match.groups()
	)

	return BarCopy(
		destination_start = destination_start,
		destination_end = destination_end,
		source_start = source_start,
		source_end = source_end,
	)


class BarCache:

	"""
	Notes filed by the bar they start in.

	Offsets are kept in performance beats so a copy is a plain shift by the
	distance between bar starts, whatever the time signature.
	"""

	def __init__ (self, beats_per_bar: float, time_sig_denominator: typing.Optional[int] = None) -> None:

		self.beats_per_bar = beats_per_bar
		self.time_sig_denominator = time_sig_denominator
		self.bars: typing.Dict[int, typing.List[BarNote]] = {}

	def bar_start (self, bar: int) -> float:

		"""Start of ``bar`` in performance beats."""

		return barbeat.timebase.musical_to_performance_beats((bar - 1) * self.beats_per_bar, self.time_sig_denominator)

	def add (self, note: barbeat.note_event.NoteEvent) -> None:

		musical_beats = barbeat.timebase.performance_to_musical_beats(note.start_time, self.time_sig_denominator)
		position = barbeat.timebase.musical_beats_to_position(musical_beats, self.beats_per_bar)
		offset = barbeat.timebase.musical_to_performance_beats(position.beat - 1, self.time_sig_denominator)

		self.bars.setdefault(position.bar, []).append(BarNote(offset=offset, note=note))

	def clear (self) -> None:

		self.bars.clear()

	def has_notes (self, bar: int) -> bool:

		return bool(self.bars.get(bar))

	def copy_bar (self, source: int, destination: int) -> typing.List[barbeat.note_event.NoteEvent]:

		"""
		Copy the cached notes of ``source`` into ``destination``.

		The copies are cached under ``destination`` and returned. An empty
		source logs a warning and returns an empty list.
		"""

		source_notes = list(self.bars.get(source, []))

		if not source_notes:
			logger.warning(f"Bar {source} is empty, nothing to copy")
			return []

		destination_start = self.bar_start(destination)
		destination_notes = self.bars.setdefault(destination, [])
		copies: typing.List[barbeat.note_event.NoteEvent] = []

		for cached in source_notes:
			copy = dataclasses.replace(cached.note, start_time=destination_start + cached.offset)
			destination_notes.append(BarNote(offset=cached.offset, note=copy))
			copies.append(copy)

		return copies


def apply_bar_copy (copy: BarCopy, cache: BarCache) -> typing.Optional[typing.List[barbeat.note_event.NoteEvent]]:

	"""
	Carry out a bar copy against ``cache``.

	Returns:
		The copied notes in order, or None when nothing was copied.
	"""

	if copy.is_range_destination:
		copies = _copy_to_range(copy, cache)
	else:
		copies = _copy_to_bar(copy, cache)

	return copies if copies else None


def _copy_to_bar (copy: BarCopy, cache: BarCache) -> typing.List[barbeat.note_event.NoteEvent]:

	"""``@N=``, ``@N=S`` and ``@N=S-T``: sources land on N, N+1, ..."""

	destination = copy.destination_start

	if copy.source_start is None:
		source_start = source_end = destination - 1
		if source_start <= 0:
			logger.warning("Cannot copy from previous bar when at bar 1 or earlier")
			return []
	elif copy.source_end is None:
		source_start = source_end = copy.source_start
		if source_start <= 0:
			logger.warning(f"Cannot copy from bar {source_start} (no such bar)")
			return []
	else:
		source_start, source_end = copy.source_start, copy.source_end
		if source_start <= 0 or source_end <= 0:
			logger.warning(f"Cannot copy from range {source_start}-{source_end} (invalid bar numbers)")
			return []
		if source_start > source_end:
			logger.warning(f"Invalid source range {source_start}-{source_end} (start > end)")
			return []

	copies: typing.List[barbeat.note_event.NoteEvent] = []

	for source in range(source_start, source_end + 1):

		if source == destination:
			logger.warning(f"Cannot copy bar {source} to itself (would cause infinite loop)")
		else:
			copies.extend(cache.copy_bar(source, destination))

		destination += 1

	return copies


def _copy_to_range (copy: BarCopy, cache: BarCache) -> typing.List[barbeat.note_event.NoteEvent]:

	"""``@N-M=``, ``@N-M=S`` and ``@N-M=S-T``: one source repeated, or several tiled."""

	destination_start = copy.destination_start
	destination_end = typing.cast(int, copy.destination_end)

	if destination_start <= 0 or destination_end <= 0:
		logger.warning(f"Invalid destination range @{destination_start}-{destination_end}= (invalid bar numbers)")
		return []

	if destination_start > destination_end:
		logger.warning(f"Invalid destination range @{destination_start}-{destination_end}= (start > end)")
		return []

	if copy.source_start is not None and copy.source_end is not None:
		return _tile(copy.source_start, copy.source_end, destination_start, destination_end, cache)

	if copy.source_start is None:
		source = destination_start - 1
		if source <= 0:
			logger.warning(f"Cannot copy from previous bar when destination starts at bar {destination_start}")
			return []
	else:
		source = copy.source_start
		if source <= 0:
			logger.warning(f"Cannot copy from bar {source} (no such bar)")
			return []

	if not cache.has_notes(source):
		logger.warning(f"Bar {source} is empty, nothing to copy")
		return []

	copies: typing.List[barbeat.note_event.NoteEvent] = []

	for destination in range(destination_start, destination_end + 1):

		if destination == source:
			logger.warning(f"Skipping copy of bar {source} to itself")
			continue

		copies.extend(cache.copy_bar(source, destination))

	return copies


def _tile (
	source_start: int,
	source_end: int,
	destination_start: int,
	destination_end: int,
	cache: BarCache,
) -> typing.List[barbeat.note_event.NoteEvent]:

	"""Repeat the source bars in order across the destination range, cutting the last pass short."""

	if source_start <= 0 or source_end <= 0:
		logger.warning(f"Invalid source range @{destination_start}-{destination_end}={source_start}-{source_end} (invalid bar numbers)")
		return []

	if source_start > source_end:
		logger.warning(f"Invalid source range @{destination_start}-{destination_end}={source_start}-{source_end} (start > end)")
		return []

	source_count = source_end - source_start + 1
	copies: typing.List[barbeat.note_event.NoteEvent] = []

	for offset, destination in enumerate(range(destination_start, destination_end + 1)):

		source = source_start + (offset % source_count)

		if source == destination:
			logger.warning(f"Skipping copy of bar {source} to itself")
			continue

		copies.extend(cache.copy_bar(source, destination))

	return copies
