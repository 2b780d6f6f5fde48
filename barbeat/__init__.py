"""
barbeat - a compact, human-readable text codec for MIDI note events.

Bar|beat notation writes a clip as a stream of sticky state tokens, pitch
names and positions::

    v80 t/2 p0.8 C3 1|1 v120 t2 p0.6 D3 1|2

The two halves are exact inverses: ``serialize()`` turns note events into
the shortest unambiguous string, and ``interpret()`` turns that string back
into the same notes.

What the notation can say:

- **Sticky state.** ``v`` (velocity or ``v80-120`` range), ``t`` (duration)
  and ``p`` (probability) apply to every following pitch until changed,
  so the serializer only writes a value when it changes.
- **Chords and comma merges.** Pitches before a position all sound there.
  Identical groups in one bar share a beat list: ``C3 E3 G3 1|1,3``.
- **Musical numbers.** Beats and durations are written as decimals or as
  fractions over musical denominators (``1+1/3``, ``/4``), whichever is
  exact and shorter.
- **Time signatures.** Beats count the time signature's denominator note,
  so ``2|1`` in 6/8 is the seventh eighth note.
- **Drum mode.** ``serialize(notes, drum_mode=True)`` groups by pitch and
  compresses evenly spaced hits: ``v80 t/4 Gb1 1|1x16``.

Minimal example:

    ```python
    import barbeat

    notes = barbeat.interpret("v80 t/2 C3 E3 G3 1|1,3")
    text = barbeat.serialize(notes)     # "v80 t/2 C3 E3 G3 1|1,3"
    ```

Package-level exports: ``serialize``, ``interpret``, ``NoteEvent``,
``NotationOptions``, and the error classes.
"""

import barbeat.config
import barbeat.errors
import barbeat.interpreter
import barbeat.note_event
import barbeat.serializer


serialize = barbeat.serializer.serialize
interpret = barbeat.interpreter.interpret
NoteEvent = barbeat.note_event.NoteEvent
NotationOptions = barbeat.config.NotationOptions
NotationError = barbeat.errors.NotationError
NotationFormatError = barbeat.errors.NotationFormatError
NotationRangeError = barbeat.errors.NotationRangeError
TimeSignatureError = barbeat.errors.TimeSignatureError
