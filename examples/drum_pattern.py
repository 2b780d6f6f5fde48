"""
barbeat: drum pattern round trip

Builds a two-bar groove as note events, prints it in both serializer
modes, then reads the drum-mode text back and checks nothing was lost.

How to run
──────────
  python examples/drum_pattern.py
  python examples/drum_pattern.py groove.mid     # also write a MIDI file
"""

import sys

import barbeat
import barbeat.midi_file

KICK = 36
SNARE = 38
CLOSED_HAT = 42

notes = []

for bar in range(2):

	offset = bar * 4

	# Kick on 1 and 3, a pickup sixteenth before beat 3 in the second bar
	notes.append(barbeat.NoteEvent(KICK, offset + 0, 0.25))
	notes.append(barbeat.NoteEvent(KICK, offset + 2, 0.25))

	if bar == 1:
		notes.append(barbeat.NoteEvent(KICK, offset + 1.75, 0.25, velocity=70))

	# Snare backbeat with a random velocity spread
	notes.append(barbeat.NoteEvent(SNARE, offset + 1, 0.25, velocity=90, velocity_deviation=20))
	notes.append(barbeat.NoteEvent(SNARE, offset + 3, 0.25, velocity=90, velocity_deviation=20))

	# Sixteenth hats, every other one skipped half the time
	for step in range(16):
		probability = 1.0 if step % 2 == 0 else 0.5
		notes.append(barbeat.NoteEvent(CLOSED_HAT, offset + step * 0.25, 0.25, velocity=80, probability=probability))

if __name__ == "__main__":

	print("time mode:")
	print(" ", barbeat.serialize(notes))

	drum_text = barbeat.serialize(notes, drum_mode=True)
	print("drum mode:")
	print(" ", drum_text)

	decoded = barbeat.interpret(drum_text)
	print(f"decoded {len(decoded)} of {len(notes)} notes")

	if len(sys.argv) > 1:
		barbeat.midi_file.write_midi_file(decoded, sys.argv[1])
