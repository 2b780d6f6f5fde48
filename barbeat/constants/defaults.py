"""Default performance state and option values.

Every serialize and interpret pass starts from this state. A state token is
only written (or needed) once a note differs from it.
"""

# Initial performance state
DEFAULT_VELOCITY = 100
DEFAULT_VELOCITY_DEVIATION = 0
DEFAULT_DURATION = 1.0          # Notation beats
DEFAULT_PROBABILITY = 1.0

# Bars are 4 beats long unless a time signature says otherwise
DEFAULT_BEATS_PER_BAR = 4

# MIDI standard ranges
MIN_PITCH = 0
MAX_PITCH = 127
MIN_VELOCITY = 0
MAX_VELOCITY = 127

# Repeats expanding to more notes than this are logged as suspicious
REPEAT_WARNING_THRESHOLD = 100
