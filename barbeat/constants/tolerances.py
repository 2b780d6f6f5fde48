"""Comparison tolerances and the fraction search space.

All values are empirical. They are part of the wire format: the serializer's
choice between ``1.25`` and ``1+1/4`` (or between ``1|1x4`` and
``1|1,2,3,4``) depends on them.
"""

# "Musically relevant" denominators, searched in this order
FRACTION_DENOMINATORS = (2, 3, 4, 6, 8, 12, 16)

# A fraction matches when num/den is closer than this to the fractional part
FRACTION_EPSILON = 0.0005

# Decimal output is rounded to this many places
DECIMAL_PLACES = 3

# A rounded decimal is lossless if value * 1000 is within this of an integer
LOSSLESS_DECIMAL_EPSILON = 0.01

# Two notes have the same duration/probability within this delta
STATE_EPSILON = 0.001

# Two notes share a position when their beats are within this delta
POSITION_EPSILON = 0.001

# Consecutive drum hits form a repeat when their spacing varies by at most this
REPEAT_STEP_EPSILON = 0.002

# Musical beat positions are snapped to this many places before bar/beat
# arithmetic, absorbing float noise such as 2.9999999999999996
POSITION_SNAP_PLACES = 9
