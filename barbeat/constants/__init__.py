"""Constants for barbeat.

This package contains two sets of constants:

- ``barbeat.constants.defaults`` - Initial performance state and option defaults
- ``barbeat.constants.tolerances`` - Comparison epsilons and the fraction search space

The tolerance values decide the exact text the serializer produces. Changing
any of them changes serialized output, so treat them as fixed.
"""
