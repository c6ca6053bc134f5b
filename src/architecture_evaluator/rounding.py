"""Rounding helpers shared by the overlay, scorers and cost model."""

import math


def round_half_up(value: float) -> int:
    """Round to the nearest integer, with halves rounded towards +infinity.

    Python's round() uses banker's rounding (round(2.5) == 2); every monetary
    figure and user count in the evaluator rounds 2.5 up to 3 instead.
    """
    return int(math.floor(value + 0.5))
