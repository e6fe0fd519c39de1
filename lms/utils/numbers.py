import math
from typing import Iterable, Optional


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up (66.5 -> 67).

    Python's round() uses banker's rounding, which would turn 62.5 into 62.
    """
    return int(math.floor(value + 0.5))


def percentage(part: int, whole: int) -> int:
    if not whole:
        return 0
    return round_half_up(part * 100 / whole)


def rounded_mean(values: Iterable[Optional[float]]) -> int:
    scores = [v for v in values if v is not None]
    if not scores:
        return 0
    return round_half_up(sum(scores) / len(scores))
