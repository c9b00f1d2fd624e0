"""
Category scoring.

Each finding is weighted by impact (high=3, medium=2, low=1). Successes
earn their full weight, warnings earn 35% of it, errors earn nothing. An
empty finding list scores a neutral 50.
"""

import math
from typing import Iterable

from analyzer.models import Finding


IMPACT_WEIGHTS = {"high": 3, "medium": 2, "low": 1}
WARNING_CREDIT = 0.35
NEUTRAL_SCORE = 50


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def calc_score(findings: Iterable[Finding]) -> int:
    total = 0.0
    earned = 0.0
    for finding in findings:
        weight = IMPACT_WEIGHTS[finding.impact]
        total += weight
        if finding.type == "success":
            earned += weight
        elif finding.type == "warning":
            earned += weight * WARNING_CREDIT

    if total == 0:
        return NEUTRAL_SCORE

    return max(0, min(100, round_half_up(100 * earned / total)))
