"""
Building safety risk score.

score = 3*C + 2*B + 1*A + 5*DOB + 0.5*311, plus an age penalty of 5 for
buildings over 80 years old that already score above zero, clamped to
[0, 100] and rounded half up to an integer.

HPD violation classes: A non-hazardous, B hazardous, C immediately
hazardous. Anything else (I orders, missing or unknown class) is counted
under I and carries no weight.
"""

import math
from typing import Iterable, Mapping, Optional

HPD_CLASSES = ("A", "B", "C", "I")
OTHER_CLASS = "I"

HPD_CLASS_WEIGHTS = {
    "C": 3.0,  # Immediately hazardous
    "B": 2.0,  # Hazardous
    "A": 1.0,  # Non-hazardous
    "I": 0.0,  # Orders / unclassified
}
DOB_VIOLATION_WEIGHT = 5.0
COMPLAINT_WEIGHT = 0.5  # Reports, not confirmed violations

AGE_PENALTY_THRESHOLD = 80
AGE_PENALTY = 5.0

MIN_SCORE = 0
MAX_SCORE = 100


def normalize_hpd_class(value) -> str:
    """Map a raw HPD class value to A/B/C, everything else to I."""
    if value is None:
        return OTHER_CLASS
    cls = str(value).strip().upper()
    return cls if cls in ("A", "B", "C") else OTHER_CLASS


def count_hpd_classes(violations: Iterable[Mapping]) -> dict[str, int]:
    """Count HPD violations per class; every violation lands in exactly one class."""
    counts = dict.fromkeys(HPD_CLASSES, 0)
    for violation in violations:
        counts[normalize_hpd_class(violation.get("class"))] += 1
    return counts


def building_age(construct_year: int, current_year: int) -> int:
    """Years since construction; 0 when the construction year is unknown."""
    if construct_year <= 0:
        return 0
    return max(current_year - construct_year, 0)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def raw_risk_score(
    class_counts: Mapping[str, int],
    dob_count: int,
    complaint_count: int,
    age: int,
) -> float:
    """Weighted score before clamping and rounding."""
    score = sum(HPD_CLASS_WEIGHTS[cls] * class_counts.get(cls, 0) for cls in HPD_CLASSES)
    score += DOB_VIOLATION_WEIGHT * dob_count
    score += COMPLAINT_WEIGHT * complaint_count
    if age > AGE_PENALTY_THRESHOLD and score > 0:
        score += AGE_PENALTY
    return score


def calculate_risk_score(
    class_counts: Mapping[str, int],
    dob_count: int,
    complaint_count: int,
    age: Optional[int] = 0,
) -> int:
    """
    Calculate the bounded 0-100 risk score for one building.

    Args:
        class_counts: HPD violation counts keyed by class (A, B, C, I)
        dob_count: Number of DOB violations
        complaint_count: Number of 311 complaints
        age: Building age in years (0 or None when unknown)

    Returns:
        Integer risk score in [0, 100]
    """
    score = raw_risk_score(class_counts, dob_count, complaint_count, age or 0)
    score = min(max(score, MIN_SCORE), MAX_SCORE)
    return round_half_up(score)
