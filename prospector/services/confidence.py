"""
Confidence fusion.

Blends the automated (AI / provider) confidence for a contact with the
user's feedback into the single probability shown in the UI. User feedback
weighs more as it accumulates but never fully replaces the AI score.
"""

import math
from typing import Iterable, Optional

FEEDBACK_POINTS = {
    "excellent": 100,
    "ok": 50,
    "terrible": 0,
}

USER_WEIGHT_PER_FEEDBACK = 0.2
MAX_USER_WEIGHT = 0.8


def clamp_score(value: Optional[float]) -> int:
    """Round and clamp a confidence value into [0, 100]. None becomes 0."""
    if value is None:
        return 0
    # Half-up rounding
    return int(max(0, min(100, math.floor(value + 0.5))))


def user_weight(feedback_count: Optional[int]) -> float:
    return min(max(feedback_count or 0, 0) * USER_WEIGHT_PER_FEEDBACK, MAX_USER_WEIGHT)


def fuse_confidence(
    ai_score: Optional[float],
    user_score: Optional[float],
    feedback_count: Optional[int],
) -> int:
    """Return round(ai * (1 - w) + user * w) with w = min(count * 0.2, 0.8)."""
    weight = user_weight(feedback_count)
    combined = (ai_score or 0) * (1 - weight) + (user_score or 0) * weight
    return clamp_score(combined)


def feedback_points(feedback_type: str) -> int:
    try:
        return FEEDBACK_POINTS[feedback_type]
    except KeyError:
        raise ValueError(f"Unknown feedback type: {feedback_type!r}") from None


def average_feedback_score(feedback_types: Iterable[str]) -> Optional[int]:
    """Mean of per-type points over all feedback, or None when there is none."""
    points = [feedback_points(kind) for kind in feedback_types]
    if not points:
        return None
    return clamp_score(sum(points) / len(points))


def fuse_contact(contact) -> int:
    """Fuse the confidence fields of a contact-like object."""
    return fuse_confidence(
        contact.name_confidence_score,
        contact.user_feedback_score,
        contact.feedback_count,
    )
