"""Layer 5 - transaction velocity over trailing windows"""

from datetime import datetime, timedelta
from typing import Iterable

from momo_guard.domain.models import LAYER_NAMES, LayerStatus, VelocityResult

# (window, minimum count, score, label)
VELOCITY_RULES = (
    (timedelta(hours=1), 3, 20, "last hour"),
    (timedelta(hours=3), 5, 30, "last 3 hours"),
    (timedelta(hours=24), 10, 40, "last 24 hours"),
)

# Widest window: how far back the history read must reach
LOOKBACK = max(window for window, _, _, _ in VELOCITY_RULES)

LAYER_NAME = LAYER_NAMES[5]


def degraded_velocity() -> VelocityResult:
    """History read failed: no velocity signal rather than an error"""
    return VelocityResult(layer=5, name=LAYER_NAME, status=LayerStatus.DEGRADED, score=0)


def count_in_window(timestamps: Iterable[datetime], reference: datetime, window: timedelta) -> int:
    """Count timestamps in (reference - window, reference]"""
    start = reference - window
    return sum(1 for ts in timestamps if start < ts <= reference)


def analyze_velocity(timestamps: Iterable[datetime], reference: datetime) -> VelocityResult:
    """
    Score bursts of the user's own transactions.

    Thresholds: >=3 in 1h -> +20, >=5 in 3h -> +30, >=10 in 24h -> +40.
    Windows end at the transaction's own timestamp (reference).
    """
    timestamps = list(timestamps)
    counts = [count_in_window(timestamps, reference, window) for window, _, _, _ in VELOCITY_RULES]

    score = 0
    factors = []
    for count, (_, minimum, points, label) in zip(counts, VELOCITY_RULES):
        if count >= minimum:
            score += points
            factors.append(f"{count} transactions in {label}")

    score = min(100, score)
    return VelocityResult(
        layer=5,
        name=LAYER_NAME,
        status=LayerStatus.WARNING if score > 0 else LayerStatus.PASS,
        score=score,
        factors=tuple(factors),
        count_1h=counts[0],
        count_3h=counts[1],
        count_24h=counts[2],
    )
