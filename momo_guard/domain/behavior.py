"""Layer 4 - behavioral anomaly analysis against the user's history"""

from decimal import Context, Decimal
from typing import Optional

from momo_guard.domain.models import LAYER_NAMES, BehaviorProfile, BehaviorResult, LayerStatus, ParsedTransaction

AMOUNT_MULTIPLE_THRESHOLD = Decimal("3")
AMOUNT_ANOMALY_SCORE = 25
TENTH = Decimal("0.1")
EARLY_MORNING_SCORE = 40  # 02:00-05:59
LATE_NIGHT_SCORE = 20  # 22:00-01:59

LAYER_NAME = LAYER_NAMES[4]


def degraded_behavior() -> BehaviorResult:
    """Profile read failed: no anomaly signal rather than an error"""
    return BehaviorResult(layer=4, name=LAYER_NAME, status=LayerStatus.DEGRADED, score=0)


def _amount_multiple(amount: Decimal, average: Decimal) -> Decimal:
    """amount / average to one decimal place, however many digits the quotient has"""
    ratio = amount / average
    return ratio.quantize(TENTH, context=Context(prec=max(28, ratio.adjusted() + 3)))


def analyze_behavior(transaction: ParsedTransaction, profile: Optional[BehaviorProfile]) -> BehaviorResult:
    """
    Compare a transaction with the user's historical behavior.

    - amount > 3x the user's average: +25 (skipped for users without an average yet;
      an average of zero means any positive amount counts)
    - hour in [2, 5]: +40, very early morning
    - hour in [22, 23] or [0, 1]: +20, late night

    Returns anomaly score capped at 100.
    """
    score = 0
    factors = []
    average = profile.average_transaction_amount if profile else None
    multiple = None

    amount = transaction.amount
    if average is not None and amount is not None and amount > average * AMOUNT_MULTIPLE_THRESHOLD:
        score += AMOUNT_ANOMALY_SCORE
        if average > 0:
            multiple = _amount_multiple(amount, average)
            factors.append(f"Amount GHS {amount} is {multiple}x the user's average of GHS {average}")
        else:
            factors.append(f"Amount GHS {amount} with no spending baseline (average GHS {average})")

    hour = transaction.hour
    if hour is not None:
        clock = transaction.transaction_time.strftime("%H:%M:%S")
        if 2 <= hour <= 5:
            score += EARLY_MORNING_SCORE
            factors.append(f"Transaction at {clock} (very early morning)")
        elif hour >= 22 or hour <= 1:
            score += LATE_NIGHT_SCORE
            factors.append(f"Transaction at {clock} (late night)")

    score = min(100, score)
    return BehaviorResult(
        layer=4,
        name=LAYER_NAME,
        status=LayerStatus.WARNING if score > 0 else LayerStatus.PASS,
        score=score,
        factors=tuple(factors),
        average_transaction_amount=average,
        amount_multiple=multiple,
    )
