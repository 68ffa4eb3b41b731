"""Risk scoring engine - amount/temporal layers and the composite risk decision"""

from decimal import Decimal
from typing import Sequence, Tuple

from momo_guard.domain.models import (
    LAYER_NAMES,
    NON_TRANSACTIONAL_TYPES,
    AmountResult,
    LayerDetail,
    LayerStatus,
    ParsedTransaction,
    RiskAnalysisResult,
    RiskLevel,
    TemporalResult,
    TransactionType,
)
from momo_guard.utils.date_utils import is_weekend

ROUND_AMOUNTS = frozenset(Decimal(v) for v in (100, 500, 1000, 5000, 10000))
ROUND_AMOUNT_BONUS = 15

WEEKEND_SCORE = 10

# Utility spends from a known carrier, and clean validated transactions, are capped here
LOW_RISK_CAP = 20

BLACKLIST_PENALTY = 60

# Layers whose prose factors feed risk_factors; Layer 6 only contributes its score
FACTOR_LAYERS = (1, 3, 4, 5, 7)

RECOMMENDED_ACTIONS = {
    RiskLevel.CRITICAL: (
        "Do not proceed / likely scam",
        "Report to provider immediately",
        "Check account for unauthorized access",
    ),
    RiskLevel.HIGH: (
        "Verify transaction details with counterpart",
        "Contact provider if suspicious",
        "Never follow links in suspicious messages",
    ),
    RiskLevel.MEDIUM: (
        "Review transaction details carefully",
        "Confirm counterpart identity",
    ),
    RiskLevel.LOW: (),
}


def score_amount(transaction: ParsedTransaction) -> AmountResult:
    """
    Layer 6: absolute amount bands plus a round-number heuristic.

    Bands: >=5000 -> 50, >=1000 -> 30, >=100 -> 10, else 0.
    Exactly 100/500/1000/5000/10000 adds 15. Capped at 100.
    """
    amount = transaction.amount
    band = 0
    bonus = 0

    if amount is not None:
        if amount >= 5000:
            band = 50
        elif amount >= 1000:
            band = 30
        elif amount >= 100:
            band = 10

        if amount in ROUND_AMOUNTS:
            bonus = ROUND_AMOUNT_BONUS

    total = min(100, band + bonus)
    return AmountResult(
        layer=6,
        name=LAYER_NAMES[6],
        status=LayerStatus.WARNING if total > 0 else LayerStatus.PASS,
        score=total,
        band_score=band,
        round_amount_bonus=bonus,
    )


def score_temporal(transaction: ParsedTransaction) -> TemporalResult:
    """
    Layer 7: hour-of-day and day-of-week risk.

    Hours: [2,5] -> 50, [0,1] -> 40, >=22 -> 30, [20,21] -> 15.
    Saturday/Sunday adds 10. Capped at 100.
    """
    factors = []
    hour_score = 0
    day_score = 0

    hour = transaction.hour
    if hour is not None:
        if 2 <= hour <= 5:
            hour_score = 50
            factors.append(f"Very early morning ({hour:02d}:XX)")
        elif hour <= 1:
            hour_score = 40
            factors.append("Late night after midnight")
        elif hour >= 22:
            hour_score = 30
            factors.append(f"Late evening ({hour:02d}:XX)")
        elif hour >= 20:
            hour_score = 15

    if transaction.transaction_date is not None and is_weekend(transaction.transaction_date):
        day_score = WEEKEND_SCORE
        factors.append("Weekend transaction")

    total = min(100, hour_score + day_score)
    return TemporalResult(
        layer=7,
        name=LAYER_NAMES[7],
        status=LayerStatus.WARNING if total > 0 else LayerStatus.PASS,
        score=total,
        factors=tuple(factors),
        hour_score=hour_score,
        day_score=day_score,
    )


def determine_risk_level(score: int) -> RiskLevel:
    """
    Map composite score to a risk level.

    Bands:
    - 80+:     CRITICAL
    - 60 - 79: HIGH
    - 35 - 59: MEDIUM
    - 0 - 34:  LOW
    """
    if score >= 80:
        return RiskLevel.CRITICAL
    elif score >= 60:
        return RiskLevel.HIGH
    elif score >= 35:
        return RiskLevel.MEDIUM
    else:
        return RiskLevel.LOW


def is_non_transactional(transaction: ParsedTransaction) -> bool:
    return transaction.type in NON_TRANSACTIONAL_TYPES


def calculate_composite_score(transaction: ParsedTransaction, layers: Sequence[LayerDetail]) -> int:
    """
    Sum layer contributions, cap at 100, then apply the low-risk overrides.

    Overrides:
    - airtime/bill payment from a known carrier: capped at 20
    - otherwise a known carrier, Layer 2 PASS, no pattern and no anomaly signal: capped at 20
    """
    validation, pattern, behavior = layers[1], layers[2], layers[3]

    total = min(100, sum(layer.score for layer in layers))

    if transaction.type in (TransactionType.AIRTIME, TransactionType.BILL_PAYMENT) and transaction.provider_known:
        total = min(LOW_RISK_CAP, total)
    elif (
        transaction.provider_known
        and validation.status is LayerStatus.PASS
        and pattern.score == 0
        and behavior.score == 0
    ):
        total = min(LOW_RISK_CAP, total)

    return total


def collect_risk_factors(layers: Sequence[LayerDetail]) -> Tuple[str, ...]:
    factors = []
    for layer in layers:
        if layer.layer in FACTOR_LAYERS and layer.score > 0:
            factors.extend(f for f in layer.factors if f)
    return tuple(factors)


def aggregate_risk(
    transaction: ParsedTransaction,
    layers: Sequence[LayerDetail],
    blacklisted: bool = False,
) -> RiskAnalysisResult:
    """
    Combine the seven layer results into the final risk decision.

    Non-transactional types are always score 0 / LOW. A globally blacklisted
    counterpart adds 60 after the overrides, so it cannot be capped back to LOW.
    """
    if is_non_transactional(transaction):
        return RiskAnalysisResult(
            transaction=transaction,
            layer_results=tuple(layers),
            total_score=0,
            risk_level=RiskLevel.LOW,
        )

    total = calculate_composite_score(transaction, layers)
    factors = collect_risk_factors(layers)

    if blacklisted:
        total = min(100, total + BLACKLIST_PENALTY)
        factors += ("Counterpart is on the global blacklist",)

    level = determine_risk_level(total)
    return RiskAnalysisResult(
        transaction=transaction,
        layer_results=tuple(layers),
        total_score=total,
        risk_level=level,
        risk_factors=factors,
        should_alert=level in (RiskLevel.HIGH, RiskLevel.CRITICAL),
        recommended_actions=RECOMMENDED_ACTIONS[level],
        blacklisted=blacklisted,
    )
