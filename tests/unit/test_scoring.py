"""Unit tests for amount/temporal scoring and risk aggregation"""

import pytest
from datetime import date, time
from decimal import Decimal
from momo_guard.domain.behavior import analyze_behavior
from momo_guard.domain.models import LayerStatus, ParsedTransaction, Provider, RiskLevel, TransactionType
from momo_guard.domain.patterns import analyze_patterns
from momo_guard.domain.scoring import (
    aggregate_risk,
    determine_risk_level,
    score_amount,
    score_temporal,
)
from momo_guard.domain.validation import validate_structure, verify_sender
from momo_guard.domain.velocity import analyze_velocity

WEDNESDAY = date(2024, 2, 14)
SATURDAY = date(2024, 2, 17)


def make_transaction(**overrides) -> ParsedTransaction:
    fields = dict(
        provider=Provider.MTN,
        type=TransactionType.SENT,
        raw_segment="MTN MoMo: You sent GHS 50.00 to Ama Serwaa",
        amount=Decimal("50.00"),
        counterpart_name="Ama Serwaa",
        transaction_date=WEDNESDAY,
        transaction_time=time(14, 0),
    )
    fields.update(overrides)
    return ParsedTransaction(**fields)


def run_layers(transaction: ParsedTransaction):
    """All seven layers for a user without history"""
    return (
        verify_sender(transaction),
        validate_structure(transaction),
        analyze_patterns(transaction.raw_segment),
        analyze_behavior(transaction, None),
        analyze_velocity([], transaction.occurred_at),
        score_amount(transaction),
        score_temporal(transaction),
    )


@pytest.mark.parametrize(
    "amount,expected",
    [
        ("50", 0),
        ("99.99", 0),
        ("150", 10),
        ("100", 25),  # band 10 + round 15
        ("1200", 30),
        ("1000", 45),
        ("5000", 65),
        ("7500", 50),
        ("10000", 65),
    ],
)
def test_score_amount_bands(amount, expected):
    """Test amount bands and the round-number bonus"""
    assert score_amount(make_transaction(amount=Decimal(amount))).score == expected


def test_score_amount_missing():
    """Test a missing amount scores zero"""
    result = score_amount(make_transaction(amount=None))

    assert result.score == 0
    assert result.status is LayerStatus.PASS


@pytest.mark.parametrize(
    "hour,expected",
    [(2, 50), (5, 50), (0, 40), (1, 40), (22, 30), (23, 30), (20, 15), (21, 15), (6, 0), (14, 0), (19, 0)],
)
def test_score_temporal_hours(hour, expected):
    """Test hour-of-day bands on a weekday"""
    assert score_temporal(make_transaction(transaction_time=time(hour, 15))).score == expected


def test_score_temporal_weekend():
    """Test Saturday adds 10 on top of the hour band"""
    result = score_temporal(make_transaction(transaction_date=SATURDAY, transaction_time=time(3, 0)))

    assert result.score == 60
    assert result.factors == ("Very early morning (03:XX)", "Weekend transaction")


def test_score_temporal_without_timestamp():
    """Test no date or time means no temporal signal"""
    assert score_temporal(make_transaction(transaction_date=None, transaction_time=None)).score == 0


@pytest.mark.parametrize(
    "score,level",
    [(0, RiskLevel.LOW), (34, RiskLevel.LOW), (35, RiskLevel.MEDIUM), (59, RiskLevel.MEDIUM),
     (60, RiskLevel.HIGH), (79, RiskLevel.HIGH), (80, RiskLevel.CRITICAL), (100, RiskLevel.CRITICAL)],
)
def test_determine_risk_level_boundaries(score, level):
    """Test level thresholds 35/60/80"""
    assert determine_risk_level(score) is level


def test_clean_transaction_is_capped_low():
    """Test a validated known-carrier transfer without pattern or anomaly stays at or below 20"""
    transaction = make_transaction(amount=Decimal("1000"), transaction_time=time(20, 30))
    layers = run_layers(transaction)

    result = aggregate_risk(transaction, layers)

    # amount 45 + temporal 15 before the override
    assert result.total_score == 20
    assert result.risk_level is RiskLevel.LOW
    assert result.should_alert is False
    assert result.recommended_actions == ()


def test_airtime_from_known_carrier_is_capped():
    """Test airtime purchases never exceed 20 even at night"""
    transaction = make_transaction(type=TransactionType.AIRTIME, amount=Decimal("5000"), transaction_time=time(3, 0))
    result = aggregate_risk(transaction, run_layers(transaction))

    assert result.total_score <= 20
    assert result.risk_level is RiskLevel.LOW


def test_non_transactional_types_are_always_low():
    """Test balance notices and other informational messages score zero"""
    for kind in (TransactionType.BALANCE_INQUIRY, TransactionType.FAILED, TransactionType.PROMOTIONAL, TransactionType.OTHER):
        transaction = make_transaction(type=kind, provider=Provider.UNKNOWN, transaction_time=time(3, 0))
        result = aggregate_risk(transaction, run_layers(transaction))

        assert result.total_score == 0
        assert result.risk_level is RiskLevel.LOW
        assert result.should_alert is False
        assert result.risk_factors == ()


def test_unknown_provider_penalty_counted_once():
    """Test the spoofing penalty alone lands in CRITICAL, not double-counted"""
    transaction = make_transaction(provider=Provider.UNKNOWN)
    layers = run_layers(transaction)

    result = aggregate_risk(transaction, layers)

    assert sum(1 for layer in layers if layer.score == 80) == 1
    assert result.total_score == 80
    assert result.risk_level is RiskLevel.CRITICAL
    assert result.should_alert is True
    assert result.risk_factors == ("Unknown or spoofed sender ID",)


def test_total_is_capped_at_100():
    """Test many stacked signals saturate at 100"""
    transaction = make_transaction(
        provider=Provider.UNKNOWN,
        raw_segment="URGENT verify your account, click link to claim prize, GHS 5000 tax payment",
        amount=Decimal("5000"),
        transaction_time=time(3, 0),
    )

    result = aggregate_risk(transaction, run_layers(transaction))

    assert result.total_score == 100
    assert result.risk_level is RiskLevel.CRITICAL


def test_amount_layer_has_no_prose_factor():
    """Test only sender, pattern, behavior, velocity and temporal layers contribute factors"""
    transaction = make_transaction(amount=Decimal("5000"), transaction_time=time(23, 0))

    result = aggregate_risk(transaction, run_layers(transaction))

    assert result.risk_factors == (
        "Transaction at 23:00:00 (late night)",
        "Late evening (23:XX)",
    )


def test_blacklist_applies_after_override():
    """Test a blacklisted counterpart cannot be capped back to LOW"""
    transaction = make_transaction()
    layers = run_layers(transaction)

    clean = aggregate_risk(transaction, layers)
    listed = aggregate_risk(transaction, layers, blacklisted=True)

    assert clean.total_score == 0
    assert listed.total_score == 60
    assert listed.risk_level is RiskLevel.HIGH
    assert listed.blacklisted is True
    assert "Counterpart is on the global blacklist" in listed.risk_factors


def test_recommended_actions_follow_level():
    """Test HIGH and CRITICAL carry guidance, MEDIUM a lighter version"""
    transaction = make_transaction(transaction_time=time(22, 30))
    result = aggregate_risk(transaction, run_layers(transaction))

    # behavior 20 + temporal 30
    assert result.total_score == 50
    assert result.risk_level is RiskLevel.MEDIUM
    assert result.should_alert is False
    assert result.recommended_actions == (
        "Review transaction details carefully",
        "Confirm counterpart identity",
    )
