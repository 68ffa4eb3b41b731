"""Unit tests for the seven-layer analysis pipeline"""

import logging
import pytest
from datetime import datetime, timedelta
from momo_guard.domain.analysis import analyze_message, analyze_transaction
from momo_guard.domain.exceptions import NotATransactionMessageError
from momo_guard.domain.extraction import parse_segment
from momo_guard.domain.models import LayerStatus, RiskLevel, TransactionType

from tests.fakes import (
    EARLY_MORNING_TRANSFER,
    LATE_EVENING_TRANSFER,
    SCAM_MESSAGE,
    SMALL_SHOP_PAYMENT,
    FailingAuditSink,
    FailingBlacklist,
    FailingHistory,
    InMemoryHistory,
    StaticBlacklist,
)


async def test_early_morning_transfer_alerts(history):
    """Test a large 02:30 transfer scores amount 30 and temporal 50 and alerts"""
    results = await analyze_message(EARLY_MORNING_TRANSFER, user_id="user_1", history=history)

    transfer = results[0]
    assert transfer.layer(6).score == 30
    assert transfer.layer(7).score == 50
    assert transfer.should_alert is True
    assert transfer.risk_level in (RiskLevel.HIGH, RiskLevel.CRITICAL)


async def test_balance_notice_is_skipped(history):
    """Test the trailing balance line is analyzed as a non-transactional notice"""
    results = await analyze_message(EARLY_MORNING_TRANSFER, user_id="user_1", history=history)

    notice = results[1]
    assert notice.total_score == 0
    assert notice.risk_level is RiskLevel.LOW
    assert [layer.status for layer in notice.layer_results[2:]] == [LayerStatus.SKIPPED] * 5


async def test_small_shop_payment_is_low(history):
    """Test a small known-carrier payment with no history stays LOW"""
    [result] = await analyze_message(SMALL_SHOP_PAYMENT, user_id="user_1", history=history)

    assert result.total_score <= 20
    assert result.risk_level is RiskLevel.LOW
    assert result.should_alert is False


async def test_scam_message_is_critical(history):
    """Test spoofed sender plus scam wording saturates the score"""
    [result] = await analyze_message(SCAM_MESSAGE, user_id="user_1", history=history)

    assert result.total_score == 100
    assert result.risk_level is RiskLevel.CRITICAL
    assert result.should_alert is True
    assert "Unknown or spoofed sender ID" in result.risk_factors
    assert "Provider not recognized" in result.transaction.parse_errors


async def test_velocity_burst_raises_level():
    """Test recent activity changes the level of an otherwise identical transaction"""
    quiet = await analyze_message(LATE_EVENING_TRANSFER, user_id="user_1", history=InMemoryHistory())
    burst_history = InMemoryHistory(
        timestamps=[datetime(2024, 2, 14, 22, m) for m in (0, 10, 20, 25)],
    )
    busy = await analyze_message(LATE_EVENING_TRANSFER, user_id="user_1", history=burst_history)

    assert quiet[0].total_score == 50
    assert quiet[0].risk_level is RiskLevel.MEDIUM
    assert busy[0].layer(5).score >= 20
    assert busy[0].total_score == 70
    assert busy[0].risk_level is RiskLevel.HIGH


async def test_history_window_ends_at_transaction_time():
    """Test the history read reaches back 24h from the SMS timestamp"""
    history = InMemoryHistory()

    await analyze_message(LATE_EVENING_TRANSFER, user_id="user_1", history=history)

    assert history.since_calls == [datetime(2024, 2, 13, 22, 30)]


async def test_history_window_uses_clock_without_timestamp():
    """Test a message without date/time measures velocity from the caller's clock"""
    history = InMemoryHistory()
    now = datetime(2024, 2, 14, 12, 0)

    await analyze_message(SCAM_MESSAGE, user_id="user_1", history=history, now=now)

    assert history.since_calls == [now - timedelta(hours=24)]


async def test_amount_anomaly_uses_profile():
    """Test the user's average amount feeds the behavioral layer"""
    history = InMemoryHistory(average="100")

    [result] = await analyze_message(LATE_EVENING_TRANSFER.replace("50.00", "450.00"), user_id="user_1", history=history)

    behavior = result.layer(4)
    assert behavior.score == 45  # 25 amount + 20 late night
    assert behavior.average_transaction_amount == 100


async def test_non_transactional_makes_no_reads(history):
    """Test informational messages never touch the history service"""
    notice = parse_segment("MTN MoMo: Your transaction failed. Balance GHS 20.00")

    result = await analyze_transaction(notice, user_id="user_1", history=history)

    assert result.total_score == 0
    assert history.profile_calls == 0
    assert history.since_calls == []


async def test_history_failure_degrades(caplog):
    """Test an unavailable history service degrades layers 4 and 5 instead of failing"""
    with caplog.at_level(logging.WARNING):
        results = await analyze_message(LATE_EVENING_TRANSFER, user_id="user_1", history=FailingHistory())

    result = results[0]
    assert result.layer(4).status is LayerStatus.DEGRADED
    assert result.layer(5).status is LayerStatus.DEGRADED
    assert result.layer(4).score == 0
    assert result.layer(7).score == 30
    assert any(getattr(record, "degraded", False) for record in caplog.records)


async def test_blacklisted_counterpart(history):
    """Test a listed counterpart adds 60 even to a clean transaction"""
    blacklist = StaticBlacklist(["Kwame Shop"])

    [result] = await analyze_message(SMALL_SHOP_PAYMENT, user_id="user_1", history=history, blacklist=blacklist)

    assert blacklist.lookups == ["Kwame Shop"]
    assert result.blacklisted is True
    assert result.total_score == 60
    assert result.should_alert is True


async def test_blacklist_failure_is_not_a_listing(history):
    """Test a failed blacklist lookup is treated as not listed"""
    [result] = await analyze_message(
        SMALL_SHOP_PAYMENT, user_id="user_1", history=history, blacklist=FailingBlacklist()
    )

    assert result.blacklisted is False
    assert result.risk_level is RiskLevel.LOW


async def test_audit_entries_per_layer(history, audit_sink):
    """Test one audit entry per layer per transaction, all under one request id"""
    await analyze_message(
        EARLY_MORNING_TRANSFER, user_id="user_1", history=history, audit_sink=audit_sink, request_id="req-1"
    )

    assert len(audit_sink.entries) == 14
    assert {entry.request_id for entry in audit_sink.entries} == {"req-1"}
    assert {entry.segment_index for entry in audit_sink.entries} == {0, 1}
    transfer_entries = [e for e in audit_sink.entries if e.segment_index == 0]
    assert [e.layer_number for e in transfer_entries] == [1, 2, 3, 4, 5, 6, 7]
    assert transfer_entries[6].detail.hour_score == 50


async def test_audit_failure_does_not_fail_analysis(history, caplog):
    """Test a broken audit store never changes the scoring result"""
    with caplog.at_level(logging.WARNING):
        [result] = await analyze_message(
            SCAM_MESSAGE, user_id="user_1", history=history, audit_sink=FailingAuditSink()
        )

    assert result.total_score == 100
    assert any("Audit write failed" in record.getMessage() for record in caplog.records)


async def test_message_without_transactions(history):
    """Test chatter is rejected as not a transaction message"""
    with pytest.raises(NotATransactionMessageError, match="not a transaction message"):
        await analyze_message("See you at the market tomorrow", user_id="user_1", history=history)


async def test_declined_notice_does_not_alert(history):
    """Test a declined early-morning transfer is treated as a failed notice, not a live transfer"""
    [result] = await analyze_message(
        "MTN MoMo: You sent GHS 500.00 to ABC Shop. Transaction declined on 2024-02-14 at 02:30:00",
        user_id="user_1",
        history=history,
    )

    assert result.transaction.type is TransactionType.FAILED
    assert result.total_score == 0
    assert result.risk_level is RiskLevel.LOW
    assert result.should_alert is False
    assert history.profile_calls == 0


async def test_carrier_promotion_is_low(history):
    """Test a carrier promo with an amount in it is not scored as a transfer"""
    [result] = await analyze_message(
        "MTN MoMo: Special OFFER! Send GHS 100 to any MTN number and get 20% BONUS",
        user_id="user_1",
        history=history,
    )

    assert result.transaction.type is TransactionType.PROMOTIONAL
    assert result.risk_level is RiskLevel.LOW
    assert [layer.status for layer in result.layer_results[2:]] == [LayerStatus.SKIPPED] * 5


async def test_huge_amount_against_small_average():
    """Test an amount far beyond decimal precision still yields a behavior score"""
    [result] = await analyze_message(
        "MTN MoMo: You sent GHS 99999999999999999999999999999.00 to Ama Serwaa on 2024-02-14 at 12:30:00",
        user_id="user_1",
        history=InMemoryHistory(average="1"),
    )

    assert result.layer(4).score == 25
    assert result.layer(4).amount_multiple > 3
    assert result.layer(6).score == 50
