"""Seven-layer analysis pipeline - wires parsing, the layers, aggregation and audit"""

import asyncio
import logging
import uuid
from dataclasses import replace
from datetime import datetime
from typing import List, Optional, Tuple

from momo_guard.domain.audit import build_audit_entries, emit_audit
from momo_guard.domain.behavior import analyze_behavior, degraded_behavior
from momo_guard.domain.exceptions import (
    BlacklistServiceError,
    HistoryServiceError,
    NotATransactionMessageError,
)
from momo_guard.domain.extraction import parse_message
from momo_guard.domain.models import (
    LAYER_NAMES,
    AmountResult,
    BehaviorProfile,
    BehaviorResult,
    LayerStatus,
    ParsedTransaction,
    PatternResult,
    RiskAnalysisResult,
    TemporalResult,
    VelocityResult,
)
from momo_guard.domain.patterns import analyze_patterns
from momo_guard.domain.ports import AuditSink, BlacklistProvider, HistoryProvider
from momo_guard.domain.scoring import aggregate_risk, is_non_transactional, score_amount, score_temporal
from momo_guard.domain.validation import validate_structure, verify_sender
from momo_guard.domain.velocity import LOOKBACK, analyze_velocity, degraded_velocity
from momo_guard.utils.date_utils import utc_now

logger = logging.getLogger(__name__)


def _skipped_layers() -> tuple:
    """Layers 3-7 for a non-transactional message: recorded, never executed"""
    skipped = LayerStatus.SKIPPED
    return (
        PatternResult(layer=3, name=LAYER_NAMES[3], status=skipped, score=0),
        BehaviorResult(layer=4, name=LAYER_NAMES[4], status=skipped, score=0),
        VelocityResult(layer=5, name=LAYER_NAMES[5], status=skipped, score=0),
        AmountResult(layer=6, name=LAYER_NAMES[6], status=skipped, score=0),
        TemporalResult(layer=7, name=LAYER_NAMES[7], status=skipped, score=0),
    )


async def _load_profile(history: HistoryProvider, user_id: str) -> Tuple[Optional[BehaviorProfile], bool]:
    """Returns (profile, degraded)"""
    try:
        profile = await history.get_behavior_profile(user_id)
    except HistoryServiceError as e:
        logger.warning(
            f"Behavior profile unavailable, behavioral layer degraded: {e}",
            extra={"user_id": user_id, "degraded": True},
        )
        return None, True

    if profile is None or profile.average_transaction_amount is None:
        logger.info("No transaction history yet for user", extra={"user_id": user_id, "degraded": False})
    return profile, False


async def _load_timestamps(
    history: HistoryProvider, user_id: str, since: datetime
) -> Tuple[List[datetime], bool]:
    """Returns (timestamps, degraded)"""
    try:
        timestamps = await history.get_recent_transaction_timestamps(user_id, since)
    except HistoryServiceError as e:
        logger.warning(
            f"Transaction history unavailable, velocity layer degraded: {e}",
            extra={"user_id": user_id, "degraded": True},
        )
        return [], True
    return list(timestamps), False


async def _check_blacklist(blacklist: Optional[BlacklistProvider], identity: Optional[str]) -> bool:
    if blacklist is None or not identity:
        return False

    try:
        return await blacklist.is_globally_blacklisted(identity)
    except BlacklistServiceError as e:
        logger.warning(f"Blacklist lookup failed, treating counterpart as unlisted: {e}", extra={"degraded": True})
        return False


async def analyze_transaction(
    transaction: ParsedTransaction,
    *,
    user_id: str,
    history: HistoryProvider,
    blacklist: Optional[BlacklistProvider] = None,
    audit_sink: Optional[AuditSink] = None,
    request_id: Optional[str] = None,
    segment_index: int = 0,
    now: Optional[datetime] = None,
) -> RiskAnalysisResult:
    """
    Run the seven layers against one parsed transaction.

    Requirements:
    - Layers 1-2 always run; validation errors are appended to parse_errors
    - Non-transactional types skip layers 3-7 and make no external reads
    - Profile, timestamps and blacklist are read concurrently and each
      degrades to zero signal on failure
    - Audit entries are emitted best-effort after aggregation

    Args:
        transaction: Output of the field extractor
        user_id: Whose history feeds layers 4 and 5
        history: Profile and timestamp source
        blacklist: Optional global blacklist lookup
        audit_sink: Optional audit store
        request_id: Correlates audit entries; generated when absent
        segment_index: Position of the transaction within its message
        now: Velocity reference when the SMS carries no date/time

    Returns:
        RiskAnalysisResult with all seven layer results in order
    """
    request_id = request_id or str(uuid.uuid4())

    sender = verify_sender(transaction)
    validation = validate_structure(transaction)
    if validation.errors:
        transaction = replace(transaction, parse_errors=transaction.parse_errors + validation.errors)

    if is_non_transactional(transaction):
        layers = (sender, validation) + _skipped_layers()
        result = aggregate_risk(transaction, layers)
    else:
        reference = transaction.occurred_at or now or utc_now()
        (profile, profile_degraded), (timestamps, history_degraded), blacklisted = await asyncio.gather(
            _load_profile(history, user_id),
            _load_timestamps(history, user_id, reference - LOOKBACK),
            _check_blacklist(blacklist, transaction.counterpart),
        )

        layers = (
            sender,
            validation,
            analyze_patterns(transaction.raw_segment),
            degraded_behavior() if profile_degraded else analyze_behavior(transaction, profile),
            degraded_velocity() if history_degraded else analyze_velocity(timestamps, reference),
            score_amount(transaction),
            score_temporal(transaction),
        )
        result = aggregate_risk(transaction, layers, blacklisted=blacklisted)

    entries = build_audit_entries(result, request_id=request_id, user_id=user_id, segment_index=segment_index)
    await emit_audit(audit_sink, entries)

    logger.info(
        "Transaction analyzed",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "segment_index": segment_index,
            "risk_score": result.total_score,
            "risk_level": result.risk_level.value,
        },
    )
    return result


async def analyze_message(
    raw: str,
    *,
    user_id: str,
    history: HistoryProvider,
    blacklist: Optional[BlacklistProvider] = None,
    audit_sink: Optional[AuditSink] = None,
    request_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> List[RiskAnalysisResult]:
    """
    Split, parse and analyze every transaction in a raw SMS.

    Raises:
        NotATransactionMessageError: no segment carried a provider or an amount
    """
    transactions = parse_message(raw)
    if not transactions:
        raise NotATransactionMessageError()

    request_id = request_id or str(uuid.uuid4())
    results = await asyncio.gather(
        *(
            analyze_transaction(
                transaction,
                user_id=user_id,
                history=history,
                blacklist=blacklist,
                audit_sink=audit_sink,
                request_id=request_id,
                segment_index=index,
                now=now,
            )
            for index, transaction in enumerate(transactions)
        )
    )
    return list(results)
