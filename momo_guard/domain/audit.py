"""Audit trail: one entry per layer execution, written best-effort"""

import logging
from datetime import datetime
from typing import List, Optional, Sequence

from momo_guard.domain.models import AuditEntry, RiskAnalysisResult
from momo_guard.domain.ports import AuditSink
from momo_guard.utils.date_utils import utc_now

logger = logging.getLogger(__name__)


def build_audit_entries(
    result: RiskAnalysisResult,
    *,
    request_id: str,
    user_id: str,
    segment_index: int = 0,
    recorded_at: Optional[datetime] = None,
) -> List[AuditEntry]:
    recorded_at = recorded_at or utc_now()
    return [
        AuditEntry(
            request_id=request_id,
            user_id=user_id,
            segment_index=segment_index,
            reference=result.transaction.reference,
            layer_number=layer.layer,
            layer_name=layer.name,
            status=layer.status,
            score=layer.score,
            detail=layer,
            recorded_at=recorded_at,
        )
        for layer in result.layer_results
    ]


async def emit_audit(sink: Optional[AuditSink], entries: Sequence[AuditEntry]) -> None:
    """
    Hand entries to the audit store.

    A failed write is logged and dropped: it never fails the scoring result
    and is not retried here.
    """
    if sink is None or not entries:
        return

    try:
        await sink.record(entries)
    except Exception as e:
        logger.warning(
            f"Audit write failed: {e}",
            extra={"request_id": entries[0].request_id, "entries": len(entries)},
        )
