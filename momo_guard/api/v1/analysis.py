"""POST /v1/analyze and POST /v1/parse - SMS fraud analysis endpoints"""

import time
import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Request

from momo_guard.api.v1.schemas import (
    AnalyzeRequest,
    AnalyzeResponse,
    LayerResultSchema,
    ParseRequest,
    ParseResponse,
    ParsedTransactionSchema,
    TransactionAnalysisSchema,
)
from momo_guard.api.dependencies import get_audit_sink, get_blacklist_client, get_history_client, get_request_id
from momo_guard.infrastructure.clients.blacklist import BlacklistClient
from momo_guard.infrastructure.clients.history import HistoryClient
from momo_guard.infrastructure.database.repositories import SqlAuditSink
from momo_guard.domain.analysis import analyze_message
from momo_guard.domain.extraction import parse_message
from momo_guard.domain.exceptions import NotATransactionMessageError
from momo_guard.domain.models import LayerDetail, ParsedTransaction, RiskAnalysisResult
from momo_guard.infrastructure.observability.metrics import record_analysis, segments_rejected_counter
from momo_guard.infrastructure.observability.logging import log_analysis

router = APIRouter()


def _transaction_schema(transaction: ParsedTransaction) -> ParsedTransactionSchema:
    return ParsedTransactionSchema(
        provider=transaction.provider.value,
        type=transaction.type.value,
        amount=transaction.amount,
        counterpart_name=transaction.counterpart_name,
        counterpart_number=transaction.counterpart_number,
        balance=transaction.balance,
        fee=transaction.fee,
        tax=transaction.tax,
        levy=transaction.levy,
        reference=transaction.reference,
        transaction_date=transaction.transaction_date,
        transaction_time=transaction.transaction_time,
        parse_errors=list(transaction.parse_errors),
    )


def _layer_schema(layer: LayerDetail) -> LayerResultSchema:
    details = layer.to_details()
    details.pop("factors", None)
    return LayerResultSchema(
        layer=layer.layer,
        name=layer.name,
        status=layer.status.value,
        score=layer.score,
        factors=list(layer.factors),
        details=details,
    )


def _analysis_schema(result: RiskAnalysisResult) -> TransactionAnalysisSchema:
    return TransactionAnalysisSchema(
        transaction=_transaction_schema(result.transaction),
        total_score=result.total_score,
        risk_level=result.risk_level.value,
        should_alert=result.should_alert,
        blacklisted=result.blacklisted,
        risk_factors=list(result.risk_factors),
        recommended_actions=list(result.recommended_actions),
        layers=[_layer_schema(layer) for layer in result.layer_results],
    )


@router.post("/analyze", response_model=AnalyzeResponse)
async def analyze_sms(
    request_body: AnalyzeRequest,
    request: Request,
    history_client: HistoryClient = Depends(get_history_client),
    blacklist_client: Optional[BlacklistClient] = Depends(get_blacklist_client),
    audit_sink: Optional[SqlAuditSink] = Depends(get_audit_sink),
):
    """
    Score every transaction in a MoMo SMS for fraud risk.

    Flow:
    1. Split the message and extract fields per transaction
    2. Run the seven security layers (history and blacklist read concurrently)
    3. Aggregate into a score, level, and alert decision
    4. Write the per-layer audit trail (best-effort)
    5. Return one analysis per transaction
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        results = await analyze_message(
            request_body.message,
            user_id=request_body.user_id,
            history=history_client,
            blacklist=blacklist_client,
            audit_sink=audit_sink,
            request_id=request_id,
        )

    except NotATransactionMessageError as e:
        segments_rejected_counter.inc()
        logging.warning(f"Message rejected: {e}", extra={"request_id": request_id, "user_id": request_body.user_id})
        raise HTTPException(status_code=422, detail=str(e))

    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    # Record metrics and logs
    for result in results:
        record_analysis(result.risk_level.value, result.should_alert)

    highest = max(results, key=lambda r: r.total_score)
    duration_ms = (time.time() - start_time) * 1000
    log_analysis(
        request_id,
        request_body.user_id,
        transactions=len(results),
        highest_score=highest.total_score,
        highest_level=highest.risk_level.value,
        alerts=sum(1 for r in results if r.should_alert),
        duration_ms=duration_ms,
    )

    return AnalyzeResponse(
        request_id=request_id,
        transactions=[_analysis_schema(result) for result in results],
    )


@router.post("/parse", response_model=ParseResponse)
def parse_sms(request_body: ParseRequest, request: Request):
    """
    Extract transactions from a MoMo SMS without scoring them.

    Used to preview what a bulk import would pick up.
    """
    transactions = parse_message(request_body.message)

    if not transactions:
        segments_rejected_counter.inc()
        logging.warning("Message rejected: no transaction found", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=422, detail=str(NotATransactionMessageError()))

    return ParseResponse(transactions=[_transaction_schema(t) for t in transactions])
