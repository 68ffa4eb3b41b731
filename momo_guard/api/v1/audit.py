"""GET /v1/audit - Fetch the per-layer audit trail of one analysis request"""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from momo_guard.api.v1.schemas import AuditEntrySchema, AuditResponse
from momo_guard.infrastructure.database.session import get_db
from momo_guard.infrastructure.database.repositories import AuditRepository

router = APIRouter()


@router.get("/audit", response_model=AuditResponse)
def get_audit_trail(
    request_id: str = Query(..., min_length=1, description="X-Request-ID of the analysis"),
    db: Session = Depends(get_db),
):
    """Retrieve every layer execution recorded for a request, in segment and layer order"""
    audit_repo = AuditRepository(db)
    entries = audit_repo.get_entries_by_request(request_id)

    if not entries:
        raise HTTPException(status_code=404, detail="No audit trail for this request")

    return AuditResponse(
        request_id=request_id,
        user_id=entries[0].user_id,
        entries=[
            AuditEntrySchema(
                segment_index=entry.segment_index,
                reference=entry.reference,
                layer_number=entry.layer_number,
                layer_name=entry.layer_name,
                status=entry.status,
                score=entry.score,
                details=entry.details,
                recorded_at=entry.recorded_at,
            )
            for entry in entries
        ],
    )
