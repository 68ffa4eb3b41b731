"""Data access layer for the security audit trail"""

from typing import List, Sequence
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from momo_guard.infrastructure.database.models import SecurityLayerLog
from momo_guard.infrastructure.observability.metrics import audit_write_failures_counter
from momo_guard.domain.exceptions import AuditWriteError
from momo_guard.domain.models import AuditEntry


class AuditRepository:
    """Repository for per-layer audit entries (append-only)"""

    def __init__(self, db: Session):
        self.db = db

    def add_entries(self, entries: Sequence[AuditEntry]) -> List[SecurityLayerLog]:
        """Persist audit entries without committing"""
        rows = [
            SecurityLayerLog(
                request_id=entry.request_id,
                user_id=entry.user_id,
                segment_index=entry.segment_index,
                reference=entry.reference,
                layer_number=entry.layer_number,
                layer_name=entry.layer_name,
                status=entry.status.value,
                score=entry.score,
                details=entry.detail.to_details(),
                recorded_at=entry.recorded_at,
            )
            for entry in entries
        ]
        self.db.add_all(rows)
        self.db.flush()
        return rows

    def get_entries_by_request(self, request_id: str) -> List[SecurityLayerLog]:
        """Fetch the audit trail of one request, in segment and layer order"""
        return (
            self.db.query(SecurityLayerLog)
            .filter(SecurityLayerLog.request_id == request_id)
            .order_by(SecurityLayerLog.segment_index, SecurityLayerLog.layer_number)
            .all()
        )


class SqlAuditSink:
    """Audit sink backed by the relational store"""

    def __init__(self, db: Session):
        self.db = db
        self.repository = AuditRepository(db)

    async def record(self, entries: Sequence[AuditEntry]) -> None:
        """
        Store and commit entries.

        Raises:
            AuditWriteError: On any database failure (the transaction is rolled back)
        """
        try:
            self.repository.add_entries(entries)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            audit_write_failures_counter.inc()
            raise AuditWriteError(f"Failed to store {len(entries)} audit entries: {e}") from e
