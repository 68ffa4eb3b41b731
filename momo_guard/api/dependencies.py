"""Dependency injection for FastAPI endpoints"""

from typing import Optional
from fastapi import Depends, Request
from sqlalchemy.orm import Session
from momo_guard.config import settings
from momo_guard.infrastructure.clients.blacklist import BlacklistClient
from momo_guard.infrastructure.clients.history import HistoryClient
from momo_guard.infrastructure.database.repositories import SqlAuditSink
from momo_guard.infrastructure.database.session import get_db


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_history_client() -> HistoryClient:
    """Provide History API client instance"""
    return HistoryClient()


def get_blacklist_client() -> Optional[BlacklistClient]:
    """Provide Blacklist API client, or None when no blacklist service is configured"""
    if not settings.blacklist_api_base:
        return None
    return BlacklistClient()


def get_audit_sink(db: Session = Depends(get_db)) -> Optional[SqlAuditSink]:
    """Provide the database audit sink, or None when auditing is disabled"""
    if not settings.audit_enabled:
        return None
    return SqlAuditSink(db)
