"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, Field
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Dict, List, Optional


class AnalyzeRequest(BaseModel):
    """Request body for POST /v1/analyze"""

    user_id: str = Field(..., min_length=1, description="User identifier")
    message: str = Field(..., min_length=1, description="Raw SMS text as received")


class ParseRequest(BaseModel):
    """Request body for POST /v1/parse"""

    message: str = Field(..., min_length=1, description="Raw SMS text as received")


class ParsedTransactionSchema(BaseModel):
    """Fields extracted from one transaction segment"""

    provider: str
    type: str
    amount: Optional[Decimal] = None
    counterpart_name: Optional[str] = None
    counterpart_number: Optional[str] = None
    balance: Optional[Decimal] = None
    fee: Optional[Decimal] = None
    tax: Optional[Decimal] = None
    levy: Optional[Decimal] = None
    reference: Optional[str] = None
    transaction_date: Optional[date] = None
    transaction_time: Optional[time] = None
    parse_errors: List[str] = []


class LayerResultSchema(BaseModel):
    """Outcome of one security layer"""

    layer: int
    name: str
    status: str
    score: int
    factors: List[str] = []
    details: Dict[str, Any] = {}


class TransactionAnalysisSchema(BaseModel):
    """Risk decision for one transaction"""

    transaction: ParsedTransactionSchema
    total_score: int
    risk_level: str
    should_alert: bool
    blacklisted: bool
    risk_factors: List[str]
    recommended_actions: List[str]
    layers: List[LayerResultSchema]


class AnalyzeResponse(BaseModel):
    """Response for POST /v1/analyze"""

    request_id: str
    transactions: List[TransactionAnalysisSchema]


class ParseResponse(BaseModel):
    """Response for POST /v1/parse"""

    transactions: List[ParsedTransactionSchema]


class AuditEntrySchema(BaseModel):
    """Single layer execution in the audit trail"""

    segment_index: int
    reference: Optional[str] = None
    layer_number: int
    layer_name: str
    status: str
    score: int
    details: Optional[Dict[str, Any]] = None
    recorded_at: datetime


class AuditResponse(BaseModel):
    """Response for GET /v1/audit"""

    request_id: str
    user_id: str
    entries: List[AuditEntrySchema]
