"""Domain models - pure Python dataclasses representing MoMo transactions and risk results"""

from dataclasses import dataclass, field
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Optional, Tuple, Union

from momo_guard.utils.date_utils import utc_now


class Provider(str, Enum):
    """Mobile money carrier that issued the SMS"""

    MTN = "MTN"
    VODAFONE = "Vodafone"
    AIRTELTIGO = "AirtelTigo"
    TELECEL = "Telecel"
    UNKNOWN = "Unknown"


class TransactionType(str, Enum):
    """Kind of transaction described by a segment"""

    SENT = "sent"
    RECEIVED = "received"
    WITHDRAWAL = "withdrawal"  # cash out at an agent/merchant
    AIRTIME = "airtime"
    BUNDLE = "bundle"
    BILL_PAYMENT = "bill_payment"
    BALANCE_INQUIRY = "balance_inquiry"
    FAILED = "failed"
    PROMOTIONAL = "promotional"
    OTHER = "other"


# Informational/service messages, never a financial risk subject
NON_TRANSACTIONAL_TYPES = frozenset(
    {
        TransactionType.BALANCE_INQUIRY,
        TransactionType.FAILED,
        TransactionType.PROMOTIONAL,
        TransactionType.OTHER,
    }
)


class RiskLevel(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


LAYER_NAMES = {
    1: "Sender Verification",
    2: "Structural Validation",
    3: "Pattern Recognition",
    4: "Behavioral Analysis",
    5: "Velocity Analysis",
    6: "Amount Analysis",
    7: "Temporal Analysis",
}


class LayerStatus(str, Enum):
    PASS = "PASS"
    FAIL = "FAIL"
    WARNING = "WARNING"
    DEGRADED = "DEGRADED"  # collaborator read failed, layer contributed nothing
    SKIPPED = "SKIPPED"  # short-circuited by the non-transactional override


@dataclass(frozen=True)
class TransactionSegment:
    """Substring of a raw message believed to describe one transaction"""

    text: str
    offset: int


@dataclass(frozen=True)
class ParsedTransaction:
    """Structured fields extracted from one segment"""

    provider: Provider
    type: TransactionType
    raw_segment: str
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
    parse_errors: Tuple[str, ...] = ()

    @property
    def provider_known(self) -> bool:
        return self.provider is not Provider.UNKNOWN

    @property
    def counterpart(self) -> Optional[str]:
        """Identity used for blacklist lookups: name first, then number"""
        return self.counterpart_name or self.counterpart_number

    @property
    def hour(self) -> Optional[int]:
        return self.transaction_time.hour if self.transaction_time is not None else None

    @property
    def occurred_at(self) -> Optional[datetime]:
        if self.transaction_date is None or self.transaction_time is None:
            return None
        return datetime.combine(self.transaction_date, self.transaction_time)


@dataclass(frozen=True)
class BehaviorProfile:
    """Historical behavior supplied by the history collaborator (read-only)"""

    average_transaction_amount: Optional[Decimal] = None


def _plain(value):
    """Convert a detail value into something JSON can store"""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (date, time)):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value


@dataclass(frozen=True)
class LayerResult:
    """Common shape shared by every layer's result"""

    layer: int
    name: str
    status: LayerStatus
    score: int
    factors: Tuple[str, ...] = ()

    def to_details(self) -> dict:
        """Layer-specific detail fields, JSON-safe, for the audit store"""
        common = {"layer", "name", "status", "score"}
        return {
            key: _plain(value)
            for key, value in self.__dict__.items()
            if key not in common
        }


@dataclass(frozen=True)
class SenderVerificationResult(LayerResult):
    provider: Provider = Provider.UNKNOWN
    provider_penalty: int = 0


@dataclass(frozen=True)
class ValidationResult(LayerResult):
    errors: Tuple[str, ...] = ()


@dataclass(frozen=True)
class PatternResult(LayerResult):
    keyword_hits: Tuple[str, ...] = ()
    institution_hits: Tuple[str, ...] = ()
    phrase_hits: Tuple[str, ...] = ()
    keyword_score: int = 0
    institution_score: int = 0
    phrase_score: int = 0


@dataclass(frozen=True)
class BehaviorResult(LayerResult):
    average_transaction_amount: Optional[Decimal] = None
    amount_multiple: Optional[Decimal] = None


@dataclass(frozen=True)
class VelocityResult(LayerResult):
    count_1h: int = 0
    count_3h: int = 0
    count_24h: int = 0


@dataclass(frozen=True)
class AmountResult(LayerResult):
    band_score: int = 0
    round_amount_bonus: int = 0


@dataclass(frozen=True)
class TemporalResult(LayerResult):
    hour_score: int = 0
    day_score: int = 0


LayerDetail = Union[
    SenderVerificationResult,
    ValidationResult,
    PatternResult,
    BehaviorResult,
    VelocityResult,
    AmountResult,
    TemporalResult,
]


@dataclass(frozen=True)
class RiskAnalysisResult:
    """Output of the seven-layer analysis for one transaction"""

    transaction: ParsedTransaction
    layer_results: Tuple[LayerDetail, ...]
    total_score: int
    risk_level: RiskLevel
    risk_factors: Tuple[str, ...] = ()
    should_alert: bool = False
    recommended_actions: Tuple[str, ...] = ()
    blacklisted: bool = False

    def layer(self, number: int) -> LayerDetail:
        return self.layer_results[number - 1]


@dataclass(frozen=True)
class AuditEntry:
    """One record per layer execution, for compliance review"""

    request_id: str
    user_id: str
    segment_index: int
    reference: Optional[str]
    layer_number: int
    layer_name: str
    status: LayerStatus
    score: int
    detail: LayerDetail
    recorded_at: datetime = field(default_factory=utc_now)
