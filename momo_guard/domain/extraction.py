"""
Field extraction for MoMo SMS segments.

Every field is an ordered tuple of independent strategies. A strategy is a pure
function ``text -> value | None``; the first one to return a value wins. Each
carrier's phrasing lives in its own strategy so it can be tested in isolation.
"""

import re
from datetime import date, time
from decimal import Decimal
from typing import Callable, List, Optional, Sequence, Tuple

from momo_guard.domain.models import ParsedTransaction, Provider, TransactionType
from momo_guard.domain.splitter import split_segments

Strategy = Callable[[str], object]

# "1,200.00." -> 1200.00 (separators dropped, trailing sentence period ignored)
_NUMBER_PREFIX = re.compile(r"\d+(?:\.\d+)?")

# Where a counterpart name ends
_NAME_END = r"(?=\s+on\s|\s+at\s|\s+has\s|\s+with\s|\.(?:\s|$)|\n|$)"


def _to_decimal(raw: str) -> Optional[Decimal]:
    match = _NUMBER_PREFIX.match(raw.replace(",", ""))
    return Decimal(match.group()) if match else None


def _capture(pattern: str, convert: Callable[[re.Match], object], flags: int = re.IGNORECASE) -> Strategy:
    """Build a strategy from a regex and a converter applied to its match"""
    compiled = re.compile(pattern, flags)

    def strategy(text: str):
        match = compiled.search(text)
        return convert(match) if match else None

    strategy.__name__ = f"capture<{pattern}>"
    return strategy


def _first(strategies: Sequence[Strategy], text: str, errors: List[str], field: str):
    """Run strategies in priority order; unreadable values are noted and skipped"""
    for strategy in strategies:
        try:
            value = strategy(text)
        except ValueError as e:
            errors.append(f"Unreadable {field}: {e}")
            continue
        if value is not None:
            return value
    return None


# --- converters -------------------------------------------------------------

def _positive_amount(match: re.Match) -> Optional[Decimal]:
    value = _to_decimal(match.group(1))
    return value if value is not None and value > 0 else None


def _money(match: re.Match) -> Optional[Decimal]:
    return _to_decimal(match.group(1))


def _charge(match: re.Match) -> Optional[Decimal]:
    # A literal "-" means the charge is explicitly zero
    if match.group(1) == "-":
        return Decimal("0")
    return _to_decimal(match.group(1))


def _name_only(match: re.Match) -> Optional[Tuple[Optional[str], Optional[str]]]:
    name = match.group(1).strip()
    return (name, None) if len(name) > 2 else None


def _number_and_name(match: re.Match) -> Tuple[Optional[str], Optional[str]]:
    name = (match.group(2) or "").strip() or None
    return name, match.group(1)


def _identifier(match: re.Match) -> str:
    return match.group(1)


def _labeled_reference(match: re.Match) -> Optional[str]:
    value = match.group(1).rstrip(".")
    return None if value in ("-", "") else value


def _date_and_time(match: re.Match) -> Tuple[date, time]:
    return date.fromisoformat(match.group(1)), time.fromisoformat(match.group(2))


def _time_only(match: re.Match) -> Tuple[Optional[date], time]:
    return None, time.fromisoformat(match.group(1))


# --- provider and type --------------------------------------------------------

PROVIDER_MARKERS = (
    ("MTN", Provider.MTN),
    ("TELECEL", Provider.TELECEL),
    ("VODAFONE", Provider.VODAFONE),
    ("AIRTELTIGO", Provider.AIRTELTIGO),
)

# Carrier service notices; only trusted when the provider is recognized
SERVICE_MESSAGE_RULES = (
    (("FAILED", "UNSUCCESSFUL", "DECLINED"), TransactionType.FAILED),
    (("BALANCE INQUIRY", "BALANCE ENQUIRY"), TransactionType.BALANCE_INQUIRY),
    (("BONUS", "OFFER", "PROMOTION"), TransactionType.PROMOTIONAL),
)

# Order is the tie-break: the first rule with any matching marker decides
TYPE_RULES = (
    (("RECEIVED", "CREDITED"), TransactionType.RECEIVED),
    (("CASH OUT", "CASH-OUT", "WITHDRAWAL"), TransactionType.WITHDRAWAL),
    (("AIRTIME",), TransactionType.AIRTIME),
    (("BUNDLE",), TransactionType.BUNDLE),
    (("BILL", "ECG", "GHANA WATER"), TransactionType.BILL_PAYMENT),
    (("PAYMENT", "PAID TO", "PAID", "TO"), TransactionType.SENT),
)


def detect_provider(text: str) -> Provider:
    upper = text.upper()
    for marker, provider in PROVIDER_MARKERS:
        if marker in upper:
            return provider
    return Provider.UNKNOWN


def detect_type(text: str, provider: Provider = Provider.UNKNOWN) -> TransactionType:
    upper = text.upper()
    rules = TYPE_RULES
    if provider is not Provider.UNKNOWN:
        rules = SERVICE_MESSAGE_RULES + TYPE_RULES
    for markers, transaction_type in rules:
        if any(marker in upper for marker in markers):
            return transaction_type
    return TransactionType.OTHER


# --- field strategies ---------------------------------------------------------

AMOUNT_STRATEGIES = (
    _capture(r"GHS\s*(\d[\d,.]*)", _positive_amount),
    _capture(r"₵\s*(\d[\d,.]*)", _positive_amount),
    _capture(r"GH₵\s*(\d[\d,.]*)", _positive_amount),
    _capture(r"\bof\s+(?:GHS|₵)?\s*(\d[\d,.]*)", _positive_amount),
)

COUNTERPART_STRATEGIES = (
    _capture(r"\bto\s+(\d+)\s*-\s*(.+?)" + _NAME_END, _number_and_name),
    _capture(r"\bto\s+([A-Z][A-Z\s&\-]+?)" + _NAME_END, _name_only),
    _capture(r"\bpaid\s+to\s+([A-Z][A-Z\s&\-]+?)" + _NAME_END, _name_only),
    _capture(r"\bto\s+(\+?\d{9,})(?:\s+([A-Z][A-Z\s&\-]*?))?" + _NAME_END, _number_and_name),
    # received messages name the sender instead
    _capture(r"\bfrom\s+(\d+)\s*-\s*(.+?)" + _NAME_END, _number_and_name),
    _capture(r"\bfrom\s+([A-Z][A-Z\s&\-]+?)" + _NAME_END, _name_only),
    _capture(r"\bfrom\s+(\+?\d{9,})(?:\s+([A-Z][A-Z\s&\-]*?))?" + _NAME_END, _number_and_name),
)

BALANCE_STRATEGIES = (
    _capture(r"(?:Your\s+new\s+|new\s+)?Telecel\s+Cash\s+balance\s+is\s+GHS\s*(\d[\d,.]*)", _money),
    _capture(r"Your\s+new\s+balance[:\s]+GHS\s*(\d[\d,.]*)", _money),
    _capture(r"Current\s+Balance[:\s]+GHS\s*(\d[\d,.]*)", _money),
    _capture(r"balance\s+is\s+GHS\s*(\d[\d,.]*)", _money),
)

FEE_STRATEGIES = (
    _capture(r"Fee\s+(?:was|charged)[:\s]+GHS\s*(-|\d[\d,.]*)", _charge),
    _capture(r"You\s+were\s+charged\s+GHS\s*(-|\d[\d,.]*)", _charge),
)

TAX_STRATEGIES = (
    _capture(r"Tax\s+(?:was|charged)[:\s]+GHS\s*(-|\d[\d,.]*)", _charge),
    _capture(r"Tax\s+charged\s+(-|\d[\d,.]*)", _charge),
)

LEVY_STRATEGIES = (
    _capture(r"E-levy\s+charge\s+is\s+GHS\s*(-|\d[\d,.]*)", _charge),
    _capture(r"E-levy\s+(?:was|charged)[:\s]+GHS\s*(-|\d[\d,.]*)", _charge),
)

REFERENCE_STRATEGIES = (
    _capture(r"Financial\s+Transaction\s+Id[:\s]+(\d+)", _identifier),
    _capture(r"Transaction\s+Id[:\s]+(\d+)", _identifier),
    _capture(r"Reference[:\s]+([A-Za-z0-9\-._]+)", _labeled_reference),
    _capture(r"^(\d{13})", _identifier),
)

TIMESTAMP_STRATEGIES = (
    _capture(r"\bat\s+(\d{4}-\d{2}-\d{2})\s+(\d{2}:\d{2}:\d{2})", _date_and_time),
    _capture(r"\bon\s+(\d{4}-\d{2}-\d{2})\s+at\s+(\d{2}:\d{2}:\d{2})", _date_and_time),
    _capture(r"\bat\s+(\d{2}:\d{2}:\d{2})", _time_only),
)


def parse_segment(text: str) -> Optional[ParsedTransaction]:
    """
    Extract a ParsedTransaction from one segment.

    Returns None when the segment has neither a known provider nor an amount;
    such segments are not transactions.
    """
    errors: List[str] = []

    provider = detect_provider(text)
    amount = _first(AMOUNT_STRATEGIES, text, errors, "amount")
    if provider is Provider.UNKNOWN and amount is None:
        return None

    counterpart_name, counterpart_number = _first(COUNTERPART_STRATEGIES, text, errors, "counterpart") or (None, None)
    transaction_date, transaction_time = _first(TIMESTAMP_STRATEGIES, text, errors, "timestamp") or (None, None)

    return ParsedTransaction(
        provider=provider,
        type=detect_type(text, provider),
        raw_segment=text,
        amount=amount,
        counterpart_name=counterpart_name,
        counterpart_number=counterpart_number,
        balance=_first(BALANCE_STRATEGIES, text, errors, "balance"),
        fee=_first(FEE_STRATEGIES, text, errors, "fee"),
        tax=_first(TAX_STRATEGIES, text, errors, "tax"),
        levy=_first(LEVY_STRATEGIES, text, errors, "levy"),
        reference=_first(REFERENCE_STRATEGIES, text, errors, "reference"),
        transaction_date=transaction_date,
        transaction_time=transaction_time,
        parse_errors=tuple(errors),
    )


def parse_message(raw: str) -> List[ParsedTransaction]:
    """Split a raw SMS and parse every qualifying segment, in message order"""
    transactions = []
    for segment in split_segments(raw):
        parsed = parse_segment(segment.text)
        if parsed is not None:
            transactions.append(parsed)
    return transactions
