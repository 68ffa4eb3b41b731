"""Layer 1 (sender verification) and Layer 2 (structural validation)"""

from typing import List

from momo_guard.domain.models import (
    LAYER_NAMES,
    LayerStatus,
    ParsedTransaction,
    SenderVerificationResult,
    TransactionType,
    ValidationResult,
)

# An unrecognized sender is a strong spoofing signal
UNKNOWN_PROVIDER_PENALTY = 80


def verify_sender(transaction: ParsedTransaction) -> SenderVerificationResult:
    """Layer 1: known carriers pass; anything else carries the provider penalty"""
    if transaction.provider_known:
        return SenderVerificationResult(
            layer=1,
            name=LAYER_NAMES[1],
            status=LayerStatus.PASS,
            score=0,
            provider=transaction.provider,
        )

    return SenderVerificationResult(
        layer=1,
        name=LAYER_NAMES[1],
        status=LayerStatus.FAIL,
        score=UNKNOWN_PROVIDER_PENALTY,
        factors=("Unknown or spoofed sender ID",),
        provider=transaction.provider,
        provider_penalty=UNKNOWN_PROVIDER_PENALTY,
    )


def validate_structure(transaction: ParsedTransaction) -> ValidationResult:
    """
    Layer 2: required fields present and well-formed for the detected type.

    Requirements:
    - type, positive amount, date and time, known provider
    - sent/received need a counterpart name or number
    - withdrawal needs a merchant (counterpart) name
    """
    errors: List[str] = []

    if transaction.type is None:
        errors.append("Transaction type missing")
    if transaction.amount is None or transaction.amount <= 0:
        errors.append("Invalid or missing amount")
    if transaction.transaction_date is None:
        errors.append("Transaction date missing")
    if transaction.transaction_time is None:
        errors.append("Transaction time missing")
    if not transaction.provider_known:
        errors.append("Provider not recognized")

    if transaction.type is TransactionType.RECEIVED and transaction.counterpart is None:
        errors.append("Sender missing for received transaction")
    elif transaction.type is TransactionType.SENT and transaction.counterpart is None:
        errors.append("Recipient missing for sent transaction")
    elif transaction.type is TransactionType.WITHDRAWAL and not transaction.counterpart_name:
        errors.append("Merchant name missing for withdrawal")

    return ValidationResult(
        layer=2,
        name=LAYER_NAMES[2],
        status=LayerStatus.PASS if not errors else LayerStatus.FAIL,
        score=0,
        errors=tuple(errors),
    )
