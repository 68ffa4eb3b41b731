"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class NotATransactionMessageError(DomainException):
    """No segment of the message carried a known provider or an amount"""

    def __init__(self, message: str = "No known provider found / not a transaction message"):
        super().__init__(message)


class HistoryServiceError(DomainException):
    """History/profile service returned an error or is unavailable"""

    pass


class BlacklistServiceError(DomainException):
    """Blacklist service returned an error or is unavailable"""

    pass


class AuditWriteError(DomainException):
    """Audit entries could not be stored"""

    pass
