# ledger/services/exceptions.py

"""
LEDGER SERVICE ERRORS

Centralized domain errors for the ledger engine.

Three families:
- validation (bad input, nothing touched storage)
- domain state (period / entry status forbids the operation)
- idempotency (the business event is already linked to an entry)

Infrastructure errors (django.db.DatabaseError and friends) are never wrapped.
"""


class LedgerServiceError(Exception):
    """Base exception for all ledger service failures."""


# ============================================================
# VALIDATION
# ============================================================


class PostingValidationError(LedgerServiceError):
    """Raised when a posting (or void / reverse request) is malformed."""

    default_code = "invalid_posting"

    def __init__(self, message: str, *, code: str | None = None, line: int | None = None):
        super().__init__(message)
        self.code = code or self.default_code
        self.line = line


class TooFewLinesError(PostingValidationError):
    """Raised when a journal has fewer than two lines."""

    default_code = "too_few_lines"


class UnbalancedJournalError(PostingValidationError):
    """Raised when total debits do not equal total credits."""

    default_code = "unbalanced"


# ============================================================
# DOMAIN STATE
# ============================================================


class InvalidPeriodError(LedgerServiceError):
    """Raised when the period is missing or in a status that forbids the operation."""


class PeriodLockedError(LedgerServiceError):
    """Raised when the period is hard closed."""


class DateOutOfRangeError(LedgerServiceError):
    """Raised when the entry date falls outside the period window."""


class InvalidStatusError(LedgerServiceError):
    """Raised when the journal entry is not POSTED."""


class JournalNotFoundError(LedgerServiceError):
    """Raised when the journal entry does not exist."""


class AccountMappingNotFoundError(LedgerServiceError):
    """Raised when no account is mapped to (module, key)."""


# ============================================================
# IDEMPOTENCY
# ============================================================


class SourceAlreadyLinkedError(LedgerServiceError):
    """
    Raised when (source_module, source_id) is already linked to an entry.

    Callers that need the existing entry look it up with
    LedgerService.find_by_source().
    """

    def __init__(self, *, source_module: str, source_id):
        super().__init__(
            f"Source {source_module}:{source_id} is already linked to a journal entry"
        )
        self.source_module = source_module
        self.source_id = source_id
