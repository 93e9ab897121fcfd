# ledger/api/errors.py

"""
======================================================
PATH: ledger/api/errors.py
======================================================
API ERROR NORMALIZATION

Every ledger / close domain error maps to one stable error code and HTTP
status. Views catch the domain base classes and hand the exception here.

Envelope:
    {"error": {"code": "<CODE>", "message": "<human readable>"}}

Anything not listed (infrastructure errors) is NOT handled here and
propagates to Django / DRF.
"""

from rest_framework import status
from rest_framework.response import Response

from ledger.services.exceptions import (
    AccountMappingNotFoundError,
    DateOutOfRangeError,
    InvalidPeriodError,
    InvalidStatusError,
    JournalNotFoundError,
    PeriodLockedError,
    PostingValidationError,
    SourceAlreadyLinkedError,
    TooFewLinesError,
    UnbalancedJournalError,
)
from ledger.services.period_close_service import (
    ActiveRunExistsError,
    ChecklistIncompleteError,
    ChecklistItemNotFoundError,
    ChecklistLockedError,
    CloseInputError,
    CloseRunNotFoundError,
    InvalidChecklistStatusError,
    InvalidPeriodTransitionError,
    PeriodHardClosedError,
    PeriodNotFoundError,
    PeriodOverlapError,
)

# Order matters: subclasses before their bases.
ERROR_MAP = (
    # Ledger: validation
    (TooFewLinesError, "TOO_FEW_LINES", status.HTTP_400_BAD_REQUEST),
    (UnbalancedJournalError, "UNBALANCED", status.HTTP_400_BAD_REQUEST),
    (PostingValidationError, "INVALID_POSTING", status.HTTP_400_BAD_REQUEST),
    # Ledger: domain state
    (JournalNotFoundError, "JOURNAL_NOT_FOUND", status.HTTP_404_NOT_FOUND),
    (AccountMappingNotFoundError, "MAPPING_NOT_FOUND", status.HTTP_404_NOT_FOUND),
    (PeriodLockedError, "PERIOD_LOCKED", status.HTTP_409_CONFLICT),
    (InvalidPeriodError, "INVALID_PERIOD", status.HTTP_409_CONFLICT),
    (DateOutOfRangeError, "DATE_OUT_OF_RANGE", status.HTTP_400_BAD_REQUEST),
    (InvalidStatusError, "INVALID_STATUS", status.HTTP_409_CONFLICT),
    # Ledger: idempotency
    (SourceAlreadyLinkedError, "SOURCE_ALREADY_LINKED", status.HTTP_409_CONFLICT),
    # Period close
    (CloseInputError, "INVALID_REQUEST", status.HTTP_400_BAD_REQUEST),
    (PeriodNotFoundError, "PERIOD_NOT_FOUND", status.HTTP_404_NOT_FOUND),
    (CloseRunNotFoundError, "CLOSE_RUN_NOT_FOUND", status.HTTP_404_NOT_FOUND),
    (ChecklistItemNotFoundError, "CHECKLIST_ITEM_NOT_FOUND", status.HTTP_404_NOT_FOUND),
    (PeriodOverlapError, "PERIOD_OVERLAP", status.HTTP_409_CONFLICT),
    (ActiveRunExistsError, "ACTIVE_RUN_EXISTS", status.HTTP_409_CONFLICT),
    (ChecklistLockedError, "CHECKLIST_LOCKED", status.HTTP_409_CONFLICT),
    (ChecklistIncompleteError, "CHECKLIST_INCOMPLETE", status.HTTP_409_CONFLICT),
    (InvalidChecklistStatusError, "INVALID_CHECKLIST_STATUS", status.HTTP_400_BAD_REQUEST),
    (InvalidPeriodTransitionError, "INVALID_PERIOD_TRANSITION", status.HTTP_409_CONFLICT),
    (PeriodHardClosedError, "PERIOD_HARD_CLOSED", status.HTTP_409_CONFLICT),
)


def error_response(*, code: str, message: str, http_status: int):
    """
    Canonical API error response.
    """
    return Response(
        {"error": {"code": code, "message": message}},
        status=http_status,
    )


def handle_domain_error(exc: Exception):
    for exc_class, code, http_status in ERROR_MAP:
        if isinstance(exc, exc_class):
            if isinstance(exc, PostingValidationError) and code == "INVALID_POSTING":
                code = exc.code.upper()
            return error_response(code=code, message=str(exc), http_status=http_status)
    raise exc
