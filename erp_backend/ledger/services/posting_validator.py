# ledger/services/posting_validator.py

"""
======================================================
PATH: ledger/services/posting_validator.py
======================================================
POSTING VALIDATOR

Pure structural checks for a PostingInput. No database access, no side
effects; safe to call from serializers, services and tests alike.

Rules (evaluated in this order, first failure wins):
1. period id present
2. at least two lines
3. every line references an account
4. amounts parse; no negative debit / credit
5. no line carries both a debit and a credit; no line that is zero at 2dp
6. total debit == total credit, compared as 2-decimal strings
7. source module present and within the length cap (64 for producers)
8. source id present and not the nil UUID

Rule 6 compares the formatted totals, so a difference below one cent is
treated as balanced. Stored amounts are quantized to 2dp on insert.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from uuid import UUID

from ledger.services.exceptions import (
    PostingValidationError,
    TooFewLinesError,
    UnbalancedJournalError,
)
from ledger.services.inputs import PostingInput

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0")
NIL_UUID = UUID(int=0)
MAX_SOURCE_MODULE_LENGTH = 64
# Column width; leaves room for the reversal suffix on a full-length module.
MAX_STORED_SOURCE_MODULE_LENGTH = 128


def parse_amount(value, *, line: int | None = None) -> Decimal:
    """
    Parse a line amount into a Decimal (unquantized).

    Accepts Decimal, int, str and float (floats go through str() so 0.1
    stays 0.1). Empty / None is zero.
    """
    if value is None or value == "":
        return ZERO

    if isinstance(value, Decimal):
        amount = value
    else:
        try:
            amount = Decimal(str(value).strip())
        except (InvalidOperation, ValueError, TypeError) as exc:
            raise PostingValidationError(
                f"Line {line}: invalid amount {value!r}",
                code="line_invalid_amount",
                line=line,
            ) from exc

    if not amount.is_finite():
        raise PostingValidationError(
            f"Line {line}: invalid amount {value!r}",
            code="line_invalid_amount",
            line=line,
        )
    return amount


def quantize_money(amount: Decimal) -> Decimal:
    return amount.quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def format_total(amount: Decimal) -> str:
    return format(amount, ".2f")


def validate_posting(
    posting: PostingInput, *, max_source_module_length: int = MAX_SOURCE_MODULE_LENGTH
) -> None:
    if not posting.period_id:
        raise PostingValidationError("Period is required", code="period_required")

    if len(posting.lines) < 2:
        raise TooFewLinesError("Journal requires at least two lines")

    total_debit = ZERO
    total_credit = ZERO

    for index, line in enumerate(posting.lines):
        if not line.account_id:
            raise PostingValidationError(
                f"Line {index}: account is required",
                code="line_missing_account",
                line=index,
            )

        debit = parse_amount(line.debit, line=index)
        credit = parse_amount(line.credit, line=index)

        if debit < 0 or credit < 0:
            raise PostingValidationError(
                f"Line {index}: debit or credit cannot be negative",
                code="line_negative_amount",
                line=index,
            )

        if debit > 0 and credit > 0:
            raise PostingValidationError(
                f"Line {index}: a line cannot have both debit and credit",
                code="line_both_sides",
                line=index,
            )

        # Amounts are stored at 2dp; a line that rounds to nothing is empty.
        if quantize_money(debit) == 0 and quantize_money(credit) == 0:
            raise PostingValidationError(
                f"Line {index}: a line must have either debit or credit",
                code="line_zero_amount",
                line=index,
            )

        total_debit += debit
        total_credit += credit

    if format_total(total_debit) != format_total(total_credit):
        raise UnbalancedJournalError(
            f"Journal lines must balance: debit={format_total(total_debit)} "
            f"credit={format_total(total_credit)}"
        )

    source_module = (posting.source_module or "").strip()
    if not source_module:
        raise PostingValidationError(
            "Source module is required", code="source_module_required"
        )
    if len(source_module) > max_source_module_length:
        raise PostingValidationError(
            f"Source module cannot exceed {max_source_module_length} characters",
            code="source_module_too_long",
        )

    if posting.source_id is None or posting.source_id == NIL_UUID:
        raise PostingValidationError("Source id is required", code="source_id_required")
