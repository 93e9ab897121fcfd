# ledger/services/inputs.py

"""
PATH: ledger/services/inputs.py

LEDGER SERVICE INPUTS (FRAMEWORK-AGNOSTIC)

Typed, immutable request objects for the ledger and period close services.
Built by the API layer (from validated serializer data), by management
commands, or directly by producer modules (AR, AP, inventory...).

Nothing here touches the database. Amount parsing and rule checks live in
posting_validator.py so the same rules apply however the input was built.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Optional, Tuple
from uuid import UUID


@dataclass(frozen=True)
class PostingLineInput:
    """
    One debit or credit line.

    - account_id: Account pk
    - debit / credit: Decimal, str, int or float; exactly one must be > 0
    - dim_*: optional analytical dimensions (external master-data ids)
    """

    account_id: Optional[int]
    debit: Any = "0"
    credit: Any = "0"
    dim_company_id: Optional[int] = None
    dim_branch_id: Optional[int] = None
    dim_warehouse_id: Optional[int] = None


@dataclass(frozen=True)
class PostingInput:
    """
    A journal posting request for one business event.

    (source_module, source_id) is the idempotency key of the event.
    """

    period_id: Optional[int]
    date: date
    source_module: str
    source_id: Optional[UUID]
    lines: Tuple[PostingLineInput, ...] = ()
    memo: str = ""
    posted_by: Any = None

    def __post_init__(self):
        # Accept any iterable of lines; store as a tuple.
        object.__setattr__(self, "lines", tuple(self.lines or ()))


@dataclass(frozen=True)
class VoidInput:
    entry_id: Optional[int]
    actor: Any = None
    reason: str = ""


@dataclass(frozen=True)
class ReverseInput:
    """
    Reverse a POSTED entry with a mirrored entry.

    - target_date: only honoured when the owning period is still OPEN
    - override: allow reversing out of a HARD_CLOSED period into the
      next OPEN period
    """

    entry_id: Optional[int]
    actor: Any = None
    target_date: Optional[date] = None
    memo: str = ""
    override: bool = False


@dataclass(frozen=True)
class CreatePeriodInput:
    company_id: Optional[int]
    name: str
    start_date: Optional[date]
    end_date: Optional[date]
    code: str = ""
    actor: Any = None
    metadata: dict = field(default_factory=dict)


@dataclass(frozen=True)
class StartCloseRunInput:
    company_id: Optional[int]
    period_id: Optional[int]
    actor: Any
    notes: str = ""


@dataclass(frozen=True)
class ChecklistUpdateInput:
    item_id: Optional[int]
    status: str
    actor: Any
    comment: str = ""
    assigned_to_id: Optional[int] = None
