# ledger/services/journal_entry_service.py

"""
======================================================
PATH: ledger/services/journal_entry_service.py
======================================================
LEDGER SERVICE (POSTING ENGINE)

This module is the ONLY place allowed to:
- Create JournalEntry / JournalLine / SourceLink rows
- Flip a JournalEntry from POSTED to VOID
- Create reversal entries

Everything else (AR, AP, inventory, adjustments) must pass through here.

Guarantees:
- Balanced: every entry is validated before it is written
- Atomic: header + lines + source link commit together or not at all
- Idempotent: one entry per (source_module, source_id), enforced by the
  source link unique constraint
- Period-safe: the owning period row is locked for the whole operation
- Audit is recorded after commit and can never fail the operation

Period vocabulary:
- The ledger accepts both OPEN / SOFT_CLOSED / HARD_CLOSED and the older
  OPEN / CLOSED / LOCKED names.
"""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Callable, Iterable, Optional
from uuid import uuid4

from django.utils import timezone

from ledger.models import Account, JournalEntry, JournalLine
from ledger.services.audit import record_after_commit
from ledger.services.config import LedgerSettings
from ledger.services.exceptions import (
    AccountMappingNotFoundError,
    DateOutOfRangeError,
    InvalidPeriodError,
    InvalidStatusError,
    JournalNotFoundError,
    LedgerServiceError,
    PeriodLockedError,
    PostingValidationError,
)
from ledger.services.inputs import (
    PostingInput,
    PostingLineInput,
    ReverseInput,
    VoidInput,
)
from ledger.services.period_lifecycle import (
    accepts_postings,
    is_locked,
    is_open,
    is_soft_closed,
)
from ledger.services.period_lock import PeriodHardClosedError
from ledger.services.posting_validator import (
    MAX_STORED_SOURCE_MODULE_LENGTH,
    validate_posting,
)
from ledger.services.repository import LedgerRepository, ledger_transaction

logger = logging.getLogger(__name__)

REVERSAL_SUFFIX = ":REVERSAL"
ENTITY = "journal_entry"


def reverse_lines(lines: Iterable[JournalLine]) -> tuple[PostingLineInput, ...]:
    """Mirror each line: debit and credit swap, account and dimensions stay."""
    return tuple(
        PostingLineInput(
            account_id=line.account_id,
            debit=line.credit,
            credit=line.debit,
            dim_company_id=line.dim_company_id,
            dim_branch_id=line.dim_branch_id,
            dim_warehouse_id=line.dim_warehouse_id,
        )
        for line in lines
    )


def reversal_source_module(module: str) -> str:
    """
    Tag for a reversal entry: "<module>:REVERSAL".

    Reversing a reversal keeps the single suffix, so chains never outgrow
    the column.
    """
    module = (module or "").strip()
    if module.endswith(REVERSAL_SUFFIX):
        return module
    return f"{module}{REVERSAL_SUFFIX}"


def default_reversal_memo(memo: str, number) -> str:
    if (memo or "").strip():
        return memo
    return f"Reversal of JE {number}"


class LedgerService:
    def __init__(
        self,
        repository: Optional[LedgerRepository] = None,
        guard=None,
        audit=None,
        settings: Optional[LedgerSettings] = None,
        now: Optional[Callable] = None,
    ):
        self.settings = settings or LedgerSettings.from_settings()
        self.repository = repository or LedgerRepository()
        self.guard = guard if guard is not None else self.settings.build_guard()
        self.audit = audit if audit is not None else self.settings.build_audit_recorder()
        self.now = now or timezone.now

    # ------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------

    def _transaction(self):
        return ledger_transaction(lock_timeout_ms=self.settings.lock_timeout_ms)

    def _ensure_period_guard(self, period_id) -> None:
        if self.guard is None or not self.settings.period_guard_enabled:
            return
        try:
            self.guard.ensure_period_open_for_posting(period_id=period_id)
        except PeriodHardClosedError as exc:
            raise PeriodLockedError(str(exc)) from exc

    def _lock_period(self, period_id):
        period = self.repository.get_period_for_update(period_id)
        if period is None:
            raise InvalidPeriodError(f"Period {period_id} does not exist")
        return period

    def _write_entry(self, posting: PostingInput) -> JournalEntry:
        entry = self.repository.insert_entry(posting)
        self.repository.insert_lines(entry, posting.lines)
        self.repository.link_source(
            module=posting.source_module,
            ref_id=posting.source_id,
            entry=entry,
        )
        return entry

    # ------------------------------------------------------------
    # Post
    # ------------------------------------------------------------

    def post_journal(self, posting: PostingInput) -> JournalEntry:
        try:
            validate_posting(posting)

            with self._transaction():
                self._ensure_period_guard(posting.period_id)

                period = self._lock_period(posting.period_id)
                if is_locked(period.status):
                    raise PeriodLockedError(f"Period {period.name} is locked")
                if not accepts_postings(period.status):
                    raise InvalidPeriodError(f"Period {period.name} is not open")
                if not period.contains(posting.date):
                    raise DateOutOfRangeError(
                        f"Date {posting.date} is outside period "
                        f"{period.start_date} to {period.end_date}"
                    )

                entry = self._write_entry(posting)
        except LedgerServiceError as exc:
            logger.warning(
                "Journal posting rejected: %s",
                exc,
                extra={
                    "period_id": posting.period_id,
                    "source_module": posting.source_module,
                    "source_id": str(posting.source_id),
                    "error": type(exc).__name__,
                },
            )
            raise

        logger.info(
            "Journal entry posted",
            extra={"entry_id": entry.pk, "number": entry.number, "period_id": entry.period_id},
        )

        record_after_commit(
            self.audit,
            actor=posting.posted_by,
            action="journal.post",
            entity=ENTITY,
            entity_id=entry.pk,
            meta={
                "number": entry.number,
                "source_module": entry.source_module,
                "source_id": str(entry.source_id),
            },
            occurred_at=self.now(),
        )

        return self.repository.get_entry_with_lines(entry.pk)

    # ------------------------------------------------------------
    # Void
    # ------------------------------------------------------------

    def void_journal(self, request: VoidInput) -> JournalEntry:
        if not request.entry_id:
            raise PostingValidationError("Entry id is required", code="entry_required")

        try:
            with self._transaction():
                entry = self.repository.get_entry_with_lines(request.entry_id)
                if entry is None:
                    raise JournalNotFoundError(f"Journal entry {request.entry_id} not found")

                # Lock order: period first, then the entry row.
                period = self._lock_period(entry.period_id)
                entry = self.repository.get_entry_for_update(entry.pk)
                if is_locked(period.status):
                    raise PeriodLockedError(f"Period {period.name} is locked")
                if is_soft_closed(period.status):
                    raise InvalidPeriodError(
                        f"Period {period.name} is soft closed; reverse the entry instead"
                    )
                if entry.status != JournalEntry.STATUS_POSTED:
                    raise InvalidStatusError(
                        f"Journal entry {entry.number} is {entry.status}, not POSTED"
                    )

                self.repository.update_entry_status(entry, JournalEntry.STATUS_VOID)
        except LedgerServiceError as exc:
            logger.warning(
                "Journal void rejected: %s",
                exc,
                extra={"entry_id": request.entry_id, "error": type(exc).__name__},
            )
            raise

        logger.info("Journal entry voided", extra={"entry_id": entry.pk, "number": entry.number})

        record_after_commit(
            self.audit,
            actor=request.actor,
            action="journal.void",
            entity=ENTITY,
            entity_id=entry.pk,
            meta={"reason": request.reason or ""},
            occurred_at=self.now(),
        )

        return self.repository.get_entry_with_lines(entry.pk)

    # ------------------------------------------------------------
    # Reverse
    # ------------------------------------------------------------

    def reverse_journal(self, request: ReverseInput) -> JournalEntry:
        if not request.entry_id:
            raise PostingValidationError("Entry id is required", code="entry_required")

        try:
            with self._transaction():
                original = self.repository.get_entry_with_lines(request.entry_id)
                if original is None:
                    raise JournalNotFoundError(f"Journal entry {request.entry_id} not found")
                if original.status != JournalEntry.STATUS_POSTED:
                    raise InvalidStatusError(
                        f"Journal entry {original.number} is {original.status}, not POSTED"
                    )

                period = self._lock_period(original.period_id)
                target_period = period
                target_date = request.target_date or original.date

                if not is_open(period.status):
                    if is_locked(period.status) and not request.override:
                        raise PeriodLockedError(f"Period {period.name} is locked")

                    target_period = self.repository.get_next_open_period_after(
                        period.end_date + timedelta(days=1),
                        company_id=period.company_id,
                    )
                    if target_period is None:
                        raise InvalidPeriodError(
                            f"No open period after {period.end_date} to receive the reversal"
                        )
                    target_date = target_period.start_date

                if not target_period.contains(target_date):
                    raise DateOutOfRangeError(
                        f"Date {target_date} is outside period "
                        f"{target_period.start_date} to {target_period.end_date}"
                    )

                posting = PostingInput(
                    period_id=target_period.pk,
                    date=target_date,
                    source_module=reversal_source_module(original.source_module),
                    source_id=uuid4(),
                    memo=default_reversal_memo(request.memo, original.number),
                    posted_by=request.actor,
                    lines=reverse_lines(original.lines.all()),
                )
                validate_posting(
                    posting, max_source_module_length=MAX_STORED_SOURCE_MODULE_LENGTH
                )

                reversal = self._write_entry(posting)
        except LedgerServiceError as exc:
            logger.warning(
                "Journal reversal rejected: %s",
                exc,
                extra={"entry_id": request.entry_id, "error": type(exc).__name__},
            )
            raise

        logger.info(
            "Journal entry reversed",
            extra={
                "entry_id": original.pk,
                "reversal_id": reversal.pk,
                "reversal_period_id": reversal.period_id,
            },
        )

        record_after_commit(
            self.audit,
            actor=request.actor,
            action="journal.reverse",
            entity=ENTITY,
            entity_id=original.pk,
            meta={"reversal_id": reversal.pk, "reversal_number": reversal.number},
            occurred_at=self.now(),
        )

        return self.repository.get_entry_with_lines(reversal.pk)

    # ------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------

    def get_journal(self, entry_id) -> JournalEntry:
        entry = self.repository.get_entry_with_lines(entry_id)
        if entry is None:
            raise JournalNotFoundError(f"Journal entry {entry_id} not found")
        return entry

    def list_journals(self, *, period_id=None, status=None):
        return self.repository.list_entries(period_id=period_id, status=status)

    def find_by_source(self, source_module: str, source_id) -> Optional[JournalEntry]:
        return self.repository.find_entry_by_source(module=source_module, ref_id=source_id)

    def resolve_account(self, module: str, key: str) -> Account:
        """Account mapped to (module, key); module is matched case-insensitively."""
        if not (module or "").strip() or not (key or "").strip():
            raise PostingValidationError(
                "Mapping module and key are required", code="mapping_key_required"
            )

        mapping = self.repository.get_account_mapping(module=module, key=key)
        if mapping is None:
            raise AccountMappingNotFoundError(f"No account mapped to {module}/{key}")
        return mapping.account
