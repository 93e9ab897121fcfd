# ledger/services/repository.py

"""
======================================================
PATH: ledger/services/repository.py
======================================================
LEDGER REPOSITORY (UNIT OF WORK)

The only place the ledger and close services touch the ORM for writes.

- ledger_transaction() opens the unit of work: one transaction.atomic()
  block, with a per-transaction lock timeout on PostgreSQL.
- Every *_for_update method MUST be called inside ledger_transaction().
- Idempotency is detected by inserting the source link and catching the
  unique-constraint violation. There is no existence pre-check.

Isolation (REPEATABLE READ) is configured on the connection in settings.
"""

from __future__ import annotations

from contextlib import contextmanager
from datetime import date
from typing import Iterable, Optional, Sequence

from django.db import IntegrityError, connection, transaction
from django.utils import timezone

from ledger.models import (
    Account,
    AccountMapping,
    ChecklistItem,
    CloseRun,
    JournalEntry,
    JournalLine,
    Period,
    SourceLink,
)
from ledger.models.account_mapping import normalize_mapping_module
from ledger.models.source_link import SOURCE_LINK_CONSTRAINT
from ledger.services.exceptions import PostingValidationError, SourceAlreadyLinkedError
from ledger.services.inputs import PostingInput, PostingLineInput
from ledger.services.posting_validator import parse_amount, quantize_money


@contextmanager
def ledger_transaction(*, lock_timeout_ms: int = 0):
    with transaction.atomic():
        if lock_timeout_ms and connection.vendor == "postgresql":
            with connection.cursor() as cursor:
                # is_local=true: reverts at the end of the enclosing transaction
                cursor.execute(
                    "SELECT set_config('lock_timeout', %s, true)",
                    [f"{int(lock_timeout_ms)}ms"],
                )
        yield


def _is_source_link_violation(exc: IntegrityError) -> bool:
    cause = exc.__cause__
    diag = getattr(cause, "diag", None)
    constraint = getattr(diag, "constraint_name", None)
    if constraint:
        return constraint == SOURCE_LINK_CONSTRAINT

    # SQLite does not report constraint names.
    message = str(exc).lower()
    return SOURCE_LINK_CONSTRAINT in message or (
        "unique" in message and SourceLink._meta.db_table in message
    )


class LedgerRepository:
    # ------------------------------------------------------------
    # Periods
    # ------------------------------------------------------------

    def get_period(self, period_id) -> Optional[Period]:
        return Period.objects.filter(pk=period_id).first()

    def get_period_for_update(self, period_id) -> Optional[Period]:
        return Period.objects.select_for_update().filter(pk=period_id).first()

    def get_next_open_period_after(self, day: date, *, company_id=None) -> Optional[Period]:
        return (
            Period.objects.select_for_update()
            .filter(
                company_id=company_id,
                status=Period.STATUS_OPEN,
                start_date__gte=day,
            )
            .order_by("start_date", "id")
            .first()
        )

    def period_range_conflict(self, *, company_id, start_date, end_date) -> bool:
        # Inclusive ranges overlap iff a.start <= b.end and a.end >= b.start.
        return Period.objects.filter(
            company_id=company_id,
            start_date__lte=end_date,
            end_date__gte=start_date,
        ).exists()

    def insert_period(self, *, company_id, code, name, start_date, end_date, metadata) -> Period:
        period = Period(
            company_id=company_id,
            code=code,
            name=name,
            start_date=start_date,
            end_date=end_date,
            status=Period.STATUS_OPEN,
            metadata=metadata or {},
        )
        period.clean()
        period.save()
        return period

    def update_period_status(self, period: Period, *, status: str, actor) -> Period:
        now = timezone.now()
        period.status = status

        if status == Period.STATUS_SOFT_CLOSED:
            period.soft_closed_by = actor
            period.soft_closed_at = now
        elif status == Period.STATUS_OPEN:
            period.soft_closed_by = None
            period.soft_closed_at = None

        if status == Period.STATUS_HARD_CLOSED:
            period.closed_by = actor
            period.closed_at = now
        else:
            period.closed_by = None
            period.closed_at = None

        period.save(
            update_fields=[
                "status",
                "soft_closed_by",
                "soft_closed_at",
                "closed_by",
                "closed_at",
                "updated_at",
            ]
        )
        return period

    # ------------------------------------------------------------
    # Journal entries
    # ------------------------------------------------------------

    def insert_entry(self, posting: PostingInput) -> JournalEntry:
        entry = JournalEntry.objects.create(
            period_id=posting.period_id,
            date=posting.date,
            source_module=posting.source_module.strip(),
            source_id=posting.source_id,
            memo=posting.memo or "",
            posted_by=posting.posted_by,
            status=JournalEntry.STATUS_POSTED,
        )
        # Journal numbers follow the insertion sequence.
        entry.number = entry.pk
        entry.save(update_fields=["number"])
        return entry

    def insert_lines(self, entry: JournalEntry, lines: Sequence[PostingLineInput]) -> list[JournalLine]:
        account_ids = {line.account_id for line in lines}
        active_ids = set(
            Account.objects.filter(pk__in=account_ids, is_active=True).values_list("pk", flat=True)
        )

        rows: list[JournalLine] = []
        for index, line in enumerate(lines):
            if line.account_id not in active_ids:
                raise PostingValidationError(
                    f"Line {index}: account {line.account_id} does not exist or is inactive",
                    code="line_unknown_account",
                    line=index,
                )
            rows.append(
                JournalLine(
                    entry=entry,
                    account_id=line.account_id,
                    debit=quantize_money(parse_amount(line.debit, line=index)),
                    credit=quantize_money(parse_amount(line.credit, line=index)),
                    dim_company_id=line.dim_company_id,
                    dim_branch_id=line.dim_branch_id,
                    dim_warehouse_id=line.dim_warehouse_id,
                )
            )

        JournalLine.objects.bulk_create(rows)
        return list(entry.lines.order_by("id"))

    def link_source(self, *, module: str, ref_id, entry: JournalEntry) -> SourceLink:
        module = module.strip()
        try:
            with transaction.atomic():
                return SourceLink.objects.create(module=module, ref_id=ref_id, entry=entry)
        except IntegrityError as exc:
            if _is_source_link_violation(exc):
                raise SourceAlreadyLinkedError(source_module=module, source_id=ref_id) from exc
            raise

    def get_entry_with_lines(self, entry_id) -> Optional[JournalEntry]:
        return (
            JournalEntry.objects.select_related("period", "posted_by")
            .prefetch_related("lines__account")
            .filter(pk=entry_id)
            .first()
        )

    def get_entry_for_update(self, entry_id) -> Optional[JournalEntry]:
        return JournalEntry.objects.select_for_update().filter(pk=entry_id).first()

    def update_entry_status(self, entry: JournalEntry, status: str) -> JournalEntry:
        entry.status = status
        entry.save(update_fields=["status", "updated_at"])
        return entry

    def find_entry_by_source(self, *, module: str, ref_id) -> Optional[JournalEntry]:
        link = (
            SourceLink.objects.select_related("entry")
            .filter(module=(module or "").strip(), ref_id=ref_id)
            .first()
        )
        return link.entry if link else None

    def list_entries(self, *, period_id=None, status=None):
        qs = JournalEntry.objects.select_related("period", "posted_by").prefetch_related(
            "lines__account"
        )
        if period_id:
            qs = qs.filter(period_id=period_id)
        if status:
            qs = qs.filter(status=status)
        return qs.order_by("-number")

    # ------------------------------------------------------------
    # Account mappings
    # ------------------------------------------------------------

    def get_account_mapping(self, *, module: str, key: str) -> Optional[AccountMapping]:
        return (
            AccountMapping.objects.select_related("account")
            .filter(module=normalize_mapping_module(module), key=(key or "").strip())
            .first()
        )

    # ------------------------------------------------------------
    # Close runs + checklist
    # ------------------------------------------------------------

    def period_has_active_run(self, period: Period) -> bool:
        return CloseRun.objects.filter(
            period=period,
            status__in=[CloseRun.STATUS_DRAFT, CloseRun.STATUS_IN_PROGRESS],
        ).exists()

    def insert_close_run(self, *, company_id, period: Period, actor, notes: str) -> CloseRun:
        return CloseRun.objects.create(
            company_id=company_id,
            period=period,
            status=CloseRun.STATUS_IN_PROGRESS,
            created_by=actor,
            notes=notes or "",
        )

    def insert_checklist_items(
        self, run: CloseRun, definitions: Iterable[tuple[str, str]]
    ) -> list[ChecklistItem]:
        ChecklistItem.objects.bulk_create(
            [ChecklistItem(run=run, code=code, label=label) for code, label in definitions]
        )
        return list(run.checklist_items.order_by("id"))

    def get_close_run(self, run_id) -> Optional[CloseRun]:
        return (
            CloseRun.objects.select_related("period", "created_by")
            .prefetch_related("checklist_items")
            .filter(pk=run_id)
            .first()
        )

    def get_close_run_for_update(self, run_id) -> Optional[CloseRun]:
        return CloseRun.objects.select_for_update().filter(pk=run_id).first()

    def get_checklist_item_for_update(self, item_id) -> Optional[ChecklistItem]:
        return ChecklistItem.objects.select_for_update().filter(pk=item_id).first()

    def checklist_statuses(self, run: CloseRun) -> list[str]:
        return list(run.checklist_items.values_list("status", flat=True))

    def update_checklist_item(
        self, item: ChecklistItem, *, status: str, comment: str, completed_at, assigned_to_id=None
    ) -> ChecklistItem:
        fields = ["status", "completed_at", "updated_at"]

        item.status = status
        item.completed_at = completed_at

        if (comment or "").strip():
            item.comment = comment
            fields.append("comment")

        if assigned_to_id is not None:
            item.assigned_to_id = assigned_to_id
            fields.append("assigned_to")

        item.save(update_fields=fields)
        return item

    def update_run_status(self, run: CloseRun, status: str) -> CloseRun:
        run.status = status
        fields = ["status", "updated_at"]
        if status == CloseRun.STATUS_COMPLETED:
            run.completed_at = timezone.now()
            fields.append("completed_at")
        run.save(update_fields=fields)
        return run
