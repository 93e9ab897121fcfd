# PATH: ledger/services/period_close_service.py

"""
PERIOD CLOSE SERVICE

Owns the accounting period lifecycle and the close-run checklist gate:

    create period (OPEN)
      -> start close run (IN_PROGRESS, checklist seeded)
      -> work the checklist (PENDING / IN_PROGRESS / DONE / SKIPPED)
      -> soft close   (period SOFT_CLOSED; postings still allowed, voids not)
      -> hard close   (period HARD_CLOSED, run COMPLETED; period frozen)

Guarantees:
- Atomic: every operation is one transaction
- Serialized: the period (and run / item) rows are locked for update
- At most one active (DRAFT / IN_PROGRESS) close run per period
- HARD_CLOSED requires a non-empty checklist with nothing left open
- Periods never move backwards; HARD_CLOSED is terminal
- Every mutation is audited after commit
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from django.utils import timezone

from ledger.models import ChecklistItem, CloseRun, Period
from ledger.services.audit import record_after_commit
from ledger.services.config import LedgerSettings
from ledger.services.inputs import (
    ChecklistUpdateInput,
    CreatePeriodInput,
    StartCloseRunInput,
)
from ledger.services.period_lifecycle import (
    TERMINAL_CHECKLIST_STATES,
    InvalidPeriodTransitionError,
    PeriodCloseError,
    checklist_complete,
    is_locked,
    is_run_active,
    is_valid_checklist_status,
    validate_transition,
)
from ledger.services.period_lock import PeriodHardClosedError
from ledger.services.repository import LedgerRepository, ledger_transaction

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 500


# ============================================================
# DOMAIN ERRORS
# ============================================================


class CloseInputError(PeriodCloseError):
    """Raised when a close request is missing required fields."""


class PeriodNotFoundError(PeriodCloseError):
    pass


class CloseRunNotFoundError(PeriodCloseError):
    pass


class ChecklistItemNotFoundError(PeriodCloseError):
    pass


class PeriodOverlapError(PeriodCloseError):
    pass


class ActiveRunExistsError(PeriodCloseError):
    pass


class ChecklistLockedError(PeriodCloseError):
    """Raised when the checklist (or its run) cannot be updated in its current state."""


class ChecklistIncompleteError(PeriodCloseError):
    pass


class InvalidChecklistStatusError(PeriodCloseError):
    pass


__all__ = [
    "PeriodCloseService",
    "PeriodCloseError",
    "CloseInputError",
    "PeriodNotFoundError",
    "CloseRunNotFoundError",
    "ChecklistItemNotFoundError",
    "PeriodOverlapError",
    "ActiveRunExistsError",
    "ChecklistLockedError",
    "ChecklistIncompleteError",
    "InvalidChecklistStatusError",
    "InvalidPeriodTransitionError",
    "PeriodHardClosedError",
]


def _require_actor(actor) -> None:
    if actor is None or not getattr(actor, "pk", None):
        raise CloseInputError("Actor is required")


class PeriodCloseService:
    def __init__(
        self,
        repository: Optional[LedgerRepository] = None,
        audit=None,
        settings: Optional[LedgerSettings] = None,
        now: Optional[Callable] = None,
    ):
        self.settings = settings or LedgerSettings.from_settings()
        self.repository = repository or LedgerRepository()
        self.audit = audit if audit is not None else self.settings.build_audit_recorder()
        self.now = now or timezone.now

    def _transaction(self):
        return ledger_transaction(lock_timeout_ms=self.settings.lock_timeout_ms)

    def _audit(self, *, actor, action: str, entity: str, entity_id, meta: dict) -> None:
        record_after_commit(
            self.audit,
            actor=actor,
            action=action,
            entity=entity,
            entity_id=entity_id,
            meta=meta,
            occurred_at=self.now(),
        )

    def _lock_run(self, run_id) -> CloseRun:
        run = self.repository.get_close_run_for_update(run_id)
        if run is None:
            raise CloseRunNotFoundError(f"Close run {run_id} not found")
        return run

    def _lock_period(self, period_id) -> Period:
        period = self.repository.get_period_for_update(period_id)
        if period is None:
            raise PeriodNotFoundError(f"Period {period_id} not found")
        return period

    # ------------------------------------------------------------
    # Periods
    # ------------------------------------------------------------

    def create_period(self, data: CreatePeriodInput) -> Period:
        if not data.company_id:
            raise CloseInputError("Company id is required")
        name = (data.name or "").strip()
        if not name:
            raise CloseInputError("Period name is required")
        if not data.start_date or not data.end_date:
            raise CloseInputError("Start and end date are required")
        if data.start_date > data.end_date:
            raise CloseInputError("Start date cannot be after end date")

        with self._transaction():
            if self.repository.period_range_conflict(
                company_id=data.company_id,
                start_date=data.start_date,
                end_date=data.end_date,
            ):
                logger.warning(
                    "Period overlaps existing range",
                    extra={
                        "company_id": data.company_id,
                        "start_date": str(data.start_date),
                        "end_date": str(data.end_date),
                    },
                )
                raise PeriodOverlapError(
                    f"Period {data.start_date} to {data.end_date} overlaps an existing period"
                )

            period = self.repository.insert_period(
                company_id=data.company_id,
                code=((data.code or "").strip() or name)[:32],
                name=name,
                start_date=data.start_date,
                end_date=data.end_date,
                metadata=data.metadata,
            )

        logger.info("Period created", extra={"period_id": period.pk, "company_id": period.company_id})
        self._audit(
            actor=data.actor,
            action="period.create",
            entity="period",
            entity_id=period.pk,
            meta={
                "name": period.name,
                "start_date": period.start_date.isoformat(),
                "end_date": period.end_date.isoformat(),
            },
        )
        return period

    def get_period(self, period_id) -> Period:
        period = self.repository.get_period(period_id)
        if period is None:
            raise PeriodNotFoundError(f"Period {period_id} not found")
        return period

    def list_periods(self, *, company_id=None, limit: int = DEFAULT_PAGE_SIZE, offset: int = 0):
        limit = max(1, min(int(limit or DEFAULT_PAGE_SIZE), MAX_PAGE_SIZE))
        offset = max(0, int(offset or 0))

        qs = Period.objects.all().order_by("-start_date", "-id")
        if company_id:
            qs = qs.filter(company_id=company_id)
        return list(qs[offset : offset + limit])

    def ensure_period_open_for_posting(self, period_id) -> None:
        period = self.get_period(period_id)
        if is_locked(period.status):
            raise PeriodHardClosedError(f"Period {period.name} is hard closed")

    # ------------------------------------------------------------
    # Close runs
    # ------------------------------------------------------------

    def start_close_run(self, data: StartCloseRunInput) -> CloseRun:
        if not data.company_id or not data.period_id:
            raise CloseInputError("Company, period and actor are required")
        _require_actor(data.actor)

        with self._transaction():
            period = self._lock_period(data.period_id)

            if period.company_id and period.company_id != data.company_id:
                raise CloseInputError("Period does not belong to company")
            if is_locked(period.status):
                raise PeriodHardClosedError(f"Period {period.name} is already hard closed")
            if self.repository.period_has_active_run(period):
                raise ActiveRunExistsError(f"Period {period.name} already has an active close run")

            run = self.repository.insert_close_run(
                company_id=data.company_id,
                period=period,
                actor=data.actor,
                notes=data.notes,
            )
            self.repository.insert_checklist_items(run, self.settings.close_checklist)

        logger.info("Close run started", extra={"run_id": run.pk, "period_id": period.pk})
        self._audit(
            actor=data.actor,
            action="close_run.start",
            entity="close_run",
            entity_id=run.pk,
            meta={"period_id": period.pk, "company_id": data.company_id},
        )
        return self.get_close_run(run.pk)

    def get_close_run(self, run_id) -> CloseRun:
        run = self.repository.get_close_run(run_id)
        if run is None:
            raise CloseRunNotFoundError(f"Close run {run_id} not found")
        return run

    def cancel_close_run(self, run_id, actor) -> CloseRun:
        _require_actor(actor)

        with self._transaction():
            run = self._lock_run(run_id)
            if not is_run_active(run.status):
                raise ChecklistLockedError(f"Close run {run.pk} is {run.status} and cannot be cancelled")
            self.repository.update_run_status(run, CloseRun.STATUS_CANCELLED)

        logger.info("Close run cancelled", extra={"run_id": run.pk})
        self._audit(
            actor=actor,
            action="close_run.cancel",
            entity="close_run",
            entity_id=run.pk,
            meta={"period_id": run.period_id},
        )
        return self.get_close_run(run.pk)

    # ------------------------------------------------------------
    # Checklist
    # ------------------------------------------------------------

    def update_checklist(self, data: ChecklistUpdateInput) -> ChecklistItem:
        if not data.item_id:
            raise CloseInputError("Checklist item id and actor are required")
        _require_actor(data.actor)
        if not is_valid_checklist_status(data.status):
            raise InvalidChecklistStatusError(f"Invalid checklist status: {data.status!r}")

        with self._transaction():
            item = self.repository.get_checklist_item_for_update(data.item_id)
            if item is None:
                raise ChecklistItemNotFoundError(f"Checklist item {data.item_id} not found")

            run = self._lock_run(item.run_id)
            if run.status == CloseRun.STATUS_CANCELLED:
                raise ChecklistLockedError(f"Close run {run.pk} is cancelled")

            # The run stays open after the last item is done; only hard_close() completes it.
            previous = item.status
            completed_at =self.now() if data.status in TERMINAL_CHECKLIST_STATES else None
            item = self.repository.update_checklist_item(
                item,
                status=data.status,
                comment=data.comment,
                completed_at=completed_at,
                assigned_to_id=data.assigned_to_id,
            )

        logger.info(
            "Checklist item updated",
            extra={"item_id": item.pk, "run_id": item.run_id, "status": item.status},
        )
        self._audit(
            actor=data.actor,
            action="close_run.checklist_update",
            entity="checklist_item",
            entity_id=item.pk,
            meta={"run_id": item.run_id, "code": item.code, "from": previous, "to": item.status},
        )
        return item

    # ------------------------------------------------------------
    # Close transitions
    # ------------------------------------------------------------

    def soft_close(self, run_id, actor) -> Period:
        _require_actor(actor)

        with self._transaction():
            run = self._lock_run(run_id)
            if run.status == CloseRun.STATUS_CANCELLED:
                raise ChecklistLockedError(f"Close run {run.pk} is cancelled")

            period = self._lock_period(run.period_id)
            if period.status != Period.STATUS_OPEN:
                raise InvalidPeriodTransitionError(
                    f"Period {period.pk} cannot transition from "
                    f"'{period.status}' to '{Period.STATUS_SOFT_CLOSED}'"
                )

            self.repository.update_period_status(
                period, status=Period.STATUS_SOFT_CLOSED, actor=actor
            )

        logger.info("Period soft closed", extra={"period_id": period.pk, "run_id": run.pk})
        self._audit(
            actor=actor,
            action="period.soft_close",
            entity="period",
            entity_id=period.pk,
            meta={"run_id": run.pk},
        )
        return self.get_period(period.pk)

    def hard_close(self, run_id, actor) -> Period:
        _require_actor(actor)

        with self._transaction():
            run = self._lock_run(run_id)
            if run.status == CloseRun.STATUS_CANCELLED:
                raise ChecklistLockedError(f"Close run {run.pk} is cancelled")

            if not checklist_complete(self.repository.checklist_statuses(run)):
                logger.warning("Hard close refused: checklist incomplete", extra={"run_id": run.pk})
                raise ChecklistIncompleteError(f"Checklist of close run {run.pk} is not complete")

            period = self._lock_period(run.period_id)
            validate_transition(period=period, target_status=Period.STATUS_HARD_CLOSED)

            self.repository.update_period_status(
                period, status=Period.STATUS_HARD_CLOSED, actor=actor
            )
            self.repository.update_run_status(run, CloseRun.STATUS_COMPLETED)

        logger.info("Period hard closed", extra={"period_id": period.pk, "run_id": run.pk})
        self._audit(
            actor=actor,
            action="period.hard_close",
            entity="period",
            entity_id=period.pk,
            meta={"run_id": run.pk},
        )
        return self.get_period(period.pk)
