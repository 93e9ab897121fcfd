"""
PERIOD & CLOSE-RUN LIFECYCLE RULES

This module defines the ONLY allowed lifecycle transitions
for accounting periods, close runs and checklist items.

DESIGN PRINCIPLES:
- No database writes
- No side effects
- Single source of truth
"""

from __future__ import annotations

from ledger.models import ChecklistItem, CloseRun, Period

# ============================================================
# DOMAIN ERRORS
# ============================================================


class PeriodCloseError(Exception):
    """Base exception for period lifecycle and close-run failures."""


class InvalidPeriodTransitionError(PeriodCloseError):
    pass


# ============================================================
# STATE DEFINITIONS
# ============================================================

TERMINAL_PERIOD_STATES = {
    Period.STATUS_HARD_CLOSED,
}

ALLOWED_PERIOD_TRANSITIONS = {
    Period.STATUS_OPEN: {
        Period.STATUS_SOFT_CLOSED,
        Period.STATUS_HARD_CLOSED,
    },
    Period.STATUS_SOFT_CLOSED: {
        Period.STATUS_HARD_CLOSED,
    },
}

ACTIVE_RUN_STATES = {
    CloseRun.STATUS_DRAFT,
    CloseRun.STATUS_IN_PROGRESS,
}

CHECKLIST_STATES = {
    ChecklistItem.STATUS_PENDING,
    ChecklistItem.STATUS_IN_PROGRESS,
    ChecklistItem.STATUS_DONE,
    ChecklistItem.STATUS_SKIPPED,
}

TERMINAL_CHECKLIST_STATES = {
    ChecklistItem.STATUS_DONE,
    ChecklistItem.STATUS_SKIPPED,
}

OPEN_CHECKLIST_STATES = CHECKLIST_STATES - TERMINAL_CHECKLIST_STATES

DEFAULT_CHECKLIST = (
    ("BANK_RECON", "Bank reconciliation completed"),
    ("AP_SUBLEDGER", "AP subledger reconciled"),
    ("AR_SUBLEDGER", "AR subledger reconciled"),
)

# Ledger-side vocabulary: OPEN / CLOSED / LOCKED.
POSTABLE_PERIOD_STATES = {
    Period.STATUS_OPEN,
    Period.LEGACY_OPEN,
    Period.STATUS_SOFT_CLOSED,
    Period.LEGACY_CLOSED,
}

SOFT_CLOSED_STATES = {
    Period.STATUS_SOFT_CLOSED,
    Period.LEGACY_CLOSED,
}

LOCKED_PERIOD_STATES = {
    Period.STATUS_HARD_CLOSED,
    Period.LEGACY_LOCKED,
}


# ============================================================
# DOMAIN RULES
# ============================================================


def legacy_status(status: str) -> str:
    return Period.LEGACY_STATUS_MAP.get(status, status)


def is_locked(status: str) -> bool:
    return status in LOCKED_PERIOD_STATES


def is_soft_closed(status: str) -> bool:
    return status in SOFT_CLOSED_STATES


def is_open(status: str) -> bool:
    return status in (Period.STATUS_OPEN, Period.LEGACY_OPEN)


def accepts_postings(status: str) -> bool:
    return status in POSTABLE_PERIOD_STATES


def can_transition(*, from_status: str, to_status: str) -> bool:
    if from_status in TERMINAL_PERIOD_STATES:
        return False

    return to_status in ALLOWED_PERIOD_TRANSITIONS.get(from_status, set())


def validate_transition(*, period: Period, target_status: str):
    if not can_transition(
        from_status=period.status,
        to_status=target_status,
    ):
        raise InvalidPeriodTransitionError(
            f"Period {period.id} cannot transition from "
            f"'{period.status}' to '{target_status}'"
        )


def is_valid_checklist_status(status: str) -> bool:
    return status in CHECKLIST_STATES


def is_run_active(status: str) -> bool:
    return status in ACTIVE_RUN_STATES


def checklist_complete(statuses) -> bool:
    """True when there is at least one item and none is still open."""
    statuses = list(statuses)
    if not statuses:
        return False
    return not any(s in OPEN_CHECKLIST_STATES for s in statuses)
