# ledger/services/period_lock.py

"""
======================================================
PATH: ledger/services/period_lock.py
======================================================
PERIOD LOCK GUARD

Purpose:
- Block journal postings into HARD_CLOSED periods, as seen by the
  period close workflow.

Design:
- Thin, reusable guard
- Called by the ledger service (engine choke-point) before it locks the
  period row
- Speaks the close vocabulary (PeriodHardClosedError); the ledger service
  translates it to its own PeriodLockedError
- Pluggable via settings.LEDGER["PERIOD_GUARD"]
"""

from __future__ import annotations

from typing import Protocol

from ledger.models import Period
from ledger.services.period_lifecycle import PeriodCloseError, is_locked


class PeriodHardClosedError(PeriodCloseError):
    """Raised when writing to a hard closed period."""


class PeriodGuard(Protocol):
    def ensure_period_open_for_posting(self, *, period_id) -> None:
        ...


class ClosePeriodGuard:
    """
    Default guard: reads the period status straight from the close workflow's
    table. Unknown periods pass through; the ledger's own locked read reports
    them as invalid.
    """

    def ensure_period_open_for_posting(self, *, period_id) -> None:
        status = Period.objects.filter(pk=period_id).values_list("status", flat=True).first()
        if status is not None and is_locked(status):
            raise PeriodHardClosedError(
                f"Period {period_id} is hard closed; postings are blocked."
            )
