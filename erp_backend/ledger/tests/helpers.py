# ledger/tests/helpers.py

from __future__ import annotations

import uuid
from datetime import date

from django.contrib.auth import get_user_model

from ledger.models import Account, Period
from ledger.services.inputs import PostingInput, PostingLineInput
from ledger.services.period_lock import PeriodHardClosedError

User = get_user_model()

COMPANY_ID = 1


def make_user(username="accountant"):
    return User.objects.create_user(username=username, password="pass")


def make_account(code: str, name: str, account_type=Account.ASSET, is_active=True):
    return Account.objects.create(
        code=code,
        name=name,
        account_type=account_type,
        is_active=is_active,
    )


def make_period(
    name="January 2025",
    start=date(2025, 1, 1),
    end=date(2025, 1, 31),
    status=Period.STATUS_OPEN,
    company_id=COMPANY_ID,
):
    period = Period.objects.create(
        company_id=company_id,
        code=name[:32],
        name=name,
        start_date=start,
        end_date=end,
    )
    if status != Period.STATUS_OPEN:
        set_period_status(period, status)
    return period


def set_period_status(period, status):
    # Bypasses the close workflow to put a period in a given state.
    Period.objects.filter(pk=period.pk).update(status=status)
    period.refresh_from_db()
    return period


def simple_posting(period, debit_account, credit_account, amount="100.00", **overrides):
    payload = {
        "period_id": period.pk,
        "date": period.start_date,
        "source_module": "TEST",
        "source_id": uuid.uuid4(),
        "memo": "Test posting",
        "lines": [
            PostingLineInput(account_id=debit_account.pk, debit=amount),
            PostingLineInput(account_id=credit_account.pk, credit=amount),
        ],
    }
    payload.update(overrides)
    return PostingInput(**payload)


class RecordingAudit:
    """In-memory audit recorder."""

    def __init__(self):
        self.records = []

    def record(self, **kwargs):
        self.records.append(kwargs)

    def actions(self):
        return [r["action"] for r in self.records]


class FailingAudit:
    def record(self, **kwargs):
        raise RuntimeError("audit sink unavailable")


class HardClosedGuard:
    """Guard that reports every period as hard closed."""

    def ensure_period_open_for_posting(self, *, period_id):
        raise PeriodHardClosedError(f"Period {period_id} is hard closed")
