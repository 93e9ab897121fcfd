# ledger/tests/test_journal_entry_service.py

from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal
from unittest import mock

from django.core.exceptions import ValidationError
from django.db import transaction
from django.test import TestCase

from ledger.models import (
    Account,
    AccountMapping,
    AuditLog,
    JournalEntry,
    JournalLine,
    Period,
    SourceLink,
)
from ledger.services import LedgerService
from ledger.services.config import LedgerSettings
from ledger.services.exceptions import (
    AccountMappingNotFoundError,
    DateOutOfRangeError,
    InvalidPeriodError,
    InvalidStatusError,
    JournalNotFoundError,
    PeriodLockedError,
    PostingValidationError,
    SourceAlreadyLinkedError,
    UnbalancedJournalError,
)
from ledger.services.inputs import PostingLineInput, ReverseInput, VoidInput
from ledger.services.repository import LedgerRepository
from ledger.tests.helpers import (
    FailingAudit,
    HardClosedGuard,
    RecordingAudit,
    make_account,
    make_period,
    make_user,
    set_period_status,
    simple_posting,
)


class LedgerTestBase(TestCase):
    def setUp(self):
        self.user = make_user()
        self.cash = make_account("1000", "Cash", Account.ASSET)
        self.revenue = make_account("4000", "Sales Revenue", Account.REVENUE)
        self.january = make_period()
        self.audit = RecordingAudit()
        self.service = LedgerService(audit=self.audit)

    def _post(self, period=None, **overrides):
        posting = simple_posting(period or self.january, self.cash, self.revenue, **overrides)
        return self.service.post_journal(posting)


class PostJournalTests(LedgerTestBase):
    def test_post_balanced_entry(self):
        with self.captureOnCommitCallbacks(execute=True):
            entry = self._post(posted_by=self.user)

        self.assertEqual(entry.status, JournalEntry.STATUS_POSTED)
        self.assertEqual(entry.number, entry.pk)
        self.assertEqual(entry.posted_by, self.user)

        lines = list(entry.lines.all())
        self.assertEqual(len(lines), 2)
        self.assertEqual(sum((l.debit for l in lines), Decimal("0")), Decimal("100.00"))
        self.assertEqual(sum((l.credit for l in lines), Decimal("0")), Decimal("100.00"))

        link = SourceLink.objects.get(entry=entry)
        self.assertEqual(link.module, "TEST")
        self.assertEqual(link.ref_id, entry.source_id)

        self.assertEqual(self.audit.actions(), ["journal.post"])
        self.assertEqual(self.audit.records[0]["entity_id"], str(entry.pk))

    def test_same_source_is_posted_once(self):
        source_id = uuid.uuid4()
        first = self._post(source_id=source_id)

        with self.assertRaises(SourceAlreadyLinkedError) as ctx:
            self._post(source_id=source_id)

        self.assertEqual(ctx.exception.source_module, "TEST")
        self.assertEqual(ctx.exception.source_id, source_id)
        self.assertEqual(JournalEntry.objects.filter(source_id=source_id).count(), 1)
        self.assertEqual(JournalLine.objects.count(), 2)
        self.assertEqual(self.service.find_by_source("TEST", source_id), first)

    def test_same_source_id_under_another_module_is_a_new_event(self):
        source_id = uuid.uuid4()
        self._post(source_id=source_id, source_module="AR")
        self._post(source_id=source_id, source_module="AP")

        self.assertEqual(JournalEntry.objects.filter(source_id=source_id).count(), 2)

    def test_guard_reporting_hard_closed_blocks_posting(self):
        service = LedgerService(guard=HardClosedGuard(), audit=self.audit)

        with self.assertRaises(PeriodLockedError):
            service.post_journal(simple_posting(self.january, self.cash, self.revenue))

        self.assertFalse(JournalEntry.objects.exists())
        self.assertEqual(self.audit.records, [])

    def test_soft_closed_period_accepts_postings_without_guard(self):
        set_period_status(self.january, Period.STATUS_SOFT_CLOSED)
        service = LedgerService(
            audit=self.audit,
            settings=LedgerSettings(period_guard_enabled=False),
        )

        entry = service.post_journal(simple_posting(self.january, self.cash, self.revenue))

        self.assertEqual(entry.status, JournalEntry.STATUS_POSTED)

    def test_hard_closed_period_rejects_postings_without_guard(self):
        set_period_status(self.january, Period.STATUS_HARD_CLOSED)
        service = LedgerService(settings=LedgerSettings(period_guard_enabled=False))

        with self.assertRaises(PeriodLockedError):
            service.post_journal(simple_posting(self.january, self.cash, self.revenue))
        self.assertFalse(JournalEntry.objects.exists())

    def test_legacy_locked_status_rejects_postings(self):
        set_period_status(self.january, Period.LEGACY_LOCKED)

        with self.assertRaises(PeriodLockedError):
            self._post()

    def test_unknown_period(self):
        posting = simple_posting(self.january, self.cash, self.revenue, period_id=999999)

        with self.assertRaises(InvalidPeriodError):
            self.service.post_journal(posting)

    def test_date_outside_period(self):
        with self.assertRaises(DateOutOfRangeError):
            self._post(date=date(2025, 2, 1))
        self.assertFalse(JournalEntry.objects.exists())

    def test_unbalanced_entry_writes_nothing(self):
        posting = simple_posting(
            self.january,
            self.cash,
            self.revenue,
            lines=[
                PostingLineInput(account_id=self.cash.pk, debit="100.00"),
                PostingLineInput(account_id=self.revenue.pk, credit="99.99"),
            ],
        )

        with self.assertRaises(UnbalancedJournalError):
            self.service.post_journal(posting)
        self.assertFalse(JournalEntry.objects.exists())
        self.assertFalse(SourceLink.objects.exists())

    def test_inactive_account_rolls_back_header(self):
        closed = make_account("1999", "Closed Account", is_active=False)

        with self.assertRaises(PostingValidationError) as ctx:
            self.service.post_journal(simple_posting(self.january, closed, self.revenue))

        self.assertEqual(ctx.exception.code, "line_unknown_account")
        self.assertEqual(ctx.exception.line, 0)
        self.assertFalse(JournalEntry.objects.exists())

    def test_amounts_are_stored_at_two_decimals(self):
        entry = self._post(amount="10.005")

        self.assertEqual(
            sorted(line.debit + line.credit for line in entry.lines.all()),
            [Decimal("10.01"), Decimal("10.01")],
        )

    def test_journal_numbers_increase(self):
        first = self._post()
        second = self._post()

        self.assertGreater(second.number, first.number)

    def test_default_audit_recorder_writes_audit_log(self):
        service = LedgerService()
        with self.captureOnCommitCallbacks(execute=True):
            entry = service.post_journal(
                simple_posting(self.january, self.cash, self.revenue, posted_by=self.user)
            )

        log = AuditLog.objects.get(action="journal.post")
        self.assertEqual(log.entity, "journal_entry")
        self.assertEqual(log.entity_id, str(entry.pk))
        self.assertEqual(log.actor, self.user)
        self.assertEqual(log.meta["number"], entry.number)

    def test_audit_failure_does_not_fail_the_posting(self):
        service = LedgerService(audit=FailingAudit())

        with self.assertLogs("ledger.services.audit", level="ERROR"):
            with self.captureOnCommitCallbacks(execute=True):
                entry = service.post_journal(
                    simple_posting(self.january, self.cash, self.revenue)
                )

        self.assertTrue(JournalEntry.objects.filter(pk=entry.pk).exists())

    def test_disabled_audit_records_nothing(self):
        service = LedgerService(settings=LedgerSettings(audit_enabled=False))
        with self.captureOnCommitCallbacks(execute=True) as callbacks:
            service.post_journal(simple_posting(self.january, self.cash, self.revenue))

        self.assertEqual(callbacks, [])
        self.assertFalse(AuditLog.objects.exists())

    def test_audit_waits_for_commit(self):
        with self.captureOnCommitCallbacks() as callbacks:
            entry = self._post()
            self.assertEqual(self.audit.records, [])

        self.assertEqual(len(callbacks), 1)
        callbacks[0]()
        self.assertEqual(self.audit.actions(), ["journal.post"])
        self.assertEqual(self.audit.records[0]["entity_id"], str(entry.pk))

    def test_caller_rollback_discards_audit(self):
        service = LedgerService()

        with self.captureOnCommitCallbacks(execute=True) as callbacks:
            with self.assertRaises(RuntimeError):
                with transaction.atomic():
                    service.post_journal(simple_posting(self.january, self.cash, self.revenue))
                    raise RuntimeError("caller failed after posting")

        self.assertEqual(callbacks, [])
        self.assertFalse(JournalEntry.objects.exists())
        self.assertFalse(AuditLog.objects.exists())


class VoidJournalTests(LedgerTestBase):
    def test_void_posted_entry_in_open_period(self):
        with self.captureOnCommitCallbacks(execute=True):
            entry = self._post()
            voided = self.service.void_journal(
                VoidInput(entry_id=entry.pk, actor=self.user, reason="Duplicate")
            )

        self.assertEqual(voided.status, JournalEntry.STATUS_VOID)
        entry.refresh_from_db()
        self.assertEqual(entry.status, JournalEntry.STATUS_VOID)
        self.assertEqual(entry.lines.count(), 2)
        self.assertEqual(self.audit.actions(), ["journal.post", "journal.void"])
        self.assertEqual(self.audit.records[-1]["meta"], {"reason": "Duplicate"})

    def test_void_rechecks_status_on_locked_row(self):
        entry = self._post()

        with mock.patch.object(
            LedgerRepository,
            "get_entry_for_update",
            autospec=True,
            side_effect=LedgerRepository.get_entry_for_update,
        ) as locked_read:
            voided = self.service.void_journal(VoidInput(entry_id=entry.pk))

        locked_read.assert_called_once_with(self.service.repository, entry.pk)
        self.assertEqual(voided.status, JournalEntry.STATUS_VOID)
        self.assertEqual(voided.lines.count(), 2)

    def test_void_twice_is_rejected(self):
        entry = self._post()
        self.service.void_journal(VoidInput(entry_id=entry.pk))

        with self.assertRaises(InvalidStatusError):
            self.service.void_journal(VoidInput(entry_id=entry.pk))

    def test_void_in_soft_closed_period_is_rejected(self):
        entry = self._post()
        set_period_status(self.january, Period.STATUS_SOFT_CLOSED)

        with self.assertRaises(InvalidPeriodError):
            self.service.void_journal(VoidInput(entry_id=entry.pk))

        entry.refresh_from_db()
        self.assertEqual(entry.status, JournalEntry.STATUS_POSTED)

    def test_void_in_hard_closed_period_is_rejected(self):
        entry = self._post()
        set_period_status(self.january, Period.STATUS_HARD_CLOSED)

        with self.assertRaises(PeriodLockedError):
            self.service.void_journal(VoidInput(entry_id=entry.pk))

    def test_void_unknown_entry(self):
        with self.assertRaises(JournalNotFoundError):
            self.service.void_journal(VoidInput(entry_id=424242))

    def test_void_requires_entry_id(self):
        with self.assertRaises(PostingValidationError) as ctx:
            self.service.void_journal(VoidInput(entry_id=None))
        self.assertEqual(ctx.exception.code, "entry_required")


class ReverseJournalTests(LedgerTestBase):
    def setUp(self):
        super().setUp()
        self.february = make_period(
            name="February 2025",
            start=date(2025, 2, 1),
            end=date(2025, 2, 28),
        )

    def test_reverse_in_open_period_mirrors_lines(self):
        with self.captureOnCommitCallbacks(execute=True):
            original = self._post(date=date(2025, 1, 10), memo="")
            reversal = self.service.reverse_journal(
                ReverseInput(entry_id=original.pk, actor=self.user, target_date=date(2025, 1, 20))
            )

        self.assertNotEqual(reversal.pk, original.pk)
        self.assertEqual(reversal.period_id, self.january.pk)
        self.assertEqual(reversal.date, date(2025, 1, 20))
        self.assertEqual(reversal.source_module, "TEST:REVERSAL")
        self.assertNotEqual(reversal.source_id, original.source_id)
        self.assertEqual(reversal.memo, f"Reversal of JE {original.number}")

        original_lines = {(l.account_id, l.debit, l.credit) for l in original.lines.all()}
        reversal_lines = {(l.account_id, l.credit, l.debit) for l in reversal.lines.all()}
        self.assertEqual(original_lines, reversal_lines)

        original.refresh_from_db()
        self.assertEqual(original.status, JournalEntry.STATUS_POSTED)

        self.assertEqual(self.audit.records[-1]["action"], "journal.reverse")
        self.assertEqual(self.audit.records[-1]["entity_id"], str(original.pk))
        self.assertEqual(self.audit.records[-1]["meta"]["reversal_id"], reversal.pk)

    def test_reverse_defaults_to_original_date_and_keeps_memo(self):
        original = self._post(date=date(2025, 1, 10))

        reversal = self.service.reverse_journal(
            ReverseInput(entry_id=original.pk, memo="Customer cancelled")
        )

        self.assertEqual(reversal.date, date(2025, 1, 10))
        self.assertEqual(reversal.memo, "Customer cancelled")

    def test_reverse_from_hard_closed_period_needs_override(self):
        original = self._post()
        set_period_status(self.january, Period.STATUS_HARD_CLOSED)

        with self.assertRaises(PeriodLockedError):
            self.service.reverse_journal(ReverseInput(entry_id=original.pk, override=False))
        self.assertEqual(JournalEntry.objects.count(), 1)

        reversal = self.service.reverse_journal(
            ReverseInput(entry_id=original.pk, override=True, target_date=date(2025, 1, 31))
        )

        self.assertEqual(reversal.period_id, self.february.pk)
        self.assertEqual(reversal.date, self.february.start_date)

    def test_reverse_from_soft_closed_period_moves_to_next_open_period(self):
        original = self._post()
        set_period_status(self.january, Period.STATUS_SOFT_CLOSED)

        reversal = self.service.reverse_journal(ReverseInput(entry_id=original.pk))

        self.assertEqual(reversal.period_id, self.february.pk)
        self.assertEqual(reversal.date, date(2025, 2, 1))

    def test_next_open_period_belongs_to_the_same_company(self):
        make_period(
            name="February 2025 (other company)",
            start=date(2025, 2, 1),
            end=date(2025, 2, 28),
            company_id=2,
        )
        set_period_status(self.february, Period.STATUS_HARD_CLOSED)
        march = make_period(name="March 2025", start=date(2025, 3, 1), end=date(2025, 3, 31))

        original = self._post()
        set_period_status(self.january, Period.STATUS_SOFT_CLOSED)

        reversal = self.service.reverse_journal(ReverseInput(entry_id=original.pk))

        self.assertEqual(reversal.period_id, march.pk)

    def test_no_open_period_to_receive_reversal(self):
        original = self._post()
        set_period_status(self.february, Period.STATUS_HARD_CLOSED)
        set_period_status(self.january, Period.STATUS_SOFT_CLOSED)

        with self.assertRaises(InvalidPeriodError):
            self.service.reverse_journal(ReverseInput(entry_id=original.pk))

    def test_target_date_outside_open_period(self):
        original = self._post()

        with self.assertRaises(DateOutOfRangeError):
            self.service.reverse_journal(
                ReverseInput(entry_id=original.pk, target_date=date(2025, 2, 15))
            )

    def test_void_entry_cannot_be_reversed(self):
        original = self._post()
        self.service.void_journal(VoidInput(entry_id=original.pk))

        with self.assertRaises(InvalidStatusError):
            self.service.reverse_journal(ReverseInput(entry_id=original.pk))

    def test_full_length_module_can_be_reversed(self):
        for length in (60, 64):
            with self.subTest(length=length):
                module = "M" * length
                original = self._post(source_module=module)

                reversal = self.service.reverse_journal(ReverseInput(entry_id=original.pk))

                self.assertEqual(reversal.source_module, f"{module}:REVERSAL")
                self.assertTrue(
                    SourceLink.objects.filter(entry=reversal, module=f"{module}:REVERSAL").exists()
                )

    def test_reversal_chain_keeps_a_single_suffix(self):
        entry = self._post(source_module="M" * 64)

        for _ in range(8):
            entry = self.service.reverse_journal(ReverseInput(entry_id=entry.pk))

        self.assertEqual(entry.source_module, "M" * 64 + ":REVERSAL")
        self.assertEqual(JournalEntry.objects.count(), 9)

    def test_reversal_can_itself_be_reversed(self):
        original = self._post()
        reversal = self.service.reverse_journal(ReverseInput(entry_id=original.pk))

        again = self.service.reverse_journal(ReverseInput(entry_id=reversal.pk))

        self.assertEqual(again.source_module, "TEST:REVERSAL")
        self.assertEqual(
            {(l.account_id, l.debit, l.credit) for l in again.lines.all()},
            {(l.account_id, l.debit, l.credit) for l in original.lines.all()},
        )


class ReadJournalTests(LedgerTestBase):
    def test_get_and_list(self):
        first = self._post()
        second = self._post()
        self.service.void_journal(VoidInput(entry_id=first.pk))

        self.assertEqual(self.service.get_journal(second.pk), second)
        self.assertEqual(
            list(self.service.list_journals(period_id=self.january.pk)),
            [second, first],
        )
        self.assertEqual(
            list(self.service.list_journals(status=JournalEntry.STATUS_VOID)),
            [first],
        )

        with self.assertRaises(JournalNotFoundError):
            self.service.get_journal(999999)

    def test_find_by_source_unknown(self):
        self.assertIsNone(self.service.find_by_source("TEST", uuid.uuid4()))


class ResolveAccountTests(LedgerTestBase):
    def setUp(self):
        super().setUp()
        self.payable = make_account("2000", "Accounts Payable", Account.LIABILITY)
        AccountMapping.objects.create(module="ap", key="AP_CONTROL", account=self.payable)

    def test_module_is_stored_upper_case(self):
        self.assertTrue(AccountMapping.objects.filter(module="AP", key="AP_CONTROL").exists())

    def test_resolve_account(self):
        self.assertEqual(self.service.resolve_account("AP", "AP_CONTROL"), self.payable)

    def test_module_lookup_ignores_case(self):
        self.assertEqual(self.service.resolve_account(" ap ", "AP_CONTROL"), self.payable)

    def test_missing_mapping(self):
        with self.assertRaises(AccountMappingNotFoundError):
            self.service.resolve_account("AP", "AP_DISCOUNT")

        with self.assertRaises(AccountMappingNotFoundError):
            self.service.resolve_account("AR", "AP_CONTROL")

    def test_module_and_key_are_required(self):
        with self.assertRaises(PostingValidationError) as ctx:
            self.service.resolve_account("AP", "  ")
        self.assertEqual(ctx.exception.code, "mapping_key_required")

    def test_one_account_per_module_and_key(self):
        with self.assertRaises(ValidationError):
            AccountMapping.objects.create(module="Ap", key="AP_CONTROL", account=self.cash)
