# ledger/tests/test_posting_validator.py

from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal

from django.test import SimpleTestCase

from ledger.services.exceptions import (
    PostingValidationError,
    TooFewLinesError,
    UnbalancedJournalError,
)
from ledger.services.inputs import PostingInput, PostingLineInput
from ledger.services.period_lifecycle import (
    accepts_postings,
    can_transition,
    checklist_complete,
    is_locked,
    legacy_status,
)
from ledger.services.posting_validator import (
    MAX_STORED_SOURCE_MODULE_LENGTH,
    NIL_UUID,
    parse_amount,
    quantize_money,
    validate_posting,
)


def _posting(lines, **overrides):
    payload = {
        "period_id": 1,
        "date": date(2025, 1, 15),
        "source_module": "AR",
        "source_id": uuid.uuid4(),
        "lines": lines,
    }
    payload.update(overrides)
    return PostingInput(**payload)


def _balanced(amount="100.00"):
    return [
        PostingLineInput(account_id=1, debit=amount),
        PostingLineInput(account_id=2, credit=amount),
    ]


class PostingValidatorTests(SimpleTestCase):
    def _assert_code(self, posting, code):
        with self.assertRaises(PostingValidationError) as ctx:
            validate_posting(posting)
        self.assertEqual(ctx.exception.code, code)
        return ctx.exception

    def test_balanced_posting_passes(self):
        validate_posting(_posting(_balanced()))

    def test_multi_line_balanced_posting_passes(self):
        validate_posting(
            _posting(
                [
                    PostingLineInput(account_id=1, debit="70.00"),
                    PostingLineInput(account_id=2, debit="30.00"),
                    PostingLineInput(account_id=3, credit="100.00"),
                ]
            )
        )

    def test_missing_period_is_rejected_first(self):
        self._assert_code(_posting([], period_id=None), "period_required")

    def test_single_line_is_too_few(self):
        with self.assertRaises(TooFewLinesError) as ctx:
            validate_posting(_posting([PostingLineInput(account_id=1, debit="10")]))
        self.assertEqual(ctx.exception.code, "too_few_lines")

    def test_unbalanced_posting_is_rejected(self):
        lines = [
            PostingLineInput(account_id=1, debit="100.00"),
            PostingLineInput(account_id=2, credit="90.00"),
        ]
        with self.assertRaises(UnbalancedJournalError) as ctx:
            validate_posting(_posting(lines))
        self.assertEqual(ctx.exception.code, "unbalanced")
        self.assertIn("debit=100.00", str(ctx.exception))
        self.assertIn("credit=90.00", str(ctx.exception))

    def test_sub_cent_difference_counts_as_balanced(self):
        lines = [
            PostingLineInput(account_id=1, debit="100.001"),
            PostingLineInput(account_id=2, credit="100.00"),
        ]
        validate_posting(_posting(lines))

    def test_line_without_account(self):
        lines = [
            PostingLineInput(account_id=None, debit="10"),
            PostingLineInput(account_id=2, credit="10"),
        ]
        exc = self._assert_code(_posting(lines), "line_missing_account")
        self.assertEqual(exc.line, 0)

    def test_negative_amount(self):
        lines = [
            PostingLineInput(account_id=1, debit="-10"),
            PostingLineInput(account_id=2, credit="-10"),
        ]
        self._assert_code(_posting(lines), "line_negative_amount")

    def test_line_with_both_sides(self):
        lines = [
            PostingLineInput(account_id=1, debit="10", credit="10"),
            PostingLineInput(account_id=2, credit="0"),
        ]
        self._assert_code(_posting(lines), "line_both_sides")

    def test_zero_line(self):
        lines = [
            PostingLineInput(account_id=1, debit="10"),
            PostingLineInput(account_id=2, credit="10"),
            PostingLineInput(account_id=3),
        ]
        exc = self._assert_code(_posting(lines), "line_zero_amount")
        self.assertEqual(exc.line, 2)

    def test_garbage_amount(self):
        lines = [
            PostingLineInput(account_id=1, debit="ten"),
            PostingLineInput(account_id=2, credit="10"),
        ]
        self._assert_code(_posting(lines), "line_invalid_amount")

    def test_blank_source_module(self):
        self._assert_code(_posting(_balanced(), source_module="   "), "source_module_required")

    def test_source_module_too_long(self):
        self._assert_code(_posting(_balanced(), source_module="X" * 65), "source_module_too_long")

    def test_source_module_limit_can_be_raised_to_the_column_width(self):
        posting = _posting(_balanced(), source_module="X" * 64 + ":REVERSAL")

        validate_posting(posting, max_source_module_length=MAX_STORED_SOURCE_MODULE_LENGTH)
        self._assert_code(posting, "source_module_too_long")

    def test_missing_or_nil_source_id(self):
        self._assert_code(_posting(_balanced(), source_id=None), "source_id_required")
        self._assert_code(_posting(_balanced(), source_id=NIL_UUID), "source_id_required")


class AmountHelperTests(SimpleTestCase):
    def test_parse_amount_accepts_common_types(self):
        self.assertEqual(parse_amount("12.50"), Decimal("12.50"))
        self.assertEqual(parse_amount(3), Decimal("3"))
        self.assertEqual(parse_amount(0.1), Decimal("0.1"))
        self.assertEqual(parse_amount(None), Decimal("0"))
        self.assertEqual(parse_amount(""), Decimal("0"))

    def test_parse_amount_rejects_non_finite(self):
        with self.assertRaises(PostingValidationError):
            parse_amount("NaN")
        with self.assertRaises(PostingValidationError):
            parse_amount(Decimal("Infinity"))

    def test_quantize_rounds_half_up(self):
        self.assertEqual(quantize_money(Decimal("1.005")), Decimal("1.01"))
        self.assertEqual(quantize_money(Decimal("1.004")), Decimal("1.00"))


class PeriodLifecycleRuleTests(SimpleTestCase):
    def test_period_transitions_only_move_forward(self):
        self.assertTrue(can_transition(from_status="OPEN", to_status="SOFT_CLOSED"))
        self.assertTrue(can_transition(from_status="OPEN", to_status="HARD_CLOSED"))
        self.assertTrue(can_transition(from_status="SOFT_CLOSED", to_status="HARD_CLOSED"))
        self.assertFalse(can_transition(from_status="SOFT_CLOSED", to_status="OPEN"))
        self.assertFalse(can_transition(from_status="HARD_CLOSED", to_status="OPEN"))
        self.assertFalse(can_transition(from_status="HARD_CLOSED", to_status="SOFT_CLOSED"))

    def test_both_vocabularies_are_understood(self):
        self.assertTrue(is_locked("HARD_CLOSED"))
        self.assertTrue(is_locked("LOCKED"))
        self.assertTrue(accepts_postings("CLOSED"))
        self.assertTrue(accepts_postings("SOFT_CLOSED"))
        self.assertFalse(accepts_postings("LOCKED"))
        self.assertEqual(legacy_status("SOFT_CLOSED"), "CLOSED")
        self.assertEqual(legacy_status("HARD_CLOSED"), "LOCKED")

    def test_checklist_gate(self):
        self.assertFalse(checklist_complete([]))
        self.assertFalse(checklist_complete(["DONE", "DONE", "PENDING"]))
        self.assertFalse(checklist_complete(["DONE", "IN_PROGRESS"]))
        self.assertTrue(checklist_complete(["DONE", "SKIPPED", "DONE"]))
