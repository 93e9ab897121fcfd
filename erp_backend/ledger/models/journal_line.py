# ledger/models/journal_line.py

"""
======================================================
PATH: ledger/models/journal_line.py
======================================================
JOURNAL LINE MODEL

Debit or credit posting of one journal entry to a single account.

Guarantees:
- Immutable once created (no updates, no deletes)
- Exactly one of debit / credit is > 0; neither is negative
- Optional analytical dimensions (company / branch / warehouse) are
  external master-data ids
"""

from __future__ import annotations

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q

from ledger.models.account import Account
from ledger.models.journal import JournalEntry


class JournalLine(models.Model):
    entry = models.ForeignKey(
        JournalEntry,
        on_delete=models.PROTECT,
        related_name="lines",
    )

    account = models.ForeignKey(
        Account,
        on_delete=models.PROTECT,
        related_name="journal_lines",
    )

    debit = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal("0.00"),
    )
    credit = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal("0.00"),
    )

    dim_company_id = models.BigIntegerField(null=True, blank=True)
    dim_branch_id = models.BigIntegerField(null=True, blank=True)
    dim_warehouse_id = models.BigIntegerField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["id"]
        constraints = [
            models.CheckConstraint(
                condition=Q(debit__gte=0) & Q(credit__gte=0),
                name="chk_journal_line_non_negative",
            ),
            models.CheckConstraint(
                condition=(Q(debit__gt=0) & Q(credit=0))
                | (Q(debit=0) & Q(credit__gt=0)),
                name="chk_journal_line_single_side",
            ),
        ]
        verbose_name = "Journal Line"
        verbose_name_plural = "Journal Lines"

    def __str__(self):
        side = f"DR {self.debit}" if self.debit else f"CR {self.credit}"
        return f"{side} → {self.account}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("JournalLine records are immutable and cannot be modified")
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("JournalLine records are immutable and cannot be deleted")
