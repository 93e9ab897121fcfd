# ledger/models/journal.py

"""
======================================================
PATH: ledger/models/journal.py
======================================================
JOURNAL ENTRY MODEL

Represents a single accounting transaction (journal header).

Guarantees:
- Created only by the ledger service (posting or reversal)
- Header fields are immutable once created
- The only permitted mutation is the one-way status flip POSTED -> VOID
- A reversal never mutates the original; it is a new entry
- Never deleted
"""

from __future__ import annotations

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

from ledger.models.period import Period

MUTABLE_FIELDS = frozenset({"status", "number", "updated_at"})


class JournalEntry(models.Model):
    STATUS_POSTED = "POSTED"
    STATUS_VOID = "VOID"

    STATUS_CHOICES = [
        (STATUS_POSTED, "Posted"),
        (STATUS_VOID, "Void"),
    ]

    number = models.BigIntegerField(
        unique=True,
        null=True,
        blank=True,
        help_text="Sequential journal number (assigned on insert)",
    )

    period = models.ForeignKey(
        Period,
        on_delete=models.PROTECT,
        related_name="journal_entries",
    )

    date = models.DateField(help_text="Accounting effective date")

    source_module = models.CharField(
        max_length=128,
        help_text="Free-text producer tag (e.g. AR, AP, INVENTORY)",
    )
    source_id = models.UUIDField(help_text="Idempotency key of the business event")

    memo = models.TextField(blank=True, default="")

    posted_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="posted_journal_entries",
    )
    posted_at = models.DateTimeField(default=timezone.now)

    status = models.CharField(
        max_length=8,
        choices=STATUS_CHOICES,
        default=STATUS_POSTED,
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-number"]
        indexes = [
            models.Index(fields=["date"], name="ledger_je_date_idx"),
            models.Index(fields=["source_module", "source_id"], name="ledger_je_source_idx"),
            models.Index(fields=["status"], name="ledger_je_status_idx"),
        ]
        verbose_name = "Journal Entry"
        verbose_name_plural = "Journal Entries"

    def __str__(self):
        return f"JE {self.number or '-'} – {self.date} [{self.status}]"

    @property
    def is_posted(self) -> bool:
        return self.status == self.STATUS_POSTED

    def save(self, *args, **kwargs):
        if self._state.adding:
            return super().save(*args, **kwargs)

        update_fields = kwargs.get("update_fields")
        if not update_fields or not set(update_fields) <= MUTABLE_FIELDS:
            raise ValidationError("JournalEntry records are immutable once created")

        if "status" in update_fields:
            current = (
                type(self).objects.filter(pk=self.pk)
                .values_list("status", flat=True)
                .first()
            )
            if self.status != current and not (
                current == self.STATUS_POSTED and self.status == self.STATUS_VOID
            ):
                raise ValidationError(
                    f"JournalEntry status cannot move from {current} to {self.status}"
                )

        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("JournalEntry records are immutable and cannot be deleted")
