# ledger/models/source_link.py

"""
======================================================
PATH: ledger/models/source_link.py
======================================================
SOURCE LINK MODEL

Maps one external business event (module, ref_id) to at most one journal
entry. The unique constraint IS the idempotency mechanism: the ledger inserts
the link and reacts to the constraint violation, it never pre-checks.
"""

from __future__ import annotations

from django.core.exceptions import ValidationError
from django.db import models

from ledger.models.journal import JournalEntry

SOURCE_LINK_CONSTRAINT = "uq_source_links"


class SourceLink(models.Model):
    module = models.CharField(max_length=128)
    ref_id = models.UUIDField()

    entry = models.ForeignKey(
        JournalEntry,
        on_delete=models.PROTECT,
        related_name="source_links",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["module", "ref_id"],
                name=SOURCE_LINK_CONSTRAINT,
            )
        ]
        verbose_name = "Source Link"
        verbose_name_plural = "Source Links"

    def __str__(self):
        return f"{self.module}:{self.ref_id} → JE {self.entry_id}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("SourceLink records are immutable")
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("SourceLink records cannot be deleted")
