# ledger/models/close_run.py

"""
======================================================
PATH: ledger/models/close_run.py
======================================================
CLOSE RUN + CHECKLIST MODELS

CloseRun:
- One tracked attempt to close a period.
- At most one active (DRAFT / IN_PROGRESS) run per period (service-enforced,
  under the period row lock).

ChecklistItem:
- One required task of a run. Seeded in bulk when the run starts.
- Hard close is refused while any item is PENDING / IN_PROGRESS.
- completed_at is set iff status is DONE / SKIPPED.
- Never deleted.
"""

from __future__ import annotations

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from ledger.models.period import Period


class CloseRun(models.Model):
    STATUS_DRAFT = "DRAFT"
    STATUS_IN_PROGRESS = "IN_PROGRESS"
    STATUS_COMPLETED = "COMPLETED"
    STATUS_CANCELLED = "CANCELLED"

    STATUS_CHOICES = [
        (STATUS_DRAFT, "Draft"),
        (STATUS_IN_PROGRESS, "In progress"),
        (STATUS_COMPLETED, "Completed"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    company_id = models.BigIntegerField(db_index=True)

    period = models.ForeignKey(
        Period,
        on_delete=models.PROTECT,
        related_name="close_runs",
    )

    status = models.CharField(
        max_length=16,
        choices=STATUS_CHOICES,
        default=STATUS_DRAFT,
    )

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="close_runs",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    notes = models.TextField(blank=True, default="")

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["company_id", "period"], name="ledger_run_company_idx"),
            models.Index(fields=["period", "status"], name="ledger_run_period_status_idx"),
        ]
        verbose_name = "Close Run"
        verbose_name_plural = "Close Runs"

    def __str__(self):
        return f"CloseRun #{self.pk} – period {self.period_id} [{self.status}]"

    @property
    def is_active(self) -> bool:
        return self.status in (self.STATUS_DRAFT, self.STATUS_IN_PROGRESS)

    def delete(self, *args, **kwargs):
        raise ValidationError("Close runs cannot be deleted")


class ChecklistItem(models.Model):
    STATUS_PENDING = "PENDING"
    STATUS_IN_PROGRESS = "IN_PROGRESS"
    STATUS_DONE = "DONE"
    STATUS_SKIPPED = "SKIPPED"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_IN_PROGRESS, "In progress"),
        (STATUS_DONE, "Done"),
        (STATUS_SKIPPED, "Skipped"),
    ]

    run = models.ForeignKey(
        CloseRun,
        on_delete=models.PROTECT,
        related_name="checklist_items",
    )

    code = models.CharField(max_length=64)
    label = models.CharField(max_length=255)

    status = models.CharField(
        max_length=16,
        choices=STATUS_CHOICES,
        default=STATUS_PENDING,
    )

    assigned_to = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="assigned_checklist_items",
    )

    completed_at = models.DateTimeField(null=True, blank=True)
    comment = models.TextField(blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["id"]
        constraints = [
            models.UniqueConstraint(
                fields=["run", "code"],
                name="uniq_checklist_item_run_code",
            )
        ]
        verbose_name = "Checklist Item"
        verbose_name_plural = "Checklist Items"

    def __str__(self):
        return f"{self.code} [{self.status}]"

    def delete(self, *args, **kwargs):
        raise ValidationError("Checklist items cannot be deleted")
