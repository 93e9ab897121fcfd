# ledger/models/period.py

"""
======================================================
PATH: ledger/models/period.py
======================================================
ACCOUNTING PERIOD MODEL

A fiscal date window (inclusive on both ends) that journal entries must
fall within. Its status gates what the ledger may do inside the window.

Lifecycle (owned by the period close service, never edited directly):
    OPEN -> SOFT_CLOSED -> HARD_CLOSED

Legacy vocabulary (still understood by the ledger engine):
    OPEN == OPEN, CLOSED == SOFT_CLOSED, LOCKED == HARD_CLOSED

Hard rules:
- start_date <= end_date
- windows of the same company must not overlap (checked by the service)
- periods are never deleted
"""

from __future__ import annotations

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import F, Q


class Period(models.Model):
    STATUS_OPEN = "OPEN"
    STATUS_SOFT_CLOSED = "SOFT_CLOSED"
    STATUS_HARD_CLOSED = "HARD_CLOSED"

    STATUS_CHOICES = [
        (STATUS_OPEN, "Open"),
        (STATUS_SOFT_CLOSED, "Soft closed"),
        (STATUS_HARD_CLOSED, "Hard closed"),
    ]

    LEGACY_OPEN = "OPEN"
    LEGACY_CLOSED = "CLOSED"
    LEGACY_LOCKED = "LOCKED"

    LEGACY_STATUS_MAP = {
        STATUS_OPEN: LEGACY_OPEN,
        STATUS_SOFT_CLOSED: LEGACY_CLOSED,
        STATUS_HARD_CLOSED: LEGACY_LOCKED,
    }

    # External master-data id (companies are maintained outside the ledger).
    company_id = models.BigIntegerField(null=True, blank=True, db_index=True)

    code = models.CharField(max_length=32)
    name = models.CharField(max_length=100)

    start_date = models.DateField()
    end_date = models.DateField()

    status = models.CharField(
        max_length=16,
        choices=STATUS_CHOICES,
        default=STATUS_OPEN,
    )

    soft_closed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="soft_closed_periods",
    )
    soft_closed_at = models.DateTimeField(null=True, blank=True)

    closed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="hard_closed_periods",
    )
    closed_at = models.DateTimeField(null=True, blank=True)

    metadata = models.JSONField(default=dict, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-start_date"]
        indexes = [
            models.Index(fields=["company_id", "status"], name="ledger_period_co_status_idx"),
            models.Index(fields=["company_id", "start_date", "end_date"], name="ledger_period_co_dates_idx"),
            models.Index(fields=["status", "start_date"], name="ledger_period_status_start_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["company_id", "name"],
                name="uniq_period_company_name",
            ),
            models.CheckConstraint(
                condition=Q(end_date__gte=F("start_date")),
                name="chk_period_end_gte_start",
            ),
        ]
        verbose_name = "Accounting Period"
        verbose_name_plural = "Accounting Periods"

    def __str__(self):
        return f"{self.name} ({self.start_date} → {self.end_date}) [{self.status}]"

    @property
    def legacy_status(self) -> str:
        return self.LEGACY_STATUS_MAP.get(self.status, self.status)

    def contains(self, day) -> bool:
        return self.start_date <= day <= self.end_date

    def clean(self):
        self.code = (self.code or "").strip()
        self.name = (self.name or "").strip()

        if not self.name:
            raise ValidationError({"name": "Period name is required"})
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValidationError({"end_date": "end_date must be >= start_date"})

    def delete(self, *args, **kwargs):
        raise ValidationError("Accounting periods cannot be deleted")
