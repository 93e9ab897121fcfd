# ledger/models/audit_log.py

"""
AUDIT LOG (APPEND-ONLY)

Compliance trail for ledger and period-close mutations.
Written post-commit by the audit recorder. Created once; never updated,
never deleted.
"""

from django.conf import settings
from django.db import models
from django.utils import timezone


class AuditLog(models.Model):
    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="ledger_audit_logs",
    )

    action = models.CharField(max_length=64)
    entity = models.CharField(max_length=64)
    entity_id = models.CharField(max_length=64)

    meta = models.JSONField(default=dict, blank=True)

    occurred_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["-occurred_at"]
        indexes = [
            models.Index(fields=["entity", "entity_id"], name="ledger_audit_entity_idx"),
            models.Index(fields=["action"], name="ledger_audit_action_idx"),
            models.Index(fields=["occurred_at"], name="ledger_audit_at_idx"),
        ]

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise RuntimeError("AuditLog records are immutable")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise RuntimeError("AuditLog records cannot be deleted")

    def __str__(self):
        return f"{self.action} {self.entity}#{self.entity_id}"
