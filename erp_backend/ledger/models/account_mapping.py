# ledger/models/account_mapping.py

"""
======================================================
PATH: ledger/models/account_mapping.py
======================================================
ACCOUNT MAPPING MODEL

Links an integration key (e.g. AP / "AP_CONTROL") to a ledger account so
producer modules never hard-code account ids.

Guarantees:
- One account per (module, key)
- Module is stored upper-cased; key is stored trimmed, case preserved
"""

from __future__ import annotations

from django.core.exceptions import ValidationError
from django.db import models

from ledger.models.account import Account

ACCOUNT_MAPPING_CONSTRAINT = "uq_account_mappings"


def normalize_mapping_module(module) -> str:
    return (module or "").strip().upper()


class AccountMapping(models.Model):
    module = models.CharField(max_length=64)
    key = models.CharField(max_length=128)

    account = models.ForeignKey(
        Account,
        on_delete=models.PROTECT,
        related_name="mappings",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["module", "key"]
        constraints = [
            models.UniqueConstraint(
                fields=["module", "key"],
                name=ACCOUNT_MAPPING_CONSTRAINT,
            )
        ]
        verbose_name = "Account Mapping"
        verbose_name_plural = "Account Mappings"

    def __str__(self):
        return f"{self.module}/{self.key} → {self.account_id}"

    def clean(self):
        self.module = normalize_mapping_module(self.module)
        self.key = (self.key or "").strip()

        if not self.module:
            raise ValidationError({"module": "Module is required"})
        if not self.key:
            raise ValidationError({"key": "Key is required"})

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)
