# ledger/apps.py

"""
LEDGER APP CONFIG

Accounting ledger core:
- Journal posting / void / reversal engine
- Accounting periods + close runs + checklist gate
"""

from django.apps import AppConfig


class LedgerAppConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "ledger"
    verbose_name = "Accounting Ledger"
