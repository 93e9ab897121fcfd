# ledger/api/views/__init__.py

"""
ledger.api.views package

Do NOT import ledger.api.urls from here to avoid circular imports.
"""

from ledger.api.views.close_runs import ChecklistItemViewSet, CloseRunViewSet
from ledger.api.views.journal_entries import JournalEntryViewSet
from ledger.api.views.periods import PeriodViewSet

__all__ = [
    "JournalEntryViewSet",
    "PeriodViewSet",
    "CloseRunViewSet",
    "ChecklistItemViewSet",
]
