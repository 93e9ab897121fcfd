# ledger/api/serializers/__init__.py

from ledger.api.serializers.close_runs import (
    ChecklistItemSerializer,
    ChecklistUpdateSerializer,
    CloseRunSerializer,
    StartCloseRunSerializer,
)
from ledger.api.serializers.journal_entries import (
    JournalEntrySerializer,
    JournalLineSerializer,
    JournalPostSerializer,
    JournalReverseSerializer,
    JournalVoidSerializer,
)
from ledger.api.serializers.periods import PeriodCreateSerializer, PeriodSerializer

__all__ = [
    "JournalEntrySerializer",
    "JournalLineSerializer",
    "JournalPostSerializer",
    "JournalVoidSerializer",
    "JournalReverseSerializer",
    "PeriodSerializer",
    "PeriodCreateSerializer",
    "CloseRunSerializer",
    "ChecklistItemSerializer",
    "StartCloseRunSerializer",
    "ChecklistUpdateSerializer",
]
