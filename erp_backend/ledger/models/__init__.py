# ledger/models/__init__.py

"""
LEDGER MODELS PACKAGE EXPORTS

Note:
- Keep this file *imports-only* (no business logic).
- Do NOT import services from models anywhere (models must stay pure).
"""

from ledger.models.account import Account
from ledger.models.account_mapping import AccountMapping
from ledger.models.audit_log import AuditLog
from ledger.models.close_run import ChecklistItem, CloseRun
from ledger.models.journal import JournalEntry
from ledger.models.journal_line import JournalLine
from ledger.models.period import Period
from ledger.models.source_link import SourceLink

__all__ = [
    "Account",
    "AccountMapping",
    "Period",
    "CloseRun",
    "ChecklistItem",
    "JournalEntry",
    "JournalLine",
    "SourceLink",
    "AuditLog",
]
