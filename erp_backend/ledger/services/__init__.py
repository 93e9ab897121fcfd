from .journal_entry_service import LedgerService
from .period_close_service import PeriodCloseService

__all__ = [
    "LedgerService",
    "PeriodCloseService",
]
