# ledger/services/config.py

"""
LEDGER RUNTIME SETTINGS

Snapshot of the LEDGER settings dict, resolved once and injected into the
services at construction. Nothing in the ledger reads a process-wide flag.

settings.LEDGER keys:
- PERIOD_GUARD          dotted path to a guard class, or "" / None
- PERIOD_GUARD_ENABLED  bool
- AUDIT_RECORDER        dotted path to an audit recorder class, or "" / None
- AUDIT_ENABLED         bool
- LOCK_TIMEOUT_MS       int, 0 disables
- CLOSE_CHECKLIST       list of (code, label) pairs seeded on every close run
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple

from django.conf import settings as django_settings
from django.utils.module_loading import import_string

from ledger.services.period_lifecycle import DEFAULT_CHECKLIST

DEFAULTS = {
    "PERIOD_GUARD": "ledger.services.period_lock.ClosePeriodGuard",
    "PERIOD_GUARD_ENABLED": True,
    "AUDIT_RECORDER": "ledger.services.audit.DatabaseAuditRecorder",
    "AUDIT_ENABLED": True,
    "LOCK_TIMEOUT_MS": 0,
    "CLOSE_CHECKLIST": DEFAULT_CHECKLIST,
}


@dataclass(frozen=True)
class LedgerSettings:
    period_guard_path: Optional[str] = DEFAULTS["PERIOD_GUARD"]
    period_guard_enabled: bool = True
    audit_recorder_path: Optional[str] = DEFAULTS["AUDIT_RECORDER"]
    audit_enabled: bool = True
    lock_timeout_ms: int = 0
    close_checklist: Tuple[Tuple[str, str], ...] = field(default=DEFAULT_CHECKLIST)

    @classmethod
    def from_settings(cls) -> "LedgerSettings":
        raw = {**DEFAULTS, **(getattr(django_settings, "LEDGER", None) or {})}

        checklist = tuple(
            (str(code).strip(), str(label).strip())
            for code, label in (raw["CLOSE_CHECKLIST"] or ())
        )

        return cls(
            period_guard_path=raw["PERIOD_GUARD"] or None,
            period_guard_enabled=bool(raw["PERIOD_GUARD_ENABLED"]),
            audit_recorder_path=raw["AUDIT_RECORDER"] or None,
            audit_enabled=bool(raw["AUDIT_ENABLED"]),
            lock_timeout_ms=int(raw["LOCK_TIMEOUT_MS"] or 0),
            close_checklist=checklist,
        )

    def build_guard(self):
        if not self.period_guard_enabled or not self.period_guard_path:
            return None
        return import_string(self.period_guard_path)()

    def build_audit_recorder(self):
        if not self.audit_enabled or not self.audit_recorder_path:
            return None
        return import_string(self.audit_recorder_path)()
