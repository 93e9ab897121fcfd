# ledger/services/audit.py

"""
LEDGER AUDIT RECORDING

Post-commit compliance trail for ledger and period-close mutations.

Rules:
- record_after_commit() hands the record to transaction.on_commit(), so it
  runs only once the outermost transaction commits. A caller rollback
  discards it. Outside any atomic block it runs immediately.
- A recorder failure is logged and swallowed; the business operation has
  already succeeded and must not be reported as failed.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Optional, Protocol

from django.db import transaction
from django.utils import timezone

from ledger.models import AuditLog

logger = logging.getLogger(__name__)


class AuditRecorder(Protocol):
    def record(
        self,
        *,
        actor,
        action: str,
        entity: str,
        entity_id: str,
        meta: dict[str, Any],
        occurred_at: datetime,
    ) -> None:
        ...


class DatabaseAuditRecorder:
    """Writes AuditLog rows inside their own savepoint."""

    def record(self, *, actor, action, entity, entity_id, meta, occurred_at) -> None:
        with transaction.atomic():
            AuditLog.objects.create(
                actor=actor if getattr(actor, "pk", None) else None,
                action=action,
                entity=entity,
                entity_id=str(entity_id),
                meta=meta or {},
                occurred_at=occurred_at or timezone.now(),
            )


def record_after_commit(
    recorder: Optional[AuditRecorder],
    *,
    actor,
    action: str,
    entity: str,
    entity_id,
    meta: Optional[dict[str, Any]] = None,
    occurred_at: Optional[datetime] = None,
) -> None:
    if recorder is None:
        return

    occurred_at = occurred_at or timezone.now()

    def _record():
        try:
            recorder.record(
                actor=actor,
                action=action,
                entity=entity,
                entity_id=str(entity_id),
                meta=meta or {},
                occurred_at=occurred_at,
            )
        except Exception:
            logger.exception(
                "Audit recording failed",
                extra={"action": action, "entity": entity, "entity_id": str(entity_id)},
            )

    transaction.on_commit(_record, robust=True)
