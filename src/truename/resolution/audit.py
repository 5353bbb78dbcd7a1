"""Audit logger: one immutable entry per top-level resolution."""

import logging

from truename.store.protocols import NameStore
from truename.store.types import AuditEvent

logger = logging.getLogger(__name__)


class AuditLogger:
    """Writes disclosure decisions to the store.

    Fire-and-continue: a failed write is logged and swallowed, so auditing
    can never change what a caller receives.
    """

    def __init__(self, store: NameStore) -> None:
        self._store = store

    async def log(self, event: AuditEvent) -> None:
        try:
            await self._store.insert_audit_entry(event)
        except Exception:
            logger.error(
                "audit_write_failed",
                extra={
                    "target_id": event.target_id,
                    "requester_id": event.requester_id,
                    "source": str(event.source),
                },
                exc_info=True,
            )
