"""Protocol definitions for the store subsystem.

The resolution engine depends only on ``NameStore``. ``SqlNameStore`` is
the relational implementation; tests substitute in-memory fakes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from truename.store.types import (
        AuditEvent,
        AuditRecord,
        ConsentRecord,
        ContextAssignmentRecord,
        PreferredNameRecord,
    )


@runtime_checkable
class NameStore(Protocol):
    """Read queries and the audit insert the engine needs.

    Reads return zero or one logically relevant row. Implementations raise
    ``StoreError`` when the store cannot answer; "not found" is an empty
    list, never an error.
    """

    async def get_active_consent(
        self, target_id: str, requester_id: str
    ) -> list[ConsentRecord]:
        """Active (GRANTED, unexpired) consent from target to requester."""
        ...

    async def get_context_assignment(
        self, target_id: str, context_name: str
    ) -> list[ContextAssignmentRecord]:
        """Name assigned to the target's context with this exact name."""
        ...

    async def get_preferred_name(self, target_id: str) -> list[PreferredNameRecord]:
        """The target's preferred name."""
        ...

    async def insert_audit_entry(self, entry: AuditEvent) -> None:
        """Append one audit entry."""
        ...


@runtime_checkable
class AuditReader(Protocol):
    """Read access to the audit log."""

    async def list_audit_entries(
        self, target_id: str, limit: int = 50
    ) -> list[AuditRecord]:
        """Audit entries for a target, newest first."""
        ...
