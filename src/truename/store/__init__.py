"""Name store: the engine's only view of identities, names and consents."""

from truename.store.protocols import AuditReader, NameStore
from truename.store.sql import SqlNameStore
from truename.store.types import (
    AuditAction,
    AuditEvent,
    AuditRecord,
    ConsentRecord,
    ConsentStatus,
    ContextAssignmentRecord,
    NameType,
    PreferredNameRecord,
)

__all__ = [
    "AuditAction",
    "AuditEvent",
    "AuditReader",
    "AuditRecord",
    "ConsentRecord",
    "ConsentStatus",
    "ContextAssignmentRecord",
    "NameStore",
    "NameType",
    "PreferredNameRecord",
    "SqlNameStore",
]
