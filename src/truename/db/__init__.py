"""Database layer."""

from truename.db.engine import Database
from truename.db.models import (
    AuditLogEntry,
    Base,
    Consent,
    ContextNameAssignment,
    Name,
    Profile,
    UserContext,
)

__all__ = [
    # Engine
    "Database",
    # Models
    "AuditLogEntry",
    "Base",
    "Consent",
    "ContextNameAssignment",
    "Name",
    "Profile",
    "UserContext",
]
