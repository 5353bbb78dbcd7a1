"""Public types for the store subsystem.

Row records returned by the store's read operations, the audit event the
engine writes, and the audit record read back for inspection.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any


class NameType(StrEnum):
    """Category of a name variant."""

    LEGAL = "LEGAL"
    PREFERRED = "PREFERRED"
    NICKNAME = "NICKNAME"
    ALIAS = "ALIAS"


class ConsentStatus(StrEnum):
    """Consent lifecycle states. Only GRANTED can be active."""

    PENDING = "PENDING"
    GRANTED = "GRANTED"
    REVOKED = "REVOKED"
    EXPIRED = "EXPIRED"


class AuditAction(StrEnum):
    """Audit actions written by the engine."""

    NAME_DISCLOSED = "NAME_DISCLOSED"


def ensure_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes read back from the database."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


@dataclass(frozen=True)
class ConsentRecord:
    """An active consent row, joined with its context."""

    consent_id: str
    context_id: str
    context_name: str
    granted_at: datetime | None = None
    expires_at: datetime | None = None


@dataclass(frozen=True)
class ContextAssignmentRecord:
    """The name assigned to one of a target's contexts."""

    name_id: str
    name_text: str
    context_id: str
    context_name: str
    name_type: str | None = None


@dataclass(frozen=True)
class PreferredNameRecord:
    """The name used when neither consent nor context applies."""

    name_id: str
    name_text: str
    name_type: str | None = None
    is_preferred: bool = True


@dataclass(frozen=True)
class AuditEvent:
    """One disclosure decision, as handed to the audit logger.

    ``metadata`` is the full decision metadata of the resolution (timings,
    requested context, fallback reason, error) and is stored verbatim in the
    entry's details alongside the flattened columns.
    """

    target_id: str
    source: str
    resolved_name: str
    requester_id: str | None = None
    name_id: str | None = None
    context_id: str | None = None
    consent_id: str | None = None
    fallback_reason: str | None = None
    error: str | None = None
    action: AuditAction = AuditAction.NAME_DISCLOSED
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_details(self) -> dict[str, Any]:
        details: dict[str, Any] = dict(self.metadata)
        details.update(
            {
                "resolution_type": self.source,
                "resolved_name": self.resolved_name,
                "consent_id": self.consent_id,
                "fallback_reason": self.fallback_reason,
                "error": self.error,
            }
        )
        return details


@dataclass(frozen=True)
class AuditRecord:
    """A stored audit entry."""

    id: int
    target_id: str
    requester_id: str | None
    context_id: str | None
    resolved_name_id: str | None
    action: str
    accessed_at: datetime | None
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def source(self) -> str | None:
        return self.details.get("resolution_type")

    @property
    def resolved_name(self) -> str | None:
        return self.details.get("resolved_name")
