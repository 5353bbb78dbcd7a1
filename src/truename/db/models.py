"""SQLAlchemy ORM models.

Tables mirror the identity store the engine reads from:

- profiles: identities (targets and requesters)
- names: name variants, at most one ``is_preferred`` per profile
- user_contexts: contexts a profile defines, unique by name per profile
- context_name_assignments: the name disclosed for a context
- consents: grants from a target (granter) to a requester for one context
- audit_log_entries: append-only disclosure log
"""

from datetime import UTC, datetime
from typing import Any

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.dialects.sqlite import JSON
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utc_now() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(UTC)


class Base(DeclarativeBase):
    """Base class for all models."""

    type_annotation_map = {
        dict[str, Any]: JSON,
    }


class Profile(Base):
    """An identity whose names can be disclosed, or who requests them."""

    __tablename__ = "profiles"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    email: Mapped[str | None] = mapped_column(String, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utc_now, nullable=False
    )


class Name(Base):
    """A name variant belonging to exactly one profile."""

    __tablename__ = "names"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    user_id: Mapped[str] = mapped_column(
        String, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    name_text: Mapped[str] = mapped_column(String, nullable=False)
    # LEGAL, PREFERRED, NICKNAME, ALIAS
    name_type: Mapped[str] = mapped_column(String, nullable=False)
    is_preferred: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utc_now, nullable=False
    )

    __table_args__ = (Index("ix_names_user_preferred", "user_id", "is_preferred"),)


class UserContext(Base):
    """A named context defined by a profile (e.g. "Work Colleagues")."""

    __tablename__ = "user_contexts"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    user_id: Mapped[str] = mapped_column(
        String, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    context_name: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    visibility: Mapped[str] = mapped_column(
        String, default="restricted", nullable=False
    )
    is_permanent: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utc_now, nullable=False
    )

    __table_args__ = (UniqueConstraint("user_id", "context_name"),)


class ContextNameAssignment(Base):
    """The name variant disclosed for one context."""

    __tablename__ = "context_name_assignments"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    user_id: Mapped[str] = mapped_column(
        String, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    context_id: Mapped[str] = mapped_column(
        String,
        ForeignKey("user_contexts.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    name_id: Mapped[str] = mapped_column(
        String, ForeignKey("names.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utc_now, nullable=False
    )

    __table_args__ = (
        Index("ix_context_assignments_user_context", "user_id", "context_id"),
    )


class Consent(Base):
    """A grant from a target (granter) to a requester, scoped to a context.

    Only ``GRANTED`` consents whose ``expires_at`` is unset or in the future
    are active. Expiry is passive: nothing rewrites the status.
    """

    __tablename__ = "consents"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    granter_user_id: Mapped[str] = mapped_column(
        String, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    requester_user_id: Mapped[str] = mapped_column(
        String, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    context_id: Mapped[str] = mapped_column(
        String, ForeignKey("user_contexts.id", ondelete="CASCADE"), nullable=False
    )
    # PENDING, GRANTED, REVOKED, EXPIRED
    status: Mapped[str] = mapped_column(String, default="PENDING", nullable=False)
    granted_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    revoked_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    expires_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utc_now, nullable=False
    )

    __table_args__ = (
        UniqueConstraint("granter_user_id", "requester_user_id"),
        Index(
            "ix_consents_granter_requester_status",
            "granter_user_id",
            "requester_user_id",
            "status",
        ),
    )


class AuditLogEntry(Base):
    """Append-only record of one name disclosure decision.

    No foreign keys: entries must outlive the names and contexts they
    reference. ``accessed_at`` is assigned by the database, not the caller.
    """

    __tablename__ = "audit_log_entries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    target_user_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    requester_user_id: Mapped[str | None] = mapped_column(String, nullable=True)
    context_id: Mapped[str | None] = mapped_column(String, nullable=True)
    resolved_name_id: Mapped[str | None] = mapped_column(String, nullable=True)
    action: Mapped[str] = mapped_column(String, nullable=False)
    accessed_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), nullable=False, index=True
    )
    details: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
