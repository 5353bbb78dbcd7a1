"""Relational name store backed by async SQLAlchemy."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import case, or_, select
from sqlalchemy.exc import SQLAlchemyError

from truename.db.models import (
    AuditLogEntry,
    Consent,
    ContextNameAssignment,
    Name,
    UserContext,
    utc_now,
)
from truename.errors import StoreError
from truename.store.types import (
    AuditEvent,
    AuditRecord,
    ConsentRecord,
    ConsentStatus,
    ContextAssignmentRecord,
    NameType,
    PreferredNameRecord,
    ensure_utc,
)

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from truename.db.engine import Database

logger = logging.getLogger(__name__)

# Order used when no name is flagged preferred
_NAME_TYPE_RANK = case(
    (Name.name_type == NameType.LEGAL.value, 1),
    (Name.name_type == NameType.PREFERRED.value, 2),
    (Name.name_type == NameType.NICKNAME.value, 3),
    (Name.name_type == NameType.ALIAS.value, 4),
    else_=5,
)


class SqlNameStore:
    """NameStore implementation over the identity tables.

    Each operation opens its own short session; nothing is cached and no
    transaction spans operations.
    """

    def __init__(
        self,
        db: Database,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._db = db
        self._clock = clock

    @asynccontextmanager
    async def _session(self, operation: str) -> AsyncIterator[AsyncSession]:
        """Open a session, translating driver failures into StoreError."""
        try:
            async with self._db.session() as session:
                yield session
        except (SQLAlchemyError, OSError) as e:
            logger.debug("store_operation_failed", extra={"operation": operation})
            raise StoreError(str(e), operation=operation) from e

    async def get_active_consent(
        self, target_id: str, requester_id: str
    ) -> list[ConsentRecord]:
        if not target_id or not requester_id:
            return []

        now = self._clock()
        async with self._session("get_active_consent") as session:
            result = await session.execute(
                select(
                    Consent.id,
                    Consent.context_id,
                    UserContext.context_name,
                    Consent.granted_at,
                    Consent.expires_at,
                )
                .join(UserContext, UserContext.id == Consent.context_id)
                .where(
                    Consent.granter_user_id == target_id,
                    Consent.requester_user_id == requester_id,
                    Consent.status == ConsentStatus.GRANTED.value,
                    or_(Consent.expires_at.is_(None), Consent.expires_at > now),
                )
                .order_by(Consent.granted_at.desc())
                .limit(1)
            )
            rows = result.all()

        return [
            ConsentRecord(
                consent_id=row.id,
                context_id=row.context_id,
                context_name=row.context_name,
                granted_at=ensure_utc(row.granted_at),
                expires_at=ensure_utc(row.expires_at),
            )
            for row in rows
        ]

    async def get_context_assignment(
        self, target_id: str, context_name: str
    ) -> list[ContextAssignmentRecord]:
        if not target_id or not context_name or not context_name.strip():
            return []

        async with self._session("get_context_assignment") as session:
            result = await session.execute(
                select(
                    Name.id,
                    Name.name_text,
                    Name.name_type,
                    UserContext.id.label("context_id"),
                    UserContext.context_name,
                )
                .select_from(UserContext)
                .join(
                    ContextNameAssignment,
                    ContextNameAssignment.context_id == UserContext.id,
                )
                .join(Name, Name.id == ContextNameAssignment.name_id)
                .where(
                    UserContext.user_id == target_id,
                    UserContext.context_name == context_name,
                    ContextNameAssignment.user_id == target_id,
                )
                .limit(1)
            )
            rows = result.all()

        return [
            ContextAssignmentRecord(
                name_id=row.id,
                name_text=row.name_text,
                context_id=row.context_id,
                context_name=row.context_name,
                name_type=row.name_type,
            )
            for row in rows
        ]

    async def get_preferred_name(self, target_id: str) -> list[PreferredNameRecord]:
        if not target_id:
            return []

        columns = (Name.id, Name.name_text, Name.name_type, Name.is_preferred)
        async with self._session("get_preferred_name") as session:
            result = await session.execute(
                select(*columns)
                .where(Name.user_id == target_id, Name.is_preferred.is_(True))
                .limit(1)
            )
            rows = result.all()

            if not rows:
                # No explicit preference: best available name by type, then age
                result = await session.execute(
                    select(*columns)
                    .where(Name.user_id == target_id)
                    .order_by(_NAME_TYPE_RANK, Name.created_at.asc())
                    .limit(1)
                )
                rows = result.all()

        return [
            PreferredNameRecord(
                name_id=row.id,
                name_text=row.name_text,
                name_type=row.name_type,
                is_preferred=bool(row.is_preferred),
            )
            for row in rows
        ]

    async def insert_audit_entry(self, entry: AuditEvent) -> None:
        async with self._session("insert_audit_entry") as session:
            session.add(
                AuditLogEntry(
                    target_user_id=entry.target_id,
                    requester_user_id=entry.requester_id,
                    context_id=entry.context_id,
                    resolved_name_id=entry.name_id,
                    action=entry.action.value,
                    details=entry.to_details(),
                )
            )

    async def list_audit_entries(
        self, target_id: str, limit: int = 50
    ) -> list[AuditRecord]:
        async with self._session("list_audit_entries") as session:
            result = await session.execute(
                select(AuditLogEntry)
                .where(AuditLogEntry.target_user_id == target_id)
                .order_by(AuditLogEntry.id.desc())
                .limit(limit)
            )
            rows = result.scalars().all()

        return [
            AuditRecord(
                id=row.id,
                target_id=row.target_user_id,
                requester_id=row.requester_user_id,
                context_id=row.context_id,
                resolved_name_id=row.resolved_name_id,
                action=row.action,
                accessed_at=ensure_utc(row.accessed_at),
                details=row.details or {},
            )
            for row in rows
        ]
