"""Tier 1: disclosure backed by an explicit consent from target to requester."""

import logging

from truename.errors import StoreError
from truename.resolution.types import (
    ConsentMetadata,
    NameResolution,
    Stopwatch,
    TierOutcome,
)
from truename.store.protocols import NameStore

logger = logging.getLogger(__name__)


class ConsentResolver:
    """Resolve a name through the target's active consent for a requester.

    The consent names one of the target's contexts; the name disclosed is
    the one assigned to that context. A consent whose context has no
    assignment does not resolve.
    """

    def __init__(self, store: NameStore) -> None:
        self._store = store

    async def resolve_by_consent(
        self,
        target_id: str,
        requester_id: str,
        context_name: str | None = None,
        *,
        stopwatch: Stopwatch | None = None,
    ) -> TierOutcome:
        if not requester_id:
            return TierOutcome.not_found()

        stopwatch = stopwatch or Stopwatch()
        try:
            consents = await self._store.get_active_consent(target_id, requester_id)
            if not consents:
                return TierOutcome.not_found()
            consent = consents[0]

            assignments = await self._store.get_context_assignment(
                target_id, consent.context_name
            )
            assignment = next(
                (a for a in assignments if a.context_id == consent.context_id), None
            )
            if assignment is None:
                logger.warning(
                    "consent_context_unassigned consent=%s context=%s",
                    consent.consent_id,
                    consent.context_id,
                )
                return TierOutcome.not_found()

            resolution = NameResolution(
                name=assignment.name_text,
                metadata=ConsentMetadata(
                    **stopwatch.stamp(),
                    consent_id=consent.consent_id,
                    context_id=consent.context_id,
                    context_name=consent.context_name,
                    name_id=assignment.name_id,
                    requested_context=context_name,
                ),
            )
        except StoreError as e:
            logger.warning(
                "consent_lookup_store_error operation=%s: %s", e.operation, e
            )
            return TierOutcome.store_error(e)
        except Exception as e:
            # Malformed rows and other unexpected failures degrade the same way
            logger.exception("consent_lookup_failed target=%s", target_id)
            return TierOutcome.store_error(e)

        return TierOutcome.resolved(resolution)
