"""Tier 2: disclosure through the target's own context assignment."""

import logging

from truename.errors import StoreError
from truename.resolution.types import (
    ContextMetadata,
    NameResolution,
    Stopwatch,
    TierOutcome,
    has_context,
)
from truename.store.protocols import NameStore

logger = logging.getLogger(__name__)


class ContextResolver:
    """Resolve a name from the assignment of a context the target owns.

    Context names match exactly; a context that does not exist for the
    target, or exists without an assignment, does not resolve.
    """

    def __init__(self, store: NameStore) -> None:
        self._store = store

    async def resolve_by_context(
        self,
        target_id: str,
        context_name: str,
        *,
        requester_id: str | None = None,
        stopwatch: Stopwatch | None = None,
    ) -> TierOutcome:
        if not has_context(context_name):
            return TierOutcome.not_found()

        stopwatch = stopwatch or Stopwatch()
        try:
            assignments = await self._store.get_context_assignment(
                target_id, context_name
            )
            if not assignments:
                return TierOutcome.not_found()
            assignment = assignments[0]

            resolution = NameResolution(
                name=assignment.name_text,
                metadata=ContextMetadata(
                    **stopwatch.stamp(),
                    context_id=assignment.context_id,
                    context_name=assignment.context_name,
                    name_id=assignment.name_id,
                    requested_context=context_name,
                    had_requester=bool(requester_id),
                ),
            )
        except StoreError as e:
            logger.warning(
                "context_lookup_store_error operation=%s: %s", e.operation, e
            )
            return TierOutcome.store_error(e)
        except Exception as e:
            logger.exception("context_lookup_failed target=%s", target_id)
            return TierOutcome.store_error(e)

        return TierOutcome.resolved(resolution)
