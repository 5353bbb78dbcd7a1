"""Tier 3: the preferred name, or a placeholder when there is none."""

import logging
from collections.abc import Sequence
from typing import Any

from truename.config.models import DEFAULT_ANONYMOUS_NAME
from truename.resolution.types import (
    DATABASE_ERROR_SUFFIX,
    FallbackMetadata,
    FallbackReason,
    NameResolution,
    ResolutionSource,
    Stopwatch,
    describe_error,
    has_context,
)
from truename.store.protocols import NameStore

logger = logging.getLogger(__name__)


class FallbackResolver:
    """Always produces a resolution.

    Store failures are turned into the placeholder name with the error
    recorded, so this tier never raises for a store problem.
    """

    def __init__(
        self, store: NameStore, anonymous_name: str = DEFAULT_ANONYMOUS_NAME
    ) -> None:
        self._store = store
        self._anonymous_name = anonymous_name

    async def resolve_fallback(
        self,
        target_id: str,
        context_name: str | None = None,
        requester_id: str | None = None,
        *,
        stopwatch: Stopwatch | None = None,
        degraded_tiers: Sequence[ResolutionSource] = (),
    ) -> NameResolution:
        stopwatch = stopwatch or Stopwatch()
        reason = FallbackReason.for_request(
            had_requester=bool(requester_id), had_context=has_context(context_name)
        )
        common: dict[str, Any] = {
            "requested_context": context_name,
            "had_requester": bool(requester_id),
            "degraded_tiers": tuple(degraded_tiers),
        }

        try:
            names = await self._store.get_preferred_name(target_id)
            if names:
                preferred = names[0]
                return NameResolution(
                    name=preferred.name_text,
                    metadata=FallbackMetadata(
                        **stopwatch.stamp(),
                        **common,
                        fallback_reason=reason.value,
                        name_id=preferred.name_id,
                    ),
                )
        except Exception as e:
            logger.warning("preferred_name_lookup_failed target=%s: %s", target_id, e)
            return NameResolution(
                name=self._anonymous_name,
                metadata=FallbackMetadata(
                    **stopwatch.stamp(),
                    **common,
                    fallback_reason=reason.value + DATABASE_ERROR_SUFFIX,
                    error=describe_error(e),
                ),
            )

        logger.debug("no_preferred_name target=%s", target_id)
        return NameResolution(
            name=self._anonymous_name,
            metadata=FallbackMetadata(
                **stopwatch.stamp(), **common, fallback_reason=reason.value
            ),
        )
