"""Name resolution engine.

Implements the three-tier priority system:

1. Consent-based resolution (highest priority): an explicit grant from the
   target to the requester outranks anything the target configured alone.
2. Context-specific resolution: the name the target assigned to the
   requested context.
3. Preferred-name fallback (lowest priority): always produces an answer.

Every call to ``resolve`` writes exactly one audit entry, whichever tier
won and whether or not something failed, and never raises to the caller.
"""

import asyncio
import logging
import time
from collections.abc import Sequence

from truename.config.models import ResolutionConfig
from truename.errors import ValidationError
from truename.resolution.audit import AuditLogger
from truename.resolution.consent import ConsentResolver
from truename.resolution.context import ContextResolver
from truename.resolution.fallback import FallbackResolver
from truename.resolution.types import (
    BenchmarkResult,
    ErrorMetadata,
    NameResolution,
    ResolutionSource,
    ResolveRequest,
    Stopwatch,
    TierOutcome,
    describe_error,
    has_context,
)
from truename.store.protocols import NameStore

logger = logging.getLogger(__name__)


class ResolutionEngine:
    """Stateless resolution service over an injected ``NameStore``.

    Safe to share between concurrent callers: nothing is cached and no state
    is kept between calls.
    """

    def __init__(
        self,
        store: NameStore,
        settings: ResolutionConfig | None = None,
        *,
        audit: AuditLogger | None = None,
    ) -> None:
        self._store = store
        self._settings = settings or ResolutionConfig()
        self._consent = ConsentResolver(store)
        self._context = ContextResolver(store)
        self._fallback = FallbackResolver(store, self._settings.anonymous_name)
        self._audit = audit or AuditLogger(store)

    @property
    def settings(self) -> ResolutionConfig:
        return self._settings

    async def resolve(
        self,
        target_id: str,
        requester_id: str | None = None,
        context_name: str | None = None,
    ) -> NameResolution:
        """Resolve the name to disclose for ``target_id``.

        Args:
            target_id: Identity whose name is being disclosed.
            requester_id: Identity asking, if any. Enables the consent tier.
            context_name: Context requested, if any. Enables the context tier.

        Returns:
            The chosen resolution. Failures degrade to ``error_fallback``.
        """
        stopwatch = Stopwatch()
        try:
            resolution = await self._decide(
                target_id, requester_id, context_name, stopwatch
            )
        except asyncio.CancelledError:
            # Abandoned mid-decision: record the call, then honour the cancel
            resolution = self._error_resolution(
                "resolution cancelled", requester_id, context_name, stopwatch
            )
            await self._record(target_id, requester_id, resolution)
            raise
        except Exception as e:
            logger.exception("resolution_failed target=%s", target_id)
            resolution = self._error_resolution(
                describe_error(e), requester_id, context_name, stopwatch
            )

        await self._record(target_id, requester_id, resolution)
        return resolution

    async def _decide(
        self,
        target_id: str,
        requester_id: str | None,
        context_name: str | None,
        stopwatch: Stopwatch,
    ) -> NameResolution:
        degraded: list[ResolutionSource] = []

        if requester_id:
            outcome = await self._consent.resolve_by_consent(
                target_id, requester_id, context_name, stopwatch=stopwatch
            )
            if outcome.is_resolved and outcome.resolution is not None:
                return outcome.resolution
            if outcome.is_store_error:
                terminal = self._on_store_error(
                    ResolutionSource.CONSENT_BASED,
                    outcome,
                    requester_id,
                    context_name,
                    stopwatch,
                )
                if terminal is not None:
                    return terminal
                degraded.append(ResolutionSource.CONSENT_BASED)

        if context_name is not None and has_context(context_name):
            outcome = await self._context.resolve_by_context(
                target_id,
                context_name,
                requester_id=requester_id,
                stopwatch=stopwatch,
            )
            if outcome.is_resolved and outcome.resolution is not None:
                return outcome.resolution
            if outcome.is_store_error:
                terminal = self._on_store_error(
                    ResolutionSource.CONTEXT_SPECIFIC,
                    outcome,
                    requester_id,
                    context_name,
                    stopwatch,
                )
                if terminal is not None:
                    return terminal
                degraded.append(ResolutionSource.CONTEXT_SPECIFIC)

        return await self._fallback.resolve_fallback(
            target_id,
            context_name,
            requester_id,
            stopwatch=stopwatch,
            degraded_tiers=degraded,
        )

    def _on_store_error(
        self,
        tier: ResolutionSource,
        outcome: TierOutcome,
        requester_id: str | None,
        context_name: str | None,
        stopwatch: Stopwatch,
    ) -> NameResolution | None:
        """Handle a tier that failed on the store.

        Returns a terminal resolution in strict mode, None to fall through.
        """
        error = describe_error(outcome.error) if outcome.error else "store error"
        if self._settings.strict_store_errors:
            logger.error(
                "tier_store_error strict=true: %s", error, extra={"tier": str(tier)}
            )
            return self._error_resolution(error, requester_id, context_name, stopwatch)
        logger.warning("tier_degraded: %s", error, extra={"tier": str(tier)})
        return None

    def _error_resolution(
        self,
        error: str,
        requester_id: str | None,
        context_name: str | None,
        stopwatch: Stopwatch,
    ) -> NameResolution:
        return NameResolution(
            name=self._settings.anonymous_name,
            metadata=ErrorMetadata(
                **stopwatch.stamp(),
                error=error,
                requested_context=context_name,
                had_requester=bool(requester_id),
            ),
        )

    async def _record(
        self,
        target_id: str,
        requester_id: str | None,
        resolution: NameResolution,
    ) -> None:
        """Write the single audit entry for a call.

        Shielded so a caller cancelled while waiting still gets its
        disclosure recorded.
        """
        try:
            event = resolution.to_audit_event(target_id, requester_id)
            await asyncio.shield(self._audit.log(event))
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.error("audit_dispatch_failed target=%s", target_id, exc_info=True)

    async def resolve_batch(
        self,
        target_id: str,
        context_names: Sequence[str],
        *,
        concurrent: bool | None = None,
    ) -> list[NameResolution]:
        """Resolve one name per context for the same target.

        Each item is an independent ``resolve`` call with its own audit
        entry. Results keep the input order. Sequential by default so audit
        entries read in request order.
        """
        if concurrent is None:
            concurrent = self._settings.batch_concurrency

        if concurrent:
            return list(
                await asyncio.gather(
                    *(self.resolve(target_id, None, name) for name in context_names)
                )
            )

        results: list[NameResolution] = []
        for name in context_names:
            results.append(await self.resolve(target_id, None, name))
        return results

    async def resolve_many(
        self, requests: Sequence[ResolveRequest]
    ) -> list[NameResolution]:
        """Resolve several unrelated requests concurrently, keeping order."""
        return list(
            await asyncio.gather(
                *(
                    self.resolve(r.target_id, r.requester_id, r.context_name)
                    for r in requests
                )
            )
        )

    async def resolve_simple(
        self, target_id: str, context_name: str | None = None
    ) -> str:
        """Resolve and return only the name text."""
        resolution = await self.resolve(target_id, None, context_name)
        return resolution.name

    async def benchmark(
        self, request: ResolveRequest, iterations: int = 10
    ) -> BenchmarkResult:
        """Time repeated resolutions of the same request.

        Every iteration is a real, audited resolution.
        """
        if iterations < 1:
            raise ValidationError(f"iterations must be at least 1, got {iterations}")

        times: list[float] = []
        for _ in range(iterations):
            start = time.perf_counter()
            await self.resolve(
                request.target_id, request.requester_id, request.context_name
            )
            times.append((time.perf_counter() - start) * 1000)

        total_ms = sum(times)
        return BenchmarkResult(
            iterations=iterations,
            average_ms=total_ms / iterations,
            min_ms=min(times),
            max_ms=max(times),
            total_ms=total_ms,
        )


def create_resolution_engine(
    store: NameStore, settings: ResolutionConfig | None = None
) -> ResolutionEngine:
    """Create a ResolutionEngine for a store."""
    return ResolutionEngine(store, settings)
