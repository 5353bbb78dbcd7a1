"""Name resolution: consent, context and fallback tiers plus auditing."""

from truename.resolution.audit import AuditLogger
from truename.resolution.consent import ConsentResolver
from truename.resolution.context import ContextResolver
from truename.resolution.engine import ResolutionEngine, create_resolution_engine
from truename.resolution.fallback import FallbackResolver
from truename.resolution.types import (
    BenchmarkResult,
    ConsentMetadata,
    ContextMetadata,
    ErrorMetadata,
    FallbackMetadata,
    FallbackReason,
    NameResolution,
    ResolutionSource,
    ResolveRequest,
    TierOutcome,
    TierStatus,
)

__all__ = [
    "AuditLogger",
    "BenchmarkResult",
    "ConsentMetadata",
    "ConsentResolver",
    "ContextMetadata",
    "ContextResolver",
    "ErrorMetadata",
    "FallbackMetadata",
    "FallbackReason",
    "FallbackResolver",
    "NameResolution",
    "ResolutionEngine",
    "ResolutionSource",
    "ResolveRequest",
    "TierOutcome",
    "TierStatus",
    "create_resolution_engine",
]
