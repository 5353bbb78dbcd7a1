"""Public types for name resolution.

Metadata is a tagged union: each disclosure source has its own metadata
model, and ``NameResolution.source`` is derived from which one is present.
"""

import time
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any, ClassVar, Literal

from pydantic import BaseModel, ConfigDict, computed_field

from truename.store.types import AuditEvent


class ResolutionSource(StrEnum):
    """Which priority tier produced a resolution."""

    CONSENT_BASED = "consent_based"
    CONTEXT_SPECIFIC = "context_specific"
    PREFERRED_FALLBACK = "preferred_fallback"
    ERROR_FALLBACK = "error_fallback"


class FallbackReason(StrEnum):
    """Why the preferred-name fallback was used, from the request shape."""

    NO_SPECIFIC_REQUEST = "no_specific_request"
    NO_ACTIVE_CONSENT = "no_active_consent"
    CONTEXT_NOT_FOUND_OR_NO_ASSIGNMENT = "context_not_found_or_no_assignment"
    NO_CONSENT_AND_NO_CONTEXT_ASSIGNMENT = "no_consent_and_no_context_assignment"

    @classmethod
    def for_request(cls, had_requester: bool, had_context: bool) -> "FallbackReason":
        if had_requester and had_context:
            return cls.NO_CONSENT_AND_NO_CONTEXT_ASSIGNMENT
        if had_requester:
            return cls.NO_ACTIVE_CONSENT
        if had_context:
            return cls.CONTEXT_NOT_FOUND_OR_NO_ASSIGNMENT
        return cls.NO_SPECIFIC_REQUEST


DATABASE_ERROR_SUFFIX = "_with_database_error"


def has_context(context_name: str | None) -> bool:
    """True when a context name was supplied and is not blank."""
    return bool(context_name and context_name.strip())


class ResolutionMetadata(BaseModel):
    """Fields every resolution carries."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    source: ClassVar[ResolutionSource]

    resolution_timestamp: datetime
    response_time_ms: float
    requested_context: str | None = None
    had_requester: bool = False


class ConsentMetadata(ResolutionMetadata):
    source: ClassVar[ResolutionSource] = ResolutionSource.CONSENT_BASED

    consent_id: str
    context_id: str
    context_name: str
    name_id: str
    had_requester: Literal[True] = True


class ContextMetadata(ResolutionMetadata):
    source: ClassVar[ResolutionSource] = ResolutionSource.CONTEXT_SPECIFIC

    context_id: str
    context_name: str
    name_id: str


class FallbackMetadata(ResolutionMetadata):
    source: ClassVar[ResolutionSource] = ResolutionSource.PREFERRED_FALLBACK

    fallback_reason: str
    name_id: str | None = None
    error: str | None = None
    # Tiers skipped because the store failed, not because nothing matched
    degraded_tiers: tuple[ResolutionSource, ...] = ()


class ErrorMetadata(ResolutionMetadata):
    source: ClassVar[ResolutionSource] = ResolutionSource.ERROR_FALLBACK

    error: str


AnyMetadata = ConsentMetadata | ContextMetadata | FallbackMetadata | ErrorMetadata


class NameResolution(BaseModel):
    """The disclosed name and how it was chosen."""

    model_config = ConfigDict(frozen=True)

    name: str
    metadata: AnyMetadata

    @computed_field  # type: ignore[prop-decorator]
    @property
    def source(self) -> ResolutionSource:
        return self.metadata.source

    def to_dict(self) -> dict[str, Any]:
        """Serialize to ``{name, source, metadata}``, omitting absent fields."""
        metadata = self.metadata.model_dump(mode="json", exclude_none=True)
        if not metadata.get("degraded_tiers", True):
            del metadata["degraded_tiers"]
        return {
            "name": self.name,
            "source": self.source.value,
            "metadata": metadata,
        }

    def to_audit_event(self, target_id: str, requester_id: str | None) -> AuditEvent:
        meta = self.metadata
        return AuditEvent(
            target_id=target_id,
            requester_id=requester_id,
            source=self.source.value,
            resolved_name=self.name,
            name_id=getattr(meta, "name_id", None),
            context_id=getattr(meta, "context_id", None),
            consent_id=getattr(meta, "consent_id", None),
            fallback_reason=getattr(meta, "fallback_reason", None),
            error=getattr(meta, "error", None),
            metadata=meta.model_dump(mode="json", exclude_none=True),
        )


class Stopwatch:
    """Start time of one resolution call, for response_time_ms."""

    def __init__(self) -> None:
        self._started = time.perf_counter()

    def elapsed_ms(self) -> float:
        return (time.perf_counter() - self._started) * 1000

    def stamp(self) -> dict[str, Any]:
        """Common timing fields for a metadata model."""
        return {
            "resolution_timestamp": datetime.now(UTC),
            "response_time_ms": self.elapsed_ms(),
        }


class TierStatus(StrEnum):
    RESOLVED = "resolved"
    NOT_FOUND = "not_found"
    STORE_ERROR = "store_error"


@dataclass(frozen=True)
class TierOutcome:
    """Result of one non-terminal tier.

    Keeps "nothing matched" and "the store failed" apart so the engine can
    log and react to them differently even when both fall through.
    """

    status: TierStatus
    resolution: NameResolution | None = None
    error: BaseException | None = None

    @classmethod
    def resolved(cls, resolution: NameResolution) -> "TierOutcome":
        return cls(TierStatus.RESOLVED, resolution=resolution)

    @classmethod
    def not_found(cls) -> "TierOutcome":
        return cls(TierStatus.NOT_FOUND)

    @classmethod
    def store_error(cls, error: BaseException) -> "TierOutcome":
        return cls(TierStatus.STORE_ERROR, error=error)

    @property
    def is_resolved(self) -> bool:
        return self.status == TierStatus.RESOLVED

    @property
    def is_store_error(self) -> bool:
        return self.status == TierStatus.STORE_ERROR


@dataclass(frozen=True)
class ResolveRequest:
    """Arguments of one ``resolve`` call."""

    target_id: str
    requester_id: str | None = None
    context_name: str | None = None


@dataclass(frozen=True)
class BenchmarkResult:
    """Timing summary from ``ResolutionEngine.benchmark``."""

    iterations: int
    average_ms: float
    min_ms: float
    max_ms: float
    total_ms: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "iterations": self.iterations,
            "average_ms": self.average_ms,
            "min_ms": self.min_ms,
            "max_ms": self.max_ms,
            "total_ms": self.total_ms,
        }


def describe_error(error: BaseException) -> str:
    """Message recorded for an error, falling back to the exception type."""
    return str(error) or type(error).__name__

