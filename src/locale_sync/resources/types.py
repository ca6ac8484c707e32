"""
Core types and data classes for resource persistence.

This module contains the result structures produced by the resource store
and by the missing-key flush path.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class FlushStatus(Enum):
    """Outcome of flushing one namespace."""

    WRITTEN = "written"  # New keys were merged into the file
    UNCHANGED = "unchanged"  # Every pending key was already present
    BUSY = "busy"  # File locked, keys retained for retry
    FAILED = "failed"  # Non-retryable for this cycle, keys retained
    DROPPED = "dropped"  # Namespace can never be written, keys discarded


@dataclass(frozen=True)
class MergeResult:
    """Result of merging pending keys into a single resource file."""

    namespace: str
    path: Path
    added: tuple[str, ...] = ()
    created: bool = False
    written: bool = False

    @property
    def changed(self) -> bool:
        """Whether the file content on disk changed."""
        return self.written and (self.created or bool(self.added))


@dataclass(frozen=True)
class NamespaceFlushOutcome:
    """Outcome of one namespace within a flush."""

    namespace: str
    status: FlushStatus
    result: MergeResult | None = None
    error: str | None = None

    @property
    def retained(self) -> bool:
        """Whether the pending keys stay buffered for a later flush."""
        return self.status in (FlushStatus.BUSY, FlushStatus.FAILED)


@dataclass
class FlushReport:
    """Summary of a flush across all touched namespaces."""

    language: str
    outcomes: dict[str, NamespaceFlushOutcome] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        """True when no namespace was retained or dropped."""
        return all(
            outcome.status in (FlushStatus.WRITTEN, FlushStatus.UNCHANGED)
            for outcome in self.outcomes.values()
        )

    @property
    def busy(self) -> list[str]:
        """Namespaces whose write hit a transient lock."""
        return [
            ns for ns, outcome in self.outcomes.items()
            if outcome.status == FlushStatus.BUSY
        ]

    @property
    def written(self) -> list[str]:
        """Namespaces whose files were updated."""
        return [
            ns for ns, outcome in self.outcomes.items()
            if outcome.status == FlushStatus.WRITTEN
        ]

    def to_dict(self) -> dict[str, object]:
        """Convert to a plain dictionary for logging."""
        return {
            "language": self.language,
            "outcomes": {
                ns: {
                    "status": outcome.status.value,
                    "added": list(outcome.result.added) if outcome.result else [],
                    "error": outcome.error,
                }
                for ns, outcome in self.outcomes.items()
            },
        }
