"""
Generation state and result models.

GenerationResult is the single source of truth for the outcome of a
submit() call. Engine faults are carried in it as a tagged failure,
never raised to the caller.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ..deliver.artifacts import ArtifactHandle
from ..deliver.models import Artifact


SUCCESS_MESSAGE = "Video generated successfully!"
FAILURE_MESSAGE = "Error generating video. Please try again."


class GenerationState(str, Enum):
    """
    Generator status.

    IDLE: Engine ready, nothing running (also the edited-after-outcome state)
    LOADING: Engine not ready yet
    GENERATING: One transcode in flight; further submissions are ignored
    SUCCESS: Last attempt produced an artifact
    ERROR: Last attempt failed
    """

    IDLE = "idle"
    LOADING = "loading"
    GENERATING = "generating"
    SUCCESS = "success"
    ERROR = "error"


class GenerationStatus(str, Enum):
    """Outcome classification of one submit() call."""

    SUCCESS = "success"
    FAILED = "failed"
    IGNORED = "ignored"  # Submitted while another generation was running


class FailureKind(str, Enum):
    """Where in the pipeline a generation failed."""

    ASSET = "asset"  # Font fetch or namespace write
    TRANSCODE = "transcode"  # FFmpeg exec
    OUTPUT = "output"  # Output missing or unreadable
    RESOURCE = "resource"  # Artifact handle creation/revocation
    INTERNAL = "internal"  # Anything unexpected


class GenerationResult(BaseModel):
    """Result of one submit() call."""

    model_config = ConfigDict(extra="forbid")

    status: GenerationStatus

    artifact: Optional[Artifact] = None
    """Produced artifact (SUCCESS only)."""

    handle: Optional[ArtifactHandle] = None
    """Preview handle issued for the artifact (SUCCESS only)."""

    failure_kind: Optional[FailureKind] = None
    failure_reason: Optional[str] = None
    """Internal failure detail, for logs and diagnostics (FAILED only)."""

    message: Optional[str] = None
    """Human-readable message for display."""

    started_at: datetime = Field(default_factory=datetime.now)
    completed_at: Optional[datetime] = None

    @property
    def ok(self) -> bool:
        return self.status == GenerationStatus.SUCCESS

    def duration_seconds(self) -> Optional[float]:
        """Calculate generation duration in seconds."""
        if self.completed_at is None:
            return None
        return (self.completed_at - self.started_at).total_seconds()

    def summary(self) -> str:
        """Human-readable summary of the result."""
        duration = self.duration_seconds()
        duration_str = f" ({duration:.1f}s)" if duration is not None else ""

        if self.status == GenerationStatus.SUCCESS and self.artifact is not None:
            return f"SUCCESS{duration_str}: {self.artifact.mime_type}, {self.artifact.size_bytes} bytes"
        if self.status == GenerationStatus.FAILED:
            kind = self.failure_kind.value if self.failure_kind else "unknown"
            return f"FAILED{duration_str} [{kind}]: {self.failure_reason}"
        return f"{self.status.value.upper()}"
