"""
Generation orchestration.

One generation at a time, driven by an explicit state machine:
LOADING -> IDLE -> GENERATING -> SUCCESS | ERROR.
"""

from .errors import GenerationError, InvalidStateTransitionError
from .models import (
    GenerationState,
    GenerationStatus,
    FailureKind,
    GenerationResult,
)
from .state import can_transition, can_submit
from .orchestrator import TranscodeOrchestrator

__all__ = [
    # Errors
    "GenerationError",
    "InvalidStateTransitionError",
    # Models
    "GenerationState",
    "GenerationStatus",
    "FailureKind",
    "GenerationResult",
    # State validation
    "can_transition",
    "can_submit",
    # Orchestrator
    "TranscodeOrchestrator",
]
