"""
Generation-specific error types.

Errors are explicit and provide actionable messages.
"""


class GenerationError(Exception):
    """Base exception for generator state failures."""
    pass


class InvalidStateTransitionError(GenerationError):
    """Raised when attempting an illegal state transition."""

    def __init__(self, current_state: str, target_state: str):
        self.current_state = current_state
        self.target_state = target_state
        super().__init__(
            f"Invalid generation state transition: "
            f"{current_state} -> {target_state}"
        )
