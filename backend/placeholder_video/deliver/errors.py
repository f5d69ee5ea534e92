"""
Deliver-specific error types.

Validation errors stay local to the form and never reach the
orchestrator. Resource errors concern the preview/download handles.
"""

from typing import Dict


class DeliverError(Exception):
    """Base exception for all deliver-related failures."""
    pass


class ConfigValidationError(DeliverError):
    """Raised when raw input does not satisfy a schema."""

    def __init__(self, field_errors: Dict[str, str]):
        self.field_errors = dict(field_errors)
        details = "; ".join(f"{name}: {msg}" for name, msg in sorted(self.field_errors.items()))
        super().__init__(f"Invalid configuration: {details}")


class ArtifactResourceError(DeliverError):
    """Raised when an artifact handle cannot be created, resolved or revoked."""

    def __init__(self, token: str, reason: str):
        self.token = token
        self.reason = reason
        super().__init__(f"Artifact handle {token}: {reason}")
