"""
Deliver: what the user configures and what they get back.

- models: VideoConfig, FileNameConfig, Artifact
- validation: form schemas -> config or field errors
- artifacts: single live preview handle + download naming
"""

from .errors import DeliverError, ConfigValidationError, ArtifactResourceError
from .models import (
    VideoFormat,
    VideoConfig,
    FileNameConfig,
    Artifact,
    RenderedSettings,
    Download,
    MIME_TYPES,
)
from .validation import (
    validate_video_config,
    validate_file_name,
    require_video_config,
    require_file_name,
)
from .artifacts import ArtifactHandle, HandleRegistry, ArtifactLifecycleManager

__all__ = [
    # Errors
    "DeliverError",
    "ConfigValidationError",
    "ArtifactResourceError",
    # Models
    "VideoFormat",
    "VideoConfig",
    "FileNameConfig",
    "Artifact",
    "RenderedSettings",
    "Download",
    "MIME_TYPES",
    # Validation
    "validate_video_config",
    "validate_file_name",
    "require_video_config",
    "require_file_name",
    # Artifacts
    "ArtifactHandle",
    "HandleRegistry",
    "ArtifactLifecycleManager",
]
