"""
Form validation.

Turns raw field input into a VideoConfig or FileNameConfig, or into a
mapping of field name -> error message.

CRITICAL RULES:
1. Validation is purely local: no engine, no orchestrator
2. Video config and filename are validated independently
3. Filename is validated at download time, not at generation time
"""

import logging
from typing import Any, Dict, Mapping, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel, ValidationError

from .errors import ConfigValidationError
from .models import FileNameConfig, VideoConfig

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

# Field aliases accepted from the form, reported back under the canonical name
_FIELD_NAMES = {
    "backgroundColor": "background_color",
    "fileName": "file_name",
}


def _field_errors(exc: ValidationError) -> Dict[str, str]:
    """Collapse a pydantic ValidationError into one message per field."""
    errors: Dict[str, str] = {}
    for error in exc.errors():
        loc = error.get("loc") or ("__root__",)
        field = str(loc[0])
        field = _FIELD_NAMES.get(field, field)
        # First error per field wins
        errors.setdefault(field, error.get("msg", "Invalid value"))
    return errors


def _validate(model: Type[ModelT], raw: Mapping[str, Any]) -> Tuple[Optional[ModelT], Dict[str, str]]:
    if not isinstance(raw, Mapping):
        return None, {"__root__": "Input should be an object"}
    try:
        return model.model_validate(dict(raw)), {}
    except ValidationError as e:
        errors = _field_errors(e)
        logger.debug(f"[Validation] {model.__name__} rejected: {errors}")
        return None, errors


def validate_video_config(raw: Mapping[str, Any]) -> Tuple[Optional[VideoConfig], Dict[str, str]]:
    """
    Validate raw video settings.

    Returns:
        (config, {}) when valid, (None, field_errors) otherwise
    """
    return _validate(VideoConfig, raw)


def validate_file_name(raw: Mapping[str, Any]) -> Tuple[Optional[FileNameConfig], Dict[str, str]]:
    """
    Validate a download filename.

    Returns:
        (config, {}) when valid, (None, field_errors) otherwise
    """
    return _validate(FileNameConfig, raw)


def require_video_config(raw: Mapping[str, Any]) -> VideoConfig:
    """
    Validate raw video settings, raising on failure.

    Raises:
        ConfigValidationError: carrying the field errors
    """
    config, errors = validate_video_config(raw)
    if config is None:
        raise ConfigValidationError(errors)
    return config


def require_file_name(raw: Mapping[str, Any]) -> FileNameConfig:
    """
    Validate a download filename, raising on failure.

    Raises:
        ConfigValidationError: carrying the field errors
    """
    config, errors = validate_file_name(raw)
    if config is None:
        raise ConfigValidationError(errors)
    return config
