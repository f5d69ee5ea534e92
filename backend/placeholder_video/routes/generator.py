"""
Generator endpoints.

HTTP adapter over the orchestrator: renders its state and forwards
user input. Validation happens here, before anything reaches the
orchestrator.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, HTTPException, Query, Request
from fastapi.responses import Response
from pydantic import BaseModel, ConfigDict

from ..deliver.models import DEFAULT_FILE_NAME, RenderedSettings
from ..deliver.validation import validate_file_name, validate_video_config
from ..execution.errors import EngineLoadError, EngineNotReadyError
from ..execution.loader import LoaderState
from ..jobs.models import FailureKind, GenerationState, GenerationStatus
from ..jobs.orchestrator import TranscodeOrchestrator
from ..jobs.state import can_submit

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/generator", tags=["generator"])


# ============================================================================
# Response Models
# ============================================================================

class EngineStatusResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")

    status: LoaderState
    version: Optional[str] = None
    error: Optional[str] = None


class GeneratorStateResponse(BaseModel):
    """Everything a view needs to render the generator."""

    model_config = ConfigDict(extra="forbid")

    state: GenerationState
    can_submit: bool
    message: Optional[str] = None
    engine: EngineStatusResponse
    artifact_url: Optional[str] = None
    artifact_mime_type: Optional[str] = None
    last_settings: Optional[RenderedSettings] = None


class ValidationResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")

    valid: bool
    errors: Dict[str, str]


class GenerateResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")

    status: GenerationStatus
    state: GenerationState
    message: Optional[str] = None
    artifact_url: Optional[str] = None
    failure_kind: Optional[FailureKind] = None


# ============================================================================
# Helpers
# ============================================================================

def _orchestrator(request: Request) -> TranscodeOrchestrator:
    return request.app.state.orchestrator


def _state_response(orchestrator: TranscodeOrchestrator) -> GeneratorStateResponse:
    loader = orchestrator.loader
    handle = loader.handle
    artifact = orchestrator.artifact
    artifact_handle = orchestrator.artifact_handle
    return GeneratorStateResponse(
        state=orchestrator.state,
        can_submit=can_submit(orchestrator.state),
        message=orchestrator.message,
        engine=EngineStatusResponse(
            status=loader.state,
            version=handle.version if handle is not None else None,
            error=str(loader.error) if loader.error else None,
        ),
        artifact_url=artifact_handle.url if artifact_handle else None,
        artifact_mime_type=artifact.mime_type if artifact else None,
        last_settings=orchestrator.last_settings,
    )


# ============================================================================
# Endpoints
# ============================================================================

@router.get("/state")
async def get_state(request: Request) -> GeneratorStateResponse:
    return _state_response(_orchestrator(request))


@router.post("/validate")
async def validate_config(request: Request, body: Dict[str, Any]) -> ValidationResponse:
    """
    Validate a draft configuration.

    Each call is a configuration edit: after a success or error the
    displayed message is cleared, the artifact is kept.
    """
    _orchestrator(request).mark_edited()
    _, errors = validate_video_config(body)
    return ValidationResponse(valid=not errors, errors=errors)


@router.post("/generate")
async def generate(request: Request, body: Dict[str, Any]) -> GenerateResponse:
    """
    Validate and submit a generation.

    422: field errors (nothing reaches the engine)
    503: engine not loaded yet
    200: result; status "ignored" if a generation is already running
    """
    config, errors = validate_video_config(body)
    if config is None:
        raise HTTPException(status_code=422, detail={"errors": errors})

    orchestrator = _orchestrator(request)
    try:
        result = await orchestrator.submit(config)
    except EngineNotReadyError as e:
        raise HTTPException(status_code=503, detail=str(e))

    return GenerateResponse(
        status=result.status,
        state=orchestrator.state,
        message=orchestrator.message,
        artifact_url=result.handle.url if result.handle else None,
        failure_kind=result.failure_kind,
    )


@router.get("/download")
async def download(
    request: Request,
    file_name: str = Query(default=DEFAULT_FILE_NAME),
) -> Response:
    """Download the current artifact as `<file_name>.<format>`."""
    name_config, errors = validate_file_name({"file_name": file_name})
    if name_config is None:
        raise HTTPException(status_code=422, detail={"errors": errors})

    payload = request.app.state.artifacts.download(name_config)
    if payload is None:
        raise HTTPException(status_code=404, detail="No video generated yet")

    return Response(
        content=payload.data,
        media_type=payload.mime_type,
        headers={"Content-Disposition": f'attachment; filename="{payload.filename}"'},
    )


@router.post("/engine/reload")
async def reload_engine(request: Request) -> EngineStatusResponse:
    """
    Explicitly re-trigger a failed engine load.

    409 if the engine is loading or already loaded.
    """
    loader = _orchestrator(request).loader
    try:
        loader.reload()
    except EngineLoadError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return EngineStatusResponse(status=loader.state)
