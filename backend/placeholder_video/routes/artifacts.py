"""
Artifact preview endpoint.

Serves a live artifact handle. Revoked handles are gone for good.
"""

import logging

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import Response

from ..deliver.errors import ArtifactResourceError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/artifacts", tags=["artifacts"])


@router.get("/{token}")
async def get_artifact(request: Request, token: str) -> Response:
    """Stream the artifact behind a handle, inline, for preview playback."""
    try:
        artifact = request.app.state.artifacts.registry.resolve(token)
    except ArtifactResourceError as e:
        logger.debug(f"[Artifacts] {e}")
        raise HTTPException(status_code=404, detail="Artifact not found")

    return Response(content=artifact.data, media_type=artifact.mime_type)
