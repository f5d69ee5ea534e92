"""
Artifact lifecycle.

A successful transcode yields one Artifact. Consumers never see the
artifact directly; they get a handle (token + preview URL) registered in
a HandleRegistry, the server-side equivalent of an object URL table.

CRITICAL RULES:
1. At most ONE live handle per manager at any time
2. The previous handle is revoked BEFORE the new one is registered
3. clear()/close() revokes the current handle
4. Download extension always follows the artifact format, never user text
"""

import logging
import uuid
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict

from .errors import ArtifactResourceError
from .models import Artifact, Download, FileNameConfig

logger = logging.getLogger(__name__)

ARTIFACT_URL_PREFIX = "/artifacts"


class ArtifactHandle(BaseModel):
    """Live resource handle for one artifact."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    token: str
    url: str


class HandleRegistry:
    """
    Table of live artifact handles.

    Handles resolve to their artifact until revoked.
    """

    def __init__(self, url_prefix: str = ARTIFACT_URL_PREFIX):
        self._url_prefix = url_prefix.rstrip("/")
        self._artifacts: Dict[str, Artifact] = {}

    def create(self, artifact: Artifact) -> ArtifactHandle:
        token = uuid.uuid4().hex
        if token in self._artifacts:
            raise ArtifactResourceError(token, "token collision")
        self._artifacts[token] = artifact
        return ArtifactHandle(token=token, url=f"{self._url_prefix}/{token}")

    def resolve(self, token: str) -> Artifact:
        """
        Raises:
            ArtifactResourceError: if the handle is unknown or revoked
        """
        artifact = self._artifacts.get(token)
        if artifact is None:
            raise ArtifactResourceError(token, "not found or revoked")
        return artifact

    def revoke(self, token: str) -> None:
        """
        Raises:
            ArtifactResourceError: if the handle is not live
        """
        if self._artifacts.pop(token, None) is None:
            raise ArtifactResourceError(token, "already revoked")

    @property
    def live_count(self) -> int:
        return len(self._artifacts)


class ArtifactLifecycleManager:
    """
    Owns the current artifact and its single live handle.

    Usable as a context manager; exit revokes the handle.
    """

    def __init__(self, registry: Optional[HandleRegistry] = None):
        self._registry = registry or HandleRegistry()
        self._artifact: Optional[Artifact] = None
        self._handle: Optional[ArtifactHandle] = None

    @property
    def registry(self) -> HandleRegistry:
        return self._registry

    @property
    def artifact(self) -> Optional[Artifact]:
        return self._artifact

    @property
    def handle(self) -> Optional[ArtifactHandle]:
        return self._handle

    def set(self, artifact: Artifact) -> ArtifactHandle:
        """
        Replace the current artifact.

        Revokes the previous handle first, then registers the new one.

        Raises:
            ArtifactResourceError: if revocation or registration fails
        """
        self._revoke_current()
        handle = self._registry.create(artifact)
        self._artifact = artifact
        self._handle = handle
        logger.info(
            f"[Artifacts] Issued {handle.url} ({artifact.mime_type}, {artifact.size_bytes} bytes)"
        )
        return handle

    def clear(self) -> None:
        """Drop the current artifact and revoke its handle."""
        self._revoke_current()
        self._artifact = None

    def close(self) -> None:
        self.clear()

    def download(self, file_name: FileNameConfig) -> Optional[Download]:
        """
        Compose the download for the current artifact.

        Returns:
            Download named `<file_name>.<format>`, or None without an artifact
        """
        if self._artifact is None:
            return None
        return Download(
            filename=f"{file_name.file_name}.{self._artifact.format.value}",
            mime_type=self._artifact.mime_type,
            data=self._artifact.data,
        )

    def _revoke_current(self) -> None:
        if self._handle is None:
            return
        handle, self._handle = self._handle, None
        self._registry.revoke(handle.token)
        logger.debug(f"[Artifacts] Revoked {handle.url}")

    def __enter__(self) -> "ArtifactLifecycleManager":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
