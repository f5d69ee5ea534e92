"""
Generation orchestrator.

Drives one placeholder-video generation at a time:

    write font -> exec command -> read output -> hand artifact off

Design rules:
- At most one transcode in flight; GENERATING is entered before the
  first await, so a concurrent submit always sees it
- Submitting before the engine is loaded raises EngineNotReadyError
  and touches nothing
- Every engine fault is converted into a FAILED GenerationResult;
  nothing raised by the engine crosses submit()
- No retries; a failed generation needs an explicit resubmission
"""

import logging
from datetime import datetime
from typing import Optional, Tuple

from ..deliver.artifacts import ArtifactHandle, ArtifactLifecycleManager
from ..deliver.errors import ArtifactResourceError
from ..deliver.models import Artifact, RenderedSettings, VideoConfig
from ..execution.assets import FontAsset
from ..execution.commands import build_command, output_file_name
from ..execution.engine import FFmpegEngineHandle
from ..execution.errors import (
    AssetUnavailableError,
    EngineNotReadyError,
    OutputMissingError,
    TranscodeError,
)
from ..execution.loader import EngineLoader
from .models import (
    FAILURE_MESSAGE,
    SUCCESS_MESSAGE,
    FailureKind,
    GenerationResult,
    GenerationState,
    GenerationStatus,
)
from .state import is_outcome, validate_transition

logger = logging.getLogger(__name__)


def classify_failure(exc: BaseException) -> FailureKind:
    """Map an exception raised during generation to a failure tag."""
    if isinstance(exc, AssetUnavailableError):
        return FailureKind.ASSET
    if isinstance(exc, OutputMissingError):
        return FailureKind.OUTPUT
    if isinstance(exc, TranscodeError):
        return FailureKind.TRANSCODE
    if isinstance(exc, ArtifactResourceError):
        return FailureKind.RESOURCE
    return FailureKind.INTERNAL


class TranscodeOrchestrator:
    """
    Generator state machine.

    Owns the GenerationState, the displayed message and the settings of
    the last successful generation. The artifact itself is owned by the
    ArtifactLifecycleManager.
    """

    def __init__(
        self,
        loader: EngineLoader,
        artifacts: ArtifactLifecycleManager,
        font: FontAsset,
    ):
        self._loader = loader
        self._artifacts = artifacts
        self._font = font

        self._state = GenerationState.IDLE if loader.is_ready else GenerationState.LOADING
        self._message: Optional[str] = None
        self._last_settings: Optional[RenderedSettings] = None

        loader.add_ready_callback(self._on_engine_ready)

    @property
    def state(self) -> GenerationState:
        return self._state

    @property
    def is_busy(self) -> bool:
        return self._state == GenerationState.GENERATING

    @property
    def message(self) -> Optional[str]:
        """Message to display; cleared on submit and on edit."""
        return self._message

    @property
    def last_settings(self) -> Optional[RenderedSettings]:
        """Width/height/format of the last successful generation."""
        return self._last_settings

    @property
    def artifact(self) -> Optional[Artifact]:
        return self._artifacts.artifact

    @property
    def artifact_handle(self) -> Optional[ArtifactHandle]:
        return self._artifacts.handle

    @property
    def loader(self) -> EngineLoader:
        return self._loader

    async def submit(self, config: VideoConfig) -> GenerationResult:
        """
        Generate a placeholder video for a validated config.

        Returns:
            GenerationResult: SUCCESS with artifact, FAILED with a tagged
            failure, or IGNORED if a generation is already running

        Raises:
            EngineNotReadyError: if the engine handle has not resolved
        """
        if self._state == GenerationState.GENERATING:
            logger.info("[Generator] Generation in progress, submission ignored")
            return GenerationResult(status=GenerationStatus.IGNORED, completed_at=datetime.now())

        engine = self._loader.handle
        if engine is None:
            error = self._loader.error
            raise EngineNotReadyError(str(error) if error else "")

        if self._state == GenerationState.LOADING:
            self._transition(GenerationState.IDLE)

        self._transition(GenerationState.GENERATING)
        self._message = None
        started_at = datetime.now()
        logger.info(
            f"[Generator] Generating {config.resolution} {config.format.value} "
            f"(text: {config.text!r}, color: {config.background_color})"
        )

        try:
            artifact, handle = await self._generate(engine, config)
        except Exception as e:
            kind = classify_failure(e)
            logger.exception(f"[Generator] Generation failed [{kind.value}]: {e}")
            self._transition(GenerationState.ERROR)
            self._message = FAILURE_MESSAGE
            result = GenerationResult(
                status=GenerationStatus.FAILED,
                failure_kind=kind,
                failure_reason=str(e),
                message=FAILURE_MESSAGE,
                started_at=started_at,
                completed_at=datetime.now(),
            )
        else:
            self._transition(GenerationState.SUCCESS)
            self._message = SUCCESS_MESSAGE
            self._last_settings = RenderedSettings.from_config(config)
            result = GenerationResult(
                status=GenerationStatus.SUCCESS,
                artifact=artifact,
                handle=handle,
                message=SUCCESS_MESSAGE,
                started_at=started_at,
                completed_at=datetime.now(),
            )

        logger.info(f"[Generator] {result.summary()}")
        return result

    def mark_edited(self) -> None:
        """
        Record a configuration edit.

        After SUCCESS or ERROR this clears the message and returns to
        IDLE. The current artifact stays live until the next success.
        """
        if not is_outcome(self._state):
            return
        self._transition(GenerationState.IDLE)
        self._message = None

    async def _generate(
        self,
        engine: FFmpegEngineHandle,
        config: VideoConfig,
    ) -> Tuple[Artifact, ArtifactHandle]:
        # Strict order: asset write -> exec -> read
        await self._font.write_to(engine)
        await engine.exec(build_command(config))

        output_name = output_file_name(config.format)
        data = await engine.read_file(output_name)

        try:
            await engine.delete_file(output_name)
        except OSError as e:
            logger.warning(f"[Generator] Could not remove {output_name} from engine namespace: {e}")

        artifact = Artifact(data=data, format=config.format)
        handle = self._artifacts.set(artifact)
        return artifact, handle

    def _transition(self, target: GenerationState) -> None:
        validate_transition(self._state, target)
        logger.debug(f"[Generator] {self._state.value} -> {target.value}")
        self._state = target

    def _on_engine_ready(self, handle: FFmpegEngineHandle) -> None:
        if self._state == GenerationState.LOADING:
            self._transition(GenerationState.IDLE)
