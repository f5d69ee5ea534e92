"""
Engine-specific errors.

All errors are non-fatal to the application.
They indicate that one generation (or the engine load) failed; the
service keeps running and the operator can resubmit.
"""

from typing import Optional


class ExecutionError(Exception):
    """
    Base exception for engine failures.

    Every fault raised below the orchestrator inherits from this.
    """

    pass


class EngineLoadError(ExecutionError):
    """
    The transcoding engine could not be initialized.

    Raised when:
    - FFmpeg binary is not found
    - `ffmpeg -version` fails
    - Working namespace cannot be created
    """

    pass


class EngineNotReadyError(ExecutionError):
    """Raised when a generation is submitted before the engine has loaded."""

    def __init__(self, reason: str = ""):
        self.reason = reason
        message = "Transcoding engine is not loaded yet"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class TranscodeError(ExecutionError):
    """
    Engine reported a failure while running a command.

    Covers bad parameters, resource exhaustion and codec faults.
    """

    def __init__(
        self,
        message: str,
        exit_code: Optional[int] = None,
        stderr: Optional[str] = None,
    ):
        self.exit_code = exit_code
        self.stderr = stderr
        if exit_code is not None:
            message += f" (exit code: {exit_code})"
        super().__init__(message)


class AssetUnavailableError(TranscodeError):
    """The overlay font could not be fetched or written into the namespace."""

    pass


class OutputMissingError(TranscodeError):
    """
    Engine exited cleanly but the named output cannot be read.

    Raised when the output file is missing or zero bytes.
    """

    pass
