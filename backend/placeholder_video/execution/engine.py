"""
FFmpeg transcoding engine.

The engine is an FFmpeg binary paired with a private working directory
(its namespace). Assets are written into the namespace, commands run
with the namespace as cwd, outputs are read back from it.

Design rules:
- One subprocess per exec call
- Capture stderr for audit; log the full command string
- Non-zero exit code = TranscodeError
- Handle is created only by the loader and never mutated afterwards
"""

import asyncio
import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Optional, Sequence

from ..settings import GeneratorSettings
from .errors import EngineLoadError, OutputMissingError, TranscodeError

logger = logging.getLogger(__name__)

# Global flags prefixed to every command
ENGINE_FLAGS = ("-hide_banner", "-nostdin", "-y")

STDERR_TAIL_CHARS = 2000

COMMON_FFMPEG_PATHS = [
    "/usr/local/bin/ffmpeg",
    "/usr/bin/ffmpeg",
    "/opt/homebrew/bin/ffmpeg",
]


class FFmpegEngineHandle:
    """
    Loaded transcoding engine.

    Exactly one instance per loader; shared by every submission.
    """

    def __init__(
        self,
        ffmpeg_path: str,
        workdir: Path,
        version: str = "",
        timeout: Optional[float] = None,
    ):
        self._ffmpeg_path = ffmpeg_path
        self._workdir = Path(workdir)
        self._version = version
        self._timeout = timeout

    @property
    def ffmpeg_path(self) -> str:
        return self._ffmpeg_path

    @property
    def workdir(self) -> Path:
        return self._workdir

    @property
    def version(self) -> str:
        return self._version

    def _resolve(self, name: str) -> Path:
        """Map a namespace entry to a path, rejecting anything outside it."""
        candidate = (self._workdir / name).resolve()
        if candidate.parent != self._workdir.resolve():
            raise ValueError(f"Invalid namespace entry: {name!r}")
        return candidate

    async def write_file(self, name: str, data: bytes) -> None:
        """Write (or overwrite) a file in the namespace."""
        path = self._resolve(name)
        await asyncio.to_thread(path.write_bytes, data)

    async def read_file(self, name: str) -> bytes:
        """
        Read a file back from the namespace.

        Raises:
            OutputMissingError: if the file is missing or empty
        """
        path = self._resolve(name)
        try:
            data = await asyncio.to_thread(path.read_bytes)
        except FileNotFoundError:
            raise OutputMissingError(f"Engine output '{name}' was not created")
        if not data:
            raise OutputMissingError(f"Engine output '{name}' is empty")
        return data

    async def delete_file(self, name: str) -> None:
        path = self._resolve(name)
        await asyncio.to_thread(path.unlink, missing_ok=True)

    async def cleanup(self) -> None:
        """Remove the working namespace and everything in it."""
        try:
            await asyncio.to_thread(shutil.rmtree, self._workdir)
        except FileNotFoundError:
            return
        except OSError as e:
            logger.warning(f"[FFmpeg] Could not remove namespace {self._workdir}: {e}")
            return
        logger.info(f"[FFmpeg] Removed namespace {self._workdir}")

    async def exec(self, args: Sequence[str]) -> None:
        """
        Run FFmpeg with the given arguments inside the namespace.

        Raises:
            TranscodeError: on non-zero exit, timeout, or spawn failure
        """
        cmd = [self._ffmpeg_path, *ENGINE_FLAGS, *args]
        logger.info(f"[FFmpeg] Executing: {' '.join(cmd)}")

        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                cwd=str(self._workdir),
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise TranscodeError(f"Failed to start FFmpeg: {e}")

        logger.info(f"[FFmpeg] Started PID {process.pid}")

        try:
            _, stderr = await asyncio.wait_for(process.communicate(), timeout=self._timeout)
        except asyncio.TimeoutError:
            logger.warning(f"[FFmpeg] PID {process.pid} exceeded {self._timeout}s, killing")
            process.kill()
            await process.wait()
            raise TranscodeError(f"FFmpeg timed out after {self._timeout}s")

        exit_code = process.returncode
        logger.info(f"[FFmpeg] PID {process.pid} exited with code {exit_code}")

        if exit_code != 0:
            stderr_text = stderr.decode(errors="replace").strip() if stderr else ""
            tail = stderr_text[-STDERR_TAIL_CHARS:]
            logger.error(f"[FFmpeg] Failed: {tail or 'no stderr'}")
            raise TranscodeError("FFmpeg command failed", exit_code=exit_code, stderr=tail)

    def __repr__(self) -> str:
        return f"FFmpegEngineHandle(ffmpeg_path={self._ffmpeg_path!r}, workdir={str(self._workdir)!r})"


def find_ffmpeg(override: Optional[str] = None) -> Optional[str]:
    """
    Find ffmpeg binary path.

    Resolution order:
    1. Explicit override (settings / PLACEHOLDER_FFMPEG_PATH)
    2. PATH lookup
    3. Common install locations
    """
    if override:
        if os.path.isfile(override) and os.access(override, os.X_OK):
            return override
        return shutil.which(override)

    ffmpeg_path = shutil.which("ffmpeg")
    if ffmpeg_path:
        return ffmpeg_path

    for path in COMMON_FFMPEG_PATHS:
        if os.path.isfile(path) and os.access(path, os.X_OK):
            return path

    return None


async def _probe_version(ffmpeg_path: str) -> str:
    """Run `ffmpeg -version` and return its first line."""
    try:
        process = await asyncio.create_subprocess_exec(
            ffmpeg_path,
            "-version",
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        stdout, _ = await process.communicate()
    except OSError as e:
        raise EngineLoadError(f"Cannot run {ffmpeg_path}: {e}")

    if process.returncode != 0:
        raise EngineLoadError(f"{ffmpeg_path} -version exited with code {process.returncode}")

    lines = stdout.decode(errors="replace").splitlines()
    return lines[0].strip() if lines else ""


async def load_ffmpeg_engine(settings: GeneratorSettings) -> FFmpegEngineHandle:
    """
    Initialize the FFmpeg engine.

    Raises:
        EngineLoadError: if the binary is missing, broken, or the
            working namespace cannot be created
    """
    ffmpeg_path = find_ffmpeg(settings.ffmpeg_path)
    if not ffmpeg_path:
        raise EngineLoadError("FFmpeg is not installed or not in PATH")

    version = await _probe_version(ffmpeg_path)

    try:
        settings.workdir_root.mkdir(parents=True, exist_ok=True)
        workdir = Path(tempfile.mkdtemp(prefix="placeholder_video_", dir=settings.workdir_root))
    except OSError as e:
        raise EngineLoadError(f"Cannot create engine working directory: {e}")

    logger.info(f"[FFmpeg] Loaded {version or ffmpeg_path} (namespace: {workdir})")
    return FFmpegEngineHandle(
        ffmpeg_path=ffmpeg_path,
        workdir=workdir,
        version=version,
        timeout=settings.engine_timeout or None,
    )
