"""
Generator settings.

All tunables are read from the environment once, at app creation.
Environment overrides are OPTIONAL; defaults work on any machine with
FFmpeg on PATH and network access for the reference font.
"""

import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


ENV_FFMPEG_PATH = "PLACEHOLDER_FFMPEG_PATH"
ENV_FONT_SOURCE = "PLACEHOLDER_FONT_SOURCE"
ENV_WORKDIR_ROOT = "PLACEHOLDER_WORKDIR_ROOT"
ENV_IDLE_DELAY = "PLACEHOLDER_ENGINE_IDLE_DELAY"
ENV_ENGINE_TIMEOUT = "PLACEHOLDER_ENGINE_TIMEOUT"
ENV_LOG_LEVEL = "PLACEHOLDER_LOG_LEVEL"

DEFAULT_FONT_SOURCE = "https://raw.githubusercontent.com/ffmpegwasm/testdata/master/arial.ttf"
DEFAULT_ENGINE_TIMEOUT = 120.0


@dataclass(frozen=True)
class GeneratorSettings:
    """
    Immutable runtime configuration.

    ffmpeg_path: explicit binary, skips discovery when set
    font_source: local path or http(s) URL of the overlay font
    workdir_root: parent directory for the engine's working namespace
    idle_delay: seconds the engine load yields before starting
    engine_timeout: upper bound for a single transcode, in seconds
    """

    ffmpeg_path: Optional[str] = None
    font_source: str = DEFAULT_FONT_SOURCE
    workdir_root: Path = Path(tempfile.gettempdir())
    idle_delay: float = 0.0
    engine_timeout: float = DEFAULT_ENGINE_TIMEOUT
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "GeneratorSettings":
        """Build settings from PLACEHOLDER_* environment variables."""
        workdir_root = os.environ.get(ENV_WORKDIR_ROOT)
        return cls(
            ffmpeg_path=os.environ.get(ENV_FFMPEG_PATH) or None,
            font_source=os.environ.get(ENV_FONT_SOURCE, DEFAULT_FONT_SOURCE),
            workdir_root=Path(workdir_root) if workdir_root else Path(tempfile.gettempdir()),
            idle_delay=_float_env(ENV_IDLE_DELAY, 0.0),
            engine_timeout=_float_env(ENV_ENGINE_TIMEOUT, DEFAULT_ENGINE_TIMEOUT),
            log_level=os.environ.get(ENV_LOG_LEVEL, "INFO").upper(),
        )


def _float_env(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")
    if value < 0:
        raise ValueError(f"{name} must not be negative, got {raw!r}")
    return value
