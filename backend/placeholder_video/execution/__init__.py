"""
Transcoding engine.

FFmpeg is the sole engine. It is loaded once per process, lazily, by
the EngineLoader; commands are built by a pure function from a
validated VideoConfig.
"""

from .errors import (
    ExecutionError,
    EngineLoadError,
    EngineNotReadyError,
    TranscodeError,
    AssetUnavailableError,
    OutputMissingError,
)
from .commands import (
    TranscodeCommand,
    build_command,
    escape_drawtext,
    mime_type_for,
    output_file_name,
)
from .engine import FFmpegEngineHandle, find_ffmpeg, load_ffmpeg_engine
from .loader import EngineLoader, LoaderState, ffmpeg_loader, get_engine_loader
from .assets import FontAsset

__all__ = [
    # Errors
    "ExecutionError",
    "EngineLoadError",
    "EngineNotReadyError",
    "TranscodeError",
    "AssetUnavailableError",
    "OutputMissingError",
    # Commands
    "TranscodeCommand",
    "build_command",
    "escape_drawtext",
    "mime_type_for",
    "output_file_name",
    # Engine
    "FFmpegEngineHandle",
    "find_ffmpeg",
    "load_ffmpeg_engine",
    # Loader
    "EngineLoader",
    "LoaderState",
    "ffmpeg_loader",
    "get_engine_loader",
    # Assets
    "FontAsset",
]
