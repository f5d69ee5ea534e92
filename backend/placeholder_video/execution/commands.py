"""
Transcode command construction.

Maps a VideoConfig to the ordered FFmpeg argument list.

Design rules:
- Pure: no I/O, no clock, no environment
- Same config always yields the same tuple, in the same order
- Binary path and global flags are NOT part of the command;
  the engine handle prefixes them
"""

from typing import Dict, Tuple

from ..deliver.models import MIME_TYPES, VideoConfig, VideoFormat


TranscodeCommand = Tuple[str, ...]

DURATION_SECONDS = 5
FONT_FILE = "arial.ttf"
FONT_SIZE = 72
FONT_COLOR = "white"
PIXEL_FORMAT = "yuv420p"

# Codec family per container.
# mp4 trades quality for speed with a preset; webm targets a bitrate instead.
CODEC_ARGS: Dict[VideoFormat, Tuple[str, ...]] = {
    VideoFormat.MP4: ("-c:v", "libx264", "-preset", "ultrafast"),
    VideoFormat.WEBM: ("-c:v", "libvpx-vp9", "-b:v", "1M"),
}


# FFmpeg unescapes a -vf value twice: once when splitting the filtergraph,
# once when splitting the filter's key=value options. Both passes treat
# backslash and single quote as escapes and trim unescaped outer whitespace.
OPTION_SPECIAL = "\\':"
GRAPH_SPECIAL = "\\'[],;"
WHITESPACE = " \t\n\r"


def _backslash(value: str, special: str) -> str:
    return "".join("\\" + c if c in special else c for c in value)


def escape_drawtext(text: str) -> str:
    """
    Escape text for a drawtext option inside a -vf filtergraph.

    The overlay runs with expansion=none, so `%` and backslash reach
    drawtext literally once both parser passes are undone.
    """
    start = len(text) - len(text.lstrip(WHITESPACE))
    end = start + len(text.strip(WHITESPACE))

    option_value = "".join(
        "\\" + c if c in OPTION_SPECIAL or not start <= i < end else c
        for i, c in enumerate(text)
    )
    return _backslash(option_value, GRAPH_SPECIAL)


def output_file_name(video_format: VideoFormat) -> str:
    """Name of the file the engine writes into its namespace."""
    return f"output.{VideoFormat(video_format).value}"


def mime_type_for(video_format: VideoFormat) -> str:
    return MIME_TYPES[VideoFormat(video_format)]


def build_command(config: VideoConfig) -> TranscodeCommand:
    """
    Build FFmpeg arguments for a placeholder clip.

    Order:
        lavfi color source -> drawtext overlay -> codec flags
        -> pixel format -> duration -> output file
    """
    color = config.background_color.lstrip("#")
    source = f"color=c={color}:s={config.resolution}:d={DURATION_SECONDS}"

    overlay = (
        f"drawtext=fontfile={FONT_FILE}"
        f":text={escape_drawtext(config.text)}"
        ":expansion=none"
        f":fontsize={FONT_SIZE}"
        f":fontcolor={FONT_COLOR}"
        f":x=(w-text_w)/2:y=(h-text_h)/2"
    )

    args = ["-f", "lavfi", "-i", source]
    args.extend(["-vf", overlay])
    args.extend(CODEC_ARGS[config.format])
    args.extend(["-pix_fmt", PIXEL_FORMAT])
    args.extend(["-t", str(DURATION_SECONDS)])
    args.append(output_file_name(config.format))

    return tuple(args)
