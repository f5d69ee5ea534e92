"""
FFmpeg Integration (Guarded)

End-to-end generation through the real FFmpeg engine.

Tests:
1. The engine loads and reports a version
2. An MP4 placeholder is rendered with the drawtext overlay
3. The artifact is non-empty and the namespace is removed on close
4. Overlay text with quotes, percent signs, colons and backslashes renders

Guarded: Skipped if FFmpeg (with drawtext and libx264) or a local
TrueType font is not available.
"""

import shutil
import subprocess
from pathlib import Path

import pytest

from placeholder_video.deliver.artifacts import ArtifactLifecycleManager
from placeholder_video.deliver.models import VideoConfig
from placeholder_video.execution.assets import FontAsset
from placeholder_video.execution.loader import ffmpeg_loader
from placeholder_video.jobs.models import GenerationState
from placeholder_video.jobs.orchestrator import TranscodeOrchestrator
from placeholder_video.settings import GeneratorSettings


FONT_CANDIDATES = [
    Path("/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf"),
    Path("/usr/share/fonts/dejavu/DejaVuSans.ttf"),
    Path("/Library/Fonts/Arial.ttf"),
    Path("/System/Library/Fonts/Supplemental/Arial.ttf"),
]


def _local_font():
    for path in FONT_CANDIDATES:
        if path.exists():
            return path
    return None


def _ffmpeg_supports(flag: str, name: str) -> bool:
    ffmpeg = shutil.which("ffmpeg")
    if ffmpeg is None:
        return False
    try:
        result = subprocess.run(
            [ffmpeg, "-hide_banner", flag],
            capture_output=True,
            text=True,
            timeout=10,
        )
    except (OSError, subprocess.TimeoutExpired):
        return False
    return name in result.stdout


pytestmark = [
    pytest.mark.e2e,
    pytest.mark.skipif(_local_font() is None, reason="no local TrueType font"),
    pytest.mark.skipif(
        not (_ffmpeg_supports("-filters", "drawtext") and _ffmpeg_supports("-encoders", "libx264")),
        reason="FFmpeg with drawtext and libx264 not available",
    ),
]


def _orchestrator(tmp_path):
    loader = ffmpeg_loader(GeneratorSettings(workdir_root=tmp_path, engine_timeout=60))
    orchestrator = TranscodeOrchestrator(
        loader=loader,
        artifacts=ArtifactLifecycleManager(),
        font=FontAsset(str(_local_font())),
    )
    return loader, orchestrator


@pytest.mark.asyncio
async def test_generate_mp4_with_real_ffmpeg(tmp_path):
    loader, orchestrator = _orchestrator(tmp_path)

    handle = await loader.acquire()
    assert handle.version.startswith("ffmpeg version")
    assert orchestrator.state == GenerationState.IDLE

    result = await orchestrator.submit(VideoConfig(width=320, height=240))

    assert result.ok, result.failure_reason
    assert result.artifact.size_bytes > 0
    assert result.artifact.mime_type == "video/mp4"
    assert not (handle.workdir / "output.mp4").exists()

    await loader.close()
    assert not handle.workdir.exists()


@pytest.mark.asyncio
@pytest.mark.parametrize("text", [
    "It's 100% a:b\\c",
    "[x];y,z",
    "%{localtime}",
])
async def test_overlay_text_with_special_characters(tmp_path, text):
    loader, orchestrator = _orchestrator(tmp_path)
    await loader.acquire()

    result = await orchestrator.submit(VideoConfig(width=320, height=240, text=text))

    assert result.ok, result.failure_reason
    assert orchestrator.state == GenerationState.SUCCESS
    await loader.close()
