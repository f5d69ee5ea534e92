"""
Shared fixtures for generator tests.

FakeEngineHandle stands in for FFmpeg: it keeps an in-memory namespace,
records every call in order, and "renders" by writing a small payload
to the output name (the last command argument).
"""

import asyncio
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import pytest

from placeholder_video.deliver.artifacts import ArtifactLifecycleManager
from placeholder_video.deliver.models import VideoConfig
from placeholder_video.execution.assets import FontAsset
from placeholder_video.execution.errors import OutputMissingError
from placeholder_video.execution.loader import EngineLoader
from placeholder_video.jobs.orchestrator import TranscodeOrchestrator


FONT_BYTES = b"\x00\x01\x00\x00fake-truetype"


class FakeEngineHandle:
    """In-memory engine with call recording and failure injection."""

    def __init__(self):
        self.files: Dict[str, bytes] = {}
        self.calls: List[str] = []
        self.commands: List[List[str]] = []
        self.version = "ffmpeg version fake"
        self.fail_exec: Optional[Exception] = None
        self.produce_output = True
        self.gate: Optional[asyncio.Event] = None
        self.on_exec = None

    async def write_file(self, name: str, data: bytes) -> None:
        self.calls.append(f"write:{name}")
        self.files[name] = data

    async def exec(self, args: Sequence[str]) -> None:
        self.calls.append("exec")
        self.commands.append(list(args))
        if self.on_exec is not None:
            self.on_exec()
        if self.gate is not None:
            await self.gate.wait()
        if self.fail_exec is not None:
            raise self.fail_exec
        if self.produce_output:
            output = args[-1]
            self.files[output] = f"rendered:{output}".encode()

    async def read_file(self, name: str) -> bytes:
        self.calls.append(f"read:{name}")
        if name not in self.files:
            raise OutputMissingError(f"Engine output '{name}' was not created")
        return self.files[name]

    async def delete_file(self, name: str) -> None:
        self.calls.append(f"delete:{name}")
        self.files.pop(name, None)

    async def cleanup(self) -> None:
        self.calls.append("cleanup")
        self.files.clear()


@pytest.fixture
def fake_engine() -> FakeEngineHandle:
    return FakeEngineHandle()


@pytest.fixture
def font_path(tmp_path: Path) -> Path:
    path = tmp_path / "reference.ttf"
    path.write_bytes(FONT_BYTES)
    return path


@pytest.fixture
def font_asset(font_path: Path) -> FontAsset:
    return FontAsset(str(font_path))


@pytest.fixture
def artifacts() -> ArtifactLifecycleManager:
    return ArtifactLifecycleManager()


@pytest.fixture
def orchestrator(fake_engine, artifacts, font_asset) -> TranscodeOrchestrator:
    """Orchestrator over an already-loaded fake engine."""
    return TranscodeOrchestrator(
        loader=EngineLoader.preloaded(fake_engine),
        artifacts=artifacts,
        font=font_asset,
    )


@pytest.fixture
def webm_config() -> VideoConfig:
    return VideoConfig(
        width=1280,
        height=720,
        text="Hi",
        background_color="#FF0000",
        format="webm",
    )


@pytest.fixture
def mp4_config() -> VideoConfig:
    return VideoConfig()
