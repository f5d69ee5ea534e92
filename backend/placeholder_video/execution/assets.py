"""
Static assets required by the transcode command.

The drawtext overlay references a fixed font file inside the engine
namespace. The font is fetched once (local path or http(s) URL) and
written into the namespace before every exec. Writing is idempotent.
"""

import asyncio
import logging
from pathlib import Path
from typing import Optional

import httpx

from .commands import FONT_FILE
from .engine import FFmpegEngineHandle
from .errors import AssetUnavailableError

logger = logging.getLogger(__name__)

FETCH_TIMEOUT_SECONDS = 30.0


class FontAsset:
    """Reference font, fetched lazily and cached in memory."""

    def __init__(
        self,
        source: str,
        file_name: str = FONT_FILE,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.source = source
        self.file_name = file_name
        self._transport = transport
        self._data: Optional[bytes] = None

    @property
    def is_cached(self) -> bool:
        return self._data is not None

    async def fetch(self) -> bytes:
        """
        Get the font bytes, downloading or reading them on first use.

        Raises:
            AssetUnavailableError: if the source cannot be read
        """
        if self._data is not None:
            return self._data

        if self.source.startswith(("http://", "https://")):
            data = await self._download()
        else:
            data = await self._read_local()

        if not data:
            raise AssetUnavailableError(f"Font source is empty: {self.source}")

        logger.info(f"[Assets] Fetched font {self.file_name} ({len(data)} bytes) from {self.source}")
        self._data = data
        return data

    async def write_to(self, handle: FFmpegEngineHandle) -> None:
        """Place the font into the engine namespace."""
        data = await self.fetch()
        try:
            await handle.write_file(self.file_name, data)
        except OSError as e:
            raise AssetUnavailableError(f"Cannot write {self.file_name} into engine namespace: {e}")

    async def _download(self) -> bytes:
        try:
            async with httpx.AsyncClient(
                timeout=FETCH_TIMEOUT_SECONDS,
                follow_redirects=True,
                transport=self._transport,
            ) as client:
                response = await client.get(self.source)
                response.raise_for_status()
                return response.content
        except httpx.HTTPError as e:
            raise AssetUnavailableError(f"Cannot download font from {self.source}: {e}")

    async def _read_local(self) -> bytes:
        try:
            return await asyncio.to_thread(Path(self.source).read_bytes)
        except OSError as e:
            raise AssetUnavailableError(f"Cannot read font {self.source}: {e}")
