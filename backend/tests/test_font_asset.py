"""
Tests for the overlay font asset.
"""

import httpx
import pytest

from placeholder_video.execution.assets import FontAsset
from placeholder_video.execution.errors import AssetUnavailableError


FONT_URL = "https://fonts.example.test/arial.ttf"


class TestLocalFont:

    @pytest.mark.asyncio
    async def test_reads_once_and_caches(self, font_path, fake_engine):
        asset = FontAsset(str(font_path))

        await asset.write_to(fake_engine)
        font_path.unlink()
        await asset.write_to(fake_engine)

        assert asset.is_cached
        assert fake_engine.calls == ["write:arial.ttf", "write:arial.ttf"]
        assert fake_engine.files["arial.ttf"].endswith(b"fake-truetype")

    @pytest.mark.asyncio
    async def test_missing_file(self, tmp_path):
        asset = FontAsset(str(tmp_path / "missing.ttf"))

        with pytest.raises(AssetUnavailableError):
            await asset.fetch()
        assert not asset.is_cached

    @pytest.mark.asyncio
    async def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.ttf"
        path.write_bytes(b"")

        with pytest.raises(AssetUnavailableError, match="empty"):
            await FontAsset(str(path)).fetch()


class TestRemoteFont:

    @pytest.mark.asyncio
    async def test_downloads_once(self):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(str(request.url))
            return httpx.Response(200, content=b"remote-font")

        asset = FontAsset(FONT_URL, transport=httpx.MockTransport(handler))

        assert await asset.fetch() == b"remote-font"
        assert await asset.fetch() == b"remote-font"
        assert requests == [FONT_URL]

    @pytest.mark.asyncio
    async def test_http_error(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(404))
        asset = FontAsset(FONT_URL, transport=transport)

        with pytest.raises(AssetUnavailableError, match="Cannot download font"):
            await asset.fetch()
