"""
Tests for the single-flight engine loader.

Tests:
- Concurrent acquires share one future and one load
- Deferred start (schedule does not load synchronously)
- Sticky failure and explicit reload
- Ready callbacks
"""

import asyncio

import pytest

from placeholder_video.execution.errors import EngineLoadError
from placeholder_video.execution.loader import EngineLoader, LoaderState


class CountingLoad:
    """Load function that counts calls and can be held open."""

    def __init__(self, result=None, error=None):
        self.calls = 0
        self.result = result if result is not None else object()
        self.error = error
        self.release = asyncio.Event()
        self.release.set()

    async def __call__(self):
        self.calls += 1
        await self.release.wait()
        if self.error is not None:
            raise self.error
        return self.result


class TestSingleFlight:

    @pytest.mark.asyncio
    async def test_concurrent_acquires_share_future(self):
        load = CountingLoad()
        load.release.clear()
        loader = EngineLoader(load_fn=load)

        first = loader.acquire()
        second = loader.acquire()
        assert first is second
        assert loader.state == LoaderState.LOADING

        load.release.set()
        handle_a, handle_b = await asyncio.gather(first, second)

        assert handle_a is handle_b is load.result
        assert load.calls == 1
        assert loader.load_count == 1

    @pytest.mark.asyncio
    async def test_ready_handle_is_cached(self):
        load = CountingLoad()
        loader = EngineLoader(load_fn=load)

        handle = await loader.acquire()
        assert loader.is_ready
        assert loader.handle is handle

        again = loader.acquire()
        assert again.done()
        assert await again is handle
        assert load.calls == 1

    @pytest.mark.asyncio
    async def test_handle_none_until_resolved(self):
        load = CountingLoad()
        load.release.clear()
        loader = EngineLoader(load_fn=load)

        future = loader.acquire()
        await asyncio.sleep(0)
        assert loader.handle is None

        load.release.set()
        await future
        assert loader.handle is load.result

    @pytest.mark.asyncio
    async def test_ready_as_soon_as_load_task_finishes(self):
        load = CountingLoad()
        loader = EngineLoader(load_fn=load)

        task = loader.acquire()
        while not task.done():
            await asyncio.sleep(0)

        # No further event loop iteration needed
        assert loader.state == LoaderState.READY
        assert loader.handle is load.result
        assert await loader.acquire() is load.result

    @pytest.mark.asyncio
    async def test_failed_as_soon_as_load_task_finishes(self):
        load = CountingLoad(error=EngineLoadError("boom"))
        loader = EngineLoader(load_fn=load)

        task = loader.acquire()
        while not task.done():
            await asyncio.sleep(0)

        assert loader.state == LoaderState.FAILED
        assert isinstance(loader.error, EngineLoadError)
        with pytest.raises(EngineLoadError):
            await task

    @pytest.mark.asyncio
    async def test_schedule_defers_load(self):
        load = CountingLoad()
        loader = EngineLoader(load_fn=load, idle_delay=0.01)

        loader.schedule()
        assert loader.state == LoaderState.LOADING
        assert load.calls == 0

        await loader.acquire()
        assert load.calls == 1

        loader.schedule()
        assert load.calls == 1

    @pytest.mark.asyncio
    async def test_preloaded_loader(self):
        handle = object()
        loader = EngineLoader.preloaded(handle)

        assert loader.is_ready
        assert loader.load_count == 0
        assert await loader.acquire() is handle


class TestLoadFailure:

    @pytest.mark.asyncio
    async def test_failure_is_sticky(self):
        load = CountingLoad(error=EngineLoadError("FFmpeg is not installed or not in PATH"))
        loader = EngineLoader(load_fn=load)

        future = loader.acquire()
        with pytest.raises(EngineLoadError):
            await future

        assert loader.state == LoaderState.FAILED
        assert loader.handle is None
        assert isinstance(loader.error, EngineLoadError)

        # No automatic retry
        assert loader.acquire() is future
        loader.schedule()
        await asyncio.sleep(0)
        assert load.calls == 1

    @pytest.mark.asyncio
    async def test_reload_after_failure(self):
        load = CountingLoad(error=EngineLoadError("boom"))
        loader = EngineLoader(load_fn=load)

        with pytest.raises(EngineLoadError):
            await loader.acquire()

        load.error = None
        handle = await loader.reload()

        assert handle is load.result
        assert loader.is_ready
        assert loader.error is None
        assert load.calls == 2
        assert loader.load_count == 2

    @pytest.mark.asyncio
    async def test_reload_rejected_when_ready(self):
        loader = EngineLoader(load_fn=CountingLoad())
        await loader.acquire()

        with pytest.raises(EngineLoadError):
            loader.reload()

    @pytest.mark.asyncio
    async def test_reload_rejected_while_loading(self):
        load = CountingLoad()
        load.release.clear()
        loader = EngineLoader(load_fn=load)
        future = loader.acquire()

        with pytest.raises(EngineLoadError):
            loader.reload()

        load.release.set()
        await future
        assert load.calls == 1


class TestClose:

    @pytest.mark.asyncio
    async def test_close_cleans_up_handle(self, fake_engine):
        loader = EngineLoader.preloaded(fake_engine)

        await loader.close()

        assert fake_engine.calls == ["cleanup"]
        assert loader.state == LoaderState.UNLOADED
        assert loader.handle is None

        # Second close has nothing to release
        await loader.close()
        assert fake_engine.calls == ["cleanup"]

    @pytest.mark.asyncio
    async def test_close_before_ready_is_noop(self):
        load = CountingLoad(error=EngineLoadError("boom"))
        loader = EngineLoader(load_fn=load)
        with pytest.raises(EngineLoadError):
            await loader.acquire()

        await loader.close()
        assert loader.state == LoaderState.FAILED


class TestReadyCallbacks:

    @pytest.mark.asyncio
    async def test_callback_fires_once_on_ready(self):
        load = CountingLoad()
        loader = EngineLoader(load_fn=load)
        seen = []
        loader.add_ready_callback(seen.append)

        await loader.acquire()
        loader.acquire()

        assert seen == [load.result]

    @pytest.mark.asyncio
    async def test_callback_immediate_when_ready(self):
        loader = EngineLoader.preloaded("handle")
        seen = []
        loader.add_ready_callback(seen.append)
        assert seen == ["handle"]

    @pytest.mark.asyncio
    async def test_callback_not_fired_on_failure(self):
        loader = EngineLoader(load_fn=CountingLoad(error=EngineLoadError("boom")))
        seen = []
        loader.add_ready_callback(seen.append)

        with pytest.raises(EngineLoadError):
            await loader.acquire()
        assert seen == []
