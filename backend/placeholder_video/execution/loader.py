"""
Single-flight engine loader.

The engine is heavy to initialize, so it is loaded lazily, once, in the
background. The loader is an explicit cell:

    UNLOADED -> LOADING (shared future) -> READY (handle)
                        |
                        +-> FAILED (error)

Design rules:
- Only one load future is ever in flight
- Every caller during LOADING receives the SAME future
- State and handle are settled before the shared future resolves
- READY lasts until close() at shutdown
- FAILED is sticky: no automatic retry, the host must call reload()
- The load yields to the event loop first so it never competes
  with startup work
"""

import asyncio
import logging
from enum import Enum
from typing import Awaitable, Callable, List, Optional

from ..settings import GeneratorSettings
from .engine import FFmpegEngineHandle, load_ffmpeg_engine
from .errors import EngineLoadError

logger = logging.getLogger(__name__)


LoadFunction = Callable[[], Awaitable[FFmpegEngineHandle]]
ReadyCallback = Callable[[FFmpegEngineHandle], None]


class LoaderState(str, Enum):
    """Engine cell status."""

    UNLOADED = "unloaded"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


class EngineLoader:
    """
    Lazily initialized, process-wide engine handle.

    acquire() returns an awaitable future; concurrent callers share it.
    """

    def __init__(self, load_fn: LoadFunction, idle_delay: float = 0.0):
        self._load_fn = load_fn
        self._idle_delay = idle_delay
        self._state = LoaderState.UNLOADED
        self._future: Optional["asyncio.Future[FFmpegEngineHandle]"] = None
        self._handle: Optional[FFmpegEngineHandle] = None
        self._error: Optional[BaseException] = None
        self._ready_callbacks: List[ReadyCallback] = []
        self._load_count = 0

    @classmethod
    def preloaded(cls, handle: FFmpegEngineHandle) -> "EngineLoader":
        """Loader that starts READY with an existing handle."""

        async def _already_loaded() -> FFmpegEngineHandle:
            return handle

        loader = cls(load_fn=_already_loaded)
        loader._state = LoaderState.READY
        loader._handle = handle
        return loader

    @property
    def state(self) -> LoaderState:
        return self._state

    @property
    def handle(self) -> Optional[FFmpegEngineHandle]:
        """The engine handle, or None until the load has resolved."""
        return self._handle

    @property
    def is_ready(self) -> bool:
        return self._state == LoaderState.READY

    @property
    def error(self) -> Optional[BaseException]:
        """Load failure, if the cell is FAILED."""
        return self._error

    @property
    def load_count(self) -> int:
        """Number of load attempts started."""
        return self._load_count

    def acquire(self) -> "asyncio.Future[FFmpegEngineHandle]":
        """
        Get the shared future for the engine handle.

        Must be called from a running event loop.
        Starts the load if nothing has started it yet.
        """
        if self._state == LoaderState.READY:
            if self._future is None:
                future = asyncio.get_running_loop().create_future()
                future.set_result(self._handle)
                self._future = future
            return self._future

        if self._state == LoaderState.UNLOADED:
            return self._start()

        # LOADING or FAILED: share the existing outcome
        return self._future

    def schedule(self) -> None:
        """Start the deferred load without waiting for it."""
        if self._state == LoaderState.UNLOADED:
            self._start()

    def reload(self) -> "asyncio.Future[FFmpegEngineHandle]":
        """
        Explicitly trigger a fresh load after a failure.

        Raises:
            EngineLoadError: if a load is in flight or already succeeded
        """
        if self._state not in (LoaderState.FAILED, LoaderState.UNLOADED):
            raise EngineLoadError(f"Cannot reload engine while {self._state.value}")

        logger.info("[EngineLoader] Reload requested")
        self._error = None
        self._future = None
        self._state = LoaderState.UNLOADED
        return self._start()

    def add_ready_callback(self, callback: ReadyCallback) -> None:
        """
        Register a listener for the moment the handle resolves.

        Called immediately if the engine is already READY.
        """
        if self._state == LoaderState.READY:
            callback(self._handle)
        else:
            self._ready_callbacks.append(callback)

    def _start(self) -> "asyncio.Future[FFmpegEngineHandle]":
        self._state = LoaderState.LOADING
        self._load_count += 1
        logger.info(f"[EngineLoader] Load #{self._load_count} scheduled")

        task = asyncio.get_running_loop().create_task(self._load())
        task.add_done_callback(self._on_load_done)
        self._future = task
        return task

    async def close(self) -> None:
        """
        Release the loaded engine at shutdown.

        Removes the engine's working namespace and returns the cell to
        UNLOADED. A no-op unless the engine is READY.
        """
        if self._state != LoaderState.READY:
            return
        handle, self._handle = self._handle, None
        self._state = LoaderState.UNLOADED
        self._future = None
        logger.info("[EngineLoader] Closing engine")
        await handle.cleanup()

    async def _load(self) -> FFmpegEngineHandle:
        # Yield to the event loop before doing the heavy work
        await asyncio.sleep(self._idle_delay)

        try:
            handle = await self._load_fn()
        except Exception as e:
            self._state = LoaderState.FAILED
            self._error = e
            logger.error(f"[EngineLoader] Load failed: {e}")
            raise

        # Settle the cell before any awaiter of the shared future resumes
        self._handle = handle
        self._state = LoaderState.READY
        logger.info(f"[EngineLoader] Engine ready: {handle!r}")

        callbacks, self._ready_callbacks = self._ready_callbacks, []
        for callback in callbacks:
            callback(handle)
        return handle

    def _on_load_done(self, task: "asyncio.Task[FFmpegEngineHandle]") -> None:
        if task.cancelled():
            self._state = LoaderState.FAILED
            self._error = EngineLoadError("Engine load was cancelled")
            logger.warning("[EngineLoader] Load cancelled")
            return
        # Failure is already recorded by _load; retrieve it so a load
        # nobody awaited is not reported as unhandled
        task.exception()


def ffmpeg_loader(settings: GeneratorSettings) -> EngineLoader:
    """Loader wired to the real FFmpeg engine."""

    async def _load() -> FFmpegEngineHandle:
        return await load_ffmpeg_engine(settings)

    return EngineLoader(load_fn=_load, idle_delay=settings.idle_delay)


# Global loader instance
_default_loader: Optional[EngineLoader] = None


def get_engine_loader(settings: Optional[GeneratorSettings] = None) -> EngineLoader:
    """
    Get the process-wide engine loader.

    Creates the loader on first access (lazy initialization).
    Settings are only consulted on that first access.
    """
    global _default_loader
    if _default_loader is None:
        _default_loader = ffmpeg_loader(settings or GeneratorSettings.from_env())
    return _default_loader
