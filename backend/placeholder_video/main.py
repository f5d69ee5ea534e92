"""
Placeholder video service: engine loading, generation and delivery.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from .deliver.artifacts import ArtifactLifecycleManager
from .execution.assets import FontAsset
from .execution.loader import EngineLoader, get_engine_loader
from .jobs.orchestrator import TranscodeOrchestrator
from .routes import artifacts as artifact_routes
from .routes import generator as generator_routes
from .settings import GeneratorSettings

logger = logging.getLogger(__name__)

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8085


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt='%H:%M:%S'
    )


def create_app(
    settings: Optional[GeneratorSettings] = None,
    loader: Optional[EngineLoader] = None,
    font: Optional[FontAsset] = None,
) -> FastAPI:
    """
    Build the service.

    The engine load is scheduled at startup but deferred; the first
    requests are served while FFmpeg is still being located.
    """
    settings = settings or GeneratorSettings.from_env()
    loader = loader or get_engine_loader(settings)
    artifacts = ArtifactLifecycleManager()
    orchestrator = TranscodeOrchestrator(
        loader=loader,
        artifacts=artifacts,
        font=font or FontAsset(settings.font_source),
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        loader.schedule()
        logger.info(f"[Startup] Engine load scheduled (state: {loader.state.value})")
        with artifacts:
            yield
        logger.info("[Shutdown] Artifact handles revoked")
        await loader.close()

    app = FastAPI(title="Placeholder Video Generator", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.loader = loader
    app.state.artifacts = artifacts
    app.state.orchestrator = orchestrator

    app.include_router(generator_routes.router)
    app.include_router(artifact_routes.router)

    return app


def run_server(host: str = DEFAULT_HOST, port: int = DEFAULT_PORT) -> None:
    """Run the service with settings from the environment."""
    import uvicorn

    settings = GeneratorSettings.from_env()
    configure_logging(settings.log_level)
    uvicorn.run(create_app(settings), host=host, port=port)


if __name__ == "__main__":
    run_server()
