"""FastAPI application with lifespan and router mounting."""

from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

from fastapi import FastAPI

from leadscrub.api.routes import health, upload
from leadscrub.core.config import AppSettings
from leadscrub.core.protocols import ISuppressionStore
from leadscrub.persistence import create_persistence
from leadscrub.pipeline.orchestrator import SuppressionPipeline
from leadscrub.utils.logging import configure_logging


def create_app(settings: AppSettings | None = None, store: ISuppressionStore | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    ``store`` overrides the SQL store built from settings (tests pass a fake).
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        cfg = settings or AppSettings()
        configure_logging(cfg.log_level, cfg.log_format)
        Path(cfg.storage.upload_dir).mkdir(parents=True, exist_ok=True)
        Path(cfg.storage.output_dir).mkdir(parents=True, exist_ok=True)

        app.state.settings = cfg
        app.state.store = store if store is not None else create_persistence(cfg)
        app.state.pipeline = SuppressionPipeline(app.state.store, cfg.storage.output_dir)
        try:
            yield
        finally:
            app.state.store.close()

    app = FastAPI(
        title="LeadScrub Suppression Check",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.include_router(health.router)
    app.include_router(upload.router)
    return app
