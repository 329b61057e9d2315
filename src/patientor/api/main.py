"""FastAPI application factory for the reference patientor API."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import APIConfig, get_config
from .routers import diagnoses_router, health_router, patients_router
from .seed import seed_store
from .store import init_store

load_dotenv()

logger = logging.getLogger(__name__)


def _lifespan(config: APIConfig):
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Open the patient store; seed demo data into an empty one."""
        store = init_store(config.data_dir)
        if config.seed_on_startup and store.is_empty():
            stats = await seed_store(store)
            logger.info(f"Seeded empty store: {stats}")
        logger.info(f"Patient store ready (data_dir={store.data_dir})")

        yield

        logger.info("Shutting down...")

    return lifespan


def create_app(config: APIConfig | None = None) -> FastAPI:
    """Build the patientor API app.

    Args:
        config: API settings; read from ``PATIENTOR_*`` variables when omitted.
            ``data_dir=None`` keeps the patient store in memory.
    """
    if config is None:
        config = get_config()

    app = FastAPI(
        title="Patientor API",
        description="Patient records with health check, hospital and occupational entries",
        version="0.1.0",
        lifespan=_lifespan(config),
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=config.cors_allow_credentials,
        allow_methods=config.cors_allow_methods,
        allow_headers=config.cors_allow_headers,
    )

    app.include_router(health_router, prefix="/api")
    app.include_router(diagnoses_router, prefix="/api")
    app.include_router(patients_router, prefix="/api")

    return app


def main():
    """Entry point for the patientor-serve command."""
    import uvicorn

    config = get_config()
    uvicorn.run(
        "patientor.api.main:create_app",
        factory=True,
        host=config.host,
        port=config.port,
        reload=config.debug,
    )


if __name__ == "__main__":
    main()
