"""Sadak Sathi snapshot server entry point."""

from fastapi import FastAPI
from fastapi.concurrency import asynccontextmanager
from fastapi.staticfiles import StaticFiles
from loguru import logger
from starlette.middleware.cors import CORSMiddleware

from sadaksathi.core.config import settings
from sadaksathi.core.domain.exceptions import DomainException
from sadaksathi.core.infrastructure.logging import setup_logging
from sadaksathi.core.interfaces.http.exceptions import (
    domain_exception_handler,
    global_exception_handler,
)
from sadaksathi.modules.feeds.application import dependencies as feeds_app_deps
from sadaksathi.modules.feeds.infrastructure import dependencies as feeds_infra_deps
from sadaksathi.modules.feeds.interfaces.router import router as feeds_router


@asynccontextmanager
async def lifespan(_: FastAPI):
    """Application lifespan manager."""
    setup_logging(log_to_file=False)
    logger.info("Starting Sadak Sathi server...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Serving snapshot from {settings.MERGED_OUTPUT_PATH}")

    yield

    logger.info("Shutting down Sadak Sathi server...")


app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Merged road-condition feeds for the Sadak Sathi map UI",
    version="0.1.0",
    lifespan=lifespan,
)

# Dependency overrides (application -> infrastructure)
app.dependency_overrides[feeds_app_deps.get_snapshot_service] = (
    feeds_infra_deps.get_snapshot_service
)

# Exception handlers
app.add_exception_handler(DomainException, domain_exception_handler)
app.add_exception_handler(Exception, global_exception_handler)

# CORS middleware
if settings.all_cors_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.all_cors_origins,
        allow_credentials=True,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

app.include_router(feeds_router)

# Built UI; mounted last so API routes win.
if settings.STATIC_DIR.is_dir():
    app.mount(
        "/",
        StaticFiles(directory=settings.STATIC_DIR, html=True),
        name="static",
    )
else:
    logger.warning(f"Static directory {settings.STATIC_DIR} not found, UI not served")


def run() -> None:
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.SERVER_HOST,
        port=settings.SERVER_PORT,
        reload=settings.ENVIRONMENT == "local",
    )


if __name__ == "__main__":
    run()
