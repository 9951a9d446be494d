"""FlowGen API application."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from flowgen import __version__
from flowgen.api import deploy, flows, generation, health
from flowgen.config import settings
from flowgen.core.logging import get_logger, setup_logging
from flowgen.db.base import close_db, init_db

# Initialize logging first
setup_logging(
    log_level=settings.log_level,
    log_format=settings.log_format,
)

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    logger.info(
        "application_starting",
        app_name=settings.app_name,
        environment=settings.environment,
        hosting_enabled=settings.hosting_enabled,
    )

    # In development, auto-create tables
    try:
        await init_db(create_tables=(settings.environment == "development"))
        logger.info("database_ready")
    except Exception as e:
        logger.error("database_init_failed", error=str(e))
        if settings.environment == "production":
            raise

    yield

    # Shutdown
    logger.info("application_shutting_down")
    try:
        await close_db()
    except Exception as e:
        logger.error("database_close_failed", error=str(e))

    logger.info("application_stopped")


app = FastAPI(
    title=settings.app_name,
    version=__version__,
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(health.router, prefix=settings.api_prefix, tags=["health"])
app.include_router(generation.router, prefix=settings.api_prefix, tags=["generation"])
app.include_router(flows.router, prefix=settings.api_prefix, tags=["flows"])
app.include_router(deploy.router, prefix=settings.api_prefix, tags=["deploy"])


def run() -> None:
    """Console entry point: serve the API with uvicorn."""
    import uvicorn

    uvicorn.run(
        "flowgen.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
        log_config=None,
    )
