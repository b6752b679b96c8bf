"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from proflow import __version__
from proflow.config import get_settings
from proflow.db.database import SessionLocal, init_db
from proflow.errors import ProFlowError
from proflow.store.cache import ItemCache
from proflow.store.sql import SqlItemStore

logger = logging.getLogger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup and shutdown events.

    Creates the item store and subscribes the shared cache to it.

    Args:
        app: FastAPI application instance.
    """
    # Startup
    init_db()
    store = SqlItemStore(SessionLocal)
    cache = ItemCache()
    cache.attach(store)
    app.state.store = store
    app.state.cache = cache
    logger.info(f"{settings.app_name} started with {len(cache.items)} work items")
    yield
    # Shutdown
    cache.detach()


app = FastAPI(
    title=settings.app_name,
    description="Production tracking dashboard API with spreadsheet import",
    version=__version__,
    lifespan=lifespan,
    debug=settings.debug,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ProFlowError)
async def proflow_error_handler(request: Request, exc: ProFlowError) -> JSONResponse:
    """Render domain errors as JSON with their HTTP status."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


# Import and include routers
from proflow.auth.router import router as auth_router
from proflow.dashboard.router import router as dashboard_router
from proflow.imports.router import router as imports_router
from proflow.items.router import router as items_router
from proflow.tags.router import router as tags_router

# API routes
app.include_router(auth_router, prefix="/api/auth", tags=["auth"])
app.include_router(items_router, prefix="/api/items", tags=["items"])
app.include_router(dashboard_router, prefix="/api/dashboard", tags=["dashboard"])
app.include_router(imports_router, prefix="/api/imports", tags=["imports"])
app.include_router(tags_router, prefix="/api/tags", tags=["tags"])


@app.get("/health")
async def health_check() -> dict:
    """Health check endpoint.

    Returns:
        dict: Health status and whether the item cache has loaded.
    """
    cache: ItemCache = app.state.cache
    return {"status": "healthy", "loading": cache.loading}
