"""
FastAPI application entry point.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from error_monitor import __version__
from error_monitor.api import close, errors, webhooks, workflows
from error_monitor.config import settings
from error_monitor.middleware.logging import RequestLoggingMiddleware
from error_monitor.services.close_client import get_close_client
from error_monitor.services.error_cache import ErrorCache
from error_monitor.services.n8n_client import get_n8n_client
from error_monitor.stores import create_error_store
from error_monitor.utils.logging import setup_logging, get_logger

# Configure structured logging
setup_logging(settings.log_level)

logger = get_logger(__name__)

# Create FastAPI application
app = FastAPI(
    title="Workflow Error Monitor",
    description="Collects n8n workflow errors and serves them to the operations dashboard",
    version=__version__
)

# In production, replace with the dashboard's URL
frontend_origins = [
    "http://localhost:3000",  # Dashboard dev server
    "http://localhost",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=frontend_origins if settings.environment == 'production' else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add request logging middleware
app.add_middleware(RequestLoggingMiddleware)


@app.get("/health")
async def health_check():
    """Health check endpoint for container orchestration."""
    return {"status": "healthy", "version": __version__}


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Workflow Error Monitor API",
        "version": __version__,
        "docs": "/docs"
    }


# Include API routers
app.include_router(webhooks.router)
app.include_router(errors.router)
app.include_router(workflows.router)
app.include_router(close.router)


@app.on_event("startup")
async def startup_event():
    """Initialize services on application startup."""
    logger.info("Starting Workflow Error Monitor API")

    if not settings.database_url:
        logger.warning("DATABASE_URL not set, errors are kept in memory and lost on restart")

    store = create_error_store(settings.database_url, settings.memory_store_max_errors)
    await store.initialize()
    app.state.error_cache = ErrorCache(store, ttl_seconds=settings.cache_ttl_seconds)
    logger.info(f"Error store initialized: {type(store).__name__}")

    app.state.n8n_client = get_n8n_client()
    app.state.close_client = get_close_client()
    logger.info("Upstream API clients initialized")


@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup services on application shutdown."""
    logger.info("Shutting down Workflow Error Monitor API")

    error_cache = getattr(app.state, "error_cache", None)
    if error_cache is not None:
        await error_cache.store.close()
        logger.info("Error store closed")

    for client_name in ("n8n_client", "close_client"):
        client = getattr(app.state, client_name, None)
        if client is not None:
            await client.close()
    logger.info("Upstream API clients closed")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
