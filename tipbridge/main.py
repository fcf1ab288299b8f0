import time
import uuid

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .api import chains, health, tips
from .config import settings
from .logging_config import get_event_logger, setup_logging

setup_logging()

http_logger = get_event_logger("http")

# Create FastAPI app
app = FastAPI(
    title="Tipbridge API",
    description="Multi-chain tip settlement: chain registry and route previews",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc"
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Tag each request with an id and log its outcome."""

    request_id = request.headers.get("x-request-id", uuid.uuid4().hex[:8])
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(request_id=request_id)

    start = time.perf_counter()
    status_code = 500
    try:
        response = await call_next(request)
        status_code = response.status_code
        response.headers["x-request-id"] = request_id
        return response
    finally:
        log = http_logger.info if status_code < 400 else http_logger.warning
        log(
            "http_request",
            method=request.method,
            path=request.url.path,
            status=status_code,
            duration_ms=round((time.perf_counter() - start) * 1000, 1),
        )


# Include routers
app.include_router(health.router, tags=["Health"])
app.include_router(chains.router, tags=["Chains"])
app.include_router(tips.router, tags=["Tips"])


@app.get("/")
async def root():
    """Root endpoint with basic info"""
    return {
        "name": "Tipbridge API",
        "version": __version__,
        "description": "Multi-chain tip settlement: chain registry and route previews",
        "settlement_chain_id": settings.settlement_chain_id,
        "docs": "/docs",
        "health": "/healthz"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "tipbridge.main:app",
        host=settings.host,
        port=settings.port,
        reload=True,
        log_level=settings.log_level.lower()
    )
