# tanglemap/main.py
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from tanglemap.api import router as api_router
from tanglemap.core.config import settings
from tanglemap.core.exceptions import NodeNotFoundException
from tanglemap.core.limiter import limiter

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    # --- Startup Logic ---
    service = api_router.map_service
    service.start()
    try:
        yield
    finally:
        # --- Shutdown Logic ---
        await service.stop()

app = FastAPI(
    title="Tangle Map API",
    description="Force-directed map of linked tangles for a host note window.",
    version="1.0.0",
    lifespan=lifespan
)

# Add Limiter to the application state
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

@app.exception_handler(NodeNotFoundException)
async def node_not_found_exception_handler(request: Request, exc: NodeNotFoundException):
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"message": exc.message},
    )

app.include_router(api_router.router)

@app.get("/")
async def root():
    return {"message": "Welcome to the Tangle Map API"}

@app.get("/healthz", tags=["Health"], status_code=status.HTTP_200_OK)
async def health_check():
    """Reports whether the map loop is alive and what it is showing."""
    service = api_router.map_service
    return {
        "status": "ok",
        "running": service.running,
        "visible": service.visible,
        "nodes": len(service.snapshot.nodes),
        "ticks": service.engine.tick_count,
    }
