"""
SwingIQ Backend API

FastAPI application for golf swing analysis from pose landmarks.

Run with:
    uvicorn swingiq.main:app --reload --host 0.0.0.0 --port 8000

API docs available at:
    http://localhost:8000/docs (Swagger UI)
    http://localhost:8000/redoc (ReDoc)
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from swingiq.api.routes import router as api_router
from swingiq.api.websocket import websocket_endpoint
from swingiq.config import get_settings

settings = get_settings()

# =============================================================================
# Logging Configuration
# =============================================================================

logging.basicConfig(
    level=settings.logging_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


# =============================================================================
# Lifespan (startup/shutdown)
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Logs the effective configuration on startup.
    """
    # Startup
    logger.info(f"{settings.app_name} starting up ({settings.environment})...")
    logger.info("API docs: http://localhost:8000/docs")
    logger.info("WebSocket: ws://localhost:8000/ws/swing")
    logger.info(
        f"History capacity: {settings.history_capacity} frames, "
        f"frame timeout: {settings.frame_timeout_seconds}s"
    )

    yield  # App runs here

    # Shutdown
    logger.info(f"{settings.app_name} shutting down...")


# =============================================================================
# FastAPI App
# =============================================================================

app = FastAPI(
    title=settings.app_name,
    description="""
    **Golf Swing Analysis Engine**

    Swing phase classification and biomechanics from pose landmarks.

    ## Features

    - **Live Phase Classification** via WebSocket
    - **Clip Analysis** with phase segments and key frames
    - **Swing Metrics** (tempo, balance, swing path) and 0-100 scores
    - **Fault Detection** and frame-by-frame progression trends

    ## Endpoints

    - `GET /api/health` - Health check
    - `POST /api/analysis/frames` - Full clip analysis from landmarks
    - `POST /api/analysis/trend` - Trend of a metric series
    - `WS /ws/swing` - Live swing analysis stream

    ## WebSocket Protocol

    Connect to `/ws/swing` and send landmarks as JSON:
```json
    {
        "type": "frame",
        "data": {"timestamp": 0.033, "image_width": 1080, "image_height": 1920, "landmarks": [...]},
        "timestamp": 1704067200000
    }
```
    """,
    version=settings.version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)


# =============================================================================
# CORS Middleware
# =============================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Routes
# =============================================================================

# Include REST API routes
app.include_router(api_router, prefix="/api")

# WebSocket endpoint
app.websocket("/ws/swing")(websocket_endpoint)


# =============================================================================
# Root endpoint
# =============================================================================

@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint - API information.
    """
    return {
        "name": settings.app_name,
        "version": settings.version,
        "description": "Golf Swing Analysis Engine",
        "docs": "/docs",
        "health": "/api/health",
        "websocket": "ws://localhost:8000/ws/swing"
    }


# =============================================================================
# Run directly (for development)
# =============================================================================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "swingiq.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level=settings.log_level.lower()
    )
