"""
Captain's Log - Trip Planning Dashboard
Itinerary, voyage log and live position mirrored from a Trello board
"""
import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse

from config import settings
from captainslog.routes import captains_log_routes
from captainslog.services.log_stream_service import LogStreamer
from captainslog.services.trello_service import TrelloAPIError, TrelloConfigError, TrelloService

# Setup logging
logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup/shutdown events
    """
    # Startup
    logger.info("🚀 Captain's Log Server Starting...")
    logger.info(f"Environment: {settings.ENV}")
    logger.info(f"Debug Mode: {settings.DEBUG}")

    missing = settings.missing_trello_config()
    if missing:
        logger.warning(f"⚠️ {', '.join(missing)} not set, board endpoints will answer 503")

    yield

    # Shutdown
    logger.info("⛔ Captain's Log Server Shutting Down...")


# Create FastAPI app
app = FastAPI(
    title=settings.API_TITLE,
    description=settings.API_DESCRIPTION,
    version=settings.API_VERSION,
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
    allow_methods=settings.CORS_ALLOW_METHODS,
    allow_headers=settings.CORS_ALLOW_HEADERS,
)

# Include routers
app.include_router(captains_log_routes.router, prefix="/api", tags=["captains-log"])


@app.get("/")
async def index():
    return RedirectResponse(url="/docs")


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "environment": settings.ENV,
        "service": "Captain's Log",
        "boardConfigured": not settings.missing_trello_config(),
    }


# ==================== WEBSOCKET ENDPOINTS ====================

@app.websocket("/ws/logs")
async def websocket_logs(websocket: WebSocket):
    """
    Stream the full voyage log in batches as comment pages load

    Messages: {"type": "batch", "logs": [...], "loaded": n} per page, then
    {"type": "done", ...} or {"type": "error", "partial": true}.
    """
    await websocket.accept()

    try:
        service = TrelloService()
        board = await asyncio.to_thread(service.fetch_board)
    except (TrelloConfigError, TrelloAPIError) as e:
        logger.error(f"Log stream could not start: {e}")
        await websocket.send_json({"type": "error", "message": str(e), "partial": False})
        await websocket.close()
        return

    streamer = LogStreamer(websocket, service, settings.TRIPS_LIST_NAME)
    try:
        await streamer.run(board)
        await websocket.close()
    except WebSocketDisconnect:
        logger.info(f"Log stream client left after {streamer.loaded} comments")


if __name__ == "__main__":
    import uvicorn

    # Run server with Uvicorn
    uvicorn.run(
        "app:app",
        host=settings.HOST,
        port=settings.PORT,
        workers=settings.WORKERS if settings.ENV == "production" else 1,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )
