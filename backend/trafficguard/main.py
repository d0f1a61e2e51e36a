"""
Traffic Guard AI
Main FastAPI Application Entry Point

This is the main entry point for the backend server.
It initializes FastAPI, Socket.IO, the database and the enforcement
workflow behind the officer device.
"""

import time
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import socketio
from dotenv import load_dotenv

# Load environment variables (GEMINI_API_KEY, DATABASE_URL)
load_dotenv()

from trafficguard import __version__  # noqa: E402

# Create Socket.IO server
sio = socketio.AsyncServer(
    async_mode='asgi',
    cors_allowed_origins='*',
    logger=False,
    engineio_logger=False,
    ping_interval=25,
    ping_timeout=60
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events - startup and shutdown"""

    # Startup
    print("=" * 60)
    print("[STARTUP] Traffic Guard AI")
    print("=" * 60)

    from trafficguard.database import SlotStorage, init_db
    init_db()

    from trafficguard.config import get_config
    cfg = get_config()
    print("[OK] Configuration loaded")

    from trafficguard.websocket import WebSocketEmitter, WebSocketHandlers, set_emitter, set_handlers
    from trafficguard.state import get_app_state, init_app_state

    ws_emitter = WebSocketEmitter(sio)
    set_emitter(ws_emitter)

    state = init_app_state(cfg, storage=SlotStorage(), emitter=ws_emitter)
    state.restore()
    await state.startup()

    set_handlers(WebSocketHandlers(sio, ws_emitter, get_app_state))
    print("[OK] WebSocket emitter and handlers initialized")

    if state.ai_client.is_configured:
        print("[OK] AI service configured")
    else:
        print("[WARN] GEMINI_API_KEY not set - scans will fail until it is configured")

    print("=" * 60)
    print("[READY] Server ready")
    print("=" * 60)

    yield

    # Shutdown
    print("[SHUTDOWN] Shutting down...")
    await state.shutdown()
    print("[OK] Shutdown complete")


# Create FastAPI application
app = FastAPI(
    title="Traffic Guard AI",
    description="Roadside enforcement assistant: plate reading, compliance analysis and e-challans",
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc"
)

# Configure CORS for the officer device frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================
# Include API Routers
# ============================================

from trafficguard.api import (  # noqa: E402
    auth_router,
    capture_router,
    scan_router,
    history_router,
    assistant_router,
)

# Auth routes: /api/auth/login, /api/auth/logout, /api/auth/me
app.include_router(auth_router)

# Capture routes: /api/capture/*
app.include_router(capture_router)

# Scan routes: /api/scans, /api/scans/{id}/warning, /api/scans/{id}/challan
app.include_router(scan_router)

# History routes: /api/history, /api/history/stats, /api/history/export
app.include_router(history_router)

# Assistant routes: /api/assistant/chat, /api/assistant/messages
app.include_router(assistant_router)


# ============================================
# Root Endpoints
# ============================================

@app.get("/", tags=["root"])
async def root():
    """Root endpoint - API information"""
    return {
        "name": "Traffic Guard AI",
        "version": __version__,
        "status": "operational",
        "documentation": "/docs",
        "endpoints": {
            "auth": "/api/auth/*",
            "capture": "/api/capture/*",
            "scans": "/api/scans",
            "history": "/api/history",
            "export": "/api/history/export",
            "assistant": "/api/assistant/*"
        }
    }


@app.get("/health", tags=["health"])
async def health_check():
    """Health check endpoint"""
    from trafficguard.state import get_app_state
    from trafficguard.websocket import get_emitter, get_handlers

    state = get_app_state()
    handlers = get_handlers()
    emitter = get_emitter()

    return {
        "status": "healthy" if state is not None else "starting",
        "timestamp": time.time(),
        "ai": state.ai_client.status.model_dump() if state else None,
        "capture": state.session.snapshot() if state else None,
        "history": {
            "records": len(state.history) if state else 0,
            "persistenceError": (
                state.history.last_persistence_error.message
                if state and state.history.last_persistence_error else None
            )
        },
        "websocket": {
            "connected_clients": handlers.get_client_count() if handlers else 0,
            "emitter": emitter.get_stats() if emitter else None
        }
    }


# ============================================
# Create Socket.IO ASGI app
# ============================================

sio_app = socketio.ASGIApp(sio, app)


# ============================================
# WebSocket Event Reference (handled by WebSocketHandlers)
# ============================================
#
# Server → Client Events:
#   - connection:success : Connection established
#   - scan:completed     : Scan recorded in history
#   - scan:failed        : Scan failed (officer retries)
#   - alert:critical     : Critical violation detected
#   - notification:sent  : Warning / e-challan delivered (desktop alert)
#   - capture:state      : Capture session state changed
#   - overlay:hint       : New live AI overlay hint
#   - persistence:error  : History could not be saved
#
# Client → Server Events:
#   - capture:frame      : Newest camera frame
#   - capture:error      : Camera permission / hardware failure


# ============================================
# Entry Point
# ============================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "trafficguard.main:sio_app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info"
    )
