"""
API Routes Package

This module exports all FastAPI routers for Traffic Guard AI.
"""

from .auth_routes import router as auth_router
from .capture_routes import router as capture_router
from .scan_routes import router as scan_router
from .history_routes import router as history_router
from .assistant_routes import router as assistant_router

__all__ = [
    "auth_router",
    "capture_router",
    "scan_router",
    "history_router",
    "assistant_router",
]
