"""
WebSocket Package

Real-time Socket.IO channel between the server and the officer device.

Components:
- events: Event type definitions and data models
- emitter: Server→Client event emission
- handlers: Client→Server event handling

Usage:
    from trafficguard.websocket import WebSocketEmitter, WebSocketHandlers

    emitter = WebSocketEmitter(sio)
    handlers = WebSocketHandlers(sio, emitter, get_app_state)
"""

from .events import ServerEvent, ClientEvent
from .emitter import WebSocketEmitter, get_emitter, set_emitter
from .handlers import WebSocketHandlers, get_handlers, set_handlers

__all__ = [
    "ServerEvent",
    "ClientEvent",
    "WebSocketEmitter",
    "WebSocketHandlers",
    "get_emitter",
    "set_emitter",
    "get_handlers",
    "set_handlers",
]
