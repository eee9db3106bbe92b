"""Stream-based WebSocket framing, messages and connection state (RFC 6455)."""

__version__ = "0.17.2"

__all__ = [
    "coding",
    "context",
    "errors",
    "frame",
    "framesocket",
    "mask",
    "message",
    "stream",
    "websocket",
]