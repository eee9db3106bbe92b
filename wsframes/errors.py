"""Exceptions raised by the WebSocket layer and helpers for non-blocking I/O."""

from __future__ import annotations

import errno
from enum import Enum
from typing import Any, Callable, Optional, TypeVar

T = TypeVar("T")

_WOULD_BLOCK_ERRNOS = frozenset({errno.EAGAIN, errno.EWOULDBLOCK})


class WebSocketError(Exception):
    """Base class of every error raised by this package."""


class ConnectionClosed(WebSocketError):
    """The connection was closed cleanly; the underlying stream may be dropped."""

    def __init__(self, message: str = "Connection closed normally") -> None:
        super().__init__(message)


class AlreadyClosed(WebSocketError):
    """An operation was attempted on a connection that is already closed."""

    def __init__(self, message: str = "Trying to work with closed connection") -> None:
        super().__init__(message)


class ProtocolViolation(Enum):
    """The kinds of WebSocket protocol violation."""

    SEND_AFTER_CLOSING = "Sending after closing is not allowed"
    RECEIVED_AFTER_CLOSING = "Remote sent after having closed"
    NON_ZERO_RESERVED_BITS = "Reserved bits are non-zero"
    UNMASKED_FRAME_FROM_CLIENT = "Received an unmasked frame from client"
    MASKED_FRAME_FROM_SERVER = "Received a masked frame from server"
    FRAGMENTED_CONTROL_FRAME = "Fragmented control frame"
    CONTROL_FRAME_TOO_BIG = "Control frame too big (payload must be 125 bytes or less)"
    UNKNOWN_CONTROL_FRAME_TYPE = "Unknown control frame type"
    UNKNOWN_DATA_FRAME_TYPE = "Unknown data frame type"
    UNEXPECTED_CONTINUE_FRAME = "Continue frame but nothing to continue"
    EXPECTED_FRAGMENT = "While waiting for more fragments received"
    RESET_WITHOUT_CLOSING_HANDSHAKE = "Connection reset without closing handshake"
    INVALID_OPCODE = "Encountered invalid opcode"
    INVALID_CLOSE_SEQUENCE = "Invalid close sequence"


class ProtocolError(WebSocketError):
    """The peer, or the caller, violated the WebSocket protocol."""

    def __init__(self, violation: ProtocolViolation, value: Any = None) -> None:
        self.violation = violation
        self.value = value
        text = violation.value if value is None else f"{violation.value}: {value}"
        super().__init__(text)


class CapacityError(WebSocketError):
    """A configured size limit was exceeded."""


class MessageTooLong(CapacityError):
    """A message or frame is bigger than the allowed maximum."""

    def __init__(self, size: int, max_size: int) -> None:
        self.size = size
        self.max_size = max_size
        super().__init__(f"Message too long: {size} > {max_size}")


class Utf8Error(WebSocketError):
    """Text data was not valid UTF-8."""

    def __init__(self, message: str = "UTF-8 encoding error") -> None:
        super().__init__(message)


class SendQueueFull(WebSocketError):
    """The send queue is full; the rejected message is handed back."""

    def __init__(self, message: Any) -> None:
        self.message = message
        super().__init__("Send queue is full")


def is_would_block(error: BaseException) -> bool:
    """Tell whether an exception only means that the operation would block."""
    if isinstance(error, BlockingIOError):
        return True
    return isinstance(error, OSError) and error.errno in _WOULD_BLOCK_ERRNOS


def no_block(func: Callable[..., T], *args: Any, **kwargs: Any) -> Optional[T]:
    """Call ``func``; return ``None`` instead of raising when it would block."""
    try:
        return func(*args, **kwargs)
    except OSError as error:
        if is_would_block(error):
            return None
        raise