"""A WebSocket bound to the stream it talks over."""

from __future__ import annotations

from typing import Any, Iterator, Optional, Union

from .context import Role, WebSocketConfig, WebSocketContext
from .errors import ConnectionClosed
from .frame import CloseFrame
from .message import Message


class WebSocket:
    """A WebSocket connection over an already upgraded byte stream.

    The stream needs ``read(size)`` and ``write(data)``; ``flush`` is used when present.
    No handshake is performed here.
    """

    def __init__(
        self,
        stream: Any,
        role: Role,
        config: Optional[WebSocketConfig] = None,
    ) -> None:
        self.stream = stream
        self._context = WebSocketContext(role, config)

    @classmethod
    def from_partially_read(
        cls,
        stream: Any,
        part: bytes,
        role: Role,
        config: Optional[WebSocketConfig] = None,
    ) -> "WebSocket":
        """Wrap a stream of which ``part`` has already been read past the handshake."""
        socket = cls(stream, role, config)
        socket._context = WebSocketContext(role, config, bytes(part))
        return socket

    @property
    def config(self) -> WebSocketConfig:
        """The connection configuration; it may be changed in place."""
        return self._context.config

    @property
    def role(self) -> Role:
        """Whether this endpoint is the server or the client."""
        return self._context.role

    def can_read(self) -> bool:
        """Reading stops once a close message was received."""
        return self._context.can_read()

    def can_write(self) -> bool:
        """Writing stops once a close message was sent or received."""
        return self._context.can_write()

    def read_message(self) -> Message:
        """Read one message; pong and close replies are sent along the way."""
        return self._context.read_message(self.stream)

    def write_message(self, message: Union[Message, str, bytes]) -> None:
        """Queue a message and try to send everything pending."""
        self._context.write_message(self.stream, message)

    def write_pending(self) -> None:
        """Flush the pending send queue."""
        self._context.write_pending(self.stream)

    def close(self, close_frame: Optional[CloseFrame] = None) -> None:
        """Queue a close frame; keep reading or flushing to finish the handshake."""
        self._context.close(self.stream, close_frame)

    def __iter__(self) -> Iterator[Message]:
        """Yield incoming messages until the connection is closed cleanly."""
        while True:
            try:
                message = self.read_message()
            except ConnectionClosed:
                return
            yield message

    def __repr__(self) -> str:
        return f"WebSocket(role={self._context.role.name}, state={self._context.state.name})"