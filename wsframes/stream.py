"""A stream that is either plain or protected with TLS."""

from __future__ import annotations

import socket
from enum import Enum
from typing import Any, Optional


class Mode(Enum):
    """Stream mode: plain (``ws://``) or TLS (``wss://``)."""

    PLAIN = "plain"
    TLS = "tls"


def set_nodelay(stream: Any, nodelay: bool) -> None:
    """Switch TCP_NODELAY on ``stream``; raise ``TypeError`` if it has no such option."""
    if isinstance(stream, socket.socket):
        stream.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, int(bool(nodelay)))
        return
    method = getattr(stream, "set_nodelay", None)
    if callable(method):
        method(nodelay)
        return
    raise TypeError(f"{type(stream).__name__} does not support TCP_NODELAY")


class MaybeTlsStream:
    """A byte stream tagged with whether it is encrypted.

    The wrapped object is either a socket (``recv``/``sendall``-style) or a
    file-like object with ``read`` and ``write``.
    """

    def __init__(self, stream: Any, mode: Mode = Mode.PLAIN) -> None:
        self.stream = stream
        self.mode = Mode(mode)

    def read(self, size: int = -1) -> Optional[bytes]:
        """Read up to ``size`` bytes; ``b""`` means end of stream."""
        if isinstance(self.stream, socket.socket):
            return self.stream.recv(size if size > 0 else 65536)
        return self.stream.read(size)

    def write(self, data: bytes) -> Optional[int]:
        """Write some of ``data`` and return how many bytes were taken."""
        if isinstance(self.stream, socket.socket):
            return self.stream.send(data)
        return self.stream.write(data)

    def flush(self) -> None:
        """Flush the wrapped stream, if it buffers."""
        flush = getattr(self.stream, "flush", None)
        if callable(flush):
            flush()

    def set_nodelay(self, nodelay: bool) -> None:
        """Switch TCP_NODELAY on the wrapped stream."""
        set_nodelay(self.stream, nodelay)

    def close(self) -> None:
        """Close the wrapped stream."""
        close = getattr(self.stream, "close", None)
        if callable(close):
            close()

    def __enter__(self) -> "MaybeTlsStream":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        variant = "Plain" if self.mode is Mode.PLAIN else "Tls"
        return f"MaybeTlsStream.{variant}({self.stream!r})"