"""Reading and writing WebSocket frames over a byte stream."""

from __future__ import annotations

import logging
from typing import Any, Optional, Tuple

from .errors import MessageTooLong
from .frame import Frame, FrameHeader

logger = logging.getLogger(__name__)

READ_CHUNK_SIZE = 4096


class FrameCodec:
    """Buffers incoming bytes into frames and outgoing frames into bytes."""

    def __init__(self, partially_read: bytes = b"") -> None:
        self._in_buffer = bytearray(partially_read)
        self._out_buffer = bytearray()
        self._header: Optional[Tuple[FrameHeader, int]] = None

    def read_frame(self, stream: Any, max_size: Optional[int] = None) -> Optional[Frame]:
        """Read one frame; ``None`` means the stream reached end of file.

        Raises ``BlockingIOError`` when a non-blocking stream has no data yet.
        """
        while True:
            if self._header is None:
                parsed = FrameHeader.parse(self._in_buffer)
                if parsed is not None:
                    header, length, consumed = parsed
                    del self._in_buffer[:consumed]
                    self._header = (header, length)

            if self._header is not None:
                header, length = self._header
                if max_size is not None and length > max_size:
                    raise MessageTooLong(length, max_size)
                if length <= len(self._in_buffer):
                    payload = bytes(self._in_buffer[:length])
                    del self._in_buffer[:length]
                    self._header = None
                    frame = Frame(header, payload)
                    logger.debug("received frame %s", frame)
                    return frame

            chunk = stream.read(READ_CHUNK_SIZE)
            if chunk is None:
                raise BlockingIOError("read would block")
            if not chunk:
                logger.debug("no frame received")
                return None
            self._in_buffer += chunk

    def write_frame(self, stream: Any, frame: Frame) -> None:
        """Queue ``frame`` and try to send everything pending.

        The frame stays queued even if writing fails; call ``write_pending`` to retry.
        """
        logger.debug("writing frame %s", frame)
        self._out_buffer += frame.format()
        self.write_pending(stream)

    def write_pending(self, stream: Any) -> None:
        """Send queued bytes and flush the stream."""
        while self._out_buffer:
            written = stream.write(bytes(self._out_buffer))
            if written is None:
                raise BlockingIOError("write would block")
            if written == 0:
                raise ConnectionResetError("Connection reset while sending")
            del self._out_buffer[:written]
        flush = getattr(stream, "flush", None)
        if flush is not None:
            flush()

    def unread(self) -> bytes:
        """Bytes received but not yet consumed by a frame."""
        return bytes(self._in_buffer)


class FrameSocket:
    """A stream paired with a frame codec."""

    def __init__(self, stream: Any, partially_read: bytes = b"") -> None:
        self.stream = stream
        self._codec = FrameCodec(partially_read)

    def read_frame(self, max_size: Optional[int] = None) -> Optional[Frame]:
        """Read a frame from the stream."""
        return self._codec.read_frame(self.stream, max_size)

    def write_frame(self, frame: Frame) -> None:
        """Write a frame to the stream; it stays queued if writing fails."""
        self._codec.write_frame(self.stream, frame)

    def write_pending(self) -> None:
        """Complete a pending write, if any."""
        self._codec.write_pending(self.stream)

    def into_inner(self) -> Tuple[Any, bytes]:
        """The stream and the bytes read from it but not yet consumed."""
        return self.stream, self._codec.unread()