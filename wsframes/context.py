"""The WebSocket protocol state machine over an arbitrary byte stream."""

from __future__ import annotations

import logging
from collections import deque
from contextlib import contextmanager
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Deque, Iterator, Optional, Union

from .coding import CloseCode, OpCode
from .errors import (
    AlreadyClosed,
    ConnectionClosed,
    ProtocolError,
    ProtocolViolation,
    SendQueueFull,
    no_block,
)
from .frame import CloseFrame, Frame
from .framesocket import FrameCodec
from .message import IncompleteMessage, IncompleteMessageType, Message, MessageKind

logger = logging.getLogger(__name__)

MAX_CONTROL_PAYLOAD = 125


class Role(Enum):
    """Whether this endpoint is the server or the client."""

    SERVER = "server"
    CLIENT = "client"


@dataclass
class WebSocketConfig:
    """Limits and options of a WebSocket connection.

    ``None`` for a size means no limit.
    """

    max_send_queue: Optional[int] = None
    max_message_size: Optional[int] = 64 << 20
    max_frame_size: Optional[int] = 16 << 20
    accept_unmasked_frames: bool = False


class WebSocketState(Enum):
    """The state of the connection."""

    ACTIVE = "active"
    CLOSED_BY_US = "closed_by_us"
    CLOSED_BY_PEER = "closed_by_peer"
    CLOSE_ACKNOWLEDGED = "close_acknowledged"
    TERMINATED = "terminated"

    def is_active(self) -> bool:
        """Whether normal messages may still be processed."""
        return self is WebSocketState.ACTIVE

    def can_read(self) -> bool:
        """Whether incoming data should still be handed to the caller."""
        return self in (WebSocketState.ACTIVE, WebSocketState.CLOSED_BY_US)

    def check_active(self) -> None:
        """Raise ``AlreadyClosed`` if the connection no longer exists."""
        if self is WebSocketState.TERMINATED:
            raise AlreadyClosed()


class WebSocketContext:
    """Protocol state of one WebSocket connection; the stream is passed to each call."""

    def __init__(
        self,
        role: Role,
        config: Optional[WebSocketConfig] = None,
        partially_read: bytes = b"",
    ) -> None:
        self.role = Role(role)
        self.config = replace(config) if config is not None else WebSocketConfig()
        self._codec = FrameCodec(partially_read)
        self._state = WebSocketState.ACTIVE
        self._incomplete: Optional[IncompleteMessage] = None
        self._send_queue: Deque[Frame] = deque()
        self._pong: Optional[Frame] = None

    @property
    def state(self) -> WebSocketState:
        """The current connection state."""
        return self._state

    def can_read(self) -> bool:
        """Reading stops once a close message was received."""
        return self._state.can_read()

    def can_write(self) -> bool:
        """Writing stops once a close message was sent or received."""
        return self._state.is_active()

    def read_message(self, stream: Any) -> Message:
        """Read one message, sending queued pong and close replies on the way."""
        self._state.check_active()
        while True:
            no_block(self.write_pending, stream)
            message = self._read_message_frame(stream)
            if message is not None:
                logger.debug("Received message %s", message)
                return message

    def write_message(self, stream: Any, message: Union[Message, str, bytes]) -> None:
        """Queue a message and try to send everything pending."""
        message = Message.from_value(message)
        self._state.check_active()
        if not self._state.is_active():
            raise ProtocolError(ProtocolViolation.SEND_AFTER_CLOSING)

        limit = self.config.max_send_queue
        if limit is not None:
            if len(self._send_queue) >= limit:
                no_block(self.write_pending, stream)
            if len(self._send_queue) >= limit:
                raise SendQueueFull(message)

        kind = message.kind
        if kind is MessageKind.TEXT:
            frame = Frame.message(message.data.encode("utf-8"), OpCode.TEXT, True)
        elif kind is MessageKind.BINARY:
            frame = Frame.message(message.data, OpCode.BINARY, True)
        elif kind is MessageKind.PING:
            frame = Frame.ping(message.data)
        elif kind is MessageKind.PONG:
            self._pong = Frame.pong(message.data)
            self.write_pending(stream)
            return
        elif kind is MessageKind.CLOSE:
            self.close(stream, message.data)
            return
        else:
            frame = message.data

        self._send_queue.append(frame)
        self.write_pending(stream)

    def write_pending(self, stream: Any) -> None:
        """Send the pong reply and queued frames; the server closes when done."""
        self._codec.write_pending(stream)

        if self._pong is not None:
            pong, self._pong = self._pong, None
            logger.debug("Sending pong reply")
            self._send_one_frame(stream, pong)

        logger.debug("Frames still in queue: %d", len(self._send_queue))
        while self._send_queue:
            self._send_one_frame(stream, self._send_queue.popleft())

        if self.role is Role.SERVER and not self._state.can_read():
            self._state = WebSocketState.TERMINATED
            raise ConnectionClosed()

    def close(self, stream: Any, close_frame: Optional[CloseFrame] = None) -> None:
        """Queue a close frame (once) and try to send it."""
        if self._state is WebSocketState.ACTIVE:
            self._state = WebSocketState.CLOSED_BY_US
            self._send_queue.append(Frame.close(close_frame))
        self.write_pending(stream)

    @contextmanager
    def _connection_reset_check(self) -> Iterator[None]:
        try:
            yield
        except ConnectionResetError as error:
            if not self._state.can_read():
                raise ConnectionClosed() from error
            raise

    def _read_message_frame(self, stream: Any) -> Optional[Message]:
        with self._connection_reset_check():
            frame = self._codec.read_frame(stream, self.config.max_frame_size)

        if frame is None:
            previous, self._state = self._state, WebSocketState.TERMINATED
            if previous in (WebSocketState.CLOSED_BY_PEER, WebSocketState.CLOSE_ACKNOWLEDGED):
                raise ConnectionClosed()
            raise ProtocolError(ProtocolViolation.RESET_WITHOUT_CLOSING_HANDSHAKE)

        if not self._state.can_read():
            raise ProtocolError(ProtocolViolation.RECEIVED_AFTER_CLOSING)

        header = frame.header
        if header.rsv1 or header.rsv2 or header.rsv3:
            raise ProtocolError(ProtocolViolation.NON_ZERO_RESERVED_BITS)

        if self.role is Role.SERVER:
            if frame.is_masked():
                frame.apply_mask()
            elif not self.config.accept_unmasked_frames:
                raise ProtocolError(ProtocolViolation.UNMASKED_FRAME_FROM_CLIENT)
        elif frame.is_masked():
            raise ProtocolError(ProtocolViolation.MASKED_FRAME_FROM_SERVER)

        opcode = header.opcode
        if opcode.is_control():
            return self._handle_control(frame)
        return self._handle_data(frame)

    def _handle_control(self, frame: Frame) -> Optional[Message]:
        opcode = frame.header.opcode
        if not frame.header.is_final:
            raise ProtocolError(ProtocolViolation.FRAGMENTED_CONTROL_FRAME)
        if len(frame.payload) > MAX_CONTROL_PAYLOAD:
            raise ProtocolError(ProtocolViolation.CONTROL_FRAME_TOO_BIG)
        if opcode is OpCode.CLOSE:
            return self._do_close(frame.into_close())
        if opcode is OpCode.PING:
            data = frame.payload
            if self._state.is_active():
                self._pong = Frame.pong(data)
            return Message.ping(data)
        if opcode is OpCode.PONG:
            return Message.pong(frame.payload)
        raise ProtocolError(ProtocolViolation.UNKNOWN_CONTROL_FRAME_TYPE, int(opcode))

    def _handle_data(self, frame: Frame) -> Optional[Message]:
        opcode = frame.header.opcode
        fin = frame.header.is_final
        limit = self.config.max_message_size

        if opcode is OpCode.CONTINUE:
            if self._incomplete is None:
                raise ProtocolError(ProtocolViolation.UNEXPECTED_CONTINUE_FRAME)
            self._incomplete.extend(frame.payload, limit)
            if fin:
                incomplete, self._incomplete = self._incomplete, None
                return incomplete.complete()
            return None

        if self._incomplete is not None:
            raise ProtocolError(ProtocolViolation.EXPECTED_FRAGMENT, opcode)

        if opcode in (OpCode.TEXT, OpCode.BINARY):
            message_type = (
                IncompleteMessageType.TEXT if opcode is OpCode.TEXT else IncompleteMessageType.BINARY
            )
            incomplete = IncompleteMessage(message_type)
            incomplete.extend(frame.payload, limit)
            if fin:
                return incomplete.complete()
            self._incomplete = incomplete
            return None

        raise ProtocolError(ProtocolViolation.UNKNOWN_DATA_FRAME_TYPE, int(opcode))

    def _do_close(self, close: Optional[CloseFrame]) -> Optional[Message]:
        """Handle a received close frame; ``None`` means nothing for the caller."""
        logger.debug("Received close frame: %r", close)
        state = self._state
        if state is WebSocketState.ACTIVE:
            self._state = WebSocketState.CLOSED_BY_PEER
            if close is not None and not close.code.is_allowed():
                close = CloseFrame(CloseCode(1002), "Protocol violation")
            reply = Frame.close(close)
            logger.debug("Replying to close with %s", reply)
            self._send_queue.append(reply)
            return Message.close(close)
        if state in (WebSocketState.CLOSED_BY_PEER, WebSocketState.CLOSE_ACKNOWLEDGED):
            return None
        if state is WebSocketState.CLOSED_BY_US:
            self._state = WebSocketState.CLOSE_ACKNOWLEDGED
            return Message.close(close)
        raise RuntimeError("close frame received on a terminated connection")

    def _send_one_frame(self, stream: Any, frame: Frame) -> None:
        if self.role is Role.CLIENT:
            frame.set_random_mask()
        logger.debug("Sending frame: %r", frame)
        with self._connection_reset_check():
            self._codec.write_frame(stream, frame)