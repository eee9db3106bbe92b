"""WebSocket messages and the reassembly of fragmented messages."""

from __future__ import annotations

import codecs
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Union

from .errors import MessageTooLong, Utf8Error
from .frame import CloseFrame, Frame

MessageData = Union[str, bytes, Optional[CloseFrame], Frame]


class MessageKind(Enum):
    """The forms a WebSocket message can take."""

    TEXT = "text"
    BINARY = "binary"
    PING = "ping"
    PONG = "pong"
    CLOSE = "close"
    FRAME = "frame"


_BYTE_KINDS = frozenset({MessageKind.BINARY, MessageKind.PING, MessageKind.PONG})


def _decode(data: bytes) -> str:
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as error:
        raise Utf8Error() from error


@dataclass(frozen=True)
class Message:
    """A WebSocket message.

    ``data`` is a ``str`` for text, ``bytes`` for binary, ping and pong messages,
    an optional ``CloseFrame`` for close messages and a ``Frame`` for raw frames.
    """

    kind: MessageKind
    data: MessageData = None

    @classmethod
    def text(cls, string: str) -> "Message":
        """A text message."""
        if not isinstance(string, str):
            raise TypeError(f"text message needs a str, got {type(string).__name__}")
        return cls(MessageKind.TEXT, string)

    @classmethod
    def binary(cls, data: bytes | bytearray | memoryview) -> "Message":
        """A binary message."""
        return cls(MessageKind.BINARY, bytes(data))

    @classmethod
    def ping(cls, data: bytes | bytearray | memoryview = b"") -> "Message":
        """A ping message; the payload should be at most 125 bytes."""
        return cls(MessageKind.PING, bytes(data))

    @classmethod
    def pong(cls, data: bytes | bytearray | memoryview = b"") -> "Message":
        """A pong message; the payload should be at most 125 bytes."""
        return cls(MessageKind.PONG, bytes(data))

    @classmethod
    def close(cls, close_frame: Optional[CloseFrame] = None) -> "Message":
        """A close message with an optional close frame."""
        return cls(MessageKind.CLOSE, close_frame)

    @classmethod
    def raw(cls, frame: Frame) -> "Message":
        """A raw frame to be sent as is; never produced when reading."""
        return cls(MessageKind.FRAME, frame)

    @classmethod
    def from_value(cls, value: Union["Message", str, bytes, bytearray, memoryview]) -> "Message":
        """Build a message from a string (text) or a bytes-like object (binary)."""
        if isinstance(value, Message):
            return value
        if isinstance(value, str):
            return cls.text(value)
        if isinstance(value, (bytes, bytearray, memoryview)):
            return cls.binary(value)
        raise TypeError(f"cannot make a message from {type(value).__name__}")

    def is_text(self) -> bool:
        """Whether this is a text message."""
        return self.kind is MessageKind.TEXT

    def is_binary(self) -> bool:
        """Whether this is a binary message."""
        return self.kind is MessageKind.BINARY

    def is_ping(self) -> bool:
        """Whether this is a ping message."""
        return self.kind is MessageKind.PING

    def is_pong(self) -> bool:
        """Whether this is a pong message."""
        return self.kind is MessageKind.PONG

    def is_close(self) -> bool:
        """Whether this is a close message."""
        return self.kind is MessageKind.CLOSE

    def __len__(self) -> int:
        if self.kind is MessageKind.TEXT:
            return len(self.data.encode("utf-8"))
        if self.kind in _BYTE_KINDS:
            return len(self.data)
        if self.kind is MessageKind.CLOSE:
            return 0 if self.data is None else len(self.data.reason.encode("utf-8"))
        return len(self.data)

    def is_empty(self) -> bool:
        """Whether the message has no content."""
        return len(self) == 0

    def into_data(self) -> bytes:
        """The message content as bytes."""
        if self.kind is MessageKind.TEXT:
            return self.data.encode("utf-8")
        if self.kind in _BYTE_KINDS:
            return self.data
        if self.kind is MessageKind.CLOSE:
            return b"" if self.data is None else self.data.reason.encode("utf-8")
        return self.data.payload

    def to_text(self) -> str:
        """The message content as text; raises ``Utf8Error`` if it is not UTF-8."""
        if self.kind is MessageKind.TEXT:
            return self.data
        if self.kind in _BYTE_KINDS:
            return _decode(self.data)
        if self.kind is MessageKind.CLOSE:
            return "" if self.data is None else self.data.reason
        return self.data.to_text()

    def __bytes__(self) -> bytes:
        return self.into_data()

    def __str__(self) -> str:
        try:
            return self.to_text()
        except Utf8Error:
            return f"Binary Data<length={len(self)}>"


class IncompleteMessageType(Enum):
    """The type of a message that is still being reassembled."""

    TEXT = "text"
    BINARY = "binary"


class IncompleteMessage:
    """A fragmented message collected frame by frame."""

    def __init__(self, message_type: IncompleteMessageType) -> None:
        self._type = IncompleteMessageType(message_type)
        self._binary = bytearray()
        self._parts: List[str] = []
        self._decoder = codecs.getincrementaldecoder("utf-8")("strict")
        self._size = 0

    def __len__(self) -> int:
        return self._size

    def extend(self, tail: bytes | bytearray | memoryview, size_limit: Optional[int] = None) -> None:
        """Append more data, enforcing ``size_limit`` on the total size."""
        tail = bytes(tail)
        my_size = self._size
        portion = len(tail)
        if size_limit is not None and (my_size > size_limit or portion > size_limit - my_size):
            raise MessageTooLong(my_size + portion, size_limit)

        if self._type is IncompleteMessageType.BINARY:
            self._binary += tail
        else:
            try:
                self._parts.append(self._decoder.decode(tail))
            except UnicodeDecodeError as error:
                raise Utf8Error() from error
        self._size += portion

    def complete(self) -> Message:
        """Turn the collected data into a complete message."""
        if self._type is IncompleteMessageType.BINARY:
            return Message.binary(self._binary)
        try:
            rest = self._decoder.decode(b"", final=True)
        except UnicodeDecodeError as error:
            raise Utf8Error() from error
        return Message.text("".join(self._parts) + rest)