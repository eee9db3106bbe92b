"""WebSocket frames, frame headers and close frames."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple

from .coding import CloseCode, OpCode
from .errors import ProtocolError, ProtocolViolation, Utf8Error
from .mask import MASK_SIZE, apply_mask, generate_mask

_MAX_HEADER_SIZE = 2 + 8 + MASK_SIZE


def _length_extra_bytes(length: int) -> int:
    """Bytes needed after the second header byte to encode ``length``."""
    if length < 126:
        return 0
    if length < 65536:
        return 2
    return 8


def _length_byte(length: int) -> int:
    if length < 126:
        return length
    if length < 65536:
        return 126
    return 127


def _extra_bytes_for_byte(byte: int) -> int:
    byte &= 0x7F
    if byte == 126:
        return 2
    if byte == 127:
        return 8
    return 0


@dataclass
class CloseFrame:
    """The code and reason carried by a close frame."""

    code: CloseCode
    reason: str = ""

    def __str__(self) -> str:
        return f"{self.reason} ({self.code})"


@dataclass
class FrameHeader:
    """The header of a WebSocket frame."""

    is_final: bool = True
    rsv1: bool = False
    rsv2: bool = False
    rsv3: bool = False
    opcode: OpCode = OpCode.CLOSE
    mask: Optional[bytes] = None

    def __post_init__(self) -> None:
        self.opcode = OpCode(self.opcode)
        if self.mask is not None:
            self.mask = bytes(self.mask)
            if len(self.mask) != MASK_SIZE:
                raise ValueError(f"mask must be {MASK_SIZE} bytes, got {len(self.mask)}")

    @classmethod
    def parse(cls, data: bytes | bytearray | memoryview) -> Optional[Tuple["FrameHeader", int, int]]:
        """Parse a header from the start of ``data``.

        Returns ``None`` when ``data`` does not hold a whole header yet, otherwise
        ``(header, payload_length, header_size)``.
        """
        head = bytes(data[:_MAX_HEADER_SIZE])
        if len(head) < 2:
            return None
        first, second = head[0], head[1]

        is_final = bool(first & 0x80)
        rsv1 = bool(first & 0x40)
        rsv2 = bool(first & 0x20)
        rsv3 = bool(first & 0x10)
        raw_opcode = first & 0x0F
        masked = bool(second & 0x80)

        position = 2
        extra = _extra_bytes_for_byte(second)
        if extra:
            if len(head) < position + extra:
                return None
            length = int.from_bytes(head[position:position + extra], "big")
            position += extra
        else:
            length = second & 0x7F

        mask: Optional[bytes] = None
        if masked:
            if len(head) < position + MASK_SIZE:
                return None
            mask = head[position:position + MASK_SIZE]
            position += MASK_SIZE

        opcode = OpCode(raw_opcode)
        if opcode.is_reserved():
            raise ProtocolError(ProtocolViolation.INVALID_OPCODE, raw_opcode)

        header = cls(
            is_final=is_final, rsv1=rsv1, rsv2=rsv2, rsv3=rsv3, opcode=opcode, mask=mask
        )
        return header, length, position

    def header_len(self, length: int) -> int:
        """Size of this header when formatted for a payload of ``length`` bytes."""
        return 2 + _length_extra_bytes(length) + (MASK_SIZE if self.mask is not None else 0)

    def format(self, length: int) -> bytes:
        """Encode the header for a payload of ``length`` bytes."""
        first = int(self.opcode)
        if self.is_final:
            first |= 0x80
        if self.rsv1:
            first |= 0x40
        if self.rsv2:
            first |= 0x20
        if self.rsv3:
            first |= 0x10
        second = _length_byte(length)
        if self.mask is not None:
            second |= 0x80
        out = bytearray((first, second))
        extra = _length_extra_bytes(length)
        if extra:
            out += length.to_bytes(extra, "big")
        if self.mask is not None:
            out += self.mask
        return bytes(out)

    def set_random_mask(self) -> None:
        """Store a freshly generated mask; the payload is not touched."""
        self.mask = generate_mask()


@dataclass
class Frame:
    """A WebSocket frame: a header and its payload."""

    header: FrameHeader = field(default_factory=FrameHeader)
    payload: bytes = b""

    def __post_init__(self) -> None:
        self.payload = bytes(self.payload)

    def __len__(self) -> int:
        length = len(self.payload)
        return self.header.header_len(length) + length

    def is_empty(self) -> bool:
        """Whether the encoded frame has no bytes at all."""
        return len(self) == 0

    def is_masked(self) -> bool:
        """Whether the header carries a mask."""
        return self.header.mask is not None

    def set_random_mask(self) -> None:
        """Generate a mask; masking happens on ``format`` or ``apply_mask``."""
        self.header.set_random_mask()

    def apply_mask(self) -> None:
        """Unmask the payload in place and drop the mask from the header."""
        mask = self.header.mask
        if mask is not None:
            self.header.mask = None
            self.payload = apply_mask(self.payload, mask)

    def to_text(self) -> str:
        """The payload decoded as UTF-8."""
        try:
            return self.payload.decode("utf-8")
        except UnicodeDecodeError as error:
            raise Utf8Error() from error

    def into_close(self) -> Optional[CloseFrame]:
        """Interpret the payload as the body of a close frame."""
        if not self.payload:
            return None
        if len(self.payload) == 1:
            raise ProtocolError(ProtocolViolation.INVALID_CLOSE_SEQUENCE)
        code = CloseCode(int.from_bytes(self.payload[:2], "big"))
        try:
            reason = self.payload[2:].decode("utf-8")
        except UnicodeDecodeError as error:
            raise Utf8Error() from error
        return CloseFrame(code, reason)

    @classmethod
    def message(cls, data: bytes, opcode: OpCode, is_final: bool = True) -> "Frame":
        """Create a data frame."""
        opcode = OpCode(opcode)
        if not opcode.is_data():
            raise ValueError(f"invalid opcode for data frame: {opcode}")
        return cls(FrameHeader(is_final=is_final, opcode=opcode), data)

    @classmethod
    def ping(cls, data: bytes = b"") -> "Frame":
        """Create a ping control frame."""
        return cls(FrameHeader(opcode=OpCode.PING), data)

    @classmethod
    def pong(cls, data: bytes = b"") -> "Frame":
        """Create a pong control frame."""
        return cls(FrameHeader(opcode=OpCode.PONG), data)

    @classmethod
    def close(cls, close_frame: Optional[CloseFrame] = None) -> "Frame":
        """Create a close control frame."""
        if close_frame is None:
            payload = b""
        else:
            payload = int(close_frame.code).to_bytes(2, "big") + close_frame.reason.encode("utf-8")
        return cls(FrameHeader(), payload)

    def format(self) -> bytes:
        """Encode the frame, masking the payload if the header has a mask."""
        header = self.header.format(len(self.payload))
        mask = self.header.mask
        payload = apply_mask(self.payload, mask) if mask is not None else self.payload
        return header + payload

    def __str__(self) -> str:
        hexed = "".join(f"{byte:x}" for byte in self.payload)
        h = self.header
        return (
            "\n<FRAME>\n"
            f"final: {str(h.is_final).lower()}\n"
            f"reserved: {str(h.rsv1).lower()} {str(h.rsv2).lower()} {str(h.rsv3).lower()}\n"
            f"opcode: {h.opcode}\n"
            f"length: {len(self)}\n"
            f"payload length: {len(self.payload)}\n"
            f"payload: 0x{hexed}\n"
            "            "
        )