"""Opcodes and close codes defined by RFC 6455."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum


class OpCode(IntEnum):
    """Frame opcode, a four-bit value."""

    CONTINUE = 0
    TEXT = 1
    BINARY = 2
    RESERVED_DATA_3 = 3
    RESERVED_DATA_4 = 4
    RESERVED_DATA_5 = 5
    RESERVED_DATA_6 = 6
    RESERVED_DATA_7 = 7
    CLOSE = 8
    PING = 9
    PONG = 10
    RESERVED_CONTROL_11 = 11
    RESERVED_CONTROL_12 = 12
    RESERVED_CONTROL_13 = 13
    RESERVED_CONTROL_14 = 14
    RESERVED_CONTROL_15 = 15

    def is_control(self) -> bool:
        """Close, ping, pong and the reserved control opcodes."""
        return self >= 8

    def is_data(self) -> bool:
        """Continue, text, binary and the reserved data opcodes."""
        return self < 8

    def is_reserved(self) -> bool:
        """Opcodes reserved for future use."""
        return 3 <= self <= 7 or self >= 11

    def __str__(self) -> str:
        return self.name

    def __format__(self, spec: str) -> str:
        return format(str(self), spec)


class CloseCodeKind(Enum):
    """The meaning of a close status code."""

    NORMAL = "normal"
    AWAY = "away"
    PROTOCOL = "protocol"
    UNSUPPORTED = "unsupported"
    STATUS = "status"
    ABNORMAL = "abnormal"
    INVALID = "invalid"
    POLICY = "policy"
    SIZE = "size"
    EXTENSION = "extension"
    ERROR = "error"
    RESTART = "restart"
    AGAIN = "again"
    TLS = "tls"
    RESERVED = "reserved"
    IANA = "iana"
    LIBRARY = "library"
    BAD = "bad"


_NAMED_CODES = {
    1000: CloseCodeKind.NORMAL,
    1001: CloseCodeKind.AWAY,
    1002: CloseCodeKind.PROTOCOL,
    1003: CloseCodeKind.UNSUPPORTED,
    1005: CloseCodeKind.STATUS,
    1006: CloseCodeKind.ABNORMAL,
    1007: CloseCodeKind.INVALID,
    1008: CloseCodeKind.POLICY,
    1009: CloseCodeKind.SIZE,
    1010: CloseCodeKind.EXTENSION,
    1011: CloseCodeKind.ERROR,
    1012: CloseCodeKind.RESTART,
    1013: CloseCodeKind.AGAIN,
    1015: CloseCodeKind.TLS,
}

_NOT_ALLOWED = frozenset(
    {
        CloseCodeKind.BAD,
        CloseCodeKind.RESERVED,
        CloseCodeKind.STATUS,
        CloseCodeKind.ABNORMAL,
        CloseCodeKind.TLS,
    }
)


@dataclass(frozen=True)
class CloseCode:
    """A 16-bit status code telling why a connection is being closed."""

    code: int

    def __post_init__(self) -> None:
        if not 0 <= self.code <= 0xFFFF:
            raise ValueError(f"close code out of range: {self.code}")

    def kind(self) -> CloseCodeKind:
        """Classify the code."""
        named = _NAMED_CODES.get(self.code)
        if named is not None:
            return named
        if 1016 <= self.code <= 2999:
            return CloseCodeKind.RESERVED
        if 3000 <= self.code <= 3999:
            return CloseCodeKind.IANA
        if 4000 <= self.code <= 4999:
            return CloseCodeKind.LIBRARY
        return CloseCodeKind.BAD

    def is_allowed(self) -> bool:
        """Whether the code may be sent in a close frame."""
        return self.kind() not in _NOT_ALLOWED

    def __int__(self) -> int:
        return self.code

    def __str__(self) -> str:
        return str(self.code)


for _code, _kind in _NAMED_CODES.items():
    setattr(CloseCode, _kind.name, CloseCode(_code))
del _code, _kind