"""Frame masking as defined by RFC 6455."""

from __future__ import annotations

import secrets

MASK_SIZE = 4


def generate_mask() -> bytes:
    """Generate a random four-byte frame mask."""
    return secrets.token_bytes(MASK_SIZE)


def apply_mask(buf: bytes | bytearray | memoryview, mask: bytes | bytearray) -> bytes:
    """Mask or unmask ``buf`` with ``mask``; the operation is its own inverse."""
    if len(mask) != MASK_SIZE:
        raise ValueError(f"mask must be {MASK_SIZE} bytes, got {len(mask)}")
    data = bytes(buf)
    length = len(data)
    if not length:
        return b""
    repeats, rest = divmod(length, MASK_SIZE)
    key = bytes(mask) * repeats + bytes(mask[:rest])
    masked = int.from_bytes(data, "big") ^ int.from_bytes(key, "big")
    return masked.to_bytes(length, "big")