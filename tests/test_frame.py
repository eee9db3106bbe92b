import pytest

from wsframes.coding import CloseCode, OpCode
from wsframes.errors import ProtocolError, ProtocolViolation, Utf8Error
from wsframes.frame import CloseFrame, Frame, FrameHeader


def test_parse():
    raw = bytes([0x82, 0x07, 0x01, 0x02, 0x03, 0x04, 0x05, 0x06, 0x07])
    header, length, consumed = FrameHeader.parse(raw)
    assert length == 7
    assert consumed == 2
    frame = Frame(header, raw[consumed:])
    assert frame.payload == bytes([0x01, 0x02, 0x03, 0x04, 0x05, 0x06, 0x07])
    assert header.opcode == OpCode.BINARY
    assert header.is_final


def test_format():
    frame = Frame.ping(bytes([0x01, 0x02]))
    assert frame.format() == bytes([0x89, 0x02, 0x01, 0x02])


def test_display():
    frame = Frame.message(b"hi there", OpCode.TEXT, True)
    view = str(frame)
    assert "payload:" in view
    assert "opcode: TEXT" in view
    assert "final: true" in view


def test_display_hex_not_padded():
    frame = Frame.message(bytes([0x01, 0xAB]), OpCode.BINARY, True)
    assert "payload: 0x1ab\n" in str(frame)


@pytest.mark.parametrize(
    "data",
    [b"", b"\x81", b"\x81\x7e\x00", b"\x81\xff" + b"\x00" * 8 + b"\x01\x02"],
)
def test_parse_incomplete_returns_none(data):
    assert FrameHeader.parse(data) is None


def test_parse_reserved_opcode():
    with pytest.raises(ProtocolError) as info:
        FrameHeader.parse(bytes([0x83, 0x00]))
    assert info.value.violation is ProtocolViolation.INVALID_OPCODE
    assert info.value.value == 3


@pytest.mark.parametrize("length", [0, 125, 126, 65535, 65536])
def test_header_roundtrip(length):
    header = FrameHeader(opcode=OpCode.BINARY, mask=b"\x01\x02\x03\x04")
    encoded = header.format(length)
    assert len(encoded) == header.header_len(length)
    parsed, parsed_length, consumed = FrameHeader.parse(encoded)
    assert parsed == header
    assert parsed_length == length
    assert consumed == len(encoded)


def test_header_len_values():
    header = FrameHeader()
    assert header.header_len(10) == 2
    assert header.header_len(200) == 4
    assert header.header_len(70000) == 10
    header.set_random_mask()
    assert header.header_len(10) == 6


def test_format_masked_does_not_mutate():
    frame = Frame(FrameHeader(opcode=OpCode.BINARY, mask=b"\x01\x02\x03\x04"), b"\x00\x00")
    assert frame.format() == bytes([0x82, 0x82, 0x01, 0x02, 0x03, 0x04, 0x01, 0x02])
    assert frame.payload == b"\x00\x00"
    assert frame.is_masked()


def test_apply_mask_unmasks():
    mask = b"\x10\x20\x30\x40"
    frame = Frame(FrameHeader(opcode=OpCode.TEXT, mask=mask), b"hello")
    encoded = frame.format()
    header, length, consumed = FrameHeader.parse(encoded)
    received = Frame(header, encoded[consumed:consumed + length])
    assert received.payload != b"hello"
    received.apply_mask()
    assert received.payload == b"hello"
    assert not received.is_masked()


def test_len_counts_header_and_payload():
    assert len(Frame.ping(b"ab")) == 4
    assert not Frame.ping(b"").is_empty()


def test_into_close_empty():
    assert Frame.close(None).into_close() is None


def test_into_close_one_byte():
    with pytest.raises(ProtocolError) as info:
        Frame(FrameHeader(), b"\x03").into_close()
    assert info.value.violation is ProtocolViolation.INVALID_CLOSE_SEQUENCE


def test_close_roundtrip():
    frame = Frame.close(CloseFrame(CloseCode(1000), "bye"))
    assert frame.payload == b"\x03\xe8bye"
    assert frame.into_close() == CloseFrame(CloseCode(1000), "bye")


def test_into_close_bad_utf8():
    with pytest.raises(Utf8Error):
        Frame(FrameHeader(), b"\x03\xe8\xff").into_close()


def test_close_frame_str():
    assert str(CloseFrame(CloseCode(1001), "going")) == "going (1001)"


def test_to_text():
    assert Frame.message(b"abc", OpCode.TEXT).to_text() == "abc"
    with pytest.raises(Utf8Error):
        Frame.message(b"\xff", OpCode.BINARY).to_text()


def test_message_rejects_control_opcode():
    with pytest.raises(ValueError):
        Frame.message(b"x", OpCode.PING, True)


def test_non_final_message_header():
    frame = Frame.message(b"x", OpCode.TEXT, False)
    assert frame.format() == bytes([0x01, 0x01]) + b"x"