import pytest

from wsframes.coding import CloseCode, CloseCodeKind, OpCode


def test_opcode_from_u8():
    assert OpCode(2) == OpCode.BINARY


def test_opcode_into_u8():
    op = OpCode(1)
    assert op == OpCode.TEXT
    assert int(op) == 1


def test_closecode_from_u16():
    code = CloseCode(1008)
    assert code.kind() is CloseCodeKind.POLICY
    assert code == CloseCode.POLICY


def test_closecode_into_u16():
    code = CloseCode(1001)
    assert code == CloseCode.AWAY
    assert int(code) == 1001
    assert str(CloseCode.AWAY) == "1001"


@pytest.mark.parametrize(
    "value, text",
    [(0, "CONTINUE"), (1, "TEXT"), (2, "BINARY"), (3, "RESERVED_DATA_3"),
     (8, "CLOSE"), (9, "PING"), (10, "PONG"), (11, "RESERVED_CONTROL_11")],
)
def test_opcode_display(value, text):
    assert str(OpCode(value)) == text
    assert f"{OpCode(value)}" == text


def test_opcode_out_of_range():
    with pytest.raises(ValueError):
        OpCode(16)


def test_opcode_roundtrip_and_classes():
    for value in range(16):
        op = OpCode(value)
        assert int(op) == value
        assert op.is_control() == (value >= 8)
        assert op.is_data() != op.is_control()


@pytest.mark.parametrize("value", [3, 4, 5, 6, 7, 11, 12, 13, 14, 15])
def test_reserved_opcodes(value):
    assert OpCode(value).is_reserved()


@pytest.mark.parametrize("value", [0, 1, 2, 8, 9, 10])
def test_known_opcodes_not_reserved(value):
    assert not OpCode(value).is_reserved()


@pytest.mark.parametrize(
    "value, kind",
    [
        (1000, CloseCodeKind.NORMAL),
        (1002, CloseCodeKind.PROTOCOL),
        (1005, CloseCodeKind.STATUS),
        (1015, CloseCodeKind.TLS),
        (1, CloseCodeKind.BAD),
        (999, CloseCodeKind.BAD),
        (1004, CloseCodeKind.BAD),
        (1014, CloseCodeKind.BAD),
        (1016, CloseCodeKind.RESERVED),
        (2999, CloseCodeKind.RESERVED),
        (3000, CloseCodeKind.IANA),
        (3999, CloseCodeKind.IANA),
        (4000, CloseCodeKind.LIBRARY),
        (4999, CloseCodeKind.LIBRARY),
        (5000, CloseCodeKind.BAD),
        (0, CloseCodeKind.BAD),
    ],
)
def test_closecode_kinds(value, kind):
    assert CloseCode(value).kind() is kind


@pytest.mark.parametrize(
    "value, allowed",
    [(1000, True), (1001, True), (1011, True), (3000, True), (4000, True),
     (1005, False), (1006, False), (1015, False), (2000, False), (500, False)],
)
def test_closecode_is_allowed(value, allowed):
    assert CloseCode(value).is_allowed() is allowed


def test_closecode_display():
    assert str(CloseCode(1000)) == "1000"
    assert str(CloseCode(4321)) == "4321"


def test_closecode_out_of_range():
    with pytest.raises(ValueError):
        CloseCode(70000)
    with pytest.raises(ValueError):
        CloseCode(-1)