import pytest

from sensornode.coap import (
    CHANGED,
    CONTENT,
    CREATED,
    NOT_FOUND,
    POST,
    PUT,
    Message,
    MessageType,
    Option,
    build_register,
    build_response,
    build_update,
    decode,
    encode,
    format_code,
)

TOKEN = b"\x01\x02\x03\x04"


def test_format_code():
    assert format_code(CREATED) == "2.01"
    assert format_code(NOT_FOUND) == "4.04"
    assert format_code(CONTENT) == "2.05"


def test_register_wire_bytes():
    endpoint = "example-node-001"
    msg = build_register(0x0102, TOKEN, endpoint, 300, [(0, 0), (3311, 0)])
    data = encode(msg)
    assert data[0] >> 6 == 1
    assert (data[0] >> 4) & 0x03 == MessageType.CON
    assert data[0] & 0x0F == len(TOKEN)
    assert data[1] == POST
    assert data[2:4] == b"\x01\x02"
    assert data[4:8] == TOKEN
    assert data[8] == 0xB2
    assert data[9:11] == b"rd"
    ep = ("ep=" + endpoint).encode()
    assert data[11] == 0x4D
    assert data[12] == len(ep) - 13
    assert data[13 : 13 + len(ep)] == ep
    assert data[13 + len(ep)] == 0x06
    assert data.endswith(b"\xff</0/0>,</3311/0>")


def test_register_round_trip():
    msg = build_register(7, TOKEN, "node", 300, [(3, 0)])
    back = decode(encode(msg))
    assert back == msg
    queries = [v.decode() for v in back.option_values(15)]
    assert queries == ["ep=node", "lt=300", "lwm2m=1.0", "b=U"]
    assert back.uri_path == "rd"


def test_update_segments():
    msg = build_update(9, TOKEN, "rd/abc12")
    assert msg.code == PUT
    assert msg.uri_path == "rd/abc12"
    assert decode(encode(msg)) == msg


def test_update_without_location():
    with pytest.raises(ValueError):
        build_update(1, TOKEN, "")


def test_response_with_payload():
    msg = build_response(MessageType.ACK, CONTENT, 42, b"\xaa", "21.5")
    data = encode(msg)
    assert data[1] == CONTENT
    assert data[2:4] == (42).to_bytes(2, "big")
    assert data[5:7] == b"\xc1\x00"
    assert data[7:] == b"\xff21.5"


def test_response_empty_payload():
    msg = build_response(MessageType.ACK, CHANGED, 3, TOKEN)
    data = encode(msg)
    assert len(data) == 4 + len(TOKEN)
    assert decode(data) == msg


def test_extended_option_length_and_delta_round_trip():
    long_value = b"x" * 300
    msg = Message(
        type=MessageType.NON,
        code=PUT,
        message_id=65535,
        token=b"",
        options=[Option(11, b"a" * 20), Option(300, long_value)],
        payload=b"body",
    )
    back = decode(encode(msg))
    assert back == msg
    assert back.option_values(300) == [long_value]


def test_decode_request_uri_and_payload():
    msg = Message(
        type=MessageType.CON,
        code=PUT,
        message_id=5,
        token=b"\x09",
        options=[Option(11, b"3311"), Option(11, b"0"), Option(11, b"5850")],
        payload=b"1",
    )
    back = decode(encode(msg))
    assert back.uri_path == "3311/0/5850"
    assert back.payload == b"1"
    assert back.is_request


def test_decode_location_path():
    msg = Message(
        type=MessageType.ACK,
        code=CREATED,
        message_id=1,
        token=TOKEN,
        options=[Option(8, b"rd"), Option(8, b"xyz")],
    )
    back = decode(encode(msg))
    assert back.location_path == "rd/xyz"
    assert not back.is_request


def test_decode_too_short():
    with pytest.raises(ValueError):
        decode(b"\x40\x01")


def test_decode_truncated_option():
    with pytest.raises(ValueError):
        decode(b"\x40\x01\x00\x01\xb5ab")


def test_encode_rejects_long_token():
    msg = Message(type=MessageType.CON, code=POST, message_id=1, token=b"t" * 9)
    with pytest.raises(ValueError):
        encode(msg)