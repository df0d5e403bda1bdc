"""Minimal CoAP message model, wire codec and LwM2M message builders."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Iterable

VERSION = 1
PAYLOAD_MARKER = 0xFF
MAX_TOKEN_LENGTH = 8

GET = 1
POST = 2
PUT = 3
DELETE = 4
CREATED = 65
DELETED = 66
VALID = 67
CHANGED = 68
CONTENT = 69
BAD_REQUEST = 0x80
NOT_FOUND = 0x84
METHOD_NOT_ALLOWED = 0x85

LOCATION_PATH = 8
URI_PATH = 11
CONTENT_FORMAT = 12
URI_QUERY = 15

CONTENT_FORMAT_TEXT_PLAIN = b"\x00"


class MessageType(enum.IntEnum):
    CON = 0
    NON = 1
    ACK = 2
    RST = 3


@dataclass(frozen=True)
class Option:
    number: int
    value: bytes = b""


@dataclass
class Message:
    type: MessageType
    code: int
    message_id: int
    token: bytes = b""
    options: list[Option] = field(default_factory=list)
    payload: bytes = b""
    version: int = VERSION

    def option_values(self, number: int) -> list[bytes]:
        return [opt.value for opt in self.options if opt.number == number]

    @property
    def uri_path(self) -> str:
        return "/".join(v.decode(errors="replace") for v in self.option_values(URI_PATH))

    @property
    def location_path(self) -> str:
        return "/".join(
            v.decode(errors="replace") for v in self.option_values(LOCATION_PATH)
        )

    @property
    def is_request(self) -> bool:
        return GET <= self.code <= DELETE


def format_code(code: int) -> str:
    """Render a code in class.detail form, e.g. 2.05."""
    return f"{code >> 5}.{code & 0x1F:02d}"


def _nibble(value: int) -> tuple[int, bytes]:
    if value < 13:
        return value, b""
    if value < 269:
        return 13, bytes([value - 13])
    if value <= 0xFFFF + 269:
        return 14, (value - 269).to_bytes(2, "big")
    raise ValueError(f"option field too large: {value}")


def encode(message: Message) -> bytes:
    """Serialise a message to CoAP wire format."""
    if len(message.token) > MAX_TOKEN_LENGTH:
        raise ValueError("token longer than 8 bytes")
    out = bytearray(
        [
            (message.version << 6) | (int(message.type) << 4) | len(message.token),
            message.code & 0xFF,
        ]
    )
    out += (message.message_id & 0xFFFF).to_bytes(2, "big")
    out += message.token
    previous = 0
    for opt in sorted(message.options, key=lambda o: o.number):
        delta, delta_ext = _nibble(opt.number - previous)
        length, length_ext = _nibble(len(opt.value))
        out.append((delta << 4) | length)
        out += delta_ext + length_ext + opt.value
        previous = opt.number
    if message.payload:
        out.append(PAYLOAD_MARKER)
        out += message.payload
    return bytes(out)


def _read_extended(data: bytes, pos: int, nibble: int) -> tuple[int, int]:
    if nibble < 13:
        return nibble, pos
    if nibble == 13:
        if pos >= len(data):
            raise ValueError("truncated option header")
        return data[pos] + 13, pos + 1
    if nibble == 14:
        if pos + 2 > len(data):
            raise ValueError("truncated option header")
        return int.from_bytes(data[pos : pos + 2], "big") + 269, pos + 2
    raise ValueError("reserved option nibble 15")


def decode(data: bytes) -> Message:
    """Parse CoAP wire bytes into a message."""
    data = bytes(data)
    if len(data) < 4:
        raise ValueError("CoAP message shorter than 4 bytes")
    version = data[0] >> 6
    message_type = MessageType((data[0] >> 4) & 0x03)
    token_length = data[0] & 0x0F
    if token_length > MAX_TOKEN_LENGTH:
        raise ValueError("token length over 8")
    pos = 4 + token_length
    if pos > len(data):
        raise ValueError("truncated token")
    token = data[4:pos]
    options: list[Option] = []
    number = 0
    while pos < len(data) and data[pos] != PAYLOAD_MARKER:
        header = data[pos]
        pos += 1
        delta, pos = _read_extended(data, pos, header >> 4)
        length, pos = _read_extended(data, pos, header & 0x0F)
        if pos + length > len(data):
            raise ValueError("truncated option value")
        number += delta
        options.append(Option(number, data[pos : pos + length]))
        pos += length
    payload = data[pos + 1 :] if pos < len(data) else b""
    return Message(
        type=message_type,
        code=data[1],
        message_id=int.from_bytes(data[2:4], "big"),
        token=token,
        options=options,
        payload=payload,
        version=version,
    )


def build_register(
    message_id: int,
    token: bytes,
    endpoint: str,
    lifetime: int,
    objects: Iterable[tuple[int, int]],
) -> Message:
    """A confirmable POST /rd registering the endpoint and its object links."""
    queries = [f"ep={endpoint}", f"lt={lifetime}", "lwm2m=1.0", "b=U"]
    links = ",".join(f"</{obj}/{inst}>" for obj, inst in objects)
    return Message(
        type=MessageType.CON,
        code=POST,
        message_id=message_id,
        token=bytes(token),
        options=[Option(URI_PATH, b"rd")]
        + [Option(URI_QUERY, q.encode()) for q in queries],
        payload=links.encode(),
    )


def build_update(message_id: int, token: bytes, location: str) -> Message:
    """A confirmable PUT to the registration location."""
    segments = [s for s in location.split("/") if s]
    if not segments:
        raise ValueError("no registration location")
    return Message(
        type=MessageType.CON,
        code=PUT,
        message_id=message_id,
        token=bytes(token),
        options=[Option(URI_PATH, s.encode()) for s in segments],
    )


def build_response(
    message_type: MessageType,
    code: int,
    message_id: int,
    token: bytes,
    payload: str | bytes = b"",
) -> Message:
    """A response; a non-empty payload is sent as text/plain."""
    body = payload.encode() if isinstance(payload, str) else bytes(payload)
    options = [Option(CONTENT_FORMAT, CONTENT_FORMAT_TEXT_PLAIN)] if body else []
    return Message(
        type=MessageType(message_type),
        code=code,
        message_id=message_id,
        token=bytes(token),
        options=options,
        payload=body,
    )