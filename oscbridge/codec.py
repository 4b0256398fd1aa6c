"""
Binary codec for OSC messages and bundles.

Wire layout of a message::

    address\\0[pad] ,tags\\0[pad] value1 value2 ...

Strings are NUL terminated and zero padded to a multiple of four bytes, ``i``
and ``f`` values are big-endian 32-bit words. A bundle is ``#bundle\\0``, an
eight byte time tag and a sequence of ``length + message`` elements.
"""

from __future__ import annotations

import struct
from typing import List, Sequence

from oscbridge.errors import DecodeError, EncodeError
from oscbridge.message import Float32, Int32, Message, String, Unsupported, Value

BUFFER_LENGTH = 1024
BUNDLE_TAG = b"#bundle\0"
# Bundles are always sent for immediate delivery; no time tag scheduling.
IMMEDIATE_TIME_TAG = b"\0" * 8
BUNDLE_HEADER_SIZE = len(BUNDLE_TAG) + len(IMMEDIATE_TIME_TAG)

_INT = struct.Struct(">i")
_FLOAT = struct.Struct(">f")
_LENGTH = struct.Struct(">I")


def pad_size(raw_size: int) -> int:
    """Round ``raw_size`` up to the next multiple of four."""
    return (raw_size + 3) & ~0x03


def dump(data: bytes, start: int = 0) -> str:
    """Decimal byte dump, ``"47|102|111|..."``, for debug logging."""
    return "".join(f"{byte}|" for byte in data[start:])


def _padded_string(text: str) -> bytes:
    raw = text.encode("utf-8") + b"\0"
    return raw + b"\0" * (pad_size(len(raw)) - len(raw))


def _check_capacity(size: int, max_size: int, what: str) -> None:
    if size > max_size:
        raise EncodeError(f"Encoded {what} needs {size} bytes, capacity is {max_size}")


def encode(message: Message, max_size: int = BUFFER_LENGTH) -> bytes:
    """
    Serialize one message.

    The tag string slot is reserved right after the address and filled in once
    every value has been written.

    Raises:
        EncodeError: if the packet would exceed ``max_size`` bytes.
    """
    packet = bytearray(_padded_string(message.address))

    tag_index = len(packet)
    tag_slot = pad_size(len(message.values) + 2)
    packet.extend(b"\0" * tag_slot)

    tags = [","]
    for value in message.values:
        if isinstance(value, Int32):
            packet.extend(_INT.pack(value.value))
        elif isinstance(value, Float32):
            packet.extend(_FLOAT.pack(value.value))
        elif isinstance(value, String):
            packet.extend(_padded_string(value.value))
        elif not isinstance(value, Unsupported):
            raise EncodeError(f"Cannot encode value {value!r} in message {message.address}")
        tags.append(value.tag)
        _check_capacity(len(packet), max_size, f"message {message.address}")

    packet[tag_index:tag_index + tag_slot] = _padded_string("".join(tags))
    _check_capacity(len(packet), max_size, f"message {message.address}")
    return bytes(packet)


def encode_bundle(messages: Sequence[Message], max_size: int = BUFFER_LENGTH) -> bytes:
    """
    Serialize several messages into one datagram.

    A single message is encoded on its own, without the bundle wrapper.
    """
    if not messages:
        raise EncodeError("Cannot encode an empty batch of messages")
    if len(messages) == 1:
        return encode(messages[0], max_size)

    packet = bytearray(BUNDLE_TAG)
    packet.extend(IMMEDIATE_TIME_TAG)
    for message in messages:
        element = encode(message, max_size)
        packet.extend(_LENGTH.pack(len(element)))
        packet.extend(element)
        _check_capacity(len(packet), max_size, "bundle")
    return bytes(packet)


class _Reader:
    def __init__(self, data: bytes) -> None:
        self.data = bytes(data)
        self.offset = 0

    @property
    def remaining(self) -> int:
        return len(self.data) - self.offset

    def read_string(self, what: str) -> str:
        end = self.data.find(b"\0", self.offset)
        if end == -1:
            raise DecodeError(f"{what} at offset {self.offset} is not NUL terminated")
        try:
            text = self.data[self.offset:end].decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DecodeError(f"{what} at offset {self.offset} is not valid UTF-8") from exc
        next_offset = self.offset + pad_size(end - self.offset + 1)
        if next_offset > len(self.data):
            raise DecodeError(f"{what} at offset {self.offset} is missing its padding")
        self.offset = next_offset
        return text

    def read_word(self, codec: struct.Struct, what: str):
        if self.remaining < codec.size:
            raise DecodeError(f"{what} at offset {self.offset} is truncated")
        (value,) = codec.unpack_from(self.data, self.offset)
        self.offset += codec.size
        return value


def _read_value(reader: _Reader, tag: str) -> Value:
    if tag == "i":
        return Int32(reader.read_word(_INT, "int32"))
    if tag == "f":
        return Float32(reader.read_word(_FLOAT, "float32"))
    if tag == "s":
        return String(reader.read_string("string"))
    if tag == "?":
        return Unsupported()
    raise DecodeError(f"Unknown type tag {tag!r}")


def decode(data: bytes) -> Message:
    """
    Parse one encoded message.

    Raises:
        DecodeError: on truncated input, an empty address, a malformed tag
            string or an unknown type tag.
    """
    if not data:
        raise DecodeError("Cannot decode an empty packet")
    reader = _Reader(data)
    address = reader.read_string("address")
    if not address:
        raise DecodeError("Message address is empty")
    message = Message(address)
    if reader.remaining == 0:
        # Very old senders omit the tag string when there are no arguments.
        return message

    tags = reader.read_string("type tag string")
    if not tags.startswith(","):
        raise DecodeError(f"Type tag string {tags!r} does not start with ','")
    for tag in tags[1:]:
        message.values.append(_read_value(reader, tag))
    return message


def is_bundle(data: bytes) -> bool:
    return bytes(data[:len(BUNDLE_TAG)]) == BUNDLE_TAG


def _enter_bundle(reader: _Reader, end: int) -> int:
    if end - reader.offset < BUNDLE_HEADER_SIZE:
        raise DecodeError(f"Bundle at offset {reader.offset} is too short to hold its time tag")
    reader.offset += BUNDLE_HEADER_SIZE
    return end


def decode_bundles_or_message(data: bytes) -> List[Message]:
    """
    Decode a datagram into messages, unpacking bundles (nested ones too) in order.

    Nested bundles are walked with an explicit stack of end offsets, so the
    nesting depth is bounded only by the datagram size.
    """
    if not is_bundle(data):
        return [decode(data)]

    reader = _Reader(data)
    ends = [_enter_bundle(reader, len(reader.data))]
    messages: List[Message] = []
    while ends:
        left = ends[-1] - reader.offset
        if left == 0:
            ends.pop()
            continue
        if left < _LENGTH.size:
            raise DecodeError(f"bundle element length at offset {reader.offset} is truncated")
        size = reader.read_word(_LENGTH, "bundle element length")
        left -= _LENGTH.size
        if size > left:
            raise DecodeError(
                f"Bundle element of {size} bytes at offset {reader.offset} exceeds the "
                f"{left} bytes left"
            )
        start, end = reader.offset, reader.offset + size
        if is_bundle(reader.data[start:min(end, start + len(BUNDLE_TAG))]):
            ends.append(_enter_bundle(reader, end))
        else:
            messages.append(decode(reader.data[start:end]))
            reader.offset = end
    return messages


def _parse_number(token: str) -> Value:
    # int() and float() accept digit separators; "1_000" stays a string.
    if "_" in token:
        return String(token)
    try:
        return Int32(int(token))
    except ValueError:
        pass
    try:
        return Float32(float(token))
    except ValueError:
        return String(token)


def parse_text(line: str) -> Message:
    """
    Build a message from ``"/address 1 2.5 word \\"quoted words\\""``.

    Tokens are tried as int32, then float, then plain string. A token starting
    with a double quote swallows the following tokens up to one ending with a
    quote; the pieces are joined with single spaces.
    """
    tokens = iter(line.split())
    address = next(tokens, None)
    if address is None:
        raise ValueError("Cannot parse a message from an empty line")
    message = Message(address)

    for token in tokens:
        if not token.startswith('"'):
            message.values.append(_parse_number(token))
            continue

        text = token[1:]
        if len(token) > 1 and text.endswith('"'):
            message.values.append(String(text[:-1]))
            continue
        parts = [text] if text else []
        for following in tokens:
            if following.endswith('"'):
                parts.append(following[:-1])
                break
            parts.append(following)
        message.values.append(String(" ".join(parts)))
    return message


__all__ = [
    "BUFFER_LENGTH",
    "BUNDLE_TAG",
    "IMMEDIATE_TIME_TAG",
    "pad_size",
    "dump",
    "encode",
    "encode_bundle",
    "decode",
    "is_bundle",
    "decode_bundles_or_message",
    "parse_text",
]
