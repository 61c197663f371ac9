"""Unsigned varint codec.

Values are split into 7-bit groups, least significant group first. Every
byte except the last has the high bit (0x80) set. This is the same layout
used by multiformats unsigned-varint and protobuf.

Non-minimal encodings such as ``80 00`` are accepted on decode.
"""

from typing import Tuple, Union

from .errors import MalformedVarintError

# 9 bytes carry 63 bits of payload
MAX_VARINT_BYTES = 9

_CONTINUATION = 0x80
_PAYLOAD_MASK = 0x7F

BytesLike = Union[bytes, bytearray, memoryview]


def encoding_length(value: int) -> int:
    """Number of bytes ``encode(value)`` produces."""
    return len(encode(value))


def encode(value: int) -> bytes:
    """Encode a non-negative integer as a varint.

    Args:
        value: Integer to encode

    Returns:
        Encoded bytes

    Raises:
        TypeError: If value is not an int
        ValueError: If value is negative or needs more than 9 bytes
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"varint value must be an int, got {type(value).__name__}")
    if value < 0:
        raise ValueError(f"varint value must be non-negative, got {value}")

    out = bytearray()
    while True:
        group = value & _PAYLOAD_MASK
        value >>= 7
        if value:
            out.append(group | _CONTINUATION)
        else:
            out.append(group)
            break

    if len(out) > MAX_VARINT_BYTES:
        raise ValueError(f"varint value too large: needs {len(out)} bytes")

    return bytes(out)


def decode(buffer: BytesLike, offset: int = 0) -> Tuple[int, int]:
    """Decode a varint starting at ``offset``.

    Args:
        buffer: Bytes to read from
        offset: Position of the first varint byte

    Returns:
        Tuple of (value, bytes_consumed)

    Raises:
        MalformedVarintError: If the offset is out of range, the buffer
            ends before a terminating byte, or the varint is too long
    """
    if offset < 0 or offset >= len(buffer):
        raise MalformedVarintError(offset, f"offset out of range for buffer of {len(buffer)} bytes")

    value = 0
    shift = 0
    position = offset
    while position < len(buffer):
        byte = buffer[position]
        value |= (byte & _PAYLOAD_MASK) << shift
        position += 1
        if not byte & _CONTINUATION:
            return value, position - offset
        shift += 7
        if position - offset >= MAX_VARINT_BYTES:
            raise MalformedVarintError(offset, f"varint longer than {MAX_VARINT_BYTES} bytes")

    raise MalformedVarintError(offset)
