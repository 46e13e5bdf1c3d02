from __future__ import annotations

from .bitcursor import BitCursor
from .ints import read_unsigned, write_unsigned
from ..errors import BitBufError, InvalidEncodingError, ValueRangeError

MAX_STRING_BYTES = 0xFFFFFFFF  # u32 length prefix


def write_byte_sequence(cur: BitCursor, data: bytes | bytearray | memoryview) -> None:
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise TypeError(f"expected a bytes-like object, got {type(data).__name__}")
    raw = bytes(data)
    cur.require(len(raw) * 8)
    for b in raw:
        cur.write_bits(b, 8)


def read_byte_sequence(cur: BitCursor, length: int) -> bytes:
    if length < 0: raise ValueRangeError(f"negative length {length}")
    cur.require(length * 8)
    return bytes(cur.read_bits(8) for _ in range(length))


def write_string(cur: BitCursor, value: str) -> None:
    """u32 byte count (low byte first) followed by the UTF-8 bytes."""
    raw = value.encode("utf-8")
    if len(raw) > MAX_STRING_BYTES:
        raise ValueRangeError(f"string of {len(raw)} bytes exceeds u32 length prefix")
    cur.require(32 + len(raw) * 8)
    write_unsigned(cur, len(raw), 32, 32)
    write_byte_sequence(cur, raw)


def read_string(cur: BitCursor) -> str:
    """
    Read a length-prefixed UTF-8 string.
    On failure the cursor is put back at the length prefix.
    """
    start = cur.bit_pos
    try:
        n = read_unsigned(cur, 32, 32)
        raw = read_byte_sequence(cur, n)
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        cur.seek(start)
        raise InvalidEncodingError(f"string at bit {start} is not valid UTF-8: {e.reason}") from e
    except BitBufError:
        cur.seek(start)
        raise
