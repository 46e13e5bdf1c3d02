from __future__ import annotations
import struct

from .bitcursor import BitCursor
from .ints import read_unsigned, write_unsigned
from ..errors import ValueRangeError


def f32_to_bits(value: float) -> int:
    """IEEE-754 single precision pattern of ``value`` as a u32."""
    try:
        return struct.unpack("<I", struct.pack("<f", value))[0]
    except (OverflowError, struct.error) as e:
        raise ValueRangeError(f"{value!r} does not fit f32") from e

def bits_to_f32(raw: int) -> float: return struct.unpack("<f", struct.pack("<I", raw))[0]

def f64_to_bits(value: float) -> int:
    try:
        return struct.unpack("<Q", struct.pack("<d", value))[0]
    except (OverflowError, struct.error) as e:
        raise ValueRangeError(f"{value!r} does not fit f64") from e

def bits_to_f64(raw: int) -> float: return struct.unpack("<d", struct.pack("<Q", raw))[0]


# whole bytes only; a truncated float pattern has no numeric meaning
def write_f32(cur: BitCursor, value: float) -> None: write_unsigned(cur, f32_to_bits(value), 32, 32)
def read_f32(cur: BitCursor) -> float: return bits_to_f32(read_unsigned(cur, 32, 32))
def write_f64(cur: BitCursor, value: float) -> None: write_unsigned(cur, f64_to_bits(value), 64, 64)
def read_f64(cur: BitCursor) -> float: return bits_to_f64(read_unsigned(cur, 64, 64))
