from __future__ import annotations
from operator import index

from .bitcursor import BitCursor
from ..errors import OutOfBoundsError, ValueRangeError

WIDTHS = (8, 16, 32, 64)

# Multi-byte fields are always least-significant byte first; within a byte the
# engine fills from bit 0 upwards. There is no per-call byte order.


def _check_width(width: int) -> None:
    if width not in WIDTHS: raise ValueError(f"unsupported integer width {width}")


def check_bits(bits: int, width: int) -> int:
    if isinstance(bits, bool) or not isinstance(bits, int) or not (1 <= bits <= width):
        raise OutOfBoundsError(f"bit count {bits!r} not in 1..{width}")
    return bits


def check_unsigned(value: int, width: int) -> int:
    value = index(value)
    if not (0 <= value < (1 << width)):
        raise ValueRangeError(f"{value} does not fit u{width}")
    return value


def check_signed(value: int, width: int) -> int:
    value = index(value)
    half = 1 << (width - 1)
    if not (-half <= value < half):
        raise ValueRangeError(f"{value} does not fit i{width}")
    return value


def sign_extend(raw: int, bits: int) -> int:
    """Interpret the low ``bits`` of ``raw`` as two's complement."""
    return raw - (1 << bits) if raw & (1 << (bits - 1)) else raw


def _put_le(cur: BitCursor, value: int, bits: int) -> None:
    # 1..32 bits as ceil(bits/8) engine calls, low byte first
    full, tail = divmod(bits, 8)
    for i in range(full):
        cur.write_bits((value >> (8 * i)) & 0xFF, 8)
    if tail:
        cur.write_bits((value >> (8 * full)) & 0xFF, tail)


def _get_le(cur: BitCursor, bits: int) -> int:
    full, tail = divmod(bits, 8)
    value = 0
    for i in range(full):
        value |= cur.read_bits(8) << (8 * i)
    if tail:
        value |= cur.read_bits(tail) << (8 * full)
    return value


def write_unsigned(cur: BitCursor, value: int, bits: int, width: int) -> None:
    """Write the low ``bits`` bits of an unsigned ``width``-bit value."""
    _check_width(width)
    check_bits(bits, width)
    value = check_unsigned(value, width)
    cur.require(bits)

    if bits <= 32:
        _put_le(cur, value & 0xFFFFFFFF, bits)
    else:
        _put_le(cur, value & 0xFFFFFFFF, 32)
        _put_le(cur, value >> 32, bits - 32)


def read_unsigned(cur: BitCursor, bits: int, width: int) -> int:
    _check_width(width)
    check_bits(bits, width)
    cur.require(bits)

    if bits <= 32:
        return _get_le(cur, bits)
    low = _get_le(cur, 32)
    high = _get_le(cur, bits - 32)
    return low | (high << 32)


def write_signed(cur: BitCursor, value: int, bits: int, width: int) -> None:
    """Two's complement view of ``value`` at ``width`` bits, then the unsigned path."""
    _check_width(width)
    check_bits(bits, width)
    value = check_signed(value, width)
    write_unsigned(cur, value & ((1 << width) - 1), bits, width)


def read_signed(cur: BitCursor, bits: int, width: int) -> int:
    return sign_extend(read_unsigned(cur, bits, width), bits)


def write_bool(cur: BitCursor, value: bool) -> None:
    cur.write_bits(1 if value else 0, 1)


def read_bool(cur: BitCursor) -> bool:
    return cur.read_bits(1) == 1
