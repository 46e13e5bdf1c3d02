from __future__ import annotations
import sys
from operator import index
from typing import Tuple

from ..errors import ConstructionError, ConsumedBufferError, OutOfBoundsError

MAX_BYTE_LENGTH = sys.maxsize // 8


class BitCursor:
    """Fixed-size byte storage addressed by a single bit cursor.

    Bits are packed LSB-first: the first bit written into a byte lands in
    bit 0. The same cursor serves reads and writes; call ``seek``/``reset``
    between a write pass and a read pass.
    """
    __slots__ = ("_buf", "_pos", "_size")

    def __init__(self, byte_length: int):
        if isinstance(byte_length, bool) or not isinstance(byte_length, int):
            raise ConstructionError(f"byte length must be an int, got {type(byte_length).__name__}")
        if not (0 <= byte_length <= MAX_BYTE_LENGTH):
            raise ConstructionError(f"byte length {byte_length} outside 0..{MAX_BYTE_LENGTH}")
        try:
            self._buf: bytearray | None = bytearray(byte_length)
        except MemoryError as e:
            raise ConstructionError(f"cannot allocate {byte_length} bytes") from e
        self._pos = 0
        self._size = byte_length * 8

    @classmethod
    def with_len(cls, byte_length: int):
        return cls(byte_length)

    @classmethod
    def from_bytes(cls, data: bytes | bytearray | memoryview):
        """Wrap a copy of ``data``; cursor at 0."""
        raw = bytes(data)
        out = cls(len(raw))
        out._buf[:] = raw
        return out

    # state
    @property
    def bit_pos(self) -> int: return self._pos
    @property
    def byte_pos(self) -> int: return self._pos // 8
    @property
    def bit_size(self) -> int: return self._size
    @property
    def byte_size(self) -> int: return self._size // 8
    @property
    def bits_remaining(self) -> int: return self._size - self._pos
    @property
    def consumed(self) -> bool: return self._buf is None

    def into_bytes(self) -> bytes:
        """Hand over the storage. The cursor is unusable afterwards."""
        buf = self._storage()
        self._buf = None
        return bytes(buf)

    def peek_bytes(self) -> bytes:
        return bytes(self._storage())

    # repositioning
    def seek(self, bit_pos: int) -> None:
        self._storage()
        bit_pos = index(bit_pos)
        if not (0 <= bit_pos <= self._size):
            raise OutOfBoundsError(f"seek to bit {bit_pos} outside 0..{self._size}")
        self._pos = bit_pos

    def reset(self) -> None: self.seek(0)
    def skip(self, bits: int) -> None: self.seek(self._pos + index(bits))

    # capacity
    def can_write_bits(self, bit_count: int) -> bool:
        self._storage()
        return bit_count >= 0 and self._pos + bit_count <= self._size

    def can_read_bits(self, bit_count: int) -> bool:
        self._storage()
        return bit_count >= 0 and self._pos + bit_count <= self._size

    def can_write_bytes(self, byte_count: int) -> bool: return self.can_write_bits(byte_count * 8)
    def can_read_bytes(self, byte_count: int) -> bool: return self.can_read_bits(byte_count * 8)

    def require(self, bit_count: int) -> None:
        """Raise unless ``bit_count`` more bits fit between cursor and capacity."""
        self._storage()
        if self._pos + bit_count > self._size:
            raise OutOfBoundsError(
                f"need {bit_count} bits at bit {self._pos}, only {self._size - self._pos} left"
            )

    def checkpoint(self, bit_count: int) -> Tuple[int, bytes]:
        """Cursor plus a copy of the bytes the next ``bit_count`` bits touch."""
        buf = self._storage()
        return self._pos, bytes(buf[self._pos >> 3:(self._pos + bit_count + 7) >> 3])

    def rollback(self, mark: Tuple[int, bytes]) -> None:
        """Undo everything written since ``checkpoint``."""
        pos, saved = mark
        lo = pos >> 3
        self._storage()[lo:lo + len(saved)] = saved
        self._pos = pos

    # primitive engine (1..8 bits)
    def write_bits(self, value: int, count: int) -> None:
        if not (0 < count <= 8): raise OutOfBoundsError(f"write_bits count {count} not in 1..8")
        self.require(count)
        buf = self._buf
        value &= 0xFF >> (8 - count)
        p = self._pos >> 3
        used = self._pos & 7

        if used == 0:
            buf[p] = value
        else:
            free = 8 - used
            if count <= free:
                keep = (0xFF >> free) | ((0xFF << (used + count)) & 0xFF)
                buf[p] = (buf[p] & keep) | ((value << used) & 0xFF)
            else:
                rest = count - free
                buf[p] = (buf[p] & (0xFF >> free)) | ((value << used) & 0xFF)
                buf[p + 1] = (buf[p + 1] & ((0xFF << rest) & 0xFF)) | (value >> free)

        self._pos += count

    def read_bits(self, count: int) -> int:
        if not (0 < count <= 8): raise OutOfBoundsError(f"read_bits count {count} not in 1..8")
        self.require(count)
        buf = self._buf
        p = self._pos >> 3
        used = self._pos & 7

        if used == 0 and count == 8:
            value = buf[p]
        else:
            avail = 8 - used
            first = buf[p] >> used
            if count <= avail:
                value = first & (0xFF >> (8 - count))
            else:
                rest = count - avail
                second = buf[p + 1] & (0xFF >> (8 - rest))
                value = first | (second << avail)

        self._pos += count
        return value

    def _storage(self) -> bytearray:
        if self._buf is None: raise ConsumedBufferError("buffer already consumed by into_bytes()")
        return self._buf
