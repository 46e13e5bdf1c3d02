from __future__ import annotations


class BitBufError(ValueError):
    pass


class OutOfBoundsError(BitBufError):
    """Cursor would leave ``[0, bit_size]`` or a bit count is out of range."""


class InvalidEncodingError(BitBufError):
    pass


class ConstructionError(BitBufError):
    pass


class ValueRangeError(BitBufError):
    """Value does not fit the requested wire type."""


class ConsumedBufferError(BitBufError):
    pass


class RecordError(BitBufError):
    pass
