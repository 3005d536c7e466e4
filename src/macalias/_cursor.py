"""Bounds-checked big-endian reader and writer over byte buffers."""

import struct

from .errors import CapacityExceededError, FormatError, TruncatedInputError


class ByteReader:
    """Sequential reader over *data* between *pos* and *end*.

    Reads never go past *end* (default: the end of *data*); doing so raises
    :class:`TruncatedInputError` and leaves the position unchanged.
    """

    __slots__ = ("_data", "_pos", "_end")

    def __init__(self, data: bytes, pos: int = 0, end: int | None = None):
        self._data = memoryview(data)
        self._end = len(data) if end is None else min(end, len(data))
        self._pos = pos

    def tell(self) -> int:
        return self._pos

    def remaining(self) -> int:
        return max(self._end - self._pos, 0)

    def read(self, n: int) -> bytes:
        if n < 0:
            raise ValueError(f"Negative read length {n}")
        end = self._pos + n
        if end > self._end:
            raise TruncatedInputError(
                f"Need {n} bytes at offset {self._pos}, only {self.remaining()} left"
            )
        out = self._data[self._pos : end].tobytes()
        self._pos = end
        return out

    def skip(self, n: int) -> None:
        self.read(n)

    def _unpack(self, fmt: str, n: int) -> int:
        return struct.unpack(fmt, self.read(n))[0]

    def u8(self) -> int:
        return self._unpack(">B", 1)

    def u16(self) -> int:
        return self._unpack(">H", 2)

    def u32(self) -> int:
        return self._unpack(">I", 4)

    def i16(self) -> int:
        return self._unpack(">h", 2)

    def i32(self) -> int:
        return self._unpack(">i", 4)

    def pascal_string(self, capacity: int) -> bytes:
        """Read a length-prefixed slot of ``1 + capacity`` bytes.

        Returns only the meaningful bytes; the zero padding is consumed.
        """
        slot = self.read(1 + capacity)
        length = slot[0]
        if length > capacity:
            raise FormatError(
                f"Pascal string length {length} exceeds slot capacity {capacity}"
            )
        return slot[1 : 1 + length]


class ByteWriter:
    """Append-only big-endian writer."""

    __slots__ = ("_buf",)

    def __init__(self):
        self._buf = bytearray()

    def tell(self) -> int:
        return len(self._buf)

    def getvalue(self) -> bytes:
        return bytes(self._buf)

    def write(self, data: bytes) -> None:
        self._buf += data

    def _pack(self, fmt: str, value: int) -> None:
        try:
            self._buf += struct.pack(fmt, value)
        except struct.error as exc:
            raise ValueError(f"Value {value!r} does not fit {fmt!r}: {exc}") from None

    def u8(self, value: int) -> None:
        self._pack(">B", value)

    def u16(self, value: int) -> None:
        self._pack(">H", value)

    def u32(self, value: int) -> None:
        self._pack(">I", value)

    def i16(self, value: int) -> None:
        self._pack(">h", value)

    def i32(self, value: int) -> None:
        self._pack(">i", value)

    def fixed(self, data: bytes, size: int) -> None:
        """Write *data* zero-padded to exactly *size* bytes."""
        if len(data) > size:
            raise CapacityExceededError(
                f"{len(data)} bytes do not fit a {size}-byte field"
            )
        self._buf += data.ljust(size, b"\x00")

    def pascal_string(self, data: bytes, capacity: int, what: str = "String") -> None:
        """Write a 1-byte length, *data*, and zero padding up to *capacity*."""
        if len(data) > min(capacity, 255):
            raise CapacityExceededError(
                f"{what} is {len(data)} bytes, slot holds at most {min(capacity, 255)}"
            )
        self._buf.append(len(data))
        self._buf += data.ljust(capacity, b"\x00")

    def pack_into(self, fmt: str, offset: int, value: int) -> None:
        """Overwrite an already-written field (e.g. a size filled in last)."""
        struct.pack_into(fmt, self._buf, offset, value)
