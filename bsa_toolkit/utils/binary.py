"""Binary reading utilities for Bethesda archive data."""

import struct
from io import BytesIO
from typing import BinaryIO, Union

LITTLE_ENDIAN = "<"
BIG_ENDIAN = ">"


class BinaryReader:
    """Helper for reading fixed-width binary data.

    Defaults to little-endian (PC archives). The byte order can be
    switched at any point, since Xbox 360 archives keep a little-endian
    header in front of big-endian records.
    """

    def __init__(self, data: Union[bytes, BinaryIO], byte_order: str = LITTLE_ENDIAN):
        if isinstance(data, (bytes, bytearray)):
            self._stream = BytesIO(data)
        else:
            self._stream = data
        self.byte_order = byte_order
        self._size = self._measure()

    @property
    def stream(self) -> BinaryIO:
        return self._stream

    @property
    def size(self) -> int:
        """Total length of the underlying stream, measured once up front."""
        return self._size

    def _measure(self) -> int:
        current = self._stream.tell()
        end = self._stream.seek(0, 2)
        self._stream.seek(current)
        return end

    def tell(self) -> int:
        return self._stream.tell()

    def seek(self, offset: int, whence: int = 0) -> int:
        return self._stream.seek(offset, whence)

    def read(self, size: int = -1) -> bytes:
        return self._stream.read(size)

    def read_bytes(self, size: int) -> bytes:
        data = self._stream.read(size)
        if len(data) < size:
            raise EOFError(f"Expected {size} bytes, got {len(data)}")
        return data

    def _unpack(self, fmt: str, size: int):
        return struct.unpack(self.byte_order + fmt, self.read_bytes(size))[0]

    def read_u8(self) -> int:
        return self._unpack("B", 1)

    def read_u32(self) -> int:
        return self._unpack("I", 4)

    def read_u64(self) -> int:
        return self._unpack("Q", 8)

    def skip(self, count: int) -> None:
        """Skip forward by count bytes."""
        self._stream.seek(count, 1)

    def remaining(self) -> int:
        """Return number of bytes remaining in stream."""
        return self._size - self.tell()
