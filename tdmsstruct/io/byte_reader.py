from __future__ import annotations

import io
import os
import sys
from typing import BinaryIO, Protocol

import numpy as np

from tdmsstruct.core.datatypes import TdmsDataType, numpy_dtype_of
from tdmsstruct.core.exceptions import IoOpenFailure, TruncatedRead


HOST_IS_BIG_ENDIAN = sys.byteorder == "big"


class ByteSource(Protocol):
    """Protocol for seekable byte sources.

    `read` returns exactly `count` bytes or raises TruncatedRead.
    """

    def read(self, count: int) -> bytes:
        ...

    def seek(self, offset: int) -> None:
        ...

    def tell(self) -> int:
        ...

    def size(self) -> int:
        ...


class _StreamByteSource:
    """Shared implementation over a binary file-like object."""

    def __init__(self, stream: BinaryIO, size: int):
        self._stream = stream
        self._size = size

    def read(self, count: int) -> bytes:
        offset = self._stream.tell()
        available = self.remaining()
        if count > available:
            # Never allocate more than the source holds
            raise TruncatedRead(
                f"Expected {count} bytes but only {available} are available",
                offset=offset,
            )
        data = self._stream.read(count)
        if len(data) != count:
            raise TruncatedRead(
                f"Expected {count} bytes but only {len(data)} are available",
                offset=offset,
            )
        return data

    def seek(self, offset: int) -> None:
        self._stream.seek(offset, os.SEEK_SET)

    def tell(self) -> int:
        return self._stream.tell()

    def size(self) -> int:
        return self._size

    def remaining(self) -> int:
        return max(0, self._size - self.tell())

    def close(self) -> None:
        self._stream.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class FileByteSource(_StreamByteSource):
    """Read-only byte source over a file on disk."""

    def __init__(self, path: str | os.PathLike):
        self.path = os.fspath(path)
        try:
            stream = open(self.path, "rb")
        except OSError as e:
            raise IoOpenFailure(f"Failed to open file '{self.path}': {e.strerror}") from e
        size = os.fstat(stream.fileno()).st_size
        super().__init__(stream, size)


class BufferByteSource(_StreamByteSource):
    """Byte source over data already held in memory."""

    def __init__(self, data: bytes):
        super().__init__(io.BytesIO(data), len(data))


class SegmentReader:
    """
    Endian-aware reads for one segment.

    The segment byte order is compared once with the host byte order; when
    they differ every multi-byte value is byte-reversed before interpretation.
    """

    def __init__(self, source: ByteSource, big_endian: bool):
        self._source = source
        self.big_endian = big_endian
        self.swap = big_endian != HOST_IS_BIG_ENDIAN

    def tell(self) -> int:
        return self._source.tell()

    def _read_array(self, dtype: np.dtype, count: int = 1) -> np.ndarray:
        buf = self._source.read(dtype.itemsize * count)
        arr = np.frombuffer(buf, dtype=dtype, count=count)
        if self.swap and dtype.itemsize > 1:
            arr = arr.byteswap()
        return arr

    def read_value(self, data_type: int) -> int | float:
        """Read one value of a native fixed-width numeric type as a Python scalar."""
        dtype = numpy_dtype_of(data_type)
        if dtype is None:
            raise ValueError(f"Type 0x{data_type:X} has no native fixed-width representation")
        return self._read_array(dtype)[0].item()

    def read_pair(self, data_type: int) -> tuple[int | float, int | float]:
        dtype = numpy_dtype_of(data_type)
        if dtype is None:
            raise ValueError(f"Type 0x{data_type:X} has no native fixed-width representation")
        first, second = self._read_array(dtype, count=2)
        return first.item(), second.item()

    def read_u32(self) -> int:
        return self.read_value(TdmsDataType.U32)

    def read_u64(self) -> int:
        return self.read_value(TdmsDataType.U64)

    def read_i64(self) -> int:
        return self.read_value(TdmsDataType.I64)

    def read_u32_array(self, count: int) -> list[int]:
        if count == 0:
            return []
        return self._read_array(numpy_dtype_of(TdmsDataType.U32), count=count).tolist()

    def read_opaque(self, count: int) -> bytes:
        """Read a value with no native arithmetic type (extended float, fixed point).

        Only the byte order is normalised to the host order.
        """
        buf = self._source.read(count)
        return buf[::-1] if self.swap else buf

    def read_timestamp(self) -> tuple[int, int]:
        """Read a timestamp as (seconds, fraction).

        Seconds (i64) come first and fractions (u64, units of 2^-64 s) second,
        each in the segment byte order.
        """
        seconds = self.read_i64()
        fraction = self.read_u64()
        return seconds, fraction

    def read_string(self) -> str:
        """Read a u32 byte count followed by that many bytes of UTF-8 text."""
        count = self.read_u32()
        return self._source.read(count).decode("utf-8", errors="replace")
