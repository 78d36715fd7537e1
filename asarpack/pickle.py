"""Length-prefixed binary framing used by the archive header.

A pickle is a byte buffer whose first four bytes hold the little-endian
payload length. Every value written after that is padded with zeros to a
multiple of four bytes. Strings are an int32 byte length followed by the
UTF-8 bytes, with no terminator.
"""
from __future__ import annotations

import struct

from .constants import (
    CAPACITY_READ_ONLY,
    PAYLOAD_UNIT,
    SIZE_DOUBLE,
    SIZE_FLOAT,
    SIZE_INT32,
    SIZE_INT64,
    SIZE_UINT32,
    SIZE_UINT64,
    align_int,
)
from .errors import PickleBoundsError


_INT32 = struct.Struct("<i")
_UINT32 = struct.Struct("<I")
_INT64 = struct.Struct("<q")
_UINT64 = struct.Struct("<Q")
_FLOAT = struct.Struct("<f")
_DOUBLE = struct.Struct("<d")


class PickleIterator:
    """Read cursor over a pickle's payload."""

    def __init__(self, pickle: "Pickle"):
        self._payload = pickle._buf
        self._payload_offset = pickle.header_size
        self._read_index = 0
        self._end_index = pickle.get_payload_size()

    def read_bool(self) -> bool:
        return self.read_int32() != 0

    def read_int32(self) -> int:
        return self._unpack(_INT32, SIZE_INT32)

    def read_uint32(self) -> int:
        return self._unpack(_UINT32, SIZE_UINT32)

    def read_int64(self) -> int:
        return self._unpack(_INT64, SIZE_INT64)

    def read_uint64(self) -> int:
        return self._unpack(_UINT64, SIZE_UINT64)

    def read_float(self) -> float:
        return self._unpack(_FLOAT, SIZE_FLOAT)

    def read_double(self) -> float:
        return self._unpack(_DOUBLE, SIZE_DOUBLE)

    def read_string(self) -> str:
        length = self.read_int32()
        if length < 0:
            raise PickleBoundsError(f"Negative string length {length}")
        ofs = self._get_read_payload_offset_and_advance(length)
        return bytes(self._payload[ofs : ofs + length]).decode("utf-8")

    def _unpack(self, st: struct.Struct, size: int):
        ofs = self._get_read_payload_offset_and_advance(size)
        return st.unpack_from(self._payload, ofs)[0]

    def _get_read_payload_offset_and_advance(self, length: int) -> int:
        if length > self._end_index - self._read_index:
            raise PickleBoundsError(f"Failed to read data with length of {length}")
        ofs = self._payload_offset + self._read_index
        self._advance(length)
        return ofs

    def _advance(self, size: int) -> None:
        aligned = align_int(size, SIZE_UINT32)
        if self._end_index - self._read_index < aligned:
            self._read_index = self._end_index
        else:
            self._read_index += aligned


class Pickle:
    """Growable write buffer; see the module docstring for the layout."""

    def __init__(self):
        self._buf = bytearray(SIZE_UINT32)
        self.header_size = SIZE_UINT32
        self.capacity_after_header = 0
        self._write_offset = 0
        self.resize(PAYLOAD_UNIT)
        self.set_payload_size(0)

    @classmethod
    def from_bytes(cls, buffer: bytes) -> "Pickle":
        """Wrap serialized pickle bytes for reading.

        Inconsistent input (declared payload larger than the buffer, or a
        header that is not 4-byte aligned) gives an empty pickle on which
        every read fails.
        """
        p = cls.__new__(cls)
        p._buf = bytearray(buffer)
        p.capacity_after_header = CAPACITY_READ_ONLY
        p._write_offset = 0
        size_field = bytes(buffer[:SIZE_UINT32]).ljust(SIZE_UINT32, b"\x00")
        header_size = len(buffer) - _UINT32.unpack(size_field)[0]
        if header_size < 0 or header_size != align_int(header_size, SIZE_UINT32):
            header_size = 0
        if header_size == 0:
            p._buf = bytearray()
        p.header_size = header_size
        return p

    def to_bytes(self) -> bytes:
        end = self.header_size + self.get_payload_size()
        return bytes(self._buf[:end])

    def __bytes__(self) -> bytes:
        return self.to_bytes()

    def create_iterator(self) -> PickleIterator:
        return PickleIterator(self)

    def write_bool(self, value: bool) -> None:
        self.write_int32(1 if value else 0)

    def write_int32(self, value: int) -> None:
        self._write_bytes(_INT32.pack(value))

    def write_uint32(self, value: int) -> None:
        self._write_bytes(_UINT32.pack(value))

    def write_int64(self, value: int) -> None:
        self._write_bytes(_INT64.pack(value))

    def write_uint64(self, value: int) -> None:
        self._write_bytes(_UINT64.pack(value))

    def write_float(self, value: float) -> None:
        self._write_bytes(_FLOAT.pack(value))

    def write_double(self, value: float) -> None:
        self._write_bytes(_DOUBLE.pack(value))

    def write_string(self, value: str) -> None:
        data = value.encode("utf-8")
        self.write_int32(len(data))
        self._write_bytes(data)

    def _write_bytes(self, data: bytes) -> None:
        length = len(data)
        data_length = align_int(length, SIZE_UINT32)
        new_size = self._write_offset + data_length
        if new_size > self.capacity_after_header:
            self.resize(max(self.capacity_after_header * 2, new_size))

        ofs = self.header_size + self._write_offset
        self._buf[ofs : ofs + length] = data
        self._buf[ofs + length : ofs + data_length] = bytes(data_length - length)
        self.set_payload_size(new_size)
        self._write_offset = new_size

    def resize(self, new_capacity: int) -> None:
        new_capacity = align_int(new_capacity, PAYLOAD_UNIT)
        grow = self.header_size + new_capacity - len(self._buf)
        if grow > 0:
            self._buf.extend(bytes(grow))
        self.capacity_after_header = new_capacity

    def get_payload_size(self) -> int:
        if len(self._buf) < SIZE_UINT32:
            return 0
        return _UINT32.unpack_from(self._buf, 0)[0]

    def set_payload_size(self, payload_size: int) -> None:
        _UINT32.pack_into(self._buf, 0, payload_size)
