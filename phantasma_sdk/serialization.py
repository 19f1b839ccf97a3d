"""
Binary record codec for Phantasma payloads.

Integers use the node's var-int layout, strings and byte arrays are
var-int length prefixed, big integers are little-endian two's complement.
"""

import struct
from typing import Union


def encode_hex(data: bytes) -> str:
    """Base16 encode bytes (lowercase, no prefix)"""
    return data.hex()


def decode_hex(text: str) -> bytes:
    """
    Base16 decode text.

    Raises:
        ValueError: If the text is not valid hex
    """
    if text.startswith(("0x", "0X")):
        text = text[2:]
    return bytes.fromhex(text)


class BinaryWriter:
    """Accumulates a binary record"""

    def __init__(self):
        self._buffer = bytearray()

    def write_byte(self, value: int) -> "BinaryWriter":
        self._buffer += struct.pack('B', value)
        return self

    def write_var_int(self, value: int) -> "BinaryWriter":
        if value < 0:
            raise ValueError("var-int must be non-negative")
        if value < 0xFD:
            self._buffer += struct.pack('B', value)
        elif value <= 0xFFFF:
            self._buffer += b'\xfd' + struct.pack('<H', value)
        elif value <= 0xFFFFFFFF:
            self._buffer += b'\xfe' + struct.pack('<I', value)
        else:
            self._buffer += b'\xff' + struct.pack('<Q', value)
        return self

    def write_uint32(self, value: int) -> "BinaryWriter":
        self._buffer += struct.pack('<I', value)
        return self

    def write_bytes(self, data: bytes) -> "BinaryWriter":
        self.write_var_int(len(data))
        self._buffer += data
        return self

    def write_string(self, text: str) -> "BinaryWriter":
        return self.write_bytes(text.encode('utf-8'))

    def write_big_integer(self, value: int) -> "BinaryWriter":
        length = max(1, (value.bit_length() + 8) // 8)
        return self.write_bytes(value.to_bytes(length, 'little', signed=True))

    def to_bytes(self) -> bytes:
        return bytes(self._buffer)


class BinaryReader:
    """Reads a binary record written by BinaryWriter"""

    def __init__(self, data: Union[bytes, bytearray]):
        self._data = bytes(data)
        self._offset = 0

    @property
    def remaining(self) -> int:
        return len(self._data) - self._offset

    def _take(self, count: int) -> bytes:
        if count > self.remaining:
            raise ValueError(f"need {count} bytes, {self.remaining} left")
        chunk = self._data[self._offset:self._offset + count]
        self._offset += count
        return chunk

    def read_byte(self) -> int:
        return self._take(1)[0]

    def read_var_int(self) -> int:
        prefix = self.read_byte()
        if prefix == 0xFD:
            return struct.unpack('<H', self._take(2))[0]
        if prefix == 0xFE:
            return struct.unpack('<I', self._take(4))[0]
        if prefix == 0xFF:
            return struct.unpack('<Q', self._take(8))[0]
        return prefix

    def read_uint32(self) -> int:
        return struct.unpack('<I', self._take(4))[0]

    def read_bytes(self) -> bytes:
        return self._take(self.read_var_int())

    def read_string(self) -> str:
        return self.read_bytes().decode('utf-8')

    def read_big_integer(self) -> int:
        return int.from_bytes(self.read_bytes(), 'little', signed=True)


def serialize_string(text: str) -> bytes:
    return BinaryWriter().write_string(text).to_bytes()


def unserialize_string(data: bytes) -> str:
    return BinaryReader(data).read_string()
