#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# ******************************************************************************
# Project: COG Metadata Reader (cogmeta)
# Author: Eric Robeck <robeckgeo@gmail.com>
#
# Copyright (c) 2025, Eric Robeck
# Licensed under the MIT License
# ******************************************************************************

"""
Primitive Byte Codec.

Decodes fixed-width integers and floats from a byte slice under a byte order
chosen at runtime. The byte order is read once from the TIFF header and then
passed explicitly to every decode call.

Classes:
    ByteOrder: Enumeration of the two TIFF byte orders ('II' and 'MM').
    ByteCursor: An immutable read position over a byte slice.
"""
import struct
from dataclasses import dataclass
from enum import Enum
from typing import Any, Tuple

from cogmeta.utils.exceptions import BadByteOrderMarkerError, TruncatedError


class ByteOrder(Enum):
    """TIFF byte order, keyed by the two-byte marker at the start of the file."""
    LITTLE_ENDIAN = b'II'
    BIG_ENDIAN = b'MM'

    @property
    def prefix(self) -> str:
        """The `struct` format prefix for this byte order."""
        return '<' if self is ByteOrder.LITTLE_ENDIAN else '>'

    @classmethod
    def from_marker(cls, marker: bytes) -> 'ByteOrder':
        """
        Resolve the byte order from the first two bytes of a TIFF file.

        Raises:
            BadByteOrderMarkerError: If the marker is neither 'II' nor 'MM'.
        """
        try:
            return cls(bytes(marker[:2]))
        except ValueError:
            raise BadByteOrderMarkerError(
                "Invalid TIFF byte order marker", offset=0, expected="b'II' or b'MM'", actual=bytes(marker[:2])
            ) from None


# struct codes for each primitive width
PRIMITIVES = {
    'u8': 'B',
    'i8': 'b',
    'u16': 'H',
    'i16': 'h',
    'u32': 'I',
    'i32': 'i',
    'f32': 'f',
    'f64': 'd',
}


def unpack(fmt: str, data: bytes, position: int, byte_order: ByteOrder) -> Tuple[Any, ...]:
    """
    Unpack a struct format from `data` at `position` under `byte_order`.

    Args:
        fmt: A struct format string without byte order prefix (e.g. 'HHII').
        data: The source bytes.
        position: Index of the first byte to decode.
        byte_order: Byte order used for multi-byte fields.

    Returns:
        The decoded values as a tuple.

    Raises:
        TruncatedError: If fewer bytes remain than the format needs.
    """
    full_fmt = byte_order.prefix + fmt
    size = struct.calcsize(full_fmt)
    available = len(data) - position
    if position < 0 or available < size:
        raise TruncatedError(
            f"Not enough bytes to decode '{fmt}'", offset=position, expected=size, actual=max(available, 0)
        )
    return struct.unpack_from(full_fmt, data, position)


@dataclass(frozen=True)
class ByteCursor:
    """
    A read position over a byte slice.

    Every read returns the decoded value together with a new cursor advanced
    past it; the original cursor is never modified.

    Example:
        >>> cursor = ByteCursor(b'\\x2a\\x00\\x08\\x00\\x00\\x00', ByteOrder.LITTLE_ENDIAN)
        >>> magic, cursor = cursor.read_u16()
        >>> offset, cursor = cursor.read_u32()
        >>> (magic, offset, cursor.position)
        (42, 8, 6)
    """
    data: bytes
    byte_order: ByteOrder
    position: int = 0

    @property
    def remaining(self) -> int:
        return len(self.data) - self.position

    def _read(self, name: str) -> Tuple[Any, 'ByteCursor']:
        code = PRIMITIVES[name]
        (value,) = unpack(code, self.data, self.position, self.byte_order)
        return value, ByteCursor(self.data, self.byte_order, self.position + struct.calcsize(code))

    def read_u8(self) -> Tuple[int, 'ByteCursor']:
        return self._read('u8')

    def read_i8(self) -> Tuple[int, 'ByteCursor']:
        return self._read('i8')

    def read_u16(self) -> Tuple[int, 'ByteCursor']:
        return self._read('u16')

    def read_i16(self) -> Tuple[int, 'ByteCursor']:
        return self._read('i16')

    def read_u32(self) -> Tuple[int, 'ByteCursor']:
        return self._read('u32')

    def read_i32(self) -> Tuple[int, 'ByteCursor']:
        return self._read('i32')

    def read_f32(self) -> Tuple[float, 'ByteCursor']:
        return self._read('f32')

    def read_f64(self) -> Tuple[float, 'ByteCursor']:
        return self._read('f64')

    def read_bytes(self, length: int) -> Tuple[bytes, 'ByteCursor']:
        """Read `length` raw bytes with no byte order conversion."""
        if length < 0 or self.remaining < length:
            raise TruncatedError(
                "Not enough bytes to read raw slice",
                offset=self.position, expected=length, actual=max(self.remaining, 0)
            )
        end = self.position + length
        return bytes(self.data[self.position:end]), ByteCursor(self.data, self.byte_order, end)

    def seek(self, position: int) -> 'ByteCursor':
        """Return a cursor at an absolute position within the same slice."""
        return ByteCursor(self.data, self.byte_order, position)
