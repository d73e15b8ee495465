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
Directory Value Decoder.

Converts the raw bytes of a directory entry value into a TagValue according
to its TIFF field type.

ASCII fields are decoded as UTF-8 with trailing NUL bytes stripped; NULs
inside the text are kept. Rationals are returned as undivided
(numerator, denominator) pairs.
"""
from typing import Any, Tuple, Union

from cogmeta.utils.byte_codec import ByteOrder, unpack
from cogmeta.utils.data_models import Rational, TagValue
from cogmeta.utils.exceptions import InvalidEncodingError, TruncatedError, UnsupportedFieldTypeError
from cogmeta.utils.field_types import FIELD_TYPE_SIZES, STRUCT_CODES, FieldType, to_field_type


def decode_ascii(raw: bytes) -> str:
    """
    Decode an ASCII field, stripping trailing NUL terminators.

    Raises:
        InvalidEncodingError: If the bytes are not valid UTF-8.
    """
    try:
        text = raw.decode('utf-8')
    except UnicodeDecodeError as e:
        raise InvalidEncodingError(
            f"ASCII field is not valid UTF-8 at byte {e.start}: {e.reason}", actual=raw[e.start:e.end]
        ) from None
    return text.rstrip('\x00')


def decode(field_type: Union[FieldType, int], raw: bytes, byte_order: ByteOrder, count: int) -> TagValue:
    """
    Decode `count` values of `field_type` from `raw`.

    Args:
        field_type: A FieldType or raw field type code.
        raw: The value bytes (at least count * size_of(field_type) long).
        byte_order: Byte order of the file.
        count: Number of values to decode.

    Returns:
        TagValue holding every decoded element in file order.

    Raises:
        UnsupportedFieldTypeError: If the code is not one of the 12 TIFF types.
        TruncatedError: If `raw` is shorter than the values it should hold.
        InvalidEncodingError: If an ASCII value is not valid UTF-8.
    """
    known = to_field_type(field_type)
    if not isinstance(known, FieldType):
        raise UnsupportedFieldTypeError(int(field_type))

    size = count * FIELD_TYPE_SIZES[known]
    if len(raw) < size:
        raise TruncatedError(
            f"Not enough bytes for {count} {known.name} value(s)", expected=size, actual=len(raw)
        )

    if known == FieldType.ASCII:
        return TagValue(known, (decode_ascii(bytes(raw[:size])),))

    values: Tuple[Any, ...]
    if count == 0:
        values = ()
    elif known in (FieldType.RATIONAL, FieldType.SRATIONAL):
        flat = unpack(f"{2 * count}{STRUCT_CODES[known]}", raw, 0, byte_order)
        values = tuple(Rational(flat[i], flat[i + 1]) for i in range(0, len(flat), 2))
    else:
        values = unpack(f"{count}{STRUCT_CODES[known]}", raw, 0, byte_order)
    return TagValue(known, tuple(values))
