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
TIFF field types.

The twelve TIFF 6.0 field types, their byte sizes, and the struct codes used
to decode one element of each.
"""
from enum import IntEnum
from typing import Optional, Union


class FieldType(IntEnum):
    BYTE = 1
    ASCII = 2
    SHORT = 3
    LONG = 4
    RATIONAL = 5
    SBYTE = 6
    UNDEFINED = 7
    SSHORT = 8
    SLONG = 9
    SRATIONAL = 10
    FLOAT = 11
    DOUBLE = 12


# Bytes per value
FIELD_TYPE_SIZES = {
    FieldType.BYTE: 1,
    FieldType.ASCII: 1,
    FieldType.SHORT: 2,
    FieldType.LONG: 4,
    FieldType.RATIONAL: 8,
    FieldType.SBYTE: 1,
    FieldType.UNDEFINED: 1,
    FieldType.SSHORT: 2,
    FieldType.SLONG: 4,
    FieldType.SRATIONAL: 8,
    FieldType.FLOAT: 4,
    FieldType.DOUBLE: 8,
}

# struct code of one element; rationals are two of these
STRUCT_CODES = {
    FieldType.BYTE: 'B',
    FieldType.ASCII: 's',
    FieldType.SHORT: 'H',
    FieldType.LONG: 'I',
    FieldType.RATIONAL: 'I',
    FieldType.SBYTE: 'b',
    FieldType.UNDEFINED: 'B',
    FieldType.SSHORT: 'h',
    FieldType.SLONG: 'i',
    FieldType.SRATIONAL: 'i',
    FieldType.FLOAT: 'f',
    FieldType.DOUBLE: 'd',
}


def to_field_type(code: int) -> Union[FieldType, int]:
    """Return the FieldType for a known code, or the raw code unchanged."""
    try:
        return FieldType(code)
    except ValueError:
        return code


def field_type_size(code: int) -> Optional[int]:
    """Bytes per value for a field type code, or None if the code is unknown."""
    field_type = to_field_type(code)
    if isinstance(field_type, FieldType):
        return FIELD_TYPE_SIZES[field_type]
    return None
