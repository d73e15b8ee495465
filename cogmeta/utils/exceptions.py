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
Custom Exceptions Module.

A centralized module for the exceptions raised while reading COG metadata.

Fatal errors (abort the parse):
    TransportError: The range source could not deliver the requested bytes.
    FormatError: The bytes violate the TIFF structural contract.
    LogicError: The directory chain is cyclic or unreasonably long.

Non-fatal errors (recorded as warnings on the parsed document):
    UnsupportedFieldTypeError: A directory entry uses an unknown field type.
"""
from typing import Any, Optional


class CogError(Exception):
    """Base exception for every error raised while reading a COG."""
    pass


class TransportError(CogError):
    """The range source could not deliver the requested bytes."""

    def __init__(self, message: str, url: Optional[str] = None, offset: Optional[int] = None,
                 length: Optional[int] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.url = url
        self.offset = offset
        self.length = length
        self.status_code = status_code


class FormatError(CogError):
    """The bytes read violate the TIFF/COG structural contract."""

    def __init__(self, message: str, offset: Optional[int] = None,
                 expected: Any = None, actual: Any = None):
        details = []
        if offset is not None:
            details.append(f"offset={offset}")
        if expected is not None:
            details.append(f"expected={expected!r}")
        if actual is not None:
            details.append(f"actual={actual!r}")
        full_message = f"{message} ({', '.join(details)})" if details else message
        super().__init__(full_message)
        self.offset = offset
        self.expected = expected
        self.actual = actual


class BadByteOrderMarkerError(FormatError):
    """Bytes 0-1 are neither 'II' nor 'MM'."""
    pass


class BadMagicError(FormatError):
    """Bytes 2-3 are not the TIFF magic number 42."""
    pass


class TruncatedError(FormatError):
    """Fewer bytes remain than a primitive needs."""
    pass


class InvalidEncodingError(FormatError):
    """An ASCII field is not valid UTF-8."""
    pass


class BadOffsetError(FormatError):
    """An IFD offset points inside the file header."""
    pass


class ValueTooLargeError(FormatError):
    """A directory entry declares a value larger than the configured limit."""
    pass


class UnsupportedFieldTypeError(CogError):
    """A directory entry uses a field type code outside the 12 TIFF types."""

    def __init__(self, field_type: int):
        super().__init__(f"Unsupported TIFF field type: {field_type}")
        self.field_type = field_type


class LogicError(CogError):
    """The directory chain cannot be followed safely."""
    pass


class DirectoryCycleError(LogicError):
    """A next-IFD pointer leads back to an already visited directory."""

    def __init__(self, offset: int, visited_from: int):
        super().__init__(
            f"IFD chain cycle: directory at offset {visited_from} points back to offset {offset}"
        )
        self.offset = offset
        self.visited_from = visited_from


class DirectoryLimitError(LogicError):
    """The directory chain is longer than the configured maximum."""

    def __init__(self, max_ifds: int):
        super().__init__(f"IFD chain exceeds the maximum of {max_ifds} directories")
        self.max_ifds = max_ifds
