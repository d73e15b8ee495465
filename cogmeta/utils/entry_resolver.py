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
Directory Entry Resolver.

Decodes one 12-byte IFD entry (tag, field type, count, value-or-offset) and
resolves its value. Values of 4 bytes or less are stored in the entry itself;
larger values are fetched from the offset through the buffered reader.

Unknown tags and unsupported field types never stop the directory scan: the
entry is kept and a ParseWarning is recorded instead.
"""
import logging
from typing import List, Mapping, Optional, Tuple

from cogmeta.utils.buffered_reader import BufferedRangeReader
from cogmeta.utils.byte_codec import ByteCursor, ByteOrder
from cogmeta.utils.config_loader import config
from cogmeta.utils.data_models import DirectoryEntry, ParseWarning, ResolvedEntry
from cogmeta.utils.exceptions import InvalidEncodingError, TruncatedError, ValueTooLargeError
from cogmeta.utils.field_types import to_field_type
from cogmeta.utils.tiff_tags import tag_name
from cogmeta.utils.value_decoder import decode

logger = logging.getLogger(__name__)

ENTRY_SIZE = 12
INLINE_VALUE_SIZE = 4


def decode_entry(raw: bytes, byte_order: ByteOrder, entry_offset: int,
                 tag_names: Optional[Mapping[int, str]] = None) -> DirectoryEntry:
    """
    Decode the four fields of a 12-byte directory entry.

    Args:
        raw: The 12 entry bytes.
        byte_order: Byte order of the file.
        entry_offset: Absolute file offset of the entry.
        tag_names: Tag table used to name the tag (default: TIFF_TAGS).

    Raises:
        TruncatedError: If fewer than 12 bytes are given.
    """
    if len(raw) < ENTRY_SIZE:
        raise TruncatedError("Directory entry is truncated", offset=entry_offset, expected=ENTRY_SIZE, actual=len(raw))

    cursor = ByteCursor(raw, byte_order)
    tag, cursor = cursor.read_u16()
    field_type_code, cursor = cursor.read_u16()
    count, cursor = cursor.read_u32()
    value_or_offset, _ = cursor.read_u32()

    name = tag_name(tag, tag_names)
    return DirectoryEntry(
        tag=tag,
        field_type=to_field_type(field_type_code),
        count=count,
        value_or_offset=value_or_offset,
        raw_value=bytes(raw[8:12]),
        offset=entry_offset,
        name=name if name is not None else f'UnknownTag ({tag})',
        is_known_tag=name is not None,
    )


async def resolve_entry(raw: bytes, reader: BufferedRangeReader, byte_order: ByteOrder, entry_offset: int,
                        tag_names: Optional[Mapping[int, str]] = None,
                        max_value_size: Optional[int] = None) -> Tuple[ResolvedEntry, List[ParseWarning]]:
    """
    Decode a directory entry and resolve its value.

    Args:
        raw: The 12 entry bytes.
        reader: Reader used to fetch values stored at an offset.
        byte_order: Byte order of the file.
        entry_offset: Absolute file offset of the entry.
        tag_names: Tag table used to flag unknown tags (default: TIFF_TAGS).
        max_value_size: Largest value size fetched, in bytes (default: parser.max_value_size).

    Returns:
        Tuple of (ResolvedEntry, warnings). The resolved value is None when the
        field type is unsupported.

    Raises:
        TransportError: If the value bytes cannot be fetched.
        FormatError: If the value is invalid (bad UTF-8, too large, truncated).
    """
    entry = decode_entry(raw, byte_order, entry_offset, tag_names)
    warnings: List[ParseWarning] = []

    if not entry.is_known_tag:
        message = f"Unknown tag {entry.tag} at offset {entry_offset}"
        logger.debug(message)
        warnings.append(ParseWarning(kind='unknown_tag', tag=entry.tag, offset=entry_offset, message=message))

    value_size = entry.value_size
    if value_size is None:
        message = f"Tag {entry.tag} ({entry.name}) uses unsupported field type {entry.field_type}; value not decoded"
        logger.debug(message)
        warnings.append(ParseWarning(kind='unsupported_field_type', tag=entry.tag, offset=entry_offset, message=message))
        return ResolvedEntry(entry, None), warnings

    if value_size <= INLINE_VALUE_SIZE:
        value_bytes = entry.raw_value
    else:
        limit = max_value_size if max_value_size is not None else config.get("parser.max_value_size", 64 * 1024 * 1024)
        if value_size > limit:
            raise ValueTooLargeError(
                f"Tag {entry.tag} ({entry.name}) value exceeds the size limit",
                offset=entry_offset, expected=f"<= {limit}", actual=value_size
            )
        logger.debug(f"Tag {entry.tag} ({entry.name}): {value_size} bytes at offset {entry.value_or_offset}")
        value_bytes = await reader.get_range(entry.value_or_offset, value_size)

    try:
        value = decode(entry.field_type, value_bytes, byte_order, entry.count)
    except InvalidEncodingError as e:
        value_offset = entry_offset + 8 if entry.is_inline else entry.value_or_offset
        raise InvalidEncodingError(f"Tag {entry.tag} ({entry.name}): {e}", offset=value_offset) from e
    return ResolvedEntry(entry, value), warnings
