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
IFD Chain Walker.

Parses one Image File Directory at a time and follows its next-IFD pointer
until the pointer is 0:

    entry count (2 bytes) -> entry_count x 12-byte entries -> next offset (4 bytes)

Entries are resolved strictly in order, each value before the next entry is
read. The walk refuses to revisit an offset and stops with an error after a
configurable number of directories, so corrupt or hostile files cannot make
it loop forever.
"""
import logging
from typing import AsyncIterator, List, Mapping, Optional, Set

from cogmeta.utils.buffered_reader import BufferedRangeReader
from cogmeta.utils.byte_codec import ByteCursor, ByteOrder
from cogmeta.utils.config_loader import config
from cogmeta.utils.data_models import ImageFileDirectory, ParseWarning, ResolvedEntry
from cogmeta.utils.entry_resolver import ENTRY_SIZE, resolve_entry
from cogmeta.utils.exceptions import BadOffsetError, DirectoryCycleError, DirectoryLimitError

logger = logging.getLogger(__name__)

HEADER_SIZE = 8


async def read_ifd(reader: BufferedRangeReader, byte_order: ByteOrder, offset: int, index: int = 0,
                   tag_names: Optional[Mapping[int, str]] = None,
                   max_value_size: Optional[int] = None) -> ImageFileDirectory:
    """
    Parse the Image File Directory at `offset`.

    Args:
        reader: Reader over the TIFF resource.
        byte_order: Byte order of the file.
        offset: Absolute offset of the IFD.
        index: Position of the IFD in the chain.
        tag_names: Tag table used to flag unknown tags.
        max_value_size: Largest tag value fetched, in bytes.

    Returns:
        The parsed ImageFileDirectory.
    """
    if offset < HEADER_SIZE:
        raise BadOffsetError("IFD offset points inside the TIFF header", offset=offset, expected=f">= {HEADER_SIZE}")

    count_bytes = await reader.get_range(offset, 2)
    entry_count, _ = ByteCursor(count_bytes, byte_order).read_u16()
    logger.debug(f"IFD {index} at offset {offset}: {entry_count} entries")

    entries: List[ResolvedEntry] = []
    warnings: List[ParseWarning] = []
    for i in range(entry_count):
        entry_offset = offset + 2 + ENTRY_SIZE * i
        raw = await reader.get_range(entry_offset, ENTRY_SIZE)
        resolved, entry_warnings = await resolve_entry(
            raw, reader, byte_order, entry_offset, tag_names=tag_names, max_value_size=max_value_size
        )
        entries.append(resolved)
        warnings.extend(entry_warnings)

    next_bytes = await reader.get_range(offset + 2 + ENTRY_SIZE * entry_count, 4)
    next_ifd_offset, _ = ByteCursor(next_bytes, byte_order).read_u32()

    return ImageFileDirectory(
        index=index,
        offset=offset,
        entry_count=entry_count,
        entries=tuple(entries),
        next_ifd_offset=next_ifd_offset,
        warnings=tuple(warnings),
    )


async def walk_ifd_chain(reader: BufferedRangeReader, byte_order: ByteOrder, first_offset: int,
                         max_ifds: Optional[int] = None, tag_names: Optional[Mapping[int, str]] = None,
                         max_value_size: Optional[int] = None) -> AsyncIterator[ImageFileDirectory]:
    """
    Yield every IFD of the chain starting at `first_offset`, in file order.

    Raises:
        DirectoryCycleError: If a next-IFD pointer leads to an already parsed IFD.
        DirectoryLimitError: If the chain holds more than `max_ifds` directories.
        BadOffsetError: If an IFD offset points inside the header.
    """
    limit = max_ifds if max_ifds is not None else config.get("parser.max_ifds", 1024)
    visited: Set[int] = set()
    offset = first_offset
    previous = first_offset
    index = 0

    while offset != 0:
        if offset in visited:
            raise DirectoryCycleError(offset, previous)
        if index >= limit:
            raise DirectoryLimitError(limit)
        visited.add(offset)

        ifd = await read_ifd(reader, byte_order, offset, index, tag_names=tag_names, max_value_size=max_value_size)
        yield ifd

        previous = offset
        offset = ifd.next_ifd_offset
        index += 1

    logger.debug(f"IFD chain done after {index} directories")
