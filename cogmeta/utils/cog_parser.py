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
COG Document Parser.

Entry point for reading the metadata of a Cloud-Optimized GeoTIFF without
downloading it: the 8-byte header is read first, then the IFD chain is walked
through a buffered range reader so only directory bytes are fetched.

Functions:
    parse_header: Decode the 8-byte TIFF header.
    parse: Parse a document from any RangeSource.
    parse_cog: Parse a document from a URL or local path.
    parse_cog_sync: Blocking wrapper around parse_cog.
"""
import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional
from urllib.parse import urlparse

import httpx

from cogmeta.utils.buffered_reader import BufferedRangeReader
from cogmeta.utils.byte_codec import ByteCursor, ByteOrder
from cogmeta.utils.data_models import CogDocument, CogHeader
from cogmeta.utils.exceptions import BadMagicError, BadOffsetError, TruncatedError
from cogmeta.utils.ifd_walker import HEADER_SIZE, walk_ifd_chain
from cogmeta.utils.range_source import FileRangeSource, HttpRangeSource, RangeSource

logger = logging.getLogger(__name__)

TIFF_MAGIC = 42
BIGTIFF_MAGIC = 43


@dataclass
class ReaderOptions:
    """Fetch policy of the buffered reader; None falls back to the [reader] config."""
    initial_fetch_size: Optional[int] = None
    growth_factor: Optional[int] = None
    max_fetch_size: Optional[int] = None


def parse_header(data: bytes) -> CogHeader:
    """
    Decode the 8-byte TIFF header.

    Raises:
        TruncatedError: If fewer than 8 bytes are given.
        BadByteOrderMarkerError: If bytes 0-1 are not 'II' or 'MM'.
        BadMagicError: If bytes 2-3 are not 42 (BigTIFF's 43 included).
    """
    if len(data) < HEADER_SIZE:
        raise TruncatedError("TIFF header is truncated", offset=0, expected=HEADER_SIZE, actual=len(data))

    byte_order = ByteOrder.from_marker(data[:2])
    cursor = ByteCursor(data, byte_order, 2)
    magic, cursor = cursor.read_u16()
    if magic != TIFF_MAGIC:
        note = " (BigTIFF is not supported)" if magic == BIGTIFF_MAGIC else ""
        raise BadMagicError(f"Invalid TIFF magic number{note}", offset=2, expected=TIFF_MAGIC, actual=magic)
    first_ifd_offset, _ = cursor.read_u32()
    return CogHeader(byte_order=byte_order, first_ifd_offset=first_ifd_offset)


async def parse(source: RangeSource, reader_options: Optional[ReaderOptions] = None,
                max_ifds: Optional[int] = None, tag_names: Optional[Mapping[int, str]] = None,
                max_value_size: Optional[int] = None) -> CogDocument:
    """
    Parse the header and every IFD of a TIFF/COG resource.

    Args:
        source: Where the bytes come from. Borrowed for the duration of the call.
        reader_options: Fetch policy of the buffered reader.
        max_ifds: Longest IFD chain accepted.
        tag_names: Tag table used to flag unknown tags (default: TIFF_TAGS).
        max_value_size: Largest single tag value fetched, in bytes.

    Returns:
        CogDocument with the header and the IFDs in chain order.

    Raises:
        TransportError: The source could not deliver bytes.
        FormatError: The file violates the TIFF structure.
        LogicError: The IFD chain is cyclic or too long.
    """
    options = reader_options or ReaderOptions()
    reader = BufferedRangeReader(
        source,
        initial_fetch_size=options.initial_fetch_size,
        growth_factor=options.growth_factor,
        max_fetch_size=options.max_fetch_size,
    )
    logger.info(f"Parsing COG metadata from {source.name}")
    bytes_before = source.bytes_fetched

    header = parse_header(await reader.get_range(0, HEADER_SIZE))
    logger.debug(f"Header: {header.byte_order.name}, first IFD at {header.first_ifd_offset}")
    if header.first_ifd_offset == 0:
        raise BadOffsetError("TIFF file has no image file directory", offset=4, expected=f">= {HEADER_SIZE}", actual=0)

    document = CogDocument(header=header, source_name=source.name)
    async for ifd in walk_ifd_chain(reader, header.byte_order, header.first_ifd_offset, max_ifds=max_ifds,
                                    tag_names=tag_names, max_value_size=max_value_size):
        document.ifds.append(ifd)

    document.request_count = reader.fetch_count
    document.bytes_fetched = source.bytes_fetched - bytes_before
    for warning in document.warnings:
        logger.warning(f"{source.name}: {warning.message}")
    logger.info(
        f"Parsed {len(document.ifds)} IFD(s) from {source.name} with {reader.fetch_count} request(s), "
        f"{reader.cache_hits} cache hit(s)"
    )
    return document


def _is_local(location: str) -> bool:
    scheme = urlparse(location).scheme
    # Windows drive letters parse as one-letter schemes
    return scheme in ('', 'file') or len(scheme) == 1


def _local_path(location: str) -> Path:
    parsed = urlparse(location)
    if parsed.scheme == 'file':
        return Path(parsed.path)
    return Path(location)


async def parse_cog(url: str, client: Optional[httpx.AsyncClient] = None, **kwargs) -> CogDocument:
    """
    Parse the metadata of the COG at `url`.

    `url` may be an http(s) URL, a file:// URL or a local path. Keyword
    arguments are passed on to `parse`.

    Example:
        >>> document = await parse_cog("https://example.com/scene.tif")
        >>> [(ifd.image_width, ifd.image_length) for ifd in document.ifds]
        [(10980, 10980), (5490, 5490), (2745, 2745)]
    """
    if _is_local(url):
        return await parse(FileRangeSource(_local_path(url)), **kwargs)

    async with HttpRangeSource(url, client=client) as source:
        return await parse(source, **kwargs)


def parse_cog_sync(url: str, **kwargs) -> CogDocument:
    """Blocking wrapper around `parse_cog` for scripts and the CLI."""
    return asyncio.run(parse_cog(url, **kwargs))
