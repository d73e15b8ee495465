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
Integration tests for the metadata reading workflow.

These tests write real tiled TIFF files with tifffile and verify that the
range-request parser reports the same directory structure and tag values
that tifffile reads back.
"""

import io

import numpy as np
import pytest
import tifffile

from cogmeta.utils.cog_parser import ReaderOptions, parse, parse_cog
from cogmeta.utils.geokey_parser import parse_geokeys
from cogmeta.utils.range_source import BytesRangeSource
from cogmeta.utils.report_formatters import render_markdown, to_dict

STRUCTURAL_TAGS = (254, 256, 257, 258, 259, 262, 277, 284, 322, 323, 324, 325, 339)

GEO_TAGS = [
    (33550, 'd', 3, (0.5, 0.5, 0.0), True),
    (33922, 'd', 6, (0.0, 0.0, 0.0, 500000.0, 4100000.0, 0.0), True),
    (34735, 'H', 16, (1, 1, 1, 3, 1024, 0, 1, 1, 1025, 0, 1, 1, 3072, 0, 1, 32610), True),
    (42113, 's', 0, '-9999', True),
]


def as_tuple(value) -> tuple:
    """Flatten a tifffile tag value to a tuple of ints, whatever its element count."""
    return tuple(int(v) for v in np.atleast_1d(value).tolist())


def write_cog(byteorder: str = '<', dtype=np.uint8) -> bytes:
    """
    Write a 64x64 tiled image with two reduced-resolution pages.

    Args:
        byteorder: '<' or '>'
        dtype: numpy data type of the pixels

    Returns:
        bytes: The TIFF file
    """
    data = (np.arange(64 * 64) % 251).astype(dtype).reshape(64, 64)
    buffer = io.BytesIO()
    with tifffile.TiffWriter(buffer, byteorder=byteorder) as tif:
        tif.write(data, tile=(16, 16), photometric='minisblack', extratags=GEO_TAGS)
        tif.write(data[::2, ::2], tile=(16, 16), photometric='minisblack', subfiletype=1)
        tif.write(data[::4, ::4], tile=(16, 16), photometric='minisblack', subfiletype=1)
    return buffer.getvalue()


@pytest.mark.integration
class TestAgainstTifffile:
    """Cross-check parsed directories against tifffile."""

    @pytest.mark.parametrize("byteorder", ['<', '>'])
    async def test_structure_matches(self, byteorder):
        data = write_cog(byteorder)
        document = await parse(BytesRangeSource(data))

        with tifffile.TiffFile(io.BytesIO(data)) as tif:
            pages = list(tif.pages)
            assert len(document.ifds) == len(pages) == 3
            for ifd, page in zip(document.ifds, pages):
                assert ifd.offset == page.offset
                for tag in page.tags:
                    if tag.code in STRUCTURAL_TAGS:
                        assert tuple(ifd[tag.code].values) == as_tuple(tag.value), tag.name

    @pytest.mark.parametrize("byteorder", ['<', '>'])
    async def test_single_tile_matches(self, byteorder):
        """A one-tile image cross-checks the same way as a multi-tile one."""
        data = (np.arange(16 * 16) % 251).astype(np.uint8).reshape(16, 16)
        buffer = io.BytesIO()
        with tifffile.TiffWriter(buffer, byteorder=byteorder) as tif:
            tif.write(data, tile=(16, 16), photometric='minisblack')
        document = await parse(BytesRangeSource(buffer.getvalue()))

        with tifffile.TiffFile(io.BytesIO(buffer.getvalue())) as tif:
            page = tif.pages[0]
            assert document.main_image.tile_offsets == as_tuple(page.dataoffsets)
            assert document.main_image.tile_byte_counts == as_tuple(page.databytecounts)

    async def test_overviews_and_tiles(self):
        document = await parse(BytesRangeSource(write_cog()))

        assert [ifd.ifd_type for ifd in document.ifds] == ["Main Image", "Overview", "Overview"]
        assert [(ifd.image_width, ifd.image_length) for ifd in document.ifds] == [(64, 64), (32, 32), (16, 16)]
        assert all(ifd.is_tiled for ifd in document.ifds)
        assert len(document.main_image.tile_offsets) == 16
        assert document.warnings == []

    async def test_geotiff_tags(self):
        document = await parse(BytesRangeSource(write_cog(dtype=np.float32)))
        main = document.main_image

        assert main.nodata == '-9999'
        assert main.get(33550) == (0.5, 0.5, 0.0)
        assert main.get(339) == 3
        version, keys = parse_geokeys(main)
        assert version == '1.1'
        assert [k.value_text for k in keys] == ['1 (ModelTypeProjected)', '1 (RasterPixelIsArea)', '32610 (EPSG:32610)']

    async def test_tile_data_is_where_offsets_point(self):
        """The first tile read at its TileOffsets position matches the pixels."""
        data = write_cog()
        document = await parse(BytesRangeSource(data))
        main = document.main_image

        offset = main.tile_offsets[0]
        length = main.tile_byte_counts[0]
        tile = np.frombuffer(data[offset:offset + length], dtype=np.uint8).reshape(16, 16)
        expected = (np.arange(64 * 64) % 251).astype(np.uint8).reshape(64, 64)[:16, :16]
        assert np.array_equal(tile, expected)

    async def test_fetches_only_metadata(self):
        """Small fetches never read past the directory area of a large file."""
        data = write_cog(dtype=np.float32)
        source = BytesRangeSource(data)
        document = await parse(source, reader_options=ReaderOptions(initial_fetch_size=64, growth_factor=2,
                                                                    max_fetch_size=256))
        assert len(document.ifds) == 3
        assert document.bytes_fetched < len(data)


@pytest.mark.integration
class TestLocalFileWorkflow:
    """Test the full local-file workflow through the report formatters."""

    async def test_file_to_reports(self, tmp_path):
        path = tmp_path / "overviews.tif"
        path.write_bytes(write_cog())

        document = await parse_cog(str(path))
        report = render_markdown(document)
        result = to_dict(document)

        assert '| 1 | Overview | 32 x 32 | 16 x 16 | Uncompressed |' in report
        assert '## GeoKeys (GeoTIFF 1.1)' in report
        assert result['ifds'][2]['width'] == 16
        assert result['request_count'] == document.request_count
