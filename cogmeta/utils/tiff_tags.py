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
TIFF Tag Tables.

Tag names and value interpretations for the TIFF, GeoTIFF and GDAL tags found
in Cloud-Optimized GeoTIFFs. The tag table is the default "table of interest"
used by the parser: tags missing from it are decoded as usual but flagged as
unknown.
"""

import json
import logging
from importlib import resources
from typing import Any, Dict, Mapping, Optional

logger = logging.getLogger(__name__)


def _load_tiff_tag_lookup() -> Dict[int, str]:
    """
    Load TIFF tag definitions from the JSON lookup file.

    Returns:
        Dict mapping tag code to tag name
    """
    lookup_file = resources.files('cogmeta.resources.tiff').joinpath('tiff_tag_lookup.json')

    try:
        with lookup_file.open('r', encoding='utf-8') as f:
            data = json.load(f)

        tiff_tags = {}
        for tag_id_str, tag_info in data.get('tags', {}).items():
            tag_id = int(tag_id_str)
            tiff_tags[tag_id] = tag_info.get('name', f'UnknownTag ({tag_id})')
        return tiff_tags

    except FileNotFoundError:
        logger.warning(f"TIFF tag lookup file not found: {lookup_file}")
        logger.warning("Falling back to minimal tag definitions")
        return {
            256: 'ImageWidth',
            257: 'ImageLength',
            258: 'BitsPerSample',
            259: 'Compression',
            322: 'TileWidth',
            323: 'TileLength',
            324: 'TileOffsets',
            325: 'TileByteCounts',
        }

TIFF_TAGS: Dict[int, str] = _load_tiff_tag_lookup()

# Tag value interpretation mappings
TAG_VALUE_MAPPINGS = {
    'subfile_type': {  # Tag 254 (NewSubfileType) - bitmap flags
        0: "Default",
        1: "Reduced resolution version",
        2: "Single page of multi-page",
        4: "Transparency mask",
    },
    'compression': {  # Tag 259 (Compression)
        1: "Uncompressed",
        2: "CCITT (1D RLE)",
        3: "T4/Group 3 Fax",
        4: "T6/Group 4 Fax",
        5: "LZW",
        6: "JPEG (old-style)",
        7: "JPEG",
        8: "DEFLATE",
        32773: "PackBits",
        32946: "DEFLATE",
        34712: "JPEG 2000",
        34887: "LERC",
        34925: "LZMA",
        50000: "ZSTD",
        50001: "WEBP",
        50002: "JPEG XL",
        52546: "JPEG XL",
    },
    'photometric': {  # Tag 262 (PhotometricInterpretation)
        0: "WhiteIsZero",
        1: "BlackIsZero",
        2: "RGB",
        3: "Palette",
        4: "Transparency Mask",
        5: "CMYK",
        6: "YCbCr",
        8: "CIELab",
    },
    'planar_config': {  # Tag 284 (PlanarConfiguration)
        1: "Contiguous / Pixel Interleave (RGBRGB...)",
        2: "Planar / Band Interleave (RR...GG...BB...)",
    },
    'resolution_unit': {  # Tag 296 (ResolutionUnit)
        1: "None",
        2: "Inch",
        3: "Centimeter",
    },
    'predictor': {  # Tag 317 (Predictor)
        1: "None",
        2: "Horizontal differencing",
        3: "Floating point",
    },
    'extra_samples': {  # Tag 338 (ExtraSamples)
        0: "Unspecified",
        1: "Associated alpha",
        2: "Unassociated alpha",
    },
    'sample_format': {  # Tag 339 (SampleFormat)
        1: "Unsigned integer",
        2: "Signed integer",
        3: "IEEE floating point",
        4: "Undefined",
        5: "Complex integer",
        6: "Complex IEEE floating point",
    },
}

_TAG_MAPPING_KEYS = {
    259: 'compression',
    262: 'photometric',
    284: 'planar_config',
    296: 'resolution_unit',
    317: 'predictor',
    339: 'sample_format',
}


def tag_name(tag: int, tag_names: Optional[Mapping[int, str]] = None) -> Optional[str]:
    """Return the name of a tag, or None if the table does not know it."""
    table = TIFF_TAGS if tag_names is None else tag_names
    return table.get(tag)


def get_tag_interpretation(tag: int, value: Any) -> Optional[str]:
    """
    Get human-readable interpretation for specific tag values.

    Args:
        tag: TIFF tag code
        value: The decoded tag value (scalar or tuple)

    Returns:
        Human-readable interpretation if available
    """
    if tag == 254:  # NewSubfileType - bitmap flags
        if not isinstance(value, int):
            return None
        flags = [desc for bit, desc in TAG_VALUE_MAPPINGS['subfile_type'].items() if bit and value & bit]
        return ' + '.join(flags) if flags else TAG_VALUE_MAPPINGS['subfile_type'][0]

    if tag == 338:  # ExtraSamples
        values = value if isinstance(value, tuple) else (value,)
        interpretations = [TAG_VALUE_MAPPINGS['extra_samples'].get(v, 'Unknown') for v in values if isinstance(v, int)]
        return ' + '.join(interpretations) if interpretations else None

    mapping_key = _TAG_MAPPING_KEYS.get(tag)
    if mapping_key is None:
        return None

    # SampleFormat is per sample; interpret it when all samples agree
    if isinstance(value, tuple):
        if not value or len(set(value)) != 1:
            return None
        value = value[0]
    if not isinstance(value, int):
        return None
    return TAG_VALUE_MAPPINGS[mapping_key].get(value)
