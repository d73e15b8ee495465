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
GDAL Metadata Parser.

GDAL stores dataset and band metadata (statistics, scale/offset, band
descriptions) in the GDAL_METADATA tag (42112) as a small XML document:

    <GDALMetadata>
      <Item name="STATISTICS_MAXIMUM" sample="0">255</Item>
      <Item name="OFFSET" sample="0" role="offset">0</Item>
    </GDALMetadata>
"""
import logging
from typing import List, Optional

import lxml.etree as etree

from cogmeta.utils.data_models import GdalMetadataItem, ImageFileDirectory

logger = logging.getLogger(__name__)

GDAL_METADATA_TAG = 42112


def parse_gdal_metadata_xml(xml_text: str) -> List[GdalMetadataItem]:
    """
    Parse GDAL_METADATA XML into items.

    Raises:
        ValueError: If the text is not well-formed XML.
    """
    try:
        root = etree.fromstring(xml_text.encode('utf-8'))
    except etree.XMLSyntaxError as e:
        raise ValueError(f"Malformed GDAL_METADATA XML: {e}") from e

    items: List[GdalMetadataItem] = []
    for element in root.iter('Item'):
        sample = element.get('sample')
        items.append(GdalMetadataItem(
            name=element.get('name', ''),
            value=(element.text or '').strip(),
            sample=int(sample) if sample is not None and sample.isdigit() else None,
            role=element.get('role'),
            domain=element.get('domain'),
        ))
    return items


def parse_gdal_metadata(ifd: ImageFileDirectory) -> Optional[List[GdalMetadataItem]]:
    """
    Return the GDAL_METADATA items of an IFD, or None if the tag is absent or malformed.
    """
    xml_text = ifd.get(GDAL_METADATA_TAG)
    if not isinstance(xml_text, str) or not xml_text.strip():
        return None
    try:
        return parse_gdal_metadata_xml(xml_text)
    except ValueError as e:
        logger.warning(f"IFD {ifd.index}: {e}")
        return None
