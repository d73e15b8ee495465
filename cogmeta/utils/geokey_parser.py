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
GeoKey Parser.

Interprets the GeoTIFF key directory of a parsed IFD:
- 34735: GeoKeyDirectoryTag (key IDs and storage locations)
- 34736: GeoDoubleParamsTag (floating-point values)
- 34737: GeoAsciiParamsTag (string values)

Works on already decoded tag values, so it adds no range requests. Both
GeoTIFF 1.0 and 1.1 key names are supported.
"""

import logging
from typing import Any, List, Optional, Tuple

from cogmeta.utils.data_models import GeoKey, ImageFileDirectory

logger = logging.getLogger(__name__)

# --- Lookup Tables ---
# GeoTIFF Standard v1.1: https://docs.ogc.org/is/19-008r4/19-008r4.html#_summary_of_geokey_ids_and_names

GEOKEY_NAMES = {
    # GeoTIFF Configuration Keys
    1024: 'GTModelTypeGeoKey',
    1025: 'GTRasterTypeGeoKey',
    1026: 'GTCitationGeoKey',
    # Geographic CRS Parameter Keys
    2048: 'GeodeticCRSGeoKey',
    2049: 'GeodeticCitationGeoKey',
    2050: 'GeodeticDatumGeoKey',
    2051: 'PrimeMeridianGeoKey',
    2052: 'GeogLinearUnitsGeoKey',
    2053: 'GeogLinearUnitSizeGeoKey',
    2054: 'GeogAngularUnitsGeoKey',
    2055: 'GeogAngularUnitSizeGeoKey',
    2056: 'EllipsoidGeoKey',
    2057: 'EllipsoidSemiMajorAxisGeoKey',
    2058: 'EllipsoidSemiMinorAxisGeoKey',
    2059: 'EllipsoidInvFlatteningGeoKey',
    2060: 'GeogAzimuthUnitsGeoKey',
    2061: 'PrimeMeridianLongGeoKey',
    # Projected CRS Parameter Keys
    3072: 'ProjectedCRSGeoKey',
    3073: 'ProjectedCitationGeoKey',
    3074: 'ProjectionGeoKey',
    3075: 'ProjMethodGeoKey',
    3076: 'ProjLinearUnitsGeoKey',
    3077: 'ProjLinearUnitSizeGeoKey',
    3078: 'ProjStdParallel1GeoKey',
    3079: 'ProjStdParallel2GeoKey',
    3080: 'ProjNatOriginLongGeoKey',
    3081: 'ProjNatOriginLatGeoKey',
    3082: 'ProjFalseEastingGeoKey',
    3083: 'ProjFalseNorthingGeoKey',
    3084: 'ProjFalseOriginLongGeoKey',
    3085: 'ProjFalseOriginLatGeoKey',
    3086: 'ProjFalseOriginEastingGeoKey',
    3087: 'ProjFalseOriginNorthingGeoKey',
    3088: 'ProjCenterLongGeoKey',
    3089: 'ProjCenterLatGeoKey',
    3090: 'ProjCenterEastingGeoKey',
    3091: 'ProjCenterNorthingGeoKey',
    3092: 'ProjScaleAtNatOriginGeoKey',
    3093: 'ProjScaleAtCenterGeoKey',
    3094: 'ProjAzimuthAngleGeoKey',
    3095: 'ProjStraightVertPoleLongGeoKey',
    # Vertical CRS Parameter Keys
    4096: 'VerticalGeoKey',
    4097: 'VerticalCitationGeoKey',
    4098: 'VerticalDatumGeoKey',
    4099: 'VerticalUnitsGeoKey',
    5120: 'CoordinateEpochGeoKey',
    # Non-standardized GeoKeys found in older files
    2062: 'TOWGS84GeoKey',
    3059: 'ProjLinearUnitsInterpCorrectGeoKey'
}

GEOKEY_LOOKUP = {
    1024: {  # GTModelTypeGeoKey
        1: 'ModelTypeProjected',
        2: 'ModelTypeGeographic',
        3: 'ModelTypeGeocentric'
    },
    1025: {  # GTRasterTypeGeoKey
        1: 'RasterPixelIsArea',
        2: 'RasterPixelIsPoint'
    }
}

# EPSG unit of measure codes used by the *UnitsGeoKey keys
UNIT_LOOKUP = {
    9001: 'metre',
    9002: 'foot',
    9003: 'US survey foot',
    9101: 'radian',
    9102: 'degree',
    9103: 'arc-minute',
    9104: 'arc-second',
    9105: 'grad',
    9122: 'degree (supplier to define representation)',
}

UNIT_KEYS = {2052, 2054, 2060, 3076, 4099}

# ProjMethodGeoKey (ProjCoordTransGeoKey in v1.0)
PROJECTION_METHOD_MAP = {
    1: 'CT_TransverseMercator',
    2: 'CT_TransvMercator_Modified_Alaska',
    3: 'CT_ObliqueMercator',
    7: 'CT_Mercator',
    8: 'CT_LambertConfConic_2SP',
    10: 'CT_LambertAzimEqualArea',
    11: 'CT_AlbersEqualArea',
    12: 'CT_AzimuthalEquidistant',
    14: 'CT_Stereographic',
    15: 'CT_PolarStereographic',
    16: 'CT_ObliqueStereographic',
    17: 'CT_Equirectangular',
    18: 'CT_CassiniSoldner',
    24: 'CT_Sinusoidal',
}

# Mapping of GeoTIFF key names to their v1.0 equivalents
# All other key names are the same in both versions
GEOKEY_v1_0_MAP = {
    'GeodeticCRSGeoKey': 'GeographicTypeGeoKey',
    'GeodeticCitationGeoKey': 'GeogCitationGeoKey',
    'GeodeticDatumGeoKey': 'GeogGeodeticDatumGeoKey',
    'PrimeMeridianGeoKey': 'GeogPrimeMeridianGeoKey',
    'EllipsoidGeoKey': 'GeogEllipsoidGeoKey',
    'EllipsoidSemiMajorAxisGeoKey': 'GeogSemiMajorAxisGeoKey',
    'EllipsoidSemiMinorAxisGeoKey': 'GeogSemiMinorAxisGeoKey',
    'EllipsoidInvFlatteningGeoKey': 'GeogInvFlatteningGeoKey',
    'PrimeMeridianLongGeoKey': 'GeogPrimeMeridianLongGeoKey',
    'ProjectedCRSGeoKey': 'ProjectedCSTypeGeoKey',
    'ProjectedCitationGeoKey': 'PCSCitationGeoKey',
    'ProjMethodGeoKey': 'ProjCoordTransGeoKey',
    'VerticalGeoKey': 'VerticalCSTypeGeoKey'
}

# Keys that should be displayed as plain text without value in parentheses
CITATION_KEYS = {
    1026,  # GTCitationGeoKey
    2049,  # GeodeticCitationGeoKey
    3073,  # ProjectedCitationGeoKey
    4097   # VerticalCitationGeoKey
}

GEO_KEY_DIRECTORY_TAG = 34735
GEO_DOUBLE_TAG = 34736
GEO_ASCII_TAG = 34737

# GeoTIFF "User-Defined" value
KvUserDefined = 32767


def is_geotiff(ifd: ImageFileDirectory) -> bool:
    """Check whether an IFD carries a GeoKey directory."""
    return GEO_KEY_DIRECTORY_TAG in ifd


def _as_tuple(value: Any) -> Tuple[Any, ...]:
    return value if isinstance(value, tuple) else (value,)


def _get_geokey_value(tag_loc: int, value_offset: int, count: int,
                      double_params: Tuple[float, ...], ascii_params: str) -> Optional[Any]:
    """Extracts a GeoKey value from the appropriate tag."""
    if tag_loc == 0:
        return value_offset

    if tag_loc == GEO_DOUBLE_TAG and double_params:
        value = double_params[value_offset:value_offset + count]
        return value[0] if len(value) == 1 else value

    if tag_loc == GEO_ASCII_TAG and ascii_params:
        # Strings are '|'-terminated inside GeoAsciiParams
        return ascii_params[value_offset:value_offset + count].rstrip('\x00|')

    return None


def _describe_value(key_id: int, value: int) -> Optional[str]:
    if value == KvUserDefined:
        return "User-Defined"
    if key_id in GEOKEY_LOOKUP:
        return GEOKEY_LOOKUP[key_id].get(value)
    if key_id == 3075:
        return PROJECTION_METHOD_MAP.get(value)
    if key_id in UNIT_KEYS:
        return UNIT_LOOKUP.get(value)
    if key_id in (2048, 3072, 4096):
        return f"EPSG:{value}"
    return None


def parse_geokeys(ifd: ImageFileDirectory) -> Tuple[Optional[str], List[GeoKey]]:
    """
    Parse the GeoKey directory of an IFD.

    Returns:
        Tuple[version, geokeys] where:
            - version: GeoTIFF key revision ("1.0", "1.1") or None
            - geokeys: GeoKey records in directory order

    Example:
        >>> version, keys = parse_geokeys(document.main_image)
        >>> version
        '1.1'
        >>> [k.value_text for k in keys][:2]
        ['1 (ModelTypeProjected)', '1 (RasterPixelIsArea)']
    """
    directory = ifd.get(GEO_KEY_DIRECTORY_TAG)
    if directory is None:
        return None, []
    directory = _as_tuple(directory)
    if len(directory) < 4:
        logger.debug(f"GeoKey directory of IFD {ifd.index} is too short: {len(directory)} values")
        return None, []

    double_params = _as_tuple(ifd.get(GEO_DOUBLE_TAG, ()))
    ascii_params = ifd.get(GEO_ASCII_TAG, '')
    if not isinstance(ascii_params, str):
        ascii_params = ''

    _, key_revision, minor_revision, num_keys = directory[:4]
    version_info = f"{key_revision}.{minor_revision}"
    use_v1_0_names = version_info == "1.0"

    keys: List[GeoKey] = []
    for i in range(num_keys):
        offset = 4 + (i * 4)
        key_data = directory[offset:offset + 4]
        if len(key_data) < 4:
            logger.debug(f"Skipping malformed GeoKey at index {i}")
            continue

        key_id, tag_loc, count, value_offset = key_data
        key_name = GEOKEY_NAMES.get(key_id, f"UnknownGeoKey ({key_id})")
        if use_v1_0_names:
            key_name = GEOKEY_v1_0_MAP.get(key_name, key_name)

        value = _get_geokey_value(tag_loc, value_offset, count, double_params, ascii_params)
        if value is None:
            logger.debug(f"GeoKey {key_id} references missing tag {tag_loc}")
            continue

        value_text = str(value)
        if key_id not in CITATION_KEYS and isinstance(value, int):
            value_desc = _describe_value(key_id, value)
            if value_desc:
                value_text = f"{value} ({value_desc})"

        keys.append(GeoKey(
            name=key_name,
            id=key_id,
            value=value,
            value_text=value_text,
            is_citation=key_id in CITATION_KEYS,
            location=tag_loc,
            count=count
        ))

    return version_info, keys
