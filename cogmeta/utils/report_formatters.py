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
Report Formatters for parsed COG documents.

Renders a CogDocument as a Markdown report (summary, IFD table, tag tables,
GeoKeys, warnings) or as a JSON-serializable dictionary.
"""
from typing import Any, Dict, List

from cogmeta.utils.data_models import ARRAY_VALUED_TAGS, CogDocument, ImageFileDirectory, Rational, TagValue
from cogmeta.utils.gdal_metadata import parse_gdal_metadata
from cogmeta.utils.geokey_parser import parse_geokeys
from cogmeta.utils.tiff_tags import get_tag_interpretation

# Arrays longer than this are abbreviated in reports
MAX_LISTED_VALUES = 8


def _json_value(value: Any) -> Any:
    if isinstance(value, Rational):
        return [value.numerator, value.denominator]
    if isinstance(value, tuple):
        return [_json_value(v) for v in value]
    return value


def _display_value(tag_value: TagValue) -> str:
    values = tag_value.values
    if isinstance(tag_value.value, str):
        text = tag_value.value.replace('|', '&#124;').replace('\n', ' ')
        return text if len(text) <= 80 else f"{text[:77]}..."

    def fmt(v: Any) -> str:
        if isinstance(v, Rational):
            return f"{v.numerator}/{v.denominator}"
        return str(v)

    if len(values) <= MAX_LISTED_VALUES:
        return ', '.join(fmt(v) for v in values)
    return f"[{', '.join(fmt(v) for v in values[:5])}, ...] ({len(values)} total)"


def ifd_to_dict(ifd: ImageFileDirectory) -> Dict[str, Any]:
    """Convert an IFD to a JSON-serializable dictionary."""
    tags = []
    for resolved in ifd.entries:
        entry = resolved.entry
        value = None
        if resolved.value is not None:
            value = resolved.value.values if entry.tag in ARRAY_VALUED_TAGS else resolved.value.value
        tags.append({
            'code': entry.tag,
            'name': entry.name,
            'field_type': entry.field_type.name if entry.has_known_type else entry.field_type,
            'count': entry.count,
            'value': _json_value(value),
            'known': entry.is_known_tag,
        })
    return {
        'index': ifd.index,
        'offset': ifd.offset,
        'ifd_type': ifd.ifd_type,
        'width': ifd.image_width,
        'height': ifd.image_length,
        'tile_width': ifd.tile_width,
        'tile_length': ifd.tile_length,
        'next_ifd_offset': ifd.next_ifd_offset,
        'tags': tags,
    }


def to_dict(document: CogDocument) -> Dict[str, Any]:
    """Convert a parsed document to a JSON-serializable dictionary."""
    result: Dict[str, Any] = {
        'source': document.source_name,
        'byte_order': document.byte_order.name,
        'first_ifd_offset': document.header.first_ifd_offset,
        'request_count': document.request_count,
        'bytes_fetched': document.bytes_fetched,
        'ifds': [ifd_to_dict(ifd) for ifd in document.ifds],
        'warnings': [
            {'kind': w.kind, 'tag': w.tag, 'offset': w.offset, 'message': w.message}
            for w in document.warnings
        ],
    }
    if document.main_image is not None:
        version, keys = parse_geokeys(document.main_image)
        if version:
            result['geokeys'] = {
                'version': version,
                'keys': [{'id': k.id, 'name': k.name, 'value': _json_value(k.value)} for k in keys],
            }
    return result


def _render_summary(document: CogDocument) -> List[str]:
    lines = [
        "## Summary\n",
        f"**Source:** {document.source_name}  ",
        f"**Byte Order:** {document.byte_order.name}  ",
        f"**IFDs:** {len(document.ifds)} ({len(document.overviews)} overview(s))  ",
        f"**Range Requests:** {document.request_count}  ",
        f"**Bytes Fetched:** {document.bytes_fetched:,}  ",
    ]
    return lines


def _render_ifd_table(document: CogDocument) -> List[str]:
    lines = [
        "## Image File Directories\n",
        "| IFD | Type | Dimensions | Block Size | Compression | Offset |",
        "|-----|------|------------|------------|-------------|--------|",
    ]
    for ifd in document.ifds:
        dimensions = f"{ifd.image_width} x {ifd.image_length}"
        if ifd.is_tiled:
            block_size = f"{ifd.tile_width} x {ifd.tile_length}"
        else:
            block_size = f"{ifd.image_width} x {ifd.get(278, ifd.image_length)}"
        compression = get_tag_interpretation(259, ifd.compression) or str(ifd.compression)
        lines.append(f"| {ifd.index} | {ifd.ifd_type} | {dimensions} | {block_size} | {compression} | {ifd.offset} |")
    return lines


def _render_tags(ifd: ImageFileDirectory) -> List[str]:
    lines = [
        f"### IFD {ifd.index} Tags\n",
        "| Code | Name | Type | Count | Value | Interpretation |",
        "|------|------|------|-------|-------|----------------|",
    ]
    for resolved in ifd.entries:
        entry = resolved.entry
        type_name = entry.field_type.name if entry.has_known_type else f"Unknown ({entry.field_type})"
        if resolved.value is None:
            value = "*not decoded*"
            interpretation = ""
        else:
            value = _display_value(resolved.value)
            interpretation = get_tag_interpretation(entry.tag, resolved.value.value) or ""
        lines.append(f"| {entry.tag} | {entry.name} | {type_name} | {entry.count} | {value} | {interpretation} |")
    return lines


def render_markdown(document: CogDocument, include_tags: bool = True) -> str:
    """
    Render a parsed document as a Markdown report.

    Args:
        document: The parsed document.
        include_tags: Include the full tag table of every IFD.
    """
    parts = ["# COG Metadata Report", "\n".join(_render_summary(document)), "\n".join(_render_ifd_table(document))]

    if include_tags:
        for ifd in document.ifds:
            parts.append("\n".join(_render_tags(ifd)))

    main_image = document.main_image
    if main_image is not None:
        version, keys = parse_geokeys(main_image)
        if keys:
            rows = [
                f"## GeoKeys (GeoTIFF {version})\n",
                "| ID | Name | Value |",
                "|----|------|-------|",
            ]
            rows.extend(f"| {k.id} | {k.name} | {k.value_text} |" for k in keys)
            parts.append("\n".join(rows))

        items = parse_gdal_metadata(main_image)
        if items:
            rows = [
                "## GDAL Metadata\n",
                "| Name | Band | Role | Value |",
                "|------|------|------|-------|",
            ]
            for item in items:
                band = "" if item.sample is None else str(item.sample + 1)
                rows.append(f"| {item.name} | {band} | {item.role or ''} | {item.value} |")
            parts.append("\n".join(rows))

    if document.warnings:
        rows = ["## Warnings\n"]
        rows.extend(f"- {w.message}" for w in document.warnings)
        parts.append("\n".join(rows))

    return "\n\n".join(parts) + "\n"
