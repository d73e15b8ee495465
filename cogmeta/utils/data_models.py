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
Data Models for the COG Metadata Reader.

This module defines the dataclasses produced by the parser. They are
immutable once built and owned solely by the caller that requested the parse.

Domain model classes:
    Rational: A numerator/denominator pair from a RATIONAL or SRATIONAL field
    TagValue: The decoded values of one directory entry
    CogHeader: The 8-byte TIFF header
    DirectoryEntry: One 12-byte Image File Directory entry
    ParseWarning: A non-fatal problem found while parsing
    ImageFileDirectory: One IFD with its resolved entries
    CogDocument: The header plus every IFD in chain order

Interpretation classes:
    GeoKey: A GeoTIFF key with its value and metadata
    GdalMetadataItem: One <Item> of the GDAL_METADATA XML tag
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, NamedTuple, Optional, Tuple, Union

from cogmeta.utils.byte_codec import ByteOrder
from cogmeta.utils.field_types import FIELD_TYPE_SIZES, FieldType

# Tag codes used by the convenience accessors
NEW_SUBFILE_TYPE = 254
IMAGE_WIDTH = 256
IMAGE_LENGTH = 257
BITS_PER_SAMPLE = 258
COMPRESSION = 259
PHOTOMETRIC = 262
SAMPLES_PER_PIXEL = 277
PLANAR_CONFIGURATION = 284
TILE_WIDTH = 322
TILE_LENGTH = 323
STRIP_OFFSETS = 273
STRIP_BYTE_COUNTS = 279
TILE_OFFSETS = 324
TILE_BYTE_COUNTS = 325
SAMPLE_FORMAT = 339
GDAL_NODATA = 42113

# Tags whose count follows the image layout rather than being fixed at one
ARRAY_VALUED_TAGS = frozenset({
    BITS_PER_SAMPLE, STRIP_OFFSETS, STRIP_BYTE_COUNTS, TILE_OFFSETS, TILE_BYTE_COUNTS, SAMPLE_FORMAT,
})


class Rational(NamedTuple):
    """A RATIONAL or SRATIONAL value, kept as an undivided pair."""
    numerator: int
    denominator: int

    def as_float(self) -> Optional[float]:
        """Return numerator / denominator, or None when the denominator is zero."""
        if self.denominator == 0:
            return None
        return self.numerator / self.denominator


@dataclass(frozen=True)
class TagValue:
    """
    The decoded values of one directory entry.

    Attributes:
        field_type: The TIFF field type the values were decoded from
        values: Every decoded element in file order. ASCII fields hold a single
            str; RATIONAL and SRATIONAL fields hold Rational pairs.

    Example:
        >>> TagValue(FieldType.SHORT, (512,)).value
        512
        >>> TagValue(FieldType.SHORT, (8, 8, 8)).value
        (8, 8, 8)
    """
    field_type: FieldType
    values: Tuple[Any, ...]

    @property
    def count(self) -> int:
        return len(self.values)

    @property
    def value(self) -> Any:
        """The single element for one-element values, the full tuple otherwise."""
        if len(self.values) == 1:
            return self.values[0]
        return self.values

    def as_bytes(self) -> bytes:
        """Return BYTE, SBYTE or UNDEFINED values as raw bytes."""
        if self.field_type not in (FieldType.BYTE, FieldType.SBYTE, FieldType.UNDEFINED):
            raise TypeError(f"{self.field_type.name} values cannot be returned as bytes")
        return bytes(v & 0xFF for v in self.values)


@dataclass(frozen=True)
class CogHeader:
    """
    The 8-byte TIFF header.

    Attributes:
        byte_order: Byte order declared by bytes 0-1
        first_ifd_offset: Offset of the first Image File Directory
    """
    byte_order: ByteOrder
    first_ifd_offset: int


@dataclass(frozen=True)
class DirectoryEntry:
    """
    One 12-byte Image File Directory entry.

    Attributes:
        tag: The numeric tag code (e.g., 256 for ImageWidth)
        field_type: The FieldType, or the raw code when it is not one of the 12 known types
        count: Number of values of field_type
        value_or_offset: The raw 4-byte field read as an unsigned integer
        raw_value: The same 4 bytes as stored in the file
        offset: Absolute file offset of the entry
        name: Human-readable tag name
        is_known_tag: False when the tag is not in the tag table used for the parse
    """
    tag: int
    field_type: Union[FieldType, int]
    count: int
    value_or_offset: int
    raw_value: bytes
    offset: int
    name: str
    is_known_tag: bool = True

    @property
    def has_known_type(self) -> bool:
        return isinstance(self.field_type, FieldType)

    @property
    def value_size(self) -> Optional[int]:
        """Total size of the value in bytes, or None for unknown field types."""
        if not self.has_known_type:
            return None
        return self.count * FIELD_TYPE_SIZES[self.field_type]

    @property
    def is_inline(self) -> bool:
        """True when the value is stored in the entry itself."""
        size = self.value_size
        return size is not None and size <= 4


@dataclass(frozen=True)
class ParseWarning:
    """
    A non-fatal problem recorded while parsing.

    Attributes:
        kind: 'unknown_tag' or 'unsupported_field_type'
        tag: Tag code of the affected entry
        offset: Absolute file offset of the affected entry
        message: Human-readable description
    """
    kind: str
    tag: int
    offset: int
    message: str


@dataclass(frozen=True)
class ResolvedEntry:
    """A directory entry with its decoded value (None when it could not be decoded)."""
    entry: DirectoryEntry
    value: Optional[TagValue]


@dataclass(frozen=True)
class ImageFileDirectory:
    """
    One Image File Directory.

    Attributes:
        index: Position of the IFD in the chain (0 = main image)
        offset: Absolute file offset of the IFD
        entry_count: Number of entries declared by the IFD
        entries: Resolved entries in file order
        next_ifd_offset: Offset of the next IFD (0 = end of chain)
        warnings: Non-fatal problems found while parsing this IFD

    Example:
        >>> ifd.image_width, ifd.image_length
        (1024, 768)
        >>> ifd['Compression'].value
        8
    """
    index: int
    offset: int
    entry_count: int
    entries: Tuple[ResolvedEntry, ...]
    next_ifd_offset: int
    warnings: Tuple[ParseWarning, ...] = ()

    def __iter__(self) -> Iterator[ResolvedEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, key: Union[int, str]) -> bool:
        return self.find(key) is not None

    def __getitem__(self, key: Union[int, str]) -> TagValue:
        resolved = self.find(key)
        if resolved is None or resolved.value is None:
            raise KeyError(key)
        return resolved.value

    def find(self, key: Union[int, str]) -> Optional[ResolvedEntry]:
        """Find the first entry by tag code or tag name."""
        for resolved in self.entries:
            if resolved.entry.tag == key or resolved.entry.name == key:
                return resolved
        return None

    def get(self, key: Union[int, str], default: Any = None) -> Any:
        """
        Return the decoded `.value` of a tag, or `default` when absent or undecoded.

        One-element values come back as the bare element, so an array tag such
        as TileOffsets is an int for a single tile. Use `get_values` when the
        element count is not fixed.
        """
        resolved = self.find(key)
        if resolved is None or resolved.value is None:
            return default
        return resolved.value.value

    def get_values(self, key: Union[int, str]) -> Tuple[Any, ...]:
        """Return every decoded element of a tag as a tuple, empty when absent or undecoded."""
        resolved = self.find(key)
        if resolved is None or resolved.value is None:
            return ()
        return resolved.value.values

    @property
    def tags(self) -> Dict[int, Any]:
        """Mapping of tag code to decoded value for every decodable entry."""
        return {r.entry.tag: r.value.value for r in self.entries if r.value is not None}

    @property
    def image_width(self) -> Optional[int]:
        return self.get(IMAGE_WIDTH)

    @property
    def image_length(self) -> Optional[int]:
        return self.get(IMAGE_LENGTH)

    @property
    def tile_width(self) -> Optional[int]:
        return self.get(TILE_WIDTH)

    @property
    def tile_length(self) -> Optional[int]:
        return self.get(TILE_LENGTH)

    @property
    def tile_offsets(self) -> Tuple[int, ...]:
        return self.get_values(TILE_OFFSETS)

    @property
    def tile_byte_counts(self) -> Tuple[int, ...]:
        return self.get_values(TILE_BYTE_COUNTS)

    @property
    def bits_per_sample(self) -> Any:
        return self.get(BITS_PER_SAMPLE)

    @property
    def samples_per_pixel(self) -> int:
        return self.get(SAMPLES_PER_PIXEL, 1)

    @property
    def compression(self) -> int:
        return self.get(COMPRESSION, 1)

    @property
    def subfile_type(self) -> int:
        return self.get(NEW_SUBFILE_TYPE, 0)

    @property
    def nodata(self) -> Optional[str]:
        """The GDAL_NODATA value as stored (an ASCII string), if present."""
        return self.get(GDAL_NODATA)

    @property
    def is_tiled(self) -> bool:
        return TILE_WIDTH in self and TILE_LENGTH in self

    @property
    def ifd_type(self) -> str:
        """Classify the IFD as 'Main Image', 'Overview', 'Mask' or 'Page'."""
        subfile_type = self.subfile_type
        if not isinstance(subfile_type, int):
            subfile_type = 0
        if subfile_type & 4:
            return "Mask"
        if subfile_type & 1:
            return "Overview"
        if subfile_type & 2:
            return "Page"
        return "Main Image" if self.index == 0 else "Overview"


@dataclass
class CogDocument:
    """
    The parsed metadata of a TIFF/COG file.

    Attributes:
        header: The TIFF header
        ifds: Every IFD in the order the chain visits them
        source_name: URL or path of the parsed resource
        request_count: Number of range requests issued during the parse
        bytes_fetched: Number of bytes received during the parse
    """
    header: CogHeader
    ifds: List[ImageFileDirectory] = field(default_factory=list)
    source_name: str = ''
    request_count: int = 0
    bytes_fetched: int = 0

    @property
    def byte_order(self) -> ByteOrder:
        return self.header.byte_order

    @property
    def warnings(self) -> List[ParseWarning]:
        """Warnings from every IFD, in file order."""
        return [w for ifd in self.ifds for w in ifd.warnings]

    @property
    def main_image(self) -> Optional[ImageFileDirectory]:
        return self.ifds[0] if self.ifds else None

    @property
    def overviews(self) -> List[ImageFileDirectory]:
        """Reduced-resolution IFDs in chain order."""
        return [ifd for ifd in self.ifds if ifd.ifd_type == "Overview"]

    @property
    def masks(self) -> List[ImageFileDirectory]:
        return [ifd for ifd in self.ifds if ifd.ifd_type == "Mask"]


@dataclass
class GeoKey:
    """
    Represents a GeoTIFF key with its value and metadata.

    Attributes:
        name: GeoKey name (e.g., 'GTModelTypeGeoKey')
        id: Numeric GeoKey ID
        value: The raw value (int, float, str or tuple of floats)
        value_text: Human-readable value with interpretation
        is_citation: Whether this key is a citation (descriptive text)
        location: Tag holding the value (0 = stored in the key itself)
        count: Number of values
    """
    name: str
    id: int
    value: Any
    value_text: str
    is_citation: bool = False
    location: int = 0
    count: int = 1


@dataclass
class GdalMetadataItem:
    """
    One <Item> of the GDAL_METADATA XML tag.

    Attributes:
        name: Item name (e.g., 'STATISTICS_MAXIMUM', 'OFFSET')
        value: Item text
        sample: Zero-based band index, or None for dataset-level items
        role: Optional role attribute (e.g., 'scale', 'offset', 'description')
        domain: Optional metadata domain
    """
    name: str
    value: str
    sample: Optional[int] = None
    role: Optional[str] = None
    domain: Optional[str] = None
