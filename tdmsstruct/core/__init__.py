# tdmsstruct/core/__init__.py
"""
Core domain objects for tdmsstruct.

This module defines the format-level data model of a TDMS file:
- TdmsDataType: type catalog (display names, value sizes)
- TableOfContents / SegmentInfo: one decoded segment lead in and its content
- ObjectEntry / Property: object list entries and their typed properties
- RawDataDescriptor / DaqmxDescriptor: per-object raw data layouts
- ChannelData / ChannelGeometry: chunk geometry of a segment's raw data
- RawInfoRegistry: path -> raw data layout lookup across segments

The core layer performs no I/O.
"""

from .datatypes import (
    TdmsDataType,
    FORBIDDEN_PROPERTY_TYPES,
    name_of,
    fixed_size_of,
    numpy_dtype_of,
)
from .metadata import (
    TableOfContents,
    RawDataIndex,
    RawDataDescriptor,
    DaqmxScaler,
    DaqmxDescriptor,
    Timestamp,
    Complex,
    PropertyValue,
    Property,
    ObjectEntry,
    ChannelGeometry,
    ChannelData,
    SegmentInfo,
    FileStructure,
)
from .rawinfo import RawInfoRegistry
from .exceptions import (
    TdmsError,
    IoOpenFailure,
    TruncatedRead,
    DecodeError,
    BadMagicTag,
    UnsupportedVersion,
    UnknownRawDataIndexSelector,
    InvalidPropertyType,
    UnknownTypeTag,
    MissingPriorDescriptor,
    ReportError,
    ConfigError,
)


__all__ = [
    # type catalog
    "TdmsDataType",
    "FORBIDDEN_PROPERTY_TYPES",
    "name_of",
    "fixed_size_of",
    "numpy_dtype_of",

    # domain objects
    "TableOfContents",
    "RawDataIndex",
    "RawDataDescriptor",
    "DaqmxScaler",
    "DaqmxDescriptor",
    "Timestamp",
    "Complex",
    "PropertyValue",
    "Property",
    "ObjectEntry",
    "ChannelGeometry",
    "ChannelData",
    "SegmentInfo",
    "FileStructure",

    # registries
    "RawInfoRegistry",

    # exceptions
    "TdmsError",
    "IoOpenFailure",
    "TruncatedRead",
    "DecodeError",
    "BadMagicTag",
    "UnsupportedVersion",
    "UnknownRawDataIndexSelector",
    "InvalidPropertyType",
    "UnknownTypeTag",
    "MissingPriorDescriptor",
    "ReportError",
    "ConfigError",
]
