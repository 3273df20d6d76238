# tdmsstruct/core/metadata.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import IntEnum
from typing import Union

from .datatypes import fixed_size_of, name_of
from .exceptions import UnknownRawDataIndexSelector


TDMS_EPOCH = datetime(1904, 1, 1, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Lead in
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class TableOfContents:
    """
    Bit flags of a segment lead in.

    Only the first byte of the mask carries meaning; reserved bits are ignored.
    """
    meta_data: bool = False
    new_obj_list: bool = False
    raw_data: bool = False
    big_endian: bool = False
    interleaved_data: bool = False
    daqmx_raw_data: bool = False

    META_DATA = 1 << 1
    NEW_OBJ_LIST = 1 << 2
    RAW_DATA = 1 << 3
    INTERLEAVED_DATA = 1 << 5
    BIG_ENDIAN = 1 << 6
    DAQMX_RAW_DATA = 1 << 7

    @classmethod
    def from_mask(cls, mask: int) -> "TableOfContents":
        return cls(
            meta_data=bool(mask & cls.META_DATA),
            new_obj_list=bool(mask & cls.NEW_OBJ_LIST),
            raw_data=bool(mask & cls.RAW_DATA),
            big_endian=bool(mask & cls.BIG_ENDIAN),
            interleaved_data=bool(mask & cls.INTERLEAVED_DATA),
            daqmx_raw_data=bool(mask & cls.DAQMX_RAW_DATA),
        )

    def to_mask(self) -> int:
        mask = 0
        for flag, bit in (
            (self.meta_data, self.META_DATA),
            (self.new_obj_list, self.NEW_OBJ_LIST),
            (self.raw_data, self.RAW_DATA),
            (self.big_endian, self.BIG_ENDIAN),
            (self.interleaved_data, self.INTERLEAVED_DATA),
            (self.daqmx_raw_data, self.DAQMX_RAW_DATA),
        ):
            if flag:
                mask |= bit
        return mask


# ---------------------------------------------------------------------------
# Raw data layout
# ---------------------------------------------------------------------------
class RawDataIndex(IntEnum):
    """Discriminator stored in place of an object's raw data index length."""

    NO_DATA = 0xFFFFFFFF
    REUSE_PREVIOUS = 0x00000000
    INLINE_FIXED = 0x14
    INLINE_SIZED = 0x1C
    DAQMX_FORMAT_CHANGING = 0x1269
    DAQMX_DIGITAL_LINE = 0x1369

    @classmethod
    def parse(cls, value: int, *, offset: int | None = None) -> "RawDataIndex":
        try:
            return cls(value)
        except ValueError as e:
            raise UnknownRawDataIndexSelector(
                f"Unknown raw data index 0x{value:X}", offset=offset
            ) from e

    @property
    def is_inline(self) -> bool:
        return self in (RawDataIndex.INLINE_FIXED, RawDataIndex.INLINE_SIZED)

    @property
    def is_daqmx(self) -> bool:
        return self in (RawDataIndex.DAQMX_FORMAT_CHANGING, RawDataIndex.DAQMX_DIGITAL_LINE)


@dataclass(frozen=True, slots=True)
class RawDataDescriptor:
    """Layout of one object's raw data within a single chunk.

    `sized` marks descriptors stored with an explicit total size (raw data
    index 0x1C), which is only meaningful for variable-length types.
    """
    path: str
    data_type: int
    array_dimension: int
    number_of_values: int
    total_size_in_byte: int = 0
    sized: bool = False

    @property
    def data_type_string(self) -> str:
        return name_of(self.data_type)

    @property
    def single_value_size(self) -> int:
        return fixed_size_of(self.data_type)

    @property
    def chunk_byte_size(self) -> int:
        # An explicit total size wins (variable-length types such as strings)
        if self.total_size_in_byte:
            return self.total_size_in_byte
        return self.single_value_size * self.array_dimension * self.number_of_values


@dataclass(frozen=True, slots=True)
class DaqmxScaler:
    data_type: int
    buffer_index: int
    byte_offset_within_stride: int
    sample_format_bitmap: int
    scale_id: int


@dataclass(frozen=True, slots=True)
class DaqmxDescriptor:
    selector: RawDataIndex
    data_type: int
    array_dimension: int
    chunk_size: int
    scalers: tuple[DaqmxScaler, ...] = ()
    raw_data_widths: tuple[int, ...] = ()

    @property
    def description(self) -> str:
        if self.selector == RawDataIndex.DAQMX_DIGITAL_LINE:
            return "raw data contains DAQmx Digital Line scaler"
        return "raw data contains DAQmx Format Changing scaler"


# ---------------------------------------------------------------------------
# Properties
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class Timestamp:
    """TDMS timestamp: seconds since 1904-01-01 UTC plus 2^-64 second fractions."""
    seconds: int
    fraction: int

    def to_datetime(self) -> datetime:
        micros = (self.fraction * 1_000_000) >> 64
        return TDMS_EPOCH + timedelta(seconds=self.seconds, microseconds=micros)


@dataclass(frozen=True, slots=True)
class Complex:
    real: float
    imaginary: float

    def __complex__(self) -> complex:
        return complex(self.real, self.imaginary)


# Closed set of decoded property values. `bytes` carries extended float and
# fixed point bit patterns, byte order normalised but never interpreted.
PropertyValue = Union[int, float, str, bool, Timestamp, Complex, bytes]


@dataclass(frozen=True, slots=True)
class Property:
    name: str
    data_type: int
    value: PropertyValue

    @property
    def data_type_string(self) -> str:
        return name_of(self.data_type)


# ---------------------------------------------------------------------------
# Objects and segments
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class ObjectEntry:
    index: int
    path: str
    raw_data_index: int
    raw: RawDataDescriptor | None = None
    daqmx: DaqmxDescriptor | None = None
    properties: tuple[Property, ...] = field(default=(), repr=False)

    @property
    def property_map(self) -> dict[str, PropertyValue]:
        return {p.name: p.value for p in self.properties}


@dataclass(frozen=True, slots=True)
class ChannelGeometry:
    path: str
    data_type: int
    single_value_size: int
    number_of_values_in_chunk: int
    number_of_values_in_segment: int

    @property
    def data_type_string(self) -> str:
        return name_of(self.data_type)


@dataclass(frozen=True, slots=True)
class ChannelData:
    """Chunk geometry of a segment's raw data region."""
    raw_data_start: int
    raw_data_end: int
    interleaved: bool
    chunk_byte_size: int
    number_of_chunks: int
    channels: tuple[ChannelGeometry, ...] = ()

    @property
    def channels_count(self) -> int:
        return len(self.channels)

    def channel(self, path: str) -> ChannelGeometry | None:
        for ch in self.channels:
            if ch.path == path:
                return ch
        return None


@dataclass(frozen=True, slots=True)
class SegmentInfo:
    index: int
    version: int
    toc: TableOfContents
    next_segment_offset: int
    raw_data_offset: int
    absolute_offset: int
    absolute_raw_data_offset: int
    absolute_next_segment_offset: int
    objects: tuple[ObjectEntry, ...] | None = field(default=None, repr=False)
    channel_data: ChannelData | None = field(default=None, repr=False)

    @property
    def objects_count(self) -> int:
        return 0 if self.objects is None else len(self.objects)


@dataclass(frozen=True, slots=True)
class FileStructure:
    filepath: str
    size_in_byte: int
    segments: tuple[SegmentInfo, ...] = field(default=(), repr=False)

    @property
    def segments_count(self) -> int:
        return len(self.segments)

    def __len__(self) -> int:
        return len(self.segments)

    def __getitem__(self, index: int) -> SegmentInfo:
        return self.segments[index]
