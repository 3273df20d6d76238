from __future__ import annotations

import logging

from tdmsstruct.core.datatypes import (
    FORBIDDEN_PROPERTY_TYPES,
    EXTENDED_FLOAT_SIZE,
    FIXED_POINT_SIZE,
    TdmsDataType,
    name_of,
    numpy_dtype_of,
)
from tdmsstruct.core.exceptions import (
    BadMagicTag,
    InvalidPropertyType,
    UnknownTypeTag,
    UnsupportedVersion,
)
from tdmsstruct.core.metadata import (
    ChannelData,
    ChannelGeometry,
    Complex,
    DaqmxDescriptor,
    DaqmxScaler,
    FileStructure,
    ObjectEntry,
    Property,
    PropertyValue,
    RawDataDescriptor,
    RawDataIndex,
    SegmentInfo,
    TableOfContents,
    Timestamp,
)
from tdmsstruct.core.rawinfo import RawInfoRegistry
from tdmsstruct.io.byte_reader import ByteSource, SegmentReader
from tdmsstruct.io.report import ReportSink
from tdmsstruct.io import structure_report


logger = logging.getLogger(__name__)

TDMS_TAG = b"TDSm"
TDMS_VERSION = 4713  # 0x1269, TDMS 2.0
# tag (4) + toc (4) + version (4) + next segment offset (8) + raw data offset (8)
LEAD_IN_SIZE = 28
NEXT_SEGMENT_UNKNOWN = 0xFFFFFFFFFFFFFFFF


class SegmentDecoder:
    """
    Walks a TDMS file segment by segment and reports its structure.

    The decoder owns the two raw data layout registries of a run:
    - `all_raw_infos`: every layout seen so far, used to resolve objects that
      reuse the layout of a previous segment
    - `current_raw_infos`: layouts of the channels present in the current
      segment's raw data; cleared when a segment starts a new object list

    Decoding is a single sequential pass. The first structural violation
    raises and aborts the run.
    """

    def __init__(self, source: ByteSource, sink: ReportSink, filepath: str = ""):
        self._source = source
        self._sink = sink
        self.filepath = filepath
        self.all_raw_infos = RawInfoRegistry("all")
        self.current_raw_infos = RawInfoRegistry("current")

    # ------------------------------------------------------------------
    # Segment loop
    # ------------------------------------------------------------------
    def decode(self) -> FileStructure:
        file_size = self._source.size()
        logger.debug("Decoding '%s' (%d bytes)", self.filepath, file_size)

        structure_report.write_file_header(self._sink, self.filepath, file_size)

        segments: list[SegmentInfo] = []
        offset = 0
        while True:
            segment = self._decode_segment(len(segments), offset, file_size)
            if segment is None:
                break
            structure_report.write_segment(self._sink, segment)
            segments.append(segment)
            offset = segment.absolute_next_segment_offset

        structure_report.write_file_footer(self._sink, len(segments))
        logger.debug("Decoded %d segment(s)", len(segments))
        return FileStructure(
            filepath=self.filepath,
            size_in_byte=file_size,
            segments=tuple(segments),
        )

    def _decode_segment(self, index: int, offset: int, file_size: int) -> SegmentInfo | None:
        remaining = file_size - offset
        if remaining == 0:
            return None
        if remaining < 0:
            logger.warning(
                "Segment %d would start at %d, beyond the end of the file (%d bytes)",
                index, offset, file_size,
            )
            return None
        if remaining < LEAD_IN_SIZE:
            # File still being written, or a truncated final segment
            logger.warning(
                "Ignoring %d trailing byte(s) at offset %d: too short for a lead in",
                remaining, offset,
            )
            return None

        # ---- lead in ----
        self._source.seek(offset)
        header = self._source.read(8)
        if header[:4] != TDMS_TAG:
            raise BadMagicTag(
                f"Segment must start with {TDMS_TAG!r}, found {header[:4]!r}",
                offset=offset,
            )
        # ToC flags live in the first byte, independent of the segment byte order
        toc = TableOfContents.from_mask(int.from_bytes(header[4:8], "little"))
        reader = SegmentReader(self._source, toc.big_endian)

        version = reader.read_u32()
        if version != TDMS_VERSION:
            raise UnsupportedVersion(
                f"Only TDMS 2.0 (version {TDMS_VERSION}) is supported, found {version}",
                offset=offset + 8,
            )
        next_segment_offset = reader.read_u64()
        raw_data_offset = reader.read_u64()

        # Offsets are relative to the end of the lead in
        data_start = offset + LEAD_IN_SIZE
        resolved_next_offset = next_segment_offset
        if next_segment_offset == NEXT_SEGMENT_UNKNOWN:
            resolved_next_offset = file_size - data_start
            logger.info(
                "Segment %d has no next segment offset; assuming it ends at file end (%d)",
                index, file_size,
            )
        absolute_next = data_start + resolved_next_offset
        absolute_raw = data_start + raw_data_offset

        logger.debug(
            "Segment %d at %d: toc=0x%02X next=%d raw=%d",
            index, offset, toc.to_mask(), next_segment_offset, raw_data_offset,
        )

        if toc.new_obj_list:
            self.current_raw_infos.clear()

        # No meta data at all (object list, index information, properties)
        objects = None
        if raw_data_offset > 0:
            objects = self._decode_objects(reader)

        channel_data = None
        # The TDMS library only computes chunks for segments with a new object
        # list; raw data without a restated object list needs it here as well.
        if len(self.current_raw_infos) > 0:
            channel_data = self._compute_channel_data(
                toc, absolute_raw, absolute_next, resolved_next_offset, raw_data_offset
            )

        return SegmentInfo(
            index=index,
            version=version,
            toc=toc,
            next_segment_offset=next_segment_offset,
            raw_data_offset=raw_data_offset,
            absolute_offset=offset,
            absolute_raw_data_offset=absolute_raw,
            absolute_next_segment_offset=absolute_next,
            objects=objects,
            channel_data=channel_data,
        )

    # ------------------------------------------------------------------
    # Object list
    # ------------------------------------------------------------------
    def _decode_objects(self, reader: SegmentReader) -> tuple[ObjectEntry, ...]:
        count = reader.read_u32()
        objects = []
        for obj_index in range(count):
            objects.append(self._decode_object(reader, obj_index))
        return tuple(objects)

    def _decode_object(self, reader: SegmentReader, obj_index: int) -> ObjectEntry:
        path = reader.read_string()
        selector_offset = reader.tell()
        raw_data_index = reader.read_u32()
        selector = RawDataIndex.parse(raw_data_index, offset=selector_offset)
        logger.debug("Object %d '%s': raw data index 0x%X", obj_index, path, raw_data_index)

        raw = None
        daqmx = None
        if selector == RawDataIndex.NO_DATA:
            pass
        elif selector == RawDataIndex.REUSE_PREVIOUS:
            previous = self.all_raw_infos.lookup(path, offset=selector_offset)
            self.current_raw_infos.define(previous)
        elif selector.is_inline:
            raw = self._read_raw_descriptor(reader, path, selector)
            self.current_raw_infos.define(raw)
            self.all_raw_infos.define(raw)
        elif selector.is_daqmx:
            daqmx = self._read_daqmx_descriptor(reader, selector)

        properties = self._read_properties(reader)
        return ObjectEntry(
            index=obj_index,
            path=path,
            raw_data_index=raw_data_index,
            raw=raw,
            daqmx=daqmx,
            properties=properties,
        )

    @staticmethod
    def _read_raw_descriptor(
        reader: SegmentReader, path: str, selector: RawDataIndex
    ) -> RawDataDescriptor:
        data_type = reader.read_u32()
        array_dimension = reader.read_u32()
        number_of_values = reader.read_u64()
        total_size_in_byte = 0
        sized = selector == RawDataIndex.INLINE_SIZED
        if sized:
            total_size_in_byte = reader.read_u64()
        return RawDataDescriptor(
            path=path,
            data_type=data_type,
            array_dimension=array_dimension,
            number_of_values=number_of_values,
            total_size_in_byte=total_size_in_byte,
            sized=sized,
        )

    @staticmethod
    def _read_daqmx_descriptor(reader: SegmentReader, selector: RawDataIndex) -> DaqmxDescriptor:
        data_type = reader.read_u32()
        array_dimension = reader.read_u32()
        chunk_size = reader.read_u64()

        scalers = []
        for _ in range(reader.read_u32()):
            scalers.append(
                DaqmxScaler(
                    data_type=reader.read_u32(),
                    buffer_index=reader.read_u32(),
                    byte_offset_within_stride=reader.read_u32(),
                    sample_format_bitmap=reader.read_u32(),
                    scale_id=reader.read_u32(),
                )
            )
        widths = reader.read_u32_array(reader.read_u32())

        return DaqmxDescriptor(
            selector=selector,
            data_type=data_type,
            array_dimension=array_dimension,
            chunk_size=chunk_size,
            scalers=tuple(scalers),
            raw_data_widths=tuple(widths),
        )

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------
    def _read_properties(self, reader: SegmentReader) -> tuple[Property, ...]:
        properties = []
        for _ in range(reader.read_u32()):
            name = reader.read_string()
            type_offset = reader.tell()
            data_type = reader.read_u32()
            value = read_property_value(reader, data_type, name=name, offset=type_offset)
            properties.append(Property(name=name, data_type=data_type, value=value))
        return tuple(properties)

    # ------------------------------------------------------------------
    # Chunk geometry
    # ------------------------------------------------------------------
    def _compute_channel_data(
        self,
        toc: TableOfContents,
        absolute_raw: int,
        absolute_next: int,
        next_segment_offset: int,
        raw_data_offset: int,
    ) -> ChannelData:
        chunk_byte_size = self.current_raw_infos.chunk_byte_size()
        raw_data_size = max(0, next_segment_offset - raw_data_offset)
        number_of_chunks = raw_data_size // chunk_byte_size if chunk_byte_size else 1

        channels = tuple(
            ChannelGeometry(
                path=d.path,
                data_type=d.data_type,
                single_value_size=d.single_value_size,
                number_of_values_in_chunk=d.number_of_values,
                number_of_values_in_segment=d.number_of_values * number_of_chunks,
            )
            for d in self.current_raw_infos.descriptors()
        )
        return ChannelData(
            raw_data_start=absolute_raw,
            raw_data_end=absolute_next,
            interleaved=toc.interleaved_data,
            chunk_byte_size=chunk_byte_size,
            number_of_chunks=number_of_chunks,
            channels=channels,
        )


def read_property_value(
    reader: SegmentReader, data_type: int, *, name: str = "", offset: int | None = None
) -> PropertyValue:
    """Decode one property value of type `data_type` from `reader`."""
    if data_type in FORBIDDEN_PROPERTY_TYPES:
        raise InvalidPropertyType(
            f"Property '{name}' can not be of type {name_of(data_type)}",
            offset=offset,
        )
    if data_type == TdmsDataType.STRING:
        return reader.read_string()
    if data_type == TdmsDataType.BOOLEAN:
        return reader.read_value(TdmsDataType.U8) != 0
    if data_type == TdmsDataType.TIMESTAMP:
        return Timestamp(*reader.read_timestamp())
    if data_type == TdmsDataType.EXTENDED_FLOAT:
        return reader.read_opaque(EXTENDED_FLOAT_SIZE)
    if data_type == TdmsDataType.FIXED_POINT:
        return reader.read_opaque(FIXED_POINT_SIZE)
    if data_type == TdmsDataType.COMPLEX_SINGLE_FLOAT:
        return Complex(*reader.read_pair(TdmsDataType.SINGLE_FLOAT))
    if data_type == TdmsDataType.COMPLEX_DOUBLE_FLOAT:
        return Complex(*reader.read_pair(TdmsDataType.DOUBLE_FLOAT))
    if numpy_dtype_of(data_type) is not None:
        return reader.read_value(data_type)
    raise UnknownTypeTag(
        f"Property '{name}' has unknown data type 0x{data_type:X}",
        offset=offset,
    )
