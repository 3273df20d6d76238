from __future__ import annotations

from tdmsstruct.core.datatypes import name_of
from tdmsstruct.core.metadata import (
    ChannelData,
    Complex,
    DaqmxDescriptor,
    ObjectEntry,
    Property,
    RawDataDescriptor,
    SegmentInfo,
    TableOfContents,
    Timestamp,
)
from tdmsstruct.io.report import ReportSink


def write_file_header(sink: ReportSink, filepath: str, size_in_byte: int) -> None:
    """Open the `file` and `segments` levels. Closed by write_file_footer()."""
    sink.open("file")
    sink.set("filepath", filepath)
    sink.set("size_in_byte", size_in_byte)
    sink.open("segments")


def write_file_footer(sink: ReportSink, segments_count: int) -> None:
    sink.close()
    sink.set("segments_count", segments_count)
    sink.close()


def write_segment(sink: ReportSink, segment: SegmentInfo) -> None:
    sink.open("segment")
    sink.set("index", segment.index)
    sink.set("version", segment.version)
    _write_toc(sink, segment.toc)
    sink.set("next_segment_offset", segment.next_segment_offset)
    sink.set("raw_data_offset", segment.raw_data_offset)
    sink.set("absolut_segment_offset", segment.absolute_offset)
    sink.set("absolut_raw_data_offset", segment.absolute_raw_data_offset)
    sink.set("absolut_next_segment_byte_offset", segment.absolute_next_segment_offset)

    # Segments without meta data carry no object list at all
    if segment.objects is not None:
        sink.set("objects_count", len(segment.objects))
        sink.open("objects")
        for obj in segment.objects:
            _write_object(sink, obj)
        sink.close()

    if segment.channel_data is not None:
        _write_channel_data(sink, segment.channel_data)

    sink.close()


def _write_toc(sink: ReportSink, toc: TableOfContents) -> None:
    sink.open("table_of_content")
    sink.set("meta_data", toc.meta_data)
    sink.set("new_obj_list", toc.new_obj_list)
    sink.set("raw_data", toc.raw_data)
    sink.set("big_endian", toc.big_endian)
    sink.set("interleaved_data", toc.interleaved_data)
    sink.set("daqmx_raw_data", toc.daqmx_raw_data)
    sink.close()


def _write_object(sink: ReportSink, obj: ObjectEntry) -> None:
    sink.open("object")
    sink.set("index", obj.index)
    sink.set("object_path", obj.path)
    sink.set("raw_data_index", obj.raw_data_index)
    if obj.raw is not None:
        _write_raw(sink, obj.raw)
    elif obj.daqmx is not None:
        _write_daqmx(sink, obj.daqmx)

    sink.set("properties_count", len(obj.properties))
    sink.open("properties")
    for prop in obj.properties:
        _write_property(sink, prop)
    sink.close()
    sink.close()


def _write_raw(sink: ReportSink, raw: RawDataDescriptor) -> None:
    sink.open("raw")
    sink.set("data_type", raw.data_type)
    sink.set("data_type_string", raw.data_type_string)
    sink.set("array_dimension", raw.array_dimension)
    sink.set("number_of_values", raw.number_of_values)
    if raw.sized:
        sink.set("total_size_in_byte", raw.total_size_in_byte)
    sink.close()


def _write_daqmx(sink: ReportSink, daqmx: DaqmxDescriptor) -> None:
    sink.open("daqmx")
    sink.set("type", daqmx.description)
    sink.set("data_type", daqmx.data_type)
    sink.set("data_type_string", name_of(daqmx.data_type))
    sink.set("array_dimension", daqmx.array_dimension)
    sink.set("chunk_size", daqmx.chunk_size)

    sink.set("format_changing_scalers_size", len(daqmx.scalers))
    sink.open("format_changing_scalers")
    for scaler in daqmx.scalers:
        sink.open("format_changing_scaler")
        sink.set("data_type", scaler.data_type)
        sink.set("data_type_string", name_of(scaler.data_type))
        sink.set("buffer_index", scaler.buffer_index)
        sink.set("byte_offset_within_the_stride", scaler.byte_offset_within_stride)
        sink.set("sample_format_bitmap", scaler.sample_format_bitmap)
        sink.set("scale_id", scaler.scale_id)
        sink.close()
    sink.close()

    sink.set("data_with_size_vector_size", len(daqmx.raw_data_widths))
    sink.open("data_with_size_vector")
    for width in daqmx.raw_data_widths:
        sink.set("size", width)
    sink.close()
    sink.close()


def _write_property(sink: ReportSink, prop: Property) -> None:
    sink.open("property")
    sink.set("name", prop.name)
    sink.set("data_type", prop.data_type)
    sink.set("data_type_string", prop.data_type_string)

    value = prop.value
    if isinstance(value, Timestamp):
        sink.open("value")
        sink.set("seconds", value.seconds)
        sink.set("fraction", value.fraction)
        sink.close()
    elif isinstance(value, Complex):
        sink.open("value")
        sink.set("real", value.real)
        sink.set("imaginary", value.imaginary)
        sink.close()
    else:
        sink.set("value", value)
    sink.close()


def _write_channel_data(sink: ReportSink, data: ChannelData) -> None:
    sink.open("channel_data")
    sink.set("absolut_raw_data_byte_start", data.raw_data_start)
    sink.set("absolut_raw_data_byte_end", data.raw_data_end)
    sink.set("interleaved", data.interleaved)
    sink.set("number_of_chunks", data.number_of_chunks)
    sink.set("channels_count", data.channels_count)
    sink.open("channels")
    for ch in data.channels:
        sink.open("channel")
        sink.set("path", ch.path)
        sink.set("data_type", ch.data_type)
        sink.set("data_type_string", ch.data_type_string)
        sink.set("data_type_single_value_size", ch.single_value_size)
        sink.set("number_of_values_in_chunk", ch.number_of_values_in_chunk)
        sink.set("number_of_values_in_segment", ch.number_of_values_in_segment)
        sink.close()
    sink.close()
    sink.close()
