# test/test_metadata.py
from datetime import datetime, timezone

import pytest

from tdmsstruct.core import (
    TableOfContents,
    RawDataIndex,
    RawDataDescriptor,
    DaqmxDescriptor,
    Timestamp,
    Complex,
    ObjectEntry,
    Property,
    UnknownRawDataIndexSelector,
)


def test_toc_from_mask_reads_known_bits_only():
    toc = TableOfContents.from_mask((1 << 1) | (1 << 3) | (1 << 6) | 0x1 | 0x10 | 0xFF00)
    assert toc.meta_data
    assert toc.raw_data
    assert toc.big_endian
    assert not toc.new_obj_list
    assert not toc.interleaved_data
    assert not toc.daqmx_raw_data
    assert toc.to_mask() == (1 << 1) | (1 << 3) | (1 << 6)


def test_toc_round_trip_all_flags():
    toc = TableOfContents(True, True, True, True, True, True)
    assert TableOfContents.from_mask(toc.to_mask()) == toc
    assert toc.to_mask() == 0xEE


@pytest.mark.parametrize(
    "value, member",
    [
        (0xFFFFFFFF, RawDataIndex.NO_DATA),
        (0x0, RawDataIndex.REUSE_PREVIOUS),
        (0x14, RawDataIndex.INLINE_FIXED),
        (0x1C, RawDataIndex.INLINE_SIZED),
        (0x1269, RawDataIndex.DAQMX_FORMAT_CHANGING),
        (0x1369, RawDataIndex.DAQMX_DIGITAL_LINE),
    ],
)
def test_raw_data_index_parse(value, member):
    assert RawDataIndex.parse(value) is member


def test_raw_data_index_variants():
    assert RawDataIndex.INLINE_SIZED.is_inline
    assert not RawDataIndex.REUSE_PREVIOUS.is_inline
    assert RawDataIndex.DAQMX_DIGITAL_LINE.is_daqmx
    assert not RawDataIndex.NO_DATA.is_daqmx


def test_raw_data_index_parse_rejects_unknown_values():
    with pytest.raises(UnknownRawDataIndexSelector, match="0x15"):
        RawDataIndex.parse(0x15, offset=100)


def test_descriptor_chunk_byte_size():
    d = RawDataDescriptor(path="/'g'/'c'", data_type=0x3, array_dimension=1, number_of_values=5)
    assert d.single_value_size == 4
    assert d.chunk_byte_size == 20
    assert d.data_type_string == "I32"


def test_descriptor_total_size_overrides_computed_size():
    d = RawDataDescriptor(
        path="/'g'/'s'", data_type=0x20, array_dimension=1, number_of_values=3,
        total_size_in_byte=27, sized=True,
    )
    assert d.chunk_byte_size == 27

    zero = RawDataDescriptor(
        path="/'g'/'c'", data_type=0xA, array_dimension=1, number_of_values=3,
        total_size_in_byte=0, sized=True,
    )
    assert zero.chunk_byte_size == 24


def test_daqmx_description_depends_on_selector():
    fc = DaqmxDescriptor(RawDataIndex.DAQMX_FORMAT_CHANGING, 0xFFFFFFFF, 1, 4)
    dl = DaqmxDescriptor(RawDataIndex.DAQMX_DIGITAL_LINE, 0xFFFFFFFF, 1, 4)
    assert "Format Changing" in fc.description
    assert "Digital Line" in dl.description


def test_timestamp_to_datetime():
    assert Timestamp(0, 0).to_datetime() == datetime(1904, 1, 1, tzinfo=timezone.utc)
    half = Timestamp(60, 1 << 63).to_datetime()
    assert half == datetime(1904, 1, 1, 0, 1, 0, 500000, tzinfo=timezone.utc)


def test_complex_converts_to_builtin():
    assert complex(Complex(1.5, -2.0)) == complex(1.5, -2.0)


def test_object_entry_helpers():
    entry = ObjectEntry(
        index=0, path="/", raw_data_index=0xFFFFFFFF,
        properties=(Property("name", 0x20, "file"), Property("n", 0x3, 5)),
    )
    assert entry.property_map == {"name": "file", "n": 5}
    assert entry.properties[0].data_type_string == "String"
