# test/test_datatypes.py
import numpy as np
import pytest

from tdmsstruct.core import TdmsDataType, name_of, fixed_size_of, numpy_dtype_of


@pytest.mark.parametrize(
    "tag, name, size",
    [
        (0x0, "Void", 0),
        (0x1, "I8", 1),
        (0x2, "I16", 2),
        (0x3, "I32", 4),
        (0x4, "I64", 8),
        (0x5, "U8", 1),
        (0x6, "U16", 2),
        (0x7, "U32", 4),
        (0x8, "U64", 8),
        (0x9, "SingleFloat", 4),
        (0xA, "DoubleFloat", 8),
        (0xB, "ExtendedFloat", 10),
        (0x19, "SingleFloatWithUnit", 4),
        (0x1A, "DoubleFloatWithUnit", 8),
        (0x1B, "ExtendedFloatWithUnit", 10),
        (0x20, "String", 0),
        (0x21, "Boolean", 1),
        (0x44, "TimeStamp", 16),
        (0x4F, "FixedPoint", 16),
        (0x08000C, "ComplexSingleFloat", 8),
        (0x10000D, "ComplexDoubleFloat", 16),
        (0xFFFFFFFF, "DAQmxRawData", 0),
    ],
)
def test_catalog_names_and_sizes(tag, name, size):
    assert name_of(tag) == name
    assert fixed_size_of(tag) == size


def test_unknown_tag_never_fails():
    assert name_of(0x1234) == "Unknown"
    assert fixed_size_of(0x1234) == 0
    assert numpy_dtype_of(0x1234) is None


def test_enum_members_match_plain_ints():
    assert TdmsDataType.TIMESTAMP == 0x44
    assert name_of(TdmsDataType.STRING) == name_of(0x20)


def test_numpy_dtypes_only_for_native_types():
    assert numpy_dtype_of(TdmsDataType.I16) == np.dtype(np.int16)
    assert numpy_dtype_of(TdmsDataType.DOUBLE_FLOAT) == np.dtype(np.float64)
    assert numpy_dtype_of(TdmsDataType.BOOLEAN) == np.dtype(np.uint8)
    # No native arithmetic type
    assert numpy_dtype_of(TdmsDataType.EXTENDED_FLOAT) is None
    assert numpy_dtype_of(TdmsDataType.FIXED_POINT) is None
    assert numpy_dtype_of(TdmsDataType.STRING) is None
