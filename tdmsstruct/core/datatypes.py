# tdmsstruct/core/datatypes.py
"""
Catalog of the TDMS data type tags.

Every tag maps to a display name and to the byte size of a single value.
Variable-length and unsized types (Void, String, the DAQmx marker) report a
size of 0. Lookups never fail: unrecognised tags are named "Unknown".
"""
from __future__ import annotations

from enum import IntEnum

import numpy as np


class TdmsDataType(IntEnum):
    VOID = 0x0
    I8 = 0x1
    I16 = 0x2
    I32 = 0x3
    I64 = 0x4
    U8 = 0x5
    U16 = 0x6
    U32 = 0x7
    U64 = 0x8
    SINGLE_FLOAT = 0x9
    DOUBLE_FLOAT = 0xA
    EXTENDED_FLOAT = 0xB
    SINGLE_FLOAT_WITH_UNIT = 0x19
    DOUBLE_FLOAT_WITH_UNIT = 0x1A
    EXTENDED_FLOAT_WITH_UNIT = 0x1B
    STRING = 0x20
    BOOLEAN = 0x21
    TIMESTAMP = 0x44
    FIXED_POINT = 0x4F
    COMPLEX_SINGLE_FLOAT = 0x08000C
    COMPLEX_DOUBLE_FLOAT = 0x10000D
    DAQMX_RAW_DATA = 0xFFFFFFFF


_NAMES: dict[int, str] = {
    TdmsDataType.VOID: "Void",
    TdmsDataType.I8: "I8",
    TdmsDataType.I16: "I16",
    TdmsDataType.I32: "I32",
    TdmsDataType.I64: "I64",
    TdmsDataType.U8: "U8",
    TdmsDataType.U16: "U16",
    TdmsDataType.U32: "U32",
    TdmsDataType.U64: "U64",
    TdmsDataType.SINGLE_FLOAT: "SingleFloat",
    TdmsDataType.DOUBLE_FLOAT: "DoubleFloat",
    TdmsDataType.EXTENDED_FLOAT: "ExtendedFloat",
    TdmsDataType.SINGLE_FLOAT_WITH_UNIT: "SingleFloatWithUnit",
    TdmsDataType.DOUBLE_FLOAT_WITH_UNIT: "DoubleFloatWithUnit",
    TdmsDataType.EXTENDED_FLOAT_WITH_UNIT: "ExtendedFloatWithUnit",
    TdmsDataType.STRING: "String",
    TdmsDataType.BOOLEAN: "Boolean",
    TdmsDataType.TIMESTAMP: "TimeStamp",
    TdmsDataType.FIXED_POINT: "FixedPoint",
    TdmsDataType.COMPLEX_SINGLE_FLOAT: "ComplexSingleFloat",
    TdmsDataType.COMPLEX_DOUBLE_FLOAT: "ComplexDoubleFloat",
    TdmsDataType.DAQMX_RAW_DATA: "DAQmxRawData",
}

EXTENDED_FLOAT_SIZE = 10
FIXED_POINT_SIZE = 16
TIMESTAMP_SIZE = 16

# numpy dtypes for the types with a native fixed-width representation.
# Byte order is applied by the reader, not here.
_NUMPY_DTYPES: dict[int, np.dtype] = {
    TdmsDataType.I8: np.dtype(np.int8),
    TdmsDataType.I16: np.dtype(np.int16),
    TdmsDataType.I32: np.dtype(np.int32),
    TdmsDataType.I64: np.dtype(np.int64),
    TdmsDataType.U8: np.dtype(np.uint8),
    TdmsDataType.U16: np.dtype(np.uint16),
    TdmsDataType.U32: np.dtype(np.uint32),
    TdmsDataType.U64: np.dtype(np.uint64),
    TdmsDataType.SINGLE_FLOAT: np.dtype(np.float32),
    TdmsDataType.DOUBLE_FLOAT: np.dtype(np.float64),
    TdmsDataType.SINGLE_FLOAT_WITH_UNIT: np.dtype(np.float32),
    TdmsDataType.DOUBLE_FLOAT_WITH_UNIT: np.dtype(np.float64),
    TdmsDataType.BOOLEAN: np.dtype(np.uint8),
}

_SIZES: dict[int, int] = {tag: dt.itemsize for tag, dt in _NUMPY_DTYPES.items()}
_SIZES.update(
    {
        TdmsDataType.EXTENDED_FLOAT: EXTENDED_FLOAT_SIZE,
        TdmsDataType.EXTENDED_FLOAT_WITH_UNIT: EXTENDED_FLOAT_SIZE,
        TdmsDataType.TIMESTAMP: TIMESTAMP_SIZE,
        TdmsDataType.FIXED_POINT: FIXED_POINT_SIZE,
        TdmsDataType.COMPLEX_SINGLE_FLOAT: 2 * np.dtype(np.float32).itemsize,
        TdmsDataType.COMPLEX_DOUBLE_FLOAT: 2 * np.dtype(np.float64).itemsize,
    }
)

# Tags a property is never allowed to carry.
FORBIDDEN_PROPERTY_TYPES = frozenset(
    {
        TdmsDataType.VOID,
        TdmsDataType.SINGLE_FLOAT_WITH_UNIT,
        TdmsDataType.DOUBLE_FLOAT_WITH_UNIT,
        TdmsDataType.EXTENDED_FLOAT_WITH_UNIT,
        TdmsDataType.DAQMX_RAW_DATA,
    }
)


def name_of(tag: int) -> str:
    """Display name of a type tag, "Unknown" if the tag is not recognised."""
    return _NAMES.get(tag, "Unknown")


def fixed_size_of(tag: int) -> int:
    """Byte size of a single value of `tag`, 0 for variable-length or unknown types."""
    return _SIZES.get(tag, 0)


def numpy_dtype_of(tag: int) -> np.dtype | None:
    return _NUMPY_DTYPES.get(tag)
