"""
tdmsstruct -- dump the internal structure of NI TDMS files

A TDMS file is a sequence of segments. Every segment starts with a lead in
(tag, table of contents, version, offsets), optionally followed by meta data
(object list, raw data layouts, properties) and raw data. Meta data is
incremental: a segment only restates what changed, and raw data layouts can be
reused from earlier segments.

This package walks the segments and writes what it finds into an XML or JSON
report. Raw samples are never decoded, only the geometry of the raw data
(chunks, values per channel) is computed.
"""

__version__ = "0.1.0"

from tdmsstruct.io.load import read_structure, dump_structure, decode_buffer

__all__ = ["read_structure", "dump_structure", "decode_buffer", "__version__"]
