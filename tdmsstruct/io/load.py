# tdmsstruct/io/load.py
from __future__ import annotations

import os
from typing import TextIO

from tdmsstruct.config import DumpConfig
from tdmsstruct.core import FileStructure
from tdmsstruct.io.byte_reader import BufferByteSource, FileByteSource
from tdmsstruct.io.report import JsonReportSink, NullReportSink, ReportSink, XmlReportSink
from tdmsstruct.io.segment_decoder import SegmentDecoder


def make_sink(stream: TextIO, fmt: str = "xml") -> ReportSink:
    if fmt == "json":
        return JsonReportSink(stream)
    return XmlReportSink(stream)


def _run(decoder: SegmentDecoder, sink: ReportSink) -> FileStructure:
    try:
        structure = decoder.decode()
    except Exception:
        # Leave a well-formed (if incomplete) report behind
        sink.finish(force=True)
        raise
    sink.finish()
    return structure


def read_structure(path: str | os.PathLike, sink: ReportSink | None = None) -> FileStructure:
    """Decode the segment structure of a TDMS file without writing a report file."""
    sink = NullReportSink() if sink is None else sink
    with FileByteSource(path) as source:
        return _run(SegmentDecoder(source, sink, os.fspath(path)), sink)


def decode_buffer(
    data: bytes, sink: ReportSink | None = None, filepath: str = "<memory>"
) -> FileStructure:
    """Decode TDMS bytes held in memory."""
    sink = NullReportSink() if sink is None else sink
    with BufferByteSource(data) as source:
        return _run(SegmentDecoder(source, sink, filepath), sink)


def dump_structure(
    path: str | os.PathLike,
    output_path: str | os.PathLike | None = None,
    fmt: str = "xml",
) -> FileStructure:
    """Decode a TDMS file and write its structure report.

    The report file is always closed, also when decoding fails.
    """
    config = DumpConfig(input_path=path, output_path=output_path, fmt=fmt)
    return dump_with_config(config)


def dump_with_config(config: DumpConfig) -> FileStructure:
    with FileByteSource(config.input_path) as source:
        with open(config.output_path, "w", encoding="utf-8", newline="\n") as stream:
            sink = make_sink(stream, config.fmt)
            return _run(SegmentDecoder(source, sink, config.input_path), sink)
