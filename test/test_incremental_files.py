# test/test_incremental_files.py
from pathlib import Path

import pytest

from tdmsstruct import read_structure
from tdmsstruct.io.report import TreeReportSink

import tdms_builder as tb


CH1 = "/'Group'/'Channel1'"
CH2 = "/'Group'/'Channel2'"
CH3 = "/'Group'/'Channel3'"


@pytest.fixture
def step_files(tmp_path) -> list[Path]:
    paths = []
    for step, data in enumerate(tb.incremental_example_steps(), start=1):
        p = tmp_path / f"IncrementalMetaInformationExample_step{step}.tdms"
        p.write_bytes(data)
        paths.append(p)
    return paths


def _segment_reports(path):
    sink = TreeReportSink()
    structure = read_structure(path, sink)
    segments = sink.document.find("segments").find_all("segment")
    return structure, sink.document, [seg.leaves() for seg in segments]


def test_each_step_adds_one_segment(step_files):
    previous = []
    for step, path in enumerate(step_files, start=1):
        structure, doc, reports = _segment_reports(path)
        assert structure.segments_count == step
        assert doc.get("segments_count") == step
        assert doc.get("size_in_byte") == path.stat().st_size
        # earlier segments are reported identically
        assert reports[: len(previous)] == previous
        previous = reports


def test_channel_geometry_per_segment(step_files):
    structure = read_structure(step_files[-1])

    def geometry(seg):
        return {
            ch.path: (ch.number_of_values_in_chunk, ch.number_of_values_in_segment)
            for ch in seg.channel_data.channels
        }

    assert geometry(structure[0]) == {CH1: (2, 2), CH2: (2, 2)}
    # raw data only, layout carried over
    assert structure[1].objects is None
    assert geometry(structure[1]) == {CH1: (2, 2), CH2: (2, 2)}
    # channel 3 added without a new object list
    assert geometry(structure[2]) == {CH1: (2, 2), CH2: (2, 2), CH3: (1, 1)}
    # property change only: channel 1 reuses its layout
    assert structure[3].objects[0].raw is None
    assert structure[3].objects[0].property_map == {"gain": 2.5}
    assert geometry(structure[3]) == geometry(structure[2])
    # new object list keeps only channel 1, two chunks
    assert structure[4].channel_data.number_of_chunks == 2
    assert geometry(structure[4]) == {CH1: (2, 4)}
    # unknown next segment offset, resolved to the file end
    last = structure[5]
    assert last.next_segment_offset == tb.NEXT_SEGMENT_UNKNOWN
    assert last.absolute_next_segment_offset == step_files[-1].stat().st_size
    assert last.channel_data.chunk_byte_size == 8
    assert last.channel_data.number_of_chunks == 3
    assert geometry(last) == {CH1: (2, 6)}


def test_reused_layout_matches_original_layout(step_files):
    structure = read_structure(step_files[4])
    defined = structure[0].channel_data.channel(CH1)
    reused = structure[4].channel_data.channel(CH1)
    assert reused.data_type == defined.data_type
    assert reused.number_of_values_in_chunk == defined.number_of_values_in_chunk
    assert reused.single_value_size == defined.single_value_size


def test_root_and_group_properties(step_files):
    structure = read_structure(step_files[0])
    objects = structure[0].objects
    assert [o.path for o in objects] == ["/", "/'Group'", CH1, CH2]
    assert objects[0].property_map == {"name": "example"}
    assert objects[1].property_map == {"description": "incremental"}
