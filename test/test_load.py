# test/test_load.py
import json
import xml.etree.ElementTree as ET

import pytest

from tdmsstruct import dump_structure, read_structure
from tdmsstruct.core import IoOpenFailure, MissingPriorDescriptor

import tdms_builder as tb


@pytest.fixture
def tdms_file(tmp_path):
    data = tb.incremental_example_steps()[-1]
    p = tmp_path / "example.tdms"
    p.write_bytes(data)
    return p


def test_dump_xml_to_default_path(tdms_file):
    structure = dump_structure(tdms_file)
    out = tdms_file.with_name(tdms_file.name + ".structure.xml")
    assert out.exists()

    root = ET.parse(out).getroot()
    assert root.tag == "file"
    assert root.findtext("filepath") == str(tdms_file)
    assert int(root.findtext("segments_count")) == structure.segments_count == 6
    segments = root.find("segments").findall("segment")
    assert [int(s.findtext("index")) for s in segments] == list(range(6))
    assert segments[0].find("table_of_content").findtext("new_obj_list") == "1"
    channels = segments[4].find("channel_data").find("channels").findall("channel")
    assert channels[0].findtext("number_of_values_in_segment") == "4"


def test_dump_json_to_explicit_path(tdms_file, tmp_path):
    out = tmp_path / "report.json"
    dump_structure(tdms_file, out, fmt="json")

    doc = json.loads(out.read_text(encoding="utf-8"))["file"]
    assert doc["segments_count"] == 6
    assert len(doc["segments"]) == 6
    first = doc["segments"][0]
    assert first["objects_count"] == 4
    assert first["objects"][0]["properties"][0] == {
        "name": "name",
        "data_type": 0x20,
        "data_type_string": "String",
        "value": "example",
    }
    assert first["channel_data"]["channels"][1]["path"] == "/'Group'/'Channel2'"


def test_dump_failure_still_closes_report(tmp_path):
    data = tb.segment(tb.TOC_FULL, [tb.obj("/'g'/'c'", tb.reuse_previous())])
    src = tmp_path / "broken.tdms"
    src.write_bytes(data)
    out = tmp_path / "broken.xml"

    with pytest.raises(MissingPriorDescriptor):
        dump_structure(src, out)

    # closed and well formed, with no segment reported
    root = ET.parse(out).getroot()
    assert root.tag == "file"
    assert root.find("segments").findall("segment") == []


def test_missing_input_does_not_create_report(tmp_path):
    out = tmp_path / "never.xml"
    with pytest.raises(IoOpenFailure):
        dump_structure(tmp_path / "missing.tdms", out)
    assert not out.exists()


def test_read_structure_without_report(tdms_file):
    structure = read_structure(tdms_file)
    assert structure.filepath == str(tdms_file)
    assert structure.size_in_byte == tdms_file.stat().st_size
    assert len(structure) == 6
