import struct
import zlib

import pytest

from bnl_helpers import craft_archive, dataview_list, make_raw, record, sample_bnl

from bnltool.archive.container import BNLFile
from bnltool.archive.errors import (
    E_DECOMPRESS,
    E_RECORD,
    E_TRUNCATED,
    AddressingError,
    DecompressionError,
    FormatError,
)
from bnltool.config import BnlConfig


def test_round_trip_preserves_everything():
    bnl = sample_bnl()
    data = bnl.to_bytes()
    again = BNLFile.from_bytes(data)

    assert again.flags == 0x03
    assert again.reserved == b"\x01\x02\x03\x04\x05"
    assert again.names() == bnl.names()
    for a, b in zip(bnl.assets, again.assets):
        assert a.metadata == b.metadata
        assert a.descriptor_bytes == b.descriptor_bytes
        assert a.resource_chunks == b.resource_chunks
    # encoding is deterministic
    assert again.to_bytes() == data


def test_header_points_at_sections_after_header():
    data = sample_bnl().to_bytes()
    file_count, flags, reserved, *locs = struct.unpack_from("<HB5s8I", data)
    assert file_count == 4
    assert flags == 0x03
    assert locs[0] == 40
    assert locs[1] == 4 * 160
    # sections are laid out back to back in fixed order
    for i in range(0, 6, 2):
        assert locs[i] + locs[i + 1] == locs[i + 2]
    payload = zlib.decompress(data[40:])
    assert 40 + len(payload) == locs[6] + locs[7]


def test_entry_without_resource_decodes_to_none():
    bnl = BNLFile([make_raw("aid_marker_a_b_c", 10, b"abc")])
    again = BNLFile.from_bytes(bnl.to_bytes())
    assert again.assets[0].resource_chunks is None


def test_empty_chunk_list_is_kept_distinct_from_none():
    bnl = BNLFile([make_raw("aid_misc_a_b_c", 8, b"", [])])
    again = BNLFile.from_bytes(bnl.to_bytes())
    assert again.assets[0].resource_chunks == []


def test_empty_archive():
    data = BNLFile().to_bytes()
    assert len(BNLFile.from_bytes(data)) == 0


def test_unknown_type_code_survives():
    bnl = BNLFile([make_raw("aid_odd_a_b_c", 99, b"\x00")])
    again = BNLFile.from_bytes(bnl.to_bytes())
    assert again.assets[0].asset_type == 99
    assert again.assets[0].type_label == "unknown99"


def test_custom_name_size_round_trip():
    config = BnlConfig(name_size=64)
    raw = make_raw("aid_misc_a_b_c", 8, b"d", [b"r"])
    raw.metadata.raw_name = raw.metadata.raw_name[:64]
    data = BNLFile([raw], config=config).to_bytes()
    assert struct.unpack_from("<8I", data, 8)[1] == 64 + 32
    assert BNLFile.from_bytes(data, config).names() == ["aid_misc_a_b_c"]


def test_crafted_archive_decodes():
    data = craft_archive(
        [record("first", 8, (0, 3), (0, 16)), record("second", 10, (3, 2))],
        buffer_views=dataview_list([(2, 3)]),
        buffer=b"0123456",
        descriptors=b"abcde",
    )
    bnl = BNLFile.from_bytes(data)
    assert bnl.names() == ["first", "second"]
    assert bnl.assets[0].descriptor_bytes == b"abc"
    assert bnl.assets[0].resource_chunks == [b"234"]
    assert bnl.assets[1].descriptor_bytes == b"de"
    assert bnl.assets[1].resource_chunks is None


def test_short_header_rejected():
    with pytest.raises(FormatError) as exc:
        BNLFile.from_bytes(b"\x00" * 12)
    assert exc.value.code == E_TRUNCATED


def test_bad_payload_rejected():
    data = struct.pack("<HB5s8I", 0, 0, b"\x00" * 5, *([0] * 8)) + b"not zlib"
    with pytest.raises(DecompressionError) as exc:
        BNLFile.from_bytes(data)
    assert exc.value.code == E_DECOMPRESS


def test_section_past_payload_rejected():
    data = craft_archive(
        [record("a", 8, (0, 1))],
        descriptors=b"x",
        extra_section_sizes=(0, 0, 0, 5),
    )
    with pytest.raises(FormatError) as exc:
        BNLFile.from_bytes(data)
    assert exc.value.code == E_TRUNCATED
    assert exc.value.context["section"] == "descriptor"


def test_file_count_larger_than_table_rejected():
    data = craft_archive([record("a", 8, (0, 0))], file_count=2)
    with pytest.raises(FormatError) as exc:
        BNLFile.from_bytes(data)
    assert exc.value.code == E_TRUNCATED


def test_file_count_smaller_than_table_warns(caplog):
    data = craft_archive(
        [record("a", 8, (0, 0)), record("b", 8, (0, 0))], file_count=1
    )
    with caplog.at_level("WARNING", logger="bnltool"):
        bnl = BNLFile.from_bytes(data)
    assert bnl.names() == ["a"]
    assert any("Asset description section" in r.getMessage() for r in caplog.records)


def test_descriptor_outside_section_rejected():
    data = craft_archive([record("a", 8, (2, 4))], descriptors=b"abc")
    with pytest.raises(FormatError) as exc:
        BNLFile.from_bytes(data)
    assert exc.value.code == E_RECORD


def test_dataview_list_pointer_outside_section_rejected():
    data = craft_archive(
        [record("a", 8, (0, 0), (64, 16))],
        buffer_views=dataview_list([(0, 1)]),
        buffer=b"x",
    )
    with pytest.raises(FormatError) as exc:
        BNLFile.from_bytes(data)
    assert exc.value.code == E_RECORD


def test_view_outside_buffer_rejected():
    data = craft_archive(
        [record("a", 8, (0, 0), (0, 16))],
        buffer_views=dataview_list([(2, 10)]),
        buffer=b"0123",
    )
    with pytest.raises(AddressingError):
        BNLFile.from_bytes(data)


def test_resource_size_mismatch_warns(caplog):
    data = craft_archive(
        [record("a", 8, (0, 0), (0, 99))],
        buffer_views=dataview_list([(0, 2)]),
        buffer=b"ab",
    )
    with caplog.at_level("WARNING", logger="bnltool"):
        bnl = BNLFile.from_bytes(data)
    assert bnl.assets[0].resource_chunks == [b"ab"]
    assert any("resource_size=99" in r.getMessage() for r in caplog.records)
