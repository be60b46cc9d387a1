import pytest

from bnl_helpers import craft_archive, dataview_list, record

from bnltool.archive.container import BNLFile
from bnltool.archive.errors import E_OVERLAP, OverlapError
from bnltool.config import BnlConfig


def _overlapping_archive() -> bytes:
    # "a" owns buffer[0:6], "b" owns buffer[4:8]
    views = dataview_list([(0, 6)]) + dataview_list([(4, 4)])
    return craft_archive(
        [record("a", 8, (0, 0), (0, 16)), record("b", 8, (0, 0), (16, 16))],
        buffer_views=views,
        buffer=b"0123456789",
    )


def test_overlap_warns_by_default(caplog):
    with caplog.at_level("WARNING", logger="bnltool"):
        bnl = BNLFile.from_bytes(_overlapping_archive())
    assert [o.to_dict() for o in bnl.find_resource_overlaps()] == [
        {"first": "a", "second": "b", "start": 4, "end": 6}
    ]
    assert bnl.assets[0].resource_chunks == [b"012345"]
    assert bnl.assets[1].resource_chunks == [b"4567"]
    assert any("overlap" in r.getMessage() for r in caplog.records)


def test_overlap_error_policy():
    with pytest.raises(OverlapError) as exc:
        BNLFile.from_bytes(_overlapping_archive(), BnlConfig(overlap_policy="error"))
    assert exc.value.code == E_OVERLAP
    assert exc.value.context["overlaps"][0]["start"] == 4


def test_overlap_ignore_policy(caplog):
    with caplog.at_level("WARNING", logger="bnltool"):
        bnl = BNLFile.from_bytes(
            _overlapping_archive(), BnlConfig(overlap_policy="ignore")
        )
    assert len(bnl.overlaps) == 1
    assert not caplog.records


def test_views_of_one_asset_may_overlap():
    data = craft_archive(
        [record("a", 8, (0, 0), (0, 24))],
        buffer_views=dataview_list([(0, 4), (2, 4)]),
        buffer=b"abcdef",
    )
    bnl = BNLFile.from_bytes(data, BnlConfig(overlap_policy="error"))
    assert bnl.assets[0].resource_chunks == [b"abcd", b"cdef"]


def test_zero_length_views_never_overlap():
    data = craft_archive(
        [record("a", 8, (0, 0), (0, 16)), record("b", 8, (0, 0), (16, 16))],
        buffer_views=dataview_list([(0, 4)]) + dataview_list([(2, 0)]),
        buffer=b"abcd",
    )
    assert BNLFile.from_bytes(data, BnlConfig(overlap_policy="error")).overlaps == []


def test_encoded_archives_never_overlap():
    from bnl_helpers import sample_bnl

    data = sample_bnl().to_bytes()
    assert BNLFile.from_bytes(data, BnlConfig(overlap_policy="error")).overlaps == []
