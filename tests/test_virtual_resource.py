import pytest

from bnltool.archive.dataview import DataView, DataViewList
from bnltool.archive.errors import OffsetOutOfBoundsError, SizeOutOfBoundsError
from bnltool.archive.resource import VirtualResource

SOURCE = bytes(i % 251 for i in range(1000))


def _four_slices() -> VirtualResource:
    # 100-byte slices taken at 0, 200, 400 and 600 of a 1000-byte sequence
    return VirtualResource.from_slices(
        [SOURCE[o : o + 100] for o in (0, 200, 400, 600)]
    )


def test_length_is_sum_of_slices():
    vr = _four_slices()
    assert len(vr) == 400
    assert not vr.is_empty()
    assert len(vr.slices()) == 4


def test_read_spanning_three_slices():
    vr = _four_slices()
    expected = SOURCE[280:300] + SOURCE[400:500] + SOURCE[600:680]
    assert vr.get_bytes(180, 200) == expected


def test_read_inside_one_slice():
    vr = _four_slices()
    assert vr.get_bytes(110, 20) == SOURCE[210:230]


def test_read_starting_on_slice_boundary():
    vr = _four_slices()
    assert vr.get_bytes(100, 100) == SOURCE[200:300]


def test_read_whole_and_empty():
    vr = _four_slices()
    assert vr.get_bytes(0, 400) == vr.get_all_bytes()
    assert vr.get_bytes(400, 0) == b""
    assert vr.get_bytes(0, 0) == b""


def test_offset_beyond_length_rejected():
    vr = _four_slices()
    with pytest.raises(OffsetOutOfBoundsError):
        vr.get_bytes(401, 0)


def test_size_beyond_length_rejected():
    vr = _four_slices()
    with pytest.raises(SizeOutOfBoundsError):
        vr.get_bytes(350, 51)
    with pytest.raises(SizeOutOfBoundsError):
        vr.get_bytes(400, 1)


def test_empty_resource():
    vr = VirtualResource.from_slices([])
    assert len(vr) == 0
    assert vr.is_empty()
    assert vr.get_all_bytes() == b""
    with pytest.raises(SizeOutOfBoundsError):
        vr.get_bytes(0, 1)


def test_from_dataview_list_shares_pool():
    pool = bytearray(b"0123456789")
    dvl = DataViewList([DataView(8, 2), DataView(0, 3)])
    vr = VirtualResource.from_dataview_list(dvl, pool)
    assert vr.get_all_bytes() == b"89012"
    assert vr.chunks() == [b"89", b"012"]
