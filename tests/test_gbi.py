import struct

import pytest

from n64model.gbi import Gfx, VertexField, Vtx, rsp_address
from n64model.hashing import pack8x4


def test_rsp_address_sets_segment():
    assert rsp_address(0x10) == 0x01000010
    assert rsp_address(0) >> 24 == 1


@pytest.mark.parametrize(
    "field, offset",
    [
        (VertexField.RGBA, 16),
        (VertexField.ST, 20),
        (VertexField.XY, 24),
        (VertexField.Z, 28),
    ],
)
def test_vertex_field_offsets(field, offset):
    g = Gfx.sp_modify_vertex(0, field, 0)
    assert (g.hi >> 16) & 0xFF == offset


def test_vtx_to_bytes_round_trip():
    v = Vtx(pos=(1, -2, 300), texcoord=(-5, 7), color=(10, 20, 30, 255))
    data = v.to_bytes()
    assert len(data) == Vtx.SIZE
    assert struct.unpack(">3hH2h4B", data) == (1, -2, 300, 0, -5, 7, 10, 20, 30, 255)


def test_vtx_pad_is_written_as_zero():
    v = Vtx(pos=(1, 2, 3), pad=0x1234)
    assert v.to_bytes()[6:8] == b"\x00\x00"


def test_gfx_to_bytes_big_endian():
    assert Gfx(0x01020304, 0x05060708).to_bytes() == bytes(range(1, 9))


def test_end_display_list():
    assert Gfx.sp_end_display_list().to_bytes() == b"\xdf" + bytes(7)


def test_sp_vertex_fields():
    g = Gfx.sp_vertex(rsp_address(64), 5, 3)
    assert g.hi >> 24 == 0x01
    assert (g.hi >> 12) & 0xFF == 5
    assert (g.hi >> 1) & 0x7F == 8
    assert g.lo == rsp_address(64)


def test_sp_modify_vertex_fields():
    g = Gfx.sp_modify_vertex(7, VertexField.ST, 0xAABBCCDD)
    assert g.hi >> 24 == 0x02
    assert (g.hi >> 16) & 0xFF == VertexField.ST
    assert g.hi & 0xFFFF == 14
    assert g.lo == 0xAABBCCDD


def test_triangles_encode_doubled_indexes():
    one = Gfx.sp1_triangle((1, 2, 3))
    assert one.hi >> 24 == 0x05
    assert [(one.hi >> s) & 0xFF for s in (16, 8, 0)] == [2, 4, 6]
    assert one.lo == 0
    two = Gfx.sp2_triangle((1, 2, 3), (4, 5, 6))
    assert two.hi >> 24 == 0x06
    assert two.hi & 0xFFFFFF == one.hi & 0xFFFFFF
    assert [(two.lo >> s) & 0xFF for s in (16, 8, 0)] == [8, 10, 12]


def test_prim_color():
    g = Gfx.dp_set_prim_color(1, 2, (9, 8, 7, 6))
    assert g.hi >> 24 == 0xFA
    assert (g.hi >> 8) & 0xFF == 1
    assert g.hi & 0xFF == 2
    assert g.lo == pack8x4(9, 8, 7, 6)