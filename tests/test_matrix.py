import math

import pytest

from n64model.matrix import Matrix4, Quaternion


def approx_vec(v):
    return pytest.approx(v, abs=1e-9)


AFFINE_A = Matrix4(
    (
        (0.0, -1.0, 0.0, 3.0),
        (1.0, 0.0, 0.0, -2.0),
        (0.0, 0.0, 2.0, 0.5),
        (0.0, 0.0, 0.0, 1.0),
    )
)
AFFINE_B = Matrix4(
    (
        (2.0, 0.0, 0.0, 1.0),
        (0.0, 1.0, 1.0, 0.0),
        (0.0, 0.0, 1.0, 4.0),
        (0.0, 0.0, 0.0, 1.0),
    )
)


def test_identity_transform_keeps_point():
    assert Matrix4.identity().transform((1.5, -2.0, 7.0)) == (1.5, -2.0, 7.0)


def test_default_is_identity():
    assert Matrix4() == Matrix4.identity()


def test_matmul_identity():
    assert AFFINE_A @ Matrix4.identity() == AFFINE_A
    assert Matrix4.identity() @ AFFINE_A == AFFINE_A


def test_matmul_composes_transforms():
    v = (1.0, 2.0, 3.0)
    combined = (AFFINE_A @ AFFINE_B).transform(v)
    assert combined == approx_vec(AFFINE_A.transform(AFFINE_B.transform(v)))


def test_scaled_scales_every_element():
    m = AFFINE_A.scaled(2.0)
    for row, original in zip(m.rows, AFFINE_A.rows):
        assert row == tuple(2.0 * v for v in original)


def test_scaled_identity_on_point():
    v = (1.0, -3.0, 0.5)
    assert Matrix4.identity().scaled(4.0).transform(v) == tuple(4.0 * c for c in v)


def test_bad_shape():
    with pytest.raises(ValueError):
        Matrix4(((1.0, 0.0), (0.0, 1.0)))


def test_from_srt_translation_moves_origin():
    pos = (1.0, -2.0, 3.0)
    m = Matrix4.from_srt((2.0, 3.0, 4.0), Quaternion(), pos)
    assert m.transform((0.0, 0.0, 0.0)) == approx_vec(pos)
    assert m[3] == (0.0, 0.0, 0.0, 1.0)


def test_from_srt_rotation_about_z():
    half = math.pi / 4
    q = Quaternion(math.cos(half), 0.0, 0.0, math.sin(half))
    m = Matrix4.from_srt((1.0, 1.0, 1.0), q, (0.0, 0.0, 0.0))
    assert m.transform((1.0, 0.0, 0.0)) == approx_vec((0.0, 1.0, 0.0))


def test_rotation_preserves_length():
    q = Quaternion(0.5, 0.5, 0.5, 0.5)
    m = Matrix4.from_srt((1.0, 1.0, 1.0), q, (0.0, 0.0, 0.0))
    v = m.transform((3.0, 4.0, 12.0))
    assert math.sqrt(sum(c * c for c in v)) == pytest.approx(13.0)


def test_interpolate_endpoints():
    a = Quaternion()
    b = Quaternion(math.cos(0.5), math.sin(0.5), 0.0, 0.0)
    start = a.interpolate(b, 0.0)
    end = a.interpolate(b, 1.0)
    assert (start.w, start.x, start.y, start.z) == approx_vec((a.w, a.x, a.y, a.z))
    assert (end.w, end.x, end.y, end.z) == approx_vec((b.w, b.x, b.y, b.z))


def test_interpolate_midpoint_is_unit():
    a = Quaternion()
    b = Quaternion(math.cos(0.7), 0.0, math.sin(0.7), 0.0)
    mid = a.interpolate(b, 0.5)
    assert mid.w**2 + mid.x**2 + mid.y**2 + mid.z**2 == pytest.approx(1.0)


def test_interpolate_takes_short_arc():
    a = Quaternion()
    b = Quaternion(math.cos(0.3), 0.0, 0.0, math.sin(0.3))
    neg_b = Quaternion(-b.w, -b.x, -b.y, -b.z)
    end = a.interpolate(neg_b, 1.0)
    assert (end.w, end.x, end.y, end.z) == approx_vec((b.w, b.x, b.y, b.z))


def test_interpolate_nearly_equal_is_linear():
    a = Quaternion()
    result = a.interpolate(Quaternion(), 0.25)
    assert result == Quaternion()