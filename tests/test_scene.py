import pytest

from n64model.matrix import Quaternion
from n64model.scene import QuatKey, SceneMesh, VectorKey


def test_mesh_vertices_become_float_tuples():
    mesh = SceneMesh(vertices=[[1, 2, 3], (4, 5, 6)], faces=[[0, 1, 1]])
    assert mesh.vertices == [(1.0, 2.0, 3.0), (4.0, 5.0, 6.0)]
    assert mesh.faces == [(0, 1, 1)]


def test_mesh_rejects_vertex_with_wrong_size():
    with pytest.raises(ValueError, match="vertex must have 3 components"):
        SceneMesh(vertices=[(1, 2)])


def test_mesh_rejects_normal_count_mismatch():
    with pytest.raises(ValueError, match="normals has 1 entries for 2 vertexes"):
        SceneMesh(vertices=[(0, 0, 0), (1, 1, 1)], normals=[(0, 0, 1)])


def test_mesh_rejects_color_count_mismatch():
    with pytest.raises(ValueError, match="colors"):
        SceneMesh(vertices=[(0, 0, 0)], colors=[])


def test_mesh_rejects_bad_texcoords():
    with pytest.raises(ValueError, match="texcoords"):
        SceneMesh(vertices=[(0, 0, 0)], texcoords=[(1.0,)])
    with pytest.raises(ValueError, match="texcoords has 2 entries"):
        SceneMesh(vertices=[(0, 0, 0)], texcoords=[(0, 0), (1, 1)])


def test_mesh_keeps_texcoords():
    mesh = SceneMesh(vertices=[(0, 0, 0)], texcoords=[(0.5, 0.25, 0)])
    assert mesh.texcoords == [(0.5, 0.25, 0.0)]
    assert mesh.normals is None


def test_vector_key_value_normalized():
    key = VectorKey(time=2, value=[1, 2, 3])
    assert key.value == (1.0, 2.0, 3.0)
    with pytest.raises(ValueError):
        VectorKey(time=0, value=[1, 2])


def test_quat_key_default_is_no_rotation():
    key = QuatKey(time=0.0)
    assert key.value == Quaternion(1.0, 0.0, 0.0, 0.0)