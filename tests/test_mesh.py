from n64model.mesh import Animation, AnimationFrame, Mesh, MeshError, Triangle, VertexAttr


def test_vertex_attr_defaults_are_zero():
    attr = VertexAttr()
    assert attr.texcoord == (0, 0)
    assert attr.color == (0, 0, 0, 0)
    assert attr.normal == (0, 0, 0)


def test_vertex_attr_equality_compares_all_fields():
    a = VertexAttr(texcoord=(1, 2), color=(3, 4, 5, 6), normal=(7, 8, 9))
    b = VertexAttr(texcoord=(1, 2), color=(3, 4, 5, 6), normal=(7, 8, 9))
    c = VertexAttr(texcoord=(1, 2), color=(3, 4, 5, 6), normal=(7, 8, 10))
    assert a == b
    assert (a == c) is False


def test_triangle_holds_material_and_vertexes():
    tri = Triangle(material=2, vertex=(4, 5, 6))
    assert tri.material == 2
    assert tri.vertex == (4, 5, 6)


def test_animation_frames_are_independent():
    a = Animation(duration=1.0)
    b = Animation(duration=2.0)
    a.frames.append(AnimationFrame(time=0.5, data_index=3))
    assert b.frames == []
    assert a.frames == [AnimationFrame(0.5, 3)]


def test_mesh_lists_are_independent():
    m1 = Mesh()
    m2 = Mesh()
    m1.vertexes.append(VertexAttr())
    m1.animations.append(None)
    assert m2.vertexes == []
    assert m2.animations == []
    assert len(m1.vertexes) == 1


def test_mesh_error_carries_message():
    err = MeshError("empty mesh")
    assert str(err) == "empty mesh"
    assert err.args == ("empty mesh",)
    assert issubclass(MeshError, Exception)