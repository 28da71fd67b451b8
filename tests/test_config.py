from n64model.axes import Axes
from n64model.config import Config


def test_defaults():
    cfg = Config()
    assert cfg.texcoord_bits == 11
    assert not (cfg.use_normals or cfg.use_texcoords or cfg.use_vertex_colors)
    assert not cfg.use_primitive_color
    assert not cfg.animate
    assert cfg.axes.to_string() == "X,Y,Z"


def test_fields_are_settable():
    cfg = Config(use_normals=True, axes=Axes.parse("-y,x,z"), scale=2.5)
    assert cfg.use_normals is True
    assert cfg.axes.to_string() == "-Y,X,Z"
    assert cfg.scale == 2.5


def test_equality():
    assert Config() == Config()
    assert Config(animate=True) != Config()