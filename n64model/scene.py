"""Scene description consumed by the mesh importer.

A scene is a tree of nodes that place meshes, optional per-vertex
attributes, skinning bones and keyframed node animations.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from .matrix import Matrix4, Quaternion

Vector3 = tuple[float, float, float]


def _vector(value: Sequence[float], size: int, what: str) -> tuple[float, ...]:
    result = tuple(float(c) for c in value)
    if len(result) != size:
        raise ValueError(f"{what} must have {size} components, got {len(result)}")
    return result


def _vectors(
    values: Sequence[Sequence[float]] | None, size: int, what: str, count: int | None
) -> list[tuple[float, ...]] | None:
    if values is None:
        return None
    result = [_vector(v, size, what) for v in values]
    if count is not None and len(result) != count:
        raise ValueError(f"{what} has {len(result)} entries for {count} vertexes")
    return result


@dataclass
class VectorKey:
    """A keyframed vector value at a point in time."""

    time: float
    value: Vector3

    def __post_init__(self) -> None:
        self.value = _vector(self.value, 3, "key value")  # type: ignore[assignment]


@dataclass
class QuatKey:
    """A keyframed rotation at a point in time."""

    time: float
    value: Quaternion = field(default_factory=Quaternion)


@dataclass
class NodeAnim:
    """The keyframes animating one node."""

    node_name: str
    position_keys: list[VectorKey] = field(default_factory=list)
    rotation_keys: list[QuatKey] = field(default_factory=list)
    scaling_keys: list[VectorKey] = field(default_factory=list)


@dataclass
class SceneAnimation:
    """A named animation made of per-node channels; duration is in ticks."""

    name: str = ""
    duration: float = 0.0
    channels: list[NodeAnim] = field(default_factory=list)


@dataclass
class VertexWeight:
    """The influence of a bone on one vertex of its mesh."""

    vertex_id: int
    weight: float


@dataclass
class SceneBone:
    """A bone, named after the node that drives it."""

    name: str
    weights: list[VertexWeight] = field(default_factory=list)
    # Mesh space to bone space.
    offset_matrix: Matrix4 = field(default_factory=Matrix4.identity)


@dataclass
class SceneMesh:
    """A mesh of polygon faces; attribute lists are per vertex or None."""

    vertices: list[Vector3] = field(default_factory=list)
    faces: list[tuple[int, ...]] = field(default_factory=list)
    material_index: int = 0
    normals: list[Vector3] | None = None
    texcoords: list[tuple[float, ...]] | None = None
    colors: list[tuple[float, float, float, float]] | None = None
    bones: list[SceneBone] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.vertices = _vectors(self.vertices, 3, "vertex", None) or []  # type: ignore[assignment]
        count = len(self.vertices)
        self.normals = _vectors(self.normals, 3, "normals", count)  # type: ignore[assignment]
        if self.texcoords is not None:
            coords = [tuple(float(c) for c in t) for t in self.texcoords]
            if any(len(t) not in (2, 3) for t in coords):
                raise ValueError("texcoords must have 2 or 3 components")
            if len(coords) != count:
                raise ValueError(f"texcoords has {len(coords)} entries for {count} vertexes")
            self.texcoords = coords
        self.colors = _vectors(self.colors, 4, "colors", count)  # type: ignore[assignment]
        self.faces = [tuple(int(i) for i in face) for face in self.faces]


@dataclass
class SceneNode:
    """A node placing meshes, by index into the scene, relative to its parent."""

    name: str = ""
    transform: Matrix4 = field(default_factory=Matrix4.identity)
    meshes: list[int] = field(default_factory=list)
    children: list[SceneNode] = field(default_factory=list)


@dataclass
class Scene:
    """A complete scene: the node tree, its meshes and its animations."""

    root: SceneNode = field(default_factory=SceneNode)
    meshes: list[SceneMesh] = field(default_factory=list)
    animations: list[SceneAnimation] = field(default_factory=list)