"""In-memory triangle meshes with animation frames."""

from __future__ import annotations

from dataclasses import dataclass, field


class MeshError(Exception):
    """A mesh is invalid or cannot be imported."""


@dataclass
class VertexAttr:
    """Vertex attributes other than position."""

    texcoord: tuple[int, int] = (0, 0)
    color: tuple[int, int, int, int] = (0, 0, 0, 0)
    normal: tuple[int, int, int] = (0, 0, 0)


@dataclass
class Triangle:
    """A triangle: its material index and three vertex indexes."""

    material: int
    vertex: tuple[int, int, int]


@dataclass
class AnimationFrame:
    """A frame of a mesh animation.

    time is when the frame is shown, measured from the start of the
    animation; data_index selects the position data in the mesh's frames.
    """

    time: float = 0.0
    data_index: int = 0


@dataclass
class Animation:
    """A mesh animation; frames are sorted by ascending time."""

    duration: float = 0.0
    frames: list[AnimationFrame] = field(default_factory=list)


@dataclass
class Mesh:
    """A complete mesh.

    animation_frames holds vertex positions for each frame of animation;
    frame 0 is the bind pose and is always present once imported. Entries
    of animations may be None for empty slots.
    """

    vertexes: list[VertexAttr] = field(default_factory=list)
    triangles: list[Triangle] = field(default_factory=list)
    animations: list[Animation | None] = field(default_factory=list)
    animation_frames: list[list[tuple[int, int, int]]] = field(default_factory=list)