"""Import of scenes as meshes: quantization, skinning and animation frames."""

from __future__ import annotations

import math
import struct
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TextIO, TypeVar

from .config import Config
from .matrix import Matrix4, Quaternion
from .mesh import Animation, AnimationFrame, Mesh, MeshError, Triangle, VertexAttr
from .quote import quote
from .scene import QuatKey, Scene, SceneAnimation, SceneMesh, SceneNode, VectorKey

_INT16_MIN = -32768
_INT16_MAX = 32767
_INT8_MIN = -128
_INT8_MAX = 127
_MAX_ANIMATION_FRAMES = 100

Position = tuple[int, int, int]


def _f32(x: float) -> float:
    (value,) = struct.unpack("<f", struct.pack("<f", x))
    return value


def _format_float(x: float) -> str:
    """Format a single-precision value with the fewest digits that read back."""
    if math.isnan(x):
        return "nan"
    if math.isinf(x):
        return "inf" if x > 0 else "-inf"
    value = _f32(x)
    for digits in range(1, 10):
        candidate = float(f"{value:.{digits}g}")
        if _f32(candidate) == value:
            break
    text = repr(candidate)
    return text[:-2] if text.endswith(".0") else text


def _log(stats: TextIO | None, text: str) -> None:
    if stats is not None:
        print(text, file=stats)


def _clamp_round(value: float, low: int, high: int) -> int:
    if value > low:
        return round(value) if value < high else high
    return low


def quantize_vector(vec: Sequence[float]) -> Position:
    """Round a vector to 16-bit integers, saturating; NaN becomes 0."""
    result = []
    for x in vec:
        if math.isnan(x):
            result.append(0)
        elif x < _INT16_MIN:
            result.append(_INT16_MIN)
        elif x > _INT16_MAX:
            result.append(_INT16_MAX)
        else:
            result.append(round(x))
    return tuple(result)  # type: ignore[return-value]


def _color_channel(c: float) -> int:
    if not c < 1.0:
        return 255
    if not c > 0.0:
        return 0
    return min(round(256.0 * c), 255)


def import_color(color: Sequence[float]) -> tuple[int, int, int, int]:
    """Convert an RGBA color with components in 0..1 to 8-bit channels."""
    return tuple(_color_channel(c) for c in color)  # type: ignore[return-value]


class Bounds:
    """An axis-aligned bounding box, empty until points are added."""

    def __init__(self) -> None:
        self._min = [1.0, 1.0, 1.0]
        self._max = [-1.0, -1.0, -1.0]

    def add(self, points: Sequence[Sequence[float]], transform: Matrix4) -> None:
        """Extend the box to cover the transformed points."""
        if not points:
            return
        if self._min[0] > self._max[0]:
            first = transform.transform(points[0])
            self._min = list(first)
            self._max = list(first)
        for point in points:
            v = transform.transform(point)
            self._min = [min(a, b) for a, b in zip(self._min, v)]
            self._max = [max(a, b) for a, b in zip(self._max, v)]

    def to_string(self) -> str:
        lo = ", ".join(_format_float(v) for v in self._min)
        hi = ", ".join(_format_float(v) for v in self._max)
        return f"({lo}) ({hi})"

    def __str__(self) -> str:
        return self.to_string()


@dataclass
class _Bone:
    node: int
    name: str
    # Pairs of (vertex index, weight).
    vertexes: list[tuple[int, float]]
    offset_matrix: Matrix4


@dataclass
class _Node:
    parent: int
    name: str
    transform: Matrix4
    current_local: Matrix4 = field(default_factory=Matrix4.identity)
    current_global: Matrix4 = field(default_factory=Matrix4.identity)


_Value = TypeVar("_Value", tuple, Quaternion)


def _interpolate(a: _Value, b: _Value, frac: float) -> _Value:
    if isinstance(a, Quaternion):
        return a.interpolate(b, frac)  # type: ignore[arg-type,return-value]
    return tuple(x * (1.0 - frac) + y * frac for x, y in zip(a, b))  # type: ignore[return-value]


def _read_keys(time: float, keys: Sequence[VectorKey | QuatKey], default: _Value) -> _Value:
    """Sample a channel at time, interpolating between neighbouring keys."""
    if not keys:
        return default
    idx = 0
    while idx < len(keys) and time >= keys[idx].time:
        idx += 1
    if idx == 0:
        return keys[0].value  # type: ignore[return-value]
    if idx == len(keys):
        return keys[-1].value  # type: ignore[return-value]
    a, b = keys[idx - 1], keys[idx]
    delta = b.time - a.time
    if not delta > 1e-5:
        return a.value  # type: ignore[return-value]
    return _interpolate(a.value, b.value, (time - a.time) / delta)  # type: ignore[arg-type]


class _Importer:
    def __init__(self, cfg: Config, stats: TextIO | None) -> None:
        self._cfg = cfg
        self._stats = stats
        self._transform = Matrix4.identity()
        self._raw_positions: list[tuple[float, float, float]] = []
        self._vertexes: list[VertexAttr] = []
        self._triangles: list[Triangle] = []
        # Node name to index, or -1 where several nodes share the name.
        self._node_names: dict[str, int] = {}
        self._bones: list[_Bone] = []
        self._nodes: list[_Node] = []
        self._vertex_pos: list[Position] = []
        self._animations: list[Animation | None] = []
        self._frames: list[list[Position]] = []
        self._frame_index: dict[tuple[Position, ...], int] = {}

    def run(self, scene: Scene) -> Mesh:
        axes = self._cfg.axes.to_matrix()
        if self._stats is not None:
            bounds = Bounds()
            self._get_bounds(bounds, scene, scene.root, axes)
            _log(self._stats, f"Model bounds: {bounds.to_string()}")
        self._transform = axes.scaled(self._cfg.scale)
        self._add_nodes(scene.root, -1)
        self._add_meshes(scene, scene.root, Matrix4.identity())
        if not self._raw_positions or not self._vertex_pos:
            raise MeshError("empty mesh")
        if self._add_frame(self._vertex_pos) != 0:
            raise RuntimeError("bind pose is not frame 0")
        if self._cfg.animate:
            for index, animation in enumerate(scene.animations):
                self._add_animation(index, animation)
        if self._stats is not None:
            _log(self._stats, "\n========== Model Stats ==========")
            _log(self._stats, f"Vertexes: {len(self._vertexes)}")
            _log(self._stats, f"Triangles: {len(self._triangles)}")
            _log(self._stats, f"Nodes: {len(self._nodes)}")
            _log(self._stats, f"Bones: {len(self._bones)}")
            _log(self._stats, "")
        if not self._frames:
            raise RuntimeError("no frames")
        return Mesh(
            vertexes=self._vertexes,
            triangles=self._triangles,
            animations=self._animations,
            animation_frames=self._frames,
        )

    def _get_bounds(self, bounds: Bounds, scene: Scene, node: SceneNode, parent: Matrix4) -> None:
        transform = parent @ node.transform
        for mesh_id in node.meshes:
            bounds.add(scene.meshes[mesh_id].vertices, transform)
        for child in node.children:
            self._get_bounds(bounds, scene, child, transform)

    def _add_nodes(self, node: SceneNode, parent: int) -> None:
        index = len(self._nodes)
        self._nodes.append(_Node(parent, node.name, node.transform))
        self._node_names[node.name] = -1 if node.name in self._node_names else index
        for child in node.children:
            self._add_nodes(child, index)

    def _add_meshes(self, scene: Scene, node: SceneNode, transform: Matrix4) -> None:
        node_transform = transform @ node.transform
        for mesh_id in node.meshes:
            if not 0 <= mesh_id < len(scene.meshes):
                raise MeshError("bad mesh reference in scene")
            self._add_mesh(scene.meshes[mesh_id], node_transform)
        for child in node.children:
            self._add_meshes(scene, child, node_transform)

    def _add_mesh(self, mesh: SceneMesh, transform: Matrix4) -> None:
        cfg = self._cfg
        nvert = len(mesh.vertices)
        offset = len(self._vertexes)
        self._raw_positions.extend(mesh.vertices)
        attrs = [VertexAttr() for _ in range(nvert)]
        self._vertexes.extend(attrs)
        full = self._transform @ transform
        self._vertex_pos.extend(quantize_vector(full.transform(v)) for v in mesh.vertices)

        if cfg.use_texcoords:
            if mesh.texcoords is None:
                _log(self._stats, "No texture coordinates")
            else:
                if not 0 <= cfg.texcoord_bits < 32:
                    raise ValueError("texcoord_bits out of range")
                scale = float(1 << cfg.texcoord_bits)
                for attr, coord in zip(attrs, mesh.texcoords):
                    u, v = coord[0], 1.0 - coord[1]
                    attr.texcoord = (
                        _clamp_round(u * scale, _INT16_MIN, _INT16_MAX),
                        _clamp_round(v * scale, _INT16_MIN, _INT16_MAX),
                    )

        if cfg.use_vertex_colors:
            if mesh.colors is None:
                _log(self._stats, "No colors")
            else:
                for attr, color in zip(attrs, mesh.colors):
                    attr.color = import_color(color)

        if cfg.use_normals:
            if mesh.normals is None:
                _log(self._stats, "No normals")
            else:
                for attr, normal in zip(attrs, mesh.normals):
                    # 128 stands for 1.0, but the largest value is 127.
                    attr.normal = tuple(  # type: ignore[assignment]
                        _clamp_round(c * 128.0, _INT8_MIN, _INT8_MAX)
                        for c in cfg.axes.apply(normal)
                    )

        for face in mesh.faces:
            if len(face) != 3:
                raise MeshError(f"face is not a triangle, vertexes={len(face)}")
            if any(not 0 <= idx < nvert for idx in face):
                raise MeshError("invalid vertex index")
            self._triangles.append(
                Triangle(mesh.material_index, tuple(offset + idx for idx in face))  # type: ignore[arg-type]
            )

        if cfg.animate:
            for bone in mesh.bones:
                node_index = self._node_names.get(bone.name)
                if node_index is None:
                    raise MeshError(f"no node for bone, name={quote(bone.name)}")
                if node_index < 0:
                    raise MeshError(f"multiple nodes for bone, name={quote(bone.name)}")
                self._bones.append(
                    _Bone(
                        node=node_index,
                        name=bone.name,
                        vertexes=[(offset + w.vertex_id, w.weight) for w in bone.weights],
                        offset_matrix=bone.offset_matrix,
                    )
                )

    def _add_animation(self, index: int, animation: SceneAnimation) -> None:
        duration = animation.duration
        frame_count = round(duration + 1.0)
        anim = Animation(duration=1.0)
        if frame_count <= 1:
            anim.frames.append(AnimationFrame(data_index=self._create_frame(animation, 0.0)))
        elif frame_count > _MAX_ANIMATION_FRAMES:
            raise MeshError("too many frames in animation")
        else:
            last = frame_count - 1
            for i in range(frame_count):
                time = i * (duration / last)
                anim.frames.append(
                    AnimationFrame(time=i / last, data_index=self._create_frame(animation, time))
                )
        if index >= len(self._animations):
            self._animations.extend([None] * (index + 1 - len(self._animations)))
        if self._animations[index] is not None:
            raise MeshError("multiple animations in same slot")
        self._animations[index] = anim

    def _create_frame(self, animation: SceneAnimation, time: float) -> int:
        for node in self._nodes:
            node.current_local = node.transform

        for channel in animation.channels:
            name = channel.node_name
            node_index = self._node_names.get(name)
            if node_index is None:
                raise MeshError(
                    "animation refers to unknown node, "
                    f"animation={quote(animation.name)}, node={quote(name)}"
                )
            if node_index == -1:
                raise MeshError(
                    "multiple nodes match animation channel, "
                    f"animation={quote(animation.name)}, node={quote(name)}"
                )
            position = _read_keys(time, channel.position_keys, (0.0, 0.0, 0.0))
            rotation = _read_keys(time, channel.rotation_keys, Quaternion())
            scaling = _read_keys(time, channel.scaling_keys, (1.0, 1.0, 1.0))
            self._nodes[node_index].current_local = Matrix4.from_srt(scaling, rotation, position)

        # A parent always comes before its children.
        for node in self._nodes:
            if node.parent == -1:
                node.current_global = node.current_local
            else:
                node.current_global = self._nodes[node.parent].current_global @ node.current_local

        positions = [[0.0, 0.0, 0.0] for _ in self._vertexes]
        for bone in self._bones:
            mat = self._nodes[bone.node].current_global @ bone.offset_matrix
            for index, weight in bone.vertexes:
                moved = mat.transform(self._raw_positions[index])
                acc = positions[index]
                for k in range(3):
                    acc[k] += moved[k] * weight

        return self._add_frame([quantize_vector(self._transform.transform(p)) for p in positions])

    def _add_frame(self, positions: list[Position]) -> int:
        key = tuple(positions)
        existing = self._frame_index.get(key)
        if existing is not None:
            _log(self._stats, f"Reusing frame {existing}")
            return existing
        index = len(self._frames)
        self._frames.append(list(positions))
        self._frame_index[key] = index
        return index


def import_mesh(cfg: Config, scene: Scene, stats: TextIO | None = None) -> Mesh:
    """Import a scene as a mesh; frame 0 of the result is the bind pose."""
    return _Importer(cfg, stats).run(scene)