"""Compilation of meshes into display lists for the engine."""

from __future__ import annotations

import dataclasses
import math
from dataclasses import dataclass
from typing import TextIO

from .config import Config
from .displaylist import VERTEX_CACHE_SIZE, DisplayList
from .gbi import Vtx
from .mesh import Mesh, Triangle
from .model import Animation, AnimationFrame, FrameData, FrameVertex, Model


def _log(stats: TextIO | None, text: str) -> None:
    if stats is not None:
        print(text, file=stats)


@dataclass
class _VState:
    vertex: Vtx
    tri_count: int = 0
    group_id: int = -1


@dataclass
class _GState:
    tri_count: int = 0
    can_reuse: bool = False
    in_current_batch: bool = False
    current_attr: int = -1


class _VertexSet:
    """Vertex data, with vertexes grouped by identical position and normal."""

    def __init__(self, mesh: Mesh, cfg: Config, stats: TextIO | None) -> None:
        self.vertexes: list[_VState] = []
        self.group_count = 0
        count = len(mesh.vertexes)
        if count == 0:
            return

        bind = mesh.animation_frames[0]
        for i, attr in enumerate(mesh.vertexes):
            if cfg.use_vertex_colors:
                color = tuple(attr.color)
            elif cfg.use_normals:
                color = tuple(n & 0xFF for n in attr.normal) + (0,)
            else:
                color = (0, 0, 0, 0)
            vtx = Vtx(pos=tuple(bind[i]), texcoord=tuple(attr.texcoord), color=color)
            self.vertexes.append(_VState(vtx))

        order = sorted(
            range(count),
            key=lambda i: (tuple(bind[i]), tuple(mesh.vertexes[i].normal), i),
        )
        same = [False] * count
        for k in range(1, count):
            cur, prev = order[k], order[k - 1]
            same[k] = tuple(bind[cur]) == tuple(bind[prev]) and tuple(
                mesh.vertexes[cur].normal
            ) == tuple(mesh.vertexes[prev].normal)
        if cfg.animate:
            for frame in mesh.animation_frames:
                for k in range(1, count):
                    if tuple(frame[order[k]]) != tuple(frame[order[k - 1]]):
                        same[k] = False

        groups = 0
        for k, index in enumerate(order):
            if not same[k]:
                groups += 1
            self.vertexes[index].group_id = groups - 1
        self.group_count = groups

        _log(stats, f"    Raw vertex count: {count}")
        _log(stats, f"    Unique vertex positions: {groups}")


class _Compiler:
    """Emits the triangles of one material in batches that fit the cache."""

    def __init__(self, vert: _VertexSet, mesh: Mesh, material: int) -> None:
        self._vertexes = [dataclasses.replace(v, tri_count=0) for v in vert.vertexes]
        self._triangles: list[Triangle] = []
        for tri in mesh.triangles:
            if tri.material == material:
                self._triangles.append(tri)
                for idx in tri.vertex:
                    self._vertexes[idx].tri_count += 1
        self._groups = [_GState() for _ in range(vert.group_count)]
        for v in self._vertexes:
            self._groups[v.group_id].tri_count += v.tri_count

        self._vert_space = 0
        self._batch_vertex: list[int] = []
        self._prev_vertex: list[int] = []
        self._batch_triangle: list[Triangle] = []
        self._prev_triangle: list[Triangle] = []
        self._batch_index = 0
        self._total_vtx = 0
        self._dl_vertex: list[int] = []

    def _group_of(self, vertex_id: int) -> _GState:
        return self._groups[self._vertexes[vertex_id].group_id]

    def emit(self, dl: DisplayList, stats: TextIO | None) -> list[int]:
        """Emit all triangles; return the source vertex of each emitted vertex."""
        while self._triangles:
            self._start_batch(dl)
            while (best := self._best_triangle()) is not None:
                self._add_triangle(best)
            self._emit_prev_batch(dl, stats)
            self._batch_vertex, self._prev_vertex = self._prev_vertex, self._batch_vertex
            self._batch_triangle, self._prev_triangle = (
                self._prev_triangle,
                self._batch_triangle,
            )
        self._emit_prev_batch(dl, stats)
        groups = len(self._groups)
        ratio = self._total_vtx / groups if groups else math.nan
        _log(stats, f"    Final vertex count: {self._total_vtx} ({ratio:.2f}x)")
        return list(self._dl_vertex)

    def _best_triangle(self) -> int | None:
        best: int | None = None
        best_cost: tuple[int, ...] = ()
        for i, tri in enumerate(self._triangles):
            space_required = 0
            transforms = 0
            num_tris = []
            for vertex_id in tri.vertex:
                g = self._group_of(vertex_id)
                num_tris.append(g.tri_count)
                if not g.in_current_batch:
                    space_required += 1
                    if not g.can_reuse:
                        transforms += 1
            cost = (space_required, transforms, *sorted(num_tris))
            if space_required <= self._vert_space and (best is None or cost < best_cost):
                best = i
                best_cost = cost
        return best

    def _add_triangle(self, triangle_id: int) -> None:
        tri = self._triangles.pop(triangle_id)
        for vertex_id in tri.vertex:
            v = self._vertexes[vertex_id]
            g = self._groups[v.group_id]
            if not g.in_current_batch:
                self._vert_space -= 1
                self._batch_vertex.append(vertex_id)
            v.tri_count -= 1
            g.tri_count -= 1
            g.in_current_batch = True
            g.current_attr = -1 if v.tri_count == 0 else vertex_id
        self._batch_triangle.append(tri)

    def _start_batch(self, dl: DisplayList) -> None:
        for g in self._groups:
            g.can_reuse = False
            g.in_current_batch = False
        for vertex_id in self._prev_vertex:
            self._group_of(vertex_id).can_reuse = True
        self._vert_space = dl.vertex_cache_size
        self._batch_vertex = []
        self._batch_triangle = []

    def _emit_prev_batch(self, dl: DisplayList, stats: TextIO | None) -> None:
        vertexes = self._prev_vertex
        triangles = self._prev_triangle
        if not vertexes and not triangles:
            return
        self._total_vtx += len(vertexes)
        batch_index = self._batch_index
        self._batch_index += 1
        high_index = batch_index & 1 != 0
        cache = dl.cache

        # Slots already holding vertexes of this batch.
        cache_size = dl.vertex_cache_size
        reuse_slot = [False] * cache_size
        for vertex_id in vertexes:
            slot = cache.cache_pos(self._vertexes[vertex_id].vertex.pos)
            if slot is not None:
                reuse_slot[slot] = True

        # Choose the slots to load, keeping reusable slots outside them.
        count = len(vertexes)
        if count > cache_size:
            raise RuntimeError("Batch::EmitVertexes failed: too many vertexes")
        if high_index:
            pos = 0
            while pos + count < cache_size:
                if reuse_slot[pos]:
                    count -= 1
                pos += 1
            start = pos
        else:
            pos = cache_size
            while pos > count:
                if reuse_slot[pos - 1]:
                    count -= 1
                pos -= 1
            start = 0
        for i in range(start, start + count):
            reuse_slot[i] = False

        transform = []
        for vertex_id in vertexes:
            slot = cache.cache_pos(self._vertexes[vertex_id].vertex.pos)
            if slot is None or not reuse_slot[slot]:
                transform.append(vertex_id)

        vcount = len(transform)
        vdata: list[Vtx | None] = [None] * vcount
        vstart, vend = 0, vcount
        dl_off = len(self._dl_vertex)
        self._dl_vertex.extend([-1] * vcount)
        for vertex_id in transform:
            if self._group_of(vertex_id).in_current_batch == high_index:
                vend -= 1
                index = vend
            else:
                index = vstart
                vstart += 1
            vdata[index] = self._vertexes[vertex_id].vertex
            self._dl_vertex[dl_off + index] = vertex_id
        dl.vertex(start, vdata)  # type: ignore[arg-type]

        for tri in triangles:
            slots = []
            for vertex_id in tri.vertex:
                v = self._vertexes[vertex_id]
                slot = cache.cache_pos(v.vertex.pos)
                if slot is None:
                    raise RuntimeError("Batch::EmitVertexes: vertex missing from cache")
                if cache.get(slot) is None:
                    raise RuntimeError("missing slot data")
                dl.set_vertex_texcoord(slot, v.vertex.texcoord)
                slots.append(slot)
            dl.triangle(slots)

        _log(
            stats,
            f"    Batch {batch_index}: vertexes={len(vertexes)}, triangles={len(triangles)}",
        )


def _emit_animations(model: Model, mesh: Mesh, dl_vertex_id: list[int]) -> None:
    if len(dl_vertex_id) != len(model.vertexes):
        raise RuntimeError("vertex size mismatch")
    for mesh_anim in mesh.animations:
        anim = Animation(duration=0.0)
        if mesh_anim is not None:
            anim.duration = mesh_anim.duration
            for mesh_frame in mesh_anim.frames:
                positions = mesh.animation_frames[mesh_frame.data_index]
                index = len(model.frames)
                model.frames.append(
                    FrameData([FrameVertex(tuple(positions[vid])) for vid in dl_vertex_id])
                )
                anim.frames.append(AnimationFrame(time=mesh_frame.time, index=index))
        model.animations.append(anim)


def compile_mesh(mesh: Mesh, cfg: Config, stats: TextIO | None = None) -> Model:
    """Compile a mesh into a model usable by the engine."""
    _log(stats, "Compiling model")
    mat_count = max((tri.material + 1 for tri in mesh.triangles), default=0)
    mat_count = max(mat_count, 0)
    vert = _VertexSet(mesh, cfg, stats)
    model = Model()
    dl_vertex_id: list[int] = []
    for material in range(mat_count):
        compiler = _Compiler(vert, mesh, material)
        dl = DisplayList(VERTEX_CACHE_SIZE, len(dl_vertex_id) * Vtx.SIZE)
        dl_vertex_id.extend(compiler.emit(dl, stats))
        dl.end()
        model.commands.append(list(dl.commands))
        model.vertexes.extend(dl.vertexes)
    if cfg.animate:
        _emit_animations(model, mesh, dl_vertex_id)
    return model