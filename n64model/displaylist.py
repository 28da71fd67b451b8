"""Display list builder that merges triangles into paired commands."""

from __future__ import annotations

import dataclasses
from collections.abc import Sequence

from .gbi import Gfx, VertexField, Vtx, rsp_address
from .hashing import pack8x4, pack16x2
from .vertexcache import VertexCache

VERTEX_CACHE_SIZE = 32
"""Number of entries in the vertex cache."""


class DisplayList:
    """Builds a list of commands and the vertex data they load."""

    def __init__(self, cache_size: int, vertex_offset: int) -> None:
        self._cache = VertexCache(cache_size)
        self._vertex_offset = vertex_offset
        self._commands: list[Gfx] = []
        self._vertexes: list[Vtx] = []
        # The triangle in the last command, while it is a single triangle.
        self._tri1: tuple[int, int, int] | None = None

    @property
    def cache(self) -> VertexCache:
        return self._cache

    @property
    def commands(self) -> list[Gfx]:
        return self._commands

    @property
    def vertexes(self) -> list[Vtx]:
        return self._vertexes

    @property
    def vertex_cache_size(self) -> int:
        return len(self._cache)

    def triangle(self, tri: Sequence[int]) -> None:
        """Draw a triangle given by cache slots; degenerate ones are skipped."""
        tri = tuple(tri)
        for i, idx in enumerate(tri):
            if self._cache.get(idx) is None:
                raise RuntimeError("DisplayList.triangle: vertex not loaded")
            if idx in tri[:i]:
                return
        if self._tri1 is not None:
            self._commands[-1] = Gfx.sp2_triangle(self._tri1, tri)
            self._tri1 = None
        else:
            self._commands.append(Gfx.sp1_triangle(tri))
            self._tri1 = tri  # type: ignore[assignment]

    def vertex(self, offset: int, vertexes: Sequence[Vtx]) -> None:
        """Load vertexes into the cache starting at slot offset."""
        start, end = offset, offset + len(vertexes)
        if not 0 <= start <= end <= len(self._cache):
            raise ValueError("DisplayList.vertex: bad range")
        if start == end:
            return
        address = rsp_address(self._vertex_offset + len(self._vertexes) * Vtx.SIZE)
        self._commands.append(Gfx.sp_vertex(address, end - start, start))
        for slot, v in enumerate(vertexes, start):
            self._cache.set(slot, v)
            self._vertexes.append(dataclasses.replace(v))
        if self._tri1 is not None:
            if any(start <= idx < end for idx in self._tri1):
                self._tri1 = None
            else:
                # Load before the pending triangle so it can still be paired.
                self._commands[-2], self._commands[-1] = self._commands[-1], self._commands[-2]

    def _cached(self, vertex: int) -> Vtx:
        vtx = self._cache.get(vertex)
        if vtx is None:
            raise RuntimeError("cannot modify vertex, not in cache")
        return vtx

    def set_vertex_color(self, vertex: int, value: Sequence[int]) -> None:
        """Change the color of a cached vertex, if it differs."""
        vtx = self._cached(vertex)
        value = tuple(value)
        if vtx.color != value:
            vtx.color = value  # type: ignore[assignment]
            self._flush_vertex(vertex)
            self._commands.append(
                Gfx.sp_modify_vertex(vertex, VertexField.RGBA, pack8x4(*value))
            )

    def set_vertex_texcoord(self, vertex: int, value: Sequence[int]) -> None:
        """Change the texture coordinate of a cached vertex, if it differs."""
        vtx = self._cached(vertex)
        value = tuple(value)
        if vtx.texcoord != value:
            vtx.texcoord = value  # type: ignore[assignment]
            self._flush_vertex(vertex)
            # The RSP scales modified texture coordinates by two.
            self._commands.append(
                Gfx.sp_modify_vertex(vertex, VertexField.ST, pack16x2(value[0] >> 1, value[1] >> 1))
            )

    def _flush_vertex(self, vertex: int) -> None:
        if self._tri1 is not None and vertex in self._tri1:
            self._tri1 = None

    def end(self) -> None:
        """End the display list."""
        self._commands.append(Gfx.sp_end_display_list())
        self._tri1 = None
        self._cache.clear()