"""Vertex and display list command encoding for the graphics microcode."""

from __future__ import annotations

import enum
import struct
from collections.abc import Sequence
from dataclasses import dataclass
from typing import ClassVar

from .hashing import pack8x4

_VTX_STRUCT = struct.Struct(">3hH2h4B")
_GFX_STRUCT = struct.Struct(">II")

_G_VTX = 0x01
_G_MODIFYVTX = 0x02
_G_TRI1 = 0x05
_G_TRI2 = 0x06
_G_ENDDL = 0xDF
_G_SETPRIMCOLOR = 0xFA


def rsp_address(x: int) -> int:
    """Return the address of an object relative to the display list start."""
    return (1 << 24) | x


def _shift(value: int, shift: int, width: int) -> int:
    return (value & ((1 << width) - 1)) << shift


def _triangle(v: Sequence[int]) -> int:
    return _shift(v[0] * 2, 16, 8) | _shift(v[1] * 2, 8, 8) | _shift(v[2] * 2, 0, 8)


@dataclass
class Vtx:
    """Vertex data: position, texture coordinate and color (or normal)."""

    SIZE: ClassVar[int] = 16

    pos: tuple[int, int, int] = (0, 0, 0)
    pad: int = 0
    texcoord: tuple[int, int] = (0, 0)
    color: tuple[int, int, int, int] = (0, 0, 0, 0)

    def __post_init__(self) -> None:
        self.pos = tuple(self.pos)  # type: ignore[assignment]
        self.texcoord = tuple(self.texcoord)  # type: ignore[assignment]
        self.color = tuple(self.color)  # type: ignore[assignment]

    def to_bytes(self) -> bytes:
        """Encode as 16 big-endian bytes; the padding is always zero."""
        return _VTX_STRUCT.pack(*self.pos, 0, *self.texcoord, *self.color)


class VertexField(enum.IntEnum):
    """Offsets of fields within a vertex cache entry."""

    RGBA = 16
    ST = 20
    XY = 24
    Z = 28


@dataclass(frozen=True)
class Gfx:
    """A microcode command made of two 32-bit words."""

    SIZE: ClassVar[int] = 8

    hi: int
    lo: int

    def to_bytes(self) -> bytes:
        """Encode as 8 big-endian bytes."""
        return _GFX_STRUCT.pack(self.hi & 0xFFFFFFFF, self.lo & 0xFFFFFFFF)

    @staticmethod
    def sp_vertex(v: int, n: int, v0: int) -> Gfx:
        """Load n vertexes from address v into cache slots starting at v0."""
        return Gfx(
            _shift(_G_VTX, 24, 8) | _shift(n, 12, 8) | _shift(v0 + n, 1, 7),
            v & 0xFFFFFFFF,
        )

    @staticmethod
    def sp_modify_vertex(vertex: int, field: VertexField, value: int) -> Gfx:
        """Overwrite one field of a cached vertex."""
        return Gfx(
            _shift(_G_MODIFYVTX, 24, 8) | _shift(int(field), 16, 8) | _shift(vertex * 2, 0, 16),
            value & 0xFFFFFFFF,
        )

    @staticmethod
    def sp1_triangle(v1: Sequence[int]) -> Gfx:
        """Draw one triangle by cache slot."""
        return Gfx(_shift(_G_TRI1, 24, 8) | _triangle(v1), 0)

    @staticmethod
    def sp2_triangle(v1: Sequence[int], v2: Sequence[int]) -> Gfx:
        """Draw two triangles by cache slot."""
        return Gfx(_shift(_G_TRI2, 24, 8) | _triangle(v1), _triangle(v2))

    @staticmethod
    def sp_end_display_list() -> Gfx:
        """End the display list."""
        return Gfx(_shift(_G_ENDDL, 24, 8), 0)

    @staticmethod
    def dp_set_prim_color(m: int, l: int, rgba: Sequence[int]) -> Gfx:  # noqa: E741
        """Set the primitive color."""
        return Gfx(
            _shift(_G_SETPRIMCOLOR, 24, 8) | _shift(m, 8, 8) | _shift(l, 0, 8),
            pack8x4(*rgba),
        )