"""Compiled models and their binary file layout."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field

from .config import Config
from .gbi import Gfx, Vtx
from .hashing import put_float32

MAGIC = b"Model"
MATERIAL_SLOT_COUNT = 4

_MAGIC_LEN = 16
_HEADER = struct.Struct(">11I")
_ANIMATION = struct.Struct(">3I")
_FRAME = struct.Struct(">3I")


def _align(x: int) -> int:
    return (x + 15) & ~15


def _f32(x: float) -> float:
    (value,) = struct.unpack("<f", struct.pack("<f", x))
    return value


@dataclass
class FrameVertex:
    """A vertex position in a frame of animation."""

    pos: tuple[int, int, int]
    pad: int = 0


@dataclass
class FrameData:
    """Vertex positions for one frame of animation."""

    positions: list[FrameVertex] = field(default_factory=list)


@dataclass
class AnimationFrame:
    """A frame of an animation: its time and the frame data it shows."""

    time: float
    index: int


@dataclass
class Animation:
    """An animation sequence."""

    duration: float
    frames: list[AnimationFrame] = field(default_factory=list)


@dataclass
class Model:
    """A compiled model: one display list per material, vertexes and animations."""

    commands: list[list[Gfx]] = field(default_factory=list)
    vertexes: list[Vtx] = field(default_factory=list)
    animations: list[Animation] = field(default_factory=list)
    frames: list[FrameData] = field(default_factory=list)

    def emit(self, cfg: Config | None = None) -> bytes:
        """Encode the model in the model file format."""
        vertex_count = len(self.vertexes)
        frame_size = vertex_count * Vtx.SIZE

        header_pos = _align(_MAGIC_LEN)
        base = header_pos + 16
        anim_pos = header_pos + _HEADER.size
        frame_pos = anim_pos + _ANIMATION.size * len(self.animations)
        frame_count = sum(len(anim.frames) for anim in self.animations)

        dl_pos = _align(frame_pos + _FRAME.size * frame_count)
        lists = [
            cmds if len(cmds) > 1 else []
            for cmds in self.commands[:MATERIAL_SLOT_COUNT]
        ]
        dl_offsets = [0] * MATERIAL_SLOT_COUNT
        dl_end = dl_pos
        for slot, cmds in enumerate(lists):
            if cmds:
                dl_offsets[slot] = dl_end - base
                dl_end += len(cmds) * Gfx.SIZE
        vertex_pos = _align(dl_end)
        fdata_pos = _align(vertex_pos + Vtx.SIZE * vertex_count)
        end_pos = _align(fdata_pos + frame_size * len(self.frames))

        data = bytearray(end_pos)
        data[: len(MAGIC)] = MAGIC
        _HEADER.pack_into(
            data,
            header_pos,
            base,
            fdata_pos - base,
            fdata_pos,
            end_pos - fdata_pos,
            vertex_pos - base,
            *dl_offsets,
            len(self.animations),
            frame_size,
        )

        for anim in self.animations:
            _ANIMATION.pack_into(
                data,
                anim_pos,
                put_float32(anim.duration),
                len(anim.frames),
                frame_pos - base,
            )
            anim_pos += _ANIMATION.size
            next_times = [frame.time for frame in anim.frames[1:]] + [anim.duration]
            for frame, next_time in zip(anim.frames, next_times):
                dt = _f32(_f32(next_time) - _f32(frame.time))
                inv_dt = 0.0 if dt < _f32(1.0e-3) else 1.0 / dt
                _FRAME.pack_into(
                    data,
                    frame_pos,
                    put_float32(frame.time),
                    put_float32(inv_dt),
                    frame_size * frame.index,
                )
                frame_pos += _FRAME.size

        dl_blob = b"".join(g.to_bytes() for cmds in lists for g in cmds)
        data[dl_pos : dl_pos + len(dl_blob)] = dl_blob

        vertex_blob = b"".join(v.to_bytes() for v in self.vertexes)
        data[vertex_pos : vertex_pos + len(vertex_blob)] = vertex_blob

        frame_chunks = []
        for fdata in self.frames:
            if len(fdata.positions) != vertex_count:
                raise ValueError("bad frame data size")
            frame_chunks.extend(
                Vtx(pos=fv.pos, texcoord=attr.texcoord, color=attr.color).to_bytes()
                for fv, attr in zip(fdata.positions, self.vertexes)
            )
        frame_blob = b"".join(frame_chunks)
        data[fdata_pos : fdata_pos + len(frame_blob)] = frame_blob

        return bytes(data)