"""Axis orientation: a permutation and sign for three axes."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from .matrix import Matrix4

_AXIS_NAMES = "XYZ"
_AXIS_INDEX = {"x": 0, "y": 1, "z": 2, "X": 0, "Y": 1, "Z": 2}
_WHITE = " \t"


@dataclass(frozen=True)
class Axes:
    """Each output axis i takes input axis index[i], negated if negate[i]."""

    negate: tuple[bool, bool, bool] = (False, False, False)
    index: tuple[int, int, int] = (0, 1, 2)

    def apply(self, vec: Sequence[float]) -> tuple:
        """Reorder and negate the components of a 3-vector."""
        return tuple(-vec[i] if neg else vec[i] for neg, i in zip(self.negate, self.index))

    def to_matrix(self) -> Matrix4:
        """Return the matrix that performs apply() on points."""
        rows = []
        for neg, idx in zip(self.negate, self.index):
            row = [0.0, 0.0, 0.0, 0.0]
            row[idx] = -1.0 if neg else 1.0
            rows.append(tuple(row))
        rows.append((0.0, 0.0, 0.0, 1.0))
        return Matrix4(tuple(rows))

    def to_string(self) -> str:
        parts = []
        for neg, idx in zip(self.negate, self.index):
            if not 0 <= idx < 3:
                raise ValueError("invalid Axes")
            parts.append(("-" if neg else "") + _AXIS_NAMES[idx])
        return ",".join(parts)

    def __str__(self) -> str:
        return self.to_string()

    @classmethod
    def parse(cls, text: str) -> Axes:
        """Parse axes such as "x,y,z", "-y:x:z" or "Z X -Y"."""
        end = len(text)

        def skip_white(pos: int) -> int:
            while pos < end and text[pos] in _WHITE:
                pos += 1
            return pos

        pos = 0
        negate: list[bool] = []
        index: list[int] = []
        for i in range(3):
            pos = skip_white(pos)
            if i and pos < end and text[pos] in ":,":
                pos += 1
            pos = skip_white(pos)
            if pos == end:
                raise ValueError("not enough components")
            neg = text[pos] == "-"
            if neg:
                pos += 1
            pos = skip_white(pos)
            if pos == end:
                raise ValueError("bad axis")
            axis = _AXIS_INDEX.get(text[pos])
            if axis is None:
                raise ValueError("bad axis")
            pos += 1
            if axis in index:
                raise ValueError(f"duplicate axis: {_AXIS_NAMES[axis]}")
            negate.append(neg)
            index.append(axis)
        if skip_white(pos) != end:
            raise ValueError("extra data after axes")
        return cls(tuple(negate), tuple(index))  # type: ignore[arg-type]