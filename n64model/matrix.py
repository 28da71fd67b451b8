"""4x4 affine matrices and quaternions for scene transforms."""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass

Vector3 = tuple[float, float, float]

_IDENTITY = (
    (1.0, 0.0, 0.0, 0.0),
    (0.0, 1.0, 0.0, 0.0),
    (0.0, 0.0, 1.0, 0.0),
    (0.0, 0.0, 0.0, 1.0),
)


@dataclass(frozen=True)
class Quaternion:
    """A rotation quaternion; the default is no rotation."""

    w: float = 1.0
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def interpolate(self, other: Quaternion, frac: float) -> Quaternion:
        """Spherical interpolation towards other, along the shorter arc."""
        cosom = self.x * other.x + self.y * other.y + self.z * other.z + self.w * other.w
        end = other
        if cosom < 0.0:
            cosom = -cosom
            end = Quaternion(-other.w, -other.x, -other.y, -other.z)
        if 1.0 - cosom > 0.0001:
            omega = math.acos(min(cosom, 1.0))
            sinom = math.sin(omega)
            sclp = math.sin((1.0 - frac) * omega) / sinom
            sclq = math.sin(frac * omega) / sinom
        else:
            sclp = 1.0 - frac
            sclq = frac
        return Quaternion(
            sclp * self.w + sclq * end.w,
            sclp * self.x + sclq * end.x,
            sclp * self.y + sclq * end.y,
            sclp * self.z + sclq * end.z,
        )

    def _rotation(self) -> tuple[Vector3, Vector3, Vector3]:
        w, x, y, z = self.w, self.x, self.y, self.z
        return (
            (1.0 - 2.0 * (y * y + z * z), 2.0 * (x * y - z * w), 2.0 * (x * z + y * w)),
            (2.0 * (x * y + z * w), 1.0 - 2.0 * (x * x + z * z), 2.0 * (y * z - x * w)),
            (2.0 * (x * z - y * w), 2.0 * (y * z + x * w), 1.0 - 2.0 * (x * x + y * y)),
        )


@dataclass(frozen=True)
class Matrix4:
    """A row-major 4x4 matrix acting on column vectors."""

    rows: tuple[tuple[float, float, float, float], ...] = _IDENTITY

    def __post_init__(self) -> None:
        rows = tuple(tuple(float(v) for v in row) for row in self.rows)
        if len(rows) != 4 or any(len(row) != 4 for row in rows):
            raise ValueError("matrix must be 4x4")
        object.__setattr__(self, "rows", rows)

    @classmethod
    def identity(cls) -> Matrix4:
        return cls(_IDENTITY)

    @classmethod
    def from_srt(cls, scaling: Sequence[float], rotation: Quaternion, position: Sequence[float]) -> Matrix4:
        """Build the matrix that scales, then rotates, then translates."""
        rot = rotation._rotation()
        rows = [
            tuple(rot[i][j] * scaling[j] for j in range(3)) + (position[i],)
            for i in range(3)
        ]
        rows.append((0.0, 0.0, 0.0, 1.0))
        return cls(tuple(rows))

    def scaled(self, factor: float) -> Matrix4:
        """Return the matrix with every element multiplied by factor."""
        return Matrix4(tuple(tuple(v * factor for v in row) for row in self.rows))

    def transform(self, vec: Sequence[float]) -> Vector3:
        """Apply the matrix to a point, ignoring the projective row."""
        x, y, z = vec
        return tuple(r[0] * x + r[1] * y + r[2] * z + r[3] for r in self.rows[:3])  # type: ignore[return-value]

    def __matmul__(self, other: Matrix4) -> Matrix4:
        if not isinstance(other, Matrix4):
            return NotImplemented
        columns = list(zip(*other.rows))
        return Matrix4(
            tuple(
                tuple(sum(a * b for a, b in zip(row, col)) for col in columns)
                for row in self.rows
            )
        )

    def __getitem__(self, index: int) -> tuple[float, float, float, float]:
        return self.rows[index]