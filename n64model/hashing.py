"""Murmur3 hashing and bit packing helpers."""

from __future__ import annotations

import struct

_MASK32 = 0xFFFFFFFF


def _rotl32(value: int, shift: int) -> int:
    return ((value << shift) | (value >> (32 - shift))) & _MASK32


class Murmur3:
    """Incremental 32-bit Murmur3 hash over 32-bit words."""

    def __init__(self, seed: int = 0) -> None:
        self.state = seed & _MASK32
        self.length = 0

    def update(self, data: int) -> None:
        """Mix one 32-bit word into the hash; negative values wrap."""
        k = (data & _MASK32) * 0xCC9E2D51 & _MASK32
        k = _rotl32(k, 15)
        k = k * 0x1B873593 & _MASK32
        state = self.state ^ k
        state = _rotl32(state, 13)
        self.state = (state * 5 + 0xE6546B64) & _MASK32
        self.length = (self.length + 4) & _MASK32

    def hash(self) -> int:
        """Return the finalized hash without changing the state."""
        h = self.state ^ self.length
        h ^= h >> 16
        h = h * 0x85EBCA6B & _MASK32
        h ^= h >> 13
        h = h * 0xC2B2AE35 & _MASK32
        h ^= h >> 16
        return h


def pack16x2(hi: int, lo: int) -> int:
    """Pack two 16-bit values into one 32-bit word, high half first."""
    return ((hi & 0xFFFF) << 16) | (lo & 0xFFFF)


def pack8x4(a: int, b: int, c: int, d: int) -> int:
    """Pack four bytes into one 32-bit word, most significant first."""
    return ((a & 0xFF) << 24) | ((b & 0xFF) << 16) | ((c & 0xFF) << 8) | (d & 0xFF)


def put_float32(x: float) -> int:
    """Return the IEEE single-precision bit pattern of x."""
    (bits,) = struct.unpack("<I", struct.pack("<f", x))
    return bits