"""A model of the state of the vertex cache."""

from __future__ import annotations

import dataclasses
from collections.abc import Sequence

from .gbi import Vtx


class VertexCache:
    """Fixed-size cache of vertexes, searchable by position."""

    def __init__(self, size: int) -> None:
        self._entries: list[Vtx | None] = [None] * size
        self._pos: dict[tuple[int, ...], int] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def _check(self, slot: int, what: str) -> None:
        if not 0 <= slot < len(self._entries):
            raise IndexError(f"VertexCache.{what}: out of range")

    def get(self, slot: int) -> Vtx | None:
        """Return the vertex in a slot, or None if the slot is empty."""
        self._check(slot, "get")
        return self._entries[slot]

    def cache_pos(self, pos: Sequence[int]) -> int | None:
        """Return the slot holding a vertex at pos, or None."""
        return self._pos.get(tuple(pos))

    def erase(self, slot: int) -> None:
        """Empty the given slot."""
        self._check(slot, "erase")
        self._erase_entry(slot)

    def clear(self) -> None:
        """Empty every slot."""
        self._entries = [None] * len(self._entries)
        self._pos.clear()

    def set(self, slot: int, vertex: Vtx) -> None:
        """Store a copy of vertex in the given slot."""
        self._check(slot, "set")
        self._erase_entry(slot)
        stored = dataclasses.replace(vertex)
        self._pos[tuple(stored.pos)] = slot
        self._entries[slot] = stored

    def _erase_entry(self, slot: int) -> None:
        entry = self._entries[slot]
        if entry is None:
            return
        key = tuple(entry.pos)
        if self._pos.get(key) == slot:
            del self._pos[key]
        self._entries[slot] = None