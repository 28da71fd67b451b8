import pytest

from n64model.gbi import Vtx
from n64model.vertexcache import VertexCache


def test_new_cache_is_empty():
    cache = VertexCache(4)
    assert len(cache) == 4
    assert all(cache.get(i) is None for i in range(4))
    assert cache.cache_pos((0, 0, 0)) is None


def test_set_and_find():
    cache = VertexCache(4)
    v = Vtx(pos=(1, 2, 3), color=(1, 1, 1, 1))
    cache.set(2, v)
    assert cache.get(2) == v
    assert cache.cache_pos((1, 2, 3)) == 2


def test_set_stores_copy():
    cache = VertexCache(2)
    v = Vtx(pos=(1, 2, 3))
    cache.set(0, v)
    v.color = (9, 9, 9, 9)
    assert cache.get(0).color == (0, 0, 0, 0)


def test_overwrite_removes_old_position():
    cache = VertexCache(2)
    cache.set(0, Vtx(pos=(1, 1, 1)))
    cache.set(0, Vtx(pos=(2, 2, 2)))
    assert cache.cache_pos((1, 1, 1)) is None
    assert cache.cache_pos((2, 2, 2)) == 0


def test_duplicate_position_tracks_latest_slot():
    cache = VertexCache(3)
    cache.set(0, Vtx(pos=(5, 5, 5)))
    cache.set(1, Vtx(pos=(5, 5, 5)))
    assert cache.cache_pos((5, 5, 5)) == 1
    cache.erase(0)
    assert cache.cache_pos((5, 5, 5)) == 1
    assert cache.get(0) is None
    cache.erase(1)
    assert cache.cache_pos((5, 5, 5)) is None


def test_clear():
    cache = VertexCache(2)
    cache.set(0, Vtx(pos=(1, 2, 3)))
    cache.set(1, Vtx(pos=(4, 5, 6)))
    cache.clear()
    assert cache.get(0) is None and cache.get(1) is None
    assert cache.cache_pos((4, 5, 6)) is None


@pytest.mark.parametrize("slot", [-1, 2])
def test_out_of_range(slot):
    cache = VertexCache(2)
    with pytest.raises(IndexError):
        cache.get(slot)
    with pytest.raises(IndexError):
        cache.set(slot, Vtx())
    with pytest.raises(IndexError):
        cache.erase(slot)