from pathlib import Path

import pytest

from apinav.repo.scanner import read_text_file
from apinav.store.content_cache import ContentCache


def make_files(tmp_path: Path, *names: str) -> list[str]:
    out = []
    for name in names:
        p = tmp_path / name
        p.write_text(f"content of {name}\n", encoding="utf-8")
        out.append(str(p))
    return out


def test_fifo_eviction(tmp_path: Path):
    a, b, c = make_files(tmp_path, "a.txt", "b.txt", "c.txt")
    cache = ContentCache(max_size=2)

    cache.read(a)
    cache.read(b)
    cache.read(c)

    assert len(cache) == 2
    assert cache.keys() == [b, c]
    assert a not in cache


def test_reading_cached_path_keeps_its_slot(tmp_path: Path):
    a, b, c = make_files(tmp_path, "a.txt", "b.txt", "c.txt")
    cache = ContentCache(max_size=2)

    cache.read(a)
    cache.read(b)
    cache.read(a)  # hit, no reordering
    cache.read(c)

    assert cache.keys() == [b, c]


def test_put_existing_key_does_not_evict():
    cache = ContentCache(max_size=2)
    cache.put("x", "1")
    cache.put("y", "2")
    cache.put("x", "3")
    assert cache.keys() == ["x", "y"]


def test_unchanged_file_is_read_once(tmp_path: Path):
    (a,) = make_files(tmp_path, "a.txt")
    calls: list[str] = []

    def reader(path: str) -> str:
        calls.append(path)
        return read_text_file(path)

    cache = ContentCache(max_size=4, reader=reader)
    assert cache.read(a) == "content of a.txt\n"
    assert cache.read(a) == "content of a.txt\n"
    assert calls == [a]


def test_changed_file_is_reread(tmp_path: Path):
    (a,) = make_files(tmp_path, "a.txt")
    cache = ContentCache()

    assert cache.read(a) == "content of a.txt\n"
    Path(a).write_text("something longer than before\n", encoding="utf-8")
    assert cache.read(a) == "something longer than before\n"
    assert len(cache) == 1


def test_missing_file_raises(tmp_path: Path):
    cache = ContentCache()
    with pytest.raises(OSError):
        cache.read(str(tmp_path / "nope.txt"))
    assert len(cache) == 0


def test_evict_oldest_and_clear():
    cache = ContentCache(max_size=3)
    assert cache.evict_oldest() is None

    cache.put("x", "1")
    cache.put("y", "2")
    assert cache.evict_oldest() == "x"
    assert cache.keys() == ["y"]

    cache.clear()
    assert len(cache) == 0


def test_capacity_must_be_positive():
    with pytest.raises(ValueError):
        ContentCache(max_size=0)
