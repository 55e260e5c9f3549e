from __future__ import annotations

import json
from pathlib import Path

import pytest

from cache.cache_backend import CacheBackend, repository_key


@pytest.mark.unit
def test_repository_key_is_md5_of_path() -> None:
    assert repository_key('/srv/repo') == repository_key('/srv/repo')
    assert repository_key('/srv/repo') != repository_key('/srv/other')
    assert len(repository_key('/srv/repo')) == 32


@pytest.mark.unit
def test_load_missing_returns_none(tmp_path: Path) -> None:
    assert CacheBackend(str(tmp_path)).load('nope') is None


@pytest.mark.unit
def test_save_then_load_and_overwrite(tmp_path: Path) -> None:
    cache = CacheBackend(str(tmp_path))
    cache.save('k', {'1.0.0..1.1.0': [{'title': 'Add x'}]})
    cache.save('k', {'1.1.0..1.2.0': []})
    assert cache.load('k') == {'1.1.0..1.2.0': []}
    # no temp files left behind
    assert sorted(p.name for p in tmp_path.iterdir()) == ['k']


@pytest.mark.unit
def test_non_atomic_save(tmp_path: Path, monkeypatch) -> None:
    cache = CacheBackend(str(tmp_path))
    cache.atomic = False
    cache.save('k', {'a..b': []})
    assert json.loads((tmp_path / 'k').read_text()) == {'a..b': []}


@pytest.mark.unit
@pytest.mark.parametrize('content', ['{not json', '[1, 2, 3]', '"text"'])
def test_corrupt_cache_is_a_miss(tmp_path: Path, content: str) -> None:
    (tmp_path / 'k').write_text(content)
    assert CacheBackend(str(tmp_path)).load('k') is None


@pytest.mark.unit
def test_invalidate_removes_file(tmp_path: Path) -> None:
    cache = CacheBackend(str(tmp_path))
    cache.save('k', {})
    cache.invalidate('k')
    assert cache.load('k') is None
    cache.invalidate('k')


@pytest.mark.unit
def test_failed_atomic_write_leaves_no_temp_file(tmp_path: Path, monkeypatch) -> None:
    import cache.cache_backend as mod

    cache = CacheBackend(str(tmp_path), atomic=True)
    cache.save('k', {'a..b': []})

    def failing_fsync(fd):
        raise OSError('disk full')

    monkeypatch.setattr(mod.os, 'fsync', failing_fsync)
    with pytest.raises(OSError):
        cache.save('k', {'c..d': []})
    assert sorted(p.name for p in tmp_path.iterdir()) == ['k']
    assert cache.load('k') == {'a..b': []}


@pytest.mark.unit
def test_defaults_come_from_cache_config(monkeypatch, tmp_path: Path) -> None:
    from configs.config import Config

    monkeypatch.setattr(Config, 'CACHE_ROOT', str(tmp_path / 'root'))
    monkeypatch.setattr(Config, 'CACHE_ATOMIC_WRITES', False)
    cache = CacheBackend()
    assert cache.root_dir == str(tmp_path / 'root')
    assert cache.atomic is False
