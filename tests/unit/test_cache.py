import json
import threading

from selpath.core.cache import CompiledCache


def test_get_or_compile_calls_factory_once(mocker):
    cache = CompiledCache()
    factory = mocker.Mock(return_value='//a')

    assert cache.get_or_compile('k', factory) == '//a'
    assert cache.get_or_compile('k', factory) == '//a'

    factory.assert_called_once()
    assert cache.stats == {'hits': 1, 'misses': 1, 'size': 1}


def test_put_get_and_snapshot():
    cache = CompiledCache()
    assert cache.get('k') is None
    assert not cache.is_initialized()

    cache.put('k', '//p')
    snapshot = cache.get_all()
    snapshot['other'] = '//x'

    assert cache.get('k') == '//p'
    assert 'other' not in cache
    assert len(cache) == 1
    assert cache.is_initialized()


def test_replace_all_and_clear():
    cache = CompiledCache({'a': '//a'})
    cache.replace_all({'b': '//b'})
    assert cache.get_all() == {'b': '//b'}

    cache.clear()
    assert cache.get_all() == {}
    assert cache.is_initialized()

    cache.reset()
    assert not cache.is_initialized()


def test_failed_factory_stores_nothing():
    cache = CompiledCache()

    def explode():
        raise ValueError('boom')

    try:
        cache.get_or_compile('k', explode)
    except ValueError:
        pass
    assert 'k' not in cache


def test_save_and_load(tmp_path):
    path = tmp_path / 'nested' / 'cache.json'
    cache = CompiledCache({'k1': '//a', 'k2': '//b[1]'})
    cache.save(str(path))

    assert json.loads(path.read_text(encoding='utf-8')) == {'k1': '//a', 'k2': '//b[1]'}

    restored = CompiledCache()
    assert restored.load(str(path)) is True
    assert restored.get_all() == cache.get_all()


def test_load_missing_or_invalid_file(tmp_path):
    cache = CompiledCache()
    assert cache.load(str(tmp_path / 'missing.json')) is False

    bad = tmp_path / 'bad.json'
    bad.write_text('{not json', encoding='utf-8')
    assert cache.load(str(bad)) is False

    wrong_shape = tmp_path / 'list.json'
    wrong_shape.write_text('["//a"]', encoding='utf-8')
    assert cache.load(str(wrong_shape)) is False
    assert cache.get_all() == {}


def test_concurrent_get_or_compile_compiles_once():
    cache = CompiledCache()
    calls = []
    barrier = threading.Barrier(8)

    def factory():
        calls.append(1)
        return '//div'

    def worker():
        barrier.wait()
        cache.get_or_compile('k', factory)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(calls) == 1
    assert cache.stats['hits'] == 7
