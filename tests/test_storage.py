"""
tests/test_storage.py — Tests for the storage backends and helpers.

Tests cover:
- Key-value and blob get/set/delete
- Key listing and sizes
- Blob naming
- Fallback helpers
- Health and info reports
"""

import pytest
import os
import shutil
import tempfile

from storage import (
    BlobStore,
    KeyValueStore,
    StorageError,
    check_storage_health,
    create_store,
    forecast_key,
    garden_key,
    get_item,
    get_kv_path,
    get_storage_info,
    remove_item,
    set_item,
)


@pytest.fixture
def kv_store():
    """Key-value store in a temporary database."""
    db_fd, db_path = tempfile.mkstemp(suffix='.db')
    store = KeyValueStore(db_path)
    store.init()

    yield store

    os.close(db_fd)
    os.unlink(db_path)


@pytest.fixture
def blob_store():
    """Blob store in a temporary directory."""
    blob_dir = tempfile.mkdtemp()
    store = BlobStore(blob_dir)
    store.init()

    yield store

    shutil.rmtree(blob_dir, ignore_errors=True)


@pytest.fixture(params=['kv', 'blob'])
def store(request, kv_store, blob_store):
    return kv_store if request.param == 'kv' else blob_store


class BrokenStore:
    backend = 'broken'

    def get(self, key):
        raise StorageError('unavailable')

    def set(self, key, value):
        raise StorageError('unavailable')

    def delete(self, key):
        raise StorageError('unavailable')

    def keys(self, prefix=''):
        raise StorageError('unavailable')


# ========================================
# Backends
# ========================================

def test_keys_are_namespaced():
    assert garden_key('abc1234567') == 'garden:abc1234567'
    assert forecast_key('27707') == 'forecast:27707'


def test_get_missing(store):
    assert store.get(garden_key('missing-garden')) is None


def test_set_get_delete(store):
    key = garden_key('abcdefghij')
    store.set(key, {'beds': 4, 'name': 'Jardin été'})
    assert store.get(key) == {'beds': 4, 'name': 'Jardin été'}

    assert store.delete(key) is True
    assert store.get(key) is None
    assert store.delete(key) is False


def test_set_replaces(store):
    key = garden_key('abcdefghij')
    store.set(key, {'a': 1})
    store.set(key, {'b': 2})
    assert store.get(key) == {'b': 2}


def test_unserializable_value(store):
    with pytest.raises(StorageError):
        store.set(garden_key('abcdefghij'), {'bad': object()})


def test_kv_keys_by_prefix(kv_store):
    kv_store.set(garden_key('one-123456'), {})
    kv_store.set(garden_key('two-123456'), {})
    kv_store.set(forecast_key('27707'), {})
    kv_store.set('garden_lookalike', {})

    assert kv_store.keys('garden:') == ['garden:one-123456', 'garden:two-123456']
    assert len(kv_store.keys()) == 4
    assert kv_store.total_size() > 0


def test_blob_names():
    assert BlobStore.blob_name('garden:abc-123') == 'garden-abc-123.json'
    assert BlobStore.blob_name('garden:../../etc') == 'garden-..-..-etc.json'
    with pytest.raises(StorageError):
        BlobStore.blob_name('')


def test_blob_keys(blob_store):
    blob_store.set(garden_key('one-123456'), {})
    blob_store.set(forecast_key('27707'), {})
    assert blob_store.keys('garden:') == ['garden-one-123456']
    assert blob_store.total_size() > 0


def test_blob_corrupt_file(blob_store):
    with open(os.path.join(blob_store.blob_dir, 'garden-bad-123456.json'), 'w') as f:
        f.write('{not json')
    with pytest.raises(StorageError):
        blob_store.get(garden_key('bad-123456'))


def test_create_store():
    assert isinstance(create_store('kv', kv_path='x.db'), KeyValueStore)
    assert isinstance(create_store('blob', blob_dir='blobs'), BlobStore)
    with pytest.raises(ValueError):
        create_store('redis')


def test_kv_path_from_environment(monkeypatch):
    monkeypatch.setenv('GARDEN_KV_PATH', '/tmp/elsewhere.db')
    assert get_kv_path() == '/tmp/elsewhere.db'


# ========================================
# Fallback helpers
# ========================================

def test_helpers_round_trip(kv_store):
    assert get_item('settings', {'default': True}, store=kv_store) == {'default': True}
    assert set_item('settings', {'theme': 'dark'}, store=kv_store) is True
    assert get_item('settings', store=kv_store) == {'theme': 'dark'}
    assert remove_item('settings', store=kv_store) is True
    assert get_item('settings', store=kv_store) is None


def test_helpers_fall_back_on_error():
    broken = BrokenStore()
    assert get_item('anything', 'fallback', store=broken) == 'fallback'
    assert set_item('anything', {}, store=broken) is False
    assert remove_item('anything', store=broken) is False


# ========================================
# Health
# ========================================

def test_health_ok(kv_store):
    kv_store.set(garden_key('one-123456'), {})
    healthy, message = check_storage_health(kv_store)
    assert healthy is True
    assert '1 gardens' in message
    # the probe key is cleaned up
    assert kv_store.keys('__') == []


def test_health_broken():
    healthy, message = check_storage_health(BrokenStore())
    assert healthy is False
    assert 'unavailable' in message


def test_storage_info(blob_store):
    blob_store.set(garden_key('one-123456'), {'a': 1})
    info = get_storage_info(blob_store)
    assert info['backend'] == 'blob'
    assert info['available'] is True
    assert info['keys'] == ['garden-one-123456']
    assert info['totalSize'] > 0
