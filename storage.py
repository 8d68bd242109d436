"""
storage.py — Key-value and blob persistence for garden configurations.

Two interchangeable backends, both storing JSON documents:
- KeyValueStore: a single SQLite table (key → JSON text), WAL mode
- BlobStore: one JSON file per key in a directory (e.g. garden-<id>.json)

Backends raise StorageError on failure. The module-level helpers
(get_item, set_item, remove_item) swallow those errors and fall back to a
default, for callers that prefer a degraded answer over a failure.

The active backend is chosen by app.config['STORAGE_BACKEND'] ('kv' or 'blob').
"""

import json
import logging
import os
import re
import sqlite3
import tempfile
from typing import Any, Dict, List, Optional, Tuple

from flask import current_app, has_app_context

logger = logging.getLogger(__name__)

BASE_DIR = os.path.dirname(os.path.abspath(__file__))

STORAGE_BACKENDS = ('kv', 'blob')


class StorageError(Exception):
    """Raised when the underlying store cannot be read or written."""


def garden_key(garden_id: str) -> str:
    """Storage key for a garden record."""
    return f'garden:{garden_id}'


def forecast_key(zip_code: str) -> str:
    """Storage key for a cached garden forecast."""
    return f'forecast:{zip_code}'


def get_kv_path() -> str:
    """Get the key-value database path from environment or default."""
    default_path = os.path.join(BASE_DIR, 'data', 'garden_store.db')
    return os.environ.get('GARDEN_KV_PATH', default_path)


def get_blob_dir() -> str:
    """Get the blob directory from environment or default."""
    default_dir = os.path.join(BASE_DIR, 'data', 'blobs')
    return os.environ.get('GARDEN_BLOB_DIR', default_dir)


# ========================================
# Key-value backend (SQLite)
# ========================================

class KeyValueStore:
    """JSON values in a SQLite table keyed by string."""

    backend = 'kv'

    def __init__(self, db_path: str):
        self.db_path = db_path

    def _connect(self) -> sqlite3.Connection:
        directory = os.path.dirname(self.db_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        conn = sqlite3.connect(self.db_path)
        conn.execute("PRAGMA journal_mode=WAL")
        conn.row_factory = sqlite3.Row
        return conn

    def init(self):
        """Create the table if it doesn't exist. Idempotent."""
        try:
            conn = self._connect()
        except (sqlite3.Error, OSError) as e:
            raise StorageError(f"Cannot open key-value store: {e}") from e
        try:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS kv_store (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)
            conn.commit()
        except sqlite3.Error as e:
            raise StorageError(f"Cannot initialize key-value store: {e}") from e
        finally:
            conn.close()

    def _execute(self, sql, params=(), fetch=None, commit=False):
        try:
            conn = self._connect()
        except (sqlite3.Error, OSError) as e:
            raise StorageError(f"Cannot open key-value store: {e}") from e
        try:
            cursor = conn.execute(sql, params)
            if fetch == 'one':
                result = cursor.fetchone()
            elif fetch == 'all':
                result = cursor.fetchall()
            else:
                result = cursor.rowcount
            if commit:
                conn.commit()
            return result
        except sqlite3.Error as e:
            raise StorageError(f"Key-value store error: {e}") from e
        finally:
            conn.close()

    def get(self, key: str) -> Optional[Any]:
        """Return the decoded value for `key`, or None if absent."""
        row = self._execute("SELECT value FROM kv_store WHERE key = ?", (key,), fetch='one')
        if row is None:
            return None
        try:
            return json.loads(row['value'])
        except ValueError as e:
            raise StorageError(f"Corrupt value for key {key!r}: {e}") from e

    def set(self, key: str, value: Any):
        """Insert or replace `key` with the JSON encoding of `value`."""
        try:
            encoded = json.dumps(value, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise StorageError(f"Value for key {key!r} is not JSON serializable: {e}") from e
        self._execute(
            """INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, CURRENT_TIMESTAMP)
               ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = CURRENT_TIMESTAMP""",
            (key, encoded),
            commit=True,
        )

    def delete(self, key: str) -> bool:
        """Remove `key`. Returns True if something was deleted."""
        return self._execute("DELETE FROM kv_store WHERE key = ?", (key,), commit=True) > 0

    def keys(self, prefix: str = '') -> List[str]:
        rows = self._execute(
            "SELECT key FROM kv_store WHERE substr(key, 1, length(?)) = ? ORDER BY key",
            (prefix, prefix),
            fetch='all',
        )
        return [row['key'] for row in rows]

    def total_size(self) -> int:
        row = self._execute("SELECT COALESCE(SUM(LENGTH(value)), 0) AS size FROM kv_store", fetch='one')
        return row['size']


# ========================================
# Blob backend (one JSON file per key)
# ========================================

class BlobStore:
    """JSON documents as individual files: key 'garden:<id>' → 'garden-<id>.json'."""

    backend = 'blob'

    def __init__(self, blob_dir: str):
        self.blob_dir = blob_dir

    @staticmethod
    def blob_name(key: str) -> str:
        """File name for a key. Anything outside [A-Za-z0-9_.-] becomes '-'."""
        safe = re.sub(r'[^A-Za-z0-9_.-]', '-', key).lstrip('.')
        if not safe:
            raise StorageError(f"Invalid blob key: {key!r}")
        return f'{safe}.json'

    def _path(self, key: str) -> str:
        return os.path.join(self.blob_dir, self.blob_name(key))

    def init(self):
        try:
            os.makedirs(self.blob_dir, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Cannot create blob directory: {e}") from e

    def get(self, key: str) -> Optional[Any]:
        path = self._path(key)
        try:
            with open(path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except FileNotFoundError:
            return None
        except ValueError as e:
            raise StorageError(f"Corrupt blob {os.path.basename(path)}: {e}") from e
        except OSError as e:
            raise StorageError(f"Cannot read blob {os.path.basename(path)}: {e}") from e

    def set(self, key: str, value: Any):
        """Write atomically: temp file in the same directory, then rename."""
        self.init()
        path = self._path(key)
        try:
            encoded = json.dumps(value, ensure_ascii=False, indent=2)
        except (TypeError, ValueError) as e:
            raise StorageError(f"Value for key {key!r} is not JSON serializable: {e}") from e

        try:
            fd, tmp_path = tempfile.mkstemp(dir=self.blob_dir, suffix='.tmp')
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                f.write(encoded)
            os.replace(tmp_path, path)
        except OSError as e:
            raise StorageError(f"Cannot write blob {os.path.basename(path)}: {e}") from e

    def delete(self, key: str) -> bool:
        try:
            os.remove(self._path(key))
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StorageError(f"Cannot delete blob for {key!r}: {e}") from e

    def _blob_files(self) -> List[str]:
        try:
            return sorted(f for f in os.listdir(self.blob_dir) if f.endswith('.json'))
        except FileNotFoundError:
            return []
        except OSError as e:
            raise StorageError(f"Cannot list blob directory: {e}") from e

    def keys(self, prefix: str = '') -> List[str]:
        """Blob names (without .json, so 'garden-<id>') starting with the blob form of `prefix`."""
        name_prefix = self.blob_name(prefix)[:-len('.json')] if prefix else ''
        return [f[:-len('.json')] for f in self._blob_files() if f.startswith(name_prefix)]

    def total_size(self) -> int:
        try:
            return sum(os.path.getsize(os.path.join(self.blob_dir, f)) for f in self._blob_files())
        except OSError as e:
            raise StorageError(f"Cannot stat blob directory: {e}") from e


# ========================================
# Store selection
# ========================================

def create_store(backend: str = 'kv', kv_path: Optional[str] = None, blob_dir: Optional[str] = None):
    """Build a backend instance. Raises ValueError on an unknown backend name."""
    if backend == 'kv':
        return KeyValueStore(kv_path or get_kv_path())
    if backend == 'blob':
        return BlobStore(blob_dir or get_blob_dir())
    raise ValueError(f"Unsupported storage backend: {backend}")


def get_store():
    """
    Get the store for the current app, built once from app.config.

    Outside an application context, falls back to the key-value store at the
    environment-configured path.
    """
    if not has_app_context():
        return KeyValueStore(get_kv_path())

    store = current_app.extensions.get('garden_store')
    if store is None:
        store = create_store(
            current_app.config.get('STORAGE_BACKEND', 'kv'),
            kv_path=current_app.config.get('KV_DATABASE'),
            blob_dir=current_app.config.get('BLOB_DIR'),
        )
        current_app.extensions['garden_store'] = store
    return store


def init_storage():
    """Prepare the active backend (table or directory). Idempotent."""
    get_store().init()


# ========================================
# Fallback helpers
# ========================================

def get_item(key: str, default: Any = None, store=None) -> Any:
    """Get a decoded value, or `default` when absent or unreadable."""
    store = store or get_store()
    try:
        value = store.get(key)
    except StorageError as e:
        logger.warning("Failed to get storage item %r: %s", key, e)
        return default
    return default if value is None else value


def set_item(key: str, value: Any, store=None) -> bool:
    """Store a value. Returns True on success, False otherwise."""
    store = store or get_store()
    try:
        store.set(key, value)
        return True
    except StorageError as e:
        logger.warning("Failed to set storage item %r: %s", key, e)
        return False


def remove_item(key: str, store=None) -> bool:
    """Remove a value. Returns True unless the store failed."""
    store = store or get_store()
    try:
        store.delete(key)
        return True
    except StorageError as e:
        logger.warning("Failed to remove storage item %r: %s", key, e)
        return False


def check_storage_health(store=None) -> Tuple[bool, str]:
    """
    Check if the store is reachable and writable.

    Returns:
        Tuple of (is_healthy, message)
    """
    store = store or get_store()
    probe_key = '__storage_probe__'
    try:
        store.set(probe_key, {'probe': True})
        store.delete(probe_key)
        count = len(store.keys('garden:'))
        return True, f"Storage OK ({store.backend}, {count} gardens)"
    except StorageError as e:
        return False, f"Storage error: {e}"


def get_storage_info(store=None) -> Dict[str, Any]:
    """Backend name, availability, stored garden keys and total payload size in bytes."""
    store = store or get_store()
    healthy, message = check_storage_health(store)
    info = {
        'backend': store.backend,
        'available': healthy,
        'message': message,
        'keys': [],
        'totalSize': 0,
    }
    if healthy:
        try:
            info['keys'] = store.keys('garden:')
            info['totalSize'] = store.total_size()
        except StorageError as e:
            logger.warning("Failed to collect storage info: %s", e)
    return info
