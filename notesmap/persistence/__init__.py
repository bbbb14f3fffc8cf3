"""
Persistence Module
==================

- ttl.py:     24-hour expiry window
- codec.py:   JSON export and validated import
- storage.py: memory / JSON file / SQLite backends
- manager.py: hydrate, debounced save and expiry sweep
  (import it directly: notesmap.persistence.manager)
"""

from notesmap.persistence.codec import ImportResult, export_text, import_text
from notesmap.persistence.storage import StorageUnavailable, create_storage
from notesmap.persistence.ttl import is_expired, refresh_ttl

__all__ = [
    'ImportResult',
    'export_text',
    'import_text',
    'StorageUnavailable',
    'create_storage',
    'is_expired',
    'refresh_ttl',
]
