"""
Local persistence infrastructure.
"""

from .storage import KeyValueStore, InMemoryStore, JsonFileStore

__all__ = [
    'KeyValueStore',
    'InMemoryStore',
    'JsonFileStore'
]
