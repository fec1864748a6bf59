# src/flowengine/persistence/__init__.py
"""Persistência de resultados por split e snapshots de hand-off."""

from .result_store import FileResultStore, InMemoryResultStore, ResultStore
from .snapshot_store import SnapshotStore, load_snapshot

__all__ = ["ResultStore", "FileResultStore", "InMemoryResultStore", "SnapshotStore", "load_snapshot"]
