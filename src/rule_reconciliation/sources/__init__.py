"""
Rules sources and the providers that supply their snapshots.
"""

from .registry import RulesSourceRegistry
from .providers import SnapshotProvider, InMemorySnapshotStore

__all__ = [
    "RulesSourceRegistry",
    "SnapshotProvider",
    "InMemorySnapshotStore",
]
