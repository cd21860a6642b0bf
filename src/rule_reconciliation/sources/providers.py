"""
Snapshot Providers

Data providers handing out the definition-view and state-view snapshots of
each rules source.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional


class SnapshotProvider(ABC):
    """Source of per rules source snapshots"""

    @abstractmethod
    def get_snapshot(self, rules_source_name: str) -> Optional[Any]:
        """
        Get the current snapshot of a rules source

        Must return the same object for as long as the underlying data is
        unchanged and a new object once it changes; reconciliation results
        are cached on snapshot identity.
        """
        pass


class InMemorySnapshotStore(SnapshotProvider):
    """Holds the latest snapshot per rules source as set by a fetch layer"""

    def __init__(self, snapshots: Optional[Dict[str, Any]] = None):
        self._snapshots: Dict[str, Any] = dict(snapshots or {})

    def set_snapshot(self, rules_source_name: str, snapshot: Any) -> None:
        """Store a snapshot reference as given"""
        self._snapshots[rules_source_name] = snapshot

    def get_snapshot(self, rules_source_name: str) -> Optional[Any]:
        return self._snapshots.get(rules_source_name)

    def remove_snapshot(self, rules_source_name: str) -> bool:
        return self._snapshots.pop(rules_source_name, None) is not None

    def clear(self) -> None:
        self._snapshots.clear()
