"""
Reconciliation Cache

Per rules source memoization of combined trees, keyed by the identity of the
two input snapshots.
"""

import functools
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

import structlog

from .models import CombinedRuleNamespace, DefinitionSnapshot, RulesSource, StateSnapshot

logger = structlog.get_logger(__name__)


@dataclass
class CacheEntry:
    """Last snapshots seen for a rules source and the tree built from them"""
    definition_snapshot: Optional[DefinitionSnapshot]
    state_snapshot: Optional[StateSnapshot]
    result: List[CombinedRuleNamespace]

    def matches(self,
                definition_snapshot: Optional[DefinitionSnapshot],
                state_snapshot: Optional[StateSnapshot]) -> bool:
        return (
            self.definition_snapshot is definition_snapshot
            and self.state_snapshot is state_snapshot
        )


class ReconciliationCache:
    """
    Single-slot-per-source memoization of merge results

    A lookup hits only when both snapshots are the very objects stored with
    the entry; equal but distinct snapshots miss. Producers must hand out a
    new snapshot object whenever the data changes and reuse the old one when
    it does not. Entries are never evicted.
    """

    def __init__(self):
        self._entries: Dict[str, CacheEntry] = {}
        self.hits = 0
        self.misses = 0

    def lookup(self,
               rules_source_name: str,
               definition_snapshot: Optional[DefinitionSnapshot],
               state_snapshot: Optional[StateSnapshot]) -> Optional[List[CombinedRuleNamespace]]:
        """Return the cached tree if both snapshots are unchanged, else None"""
        entry = self._entries.get(rules_source_name)
        if entry is not None and entry.matches(definition_snapshot, state_snapshot):
            self.hits += 1
            logger.debug("Reconciliation cache hit", rules_source=rules_source_name)
            return entry.result

        self.misses += 1
        logger.debug("Reconciliation cache miss", rules_source=rules_source_name,
                     had_entry=entry is not None)
        return None

    def store(self,
              rules_source_name: str,
              definition_snapshot: Optional[DefinitionSnapshot],
              state_snapshot: Optional[StateSnapshot],
              result: List[CombinedRuleNamespace]) -> None:
        """Overwrite the entry for a rules source"""
        self._entries[rules_source_name] = CacheEntry(definition_snapshot, state_snapshot, result)

    def get_or_compute(self,
                       rules_source_name: str,
                       definition_snapshot: Optional[DefinitionSnapshot],
                       state_snapshot: Optional[StateSnapshot],
                       compute: Callable[[], List[CombinedRuleNamespace]]) -> List[CombinedRuleNamespace]:
        """
        Return the cached tree or compute, store and return a new one

        Args:
            rules_source_name: Cache key
            definition_snapshot: Current definition-view snapshot
            state_snapshot: Current state-view snapshot
            compute: Builds the tree on a miss

        Returns:
            List[CombinedRuleNamespace]: Cached or freshly built tree
        """
        cached = self.lookup(rules_source_name, definition_snapshot, state_snapshot)
        if cached is not None:
            return cached

        result = compute()
        self.store(rules_source_name, definition_snapshot, state_snapshot, result)
        return result

    def memoize(self, merge_func: Callable[[RulesSource, Any, Any], List[CombinedRuleNamespace]]):
        """
        Wrap a ``merge(rules_source, definition_snapshot, state_snapshot)``
        function so repeated calls with the same snapshots reuse the tree.
        """
        @functools.wraps(merge_func)
        def wrapper(rules_source: RulesSource, definition_snapshot, state_snapshot):
            return self.get_or_compute(
                rules_source.name,
                definition_snapshot,
                state_snapshot,
                lambda: merge_func(rules_source, definition_snapshot, state_snapshot)
            )
        return wrapper

    def invalidate(self, rules_source_name: str) -> bool:
        """Drop the entry for a rules source"""
        return self._entries.pop(rules_source_name, None) is not None

    def clear(self) -> None:
        """Drop all entries and reset counters"""
        self._entries.clear()
        self.hits = 0
        self.misses = 0

    def __contains__(self, rules_source_name: str) -> bool:
        return rules_source_name in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics"""
        total = self.hits + self.misses
        return {
            'entries': len(self._entries),
            'hits': self.hits,
            'misses': self.misses,
            'hit_rate': self.hits / total if total else 0.0,
            'sources': sorted(self._entries)
        }
