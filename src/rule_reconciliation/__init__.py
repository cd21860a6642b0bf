"""
Rule Reconciliation Engine

Combines the configured definitions of alerting rules with their live
evaluation state, per rules source, into one queryable tree of namespaces,
groups and rules.
"""

__version__ = "1.0.0"

# reconciliation first, sources depend on its models
from .reconciliation import (
    MultiSourceOrchestrator, NamespaceMerger, ReconciliationCache, RuleMatcher,
    merge, hash_query, parse_definition_snapshot, parse_state_snapshot
)
from .sources import RulesSourceRegistry, SnapshotProvider, InMemorySnapshotStore
from .config.settings import get_settings, Settings
from .utils.logger import setup_logging, get_logger
from .exceptions import RulesReconciliationError, UnknownRulesSourceError, SnapshotParseError

__all__ = [
    "MultiSourceOrchestrator",
    "NamespaceMerger",
    "ReconciliationCache",
    "RuleMatcher",
    "merge",
    "hash_query",
    "parse_definition_snapshot",
    "parse_state_snapshot",
    "RulesSourceRegistry",
    "SnapshotProvider",
    "InMemorySnapshotStore",
    "get_settings",
    "Settings",
    "setup_logging",
    "get_logger",
    "RulesReconciliationError",
    "UnknownRulesSourceError",
    "SnapshotParseError",
]
