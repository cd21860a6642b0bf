"""
Multi-Source Orchestrator

Runs reconciliation across all configured rules sources, or a single selected
one, and flattens the per-source results into one namespace list.
"""

from typing import List, Optional

import structlog

from ..exceptions import UnknownRulesSourceError
from ..sources.providers import SnapshotProvider
from ..sources.registry import RulesSourceRegistry
from ..utils.logger import PerformanceLogger
from .models import CombinedRuleNamespace, RulesSource, StateSnapshot
from .namespace_merger import NamespaceMerger
from .reconciliation_cache import ReconciliationCache

logger = structlog.get_logger(__name__)


class MultiSourceOrchestrator:
    """
    Combines definition-view and state-view rules for every rules source

    Recomputation is driven only by snapshot identity: a source is merged
    again when either of its snapshots is a different object than at the
    previous call.
    """

    def __init__(self,
                 registry: RulesSourceRegistry,
                 definition_provider: SnapshotProvider,
                 state_provider: SnapshotProvider,
                 cache: Optional[ReconciliationCache] = None,
                 merger: Optional[NamespaceMerger] = None,
                 flatten_internal: bool = False):
        self.registry = registry
        self.definition_provider = definition_provider
        self.state_provider = state_provider
        self.cache = cache if cache is not None else ReconciliationCache()
        self.merger = merger or NamespaceMerger()
        self.flatten_internal = flatten_internal

        logger.info("MultiSourceOrchestrator initialized",
                    rules_sources=len(registry),
                    flatten_internal=flatten_internal)

    @classmethod
    def from_settings(cls,
                      settings,
                      definition_provider: SnapshotProvider,
                      state_provider: SnapshotProvider) -> 'MultiSourceOrchestrator':
        """Build an orchestrator from application settings"""
        return cls(
            registry=RulesSourceRegistry.from_settings(settings),
            definition_provider=definition_provider,
            state_provider=state_provider,
            cache=ReconciliationCache() if settings.reconciliation.cache_enabled else _NoCache(),
            flatten_internal=settings.reconciliation.flatten_internal_namespaces
        )

    def resolve_rules_sources(self, rules_source_name: Optional[str] = None) -> List[RulesSource]:
        """
        Resolve which rules sources to process

        Raises:
            UnknownRulesSourceError: If ``rules_source_name`` is not configured
        """
        if rules_source_name:
            rules_source = self.registry.get_rules_source_by_name(rules_source_name)
            if rules_source is None:
                logger.error("Unknown rules source requested", rules_source=rules_source_name)
                raise UnknownRulesSourceError(rules_source_name)
            return [rules_source]
        return self.registry.get_all_rules_sources()

    def get_combined_rule_namespaces(self,
                                     rules_source_name: Optional[str] = None,
                                     internal_state_namespaces: Optional[StateSnapshot] = None
                                     ) -> List[CombinedRuleNamespace]:
        """
        Combine rules of all (or one) rules sources

        Args:
            rules_source_name: Limit to this rules source
            internal_state_namespaces: State-view namespaces to use for the
                internal source instead of the provider's snapshot

        Returns:
            List[CombinedRuleNamespace]: Namespaces of all processed sources
        """
        combined: List[CombinedRuleNamespace] = []

        for rules_source in self.resolve_rules_sources(rules_source_name):
            namespaces = self._combine_rules_source(rules_source, internal_state_namespaces)
            if self.flatten_internal and rules_source.is_internal:
                namespaces = self.merger.flatten_internal_rules(namespaces)
            combined.extend(namespaces)

        return combined

    def _combine_rules_source(self,
                              rules_source: RulesSource,
                              internal_state_namespaces: Optional[StateSnapshot]
                              ) -> List[CombinedRuleNamespace]:
        definition_snapshot = self.definition_provider.get_snapshot(rules_source.name)
        state_snapshot = self.state_provider.get_snapshot(rules_source.name)
        if rules_source.is_internal and internal_state_namespaces is not None:
            state_snapshot = internal_state_namespaces

        def compute() -> List[CombinedRuleNamespace]:
            with PerformanceLogger(f"reconcile {rules_source.name}"):
                return self.merger.combine_rules_namespaces(
                    rules_source, state_snapshot, definition_snapshot
                )

        return self.cache.get_or_compute(rules_source.name, definition_snapshot, state_snapshot, compute)


class _NoCache(ReconciliationCache):
    """Cache that never hits, for when caching is disabled in settings"""

    def lookup(self, rules_source_name, definition_snapshot, state_snapshot):
        self.misses += 1
        return None

    def store(self, rules_source_name, definition_snapshot, state_snapshot, result):
        pass
