"""
Rule Reconciliation - Core Components

Merges the definition view and the evaluation-state view of alerting rules
into one tree of namespaces, groups and rules with aggregated totals.
"""

from .models import (
    RulesSource, RulesSourceKind, CombinedRule, CombinedRuleGroup,
    CombinedRuleNamespace, internal_rules_source, INTERNAL_RULES_SOURCE_NAME
)
from .query_hasher import hash_query
from .totals_calculator import (
    calculate_rule_totals, calculate_rule_filtered_totals,
    calculate_group_totals, calculate_all_groups_totals
)
from .rule_matcher import RuleMatcher
from .namespace_merger import NamespaceMerger, merge, sort_rules_by_name
from .reconciliation_cache import ReconciliationCache
from .parsers import parse_definition_snapshot, parse_state_snapshot
from .orchestrator import MultiSourceOrchestrator

__all__ = [
    "RulesSource",
    "RulesSourceKind",
    "CombinedRule",
    "CombinedRuleGroup",
    "CombinedRuleNamespace",
    "internal_rules_source",
    "INTERNAL_RULES_SOURCE_NAME",
    "hash_query",
    "calculate_rule_totals",
    "calculate_rule_filtered_totals",
    "calculate_group_totals",
    "calculate_all_groups_totals",
    "RuleMatcher",
    "NamespaceMerger",
    "merge",
    "sort_rules_by_name",
    "ReconciliationCache",
    "parse_definition_snapshot",
    "parse_state_snapshot",
    "MultiSourceOrchestrator",
]
