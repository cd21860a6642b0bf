"""
Namespace Merger

Builds the combined namespace -> group -> rule tree for one rules source from
a definition-view snapshot and a state-view snapshot.
"""

import logging
from typing import Dict, List, Optional

from .models import (
    AlertGroupTotalState, AlertingRuleDefinition, CombinedRule, CombinedRuleGroup,
    CombinedRuleNamespace, DefinitionSnapshot, ManagedRuleDefinition,
    RecordingRuleDefinition, RuleDefinition, RuleDefinitionGroup, RulesSource,
    StateNamespace, StateRule, StateRuleGroup, StateSnapshot, AlertingRuleState,
    RecordingRuleState
)
from .rule_matcher import RuleMatcher, index_rules_by_name
from .totals_calculator import (
    calculate_all_groups_totals, calculate_group_totals,
    calculate_rule_filtered_totals, calculate_rule_totals
)

FLATTENED_GROUP_NAME = "default"


def sort_rules_by_name(rules: List[CombinedRule]) -> List[CombinedRule]:
    """Sort rules alphabetically by name, in place"""
    rules.sort(key=lambda rule: (rule.name.casefold(), rule.name))
    return rules


class NamespaceMerger:
    """
    Merges the definition view and the state view of one rules source

    Definition-view groups are added first so their group and rule order is
    kept; state-view groups are then folded in, attaching evaluation state to
    matching rules and appending rules that only the evaluation engine knows.
    """

    def __init__(self, matcher: Optional[RuleMatcher] = None):
        self.logger = logging.getLogger(__name__)
        self.matcher = matcher or RuleMatcher()

    def combine_rules_namespaces(self,
                                 rules_source: RulesSource,
                                 state_namespaces: Optional[StateSnapshot],
                                 definition_snapshot: Optional[DefinitionSnapshot] = None
                                 ) -> List[CombinedRuleNamespace]:
        """
        Union merge of both views

        Args:
            rules_source: Source the snapshots belong to
            state_namespaces: State-view namespaces, may be None
            definition_snapshot: Definition-view namespaces, may be None

        Returns:
            List[CombinedRuleNamespace]: Definition-view namespaces in snapshot
            order, followed by namespaces only the state view has
        """
        namespaces: Dict[str, CombinedRuleNamespace] = {}

        for namespace_name, groups in (definition_snapshot or {}).items():
            namespace = CombinedRuleNamespace(rules_source=rules_source, name=namespace_name)

            # All rules of an internal-source namespace share its uid
            first_rule = groups[0].rules[0] if groups and groups[0].rules else None
            if isinstance(first_rule, ManagedRuleDefinition):
                namespace.uid = first_rule.namespace_uid

            namespaces[namespace_name] = namespace
            self._add_definition_groups(namespace, groups)

        for state_namespace in state_namespaces or []:
            namespace = namespaces.get(state_namespace.name)
            if namespace is None:
                namespace = CombinedRuleNamespace(rules_source=rules_source, name=state_namespace.name)
                namespaces[state_namespace.name] = namespace
            self._add_state_groups(namespace, state_namespace.groups)

        self.logger.debug(f"Combined {len(namespaces)} namespaces for {rules_source.name}")
        return list(namespaces.values())

    def attach_definition_rules_to_combined_rules(self,
                                                  rules_source: RulesSource,
                                                  state_namespace: StateNamespace,
                                                  definition_groups: List[RuleDefinitionGroup]
                                                  ) -> CombinedRuleNamespace:
        """
        Attach definitions to rules the evaluation engine knows about

        Same construction as the union merge, except rules without a
        state-view counterpart are dropped afterwards.
        """
        namespace = CombinedRuleNamespace(rules_source=rules_source, name=state_namespace.name)

        self._add_definition_groups(namespace, definition_groups)
        self._add_state_groups(namespace, state_namespace.groups)

        for group in namespace.groups:
            group.rules = [rule for rule in group.rules if rule.state is not None]

        return namespace

    def add_combined_state_and_definition_groups(self,
                                                 namespace: CombinedRuleNamespace,
                                                 state_groups: List[StateRuleGroup],
                                                 definition_groups: List[RuleDefinitionGroup]
                                                 ) -> CombinedRuleNamespace:
        """Replace the groups of ``namespace`` with the merge of both views"""
        self._add_definition_groups(namespace, definition_groups)
        self._add_state_groups(namespace, state_groups)
        return namespace

    def flatten_internal_rules(self, namespaces: List[CombinedRuleNamespace]) -> List[CombinedRuleNamespace]:
        """
        Collapse each namespace into a single "default" group

        Internal-source folders act as groups, so all rules are concatenated,
        sorted by name and their group totals summed.
        """
        flattened = []
        for namespace in namespaces:
            new_namespace = CombinedRuleNamespace(
                rules_source=namespace.rules_source,
                name=namespace.name,
                uid=namespace.uid
            )
            rules = [rule for group in namespace.groups for rule in group.rules]
            new_namespace.groups.append(CombinedRuleGroup(
                name=FLATTENED_GROUP_NAME,
                rules=sort_rules_by_name(rules),
                totals=calculate_all_groups_totals(namespace.groups)
            ))
            flattened.append(new_namespace)
        return flattened

    def _add_definition_groups(self,
                               namespace: CombinedRuleNamespace,
                               groups: Optional[List[RuleDefinitionGroup]]) -> None:
        namespace.groups = []
        for group in groups or []:
            num_recording = sum(1 for rule in group.rules if isinstance(rule, RecordingRuleDefinition))
            num_paused = sum(
                1 for rule in group.rules
                if isinstance(rule, ManagedRuleDefinition) and rule.is_paused
            )

            combined_group = CombinedRuleGroup(
                name=group.name,
                interval=group.interval,
                source_tenants=group.source_tenants,
                totals={
                    AlertGroupTotalState.PAUSED.value: num_paused,
                    AlertGroupTotalState.RECORDING.value: num_recording,
                }
            )
            combined_group.rules = [
                self._definition_rule_to_combined_rule(rule, namespace, combined_group)
                for rule in group.rules
            ]
            namespace.groups.append(combined_group)

    def _add_state_groups(self,
                          namespace: CombinedRuleNamespace,
                          groups: Optional[List[StateRuleGroup]]) -> None:
        existing_groups_by_name = {group.name: group for group in namespace.groups}

        for group in groups or []:
            group_totals = calculate_group_totals(group)

            combined_group = existing_groups_by_name.get(group.name)
            if combined_group is None:
                combined_group = CombinedRuleGroup(name=group.name)
                namespace.groups.append(combined_group)
                existing_groups_by_name[group.name] = combined_group

            # State-view totals win over definition-view totals per key
            combined_group.totals = {**combined_group.totals, **group_totals}

            rules_by_name = index_rules_by_name(combined_group.rules)

            for rule in group.rules or []:
                existing_rule = self.matcher.find_existing_rule(rule, rules_by_name, namespace.rules_source)
                if existing_rule is not None:
                    existing_rule.state = rule
                    existing_rule.instance_totals = self._instance_totals(rule)
                    existing_rule.filtered_instance_totals = self._filtered_instance_totals(rule)
                else:
                    combined_group.rules.append(
                        self._state_rule_to_combined_rule(rule, namespace, combined_group)
                    )

    @staticmethod
    def _instance_totals(rule: StateRule):
        return calculate_rule_totals(rule) if isinstance(rule, AlertingRuleState) else {}

    @staticmethod
    def _filtered_instance_totals(rule: StateRule):
        return calculate_rule_filtered_totals(rule) if isinstance(rule, AlertingRuleState) else {}

    def _state_rule_to_combined_rule(self,
                                     rule: StateRule,
                                     namespace: CombinedRuleNamespace,
                                     group: CombinedRuleGroup) -> CombinedRule:
        if isinstance(rule, AlertingRuleState):
            annotations = dict(rule.annotations or {})
        elif isinstance(rule, RecordingRuleState):
            annotations = {}
        else:
            raise TypeError(f"Unsupported state rule type: {type(rule).__name__}")

        return CombinedRule(
            name=rule.name,
            query=rule.query,
            labels=dict(rule.labels or {}),
            annotations=annotations,
            state=rule,
            namespace=namespace,
            group=group,
            instance_totals=self._instance_totals(rule),
            filtered_instance_totals=self._filtered_instance_totals(rule)
        )

    def _definition_rule_to_combined_rule(self,
                                          rule: RuleDefinition,
                                          namespace: CombinedRuleNamespace,
                                          group: CombinedRuleGroup) -> CombinedRule:
        if isinstance(rule, AlertingRuleDefinition):
            name, query, annotations = rule.alert, rule.expr, rule.annotations
        elif isinstance(rule, RecordingRuleDefinition):
            name, query, annotations = rule.record, rule.expr, {}
        elif isinstance(rule, ManagedRuleDefinition):
            name, query, annotations = rule.title, "", rule.annotations
        else:
            raise TypeError(f"Unsupported rule definition type: {type(rule).__name__}")

        return CombinedRule(
            name=name,
            query=query,
            labels=dict(rule.labels or {}),
            annotations=dict(annotations or {}),
            definition=rule,
            namespace=namespace,
            group=group
        )


def merge(rules_source: RulesSource,
          definition_snapshot: Optional[DefinitionSnapshot],
          state_snapshot: Optional[StateSnapshot]) -> List[CombinedRuleNamespace]:
    """Pure merge of one rules source's snapshots into a fresh combined tree"""
    return NamespaceMerger().combine_rules_namespaces(rules_source, state_snapshot, definition_snapshot)
