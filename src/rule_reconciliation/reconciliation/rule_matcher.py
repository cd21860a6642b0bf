"""
Rule Matcher

Correlates state-view rules with combined rules already built from the
definition view of the same group.
"""

import logging
from typing import Dict, Iterable, List, Optional

from .models import CombinedRule, RulesSource, StateRule, is_alerting_state_rule
from .query_hasher import hash_query


def index_rules_by_name(rules: Iterable[CombinedRule]) -> Dict[str, List[CombinedRule]]:
    """Index combined rules by name; names are not unique within a group"""
    rules_by_name: Dict[str, List[CombinedRule]] = {}
    for rule in rules:
        rules_by_name.setdefault(rule.name, []).append(rule)
    return rules_by_name


def is_combined_rule_equal_to_state_rule(combined_rule: CombinedRule,
                                         rule: StateRule,
                                         check_query: bool = True) -> bool:
    """
    Compare a combined rule with a state-view rule

    Args:
        combined_rule: Candidate built from the definition view
        rule: Rule from the state view
        check_query: Compare hashed queries as well as labels and annotations

    Returns:
        bool: True if name, labels, annotations (and query) are equal
    """
    if combined_rule.name != rule.name:
        return False

    annotations = (rule.annotations or {}) if is_alerting_state_rule(rule) else {}
    return (
        (hash_query(combined_rule.query) if check_query else "",
         combined_rule.labels,
         combined_rule.annotations)
        ==
        (hash_query(rule.query) if check_query else "",
         rule.labels or {},
         annotations)
    )


class RuleMatcher:
    """
    Finds the combined rule a state-view rule corresponds to

    Internal sources hold a single rule per group, so the first name match
    wins. Other sources try a strict match on hashed query, labels and
    annotations, then a loose match that ignores the query, since some
    sources rewrite queries (``2 > 1`` becomes ``1``).
    """

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def find_existing_rule(self,
                           rule: StateRule,
                           rules_by_name: Dict[str, List[CombinedRule]],
                           rules_source: RulesSource) -> Optional[CombinedRule]:
        """
        Find the combined rule matching a state-view rule

        Args:
            rule: Rule from the state view
            rules_by_name: Combined rules of the group indexed by name
            rules_source: Source both views belong to

        Returns:
            Optional[CombinedRule]: Matching rule or None if the rule is new
        """
        name_matching_rules = rules_by_name.get(rule.name)
        if not name_matching_rules:
            return None

        if rules_source.is_internal:
            return name_matching_rules[0]

        for check_query in (True, False):
            for combined_rule in name_matching_rules:
                if combined_rule.state is not None:
                    continue
                if is_combined_rule_equal_to_state_rule(combined_rule, rule, check_query):
                    if not check_query:
                        self.logger.debug(f"Loose match for rule {rule.name} in {rules_source.name}")
                    return combined_rule

        return None
