"""
Totals Calculator

Computes sparse instance-state and rule-health counts at rule, group and
namespace level from the two schemas rule sources report totals in.
"""

from collections import Counter
from typing import Dict, Iterable, Optional

from .models import (
    AlertingRuleState, AlertInstanceTotalState, AlertGroupTotalState,
    CombinedRuleGroup, PromAlertingRuleState, RuleHealth, StateRuleGroup,
    Totals, is_alerting_state_rule, is_recording_state_rule
)


def _rekey(totals: Dict[str, int], source_key: str, target_key: str) -> Totals:
    """Move ``source_key`` to ``target_key``; target is absent when source is."""
    result = {key: value for key, value in totals.items() if key != source_key}
    result.pop(target_key, None)
    if totals.get(source_key) is not None:
        result[target_key] = totals[source_key]
    return result


def _without_empty(totals: Dict[str, Optional[int]]) -> Totals:
    return {key: value for key, value in totals.items() if value}


def calculate_rule_totals(rule: AlertingRuleState) -> Totals:
    """
    Calculate instance totals for an alerting rule

    Pre-aggregated totals are returned with ``normal`` re-keyed to
    ``inactive``. Otherwise instances are tallied by state; categories
    without instances are left out rather than set to 0.

    Args:
        rule: Alerting rule from the state view

    Returns:
        Totals: Sparse counts by instance state
    """
    if rule.totals is not None:
        return _rekey(rule.totals, "normal", AlertInstanceTotalState.INACTIVE.value)

    counts = Counter((alert.state or "").lower() for alert in rule.alerts or [])

    # synonyms from different sources are summed
    return _without_empty({
        AlertInstanceTotalState.ALERTING.value: counts["alerting"] + counts["firing"],
        AlertInstanceTotalState.PENDING.value: counts["pending"],
        AlertInstanceTotalState.INACTIVE.value: counts["inactive"] + counts["normal"],
        AlertInstanceTotalState.NODATA.value: counts["nodata"],
        # Prometheus reports "err" instead of "error"
        AlertInstanceTotalState.ERROR.value: counts["error"] + counts["err"],
    })


def calculate_rule_filtered_totals(rule: AlertingRuleState) -> Totals:
    """Calculate instance totals restricted to the source-side instance filter"""
    if rule.totals_filtered is not None:
        return _rekey(rule.totals_filtered, "normal", AlertInstanceTotalState.INACTIVE.value)
    return {}


def calculate_group_totals(group: StateRuleGroup) -> Totals:
    """
    Calculate rule totals for a state-view group

    Pre-aggregated totals are returned with ``firing`` re-keyed to
    ``alerting``. Otherwise alerting rules are tallied by evaluation state,
    all rules by health, and recording rules are counted.

    Args:
        group: Group from the state view

    Returns:
        Totals: Sparse counts by group category
    """
    if group.totals is not None:
        return _rekey(group.totals, "firing", AlertGroupTotalState.ALERTING.value)

    rules = group.rules or []
    counts_by_state = Counter(rule.state for rule in rules if is_alerting_state_rule(rule))
    counts_by_health = Counter(rule.health for rule in rules)
    recording_count = sum(1 for rule in rules if is_recording_state_rule(rule))

    totals = _without_empty({
        AlertGroupTotalState.ALERTING.value: counts_by_state.get(PromAlertingRuleState.FIRING.value),
        AlertGroupTotalState.ERROR.value: counts_by_health.get(RuleHealth.ERROR.value),
        AlertGroupTotalState.NODATA.value: counts_by_health.get(RuleHealth.NODATA.value),
        AlertGroupTotalState.INACTIVE.value: counts_by_state.get(PromAlertingRuleState.INACTIVE.value),
        AlertGroupTotalState.PENDING.value: counts_by_state.get(PromAlertingRuleState.PENDING.value),
    })
    totals[AlertGroupTotalState.RECORDING.value] = recording_count
    return totals


def calculate_all_groups_totals(groups: Iterable[CombinedRuleGroup]) -> Totals:
    """Sum totals key-wise across groups; keys absent in every group stay absent"""
    totals: Totals = {}
    for group in groups:
        for key, value in group.totals.items():
            if value is None:
                continue
            totals[key] = totals.get(key, 0) + value
    return totals
