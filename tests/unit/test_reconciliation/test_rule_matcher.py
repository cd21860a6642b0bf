"""
Unit tests for cross-view rule matching.
"""

import pytest

from rule_reconciliation.reconciliation.models import (
    AlertingRuleDefinition, AlertingRuleState, CombinedRule, RecordingRuleState
)
from rule_reconciliation.reconciliation.rule_matcher import (
    RuleMatcher, index_rules_by_name, is_combined_rule_equal_to_state_rule
)


def _candidate(name="A", query="up==1", labels=None, annotations=None, state=None):
    return CombinedRule(
        name=name,
        query=query,
        labels=labels if labels is not None else {"x": 1},
        annotations=annotations or {},
        definition=AlertingRuleDefinition(alert=name, expr=query),
        state=state,
    )


def _state_rule(name="A", query="(up==1)", labels=None, annotations=None):
    return AlertingRuleState(
        name=name,
        query=query,
        labels=labels if labels is not None else {"x": 1},
        annotations=annotations or {},
    )


class TestRuleMatcher:
    """Test suite for RuleMatcher."""

    @pytest.fixture
    def matcher(self):
        return RuleMatcher()

    def test_paren_insensitive_match(self, matcher, prometheus_source):
        candidate = _candidate()
        rules_by_name = index_rules_by_name([candidate])

        assert matcher.find_existing_rule(_state_rule(), rules_by_name, prometheus_source) is candidate

    def test_label_mismatch_is_new_rule(self, matcher, prometheus_source):
        rules_by_name = index_rules_by_name([_candidate()])

        assert matcher.find_existing_rule(_state_rule(labels={"x": 2}), rules_by_name, prometheus_source) is None

        rules_by_name = index_rules_by_name([_candidate(labels={"x": 2})])
        assert matcher.find_existing_rule(_state_rule(), rules_by_name, prometheus_source) is None

    def test_rewritten_query_matches_loosely(self, matcher, prometheus_source):
        candidate = _candidate(query="2 > 1")
        rules_by_name = index_rules_by_name([candidate])

        assert matcher.find_existing_rule(_state_rule(query="1"), rules_by_name, prometheus_source) is candidate

    def test_strict_match_preferred_over_loose(self, matcher, prometheus_source):
        loose = _candidate(query="up == 0")
        strict = _candidate(query="up == 1")
        rules_by_name = index_rules_by_name([loose, strict])

        assert matcher.find_existing_rule(_state_rule(query="up == 1"), rules_by_name, prometheus_source) is strict

    def test_already_paired_candidates_are_skipped(self, matcher, prometheus_source):
        paired = _candidate(state=_state_rule())
        free = _candidate()
        rules_by_name = index_rules_by_name([paired, free])

        assert matcher.find_existing_rule(_state_rule(), rules_by_name, prometheus_source) is free

    def test_no_name_match(self, matcher, prometheus_source):
        rules_by_name = index_rules_by_name([_candidate()])

        assert matcher.find_existing_rule(_state_rule(name="B"), rules_by_name, prometheus_source) is None
        assert matcher.find_existing_rule(_state_rule(), {}, prometheus_source) is None

    def test_internal_source_takes_first_name_match(self, matcher, internal_source):
        first = _candidate(labels={"team": "a"}, state=_state_rule())
        second = _candidate()
        rules_by_name = index_rules_by_name([first, second])

        found = matcher.find_existing_rule(_state_rule(labels={"other": "labels"}), rules_by_name, internal_source)

        assert found is first


class TestRuleEquality:
    """Test suite for the comparison primitive."""

    def test_recording_rule_annotations_are_empty(self):
        combined = CombinedRule(name="rec", query="sum(x)", labels={}, annotations={})
        rule = RecordingRuleState(name="rec", query="sum( x )")

        assert is_combined_rule_equal_to_state_rule(combined, rule)

    def test_annotation_mismatch(self):
        combined = _candidate(annotations={"summary": "a"})

        assert not is_combined_rule_equal_to_state_rule(combined, _state_rule(annotations={"summary": "b"}), False)

    def test_different_names_never_equal(self):
        assert not is_combined_rule_equal_to_state_rule(_candidate(name="A"), _state_rule(name="B"), False)

    def test_index_keeps_duplicates_in_order(self):
        first, second = _candidate(), _candidate()

        index = index_rules_by_name([first, second, _candidate(name="B")])

        assert index["A"] == [first, second]
        assert index["A"][0] is first
        assert len(index["B"]) == 1
