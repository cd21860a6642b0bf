"""
Unit tests for rule, group and namespace totals.
"""

from rule_reconciliation.reconciliation.models import (
    AlertInstance, AlertingRuleState, CombinedRuleGroup, RecordingRuleState, StateRuleGroup
)
from rule_reconciliation.reconciliation.totals_calculator import (
    calculate_all_groups_totals, calculate_group_totals,
    calculate_rule_filtered_totals, calculate_rule_totals
)


def _alerting(name="r", state="inactive", health="ok", **kwargs):
    return AlertingRuleState(name=name, query="up", state=state, health=health, **kwargs)


class TestRuleTotals:
    """Test suite for instance-level totals."""

    def test_tally_instances_by_state(self):
        rule = _alerting(alerts=[
            AlertInstance(state="firing"),
            AlertInstance(state="firing"),
            AlertInstance(state="pending"),
        ])

        totals = calculate_rule_totals(rule)

        assert totals == {"alerting": 2, "pending": 1}
        for key in ("nodata", "error", "inactive"):
            assert key not in totals

    def test_err_is_error(self):
        rule = _alerting(alerts=[AlertInstance(state="err"), AlertInstance(state="NoData")])

        assert calculate_rule_totals(rule) == {"error": 1, "nodata": 1}

    def test_normal_instances_count_as_inactive(self):
        rule = _alerting(alerts=[AlertInstance(state="Normal"), AlertInstance(state="Alerting")])

        assert calculate_rule_totals(rule) == {"inactive": 1, "alerting": 1}

    def test_state_synonyms_are_summed(self):
        rule = _alerting(alerts=[
            AlertInstance(state="Alerting"),
            AlertInstance(state="firing"),
            AlertInstance(state="firing"),
            AlertInstance(state="Normal"),
            AlertInstance(state="inactive"),
            AlertInstance(state="err"),
            AlertInstance(state="Error"),
        ])

        assert calculate_rule_totals(rule) == {"alerting": 3, "inactive": 2, "error": 2}

    def test_no_instances(self):
        assert calculate_rule_totals(_alerting()) == {}
        assert calculate_rule_totals(_alerting(alerts=[])) == {}

    def test_pre_aggregated_totals_rekey_normal(self):
        rule = _alerting(
            totals={"alerting": 3, "normal": 7, "error": 0},
            alerts=[AlertInstance(state="firing")],
        )

        assert calculate_rule_totals(rule) == {"alerting": 3, "inactive": 7, "error": 0}

    def test_pre_aggregated_totals_without_normal(self):
        assert calculate_rule_totals(_alerting(totals={"pending": 2})) == {"pending": 2}

    def test_filtered_totals(self):
        assert calculate_rule_filtered_totals(_alerting(totals_filtered={"normal": 1, "alerting": 2})) == {
            "inactive": 1, "alerting": 2
        }
        assert calculate_rule_filtered_totals(_alerting()) == {}


class TestGroupTotals:
    """Test suite for group-level totals."""

    def test_pre_aggregated_totals_rekey_firing(self):
        group = StateRuleGroup(name="g", totals={"firing": 1, "inactive": 4})

        assert calculate_group_totals(group) == {"alerting": 1, "inactive": 4}

    def test_tally_rules_by_state_and_health(self):
        group = StateRuleGroup(name="g", rules=[
            _alerting("a", state="firing"),
            _alerting("b", state="firing", health="error"),
            _alerting("c", state="pending", health="nodata"),
            _alerting("d", state="inactive"),
            RecordingRuleState(name="rec", query="sum(x)", health="error"),
        ])

        assert calculate_group_totals(group) == {
            "alerting": 2,
            "pending": 1,
            "inactive": 1,
            "error": 2,
            "nodata": 1,
            "recording": 1,
        }

    def test_empty_group_only_counts_recording(self):
        assert calculate_group_totals(StateRuleGroup(name="g")) == {"recording": 0}


class TestAllGroupsTotals:
    """Test suite for namespace-level totals."""

    def test_sums_matching_categories(self):
        groups = [
            CombinedRuleGroup(name="a", totals={"alerting": 1, "paused": 0}),
            CombinedRuleGroup(name="b", totals={"alerting": 2, "pending": 1}),
        ]

        assert calculate_all_groups_totals(groups) == {"alerting": 3, "paused": 0, "pending": 1}

    def test_absent_everywhere_stays_absent(self):
        totals = calculate_all_groups_totals([CombinedRuleGroup(name="a", totals={"alerting": 1})])

        assert "error" not in totals

    def test_no_groups(self):
        assert calculate_all_groups_totals([]) == {}
