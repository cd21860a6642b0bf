"""
Pytest configuration and fixtures for the rule reconciliation tests.

Provides shared rules sources, snapshot builders and providers.
"""

import sys
from pathlib import Path

import pytest

# Add src to Python path for testing
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from rule_reconciliation.reconciliation.models import (  # noqa: E402
    AlertInstance, AlertingRuleDefinition, AlertingRuleState, ManagedRuleDefinition,
    RecordingRuleDefinition, RecordingRuleState, RuleDefinitionGroup, RulesSource,
    RulesSourceKind, StateNamespace, StateRuleGroup, internal_rules_source
)
from rule_reconciliation.sources import InMemorySnapshotStore, RulesSourceRegistry  # noqa: E402


@pytest.fixture
def prometheus_source():
    """External rules source backed by a Prometheus ruler."""
    return RulesSource(name="Prometheus", kind=RulesSourceKind.EXTERNAL, datasource_type="prometheus")


@pytest.fixture
def internal_source():
    """Rules source for host-managed rules."""
    return internal_rules_source()


@pytest.fixture
def registry(internal_source, prometheus_source):
    return RulesSourceRegistry([internal_source, prometheus_source])


@pytest.fixture
def definition_store():
    return InMemorySnapshotStore()


@pytest.fixture
def state_store():
    return InMemorySnapshotStore()


@pytest.fixture
def external_definition_snapshot():
    """Ruler config with one alerting and one recording rule."""
    return {
        "ns1": [
            RuleDefinitionGroup(
                name="g1",
                interval="1m",
                rules=[
                    AlertingRuleDefinition(
                        alert="HighLatency",
                        expr='histogram_quantile(0.99, rate(latency_bucket{job="api"}[5m])) > 1',
                        labels={"severity": "page"},
                        annotations={"summary": "latency is high"},
                    ),
                    RecordingRuleDefinition(record="job:requests:rate5m", expr="sum by (job) (rate(requests[5m]))"),
                ],
            )
        ]
    }


@pytest.fixture
def external_state_snapshot():
    """Rules API view of the same ruler config plus a state-only group."""
    return [
        StateNamespace(
            name="ns1",
            groups=[
                StateRuleGroup(
                    name="g1",
                    rules=[
                        AlertingRuleState(
                            name="HighLatency",
                            query='(histogram_quantile(0.99, rate(latency_bucket{job="api"}[5m])) > 1)',
                            labels={"severity": "page"},
                            annotations={"summary": "latency is high"},
                            state="firing",
                            health="ok",
                            alerts=[AlertInstance(state="firing"), AlertInstance(state="pending")],
                        ),
                        RecordingRuleState(
                            name="job:requests:rate5m",
                            query="sum by(job) (rate(requests[5m]))",
                            health="ok",
                        ),
                    ],
                ),
                StateRuleGroup(
                    name="g2",
                    rules=[AlertingRuleState(name="Orphan", query="up == 0", state="inactive", health="ok")],
                ),
            ],
        )
    ]


@pytest.fixture
def internal_definition_snapshot():
    """Host-managed rules in one folder, one rule per group."""
    return {
        "folder-a": [
            RuleDefinitionGroup(
                name="cpu",
                rules=[ManagedRuleDefinition(title="CPU usage", uid="r1", namespace_uid="folder-uid", rule_group="cpu")],
            ),
            RuleDefinitionGroup(
                name="disk",
                rules=[ManagedRuleDefinition(title="Disk full", uid="r2", namespace_uid="folder-uid",
                                             rule_group="disk", is_paused=True)],
            ),
        ]
    }
