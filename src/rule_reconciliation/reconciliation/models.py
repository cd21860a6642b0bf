"""
Rule Reconciliation Models

Data structures for the two rule views (definition and evaluation state) and
the combined namespace -> group -> rule tree produced by reconciling them.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Union, Any


INTERNAL_RULES_SOURCE_NAME = "grafana"

# Sparse counts per outcome category, an absent key means unknown
Totals = Dict[str, int]


class RulesSourceKind(Enum):
    """Kinds of rules sources"""
    INTERNAL = "internal"
    EXTERNAL = "external"


class AlertInstanceTotalState(str, Enum):
    """Instance-level outcome categories"""
    ALERTING = "alerting"
    PENDING = "pending"
    INACTIVE = "inactive"
    NODATA = "nodata"
    ERROR = "error"


class AlertGroupTotalState(str, Enum):
    """Group-level outcome categories"""
    ALERTING = "alerting"
    PENDING = "pending"
    INACTIVE = "inactive"
    NODATA = "nodata"
    ERROR = "error"
    PAUSED = "paused"
    RECORDING = "recording"


class RuleHealth(str, Enum):
    """Rule health reported by the evaluation engine"""
    OK = "ok"
    ERROR = "error"
    NODATA = "nodata"
    UNKNOWN = "unknown"


class PromAlertingRuleState(str, Enum):
    """Evaluation state of an alerting rule"""
    FIRING = "firing"
    PENDING = "pending"
    INACTIVE = "inactive"


class DefinitionRuleKind(Enum):
    """Variants of definition-view rule records"""
    ALERTING = "alerting"
    RECORDING = "recording"
    MANAGED = "managed"


class StateRuleKind(Enum):
    """Variants of state-view rule records"""
    ALERTING = "alerting"
    RECORDING = "recording"


@dataclass(frozen=True)
class RulesSource:
    """Where a set of rules comes from"""
    name: str
    kind: RulesSourceKind = RulesSourceKind.EXTERNAL
    datasource_type: Optional[str] = None
    uid: Optional[str] = None

    @property
    def is_internal(self) -> bool:
        return self.kind is RulesSourceKind.INTERNAL

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'kind': self.kind.value,
            'datasource_type': self.datasource_type,
            'uid': self.uid
        }


def internal_rules_source(name: str = INTERNAL_RULES_SOURCE_NAME) -> RulesSource:
    """Build the singleton-kind source for rules managed by the host system."""
    return RulesSource(name=name, kind=RulesSourceKind.INTERNAL)


# Definition view

@dataclass
class AlertingRuleDefinition:
    """Alerting rule as configured in the ruler"""
    alert: str
    expr: str
    for_duration: Optional[str] = None
    labels: Dict[str, str] = field(default_factory=dict)
    annotations: Dict[str, str] = field(default_factory=dict)

    kind = DefinitionRuleKind.ALERTING

    @property
    def name(self) -> str:
        return self.alert

    def to_dict(self) -> Dict[str, Any]:
        return {
            'alert': self.alert,
            'expr': self.expr,
            'for': self.for_duration,
            'labels': self.labels,
            'annotations': self.annotations
        }


@dataclass
class RecordingRuleDefinition:
    """Recording rule as configured in the ruler"""
    record: str
    expr: str
    labels: Dict[str, str] = field(default_factory=dict)

    kind = DefinitionRuleKind.RECORDING

    @property
    def name(self) -> str:
        return self.record

    def to_dict(self) -> Dict[str, Any]:
        return {
            'record': self.record,
            'expr': self.expr,
            'labels': self.labels
        }


@dataclass
class ManagedRuleDefinition:
    """Rule managed by the host system itself (internal source)"""
    title: str
    uid: str = ""
    namespace_uid: str = ""
    rule_group: str = ""
    is_paused: bool = False
    labels: Dict[str, str] = field(default_factory=dict)
    annotations: Dict[str, str] = field(default_factory=dict)

    kind = DefinitionRuleKind.MANAGED

    @property
    def name(self) -> str:
        return self.title

    def to_dict(self) -> Dict[str, Any]:
        return {
            'labels': self.labels,
            'annotations': self.annotations,
            'grafana_alert': {
                'title': self.title,
                'uid': self.uid,
                'namespace_uid': self.namespace_uid,
                'rule_group': self.rule_group,
                'is_paused': self.is_paused
            }
        }


RuleDefinition = Union[AlertingRuleDefinition, RecordingRuleDefinition, ManagedRuleDefinition]


@dataclass
class RuleDefinitionGroup:
    """Ordered group of rule definitions"""
    name: str
    interval: Optional[str] = None
    source_tenants: Optional[List[str]] = None
    rules: List[RuleDefinition] = field(default_factory=list)


# namespace name -> ordered groups
DefinitionSnapshot = Dict[str, List[RuleDefinitionGroup]]


# State view

@dataclass
class AlertInstance:
    """Single alert instance produced by an alerting rule"""
    state: str
    labels: Dict[str, str] = field(default_factory=dict)
    annotations: Dict[str, str] = field(default_factory=dict)
    value: Optional[str] = None
    active_at: Optional[str] = None


@dataclass
class AlertingRuleState:
    """Alerting rule as seen by the evaluation engine"""
    name: str
    query: str
    labels: Dict[str, str] = field(default_factory=dict)
    annotations: Dict[str, str] = field(default_factory=dict)
    state: str = PromAlertingRuleState.INACTIVE.value
    health: str = RuleHealth.UNKNOWN.value
    alerts: Optional[List[AlertInstance]] = None
    totals: Optional[Dict[str, int]] = None
    totals_filtered: Optional[Dict[str, int]] = None
    last_error: Optional[str] = None

    kind = StateRuleKind.ALERTING


@dataclass
class RecordingRuleState:
    """Recording rule as seen by the evaluation engine"""
    name: str
    query: str
    labels: Dict[str, str] = field(default_factory=dict)
    health: str = RuleHealth.UNKNOWN.value
    last_error: Optional[str] = None

    kind = StateRuleKind.RECORDING


StateRule = Union[AlertingRuleState, RecordingRuleState]


@dataclass
class StateRuleGroup:
    """Rule group as seen by the evaluation engine"""
    name: str
    rules: List[StateRule] = field(default_factory=list)
    file: Optional[str] = None
    interval: Optional[float] = None
    totals: Optional[Dict[str, int]] = None


@dataclass
class StateNamespace:
    """Namespace of rule groups as seen by the evaluation engine"""
    name: str
    groups: List[StateRuleGroup] = field(default_factory=list)


StateSnapshot = List[StateNamespace]


def is_alerting_state_rule(rule: StateRule) -> bool:
    return isinstance(rule, AlertingRuleState)


def is_recording_state_rule(rule: StateRule) -> bool:
    return isinstance(rule, RecordingRuleState)


# Combined tree

@dataclass
class CombinedRule:
    """Rule reconciled from the definition view and the state view"""
    name: str
    query: str
    labels: Dict[str, str] = field(default_factory=dict)
    annotations: Dict[str, str] = field(default_factory=dict)
    definition: Optional[RuleDefinition] = None
    state: Optional[StateRule] = None
    instance_totals: Totals = field(default_factory=dict)
    filtered_instance_totals: Totals = field(default_factory=dict)
    namespace: Optional['CombinedRuleNamespace'] = field(default=None, repr=False, compare=False)
    group: Optional['CombinedRuleGroup'] = field(default=None, repr=False, compare=False)

    @property
    def is_fully_matched(self) -> bool:
        return self.definition is not None and self.state is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'query': self.query,
            'labels': self.labels,
            'annotations': self.annotations,
            'has_definition': self.definition is not None,
            'has_state': self.state is not None,
            'definition_kind': self.definition.kind.value if self.definition is not None else None,
            'state_kind': self.state.kind.value if self.state is not None else None,
            'definition': self.definition.to_dict() if self.definition is not None else None,
            'instance_totals': dict(self.instance_totals),
            'filtered_instance_totals': dict(self.filtered_instance_totals)
        }


@dataclass
class CombinedRuleGroup:
    """Ordered group of combined rules with aggregated totals"""
    name: str
    interval: Optional[str] = None
    source_tenants: Optional[List[str]] = None
    rules: List[CombinedRule] = field(default_factory=list)
    totals: Totals = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'interval': self.interval,
            'source_tenants': self.source_tenants,
            'rules': [r.to_dict() for r in self.rules],
            'totals': dict(self.totals)
        }


@dataclass
class CombinedRuleNamespace:
    """Namespace (folder or rule file) of the combined tree"""
    rules_source: RulesSource
    name: str
    uid: Optional[str] = None
    groups: List[CombinedRuleGroup] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'rules_source': self.rules_source.to_dict(),
            'name': self.name,
            'uid': self.uid,
            'groups': [g.to_dict() for g in self.groups]
        }
