"""
Snapshot Parsers

Converts raw ruler configuration and rules API payloads into the typed
definition-view and state-view records.
"""

import logging
from typing import Any, Dict, List, Optional

from ..exceptions import SnapshotParseError
from .models import (
    AlertInstance, AlertingRuleDefinition, AlertingRuleState, DefinitionSnapshot,
    ManagedRuleDefinition, RecordingRuleDefinition, RecordingRuleState, RuleDefinition,
    RuleDefinitionGroup, StateNamespace, StateRule, StateRuleGroup, StateSnapshot
)

logger = logging.getLogger(__name__)


def _str_map(value: Optional[Dict[str, Any]]) -> Dict[str, str]:
    return {str(k): str(v) for k, v in (value or {}).items()}


def _counts(value: Optional[Dict[str, Any]]) -> Optional[Dict[str, int]]:
    if value is None:
        return None
    return {str(k): int(v) for k, v in value.items() if v is not None}


def parse_rule_definition(data: Dict[str, Any]) -> RuleDefinition:
    """
    Parse a ruler rule record

    Args:
        data: Rule dict; ``grafana_alert`` marks an internal-managed rule,
            ``alert`` an alerting rule and ``record`` a recording rule

    Returns:
        RuleDefinition: Typed rule definition

    Raises:
        SnapshotParseError: If the record matches none of the variants
    """
    if 'grafana_alert' in data:
        managed = data['grafana_alert'] or {}
        return ManagedRuleDefinition(
            title=managed.get('title', ''),
            uid=managed.get('uid', ''),
            namespace_uid=managed.get('namespace_uid', ''),
            rule_group=managed.get('rule_group', ''),
            is_paused=bool(managed.get('is_paused', False)),
            labels=_str_map(data.get('labels')),
            annotations=_str_map(data.get('annotations'))
        )

    if 'alert' in data:
        return AlertingRuleDefinition(
            alert=data['alert'],
            expr=data.get('expr', ''),
            for_duration=data.get('for'),
            labels=_str_map(data.get('labels')),
            annotations=_str_map(data.get('annotations'))
        )

    if 'record' in data:
        return RecordingRuleDefinition(
            record=data['record'],
            expr=data.get('expr', ''),
            labels=_str_map(data.get('labels'))
        )

    raise SnapshotParseError(f"Unrecognized rule definition with keys: {sorted(data)}")


def parse_definition_group(data: Dict[str, Any]) -> RuleDefinitionGroup:
    """Parse a ruler rule group"""
    return RuleDefinitionGroup(
        name=data['name'],
        interval=data.get('interval'),
        source_tenants=data.get('source_tenants'),
        rules=[parse_rule_definition(rule) for rule in data.get('rules') or []]
    )


def parse_definition_snapshot(data: Optional[Dict[str, List[Dict[str, Any]]]]) -> DefinitionSnapshot:
    """Parse a ruler config mapping namespace names to group lists"""
    return {
        namespace: [parse_definition_group(group) for group in groups or []]
        for namespace, groups in (data or {}).items()
    }


def parse_alert_instance(data: Dict[str, Any]) -> AlertInstance:
    return AlertInstance(
        state=data.get('state', ''),
        labels=_str_map(data.get('labels')),
        annotations=_str_map(data.get('annotations')),
        value=data.get('value'),
        active_at=data.get('activeAt')
    )


def parse_state_rule(data: Dict[str, Any]) -> StateRule:
    """
    Parse a rules API rule record

    Raises:
        SnapshotParseError: If ``type`` is neither alerting nor recording
    """
    rule_type = data.get('type')

    if rule_type == 'alerting':
        alerts = data.get('alerts')
        return AlertingRuleState(
            name=data['name'],
            query=data.get('query', ''),
            labels=_str_map(data.get('labels')),
            annotations=_str_map(data.get('annotations')),
            state=data.get('state', 'inactive'),
            health=data.get('health', 'unknown'),
            alerts=[parse_alert_instance(a) for a in alerts] if alerts is not None else None,
            totals=_counts(data.get('totals')),
            totals_filtered=_counts(data.get('totalsFiltered')),
            last_error=data.get('lastError')
        )

    if rule_type == 'recording':
        return RecordingRuleState(
            name=data['name'],
            query=data.get('query', ''),
            labels=_str_map(data.get('labels')),
            health=data.get('health', 'unknown'),
            last_error=data.get('lastError')
        )

    raise SnapshotParseError(f"Unrecognized rule type: {rule_type!r}")


def parse_state_group(data: Dict[str, Any]) -> StateRuleGroup:
    """Parse a rules API rule group"""
    return StateRuleGroup(
        name=data['name'],
        file=data.get('file'),
        interval=data.get('interval'),
        rules=[parse_state_rule(rule) for rule in data.get('rules') or []],
        totals=_counts(data.get('totals'))
    )


def parse_state_snapshot(data: Any) -> StateSnapshot:
    """
    Parse state-view namespaces

    Accepts either a list of ``{"name", "groups"}`` namespace dicts or a
    Prometheus ``/api/v1/rules`` response, whose groups are bucketed into
    namespaces by their ``file`` field in first-seen order.
    """
    if data is None:
        return []

    if isinstance(data, list):
        return [
            StateNamespace(
                name=namespace['name'],
                groups=[parse_state_group(group) for group in namespace.get('groups') or []]
            )
            for namespace in data
        ]

    if isinstance(data, dict) and isinstance(data.get('data'), dict):
        namespaces: Dict[str, StateNamespace] = {}
        for group_data in data['data'].get('groups') or []:
            group = parse_state_group(group_data)
            namespace_name = group.file or group.name
            namespace = namespaces.setdefault(namespace_name, StateNamespace(name=namespace_name))
            namespace.groups.append(group)
        logger.debug(f"Parsed rules response into {len(namespaces)} namespaces")
        return list(namespaces.values())

    raise SnapshotParseError(f"Unrecognized state snapshot payload: {type(data).__name__}")
