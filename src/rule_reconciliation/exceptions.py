"""
Exception hierarchy for the rule reconciliation engine.

Only an unknown rules source is fatal during reconciliation; parse errors are
raised at the provider boundary before a merge pass starts.
"""


class RulesReconciliationError(Exception):
    """Base exception for rule reconciliation errors."""
    pass


class UnknownRulesSourceError(RulesReconciliationError):
    """Raised when asked to reconcile a rules source that is not configured."""

    def __init__(self, rules_source_name: str):
        self.rules_source_name = rules_source_name
        super().__init__(f"Unknown rules source: {rules_source_name}")


class SnapshotParseError(RulesReconciliationError, ValueError):
    """Raised when a raw rules payload does not match any known record shape."""
    pass
