"""
Rules Source Registry

Resolves the rules sources reconciliation runs against from configuration.
"""

import logging
from typing import Dict, List, Optional

from ..reconciliation.models import RulesSource, RulesSourceKind, internal_rules_source

logger = logging.getLogger(__name__)


class RulesSourceRegistry:
    """Ordered set of configured rules sources, internal source first"""

    def __init__(self, sources: Optional[List[RulesSource]] = None):
        self._sources: Dict[str, RulesSource] = {}
        for source in sources or []:
            self.register(source)

    @classmethod
    def from_settings(cls, settings) -> 'RulesSourceRegistry':
        """Build the registry from application settings"""
        sources = []
        if settings.internal_source.enabled:
            sources.append(internal_rules_source(settings.internal_source.name))

        for source_config in settings.rules_sources:
            if not source_config.alerting_enabled:
                logger.debug(f"Skipping rules source without alerting: {source_config.name}")
                continue
            sources.append(RulesSource(
                name=source_config.name,
                kind=RulesSourceKind.EXTERNAL,
                datasource_type=source_config.type,
                uid=source_config.uid
            ))

        return cls(sources)

    def register(self, source: RulesSource) -> None:
        if source.name in self._sources:
            logger.warning(f"Replacing rules source registered twice: {source.name}")
        self._sources[source.name] = source

    def get_all_rules_sources(self) -> List[RulesSource]:
        return list(self._sources.values())

    def get_rules_source_by_name(self, name: str) -> Optional[RulesSource]:
        return self._sources.get(name)

    def is_internal_rules_source_name(self, name: str) -> bool:
        source = self._sources.get(name)
        return source is not None and source.is_internal

    def __len__(self) -> int:
        return len(self._sources)
