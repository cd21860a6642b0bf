"""
Settings and configuration management for the rule reconciliation engine.

This module provides centralized configuration loading with validation
using Pydantic models and support for environment variable overrides.
"""

import json
import os
import re
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional, Any

from pydantic import BaseModel, Field, field_validator

from ..reconciliation.models import INTERNAL_RULES_SOURCE_NAME

DEFAULT_CONFIG_PATH = "config/settings.json"


class AppConfig(BaseModel):
    """Application configuration."""
    name: str = Field(default="Rule Reconciliation Engine")
    version: str = Field(default="1.0.0")
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"log_level must be one of {valid_levels}")
        return v.upper()


class LoggingConfig(BaseModel):
    """Log output configuration."""
    log_file: Optional[str] = Field(default="logs/rule_reconciliation.log")
    max_bytes: int = Field(default=10_000_000, ge=1024)
    backup_count: int = Field(default=5, ge=0)


class InternalSourceConfig(BaseModel):
    """Rules managed by the host system itself."""
    enabled: bool = Field(default=True)
    name: str = Field(default=INTERNAL_RULES_SOURCE_NAME)


class RulesSourceConfig(BaseModel):
    """External rules source (a data source with a ruler)."""
    name: str
    type: str = Field(default="prometheus")
    uid: Optional[str] = None
    alerting_enabled: bool = Field(default=True)

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError("Rules source name cannot be empty")
        return v.strip()


class ReconciliationConfig(BaseModel):
    """Reconciliation behaviour."""
    cache_enabled: bool = Field(default=True)
    flatten_internal_namespaces: bool = Field(default=False)


class Settings(BaseModel):
    """Main settings configuration."""
    app: AppConfig = Field(default_factory=AppConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    internal_source: InternalSourceConfig = Field(default_factory=InternalSourceConfig)
    rules_sources: List[RulesSourceConfig] = Field(default_factory=list)
    reconciliation: ReconciliationConfig = Field(default_factory=ReconciliationConfig)

    @field_validator('rules_sources')
    @classmethod
    def validate_unique_names(cls, v):
        names = [source.name for source in v]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(f"Duplicate rules source names: {duplicates}")
        return v

    def get_logging_config(self) -> Dict[str, Any]:
        """Get keyword arguments for setup_logging."""
        return {
            'log_level': self.app.log_level,
            'log_file': self.logging.log_file,
            'max_bytes': self.logging.max_bytes,
            'backup_count': self.logging.backup_count
        }


def load_json_config(file_path: Path) -> Dict:
    """Load configuration from JSON file with environment variable substitution."""
    if not file_path.exists():
        return {}

    with open(file_path, 'r') as f:
        content = f.read()

    # Replace environment variables in format ${VAR_NAME}
    def replace_env_var(match):
        var_name = match.group(1)
        return os.getenv(var_name, match.group(0))

    content = re.sub(r'\$\{([^}]+)\}', replace_env_var, content)

    try:
        return json.loads(content)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in {file_path}: {e}")


@lru_cache()
def get_settings() -> Settings:
    """Get application settings (cached)."""
    settings_path = Path(os.getenv("RULES_RECONCILIATION_CONFIG", DEFAULT_CONFIG_PATH))
    config_data = load_json_config(settings_path)

    settings = Settings(**config_data)

    if os.getenv("DEBUG"):
        settings.app.debug = os.getenv("DEBUG").lower() in ("true", "1", "yes")

    if os.getenv("LOG_LEVEL"):
        settings.app.log_level = os.getenv("LOG_LEVEL").upper()

    return settings


def reload_settings() -> Settings:
    """Force reload of settings (clears cache)."""
    get_settings.cache_clear()
    return get_settings()
