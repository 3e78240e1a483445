"""Configuration for the WiFi / CSMA scenario"""

from .config_loader import (
    ConfigurationError,
    ScenarioConfig,
    apply_overrides,
    check_config,
    config_from_dict,
    default_config,
    load_config
)

__all__ = [
    'ConfigurationError',
    'ScenarioConfig',
    'apply_overrides',
    'check_config',
    'config_from_dict',
    'default_config',
    'load_config'
]
