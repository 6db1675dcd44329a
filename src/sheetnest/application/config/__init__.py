"""Configuration schema and loading system for sheet pricing.

This package provides JSON-based configuration loading and validation for
the nesting calculator. It includes Pydantic models for schema validation,
a loader with comprehensive error handling, adapters to domain objects,
CLI override merging, and pricing advisory checks.

Example:
    >>> from pathlib import Path
    >>> from sheetnest.application.config import load_config, ConfigError
    >>>
    >>> try:
    ...     config = load_config(Path("pricing.json"))
    ...     print(f"Sheet: {config.sheet.width}x{config.sheet.height}")
    ... except ConfigError as e:
    ...     print(f"Error: {e}")
"""

from sheetnest.application.config.adapter import (
    config_to_calculator,
    config_to_charging_policy,
    config_to_option_rules,
    config_to_sheet_spec,
    config_to_volume_pricing,
)
from sheetnest.application.config.loader import (
    ConfigError,
    load_config,
    load_config_from_dict,
)
from sheetnest.application.config.merger import merge_config_with_cli
from sheetnest.application.config.schema import (
    SUPPORTED_VERSIONS,
    OptionRuleConfig,
    OversizeRuleConfig,
    PricingConfiguration,
    SheetChargingConfig,
    SheetConfig,
    VolumePricingConfig,
    VolumePricingTierConfig,
)
from sheetnest.application.config.validator import (
    ValidationError,
    ValidationResult,
    ValidationWarning,
    check_charging_policy,
    check_option_rules,
    check_volume_pricing,
    validate_config,
)

__all__ = [
    # Schema models
    "OptionRuleConfig",
    "OversizeRuleConfig",
    "PricingConfiguration",
    "SUPPORTED_VERSIONS",
    "SheetChargingConfig",
    "SheetConfig",
    "VolumePricingConfig",
    "VolumePricingTierConfig",
    # Loader
    "ConfigError",
    "load_config",
    "load_config_from_dict",
    # Merger
    "merge_config_with_cli",
    # Adapters
    "config_to_calculator",
    "config_to_charging_policy",
    "config_to_option_rules",
    "config_to_sheet_spec",
    "config_to_volume_pricing",
    # Validation
    "ValidationError",
    "ValidationResult",
    "ValidationWarning",
    "check_charging_policy",
    "check_option_rules",
    "check_volume_pricing",
    "validate_config",
]
