"""
Graph validation: consistency checks, dependency rules and reporting.
"""
from .models import (
    ValidationErrorCode,
    ValidationLevel,
    ValidationError,
    ValidationResult,
    DependencyRule,
    DevgraphConfig,
    ConfigLoadResult,
    ValidateOptions,
)
from .config import DEFAULT_CONFIG_PATH, default_config_path, load_config
from .validator import (
    check_cycles,
    check_duplicate_services,
    check_missing_dependencies,
    check_orphan_blocks,
    find_dependency_cycle,
    validate_consistency,
    validate_rules,
    validate,
)
from .display import format_validation_result, format_validation_result_json

__all__ = [
    "ValidationErrorCode",
    "ValidationLevel",
    "ValidationError",
    "ValidationResult",
    "DependencyRule",
    "DevgraphConfig",
    "ConfigLoadResult",
    "ValidateOptions",
    "DEFAULT_CONFIG_PATH",
    "default_config_path",
    "load_config",
    "check_cycles",
    "check_duplicate_services",
    "check_missing_dependencies",
    "check_orphan_blocks",
    "find_dependency_cycle",
    "validate_consistency",
    "validate_rules",
    "validate",
    "format_validation_result",
    "format_validation_result_json",
]
