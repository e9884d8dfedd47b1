"""
Validation Error and Result Models
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class ValidationErrorCode(str, Enum):
    UNKNOWN_BLOCK_TYPE = "UNKNOWN_BLOCK_TYPE"
    YAML_PARSE_ERROR = "YAML_PARSE_ERROR"
    SCHEMA_VALIDATION_ERROR = "SCHEMA_VALIDATION_ERROR"
    FILE_READ_ERROR = "FILE_READ_ERROR"
    MISSING_DEPENDENCY = "MISSING_DEPENDENCY"
    DUPLICATE_SERVICE = "DUPLICATE_SERVICE"
    ORPHAN_API_BLOCK = "ORPHAN_API_BLOCK"
    ORPHAN_ENV_BLOCK = "ORPHAN_ENV_BLOCK"
    DEPENDENCY_CYCLE = "DEPENDENCY_CYCLE"
    RULE_VIOLATION = "RULE_VIOLATION"
    CONFIG_ERROR = "CONFIG_ERROR"

    @property
    def title(self) -> str:
        return _CODE_TITLES[self]


_CODE_TITLES = {
    ValidationErrorCode.UNKNOWN_BLOCK_TYPE: "Unknown block type",
    ValidationErrorCode.YAML_PARSE_ERROR: "YAML parse error",
    ValidationErrorCode.SCHEMA_VALIDATION_ERROR: "Schema validation error",
    ValidationErrorCode.FILE_READ_ERROR: "File read error",
    ValidationErrorCode.MISSING_DEPENDENCY: "Missing dependency",
    ValidationErrorCode.DUPLICATE_SERVICE: "Duplicate service",
    ValidationErrorCode.ORPHAN_API_BLOCK: "Orphan API block",
    ValidationErrorCode.ORPHAN_ENV_BLOCK: "Orphan env block",
    ValidationErrorCode.DEPENDENCY_CYCLE: "Dependency cycle",
    ValidationErrorCode.RULE_VIOLATION: "Rule violation",
    ValidationErrorCode.CONFIG_ERROR: "Config error",
}


class ValidationLevel(str, Enum):
    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True)
class ValidationError:
    """A structural or semantic problem found in a parsed graph."""
    code: ValidationErrorCode
    message: str
    level: ValidationLevel = ValidationLevel.ERROR
    file: Optional[str] = None
    line: Optional[int] = None
    service: Optional[str] = None

    @property
    def location(self) -> Optional[str]:
        if self.file is None:
            return None
        return f"{self.file}:{self.line}" if self.line else self.file

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "level": ValidationLevel(self.level).value,
            "code": ValidationErrorCode(self.code).value,
            "message": self.message,
        }
        for key in ("file", "line", "service"):
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        return result


@dataclass
class ValidationResult:
    errors: List[ValidationError] = field(default_factory=list)
    warnings: List[ValidationError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def codes(self) -> List[ValidationErrorCode]:
        return [e.code for e in self.errors]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ok": self.ok,
            "errors": [e.to_dict() for e in self.errors],
            "warnings": [w.to_dict() for w in self.warnings],
        }


# ---------------------------------------------------------------------------
# Rule configuration
# ---------------------------------------------------------------------------

class DependencyRule(BaseModel):
    """Forbids a direct ``from -> to`` edge in the depends relation."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str = Field(min_length=1)
    kind: Literal["denyDependency"]
    from_service: str = Field(alias="from", min_length=1)
    to_service: str = Field(alias="to", min_length=1)


class DevgraphConfig(BaseModel):
    model_config = ConfigDict(extra="ignore")

    rules: Optional[List[DependencyRule]] = None


@dataclass
class ConfigLoadResult:
    config: Optional[DevgraphConfig] = None
    error: Optional[ValidationError] = None


@dataclass
class ValidateOptions:
    """
    Where to find rule configuration.

    ``config`` takes precedence over ``config_path``; with neither set the
    default ``<root>/.devgraph/config.yaml`` is tried when ``root`` is given.
    """
    config_path: Optional[Path] = None
    root: Optional[Path] = None
    config: Optional[DevgraphConfig] = None
