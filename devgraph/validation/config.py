"""
Rule Configuration Loader

Reads the optional ``.devgraph/config.yaml`` rule document. A missing file
means "no rules"; an unreadable or malformed one is a CONFIG_ERROR.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Union

import yaml
from pydantic import ValidationError as PydanticValidationError

from devgraph.parsing.schemas import describe_validation_error
from .models import ConfigLoadResult, DevgraphConfig, ValidationError, ValidationErrorCode

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(".devgraph") / "config.yaml"


def default_config_path(root: Union[str, Path]) -> Path:
    return Path(root) / DEFAULT_CONFIG_PATH


def load_config(
    config_path: Optional[Union[str, Path]] = None,
    root: Optional[Union[str, Path]] = None,
) -> ConfigLoadResult:
    """Load and validate a rule config; see module docstring for error policy."""
    if config_path is None:
        if root is None:
            return ConfigLoadResult()
        config_path = default_config_path(root)
    target = Path(config_path)

    if not target.exists():
        logger.debug(f"No rule config at {target}")
        return ConfigLoadResult()

    def _error(message: str) -> ConfigLoadResult:
        logger.warning(f"{message} ({target})")
        return ConfigLoadResult(error=ValidationError(
            code=ValidationErrorCode.CONFIG_ERROR,
            message=message,
            file=str(target),
        ))

    try:
        with open(target, "r", encoding="utf-8") as f:
            parsed = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        return _error(f"Failed to read config: {e}")

    try:
        config = DevgraphConfig.model_validate(parsed if parsed is not None else {})
    except PydanticValidationError as e:
        return _error(f"Invalid config: {describe_validation_error(e)}")

    logger.info(f"Loaded {len(config.rules or [])} rule(s) from {target}")
    return ConfigLoadResult(config=config)
