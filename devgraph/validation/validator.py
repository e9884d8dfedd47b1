"""
Graph Validator

Structural integrity checks over parsed blocks and the built graph:

    DUPLICATE_SERVICE   a service name declared by more than one block
    MISSING_DEPENDENCY  a ``depends`` entry naming no declared service
    ORPHAN_API_BLOCK    an api block whose service is not declared
    ORPHAN_ENV_BLOCK    an env block whose service is not declared
    DEPENDENCY_CYCLE    the first cycle in ``depends`` among declared services
    RULE_VIOLATION      a direct edge forbidden by a denyDependency rule

Every check runs; errors accumulate into one report.
"""
from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Sequence, Set

from devgraph.core.models import BlockType, Devgraph, DevgraphBlock, ParseError, ParseErrorCode
from devgraph.core.traversal import walk_closure
from .config import load_config
from .models import (
    DevgraphConfig,
    ValidateOptions,
    ValidationError,
    ValidationErrorCode,
    ValidationResult,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Consistency checks
# ---------------------------------------------------------------------------

def _service_blocks(blocks: Iterable[DevgraphBlock]) -> List[DevgraphBlock]:
    return [b for b in blocks if b.type == BlockType.SERVICE]


def check_duplicate_services(blocks: Sequence[DevgraphBlock]) -> List[ValidationError]:
    definitions: Dict[str, List[DevgraphBlock]] = {}
    for block in _service_blocks(blocks):
        definitions.setdefault(block.data.name, []).append(block)

    errors = []
    for name, declared in definitions.items():
        if len(declared) < 2:
            continue
        locations = ", ".join(b.location for b in declared)
        errors.append(ValidationError(
            code=ValidationErrorCode.DUPLICATE_SERVICE,
            message=f'Duplicate service name "{name}" defined in: {locations}',
            file=declared[0].file,
            line=declared[0].line,
            service=name,
        ))
    return errors


def check_missing_dependencies(blocks: Sequence[DevgraphBlock], graph: Devgraph) -> List[ValidationError]:
    errors = []
    for block in _service_blocks(blocks):
        service = block.data
        for dep in service.depends or []:
            if dep not in graph.services:
                errors.append(ValidationError(
                    code=ValidationErrorCode.MISSING_DEPENDENCY,
                    message=f'Service "{service.name}" depends on "{dep}" which is not defined',
                    file=block.file,
                    line=block.line,
                    service=service.name,
                ))
    return errors


def check_orphan_blocks(blocks: Sequence[DevgraphBlock], graph: Devgraph) -> List[ValidationError]:
    errors = []
    for block in blocks:
        if block.type == BlockType.SERVICE or block.data.service in graph.services:
            continue
        if block.type == BlockType.API:
            code, label = ValidationErrorCode.ORPHAN_API_BLOCK, "API"
        else:
            code, label = ValidationErrorCode.ORPHAN_ENV_BLOCK, "Env"
        errors.append(ValidationError(
            code=code,
            message=f'{label} block references unknown service "{block.data.service}"',
            file=block.file,
            line=block.line,
            service=block.data.service,
        ))
    return errors


def find_dependency_cycle(graph: Devgraph) -> Optional[List[str]]:
    """
    Return the first cycle in the depends relation, or None.

    Roots are tried in declaration order; dependencies on undeclared
    services are not followed.
    """
    def declared_deps(name: str) -> List[str]:
        return [d for d in graph.services[name].dependencies if d in graph.services]

    visited: Set[str] = set()
    for name in graph.services:
        if name in visited:
            continue
        closure = walk_closure(name, declared_deps, visited)
        if closure.cycle:
            return closure.cycle
    return None


def check_cycles(graph: Devgraph) -> List[ValidationError]:
    cycle = find_dependency_cycle(graph)
    if cycle is None:
        return []
    return [ValidationError(
        code=ValidationErrorCode.DEPENDENCY_CYCLE,
        message=f"Dependency cycle detected: {' → '.join(cycle)}",
        service=cycle[0],
    )]


def validate_consistency(blocks: Sequence[DevgraphBlock], graph: Devgraph) -> List[ValidationError]:
    blocks = list(blocks)
    errors: List[ValidationError] = []
    errors.extend(check_duplicate_services(blocks))
    errors.extend(check_missing_dependencies(blocks, graph))
    errors.extend(check_orphan_blocks(blocks, graph))
    errors.extend(check_cycles(graph))
    return errors


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------

def validate_rules(
    graph: Devgraph,
    config: DevgraphConfig,
    blocks: Sequence[DevgraphBlock],
) -> List[ValidationError]:
    """Check denyDependency rules against direct depends edges only."""
    errors: List[ValidationError] = []
    if not config.rules:
        return errors

    first_declaration: Dict[str, DevgraphBlock] = {}
    for block in _service_blocks(blocks):
        first_declaration.setdefault(block.data.name, block)

    for rule in config.rules:
        if rule.kind != "denyDependency":
            continue
        source = graph.services.get(rule.from_service)
        if source is None or rule.to_service not in source.dependencies:
            continue
        location = first_declaration.get(rule.from_service)
        errors.append(ValidationError(
            code=ValidationErrorCode.RULE_VIOLATION,
            message=f'Rule "{rule.name}": {rule.from_service} may not depend on {rule.to_service}',
            file=location.file if location else None,
            line=location.line if location else None,
            service=rule.from_service,
        ))
    return errors


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def parse_error_to_validation_error(error: ParseError) -> ValidationError:
    return ValidationError(
        code=ValidationErrorCode(ParseErrorCode(error.code).value),
        message=error.message,
        file=error.file,
        line=error.line,
    )


def validate(
    blocks: Sequence[DevgraphBlock],
    graph: Devgraph,
    parse_errors: Sequence[ParseError] = (),
    options: Optional[ValidateOptions] = None,
) -> ValidationResult:
    """Combine parse errors, consistency checks and config-driven rules."""
    options = options or ValidateOptions()
    result = ValidationResult()

    result.errors.extend(parse_error_to_validation_error(e) for e in parse_errors)
    result.errors.extend(validate_consistency(blocks, graph))

    config = options.config
    if config is None:
        loaded = load_config(options.config_path, options.root)
        if loaded.error is not None:
            result.errors.append(loaded.error)
        config = loaded.config

    if config is not None:
        result.errors.extend(validate_rules(graph, config, blocks))

    if result.ok:
        logger.info(f"Validation passed for {len(graph.services)} services")
    else:
        logger.info(f"Validation found {len(result.errors)} error(s)")
    return result
