"""
Block Parser

Turns fenced ``devgraph-*`` code blocks into typed DevgraphBlock records.

Pipeline per file:
    markdown text -> CodeNode list (markdown-it-py)
                  -> YAML decode (PyYAML)
                  -> shape check (pydantic schemas)
                  -> DevgraphBlock | ParseError

Errors are collected, never raised: a broken block or an unreadable file
does not stop the others from being processed.
"""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple, Union

import yaml
from pydantic import ValidationError

from devgraph.core.models import (
    BlockType,
    DevgraphBlock,
    ParseError,
    ParseErrorCode,
    ParseResult,
)
from .markdown import CodeNode, extract_code_nodes
from .schemas import SCHEMAS, describe_validation_error

logger = logging.getLogger(__name__)

BLOCK_PREFIX = "devgraph-"
DEFAULT_PATTERNS = ("**/*.md",)
IGNORED_DIRS = frozenset({"node_modules", ".git", ".devgraph"})
MAX_READ_WORKERS = 8

_GLOB_CHARS = set("*?[")


# ---------------------------------------------------------------------------
# Single node / single document
# ---------------------------------------------------------------------------

def parse_code_node(node: CodeNode, file: str) -> Union[DevgraphBlock, ParseError, None]:
    """Parse one code node. Returns None for fences that are not devgraph blocks."""
    if not node.lang or not node.lang.startswith(BLOCK_PREFIX):
        return None

    type_name = node.lang[len(BLOCK_PREFIX):]
    try:
        block_type = BlockType.from_string(type_name)
    except ValueError as e:
        return ParseError(str(e), file, node.line, ParseErrorCode.UNKNOWN_BLOCK_TYPE)

    try:
        raw = yaml.safe_load(node.value)
    except yaml.YAMLError as e:
        return ParseError(
            f"Failed to parse YAML in {node.lang} block: {e}",
            file,
            node.line,
            ParseErrorCode.YAML_PARSE_ERROR,
        )

    try:
        payload = SCHEMAS[block_type.value].model_validate(raw)
    except ValidationError as e:
        return ParseError(
            f"Invalid {node.lang} block: {describe_validation_error(e)}",
            file,
            node.line,
            ParseErrorCode.SCHEMA_VALIDATION_ERROR,
        )

    return DevgraphBlock(type=block_type, file=file, data=payload.to_model(), line=node.line)


def parse_code_nodes(nodes: Iterable[CodeNode], file: str) -> ParseResult:
    result = ParseResult()
    for node in nodes:
        parsed = parse_code_node(node, file)
        if parsed is None:
            continue
        if isinstance(parsed, ParseError):
            logger.debug(f"Parse error at {parsed.location}: {parsed.message}")
            result.errors.append(parsed)
        else:
            result.blocks.append(parsed)
    return result


def parse_markdown(text: str, file: str) -> ParseResult:
    return parse_code_nodes(extract_code_nodes(text), file)


# ---------------------------------------------------------------------------
# File discovery and multi-file parsing
# ---------------------------------------------------------------------------

def _display_path(path: Path, root: Path) -> str:
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return path.as_posix()


def _is_ignored(path: Path, root: Path) -> bool:
    try:
        parts = path.relative_to(root).parts
    except ValueError:
        parts = path.parts
    return any(part in IGNORED_DIRS for part in parts[:-1])


def discover_files(patterns: Sequence[str], root: Path) -> Tuple[List[Path], List[ParseError]]:
    """
    Resolve glob patterns and literal paths against ``root``.

    A literal path that does not exist is reported as a FILE_READ_ERROR;
    a glob matching nothing is not an error.
    """
    root = Path(root)
    found = set()
    errors: List[ParseError] = []

    for pattern in patterns:
        candidate = Path(pattern)
        if not candidate.is_absolute():
            candidate = root / pattern
        if not _GLOB_CHARS.intersection(pattern):
            if candidate.is_file():
                found.add(candidate.resolve())
            else:
                errors.append(ParseError(
                    f"File not found: {pattern}",
                    _display_path(candidate, root),
                    code=ParseErrorCode.FILE_READ_ERROR,
                ))
            continue
        if Path(pattern).is_absolute():
            base, relative = Path(candidate.anchor), str(candidate.relative_to(candidate.anchor))
        else:
            base, relative = root, pattern
        for match in base.glob(relative):
            if match.is_file() and not _is_ignored(match, root):
                found.add(match.resolve())

    resolved_root = root.resolve()
    files = sorted(found, key=lambda p: _display_path(p, resolved_root))
    return files, errors


def _read(path: Path) -> Tuple[Path, Optional[str], Optional[str]]:
    try:
        return path, path.read_text(encoding="utf-8-sig"), None
    except (OSError, UnicodeDecodeError) as e:
        return path, None, str(e)


def parse_markdown_files(
    patterns: Optional[Sequence[str]] = None,
    root: Union[str, Path] = ".",
) -> ParseResult:
    """
    Parse every markdown file matched by ``patterns`` under ``root``.

    Files are read concurrently; results are merged in sorted file order,
    then document order within each file. A literal path that could not be
    found takes its place in that order too.
    """
    root = Path(root).resolve()
    files, discovery_errors = discover_files(list(patterns or DEFAULT_PATTERNS), root)
    logger.info(f"Parsing {len(files)} markdown file(s) under {root}")

    per_file: List[Tuple[str, ParseResult]] = [
        (error.file, ParseResult(errors=[error])) for error in discovery_errors
    ]

    if files:
        with ThreadPoolExecutor(max_workers=min(MAX_READ_WORKERS, len(files))) as executor:
            contents = list(executor.map(_read, files))

        for path, text, read_error in contents:
            display = _display_path(path, root)
            if read_error is not None:
                logger.warning(f"Could not read {display}: {read_error}")
                per_file.append((display, ParseResult(errors=[ParseError(
                    f"Failed to read file: {read_error}",
                    display,
                    code=ParseErrorCode.FILE_READ_ERROR,
                )])))
                continue
            per_file.append((display, parse_markdown(text, display)))

    result = ParseResult()
    for _, file_result in sorted(per_file, key=lambda item: item[0]):
        result.extend(file_result)

    logger.info(f"Parsed {len(result.blocks)} block(s) with {len(result.errors)} error(s)")
    return result
