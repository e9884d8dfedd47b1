"""
Markdown block parsing: fenced ``devgraph-*`` blocks to typed records.
"""
from .markdown import CodeNode, extract_code_nodes
from .parser import (
    BLOCK_PREFIX,
    DEFAULT_PATTERNS,
    discover_files,
    parse_code_node,
    parse_code_nodes,
    parse_markdown,
    parse_markdown_files,
)

__all__ = [
    "CodeNode",
    "extract_code_nodes",
    "BLOCK_PREFIX",
    "DEFAULT_PATTERNS",
    "discover_files",
    "parse_code_node",
    "parse_code_nodes",
    "parse_markdown",
    "parse_markdown_files",
]
