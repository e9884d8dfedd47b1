"""
DevGraph

Dependency graph of services, APIs and environment variables extracted
from ``devgraph-*`` fenced blocks in markdown documentation.
"""

__version__ = "0.1.0"

from .core import Devgraph, DevgraphBlock, ParseError, ParseResult, build_graph, load_graph
from .parsing import parse_markdown, parse_markdown_files
from .validation import ValidateOptions, ValidationResult, validate
from .analysis import get_coordination_plan, get_impact_analysis, get_reverse_dependencies, get_run_plan

__all__ = [
    "__version__",
    "Devgraph",
    "DevgraphBlock",
    "ParseError",
    "ParseResult",
    "build_graph",
    "load_graph",
    "parse_markdown",
    "parse_markdown_files",
    "ValidateOptions",
    "ValidationResult",
    "validate",
    "get_coordination_plan",
    "get_impact_analysis",
    "get_reverse_dependencies",
    "get_run_plan",
]
