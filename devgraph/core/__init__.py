"""
Core graph model, builder and traversal helpers.
"""
from .models import (
    BlockType,
    ParseErrorCode,
    Healthcheck,
    ServiceBlock,
    ApiBlock,
    EnvBlock,
    DevgraphBlock,
    ParseError,
    ParseResult,
    ServiceNode,
    Devgraph,
)
from .builder import build_graph
from .traversal import Closure, walk_closure
from .graph_exporter import (
    GraphLoadError,
    graph_to_json,
    graph_from_dict,
    load_graph,
    to_networkx,
)

__all__ = [
    "BlockType",
    "ParseErrorCode",
    "Healthcheck",
    "ServiceBlock",
    "ApiBlock",
    "EnvBlock",
    "DevgraphBlock",
    "ParseError",
    "ParseResult",
    "ServiceNode",
    "Devgraph",
    "build_graph",
    "Closure",
    "walk_closure",
    "GraphLoadError",
    "graph_to_json",
    "graph_from_dict",
    "load_graph",
    "to_networkx",
]
