"""
Graph Export and Projection

Serialises a Devgraph to the ``graph.json`` document, reads it back, and
projects it onto a NetworkX directed graph for renderers and path queries.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Union

import networkx as nx

from .models import Devgraph

logger = logging.getLogger(__name__)


class GraphLoadError(Exception):
    """A graph.json document could not be read or decoded."""

    def __init__(self, path: Union[str, Path], reason: str):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Failed to read graph.json at {self.path}: {reason}")


def graph_to_json(graph: Devgraph, indent: int = 2) -> str:
    """YAML scalars such as dates in route descriptions are written as strings."""
    return json.dumps(graph.to_dict(), indent=indent, default=str)


def graph_from_dict(data: Dict[str, Any]) -> Devgraph:
    if not isinstance(data, dict) or not isinstance(data.get("services", {}), dict):
        raise ValueError("graph document must be an object with a 'services' mapping")
    return Devgraph.from_dict(data)


def load_graph(path: Union[str, Path]) -> Devgraph:
    """Read a graph.json document written by ``devgraph build``."""
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        graph = graph_from_dict(data)
    except (OSError, json.JSONDecodeError, ValueError, KeyError, TypeError) as e:
        raise GraphLoadError(path, str(e)) from e
    logger.info(f"Loaded graph with {len(graph.services)} services from {path}")
    return graph


def to_networkx(graph: Devgraph) -> nx.DiGraph:
    """
    Project the graph onto a DiGraph.

    Edges run from dependent to dependency. Names referenced in ``depends``
    but never declared become nodes flagged ``missing=True``.
    """
    g = nx.DiGraph()
    for name, service in graph.services.items():
        g.add_node(
            name,
            type=service.type,
            missing=False,
            routes=service.route_count(),
        )
    for name, service in graph.services.items():
        for dep in service.dependencies:
            if dep not in g:
                g.add_node(dep, type=None, missing=True, routes=0)
            g.add_edge(name, dep)
    return g
