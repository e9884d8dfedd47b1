"""
Coordination Plan

Turns an impact analysis into one task per consumer: how the consumer is
reached from the changed service, which commands to run in it, and what
to grep for when looking for the integration points.
"""
from __future__ import annotations

import logging
import re
from typing import Dict, List, Optional

import networkx as nx

from devgraph.core.models import Devgraph
from .impact import get_impact_analysis, get_reverse_dependencies
from .models import CoordinationPlan, CoordinationResult, CoordinationTask, ImpactAnalysis, Relationship

logger = logging.getLogger(__name__)

TASK_COMMANDS = ("dev", "test", "build")
ENV_SUFFIXES = ("_URL", "_HOST", "_SERVICE_URL")


def env_style_name(service_name: str) -> str:
    """``user-service`` -> ``USER_SERVICE``."""
    return re.sub(r"[^A-Za-z0-9]+", "_", service_name).strip("_").upper()


def build_search_terms(graph: Devgraph, service_name: str) -> List[str]:
    terms: List[str] = [service_name]
    prefix = env_style_name(service_name)
    if prefix:
        terms.extend(prefix + suffix for suffix in ENV_SUFFIXES)
    terms.extend(graph.services[service_name].merged_env().keys())
    return list(dict.fromkeys(terms))


def _consumer_graph(reverse: Dict[str, List[str]]) -> nx.DiGraph:
    # Edges run from a service to each of its consumers.
    g = nx.DiGraph()
    for name, consumers in reverse.items():
        g.add_node(name)
        for consumer in consumers:
            g.add_edge(name, consumer)
    return g


def _commands(graph: Devgraph, name: str) -> Dict[str, Optional[str]]:
    service = graph.services[name]
    return {cmd: service.command(cmd) for cmd in TASK_COMMANDS}


def get_coordination_plan(graph: Devgraph, service_name: str) -> CoordinationResult:
    impact = get_impact_analysis(graph, service_name)
    if not isinstance(impact, ImpactAnalysis):
        return impact

    search_terms = build_search_terms(graph, service_name)
    tasks: List[CoordinationTask] = []

    for consumer in impact.direct_consumers:
        tasks.append(CoordinationTask(
            consumer=consumer,
            relationship=Relationship.DIRECT,
            dependency_path=[service_name, consumer],
            commands=_commands(graph, consumer),
            search_terms=list(search_terms),
        ))

    if impact.transitive_consumers:
        consumers = _consumer_graph(get_reverse_dependencies(graph))
        for consumer in impact.transitive_consumers:
            path = nx.shortest_path(consumers, service_name, consumer)
            tasks.append(CoordinationTask(
                consumer=consumer,
                relationship=Relationship.TRANSITIVE,
                dependency_path=list(path),
                commands=_commands(graph, consumer),
                search_terms=list(search_terms),
            ))

    logger.debug(f"Coordination plan for '{service_name}': {len(tasks)} task(s)")
    return CoordinationPlan(
        service=service_name,
        tasks=tasks,
        search_terms=search_terms,
        impact=impact,
    )
