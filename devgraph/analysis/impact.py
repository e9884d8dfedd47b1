"""
Impact Analysis

Blast radius of a change: who consumes a service directly, who is reached
through those consumers, and how many API routes sit in the affected set.
"""
from __future__ import annotations

import logging
from typing import Dict, List

from devgraph.core.models import Devgraph
from devgraph.core.traversal import walk_closure
from .models import DependencyCycle, ImpactAnalysis, ImpactAnalysisResult, ServiceNotFound

logger = logging.getLogger(__name__)


def get_reverse_dependencies(graph: Devgraph) -> Dict[str, List[str]]:
    """
    Map every declared service to the declared services that depend on it.

    Consumers are listed in declaration order, each at most once.
    Dependencies on undeclared services are ignored.
    """
    reverse: Dict[str, List[str]] = {name: [] for name in graph.services}
    for name, service in graph.services.items():
        for dep in service.dependencies:
            consumers = reverse.get(dep)
            if consumers is not None and name not in consumers:
                consumers.append(name)
    return reverse


def get_impact_analysis(graph: Devgraph, service_name: str) -> ImpactAnalysisResult:
    if not graph.has_service(service_name):
        return ServiceNotFound(service=service_name, available=graph.service_names())

    reverse = get_reverse_dependencies(graph)
    direct = list(reverse[service_name])

    closure = walk_closure(service_name, lambda name: reverse.get(name, []))
    if closure.cycle:
        logger.info(f"Impact analysis for '{service_name}' hit a cycle: {' → '.join(closure.cycle)}")
        return DependencyCycle(service=service_name, path=closure.cycle)

    direct_set = set(direct)
    transitive = [name for name in closure.members(include_root=False) if name not in direct_set]

    affected = direct + transitive
    total_routes = sum(graph.services[name].route_count() for name in affected)

    logger.debug(
        f"Impact of '{service_name}': {len(direct)} direct, {len(transitive)} transitive, "
        f"{total_routes} routes"
    )
    return ImpactAnalysis(
        service=service_name,
        direct_consumers=direct,
        transitive_consumers=transitive,
        total_affected_count=len(affected),
        total_api_routes=total_routes,
    )
