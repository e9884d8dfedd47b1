"""
Run Plan

Orders a service and everything it transitively depends on so that each
service starts after all of its dependencies.
"""
from __future__ import annotations

import logging
from collections import deque
from typing import Deque, Dict, List

from devgraph.core.models import Devgraph
from devgraph.core.traversal import walk_closure
from .models import (
    DependencyCycle,
    MissingDependency,
    RunPlan,
    RunPlanResult,
    RunPlanStep,
    ServiceNotFound,
)

logger = logging.getLogger(__name__)


def _dependencies(graph: Devgraph, name: str) -> List[str]:
    service = graph.services.get(name)
    return service.dependencies if service else []


def topological_order(graph: Devgraph, members: List[str]) -> List[str]:
    """
    Kahn's algorithm restricted to ``members``.

    Edges run from a dependency to its dependent. Zero in-degree nodes are
    dequeued FIFO, seeded in ``members`` order, so ties resolve the same
    way on every run. Members left over (only possible on a cycle) are
    not returned.
    """
    in_closure = set(members)
    in_degree: Dict[str, int] = {name: 0 for name in members}
    dependents: Dict[str, List[str]] = {name: [] for name in members}

    for name in members:
        for dep in dict.fromkeys(_dependencies(graph, name)):
            if dep in in_closure:
                in_degree[name] += 1
                dependents[dep].append(name)

    queue: Deque[str] = deque(name for name in members if in_degree[name] == 0)
    order: List[str] = []
    while queue:
        name = queue.popleft()
        order.append(name)
        for dependent in dependents[name]:
            in_degree[dependent] -= 1
            if in_degree[dependent] == 0:
                queue.append(dependent)
    return order


def _build_step(graph: Devgraph, name: str) -> RunPlanStep:
    service = graph.services[name]
    return RunPlanStep(
        service=name,
        type=service.type,
        command=service.command("dev"),
        env=service.merged_env(),
        ports=list(service.ports or []),
        healthcheck=service.healthcheck,
        depends=service.dependencies,
    )


def get_run_plan(graph: Devgraph, service_name: str) -> RunPlanResult:
    if not graph.has_service(service_name):
        return ServiceNotFound(service=service_name, available=graph.service_names())

    closure = walk_closure(service_name, lambda name: _dependencies(graph, name))
    if closure.cycle:
        logger.info(f"Run plan for '{service_name}' hit a cycle: {' → '.join(closure.cycle)}")
        return DependencyCycle(service=service_name, path=closure.cycle)

    for name in closure.order:
        if not graph.has_service(name):
            dependent = closure.parents[name] or service_name
            return MissingDependency(service=service_name, dependent=dependent, missing=name)

    order = topological_order(graph, closure.order)
    steps = [_build_step(graph, name) for name in order]
    logger.debug(f"Run plan for '{service_name}': {[s.service for s in steps]}")
    return RunPlan(service=service_name, steps=steps)
