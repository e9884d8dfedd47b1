"""
Graph Summary

Human-readable ``summary.md`` for a built graph.
"""
from __future__ import annotations

from typing import List

from devgraph.analysis.impact import get_reverse_dependencies
from devgraph.core.models import Devgraph


def generate_summary(graph: Devgraph) -> str:
    consumers = get_reverse_dependencies(graph)
    route_total = sum(s.route_count() for s in graph.services.values())

    lines: List[str] = [
        "# DevGraph Summary",
        "",
        f"**Services:** {len(graph.services)}",
        f"**API routes:** {route_total}",
        "",
        "## Services",
        "",
    ]

    if not graph.services:
        lines.append("_No services declared._")
        return "\n".join(lines) + "\n"

    for name, service in graph.services.items():
        lines.append(f"- {name} ({service.type})")
        if service.dependencies:
            lines.append(f"  - depends on: {', '.join(service.dependencies)}")
        if consumers.get(name):
            lines.append(f"  - used by: {', '.join(consumers[name])}")
        if service.ports:
            lines.append(f"  - ports: {', '.join(str(p) for p in service.ports)}")
        if service.healthcheck:
            lines.append(f"  - healthcheck: {service.healthcheck.kind} {service.healthcheck.target}")
        if service.apis:
            lines.append(f"  - routes: {service.route_count()}")
        env = service.merged_env()
        if env:
            lines.append(f"  - env vars: {len(env)}")

    # Commands
    with_commands = [(n, s) for n, s in graph.services.items() if s.commands]
    if with_commands:
        lines.extend([
            "",
            "## Commands",
            "",
            "| Service | Command | Run |",
            "|---------|---------|-----|",
        ])
        for name, service in with_commands:
            for cmd, value in service.commands.items():
                lines.append(f"| {name} | {cmd} | `{value}` |")

    return "\n".join(lines) + "\n"
