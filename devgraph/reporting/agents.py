"""
Agent Context Generation

Writes one markdown context file per service for coding agents: how to
run it, what it depends on, who consumes it, its routes and env vars.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Union

from devgraph.analysis.impact import get_reverse_dependencies
from devgraph.core.models import Devgraph, ServiceNode
from .inference import InferredData, infer_service_data, landmark_description, merge_commands

logger = logging.getLogger(__name__)

ServicePathOption = Union[str, Path, Callable[[str], Optional[str]], None]

CHECK_COMMANDS = ("lint", "test", "build")


@dataclass
class GenerateAgentsOptions:
    # A base directory holding one sub-directory per service, or a callable
    # mapping a service name to its directory.
    service_path: ServicePathOption = None
    best_effort: bool = False
    services: Optional[Sequence[str]] = None


@dataclass
class GenerateAgentsResult:
    agents: Dict[str, str] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)


def resolve_service_path(service_name: str, option: ServicePathOption) -> Optional[str]:
    if option is None:
        return None
    if callable(option):
        return option(service_name)
    candidate = Path(option) / service_name
    return str(candidate) if candidate.exists() else None


def render_agent_markdown(
    service: ServiceNode,
    consumers: List[str],
    inferred: InferredData,
    service_path: Optional[str] = None,
) -> str:
    commands = merge_commands(service.commands, inferred.commands)

    lines: List[str] = [
        f"# {service.name}",
        "",
        f"**Type:** {service.type}",
    ]
    if service_path:
        lines.append(f"**Path:** `{service_path}`")
    if inferred.package_manager:
        lines.append(f"**Package manager:** {inferred.package_manager}")
    if service.ports:
        lines.append(f"**Ports:** {', '.join(str(p) for p in service.ports)}")
    if service.healthcheck:
        lines.append(f"**Healthcheck:** {service.healthcheck.kind} `{service.healthcheck.target}`")

    # Commands
    lines.extend(["", "## Commands", ""])
    if commands:
        lines.extend(["| Command | Run |", "|---------|-----|"])
        for name, run in commands.items():
            lines.append(f"| {name} | `{run}` |")
    else:
        lines.append("_No commands declared or inferred._")

    # Relationships
    lines.extend(["", "## Dependencies", ""])
    if service.dependencies:
        lines.extend(f"- {dep}" for dep in service.dependencies)
    else:
        lines.append("_None._")

    lines.extend(["", "## Consumers", ""])
    if consumers:
        lines.extend(f"- {name}" for name in consumers)
        lines.extend(["", "Changes to this service's interface affect the services above."])
    else:
        lines.append("_None._")

    routes = service.merged_routes()
    if routes:
        lines.extend(["", "## API routes", ""])
        for route, description in routes.items():
            suffix = f": {description}" if isinstance(description, str) and description else ""
            lines.append(f"- `{route}`{suffix}")

    env = service.merged_env()
    if env:
        lines.extend(["", "## Environment", "", "| Variable | Default |", "|----------|---------|"])
        for key, value in env.items():
            lines.append(f"| {key} | `{value}` |")

    if inferred.landmarks:
        lines.extend(["", "## Landmarks", ""])
        for landmark in inferred.landmarks:
            lines.append(f"- `{landmark}/`: {landmark_description(landmark)}")

    checks = [commands[c] for c in CHECK_COMMANDS if commands.get(c)]
    if checks:
        lines.extend(["", "## Before submitting changes", "", "```sh", " && ".join(checks), "```"])

    return "\n".join(lines) + "\n"


def generate_agents(graph: Devgraph, options: Optional[GenerateAgentsOptions] = None) -> GenerateAgentsResult:
    options = options or GenerateAgentsOptions()
    result = GenerateAgentsResult()
    consumers = get_reverse_dependencies(graph)

    names = list(options.services) if options.services is not None else graph.service_names()
    for name in names:
        service = graph.services.get(name)
        if service is None:
            result.warnings.append(f"Service not found: {name}")
            continue

        service_path = resolve_service_path(name, options.service_path)
        inferred = infer_service_data(service_path) if service_path else InferredData()

        if not (service.commands or inferred.commands) and not options.best_effort:
            result.warnings.append(
                f'Service "{name}" has no commands defined and no package.json found. '
                f"Use --best-effort to generate anyway."
            )
            continue

        result.agents[name] = render_agent_markdown(service, consumers.get(name, []), inferred, service_path)

    logger.info(f"Generated {len(result.agents)} agent file(s), {len(result.warnings)} warning(s)")
    return result


def format_agents_result(result: GenerateAgentsResult) -> str:
    lines: List[str] = []
    if result.agents:
        lines.append(f"Generated {len(result.agents)} agent file(s):")
        lines.extend(f"  - {name}.md" for name in sorted(result.agents))
    else:
        lines.append("No agent files generated.")

    if result.warnings:
        lines.extend(["", "Warnings:"])
        lines.extend(f"  - {warning}" for warning in result.warnings)

    return "\n".join(lines)
