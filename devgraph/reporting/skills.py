"""
Agent Skills Generation

Writes the graph out as Agent Skills: one ``querying-architecture`` skill
describing the whole system, and one ``<service>-context`` skill per
service. Each skill is a directory holding a ``SKILL.md`` with YAML
frontmatter plus optional ``references/`` documents.

Layout::

    querying-architecture/SKILL.md
    querying-architecture/references/ARCHITECTURE.md
    querying-architecture/references/SERVICES.md
    services/<name>-context/SKILL.md
    services/<name>-context/references/ROUTES.md   (services with routes)
"""
from __future__ import annotations

import logging
import re
import textwrap
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from devgraph.analysis.impact import get_reverse_dependencies
from devgraph.core.models import Devgraph, ServiceNode
from .agents import CHECK_COMMANDS, ServicePathOption, resolve_service_path
from .inference import InferredData, infer_service_data, landmark_description, merge_commands
from .mermaid import generate_mermaid

logger = logging.getLogger(__name__)

OVERVIEW_SKILL = "querying-architecture"
MAX_DESCRIPTION_LENGTH = 1024
FRONTMATTER_WIDTH = 78


@dataclass
class GenerateSkillsOptions:
    service_path: ServicePathOption = None
    best_effort: bool = False
    services: Optional[Sequence[str]] = None


@dataclass
class SkillFile:
    relative_path: str
    content: str


@dataclass
class GenerateSkillsResult:
    files: List[SkillFile] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def file(self, relative_path: str) -> Optional[SkillFile]:
        for skill_file in self.files:
            if skill_file.relative_path == relative_path:
                return skill_file
        return None


# ---------------------------------------------------------------------------
# Frontmatter helpers
# ---------------------------------------------------------------------------

def skill_name(text: str) -> str:
    """Lowercase, hyphen-separated skill name."""
    name = re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-")
    return name or "service"


def service_skill_name(service_name: str) -> str:
    return f"{skill_name(service_name)}-context"


def _truncate(text: str, limit: int = MAX_DESCRIPTION_LENGTH) -> str:
    if len(text) < limit:
        return text
    return text[: limit - 4].rsplit(" ", 1)[0] + " ..."


def render_frontmatter(name: str, description: str) -> List[str]:
    lines = ["---", f"name: {name}", "description: >"]
    lines.extend(f"  {line}" for line in textwrap.wrap(_truncate(description), FRONTMATTER_WIDTH - 2))
    lines.append("---")
    return lines


def _route_parts(route: str):
    parts = route.split(None, 1)
    if len(parts) == 2:
        return parts[0].upper(), parts[1]
    return "", route


def _route_description(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, dict) and isinstance(value.get("description"), str):
        return value["description"]
    return ""


# ---------------------------------------------------------------------------
# Overview skill
# ---------------------------------------------------------------------------

def render_overview_skill(graph: Devgraph) -> str:
    count = len(graph.services)
    description = (
        f"Service architecture of this repository: {count} service(s), the dependencies "
        "between them and the commands that run them. Use when a change may cross a "
        "service boundary or when you need to start a service with its dependencies."
    )
    lines = render_frontmatter(OVERVIEW_SKILL, description)
    lines.extend([
        "",
        "# Querying the architecture",
        "",
        f"This repository declares {count} service(s) in devgraph blocks inside its markdown.",
        "",
        "## Commands",
        "",
        "- `devgraph impact <service>`: services affected by a change to `<service>`",
        "- `devgraph run <service>`: start order for `<service>` and its dependencies",
        "- `devgraph coordinate <service>`: per-consumer runbook for a change",
        "- `devgraph validate`: check the devgraph blocks after editing them",
        "",
        "Run `devgraph impact` before changing an interface other services call.",
        "",
        "## References",
        "",
        "- [ARCHITECTURE.md](references/ARCHITECTURE.md): dependency diagram",
        "- [SERVICES.md](references/SERVICES.md): every service with its type and commands",
    ])
    return "\n".join(lines) + "\n"


def render_architecture_reference(graph: Devgraph) -> str:
    consumers = get_reverse_dependencies(graph)
    lines = ["# Architecture", "", "```mermaid", generate_mermaid(graph).rstrip("\n"), "```", ""]
    lines.extend(["## Dependencies", ""])
    if not graph.services:
        lines.append("_No services declared._")
    for name, service in graph.services.items():
        depends = ", ".join(service.dependencies) or "nothing"
        used_by = ", ".join(consumers.get(name, [])) or "nobody"
        lines.append(f"- **{name}** depends on {depends}; used by {used_by}")
    return "\n".join(lines) + "\n"


def render_services_reference(graph: Devgraph, inferred: Dict[str, InferredData]) -> str:
    lines = [
        "# Services",
        "",
        "| Service | Type | Depends on | Commands | Ports |",
        "|---------|------|------------|----------|-------|",
    ]
    for name, service in graph.services.items():
        data = inferred.get(name) or InferredData()
        commands = merge_commands(service.commands, data.commands)
        lines.append(
            f"| {name} | {service.type} | {', '.join(service.dependencies) or '-'} | "
            f"{', '.join(commands) or '-'} | {', '.join(str(p) for p in service.ports or []) or '-'} |"
        )
    return "\n".join(lines) + "\n"


# ---------------------------------------------------------------------------
# Per-service skills
# ---------------------------------------------------------------------------

def _service_line(graph: Devgraph, name: str) -> str:
    node = graph.services.get(name)
    return f"- **{name}** ({node.type if node else 'not declared'})"


def render_service_skill(
    service: ServiceNode,
    graph: Devgraph,
    consumers: List[str],
    inferred: InferredData,
    service_path: Optional[str] = None,
) -> str:
    commands = merge_commands(service.commands, inferred.commands)
    description = (
        f"Working context for the {service.name} service ({service.type}): how to run and "
        f"check it, what it depends on and which services consume it. Use when changing "
        f"code in {service.name}."
    )

    lines = render_frontmatter(service_skill_name(service.name), description)
    lines.extend(["", f"# {service.name}", "", f"**Type:** {service.type}"])
    if service_path:
        lines.append(f"**Path:** `{service_path}`")
    if inferred.package_manager:
        lines.append(f"**Package manager:** {inferred.package_manager}")
    if service.ports:
        lines.append(f"**Ports:** {', '.join(str(p) for p in service.ports)}")

    lines.extend(["", "## Commands", ""])
    if commands:
        lines.extend(["| Command | Run |", "|---------|-----|"])
        lines.extend(f"| {name} | `{run}` |" for name, run in commands.items())
    else:
        lines.append(
            f"<!-- TODO: add commands to the devgraph-service block for {service.name} "
            "or a package.json with scripts -->"
        )

    if service.dependencies:
        lines.extend(["", "## Dependencies", ""])
        lines.extend(_service_line(graph, dep) for dep in service.dependencies)

    lines.extend(["", "## Downstream consumers", ""])
    if consumers:
        lines.extend(_service_line(graph, name) for name in consumers)
        lines.extend(["", f"Run `devgraph impact {service.name}` before changing its interface."])
    else:
        lines.append("_None._")

    route_count = len(service.merged_routes())
    if route_count:
        lines.extend(["", "## API routes", "", f"{route_count} route(s), see [ROUTES.md](references/ROUTES.md)."])

    env = service.merged_env()
    if env:
        lines.extend(["", "## Environment", ""])
        lines.extend(f"- `{key}`" for key in env)

    if inferred.landmarks:
        lines.extend(["", "## Landmarks", ""])
        lines.extend(f"- `{landmark}/`: {landmark_description(landmark)}" for landmark in inferred.landmarks)

    checks = [commands[c] for c in CHECK_COMMANDS if commands.get(c)]
    if checks:
        lines.extend(["", "## Before submitting changes", "", "```sh", " && ".join(checks), "```"])

    return "\n".join(lines) + "\n"


def render_routes_reference(service: ServiceNode) -> str:
    lines = [
        f"# {service.name} routes",
        "",
        "| Method | Path | Description |",
        "|--------|------|-------------|",
    ]
    for route, value in service.merged_routes().items():
        method, path = _route_parts(route)
        lines.append(f"| {method} | `{path}` | {_route_description(value)} |")
    return "\n".join(lines) + "\n"


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------

def generate_skills(graph: Devgraph, options: Optional[GenerateSkillsOptions] = None) -> GenerateSkillsResult:
    """
    Render the overview skill and one skill per selected service.

    The overview is always written and covers every service, even when
    ``options.services`` narrows the per-service skills.
    """
    options = options or GenerateSkillsOptions()
    result = GenerateSkillsResult()
    consumers = get_reverse_dependencies(graph)

    inferred: Dict[str, InferredData] = {}
    paths: Dict[str, Optional[str]] = {}
    for name in graph.services:
        paths[name] = resolve_service_path(name, options.service_path)
        inferred[name] = infer_service_data(paths[name]) if paths[name] else InferredData()

    result.files.extend([
        SkillFile(f"{OVERVIEW_SKILL}/SKILL.md", render_overview_skill(graph)),
        SkillFile(f"{OVERVIEW_SKILL}/references/ARCHITECTURE.md", render_architecture_reference(graph)),
        SkillFile(f"{OVERVIEW_SKILL}/references/SERVICES.md", render_services_reference(graph, inferred)),
    ])

    names = list(options.services) if options.services is not None else graph.service_names()
    for name in names:
        service = graph.services.get(name)
        if service is None:
            result.warnings.append(f"Service not found: {name}")
            continue

        if not (service.commands or inferred[name].commands) and not options.best_effort:
            result.warnings.append(
                f'Service "{name}" has no commands defined and no package.json found. '
                f"Use --best-effort to generate anyway."
            )
            continue

        skill_dir = f"services/{service_skill_name(name)}"
        result.files.append(SkillFile(
            f"{skill_dir}/SKILL.md",
            render_service_skill(service, graph, consumers.get(name, []), inferred[name], paths[name]),
        ))
        if service.merged_routes():
            result.files.append(SkillFile(f"{skill_dir}/references/ROUTES.md", render_routes_reference(service)))

    logger.info(f"Generated {len(result.files)} skill file(s), {len(result.warnings)} warning(s)")
    return result


def format_skills_result(result: GenerateSkillsResult) -> str:
    lines: List[str] = []
    if result.files:
        lines.append(f"Generated {len(result.files)} skill file(s):")
        lines.extend(f"  - {skill_file.relative_path}" for skill_file in result.files)
    else:
        lines.append("No skill files generated.")

    if result.warnings:
        lines.extend(["", "Warnings:"])
        lines.extend(f"  - {warning}" for warning in result.warnings)

    return "\n".join(lines)
