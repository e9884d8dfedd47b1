"""
Graph Diff

Compares two graphs (typically a committed ``graph.json`` against a fresh
build) service by service.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from devgraph.core.models import Devgraph, ServiceNode


@dataclass
class KeyedChange:
    """Added, removed and changed keys of one mapping."""
    added: List[str] = field(default_factory=list)
    removed: List[str] = field(default_factory=list)
    changed: List[str] = field(default_factory=list)

    @property
    def empty(self) -> bool:
        return not (self.added or self.removed or self.changed)

    def to_dict(self) -> Dict[str, List[str]]:
        return {"added": self.added, "removed": self.removed, "changed": self.changed}


@dataclass
class ServiceDiff:
    name: str
    type_change: Optional[tuple] = None
    dependencies: KeyedChange = field(default_factory=KeyedChange)
    commands: KeyedChange = field(default_factory=KeyedChange)
    apis: KeyedChange = field(default_factory=KeyedChange)
    env: KeyedChange = field(default_factory=KeyedChange)

    @property
    def empty(self) -> bool:
        return (
            self.type_change is None
            and self.dependencies.empty
            and self.commands.empty
            and self.apis.empty
            and self.env.empty
        )

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "name": self.name,
            "dependencies": self.dependencies.to_dict(),
            "commands": self.commands.to_dict(),
            "apis": self.apis.to_dict(),
            "env": self.env.to_dict(),
        }
        if self.type_change:
            result["type"] = {"from": self.type_change[0], "to": self.type_change[1]}
        return result


@dataclass
class GraphDiff:
    added_services: List[str] = field(default_factory=list)
    removed_services: List[str] = field(default_factory=list)
    changed_services: List[ServiceDiff] = field(default_factory=list)

    @property
    def empty(self) -> bool:
        return not (self.added_services or self.removed_services or self.changed_services)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "addedServices": self.added_services,
            "removedServices": self.removed_services,
            "changedServices": [s.to_dict() for s in self.changed_services],
        }


# ---------------------------------------------------------------------------
# Comparison
# ---------------------------------------------------------------------------

def _compare(new: Dict[str, Any], old: Dict[str, Any]) -> KeyedChange:
    return KeyedChange(
        added=[k for k in new if k not in old],
        removed=[k for k in old if k not in new],
        changed=[k for k in new if k in old and new[k] != old[k]],
    )


def _routes(service: ServiceNode) -> Dict[str, Any]:
    routes: Dict[str, Any] = {}
    for api in service.apis:
        routes.update(api.routes)
    return routes


def _diff_service(new: ServiceNode, old: ServiceNode) -> ServiceDiff:
    return ServiceDiff(
        name=new.name,
        type_change=(old.type, new.type) if old.type != new.type else None,
        dependencies=_compare(dict.fromkeys(new.dependencies), dict.fromkeys(old.dependencies)),
        commands=_compare(new.commands or {}, old.commands or {}),
        apis=_compare(_routes(new), _routes(old)),
        env=_compare(new.merged_env(), old.merged_env()),
    )


def compute_graph_diff(next_graph: Devgraph, base_graph: Devgraph) -> GraphDiff:
    diff = GraphDiff(
        added_services=[n for n in next_graph.services if n not in base_graph.services],
        removed_services=[n for n in base_graph.services if n not in next_graph.services],
    )
    for name, service in next_graph.services.items():
        old = base_graph.services.get(name)
        if old is None:
            continue
        service_diff = _diff_service(service, old)
        if not service_diff.empty:
            diff.changed_services.append(service_diff)
    return diff


# ---------------------------------------------------------------------------
# Markdown
# ---------------------------------------------------------------------------

def _section(lines: List[str], title: str, change: KeyedChange) -> None:
    if change.empty:
        return
    lines.append(f"- {title}:")
    lines.extend(f"  - added `{k}`" for k in change.added)
    lines.extend(f"  - removed `{k}`" for k in change.removed)
    lines.extend(f"  - changed `{k}`" for k in change.changed)


def format_graph_diff(diff: GraphDiff) -> str:
    lines: List[str] = ["# DevGraph Diff", ""]
    if diff.empty:
        lines.append("No changes.")
        return "\n".join(lines) + "\n"

    if diff.added_services:
        lines.extend(["## Added services", ""])
        lines.extend(f"- {name}" for name in diff.added_services)
        lines.append("")
    if diff.removed_services:
        lines.extend(["## Removed services", ""])
        lines.extend(f"- {name}" for name in diff.removed_services)
        lines.append("")

    for service in diff.changed_services:
        lines.extend([f"## Changed: {service.name}", ""])
        if service.type_change:
            lines.append(f"- Type: {service.type_change[0]} -> {service.type_change[1]}")
        _section(lines, "Dependencies", service.dependencies)
        _section(lines, "Commands", service.commands)
        _section(lines, "APIs", service.apis)
        _section(lines, "Env", service.env)
        lines.append("")

    return "\n".join(lines).rstrip() + "\n"


def diff_graphs(next_graph: Devgraph, base_graph: Devgraph) -> str:
    """Markdown description of what changed from ``base_graph`` to ``next_graph``."""
    return format_graph_diff(compute_graph_diff(next_graph, base_graph))
