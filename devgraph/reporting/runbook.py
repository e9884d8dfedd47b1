"""
Analysis Renderers

Markdown / terminal text for run plans, impact analyses and coordination
runbooks. Failure results render as a message telling the user what to
fix.
"""
from __future__ import annotations

from typing import List, Union

from devgraph.analysis.models import (
    CoordinationResult,
    DependencyCycle,
    ImpactAnalysisResult,
    MissingDependency,
    RunPlanResult,
    ServiceNotFound,
)

Failure = Union[ServiceNotFound, DependencyCycle, MissingDependency]


def render_failure(result: Failure) -> str:
    if isinstance(result, ServiceNotFound):
        available = ", ".join(result.available) if result.available else "(none)"
        return f'Service "{result.service}" not found. Available services: {available}'
    if isinstance(result, DependencyCycle):
        return (
            f'Cannot analyse "{result.service}": dependency cycle detected: {result.describe()}. '
            f"Break the cycle and rebuild the graph."
        )
    if isinstance(result, MissingDependency):
        return (
            f'Cannot plan "{result.service}": "{result.dependent}" depends on "{result.missing}", '
            f"which is not defined. Declare a devgraph-service block for it."
        )
    raise TypeError(f"Not an analysis failure: {result!r}")


def render_run_plan(result: RunPlanResult) -> str:
    if not result.ok:
        return render_failure(result)

    lines: List[str] = [
        f"# Run plan: {result.service}",
        "",
        f"Start {len(result.steps)} service(s) in this order:",
        "",
    ]
    for i, step in enumerate(result.steps, start=1):
        lines.append(f"{i}. **{step.service}** ({step.type})")
        lines.append(f"   - command: `{step.command}`" if step.command else "   - command: _none declared_")
        if step.ports:
            lines.append(f"   - ports: {', '.join(str(p) for p in step.ports)}")
        if step.healthcheck:
            lines.append(f"   - wait for: {step.healthcheck.kind} `{step.healthcheck.target}`")
        if step.env:
            pairs = " ".join(f"{k}={v}" for k, v in step.env.items())
            lines.append(f"   - env: `{pairs}`")
        if step.depends:
            lines.append(f"   - after: {', '.join(step.depends)}")
    return "\n".join(lines) + "\n"


def render_impact(result: ImpactAnalysisResult) -> str:
    if not result.ok:
        return render_failure(result)

    lines: List[str] = [
        f"# Impact of changing {result.service}",
        "",
        f"**Affected services:** {result.total_affected_count}",
        f"**API routes in affected services:** {result.total_api_routes}",
        "",
        "## Direct consumers",
        "",
    ]
    lines.extend(f"- {name}" for name in result.direct_consumers)
    if not result.direct_consumers:
        lines.append("_None._")

    lines.extend(["", "## Transitive consumers", ""])
    lines.extend(f"- {name}" for name in result.transitive_consumers)
    if not result.transitive_consumers:
        lines.append("_None._")
    return "\n".join(lines) + "\n"


def render_coordination_runbook(result: CoordinationResult) -> str:
    if not result.ok:
        return render_failure(result)

    lines: List[str] = [
        f"# Coordination runbook: {result.service}",
        "",
        f"Changing **{result.service}** affects {result.impact.total_affected_count} service(s).",
        "",
        "## Search terms",
        "",
        "Look for these in each consumer to find integration points:",
        "",
    ]
    lines.extend(f"- `{term}`" for term in result.search_terms)

    if not result.tasks:
        lines.extend(["", "No consumers to coordinate with."])
        return "\n".join(lines) + "\n"

    lines.extend(["", "## Tasks", ""])
    for task in result.tasks:
        lines.extend([
            f"### {task.consumer} ({task.relationship.value})",
            "",
            f"- path: {' → '.join(task.dependency_path)}",
        ])
        for name, command in task.commands.items():
            if command:
                lines.append(f"- {name}: `{command}`")
        lines.append(f"- [ ] Verify {task.consumer} against the new {result.service} behaviour")
        lines.append("")

    return "\n".join(lines).rstrip() + "\n"
