#!/usr/bin/env python3
"""
DevGraph CLI

Single entry point for building, validating and querying the graph.

Usage:
    devgraph <command> [options]

Commands:
    build       - Parse markdown and write graph.json, summary.md and graph.mmd
    validate    - Report parse, consistency and rule errors
    run         - Start order for a service and its dependencies
    impact      - Services affected by a change to a service
    coordinate  - Per-consumer runbook for a change to a service
    mermaid     - Mermaid flowchart of the graph
    diff        - Compare the current graph with a saved graph.json
    agents      - Per-service agent context files
    skills      - Agent Skills for the architecture and each service
    studio      - Serve graph.json to the studio UI
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional, Tuple

from devgraph import __version__
from devgraph.adapters import ConsoleReporter, LocalFileStore
from devgraph.analysis import get_coordination_plan, get_impact_analysis, get_run_plan
from devgraph.config import Settings
from devgraph.core import Devgraph, GraphLoadError, ParseResult, build_graph, load_graph
from devgraph.parsing import parse_markdown_files
from devgraph.reporting import (
    GenerateAgentsOptions,
    GenerateSkillsOptions,
    compute_graph_diff,
    format_agents_result,
    format_skills_result,
    format_graph_diff,
    generate_agents,
    generate_mermaid,
    generate_skills,
    generate_summary,
    render_coordination_runbook,
    render_impact,
    render_run_plan,
)
from devgraph.validation import (
    ValidateOptions,
    ValidationResult,
    format_validation_result,
    format_validation_result_json,
    validate,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------

class Workspace:
    """Resolved settings for one invocation."""

    def __init__(self, args: argparse.Namespace, settings: Settings):
        self.settings = settings
        self.root = Path(args.root or settings.root)
        self.patterns: List[str] = list(getattr(args, "paths", None) or settings.patterns)
        config = args.config or settings.config_path
        self.config_path: Optional[Path] = Path(config) if config else None
        self.store = LocalFileStore(str(self.root / settings.out_dir))
        self.out = ConsoleReporter()
        self.err = ConsoleReporter(stream=sys.stderr)

    def parse(self) -> Tuple[ParseResult, Devgraph]:
        parsed = parse_markdown_files(self.patterns, self.root)
        return parsed, build_graph(parsed.blocks)

    def validate(self, parsed: ParseResult, graph: Devgraph) -> ValidationResult:
        options = ValidateOptions(config_path=self.config_path, root=self.root)
        return validate(parsed.blocks, graph, parsed.errors, options)

    def graph(self, graph_path: Optional[str]) -> Optional[Devgraph]:
        """The graph to query: a saved graph.json when given, else a fresh build."""
        if graph_path:
            try:
                return load_graph(graph_path)
            except GraphLoadError as e:
                self.err.error(str(e))
                return None
        parsed, graph = self.parse()
        for error in parsed.errors:
            self.err.warning(f"{error.location}: {error.message}")
        return graph


def _print_json(data) -> None:
    print(json.dumps(data, indent=2, default=str))


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

def cmd_build(args: argparse.Namespace, ws: Workspace) -> int:
    parsed, graph = ws.parse()
    result = ws.validate(parsed, graph)
    if not result.ok:
        ws.err.write(format_validation_result(result))
        return 1

    paths = [
        ws.store.write_json("graph.json", graph.to_dict()),
        ws.store.write_text("summary.md", generate_summary(graph)),
        ws.store.write_text("graph.mmd", generate_mermaid(graph)),
    ]
    logger.info(f"Wrote {', '.join(paths)}")

    if args.json:
        _print_json(graph.to_dict())
    else:
        ws.out.success(f"Built graph with {len(graph.services)} services")
        ws.out.table(
            ["Service", "Type", "Depends"],
            [[name, s.type, ", ".join(s.dependencies)] for name, s in graph.services.items()],
        )
        for path in paths:
            ws.out.write(f"  - {path}")
    return 0


def cmd_validate(args: argparse.Namespace, ws: Workspace) -> int:
    parsed, graph = ws.parse()
    result = ws.validate(parsed, graph)
    if args.json:
        print(format_validation_result_json(result))
    elif result.ok:
        ws.out.success(format_validation_result(result))
    else:
        ws.out.error(format_validation_result(result))
    return 0 if result.ok else 1


def cmd_run(args: argparse.Namespace, ws: Workspace) -> int:
    graph = ws.graph(args.graph)
    if graph is None:
        return 1
    result = get_run_plan(graph, args.service)
    if args.json:
        _print_json(result.to_dict())
    else:
        ws.out.write(render_run_plan(result))
    return 0 if result.ok else 1


def cmd_impact(args: argparse.Namespace, ws: Workspace) -> int:
    graph = ws.graph(args.graph)
    if graph is None:
        return 1
    result = get_impact_analysis(graph, args.service)
    if args.json:
        _print_json(result.to_dict())
    else:
        ws.out.write(render_impact(result))
    return 0 if result.ok else 1


def cmd_coordinate(args: argparse.Namespace, ws: Workspace) -> int:
    graph = ws.graph(args.graph)
    if graph is None:
        return 1
    result = get_coordination_plan(graph, args.service)
    if args.json:
        _print_json(result.to_dict())
    else:
        runbook = render_coordination_runbook(result)
        ws.out.write(runbook)
        if result.ok and args.write:
            path = ws.store.write_text(f"runbooks/{args.service}.md", runbook)
            ws.err.info(f"Runbook written to {path}")
    return 0 if result.ok else 1


def cmd_mermaid(args: argparse.Namespace, ws: Workspace) -> int:
    graph = ws.graph(args.graph)
    if graph is None:
        return 1
    diagram = generate_mermaid(graph)
    if args.write:
        path = ws.store.write_text("graph.mmd", diagram)
        ws.err.info(f"Diagram written to {path}")
    else:
        ws.out.write(diagram)
    return 0


def cmd_diff(args: argparse.Namespace, ws: Workspace) -> int:
    try:
        base = load_graph(args.base)
    except GraphLoadError as e:
        ws.err.error(str(e))
        return 1
    current = ws.graph(args.graph)
    if current is None:
        return 1

    diff = compute_graph_diff(current, base)
    if args.json:
        _print_json(diff.to_dict())
    else:
        ws.out.write(format_graph_diff(diff))
    return 0


def cmd_agents(args: argparse.Namespace, ws: Workspace) -> int:
    graph = ws.graph(args.graph)
    if graph is None:
        return 1
    options = GenerateAgentsOptions(
        service_path=str(ws.root / args.service_path) if args.service_path else None,
        best_effort=args.best_effort,
        services=args.service or None,
    )
    result = generate_agents(graph, options)
    for name, markdown in result.agents.items():
        ws.store.write_text(f"agents/{name}.md", markdown)
    ws.out.write(format_agents_result(result))
    return 0


def cmd_skills(args: argparse.Namespace, ws: Workspace) -> int:
    graph = ws.graph(args.graph)
    if graph is None:
        return 1
    options = GenerateSkillsOptions(
        service_path=str(ws.root / args.service_path) if args.service_path else None,
        best_effort=args.best_effort,
        services=args.service or None,
    )
    result = generate_skills(graph, options)
    for skill_file in result.files:
        ws.store.write_text(f"{args.output}/{skill_file.relative_path}", skill_file.content)
    ws.out.write(format_skills_result(result))
    return 0


def cmd_studio(args: argparse.Namespace, ws: Workspace) -> int:
    import uvicorn

    from devgraph.api import create_app

    graph_path = args.graph or ws.store.resolve("graph.json")
    try:
        app = create_app(graph_path)
    except GraphLoadError as e:
        ws.err.error(str(e))
        ws.err.info("Run `devgraph build` first to create graph.json")
        return 1

    host = args.host or ws.settings.studio_host
    port = args.port or ws.settings.studio_port
    ws.out.success(f"Serving {graph_path} at http://{host}:{port}/api/graph")
    uvicorn.run(app, host=host, port=port, log_level="warning")
    return 0


COMMANDS = {
    "build": cmd_build,
    "validate": cmd_validate,
    "run": cmd_run,
    "impact": cmd_impact,
    "coordinate": cmd_coordinate,
    "mermaid": cmd_mermaid,
    "diff": cmd_diff,
    "agents": cmd_agents,
    "skills": cmd_skills,
    "studio": cmd_studio,
}


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="devgraph",
        description="Build, validate and query the DevGraph of a repository.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--root", "-r", help="Workspace root (default: $DEVGRAPH_ROOT or .)")
    parser.add_argument("--config", "-c", help="Rule config (default: <root>/.devgraph/config.yaml)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose logging")

    subparsers = parser.add_subparsers(dest="command", metavar="<command>")
    subparsers.required = True

    def add_paths(p: argparse.ArgumentParser) -> None:
        p.add_argument("paths", nargs="*", help="Markdown files or globs (default: **/*.md)")

    def add_graph(p: argparse.ArgumentParser) -> None:
        p.add_argument("--graph", "-g", metavar="FILE", help="Query a saved graph.json instead of parsing markdown")

    def add_json(p: argparse.ArgumentParser) -> None:
        p.add_argument("--json", action="store_true", help="Output JSON to stdout")

    p = subparsers.add_parser("build", help="Write graph.json, summary.md and graph.mmd")
    add_paths(p)
    add_json(p)

    p = subparsers.add_parser("validate", help="Validate devgraph blocks")
    add_paths(p)
    add_json(p)

    for name, help_text in (
        ("run", "Run plan for a service"),
        ("impact", "Impact analysis for a service"),
        ("coordinate", "Coordination runbook for a service"),
    ):
        p = subparsers.add_parser(name, help=help_text)
        p.add_argument("service", help="Service name")
        add_paths(p)
        add_graph(p)
        add_json(p)
        if name == "coordinate":
            p.add_argument("--write", "-w", action="store_true", help="Also write runbooks/<service>.md")

    p = subparsers.add_parser("mermaid", help="Mermaid flowchart of the graph")
    add_paths(p)
    add_graph(p)
    p.add_argument("--write", "-w", action="store_true", help="Write graph.mmd instead of printing")

    p = subparsers.add_parser("diff", help="Compare against a saved graph.json")
    p.add_argument("base", help="Baseline graph.json")
    add_paths(p)
    add_graph(p)
    add_json(p)

    p = subparsers.add_parser("agents", help="Generate per-service agent context files")
    add_paths(p)
    add_graph(p)
    p.add_argument("--service", "-s", action="append", default=[], help="Only this service (repeatable)")
    p.add_argument("--service-path", help="Directory holding one sub-directory per service")
    p.add_argument("--best-effort", action="store_true", help="Generate even without known commands")

    p = subparsers.add_parser("skills", help="Generate Agent Skills")
    add_paths(p)
    add_graph(p)
    p.add_argument("--service", "-s", action="append", default=[], help="Only this service (repeatable)")
    p.add_argument("--service-path", help="Directory holding one sub-directory per service")
    p.add_argument("--best-effort", action="store_true", help="Generate even without known commands")
    p.add_argument("--output", "-o", default="skills", help="Directory under the output dir (default: skills)")

    p = subparsers.add_parser("studio", help="Serve graph.json to the studio UI")
    add_graph(p)
    p.add_argument("--host", help="Bind address (default: 127.0.0.1)")
    p.add_argument("--port", "-p", type=int, help="Port (default: 4321)")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)
    settings = Settings.from_env()

    log_level = logging.INFO if args.verbose else getattr(logging, settings.log_level, logging.WARNING)
    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        stream=sys.stderr,
    )

    ws = Workspace(args, settings)
    return COMMANDS[args.command](args, ws)


if __name__ == "__main__":
    sys.exit(main())
