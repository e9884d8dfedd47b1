"""
Mermaid Diagram Export

Renders the dependency graph as a ``graph LR`` flowchart. Edges point
from a service to what it depends on; dependencies nobody declares are
drawn as dashed "missing" nodes.
"""
from __future__ import annotations

import re
from typing import Dict, List

from devgraph.core.graph_exporter import to_networkx
from devgraph.core.models import Devgraph


def mermaid_id(name: str) -> str:
    node_id = re.sub(r"[^A-Za-z0-9_]", "_", name)
    if not node_id or node_id[0].isdigit():
        node_id = f"n_{node_id}"
    return node_id


def _label(text: str) -> str:
    return text.replace('"', "#quot;")


def generate_mermaid(graph: Devgraph) -> str:
    g = to_networkx(graph)
    ids: Dict[str, str] = {}
    used: Dict[str, int] = {}
    for name in g.nodes:
        base = mermaid_id(name)
        count = used.get(base, 0)
        used[base] = count + 1
        ids[name] = base if count == 0 else f"{base}_{count}"

    lines: List[str] = ["graph LR"]
    missing: List[str] = []
    for name, attrs in g.nodes(data=True):
        if attrs.get("missing"):
            missing.append(ids[name])
            lines.append(f'  {ids[name]}["{_label(name)} (missing)"]')
        else:
            lines.append(f'  {ids[name]}["{_label(name)}<br/>{_label(str(attrs.get("type")))}"]')

    for source, target in g.edges:
        lines.append(f"  {ids[source]} --> {ids[target]}")

    if missing:
        lines.append("  classDef missing stroke-dasharray: 5 5,stroke:#d33")
        lines.append(f"  class {','.join(missing)} missing")

    return "\n".join(lines) + "\n"
