"""
Dependency Closure Traversal

Depth-first walk over a relation (``depends`` or its reverse) with
explicit path tracking. Uses a work stack rather than recursion so deep
chains do not hit the interpreter's recursion limit.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Set, Tuple


@dataclass
class Closure:
    """Result of walking a relation from one root."""
    root: str
    order: List[str] = field(default_factory=list)
    parents: Dict[str, Optional[str]] = field(default_factory=dict)
    cycle: Optional[List[str]] = None

    @property
    def has_cycle(self) -> bool:
        return self.cycle is not None

    def members(self, include_root: bool = True) -> List[str]:
        if include_root:
            return list(self.order)
        return [name for name in self.order if name != self.root]


def walk_closure(
    root: str,
    neighbors: Callable[[str], Iterable[str]],
    visited: Optional[Set[str]] = None,
) -> Closure:
    """
    Collect every node reachable from ``root``.

    Nodes are recorded in discovery (pre-)order together with the node that
    first reached them. When a neighbor is already on the current path the
    walk stops and ``cycle`` holds the path from that neighbor's first
    occurrence through the repeat, e.g. ``["a", "b", "a"]``.

    ``visited`` may be shared between calls to skip nodes already explored
    from an earlier root.
    """
    seen: Set[str] = visited if visited is not None else set()
    closure = Closure(root=root)

    seen.add(root)
    closure.order.append(root)
    closure.parents[root] = None

    path: List[str] = [root]
    on_path: Set[str] = {root}
    stack: List[Tuple[str, Iterator[str]]] = [(root, iter(neighbors(root)))]

    while stack:
        node, pending = stack[-1]
        advanced = False
        for nxt in pending:
            if nxt in on_path:
                start = path.index(nxt)
                closure.cycle = path[start:] + [nxt]
                return closure
            if nxt in seen:
                continue
            seen.add(nxt)
            closure.order.append(nxt)
            closure.parents[nxt] = node
            path.append(nxt)
            on_path.add(nxt)
            stack.append((nxt, iter(neighbors(nxt))))
            advanced = True
            break
        if not advanced:
            stack.pop()
            on_path.discard(path.pop())

    return closure
