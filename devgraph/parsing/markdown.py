"""
Markdown Code Node Extraction

Tokenizes markdown with markdown-it-py and surfaces every fenced code
block as a CodeNode (language tag, raw text, 1-based start line).
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from markdown_it import MarkdownIt


@dataclass(frozen=True)
class CodeNode:
    lang: Optional[str]
    value: str
    line: Optional[int] = None


_markdown = MarkdownIt("commonmark")


def extract_code_nodes(text: str) -> List[CodeNode]:
    """Return the fenced code nodes of ``text`` in document order."""
    nodes: List[CodeNode] = []
    for token in _markdown.parse(text):
        if token.type != "fence":
            continue
        info = token.info.strip()
        lang = info.split()[0] if info else None
        line = token.map[0] + 1 if token.map else None
        nodes.append(CodeNode(lang=lang, value=token.content, line=line))
    return nodes
