"""
File Store Adapter

Writes the generated artifacts (graph.json, summary.md, agent, skill and
runbook files) under a workspace root.
"""

import json
import os
from typing import Any, Dict


class LocalFileStore:
    """
    Local filesystem store rooted at ``root``.

    Relative paths resolve against the root; parent directories are
    created on write.
    """

    def __init__(self, root: str = "."):
        self.root = root

    def resolve(self, path: str) -> str:
        return path if os.path.isabs(path) else os.path.join(self.root, path)

    def write_json(self, path: str, data: Dict[str, Any]) -> str:
        """Write data as JSON to file. Returns the written path."""
        return self.write_text(path, json.dumps(data, indent=2, default=str) + "\n")

    def write_text(self, path: str, content: str) -> str:
        """Write text content to file. Returns the written path."""
        target = self.resolve(path)
        self.makedirs(os.path.dirname(target))
        with open(target, 'w', encoding='utf-8') as f:
            f.write(content)
        return target

    def makedirs(self, path: str) -> None:
        if path:
            os.makedirs(path, exist_ok=True)
