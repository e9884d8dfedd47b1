"""
Application Settings

Environment configuration shared by the CLI and the studio server.
"""

import os
from dataclasses import dataclass, field
from typing import List


def _split_patterns(value: str) -> List[str]:
    return [p.strip() for p in value.split(",") if p.strip()]


@dataclass
class Settings:
    """Application settings from environment."""

    # Workspace
    root: str = "."
    out_dir: str = ".devgraph"
    config_path: str = ""
    patterns: List[str] = field(default_factory=lambda: ["**/*.md"])

    # Studio server
    studio_host: str = "127.0.0.1"
    studio_port: int = 4321

    log_level: str = "WARNING"

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from environment variables."""
        return cls(
            root=os.getenv("DEVGRAPH_ROOT", "."),
            out_dir=os.getenv("DEVGRAPH_OUT_DIR", ".devgraph"),
            config_path=os.getenv("DEVGRAPH_CONFIG", ""),
            patterns=_split_patterns(os.getenv("DEVGRAPH_PATTERNS", "**/*.md")) or ["**/*.md"],
            studio_host=os.getenv("DEVGRAPH_STUDIO_HOST", "127.0.0.1"),
            studio_port=int(os.getenv("DEVGRAPH_STUDIO_PORT", "4321")),
            log_level=os.getenv("DEVGRAPH_LOG_LEVEL", "WARNING").upper(),
        )
