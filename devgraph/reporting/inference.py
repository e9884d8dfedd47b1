"""
Service Directory Inference

Fills gaps in declared service data by looking at the service's checkout:
``package.json`` scripts, lock files and well-known source directories.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Union

logger = logging.getLogger(__name__)

LANDMARK_DESCRIPTIONS: Dict[str, str] = {
    "src": "main source code",
    "app": "application entry / routes",
    "lib": "shared utilities and libraries",
    "pages": "page components (file-based routing)",
    "components": "reusable UI components",
    "routers": "API route handlers",
    "routes": "route definitions",
    "models": "data models / schemas",
    "services": "business logic services",
    "utils": "utility functions",
    "helpers": "helper functions",
    "hooks": "React hooks",
    "api": "API endpoints",
    "server": "server-side code",
    "client": "client-side code",
    "public": "static assets served publicly",
    "assets": "static assets",
    "styles": "stylesheets",
    "tests": "test files",
    "__tests__": "test files (Jest convention)",
    "spec": "test specifications",
}

# Checked in order; the first lock file found wins.
LOCK_FILES = (
    ("pnpm-lock.yaml", "pnpm"),
    ("yarn.lock", "yarn"),
    ("bun.lockb", "bun"),
    ("package-lock.json", "npm"),
)

INFERRED_COMMANDS = ("dev", "build", "test", "start", "lint")


@dataclass
class InferredData:
    commands: Dict[str, str] = field(default_factory=dict)
    landmarks: List[str] = field(default_factory=list)
    package_manager: Optional[str] = None


def infer_commands(service_path: Union[str, Path]) -> Dict[str, str]:
    package_json = Path(service_path) / "package.json"
    if not package_json.is_file():
        return {}
    try:
        with open(package_json, "r", encoding="utf-8") as f:
            scripts = (json.load(f) or {}).get("scripts") or {}
    except (OSError, ValueError, AttributeError) as e:
        logger.warning(f"Ignoring unreadable {package_json}: {e}")
        return {}

    inferred = {
        "dev": scripts.get("dev") or scripts.get("start"),
        "build": scripts.get("build"),
        "test": scripts.get("test"),
        "start": scripts.get("start"),
        "lint": scripts.get("lint"),
    }
    return {k: v for k, v in inferred.items() if isinstance(v, str) and v}


def infer_landmarks(service_path: Union[str, Path]) -> List[str]:
    base = Path(service_path)
    return [name for name in LANDMARK_DESCRIPTIONS if (base / name).exists()]


def landmark_description(landmark: str) -> str:
    return LANDMARK_DESCRIPTIONS.get(landmark, "project directory")


def detect_package_manager(service_path: Union[str, Path]) -> Optional[str]:
    base = Path(service_path)
    for lock_file, manager in LOCK_FILES:
        if (base / lock_file).exists():
            return manager
    return None


def infer_service_data(service_path: Union[str, Path]) -> InferredData:
    return InferredData(
        commands=infer_commands(service_path),
        landmarks=infer_landmarks(service_path),
        package_manager=detect_package_manager(service_path),
    )


def merge_commands(declared: Optional[Dict[str, str]], inferred: Dict[str, str]) -> Dict[str, str]:
    """Inferred commands as a base; declared commands override them."""
    merged = {k: inferred[k] for k in INFERRED_COMMANDS if inferred.get(k)}
    merged.update(declared or {})
    return merged
