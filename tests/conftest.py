"""
Test Configuration and Fixtures
================================

Shared pytest fixtures for the devgraph test suite.

Usage:
    pytest tests/                    # Run all tests
    pytest tests/ -v                 # Verbose output
    pytest tests/ -k "parser"        # Run only parser tests
    pytest tests/ --quick            # Skip slow tests
"""

import textwrap
from pathlib import Path
from typing import Callable, Dict, List, Optional

import pytest

from devgraph.core import (
    ApiBlock,
    BlockType,
    Devgraph,
    DevgraphBlock,
    EnvBlock,
    ServiceBlock,
    build_graph,
)


# =============================================================================
# Custom Markers
# =============================================================================

def pytest_configure(config):
    """Register custom markers"""
    config.addinivalue_line("markers", "slow: marks tests as slow")
    config.addinivalue_line("markers", "integration: marks integration tests")


def pytest_addoption(parser):
    """Add custom command line options"""
    parser.addoption(
        "--quick",
        action="store_true",
        default=False,
        help="Skip slow tests",
    )


def pytest_collection_modifyitems(config, items):
    """Skip slow tests if --quick is specified"""
    if config.getoption("--quick"):
        skip_slow = pytest.mark.skip(reason="Skipped with --quick")
        for item in items:
            if "slow" in item.keywords:
                item.add_marker(skip_slow)


# =============================================================================
# Block Factories
# =============================================================================

@pytest.fixture
def service() -> Callable[..., DevgraphBlock]:
    def make(name: str, depends: Optional[List[str]] = None, file: str = "docs/services.md",
             line: Optional[int] = None, type: str = "node", **kwargs) -> DevgraphBlock:
        data = ServiceBlock(name=name, type=type, depends=depends, **kwargs)
        return DevgraphBlock(type=BlockType.SERVICE, file=file, data=data, line=line)
    return make


@pytest.fixture
def api() -> Callable[..., DevgraphBlock]:
    def make(service_name: str, routes: Dict[str, object], file: str = "docs/api.md",
             line: Optional[int] = None) -> DevgraphBlock:
        return DevgraphBlock(type=BlockType.API, file=file, data=ApiBlock(service_name, routes), line=line)
    return make


@pytest.fixture
def env() -> Callable[..., DevgraphBlock]:
    def make(service_name: str, vars: Dict[str, str], file: str = "docs/env.md",
             line: Optional[int] = None) -> DevgraphBlock:
        return DevgraphBlock(type=BlockType.ENV, file=file, data=EnvBlock(service_name, vars), line=line)
    return make


@pytest.fixture
def graph_of(service) -> Callable[[Dict[str, List[str]]], Devgraph]:
    """Build a graph from ``{name: depends}`` in dict order."""
    def make(depends_by_name: Dict[str, List[str]]) -> Devgraph:
        return build_graph([service(name, depends=deps or None) for name, deps in depends_by_name.items()])
    return make


# =============================================================================
# Sample Workspace
# =============================================================================

SERVICES_MD = """\
# Services

The backend stack.

```devgraph-service
name: db
type: postgres
commands:
  start: docker compose up -d db
ports: [5432]
healthcheck:
  tcp: 5432
```

```devgraph-service
name: api
type: node
commands:
  dev: pnpm dev
  test: pnpm test
  build: pnpm build
depends: [db]
ports: [3000]
healthcheck:
  http: http://localhost:3000/health
```

```devgraph-api
service: api
routes:
  GET /health: Health check
  POST /v1/users: Create user
```

```devgraph-env
service: api
vars:
  DATABASE_URL: postgres://localhost:5432/app
  PORT: "3000"
```
"""

WEB_MD = """\
# Web

```devgraph-service
name: web
type: next
commands:
  dev: pnpm dev --port 3001
depends: [api]
```

```devgraph-env
service: web
vars:
  API_URL: http://localhost:3000
```

```python
print("not a devgraph block")
```
"""


def write_markdown(root: Path, relative: str, content: str) -> Path:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(content), encoding="utf-8")
    return path


@pytest.fixture
def workspace(tmp_path) -> Path:
    """A repository with three services (db <- api <- web) across two files."""
    write_markdown(tmp_path, "docs/services.md", SERVICES_MD)
    write_markdown(tmp_path, "docs/web.md", WEB_MD)
    return tmp_path


@pytest.fixture
def write_md() -> Callable[[Path, str, str], Path]:
    return write_markdown
