"""
DevGraph Studio Server

Serves a built ``graph.json`` to the studio UI and answers read-only
analysis queries over it.
"""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Union

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse

from devgraph import __version__
from devgraph.analysis import AnalysisError, get_coordination_plan, get_impact_analysis, get_run_plan
from devgraph.core.graph_exporter import load_graph
from devgraph.core.models import Devgraph
from .models import ApiIndex, HealthResponse

logger = logging.getLogger(__name__)

STUDIO_URL = "https://devgraph.ameyalambat.com/studio"

_LANDING_PAGE = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <title>DevGraph Studio</title>
  <style>
    body {{ font-family: -apple-system, 'Segoe UI', Roboto, Arial, sans-serif; background: #050505;
           color: #ededed; display: flex; align-items: center; justify-content: center; min-height: 100vh; }}
    .api-url {{ font-family: monospace; background: #111; padding: 0.75rem 1.5rem; border: 1px solid #333; }}
    a {{ color: #fff; }}
  </style>
</head>
<body>
  <div>
    <h1>DevGraph Studio</h1>
    <p>Your graph.json is being served at:</p>
    <div class="api-url">{api_url}</div>
    <ol>
      <li>Open <a href="{studio_url}" target="_blank">DevGraph Studio</a></li>
      <li>Paste your graph.json or fetch it from the API above</li>
      <li>Explore, edit, and export your codebase graph</li>
    </ol>
  </div>
</body>
</html>
"""

_STATUS_BY_ERROR = {
    AnalysisError.NOT_FOUND: 404,
    AnalysisError.CYCLE: 409,
    AnalysisError.MISSING_DEPENDENCY: 409,
}


def _analysis_response(result: Any) -> Dict[str, Any]:
    if not result.ok:
        raise HTTPException(status_code=_STATUS_BY_ERROR[result.error], detail=result.to_dict())
    return result.to_dict()


def create_app(graph_path: Union[str, Path]) -> FastAPI:
    """
    Build the studio app for one graph.json.

    The document is read once here; ``GraphLoadError`` propagates if it
    cannot be read or decoded.
    """
    graph_path = str(graph_path)
    graph: Devgraph = load_graph(graph_path)

    app = FastAPI(
        title="DevGraph Studio",
        description="Serves a DevGraph graph.json and analysis queries over it",
        version=__version__,
    )
    app.state.graph = graph
    app.state.graph_path = graph_path

    # Local tool; any origin may read the graph.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    @app.get("/api", response_model=ApiIndex)
    async def index():
        return ApiIndex(
            name="DevGraph Studio",
            version=__version__,
            endpoints={
                "graph": "/api/graph",
                "health": "/health",
                "run_plan": "/api/services/{name}/run-plan",
                "impact": "/api/services/{name}/impact",
                "coordination": "/api/services/{name}/coordination",
            },
        )

    @app.get("/api/graph")
    async def get_graph() -> Dict[str, Any]:
        return graph.to_dict()

    @app.get("/health", response_model=HealthResponse)
    async def health_check():
        return HealthResponse(
            status="healthy",
            timestamp=datetime.now(timezone.utc).isoformat(),
            services=len(graph.services),
            graph_path=graph_path,
        )

    @app.get("/", response_class=HTMLResponse)
    @app.get("/studio", response_class=HTMLResponse)
    async def landing_page(request: Request):
        api_url = f"{str(request.base_url).rstrip('/')}/api/graph"
        return _LANDING_PAGE.format(api_url=api_url, studio_url=STUDIO_URL)

    @app.get("/api/services/{name}/run-plan")
    async def run_plan(name: str):
        logger.info(f"Run plan requested for '{name}'")
        return _analysis_response(get_run_plan(graph, name))

    @app.get("/api/services/{name}/impact")
    async def impact(name: str):
        logger.info(f"Impact analysis requested for '{name}'")
        return _analysis_response(get_impact_analysis(graph, name))

    @app.get("/api/services/{name}/coordination")
    async def coordination(name: str):
        logger.info(f"Coordination plan requested for '{name}'")
        return _analysis_response(get_coordination_plan(graph, name))

    logger.info(f"Studio app ready for {graph_path} ({len(graph.services)} services)")
    return app
