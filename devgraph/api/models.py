"""
Response models for the studio server.
"""

from typing import Dict

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    status: str = Field(..., description="Server status")
    timestamp: str = Field(..., description="Response time (UTC, ISO 8601)")
    services: int = Field(..., description="Number of services in the loaded graph")
    graph_path: str = Field(..., description="graph.json the server was started with")


class ApiIndex(BaseModel):
    name: str
    version: str
    endpoints: Dict[str, str]
