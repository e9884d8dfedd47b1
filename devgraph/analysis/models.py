"""
Analysis Result Models

Every query returns a value rather than raising. Success types carry
``ok = True``; failure types carry ``ok = False`` and an ``error``
discriminant so callers can branch on the outcome:

    not_found           the queried service is not declared
    cycle               the traversal revisited a service on its own path
    missing_dependency  the closure names a service nobody declares
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from devgraph.core.models import Healthcheck


class AnalysisError(str, Enum):
    NOT_FOUND = "not_found"
    CYCLE = "cycle"
    MISSING_DEPENDENCY = "missing_dependency"


class Relationship(str, Enum):
    DIRECT = "direct"
    TRANSITIVE = "transitive"


# ---------------------------------------------------------------------------
# Failure variants (shared by all queries)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ServiceNotFound:
    service: str
    available: List[str] = field(default_factory=list)
    ok: bool = field(default=False, init=False)
    error: AnalysisError = field(default=AnalysisError.NOT_FOUND, init=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ok": False,
            "error": self.error.value,
            "service": self.service,
            "available": list(self.available),
        }


@dataclass(frozen=True)
class DependencyCycle:
    service: str
    path: List[str]
    ok: bool = field(default=False, init=False)
    error: AnalysisError = field(default=AnalysisError.CYCLE, init=False)

    def describe(self) -> str:
        return " → ".join(self.path)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ok": False,
            "error": self.error.value,
            "service": self.service,
            "path": list(self.path),
        }


@dataclass(frozen=True)
class MissingDependency:
    service: str
    dependent: str
    missing: str
    ok: bool = field(default=False, init=False)
    error: AnalysisError = field(default=AnalysisError.MISSING_DEPENDENCY, init=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ok": False,
            "error": self.error.value,
            "service": self.service,
            "dependent": self.dependent,
            "missing": self.missing,
        }


# ---------------------------------------------------------------------------
# Run plan
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RunPlanStep:
    service: str
    type: str
    command: Optional[str]
    env: Dict[str, str] = field(default_factory=dict)
    ports: List[int] = field(default_factory=list)
    healthcheck: Optional[Healthcheck] = None
    depends: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "service": self.service,
            "type": self.type,
            "command": self.command,
            "env": dict(self.env),
            "ports": list(self.ports),
            "healthcheck": self.healthcheck.to_dict() if self.healthcheck else None,
            "depends": list(self.depends),
        }


@dataclass(frozen=True)
class RunPlan:
    """Start order for a service: every step comes after its dependencies."""
    service: str
    steps: List[RunPlanStep]
    ok: bool = field(default=True, init=False)
    error: None = field(default=None, init=False)

    @property
    def order(self) -> List[str]:
        return [s.service for s in self.steps]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ok": True,
            "service": self.service,
            "steps": [s.to_dict() for s in self.steps],
        }


RunPlanResult = Union[RunPlan, ServiceNotFound, DependencyCycle, MissingDependency]


# ---------------------------------------------------------------------------
# Impact analysis
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ImpactAnalysis:
    """Blast radius of a change to ``service``."""
    service: str
    direct_consumers: List[str]
    transitive_consumers: List[str]
    total_affected_count: int
    total_api_routes: int
    ok: bool = field(default=True, init=False)
    error: None = field(default=None, init=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ok": True,
            "service": self.service,
            "directConsumers": list(self.direct_consumers),
            "transitiveConsumers": list(self.transitive_consumers),
            "totalAffectedCount": self.total_affected_count,
            "totalApiRoutes": self.total_api_routes,
        }


ImpactAnalysisResult = Union[ImpactAnalysis, ServiceNotFound, DependencyCycle]


# ---------------------------------------------------------------------------
# Coordination plan
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CoordinationTask:
    consumer: str
    relationship: Relationship
    dependency_path: List[str]
    commands: Dict[str, Optional[str]]
    search_terms: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "consumer": self.consumer,
            "relationship": Relationship(self.relationship).value,
            "dependencyPath": list(self.dependency_path),
            "commands": dict(self.commands),
            "searchTerms": list(self.search_terms),
        }


@dataclass(frozen=True)
class CoordinationPlan:
    """What to check in every consumer when ``service`` changes."""
    service: str
    tasks: List[CoordinationTask]
    search_terms: List[str]
    impact: ImpactAnalysis
    ok: bool = field(default=True, init=False)
    error: None = field(default=None, init=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ok": True,
            "service": self.service,
            "searchTerms": list(self.search_terms),
            "totalAffectedCount": self.impact.total_affected_count,
            "tasks": [t.to_dict() for t in self.tasks],
        }


CoordinationResult = Union[CoordinationPlan, ServiceNotFound, DependencyCycle]
