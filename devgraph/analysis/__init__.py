"""
Graph analyses: run plans, impact analysis and coordination plans.
"""
from .models import (
    AnalysisError,
    Relationship,
    ServiceNotFound,
    DependencyCycle,
    MissingDependency,
    RunPlanStep,
    RunPlan,
    RunPlanResult,
    ImpactAnalysis,
    ImpactAnalysisResult,
    CoordinationTask,
    CoordinationPlan,
    CoordinationResult,
)
from .run_plan import get_run_plan, topological_order
from .impact import get_impact_analysis, get_reverse_dependencies
from .coordination import build_search_terms, env_style_name, get_coordination_plan

__all__ = [
    "AnalysisError",
    "Relationship",
    "ServiceNotFound",
    "DependencyCycle",
    "MissingDependency",
    "RunPlanStep",
    "RunPlan",
    "RunPlanResult",
    "ImpactAnalysis",
    "ImpactAnalysisResult",
    "CoordinationTask",
    "CoordinationPlan",
    "CoordinationResult",
    "get_run_plan",
    "topological_order",
    "get_impact_analysis",
    "get_reverse_dependencies",
    "build_search_terms",
    "env_style_name",
    "get_coordination_plan",
]
