"""
Report renderers: summary, Mermaid, diff, agent context, agent skills and
analysis text.
"""
from .summary import generate_summary
from .mermaid import generate_mermaid, mermaid_id
from .diff import GraphDiff, ServiceDiff, KeyedChange, compute_graph_diff, diff_graphs, format_graph_diff
from .inference import (
    InferredData,
    detect_package_manager,
    infer_commands,
    infer_landmarks,
    infer_service_data,
    landmark_description,
    merge_commands,
)
from .agents import (
    GenerateAgentsOptions,
    GenerateAgentsResult,
    format_agents_result,
    generate_agents,
    render_agent_markdown,
)
from .skills import (
    GenerateSkillsOptions,
    GenerateSkillsResult,
    SkillFile,
    format_skills_result,
    generate_skills,
    service_skill_name,
    skill_name,
)
from .runbook import render_coordination_runbook, render_failure, render_impact, render_run_plan

__all__ = [
    "generate_summary",
    "generate_mermaid",
    "mermaid_id",
    "GraphDiff",
    "ServiceDiff",
    "KeyedChange",
    "compute_graph_diff",
    "diff_graphs",
    "format_graph_diff",
    "InferredData",
    "detect_package_manager",
    "infer_commands",
    "infer_landmarks",
    "infer_service_data",
    "landmark_description",
    "merge_commands",
    "GenerateAgentsOptions",
    "GenerateAgentsResult",
    "format_agents_result",
    "generate_agents",
    "render_agent_markdown",
    "GenerateSkillsOptions",
    "GenerateSkillsResult",
    "SkillFile",
    "format_skills_result",
    "generate_skills",
    "service_skill_name",
    "skill_name",
    "render_coordination_runbook",
    "render_failure",
    "render_impact",
    "render_run_plan",
]
