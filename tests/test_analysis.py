"""
Unit Tests for devgraph.analysis

Tests for:
    - run_plan.py: topological start order, cycle / missing / not-found results
    - impact.py: reverse dependencies and blast radius
    - coordination.py: per-consumer tasks, paths and search terms
"""

import pytest

from devgraph.analysis import (
    AnalysisError,
    DependencyCycle,
    ImpactAnalysis,
    MissingDependency,
    Relationship,
    RunPlan,
    ServiceNotFound,
    build_search_terms,
    env_style_name,
    get_coordination_plan,
    get_impact_analysis,
    get_reverse_dependencies,
    get_run_plan,
)
from devgraph.core import build_graph


def assert_cycle_closes(path):
    assert len(path) >= 2
    assert path[0] == path[-1]


# =============================================================================
# Run plan
# =============================================================================

class TestRunPlan:
    """Tests for get_run_plan."""

    def test_dependency_starts_first(self, graph_of):
        """A dependency is started before its dependent."""
        plan = get_run_plan(graph_of({"api": [], "web": ["api"]}), "web")
        assert isinstance(plan, RunPlan)
        assert plan.ok
        assert plan.order == ["api", "web"]

    def test_only_the_closure_is_planned(self, graph_of):
        """Unrelated services are left out."""
        graph = graph_of({"db": [], "api": ["db"], "web": ["api"], "admin": ["db"]})
        assert get_run_plan(graph, "api").order == ["db", "api"]

    def test_every_step_follows_its_dependencies(self, graph_of):
        """Every step comes after all of its dependencies."""
        graph = graph_of({
            "web": ["api", "auth"],
            "api": ["db", "cache"],
            "auth": ["db"],
            "cache": [],
            "db": [],
        })
        order = get_run_plan(graph, "web").order
        assert sorted(order) == ["api", "auth", "cache", "db", "web"]
        for name in order:
            for dep in graph.services[name].dependencies:
                assert order.index(dep) < order.index(name)
        assert order[-1] == "web"

    def test_ties_follow_discovery_order(self, graph_of):
        """Independent services keep the declared dependency order."""
        graph = graph_of({"app": ["b", "a", "c"], "a": [], "b": [], "c": []})
        assert get_run_plan(graph, "app").order == ["b", "a", "c", "app"]

    def test_plan_is_stable(self, graph_of):
        """The same graph always gives the same plan."""
        graph = graph_of({"web": ["api", "auth"], "api": ["db"], "auth": ["db"], "db": []})
        assert get_run_plan(graph, "web").order == get_run_plan(graph, "web").order

    def test_step_contents(self, workspace):
        """Steps carry type, dev command, ports and healthcheck."""
        from devgraph.parsing import parse_markdown_files
        graph = build_graph(parse_markdown_files(["**/*.md"], workspace).blocks)
        plan = get_run_plan(graph, "web")
        assert plan.order == ["db", "api", "web"]

        db, api, web = plan.steps
        assert db.command is None
        assert db.healthcheck.kind == "tcp"
        assert api.command == "pnpm dev"
        assert api.ports == [3000]
        assert api.env == {"DATABASE_URL": "postgres://localhost:5432/app", "PORT": "3000"}
        assert web.depends == ["api"]

    def test_cycle(self, graph_of):
        """A cycle through the root is reported with its path."""
        result = get_run_plan(graph_of({"a": ["b"], "b": ["a"]}), "a")
        assert isinstance(result, DependencyCycle)
        assert not result.ok
        assert result.error == AnalysisError.CYCLE
        assert result.path == ["a", "b", "a"]

    def test_cycle_below_the_root(self, graph_of):
        """A cycle among dependencies is reported too."""
        result = get_run_plan(graph_of({"web": ["api"], "api": ["db"], "db": ["api"]}), "web")
        assert result.error == AnalysisError.CYCLE
        assert result.path == ["api", "db", "api"]
        assert_cycle_closes(result.path)

    def test_missing_dependency(self, graph_of):
        """An undeclared dependency names the dependent and the missing service."""
        result = get_run_plan(graph_of({"web": ["api"], "api": ["ghost"]}), "web")
        assert isinstance(result, MissingDependency)
        assert result.error == AnalysisError.MISSING_DEPENDENCY
        assert (result.dependent, result.missing) == ("api", "ghost")

    def test_not_found_lists_available(self, graph_of):
        """An unknown service lists the available ones."""
        result = get_run_plan(graph_of({"api": [], "web": ["api"]}), "nope")
        assert isinstance(result, ServiceNotFound)
        assert result.error == AnalysisError.NOT_FOUND
        assert result.available == ["api", "web"]

    def test_to_dict(self, graph_of):
        """Failures serialise with their error code."""
        data = get_run_plan(graph_of({"a": ["b"], "b": ["a"]}), "a").to_dict()
        assert data == {"ok": False, "error": "cycle", "service": "a", "path": ["a", "b", "a"]}


# =============================================================================
# Impact analysis
# =============================================================================

class TestImpactAnalysis:
    """Tests for get_impact_analysis."""

    def test_reverse_dependencies(self, graph_of):
        """Consumers are listed per declared service."""
        graph = graph_of({"a": [], "b": ["a"], "c": ["a", "b", "ghost"]})
        assert get_reverse_dependencies(graph) == {"a": ["b", "c"], "b": ["c"], "c": []}

    def test_chain(self, graph_of):
        """Consumers split into direct and transitive."""
        result = get_impact_analysis(graph_of({"a": [], "b": ["a"], "c": ["b"]}), "a")
        assert isinstance(result, ImpactAnalysis)
        assert result.direct_consumers == ["b"]
        assert result.transitive_consumers == ["c"]
        assert result.total_affected_count == 2

    def test_direct_and_transitive_are_disjoint(self, graph_of):
        """A direct consumer is never also listed as transitive."""
        # c consumes a directly and through b
        result = get_impact_analysis(graph_of({"a": [], "b": ["a"], "c": ["a", "b"], "d": ["c"]}), "a")
        assert result.direct_consumers == ["b", "c"]
        assert result.transitive_consumers == ["d"]
        assert not set(result.direct_consumers) & set(result.transitive_consumers)
        assert result.total_affected_count == 3

    def test_leaf_has_no_consumers(self, graph_of):
        """A service nobody uses affects nothing."""
        result = get_impact_analysis(graph_of({"a": [], "b": ["a"]}), "b")
        assert result.direct_consumers == [] and result.transitive_consumers == []
        assert result.total_affected_count == 0

    def test_route_count_covers_affected_services_only(self, service, api):
        """Route count sums the affected services only."""
        graph = build_graph([
            service("db"),
            service("api", depends=["db"]),
            service("web", depends=["api"]),
            api("db", {"GET /internal": {}}),
            api("api", {"GET /a": {}, "GET /b": {}}),
            api("web", {"GET /": {}}),
        ])
        assert get_impact_analysis(graph, "db").total_api_routes == 3

    def test_cycle(self, graph_of):
        """A cycle among consumers is reported."""
        result = get_impact_analysis(graph_of({"a": ["b"], "b": ["a"]}), "a")
        assert result.error == AnalysisError.CYCLE
        assert_cycle_closes(result.path)

    def test_not_found(self, graph_of):
        """An unknown service is NOT_FOUND."""
        result = get_impact_analysis(graph_of({"a": []}), "zzz")
        assert result.error == AnalysisError.NOT_FOUND
        assert result.available == ["a"]

    def test_to_dict(self, graph_of):
        """The payload uses camelCase keys."""
        data = get_impact_analysis(graph_of({"a": [], "b": ["a"], "c": ["b"]}), "a").to_dict()
        assert data["directConsumers"] == ["b"]
        assert data["transitiveConsumers"] == ["c"]
        assert data["totalAffectedCount"] == 2


# =============================================================================
# Coordination plan
# =============================================================================

class TestCoordinationPlan:
    """Tests for get_coordination_plan."""

    def test_direct_and_transitive_tasks(self, graph_of):
        """Direct consumer tasks come before transitive ones."""
        graph = graph_of({"db": [], "api": ["db"], "worker": ["db"], "web": ["api"]})
        plan = get_coordination_plan(graph, "db")
        tasks = {t.consumer: t for t in plan.tasks}
        assert [t.consumer for t in plan.tasks] == ["api", "worker", "web"]
        assert tasks["api"].relationship == Relationship.DIRECT
        assert tasks["api"].dependency_path == ["db", "api"]
        assert tasks["web"].relationship == Relationship.TRANSITIVE
        assert tasks["web"].dependency_path == ["db", "api", "web"]

    def test_transitive_path_is_shortest(self, graph_of):
        """A transitive task carries the shortest consumer path."""
        graph = graph_of({"a": [], "b": ["a"], "c": ["b"], "d": ["c", "x"], "x": ["b"], "e": ["d"]})
        plan = get_coordination_plan(graph, "a")
        paths = {t.consumer: t.dependency_path for t in plan.tasks}
        assert len(paths["d"]) == 4
        assert paths["e"][0] == "a" and paths["e"][-1] == "e"
        assert len(paths["e"]) == 5

    def test_commands_include_missing_as_none(self, workspace):
        """Commands a consumer lacks are None."""
        from devgraph.parsing import parse_markdown_files
        graph = build_graph(parse_markdown_files(["**/*.md"], workspace).blocks)
        plan = get_coordination_plan(graph, "api")
        assert plan.tasks[0].consumer == "web"
        assert plan.tasks[0].commands == {"dev": "pnpm dev --port 3001", "test": None, "build": None}

    def test_search_terms(self, service, env):
        """Search terms cover the name, env-style prefixes and env vars."""
        graph = build_graph([
            service("user-service"),
            env("user-service", {"PORT": "4000", "USER_SERVICE_URL": "http://x"}),
        ])
        assert build_search_terms(graph, "user-service") == [
            "user-service",
            "USER_SERVICE_URL",
            "USER_SERVICE_HOST",
            "USER_SERVICE_SERVICE_URL",
            "PORT",
        ]

    @pytest.mark.parametrize("name, expected", [
        ("api", "API"),
        ("user-service", "USER_SERVICE"),
        ("payments.v2", "PAYMENTS_V2"),
    ])
    def test_env_style_name(self, name, expected):
        """Names become upper-case env prefixes."""
        assert env_style_name(name) == expected

    def test_every_task_shares_search_terms(self, graph_of):
        """Every task gets the same search terms."""
        plan = get_coordination_plan(graph_of({"a": [], "b": ["a"], "c": ["b"]}), "a")
        assert all(t.search_terms == plan.search_terms for t in plan.tasks)

    def test_no_consumers(self, graph_of):
        """A service nobody uses gives no tasks."""
        plan = get_coordination_plan(graph_of({"a": []}), "a")
        assert plan.ok and plan.tasks == []

    def test_failures_pass_through(self, graph_of):
        """Impact failures become coordination failures."""
        assert get_coordination_plan(graph_of({"a": []}), "b").error == AnalysisError.NOT_FOUND
        cyclic = graph_of({"a": ["b"], "b": ["a"]})
        assert get_coordination_plan(cyclic, "a").error == AnalysisError.CYCLE

    def test_to_dict(self, graph_of):
        """Tasks serialise with their relationship."""
        data = get_coordination_plan(graph_of({"a": [], "b": ["a"]}), "a").to_dict()
        assert data["ok"] is True
        assert data["tasks"][0]["relationship"] == "direct"
        assert data["tasks"][0]["dependencyPath"] == ["a", "b"]
