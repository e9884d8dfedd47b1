"""
Unit Tests for devgraph.core

Tests for:
    - models.py: block invariants, serialisation
    - builder.py: graph assembly from blocks
    - traversal.py: closure walk and cycle paths
    - graph_exporter.py: graph.json I/O, networkx projection
"""

import json

import pytest

from devgraph.core import (
    BlockType,
    Devgraph,
    DevgraphBlock,
    EnvBlock,
    GraphLoadError,
    Healthcheck,
    ServiceBlock,
    build_graph,
    graph_to_json,
    load_graph,
    to_networkx,
    walk_closure,
)


# =============================================================================
# Models
# =============================================================================

class TestModels:
    """Tests for block and healthcheck models."""

    def test_block_type_must_match_payload(self):
        """A block rejects a payload of the wrong type."""
        with pytest.raises(ValueError):
            DevgraphBlock(type=BlockType.API, file="a.md", data=ServiceBlock(name="a", type="node"))

    def test_unknown_block_type_name(self):
        """Unknown block type names are rejected with the name in the message."""
        with pytest.raises(ValueError, match='Unknown devgraph block type "queue"'):
            BlockType.from_string("queue")

    def test_service_block_omits_unset_fields(self):
        """Unset optional fields are left out of the dict form."""
        assert ServiceBlock(name="a", type="node").to_dict() == {"name": "a", "type": "node"}

    def test_healthcheck_round_trip(self):
        """A healthcheck survives to_dict and from_dict."""
        hc = Healthcheck(http="http://localhost/health")
        assert hc.to_dict() == {"http": "http://localhost/health"}
        assert Healthcheck.from_dict(hc.to_dict()) == hc

    def test_block_location(self, service):
        """Location joins file and line."""
        assert service("a", file="docs/x.md", line=12).location == "docs/x.md:12"
        assert service("a", file="docs/x.md").location == "docs/x.md"


# =============================================================================
# Builder
# =============================================================================

class TestBuildGraph:
    """Tests for build_graph."""

    def test_empty(self):
        """No blocks give an empty graph."""
        graph = build_graph([])
        assert graph.services == {} and graph.apis == {}

    def test_first_service_declaration_wins(self, service):
        """A duplicate service declaration does not replace the first."""
        graph = build_graph([
            service("api", type="node", file="a.md"),
            service("api", type="python", file="b.md"),
        ])
        assert graph.services["api"].type == "node"

    def test_api_index_keeps_last_block(self, service, api):
        """The API index holds the last block per service."""
        graph = build_graph([
            service("api"),
            api("api", {"GET /a": {}}),
            api("api", {"GET /b": {}}),
        ])
        assert graph.apis["api"].routes == {"GET /b": {}}
        assert [a.routes for a in graph.services["api"].apis] == [{"GET /a": {}}, {"GET /b": {}}]

    def test_api_for_unknown_service_is_indexed_but_not_attached(self, service, api):
        """An API block for an undeclared service is indexed only."""
        graph = build_graph([service("web"), api("ghost", {"GET /": {}})])
        assert "ghost" in graph.apis
        assert "ghost" not in graph.services
        assert graph.services["web"].apis == []

    def test_blocks_attach_regardless_of_order(self, service, env):
        """Env blocks attach even when they precede their service."""
        graph = build_graph([env("api", {"PORT": "3000"}), service("api")])
        assert graph.services["api"].merged_env() == {"PORT": "3000"}

    def test_orphan_env_is_dropped(self, service, env):
        """Env blocks for undeclared services are dropped."""
        graph = build_graph([service("api"), env("ghost", {"X": "1"})])
        assert graph.services["api"].env == []

    def test_merged_env_later_blocks_win(self, service, env):
        """Later env blocks override earlier values."""
        graph = build_graph([
            service("api"),
            env("api", {"PORT": "3000", "MODE": "dev"}),
            env("api", {"PORT": "4000"}),
        ])
        assert graph.services["api"].merged_env() == {"PORT": "4000", "MODE": "dev"}

    def test_merged_routes_later_blocks_win(self, service, api):
        """Later API blocks override earlier routes."""
        graph = build_graph([
            service("api"),
            api("api", {"GET /a": "first", "GET /b": "kept"}),
            api("api", {"GET /a": "second"}),
        ])
        node = graph.services["api"]
        assert node.merged_routes() == {"GET /a": "second", "GET /b": "kept"}
        assert node.route_count() == 3

    def test_has_service(self, graph_of):
        """has_service only knows declared services."""
        graph = graph_of({"api": ["db"]})
        assert graph.has_service("api")
        assert not graph.has_service("db")

    def test_services_keep_declaration_order(self, graph_of):
        """Services keep the order they were declared in."""
        graph = graph_of({"c": [], "a": [], "b": []})
        assert graph.service_names() == ["c", "a", "b"]

    def test_build_is_deterministic(self, workspace):
        """Building twice from the same files gives the same graph."""
        from devgraph.parsing import parse_markdown_files
        blocks = parse_markdown_files(["**/*.md"], workspace).blocks
        assert graph_to_json(build_graph(blocks)) == graph_to_json(build_graph(blocks))


# =============================================================================
# Traversal
# =============================================================================

class TestWalkClosure:
    """Tests for the iterative closure walk."""

    def test_preorder_and_parents(self):
        """Members come in preorder with their discovery parents."""
        edges = {"a": ["b", "c"], "b": ["d"], "c": ["d"], "d": []}
        closure = walk_closure("a", lambda n: edges[n])
        assert closure.order == ["a", "b", "d", "c"]
        assert closure.parents == {"a": None, "b": "a", "d": "b", "c": "a"}
        assert not closure.has_cycle

    def test_cycle_path_closes_on_first_element(self):
        """A cycle path starts and ends on the same service."""
        edges = {"a": ["b"], "b": ["c"], "c": ["b"]}
        closure = walk_closure("a", lambda n: edges[n])
        assert closure.cycle == ["b", "c", "b"]

    def test_self_loop(self):
        """A service depending on itself is a cycle."""
        closure = walk_closure("a", lambda n: ["a"])
        assert closure.cycle == ["a", "a"]

    def test_diamond_is_not_a_cycle(self):
        """Shared dependencies are not cycles."""
        edges = {"a": ["b", "c"], "b": ["d"], "c": ["d"], "d": []}
        assert walk_closure("a", lambda n: edges[n]).cycle is None

    @pytest.mark.slow
    def test_deep_chain_does_not_recurse(self):
        """Long chains do not hit the recursion limit."""
        depth = 5000
        closure = walk_closure(0, lambda n: [n + 1] if n < depth else [])
        assert len(closure.order) == depth + 1

    def test_members_excludes_root(self):
        """members can leave out the root."""
        closure = walk_closure("a", lambda n: {"a": ["b"], "b": []}[n])
        assert closure.members(include_root=False) == ["b"]


# =============================================================================
# graph.json and networkx projection
# =============================================================================

class TestGraphExport:
    """Tests for graph.json export and loading."""

    def test_json_shape(self, service, api, env):
        """graph.json has services and apis keyed by name."""
        graph = build_graph([
            service("api", depends=["db"], commands={"dev": "pnpm dev"}),
            api("api", {"GET /health": {}}),
            env("api", {"PORT": "3000"}),
        ])
        doc = json.loads(graph_to_json(graph))
        assert doc == {
            "services": {
                "api": {
                    "name": "api",
                    "type": "node",
                    "commands": {"dev": "pnpm dev"},
                    "depends": ["db"],
                    "apis": [{"service": "api", "routes": {"GET /health": {}}}],
                    "env": [{"service": "api", "vars": {"PORT": "3000"}}],
                }
            },
            "apis": {"api": {"service": "api", "routes": {"GET /health": {}}}},
        }

    def test_yaml_dates_are_written_as_strings(self):
        """Date values read from YAML are exported as strings."""
        from devgraph.parsing import parse_markdown
        parsed = parse_markdown(
            "```devgraph-service\nname: api\ntype: node\n```\n\n"
            "```devgraph-api\nservice: api\nroutes:\n  GET /v1: 2024-01-01\n```\n",
            "docs/api.md",
        )
        assert parsed.errors == []
        doc = json.loads(graph_to_json(build_graph(parsed.blocks)))
        assert doc["apis"]["api"]["routes"] == {"GET /v1": "2024-01-01"}

    def test_load_graph_round_trip(self, tmp_path, workspace):
        """A saved graph loads back equal."""
        from devgraph.parsing import parse_markdown_files
        graph = build_graph(parse_markdown_files(["**/*.md"], workspace).blocks)
        path = tmp_path / "graph.json"
        path.write_text(graph_to_json(graph), encoding="utf-8")
        loaded = load_graph(path)
        assert loaded.to_dict() == graph.to_dict()
        assert loaded.services["api"].healthcheck == Healthcheck(http="http://localhost:3000/health")

    def test_load_graph_missing_file(self, tmp_path):
        """A missing file raises GraphLoadError."""
        with pytest.raises(GraphLoadError, match="Failed to read graph.json at"):
            load_graph(tmp_path / "nope.json")

    def test_load_graph_bad_json(self, tmp_path):
        """Invalid JSON raises GraphLoadError."""
        path = tmp_path / "graph.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(GraphLoadError):
            load_graph(path)

    def test_load_graph_wrong_shape(self, tmp_path):
        """JSON of the wrong shape raises GraphLoadError."""
        path = tmp_path / "graph.json"
        path.write_text('{"services": []}', encoding="utf-8")
        with pytest.raises(GraphLoadError):
            load_graph(path)

    def test_networkx_projection(self, graph_of):
        """The networkx view marks undeclared dependencies as missing."""
        g = to_networkx(graph_of({"db": [], "api": ["db", "cache"]}))
        assert set(g.edges) == {("api", "db"), ("api", "cache")}
        assert g.nodes["cache"]["missing"] is True
        assert g.nodes["db"]["missing"] is False
        assert g.nodes["api"]["type"] == "node"

    def test_devgraph_from_dict_defaults(self):
        """Missing keys default to empty collections."""
        graph = Devgraph.from_dict({"services": {"a": {"name": "a", "type": "node"}}})
        assert graph.services["a"].apis == [] and graph.apis == {}
