"""Tests for the dependency graph, cycle detection and depth ordering."""

import pytest

from nodeflow._graph import DependencyGraph, depth_scores, find_cycles, order_by_depth

STATS = {
    "xs": [],
    "n": ["xs"],
    "m": ["xs", "n"],
    "m2": ["xs", "n"],
    "v": ["m", "m2"],
}


class TestFindCycles:
    def test_acyclic(self) -> None:
        assert find_cycles(STATS) == []

    def test_two_node_cycle_reported_per_root(self) -> None:
        deps = {"xs": [], "m2": ["xs", "v"], "v": ["m2"]}
        assert find_cycles(deps) == [["m2", "v", "m2"], ["v", "m2", "v"]]

    def test_self_dependency(self) -> None:
        assert find_cycles({"a": ["a"]}) == [["a", "a"]]

    def test_longer_cycle(self) -> None:
        deps = {"a": ["b"], "b": ["c"], "c": ["a"], "d": ["a"]}
        assert find_cycles(deps) == [["a", "b", "c", "a"], ["b", "c", "a", "b"], ["c", "a", "b", "c"]]

    def test_missing_dependencies_ignored(self) -> None:
        assert find_cycles({"n": ["xs"], "m": ["n", "ys"]}) == []


class TestDepthScores:
    def test_stats_graph(self) -> None:
        scores = depth_scores(STATS, initial=["xs"])
        assert scores == {"xs": 0, "n": 1, "m": 2, "m2": 2, "v": 3}

    def test_dependency_free_nodes_are_initial(self) -> None:
        scores = depth_scores(STATS, initial=[])
        assert scores["xs"] == 0

    def test_supplied_initial_cuts_chains(self) -> None:
        # With n supplied, m and m2 only depend on initial nodes
        scores = depth_scores(STATS, initial=["xs", "n"])
        assert scores == {"xs": 0, "n": 0, "m": 1, "m2": 1, "v": 2}

    def test_missing_dependencies_score_as_initial(self) -> None:
        assert depth_scores({"n": ["xs"], "m": ["n"]}, initial=[]) == {"n": 1, "m": 2}

    def test_longest_chain_wins(self) -> None:
        deps = {"a": [], "b": ["a"], "c": ["b"], "d": ["a", "c"]}
        assert depth_scores(deps, initial=[])["d"] == 3

    def test_cycle_raises(self) -> None:
        with pytest.raises(ValueError, match="Cycle"):
            depth_scores({"xs": [], "a": ["xs", "b"], "b": ["a"]}, initial=["xs"])


class TestOrderByDepth:
    def test_ties_broken_by_sequence(self) -> None:
        sequence = {"xs": 0, "n": 1, "m": 2, "m2": 3, "v": 4}
        order = order_by_depth(STATS, ["xs"], sequence)
        assert order == [("xs", 0), ("n", 1), ("m", 2), ("m2", 2), ("v", 3)]

    def test_declaration_order_does_not_matter(self) -> None:
        deps = {"v": ["m", "m2"], "m2": ["xs", "n"], "m": ["xs", "n"], "n": ["xs"], "xs": []}
        sequence = {key: i for i, key in enumerate(deps)}
        order = [key for key, _ in order_by_depth(deps, [], sequence)]
        assert order == ["xs", "n", "m2", "m", "v"]

    def test_every_node_after_its_dependencies(self) -> None:
        deps = {"e": ["d", "a"], "d": ["c"], "c": ["b", "a"], "b": ["a"], "a": []}
        sequence = {key: i for i, key in enumerate(deps)}
        order = [key for key, _ in order_by_depth(deps, [], sequence)]
        for key, key_deps in deps.items():
            for dep in key_deps:
                assert order.index(dep) < order.index(key)


class TestDependencyGraph:
    @pytest.fixture
    def graph(self) -> DependencyGraph[str]:
        return DependencyGraph.from_dependencies({"n": ("xs",), "m": ("xs", "n"), "v": ("m", "ys")})

    def test_nodes_in_declaration_order(self, graph: DependencyGraph[str]) -> None:
        assert graph.nodes == ("n", "m", "v")
        assert len(graph) == 3

    def test_predecessors_keep_declared_order(self, graph: DependencyGraph[str]) -> None:
        assert graph.predecessors("m") == ("xs", "n")
        assert graph.predecessors("unknown") == ()

    def test_successors(self, graph: DependencyGraph[str]) -> None:
        assert graph.successors("xs") == frozenset({"n", "m"})
        assert graph.successors("v") == frozenset()

    def test_missing(self, graph: DependencyGraph[str]) -> None:
        assert graph.missing() == ("xs", "ys")
        assert "xs" not in graph

    def test_cycles(self, graph: DependencyGraph[str]) -> None:
        assert graph.cycles() == []
        cyclic = DependencyGraph.from_dependencies({"a": ("b",), "b": ("a",)})
        assert cyclic.cycles() == [["a", "b", "a"], ["b", "a", "b"]]

    def test_depth_order(self, graph: DependencyGraph[str]) -> None:
        order = graph.depth_order(set(), {"n": 0, "m": 1, "v": 2})
        assert order == [("n", 1), ("m", 2), ("v", 3)]
