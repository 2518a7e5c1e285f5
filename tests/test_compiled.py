"""Tests for compiled graphs."""

import pytest

import nodeflow as nf


@pytest.fixture
def compiled() -> nf.CompiledGraph:
    graph = {
        "xs": lambda: list(range(10)),
        "n": lambda xs: len(xs),
        "m": lambda xs, n: sum(xs) / n,
    }
    return nf.compile_graph(graph)


class TestCompiledGraph:
    def test_initial_keys(self, compiled: nf.CompiledGraph) -> None:
        assert compiled.initial_keys == ("xs",)

    def test_default_settings(self, compiled: nf.CompiledGraph) -> None:
        assert compiled.settings == nf.EngineSettings()

    def test_reusable(self, compiled: nf.CompiledGraph) -> None:
        with compiled:
            assert compiled.compute_now()["m"] == 4.5
            assert compiled.compute_now({"xs": [1, 2, 3]})["m"] == 2

    def test_order_memoized_per_initial_keys(self, compiled: nf.CompiledGraph) -> None:
        first = compiled.evaluation_order()
        assert compiled.evaluation_order() is first
        assert compiled.evaluation_order(["xs"]) == first

        other = compiled.evaluation_order(["n"])
        assert other is not first
        assert compiled.evaluation_order({"n"}) is other

    def test_order_follows_supplied_initials(self, compiled: nf.CompiledGraph) -> None:
        assert compiled.explain_order() == [("xs", 0), ("n", 1), ("m", 2)]
        assert compiled.explain_order(["n"]) == [("xs", 0), ("n", 0), ("m", 1)]

    def test_supplying_a_middle_node_uses_its_own_order(self, compiled: nf.CompiledGraph) -> None:
        with compiled:
            compiled.compute_now()
            assert compiled.compute_now({"n": 5}, keep_initials=False) == {"m": 9.0}

    def test_compute_later(self, compiled: nf.CompiledGraph) -> None:
        with compiled:
            view = compiled.compute_later()
            assert view["m"] == 4.5

    def test_compute_while(self) -> None:
        draws = iter([1, 2, 3])
        seen: list[int] = []
        graph = {"x": lambda: next(draws), "record": lambda x: seen.append(x)}
        with nf.compile_graph(graph) as compiled:
            compiled.compute_while(lambda: len(seen) < 3)
        assert seen == [1, 2, 3]

    def test_compute_while_requires_graph_initials(self) -> None:
        compiled = nf.compile_graph({"n": lambda xs: len(xs)})
        with pytest.raises(nf.NoInitialValuesError):
            compiled.compute_while(lambda: True)

    def test_close_is_idempotent(self, compiled: nf.CompiledGraph) -> None:
        compiled.compute_now()
        compiled.close()
        compiled.close()
        # A closed handle starts a new pool on demand
        assert compiled.compute_now()["n"] == 10

    def test_accepts_graph_spec(self) -> None:
        spec = nf.build_graph_spec({"xs": [1, 2], "n": lambda xs: len(xs)})
        compiled = nf.compile_graph(spec)
        assert compiled.spec is spec

    def test_repr(self, compiled: nf.CompiledGraph) -> None:
        assert repr(compiled) == "CompiledGraph(['xs', 'n', 'm'])"


class TestEngineSettings:
    def test_defaults(self) -> None:
        settings = nf.EngineSettings()
        assert settings.max_workers is None
        assert settings.task_timeout is None
        assert settings.thread_name_prefix == "nodeflow"

    def test_rejects_non_positive_values(self) -> None:
        with pytest.raises(ValueError, match="max_workers"):
            nf.EngineSettings(max_workers=0)
        with pytest.raises(ValueError, match="task_timeout"):
            nf.EngineSettings(task_timeout=-1)

    def test_rejects_unknown_fields(self) -> None:
        with pytest.raises(ValueError, match="extra"):
            nf.EngineSettings(workers=4)  # type: ignore[call-arg]

    def test_frozen(self) -> None:
        settings = nf.EngineSettings()
        with pytest.raises(ValueError, match="frozen"):
            settings.max_workers = 2  # type: ignore[misc]
