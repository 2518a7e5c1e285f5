"""Tests for the configuration module."""

from pathlib import Path

import pytest

from nodeflow._cli.config import (
    ConfigError,
    ModuleSource,
    NodeflowConfig,
    ScriptSource,
    find_pyproject_toml,
    get_config,
    load_config,
    parse_graph_source,
)
from nodeflow._settings import EngineSettings


def _write_pyproject(tmp_path: Path, body: str) -> Path:
    pyproject = tmp_path / "pyproject.toml"
    pyproject.write_text(body)
    return pyproject


class TestFindPyprojectToml:
    """Tests for find_pyproject_toml function."""

    def test_finds_in_current_directory(self, tmp_path: Path) -> None:
        pyproject = _write_pyproject(tmp_path, "[project]\nname = 'test'\n")

        assert find_pyproject_toml(tmp_path) == pyproject

    def test_finds_in_parent_directory(self, tmp_path: Path) -> None:
        """Should walk up until a pyproject.toml is found."""
        pyproject = _write_pyproject(tmp_path, "[project]\nname = 'test'\n")
        subdir = tmp_path / "src" / "pkg"
        subdir.mkdir(parents=True)

        assert find_pyproject_toml(subdir) == pyproject

    def test_returns_none_when_not_found(self, tmp_path: Path) -> None:
        assert find_pyproject_toml(tmp_path) is None


class TestParseGraphSource:
    def test_module_path(self) -> None:
        assert parse_graph_source("examples.stats:graph") == ModuleSource(module_path="examples.stats:graph")

    def test_script_path_string(self, tmp_path: Path) -> None:
        source = parse_graph_source("examples/stats.py", tmp_path)
        assert source == ScriptSource(script=tmp_path / "examples/stats.py")

    def test_absolute_script_path_kept(self, tmp_path: Path) -> None:
        script = tmp_path / "graph.py"
        source = parse_graph_source({"script": str(script)}, Path("/elsewhere"))
        assert source == ScriptSource(script=script)

    def test_invalid_type(self) -> None:
        with pytest.raises(ConfigError, match="Expected string or table"):
            parse_graph_source(42)


class TestLoadConfigGraph:
    """Tests for loading the graph location."""

    def test_module_path_string(self, tmp_path: Path) -> None:
        pyproject = _write_pyproject(
            tmp_path,
            """
[tool.nodeflow]
graph = "examples.stats:graph"
""",
        )

        config = load_config(pyproject)

        assert config.graph == ModuleSource(module_path="examples.stats:graph")
        assert config.project_root == tmp_path

    def test_module_path_without_colon_raises_error(self, tmp_path: Path) -> None:
        pyproject = _write_pyproject(
            tmp_path,
            """
[tool.nodeflow]
graph = "examples.stats"
""",
        )

        with pytest.raises(ConfigError, match="Invalid module path"):
            load_config(pyproject)

    def test_script_path_inline_table(self, tmp_path: Path) -> None:
        pyproject = _write_pyproject(
            tmp_path,
            """
[tool.nodeflow]
graph = { script = "examples/stats.py", name = "pgraph" }
""",
        )

        config = load_config(pyproject)

        assert isinstance(config.graph, ScriptSource)
        assert config.graph.script == tmp_path / "examples/stats.py"
        assert config.graph.name == "pgraph"

    def test_script_path_missing_script_key_raises_error(self, tmp_path: Path) -> None:
        pyproject = _write_pyproject(
            tmp_path,
            """
[tool.nodeflow]
graph = { name = "graph" }
""",
        )

        with pytest.raises(ConfigError, match="'script' path"):
            load_config(pyproject)

    def test_invalid_name_type_raises_error(self, tmp_path: Path) -> None:
        pyproject = _write_pyproject(
            tmp_path,
            """
[tool.nodeflow]
graph = { script = "graph.py", name = 3 }
""",
        )

        with pytest.raises(ConfigError, match="expected string"):
            load_config(pyproject)


class TestLoadConfigSettings:
    """Tests for loading engine settings."""

    def test_settings(self, tmp_path: Path) -> None:
        pyproject = _write_pyproject(
            tmp_path,
            """
[tool.nodeflow]
graph = "examples.stats:graph"
max_workers = 4
task_timeout = 2.5
thread_name_prefix = "stats"
""",
        )

        config = load_config(pyproject)

        assert config.settings == EngineSettings(max_workers=4, task_timeout=2.5, thread_name_prefix="stats")

    def test_invalid_setting_raises_error(self, tmp_path: Path) -> None:
        pyproject = _write_pyproject(
            tmp_path,
            """
[tool.nodeflow]
max_workers = 0
""",
        )

        with pytest.raises(ConfigError, match="Invalid \\[tool.nodeflow\\] settings"):
            load_config(pyproject)

    def test_unknown_key_raises_error(self, tmp_path: Path) -> None:
        pyproject = _write_pyproject(
            tmp_path,
            """
[tool.nodeflow]
workers = 4
""",
        )

        with pytest.raises(ConfigError, match="Unknown \\[tool.nodeflow\\] keys: workers"):
            load_config(pyproject)

    def test_invalid_toml_raises_error(self, tmp_path: Path) -> None:
        pyproject = _write_pyproject(tmp_path, "[tool.nodeflow\n")

        with pytest.raises(ConfigError, match="Invalid TOML"):
            load_config(pyproject)


class TestLoadConfigEmptySection:
    """Tests for empty or missing configuration."""

    def test_no_nodeflow_section(self, tmp_path: Path) -> None:
        pyproject = _write_pyproject(tmp_path, "[project]\nname = 'test'\n")

        config = load_config(pyproject)

        assert config.graph is None
        assert config.settings == EngineSettings()
        assert config.project_root == tmp_path

    def test_get_config_without_pyproject(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)

        assert get_config() == NodeflowConfig()
