"""Configuration loading from pyproject.toml."""

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import cast

from pydantic import ValidationError

from nodeflow._settings import EngineSettings


class ConfigError(Exception):
    """Error in nodeflow configuration."""


@dataclass(slots=True, frozen=True)
class ScriptSource:
    """Script path with optional variable name."""

    script: Path
    name: str | None = None


@dataclass(slots=True, frozen=True)
class ModuleSource:
    """Module path with variable name (e.g., 'examples.stats:graph')."""

    module_path: str


GraphSource = ScriptSource | ModuleSource

_SETTINGS_KEYS = ("max_workers", "task_timeout", "thread_name_prefix")


@dataclass(slots=True, frozen=True)
class NodeflowConfig:
    """Configuration loaded from pyproject.toml.

    All relative paths are resolved from the project root (directory containing pyproject.toml).
    """

    graph: GraphSource | None = None
    settings: EngineSettings = field(default_factory=EngineSettings)
    project_root: Path | None = None


def find_pyproject_toml(start_dir: Path | None = None) -> Path | None:
    """Find pyproject.toml by walking up from start_dir.

    Args:
        start_dir: Starting directory. Defaults to current working directory.

    Returns:
        Path to pyproject.toml if found, None otherwise.

    """
    if start_dir is None:
        start_dir = Path.cwd()

    current = start_dir.resolve()

    while True:
        candidate = current / "pyproject.toml"
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            # Reached filesystem root
            return None
        current = parent


def parse_graph_source(value: object, project_root: Path | None = None) -> GraphSource:
    """Parse a graph location.

    Args:
        value: A "module.path:variable" string, a script path string, or a
            ``{script = "...", name = "..."}`` table.
        project_root: Directory that relative script paths are resolved from.

    Returns:
        Parsed GraphSource

    Raises:
        ConfigError: If the value format is invalid

    """
    if isinstance(value, str):
        if value.endswith(".py"):
            script_path = Path(value)
            if project_root is not None and not script_path.is_absolute():
                script_path = project_root / script_path
            return ScriptSource(script=script_path)
        if ":" not in value:
            msg = f"Invalid module path '{value}'. Expected format: 'module.path:variable_name'"
            raise ConfigError(msg)
        return ModuleSource(module_path=value)

    if isinstance(value, dict):
        value_dict = cast("dict[str, object]", value)
        script_value = value_dict.get("script")
        if not isinstance(script_value, str):
            msg = "Invalid [tool.nodeflow].graph: expected a table with a 'script' path"
            raise ConfigError(msg)
        script_path = Path(script_value)
        if project_root is not None and not script_path.is_absolute():
            script_path = project_root / script_path

        name = value_dict.get("name")
        if name is not None and not isinstance(name, str):
            msg = "Invalid [tool.nodeflow].graph.name: expected string"
            raise ConfigError(msg)

        return ScriptSource(script=script_path, name=name)

    msg = "Invalid [tool.nodeflow].graph configuration. Expected string or table with 'script' key."
    raise ConfigError(msg)


def load_config(pyproject_path: Path) -> NodeflowConfig:
    """Load and validate [tool.nodeflow] config from pyproject.toml.

    Args:
        pyproject_path: Path to pyproject.toml

    Returns:
        Parsed NodeflowConfig

    Raises:
        ConfigError: If the configuration is invalid

    """
    project_root = pyproject_path.parent

    with pyproject_path.open("rb") as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            msg = f"Invalid TOML in {pyproject_path}: {e}"
            raise ConfigError(msg) from e

    section = data.get("tool", {}).get("nodeflow", {})
    if not section:
        return NodeflowConfig(project_root=project_root)

    unknown = set(section) - {"graph", *_SETTINGS_KEYS}
    if unknown:
        msg = f"Unknown [tool.nodeflow] keys: {', '.join(sorted(unknown))}"
        raise ConfigError(msg)

    graph_source: GraphSource | None = None
    if "graph" in section:
        graph_source = parse_graph_source(section["graph"], project_root)

    try:
        settings = EngineSettings.model_validate({k: v for k, v in section.items() if k in _SETTINGS_KEYS})
    except ValidationError as e:
        msg = f"Invalid [tool.nodeflow] settings: {e}"
        raise ConfigError(msg) from e

    return NodeflowConfig(graph=graph_source, settings=settings, project_root=project_root)


def get_config() -> NodeflowConfig:
    """Get config from pyproject.toml in current directory or parents.

    Returns:
        NodeflowConfig (may be empty if no pyproject.toml or no [tool.nodeflow] section)

    """
    pyproject_path = find_pyproject_toml()
    if pyproject_path is None:
        return NodeflowConfig()
    return load_config(pyproject_path)
