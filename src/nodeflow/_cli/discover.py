"""Utilities to discover graphs in scripts and modules.

This module was adapted from `fastapi_cli.discover` of package `fastapi-cli` version 0.0.8 (77e6d1f).
"""

from __future__ import annotations

import importlib
import logging
import sys
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from nodeflow._compiled import CompiledGraph
from nodeflow._ir import GraphSpec

if TYPE_CHECKING:
    from pathlib import Path
    from types import ModuleType

    from .config import GraphSource

logger = logging.getLogger(__name__)

DEFAULT_GRAPH_NAME = "graph"


@dataclass
class ModuleData:
    """Module data for a Python module."""

    module_import_str: str
    extra_sys_path: Path
    module_paths: list[Path]


def get_module_data_from_path(path: Path) -> ModuleData:
    """Get module data from a file path.

    Args:
        path: Path to a Python file or package

    Returns:
        ModuleData containing module import information

    """
    use_path = path.resolve()
    module_path = use_path
    if use_path.is_file() and use_path.stem == "__init__":
        module_path = use_path.parent
    module_paths = [module_path]
    extra_sys_path = module_path.parent
    for parent in module_path.parents:
        init_path = parent / "__init__.py"
        if init_path.is_file():
            module_paths.insert(0, parent)
            extra_sys_path = parent.parent
        else:
            break

    module_str = ".".join(p.stem for p in module_paths)
    return ModuleData(
        module_import_str=module_str,
        extra_sys_path=extra_sys_path.resolve(),
        module_paths=module_paths,
    )


def _as_graph(obj: object, where: str) -> Mapping[Any, Any]:
    if isinstance(obj, CompiledGraph):
        return obj.spec
    if isinstance(obj, Mapping):
        return obj
    msg = f"{where} is not a graph (expected a mapping, GraphSpec or CompiledGraph)"
    raise TypeError(msg)


def _find_graph(module: ModuleType, graph_name: str | None) -> Mapping[Any, Any]:
    where = module.__name__
    if graph_name:
        if not hasattr(module, graph_name):
            msg = f"Could not find graph '{graph_name}' in {where}"
            raise ValueError(msg)
        return _as_graph(getattr(module, graph_name), f"'{graph_name}' in {where}")

    # Infer the graph from the module
    for name in dir(module):
        obj = getattr(module, name)
        if isinstance(obj, (GraphSpec, CompiledGraph)):
            logger.debug("Found graph: %s", name)
            return _as_graph(obj, f"'{name}' in {where}")

    if hasattr(module, DEFAULT_GRAPH_NAME):
        return _as_graph(getattr(module, DEFAULT_GRAPH_NAME), f"'{DEFAULT_GRAPH_NAME}' in {where}")

    msg = "Could not find a graph in module, try using --graph"
    raise ValueError(msg)


def load_graph_from_script(script_path: Path, graph_name: str | None = None) -> Mapping[Any, Any]:
    """Load a graph from a Python script path.

    Without ``graph_name`` the first GraphSpec or CompiledGraph in the module
    is used, falling back to a variable called ``graph``.

    Args:
        script_path: Path to the Python script containing the graph
        graph_name: Name of the graph variable

    Returns:
        The graph (a mapping, possibly a GraphSpec)

    Raises:
        ImportError: If the module cannot be imported
        ValueError: If no graph is found or the specified variable doesn't exist
        TypeError: If the specified variable is not a graph

    """
    module_data = get_module_data_from_path(script_path)
    sys.path.insert(0, str(module_data.extra_sys_path))

    try:
        module = importlib.import_module(module_data.module_import_str)
    except (ImportError, ValueError):
        logger.exception("Import error")
        logger.warning("Ensure all the package directories have an __init__.py file")
        raise

    return _find_graph(module, graph_name)


def load_graph_from_module_path(module_path: str) -> Mapping[Any, Any]:
    """Load a graph from a module path (e.g., 'examples.stats:graph').

    Raises:
        ValueError: If module path format is invalid
        TypeError: If the specified variable is not a graph

    """
    if ":" not in module_path:
        msg = "Module path must be in format 'module.path:variable_name'"
        raise ValueError(msg)

    module_name, graph_name = module_path.split(":", 1)
    module = importlib.import_module(module_name)
    return _find_graph(module, graph_name)


def load_graph_from_source(source: GraphSource) -> Mapping[Any, Any]:
    """Load a graph from a GraphSource (script or module)."""
    # Import here to avoid circular imports at module level
    from .config import ModuleSource, ScriptSource  # noqa: PLC0415

    match source:
        case ScriptSource(script=script, name=name):
            return load_graph_from_script(script, name)
        case ModuleSource(module_path=module_path):
            return load_graph_from_module_path(module_path)
