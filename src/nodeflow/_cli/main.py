import json
import logging
import time
from collections.abc import Mapping
from typing import Annotated, Any

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from nodeflow._compiled import compile_graph
from nodeflow._errors import InvalidGraphError, NodeflowError
from nodeflow._ir import GraphBuildError, build_graph_spec
from nodeflow._settings import EngineSettings
from nodeflow._validate import dependency_graph, get_cycles, graph_problems

from .config import ConfigError, GraphSource, NodeflowConfig, get_config, parse_graph_source
from .discover import load_graph_from_source
from .graph_query import (
    get_dependency_tree,
    get_order_rows,
    list_nodes,
    parse_assignment,
    summarize_results,
)
from .graph_render import (
    render_node_table,
    render_order_table,
    render_problems,
    render_results_table,
    render_tree,
)

app = typer.Typer()

logger = logging.getLogger(__name__)
# Console for stderr (info/errors)
err_console = Console(stderr=True)
# Console for stdout (results)
out_console = Console()

PathArgument = Annotated[
    str | None,
    typer.Argument(
        help="Path to a Python script or module path (e.g., examples.stats:graph). "
        "Defaults to the graph configured in pyproject.toml",
    ),
]
GraphOption = Annotated[
    str | None,
    typer.Option("--graph", help="Name of the graph variable (for script paths only)"),
]


@app.callback()
def callback(
    *,
    verbose: bool = typer.Option(default=False, help="Enable verbose output"),
) -> None:
    """Nodeflow CLI."""
    log_level = logging.DEBUG if verbose else logging.INFO

    # Configure rich logging handler to output to stderr
    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        handlers=[
            RichHandler(
                console=err_console,
                show_time=False,
                show_path=verbose,
                rich_tracebacks=True,
            ),
        ],
    )


def _load_config() -> NodeflowConfig:
    try:
        return get_config()
    except ConfigError as e:
        err_console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e


def _resolve_source(path: str | None, graph_var: str | None, config: NodeflowConfig) -> GraphSource:
    if path is None:
        if config.graph is None:
            err_console.print("[red]Error: no graph given and no \\[tool.nodeflow].graph configured[/red]")
            raise typer.Exit(code=1)
        return config.graph
    if ":" in path:
        return parse_graph_source(path)
    return parse_graph_source({"script": path, "name": graph_var})


def _load_graph(path: str | None, graph_var: str | None, config: NodeflowConfig) -> Mapping[Any, Any]:
    source = _resolve_source(path, graph_var, config)
    err_console.print(f"[cyan]Loading graph from:[/cyan] {escape(str(source))}")
    try:
        return load_graph_from_source(source)
    except (ImportError, ValueError, TypeError, ConfigError) as e:
        err_console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e


def _parse_initial_values(assignments: list[str]) -> dict[str, Any]:
    values: dict[str, Any] = {}
    for assignment in assignments:
        try:
            key, raw = parse_assignment(assignment)
            values[key] = json.loads(raw)
        except ValueError as e:
            msg = f"Invalid initial value '{assignment}': {e}"
            raise typer.BadParameter(msg, param_hint="--set") from e
    return values


@app.command()
def check(path: PathArgument = None, *, graph_var: GraphOption = None) -> None:
    """Validate a graph: identifiers, nodes and cyclic dependencies."""
    graph = _load_graph(path, graph_var, _load_config())

    problems = graph_problems(graph)
    if not problems:
        err_console.print(f"[green]✓ Graph is valid ({len(graph)} nodes)[/green]")
        external = dependency_graph(build_graph_spec(graph).nodes).missing()
        if external:
            err_console.print(f"[dim]Values to supply at run time: {escape(', '.join(external))}[/dim]")
        return

    err_console.print(f"[red]✗ Graph is invalid ({len(problems)} problem(s)):[/red]")
    render_problems(problems, err_console)
    cycles = get_cycles(graph)
    if cycles:
        err_console.print(f"[dim]{len(cycles)} cycle path(s) found[/dim]")
    raise typer.Exit(code=1)


@app.command()
def nodes(
    path: PathArgument = None,
    *,
    graph_var: GraphOption = None,
    parallel_only: Annotated[bool, typer.Option("--parallel", help="Only list parallel nodes")] = False,
) -> None:
    """List the nodes of a graph."""
    graph = _load_graph(path, graph_var, _load_config())
    try:
        spec = build_graph_spec(graph)
    except GraphBuildError as e:
        render_problems(e.problems, err_console)
        raise typer.Exit(code=1) from e
    render_node_table(list_nodes(spec, parallel_only=parallel_only), out_console)


@app.command()
def order(
    path: PathArgument = None,
    *,
    graph_var: GraphOption = None,
    init: Annotated[
        list[str] | None,
        typer.Option("--init", help="Key that will be supplied as an initial value (repeatable)"),
    ] = None,
) -> None:
    """Show the evaluation order of a graph and each node's depth."""
    graph = _load_graph(path, graph_var, _load_config())
    try:
        compiled = compile_graph(graph)
    except InvalidGraphError as e:
        render_problems(e.problems, err_console)
        raise typer.Exit(code=1) from e
    render_order_table(get_order_rows(compiled.spec, init or []), out_console)


@app.command()
def deps(
    key: Annotated[str, typer.Argument(help="Key of the node to inspect")],
    path: PathArgument = None,
    *,
    graph_var: GraphOption = None,
    invert: Annotated[bool, typer.Option("--invert", help="Show dependents instead of dependencies")] = False,
    max_depth: Annotated[int | None, typer.Option("--depth", help="Maximum depth to show")] = None,
) -> None:
    """Show the dependency tree of a node."""
    graph = _load_graph(path, graph_var, _load_config())
    try:
        spec = build_graph_spec(graph)
        tree = get_dependency_tree(spec, key, invert=invert, max_depth=max_depth)
    except GraphBuildError as e:
        render_problems(e.problems, err_console)
        raise typer.Exit(code=1) from e
    except KeyError as e:
        err_console.print(f"[red]Error: node not found: {escape(key)}[/red]")
        raise typer.Exit(code=1) from e
    render_tree(tree, out_console)


@app.command()
def run(  # noqa: PLR0913
    path: PathArgument = None,
    *,
    graph_var: GraphOption = None,
    set_values: Annotated[
        list[str] | None,
        typer.Option("--set", help="Initial value as KEY=JSON (repeatable)"),
    ] = None,
    keys: Annotated[
        list[str] | None,
        typer.Option("--key", help="Only report these keys (repeatable)"),
    ] = None,
    lazy: Annotated[bool, typer.Option("--lazy", help="Compute only what the reported keys need")] = False,
    hide_initials: Annotated[bool, typer.Option("--hide-initials", help="Leave initial values out")] = False,
    max_workers: Annotated[int | None, typer.Option("--max-workers", help="Worker threads for parallel nodes")] = None,
    timeout: Annotated[float | None, typer.Option("--timeout", help="Seconds to wait for each parallel node")] = None,
    as_json: Annotated[bool, typer.Option("--json", help="Print results as JSON to stdout")] = False,
) -> None:
    """Evaluate a graph and print the results."""
    config = _load_config()
    graph = _load_graph(path, graph_var, config)
    initial_values = _parse_initial_values(set_values or [])

    overrides = {"max_workers": max_workers, "task_timeout": timeout}
    try:
        settings = EngineSettings.model_validate(
            {**config.settings.model_dump(), **{k: v for k, v in overrides.items() if v is not None}},
        )
    except ValidationError as e:
        raise typer.BadParameter(str(e), param_hint="--max-workers/--timeout") from e

    try:
        compiled = compile_graph(graph, settings)
    except InvalidGraphError as e:
        err_console.print("[red]✗ Graph is invalid:[/red]")
        render_problems(e.problems, err_console)
        raise typer.Exit(code=1) from e

    mode = "lazy" if lazy else "eager"
    err_console.print(f"[cyan]Evaluating {len(compiled.spec)} nodes ({mode})...[/cyan]")
    started = time.perf_counter()
    pending: list[str] = []
    try:
        with compiled:
            if lazy:
                view = compiled.compute_later(initial_values, keep_initials=not hide_initials)
                wanted = keys or list(view)
                results = {key: view[key] for key in wanted if key in view}
                pending = [key for key in view if key not in results and not view.is_realized(key)]
            else:
                results = compiled.compute_now(initial_values, keep_initials=not hide_initials)
                if keys:
                    results = {key: results[key] for key in keys if key in results}
    except NodeflowError as e:
        err_console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e
    elapsed = time.perf_counter() - started

    missing = [key for key in keys or [] if key not in results]
    if missing:
        err_console.print(f"[yellow]⚠ Unknown key(s): {escape(', '.join(missing))}[/yellow]")

    if as_json:
        out_console.print_json(json.dumps(results, default=repr))
    else:
        render_results_table(summarize_results(results, compiled.spec), out_console, pending=pending)
    err_console.print(f"[green]✓ Done in {elapsed:.3f}s[/green]")


def main() -> None:
    app()
