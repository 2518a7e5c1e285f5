"""Rich rendering utilities for graph commands."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.markup import escape
from rich.table import Table
from rich.tree import Tree

from nodeflow._ir import NodeKind

if TYPE_CHECKING:
    from rich.console import Console

    from .graph_query import NodeInfo, OrderRow, TreeNode


def render_node_table(nodes: list[NodeInfo], console: Console) -> None:
    """Render node list as a Rich table.

    Args:
        nodes: List of NodeInfo to render.
        console: Rich Console to output to.

    """
    if not nodes:
        console.print("[dim]No nodes match the given filters[/dim]")
        return

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Key", style="bold")
    table.add_column("Kind")
    table.add_column("Dependencies", style="dim")
    table.add_column("Parallel", justify="center")

    for node in nodes:
        kind_style = _get_kind_style(node.kind)
        table.add_row(
            node.key,
            f"[{kind_style}]{node.kind.upper()}[/{kind_style}]",
            ", ".join(node.dependencies),
            "✓" if node.parallel else "",
        )

    console.print(table)
    console.print(f"\n[dim]Total: {len(nodes)} nodes[/dim]")


def render_order_table(rows: list[OrderRow], console: Console) -> None:
    """Render the evaluation order as a Rich table."""
    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Key", style="bold")
    table.add_column("Depth", justify="right")
    table.add_column("Parallel", justify="center")

    for row in rows:
        key = f"[blue]{row.key}[/blue]" if row.initial else row.key
        table.add_row(str(row.position), key, str(row.depth), "✓" if row.parallel else "")

    console.print(table)


def render_results_table(rows: list[tuple[str, str, bool]], console: Console, *, pending: list[str] | None = None) -> None:
    """Render computed values as a Rich table.

    Args:
        rows: (key, value repr, parallel) rows.
        console: Rich Console to output to.
        pending: Keys that were deliberately left uncomputed.

    """
    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Key", style="bold")
    table.add_column("Value")

    for key, value, parallel in rows:
        label = f"{key} [dim](parallel)[/dim]" if parallel else key
        table.add_row(label, escape(_truncate(value)))
    for key in pending or []:
        table.add_row(key, "[dim]<pending>[/dim]")

    console.print(table)


def render_problems(problems: list[str], console: Console) -> None:
    """Render validation problems as a bullet list."""
    for problem in problems:
        console.print(f"  [red]•[/red] {escape(problem)}")


def render_tree(tree_node: TreeNode, console: Console) -> None:
    """Render a dependency tree using Rich Tree.

    Args:
        tree_node: TreeNode root to render.
        console: Rich Console to output to.

    """
    rich_tree = Tree(f"[bold]{tree_node.key}[/bold]")
    _add_tree_children(rich_tree, tree_node.children)
    console.print(rich_tree)


def _add_tree_children(parent: Tree, children: list[TreeNode]) -> None:
    for child in children:
        label = f"{child.key} [red](missing)[/red]" if child.missing else child.key
        child_tree = parent.add(label)
        _add_tree_children(child_tree, child.children)


def _truncate(text: str, limit: int = 80) -> str:
    return text if len(text) <= limit else text[: limit - 3] + "..."


def _get_kind_style(kind: NodeKind) -> str:
    """Get Rich style string for a node kind."""
    match kind:
        case NodeKind.VALUE:
            return "blue"
        case NodeKind.PRODUCER:
            return "magenta"
        case NodeKind.FUNCTION:
            return "green"
