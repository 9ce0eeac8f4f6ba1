"""List command - show declared targets."""

from __future__ import annotations

from shipit.cli.context import graph_or_exit
from shipit.output.console import RichConsole, Style
from shipit.targets import DEFAULT_TARGET


def list_targets() -> None:
    """List targets in declaration order."""
    console = RichConsole()
    graph = graph_or_exit(console)

    for target in graph:
        marker = " (default)" if target.name == DEFAULT_TARGET else ""
        console.print(f"{target.name}{marker}", Style.INFO)
        if target.description:
            console.print(f"  {target.description}", Style.DIM)
        if target.depends_on:
            console.print(f"  depends on: {', '.join(target.depends_on)}", Style.DIM)
