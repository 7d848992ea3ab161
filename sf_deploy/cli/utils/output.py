# sf_deploy/cli/utils/output.py
"""Output formatting utilities"""

import json
from typing import Any, Dict, List, Mapping, Optional

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.syntax import Syntax
from rich.table import Table

from ...constants import EMOJI_ERROR, EMOJI_SUCCESS
from ...models import DeployResult, DiagnosticRecord

console = Console()

_SEVERITY_STYLES = {
    "error": "red",
    "warning": "yellow",
    "info": "blue",
}


def create_deploy_progress(output: Optional[Console] = None) -> Progress:
    """Progress display for deploy operations"""
    return Progress(
        SpinnerColumn(),
        TextColumn("[bold]{task.description}"),
        BarColumn(),
        "[progress.percentage]{task.percentage:>3.0f}%",
        TimeElapsedColumn(),
        console=output or console,
        transient=True,
    )


def format_diagnostics(diagnostics: Mapping[str, List[DiagnosticRecord]],
                       title: Optional[str] = "Diagnostics") -> Table:
    """Create a table with one row per diagnostic

    Lines and columns are shown 1-based, as editors display them.
    """
    table = Table(title=title, box=box.ROUNDED)
    table.add_column("File", style="cyan")
    table.add_column("Line", justify="right")
    table.add_column("Col", justify="right")
    table.add_column("Severity")
    table.add_column("Message")

    for file_name in sorted(diagnostics):
        for diagnostic in diagnostics[file_name]:
            severity = diagnostic.severity.value
            style = _SEVERITY_STYLES.get(severity, "white")
            table.add_row(
                escape(file_name),
                str(diagnostic.line + 1),
                str(diagnostic.col + 1),
                f"[{style}]{severity}[/{style}]",
                escape(diagnostic.message),
            )

    return table


def format_deploy_result(result: DeployResult) -> None:
    """Format and display deploy operation result"""
    lines = []
    if result.success:
        lines.append(f"[green]{EMOJI_SUCCESS}[/green] {escape(result.message)}")
    else:
        lines.append(f"[red]{EMOJI_ERROR}[/red] {escape(result.message)}")

    lines.append("")
    lines.append(f"[bold]Status:[/bold] {result.status.value}")
    if result.exit_code is not None:
        lines.append(f"[bold]Exit code:[/bold] {result.exit_code}")
    if result.duration is not None:
        lines.append(f"[bold]Duration:[/bold] {result.duration:.1f}s")
    if result.diagnostics:
        lines.append(
            f"[bold]Diagnostics:[/bold] {result.diagnostic_count} "
            f"in {len(result.diagnostics)} file(s)"
        )

    panel = Panel(
        "\n".join(lines),
        title="Deploy Result" if result.success else "Deploy Error",
        border_style="green" if result.success else "red",
    )
    console.print(panel)

    if result.diagnostics:
        console.print(format_diagnostics(result.diagnostics))


def format_json(data: Any, title: Optional[str] = None) -> None:
    """Format and display JSON data with syntax highlighting"""
    json_str = json.dumps(data, indent=2, ensure_ascii=False)
    syntax = Syntax(json_str, "json", theme="monokai", line_numbers=False)

    if title:
        console.print(Panel(syntax, title=title))
    else:
        console.print(syntax)
