"""Diagnostics command implementation"""

import sys

import click
from rich.markup import escape

from ..decorators import require_project
from ..utils.output import console, format_diagnostics, format_json
from ...constants import EMOJI_INFO, EMOJI_SUCCESS
from ...core import classify, read_deploy_output, to_diagnostics
from ...models import ComponentFailures
from ...models.result import STATUS_BY_OUTCOME


@click.command()
@click.option('--json', 'as_json', is_flag=True, help='Print diagnostics as JSON')
@require_project
def diagnostics(as_json):
    """Show diagnostics of the last deployment

    Re-reads the output cached by the last deploy and prints the component
    failures it contains.
    """
    cli_ctx = click.get_current_context().find_root().obj
    options = cli_ctx.config_service.options

    output = read_deploy_output(options.deploy_file_path)
    if output is None:
        console.print(f"{EMOJI_INFO} No deployment output found at {escape(str(options.deploy_file_path))}")
        sys.exit(1)

    # The cached output says nothing about the exit code
    outcome = classify(output, 0)
    status = STATUS_BY_OUTCOME[type(outcome)]

    records = to_diagnostics(outcome.records) if isinstance(outcome, ComponentFailures) else {}

    if as_json:
        format_json({
            "status": status.value,
            "diagnostics": {
                name: [d.to_dict() for d in items]
                for name, items in records.items()
            },
        })
    elif records:
        console.print(format_diagnostics(records, title=f"Last deployment: {status.value}"))
    else:
        console.print(f"[green]{EMOJI_SUCCESS}[/green] No diagnostics (last deployment: {status.value})")

    sys.exit(1 if records else 0)
