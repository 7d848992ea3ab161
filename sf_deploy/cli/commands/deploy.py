"""Deploy command implementation"""

import sys
from typing import Callable, List

import click

from ..decorators import require_project
from ..utils.output import console, create_deploy_progress, format_deploy_result
from ...api.exceptions import ValidationError
from ...models import DeployResult
from ...services import ConsoleNotifier, DeployService
from ...utils.async_utils import run_in_loop


def _run_deployment(start: Callable[[DeployService], object]) -> None:
    """Run one deployment with a progress display and exit with its status"""
    cli_ctx = click.get_current_context().find_root().obj
    options = cli_ctx.config_service.options

    with create_deploy_progress() as progress:
        service = DeployService(
            options,
            notifier=ConsoleNotifier(progress.console),
            progress=progress,
        )
        try:
            result: DeployResult = run_in_loop(lambda: start(service))
        except ValidationError:
            # Already reported by the notifier
            sys.exit(1)

    if not cli_ctx.quiet:
        format_deploy_result(result)

    sys.exit(0 if result.success else 1)


def _read_selection_list(list_file) -> List[str]:
    """One entry per line; blank lines are ignored"""
    return [line.strip() for line in list_file.read().splitlines() if line.strip()]


@click.group()
def deploy():
    """Deploy metadata to the default org

    Examples:

        # Deploy one file
        sf-deploy deploy file force-app/main/default/classes/Foo.cls

        # Deploy everything changed since HEAD
        sf-deploy deploy changed

        # Deploy a list of files, ignoring conflicts
        sf-deploy deploy selected Foo.cls Bar.trigger --force
    """
    pass


@deploy.command('file')
@click.argument('path', type=click.Path(exists=True, dir_okay=False))
@click.option('--force', is_flag=True, help='Ignore conflicts with the org')
@require_project
def deploy_file(path, force):
    """Deploy a single source file"""
    _run_deployment(lambda service: service.deploy_current_file(path, force=force))


@deploy.command('changed')
@click.option('--force', is_flag=True, help='Ignore conflicts with the org')
@require_project
def deploy_changed(force):
    """Deploy every file changed since HEAD

    A delta manifest is generated with the sfdx-git-delta plugin first and
    the deploy only starts when that succeeds.
    """
    _run_deployment(lambda service: service.deploy_changed(force=force))


@deploy.command('selected')
@click.argument('files', nargs=-1)
@click.option('--list', 'list_file', type=click.File('r', encoding='utf-8'),
              help='File with one selected file per line')
@click.option('--force', is_flag=True, help='Ignore conflicts with the org')
@require_project
def deploy_selected(files, list_file, force):
    """Deploy a selection of files

    Entries are looked up by file name in the project source directory;
    names that are not found are reported and skipped.
    """
    selection = list(files)
    if list_file is not None:
        selection.extend(_read_selection_list(list_file))

    if not selection:
        console.print("[red]Error: Must specify FILES or --list[/red]")
        sys.exit(1)

    _run_deployment(lambda service: service.deploy_selected(selection, force=force))
