# sf_deploy/cli/main.py
"""Main CLI entry point for sf-deploy"""

import logging
import os
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from ..__version__ import get_version
from ..constants import APP_NAME, LOG_FORMAT, ENV_LOG_LEVEL
from ..core.workspace import find_project_root
from ..api.exceptions import ProjectNotFoundError
from ..services.config_service import ConfigService
from .utils.output import console

# Import all commands
from .commands import deploy, diagnostics


def setup_logging(verbose: bool = False, debug: bool = False) -> None:
    """Setup logging configuration

    Args:
        verbose: Enable verbose output (INFO level)
        debug: Enable debug output (DEBUG level)
    """
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = os.environ.get(ENV_LOG_LEVEL, "WARNING").upper()

    # Configure rich handler
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[
            RichHandler(
                console=Console(stderr=True),
                show_time=debug,
                show_path=debug,
                rich_tracebacks=True,
                tracebacks_suppress=[click]
            )
        ],
        force=True,
    )

    # Adjust third-party loggers
    logging.getLogger("asyncio").setLevel(logging.WARNING)


class Context:
    """CLI context object with lazy project initialization

    Project root and configuration are only looked up when a command that
    needs them accesses them.
    """

    def __init__(self, project_root: Optional[Path] = None):
        """Initialize CLI context"""
        self._explicit_root = project_root
        self._project_root: Optional[Path] = None
        self._config_service: Optional[ConfigService] = None
        self.verbose: bool = False
        self.debug: bool = False
        self.quiet: bool = False

    def require_project(self) -> Path:
        """Locate the project or raise ProjectNotFoundError"""
        if self.project_root is None:
            raise ProjectNotFoundError()
        return self.project_root

    @property
    def project_root(self) -> Optional[Path]:
        """Get project root directory (lazy loading)

        Returns:
            Project root path or None if not in a project
        """
        if self._project_root is None:
            if self._explicit_root is not None:
                self._project_root = Path(self._explicit_root).resolve()
            else:
                self._project_root = find_project_root()
        return self._project_root

    @property
    def config_service(self) -> ConfigService:
        """Configuration of the current project"""
        if self._config_service is None:
            self._config_service = ConfigService(self.require_project())
        return self._config_service


@click.group(name=APP_NAME)
@click.version_option(get_version(), prog_name=APP_NAME)
@click.option('-v', '--verbose', is_flag=True, help='Enable verbose output')
@click.option('-d', '--debug', is_flag=True, help='Enable debug output')
@click.option('-q', '--quiet', is_flag=True, help='Suppress all output except errors')
@click.option('--project-root', type=click.Path(exists=True, file_okay=False),
              help='Project root (default: searched upwards from the current directory)')
@click.pass_context
def cli(ctx, verbose, debug, quiet, project_root):
    """sf-deploy - Deploy Salesforce metadata with the sf CLI

    Deploys the current file, the files changed since HEAD, or a selected
    list of files, and reports component failures as diagnostics.
    """
    # Setup logging
    if quiet:
        logging.disable(logging.CRITICAL)
    else:
        setup_logging(verbose=verbose, debug=debug)

    # Create context with lazy initialization
    ctx.obj = Context(Path(project_root) if project_root else None)
    ctx.obj.verbose = verbose
    ctx.obj.debug = debug
    ctx.obj.quiet = quiet


# Register commands
cli.add_command(deploy.deploy)
cli.add_command(diagnostics.diagnostics)

# Commands that are complete without arguments
STANDALONE_COMMANDS = ['diagnostics']


def main():
    """Main entry point for the CLI application

    This function handles:
    - Auto-help for incomplete commands
    - Keyboard interrupts
    - Unexpected exceptions with proper error display
    """
    try:
        # Handle help for incomplete commands
        if len(sys.argv) == 2 and sys.argv[1] not in [
            '-h', '--help', '--version', '-v', '--verbose', '-d', '--debug', '-q', '--quiet',
            *STANDALONE_COMMANDS,
        ]:
            # If only command name provided, show its help
            sys.argv.append('--help')

        cli(prog_name=APP_NAME)

    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
        sys.exit(130)

    except Exception as e:
        console.print(f"[red]Unexpected error: {escape(str(e))}[/red]")
        if '--debug' in sys.argv or '-d' in sys.argv:
            console.print_exception()
        sys.exit(1)


if __name__ == "__main__":
    main()
