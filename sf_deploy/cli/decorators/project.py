"""Project context decorator for CLI commands"""

from functools import wraps
from typing import Callable

import click
from rich.markup import escape

from ..utils.output import console
from ...api.exceptions import ConfigError, ProjectNotFoundError
from ...constants import EMOJI_ERROR


def require_project(func: Callable) -> Callable:
    """Decorator that ensures command runs in a valid project context

    This decorator:
    1. Finds the project root directory
    2. Loads the deploy options of the project

    Args:
        func: Command function to decorate

    Returns:
        Decorated function
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        ctx = click.get_current_context()
        cli_ctx = ctx.find_root().obj

        try:
            cli_ctx.require_project()
            options = cli_ctx.config_service.options
        except ProjectNotFoundError as e:
            console.print(f"[red]{EMOJI_ERROR}[/red] {escape(str(e))}")
            ctx.exit(1)
        except ConfigError as e:
            console.print(f"[red]{EMOJI_ERROR} Failed to load configuration:[/red] {escape(str(e))}")
            ctx.exit(1)

        if cli_ctx.debug:
            console.print(f"[dim]Project root: {escape(str(options.root))}[/dim]")

        # Run the actual command
        return func(*args, **kwargs)

    return wrapper
