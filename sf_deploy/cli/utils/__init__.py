"""CLI utility functions"""

from .output import (
    console,
    create_deploy_progress,
    format_diagnostics,
    format_deploy_result,
    format_json,
)

__all__ = [
    'console',
    'create_deploy_progress',
    'format_diagnostics',
    'format_deploy_result',
    'format_json',
]
