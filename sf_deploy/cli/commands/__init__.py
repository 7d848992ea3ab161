# sf_deploy/cli/commands/__init__.py
"""CLI commands"""

from . import deploy
from . import diagnostics

__all__ = [
    "deploy",
    "diagnostics",
]
