# sf_deploy/api/__init__.py
"""API layer for sf-deploy"""

from .exceptions import (
    SfDeployError,
    ValidationError,
    DeploymentInProgressError,
    CliNotFoundError,
    EmptySelectionError,
    ConfigError,
    ProjectNotFoundError,
)

__all__ = [
    # Exceptions
    "SfDeployError",
    "ValidationError",
    "DeploymentInProgressError",
    "CliNotFoundError",
    "EmptySelectionError",
    "ConfigError",
    "ProjectNotFoundError",
]
